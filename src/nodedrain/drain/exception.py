"""
Exceptions raised by the node drain workflow.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""


class DrainException(Exception):
    """Base exception for node drain errors."""


class InvalidDrainRequestException(DrainException):
    """Raised when a drain, cordon or uncordon request is missing required parameters."""


class EvictionTimeoutException(DrainException):
    """Raised when the drain deadline is reached before a pod is gone."""
