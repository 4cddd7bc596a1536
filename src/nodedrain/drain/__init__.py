"""
Drain module exports for the orchestrator, request and report types.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from nodedrain.drain.drainer import NodeDrainer
from nodedrain.drain.exception import (
    DrainException,
    EvictionTimeoutException,
    InvalidDrainRequestException,
)
from nodedrain.drain.models import DrainReport, DrainRequest, PodAction, PodOutcome

__all__ = [
    "DrainException",
    "DrainReport",
    "DrainRequest",
    "EvictionTimeoutException",
    "InvalidDrainRequestException",
    "NodeDrainer",
    "PodAction",
    "PodOutcome",
]
