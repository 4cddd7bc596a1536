"""
Logging module exports for setup and configuration functions.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from nodedrain.logging.logging import JSONFormatter, setup_logging

__all__ = ["JSONFormatter", "setup_logging"]
