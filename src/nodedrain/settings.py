"""
Environment variable parsing and configuration management for NodeDrain.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os
import re
from datetime import timedelta


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Boolean value
    """
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable.

    :param key: Environment variable name
    :param default: Default value if not set or not an integer
    :return: Integer value
    """
    value = os.getenv(key, "").strip()
    try:
        return int(value)
    except ValueError:
        return default


def _parse_duration(duration_str: str, default: timedelta = timedelta(minutes=10)) -> timedelta:
    """Parse duration string like '500ms', '10m', '1h', '30s' into timedelta.

    :param duration_str: Duration string (e.g., "500ms", "30m", "1h", "45s")
    :param default: Value returned when the string cannot be parsed
    :return: Parsed timedelta object
    """
    match = re.match(r"^(\d+)(ms|s|m|h|d)$", duration_str.strip().lower())
    if not match:
        return default

    value, unit = int(match.group(1)), match.group(2)

    match unit:
        case "ms":
            return timedelta(milliseconds=value)
        case "s":
            return timedelta(seconds=value)
        case "m":
            return timedelta(minutes=value)
        case "h":
            return timedelta(hours=value)
        case "d":
            return timedelta(days=value)
        case _:
            return default


"""NodeDrain Settings"""
DRAIN_ACTION = os.getenv("DRAIN_ACTION", "drain").strip().lower()
NODE_NAME = os.getenv("NODE_NAME", "").strip()
IGNORE_DAEMONSETS = _get_bool_env("IGNORE_DAEMONSETS", False)
DELETE_LOCAL_DATA = _get_bool_env("DELETE_LOCAL_DATA", False)
FORCE = _get_bool_env("FORCE", False)
GRACE_PERIOD = _get_int_env("GRACE_PERIOD", -1)
DRAIN_TIMEOUT = _parse_duration(os.getenv("DRAIN_TIMEOUT", "600s"), timedelta(seconds=600))
RETRY_BACKOFF = _parse_duration(os.getenv("RETRY_BACKOFF", "1000ms"), timedelta(seconds=1))
MAX_BACKOFF = _parse_duration(os.getenv("MAX_BACKOFF", "10000ms"), timedelta(seconds=10))
SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_JSON_LOGS = _get_bool_env("ENABLE_JSON_LOGS", True)
CLUSTER_NAME = os.getenv("CLUSTER_NAME", "unknown")
TEST_KUBE_CONTEXT_NAME = os.getenv("TEST_KUBE_CONTEXT_NAME", "kind-nodedrain-test")
DRAIN_ARGS = os.getenv("DRAIN_ARGS", "").strip()
