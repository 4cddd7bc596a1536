"""
Drain request, per-pod outcome, and drain report value types.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import json
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping

from nodedrain import settings

DEFAULT_TIMEOUT = timedelta(seconds=600)
DEFAULT_RETRY_BACKOFF = timedelta(milliseconds=1000)
DEFAULT_MAX_BACKOFF = timedelta(milliseconds=10000)


class PodAction(str, Enum):
    """What happened to a pod during a drain."""

    SKIPPED_MIRROR = "skipped_mirror"
    SKIPPED_DAEMONSET = "skipped_daemonset"
    SKIPPED_LOCAL_DATA = "skipped_local_data"
    EVICTED = "evicted"
    FORCE_DELETED = "force_deleted"
    EVICT_FAILED = "evict_failed"
    EVICT_AND_DELETE_FAILED = "evict_and_delete_failed"

    @property
    def is_failure(self) -> bool:
        return self in (PodAction.EVICT_FAILED, PodAction.EVICT_AND_DELETE_FAILED)


@dataclass(frozen=True)
class PodOutcome:
    """Result of processing a single pod."""

    namespace: str
    name: str
    action: PodAction
    error: str | None = None

    def to_dict(self) -> dict[str, str]:
        result = {"namespace": self.namespace, "name": self.name, "action": self.action.value}
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class DrainRequest:
    """Parameters of a single drain invocation."""

    node_name: str
    ignore_daemonsets: bool = False
    delete_local_data: bool = False
    force: bool = False
    grace_period_seconds: int | None = None
    timeout: timedelta = DEFAULT_TIMEOUT
    retry_backoff: timedelta = DEFAULT_RETRY_BACKOFF
    max_backoff: timedelta = DEFAULT_MAX_BACKOFF

    @property
    def grace_period(self) -> int | None:
        """Grace period to send to the API server, None to use the pod default."""
        if self.grace_period_seconds is None or self.grace_period_seconds < 0:
            return None
        return self.grace_period_seconds

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "DrainRequest":
        """Build a request from loosely typed arguments, such as a decoded JSON payload.

        :param args: Mapping keyed by the report field names
        :return: Drain request
        """
        node_name = args.get("node_name")
        return cls(
            node_name=node_name.strip() if isinstance(node_name, str) else "",
            ignore_daemonsets=_bool_arg(args, "ignore_daemonsets", False),
            delete_local_data=_bool_arg(args, "delete_local_data", False),
            force=_bool_arg(args, "force", False),
            grace_period_seconds=_int_arg(args, "grace_period", None),
            timeout=timedelta(seconds=_int_arg(args, "timeout_seconds", 600)),
            retry_backoff=timedelta(milliseconds=_int_arg(args, "retry_backoff_ms", 1000)),
            max_backoff=timedelta(milliseconds=_int_arg(args, "max_backoff_ms", 10000)),
        )

    @classmethod
    def from_settings(cls) -> "DrainRequest":
        """Build a request from environment settings."""
        return cls(
            node_name=settings.NODE_NAME,
            ignore_daemonsets=settings.IGNORE_DAEMONSETS,
            delete_local_data=settings.DELETE_LOCAL_DATA,
            force=settings.FORCE,
            grace_period_seconds=settings.GRACE_PERIOD,
            timeout=settings.DRAIN_TIMEOUT,
            retry_backoff=settings.RETRY_BACKOFF,
            max_backoff=settings.MAX_BACKOFF,
        )


@dataclass(frozen=True)
class DrainReport:
    """Outcome of a drain invocation, one entry per processed pod in listing order."""

    request: DrainRequest
    results: tuple[PodOutcome, ...] = field(default_factory=tuple)
    status: str = "drain_attempted"

    @property
    def node_name(self) -> str:
        return self.request.node_name

    @property
    def failures(self) -> list[PodOutcome]:
        return [outcome for outcome in self.results if outcome.action.is_failure]

    def count(self, action: PodAction) -> int:
        return sum(1 for outcome in self.results if outcome.action is action)

    def to_dict(self) -> dict[str, Any]:
        return {
            "node": self.request.node_name,
            "status": self.status,
            "ignore_daemonsets": self.request.ignore_daemonsets,
            "delete_local_data": self.request.delete_local_data,
            "force": self.request.force,
            "grace_period": self.request.grace_period,
            "timeout_seconds": int(self.request.timeout.total_seconds()),
            "retry_backoff_ms": _milliseconds(self.request.retry_backoff),
            "max_backoff_ms": _milliseconds(self.request.max_backoff),
            "results": [outcome.to_dict() for outcome in self.results],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def _milliseconds(duration: timedelta) -> int:
    return int(duration.total_seconds() * 1000)


def _bool_arg(args: Mapping[str, Any], key: str, default: bool) -> bool:
    value = args.get(key)
    match value:
        case bool():
            return value
        case str() if value.strip().lower() in ("true", "1"):
            return True
        case str() if value.strip().lower() in ("false", "0"):
            return False
        case int() | float():
            return value != 0
        case _:
            return default


def _int_arg(args: Mapping[str, Any], key: str, default: int | None) -> int | None:
    value = args.get(key)
    match value:
        case bool():
            return default
        case int():
            return value
        case float():
            return int(value)
        case str():
            try:
                return int(value.strip())
            except ValueError:
                return default
        case _:
            return default
