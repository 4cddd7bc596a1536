"""
Custom exceptions and error handling decorators for Kubernetes API operations.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import json
from functools import wraps
from typing import Any, Callable

from kubernetes.client import ApiException

# Status reasons the API server uses for retriable responses
TRANSIENT_STATUS_CODES = {409, 504}
TRANSIENT_REASONS = {"Conflict", "ServerTimeout", "Timeout"}


class KubernetesException(Exception):
    """Custom exception for Kubernetes client errors."""

    def __init__(self, message: str, status: int | None = None, reason: str | None = None):
        """Initialize exception.

        :param message: Human readable error message
        :param status: HTTP status code of the failed API call, if any
        :param reason: Kubernetes Status reason (e.g. "TooManyRequests"), if any
        """
        super().__init__(message)
        self.status = status
        self.reason = reason

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_too_many_requests(self) -> bool:
        return self.status == 429 or self.reason == "TooManyRequests"

    @property
    def is_transient(self) -> bool:
        """Conflict and timeout responses that are worth retrying."""
        return self.status in TRANSIENT_STATUS_CODES or self.reason in TRANSIENT_REASONS


def status_reason(e: ApiException) -> str | None:
    """Extract the Kubernetes Status reason from an API exception body.

    :param e: API exception
    :return: Value of the Status "reason" field, or None if unavailable
    """
    if not e.body:
        return None
    try:
        body = json.loads(e.body)
    except (TypeError, ValueError):
        return None
    if isinstance(body, dict):
        return body.get("reason")
    return None


def handle_k8s_api_exception(func) -> Callable[..., Any]:
    """Decorator to handle Kubernetes API exceptions."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ApiException as e:
            match e.status:
                case 403:
                    error_msg = (
                        f"'Unauthorized' error when running {func.__name__}. Check RBAC permissions"
                    )
                case 404:
                    error_msg = f"'Not found' error when running {func.__name__}"
                case 409:
                    error_msg = f"'Conflict' error when running {func.__name__}"
                case 429:
                    error_msg = f"'Too many requests' error when running {func.__name__}"
                case _:
                    error_msg = (
                        f"Unexpected error when running {func.__name__}: "
                        f"HTTP {e.status} - {e.reason}"
                    )
            raise KubernetesException(error_msg, status=e.status, reason=status_reason(e)) from e
        except KubernetesException:
            raise
        except Exception as e:
            error_msg = f"Unexpected error when running {func.__name__}: {e}"
            raise KubernetesException(error_msg) from e

    return wrapper
