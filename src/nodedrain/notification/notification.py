"""
Registry of drain outcome notifiers.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Callable delivering a formatted drain summary to an external channel."""

    def __call__(self, message: str) -> None: ...


_notifiers: dict[str, Notifier] = {}


def register_notifier(name: str) -> Callable[[Notifier], Notifier]:
    """Register a notifier under the given name, replacing any previous one.

    :param name: Notifier name
    :return: Decorator returning the notifier unchanged
    """

    def wrapper(func: Notifier) -> Notifier:
        _notifiers[name] = func
        return func

    return wrapper


def send_notification(message: str) -> None:
    """Deliver a message through every registered notifier.

    Notifier failures are logged and never raised.

    :param message: Formatted drain summary
    """
    if not _notifiers:
        logger.debug("No notifiers registered, dropping drain notification")
        return
    for name, notifier in _notifiers.items():
        try:
            notifier(message)
        except Exception as e:
            logger.exception(f"Notifier '{name}' failed to deliver drain notification: {e}")
