"""
Shared, cancellable deadline clock for a drain invocation.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import threading
import time
from datetime import timedelta
from typing import Callable


class Deadline:
    """Monotonic time budget shared by every wait of a single drain.

    Setting the cancellation event expires the deadline immediately and wakes up
    any sleep in progress.
    """

    def __init__(
        self,
        timeout: timedelta,
        cancelled: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Start the deadline.

        :param timeout: Total time budget
        :param cancelled: Event an external caller sets to cancel the operation
        :param clock: Monotonic clock returning seconds
        """
        self._clock = clock
        self._cancelled = threading.Event() if cancelled is None else cancelled
        self._expires_at = clock() + timeout.total_seconds()

    def remaining(self) -> float:
        """Seconds left before the deadline, 0 once expired or cancelled."""
        if self._cancelled.is_set():
            return 0.0
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def sleep(self, seconds: float) -> bool:
        """Sleep for the given time, cut short by expiry or cancellation.

        :param seconds: Requested sleep duration
        :return: True if time is left after sleeping
        """
        duration = min(seconds, self.remaining())
        if duration > 0:
            self._wait(duration)
        return not self.expired()

    def _wait(self, seconds: float) -> None:
        self._cancelled.wait(seconds)
