"""Cancellation token shared by every suspension point of one operation"""

from __future__ import annotations

import threading
import time
from typing import Optional

# Event.wait rejects timeouts above threading.TIMEOUT_MAX, so long waits run in chunks
_MAX_WAIT_CHUNK = min(threading.TIMEOUT_MAX, 86400.0)


class OperationCancelled(Exception):
    """Operation was cancelled before it completed."""

    pass


class FetchTimeout(OperationCancelled):
    """Operation ran past its overall timeout."""

    pass


class CancellationToken:
    """Cancellation signal for a single fetch or paginate operation

    The token can be cancelled explicitly from any thread with :meth:`cancel`
    or expire on its own once its deadline (monotonic clock) passes.
    """

    def __init__(self, deadline: Optional[float] = None):
        """Initialize token

        Args:
            deadline: ``time.monotonic()`` value after which the token expires
                (None = never)
        """
        self.deadline = deadline
        self._event = threading.Event()

    @classmethod
    def with_timeout(cls, timeout: Optional[float]) -> "CancellationToken":
        """Create a token that expires ``timeout`` seconds from now (None = never)"""
        if timeout is None:
            return cls()
        return cls(deadline=time.monotonic() + timeout)

    def cancel(self) -> None:
        """Cancel the operation"""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (None = no deadline)"""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Raise if the token was cancelled or has expired

        Raises:
            OperationCancelled: If cancelled
            FetchTimeout: If the deadline has passed
        """
        if self.cancelled:
            raise OperationCancelled("Operation was cancelled")
        if self.expired:
            raise FetchTimeout("Operation timed out")

    def sleep(self, seconds: float) -> None:
        """Wait for ``seconds``, waking up early on cancellation or timeout

        Raises:
            OperationCancelled: If cancelled before or during the wait
            FetchTimeout: If the deadline passes before or during the wait
        """
        self.raise_if_cancelled()
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._wait(remaining)
            self.raise_if_cancelled()
            # Deadline reached while waiting
            raise FetchTimeout("Operation timed out")
        self._wait(seconds)
        self.raise_if_cancelled()

    def _wait(self, seconds: float) -> None:
        end = time.monotonic() + seconds
        while not self._event.is_set():
            left = end - time.monotonic()
            if left <= 0:
                return
            self._event.wait(min(left, _MAX_WAIT_CHUNK))
