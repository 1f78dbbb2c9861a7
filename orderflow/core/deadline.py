"""Deadline and cancellation signal threaded through a unit of work."""

import threading
import time

from orderflow.domain.errors import DeadlineExceeded


class Deadline:
    """An optional absolute expiry plus a cancellation flag.

    The flag may be set from any thread; holders poll ``check()`` at their
    suspension points.
    """

    def __init__(self, expires_at: float | None = None):
        self.expires_at = expires_at
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float | None) -> "Deadline":
        if seconds is None or seconds <= 0:
            return cls()
        return cls(time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left, or None when there is no expiry."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def check(self) -> None:
        if self.cancelled:
            raise DeadlineExceeded("operation cancelled")
        if self.expired():
            raise DeadlineExceeded()
