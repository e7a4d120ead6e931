"""Caller-supplied deadline and cancellation for validation calls.

A Deadline is created once per call and checked before every fetch and
schema check. The remaining time is passed on to each fetch so a single
slow schema host cannot outlive the call.
"""

from __future__ import annotations

import threading
import time

from stacval.errors import DeadlineExceededError, ValidationCancelledError


class Deadline:
    """Time budget and cancel signal for one validation call.

    Args:
        timeout: Seconds allowed for the whole call, or None for no limit.
        cancel_event: Event the caller sets to abandon the call. A fresh
            event is created when omitted.
    """

    def __init__(
        self,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")
        self.timeout = timeout
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    @property
    def cancelled(self) -> bool:
        """True once the cancel event has been set."""
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Signal cancellation to every step still running under this deadline."""
        self.cancel_event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded.

        Raises:
            ValidationCancelledError: If the call was cancelled.
            DeadlineExceededError: If no time is left.
        """
        self.check()
        if self._expires_at is None:
            return None
        return self._expires_at - time.monotonic()

    def check(self) -> None:
        """Raise if the call was cancelled or ran out of time.

        Raises:
            ValidationCancelledError: If the cancel event is set.
            DeadlineExceededError: If the deadline has passed.
        """
        if self.cancel_event.is_set():
            raise ValidationCancelledError()
        if self._expires_at is not None and time.monotonic() >= self._expires_at:
            raise DeadlineExceededError(self.timeout or 0.0)
