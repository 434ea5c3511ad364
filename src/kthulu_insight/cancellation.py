"""Cooperative cancellation shared by the analyzer and the authorization core."""

from __future__ import annotations

import threading
import time

from .exceptions import AnalysisCancelledError, DeadlineExceededError


class CancellationToken:
    """A cancel flag with an optional monotonic deadline.

    Workers call ``raise_if_cancelled()`` at safe points (between files,
    between phases). Cancelling is idempotent and thread-safe.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self, stage: str | None = None) -> None:
        if self._event.is_set():
            raise AnalysisCancelledError(stage)
        if self.expired:
            raise DeadlineExceededError(stage)
