"""Cancellation and deadline signal passed through every remote call."""

from __future__ import annotations

import threading
import time
from typing import Optional


class Context:
    """
    Cancellation signal for one logical operation.

    A context is done once `cancel()` was called or its deadline passed.
    Contexts may be shared between threads.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._cancelled = threading.Event()
        self.deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())


def is_done(ctx: Optional[Context]) -> bool:
    return ctx is not None and ctx.done()
