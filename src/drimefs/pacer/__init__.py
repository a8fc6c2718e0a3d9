"""Request pacing, retry classification and cancellation for drimefs."""

from __future__ import annotations

from .context import Context, is_done
from .pacer import Pacer
from .policy import TERMINAL_STATUS_CODES, should_retry

__all__ = [
    "Context",
    "is_done",
    "Pacer",
    "should_retry",
    "TERMINAL_STATUS_CODES",
]
