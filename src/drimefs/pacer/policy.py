"""Retry-or-fail classification for a single remote call attempt."""

from __future__ import annotations

from typing import Optional

from drimefs.errors import (
    DrimeFsError,
    NetworkError,
    RateLimitError,
    ServerError,
)

from .context import Context, is_done

# Status codes that are never worth another attempt.
TERMINAL_STATUS_CODES: frozenset[int] = frozenset({401, 403, 404, 422})


def should_retry(exc: Optional[BaseException], ctx: Optional[Context] = None) -> bool:
    """
    Decide whether the failed attempt should be retried.

    Policy:
        - no error -> no retry
        - transport failure with a done context -> no retry
        - any other transport failure -> retry
        - 429 / 5xx -> retry
        - 401 / 403 / 404 / 422 and everything else -> no retry
    """
    if exc is None:
        return False

    if isinstance(exc, NetworkError):
        return not is_done(ctx)

    if isinstance(exc, DrimeFsError):
        status_code = exc.details.get("status_code")
        if status_code in TERMINAL_STATUS_CODES:
            return False

    if isinstance(exc, (RateLimitError, ServerError)):
        return True

    return False
