from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse a service timestamp into a tz-aware UTC datetime.

    Accepts strings like:
      - 2025-01-01T12:34:56Z
      - 2025-01-01T12:34:56.000000Z
      - 2025-01-01T12:34:56+09:00
      - 2025-01-01 12:34:56 (assumed UTC)
    """
    if not isinstance(value, str) or not value:
        raise ValueError("timestamp value must be a non-empty string")

    s = value.strip()
    # fromisoformat doesn't accept 'Z' before 3.11, so normalize.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)  # raises ValueError if invalid
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def truncate_to_second(dt: datetime) -> datetime:
    """Drop sub-second precision; the service stores whole seconds."""
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt.replace(microsecond=0)
