"""Helpers for slash-delimited remote paths."""

from __future__ import annotations

SEPARATOR = "/"


def normalize(path: str) -> str:
    """
    Trim leading/trailing separators and collapse empty segments.

    The empty string denotes the account root.
    """
    return SEPARATOR.join(split(path))


def split(path: str) -> list[str]:
    return [part for part in path.split(SEPARATOR) if part]


def join(*parts: str) -> str:
    segments: list[str] = []
    for part in parts:
        segments.extend(split(part))
    return SEPARATOR.join(segments)


def parent(path: str) -> str:
    """Return the parent of a normalized path ("" for top-level entries)."""
    segments = split(path)
    return SEPARATOR.join(segments[:-1])


def basename(path: str) -> str:
    segments = split(path)
    return segments[-1] if segments else ""


def is_within(path: str, ancestor: str) -> bool:
    """Return True if `path` equals `ancestor` or lives below it."""
    path = normalize(path)
    ancestor = normalize(ancestor)
    if not ancestor:
        return True
    return path == ancestor or path.startswith(ancestor + SEPARATOR)
