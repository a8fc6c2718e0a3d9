"""Open options for partial downloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(slots=True, frozen=True)
class RangeOption:
    """
    Request bytes `start` to `end` inclusive.

    `end=None` reads to the end of the file; a negative `start` with no `end`
    reads the last `-start` bytes.
    """

    start: int
    end: Optional[int] = None

    def header(self) -> tuple[str, str]:
        if self.start < 0 and self.end is None:
            return ("Range", f"bytes={self.start}")
        if self.end is None:
            return ("Range", f"bytes={self.start}-")
        return ("Range", f"bytes={self.start}-{self.end}")


@dataclass(slots=True, frozen=True)
class SeekOption:
    """Start reading at `offset`."""

    offset: int

    def header(self) -> tuple[str, str]:
        return ("Range", f"bytes={self.offset}-")


OpenOption = Union[RangeOption, SeekOption]


def range_headers(options: tuple[OpenOption, ...] | list[OpenOption]) -> dict[str, str]:
    """Build request headers for the given options; the last one wins."""
    headers: dict[str, str] = {}
    for option in options:
        key, value = option.header()
        headers[key] = value
    return headers
