"""Public model exports for drimefs."""

from __future__ import annotations

from .entry import FILE, FOLDER, Entry, EntryKind, entry_from_dict
from .options import OpenOption, RangeOption, SeekOption, range_headers
from .stream import ContentStream

__all__ = [
    "Entry",
    "EntryKind",
    "FILE",
    "FOLDER",
    "entry_from_dict",
    "OpenOption",
    "RangeOption",
    "SeekOption",
    "range_headers",
    "ContentStream",
]
