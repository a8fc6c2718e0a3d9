"""Data model for remote entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Optional

from drimefs.util.time import parse_timestamp, truncate_to_second

EntryKind = Literal["file", "folder"]

FOLDER: EntryKind = "folder"
FILE: EntryKind = "file"


@dataclass(slots=True, frozen=True)
class Entry:
    """
    A file or folder record as known by the service.

    Notes:
        - `id is None` marks the account root. The root has no record of its
          own on the service; it is never represented by 0.
        - `parent_id is None` means the entry is a direct child of the root.
        - The service never returns a content hash; `file_hash` is kept only
          so a non-null value is not silently dropped.
    """

    id: Optional[int]
    name: str
    kind: EntryKind

    size: int = 0
    modified_at: Optional[datetime] = None
    parent_id: Optional[int] = None
    download_url: Optional[str] = None
    file_hash: Optional[str] = None

    @classmethod
    def root(cls) -> Entry:
        return cls(id=None, name="", kind=FOLDER)

    @property
    def is_root(self) -> bool:
        return self.id is None

    @property
    def is_folder(self) -> bool:
        return self.kind == FOLDER

    @property
    def is_file(self) -> bool:
        return self.kind == FILE


def entry_from_dict(data: dict[str, Any]) -> Entry:
    """
    Normalize a JSON file-entry payload into an Entry.

    Missing or mistyped fields fall back to neutral values; only `id` is
    required.
    """
    raw_id = data.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, int) or raw_id <= 0:
        raise ValueError(f"file entry has no usable id: {raw_id!r}")

    name = data.get("name")
    kind: EntryKind = FOLDER if data.get("type") == FOLDER else FILE

    size = 0
    if kind == FILE:
        raw_size = data.get("file_size")
        if isinstance(raw_size, int) and not isinstance(raw_size, bool):
            size = raw_size
        elif isinstance(raw_size, str) and raw_size.isdigit():
            size = int(raw_size)

    modified_at = None
    if isinstance(data.get("updated_at"), str):
        try:
            modified_at = truncate_to_second(parse_timestamp(data["updated_at"]))
        except ValueError:
            modified_at = None

    parent_id = data.get("parent_id")
    if isinstance(parent_id, bool) or not isinstance(parent_id, int) or parent_id <= 0:
        parent_id = None

    download_url = None
    if kind == FILE and isinstance(data.get("url"), str) and data["url"]:
        download_url = data["url"]

    file_hash = data.get("file_hash")

    return Entry(
        id=raw_id,
        name=name if isinstance(name, str) else "",
        kind=kind,
        size=size,
        modified_at=modified_at,
        parent_id=parent_id,
        download_url=download_url,
        file_hash=file_hash if isinstance(file_hash, str) else None,
    )
