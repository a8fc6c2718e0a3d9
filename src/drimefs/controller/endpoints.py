"""Endpoint paths of the Drime REST API (relative to the API base)."""

from __future__ import annotations

LOGIN: str = "/auth/login"
LIST_ENTRIES: str = "/drive/file-entries"
ENTRY: str = "/file-entries/{id}"
CREATE_FOLDER: str = "/folders"
DELETE_ENTRIES: str = "/file-entries/delete"
MOVE_ENTRIES: str = "/file-entries/move"
UPLOAD: str = "/uploads"

# Wire value of the account root where the API expects a number.
ROOT_WIRE_ID: int = 0
