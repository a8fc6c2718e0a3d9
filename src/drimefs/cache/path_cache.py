"""Session-scoped path and entry tables for the resolver."""

from __future__ import annotations

from typing import Optional

import fasteners

from drimefs.models import Entry
from drimefs.util import paths


class PathCache:
    """
    Derived mapping from normalized paths to entry ids, plus the last-known
    Entry for each id.

    Indexes:
        - ids_by_path: "a/b/c" -> id
        - entries_by_id: id -> Entry

    The tables are not authoritative. Mutations must drop every row they
    make stale before reporting success. Both tables share one reader/writer
    lock; callers never hold it across a network call.
    """

    def __init__(self) -> None:
        self._lock = fasteners.ReaderWriterLock()
        self._ids_by_path: dict[str, int] = {}
        self._entries_by_id: dict[int, Entry] = {}

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._ids_by_path)

    # ----------------------------
    # Query helpers
    # ----------------------------
    def lookup(self, path: str) -> Optional[Entry]:
        """Return the cached entry for `path`, or None on a miss."""
        path = paths.normalize(path)
        with self._lock.read_lock():
            entry_id = self._ids_by_path.get(path)
            if entry_id is None:
                return None
            return self._entries_by_id.get(entry_id)

    def lookup_id(self, path: str) -> Optional[int]:
        path = paths.normalize(path)
        with self._lock.read_lock():
            return self._ids_by_path.get(path)

    def get_entry(self, entry_id: int) -> Optional[Entry]:
        with self._lock.read_lock():
            return self._entries_by_id.get(entry_id)

    # ----------------------------
    # Mutations
    # ----------------------------
    def put(self, path: str, entry: Entry) -> None:
        """Record `entry` as living at `path`. The root is never stored."""
        path = paths.normalize(path)
        if not path or entry.id is None:
            return
        with self._lock.write_lock():
            previous = self._ids_by_path.get(path)
            if previous is not None and previous != entry.id:
                # A different entry now owns the name; its subtree rows are stale.
                self._drop_subtree(path)
            self._ids_by_path[path] = entry.id
            self._entries_by_id[entry.id] = entry

    def put_entry(self, entry: Entry) -> None:
        """Refresh the id table only (e.g. after a point lookup)."""
        if entry.id is None:
            return
        with self._lock.write_lock():
            self._entries_by_id[entry.id] = entry

    def forget_path(self, path: str) -> None:
        """Drop `path`, every path below it, and the ids they referenced."""
        path = paths.normalize(path)
        with self._lock.write_lock():
            if not path:
                self._ids_by_path.clear()
                self._entries_by_id.clear()
                return
            self._drop_subtree(path)

    def forget_id(self, entry_id: int) -> None:
        """Drop `entry_id` and every path (with subtrees) that referenced it."""
        with self._lock.write_lock():
            for path in [p for p, i in self._ids_by_path.items() if i == entry_id]:
                self._drop_subtree(path)
            self._entries_by_id.pop(entry_id, None)

    def retain_children(self, parent_path: str, names: set[str]) -> None:
        """Drop cached direct children of `parent_path` whose name is not in `names`."""
        parent_path = paths.normalize(parent_path)
        with self._lock.write_lock():
            stale = [
                p
                for p in self._ids_by_path
                if paths.parent(p) == parent_path and paths.basename(p) not in names
            ]
            for path in stale:
                self._drop_subtree(path)

    def clear(self) -> None:
        with self._lock.write_lock():
            self._ids_by_path.clear()
            self._entries_by_id.clear()

    def _drop_subtree(self, path: str) -> None:
        # Caller holds the write lock.
        doomed = [p for p in self._ids_by_path if paths.is_within(p, path)]
        dropped_ids = {self._ids_by_path.pop(p) for p in doomed}
        still_referenced = set(self._ids_by_path.values())
        for entry_id in dropped_ids - still_referenced:
            self._entries_by_id.pop(entry_id, None)
