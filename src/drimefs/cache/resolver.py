"""Path resolver: walks slash-delimited paths through the entry listing API."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from drimefs.errors import DirectoryNotFoundError, NotADirectoryError, NotFoundError
from drimefs.logger import log
from drimefs.models import Entry
from drimefs.pacer import Context
from drimefs.util import paths

from .path_cache import PathCache


class ListsChildren(Protocol):
    def list_children(
        self,
        parent_id: Optional[int],
        *,
        ctx: Optional[Context] = None,
    ) -> list[Entry]: ...


class PathResolver:
    """
    Map normalized paths to entries.

    A lookup walks the path left to right. Every prefix already in the cache
    is adopted without a remote call; on a miss the current folder is listed
    and scanned for the next segment. Absent segments are never cached.
    """

    def __init__(self, controller: ListsChildren, cache: PathCache) -> None:
        self._controller = controller
        self.cache = cache

    def resolve(self, path: str, *, ctx: Optional[Context] = None) -> Entry:
        """
        Return the entry at `path`.

        Raises:
            NotFoundError: if any segment is absent (or a non-final segment
                is a file).
        """
        path = paths.normalize(path)
        if not path:
            return Entry.root()

        cached = self.cache.lookup(path)
        if cached is not None:
            return cached
        return self._walk(path, ctx, retry_stale=True)

    def _walk(self, path: str, ctx: Optional[Context], *, retry_stale: bool) -> Entry:
        segments = paths.split(path)
        parent_id: Optional[int] = None
        parent_path = ""

        for index, segment in enumerate(segments):
            prefix = paths.join(parent_path, segment)
            is_last = index == len(segments) - 1

            entry = self.cache.lookup(prefix)
            if entry is None:
                try:
                    children = self._controller.list_children(parent_id, ctx=ctx)
                except NotFoundError:
                    # A cached folder id the service no longer knows.
                    if parent_id is None or not retry_stale:
                        raise
                    log.debug(f"resolve: {parent_path} id={parent_id} is gone, walking again")
                    self.invalidate(parent_path)
                    self.cache.forget_id(parent_id)
                    return self._walk(path, ctx, retry_stale=False)
                self.remember_listing(parent_path, children)
                entry = _first_named(children, segment, parent_path)

            if entry is None:
                raise NotFoundError(
                    f"not found: {path}",
                    details={"path": path, "missing": prefix},
                )
            if is_last:
                return entry
            if not entry.is_folder:
                raise NotFoundError(
                    f"not found: {path} ({prefix} is a file)",
                    details={"path": path, "missing": prefix},
                )

            parent_id = entry.id
            parent_path = prefix

        raise NotFoundError(f"not found: {path}", details={"path": path})  # pragma: no cover

    def resolve_dir(self, path: str, *, ctx: Optional[Context] = None) -> Entry:
        """
        Return the folder entry at `path`.

        Raises:
            DirectoryNotFoundError: if the path does not resolve.
            NotADirectoryError: if it resolves to a file.
        """
        try:
            entry = self.resolve(path, ctx=ctx)
        except DirectoryNotFoundError:
            raise
        except NotFoundError as exc:
            raise DirectoryNotFoundError(
                f"directory not found: {paths.normalize(path)}",
                details=exc.details,
                cause=exc,
            ) from exc

        if not entry.is_folder:
            raise NotADirectoryError(
                f"not a directory: {paths.normalize(path)}",
                details={"path": paths.normalize(path), "id": entry.id},
            )
        return entry

    def list_dir(self, path: str, *, ctx: Optional[Context] = None) -> list[Entry]:
        """List the folder at `path` and refresh the cache with its children."""
        folder = self.resolve_dir(path, ctx=ctx)
        try:
            children = self._controller.list_children(folder.id, ctx=ctx)
        except NotFoundError:
            if folder.is_root:
                raise
            self.invalidate(path)
            folder = self.resolve_dir(path, ctx=ctx)
            children = self._controller.list_children(folder.id, ctx=ctx)
        self.remember_listing(path, children, complete=True)
        return children

    def remember_listing(
        self,
        parent_path: str,
        children: Sequence[Entry],
        *,
        complete: bool = False,
    ) -> None:
        """
        Record listed children under `parent_path`.

        With `complete=True` cached children of `parent_path` that the listing
        no longer contains are dropped.
        """
        seen: set[str] = set()
        for child in children:
            if not child.name or child.name in seen:
                continue
            seen.add(child.name)
            self.cache.put(paths.join(parent_path, child.name), child)

        if complete:
            self.cache.retain_children(parent_path, seen)

    def invalidate(self, path: str) -> None:
        """Drop `path` and everything cached below it."""
        self.cache.forget_path(path)


def _first_named(children: Sequence[Entry], name: str, parent_path: str) -> Optional[Entry]:
    matches = [child for child in children if child.name == name]
    if len(matches) > 1:
        log.warning(
            f"duplicate name {name!r} in folder {parent_path or '/'!r}: "
            f"ids={[m.id for m in matches]}; using the first"
        )
    return matches[0] if matches else None
