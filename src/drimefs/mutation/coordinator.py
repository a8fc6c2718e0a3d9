"""Structural mutations (mkdir, move, rename, delete) that keep the path cache honest."""

from __future__ import annotations

import dataclasses
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from drimefs.cache import PathResolver
from drimefs.controller import DrimeController
from drimefs.controller.drime_controller import ByteSource
from drimefs.errors import (
    AlreadyExistsError,
    CannotMoveError,
    DirectoryNotEmptyError,
    DrimeFsError,
    InvalidArgumentError,
    IsDirectoryError,
    IsFileError,
    NotADirectoryError,
    NotFoundError,
    PartialMutationError,
)
from drimefs.logger import log
from drimefs.models import Entry
from drimefs.pacer import Context, is_done
from drimefs.util import paths

from .gates import GateTable


class MutationCoordinator:
    """
    Apply mutations through the controller and update the cache afterwards.

    Policy:
        - Folder creation runs at most once per path among concurrent callers.
        - A rejected creation (HTTP 422) is reconciled by re-listing the parent
          a bounded number of times before the original error surfaces.
        - Every mutation drops the cache rows it made stale before returning.
    """

    def __init__(
        self,
        controller: DrimeController,
        resolver: PathResolver,
        *,
        reconcile_attempts: int = 3,
        reconcile_delay: float = 0.5,
        hard_delete: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if reconcile_attempts < 1:
            raise ValueError("reconcile_attempts must be >= 1")
        self._controller = controller
        self._resolver = resolver
        self._cache = resolver.cache
        self._gates: GateTable[Entry] = GateTable()
        self.reconcile_attempts = reconcile_attempts
        self.reconcile_delay = reconcile_delay
        self.hard_delete = hard_delete
        self._sleep = sleep

    # ----------------------------
    # Create
    # ----------------------------
    def mkdir_all(self, path: str, *, ctx: Optional[Context] = None) -> Entry:
        """Create `path` and any missing parents; returns the folder entry."""
        path = paths.normalize(path)
        if not path:
            return Entry.root()
        return self._gates.run(path, lambda: self._mkdir(path, ctx))

    def _mkdir(self, path: str, ctx: Optional[Context]) -> Entry:
        try:
            existing: Optional[Entry] = self._resolver.resolve(path, ctx=ctx)
        except NotFoundError:
            existing = None

        if existing is not None:
            if not existing.is_folder:
                raise NotADirectoryError(
                    f"a file already exists at {path}",
                    details={"path": path, "id": existing.id},
                )
            return existing

        parent_path = paths.parent(path)
        parent = self.mkdir_all(parent_path, ctx=ctx)
        name = paths.basename(path)

        try:
            with self._dropping_stale(parent_path):
                entry = self._controller.create_folder(name, parent.id, ctx=ctx)
        except AlreadyExistsError as exc:
            log.debug(f"mkdir: {path} rejected as existing, reconciling")
            entry = self._reconcile(parent_path, parent.id, name, exc, ctx)

        self._cache.put(path, entry)
        log.debug(f"mkdir: {path} -> id={entry.id}")
        return entry

    def _reconcile(
        self,
        parent_path: str,
        parent_id: Optional[int],
        name: str,
        original: AlreadyExistsError,
        ctx: Optional[Context],
    ) -> Entry:
        for attempt in range(self.reconcile_attempts):
            if attempt > 0:
                self._sleep(self.reconcile_delay)
            if is_done(ctx):
                break

            try:
                children = self._controller.list_children(parent_id, ctx=ctx)
            except DrimeFsError as exc:
                log.debug(f"mkdir: reconcile attempt {attempt + 1} listing failed: {exc}")
                continue

            self._resolver.remember_listing(parent_path, children, complete=True)
            for child in children:
                if child.name == name and child.is_folder:
                    log.debug(
                        f"mkdir: reconcile attempt {attempt + 1} found {name!r} id={child.id}"
                    )
                    return child

        log.debug(f"mkdir: {name!r} not visible under {parent_path or '/'!r} after reconcile")
        raise original

    def upload(
        self,
        path: str,
        source: ByteSource,
        *,
        ctx: Optional[Context] = None,
    ) -> Entry:
        """Upload `source` to `path`, creating missing parent folders."""
        path = paths.normalize(path)
        if not path:
            raise InvalidArgumentError("cannot upload to the root path")

        parent = self.mkdir_all(paths.parent(path), ctx=ctx)
        with self._dropping_stale(paths.parent(path)):
            entry = self._controller.upload_content(
                source, paths.basename(path), parent.id, ctx=ctx
            )
        self._cache.put(path, entry)
        return entry

    # ----------------------------
    # Move / rename
    # ----------------------------
    def move(self, src_path: str, dst_path: str, *, ctx: Optional[Context] = None) -> Entry:
        """
        Move (and, if the basename changes, rename) the file at `src_path`.

        Raises:
            IsDirectoryError: if `src_path` is a folder (use move_dir).
            PartialMutationError: the move committed but the rename failed.
        """
        src = self._resolver.resolve(src_path, ctx=ctx)
        if src.is_folder:
            raise IsDirectoryError(
                f"is a directory: {paths.normalize(src_path)}",
                details={"path": paths.normalize(src_path), "id": src.id},
            )
        return self._relocate(src, src_path, dst_path, ctx)

    def move_dir(self, src_path: str, dst_path: str, *, ctx: Optional[Context] = None) -> Entry:
        """
        Move a folder; the service relocates its whole subtree.

        Raises:
            CannotMoveError: root source, or destination inside the source.
            AlreadyExistsError: something already lives at `dst_path`.
        """
        src_path = paths.normalize(src_path)
        dst_path = paths.normalize(dst_path)
        if not src_path or not dst_path:
            raise CannotMoveError("cannot move to or from the root")
        if paths.is_within(dst_path, src_path):
            raise CannotMoveError(
                "cannot move a directory into itself",
                details={"src": src_path, "dst": dst_path},
            )

        src = self._resolver.resolve_dir(src_path, ctx=ctx)
        try:
            self._resolver.resolve(dst_path, ctx=ctx)
        except NotFoundError:
            pass
        else:
            raise AlreadyExistsError(
                f"destination exists: {dst_path}",
                details={"path": dst_path},
            )
        return self._relocate(src, src_path, dst_path, ctx)

    def _relocate(
        self,
        src: Entry,
        src_path: str,
        dst_path: str,
        ctx: Optional[Context],
    ) -> Entry:
        if src.id is None:
            raise CannotMoveError("cannot move the root")

        dst_path = paths.normalize(dst_path)
        if not dst_path:
            raise CannotMoveError("cannot move onto the root")
        dst_parent_path = paths.parent(dst_path)
        dst_name = paths.basename(dst_path)
        dst_parent = self._resolver.resolve_dir(dst_parent_path, ctx=ctx)

        with self._dropping_stale(src_path, dst_parent_path):
            self._controller.move_entries([src.id], dst_parent.id, ctx=ctx)
        self._cache.forget_path(src_path)
        moved = dataclasses.replace(src, parent_id=dst_parent.id)

        if dst_name == src.name:
            self._cache.put(dst_path, moved)
            log.debug(f"move: {paths.normalize(src_path)} -> {dst_path}")
            return moved

        intermediate = paths.join(dst_parent_path, src.name)
        self._cache.put(intermediate, moved)

        try:
            renamed = self._controller.rename_entry(src.id, dst_name, ctx=ctx)
        except DrimeFsError as exc:
            raise PartialMutationError(
                f"moved {paths.normalize(src_path)} to {intermediate} but rename to "
                f"{dst_name!r} failed: {exc}",
                entry_id=src.id,
                committed="move",
                intermediate_path=intermediate,
                cause=exc,
            ) from exc

        self._cache.forget_path(intermediate)
        if renamed.parent_id != dst_parent.id:
            renamed = dataclasses.replace(renamed, parent_id=dst_parent.id)
        self._cache.put(dst_path, renamed)
        log.debug(f"move: {paths.normalize(src_path)} -> {dst_path} (renamed)")
        return renamed

    # ----------------------------
    # Delete
    # ----------------------------
    def remove(self, path: str, *, ctx: Optional[Context] = None) -> None:
        """Delete the file at `path`."""
        entry = self._resolver.resolve(path, ctx=ctx)
        if entry.is_folder:
            raise IsDirectoryError(
                f"is a directory: {paths.normalize(path)}",
                details={"path": paths.normalize(path), "id": entry.id},
            )
        self.remove_entry(entry, path, ctx=ctx)

    def remove_entry(self, entry: Entry, path: str, *, ctx: Optional[Context] = None) -> None:
        if entry.id is None:
            raise InvalidArgumentError("cannot remove the root")
        with self._dropping_stale(path):
            self._controller.delete_entries([entry.id], permanent=self.hard_delete, ctx=ctx)
        self._forget(entry.id, path)

    def rmdir_if_empty(self, path: str, *, ctx: Optional[Context] = None) -> None:
        """
        Delete the folder at `path` if it has no children.

        Raises:
            DirectoryNotEmptyError: if the folder still has children.
            IsFileError: if `path` is a file.
        """
        folder = self._folder_for_removal(path, ctx)
        with self._dropping_stale(path):
            children = self._controller.list_children(folder.id, ctx=ctx)
        if children:
            self._resolver.remember_listing(path, children, complete=True)
            raise DirectoryNotEmptyError(
                f"directory not empty: {paths.normalize(path)}",
                details={"path": paths.normalize(path), "children": len(children)},
            )

        with self._dropping_stale(path):
            self._controller.delete_entries([folder.id], permanent=self.hard_delete, ctx=ctx)
        self._forget(folder.id, path)

    def purge(self, path: str, *, ctx: Optional[Context] = None) -> None:
        """Delete the folder at `path` and everything below it."""
        folder = self._folder_for_removal(path, ctx)
        with self._dropping_stale(path):
            self._controller.delete_entries([folder.id], permanent=self.hard_delete, ctx=ctx)
        self._forget(folder.id, path)

    def _folder_for_removal(self, path: str, ctx: Optional[Context]) -> Entry:
        if not paths.normalize(path):
            raise InvalidArgumentError("cannot remove the root")
        try:
            return self._resolver.resolve_dir(path, ctx=ctx)
        except NotADirectoryError as exc:
            raise IsFileError(
                f"is a file: {paths.normalize(path)}",
                details=exc.details,
                cause=exc,
            ) from exc

    def _forget(self, entry_id: int, path: str) -> None:
        self._cache.forget_path(path)
        self._cache.forget_id(entry_id)
        log.debug(f"delete: {paths.normalize(path)} id={entry_id}")

    @contextmanager
    def _dropping_stale(self, *stale_paths: str) -> Iterator[None]:
        """On a 404 for a cached id, drop the paths it came from, then re-raise."""
        try:
            yield
        except NotFoundError:
            for path in stale_paths:
                if paths.normalize(path):
                    self._resolver.invalidate(path)
                    log.debug(f"stale: dropped cached {paths.normalize(path)}")
            raise
