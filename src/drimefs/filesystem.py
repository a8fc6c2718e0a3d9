"""DrimeFs: path-addressed filesystem facade over the Drime entry API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from drimefs.cache import PathCache, PathResolver
from drimefs.config import Config
from drimefs.controller import DrimeController
from drimefs.controller.drime_controller import ByteSource
from drimefs.errors import (
    AuthError,
    CannotCopyError,
    CannotMoveError,
    CannotSetModTimeError,
    InvalidArgumentError,
    IsDirectoryError,
    NotFoundError,
)
from drimefs.logger import log
from drimefs.models import ContentStream, Entry, OpenOption
from drimefs.mutation import MutationCoordinator
from drimefs.pacer import Context, Pacer
from drimefs.util import paths


@dataclass(frozen=True)
class Directory:
    """A folder in a listing; `remote` is relative to the filesystem root."""

    remote: str
    entry: Entry

    @property
    def id(self) -> Optional[int]:
        return self.entry.id

    @property
    def mod_time(self) -> Optional[datetime]:
        return self.entry.modified_at


class RemoteObject:
    """A file on the service; `remote` is relative to the filesystem root."""

    def __init__(self, fs: DrimeFs, remote: str, entry: Entry) -> None:
        self.fs = fs
        self.remote = paths.normalize(remote)
        self._entry = entry

    def __repr__(self) -> str:
        return f"RemoteObject(remote={self.remote!r}, id={self._entry.id})"

    @property
    def entry(self) -> Entry:
        return self._entry

    @property
    def id(self) -> int:
        if self._entry.id is None:
            raise InvalidArgumentError(f"{self.remote!r} refers to the root, not a file")
        return self._entry.id

    @property
    def size(self) -> int:
        return self._entry.size

    @property
    def mod_time(self) -> Optional[datetime]:
        return self._entry.modified_at

    def hash(self, kind: str) -> None:
        """The service returns no content hashes."""
        return None

    def set_mod_time(self, mod_time: datetime) -> None:
        raise CannotSetModTimeError(
            "modification times cannot be set; re-upload instead",
            details={"remote": self.remote},
        )

    def open(self, *options: OpenOption, ctx: Optional[Context] = None) -> ContentStream:
        """Download the content; the entry is refreshed first for a fresh locator."""
        try:
            fresh = self.fs.controller.get_entry(self.id, ctx=ctx)
        except NotFoundError:
            self.fs.resolver.invalidate(self.fs.abs_path(self.remote))
            self.fs.cache.forget_id(self.id)
            raise
        if fresh.is_folder:
            raise IsDirectoryError(f"is a directory: {self.remote}", details={"id": self.id})
        self._entry = fresh
        self.fs.cache.put_entry(fresh)
        return self.fs.controller.download_content(fresh, options, ctx=ctx)

    def update(
        self,
        content: ByteSource,
        *,
        ctx: Optional[Context] = None,
    ) -> None:
        self._entry = self.fs.mutations.upload(self.fs.abs_path(self.remote), content, ctx=ctx)

    def remove(self, *, ctx: Optional[Context] = None) -> None:
        self.fs.mutations.remove_entry(self._entry, self.fs.abs_path(self.remote), ctx=ctx)


DirEntry = Union[Directory, RemoteObject]


class DrimeFs:
    """
    Filesystem view of a Drime account (or of a folder inside it).

    Paths passed to the methods are relative to `root` and slash-delimited.
    """

    precision: timedelta = timedelta(seconds=1)
    hashes: frozenset[str] = frozenset()

    def __init__(
        self,
        controller: DrimeController,
        *,
        root: str = "",
        config: Optional[Config] = None,
        ctx: Optional[Context] = None,
    ) -> None:
        config = config or Config()
        self.controller = controller
        self.config = config
        self.root = paths.normalize(root)
        self.root_is_file = False

        self.cache = PathCache()
        self.resolver = PathResolver(controller, self.cache)
        self.mutations = MutationCoordinator(
            controller,
            self.resolver,
            reconcile_attempts=config.mkdir.reconcile_attempts,
            reconcile_delay=config.mkdir.reconcile_delay,
            hard_delete=config.drime.hard_delete,
        )

        self._check_root(ctx)

    @classmethod
    def from_config(cls, config: Config, *, ctx: Optional[Context] = None) -> DrimeFs:
        """Build the pacer and controller from config and authenticate."""
        pacer = Pacer(
            min_sleep=config.pacer.min_sleep,
            max_sleep=config.pacer.max_sleep,
            decay_constant=config.pacer.decay_constant,
            attack_constant=config.pacer.attack_constant,
            retries=config.pacer.retries,
        )
        controller = DrimeController(
            pacer,
            base_url=config.drime.base_url,
            api_path=config.drime.api_path,
            timeout=config.drime.timeout,
        )

        try:
            auth = config.drime.auth_info()
        except ValueError as exc:
            controller.close()
            raise AuthError(str(exc), cause=exc) from exc

        try:
            if auth.has_token:
                controller.set_token(auth.token)  # type: ignore[arg-type]
            else:
                controller.login(auth.email, auth.password, ctx=ctx)  # type: ignore[arg-type]
            return cls(controller, root=config.drime.root, config=config, ctx=ctx)
        except Exception:
            controller.close()
            raise

    def __repr__(self) -> str:
        return f"Drime root '{self.root}'"

    def close(self) -> None:
        self.controller.close()

    def __enter__(self) -> DrimeFs:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def abs_path(self, remote: str) -> str:
        return paths.join(self.root, remote)

    # ----------------------------
    # Read APIs
    # ----------------------------
    def list(self, path: str = "", *, ctx: Optional[Context] = None) -> list[DirEntry]:
        """
        List the directory `path`.

        Raises:
            DirectoryNotFoundError: if `path` does not exist.
            NotADirectoryError: if `path` is a file.
        """
        children = self.resolver.list_dir(self.abs_path(path), ctx=ctx)

        results: list[DirEntry] = []
        for entry in children:
            remote = paths.join(path, entry.name)
            if entry.is_folder:
                results.append(Directory(remote=remote, entry=entry))
            else:
                results.append(RemoteObject(self, remote, entry))
        return results

    def get(self, remote: str, *, ctx: Optional[Context] = None) -> RemoteObject:
        """
        Return the file at `remote`.

        Raises:
            NotFoundError: if nothing lives at `remote`.
            IsDirectoryError: if `remote` is a folder.
        """
        entry = self.resolver.resolve(self.abs_path(remote), ctx=ctx)
        if entry.is_folder:
            raise IsDirectoryError(
                f"is a directory: {paths.normalize(remote)}",
                details={"remote": paths.normalize(remote), "id": entry.id},
            )
        return RemoteObject(self, remote, entry)

    def open(
        self,
        remote: str,
        *options: OpenOption,
        ctx: Optional[Context] = None,
    ) -> ContentStream:
        return self.get(remote, ctx=ctx).open(*options, ctx=ctx)

    # ----------------------------
    # Write APIs
    # ----------------------------
    def put(
        self,
        remote: str,
        content: ByteSource,
        size: Optional[int] = None,
        *,
        ctx: Optional[Context] = None,
    ) -> RemoteObject:
        """Upload `content` to `remote`, creating parent folders as needed."""
        entry = self.mutations.upload(self.abs_path(remote), content, ctx=ctx)
        if size is not None and size >= 0 and entry.size != size:
            log.warning(
                f"put: {paths.normalize(remote)} uploaded {entry.size} bytes, expected {size}"
            )
        return RemoteObject(self, remote, entry)

    def put_stream(
        self,
        remote: str,
        content: ByteSource,
        *,
        ctx: Optional[Context] = None,
    ) -> RemoteObject:
        """Upload content of unknown size."""
        return self.put(remote, content, None, ctx=ctx)

    def mkdir_all(self, path: str, *, ctx: Optional[Context] = None) -> None:
        self.mutations.mkdir_all(self.abs_path(path), ctx=ctx)

    def rmdir_if_empty(self, path: str, *, ctx: Optional[Context] = None) -> None:
        self.mutations.rmdir_if_empty(self.abs_path(path), ctx=ctx)

    def purge(self, path: str, *, ctx: Optional[Context] = None) -> None:
        self.mutations.purge(self.abs_path(path), ctx=ctx)

    def remove(self, remote: str, *, ctx: Optional[Context] = None) -> None:
        self.mutations.remove(self.abs_path(remote), ctx=ctx)

    def move(
        self,
        src: Union[str, RemoteObject],
        dst: str,
        *,
        ctx: Optional[Context] = None,
    ) -> RemoteObject:
        """
        Move a file to `dst` (both relative to this filesystem's root).

        Raises:
            CannotMoveError: if `src` belongs to another filesystem.
            PartialMutationError: the move committed but the rename failed.
        """
        if isinstance(src, RemoteObject):
            if src.fs is not self:
                raise CannotMoveError("source object belongs to another filesystem")
            src = src.remote

        entry = self.mutations.move(self.abs_path(src), self.abs_path(dst), ctx=ctx)
        return RemoteObject(self, dst, entry)

    def move_dir(
        self,
        src: str,
        dst: str,
        *,
        src_fs: Optional[DrimeFs] = None,
        ctx: Optional[Context] = None,
    ) -> None:
        """Move a directory; `src` may be relative to another DrimeFs root."""
        src_fs = src_fs or self
        if src_fs.controller is not self.controller:
            raise CannotMoveError("directory moves across accounts are not supported")

        self.mutations.move_dir(src_fs.abs_path(src), self.abs_path(dst), ctx=ctx)
        if src_fs is not self:
            src_fs.cache.forget_path(src_fs.abs_path(src))

    def copy(self, src: Union[str, RemoteObject], dst: str, **kwargs: Any) -> RemoteObject:
        raise CannotCopyError("server-side copy is not supported")

    # ----------------------------
    # Internals
    # ----------------------------
    def _check_root(self, ctx: Optional[Context]) -> None:
        """If the configured root names a file, re-point root at its parent."""
        if not self.root:
            return
        try:
            entry = self.resolver.resolve(self.root, ctx=ctx)
        except NotFoundError:
            return
        if entry.is_file:
            log.info(f"root {self.root!r} is a file, using its parent as root")
            self.root = paths.parent(self.root)
            self.root_is_file = True

