"""Drime REST API controller: one method per remote primitive."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, BinaryIO, Iterable, Optional, Sequence, Union

import httpx

from drimefs.errors import (
    AlreadyExistsError,
    AuthError,
    DrimeFsError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidResponseError,
    IsDirectoryError,
    NetworkError,
    ValidationError,
    map_http_error,
)
from drimefs.logger import log, summarize
from drimefs.models import ContentStream, Entry, OpenOption, entry_from_dict, range_headers
from drimefs.pacer import Context, Pacer
from drimefs.util.urls import DEFAULT_API_PATH, DEFAULT_BASE_URL, canonical_download_url

from . import endpoints

ByteSource = Union[bytes, bytearray, BinaryIO, Iterable[bytes]]


@dataclass(frozen=True)
class ListPage:
    """One page of a folder listing."""

    items: list[Entry]
    current_page: int
    last_page: int


class DrimeController:
    """
    Drime API controller.

    Notes:
        - Every request goes through the shared Pacer.
        - A `parent_id` of None always means the account root; the wire
          encoding of the root (omitted parameter or 0) is handled here.
    """

    def __init__(
        self,
        pacer: Pacer,
        *,
        base_url: str = DEFAULT_BASE_URL,
        api_path: str = DEFAULT_API_PATH,
        token: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        client = httpx.Client(
            base_url=_api_base(base_url, api_path),
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self._init(client, pacer, base_url=base_url, api_path=api_path, token=token)
        self._owns_client = True

    @classmethod
    def from_client(
        cls,
        client: httpx.Client,
        pacer: Pacer,
        *,
        base_url: str = DEFAULT_BASE_URL,
        api_path: str = DEFAULT_API_PATH,
        token: Optional[str] = None,
    ) -> "DrimeController":
        """Create controller from a pre-built httpx client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._init(client, pacer, base_url=base_url, api_path=api_path, token=token)
        obj._owns_client = False
        return obj

    def _init(
        self,
        client: httpx.Client,
        pacer: Pacer,
        *,
        base_url: str,
        api_path: str,
        token: Optional[str],
    ) -> None:
        self._client = client
        self._pacer = pacer
        self.base_url = base_url
        self.api_path = api_path
        if token:
            self.set_token(token)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ----------------------------
    # Authentication
    # ----------------------------
    def set_token(self, token: str) -> None:
        self._client.headers["Authorization"] = f"Bearer {token}"

    def login(self, email: str, password: str, *, ctx: Optional[Context] = None) -> str:
        """Exchange email/password for an access token and attach it."""
        body = {"email": email, "password": password}
        data = self._call_json("POST", endpoints.LOGIN, ctx=ctx, json=body)

        user = data.get("user") if isinstance(data, dict) else None
        token = user.get("access_token") if isinstance(user, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("no access token in login response")

        self.set_token(token)
        log.debug(f"login: authenticated as {email}")
        return token

    # ----------------------------
    # Public API
    # ----------------------------
    def list_children(
        self,
        parent_id: Optional[int],
        *,
        ctx: Optional[Context] = None,
    ) -> list[Entry]:
        """List every child of `parent_id` (None = account root), all pages."""
        entries: list[Entry] = []
        page = 1

        while True:
            listing = self.list_page(parent_id, page, ctx=ctx)
            entries.extend(listing.items)

            log.debug(
                f"list_children: parent={parent_id} page={page} "
                f"got={len(listing.items)} total={len(entries)} "
                f"last_page={listing.last_page}"
            )

            if page >= listing.last_page:
                break
            page += 1

        return entries

    def list_page(
        self,
        parent_id: Optional[int],
        page: int,
        *,
        ctx: Optional[Context] = None,
    ) -> ListPage:
        params: dict[str, Any] = {"page": page}
        if parent_id is not None:
            params["parentId"] = parent_id

        data = self._call_json("GET", endpoints.LIST_ENTRIES, ctx=ctx, params=params)
        if not isinstance(data, dict):
            raise InvalidResponseError("listing response is not an object")

        items = [_to_entry(d) for d in data.get("data") or [] if isinstance(d, dict)]
        current_page = _as_int(data.get("current_page"), default=page)
        last_page = _as_int(data.get("last_page"), default=current_page)
        return ListPage(items=items, current_page=current_page, last_page=last_page)

    def get_entry(self, entry_id: int, *, ctx: Optional[Context] = None) -> Entry:
        data = self._call_json("GET", endpoints.ENTRY.format(id=entry_id), ctx=ctx)
        return _to_entry(_unwrap(data, "fileEntry"))

    def create_folder(
        self,
        name: str,
        parent_id: Optional[int],
        *,
        ctx: Optional[Context] = None,
    ) -> Entry:
        """
        Create folder `name` under `parent_id`.

        Raises:
            AlreadyExistsError: the service rejected the name (HTTP 422).
        """
        _check_name(name)
        body = {"name": name, "parent_id": _wire_id(parent_id)}
        log.debug(f"create_folder: name={name} parent={parent_id}")

        try:
            data = self._call_json("POST", endpoints.CREATE_FOLDER, ctx=ctx, json=body)
        except ValidationError as exc:
            raise AlreadyExistsError(
                f"folder {name!r} already exists",
                details=dict(exc.details, name=name, parent_id=parent_id),
                cause=exc,
            ) from exc

        return _to_entry(_unwrap(data, "folder"))

    def delete_entries(
        self,
        entry_ids: Sequence[int],
        *,
        permanent: bool,
        ctx: Optional[Context] = None,
    ) -> None:
        ids = _check_ids(entry_ids)
        body = {"entryIds": ids, "deleteForever": permanent}
        log.debug(f"delete_entries: ids={ids} permanent={permanent}")
        self._call_json("POST", endpoints.DELETE_ENTRIES, ctx=ctx, json=body)

    def rename_entry(
        self,
        entry_id: int,
        new_name: str,
        *,
        ctx: Optional[Context] = None,
    ) -> Entry:
        _check_name(new_name)
        body = {"name": new_name}
        log.debug(f"rename_entry: id={entry_id} name={new_name}")
        data = self._call_json("PUT", endpoints.ENTRY.format(id=entry_id), ctx=ctx, json=body)
        return _to_entry(_unwrap(data, "fileEntry"))

    def move_entries(
        self,
        entry_ids: Sequence[int],
        destination_id: Optional[int],
        *,
        ctx: Optional[Context] = None,
    ) -> None:
        ids = _check_ids(entry_ids)
        body = {"entryIds": ids, "destinationId": _wire_id(destination_id)}
        log.debug(f"move_entries: ids={ids} destination={destination_id}")
        self._call_json("POST", endpoints.MOVE_ENTRIES, ctx=ctx, json=body)

    def download_content(
        self,
        entry: Entry,
        options: Sequence[OpenOption] = (),
        *,
        ctx: Optional[Context] = None,
    ) -> ContentStream:
        """Open a streaming download of a file entry's content."""
        if entry.is_folder:
            raise IsDirectoryError("cannot download a folder", details={"id": entry.id})
        if not entry.download_url:
            raise InvalidArgumentError("entry has no download locator", details={"id": entry.id})

        url = canonical_download_url(
            entry.download_url,
            base_url=self.base_url,
            api_path=self.api_path,
        )
        log.debug(f"download_content: id={entry.id} url={url}")

        response = self._call(
            "GET",
            url,
            ctx=ctx,
            headers=range_headers(list(options)),
            stream=True,
        )
        return ContentStream(response)

    def upload_content(
        self,
        source: ByteSource,
        name: str,
        parent_id: Optional[int],
        *,
        ctx: Optional[Context] = None,
    ) -> Entry:
        """Upload `source` as `name` under `parent_id`; returns the new entry."""
        _check_name(name)
        content = _read_all(source)

        data: dict[str, str] = {}
        if parent_id is not None:
            data["parentId"] = str(parent_id)
        log.debug(f"upload_content: name={name} parent={parent_id} bytes={len(content)}")

        def _files() -> dict[str, Any]:
            return {"file": (name, io.BytesIO(content), "application/octet-stream")}

        result = self._call_json("POST", endpoints.UPLOAD, ctx=ctx, data=data, files=_files)
        entry = _to_entry(_unwrap(result, "fileEntry"))
        log.debug(
            f"upload_content: id={entry.id} name={entry.name} size={entry.size} "
            f"parent={entry.parent_id}"
        )
        return entry

    # ----------------------------
    # Internals
    # ----------------------------
    def _call_json(self, method: str, url: str, *, ctx: Optional[Context], **kwargs: Any) -> Any:
        response = self._call(method, url, ctx=ctx, **kwargs)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidResponseError(
                "invalid JSON response",
                details={"status_code": response.status_code, "body": summarize(response.text)},
                cause=exc,
            ) from exc

    def _call(
        self,
        method: str,
        url: str,
        *,
        ctx: Optional[Context],
        stream: bool = False,
        headers: Optional[dict[str, str]] = None,
        files: Any = None,
        **kwargs: Any,
    ) -> httpx.Response:
        request_headers = dict(headers or {})

        def attempt() -> httpx.Response:
            request = self._client.build_request(
                method,
                url,
                headers=request_headers,
                files=files() if callable(files) else files,
                timeout=_request_timeout(self._client.timeout, ctx),
                **kwargs,
            )
            try:
                response = self._client.send(request, stream=stream)
            except httpx.RequestError as exc:
                raise NetworkError(
                    f"Network error: {exc}",
                    details={"method": method, "url": str(request.url)},
                    cause=exc,
                ) from exc

            if response.status_code >= 400:
                error = _response_to_error(response)
                response.close()
                log.debug(f"{method} {request.url} -> {response.status_code}: {error}")
                raise error
            return response

        return self._pacer.call(attempt, ctx)


def _api_base(base_url: str, api_path: str) -> str:
    return base_url.rstrip("/") + "/" + api_path.strip("/")


def _request_timeout(default: httpx.Timeout, ctx: Optional[Context]) -> httpx.Timeout:
    remaining = ctx.remaining() if ctx is not None else None
    if remaining is None:
        return default
    if default.read is not None:
        remaining = min(remaining, default.read)
    return httpx.Timeout(remaining)


def _wire_id(entry_id: Optional[int]) -> int:
    return endpoints.ROOT_WIRE_ID if entry_id is None else entry_id


def _check_name(name: str) -> None:
    if not isinstance(name, str) or not name or "/" in name:
        raise InvalidArgumentError("name must be a non-empty string without '/'", details={"name": name})


def _check_ids(entry_ids: Sequence[int]) -> list[int]:
    ids = list(entry_ids)
    if not ids:
        raise InvalidArgumentError("at least one entry id is required")
    for entry_id in ids:
        if isinstance(entry_id, bool) or not isinstance(entry_id, int) or entry_id <= 0:
            raise InvalidArgumentError("entry ids must be positive integers", details={"id": entry_id})
    return ids


def _read_all(source: ByteSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    read = getattr(source, "read", None)
    if callable(read):
        data = read()
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidArgumentError("upload source must yield bytes")
        return bytes(data)
    return b"".join(source)


def _unwrap(data: Any, key: str) -> dict[str, Any]:
    if isinstance(data, dict) and isinstance(data.get(key), dict):
        return data[key]
    if isinstance(data, dict):
        return data
    raise InvalidResponseError(f"expected an object with {key!r}")


def _to_entry(data: dict[str, Any]) -> Entry:
    try:
        return entry_from_dict(data)
    except ValueError as exc:
        raise InvalidResponseError(str(exc), details={"payload": summarize(data)}, cause=exc) from exc


def _as_int(value: Any, *, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return default


def _response_to_error(response: httpx.Response) -> DrimeFsError:
    info = _response_to_info(response)
    cause = httpx.HTTPStatusError(
        f"HTTP {response.status_code}",
        request=response.request,
        response=response,
    )
    return map_http_error(info, cause=cause)


def _response_to_info(response: httpx.Response) -> HttpErrorInfo:
    message = None
    details: dict[str, Any] = {"url": str(response.request.url)}

    if not response.is_stream_consumed:
        try:
            response.read()
        except httpx.HTTPError:
            pass

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        msg = payload.get("message") or payload.get("error")
        message = msg if isinstance(msg, str) and msg else None
        errors = payload.get("errors")
        if errors:
            details["errors"] = errors

    return HttpErrorInfo(
        status_code=response.status_code,
        reason=response.reason_phrase or None,
        message=message,
        details=details,
    )
