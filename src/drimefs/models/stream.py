"""Readable wrapper around a streaming download."""

from __future__ import annotations

from typing import Iterator

import httpx


class ContentStream:
    """
    Byte stream for a file download.

    Iterate for chunks or call `read()` for the whole body. The underlying
    connection is released on `close()` or when used as a context manager.
    """

    def __init__(self, response: httpx.Response, *, chunk_size: int = 64 * 1024) -> None:
        self._response = response
        self._chunk_size = chunk_size

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    def __iter__(self) -> Iterator[bytes]:
        return self._response.iter_bytes(chunk_size=self._chunk_size)

    def read(self) -> bytes:
        try:
            return self._response.read()
        finally:
            self.close()

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> ContentStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
