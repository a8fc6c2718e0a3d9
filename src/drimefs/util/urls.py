"""Download locator handling."""

from __future__ import annotations

from urllib.parse import urlsplit

DEFAULT_BASE_URL = "https://app.drime.cloud"
DEFAULT_API_PATH = "/api/v1"


def has_scheme(locator: str) -> bool:
    return locator.startswith("http://") or locator.startswith("https://")


def canonical_download_url(
    locator: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    api_path: str = DEFAULT_API_PATH,
) -> str:
    """
    Turn an entry's download locator into an absolute URL.

    - Absolute locators are returned unchanged.
    - Locators already carrying the API prefix ("api/v1/...") are joined to
      the service host, so the prefix is not duplicated.
    - Any other relative locator is joined to the API base.
    """
    if not locator:
        raise ValueError("download locator must be a non-empty string")
    if has_scheme(locator):
        return locator

    host = _host_root(base_url)
    relative = locator.lstrip("/")
    prefix = api_path.strip("/").split("/")[0]
    if prefix and (relative == prefix or relative.startswith(prefix + "/")):
        return f"{host}/{relative}"
    return f"{host}/{api_path.strip('/')}/{relative}"


def _host_root(base_url: str) -> str:
    parts = urlsplit(base_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"base_url must be absolute: {base_url!r}")
    return f"{parts.scheme}://{parts.netloc}"
