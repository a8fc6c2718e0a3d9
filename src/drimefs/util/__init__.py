from .paths import basename, is_within, join, normalize, parent, split
from .time import now_utc, parse_timestamp, truncate_to_second
from .urls import DEFAULT_API_PATH, DEFAULT_BASE_URL, canonical_download_url, has_scheme

__all__ = [
    "normalize",
    "split",
    "join",
    "parent",
    "basename",
    "is_within",
    "now_utc",
    "parse_timestamp",
    "truncate_to_second",
    "DEFAULT_BASE_URL",
    "DEFAULT_API_PATH",
    "canonical_download_url",
    "has_scheme",
]
