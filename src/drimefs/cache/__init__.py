"""Path resolution and caching for drimefs."""

from __future__ import annotations

from .path_cache import PathCache
from .resolver import PathResolver

__all__ = ["PathCache", "PathResolver"]
