"""Entry client exports for drimefs."""

from __future__ import annotations

from .drime_controller import DrimeController, ListPage

__all__ = ["DrimeController", "ListPage"]
