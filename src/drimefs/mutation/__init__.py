"""Mutation coordination for drimefs."""

from __future__ import annotations

from .coordinator import MutationCoordinator
from .gates import GateTable

__all__ = ["MutationCoordinator", "GateTable"]
