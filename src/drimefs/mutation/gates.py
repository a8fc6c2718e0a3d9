"""Per-key execution gates: one caller runs, concurrent callers share the outcome."""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class _Gate(Generic[T]):
    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Optional[T] = None
        self.error: Optional[BaseException] = None


class GateTable(Generic[T]):
    """
    Table of in-flight executions keyed by a string (e.g. a normalized path).

    The first caller for a key inserts a gate and runs the body; callers that
    arrive while it runs block on that gate and receive the same result or
    exception. The gate is retired once its outcome is published, so a later
    call for the same key runs the body again.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._gates: dict[str, _Gate[T]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._gates)

    def run(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            gate = self._gates.get(key)
            owner = gate is None
            if gate is None:
                gate = _Gate()
                self._gates[key] = gate

        if not owner:
            gate.done.wait()
            if gate.error is not None:
                raise gate.error
            return gate.result  # type: ignore[return-value]

        try:
            gate.result = fn()
        except BaseException as exc:
            gate.error = exc
            raise
        finally:
            with self._lock:
                self._gates.pop(key, None)
            gate.done.set()
        return gate.result
