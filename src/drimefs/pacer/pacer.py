"""Shared rate-adaptive pacer that wraps every remote call."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, TypeVar

from drimefs.errors import CancelledError, DrimeFsError
from drimefs.logger import log

from .context import Context, is_done
from .policy import should_retry

T = TypeVar("T")


class Pacer:
    """
    Space out remote calls and retry the ones that fail transiently.

    The pacing delay starts at `min_sleep`. A retryable failure grows it by
    the attack factor (doubling with the default `attack_constant=1`), up to
    `max_sleep`. Every other outcome decays it by `1 - 1/2**decay_constant`,
    down to `min_sleep`. Calls are spaced so that consecutive attempts,
    across all threads, start at least one delay apart.
    """

    def __init__(
        self,
        *,
        min_sleep: float = 0.01,
        max_sleep: float = 2.0,
        decay_constant: int = 2,
        attack_constant: int = 1,
        retries: int = 10,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if min_sleep < 0 or max_sleep < min_sleep:
            raise ValueError("require 0 <= min_sleep <= max_sleep")
        if retries < 1:
            raise ValueError("retries must be >= 1")

        self.min_sleep = min_sleep
        self.max_sleep = max_sleep
        self.decay_constant = decay_constant
        self.attack_constant = attack_constant
        self.retries = retries

        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._sleep_time = min_sleep
        self._next_slot = 0.0

    @property
    def sleep_time(self) -> float:
        with self._lock:
            return self._sleep_time

    def call(self, fn: Callable[[], T], ctx: Optional[Context] = None) -> T:
        """
        Run `fn` until it succeeds, fails terminally or retries run out.

        `fn` signals failure by raising a DrimeFsError. The context is checked
        before and after the pacing wait of every attempt; once it is done the
        last error is raised (or CancelledError if nothing was attempted yet).
        """
        last_error: Optional[DrimeFsError] = None

        for attempt in range(1, self.retries + 1):
            _raise_if_done(ctx, last_error)
            self._wait_for_slot()
            _raise_if_done(ctx, last_error)

            try:
                result = fn()
            except DrimeFsError as exc:
                retry = should_retry(exc, ctx)
                self._update(retry)
                if not retry:
                    raise
                last_error = exc
                log.info(
                    f"pacer: attempt {attempt}/{self.retries} failed, retrying "
                    f"in {self.sleep_time:.3f}s: {exc}"
                )
                continue

            self._update(False)
            return result

        assert last_error is not None
        log.debug(f"pacer: giving up after {self.retries} attempts: {last_error}")
        raise last_error

    def _wait_for_slot(self) -> None:
        with self._lock:
            now = self._clock()
            start = max(now, self._next_slot)
            self._next_slot = start + self._sleep_time
            wait = start - now

        if wait > 0:
            self._sleep(wait)

    def _update(self, retry: bool) -> None:
        with self._lock:
            if retry:
                self._sleep_time = self._attack(self._sleep_time)
            else:
                self._sleep_time = self._decay(self._sleep_time)

    def _attack(self, current: float) -> float:
        if self.attack_constant == 0:
            return self.max_sleep
        factor = 1 << self.attack_constant
        grown = (max(current, self.min_sleep) * factor) / (factor - 1)
        return min(grown, self.max_sleep)

    def _decay(self, current: float) -> float:
        if self.decay_constant == 0:
            return self.min_sleep
        factor = 1 << self.decay_constant
        shrunk = (current * factor - current) / factor
        return max(shrunk, self.min_sleep)


def _raise_if_done(ctx: Optional[Context], last_error: Optional[DrimeFsError]) -> None:
    if not is_done(ctx):
        return
    if last_error is not None:
        raise last_error
    raise CancelledError("context done before the call was attempted")
