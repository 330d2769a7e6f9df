"""
Timestamp sources for proposal records.

A clock is any zero-argument callable returning an integer timestamp in
nanoseconds. Successive calls never go backwards.
"""

import threading
import time
from typing import Callable

Clock = Callable[[], int]


class SystemClock:
    """Wall-clock time in nanoseconds, clamped so it never decreases."""

    def __init__(self, source: Callable[[], int] = time.time_ns):
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            now = max(self._source(), self._last)
            self._last = now
            return now


class ManualClock:
    """Settable clock, mainly for tests and replay."""

    def __init__(self, start: int = 0, step: int = 0):
        self._now = start
        self._step = step
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            now = self._now
            self._now += self._step
            return now

    def advance(self, delta: int) -> int:
        if delta < 0:
            raise ValueError("Clock cannot move backwards")
        with self._lock:
            self._now += delta
            return self._now
