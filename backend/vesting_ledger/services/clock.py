"""Logical time source for the engine"""
import time
from typing import Protocol


class Clock(Protocol):
    """Anything that reports the current time in whole Unix seconds"""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock time"""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to. Used by tests and simulations."""

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        self._now += seconds
        return self._now


_system_clock = SystemClock()


def get_clock() -> Clock:
    """Dependency returning the process clock"""
    return _system_clock
