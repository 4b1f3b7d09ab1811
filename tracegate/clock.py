"""
Tracegate Clock

Time sources used by the pipeline. Rate limiting always reads the
monotonic tick counter so wall-clock adjustments cannot move it backwards.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of wall-clock timestamps and monotonic ticks."""

    @abstractmethod
    def current_time_micros(self) -> int:
        """Wall-clock time in microseconds since the epoch."""
        pass

    @abstractmethod
    def current_nano_ticks(self) -> int:
        """Monotonic ticks in nanoseconds, only meaningful as differences."""
        pass

    @abstractmethod
    def is_micros_accurate(self) -> bool:
        """Whether current_time_micros() has true microsecond resolution."""
        pass


class SystemClock(Clock):
    """Clock backed by the interpreter's time functions."""

    def current_time_micros(self) -> int:
        return time.time_ns() // 1000

    def current_nano_ticks(self) -> int:
        return time.monotonic_ns()

    def is_micros_accurate(self) -> bool:
        return True
