"""
Tracegate Rate Limiter

Token-bucket credit tracker used by rate-limiting samplers.

Credits accrue at ``credits_per_second`` up to ``max_balance`` and are
spent by check_credit(). The bucket starts full.
"""

from __future__ import annotations

import threading
from typing import Optional

from tracegate.clock import Clock, SystemClock


class RateLimiter:
    """
    Thread-safe token bucket driven by a monotonic clock.

    Usage:
        limiter = RateLimiter(credits_per_second=10.0, max_balance=10.0)
        if limiter.check_credit(1.0):
            ...
    """

    def __init__(
        self,
        credits_per_second: float,
        max_balance: float,
        clock: Optional[Clock] = None,
    ):
        self.credits_per_second = float(credits_per_second)
        self.max_balance = float(max_balance)
        self._clock = clock or SystemClock()

        self._balance = self.max_balance
        self._last_tick = self._clock.current_nano_ticks()
        self._lock = threading.Lock()

    def check_credit(self, cost: float) -> bool:
        """Spend ``cost`` credits if the balance allows it."""
        with self._lock:
            now = self._clock.current_nano_ticks()
            elapsed_seconds = max(0, now - self._last_tick) / 1e9
            self._last_tick = now

            self._balance = min(
                self.max_balance,
                self._balance + elapsed_seconds * self.credits_per_second,
            )

            if self._balance >= cost:
                self._balance -= cost
                return True
            return False

    @property
    def balance(self) -> float:
        """Balance as of the last check (does not accrue)."""
        with self._lock:
            return self._balance

    def __repr__(self) -> str:
        return (
            f"RateLimiter(credits_per_second={self.credits_per_second}, "
            f"max_balance={self.max_balance})"
        )
