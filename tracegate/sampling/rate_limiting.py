"""Sampler that admits at most N traces per second."""

from __future__ import annotations

from typing import Optional

from tracegate.clock import Clock
from tracegate.exceptions import InvalidSamplerParameterError
from tracegate.rate_limiter import RateLimiter
from tracegate.sampling.base import Sampler
from tracegate.types import SamplingStatus, sampler_tags


class RateLimitingSampler(Sampler):
    """
    Sample traces up to a maximum rate.

    Each decision costs one credit. The bucket holds at least one credit
    even when the rate is below one trace per second, otherwise such
    rates could never admit anything.
    """

    TYPE = "ratelimiting"

    def __init__(self, max_traces_per_second: float, clock: Optional[Clock] = None):
        if max_traces_per_second < 0:
            raise InvalidSamplerParameterError(
                f"Max traces per second must not be negative, got {max_traces_per_second}",
                parameter="max_traces_per_second",
                value=max_traces_per_second,
            )

        self.max_traces_per_second = float(max_traces_per_second)
        max_balance = max(1.0, self.max_traces_per_second)
        self._rate_limiter = RateLimiter(self.max_traces_per_second, max_balance, clock)
        self._tags = sampler_tags(self.TYPE, self.max_traces_per_second)

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        return SamplingStatus.of(self._rate_limiter.check_credit(1.0), self._tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RateLimitingSampler):
            return NotImplemented
        return self.max_traces_per_second == other.max_traces_per_second

    def __hash__(self) -> int:
        return hash((self.TYPE, self.max_traces_per_second))

    @property
    def description(self) -> str:
        return f"RateLimitingSampler(max_traces_per_second={self.max_traces_per_second})"
