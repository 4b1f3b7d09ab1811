"""
Tracegate Guaranteed Throughput Sampler

Combines a probabilistic sampler with a rate-limited lower bound so that
an operation keeps producing samples even when its probabilistic rate
would skip it for long stretches.
"""

from __future__ import annotations

import threading
from typing import NamedTuple, Optional

from tracegate.clock import Clock
from tracegate.sampling.base import Sampler
from tracegate.sampling.probabilistic import ProbabilisticSampler
from tracegate.sampling.rate_limiting import RateLimitingSampler
from tracegate.types import SamplingStatus, sampler_tags


class _Delegates(NamedTuple):
    probabilistic: ProbabilisticSampler
    lower_bound: RateLimitingSampler
    lower_bound_status: SamplingStatus
    not_sampled_status: SamplingStatus


class GuaranteedThroughputSampler(Sampler):
    """
    Probabilistic sampling with a traces-per-second floor.

    Both delegates see every call so the lower-bound bucket is charged for
    traces the probabilistic sampler already kept. When the probabilistic
    sampler keeps the trace its tags win; otherwise the decision of the
    lower bound is returned under the ``lowerbound`` sampler type.
    """

    TYPE = "lowerbound"

    def __init__(
        self,
        sampling_rate: float,
        lower_bound: float,
        clock: Optional[Clock] = None,
    ):
        self._clock = clock
        self._update_lock = threading.Lock()
        self._delegates = self._build(sampling_rate, lower_bound)

    def _build(self, sampling_rate: float, lower_bound: float) -> _Delegates:
        probabilistic = ProbabilisticSampler(sampling_rate)
        rate_limiting = RateLimitingSampler(lower_bound, self._clock)
        return self._assemble(probabilistic, rate_limiting)

    def _assemble(
        self,
        probabilistic: ProbabilisticSampler,
        rate_limiting: RateLimitingSampler,
    ) -> _Delegates:
        tags = sampler_tags(self.TYPE, probabilistic.sampling_rate)
        return _Delegates(
            probabilistic=probabilistic,
            lower_bound=rate_limiting,
            lower_bound_status=SamplingStatus.of(True, tags),
            not_sampled_status=SamplingStatus.of(False, tags),
        )

    @property
    def sampling_rate(self) -> float:
        return self._delegates.probabilistic.sampling_rate

    @property
    def lower_bound(self) -> float:
        return self._delegates.lower_bound.max_traces_per_second

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        delegates = self._delegates
        probabilistic_status = delegates.probabilistic.sample(operation_name, trace_id)
        lower_bound_status = delegates.lower_bound.sample(operation_name, trace_id)

        if probabilistic_status.sampled:
            return probabilistic_status
        if lower_bound_status.sampled:
            return delegates.lower_bound_status
        return delegates.not_sampled_status

    def update(self, sampling_rate: float, lower_bound: float) -> bool:
        """
        Replace whichever delegate's parameter changed.

        Returns:
            True if anything was replaced
        """
        with self._update_lock:
            current = self._delegates
            probabilistic = current.probabilistic
            rate_limiting = current.lower_bound
            updated = False

            if sampling_rate != probabilistic.sampling_rate:
                probabilistic = ProbabilisticSampler(sampling_rate)
                updated = True
            if lower_bound != rate_limiting.max_traces_per_second:
                rate_limiting = RateLimitingSampler(lower_bound, self._clock)
                updated = True

            if updated:
                self._delegates = self._assemble(probabilistic, rate_limiting)
            return updated

    def close(self) -> None:
        delegates = self._delegates
        delegates.probabilistic.close()
        delegates.lower_bound.close()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GuaranteedThroughputSampler):
            return NotImplemented
        return (
            self.sampling_rate == other.sampling_rate
            and self.lower_bound == other.lower_bound
        )

    def __hash__(self) -> int:
        return hash((self.TYPE, self.sampling_rate, self.lower_bound))

    @property
    def description(self) -> str:
        return (
            f"GuaranteedThroughputSampler(sampling_rate={self.sampling_rate}, "
            f"lower_bound={self.lower_bound})"
        )
