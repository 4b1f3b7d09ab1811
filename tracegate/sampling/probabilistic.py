"""
Tracegate Probabilistic Sampler

Samples a fixed fraction of traces based on the trace id alone, so every
process that sees the same trace id under the same rate makes the same
decision.
"""

from __future__ import annotations

from tracegate.exceptions import InvalidSamplerParameterError
from tracegate.sampling.base import Sampler
from tracegate.types import SamplingStatus, sampler_tags

DEFAULT_SAMPLING_PROBABILITY = 0.001

_MAX_INT64 = (1 << 63) - 1
_MIN_INT64 = -(1 << 63)
_UINT64_MASK = (1 << 64) - 1


def to_signed_64(trace_id: int) -> int:
    """Interpret the low 64 bits of a trace id as a signed integer."""
    value = trace_id & _UINT64_MASK
    if value > _MAX_INT64:
        value -= 1 << 64
    return value


class ProbabilisticSampler(Sampler):
    """
    Sample traces whose id falls inside a rate-sized slice of the id space.

    Trace ids are treated as uniformly distributed signed 64-bit integers.
    Positive ids are sampled at or below ``rate * MAX_INT64`` and negative
    ids at or above ``rate * MIN_INT64``.
    """

    TYPE = "probabilistic"

    def __init__(self, sampling_rate: float = DEFAULT_SAMPLING_PROBABILITY):
        if not 0.0 <= sampling_rate <= 1.0:
            raise InvalidSamplerParameterError(
                f"Sampling rate must be between 0.0 and 1.0, got {sampling_rate}",
                parameter="sampling_rate",
                value=sampling_rate,
            )

        self.sampling_rate = float(sampling_rate)
        self._positive_boundary = int(_MAX_INT64 * self.sampling_rate)
        self._negative_boundary = int(_MIN_INT64 * self.sampling_rate)
        self._tags = sampler_tags(self.TYPE, self.sampling_rate)

    def is_sampled(self, trace_id: int) -> bool:
        signed_id = to_signed_64(trace_id)
        if signed_id > 0:
            return signed_id <= self._positive_boundary
        if signed_id < 0:
            return signed_id >= self._negative_boundary
        return self.sampling_rate > 0.0

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        return SamplingStatus.of(self.is_sampled(trace_id), self._tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProbabilisticSampler):
            return NotImplemented
        return self.sampling_rate == other.sampling_rate

    def __hash__(self) -> int:
        return hash((self.TYPE, self.sampling_rate))

    @property
    def description(self) -> str:
        return f"ProbabilisticSampler(sampling_rate={self.sampling_rate})"
