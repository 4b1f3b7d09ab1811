"""Sampler that always returns the same decision."""

from __future__ import annotations

from tracegate.sampling.base import Sampler
from tracegate.types import SamplingStatus, sampler_tags


class ConstSampler(Sampler):
    """Always (or never) sample."""

    TYPE = "const"

    def __init__(self, decision: bool):
        self.decision = bool(decision)
        self._status = SamplingStatus.of(self.decision, sampler_tags(self.TYPE, self.decision))

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        return self._status

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstSampler):
            return NotImplemented
        return self.decision == other.decision

    def __hash__(self) -> int:
        return hash((self.TYPE, self.decision))

    @property
    def description(self) -> str:
        return f"ConstSampler(decision={self.decision})"
