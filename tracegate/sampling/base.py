"""
Tracegate Sampler Base

Every sampler answers sample(operation_name, trace_id) with a
SamplingStatus and can be closed. Samplers are immutable apart from the
explicit update() methods used by the remote poller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tracegate.types import SamplingStatus


class Sampler(ABC):
    """Base class for trace samplers."""

    TYPE: str = ""

    @abstractmethod
    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        """
        Decide whether a new trace should be kept.

        Args:
            operation_name: Name of the operation starting the trace
            trace_id: 64-bit trace id (signed or unsigned)

        Returns:
            Sampling status with provenance tags
        """
        pass

    def close(self) -> None:
        """Release resources held by the sampler."""
        pass

    @property
    def description(self) -> str:
        """Human-readable description of the sampler."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return self.description
