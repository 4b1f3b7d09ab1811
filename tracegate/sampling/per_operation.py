"""
Tracegate Per-Operation Sampler

Keeps one GuaranteedThroughputSampler per operation name, bounded by
``max_operations``. Operations seen after the table is full share the
default probabilistic sampler; the table never evicts.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

import structlog

from tracegate.clock import Clock
from tracegate.exceptions import InvalidSamplerParameterError
from tracegate.sampling.base import Sampler
from tracegate.sampling.guaranteed import GuaranteedThroughputSampler
from tracegate.sampling.probabilistic import ProbabilisticSampler
from tracegate.sampling.strategy import OperationSamplingParameters
from tracegate.types import SamplingStatus

logger = structlog.get_logger(__name__)

DEFAULT_MAX_OPERATIONS = 2000


class PerOperationSampler(Sampler):
    """
    Sampler with dedicated guaranteed-throughput sampling per operation.

    Lookups are lock-free. A missing operation is inserted under a lock
    with a re-check, so racing callers share one sampler per operation.
    update() runs on the poller thread and publishes a new table.
    """

    TYPE = "peroperation"

    def __init__(
        self,
        max_operations: int,
        strategies: OperationSamplingParameters,
        clock: Optional[Clock] = None,
    ):
        if max_operations <= 0:
            raise InvalidSamplerParameterError(
                f"max_operations must be positive, got {max_operations}",
                parameter="max_operations",
                value=max_operations,
            )

        self.max_operations = max_operations
        self._clock = clock
        self._lock = threading.Lock()

        self._samplers: Dict[str, GuaranteedThroughputSampler] = {}
        self._default_sampler = ProbabilisticSampler(strategies.default_sampling_probability)
        self._lower_bound = strategies.default_lower_bound_traces_per_second
        self.update(strategies)

    @property
    def default_sampler(self) -> ProbabilisticSampler:
        return self._default_sampler

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    @property
    def operation_samplers(self) -> Dict[str, GuaranteedThroughputSampler]:
        """Snapshot of the operation table."""
        return dict(self._samplers)

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        sampler = self._samplers.get(operation_name)
        if sampler is None:
            sampler = self._get_or_create(operation_name)
        if sampler is None:
            return self._default_sampler.sample(operation_name, trace_id)
        return sampler.sample(operation_name, trace_id)

    def _get_or_create(self, operation_name: str) -> Optional[GuaranteedThroughputSampler]:
        with self._lock:
            sampler = self._samplers.get(operation_name)
            if sampler is not None:
                return sampler
            if len(self._samplers) >= self.max_operations:
                return None

            sampler = GuaranteedThroughputSampler(
                self._default_sampler.sampling_rate,
                self._lower_bound,
                self._clock,
            )
            self._samplers[operation_name] = sampler
            return sampler

    def update(self, strategies: OperationSamplingParameters) -> bool:
        """
        Apply new parameters.

        Operations named in ``strategies`` get their own rate; operations
        already in the table but not named are moved to the new defaults.

        Returns:
            True if any sampler changed
        """
        with self._lock:
            updated = False

            default_sampler = ProbabilisticSampler(strategies.default_sampling_probability)
            lower_bound = strategies.default_lower_bound_traces_per_second
            if default_sampler != self._default_sampler:
                self._default_sampler = default_sampler
                updated = True
            if lower_bound != self._lower_bound:
                self._lower_bound = lower_bound
                updated = True

            explicit = {
                strategy.operation: strategy.probabilistic_sampling.sampling_rate
                for strategy in strategies.per_operation_strategies
            }

            samplers = dict(self._samplers)
            for operation, sampler in samplers.items():
                if operation not in explicit:
                    updated = sampler.update(default_sampler.sampling_rate, lower_bound) or updated

            for operation, sampling_rate in explicit.items():
                sampler = samplers.get(operation)
                if sampler is not None:
                    updated = sampler.update(sampling_rate, lower_bound) or updated
                elif len(samplers) < self.max_operations:
                    samplers[operation] = GuaranteedThroughputSampler(
                        sampling_rate, lower_bound, self._clock,
                    )
                    updated = True
                else:
                    logger.info(
                        "Exceeded the maximum number of operations for per-operation sampling",
                        max_operations=self.max_operations,
                        operation=operation,
                    )

            self._samplers = samplers
            return updated

    def close(self) -> None:
        with self._lock:
            self._default_sampler.close()
            for sampler in self._samplers.values():
                sampler.close()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PerOperationSampler):
            return NotImplemented
        return (
            self.max_operations == other.max_operations
            and self._default_sampler == other._default_sampler
            and self._lower_bound == other._lower_bound
            and self._samplers == other._samplers
        )

    __hash__ = None

    @property
    def description(self) -> str:
        return (
            f"PerOperationSampler(max_operations={self.max_operations}, "
            f"operations={len(self._samplers)}, default={self._default_sampler.description})"
        )
