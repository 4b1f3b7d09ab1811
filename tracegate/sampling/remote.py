"""
Tracegate Remote Controlled Sampler

Wraps a delegate sampler that a background poller replaces whenever the
sampling control plane publishes a different strategy.

Sampling calls only read the current delegate reference; the poller is
the only writer. A failed or malformed poll leaves the delegate untouched
and is retried on the next tick.
"""

from __future__ import annotations

import threading
from typing import Optional

import structlog

from tracegate.clock import Clock
from tracegate.exceptions import SamplingStrategyError
from tracegate.metrics import Metrics
from tracegate.scheduling import PeriodicTask
from tracegate.sampling.base import Sampler
from tracegate.sampling.manager import HttpSamplingManager, SamplingManager
from tracegate.sampling.per_operation import DEFAULT_MAX_OPERATIONS, PerOperationSampler
from tracegate.sampling.probabilistic import DEFAULT_SAMPLING_PROBABILITY, ProbabilisticSampler
from tracegate.sampling.rate_limiting import RateLimitingSampler
from tracegate.sampling.strategy import (
    OperationSamplingParameters,
    SamplingStrategyResponse,
    StrategyType,
)
from tracegate.types import SamplingStatus

logger = structlog.get_logger(__name__)

DEFAULT_POLLING_INTERVAL = 60.0


class RemoteControlledSampler(Sampler):
    """
    Sampler reconfigured at runtime from a SamplingManager.

    The first poll runs after ``initial_poll_delay`` seconds (immediately
    by default), then every ``polling_interval`` seconds.

    Usage:
        sampler = RemoteControlledSampler(
            "checkout",
            sampling_manager=HttpSamplingManager("localhost:5778"),
            polling_interval=60.0,
        )
        status = sampler.sample("GET /cart", trace_id)
        ...
        sampler.close()
    """

    TYPE = "remote"

    def __init__(
        self,
        service_name: str,
        sampling_manager: Optional[SamplingManager] = None,
        initial_sampler: Optional[Sampler] = None,
        metrics: Optional[Metrics] = None,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
        max_operations: int = DEFAULT_MAX_OPERATIONS,
        clock: Optional[Clock] = None,
        initial_poll_delay: float = 0.0,
        owns_manager: Optional[bool] = None,
    ):
        self.service_name = service_name
        self.max_operations = max_operations
        self.polling_interval = polling_interval
        self.metrics = metrics or Metrics()
        self._clock = clock

        # by default only a manager built here is closed with the sampler
        if owns_manager is None:
            owns_manager = sampling_manager is None
        self._owns_manager = owns_manager
        self.sampling_manager = sampling_manager or HttpSamplingManager()

        self._sampler: Sampler = initial_sampler or ProbabilisticSampler(DEFAULT_SAMPLING_PROBABILITY)

        self._closed = False
        self._close_lock = threading.Lock()

        self._poller = PeriodicTask(
            self._poll,
            interval=polling_interval,
            name=f"tracegate.RemoteControlledSampler-{service_name}",
            initial_delay=initial_poll_delay,
        )
        self._poller.start()

    @property
    def sampler(self) -> Sampler:
        """The delegate currently answering sampling calls."""
        return self._sampler

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        return self._sampler.sample(operation_name, trace_id)

    def _poll(self) -> None:
        try:
            self.update_sampler()
        except Exception:
            logger.exception("Failed to update sampler", service_name=self.service_name)

    def update_sampler(self) -> None:
        """Run one poll cycle: fetch the strategy and apply it if it changed."""
        response = self._fetch_strategy()
        if response is None or self._closed:
            return

        if response.operation_sampling is not None:
            self._update_per_operation_sampler(response.operation_sampling)
        else:
            self._update_rate_limiting_or_probabilistic_sampler(response)

    def _fetch_strategy(self) -> Optional[SamplingStrategyResponse]:
        try:
            response = self.sampling_manager.get_sampling_strategy(self.service_name)
        except SamplingStrategyError as e:
            self.metrics.sampler_query_failure.inc(1)
            logger.warning(
                "Failed to fetch sampling strategy",
                service_name=self.service_name,
                error=str(e),
            )
            return None
        except Exception:
            self.metrics.sampler_query_failure.inc(1)
            logger.exception(
                "Sampling manager raised unexpectedly",
                service_name=self.service_name,
            )
            return None

        self.metrics.sampler_retrieved.inc(1)
        return response

    def _update_rate_limiting_or_probabilistic_sampler(
        self,
        response: SamplingStrategyResponse,
    ) -> None:
        sampler = self._sampler_from_response(response)
        if sampler is None:
            self.metrics.sampler_parsing_failure.inc(1)
            logger.error(
                "No strategy present in response, not updating sampler",
                service_name=self.service_name,
            )
            return

        if sampler != self._sampler:
            self._replace(sampler)

    def _sampler_from_response(self, response: SamplingStrategyResponse) -> Optional[Sampler]:
        probabilistic = response.probabilistic_sampling
        rate_limiting = response.rate_limiting_sampling

        if response.strategy_type == StrategyType.RATE_LIMITING and rate_limiting is not None:
            return RateLimitingSampler(rate_limiting.max_traces_per_second, self._clock)
        if probabilistic is not None:
            return ProbabilisticSampler(probabilistic.sampling_rate)
        if rate_limiting is not None:
            return RateLimitingSampler(rate_limiting.max_traces_per_second, self._clock)
        return None

    def _update_per_operation_sampler(self, parameters: OperationSamplingParameters) -> None:
        current = self._sampler
        if isinstance(current, PerOperationSampler):
            if current.update(parameters):
                self.metrics.sampler_updated.inc(1)
                logger.info(
                    "Per-operation sampler updated",
                    service_name=self.service_name,
                    sampler=current.description,
                )
        else:
            self._replace(PerOperationSampler(self.max_operations, parameters, self._clock))

    def _replace(self, sampler: Sampler) -> None:
        # swap under the close lock so close() always sees the final delegate
        with self._close_lock:
            if self._closed:
                stale = True
            else:
                stale = False
                previous = self._sampler
                self._sampler = sampler

        if stale:
            sampler.close()
            return

        self.metrics.sampler_updated.inc(1)
        logger.info(
            "Sampler updated",
            service_name=self.service_name,
            previous=previous.description,
            sampler=sampler.description,
        )
        previous.close()

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        self._poller.cancel()
        self._sampler.close()
        if self._owns_manager:
            self.sampling_manager.close()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemoteControlledSampler):
            return NotImplemented
        return self._sampler == other._sampler

    __hash__ = None

    @property
    def description(self) -> str:
        return (
            f"RemoteControlledSampler(service_name={self.service_name!r}, "
            f"sampler={self._sampler.description})"
        )
