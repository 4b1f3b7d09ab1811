"""
Tracegate Pipeline

Bundles the sampler, reporter and metrics a tracer needs: sample() when
a trace starts, report() when a sampled span finishes.
"""

from __future__ import annotations

import threading

import structlog

from tracegate.metrics import Metrics
from tracegate.reporting.base import Reporter
from tracegate.sampling.base import Sampler
from tracegate.types import FinishedSpan, SamplingStatus

logger = structlog.get_logger(__name__)


class TracingPipeline:
    """
    Decision-and-delivery pipeline.

    Usage:
        pipeline = TracerConfig(service_name="checkout").build()
        status = pipeline.sample("GET /cart", trace_id)
        ...
        if status.sampled:
            pipeline.report(span)
        pipeline.close()
    """

    def __init__(
        self,
        service_name: str,
        sampler: Sampler,
        reporter: Reporter,
        metrics: Metrics,
    ):
        self.service_name = service_name
        self.sampler = sampler
        self.reporter = reporter
        self.metrics = metrics
        self._closed = False
        self._close_lock = threading.Lock()

    def sample(self, operation_name: str, trace_id: int) -> SamplingStatus:
        status = self.sampler.sample(operation_name, trace_id)
        if status.sampled:
            self.metrics.spans_started_sampled.inc(1)
        else:
            self.metrics.spans_started_not_sampled.inc(1)
        return status

    def report(self, span: FinishedSpan) -> None:
        if span.sampled:
            self.reporter.report(span)

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        logger.info("Closing tracing pipeline", service_name=self.service_name)
        try:
            self.reporter.close()
        finally:
            self.sampler.close()

    def __enter__(self) -> "TracingPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
