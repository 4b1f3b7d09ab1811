"""
Tracegate Metrics

Counters and gauges emitted by the sampling and reporting pipeline.

- Counter / Gauge: the instruments components hold on to
- MetricsFactory: creates instruments (in-memory, no-op, or user supplied)
- Metrics: the fixed set of tracer instruments, created from definitions
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_METRICS_PREFIX = "tracegate_tracer_"


class MetricType(str, Enum):
    """Types of metrics."""
    COUNTER = "counter"
    GAUGE = "gauge"


class Counter(ABC):
    """A counter metric that only goes up."""

    @abstractmethod
    def inc(self, delta: int = 1) -> None:
        """Increment the counter."""
        pass


class Gauge(ABC):
    """A gauge metric that records the latest value."""

    @abstractmethod
    def update(self, amount: int) -> None:
        """Set the gauge to a value."""
        pass


class MetricsFactory(ABC):
    """Creates the instruments used by Metrics."""

    @abstractmethod
    def create_counter(self, name: str, tags: Mapping[str, str]) -> Counter:
        pass

    @abstractmethod
    def create_gauge(self, name: str, tags: Mapping[str, str]) -> Gauge:
        pass


def add_tags_to_metric_name(name: str, tags: Optional[Mapping[str, str]]) -> str:
    """
    Flatten tags into a metric key.

    Tags are appended in sorted order as ``.key=value``:
        add_tags_to_metric_name("reporter_spans", {"result": "ok"})
        -> "reporter_spans.result=ok"
    """
    if not tags:
        return name
    suffix = "".join(f".{key}={tags[key]}" for key in sorted(tags))
    return f"{name}{suffix}"


def _parse_tags(tags: Union[str, Mapping[str, str], None]) -> Dict[str, str]:
    if tags is None:
        return {}
    if isinstance(tags, str):
        parsed = {}
        for entry in tags.split(","):
            entry = entry.strip()
            if not entry:
                continue
            key, _, value = entry.partition("=")
            parsed[key.strip()] = value.strip()
        return parsed
    return dict(tags)


# =============================================================================
# Built-in factories
# =============================================================================

class _NoopCounter(Counter):
    def inc(self, delta: int = 1) -> None:
        pass


class _NoopGauge(Gauge):
    def update(self, amount: int) -> None:
        pass


class NoopMetricsFactory(MetricsFactory):
    """Factory whose instruments discard every value."""

    def create_counter(self, name: str, tags: Mapping[str, str]) -> Counter:
        return _NoopCounter()

    def create_gauge(self, name: str, tags: Mapping[str, str]) -> Gauge:
        return _NoopGauge()


class _Cell:
    """Thread-safe integer cell."""

    def __init__(self):
        self.value = 0
        self._lock = threading.Lock()

    def add(self, delta: int) -> None:
        with self._lock:
            self.value += delta

    def set(self, value: int) -> None:
        with self._lock:
            self.value = value


class _InMemoryCounter(Counter):
    def __init__(self, cell: _Cell):
        self._cell = cell

    def inc(self, delta: int = 1) -> None:
        if delta < 0:
            raise ValueError("Counter can only be incremented")
        self._cell.add(delta)


class _InMemoryGauge(Gauge):
    def __init__(self, cell: _Cell):
        self._cell = cell

    def update(self, amount: int) -> None:
        self._cell.set(amount)


class InMemoryMetricsFactory(MetricsFactory):
    """
    Factory that keeps every value in memory.

    Usage:
        factory = InMemoryMetricsFactory()
        metrics = Metrics(factory)
        metrics.reporter_dropped.inc()
        factory.get_counter("tracegate_tracer_reporter_spans", "result=dropped")  # 1
    """

    def __init__(self):
        self._counters: Dict[str, _Cell] = {}
        self._gauges: Dict[str, _Cell] = {}
        self._lock = threading.Lock()

    def create_counter(self, name: str, tags: Mapping[str, str]) -> Counter:
        return _InMemoryCounter(self._cell(self._counters, name, tags))

    def create_gauge(self, name: str, tags: Mapping[str, str]) -> Gauge:
        return _InMemoryGauge(self._cell(self._gauges, name, tags))

    def get_counter(self, name: str, tags: Union[str, Mapping[str, str], None] = None) -> int:
        """Return a counter value, or -1 if no such counter exists."""
        return self._value(self._counters, name, tags)

    def get_gauge(self, name: str, tags: Union[str, Mapping[str, str], None] = None) -> int:
        """Return a gauge value, or -1 if no such gauge exists."""
        return self._value(self._gauges, name, tags)

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        with self._lock:
            return {
                "counters": {key: cell.value for key, cell in self._counters.items()},
                "gauges": {key: cell.value for key, cell in self._gauges.items()},
            }

    def _cell(self, store: Dict[str, _Cell], name: str, tags: Mapping[str, str]) -> _Cell:
        key = add_tags_to_metric_name(name, tags)
        with self._lock:
            return store.setdefault(key, _Cell())

    def _value(
        self,
        store: Dict[str, _Cell],
        name: str,
        tags: Union[str, Mapping[str, str], None],
    ) -> int:
        key = add_tags_to_metric_name(name, _parse_tags(tags))
        with self._lock:
            cell = store.get(key)
        return cell.value if cell is not None else -1


# =============================================================================
# Tracer metrics
# =============================================================================

@dataclass(frozen=True)
class MetricDefinition:
    """Definition of one tracer instrument."""
    attribute: str
    name: str
    metric_type: MetricType
    description: str
    tags: Dict[str, str] = field(default_factory=dict)


METRIC_DEFINITIONS: List[MetricDefinition] = [
    MetricDefinition(
        "spans_started_sampled", "started_spans", MetricType.COUNTER,
        "Number of sampled spans started", {"sampled": "y"},
    ),
    MetricDefinition(
        "spans_started_not_sampled", "started_spans", MetricType.COUNTER,
        "Number of unsampled spans started", {"sampled": "n"},
    ),
    MetricDefinition(
        "reporter_success", "reporter_spans", MetricType.COUNTER,
        "Number of spans successfully reported", {"result": "ok"},
    ),
    MetricDefinition(
        "reporter_failure", "reporter_spans", MetricType.COUNTER,
        "Number of spans not reported due to a sender failure", {"result": "err"},
    ),
    MetricDefinition(
        "reporter_dropped", "reporter_spans", MetricType.COUNTER,
        "Number of spans dropped due to internal queue overflow", {"result": "dropped"},
    ),
    MetricDefinition(
        "reporter_queue_length", "reporter_queue_length", MetricType.GAUGE,
        "Current number of spans in the reporter queue",
    ),
    MetricDefinition(
        "sampler_retrieved", "sampler_queries", MetricType.COUNTER,
        "Number of times the sampler retrieved a sampling strategy", {"result": "ok"},
    ),
    MetricDefinition(
        "sampler_query_failure", "sampler_queries", MetricType.COUNTER,
        "Number of times the sampler failed to retrieve a sampling strategy", {"result": "err"},
    ),
    MetricDefinition(
        "sampler_updated", "sampler_updates", MetricType.COUNTER,
        "Number of times the sampler was updated from a retrieved strategy", {"result": "ok"},
    ),
    MetricDefinition(
        "sampler_parsing_failure", "sampler_updates", MetricType.COUNTER,
        "Number of retrieved strategies that could not be applied", {"result": "err"},
    ),
    MetricDefinition(
        "filtered_spans", "filtered_spans", MetricType.COUNTER,
        "Number of spans dropped for being shorter than the filter threshold",
    ),
    MetricDefinition(
        "deferred_spans_started", "deferred_spans", MetricType.COUNTER,
        "Number of spans deferred until their parent is reported", {"state": "started"},
    ),
    MetricDefinition(
        "deferred_spans_sent", "deferred_spans", MetricType.COUNTER,
        "Number of deferred spans forwarded with their parent", {"state": "sent"},
    ),
    MetricDefinition(
        "deferred_spans_dropped", "deferred_spans", MetricType.COUNTER,
        "Number of deferred spans dropped", {"state": "dropped"},
    ),
    MetricDefinition(
        "deferred_spans_pending", "deferred_spans_pending", MetricType.GAUGE,
        "Current number of deferred spans",
    ),
]


class Metrics:
    """
    The tracer's instruments, one attribute per definition.

    Usage:
        metrics = Metrics(InMemoryMetricsFactory())
        metrics.reporter_success.inc(5)
    """

    spans_started_sampled: Counter
    spans_started_not_sampled: Counter
    reporter_success: Counter
    reporter_failure: Counter
    reporter_dropped: Counter
    reporter_queue_length: Gauge
    sampler_retrieved: Counter
    sampler_query_failure: Counter
    sampler_updated: Counter
    sampler_parsing_failure: Counter
    filtered_spans: Counter
    deferred_spans_started: Counter
    deferred_spans_sent: Counter
    deferred_spans_dropped: Counter
    deferred_spans_pending: Gauge

    def __init__(
        self,
        factory: Optional[MetricsFactory] = None,
        prefix: str = DEFAULT_METRICS_PREFIX,
    ):
        self.factory = factory or NoopMetricsFactory()
        self.prefix = prefix

        for definition in METRIC_DEFINITIONS:
            name = f"{prefix}{definition.name}"
            if definition.metric_type == MetricType.COUNTER:
                instrument = self.factory.create_counter(name, dict(definition.tags))
            else:
                instrument = self.factory.create_gauge(name, dict(definition.tags))
            setattr(self, definition.attribute, instrument)

    @classmethod
    def in_memory(cls, prefix: str = DEFAULT_METRICS_PREFIX) -> "Metrics":
        return cls(InMemoryMetricsFactory(), prefix)
