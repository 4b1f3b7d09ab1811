"""
Tracegate Prometheus Metrics

Bridges the tracer's counters and gauges to prometheus_client:
- each metric name becomes one Counter or Gauge family
- tag keys become label names, tag values select the child
- families are registered on the given CollectorRegistry (the global
  REGISTRY by default)

Requires the ``prometheus`` extra.
"""

from __future__ import annotations

import threading
from typing import Dict, Mapping, Optional, Tuple, Union

import structlog
from prometheus_client import REGISTRY, CollectorRegistry
from prometheus_client import Counter as PrometheusCounter
from prometheus_client import Gauge as PrometheusGauge

from tracegate.metrics import Counter, Gauge, MetricsFactory

logger = structlog.get_logger(__name__)


class _Counter(Counter):
    def __init__(self, child):
        self._child = child

    def inc(self, delta: int = 1) -> None:
        self._child.inc(delta)


class _Gauge(Gauge):
    def __init__(self, child):
        self._child = child

    def update(self, amount: int) -> None:
        self._child.set(amount)


class PrometheusMetricsFactory(MetricsFactory):
    """
    Factory whose instruments are prometheus_client metrics.

    A family is registered the first time its name is seen and reused for
    every later tag combination, so all instruments sharing a name must use
    the same tag keys.

    Usage:
        registry = CollectorRegistry()
        metrics = Metrics(PrometheusMetricsFactory(registry))
        metrics.reporter_success.inc(5)
        registry.get_sample_value(
            "tracegate_tracer_reporter_spans_total", {"result": "ok"}
        )  # 5.0
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._families: Dict[str, Tuple[type, Tuple[str, ...], object]] = {}
        self._lock = threading.Lock()

    def create_counter(self, name: str, tags: Mapping[str, str]) -> Counter:
        return _Counter(self._child(PrometheusCounter, name, tags))

    def create_gauge(self, name: str, tags: Mapping[str, str]) -> Gauge:
        return _Gauge(self._child(PrometheusGauge, name, tags))

    def _child(
        self,
        kind: type,
        name: str,
        tags: Mapping[str, str],
    ) -> Union[PrometheusCounter, PrometheusGauge]:
        label_names = tuple(sorted(tags or {}))

        with self._lock:
            entry = self._families.get(name)
            if entry is None:
                family = kind(name, name, label_names, registry=self.registry)
                self._families[name] = (kind, label_names, family)
                logger.debug("Prometheus metric registered", name=name, labels=label_names)
            else:
                registered_kind, registered_labels, family = entry
                if registered_kind is not kind or registered_labels != label_names:
                    raise ValueError(
                        f"Metric {name} already registered as {registered_kind.__name__} "
                        f"with labels {registered_labels}"
                    )

        if label_names:
            return family.labels(**tags)
        return family
