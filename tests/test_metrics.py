"""
Tracegate Metrics Tests
"""

import pytest

from tracegate.metrics import (
    METRIC_DEFINITIONS,
    InMemoryMetricsFactory,
    Metrics,
    MetricType,
    NoopMetricsFactory,
    add_tags_to_metric_name,
)


class TestMetricNames:
    """Test metric key construction."""

    def test_tags_sorted(self):
        """Test that tags are appended in key order."""
        name = add_tags_to_metric_name("spans", {"z": "1", "a": "2"})

        assert name == "spans.a=2.z=1"

    def test_no_tags(self):
        """Test that a metric without tags keeps its name."""
        assert add_tags_to_metric_name("spans", {}) == "spans"
        assert add_tags_to_metric_name("spans", None) == "spans"


class TestInMemoryMetricsFactory:
    """Test the in-memory metrics factory."""

    def test_counter_by_dict_or_string_tags(self):
        """Test lookups with dict and string tags."""
        factory = InMemoryMetricsFactory()
        counter = factory.create_counter("requests", {"result": "ok", "path": "/"})

        counter.inc(3)
        counter.inc()

        assert factory.get_counter("requests", {"result": "ok", "path": "/"}) == 4
        assert factory.get_counter("requests", "path=/, result=ok") == 4

    def test_unknown_metric_is_minus_one(self):
        """Test that unknown metrics report -1."""
        factory = InMemoryMetricsFactory()

        assert factory.get_counter("missing") == -1
        assert factory.get_gauge("missing") == -1

    def test_gauge_keeps_last_value(self):
        """Test that gauges store the latest update."""
        factory = InMemoryMetricsFactory()
        gauge = factory.create_gauge("queue", {})

        gauge.update(5)
        gauge.update(2)

        assert factory.get_gauge("queue") == 2

    def test_counter_rejects_negative_delta(self):
        """Test that counters only go up."""
        counter = InMemoryMetricsFactory().create_counter("c", {})

        with pytest.raises(ValueError):
            counter.inc(-1)

    def test_same_name_shares_cell(self):
        """Test that instruments with the same key share a value."""
        factory = InMemoryMetricsFactory()
        factory.create_counter("c", {"k": "v"}).inc(1)
        factory.create_counter("c", {"k": "v"}).inc(2)

        assert factory.get_counter("c", "k=v") == 3

    def test_snapshot(self):
        """Test the snapshot of all values."""
        factory = InMemoryMetricsFactory()
        factory.create_counter("c", {"k": "v"}).inc(2)
        factory.create_gauge("g", {}).update(7)

        assert factory.snapshot() == {"counters": {"c.k=v": 2}, "gauges": {"g": 7}}


class TestTracerMetrics:
    """Test the tracer metric set."""

    def test_all_definitions_created(self):
        """Test that every definition becomes an attribute."""
        metrics = Metrics(InMemoryMetricsFactory())

        for definition in METRIC_DEFINITIONS:
            assert hasattr(metrics, definition.attribute)

    def test_names_and_tags(self):
        """Test the emitted names for a few instruments."""
        factory = InMemoryMetricsFactory()
        metrics = Metrics(factory)

        metrics.reporter_dropped.inc(2)
        metrics.sampler_query_failure.inc(1)
        metrics.spans_started_sampled.inc(1)
        metrics.reporter_queue_length.update(9)

        assert factory.get_counter("tracegate_tracer_reporter_spans", "result=dropped") == 2
        assert factory.get_counter("tracegate_tracer_sampler_queries", "result=err") == 1
        assert factory.get_counter("tracegate_tracer_started_spans", "sampled=y") == 1
        assert factory.get_gauge("tracegate_tracer_reporter_queue_length") == 9

    def test_custom_prefix(self):
        """Test a custom metric prefix."""
        factory = InMemoryMetricsFactory()
        Metrics(factory, prefix="svc_").reporter_success.inc(1)

        assert factory.get_counter("svc_reporter_spans", "result=ok") == 1

    def test_noop_default(self):
        """Test that metrics without a factory discard values."""
        metrics = Metrics()

        metrics.reporter_success.inc(10)
        metrics.reporter_queue_length.update(1)

        assert isinstance(metrics.factory, NoopMetricsFactory)

    def test_in_memory_constructor(self):
        """Test the in-memory shortcut."""
        metrics = Metrics.in_memory()

        metrics.filtered_spans.inc(1)

        assert metrics.factory.get_counter("tracegate_tracer_filtered_spans") == 1

    def test_definition_types(self):
        """Test that queue length and pending spans are gauges."""
        gauges = {d.attribute for d in METRIC_DEFINITIONS if d.metric_type == MetricType.GAUGE}

        assert gauges == {"reporter_queue_length", "deferred_spans_pending"}
