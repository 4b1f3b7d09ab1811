"""
Tracegate Per-Operation Sampler Tests
"""

import threading

import pytest

from tracegate.exceptions import InvalidSamplerParameterError
from tracegate.sampling import (
    GuaranteedThroughputSampler,
    OperationSamplingParameters,
    PerOperationSampler,
    PerOperationSamplingParameters,
    ProbabilisticSamplingStrategy,
)
from tracegate.types import SAMPLER_TYPE_TAG_KEY

MAX_INT64 = (1 << 63) - 1


def make_parameters(default_rate=0.5, lower_bound=1.0, operations=None):
    return OperationSamplingParameters(
        default_sampling_probability=default_rate,
        default_lower_bound_traces_per_second=lower_bound,
        per_operation_strategies=[
            PerOperationSamplingParameters(
                operation=name,
                probabilistic_sampling=ProbabilisticSamplingStrategy(sampling_rate=rate),
            )
            for name, rate in (operations or {}).items()
        ],
    )


class TestPerOperationSampler:
    """Test per-operation sampling and the operation table."""

    def test_table_capped_at_max_operations(self, fake_clock):
        """Test that a third unseen operation falls back to the default sampler."""
        sampler = PerOperationSampler(2, make_parameters(), fake_clock)

        sampler.sample("op1", 1)
        sampler.sample("op2", 1)
        status = sampler.sample("op3", MAX_INT64)

        assert set(sampler.operation_samplers) == {"op1", "op2"}
        assert status.tags[SAMPLER_TYPE_TAG_KEY] == "probabilistic"
        assert not status.sampled

        sampler.sample("op4", 1)
        assert len(sampler.operation_samplers) == 2

    def test_new_operation_seeded_with_defaults(self, fake_clock):
        """Test lazily created samplers use the default rate and floor."""
        sampler = PerOperationSampler(10, make_parameters(0.2, 3.0), fake_clock)

        sampler.sample("checkout", 1)

        created = sampler.operation_samplers["checkout"]
        assert created == GuaranteedThroughputSampler(0.2, 3.0)

    def test_configured_operations_created_up_front(self, fake_clock):
        """Test operations named in the parameters get their own rate."""
        sampler = PerOperationSampler(
            10,
            make_parameters(operations={"GET /users": 1.0, "POST /orders": 0.0}),
            fake_clock,
        )

        samplers = sampler.operation_samplers
        assert samplers["GET /users"].sampling_rate == 1.0
        assert samplers["POST /orders"].sampling_rate == 0.0
        assert sampler.sample("GET /users", MAX_INT64).sampled

    def test_configured_operations_respect_cap(self, fake_clock):
        """Test that the initial parameters cannot exceed max_operations."""
        sampler = PerOperationSampler(
            1,
            make_parameters(operations={"a": 0.1, "b": 0.2}),
            fake_clock,
        )

        assert len(sampler.operation_samplers) == 1

    def test_update_without_changes(self, fake_clock):
        """Test that re-applying identical parameters reports no change."""
        parameters = make_parameters(operations={"a": 0.1})
        sampler = PerOperationSampler(10, parameters, fake_clock)

        assert sampler.update(parameters) is False

    def test_update_reconverges_unnamed_operations(self, fake_clock):
        """Test that existing operations follow new defaults."""
        sampler = PerOperationSampler(10, make_parameters(0.5, 1.0), fake_clock)
        sampler.sample("lazy", 1)

        assert sampler.update(make_parameters(0.1, 2.0)) is True

        lazy = sampler.operation_samplers["lazy"]
        assert lazy.sampling_rate == 0.1
        assert lazy.lower_bound == 2.0
        assert sampler.default_sampler.sampling_rate == 0.1
        assert sampler.lower_bound == 2.0

    def test_update_named_operation(self, fake_clock):
        """Test that named operations are updated in place."""
        sampler = PerOperationSampler(10, make_parameters(operations={"a": 0.1}), fake_clock)
        original = sampler.operation_samplers["a"]

        assert sampler.update(make_parameters(operations={"a": 0.9})) is True

        assert sampler.operation_samplers["a"] is original
        assert original.sampling_rate == 0.9

    def test_update_adds_operation(self, fake_clock):
        """Test that update() creates samplers for new named operations."""
        sampler = PerOperationSampler(10, make_parameters(), fake_clock)

        assert sampler.update(make_parameters(operations={"new": 0.3})) is True
        assert sampler.operation_samplers["new"].sampling_rate == 0.3

    def test_update_respects_cap(self, fake_clock):
        """Test that update() does not grow the table past the cap."""
        sampler = PerOperationSampler(1, make_parameters(operations={"a": 0.1}), fake_clock)

        sampler.update(make_parameters(operations={"a": 0.1, "b": 0.2}))

        assert set(sampler.operation_samplers) == {"a"}

    def test_concurrent_insert_shares_one_sampler(self, fake_clock):
        """Test racing callers end up with a single sampler per operation."""
        sampler = PerOperationSampler(100, make_parameters(), fake_clock)
        start = threading.Barrier(8)

        def worker():
            start.wait()
            for i in range(200):
                sampler.sample(f"op{i % 20}", i)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(sampler.operation_samplers) == 20

    def test_invalid_max_operations(self):
        """Test that a non-positive cap is rejected."""
        with pytest.raises(InvalidSamplerParameterError):
            PerOperationSampler(0, make_parameters())

    def test_parameters_from_wire_names(self):
        """Test that camelCase documents populate the parameters."""
        parameters = OperationSamplingParameters.model_validate({
            "defaultSamplingProbability": 0.4,
            "defaultLowerBoundTracesPerSecond": 0.5,
            "perOperationStrategies": [
                {"operation": "op", "probabilisticSampling": {"samplingRate": 0.7}},
            ],
        })

        sampler = PerOperationSampler(5, parameters)

        assert sampler.default_sampler.sampling_rate == 0.4
        assert sampler.operation_samplers["op"].sampling_rate == 0.7

    def test_equality(self, fake_clock):
        """Test value equality across the whole table."""
        first = PerOperationSampler(5, make_parameters(operations={"a": 0.1}), fake_clock)
        second = PerOperationSampler(5, make_parameters(operations={"a": 0.1}), fake_clock)

        assert first == second
        second.update(make_parameters(operations={"a": 0.2}))
        assert first != second

    def test_close_is_idempotent(self):
        """Test that close() can be called twice."""
        sampler = PerOperationSampler(5, make_parameters())
        sampler.close()
        sampler.close()
