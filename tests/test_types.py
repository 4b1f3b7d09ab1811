"""
Tracegate Core Type Tests
"""

import dataclasses

import pytest

from tracegate.types import FinishedSpan, SamplingStatus, sampler_tags


class TestSamplingStatus:
    """Test the immutable sampling decision."""

    def test_frozen(self):
        """Test that a status cannot be reassigned."""
        status = SamplingStatus.of(True, {"k": "v"})

        with pytest.raises(dataclasses.FrozenInstanceError):
            status.sampled = False

    def test_tags_copied(self):
        """Test that later changes to the source dict are not visible."""
        tags = {"k": "v"}
        status = SamplingStatus.of(True, tags)
        tags["k"] = "changed"

        assert status.tags["k"] == "v"

    def test_to_dict(self):
        """Test the plain dict form."""
        status = SamplingStatus.of(False, sampler_tags("const", False))

        assert status.to_dict() == {
            "sampled": False,
            "tags": {"sampler.type": "const", "sampler.param": False},
        }

    def test_default_tags_empty(self):
        """Test a status without tags."""
        assert dict(SamplingStatus(sampled=True).tags) == {}


class TestFinishedSpan:
    """Test the finished span value."""

    def test_root_detection(self):
        """Test that spans without a parent are roots."""
        assert FinishedSpan(1, 2, "op").is_root
        assert not FinishedSpan(1, 2, "op", parent_id=3).is_root

    def test_to_dict_hex_ids(self):
        """Test that ids are rendered as 16-digit hex, negatives as unsigned."""
        span = FinishedSpan(trace_id=-1, span_id=255, operation_name="op", duration_micros=12)

        data = span.to_dict()

        assert data["trace_id"] == "ffffffffffffffff"
        assert data["span_id"] == "00000000000000ff"
        assert data["parent_id"] == "0000000000000000"
        assert data["duration_micros"] == 12
