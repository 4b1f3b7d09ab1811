"""
Tracegate Core Types

Value types shared by the sampling and reporting pipelines:
- SamplingStatus (immutable sampling decision plus provenance tags)
- FinishedSpan (the completed unit of work handed to reporters)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


SAMPLER_TYPE_TAG_KEY = "sampler.type"
SAMPLER_PARAM_TAG_KEY = "sampler.param"


def freeze_tags(tags: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
    """Return a read-only copy of a tag mapping."""
    return MappingProxyType(dict(tags or {}))


def sampler_tags(sampler_type: str, param: Any) -> Mapping[str, Any]:
    """Build the provenance tags every sampler attaches to its decisions."""
    return freeze_tags({
        SAMPLER_TYPE_TAG_KEY: sampler_type,
        SAMPLER_PARAM_TAG_KEY: param,
    })


@dataclass(frozen=True)
class SamplingStatus:
    """Result of a sampling decision."""
    sampled: bool
    tags: Mapping[str, Any] = field(default_factory=freeze_tags)

    @classmethod
    def of(cls, sampled: bool, tags: Optional[Mapping[str, Any]] = None) -> "SamplingStatus":
        if isinstance(tags, MappingProxyType):
            return cls(sampled=sampled, tags=tags)
        return cls(sampled=sampled, tags=freeze_tags(tags))

    def to_dict(self) -> dict:
        return {"sampled": self.sampled, "tags": dict(self.tags)}


@dataclass
class FinishedSpan:
    """
    A span that has ended and is ready for export.

    Only the fields the reporting pipeline reads are modelled here; the
    tracer that builds spans owns the rest of the span lifecycle.
    """
    trace_id: int
    span_id: int
    operation_name: str
    parent_id: int = 0
    start_time_micros: int = 0
    duration_micros: int = 0
    sampled: bool = True
    tags: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.parent_id == 0

    def to_dict(self) -> dict:
        return {
            "trace_id": format(self.trace_id & 0xFFFFFFFFFFFFFFFF, "016x"),
            "span_id": format(self.span_id & 0xFFFFFFFFFFFFFFFF, "016x"),
            "parent_id": format(self.parent_id & 0xFFFFFFFFFFFFFFFF, "016x"),
            "operation_name": self.operation_name,
            "start_time_micros": self.start_time_micros,
            "duration_micros": self.duration_micros,
            "sampled": self.sampled,
            "tags": dict(self.tags),
        }
