"""
Tracegate Sampling Strategy Document

Pydantic models of the strategy document served by the sampling control
plane. Field names follow the wire format (camelCase) through aliases;
Python code uses the snake_case names.

Example document:
    {
        "strategyType": "PROBABILISTIC",
        "probabilisticSampling": {"samplingRate": 0.25},
        "operationSampling": {
            "defaultSamplingProbability": 0.1,
            "defaultLowerBoundTracesPerSecond": 0.5,
            "perOperationStrategies": [
                {"operation": "GET /users",
                 "probabilisticSampling": {"samplingRate": 1.0}}
            ]
        }
    }
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tracegate.exceptions import SamplingStrategyError


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class StrategyType(str, Enum):
    """Top-level strategy kinds."""
    PROBABILISTIC = "PROBABILISTIC"
    RATE_LIMITING = "RATE_LIMITING"


class ProbabilisticSamplingStrategy(_WireModel):
    """Parameters for probabilistic sampling."""
    sampling_rate: float = Field(alias="samplingRate", ge=0.0, le=1.0)


class RateLimitingSamplingStrategy(_WireModel):
    """Parameters for rate-limited sampling."""
    max_traces_per_second: float = Field(alias="maxTracesPerSecond", ge=0.0)


class PerOperationSamplingParameters(_WireModel):
    """Sampling parameters for one operation."""
    operation: str
    probabilistic_sampling: ProbabilisticSamplingStrategy = Field(alias="probabilisticSampling")


class OperationSamplingParameters(_WireModel):
    """Per-operation sampling parameters with service-wide defaults."""
    default_sampling_probability: float = Field(
        alias="defaultSamplingProbability", ge=0.0, le=1.0,
    )
    default_lower_bound_traces_per_second: float = Field(
        default=0.0, alias="defaultLowerBoundTracesPerSecond", ge=0.0,
    )
    per_operation_strategies: List[PerOperationSamplingParameters] = Field(
        default_factory=list, alias="perOperationStrategies",
    )


class SamplingStrategyResponse(_WireModel):
    """A strategy document returned by a SamplingManager."""
    strategy_type: Optional[StrategyType] = Field(default=None, alias="strategyType")
    probabilistic_sampling: Optional[ProbabilisticSamplingStrategy] = Field(
        default=None, alias="probabilisticSampling",
    )
    rate_limiting_sampling: Optional[RateLimitingSamplingStrategy] = Field(
        default=None, alias="rateLimitingSampling",
    )
    operation_sampling: Optional[OperationSamplingParameters] = Field(
        default=None, alias="operationSampling",
    )

    @classmethod
    def from_json(cls, payload: Union[str, bytes]) -> "SamplingStrategyResponse":
        """Parse a strategy document, raising SamplingStrategyError on bad input."""
        try:
            return cls.model_validate_json(payload)
        except ValidationError as e:
            raise SamplingStrategyError(
                f"Cannot deserialize sampling strategy: {e.error_count()} error(s)",
                cause=e,
            ) from e

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
