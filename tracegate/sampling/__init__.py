"""
Tracegate Sampling

Sampler hierarchy:
- ConstSampler, ProbabilisticSampler, RateLimitingSampler (leaves)
- GuaranteedThroughputSampler (probabilistic + rate-limited floor)
- PerOperationSampler (one guaranteed-throughput sampler per operation)
- RemoteControlledSampler (delegate hot-swapped from a SamplingManager)
"""

from tracegate.sampling.base import Sampler
from tracegate.sampling.const import ConstSampler
from tracegate.sampling.probabilistic import (
    DEFAULT_SAMPLING_PROBABILITY,
    ProbabilisticSampler,
)
from tracegate.sampling.rate_limiting import RateLimitingSampler
from tracegate.sampling.guaranteed import GuaranteedThroughputSampler
from tracegate.sampling.per_operation import DEFAULT_MAX_OPERATIONS, PerOperationSampler
from tracegate.sampling.strategy import (
    OperationSamplingParameters,
    PerOperationSamplingParameters,
    ProbabilisticSamplingStrategy,
    RateLimitingSamplingStrategy,
    SamplingStrategyResponse,
    StrategyType,
)
from tracegate.sampling.manager import (
    DEFAULT_HOST_PORT,
    HttpSamplingManager,
    SamplingManager,
)
from tracegate.sampling.remote import DEFAULT_POLLING_INTERVAL, RemoteControlledSampler

__all__ = [
    "Sampler",
    "ConstSampler",
    "ProbabilisticSampler",
    "RateLimitingSampler",
    "GuaranteedThroughputSampler",
    "PerOperationSampler",
    "RemoteControlledSampler",
    "SamplingManager",
    "HttpSamplingManager",
    "SamplingStrategyResponse",
    "StrategyType",
    "ProbabilisticSamplingStrategy",
    "RateLimitingSamplingStrategy",
    "OperationSamplingParameters",
    "PerOperationSamplingParameters",
    "DEFAULT_SAMPLING_PROBABILITY",
    "DEFAULT_MAX_OPERATIONS",
    "DEFAULT_HOST_PORT",
    "DEFAULT_POLLING_INTERVAL",
]
