"""
Tracegate - client-side sampling and reporting for distributed tracing

Decides which traces to keep and ships kept spans to a collector with:
- Adaptive sampling (probabilistic, rate-limited, per-operation floors)
- Sampling strategies hot-swapped from a remote control plane
- Non-blocking, bounded, batched span reporting
"""

__version__ = "1.0.0"
__author__ = "Tracegate Team"

from tracegate.config import ReporterConfig, SamplerConfig, TracerConfig
from tracegate.exceptions import (
    ConfigurationError,
    InvalidSamplerParameterError,
    SamplingStrategyError,
    SenderError,
    TracegateError,
)
from tracegate.metrics import InMemoryMetricsFactory, Metrics, NoopMetricsFactory
from tracegate.pipeline import TracingPipeline
from tracegate.types import FinishedSpan, SamplingStatus

__all__ = [
    "TracerConfig",
    "SamplerConfig",
    "ReporterConfig",
    "TracingPipeline",
    "Metrics",
    "InMemoryMetricsFactory",
    "NoopMetricsFactory",
    "FinishedSpan",
    "SamplingStatus",
    "TracegateError",
    "InvalidSamplerParameterError",
    "SamplingStrategyError",
    "SenderError",
    "ConfigurationError",
    "__version__",
]
