"""
Tracegate Configuration

Typed settings for the sampler and reporter with:
- Environment-based configuration (TRACEGATE_ prefix, ``__`` for nesting)
- JSON config files
- Factories that build the configured components

Every component receives its settings through its constructor; there is
no process-wide configuration object.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from tracegate.exceptions import ConfigurationError
from tracegate.metrics import DEFAULT_METRICS_PREFIX, Metrics, MetricsFactory
from tracegate.pipeline import TracingPipeline
from tracegate.reporting.base import Reporter
from tracegate.reporting.composite import CompositeReporter
from tracegate.reporting.filtering import FilteringReporter
from tracegate.reporting.logging_reporter import LoggingReporter
from tracegate.reporting.remote import (
    DEFAULT_CLOSE_DRAIN_TIMEOUT,
    DEFAULT_CLOSE_ENQUEUE_TIMEOUT,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_MAX_QUEUE_SIZE,
    RemoteReporter,
)
from tracegate.sampling.base import Sampler
from tracegate.sampling.const import ConstSampler
from tracegate.sampling.manager import DEFAULT_HOST_PORT, DEFAULT_TIMEOUT, HttpSamplingManager
from tracegate.sampling.per_operation import DEFAULT_MAX_OPERATIONS
from tracegate.sampling.probabilistic import DEFAULT_SAMPLING_PROBABILITY, ProbabilisticSampler
from tracegate.sampling.rate_limiting import RateLimitingSampler
from tracegate.sampling.remote import DEFAULT_POLLING_INTERVAL, RemoteControlledSampler
from tracegate.senders.base import DEFAULT_MAX_BATCH_SIZE, Sender
from tracegate.senders.http import HttpSender
from tracegate.senders.noop import NoopSender


class SamplerType(str, Enum):
    """Sampler selected by configuration."""
    CONST = "const"
    PROBABILISTIC = "probabilistic"
    RATE_LIMITING = "ratelimiting"
    REMOTE = "remote"


class SamplerConfig(BaseModel):
    """Configuration for the sampler."""
    type: SamplerType = SamplerType.REMOTE
    # const: non-zero samples everything; probabilistic: rate;
    # ratelimiting: traces per second; remote: initial probabilistic rate
    param: float = DEFAULT_SAMPLING_PROBABILITY
    manager_host_port: str = DEFAULT_HOST_PORT
    polling_interval: float = Field(default=DEFAULT_POLLING_INTERVAL, gt=0)  # seconds
    max_operations: int = Field(default=DEFAULT_MAX_OPERATIONS, gt=0)
    http_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)  # seconds

    def create_sampler(self, service_name: str, metrics: Optional[Metrics] = None) -> Sampler:
        """Build the configured sampler."""
        if self.type == SamplerType.CONST:
            return ConstSampler(self.param != 0)
        if self.type == SamplerType.PROBABILISTIC:
            return ProbabilisticSampler(self.param)
        if self.type == SamplerType.RATE_LIMITING:
            return RateLimitingSampler(self.param)
        if self.type == SamplerType.REMOTE:
            return RemoteControlledSampler(
                service_name,
                sampling_manager=HttpSamplingManager(self.manager_host_port, timeout=self.http_timeout),
                initial_sampler=ProbabilisticSampler(self.param),
                metrics=metrics,
                polling_interval=self.polling_interval,
                max_operations=self.max_operations,
                owns_manager=True,
            )
        raise ConfigurationError(f"Invalid sampling strategy {self.type}")


class ReporterConfig(BaseModel):
    """Configuration for the reporter."""
    log_spans: bool = False
    flush_interval: float = Field(default=DEFAULT_FLUSH_INTERVAL, gt=0)  # seconds
    max_queue_size: int = Field(default=DEFAULT_MAX_QUEUE_SIZE, gt=0)
    close_enqueue_timeout: float = Field(default=DEFAULT_CLOSE_ENQUEUE_TIMEOUT, ge=0)
    close_drain_timeout: float = Field(default=DEFAULT_CLOSE_DRAIN_TIMEOUT, ge=0)

    # Sender
    endpoint: Optional[str] = None
    auth_token: Optional[str] = None
    max_batch_size: int = Field(default=DEFAULT_MAX_BATCH_SIZE, gt=0)
    http_timeout: float = Field(default=5.0, gt=0)

    # Filtering (0 disables)
    filter_spans_under_micros: int = Field(default=0, ge=0)
    defer_spans_under_micros: int = Field(default=0, ge=0)

    def create_sender(self) -> Sender:
        if self.endpoint:
            return HttpSender(
                self.endpoint,
                auth_token=self.auth_token,
                max_batch_size=self.max_batch_size,
                timeout=self.http_timeout,
            )
        return NoopSender()

    def create_reporter(
        self,
        metrics: Optional[Metrics] = None,
        sender: Optional[Sender] = None,
    ) -> Reporter:
        """Build the configured reporter chain."""
        metrics = metrics or Metrics()

        reporter: Reporter = RemoteReporter(
            sender or self.create_sender(),
            flush_interval=self.flush_interval,
            max_queue_size=self.max_queue_size,
            close_enqueue_timeout=self.close_enqueue_timeout,
            close_drain_timeout=self.close_drain_timeout,
            metrics=metrics,
        )

        if self.filter_spans_under_micros or self.defer_spans_under_micros:
            reporter = FilteringReporter(
                reporter,
                filter_spans_under_micros=self.filter_spans_under_micros,
                defer_spans_under_micros=self.defer_spans_under_micros,
                metrics=metrics,
            )

        if self.log_spans:
            reporter = CompositeReporter(reporter, LoggingReporter())

        return reporter


class TracerConfig(BaseSettings):
    """
    Main Tracegate Configuration

    Loads configuration from environment variables and/or config files.
    Environment variables are prefixed with TRACEGATE_
    (e.g., TRACEGATE_SAMPLER__TYPE=const)
    """

    service_name: str = Field(min_length=1)
    metrics_prefix: str = DEFAULT_METRICS_PREFIX

    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)

    model_config = {
        "env_prefix": "TRACEGATE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "TracerConfig":
        """Load configuration from a JSON file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config_data = json.load(f)

        return cls(**config_data)

    def to_file(self, config_path: Union[str, Path]) -> None:
        """Save configuration to a JSON file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    def build(
        self,
        metrics_factory: Optional[MetricsFactory] = None,
        sender: Optional[Sender] = None,
    ) -> TracingPipeline:
        """Build the sampler, reporter and metrics described by this config."""
        metrics = Metrics(metrics_factory, prefix=self.metrics_prefix)
        return TracingPipeline(
            service_name=self.service_name,
            sampler=self.sampler.create_sampler(self.service_name, metrics),
            reporter=self.reporter.create_reporter(metrics, sender),
            metrics=metrics,
        )
