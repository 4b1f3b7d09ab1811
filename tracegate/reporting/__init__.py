"""
Tracegate Reporting

- RemoteReporter: bounded queue + worker + periodic flush over a Sender
- CompositeReporter, LoggingReporter, InMemoryReporter
- FilteringReporter: duration-based filter and deferral
"""

from tracegate.reporting.base import Reporter
from tracegate.reporting.remote import (
    DEFAULT_CLOSE_DRAIN_TIMEOUT,
    DEFAULT_CLOSE_ENQUEUE_TIMEOUT,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_MAX_QUEUE_SIZE,
    RemoteReporter,
)
from tracegate.reporting.composite import CompositeReporter
from tracegate.reporting.logging_reporter import LoggingReporter
from tracegate.reporting.in_memory import InMemoryReporter
from tracegate.reporting.filtering import FilteringReporter

__all__ = [
    "Reporter",
    "RemoteReporter",
    "CompositeReporter",
    "LoggingReporter",
    "InMemoryReporter",
    "FilteringReporter",
    "DEFAULT_FLUSH_INTERVAL",
    "DEFAULT_MAX_QUEUE_SIZE",
    "DEFAULT_CLOSE_ENQUEUE_TIMEOUT",
    "DEFAULT_CLOSE_DRAIN_TIMEOUT",
]
