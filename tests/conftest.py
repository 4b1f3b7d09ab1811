"""
Shared fixtures for the Tracegate test suite.
"""

import itertools
import threading

import pytest

from tracegate.clock import Clock
from tracegate.metrics import InMemoryMetricsFactory, Metrics
from tracegate.senders.base import Sender
from tracegate.types import FinishedSpan


class FakeClock(Clock):
    """Manually advanced clock for deterministic rate limiting."""

    def __init__(self, nanos: int = 0, micros: int = 1_700_000_000_000_000):
        self.nanos = nanos
        self.micros = micros

    def advance(self, seconds: float) -> None:
        self.nanos += int(seconds * 1_000_000_000)
        self.micros += int(seconds * 1_000_000)

    def current_time_micros(self) -> int:
        return self.micros

    def current_nano_ticks(self) -> int:
        return self.nanos

    def is_micros_accurate(self) -> bool:
        return True


class RecordingSender(Sender):
    """
    Sender that records every span it receives.

    ``flush_gate`` can be cleared to block flush() until a test sets it
    again; ``flush_entered`` is set each time a flush starts.
    """

    def __init__(self, flush_every: int = 0):
        self.flush_every = flush_every
        self.buffer = []
        self.received = []
        self.flush_calls = 0
        self.close_calls = 0
        self.flush_gate = threading.Event()
        self.flush_gate.set()
        self.flush_entered = threading.Event()
        self._lock = threading.Lock()

    def append(self, span: FinishedSpan) -> int:
        with self._lock:
            self.buffer.append(span)
            size = len(self.buffer)
        if self.flush_every and size >= self.flush_every:
            return size
        return 0

    def flush(self) -> int:
        self.flush_entered.set()
        self.flush_gate.wait()
        with self._lock:
            self.flush_calls += 1
            batch, self.buffer = self.buffer, []
            self.received.extend(batch)
        return len(batch)

    def close(self) -> int:
        self.close_calls += 1
        return self.flush()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def metrics_factory():
    return InMemoryMetricsFactory()


@pytest.fixture
def metrics(metrics_factory):
    return Metrics(metrics_factory)


@pytest.fixture
def recording_sender():
    return RecordingSender()


@pytest.fixture
def make_span():
    """Factory for finished spans with unique ids."""
    ids = itertools.count(1)

    def _make(operation_name="op", parent_id=0, duration_micros=1000, span_id=None, **kwargs):
        return FinishedSpan(
            trace_id=42,
            span_id=span_id if span_id is not None else next(ids),
            operation_name=operation_name,
            parent_id=parent_id,
            duration_micros=duration_micros,
            **kwargs,
        )

    return _make
