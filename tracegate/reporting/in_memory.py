"""Reporter that keeps spans in memory, for tests and debugging."""

from __future__ import annotations

import threading
from typing import List

from tracegate.reporting.base import Reporter
from tracegate.types import FinishedSpan


class InMemoryReporter(Reporter):
    """Thread-safe list of reported spans."""

    def __init__(self):
        self._spans: List[FinishedSpan] = []
        self._lock = threading.Lock()

    def report(self, span: FinishedSpan) -> None:
        with self._lock:
            self._spans.append(span)

    @property
    def spans(self) -> List[FinishedSpan]:
        """Copy of the reported spans, in report order."""
        with self._lock:
            return list(self._spans)

    def clear(self) -> None:
        with self._lock:
            self._spans.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._spans)
