"""
Tracegate Filtering Reporter

Reduces span volume before it reaches the delegate reporter:

- spans shorter than ``filter_spans_under_micros`` are discarded
- spans shorter than ``defer_spans_under_micros`` are held back until an
  ancestor qualifies, then forwarded just before that ancestor
- a deferred subtree whose root never qualifies is dropped

Children finish before their parents, so pending spans are keyed by
parent span id and promoted up the tree as each short span arrives.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from tracegate.metrics import Metrics
from tracegate.reporting.base import Reporter
from tracegate.types import FinishedSpan

DEFAULT_FILTER_SPANS_UNDER_MICROS = 0
DEFAULT_DEFER_SPANS_UNDER_MICROS = 0


class FilteringReporter(Reporter):
    """
    Duration-based filter in front of another reporter.

    Usage:
        reporter = FilteringReporter(
            RemoteReporter(sender),
            filter_spans_under_micros=100,
            defer_spans_under_micros=5_000,
        )
    """

    def __init__(
        self,
        delegate: Reporter,
        filter_spans_under_micros: int = DEFAULT_FILTER_SPANS_UNDER_MICROS,
        defer_spans_under_micros: int = DEFAULT_DEFER_SPANS_UNDER_MICROS,
        metrics: Optional[Metrics] = None,
    ):
        self.delegate = delegate
        self.filter_spans_under_micros = filter_spans_under_micros
        self.defer_spans_under_micros = defer_spans_under_micros
        self.metrics = metrics or Metrics()

        self._pending_by_parent: Dict[int, List[FinishedSpan]] = {}
        self._pending_count = 0
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        return self._pending_count

    def report(self, span: FinishedSpan) -> None:
        with self._lock:
            to_forward = self._filter(span)

        for pending in to_forward:
            self.delegate.report(pending)

    def _filter(self, span: FinishedSpan) -> List[FinishedSpan]:
        pending_children = self._pending_by_parent.pop(span.span_id, None)

        if span.duration_micros < self.filter_spans_under_micros:
            self.metrics.filtered_spans.inc(1)
            if pending_children:
                self._drop_pending(pending_children)
            return []

        if span.duration_micros < self.defer_spans_under_micros:
            self._defer(span, pending_children)
            return []

        if not pending_children:
            return [span]

        self._release_pending(len(pending_children))
        self.metrics.deferred_spans_sent.inc(len(pending_children))
        return pending_children + [span]

    def _defer(self, span: FinishedSpan, pending_children: Optional[List[FinishedSpan]]) -> None:
        if span.is_root:
            # nothing left to wait for
            self.metrics.filtered_spans.inc(1)
            if pending_children:
                self._drop_pending(pending_children)
            return

        siblings = self._pending_by_parent.setdefault(span.parent_id, [])
        if pending_children:
            siblings.extend(pending_children)
        siblings.append(span)

        self._pending_count += 1
        self.metrics.deferred_spans_started.inc(1)
        self.metrics.deferred_spans_pending.update(self._pending_count)

    def _drop_pending(self, spans: List[FinishedSpan]) -> None:
        self._release_pending(len(spans))
        self.metrics.deferred_spans_dropped.inc(len(spans))

    def _release_pending(self, count: int) -> None:
        self._pending_count -= count
        self.metrics.deferred_spans_pending.update(self._pending_count)

    def close(self) -> None:
        with self._lock:
            dropped = sum(len(spans) for spans in self._pending_by_parent.values())
            self._pending_by_parent.clear()
            self._pending_count = 0

        if dropped:
            self.metrics.deferred_spans_dropped.inc(dropped)
        self.metrics.deferred_spans_pending.update(0)
        self.delegate.close()
