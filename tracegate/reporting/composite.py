"""Reporter that fans spans out to several reporters."""

from __future__ import annotations

from typing import List

from tracegate.reporting.base import Reporter
from tracegate.types import FinishedSpan


class CompositeReporter(Reporter):
    """
    Forwards every span to each reporter in order.

    Usage:
        reporter = CompositeReporter(remote_reporter, LoggingReporter())
    """

    def __init__(self, *reporters: Reporter):
        self.reporters: List[Reporter] = list(reporters)

    def report(self, span: FinishedSpan) -> None:
        for reporter in self.reporters:
            reporter.report(span)

    def close(self) -> None:
        for reporter in self.reporters:
            reporter.close()

    def __repr__(self) -> str:
        return f"CompositeReporter(reporters={self.reporters!r})"
