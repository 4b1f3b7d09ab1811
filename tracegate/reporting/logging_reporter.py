"""Reporter that writes every span to a structlog logger."""

from __future__ import annotations

from typing import Any, Optional

import structlog

from tracegate.reporting.base import Reporter
from tracegate.types import FinishedSpan


class LoggingReporter(Reporter):
    """Logs one "Span reported" event per span at info level."""

    def __init__(self, logger: Optional[Any] = None):
        self.logger = logger or structlog.get_logger(__name__)

    def report(self, span: FinishedSpan) -> None:
        self.logger.info(
            "Span reported",
            trace_id=format(span.trace_id & 0xFFFFFFFFFFFFFFFF, "x"),
            span_id=format(span.span_id & 0xFFFFFFFFFFFFFFFF, "x"),
            operation=span.operation_name,
            duration_micros=span.duration_micros,
        )
