"""
Tracegate Logging

structlog setup for applications embedding the tracer. The library only
obtains loggers; nothing is configured on import.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Union

import structlog


def add_service_context_processor(service_name: str):
    """Create a processor that stamps the traced service name on events."""

    def processor(
        logger: Any,
        method_name: str,
        event_dict: Dict[str, Any],
    ) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    service_name: str = "",
) -> None:
    """
    Configure structlog over the stdlib logging module.

    Call this at application startup.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if service_name:
        processors.append(add_service_context_processor(service_name))
    processors.append(structlog.processors.StackInfoRenderer())

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
