"""
Tracegate Exceptions

Error taxonomy for the sampling and reporting pipeline. Only
InvalidSamplerParameterError and ConfigurationError ever reach callers; the
others are raised by collaborators and consumed by background workers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TracegateError(Exception):
    """Base exception for all tracegate errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InvalidSamplerParameterError(TracegateError, ValueError):
    """Raised when a sampler is constructed or updated with invalid parameters."""

    def __init__(self, message: str, parameter: str, value: Any):
        self.parameter = parameter
        self.value = value
        super().__init__(message, details={"parameter": parameter, "value": value})


class SamplingStrategyError(TracegateError):
    """Raised when a sampling strategy cannot be fetched or parsed."""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.service_name = service_name
        details = {"service_name": service_name} if service_name else None
        super().__init__(message, details=details, cause=cause)


class SenderError(TracegateError):
    """Raised when a sender fails to append, flush or close."""

    def __init__(
        self,
        message: str,
        dropped_span_count: int = 0,
        cause: Optional[BaseException] = None,
    ):
        self.dropped_span_count = dropped_span_count
        super().__init__(
            message,
            details={"dropped_span_count": dropped_span_count},
            cause=cause,
        )


class ConfigurationError(TracegateError):
    """Raised for invalid tracer configuration."""
