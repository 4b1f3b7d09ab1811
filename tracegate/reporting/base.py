"""
Tracegate Reporter Base

A reporter receives finished, sampled spans. report() must never block
or raise into the instrumented application.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tracegate.types import FinishedSpan


class Reporter(ABC):
    """Base class for span reporters."""

    @abstractmethod
    def report(self, span: FinishedSpan) -> None:
        """Hand over a finished span."""
        pass

    def close(self) -> None:
        """Flush and release resources. Safe to call more than once."""
        pass
