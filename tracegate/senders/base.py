"""
Tracegate Sender Base

A sender turns finished spans into wire batches:
- append(span) buffers a span; a non-zero return asks the caller to flush
- flush() transmits the buffer and returns the number of spans sent
- close() flushes whatever is left and releases resources

Senders are driven by a single reporter worker thread, but BufferedSender
guards its buffer so it can also be used directly from several threads.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import List

import structlog

from tracegate.exceptions import SenderError
from tracegate.types import FinishedSpan

logger = structlog.get_logger(__name__)

DEFAULT_MAX_BATCH_SIZE = 100


class Sender(ABC):
    """Base class for span senders."""

    @abstractmethod
    def append(self, span: FinishedSpan) -> int:
        """
        Buffer a span.

        Returns:
            0 when the span was buffered and no flush is needed, otherwise
            the buffer size, signalling that the caller should flush now
        """
        pass

    @abstractmethod
    def flush(self) -> int:
        """Send buffered spans. Returns the number of spans sent."""
        pass

    @abstractmethod
    def close(self) -> int:
        """Flush remaining spans and release resources."""
        pass


class BufferedSender(Sender):
    """
    Sender that accumulates spans and ships them in batches.

    Subclasses implement _send(batch). A failed batch is discarded and
    reported through SenderError so the reporter can count it.
    """

    def __init__(self, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE):
        if max_batch_size <= 0:
            raise ValueError("max_batch_size must be positive")

        self.max_batch_size = max_batch_size
        self._buffer: List[FinishedSpan] = []
        self._lock = threading.Lock()

    @property
    def buffered(self) -> int:
        with self._lock:
            return len(self._buffer)

    def append(self, span: FinishedSpan) -> int:
        with self._lock:
            self._buffer.append(span)
            size = len(self._buffer)
        return size if size >= self.max_batch_size else 0

    def flush(self) -> int:
        with self._lock:
            batch = self._buffer
            self._buffer = []

        if not batch:
            return 0

        try:
            self._send(batch)
        except SenderError:
            raise
        except Exception as e:
            raise SenderError(
                f"Failed to send {len(batch)} spans",
                dropped_span_count=len(batch),
                cause=e,
            ) from e

        logger.debug("Batch sent", spans=len(batch), sender=type(self).__name__)
        return len(batch)

    def close(self) -> int:
        return self.flush()

    @abstractmethod
    def _send(self, batch: List[FinishedSpan]) -> None:
        """Transmit one batch. Raise SenderError on failure."""
        pass
