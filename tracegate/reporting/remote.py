"""
Tracegate Remote Reporter

Asynchronous, bounded delivery pipeline between the application and a
Sender:

- report() enqueues an append command without blocking; a full queue
  drops the span and counts it
- one worker thread executes commands in FIFO order against the sender
- a periodic timer enqueues flush commands
- close() enqueues a close command, waits a bounded time for the worker
  to drain, then closes the sender

Sender failures are counted and logged, never raised to callers.
"""

from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import structlog

from tracegate.exceptions import SenderError
from tracegate.metrics import Metrics
from tracegate.reporting.base import Reporter
from tracegate.scheduling import PeriodicTask
from tracegate.senders.base import Sender
from tracegate.senders.noop import NoopSender
from tracegate.types import FinishedSpan

logger = structlog.get_logger(__name__)

DEFAULT_FLUSH_INTERVAL = 1.0
DEFAULT_MAX_QUEUE_SIZE = 100
DEFAULT_CLOSE_ENQUEUE_TIMEOUT = 1.0
DEFAULT_CLOSE_DRAIN_TIMEOUT = 10.0


# =============================================================================
# Worker commands
# =============================================================================

class _Command(ABC):
    name: str = ""

    @abstractmethod
    def execute(self, sender: Sender) -> int:
        """Run against the sender. Returns the number of spans delivered."""
        pass

    def spans_lost_on_error(self, error: Exception) -> int:
        if isinstance(error, SenderError):
            return error.dropped_span_count
        return 0


class _AppendCommand(_Command):
    name = "append"

    def __init__(self, span: FinishedSpan):
        self.span = span

    def execute(self, sender: Sender) -> int:
        if sender.append(self.span):
            return sender.flush()
        return 0

    def spans_lost_on_error(self, error: Exception) -> int:
        if isinstance(error, SenderError):
            return max(error.dropped_span_count, 1)
        return 1


class _FlushCommand(_Command):
    name = "flush"

    def execute(self, sender: Sender) -> int:
        return sender.flush()


class _CloseCommand(_Command):
    name = "close"

    def execute(self, sender: Sender) -> int:
        return sender.flush()


# =============================================================================
# Reporter
# =============================================================================

class RemoteReporter(Reporter):
    """
    Reporter that ships spans through a Sender on a background worker.

    Usage:
        reporter = RemoteReporter(
            HttpSender("http://collector:14268/api/spans"),
            flush_interval=1.0,
            max_queue_size=100,
        )
        reporter.report(span)
        ...
        reporter.close()
    """

    def __init__(
        self,
        sender: Optional[Sender] = None,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE,
        close_enqueue_timeout: float = DEFAULT_CLOSE_ENQUEUE_TIMEOUT,
        close_drain_timeout: float = DEFAULT_CLOSE_DRAIN_TIMEOUT,
        metrics: Optional[Metrics] = None,
    ):
        if max_queue_size <= 0:
            raise ValueError("max_queue_size must be positive")

        self.sender = sender or NoopSender()
        self.flush_interval = flush_interval
        self.max_queue_size = max_queue_size
        self.close_enqueue_timeout = close_enqueue_timeout
        self.close_drain_timeout = close_drain_timeout
        self.metrics = metrics or Metrics()

        self._queue: "queue.Queue[_Command]" = queue.Queue(maxsize=max_queue_size)
        self._closed = False
        self._abandoned = False
        self._close_lock = threading.Lock()

        # command name -> currently failing
        self._failing: Dict[str, bool] = {}

        self._worker = threading.Thread(
            target=self._process_queue,
            name="tracegate.RemoteReporter-QueueProcessor",
            daemon=True,
        )
        self._worker.start()

        self._flush_timer = PeriodicTask(
            self.flush,
            interval=flush_interval,
            name="tracegate.RemoteReporter-FlushTimer",
        )
        self._flush_timer.start()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def queue_length(self) -> int:
        return self._queue.qsize()

    def report(self, span: FinishedSpan) -> None:
        # no append may land behind the close command
        with self._close_lock:
            if self._closed:
                accepted = False
            else:
                try:
                    self._queue.put_nowait(_AppendCommand(span))
                    accepted = True
                except queue.Full:
                    accepted = False

        if not accepted:
            self.metrics.reporter_dropped.inc(1)

    def flush(self) -> None:
        """Ask the worker to flush the sender. Skipped when the queue is full."""
        self.metrics.reporter_queue_length.update(self._queue.qsize())
        with self._close_lock:
            if self._closed:
                return
            try:
                self._queue.put_nowait(_FlushCommand())
            except queue.Full:
                # the worker is backed up; the next tick will try again
                pass

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        self._flush_timer.cancel()

        try:
            try:
                self._queue.put(_CloseCommand(), timeout=self.close_enqueue_timeout)
            except queue.Full:
                logger.warning(
                    "Unable to cleanly close RemoteReporter, command queue is full",
                    max_queue_size=self.max_queue_size,
                )
                self._abandon_queue()
                return

            self._worker.join(self.close_drain_timeout)
            if self._worker.is_alive():
                logger.warning(
                    "RemoteReporter did not drain its queue in time",
                    close_drain_timeout=self.close_drain_timeout,
                    queue_length=self._queue.qsize(),
                )
                self._abandon_queue()
            else:
                self._drain_queue()
        finally:
            self._close_sender()

    def _abandon_queue(self) -> None:
        self._abandoned = True
        self._drain_queue()

        # wake the worker if it is waiting on an empty queue
        try:
            self._queue.put_nowait(_CloseCommand())
        except queue.Full:
            pass

    def _drain_queue(self) -> None:
        """Discard commands the worker will never run, counting their spans."""
        dropped = 0
        while True:
            try:
                command = self._queue.get_nowait()
            except queue.Empty:
                break
            if isinstance(command, _AppendCommand):
                dropped += 1

        if dropped:
            self.metrics.reporter_dropped.inc(dropped)
            logger.warning("Dropped queued spans on close", dropped=dropped)

    def _close_sender(self) -> None:
        try:
            sent = self.sender.close()
            if sent:
                self.metrics.reporter_success.inc(sent)
        except SenderError as e:
            self.metrics.reporter_failure.inc(e.dropped_span_count)
            logger.warning("Failed to close sender", error=str(e))
        except Exception:
            logger.exception("Failed to close sender")

        self.metrics.reporter_queue_length.update(0)

    def _process_queue(self) -> None:
        while not self._abandoned:
            command = self._queue.get()
            if self._abandoned:
                return

            try:
                sent = command.execute(self.sender)
                if sent:
                    self.metrics.reporter_success.inc(sent)
                self._command_succeeded(command)
            except Exception as e:
                self._command_failed(command, e)

            if isinstance(command, _CloseCommand):
                return

    def _command_succeeded(self, command: _Command) -> None:
        if self._failing.get(command.name):
            self._failing[command.name] = False
            logger.info("RemoteReporter command is working again", command=command.name)

    def _command_failed(self, command: _Command, error: Exception) -> None:
        lost = command.spans_lost_on_error(error)
        if lost:
            self.metrics.reporter_failure.inc(lost)

        if self._failing.get(command.name):
            return
        self._failing[command.name] = True

        if isinstance(error, SenderError):
            logger.warning(
                "RemoteReporter command failed",
                command=command.name,
                dropped=lost,
                error=str(error),
            )
        else:
            logger.exception(
                "RemoteReporter command raised unexpectedly",
                command=command.name,
                dropped=lost,
            )

    def __repr__(self) -> str:
        return (
            f"RemoteReporter(sender={self.sender!r}, flush_interval={self.flush_interval}, "
            f"max_queue_size={self.max_queue_size})"
        )
