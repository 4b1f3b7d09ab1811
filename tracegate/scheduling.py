"""
Tracegate Scheduling

Daemon periodic task used for the sampler poller and the reporter flush
timer. A failing tick is logged and the schedule continues.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class PeriodicTask:
    """
    Runs ``target`` every ``interval`` seconds on a dedicated daemon thread.

    The first run happens after ``initial_delay`` seconds (defaults to the
    interval). cancel() is idempotent and does not wait for a tick in
    progress.
    """

    def __init__(
        self,
        target: Callable[[], None],
        interval: float,
        name: str,
        initial_delay: Optional[float] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.target = target
        self.interval = interval
        self.name = name
        self.initial_delay = interval if initial_delay is None else initial_delay

        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._ticks = 0

    def start(self) -> None:
        with self._lock:
            if self._thread is not None or self._cancelled.is_set():
                return
            self._thread = threading.Thread(
                target=self._run,
                name=self.name,
                daemon=True,
            )
            self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to exit (after cancel())."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_alive(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def ticks(self) -> int:
        """Number of ticks started so far."""
        return self._ticks

    def _run(self) -> None:
        if self._cancelled.wait(self.initial_delay):
            return

        while not self._cancelled.is_set():
            self._ticks += 1
            try:
                self.target()
            except Exception:
                # keep the schedule alive
                logger.exception("Periodic task failed", task=self.name)

            if self._cancelled.wait(self.interval):
                return
