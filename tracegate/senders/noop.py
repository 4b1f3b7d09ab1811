"""Sender that discards every span."""

from __future__ import annotations

from tracegate.senders.base import Sender
from tracegate.types import FinishedSpan


class NoopSender(Sender):
    def append(self, span: FinishedSpan) -> int:
        return 0

    def flush(self) -> int:
        return 0

    def close(self) -> int:
        return 0
