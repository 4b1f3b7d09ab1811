"""
Tracegate Senders

- Sender: append/flush/close contract used by RemoteReporter
- BufferedSender: batching base class
- NoopSender, HttpSender
"""

from tracegate.senders.base import DEFAULT_MAX_BATCH_SIZE, BufferedSender, Sender
from tracegate.senders.noop import NoopSender
from tracegate.senders.http import HttpSender

__all__ = [
    "Sender",
    "BufferedSender",
    "NoopSender",
    "HttpSender",
    "DEFAULT_MAX_BATCH_SIZE",
]
