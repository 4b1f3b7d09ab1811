"""
Tracegate HTTP Sender

Posts span batches as JSON to a collector endpoint:

    POST <endpoint>
    {"spans": [{"trace_id": "...", "span_id": "...", ...}, ...]}
"""

from __future__ import annotations

from typing import Dict, List, Optional

import httpx

from tracegate.exceptions import SenderError
from tracegate.senders.base import DEFAULT_MAX_BATCH_SIZE, BufferedSender
from tracegate.types import FinishedSpan

DEFAULT_TIMEOUT = 5.0


class HttpSender(BufferedSender):
    """
    Batching sender over httpx.

    Usage:
        sender = HttpSender("http://collector:14268/api/spans", auth_token="...")
        reporter = RemoteReporter(sender)
    """

    def __init__(
        self,
        endpoint: str,
        auth_token: Optional[str] = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(max_batch_size)
        self.endpoint = endpoint
        self.auth_token = auth_token
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _send(self, batch: List[FinishedSpan]) -> None:
        payload = {"spans": [span.to_dict() for span in batch]}
        try:
            response = self._client.post(
                self.endpoint,
                json=payload,
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SenderError(
                f"Could not send {len(batch)} spans to {self.endpoint}",
                dropped_span_count=len(batch),
                cause=e,
            ) from e

    def close(self) -> int:
        try:
            return super().close()
        finally:
            if self._owns_client:
                self._client.close()

    def __repr__(self) -> str:
        return f"HttpSender(endpoint={self.endpoint!r}, max_batch_size={self.max_batch_size})"
