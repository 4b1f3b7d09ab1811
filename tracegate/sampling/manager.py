"""
Tracegate Sampling Managers

A SamplingManager fetches the strategy document for a service. The HTTP
manager talks to the local agent's sampling endpoint
(``GET http://<host:port>/?service=<name>``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx
import structlog

from tracegate.exceptions import SamplingStrategyError
from tracegate.sampling.strategy import SamplingStrategyResponse

logger = structlog.get_logger(__name__)

DEFAULT_HOST_PORT = "localhost:5778"
DEFAULT_TIMEOUT = 5.0


class SamplingManager(ABC):
    """Source of sampling strategies."""

    @abstractmethod
    def get_sampling_strategy(self, service_name: str) -> SamplingStrategyResponse:
        """
        Fetch the current strategy for a service.

        Raises:
            SamplingStrategyError: on transport or parse failure
        """
        pass

    def close(self) -> None:
        pass


class HttpSamplingManager(SamplingManager):
    """
    Fetches strategies over HTTP with httpx.

    Usage:
        manager = HttpSamplingManager("jaeger-agent:5778")
        strategy = manager.get_sampling_strategy("checkout")
    """

    def __init__(
        self,
        host_port: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        self.host_port = host_port or DEFAULT_HOST_PORT
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def url(self) -> str:
        return f"http://{self.host_port}/"

    def get_sampling_strategy(self, service_name: str) -> SamplingStrategyResponse:
        try:
            response = self._client.get(self.url, params={"service": service_name})
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SamplingStrategyError(
                "HTTP call to get sampling strategy from local agent failed",
                service_name=service_name,
                cause=e,
            ) from e

        return self.parse_json(response.content, service_name)

    @staticmethod
    def parse_json(payload, service_name: Optional[str] = None) -> SamplingStrategyResponse:
        try:
            return SamplingStrategyResponse.from_json(payload)
        except SamplingStrategyError as e:
            e.service_name = service_name
            raise

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __repr__(self) -> str:
        return f"HttpSamplingManager(host_port={self.host_port!r})"
