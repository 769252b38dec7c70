"""Endpoint-bound HTTP client shared by the remote services."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from core.config import get_network_timeout
from core.constants import USER_AGENT
from core.errors import NetworkError
from core.models import ServiceEndpoint, ServiceKind

logger = logging.getLogger(__name__)


class ServiceClient:
    """
    Synchronous client for one service endpoint.

    Instances are bound to the endpoint they were built for; an endpoint
    change means building a new client. Every call blocks, so callers on
    the UI thread must go through a worker.
    """

    SERVICE: ServiceKind = ServiceKind.OLLAMA
    HEALTH_PATH = "/"

    def __init__(
        self,
        endpoint: ServiceEndpoint,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout if timeout is not None else get_network_timeout()
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self.endpoint.base_url

    def test_connection(self) -> bool:
        """
        Check whether the service answers its health path with a 2xx status.

        Returns True when reachable.

        Raises:
            NetworkError: If the service cannot be reached, times out or
                answers with a non-2xx status.
        """
        response = self._get(self.HEALTH_PATH)
        if not response.is_success:
            logger.info(
                "%s health check returned HTTP %s",
                self.SERVICE.display_name,
                response.status_code,
            )
            raise NetworkError(
                f"Service unavailable (HTTP {response.status_code})", self.SERVICE
            )
        return True

    def _get(self, path: str) -> httpx.Response:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers=headers,
            ) as client:
                return client.get(path)
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Timed out after {self.timeout:g}s. {self._server_hint()}",
                self.SERVICE,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Network error: {e}. {self._server_hint()}",
                self.SERVICE,
            ) from e

    def _server_hint(self) -> str:
        return (
            f"Check if the {self.SERVICE.display_name} server is running on "
            f"{self.endpoint.hostname}:{self.endpoint.port}"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url!r})"
