"""Remote service clients."""

from __future__ import annotations

from typing import Optional

from core.models import ServiceEndpoint, ServiceKind

from .base import ServiceClient
from .docling_client import DoclingClient
from .model_capabilities_service import ModelCapabilitiesService
from .ollama_client import OllamaClient

_CLIENT_TYPES = {
    ServiceKind.OLLAMA: OllamaClient,
    ServiceKind.DOCLING: DoclingClient,
}


def create_service_client(
    service: ServiceKind,
    endpoint: ServiceEndpoint,
    timeout: Optional[float] = None,
) -> ServiceClient:
    """Build the client type matching a service, bound to an endpoint."""
    return _CLIENT_TYPES[service](endpoint, timeout=timeout)


__all__ = [
    "ServiceClient",
    "OllamaClient",
    "DoclingClient",
    "ModelCapabilitiesService",
    "create_service_client",
]
