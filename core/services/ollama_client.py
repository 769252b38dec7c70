"""Ollama model directory client."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from core.errors import NetworkError
from core.models import ModelDescriptor, ServiceEndpoint, ServiceKind
from core.types import OllamaTagModel, OllamaTagsResponse

from .base import ServiceClient
from .model_capabilities_service import ModelCapabilitiesService

logger = logging.getLogger(__name__)


class OllamaClient(ServiceClient):
    """Lists the models an Ollama server has pulled."""

    SERVICE = ServiceKind.OLLAMA
    HEALTH_PATH = "/api/tags"
    TAGS_PATH = "/api/tags"

    def __init__(
        self,
        endpoint: ServiceEndpoint,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        capabilities: Optional[ModelCapabilitiesService] = None,
    ):
        super().__init__(endpoint, timeout=timeout, transport=transport)
        self._capabilities = capabilities or ModelCapabilitiesService()

    def list_models(self) -> list[ModelDescriptor]:
        """
        Fetch the model directory.

        Raises:
            NetworkError: On transport failure, timeout, HTTP error status or
                a payload that does not match the tag listing.
        """
        response = self._get(self.TAGS_PATH)
        if not response.is_success:
            raise NetworkError(
                f"Ollama returned HTTP {response.status_code}. {self._server_hint()}",
                self.SERVICE,
            )

        try:
            payload = OllamaTagsResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed /api/tags payload from %s: %s", self.base_url, e)
            raise NetworkError(
                "Malformed model list received from Ollama", self.SERVICE
            ) from e

        models = [self._to_descriptor(item) for item in payload.models]
        logger.debug("Fetched %d models from %s", len(models), self.base_url)
        return models

    def _to_descriptor(self, item: OllamaTagModel) -> ModelDescriptor:
        return ModelDescriptor(
            name=item.name,
            display_name=self.display_name_for(item),
            supports_vision=self._capabilities.supports_images(
                item.name,
                families=item.details.families,
                capabilities=item.capabilities,
            ),
            size=item.size,
            modified_at=item.modified_at,
        )

    @staticmethod
    def display_name_for(item: OllamaTagModel) -> str:
        name = item.name
        if name.endswith(":latest"):
            name = name[: -len(":latest")]
        if item.details.parameter_size:
            return f"{name} ({item.details.parameter_size})"
        return name
