"""Docling document server client."""

from __future__ import annotations

from core.models import ServiceKind

from .base import ServiceClient


class DoclingClient(ServiceClient):
    """Health checks against a docling-serve instance."""

    SERVICE = ServiceKind.DOCLING
    HEALTH_PATH = "/health"
