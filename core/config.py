"""
Configuration loader for Bison Health.

Process-wide defaults are resolved with a priority chain:
1. Environment variables (deployment / CI overrides)
2. Built-in constants

User-edited values live in the settings database, not here.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from core.constants import (
    DEFAULT_DOCLING_HOSTNAME,
    DEFAULT_DOCLING_PORT,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_OLLAMA_HOSTNAME,
    DEFAULT_OLLAMA_PORT,
)
from core.errors import InvalidInputError
from core.models import ServiceEndpoint, ServiceKind

logger = logging.getLogger(__name__)

ENV_HOME = "BISON_HEALTH_HOME"
ENV_NETWORK_TIMEOUT = "BISON_HEALTH_NETWORK_TIMEOUT"

_ENDPOINT_ENV_VARS = {
    ServiceKind.OLLAMA: ("BISON_HEALTH_OLLAMA_HOST", "BISON_HEALTH_OLLAMA_PORT"),
    ServiceKind.DOCLING: ("BISON_HEALTH_DOCLING_HOST", "BISON_HEALTH_DOCLING_PORT"),
}

_BUILTIN_ENDPOINTS = {
    ServiceKind.OLLAMA: (DEFAULT_OLLAMA_HOSTNAME, DEFAULT_OLLAMA_PORT),
    ServiceKind.DOCLING: (DEFAULT_DOCLING_HOSTNAME, DEFAULT_DOCLING_PORT),
}

# Resolved values, cached for the process lifetime
_default_endpoints: dict[ServiceKind, ServiceEndpoint] = {}
_network_timeout: Optional[float] = None


def get_data_dir() -> Path:
    """Directory holding the settings database and logs."""
    override = os.environ.get(ENV_HOME)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".bison_health"


def get_default_endpoint(service: ServiceKind) -> ServiceEndpoint:
    """
    Get the factory-default endpoint for a service.

    Environment overrides are validated; an invalid override is logged and
    the built-in default is used instead.
    """
    cached = _default_endpoints.get(service)
    if cached is not None:
        return cached

    hostname, port = _BUILTIN_ENDPOINTS[service]
    builtin = ServiceEndpoint(hostname=hostname, port=port)
    host_var, port_var = _ENDPOINT_ENV_VARS[service]

    try:
        endpoint = ServiceEndpoint(
            hostname=os.environ.get(host_var) or hostname,
            port=os.environ.get(port_var) or port,
        )
    except InvalidInputError as e:
        logger.warning(
            "Ignoring %s/%s override for %s: %s",
            host_var,
            port_var,
            service.display_name,
            e,
        )
        endpoint = builtin

    _default_endpoints[service] = endpoint
    return endpoint


def get_network_timeout() -> float:
    """Get the per-request network timeout in seconds."""
    global _network_timeout
    if _network_timeout is not None:
        return _network_timeout

    timeout = DEFAULT_NETWORK_TIMEOUT
    raw = os.environ.get(ENV_NETWORK_TIMEOUT)
    if raw:
        try:
            value = float(raw)
            if value <= 0:
                raise ValueError("timeout must be positive")
            timeout = value
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", ENV_NETWORK_TIMEOUT, raw, e)

    _network_timeout = timeout
    return timeout


def clear_config_cache() -> None:
    """Clear the cached configuration. Useful for testing."""
    global _network_timeout
    _default_endpoints.clear()
    _network_timeout = None
