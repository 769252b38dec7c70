"""SettingsCoordinator - Facade over server endpoints and model preferences.

The coordinator owns the config store and the three settings subsystems
(one ServerSettings per service plus ModelSettings), forwards their signals
and exposes the state the settings UI binds to. Build it once at startup and
pass it to consumers.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.config import get_network_timeout
from core.constants import DEADLINE_GRACE_MS
from core.infrastructure.keyring_service import KeyringService
from core.models import (
    ConnectionStatus,
    ModelOption,
    ModelPreferences,
    ModelRole,
    ModelSelectionState,
    ServiceEndpoint,
    ServiceKind,
)
from core.persistence import ConfigStore, Database
from core.services import ServiceClient, create_service_client
from core.validation import validate_server_configuration as _validate_server_configuration

from .model_settings import ModelSettings
from .server_settings import ClientFactory, ServerSettings

logger = logging.getLogger(__name__)


class SettingsCoordinator(QObject):
    """
    Facade coordinating the settings subsystems.

    Servers: endpoint, cached client and connection status per service
    Models: directory cache, role pickers and preferences
    """

    # Forward signals from subsystems
    settings_changed = Signal()
    endpoint_changed = Signal(ServiceKind)
    status_changed = Signal(ServiceKind, ConnectionStatus)
    model_selection_changed = Signal(object)
    model_preferences_changed = Signal(object)
    settings_saved = Signal()
    persistence_failed = Signal(str)

    def __init__(
        self,
        database: Optional[Database] = None,
        keyring_service: Optional[KeyringService] = None,
        client_factory: Optional[ClientFactory] = None,
        network_timeout: Optional[float] = None,
        operation_deadline_ms: Optional[int] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)

        # Shared dependencies
        self._db = database or Database()
        self._store = ConfigStore(self._db, keyring_service)
        timeout = network_timeout if network_timeout is not None else get_network_timeout()
        if operation_deadline_ms is None:
            operation_deadline_ms = int(timeout * 1000) + DEADLINE_GRACE_MS
        factory = client_factory or create_service_client

        self.ollama = ServerSettings(
            ServiceKind.OLLAMA, self._store, factory, timeout, operation_deadline_ms, parent=self
        )
        self.docling = ServerSettings(
            ServiceKind.DOCLING, self._store, factory, timeout, operation_deadline_ms, parent=self
        )
        self.models = ModelSettings(self._store, operation_deadline_ms, parent=self)

        self._last_persistence_error: Optional[str] = None

        # Wire up signal forwarding
        self._connect_signals()
        self.load_settings()

    def _connect_signals(self) -> None:
        """Forward signals from subsystems to coordinator."""
        for server in (self.ollama, self.docling):
            server.endpoint_changed.connect(self.endpoint_changed)
            server.status_changed.connect(self.status_changed)
            server.settings_changed.connect(self.settings_changed)
            server.settings_saved.connect(self._on_settings_saved)
            server.persistence_failed.connect(self._on_persistence_failed)

        # A directory fetch belongs to the endpoint it was started for
        self.ollama.endpoint_invalidated.connect(self._on_ollama_endpoint_invalidated)

        self.models.model_selection_changed.connect(self.model_selection_changed)
        self.models.model_preferences_changed.connect(self.model_preferences_changed)
        self.models.settings_changed.connect(self.settings_changed)
        self.models.settings_saved.connect(self._on_settings_saved)
        self.models.persistence_failed.connect(self._on_persistence_failed)

    def load_settings(self) -> None:
        """Load all settings from the config store."""
        self.ollama.load()
        self.docling.load()
        self.models.load()

    def _server(self, service: ServiceKind) -> ServerSettings:
        return self.ollama if service is ServiceKind.OLLAMA else self.docling

    def _on_ollama_endpoint_invalidated(self, _service: ServiceKind) -> None:
        self.models.cancel_refresh()

    def _on_settings_saved(self) -> None:
        self._last_persistence_error = None
        self.settings_saved.emit()

    def _on_persistence_failed(self, message: str) -> None:
        self._last_persistence_error = message
        self.persistence_failed.emit(message)

    # Reactive state

    @property
    def ollama_config(self) -> ServiceEndpoint:
        return self.ollama.endpoint

    @property
    def docling_config(self) -> ServiceEndpoint:
        return self.docling.endpoint

    @property
    def ollama_status(self) -> ConnectionStatus:
        return self.ollama.status

    @property
    def docling_status(self) -> ConnectionStatus:
        return self.docling.status

    @property
    def model_preferences(self) -> ModelPreferences:
        return self.models.preferences

    @property
    def model_selection(self) -> ModelSelectionState:
        return self.models.selection

    @property
    def last_persistence_error(self) -> Optional[str]:
        """Message of the last failed write, cleared by the next successful one."""
        return self._last_persistence_error

    def endpoint(self, service: ServiceKind) -> ServiceEndpoint:
        return self._server(service).endpoint

    def status(self, service: ServiceKind) -> ConnectionStatus:
        return self._server(service).status

    def status_text(self, service: ServiceKind) -> str:
        """Get the status line for a service, e.g. "Failed: <reason>"."""
        return self._server(service).status_text

    # Endpoints

    def set_endpoint_hostname(self, service: ServiceKind, value: object) -> bool:
        """Set a service hostname. Invalid or unchanged values are ignored."""
        return self._server(service).set_hostname(value)

    def set_endpoint_port(self, service: ServiceKind, value: object) -> bool:
        """Set a service port. Values outside 1-65535 are ignored."""
        return self._server(service).set_port(value)

    def client_for(self, service: ServiceKind) -> ServiceClient:
        """Get the client bound to the current endpoint of a service."""
        return self._server(service).client

    @staticmethod
    def validate_server_configuration(hostname: str, port: int) -> Optional[str]:
        """Describe what is wrong with an endpoint, or None if it is valid."""
        return _validate_server_configuration(hostname, port)

    # Connection tests

    def test_connection(self, service: ServiceKind) -> bool:
        """Start a connection test; returns False if one is already running."""
        return self._server(service).test_connection()

    def test_all_connections(self) -> None:
        for service in ServiceKind:
            self.test_connection(service)

    # Models

    def refresh_available_models(self) -> bool:
        """Fetch the Ollama model directory; coalesced while a fetch is running."""
        return self.models.refresh(self.ollama.client)

    def refresh_models_if_needed(self) -> bool:
        return self.models.refresh_if_needed(self.ollama.client)

    def models_for_role(self, role: ModelRole) -> list[ModelOption]:
        return self.models.models_for_role(role)

    def set_model_preference(self, role: ModelRole, name: object) -> bool:
        return self.models.set_model(role, name)

    def set_context_size_limit(self, value: object) -> bool:
        return self.models.set_context_size_limit(value)

    # Resets

    def reset_server_settings(self) -> None:
        """Restore default endpoints for both services."""
        self.ollama.reset()
        self.docling.reset()

    def reset_model_preferences(self) -> None:
        self.models.reset()

    def reset_all_settings(self) -> None:
        self.reset_server_settings()
        self.reset_model_preferences()

    def shutdown(self) -> None:
        """Stop timers and wait for worker threads to exit."""
        self.models.shutdown()
        self.ollama.shutdown()
        self.docling.shutdown()
        logger.debug("Settings coordinator shut down")
