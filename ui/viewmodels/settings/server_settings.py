"""ServerSettings - endpoint configuration and connection health of one service."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.config import get_default_endpoint
from core.errors import InvalidInputError, PersistenceError
from core.models import ConnectionStatus, ServiceEndpoint, ServiceKind
from core.persistence import ConfigStore
from core.services import ServiceClient
from core.validation import parse_hostname, parse_port

from .workers import RequestTracker, ServiceWorker

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ServiceKind, ServiceEndpoint, Optional[float]], ServiceClient]


class ServerSettings(QObject):
    """Manages the endpoint, cached client and connection test of one service."""

    # Fires ahead of status_changed so dependents drop work for the old endpoint
    endpoint_invalidated = Signal(ServiceKind)
    endpoint_changed = Signal(ServiceKind)
    status_changed = Signal(ServiceKind, ConnectionStatus)
    settings_changed = Signal()
    settings_saved = Signal()
    persistence_failed = Signal(str)

    def __init__(
        self,
        service: ServiceKind,
        store: ConfigStore,
        client_factory: ClientFactory,
        network_timeout: Optional[float],
        deadline_ms: int,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.service = service
        self._store = store
        self._client_factory = client_factory
        self._network_timeout = network_timeout

        # Internal state
        self._endpoint: ServiceEndpoint = get_default_endpoint(service)
        self._client: Optional[ServiceClient] = None
        self._status = ConnectionStatus.UNKNOWN
        self._status_detail: Optional[str] = None

        self._test = RequestTracker(deadline_ms, parent=self)
        self._test.timed_out.connect(self._on_test_timed_out)

    @property
    def endpoint(self) -> ServiceEndpoint:
        """Get the configured endpoint."""
        return self._endpoint

    @property
    def status(self) -> ConnectionStatus:
        """Get the connection status."""
        return self._status

    @property
    def status_detail(self) -> Optional[str]:
        """Get the failure message of the last connection test."""
        return self._status_detail

    @property
    def status_text(self) -> str:
        if self._status is ConnectionStatus.FAILED and self._status_detail:
            return f"{self._status.display_text}: {self._status_detail}"
        return self._status.display_text

    @property
    def client(self) -> ServiceClient:
        """Get the client bound to the current endpoint, creating it on first use."""
        if self._client is None:
            self._client = self._client_factory(
                self.service, self._endpoint, self._network_timeout
            )
            logger.debug("Created %r", self._client)
        return self._client

    def invalidate_client(self) -> None:
        self._client = None

    def load(self) -> None:
        """Load the endpoint from the config store."""
        self._endpoint = self._store.load_endpoint(self.service)
        self.invalidate_client()
        self._test.cancel()
        self._set_status(ConnectionStatus.UNKNOWN)

    def save(self) -> bool:
        """Persist the endpoint; failures are reported through persistence_failed."""
        try:
            self._store.save_endpoint(self.service, self._endpoint)
        except PersistenceError as e:
            logger.error("%s", e)
            self.persistence_failed.emit(str(e))
            return False
        self.settings_saved.emit()
        return True

    def set_hostname(self, value: object) -> bool:
        """Set the hostname; invalid or unchanged values are ignored."""
        try:
            hostname = parse_hostname(value)
        except InvalidInputError as e:
            logger.debug("Ignoring %s hostname %r: %s", self.service.value, value, e)
            return False
        if hostname == self._endpoint.hostname:
            return False
        return self._apply_endpoint(
            ServiceEndpoint(hostname=hostname, port=self._endpoint.port)
        )

    def set_port(self, value: object) -> bool:
        """Set the port; invalid or unchanged values are ignored."""
        try:
            port = parse_port(value)
        except InvalidInputError as e:
            logger.debug("Ignoring %s port %r: %s", self.service.value, value, e)
            return False
        if port == self._endpoint.port:
            return False
        return self._apply_endpoint(
            ServiceEndpoint(hostname=self._endpoint.hostname, port=port)
        )

    def reset(self) -> None:
        """Restore the default endpoint."""
        self._apply_endpoint(get_default_endpoint(self.service))

    def _apply_endpoint(self, endpoint: ServiceEndpoint) -> bool:
        self._endpoint = endpoint
        self.invalidate_client()
        self._test.cancel()
        self.endpoint_invalidated.emit(self.service)
        self._set_status(ConnectionStatus.UNKNOWN)
        logger.info("%s endpoint set to %s", self.service.display_name, endpoint.base_url)
        self.save()
        self.endpoint_changed.emit(self.service)
        self.settings_changed.emit()
        return True

    # Connection test

    @property
    def is_testing(self) -> bool:
        return self._test.busy

    def test_connection(self) -> bool:
        """Start a connection test; returns False if one is running or no client can be built."""
        if self._test.busy:
            logger.debug("%s connection test already running", self.service.value)
            return False
        try:
            client = self.client
        except Exception as e:
            logger.exception("Could not create %s client: %s", self.service.display_name, e)
            self._set_status(ConnectionStatus.FAILED, f"Unexpected error: {e}")
            return False

        token = self._test.begin()
        self._set_status(ConnectionStatus.TESTING)
        worker = ServiceWorker(
            client.test_connection,
            token,
            f"{self.service.display_name} connection test",
        )
        worker.succeeded.connect(self._on_test_succeeded)
        worker.failed.connect(self._on_test_failed)
        self._test.start(token, worker)
        return True

    def _on_test_succeeded(self, _result: object, token: int) -> None:
        if not self._test.finish(token):
            return
        self._set_status(ConnectionStatus.CONNECTED)

    def _on_test_failed(self, message: str, token: int) -> None:
        if not self._test.finish(token):
            return
        self._set_status(ConnectionStatus.FAILED, message)

    def _on_test_timed_out(self, _token: int) -> None:
        self._set_status(
            ConnectionStatus.FAILED,
            f"No response from {self._endpoint.hostname}:{self._endpoint.port}. "
            f"Check if the {self.service.display_name} server is running",
        )

    def _set_status(self, status: ConnectionStatus, detail: Optional[str] = None) -> None:
        if status is self._status and detail == self._status_detail:
            return
        self._status = status
        self._status_detail = detail
        self.status_changed.emit(self.service, status)

    def shutdown(self) -> None:
        self._test.shutdown()
