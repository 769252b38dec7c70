"""Shared fixtures for the settings test suite."""

import os
import threading

# Qt must not need a display server in CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from core.config import clear_config_cache
from core.errors import NetworkError
from core.infrastructure.keyring_service import KeyringService
from core.models import ServiceKind
from core.persistence import Database


class MemoryKeyring:
    """In-memory stand-in for the keyring module."""

    def __init__(self):
        self.storage: dict[tuple[str, str], str] = {}

    def get_password(self, service, name):
        return self.storage.get((service, name))

    def set_password(self, service, name, value):
        self.storage[(service, name)] = value


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep every test away from the real home directory and env overrides."""
    monkeypatch.setenv("BISON_HEALTH_HOME", str(tmp_path / "home"))
    for name in (
        "BISON_HEALTH_OLLAMA_HOST",
        "BISON_HEALTH_OLLAMA_PORT",
        "BISON_HEALTH_DOCLING_HOST",
        "BISON_HEALTH_DOCLING_PORT",
        "BISON_HEALTH_NETWORK_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def temp_db(tmp_path):
    """Create temporary database for testing."""
    db = Database(tmp_path / "test_settings.db")
    yield db
    db.close()


@pytest.fixture
def no_keyring():
    """KeyringService with no usable backend."""
    service = KeyringService()
    service._available = False
    return service


@pytest.fixture
def memory_keyring():
    """KeyringService backed by an in-memory store."""
    service = KeyringService()
    service._available = True
    service._keyring_module = MemoryKeyring()
    return service


class ClientScript:
    """Behaviour shared by every fake client built for one service."""

    def __init__(self):
        self.models = []
        self.error = None
        self.gate = None
        self.calls = []
        self._gates = []
        self._lock = threading.Lock()

    def block(self) -> threading.Event:
        """Make subsequent calls wait until the returned event is set."""
        self.gate = threading.Event()
        self._gates.append(self.gate)
        return self.gate

    def release_all(self) -> None:
        self.gate = None
        for gate in self._gates:
            gate.set()

    def run(self, method, client):
        # Outcome is fixed when the call starts, not when it returns
        with self._lock:
            self.calls.append((method, client.endpoint))
            gate, error, models = self.gate, self.error, list(self.models)
        if gate is not None:
            gate.wait(10)
        if error:
            raise NetworkError(error, client.service)
        return models if method == "list_models" else True


class FakeServiceClient:
    def __init__(self, service, endpoint, script):
        self.service = service
        self.endpoint = endpoint
        self._script = script

    def list_models(self):
        return self._script.run("list_models", self)

    def test_connection(self):
        return self._script.run("test_connection", self)


class FakeClientFactory:
    """Client factory handing out scriptable clients per service."""

    def __init__(self):
        self.scripts = {service: ClientScript() for service in ServiceKind}
        self.created = []

    @property
    def ollama(self) -> ClientScript:
        return self.scripts[ServiceKind.OLLAMA]

    @property
    def docling(self) -> ClientScript:
        return self.scripts[ServiceKind.DOCLING]

    def __call__(self, service, endpoint, timeout):
        client = FakeServiceClient(service, endpoint, self.scripts[service])
        self.created.append(client)
        return client

    def release_all(self):
        for script in self.scripts.values():
            script.release_all()


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def make_coordinator(qapp, temp_db, no_keyring, client_factory):
    """Build coordinators wired to fake clients; shut them down afterwards."""
    from ui.viewmodels.settings import SettingsCoordinator

    created = []

    def make(database=None, keyring_service=None, deadline_ms=3000):
        coordinator = SettingsCoordinator(
            database=database or temp_db,
            keyring_service=keyring_service or no_keyring,
            client_factory=client_factory,
            network_timeout=1.0,
            operation_deadline_ms=deadline_ms,
        )
        created.append(coordinator)
        return coordinator

    yield make

    client_factory.release_all()
    for coordinator in created:
        coordinator.shutdown()


@pytest.fixture
def coordinator(make_coordinator):
    return make_coordinator()
