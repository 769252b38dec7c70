"""Integration tests for SettingsCoordinator persistence."""

import pytest

from core.models import ModelDescriptor, ModelRole, ServiceEndpoint, ServiceKind
from core.persistence import Database


@pytest.fixture
def db_path(tmp_path):
    """Provide a path for the test database."""
    return tmp_path / "settings_test.db"


def test_settings_persistence_cycle(db_path, make_coordinator):
    """Test that settings persist correctly through restart."""
    # 1. Change settings
    coordinator1 = make_coordinator(database=Database(db_path))
    coordinator1.set_endpoint_hostname(ServiceKind.OLLAMA, "192.168.1.20")
    coordinator1.set_endpoint_port(ServiceKind.OLLAMA, "11500")
    coordinator1.set_endpoint_port(ServiceKind.DOCLING, 5050)
    coordinator1.set_model_preference(ModelRole.CHAT, "qwen3:14b")
    coordinator1.set_model_preference(ModelRole.VISION, "gemma3:12b")
    coordinator1.set_context_size_limit(8192)

    # 2. Reload in new instance (simulate app restart)
    coordinator2 = make_coordinator(database=Database(db_path))

    # 3. Verify persistence
    assert coordinator2.ollama_config == ServiceEndpoint("192.168.1.20", 11500)
    assert coordinator2.docling_config == ServiceEndpoint("localhost", 5050)
    preferences = coordinator2.model_preferences
    assert preferences.chat_model == "qwen3:14b"
    assert preferences.vision_model == "gemma3:12b"
    assert preferences.document_model == "llama3.2"
    assert preferences.context_size_limit == 8192
    assert coordinator2.models.loaded_from_storage is True


def test_auto_selection_is_persisted(db_path, make_coordinator, client_factory, qtbot):
    """Test that first-run selection is saved and respected afterwards."""
    client_factory.ollama.models = [
        ModelDescriptor("llama3", "llama3"),
        ModelDescriptor("llava", "llava", supports_vision=True),
    ]
    coordinator1 = make_coordinator(database=Database(db_path))
    with qtbot.waitSignal(coordinator1.model_preferences_changed):
        coordinator1.refresh_available_models()

    coordinator2 = make_coordinator(database=Database(db_path))
    assert coordinator2.model_preferences.chat_model == "llama3"
    assert coordinator2.model_preferences.document_model == "llava"
    assert coordinator2.models.loaded_from_storage is True


def test_keyring_mirror_restores_settings(tmp_path, make_coordinator, memory_keyring):
    """Test that a wiped database is restored from the keyring mirror."""
    coordinator1 = make_coordinator(
        database=Database(tmp_path / "old.db"), keyring_service=memory_keyring
    )
    coordinator1.set_endpoint_hostname(ServiceKind.DOCLING, "docs.lan")
    coordinator1.set_model_preference(ModelRole.CHAT, "magistral:24b")

    coordinator2 = make_coordinator(
        database=Database(tmp_path / "new.db"), keyring_service=memory_keyring
    )
    assert coordinator2.docling_config == ServiceEndpoint("docs.lan", 5001)
    assert coordinator2.model_preferences.chat_model == "magistral:24b"


def test_invalid_stored_values_fall_back(db_path, make_coordinator):
    """Test that corrupt rows load as defaults instead of failing."""
    from core.persistence import SettingsRepository

    repo = SettingsRepository(Database(db_path))
    repo.set("ollama.hostname", "", "ollama")
    repo.set("ollama.port", "99999", "ollama")

    coordinator = make_coordinator(database=Database(db_path))
    assert coordinator.ollama_config == ServiceEndpoint("localhost", 11434)
