"""Tests for ConfigStore endpoint and model preference records."""

import json
import sqlite3
from datetime import datetime
from unittest.mock import patch

import pytest

from core.errors import PersistenceError
from core.models import ModelPreferences, ServiceEndpoint, ServiceKind
from core.persistence import ConfigStore, SettingsRepository


@pytest.fixture
def store(temp_db, no_keyring):
    return ConfigStore(temp_db, no_keyring)


def test_load_endpoint_defaults_on_empty_database(store):
    assert store.load_endpoint(ServiceKind.OLLAMA) == ServiceEndpoint("localhost", 11434)
    assert store.load_endpoint(ServiceKind.DOCLING) == ServiceEndpoint("localhost", 5001)


def test_endpoint_round_trip(store, temp_db):
    store.save_endpoint(ServiceKind.DOCLING, ServiceEndpoint("docs.lan", 5050))

    repo = SettingsRepository(temp_db)
    assert repo.get_value("docling.hostname") == "docs.lan"
    assert repo.get_value("docling.port") == "5050"
    assert repo.get("docling.port").category == "docling"

    assert store.load_endpoint(ServiceKind.DOCLING) == ServiceEndpoint("docs.lan", 5050)
    assert store.load_endpoint(ServiceKind.OLLAMA) == ServiceEndpoint("localhost", 11434)


def test_invalid_stored_endpoint_falls_back_to_default(store, temp_db):
    repo = SettingsRepository(temp_db)
    repo.set("ollama.hostname", "gpu.lan", "ollama")
    repo.set("ollama.port", "0", "ollama")

    assert store.load_endpoint(ServiceKind.OLLAMA) == ServiceEndpoint("localhost", 11434)


def test_save_endpoint_wraps_database_errors(store):
    with patch.object(
        SettingsRepository, "set_many", side_effect=sqlite3.OperationalError("disk I/O error")
    ):
        with pytest.raises(PersistenceError, match="Ollama settings were not saved"):
            store.save_endpoint(ServiceKind.OLLAMA, ServiceEndpoint("localhost", 11500))


def test_model_preferences_defaults_not_from_storage(store):
    preferences, from_storage = store.load_model_preferences()
    assert from_storage is False
    assert preferences.chat_model == "llama3.2"
    assert preferences.context_size_limit == 32768


def test_model_preferences_round_trip(store):
    saved = ModelPreferences(
        chat_model="qwen3:14b",
        document_model="qwen2.5vl:7b",
        vision_model="gemma3:12b",
        context_size_limit=8192,
        last_updated=datetime(2024, 5, 1, 12, 30),
    )
    store.save_model_preferences(saved)

    loaded, from_storage = store.load_model_preferences()
    assert from_storage is True
    assert loaded == saved


def test_unsupported_stored_context_size_uses_default(store, temp_db):
    store.save_model_preferences(ModelPreferences(chat_model="llama3"))
    SettingsRepository(temp_db).set("models.context_size", "12345", "models")

    loaded, _ = store.load_model_preferences()
    assert loaded.chat_model == "llama3"
    assert loaded.context_size_limit == 32768


def test_records_are_mirrored_to_keyring(temp_db, memory_keyring):
    store = ConfigStore(temp_db, memory_keyring)
    store.save_endpoint(ServiceKind.OLLAMA, ServiceEndpoint("gpu.lan", 11500))
    store.save_model_preferences(ModelPreferences(chat_model="magistral:24b"))

    endpoint_record = json.loads(memory_keyring.get_record("ollama_config"))
    assert endpoint_record == {"hostname": "gpu.lan", "port": 11500}
    preferences_record = json.loads(memory_keyring.get_record("model_preferences"))
    assert preferences_record["chat_model"] == "magistral:24b"


def test_keyring_mirror_restores_wiped_database(tmp_path, memory_keyring):
    from core.persistence import Database

    first = ConfigStore(Database(tmp_path / "first.db"), memory_keyring)
    first.save_endpoint(ServiceKind.DOCLING, ServiceEndpoint("10.0.0.7", 5001))
    first.save_model_preferences(ModelPreferences(vision_model="llava:13b"))

    fresh = ConfigStore(Database(tmp_path / "fresh.db"), memory_keyring)
    assert fresh.load_endpoint(ServiceKind.DOCLING) == ServiceEndpoint("10.0.0.7", 5001)
    preferences, from_storage = fresh.load_model_preferences()
    assert from_storage is True
    assert preferences.vision_model == "llava:13b"


def test_malformed_keyring_mirror_is_ignored(temp_db, memory_keyring):
    memory_keyring.store_record("ollama_config", "{not json")
    memory_keyring.store_record("model_preferences", json.dumps(["wrong"]))
    store = ConfigStore(temp_db, memory_keyring)

    assert store.load_endpoint(ServiceKind.OLLAMA) == ServiceEndpoint("localhost", 11434)
    preferences, from_storage = store.load_model_preferences()
    assert from_storage is False
    assert preferences == ModelPreferences(last_updated=preferences.last_updated)
