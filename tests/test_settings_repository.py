"""Tests for settings repository helpers."""

import sqlite3
from pathlib import Path

import pytest

from core.persistence import Database
from core.persistence.settings_repository import SettingsRepository


def test_settings_repository_helpers(tmp_path: Path) -> None:
    db = Database(tmp_path / "settings.db")
    repo = SettingsRepository(db)

    repo.set("int.value", "not-int", "test")
    assert repo.get_int("int.value", 7) == 7

    repo.set("ollama.port", "11434", "ollama")
    assert repo.get_int("ollama.port") == 11434
    assert repo.get_value("missing", "fallback") == "fallback"
    assert repo.has("ollama.port")
    assert not repo.has("missing")


def test_set_overwrites_value_and_category(tmp_path: Path) -> None:
    repo = SettingsRepository(Database(tmp_path / "settings.db"))
    repo.set("models.chat", "llama3", "models")
    repo.set("models.chat", "qwen3:14b", "models")

    setting = repo.get("models.chat")
    assert setting is not None
    assert setting.value == "qwen3:14b"
    assert setting.category == "models"


def test_set_many_is_atomic(tmp_path: Path) -> None:
    db = Database(tmp_path / "settings.db")
    repo = SettingsRepository(db)
    repo.set_many({"docling.hostname": "localhost", "docling.port": "5001"}, "docling")
    assert repo.get_value("docling.port") == "5001"

    # NOT NULL violation on the second row rolls back the first
    with pytest.raises(sqlite3.IntegrityError):
        repo.set_many({"docling.hostname": "server.lan", "docling.port": None}, "docling")

    assert repo.get_value("docling.hostname") == "localhost"
    assert repo.get_value("docling.port") == "5001"


def test_database_rejects_newer_schema(tmp_path: Path) -> None:
    path = tmp_path / "settings.db"
    Database(path).close()
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA user_version = 99")
    conn.commit()
    conn.close()

    with pytest.raises(sqlite3.DatabaseError):
        Database(path)


def test_database_accepts_str_path(tmp_path: Path) -> None:
    db = Database(str(tmp_path / "nested" / "settings.db"))
    assert db.db_path.exists()
