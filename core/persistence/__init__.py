"""Persistence package exports."""

from .database import Database
from .settings_repository import SettingsRepository
from .config_store import ConfigStore

__all__ = [
    "Database",
    "SettingsRepository",
    "ConfigStore",
]
