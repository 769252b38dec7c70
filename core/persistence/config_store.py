"""ConfigStore - durable record of service endpoints and model preferences."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from core.config import get_default_endpoint
from core.constants import DEFAULT_CONTEXT_SIZE
from core.errors import InvalidInputError, PersistenceError
from core.infrastructure.keyring_service import KeyringService, get_keyring_service
from core.models import ModelPreferences, ServiceEndpoint, ServiceKind
from core.validation import parse_context_size, parse_model_name

from .database import Database
from .settings_repository import SettingsRepository

logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Maps settings records to rows of the settings table.

    Each record is also mirrored into the OS keyring and read back from there
    when the database has no row for it (fresh install, wiped app data).
    Writes raise PersistenceError; reads never raise and fall back to defaults.
    """

    CATEGORY_MODELS = "models"

    KEY_CHAT_MODEL = "models.chat"
    KEY_DOCUMENT_MODEL = "models.document"
    KEY_VISION_MODEL = "models.vision"
    KEY_CONTEXT_SIZE = "models.context_size"
    KEY_MODELS_UPDATED = "models.last_updated"

    MIRROR_ENDPOINT = {
        ServiceKind.OLLAMA: "ollama_config",
        ServiceKind.DOCLING: "docling_config",
    }
    MIRROR_MODEL_PREFERENCES = "model_preferences"

    def __init__(
        self,
        database: Database,
        keyring_service: Optional[KeyringService] = None,
    ):
        self._db = database
        self._repo = SettingsRepository(database)
        self._keyring = keyring_service or get_keyring_service()

    @staticmethod
    def hostname_key(service: ServiceKind) -> str:
        return f"{service.value}.hostname"

    @staticmethod
    def port_key(service: ServiceKind) -> str:
        return f"{service.value}.port"

    # Endpoints

    def load_endpoint(self, service: ServiceKind) -> ServiceEndpoint:
        """Load the endpoint for a service: database, then keyring mirror, then defaults."""
        default = get_default_endpoint(service)
        try:
            if self._repo.has(self.hostname_key(service)):
                return ServiceEndpoint(
                    hostname=self._repo.get_value(self.hostname_key(service), default.hostname),
                    port=self._repo.get_value(self.port_key(service), str(default.port)),
                )
        except InvalidInputError as e:
            logger.warning("Stored %s endpoint is invalid (%s); using defaults", service.value, e)
            return default
        except sqlite3.Error as e:
            logger.error("Failed to read %s endpoint: %s", service.value, e)
            return default

        mirrored = self._keyring.get_record(self.MIRROR_ENDPOINT[service])
        if mirrored:
            try:
                endpoint = ServiceEndpoint.from_dict(json.loads(mirrored))
                logger.info("Restored %s endpoint from keyring mirror", service.value)
                return endpoint
            except (ValueError, InvalidInputError) as e:
                logger.warning("Ignoring malformed %s keyring mirror: %s", service.value, e)

        return default

    def save_endpoint(self, service: ServiceKind, endpoint: ServiceEndpoint) -> None:
        """
        Persist an endpoint.

        Raises:
            PersistenceError: If the database write fails.
        """
        try:
            self._repo.set_many(
                {
                    self.hostname_key(service): endpoint.hostname,
                    self.port_key(service): str(endpoint.port),
                },
                service.value,
            )
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(
                f"{service.display_name} settings were not saved: {e}"
            ) from e
        self._keyring.store_record(
            self.MIRROR_ENDPOINT[service], json.dumps(endpoint.to_dict())
        )

    # Model preferences

    def load_model_preferences(self) -> tuple[ModelPreferences, bool]:
        """
        Load model preferences.

        Returns:
            The preferences and whether they came from storage (False means
            factory defaults, which enables first-run auto-selection).
        """
        try:
            if self._repo.has(self.KEY_CHAT_MODEL):
                return self._preferences_from_rows(), True
        except sqlite3.Error as e:
            logger.error("Failed to read model preferences: %s", e)
            return ModelPreferences(), False

        mirrored = self._keyring.get_record(self.MIRROR_MODEL_PREFERENCES)
        if mirrored:
            try:
                preferences = self._preferences_from_dict(json.loads(mirrored))
                logger.info("Restored model preferences from keyring mirror")
                return preferences, True
            except (ValueError, TypeError) as e:
                logger.warning("Ignoring malformed model preferences mirror: %s", e)

        return ModelPreferences(), False

    def save_model_preferences(self, preferences: ModelPreferences) -> None:
        """
        Persist model preferences.

        Raises:
            PersistenceError: If the database write fails.
        """
        try:
            self._repo.set_many(
                {
                    self.KEY_CHAT_MODEL: preferences.chat_model,
                    self.KEY_DOCUMENT_MODEL: preferences.document_model,
                    self.KEY_VISION_MODEL: preferences.vision_model,
                    self.KEY_CONTEXT_SIZE: str(preferences.context_size_limit),
                    self.KEY_MODELS_UPDATED: preferences.last_updated.isoformat(),
                },
                self.CATEGORY_MODELS,
            )
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Model preferences were not saved: {e}") from e
        self._keyring.store_record(
            self.MIRROR_MODEL_PREFERENCES, json.dumps(preferences.to_dict())
        )

    def _preferences_from_rows(self) -> ModelPreferences:
        defaults = ModelPreferences()
        context_size = self._repo.get_int(self.KEY_CONTEXT_SIZE, DEFAULT_CONTEXT_SIZE)
        try:
            context_size = parse_context_size(context_size)
        except InvalidInputError:
            logger.warning("Stored context size %s is not supported; using default", context_size)
            context_size = DEFAULT_CONTEXT_SIZE

        return ModelPreferences(
            chat_model=self._repo.get_value(self.KEY_CHAT_MODEL) or defaults.chat_model,
            document_model=self._repo.get_value(self.KEY_DOCUMENT_MODEL) or defaults.document_model,
            vision_model=self._repo.get_value(self.KEY_VISION_MODEL) or defaults.vision_model,
            context_size_limit=context_size,
            last_updated=self._parse_timestamp(self._repo.get_value(self.KEY_MODELS_UPDATED)),
        )

    def _preferences_from_dict(self, data: dict) -> ModelPreferences:
        if not isinstance(data, dict):
            raise TypeError("Model preferences record must be an object")
        defaults = ModelPreferences()
        try:
            context_size = parse_context_size(data.get("context_size_limit"))
        except InvalidInputError:
            context_size = DEFAULT_CONTEXT_SIZE

        def model(key: str, fallback: str) -> str:
            try:
                return parse_model_name(data.get(key))
            except InvalidInputError:
                return fallback

        return ModelPreferences(
            chat_model=model("chat_model", defaults.chat_model),
            document_model=model("document_model", defaults.document_model),
            vision_model=model("vision_model", defaults.vision_model),
            context_size_limit=context_size,
            last_updated=self._parse_timestamp(data.get("last_updated")),
        )

    @staticmethod
    def _parse_timestamp(value: object) -> datetime:
        if isinstance(value, str) and value:
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                pass
        return datetime.now()
