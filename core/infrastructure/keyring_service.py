"""
Settings mirror storage using the OS keyring.

The settings database lives in the user's home directory and is lost when the
app data is wiped. Endpoint and model records are mirrored into the system
credential manager (GNOME Keyring, macOS Keychain, Windows Credential Locker)
so they survive a reinstall.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class KeyringService:
    """
    Mirror storage for settings records in the OS keyring.

    Every operation degrades to a logged no-op when no keyring backend is
    available; the settings database stays the primary store.
    """

    SERVICE_NAME = "bison_health"

    RECORD_NAMES = {
        "ollama_config": "settings.ollamaConfig.v1",
        "docling_config": "settings.doclingConfig.v1",
        "model_preferences": "settings.modelPreferences.v1",
    }

    def __init__(self) -> None:
        """Initialize KeyringService; availability is probed lazily."""
        self._available: Optional[bool] = None
        self._keyring_module = None

    @property
    def is_available(self) -> bool:
        """
        Check if keyring backend is available.

        Returns:
            True if keyring can be used, False otherwise.
        """
        if self._available is not None:
            return self._available

        try:
            import keyring
            from keyring.backends.fail import Keyring as FailKeyring

            self._keyring_module = keyring

            # Check if we have a working backend (not FailKeyring)
            backend = keyring.get_keyring()
            if isinstance(backend, FailKeyring):
                logger.warning(
                    "No secure keyring backend available; settings will not be mirrored. "
                    "Install a backend like 'keyrings.alt' for headless environments."
                )
                self._available = False
            else:
                logger.debug("Using keyring backend: %s", type(backend).__name__)
                self._available = True
        except ImportError:
            logger.warning("keyring library not installed")
            self._available = False
        except Exception as e:
            logger.warning("Failed to initialize keyring: %s", e)
            self._available = False

        return self._available

    def _get_keyring(self):
        """Get the keyring module, importing if needed."""
        if self._keyring_module is not None:
            return self._keyring_module

        if self.is_available:
            return self._keyring_module
        return None

    def _get_record_name(self, name: str) -> str:
        return self.RECORD_NAMES.get(name.lower(), name)

    def store_record(self, name: str, value: str) -> bool:
        """
        Store a serialized settings record.

        Args:
            name: Record name (e.g., 'ollama_config')
            value: Serialized record (JSON)

        Returns:
            True if stored successfully, False otherwise
        """
        if not self.is_available:
            logger.debug("Keyring not available, skipping mirror of %s", name)
            return False

        try:
            keyring = self._get_keyring()
            record_name = self._get_record_name(name)
            keyring.set_password(self.SERVICE_NAME, record_name, value)
            logger.debug("Mirrored settings record: %s", record_name)
            return True
        except Exception as e:
            logger.error("Failed to mirror settings record %s: %s", name, e)
            return False

    def get_record(self, name: str) -> Optional[str]:
        """Retrieve a mirrored record, or None if missing or unavailable."""
        if not self.is_available:
            return None

        try:
            keyring = self._get_keyring()
            value = keyring.get_password(self.SERVICE_NAME, self._get_record_name(name))
        except Exception as e:
            logger.warning("Failed to read settings record %s from keyring: %s", name, e)
            return None
        return value or None


# Process-wide default, used when no service is injected
_keyring_service: Optional[KeyringService] = None


def get_keyring_service() -> KeyringService:
    """
    Get the default KeyringService instance.

    Returns:
        The shared KeyringService instance
    """
    global _keyring_service
    if _keyring_service is None:
        _keyring_service = KeyringService()
    return _keyring_service
