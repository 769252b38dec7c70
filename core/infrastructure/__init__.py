"""Infrastructure adapters: OS keyring and logging."""

from .keyring_service import KeyringService, get_keyring_service
from .logging_config import configure_logging

__all__ = [
    "KeyringService",
    "get_keyring_service",
    "configure_logging",
]
