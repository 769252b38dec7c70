# Bison Health - Core Package
"""
Core package for Bison Health settings.
This package contains the domain models, validation, persistence and
service clients, and can be used independently of the UI layer.
"""

from core.errors import InvalidInputError, NetworkError, PersistenceError, SettingsError
from core.models import (
    ConnectionStatus,
    ModelDescriptor,
    ModelPreferences,
    ModelRole,
    ModelSelectionState,
    ServiceEndpoint,
    ServiceKind,
)

__all__ = [
    "SettingsError",
    "InvalidInputError",
    "NetworkError",
    "PersistenceError",
    "ConnectionStatus",
    "ModelDescriptor",
    "ModelPreferences",
    "ModelRole",
    "ModelSelectionState",
    "ServiceEndpoint",
    "ServiceKind",
]
