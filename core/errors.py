"""Error taxonomy for settings and service coordination."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from core.models import ServiceKind


class SettingsError(Exception):
    """Base class for all settings errors. None of them is fatal."""
    pass


class InvalidInputError(SettingsError, ValueError):
    """Malformed hostname, port, model name or context size."""
    pass


class NetworkError(SettingsError):
    """A remote service was unreachable, timed out or answered badly."""

    def __init__(self, message: str, service: Optional["ServiceKind"] = None):
        super().__init__(message)
        self.service = service


class PersistenceError(SettingsError):
    """A durable settings write failed; in-memory state is still valid."""
    pass
