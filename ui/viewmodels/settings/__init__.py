"""Settings subsystem - Decomposed settings management."""

from .coordinator import SettingsCoordinator
from .model_settings import ModelSettings
from .server_settings import ServerSettings
from .workers import RequestTracker, ServiceWorker

__all__ = [
    "ModelSettings",
    "RequestTracker",
    "ServerSettings",
    "ServiceWorker",
    "SettingsCoordinator",
]
