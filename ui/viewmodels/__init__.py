"""ViewModels package for the Bison Health UI."""

from ui.viewmodels.settings.coordinator import SettingsCoordinator

__all__ = [
    "SettingsCoordinator",
]
