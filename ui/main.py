"""
Headless connection check for Bison Health.

Loads the saved endpoints, tests both services and refreshes the Ollama
model directory, then exits with 0 if both services are connected.
"""

import logging
import sys

from PySide6.QtCore import QCoreApplication, QTimer

from core.infrastructure import configure_logging
from core.models import ConnectionStatus, ModelRole, ServiceKind
from ui.viewmodels.settings import SettingsCoordinator

logger = logging.getLogger(__name__)


class HealthCheck:
    """Runs the connection tests and the model refresh, then quits the app."""

    def __init__(self, app: QCoreApplication, coordinator: SettingsCoordinator):
        self._app = app
        self._coordinator = coordinator
        self._coordinator.status_changed.connect(self._on_status_changed)
        self._coordinator.model_selection_changed.connect(self._on_selection_changed)

    def start(self) -> None:
        for service in ServiceKind:
            endpoint = self._coordinator.endpoint(service)
            logger.info("Checking %s at %s", service.display_name, endpoint.base_url)
        self._coordinator.test_all_connections()
        self._coordinator.refresh_available_models()

    @property
    def done(self) -> bool:
        statuses = [self._coordinator.status(service) for service in ServiceKind]
        tests_done = all(
            status in (ConnectionStatus.CONNECTED, ConnectionStatus.FAILED)
            for status in statuses
        )
        return tests_done and not self._coordinator.model_selection.is_loading

    @property
    def healthy(self) -> bool:
        return all(
            self._coordinator.status(service) is ConnectionStatus.CONNECTED
            for service in ServiceKind
        )

    def _on_status_changed(self, service: object, status: object) -> None:
        service = ServiceKind(service)
        logger.info(
            "%s: %s", service.display_name, self._coordinator.status_text(service)
        )
        self._quit_if_done()

    def _on_selection_changed(self, selection: object) -> None:
        self._quit_if_done()

    def _quit_if_done(self) -> None:
        if self.done:
            self._report()
            self._app.exit(0 if self.healthy else 1)

    def _report(self) -> None:
        selection = self._coordinator.model_selection
        if selection.error:
            logger.warning("Model list unavailable: %s", selection.error)
        else:
            logger.info("Models available: %d", len(selection.available_models))
        preferences = self._coordinator.model_preferences
        for role in ModelRole:
            logger.info("%s model: %s", role.value, preferences.model_for(role))

        for service in ServiceKind:
            print(f"{service.display_name}: {self._coordinator.status_text(service)}")
        if not selection.error:
            for model in selection.available_models:
                vision = " [vision]" if model.supports_vision else ""
                print(f"  {model.display_name}{vision} {model.formatted_size}")


def main():
    """Main entry point for the connection check."""
    log_file = configure_logging()

    app = QCoreApplication(sys.argv)
    app.setApplicationName("Bison Health")
    app.setOrganizationName("BisonHealth")

    coordinator = SettingsCoordinator()
    check = HealthCheck(app, coordinator)
    QTimer.singleShot(0, check.start)

    exit_code = app.exec()
    coordinator.shutdown()
    logger.info("Connection check finished with %s; log at %s", exit_code, log_file)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
