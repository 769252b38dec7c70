"""ModelSettings - model directory cache and per-role model preferences."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.constants import (
    MODEL_CACHE_TTL_SECONDS,
    NOT_AVAILABLE_SUFFIX,
    PREFERRED_CHAT_MODELS,
    PREFERRED_VISION_MODELS,
    PREFIX_MATCH_MODELS,
)
from core.errors import InvalidInputError, PersistenceError
from core.models import (
    ModelDescriptor,
    ModelOption,
    ModelPreferences,
    ModelRole,
    ModelSelectionState,
)
from core.persistence import ConfigStore
from core.services import OllamaClient
from core.validation import parse_context_size, parse_model_name

from .workers import RequestTracker, ServiceWorker

logger = logging.getLogger(__name__)


class ModelSettings(QObject):
    """Manages the Ollama model directory and the model chosen for each role."""

    model_selection_changed = Signal(object)
    model_preferences_changed = Signal(object)
    settings_changed = Signal()
    settings_saved = Signal()
    persistence_failed = Signal(str)

    def __init__(
        self,
        store: ConfigStore,
        deadline_ms: int,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._store = store

        # Internal state
        self._preferences = ModelPreferences()
        self._loaded_from_storage = False
        self._selection = ModelSelectionState()

        self._fetch = RequestTracker(deadline_ms, parent=self)
        self._fetch.timed_out.connect(self._on_fetch_timed_out)

    @property
    def preferences(self) -> ModelPreferences:
        """Get a copy of the model preferences."""
        return self._preferences.copy()

    @property
    def selection(self) -> ModelSelectionState:
        """Get the model directory snapshot."""
        return self._selection

    @property
    def loaded_from_storage(self) -> bool:
        """Whether preferences came from storage or an explicit user choice."""
        return self._loaded_from_storage

    @property
    def is_loading(self) -> bool:
        return self._selection.is_loading

    def load(self) -> None:
        """Load preferences from the config store."""
        self._preferences, self._loaded_from_storage = self._store.load_model_preferences()
        self.model_preferences_changed.emit(self.preferences)

    def save(self) -> bool:
        """Persist preferences; failures are reported through persistence_failed."""
        try:
            self._store.save_model_preferences(self._preferences)
        except PersistenceError as e:
            logger.error("%s", e)
            self.persistence_failed.emit(str(e))
            return False
        self.settings_saved.emit()
        return True

    def set_model(self, role: ModelRole, name: object) -> bool:
        """Select a model for a role; blank or unchanged names are ignored."""
        try:
            name = parse_model_name(name)
        except InvalidInputError as e:
            logger.debug("Ignoring %s model %r: %s", role.value, name, e)
            return False
        if name == self._preferences.model_for(role):
            return False

        self._preferences.set_model(role, name)
        # An explicit choice ends first-run auto-selection
        self._loaded_from_storage = True
        self._preferences_updated()
        return True

    def set_context_size_limit(self, value: object) -> bool:
        """Set the context size limit; unsupported sizes are ignored."""
        try:
            size = parse_context_size(value)
        except InvalidInputError as e:
            logger.debug("Ignoring context size %r: %s", value, e)
            return False
        if size == self._preferences.context_size_limit:
            return False

        self._preferences.context_size_limit = size
        self._preferences.last_updated = datetime.now()
        self._preferences_updated()
        return True

    def reset(self) -> None:
        """Restore default preferences."""
        self._preferences = ModelPreferences()
        self._preferences_updated()

    def _preferences_updated(self) -> None:
        self.save()
        self.model_preferences_changed.emit(self.preferences)
        self.settings_changed.emit()

    # Role lists

    def eligible_models(self, role: ModelRole) -> list[ModelDescriptor]:
        """Directory entries usable for a role, in directory order."""
        models = self._selection.available_models
        if role.requires_vision:
            return [model for model in models if model.supports_vision]
        return list(models)

    def models_for_role(self, role: ModelRole) -> list[ModelOption]:
        """
        Picker rows for a role.

        Chat lists text-only models before vision models. If the selected
        model is not in the list it is appended as an unavailable row.
        """
        eligible = self.eligible_models(role)
        if not role.requires_vision:
            eligible = [m for m in eligible if not m.supports_vision] + [
                m for m in eligible if m.supports_vision
            ]

        options = [
            ModelOption(
                name=model.name,
                label=model.display_name,
                supports_vision=model.supports_vision,
            )
            for model in eligible
        ]

        selected = self._preferences.model_for(role)
        if selected and all(option.name != selected for option in options):
            options.append(
                ModelOption(
                    name=selected,
                    label=f"{selected}{NOT_AVAILABLE_SUFFIX}",
                    supports_vision=False,
                    available=False,
                )
            )
        return options

    # Directory fetch

    def refresh(self, client: OllamaClient) -> bool:
        """Fetch the model directory; coalesced while a fetch is in flight."""
        token = self._fetch.begin()
        if token is None:
            logger.debug("Model refresh already in flight")
            return False

        self._set_selection(replace(self._selection, is_loading=True, error=None))
        worker = ServiceWorker(client.list_models, token, "Model directory fetch")
        worker.succeeded.connect(self._on_fetch_succeeded)
        worker.failed.connect(self._on_fetch_failed)
        self._fetch.start(token, worker)
        return True

    def refresh_if_needed(self, client: OllamaClient) -> bool:
        """Refresh only when the directory cache has expired."""
        last_fetch = self._selection.last_fetch_time
        if last_fetch is not None and datetime.now() - last_fetch < timedelta(
            seconds=MODEL_CACHE_TTL_SECONDS
        ):
            return False
        return self.refresh(client)

    def cancel_refresh(self) -> None:
        """Drop the in-flight fetch; its result will be ignored."""
        if not self._fetch.busy:
            return
        self._fetch.cancel()
        self._set_selection(replace(self._selection, is_loading=False))

    def _on_fetch_succeeded(self, models: object, token: int) -> None:
        if not self._fetch.finish(token):
            return
        self._set_selection(
            ModelSelectionState(
                available_models=tuple(models),
                is_loading=False,
                error=None,
                last_fetch_time=datetime.now(),
            )
        )
        logger.info("Model directory holds %d models", len(self._selection.available_models))
        if not self._loaded_from_storage:
            self._auto_select()

    def _on_fetch_failed(self, message: str, token: int) -> None:
        if not self._fetch.finish(token):
            return
        self._set_selection(replace(self._selection, is_loading=False, error=message))

    def _on_fetch_timed_out(self, _token: int) -> None:
        self._set_selection(
            replace(
                self._selection,
                is_loading=False,
                error="Timed out waiting for the model list from Ollama",
            )
        )

    def _set_selection(self, selection: ModelSelectionState) -> None:
        self._selection = selection
        self.model_selection_changed.emit(selection)

    # First-run selection

    def _auto_select(self) -> None:
        changed = False
        for role in ModelRole:
            eligible = [model.name for model in self.eligible_models(role)]
            if not eligible or self._preferences.model_for(role) in eligible:
                continue
            best = self.select_best_model(eligible, role)
            logger.info("Auto-selected %s for %s", best, role.value)
            self._preferences.set_model(role, best)
            changed = True
        if changed:
            self._preferences_updated()

    @staticmethod
    def select_best_model(names: list[str], role: ModelRole) -> str:
        """Pick the preferred model among names: exact match, prefix match, then first."""
        preferred = PREFERRED_VISION_MODELS if role.requires_vision else PREFERRED_CHAT_MODELS
        for candidate in preferred:
            if candidate in names:
                return candidate
        for prefix in PREFIX_MATCH_MODELS:
            if prefix not in preferred:
                continue
            for name in names:
                if name.lower().startswith(prefix.lower()):
                    return name
        return names[0]

    def shutdown(self) -> None:
        self._fetch.shutdown()
