# projectdollar/services/preferences_service.py
"""
User preferences (theme, date format, ...) stored as an opaque dict.

The engine does not interpret preferences; it only merges and persists them
in the "preferences" slice of the state store.
"""

import logging
from typing import Any

from projectdollar.services.state_store import StateStore, load_slice, save_slice

logger = logging.getLogger(__name__)

STATE_SLICE = "preferences"


class PreferencesService:
    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._preferences: dict[str, Any] | None = None

    def get_preferences(self) -> dict[str, Any]:
        if self._preferences is None:
            loaded = load_slice(self._store, STATE_SLICE, {})
            self._preferences = dict(loaded) if isinstance(loaded, dict) else {}
        return dict(self._preferences)

    def update_preferences(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Merge top-level keys into the stored preferences and return the result."""
        merged = {**self.get_preferences(), **changes}
        self._preferences = merged
        save_slice(self._store, STATE_SLICE, merged)
        logger.info(f"Preferences updated: {sorted(changes)}")
        return dict(merged)
