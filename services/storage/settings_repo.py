from __future__ import annotations
from typing import Any, Dict, Mapping, Optional
import logging

from services.config.cache import ConfigCache
from services.config.settings import sanitize_settings
from services.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

SETTINGS_COLLECTION = "settings"
GLOBAL_CONFIG_ID = "global_config"


class SettingsRepository:
    """Reads and writes the global settings document.

    Doubles as the ConfigProvider of the calculation cache. Writes invalidate
    the cache once attached so the next calculation sees the new values.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self._cache: Optional[ConfigCache] = None

    def attach_cache(self, cache: ConfigCache) -> None:
        self._cache = cache

    def fetch_global_configuration(self) -> Optional[Dict[str, Any]]:
        return self.store.get(SETTINGS_COLLECTION, GLOBAL_CONFIG_ID)

    def update_settings(self, updates: Mapping[str, Any]) -> Dict[str, Any]:
        clean = sanitize_settings(updates)
        # nested maps merge; lists such as team_composition are replaced whole
        doc = self.store.set(SETTINGS_COLLECTION, GLOBAL_CONFIG_ID, clean, merge=True)
        logger.info("Global settings updated: sections=%s", sorted(clean.keys()))
        if self._cache is not None:
            self._cache.invalidate()
        return doc
