"""Preference lookup by id, from the JSON data file or PostgreSQL."""
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from app.database import get_session_context, is_database_enabled
from app.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"
PREFERENCES_DATA_FILE = os.getenv(
    "PREFERENCES_DATA_FILE", str(DEFAULT_DATA_DIR / "preferences.json")
)


class PreferenceRepository(Protocol):
    async def get(self, preference_id: str) -> Optional[Dict]:
        ...


class JsonPreferenceStore:

    def __init__(self, data_file: Optional[str] = None, preferences: Optional[List[Dict]] = None):
        self.data_file = Path(data_file or PREFERENCES_DATA_FILE)
        self._preferences = preferences

    @property
    def preferences(self) -> List[Dict]:
        if self._preferences is None:
            with open(self.data_file, "r") as f:
                self._preferences = json.load(f)
        return self._preferences

    async def get(self, preference_id: str) -> Optional[Dict]:
        for preference in self.preferences:
            if preference.get("id") == preference_id:
                return preference
        return None


class DatabasePreferenceStore:

    async def get(self, preference_id: str) -> Optional[Dict]:
        from app.models.preference import PreferenceModel

        try:
            async with get_session_context() as session:
                preference = await session.get(PreferenceModel, preference_id)
                return preference.to_dict() if preference else None
        except Exception as e:
            logger.error(f"Preference lookup failed for {preference_id}: {e}")
            raise FetchError("Preference store unavailable") from e


def get_preference_store() -> PreferenceRepository:
    if is_database_enabled():
        return DatabasePreferenceStore()
    return JsonPreferenceStore()
