"""User preferences persisted in ``settings.json``."""

import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import PersistenceError
from .json_store import read_document, write_document

logger = logging.getLogger(__name__)

PREFERENCES_FILE = "settings.json"


def _default_open_directory() -> str:
    home = Path.home()
    if sys.platform.startswith("win"):
        return str(home / "Desktop")
    return str(home)


class Preferences(BaseModel):
    """Persisted user preferences."""

    model_config = ConfigDict(populate_by_name=True)

    default_open_directory: Optional[str] = Field(
        None,
        alias="defaultOpenDirectory",
        description="Directory the archive picker starts in",
    )


_PREFERENCES = TypeAdapter(Preferences)


class PreferencesStore:
    """Loads preferences on construction and saves on every change."""

    def __init__(self, config_dir: Path):
        self.path = Path(config_dir) / PREFERENCES_FILE
        self.preferences = self._load()

    def _load(self) -> Preferences:
        if not self.path.exists():
            prefs = Preferences(default_open_directory=_default_open_directory())
            self._write(prefs)
            return prefs

        try:
            return read_document(self.path, _PREFERENCES)
        except PersistenceError as e:
            logger.error(f"Preferences unreadable, using defaults: {e}")
            return Preferences()

    def _write(self, prefs: Preferences) -> bool:
        try:
            write_document(self.path, prefs.model_dump(mode="json", by_alias=True))
        except PersistenceError as e:
            logger.error(f"Preferences not saved: {e}")
            return False
        return True

    def save(self) -> bool:
        return self._write(self.preferences)

    @property
    def default_open_directory(self) -> Optional[str]:
        return self.preferences.default_open_directory

    @default_open_directory.setter
    def default_open_directory(self, path: str) -> None:
        self.preferences.default_open_directory = str(path)
        self.save()
