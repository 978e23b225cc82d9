"""
Most recently opened projects.

Newest first, capped in length, persisted in ``project_list.json``. Each
entry points at a project's manifest document.
"""

import logging
import time
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter

from .errors import PersistenceError
from .json_store import read_document, write_document

logger = logging.getLogger(__name__)

RECENT_PROJECTS_FILE = "project_list.json"
DEFAULT_LIMIT = 10


class RecentProject(BaseModel):
    """One entry of the recent projects list."""

    name: str = Field(..., description="Label shown to the user")
    path: str = Field(..., description="Absolute path of the manifest document")
    timestamp: int = Field(
        default_factory=lambda: int(time.time() * 1000),
        description="Last opened, epoch milliseconds",
    )

    def __str__(self) -> str:
        return f"{self.name} ({self.path})"


_RECENT = TypeAdapter(list[RecentProject])


class RecentProjectsStore:
    """Recent projects list, saved after every change."""

    def __init__(self, config_dir: Path, limit: int = DEFAULT_LIMIT):
        self.path = Path(config_dir) / RECENT_PROJECTS_FILE
        self.limit = limit
        self._projects: list[RecentProject] = self._load()

    def _load(self) -> list[RecentProject]:
        if not self.path.exists():
            return []
        try:
            return read_document(self.path, _RECENT)
        except PersistenceError as e:
            logger.error(f"Recent projects unreadable, starting empty: {e}")
            return []

    def save(self) -> bool:
        try:
            write_document(self.path, [p.model_dump(mode="json") for p in self._projects])
        except PersistenceError as e:
            logger.error(f"Recent projects not saved: {e}")
            return False
        return True

    @property
    def projects(self) -> list[RecentProject]:
        return list(self._projects)

    def add(self, name: str, path: str) -> RecentProject:
        """Put a project at the top, replacing an older entry for the same path."""
        path = str(path)
        entry = RecentProject(name=name, path=path)
        self._projects = [p for p in self._projects if p.path != path]
        self._projects.insert(0, entry)
        del self._projects[self.limit:]
        self.save()
        return entry

    def remove(self, path: str) -> None:
        path = str(path)
        self._projects = [p for p in self._projects if p.path != path]
        self.save()

    def rename(self, path: str, name: str) -> bool:
        path = str(path)
        for project in self._projects:
            if project.path == path:
                project.name = name
                self.save()
                return True
        return False

    def prune_missing(self) -> list[RecentProject]:
        """Drop entries whose manifest no longer exists; returns the dropped ones."""
        missing = [p for p in self._projects if not Path(p.path).exists()]
        if missing:
            self._projects = [p for p in self._projects if p not in missing]
            self.save()
        return missing
