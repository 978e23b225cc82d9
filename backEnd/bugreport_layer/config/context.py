"""
Explicit application context.

Holds the per-user stores (keywords, preferences, recent projects) so that
components receive them as arguments instead of reaching for process-wide
state. Built once by the caller, typically the CLI.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..src.keywords import KeywordStore
from ..src.preferences import PreferencesStore
from ..src.recent_projects import RecentProjectsStore
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Per-user state shared by the CLI commands."""

    settings: Settings
    keywords: KeywordStore
    preferences: PreferencesStore
    recent_projects: RecentProjectsStore

    @property
    def config_dir(self) -> Path:
        return self.settings.config_dir

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AppContext":
        """Create the config directory and load every store from it."""
        settings = settings or get_settings()
        config_dir = Path(settings.config_dir).expanduser()
        config_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Using config directory {config_dir}")

        return cls(
            settings=settings,
            keywords=KeywordStore(config_dir),
            preferences=PreferencesStore(config_dir),
            recent_projects=RecentProjectsStore(
                config_dir, limit=settings.recent_projects_limit
            ),
        )
