"""
Keyword categories for composite searches.

Categories map a unique name to an ordered keyword list and keep their
insertion order through save/load. A legacy ``keywords.txt`` (one keyword
per line, no categories) is migrated into a single default category the
first time the store loads and no ``keywords.json`` exists yet.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter

from .errors import PersistenceError
from .json_store import read_document, write_document

logger = logging.getLogger(__name__)

KEYWORDS_FILE = "keywords.json"
LEGACY_KEYWORDS_FILE = "keywords.txt"
DEFAULT_CATEGORY = "Default"

_CATEGORIES = TypeAdapter(dict[str, list[str]])


class KeywordStore:
    """Ordered mapping of category name to keyword list, persisted as JSON."""

    def __init__(self, config_dir: Path):
        self.config_dir = Path(config_dir)
        self.path = self.config_dir / KEYWORDS_FILE
        self.legacy_path = self.config_dir / LEGACY_KEYWORDS_FILE
        self._categories: dict[str, list[str]] = {}
        self.load()

    def load(self) -> None:
        """(Re)load categories from disk, migrating the legacy list if needed."""
        if self.path.exists():
            try:
                self._categories = read_document(self.path, _CATEGORIES)
            except PersistenceError as e:
                logger.error(f"Keyword store unreadable, starting empty: {e}")
                self._categories = {}
        elif self.legacy_path.exists():
            self._migrate_legacy()
        else:
            self._categories = {}

    def _migrate_legacy(self) -> None:
        try:
            text = self.legacy_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read legacy keywords {self.legacy_path}: {e}")
            self._categories = {}
            return

        keywords = [line for line in text.splitlines() if line.strip()]
        self._categories = {DEFAULT_CATEGORY: keywords} if keywords else {}
        logger.info(
            f"Migrated {len(keywords)} legacy keywords into category {DEFAULT_CATEGORY!r}"
        )
        self.save()

    def save(self) -> bool:
        """
        Persist the categories.

        Returns:
            False if the write failed; in-memory state is kept either way
        """
        try:
            write_document(self.path, self._categories)
        except PersistenceError as e:
            logger.error(f"Keyword store not saved: {e}")
            return False
        return True

    @property
    def categories(self) -> dict[str, list[str]]:
        """Copy of the category mapping, in insertion order."""
        return {name: list(words) for name, words in self._categories.items()}

    @property
    def category_names(self) -> list[str]:
        return list(self._categories)

    def get(self, category: str) -> Optional[list[str]]:
        words = self._categories.get(category)
        return list(words) if words is not None else None

    def keywords(self) -> list[str]:
        """All keywords across categories, de-duplicated in first-seen order."""
        return list(dict.fromkeys(w for words in self._categories.values() for w in words))

    def add_category(self, category: str) -> None:
        if category not in self._categories:
            self._categories[category] = []
            self.save()

    def remove_category(self, category: str) -> None:
        if self._categories.pop(category, None) is not None:
            self.save()

    def update_category(self, category: str, keywords: list[str]) -> None:
        """Replace a category's keywords, creating it at the end if new."""
        self._categories[category] = list(keywords)
        self.save()

    def rename_category(self, old_name: str, new_name: str) -> None:
        """Rename a category in place, keeping its position."""
        if old_name not in self._categories:
            raise KeyError(old_name)
        if new_name == old_name:
            return
        if new_name in self._categories:
            raise ValueError(f"Category {new_name!r} already exists")

        self._categories = {
            (new_name if name == old_name else name): words
            for name, words in self._categories.items()
        }
        self.save()
