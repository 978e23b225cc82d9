"""
Archive entry classification.

Only the base name of an entry is considered; directory components and
nested-archive prefixes are provenance, not classification input.
"""

import re
from typing import Optional

from .schemas.artifact import ArtifactKind

ARCHIVE_EXTENSION = ".zip"

BUGREPORT_PATTERN = re.compile(r".*bugreport.*\.txt", re.IGNORECASE | re.DOTALL)
VIDEO_PATTERN = re.compile(r".*\.mp4", re.IGNORECASE | re.DOTALL)


def entry_basename(entry_name: str) -> str:
    """Strip directory components from an archive entry name.

    Accepts both ``/`` and ``\\`` separators, since archives built on Windows
    may use either.
    """
    return re.split(r"[/\\]", entry_name)[-1]


def classify_entry(entry_name: str) -> Optional[ArtifactKind]:
    """
    Classify an archive entry by its base name.

    Args:
        entry_name: Entry name, with or without directory components

    Returns:
        BUGREPORT or VIDEO, or None if the entry should be ignored
    """
    name = entry_basename(entry_name)
    if BUGREPORT_PATTERN.fullmatch(name):
        return ArtifactKind.BUGREPORT
    if VIDEO_PATTERN.fullmatch(name):
        return ArtifactKind.VIDEO
    return None


def is_nested_archive(entry_name: str) -> bool:
    """Check whether an entry is itself an archive to recurse into."""
    return entry_name.lower().endswith(ARCHIVE_EXTENSION)
