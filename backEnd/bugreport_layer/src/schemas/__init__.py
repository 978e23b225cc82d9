"""
Pydantic schemas for bugreport layer records.

Artifact records carry their in-archive provenance so every extracted file
can be traced back to the bundle it came from.
"""

from .artifact import ArtifactKind, ArtifactRecord
from .search import SearchQuery, SearchResult

__all__ = [
    "ArtifactKind",
    "ArtifactRecord",
    "SearchQuery",
    "SearchResult",
]
