"""
Artifact schema for files extracted from a bugreport bundle.

An artifact is a single classified file copied out of the archive:
- BUGREPORT: text dump, split into segments when oversized
- VIDEO: screen recording, stored as-is

Field aliases are the keys used by persisted project documents.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(str, Enum):
    """Classification of an extracted artifact."""

    BUGREPORT = "BUGREPORT"
    VIDEO = "VIDEO"
    OTHER = "OTHER"


class ArtifactRecord(BaseModel):
    """
    Manifest entry for one extracted artifact.

    When ``segments`` is a non-empty list, concatenating the named files in
    order reproduces the artifact byte for byte.
    """

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", description="Name as stored on disk")
    file_size: int = Field(..., ge=0, alias="fileSize", description="Size in bytes")
    relative_path: str = Field(
        ...,
        alias="relativePath",
        description="Path relative to the project directory",
    )
    original_path: str = Field(
        ...,
        alias="originalPath",
        description="Path inside the archive, including nested-archive prefixes",
        examples=["FS/data/bugreport-2024.txt", "inner.zip/bugreport1.txt"],
    )
    kind: ArtifactKind = Field(..., alias="type", description="Artifact classification")
    segments: Optional[list[str]] = Field(
        None,
        alias="splitParts",
        description="Ordered segment file names, None if the artifact was not split",
    )

    @property
    def is_segmented(self) -> bool:
        return bool(self.segments)
