"""
Main ingestion orchestrator.

Chains the pipeline steps:
1. Extract and classify artifacts (nested archives included)
2. Split oversized bugreports into segments
3. Save the project manifest inside the project directory
4. Record the project in the recent projects list

Ingestion is not atomic: on failure, files extracted so far stay in the
project directory without a manifest.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .errors import IngestionError
from .extract_archive import extract_project, project_dir_for
from .manifest import ProjectManifest, save_manifest
from .schemas.artifact import ArtifactKind
from .split_file import DEFAULT_BUFFER_SIZE

if TYPE_CHECKING:
    from ..config.context import AppContext

logger = logging.getLogger(__name__)


class IngestResult:
    """Result of ingestion pipeline."""

    def __init__(
        self,
        manifest: ProjectManifest,
        project_dir: Path,
        manifest_path: Path,
    ):
        self.manifest = manifest
        self.project_dir = project_dir
        self.manifest_path = manifest_path

    @property
    def num_artifacts(self) -> int:
        return len(self.manifest.artifacts)

    @property
    def num_bugreports(self) -> int:
        return len(self.manifest.artifacts_of_kind(ArtifactKind.BUGREPORT))

    @property
    def num_videos(self) -> int:
        return len(self.manifest.artifacts_of_kind(ArtifactKind.VIDEO))

    @property
    def num_segments(self) -> int:
        return sum(len(a.segments or []) for a in self.manifest.artifacts)

    def __repr__(self) -> str:
        return (
            f"IngestResult(project={self.manifest.project_name!r}, "
            f"artifacts={self.num_artifacts}, "
            f"bugreports={self.num_bugreports}, "
            f"videos={self.num_videos}, "
            f"segments={self.num_segments})"
        )


def ingest_archive(
    archive_path: Path,
    context: Optional["AppContext"] = None,
    buffer_size: Optional[int] = None,
) -> IngestResult:
    """
    Run the full ingestion pipeline on a bugreport bundle.

    Args:
        archive_path: Path to the .zip bundle
        context: When given, the project is added to its recent projects
            list and its settings supply the copy buffer size
        buffer_size: Streaming copy buffer size, overrides the context

    Returns:
        IngestResult with the manifest and its location

    Raises:
        IngestionError: If the archive is missing, unreadable, or an
            artifact cannot be extracted
    """
    archive_path = Path(archive_path).resolve()
    if not archive_path.is_file():
        raise IngestionError(f"Archive not found: {archive_path}")

    if buffer_size is None:
        buffer_size = context.settings.copy_buffer_bytes if context else DEFAULT_BUFFER_SIZE

    project_dir = project_dir_for(archive_path)
    logger.info(f"Ingesting {archive_path.name} into {project_dir}")

    manifest = extract_project(archive_path, project_dir, buffer_size=buffer_size)
    manifest_path = save_manifest(manifest, project_dir)

    result = IngestResult(
        manifest=manifest,
        project_dir=project_dir,
        manifest_path=manifest_path,
    )
    logger.info(f"Ingestion complete: {result!r}")

    if context is not None:
        context.recent_projects.add(manifest.label, str(manifest_path))

    return result
