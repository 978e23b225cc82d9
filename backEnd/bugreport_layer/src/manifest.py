"""
Project manifest and persistence.

A project is the directory extracted from one archive. Its manifest is the
single source of truth linking artifacts and their segments:

    logs/X.zip
    logs/X/            project directory
    logs/X/X.json      manifest (current layout)
    logs/X.json        manifest (legacy layout, beside the directory)
"""

import json
import logging
import shutil
import time
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import PersistenceError, ProtectedPathError
from .schemas.artifact import ArtifactKind, ArtifactRecord

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".json"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ProjectManifest(BaseModel):
    """
    Manifest for one ingested archive.

    Created once per ingestion run. Mutated only by appending artifacts
    during ingestion, or by changing the display name on rename.
    """

    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field(
        ..., alias="projectName", description="Archive base name without extension"
    )
    display_name: Optional[str] = Field(
        None, alias="displayName", description="User-facing alias"
    )
    archive_path: str = Field(
        ..., alias="originalZipPath", description="Absolute path of the source archive"
    )
    created_at_ms: int = Field(
        default_factory=_now_ms,
        alias="createdDate",
        description="Creation time, epoch milliseconds",
    )
    artifacts: list[ArtifactRecord] = Field(
        default_factory=list,
        alias="files",
        description="Artifacts in archive traversal order",
    )

    @property
    def label(self) -> str:
        return self.display_name or self.project_name

    @property
    def manifest_file_name(self) -> str:
        return f"{self.project_name}{MANIFEST_SUFFIX}"

    def add_artifact(self, record: ArtifactRecord) -> None:
        self.artifacts.append(record)

    def artifacts_of_kind(self, kind: ArtifactKind) -> list[ArtifactRecord]:
        return [a for a in self.artifacts if a.kind == kind]

    def find_artifact(self, file_name: str) -> Optional[ArtifactRecord]:
        """Look up an artifact by its on-disk file name."""
        for record in self.artifacts:
            if record.file_name == file_name:
                return record
        return None

    def to_document(self) -> dict:
        """Serialize using the persisted key names."""
        return self.model_dump(mode="json", by_alias=True)


def save_manifest(manifest: ProjectManifest, project_dir: Path) -> Path:
    """
    Write the manifest inside the project directory.

    Returns:
        Path to ``<project_dir>/<project_name>.json``

    Raises:
        PersistenceError: If the document cannot be written
    """
    manifest_path = Path(project_dir) / manifest.manifest_file_name
    try:
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest.to_document(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise PersistenceError(f"Cannot write manifest {manifest_path}: {e}") from e

    logger.debug(f"Saved manifest {manifest_path}")
    return manifest_path


def load_manifest(manifest_path: Path) -> ProjectManifest:
    """
    Load a manifest document.

    Raises:
        PersistenceError: If the file is unreadable or malformed
    """
    manifest_path = Path(manifest_path)
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
        return ProjectManifest.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        raise PersistenceError(f"Cannot load manifest {manifest_path}: {e}") from e


def resolve_project_dir(manifest_path: Path, manifest: ProjectManifest) -> Path:
    """
    Locate the project directory for a manifest.

    Current layout keeps the manifest inside the project directory; the
    legacy layout keeps it beside a sibling directory of the same name.
    """
    parent = Path(manifest_path).resolve().parent
    if parent.name == manifest.project_name:
        return parent
    return parent / manifest.project_name


def open_project(manifest_path: Path) -> tuple[ProjectManifest, Path]:
    """Load a manifest and resolve its project directory."""
    manifest = load_manifest(manifest_path)
    return manifest, resolve_project_dir(manifest_path, manifest)


def rename_project(manifest_path: Path, display_name: str) -> ProjectManifest:
    """
    Set a project's display name and rewrite its manifest in place.

    The project name, and therefore the directory and file names, are left
    unchanged.
    """
    display_name = display_name.strip()
    if not display_name:
        raise ValueError("Display name must not be blank")

    manifest_path = Path(manifest_path)
    manifest = load_manifest(manifest_path)
    manifest.display_name = display_name
    save_manifest(manifest, manifest_path.parent)
    logger.info(f"Renamed project {manifest.project_name} to {display_name!r}")
    return manifest


def default_protected_dirs() -> list[Path]:
    """Directories a project delete must never remove."""
    home = Path.home()
    return [home] + [home / name for name in ("Desktop", "Documents", "Downloads")]


def delete_project(
    manifest_path: Path,
    protected: Optional[Iterable[Path]] = None,
) -> Path:
    """
    Delete a project directory and its manifest document.

    Args:
        manifest_path: Path to the project's manifest
        protected: Directories that must not be deleted. Defaults to the
            home directory and its Desktop, Documents and Downloads folders.

    Returns:
        The project directory that was removed

    Raises:
        ProtectedPathError: If the project directory is protected or is a
            filesystem root
    """
    manifest_path = Path(manifest_path)
    manifest = load_manifest(manifest_path)
    project_dir = resolve_project_dir(manifest_path, manifest)

    protected_dirs = {
        Path(p).expanduser().resolve()
        for p in (protected if protected is not None else default_protected_dirs())
    }
    if project_dir.parent == project_dir or project_dir in protected_dirs:
        raise ProtectedPathError(f"Refusing to delete protected directory {project_dir}")

    if project_dir.is_dir():
        shutil.rmtree(project_dir)
    manifest_path.unlink(missing_ok=True)

    logger.info(f"Deleted project {manifest.project_name} at {project_dir}")
    return project_dir
