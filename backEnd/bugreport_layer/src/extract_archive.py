"""
Recursive archive extraction.

Walks a bugreport bundle entry by entry:
1. Directory entries are skipped
2. Nested .zip entries are copied to a temporary file in the project
   directory and walked with the same procedure
3. Remaining entries are classified; bugreports and videos are extracted
   under their base name, bugreports are split when oversized

Provenance paths keep the nesting, e.g. ``inner.zip/bugreport1.txt``.
"""

import logging
import os
import tempfile
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .classify import classify_entry, entry_basename, is_nested_archive
from .errors import IngestionError, SplitError
from .manifest import ProjectManifest
from .schemas.artifact import ArtifactKind, ArtifactRecord
from .split_file import DEFAULT_BUFFER_SIZE, split_file

logger = logging.getLogger(__name__)

NESTED_SEPARATOR = "/"

# Errors raised while reading a zip member or its compressed stream
_READ_ERRORS = (
    OSError,
    EOFError,
    RuntimeError,
    zlib.error,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
)


def project_dir_for(archive_path: Path) -> Path:
    """Project directory for an archive: ``X.zip`` -> sibling ``X/``."""
    archive_path = Path(archive_path)
    return archive_path.parent / archive_path.stem


def unique_target_path(directory: Path, name: str) -> Path:
    """
    First free path for ``name`` inside ``directory``.

    Collisions get a numeric suffix before the extension:
    ``bugreport.txt``, ``bugreport_1.txt``, ``bugreport_2.txt``, ...
    Not safe against concurrent writers.
    """
    target = directory / name
    if not target.exists():
        return target

    dot = name.rfind(".")
    stem, ext = (name, "") if dot <= 0 else (name[:dot], name[dot:])
    index = 1
    while target.exists():
        target = directory / f"{stem}_{index}{ext}"
        index += 1
    return target


def _copy_stream(src, dst, buffer_size: int) -> None:
    while True:
        chunk = src.read(buffer_size)
        if not chunk:
            break
        dst.write(chunk)


@contextmanager
def _nested_archive_copy(
    archive: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    project_dir: Path,
    buffer_size: int,
) -> Iterator[Path]:
    """Copy a nested archive to a temporary file, removed on every exit path."""
    fd, temp_name = tempfile.mkstemp(prefix="nested_", suffix=".zip", dir=project_dir)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as dst, archive.open(info) as src:
            _copy_stream(src, dst, buffer_size)
        yield temp_path
    finally:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove temporary archive {temp_path}: {e}")


def _extract_artifact(
    archive: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    kind: ArtifactKind,
    project_dir: Path,
    provenance: str,
    buffer_size: int,
) -> ArtifactRecord:
    target = unique_target_path(project_dir, entry_basename(info.filename))

    with archive.open(info) as src, open(target, "wb") as dst:
        _copy_stream(src, dst, buffer_size)

    segments: Optional[list[str]] = None
    if kind == ArtifactKind.BUGREPORT:
        try:
            segments = split_file(target, buffer_size=buffer_size)
        except SplitError as e:
            logger.warning(f"Keeping {target.name} unsplit: {e}")

    logger.debug(f"Extracted {provenance} -> {target.name} ({kind.value})")

    return ArtifactRecord(
        file_name=target.name,
        file_size=target.stat().st_size,
        relative_path=target.name,
        original_path=provenance,
        kind=kind,
        segments=segments,
    )


def _walk_archive(
    archive_path: Path,
    project_dir: Path,
    manifest: ProjectManifest,
    prefix: str,
    buffer_size: int,
) -> None:
    with zipfile.ZipFile(archive_path) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue

            provenance = prefix + info.filename

            if is_nested_archive(info.filename):
                logger.info(f"Descending into nested archive {provenance}")
                try:
                    with _nested_archive_copy(archive, info, project_dir, buffer_size) as nested:
                        _walk_archive(
                            nested,
                            project_dir,
                            manifest,
                            provenance + NESTED_SEPARATOR,
                            buffer_size,
                        )
                except IngestionError:
                    raise
                except _READ_ERRORS as e:
                    raise IngestionError(
                        f"Failed to process nested archive {provenance}: {e}",
                        entry_name=provenance,
                    ) from e
                continue

            kind = classify_entry(info.filename)
            if kind is None:
                continue

            try:
                record = _extract_artifact(
                    archive, info, kind, project_dir, provenance, buffer_size
                )
            except _READ_ERRORS as e:
                raise IngestionError(
                    f"Failed to extract {provenance}: {e}", entry_name=provenance
                ) from e
            manifest.add_artifact(record)


def extract_project(
    archive_path: Path,
    project_dir: Optional[Path] = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> ProjectManifest:
    """
    Extract and classify every artifact of an archive.

    Args:
        archive_path: Root archive
        project_dir: Output directory. Defaults to the archive's sibling
            directory named after its base name.
        buffer_size: Streaming copy buffer size

    Returns:
        ProjectManifest listing each artifact once, in traversal order

    Raises:
        IngestionError: On any read or write failure. Files already
            extracted are left in place.
    """
    archive_path = Path(archive_path).resolve()
    project_dir = Path(project_dir) if project_dir else project_dir_for(archive_path)

    manifest = ProjectManifest(
        project_name=archive_path.stem,
        archive_path=str(archive_path),
    )

    try:
        project_dir.mkdir(parents=True, exist_ok=True)
        _walk_archive(archive_path, project_dir, manifest, "", buffer_size)
    except IngestionError:
        raise
    except _READ_ERRORS as e:
        raise IngestionError(f"Failed to ingest {archive_path.name}: {e}") from e

    return manifest
