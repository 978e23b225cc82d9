"""
Size-based partitioning of large artifacts.

Files of 10 MiB or more are cut into N byte-contiguous segments written next
to the source file:

    N = clamp((size // MiB) // 10, 10, 100)

Segments 1..N-1 hold exactly size // N bytes; the last one holds the rest.
Concatenating the segments in order reproduces the source exactly. Copying
is streamed through a bounded buffer, never the whole file.
"""

import logging
from pathlib import Path
from typing import Optional

from .errors import SplitError

logger = logging.getLogger(__name__)

MIB = 1 << 20
SPLIT_THRESHOLD_BYTES = 10 * MIB
MIN_PARTS = 10
MAX_PARTS = 100
DEFAULT_BUFFER_SIZE = 64 * 1024


def compute_part_count(file_size: int) -> Optional[int]:
    """
    Number of segments for a file of the given size.

    Returns:
        None when the file is below the split threshold
    """
    if file_size < SPLIT_THRESHOLD_BYTES:
        return None

    size_mib = file_size // MIB
    return max(MIN_PARTS, min(MAX_PARTS, size_mib // 10))


def segment_name(file_name: str, index: int) -> str:
    """Name of segment ``index`` (1-based): ``<stem>_sub<N><ext>``."""
    dot = file_name.rfind(".")
    if dot == -1:
        stem, ext = file_name, ""
    else:
        stem, ext = file_name[:dot], file_name[dot:]
    return f"{stem}_sub{index}{ext}"


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError as e:
        raise SplitError(f"Cannot stat {path}: {e}") from e


def _copy_exact(src, dst, count: int, buffer: bytearray) -> None:
    """Copy exactly ``count`` bytes from src to dst."""
    view = memoryview(buffer)
    remaining = count
    while remaining > 0:
        read = src.readinto(view[: min(len(buffer), remaining)])
        if not read:
            raise SplitError(
                f"Unexpected end of source with {remaining} bytes left to copy"
            )
        dst.write(view[:read])
        remaining -= read


def split_file(path: Path, buffer_size: int = DEFAULT_BUFFER_SIZE) -> Optional[list[str]]:
    """
    Partition a file into segments stored in the same directory.

    Args:
        path: File to split
        buffer_size: Size of the intermediate copy buffer

    Returns:
        Segment file names in ascending order, or None if the file is
        below the threshold and was not split

    Raises:
        SplitError: If the source cannot be read, a segment name is already
            taken, or a segment cannot be written. Segments written by the
            failed call are removed; pre-existing files are left untouched.
    """
    path = Path(path)
    file_size = _file_size(path)

    parts = compute_part_count(file_size)
    if parts is None:
        return None

    bytes_per_part = file_size // parts
    names = [segment_name(path.name, i) for i in range(1, parts + 1)]

    # Never overwrite a file that is already in the project directory
    taken = [name for name in names if (path.parent / name).exists()]
    if taken:
        raise SplitError(
            f"Segment names already in use for {path.name}: {', '.join(taken)}"
        )

    buffer = bytearray(buffer_size)
    written: list[Path] = []

    logger.info(
        f"Splitting {path.name} ({file_size:,} bytes) into {parts} segments "
        f"of ~{bytes_per_part:,} bytes"
    )

    try:
        with open(path, "rb") as src:
            for i, name in enumerate(names, start=1):
                # Last segment absorbs the flooring remainder
                if i == parts:
                    limit = file_size - bytes_per_part * (parts - 1)
                else:
                    limit = bytes_per_part

                part_path = path.parent / name
                written.append(part_path)
                with open(part_path, "wb") as dst:
                    _copy_exact(src, dst, limit, buffer)
    except (OSError, SplitError) as e:
        _remove_quietly(written)
        if isinstance(e, SplitError):
            raise
        raise SplitError(f"Failed to split {path}: {e}") from e

    return names


def _remove_quietly(paths: list[Path]) -> None:
    for part_path in paths:
        try:
            part_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial segment {part_path}: {e}")
