"""
Line search over artifacts and their segments.

Provides:
- search_file(): Scan one file, UTF-8 with a Latin-1 fallback
- search_files(): Scan several files, skipping unreadable ones
- search_artifact(): Resolve a manifest record to files and scan them
- build_keyword_query(): Combine keyword categories into one pattern

Segments are scanned independently, in order, and line numbers restart at 1
for each segment.
"""

import logging
import re
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional, Sequence

from .errors import QueryError, SearchFileError
from .schemas.artifact import ArtifactRecord
from .schemas.search import SearchQuery, SearchResult

logger = logging.getLogger(__name__)

PRIMARY_ENCODING = "utf-8"
# Decodes every byte sequence, so the fallback scan always completes
FALLBACK_ENCODING = "latin-1"

KEYWORD_SEPARATOR = "|"


def compile_matcher(query: SearchQuery) -> Callable[[str], bool]:
    """
    Build a line predicate for a query.

    Raises:
        QueryError: If a pattern query does not compile
    """
    if query.is_regex:
        flags = re.IGNORECASE if query.ignore_case else 0
        try:
            pattern = re.compile(query.text, flags)
        except re.error as e:
            raise QueryError(f"Invalid pattern {query.text!r}: {e}") from e
        return lambda line: pattern.search(line) is not None

    if query.ignore_case:
        needle = query.text.casefold()
        return lambda line: needle in line.casefold()

    needle = query.text
    return lambda line: needle in line


def _scan(
    path: Path,
    matches: Callable[[str], bool],
    encoding: str,
    display_name: str,
    segment_index: Optional[int],
) -> list[SearchResult]:
    results = []
    with open(path, encoding=encoding, errors="strict") as f:
        for line_number, raw in enumerate(f, start=1):
            line = raw.rstrip("\n")
            if matches(line):
                results.append(
                    SearchResult(
                        file_name=display_name,
                        line_number=line_number,
                        line=line,
                        segment_index=segment_index,
                    )
                )
    return results


def search_file(
    path: Path,
    query: SearchQuery,
    display_name: Optional[str] = None,
    segment_index: Optional[int] = None,
    matcher: Optional[Callable[[str], bool]] = None,
) -> list[SearchResult]:
    """
    Find every line of a file that matches the query.

    The file is decoded as UTF-8. If decoding fails part way, results so far
    are dropped and the whole file is rescanned as Latin-1.

    Args:
        path: File to scan
        query: Search query
        display_name: Name reported in results (defaults to the file name)
        segment_index: Segment number reported in results
        matcher: Precompiled predicate, to avoid recompiling per file

    Returns:
        Matching lines with 1-based line numbers local to this file

    Raises:
        SearchFileError: If the file cannot be read
        QueryError: If the query pattern does not compile
    """
    path = Path(path)
    matches = matcher or compile_matcher(query)
    display_name = display_name or path.name

    try:
        try:
            return _scan(path, matches, PRIMARY_ENCODING, display_name, segment_index)
        except UnicodeDecodeError:
            logger.debug(f"{path.name} is not valid {PRIMARY_ENCODING}, rescanning as {FALLBACK_ENCODING}")
            return _scan(path, matches, FALLBACK_ENCODING, display_name, segment_index)
    except OSError as e:
        raise SearchFileError(f"Cannot read {path}: {e}") from e


def search_files(
    paths: Sequence[Path],
    query: SearchQuery,
    segment_indexes: Optional[Sequence[Optional[int]]] = None,
) -> list[SearchResult]:
    """
    Scan several files in order.

    A file that cannot be read is logged and skipped; its matches are simply
    absent from the combined result.
    """
    matches = compile_matcher(query)
    indexes = list(segment_indexes) if segment_indexes is not None else [None] * len(paths)

    results: list[SearchResult] = []
    for path, segment_index in zip(paths, indexes):
        try:
            results.extend(
                search_file(path, query, segment_index=segment_index, matcher=matches)
            )
        except SearchFileError as e:
            logger.warning(f"Skipping unreadable file: {e}")
    return results


def _whole_file_path(record: ArtifactRecord, project_dir: Path) -> Path:
    main_file = project_dir / record.file_name
    if not main_file.exists():
        # Legacy layout: artifacts beside the project directory
        fallback = project_dir.parent / record.file_name
        if fallback.exists():
            return fallback
    return main_file


def resolve_artifact_files(
    record: ArtifactRecord,
    project_dir: Path,
) -> list[tuple[Path, Optional[int]]]:
    """
    Files to scan for an artifact, with their segment numbers.

    Existing segments are used in manifest order; missing ones are skipped.
    When no segment exists, or the artifact was never split, the whole
    file is used instead.
    """
    project_dir = Path(project_dir)

    if record.is_segmented:
        found = []
        for index, name in enumerate(record.segments, start=1):
            part = project_dir / name
            if part.exists():
                found.append((part, index))
            else:
                logger.warning(f"Segment {name} of {record.file_name} is missing")
        if found:
            return found
        logger.warning(f"No segments of {record.file_name} found, using whole file")

    return [(_whole_file_path(record, project_dir), None)]


def search_artifact(
    record: ArtifactRecord,
    project_dir: Path,
    query: SearchQuery,
) -> list[SearchResult]:
    """Search an artifact, or each of its segments in order."""
    files = resolve_artifact_files(record, project_dir)
    paths = [path for path, _ in files]
    indexes = [index for _, index in files]
    results = search_files(paths, query, segment_indexes=indexes)

    logger.info(
        f"Found {len(results)} matches for {query.text!r} in {record.file_name} "
        f"({len(paths)} file(s))"
    )
    return results


def build_keyword_query(
    categories: Mapping[str, Sequence[str]],
    selected: Iterable[str],
) -> Optional[SearchQuery]:
    """
    Combine the keywords of the selected categories into one pattern query.

    Keywords are joined with ``|`` as-is. They are not escaped, so a keyword
    containing pattern metacharacters changes what matches.

    Returns:
        A pattern query, or None if the selection has no keywords
    """
    keywords: list[str] = []
    for name in selected:
        keywords.extend(categories.get(name, []))

    if not keywords:
        return None

    return SearchQuery(
        text=KEYWORD_SEPARATOR.join(keywords),
        is_regex=True,
        ignore_case=True,
    )
