"""
Background execution for ingestion and search.

Each ingestion or search runs as one unit of work off the caller's thread and
reports back through a single callback. Work is never cancelled: a second
search submitted while the first is running does not replace it, and both
deliver their results. Callers that want "latest search wins" must discard
stale results themselves.
"""

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from ..src.ingest import IngestResult, ingest_archive
from ..src.schemas.artifact import ArtifactRecord
from ..src.schemas.search import SearchQuery, SearchResult
from ..src.search import search_artifact

logger = logging.getLogger(__name__)

R = TypeVar("R")


class BackgroundRunner:
    """
    Runs blocking operations on a worker pool.

    Example:
        >>> with BackgroundRunner() as runner:
        ...     runner.submit(ingest_archive, path, on_done=show_project, on_error=show_error)
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="bugreport-layer"
        )

    def submit(
        self,
        fn: Callable[..., R],
        *args: Any,
        on_done: Optional[Callable[[R], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        **kwargs: Any,
    ) -> "Future[R]":
        """
        Schedule ``fn(*args, **kwargs)``.

        Exactly one of ``on_done`` (with the result) or ``on_error`` (with
        the exception) is called when the work finishes. Without an
        ``on_error`` handler, failures are logged.
        """
        future = self._executor.submit(fn, *args, **kwargs)

        name = getattr(fn, "__name__", fn)

        def _deliver(done: "Future[R]") -> None:
            error = done.exception()
            try:
                if error is not None:
                    if on_error is not None:
                        on_error(error)
                    else:
                        logger.error(f"Background task {name} failed: {error}")
                elif on_done is not None:
                    on_done(done.result())
            except Exception:
                logger.exception(f"Callback for background task {name} failed")

        future.add_done_callback(_deliver)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundRunner":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown(wait=True)


async def ingest_archive_async(archive_path: Path, **kwargs: Any) -> IngestResult:
    """Run ingest_archive without blocking the event loop."""
    return await asyncio.to_thread(ingest_archive, archive_path, **kwargs)


async def search_artifact_async(
    record: ArtifactRecord,
    project_dir: Path,
    query: SearchQuery,
) -> list[SearchResult]:
    """Run search_artifact without blocking the event loop."""
    return await asyncio.to_thread(search_artifact, record, project_dir, query)
