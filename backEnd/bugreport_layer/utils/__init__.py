"""Utility modules for the bugreport layer."""

from .background import BackgroundRunner, ingest_archive_async, search_artifact_async

__all__ = ["BackgroundRunner", "ingest_archive_async", "search_artifact_async"]
