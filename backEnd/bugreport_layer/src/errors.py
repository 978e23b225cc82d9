"""Exception hierarchy for the bugreport layer."""

from typing import Optional


class BugreportLayerError(Exception):
    """Base exception for bugreport layer errors."""


class IngestionError(BugreportLayerError):
    """Raised when an archive cannot be ingested.

    Fatal for the whole ingestion call. Artifacts written before the failure
    stay on disk without a manifest entry.
    """

    def __init__(self, message: str, entry_name: Optional[str] = None):
        super().__init__(message)
        self.entry_name = entry_name


class SplitError(BugreportLayerError):
    """Raised when an artifact cannot be partitioned into segments."""


class SearchFileError(BugreportLayerError):
    """Raised when one file of a multi-file search cannot be read."""


class QueryError(BugreportLayerError):
    """Raised for a search pattern that does not compile."""


class PersistenceError(BugreportLayerError):
    """Raised when a persisted document is malformed or cannot be written."""


class ProtectedPathError(BugreportLayerError):
    """Raised when a destructive operation targets a protected directory."""
