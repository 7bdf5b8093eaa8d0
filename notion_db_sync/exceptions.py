"""
Exception types raised by the sync system.

Extraction and rendering never raise; everything here is raised by
configuration checks, the Notion transport, the local storage, or the
orchestrator while executing a batch.
"""

from typing import Optional


class SyncError(Exception):
    """Base class for sync failures."""


class ConfigurationError(SyncError, ValueError):
    """Required settings are missing or invalid."""


class TransportError(SyncError):
    """A request to the Notion API failed."""


class StorageError(SyncError):
    """Reading or writing a local file failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SyncAbortedError(SyncError):
    """
    Execution stopped part-way through a batch.

    Writes applied before the failure are kept; ``partial_result``
    describes them so callers can report what actually changed.
    """

    def __init__(self, message: str, partial_result):
        super().__init__(message)
        self.partial_result = partial_result
