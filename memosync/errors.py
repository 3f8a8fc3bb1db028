# memos-sync Errors
# Exception hierarchy shared by the fetcher, store, and orchestrator

from pathlib import Path
from typing import Optional


class MemoSyncError(Exception):
    """Base exception for memos-sync errors."""


class ConfigError(MemoSyncError):
    """Settings are missing or invalid. Raised before any I/O happens."""


class FetchError(MemoSyncError):
    """Fetching the remote snapshot failed. Aborts the whole run."""


class AuthError(FetchError):
    """The credential was rejected or cannot be parsed."""


class NetworkError(FetchError):
    """The server is unreachable or the request timed out."""


class ProtocolError(FetchError):
    """The server answered with something that is not a valid snapshot."""


class StoreError(MemoSyncError):
    """A single local file operation failed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(message)


class SyncInProgressError(MemoSyncError):
    """Another run already holds the lock for the sync folder."""
