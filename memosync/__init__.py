"""memos-sync - one-way mirror of a Memos server into a local folder.

Memos become ``<folder>/memos/<id>.md`` and their attachments land in
``<folder>/resources/``; the local tree converges on the remote snapshot on
every run.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "Memo",
    "Resource",
    "RemoteSnapshot",
    "MemosClient",
    "LocalStore",
    "SyncSettings",
    "SettingsStore",
    "Reconciler",
    "SyncOrchestrator",
    "SyncResult",
    "SyncService",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("Memo", "Resource", "RemoteSnapshot", "MemosClient"):
        from memosync import remote

        return getattr(remote, name)
    if name == "LocalStore":
        from memosync.store import LocalStore

        return LocalStore
    if name in ("SyncSettings", "SettingsStore"):
        from memosync import config

        return getattr(config, name)
    if name in ("Reconciler", "SyncOrchestrator", "SyncResult"):
        from memosync import sync

        return getattr(sync, name)
    if name == "SyncService":
        from memosync.service import SyncService

        return SyncService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
