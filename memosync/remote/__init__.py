# memos-sync Remote Module
# Snapshot models and the Memos API client

from memosync.remote.client import DEFAULT_TIMEOUT, MemosClient, SnapshotFetcher, parse_open_api
from memosync.remote.models import Memo, RemoteSnapshot, Resource

__all__ = [
    # Models
    "Memo",
    "Resource",
    "RemoteSnapshot",
    # Client
    "SnapshotFetcher",
    "MemosClient",
    "parse_open_api",
    "DEFAULT_TIMEOUT",
]
