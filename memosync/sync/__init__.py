# memos-sync Sync Module
# Reconciliation engine and run lifecycle

from memosync.sync.actions import ActionResult, ActionType, SyncAction, execute_action
from memosync.sync.engine import RunPhase, SyncOrchestrator, SyncResult, folder_counts
from memosync.sync.events import EventBus, EventKind, SyncEvent
from memosync.sync.lock import RunLock
from memosync.sync.reconciler import (
    ReconcileResult,
    Reconciler,
    find_orphans,
    plan_memos,
    plan_orphans,
    plan_resources,
)

__all__ = [
    # Actions
    "ActionType",
    "SyncAction",
    "ActionResult",
    "execute_action",
    # Reconciler
    "Reconciler",
    "ReconcileResult",
    "plan_memos",
    "plan_resources",
    "plan_orphans",
    "find_orphans",
    # Events
    "EventKind",
    "SyncEvent",
    "EventBus",
    # Lock
    "RunLock",
    # Engine
    "RunPhase",
    "SyncOrchestrator",
    "SyncResult",
    "folder_counts",
]
