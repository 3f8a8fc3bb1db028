# memos-sync Reconciler
# Diff a remote snapshot against the local tree and apply the result

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from memosync.config.schema import MEMOS_DIR, RESOURCES_DIR
from memosync.errors import StoreError
from memosync.remote.models import Memo, Resource
from memosync.store.local import LocalStore
from memosync.sync.actions import ActionResult, ActionType, SyncAction, execute_action
from memosync.sync.events import EventCallback, EventKind, SyncEvent
from memosync.utils.paths import is_safe_name

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation step for one category."""

    category: str
    written: int = 0
    skipped: int = 0
    deleted: int = 0
    failed: int = 0
    actions: list[SyncAction] = field(default_factory=list)
    results: list[ActionResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if every item went through."""
        return self.failed == 0

    @property
    def total(self) -> int:
        """Number of items considered."""
        return len(self.actions)

    @property
    def failures(self) -> list[ActionResult]:
        """Results of the items that failed."""
        return [r for r in self.results if not r.success]


def _error_action(name: str, folder: Path, reason: str) -> SyncAction:
    return SyncAction(action_type=ActionType.ERROR, path=folder, name=name, reason=reason)


def plan_memos(memos: Iterable[Memo], memos_folder: Path, last_sync_time: Optional[int]) -> list[SyncAction]:
    """
    Decide what to do with each remote memo.

    A memo updated before the checkpoint is skipped. This is a conservative
    shortcut: an edit carrying a timestamp older than the checkpoint is
    missed until the checkpoint is reset. Every other memo is rewritten in
    full, whatever the local file currently holds.

    Args:
        memos: Remote memos in snapshot order.
        memos_folder: ``<sync_folder>/memos``.
        last_sync_time: Checkpoint in ms since epoch, or None for a full run.

    Returns:
        One action per distinct memo path. If the snapshot repeats an id, the
        last occurrence wins.
    """
    planned: dict[Path, SyncAction] = {}
    errors: list[SyncAction] = []

    for memo in memos:
        if not is_safe_name(memo.id):
            errors.append(_error_action(memo.id, memos_folder, f"Unsafe memo id: {memo.id!r}"))
            continue

        path = memos_folder / memo.filename
        updated_ms = memo.updated_at * 1000

        if last_sync_time and updated_ms < last_sync_time:
            planned[path] = SyncAction(
                action_type=ActionType.SKIP_UNCHANGED,
                path=path,
                name=memo.id,
                reason=f"{updated_ms} < {last_sync_time}",
            )
        else:
            planned[path] = SyncAction(
                action_type=ActionType.WRITE_MEMO,
                path=path,
                name=memo.id,
                reason="Updated since last sync" if last_sync_time else "Full sync",
                text=memo.content,
            )

    return list(planned.values()) + errors


def plan_resources(resources: Iterable[Resource], resources_folder: Path, store: LocalStore) -> list[SyncAction]:
    """
    Decide what to do with each remote resource.

    Resources are write-once: an existing file is never overwritten, even
    when the remote payload differs. If the snapshot repeats a filename, the
    first occurrence wins.

    Args:
        resources: Remote resources in snapshot order.
        resources_folder: ``<sync_folder>/resources``.
        store: Local Store Adapter used for the existence check.

    Returns:
        One action per distinct resource path.
    """
    planned: dict[Path, SyncAction] = {}
    errors: list[SyncAction] = []

    for resource in resources:
        if not is_safe_name(resource.filename):
            errors.append(
                _error_action(resource.filename, resources_folder, f"Unsafe resource filename: {resource.filename!r}")
            )
            continue

        path = resources_folder / resource.filename
        if path in planned:
            continue

        if store.exists(path):
            planned[path] = SyncAction(
                action_type=ActionType.SKIP_EXISTING,
                path=path,
                name=resource.filename,
                reason="Already present",
            )
        else:
            planned[path] = SyncAction(
                action_type=ActionType.WRITE_RESOURCE,
                path=path,
                name=resource.filename,
                reason="Missing locally",
                data=resource.content,
            )

    return list(planned.values()) + errors


def expected_memo_paths(memos: Iterable[Memo], memos_folder: Path) -> set[Path]:
    """Local paths the snapshot's memos map to."""
    return {memos_folder / m.filename for m in memos if is_safe_name(m.id)}


def expected_resource_paths(resources: Iterable[Resource], resources_folder: Path) -> set[Path]:
    """Local paths the snapshot's resources map to."""
    return {resources_folder / r.filename for r in resources if is_safe_name(r.filename)}


def find_orphans(expected_paths: set[Path], actual_listing: Iterable[Path]) -> set[Path]:
    """
    Local files with no counterpart in the snapshot.

    Args:
        expected_paths: Paths derived from the snapshot for one category.
        actual_listing: Files currently in that category's folder.

    Returns:
        ``actual_listing - expected_paths``.
    """
    return set(actual_listing) - set(expected_paths)


def plan_orphans(expected_paths: set[Path], actual_listing: Iterable[Path]) -> list[SyncAction]:
    """One delete action per orphan, in path order."""
    return [
        SyncAction(
            action_type=ActionType.DELETE_ORPHAN,
            path=path,
            name=path.name,
            reason="Not in remote snapshot",
        )
        for path in sorted(find_orphans(expected_paths, actual_listing))
    ]


_SUCCESS_EVENTS = {
    ActionType.WRITE_MEMO: EventKind.MEMO_WRITTEN,
    ActionType.SKIP_UNCHANGED: EventKind.MEMO_SKIPPED,
    ActionType.WRITE_RESOURCE: EventKind.RESOURCE_WRITTEN,
    ActionType.SKIP_EXISTING: EventKind.RESOURCE_SKIPPED,
    ActionType.DELETE_ORPHAN: EventKind.ORPHAN_DELETED,
}


class Reconciler:
    """
    Applies planned actions through the Local Store Adapter.

    Items within a step run concurrently on a bounded pool. Each public
    method returns only after every item of its step has finished, so a
    folder is never listed for pruning while a write into it is in flight.
    """

    def __init__(
        self,
        store: LocalStore,
        *,
        max_workers: int = 4,
        emit: Optional[EventCallback] = None,
        dry_run: bool = False,
    ):
        """
        Initialize reconciler.

        Args:
            store: Local Store Adapter.
            max_workers: Upper bound on concurrent file operations.
            emit: Optional callback receiving one SyncEvent per item.
            dry_run: If True, plan and report but never touch the store.
        """
        self.store = store
        self.max_workers = max(1, max_workers)
        self.emit = emit
        self.dry_run = dry_run

    def reconcile_memos(self, memos: list[Memo], sync_folder: Path, last_sync_time: Optional[int]) -> ReconcileResult:
        """Write every memo changed since the checkpoint."""
        actions = plan_memos(memos, sync_folder / MEMOS_DIR, last_sync_time)
        return self._apply(MEMOS_DIR, actions)

    def reconcile_resources(self, resources: list[Resource], sync_folder: Path) -> ReconcileResult:
        """Write every resource that is missing locally."""
        actions = plan_resources(resources, sync_folder / RESOURCES_DIR, self.store)
        return self._apply(RESOURCES_DIR, actions)

    def prune_orphans(self, expected_paths: set[Path], folder: Path) -> ReconcileResult:
        """
        Delete files in ``folder`` that are not in ``expected_paths``.

        Only ``folder`` is listed, so pruning one category can never remove
        files belonging to another.
        """
        category = folder.name
        if self.dry_run and not self.store.exists(folder):
            return ReconcileResult(category=category)

        try:
            listing = self.store.list(folder)
        except StoreError as e:
            logger.warning("Cannot list %s, skipping prune: %s", folder, e)
            action = _error_action(category, folder, str(e))
            return self._apply(category, [action])

        return self._apply(category, plan_orphans(expected_paths, listing))

    def _apply(self, category: str, actions: list[SyncAction]) -> ReconcileResult:
        """Execute actions concurrently and wait for all of them."""
        result = ReconcileResult(category=category, actions=actions)
        if not actions:
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix=f"memosync-{category}") as pool:
            results = list(pool.map(self._run_one, actions))

        for action_result in results:
            action = action_result.action
            result.results.append(action_result)
            if not action_result.success:
                result.failed += 1
            elif action.is_write:
                result.written += 1
            elif action.is_delete:
                result.deleted += 1
            elif action.is_skip:
                result.skipped += 1

        return result

    def _run_one(self, action: SyncAction) -> ActionResult:
        action_result = execute_action(action, self.store, dry_run=self.dry_run)
        if self.emit is not None:
            if action_result.success:
                event = SyncEvent(_SUCCESS_EVENTS[action.action_type], str(action.path), action.reason)
            else:
                event = SyncEvent(EventKind.ITEM_FAILED, str(action.path), action_result.error or "")
            self.emit(event)
        return action_result
