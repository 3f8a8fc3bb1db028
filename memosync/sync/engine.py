# memos-sync Sync Engine
# Run lifecycle: validate, fetch, reconcile, checkpoint

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from memosync.config.loader import SettingsStore
from memosync.config.schema import SyncSettings
from memosync.errors import ConfigError, FetchError, StoreError, SyncInProgressError
from memosync.remote.client import SnapshotFetcher
from memosync.remote.models import RemoteSnapshot
from memosync.store.local import LocalStore
from memosync.sync.events import EventBus, EventKind, SyncEvent
from memosync.sync.lock import RunLock
from memosync.sync.reconciler import (
    ReconcileResult,
    Reconciler,
    expected_memo_paths,
    expected_resource_paths,
)

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to sync memos. Please check your OpenAPI key and network."


class RunPhase(str, Enum):
    """Phases of a sync run. FAILED is terminal."""

    IDLE = "idle"
    VALIDATING = "validating"
    FETCHING = "fetching"
    ENSURING_FOLDERS = "ensuring_folders"
    RECONCILING_MEMOS = "reconciling_memos"
    RECONCILING_RESOURCES = "reconciling_resources"
    PRUNING = "pruning"
    PERSISTING = "persisting"
    FAILED = "failed"


def now_ms() -> int:
    """Current wall-clock time in ms since epoch."""
    return int(time.time() * 1000)


@dataclass
class SyncResult:
    """Result of a complete sync run."""

    success: bool
    phase: RunPhase = RunPhase.IDLE
    failed_phase: Optional[RunPhase] = None
    message: str = ""
    error: Optional[BaseException] = None
    dry_run: bool = False
    settings: Optional[SyncSettings] = None
    checkpoint_advanced: bool = False
    fetched_memos: int = 0
    fetched_resources: int = 0
    step_results: dict[str, ReconcileResult] = field(default_factory=dict)

    def _sum(self, attr: str, *steps: str) -> int:
        return sum(getattr(self.step_results[s], attr) for s in steps if s in self.step_results)

    @property
    def memos_written(self) -> int:
        return self._sum("written", "memos")

    @property
    def memos_skipped(self) -> int:
        return self._sum("skipped", "memos")

    @property
    def resources_written(self) -> int:
        return self._sum("written", "resources")

    @property
    def resources_skipped(self) -> int:
        return self._sum("skipped", "resources")

    @property
    def deleted(self) -> int:
        return self._sum("deleted", "prune_memos", "prune_resources")

    @property
    def errors(self) -> int:
        """Aggregated per-item failure count across all steps."""
        return sum(r.failed for r in self.step_results.values())

    @property
    def has_issues(self) -> bool:
        """Check if the run failed or any item failed."""
        return not self.success or self.errors > 0


class SyncOrchestrator:
    """
    Owns the run lifecycle.

    Settings are loaded fresh from the Settings Store at the start of every
    run and a new value is returned at the end; the loaded value is never
    mutated. The Reconciler only ever sees the folder and the checkpoint.
    """

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        settings_store: SettingsStore,
        *,
        store: Optional[LocalStore] = None,
        clock: Optional[Callable[[], int]] = None,
        events: Optional[EventBus] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            fetcher: Remote Snapshot Fetcher.
            settings_store: Where settings are loaded from and persisted to.
            store: Local Store Adapter (creates a filesystem one if not provided).
            clock: Returns "now" in ms since epoch; used for the checkpoint.
            events: Debug event stream. Subscribers only receive events when
                the run's debug flag is on.
        """
        self.fetcher = fetcher
        self.settings_store = settings_store
        self.store = store or LocalStore()
        self.clock = clock or now_ms
        self.events = events or EventBus()
        self.phase = RunPhase.IDLE

    def run(self, *, dry_run: bool = False, debug: Optional[bool] = None) -> SyncResult:
        """
        Run one sync.

        Configuration, lock, fetch, and folder errors end the run in FAILED
        and are reported in the result, never raised. Per-item store errors
        are counted and do not stop the run or the checkpoint.

        Args:
            dry_run: Plan and report without touching files or the checkpoint.
            debug: Override the settings' debug flag for this run.

        Returns:
            SyncResult describing what happened.
        """
        result = SyncResult(success=False, dry_run=dry_run)

        self._enter(RunPhase.VALIDATING, result)
        try:
            settings = self._load_and_validate()
        except ConfigError as e:
            return self._fail(result, e, str(e))
        result.settings = settings

        debug_enabled = settings.debug if debug is None else debug
        emit = self.events.emit if debug_enabled else None

        lock = RunLock(settings.folder)
        try:
            lock.acquire()
        except SyncInProgressError as e:
            return self._fail(result, e, str(e))
        except OSError as e:
            return self._fail(result, e, f"Cannot lock {settings.folder}: {e}")

        try:
            return self._run_locked(settings, result, dry_run=dry_run, emit=emit)
        finally:
            lock.release()
            if self.phase != RunPhase.FAILED:
                self.phase = RunPhase.IDLE

    def _run_locked(
        self,
        settings: SyncSettings,
        result: SyncResult,
        *,
        dry_run: bool,
        emit: Optional[Callable[[SyncEvent], None]],
    ) -> SyncResult:
        self._enter(RunPhase.FETCHING, result)
        try:
            snapshot = self._fetch(settings.open_api)
        except Exception as e:
            logger.exception("Fetching snapshot failed")
            return self._fail(result, e, FETCH_FAILED_MESSAGE)

        result.fetched_memos = len(snapshot.memos)
        result.fetched_resources = len(snapshot.resources)
        if emit:
            emit(
                SyncEvent(
                    EventKind.FETCHED,
                    "snapshot",
                    f"{result.fetched_memos} memos, {result.fetched_resources} resources",
                )
            )

        self._enter(RunPhase.ENSURING_FOLDERS, result)
        if not dry_run:
            try:
                self._ensure_folders(settings, emit)
            except StoreError as e:
                return self._fail(result, e, f"Cannot create sync folders: {e}")

        reconciler = Reconciler(self.store, max_workers=settings.max_workers, emit=emit, dry_run=dry_run)

        self._enter(RunPhase.RECONCILING_MEMOS, result)
        result.step_results["memos"] = reconciler.reconcile_memos(
            snapshot.memos, settings.folder, settings.last_sync_time
        )

        self._enter(RunPhase.RECONCILING_RESOURCES, result)
        result.step_results["resources"] = reconciler.reconcile_resources(snapshot.resources, settings.folder)

        self._enter(RunPhase.PRUNING, result)
        result.step_results["prune_memos"] = reconciler.prune_orphans(
            expected_memo_paths(snapshot.memos, settings.memos_path), settings.memos_path
        )
        result.step_results["prune_resources"] = reconciler.prune_orphans(
            expected_resource_paths(snapshot.resources, settings.resources_path), settings.resources_path
        )

        if dry_run:
            result.success = True
            result.message = "Dry run completed."
            self._enter(RunPhase.IDLE, result)
            return result

        self._enter(RunPhase.PERSISTING, result)
        updated = settings.with_checkpoint(self.clock())
        try:
            self.settings_store.save(updated)
        except OSError as e:
            logger.error("Could not persist checkpoint: %s", e)
            return self._fail(result, e, f"Synced, but could not save settings: {e}")

        result.settings = updated
        result.checkpoint_advanced = True
        result.success = True
        if result.errors:
            result.message = f"Sync memos finished with {result.errors} failed item(s)."
        else:
            result.message = "Sync memos successfully."
        self._enter(RunPhase.IDLE, result)
        return result

    def _load_and_validate(self) -> SyncSettings:
        settings = self.settings_store.load()
        if not settings.open_api:
            raise ConfigError("Please enter your OpenAPI key.")
        if not settings.sync_folder:
            raise ConfigError("Please enter the folder name.")
        return settings

    def _fetch(self, credential: str) -> RemoteSnapshot:
        snapshot = self.fetcher.fetch(credential)
        if not isinstance(snapshot, RemoteSnapshot):
            raise FetchError(f"Fetcher returned {type(snapshot).__name__}, not a snapshot")
        return snapshot

    def _ensure_folders(self, settings: SyncSettings, emit: Optional[Callable[[SyncEvent], None]]) -> None:
        for folder in (settings.memos_path, settings.resources_path):
            if not self.store.exists(folder):
                self.store.create_folder(folder)
                if emit:
                    emit(SyncEvent(EventKind.FOLDER_CREATED, str(folder)))

    def _enter(self, phase: RunPhase, result: SyncResult) -> None:
        logger.debug("Sync phase: %s", phase.value)
        self.phase = phase
        result.phase = phase

    def _fail(self, result: SyncResult, error: BaseException, message: str) -> SyncResult:
        result.failed_phase = result.phase
        result.error = error
        result.message = message
        result.success = False
        self._enter(RunPhase.FAILED, result)
        return result


def folder_counts(settings: SyncSettings, store: Optional[LocalStore] = None) -> dict[str, int]:
    """Count files currently in the memos and resources folders."""
    store = store or LocalStore()
    counts: dict[str, int] = {}
    for name, folder in (("memos", settings.memos_path), ("resources", settings.resources_path)):
        counts[name] = len(store.list(folder)) if store.exists(folder) else 0
    return counts

