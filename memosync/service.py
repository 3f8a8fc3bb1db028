# memos-sync Service
# Host-driven lifecycle around the orchestrator

from typing import Optional, Protocol

from memosync.sync.engine import SyncOrchestrator, SyncResult
from memosync.sync.events import SyncEvent


class Notifier(Protocol):
    """User-facing channels a host provides."""

    def notice(self, message: str) -> None:
        """Transient informational message."""
        ...

    def debug(self, event: SyncEvent) -> None:
        """Persistent debug message, only sent when debug is enabled."""
        ...


class SyncService:
    """
    Lifecycle wrapper driven by a host.

    The host calls :meth:`start` once, :meth:`request_sync` whenever the user
    asks for a sync, and :meth:`stop` when it shuts down. The service never
    decides when the program ends.
    """

    def __init__(self, orchestrator: SyncOrchestrator, notifier: Notifier):
        self.orchestrator = orchestrator
        self.notifier = notifier
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Attach the debug channel. Idempotent."""
        if self._started:
            return
        self.orchestrator.events.subscribe(self.notifier.debug)
        self._started = True

    def stop(self) -> None:
        """Detach the debug channel. Idempotent."""
        if not self._started:
            return
        self.orchestrator.events.unsubscribe(self.notifier.debug)
        self._started = False

    def request_sync(self, *, dry_run: bool = False, debug: Optional[bool] = None) -> SyncResult:
        """
        Run one sync and report the outcome on the notice channel.

        Raises:
            RuntimeError: If the service is not started.
        """
        if not self._started:
            raise RuntimeError("SyncService.start() must be called before requesting a sync")

        self.notifier.notice("Start syncing memos.")
        result = self.orchestrator.run(dry_run=dry_run, debug=debug)
        self.notifier.notice(result.message)
        return result
