# memos-sync Sync Events
# Structured per-item event stream for debug sinks

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Kinds of events emitted during a run."""

    FETCHED = "fetched"
    FOLDER_CREATED = "folder_created"
    MEMO_WRITTEN = "memo_written"
    MEMO_SKIPPED = "memo_skipped"
    RESOURCE_WRITTEN = "resource_written"
    RESOURCE_SKIPPED = "resource_skipped"
    ORPHAN_DELETED = "orphan_deleted"
    ITEM_FAILED = "item_failed"


_LABELS = {
    EventKind.FETCHED: "Fetched snapshot",
    EventKind.FOLDER_CREATED: "Created folder",
    EventKind.MEMO_WRITTEN: "Synced memo",
    EventKind.MEMO_SKIPPED: "Skipped memo",
    EventKind.RESOURCE_WRITTEN: "Synced resource",
    EventKind.RESOURCE_SKIPPED: "Skipped resource",
    EventKind.ORPHAN_DELETED: "Deleted",
    EventKind.ITEM_FAILED: "Failed",
}


@dataclass(frozen=True)
class SyncEvent:
    """A single thing that happened to one item."""

    kind: EventKind
    item: str
    detail: str = ""

    def format(self) -> str:
        """Human-readable one-liner."""
        text = f"{_LABELS[self.kind]}: {self.item}"
        if self.detail:
            text += f" ({self.detail})"
        return text


EventCallback = Callable[[SyncEvent], None]


class EventBus:
    """
    Fan-out of sync events to subscribers.

    Safe to emit from worker threads. Subscribers run outside the bus lock,
    so a callback may subscribe or unsubscribe while handling an event. A
    subscriber that raises is logged and skipped; it never interrupts the
    run.
    """

    def __init__(self) -> None:
        self._subscribers: list[EventCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: EventCallback) -> None:
        """Register a callback for every future event."""
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        """Remove a previously registered callback."""
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def emit(self, event: SyncEvent) -> None:
        """Deliver an event to all subscribers."""
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Event subscriber failed on %s", event.kind.value)
