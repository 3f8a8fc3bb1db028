# memos-sync Sync Actions
# Action types and execution for reconciliation

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from memosync.errors import StoreError
from memosync.store.local import LocalStore

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    """Types of reconciliation actions."""

    # Memo writes (create or overwrite)
    WRITE_MEMO = "write_memo"

    # Memo untouched since the last checkpoint
    SKIP_UNCHANGED = "skip_unchanged"

    # Resource missing locally
    WRITE_RESOURCE = "write_resource"

    # Resource already present (write-once)
    SKIP_EXISTING = "skip_existing"

    # Local file with no remote counterpart
    DELETE_ORPHAN = "delete_orphan"

    # Item cannot be mapped to a local path
    ERROR = "error"


@dataclass
class SyncAction:
    """
    A reconciliation action for one item.

    Carries the payload to write, if any, so executing the action needs
    nothing beyond the store.
    """

    action_type: ActionType
    path: Path
    name: str
    reason: str = ""
    text: Optional[str] = None
    data: Optional[bytes] = None

    @property
    def is_write(self) -> bool:
        """Check if this is a write action."""
        return self.action_type in (ActionType.WRITE_MEMO, ActionType.WRITE_RESOURCE)

    @property
    def is_delete(self) -> bool:
        """Check if this is a delete action."""
        return self.action_type == ActionType.DELETE_ORPHAN

    @property
    def is_skip(self) -> bool:
        """Check if this item is left alone."""
        return self.action_type in (ActionType.SKIP_UNCHANGED, ActionType.SKIP_EXISTING)

    @property
    def needs_action(self) -> bool:
        """Check if this action requires execution."""
        return self.is_write or self.is_delete


@dataclass
class ActionResult:
    """Result of executing an action."""

    action: SyncAction
    success: bool
    error: Optional[str] = None

    @property
    def item_name(self) -> str:
        """Get the item name."""
        return self.action.name


def execute_action(action: SyncAction, store: LocalStore, *, dry_run: bool = False) -> ActionResult:
    """
    Execute a reconciliation action.

    Store failures are caught here, at the item boundary, and reported in
    the result instead of raised.

    Args:
        action: The action to execute.
        store: Local Store Adapter.
        dry_run: If True, don't actually perform the action.

    Returns:
        ActionResult with success status.
    """
    if action.action_type == ActionType.ERROR:
        return ActionResult(action=action, success=False, error=action.reason)

    if not action.needs_action or dry_run:
        return ActionResult(action=action, success=True)

    try:
        if action.action_type == ActionType.WRITE_MEMO:
            store.write_text(action.path, action.text or "")
        elif action.action_type == ActionType.WRITE_RESOURCE:
            store.write_binary(action.path, action.data or b"")
        else:
            store.remove(action.path)
    except StoreError as e:
        logger.warning("%s failed for %s: %s", action.action_type.value, action.path, e)
        return ActionResult(action=action, success=False, error=str(e))

    return ActionResult(action=action, success=True)
