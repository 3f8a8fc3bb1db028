# memos-sync Remote Models
# Snapshot types returned by the remote fetcher

from dataclasses import dataclass, field
from typing import Any

from memosync.errors import ProtocolError


@dataclass(frozen=True)
class Memo:
    """
    A short note from the remote service.

    Maps 1:1 to ``<sync_folder>/memos/<id>.md``.
    """

    id: str
    content: str
    updated_at: int  # seconds since epoch

    @property
    def filename(self) -> str:
        """Local file name for this memo."""
        return f"{self.id}.md"

    @classmethod
    def from_payload(cls, data: Any) -> "Memo":
        """
        Create from a Memos API memo object.

        Args:
            data: Decoded JSON object with ``id``, ``content`` and ``updatedTs``.

        Returns:
            Memo instance.

        Raises:
            ProtocolError: If a required field is missing or mistyped.
        """
        if not isinstance(data, dict):
            raise ProtocolError(f"Expected memo object, got {type(data).__name__}")

        memo_id = data.get("id")
        content = data.get("content")
        updated = data.get("updatedTs")

        if memo_id is None or isinstance(memo_id, bool) or not isinstance(memo_id, (int, str)):
            raise ProtocolError(f"Memo has no usable id: {memo_id!r}")
        if not isinstance(content, str):
            raise ProtocolError(f"Memo {memo_id} has no text content")
        if isinstance(updated, bool) or not isinstance(updated, (int, float)):
            raise ProtocolError(f"Memo {memo_id} has no updatedTs")

        return cls(id=str(memo_id), content=content, updated_at=int(updated))


@dataclass(frozen=True)
class Resource:
    """
    A binary attachment from the remote service.

    Maps 1:1 to ``<sync_folder>/resources/<filename>`` and is never
    rewritten once present locally.
    """

    filename: str
    content: bytes = field(repr=False)


@dataclass
class RemoteSnapshot:
    """Complete point-in-time listing of memos and resources."""

    memos: list[Memo] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of items in the snapshot."""
        return len(self.memos) + len(self.resources)
