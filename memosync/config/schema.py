# memos-sync Configuration Schema
# Pydantic model for the persisted settings record

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from memosync.remote.client import DEFAULT_TIMEOUT

MEMOS_DIR = "memos"
RESOURCES_DIR = "resources"


class SyncSettings(BaseModel):
    """
    Settings persisted across runs.

    Loaded fresh at the start of every run. A run never mutates the loaded
    value; it returns a new one with an updated checkpoint instead.
    """

    open_api: str = Field(default="", description="Memos OpenAPI URL (the credential)")
    sync_folder: str = Field(default="~/Memos Sync", description="Folder that receives memos/ and resources/")
    debug: bool = Field(default=False, description="Report every synced item on the debug channel")
    last_sync_time: int | None = Field(
        default=None, description="Checkpoint of the last successful run (ms since epoch)"
    )
    fetch_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request timeout in seconds")
    max_workers: int = Field(default=4, ge=1, description="Concurrent file operations per step")

    @field_validator("sync_folder")
    @classmethod
    def expand_folder(cls, v: str) -> str:
        """Expand ~ in the sync folder, keeping an empty value empty."""
        v = v.strip()
        if not v:
            return v
        return str(Path(v).expanduser())

    @field_validator("open_api")
    @classmethod
    def strip_credential(cls, v: str) -> str:
        """Drop surrounding whitespace pasted along with the key."""
        return v.strip()

    @property
    def folder(self) -> Path:
        """Sync folder as a Path."""
        return Path(self.sync_folder).expanduser()

    @property
    def memos_path(self) -> Path:
        """Folder holding one .md file per memo."""
        return self.folder / MEMOS_DIR

    @property
    def resources_path(self) -> Path:
        """Folder holding resource payloads."""
        return self.folder / RESOURCES_DIR

    def is_configured(self) -> bool:
        """Check if a credential has been entered."""
        return bool(self.open_api)

    def with_checkpoint(self, timestamp_ms: int | None) -> "SyncSettings":
        """Return a copy with ``last_sync_time`` replaced."""
        return self.model_copy(update={"last_sync_time": timestamp_ms})

    def masked_credential(self) -> str:
        """Credential with everything but its tail hidden, for display."""
        if not self.open_api:
            return ""
        if len(self.open_api) <= 8:
            return "*" * len(self.open_api)
        return "*" * 8 + self.open_api[-4:]
