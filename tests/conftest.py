# Test fixtures for memosync
# Pytest fixtures for memosync tests

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Optional

import pytest

from memosync.config.loader import SettingsStore
from memosync.config.schema import SyncSettings
from memosync.remote.models import Memo, RemoteSnapshot, Resource

OPEN_API = "https://memos.test/api/memo?openId=test-open-id"
FIXED_NOW_MS = 1_700_000_000_000


class StaticFetcher:
    """Fetcher returning a fixed snapshot, or raising a fixed error."""

    def __init__(self, snapshot: Optional[RemoteSnapshot] = None, error: Optional[Exception] = None):
        self.snapshot = snapshot or RemoteSnapshot()
        self.error = error
        self.calls: list[str] = []

    def fetch(self, credential: str) -> RemoteSnapshot:
        self.calls.append(credential)
        if self.error is not None:
            raise self.error
        return self.snapshot


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("MEMOSYNC_CONFIG", raising=False)
    return home


@pytest.fixture
def sync_folder(temp_dir: Path) -> Path:
    """Sync folder path (not created)."""
    return temp_dir / "vault" / "Memos Sync"


@pytest.fixture
def synced_folders(sync_folder: Path) -> Path:
    """Sync folder with empty memos/ and resources/ folders."""
    (sync_folder / "memos").mkdir(parents=True)
    (sync_folder / "resources").mkdir()
    return sync_folder


@pytest.fixture
def settings_file(temp_dir: Path) -> Path:
    """Settings file path (not created)."""
    return temp_dir / "config" / "config.yaml"


@pytest.fixture
def settings_store(settings_file: Path) -> SettingsStore:
    """Settings store backed by a temp file."""
    return SettingsStore(settings_file)


@pytest.fixture
def configured_store(settings_store: SettingsStore, sync_folder: Path) -> SettingsStore:
    """Settings store holding a credential and the temp sync folder."""
    settings_store.save(SyncSettings(open_api=OPEN_API, sync_folder=str(sync_folder), max_workers=2))
    return settings_store


@pytest.fixture
def sample_snapshot() -> RemoteSnapshot:
    """Small snapshot with two memos and one resource."""
    return RemoteSnapshot(
        memos=[
            Memo(id="1", content="# First\n\nhello", updated_at=1_000),
            Memo(id="2", content="second memo", updated_at=2_000),
        ],
        resources=[Resource(filename="img.png", content=b"\x89PNG\r\n\x1a\n")],
    )


@pytest.fixture
def fetcher_factory():
    """Build StaticFetcher instances."""
    return StaticFetcher


@pytest.fixture
def fixed_clock():
    """Clock returning FIXED_NOW_MS."""
    return lambda: FIXED_NOW_MS


@pytest.fixture
def open_api() -> str:
    """Credential saved by configured_store."""
    return OPEN_API
