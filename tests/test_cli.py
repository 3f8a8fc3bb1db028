# Tests for memosync.cli
# CLI commands using Click testing

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from memosync.cli import cli
from memosync.config.loader import SettingsStore
from memosync.config.schema import SyncSettings
from memosync.errors import NetworkError
from memosync.remote.models import RemoteSnapshot


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, settings_file, *args: str):
    return runner.invoke(cli, ["--config", str(settings_file), *args])


class TestCliGroup:
    """Tests for main CLI group."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "memos-sync" in result.output
        assert "sync" in result.output
        assert "reset" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "memosync" in result.output


class TestSyncCommand:
    """Tests for sync command."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["sync", "--help"])
        assert result.exit_code == 0
        assert "--dry-run" in result.output

    def test_success(self, runner, configured_store, sync_folder, sample_snapshot, fetcher_factory, open_api):
        fetcher = fetcher_factory(sample_snapshot)
        with patch("memosync.cli.MemosClient") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value = fetcher
            result = _invoke(runner, configured_store.path, "sync")

        assert result.exit_code == 0, result.output
        assert "Start syncing memos." in result.output
        assert "Sync memos successfully." in result.output
        assert "Sync completed" in result.output
        assert (sync_folder / "memos" / "1.md").exists()
        assert configured_store.load().last_sync_time is not None
        assert fetcher.calls == [open_api]

    def test_dry_run(self, runner, configured_store, sync_folder, sample_snapshot, fetcher_factory):
        with patch("memosync.cli.MemosClient") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value = fetcher_factory(sample_snapshot)
            result = _invoke(runner, configured_store.path, "sync", "--dry-run")

        assert result.exit_code == 0, result.output
        assert "Dry run completed" in result.output
        assert not sync_folder.exists()

    def test_fetch_failure_exits_1(self, runner, configured_store, fetcher_factory):
        with patch("memosync.cli.MemosClient") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value = fetcher_factory(error=NetworkError("down"))
            result = _invoke(runner, configured_store.path, "sync")

        assert result.exit_code == 1
        assert "Sync failed" in result.output
        assert configured_store.load().last_sync_time is None

    def test_not_configured_exits_1(self, runner, settings_file, fetcher_factory):
        with patch("memosync.cli.MemosClient") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value = fetcher_factory()
            result = _invoke(runner, settings_file, "sync")

        assert result.exit_code == 1
        assert "Please enter your OpenAPI key." in result.output

    def test_invalid_config_exits_1(self, runner, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("open_api: [broken\n", encoding="utf-8")

        result = _invoke(runner, settings_file, "sync")

        assert result.exit_code == 1
        assert "Invalid YAML" in result.output

    def test_debug_prints_items(self, runner, configured_store, sample_snapshot, fetcher_factory):
        with patch("memosync.cli.MemosClient") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value = fetcher_factory(sample_snapshot)
            result = _invoke(runner, configured_store.path, "sync", "--debug")

        assert result.exit_code == 0, result.output
        assert "Synced memo" in result.output


class TestStatusCommand:
    """Tests for status command."""

    def test_unconfigured_warning(self, runner, settings_file, temp_home):
        result = _invoke(runner, settings_file, "status")
        assert result.exit_code == 0
        assert "No OpenAPI key configured" in result.output
        assert "Last sync: Never" in result.output

    def test_counts(self, runner, configured_store, synced_folders):
        (synced_folders / "memos" / "1.md").write_text("x", encoding="utf-8")
        result = _invoke(runner, configured_store.path, "status")
        assert result.exit_code == 0
        assert "memos" in result.output
        assert "resources" in result.output


class TestResetCommand:
    """Tests for reset command."""

    def test_nothing_to_reset(self, runner, configured_store):
        result = _invoke(runner, configured_store.path, "reset")
        assert result.exit_code == 0
        assert "nothing to reset" in result.output

    def test_clears_checkpoint(self, runner, configured_store):
        configured_store.save(configured_store.load().with_checkpoint(1234))

        result = _invoke(runner, configured_store.path, "reset")

        assert result.exit_code == 0
        assert "Checkpoint cleared" in result.output
        assert configured_store.load().last_sync_time is None


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_init_creates_then_keeps(self, runner, settings_file):
        first = _invoke(runner, settings_file, "config", "init")
        second = _invoke(runner, settings_file, "config", "init")

        assert first.exit_code == 0
        assert "Created configuration" in first.output
        assert "already exists" in second.output

    def test_set_and_show(self, runner, settings_file, sync_folder, open_api):
        result = _invoke(
            runner, settings_file, "config", "set", "--open-api", open_api, "--folder", str(sync_folder), "--debug"
        )
        assert result.exit_code == 0, result.output

        settings = SettingsStore(settings_file).load()
        assert settings.open_api == open_api
        assert settings.folder == sync_folder
        assert settings.debug is True

        shown = _invoke(runner, settings_file, "config", "show")
        assert shown.exit_code == 0
        assert "********t-id" in shown.output
        assert "test-open-id" not in shown.output

    def test_set_keeps_checkpoint(self, runner, settings_store, open_api):
        settings_store.save(SyncSettings(open_api=open_api, last_sync_time=99))

        result = _invoke(runner, settings_store.path, "config", "set", "--workers", "8")

        assert result.exit_code == 0
        loaded = settings_store.load()
        assert loaded.max_workers == 8
        assert loaded.last_sync_time == 99

    def test_set_empty_folder_rejected(self, runner, settings_file):
        result = _invoke(runner, settings_file, "config", "set", "--folder", "  ")
        assert result.exit_code == 1
        assert "Please enter the folder name." in result.output

    def test_set_invalid_value_rejected(self, runner, settings_file):
        result = _invoke(runner, settings_file, "config", "set", "--workers", "0")
        assert result.exit_code == 1
        assert "max_workers" in result.output
        assert not settings_file.exists()

    def test_set_nothing(self, runner, settings_file):
        result = _invoke(runner, settings_file, "config", "set")
        assert result.exit_code == 0
        assert "Nothing to change" in result.output


def test_empty_snapshot_prunes_everything(runner, configured_store, synced_folders, fetcher_factory):
    """An empty remote mirrors to empty local folders."""
    (synced_folders / "memos" / "a.md").write_text("x", encoding="utf-8")
    (synced_folders / "resources" / "b.png").write_bytes(b"x")

    with patch("memosync.cli.MemosClient") as mock_client_cls:
        mock_client_cls.return_value.__enter__.return_value = fetcher_factory(RemoteSnapshot())
        result = _invoke(runner, configured_store.path, "sync")

    assert result.exit_code == 0, result.output
    assert list((synced_folders / "memos").iterdir()) == []
    assert list((synced_folders / "resources").iterdir()) == []
