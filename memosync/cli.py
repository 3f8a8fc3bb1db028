"""Click-based CLI for memos-sync."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console as RichConsole
from rich.logging import RichHandler

from memosync import __version__
from memosync.config import SettingsStore, SyncSettings, ensure_config_exists
from memosync.errors import ConfigError, StoreError
from memosync.output import create_console
from memosync.remote import MemosClient
from memosync.service import SyncService
from memosync.sync import SyncOrchestrator, folder_counts


def _setup_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=RichConsole(stderr=True), show_path=False)],
        force=True,
    )


def _settings_store(ctx: click.Context) -> SettingsStore:
    return SettingsStore(ctx.obj.get("config_path"))


def _load_or_exit(store: SettingsStore, console) -> SyncSettings:
    try:
        return store.load()
    except ConfigError as e:
        console.print_error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="memosync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ~/.config/memosync/config.yaml or $MEMOSYNC_CONFIG)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """memos-sync - mirror your Memos into a local folder.

    One-way sync: memos become <folder>/memos/<id>.md, attachments land in
    <folder>/resources/. Local files that no longer exist remotely are removed.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--dry-run", "-n", is_flag=True, help="Preview changes without applying")
@click.option("--debug/--no-debug", default=None, help="Report every item (overrides the debug setting)")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output and diagnostic logs")
@click.pass_context
def sync(ctx: click.Context, dry_run: bool, debug: Optional[bool], verbose: bool) -> None:
    """Synchronize memos and resources from the Memos server."""
    _setup_logging(verbose)
    console = create_console(verbose=verbose)
    store = _settings_store(ctx)
    settings = _load_or_exit(store, console)

    with MemosClient(timeout=settings.fetch_timeout) as client:
        service = SyncService(SyncOrchestrator(client, store), console)
        service.start()
        try:
            result = service.request_sync(dry_run=dry_run, debug=debug)
        finally:
            service.stop()

    console.print_sync_result(result)

    if not result.success:
        sys.exit(1)

    if result.errors:
        console.print_warning(
            f"{result.errors} item(s) failed but the checkpoint was advanced. "
            "Run 'memosync reset' to force a full resync."
        )


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the local folders and the last sync time."""
    console = create_console()
    store = _settings_store(ctx)
    settings = _load_or_exit(store, console)

    if not settings.is_configured():
        console.print_warning("No OpenAPI key configured. Run 'memosync config set --open-api URL'.")

    try:
        counts = folder_counts(settings)
    except StoreError as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_status(settings, counts)


@cli.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Forget the last sync time so the next sync rewrites every memo."""
    console = create_console()
    store = _settings_store(ctx)
    settings = _load_or_exit(store, console)

    if settings.last_sync_time is None:
        console.print_info("No checkpoint recorded, nothing to reset.")
        return

    store.save(settings.with_checkpoint(None))
    console.print_success("Checkpoint cleared. The next sync is a full sync.")


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.group()
def config() -> None:
    """Manage the settings file."""
    pass


@config.command("init")
@click.pass_context
def config_init(ctx: click.Context) -> None:
    """Create a default settings file if none exists."""
    console = create_console()
    path, created = ensure_config_exists(_settings_store(ctx).path)
    if created:
        console.print_success(f"Created configuration: {path}")
    else:
        console.print_info(f"Configuration already exists: {path}")


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current settings (credential masked)."""
    console = create_console()
    store = _settings_store(ctx)
    settings = _load_or_exit(store, console)
    console.print_settings(settings, str(store.path))


@config.command("set")
@click.option("--open-api", help="Memos OpenAPI URL")
@click.option("--folder", help="Folder to sync memos and resources into")
@click.option("--debug/--no-debug", default=None, help="Enable debug mode")
@click.option("--workers", type=int, help="Concurrent file operations per step")
@click.option("--timeout", type=float, help="Per-request timeout in seconds")
@click.pass_context
def config_set(
    ctx: click.Context,
    open_api: Optional[str],
    folder: Optional[str],
    debug: Optional[bool],
    workers: Optional[int],
    timeout: Optional[float],
) -> None:
    """Change one or more settings.

    \b
    Examples:
        memosync config set --open-api "https://memos.example.com/api/memo?openId=..."
        memosync config set --folder "~/Notes/Memos Sync"
        memosync config set --debug
    """
    console = create_console()
    store = _settings_store(ctx)
    settings = _load_or_exit(store, console)

    updates: dict = {}
    if open_api is not None:
        updates["open_api"] = open_api
    if folder is not None:
        if not folder.strip():
            console.print_error("Please enter the folder name.")
            sys.exit(1)
        updates["sync_folder"] = folder
    if debug is not None:
        updates["debug"] = debug
    if workers is not None:
        updates["max_workers"] = workers
    if timeout is not None:
        updates["fetch_timeout"] = timeout

    if not updates:
        console.print_warning("Nothing to change. See 'memosync config set --help'.")
        return

    try:
        updated = SyncSettings.model_validate({**settings.model_dump(), **updates})
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            console.print_error(f"{loc}: {error['msg']}")
        sys.exit(1)

    path = store.save(updated)
    console.print_success(f"Saved {', '.join(sorted(updates))} to {path}")
