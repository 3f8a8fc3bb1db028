# memos-sync Console Output
# Rich-based console output for user-friendly display

from datetime import datetime, timezone
from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from memosync.config.schema import SyncSettings
from memosync.sync.actions import ActionType
from memosync.sync.engine import SyncResult
from memosync.sync.events import EventKind, SyncEvent
from memosync.sync.reconciler import ReconcileResult

_STEP_TITLES = {
    "memos": "Memos",
    "resources": "Resources",
    "prune_memos": "Orphan memos",
    "prune_resources": "Orphan resources",
}


def format_timestamp(timestamp_ms: Optional[int]) -> str:
    """Render a ms-since-epoch checkpoint, or "Never"."""
    if not timestamp_ms:
        return "Never"
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


class Console:
    """
    Console output manager using Rich.

    Doubles as the notifier for :class:`memosync.service.SyncService`.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True, rich_console: Optional[RichConsole] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
            rich_console: Optional Rich console to print to.
        """
        self.verbose = verbose
        self._console = rich_console or RichConsole(no_color=not colored, highlight=False)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    # Notifier channels

    def notice(self, message: str) -> None:
        """Transient informational message."""
        self.print_info(message)

    def debug(self, event: SyncEvent) -> None:
        """Debug channel: one dim line per event."""
        style = "red" if event.kind == EventKind.ITEM_FAILED else "dim"
        self._console.print(f"  [{style}]{escape(event.format())}[/{style}]")

    # Reports

    def print_sync_result(self, result: SyncResult) -> None:
        """
        Print sync result summary.

        Args:
            result: Sync result to display.
        """
        self._console.print()

        for key, step in result.step_results.items():
            self._print_step(_STEP_TITLES.get(key, key), step, dry_run=result.dry_run)

        self._console.print()

        write_verb = "would write" if result.dry_run else "written"
        delete_verb = "would delete" if result.dry_run else "deleted"
        title_text = "Dry run completed" if result.dry_run else "Sync completed"

        if not result.success:
            phase = result.failed_phase.value if result.failed_phase else result.phase.value
            self._console.print(
                Panel(
                    f"[red]Sync failed[/red] during {phase}\n{escape(result.message)}",
                    title="Summary",
                    border_style="red",
                )
            )
            return

        self._console.print(
            Panel(
                f"[green]{title_text}[/green]\n"
                f"Fetched: {result.fetched_memos} memos, {result.fetched_resources} resources\n"
                f"Memos: {result.memos_written} {write_verb}, {result.memos_skipped} unchanged\n"
                f"Resources: {result.resources_written} {write_verb}, {result.resources_skipped} already present\n"
                f"Orphans: {result.deleted} {delete_verb}\n"
                f"Errors: {result.errors}",
                title="Summary",
                border_style="yellow" if result.has_issues else "green",
            )
        )

    def _print_step(self, title: str, step: ReconcileResult, *, dry_run: bool = False) -> None:
        """Print result for a single reconciliation step."""
        if step.total == 0:
            if self.verbose:
                self._console.print(f"[green]✓[/green] [bold]{title}[/bold] - nothing to do")
            return

        if step.success:
            self._console.print(f"[green]✓[/green] [bold]{title}[/bold] - {step.total} items")
        else:
            self._console.print(f"[red]✗[/red] [bold]{title}[/bold] - {step.total} items, {step.failed} errors")

        for action_result in step.results:
            action = action_result.action
            if not action_result.success:
                error = escape(action_result.error or "")
                self._console.print(f"    [red]✗[/red] {escape(action.name)}: {error}")
            elif self.verbose or (dry_run and action.needs_action):
                self._console.print(f"    {self._get_action_icon(action.action_type)} {escape(action.name)}")

    def _get_action_icon(self, action_type: ActionType) -> str:
        """Get icon for action type."""
        icons = {
            ActionType.WRITE_MEMO: "[cyan]↓[/cyan]",
            ActionType.WRITE_RESOURCE: "[cyan]+[/cyan]",
            ActionType.SKIP_UNCHANGED: "[dim]○[/dim]",
            ActionType.SKIP_EXISTING: "[dim]○[/dim]",
            ActionType.DELETE_ORPHAN: "[red]×[/red]",
            ActionType.ERROR: "[red]✗[/red]",
        }
        return icons.get(action_type, "?")

    def print_settings(self, settings: SyncSettings, config_path: str) -> None:
        """Print settings with the credential masked."""
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="bold")
        table.add_column("Value")
        table.add_row("Config", escape(config_path))
        table.add_row("OpenAPI", escape(settings.masked_credential()) or "[yellow]not set[/yellow]")
        table.add_row("Folder", escape(settings.sync_folder) or "[yellow]not set[/yellow]")
        table.add_row("Debug", "on" if settings.debug else "off")
        table.add_row("Workers", str(settings.max_workers))
        table.add_row("Timeout", f"{settings.fetch_timeout:g}s")
        table.add_row("Last sync", format_timestamp(settings.last_sync_time))
        self._console.print(Panel(table, title="memos-sync Configuration", border_style="blue"))

    def print_status(self, settings: SyncSettings, counts: dict[str, int]) -> None:
        """Print local folder status."""
        table = Table(show_header=True, header_style="bold")
        table.add_column("Folder", style="cyan")
        table.add_column("Path")
        table.add_column("Files", justify="right")
        table.add_row("memos", escape(str(settings.memos_path)), str(counts.get("memos", 0)))
        table.add_row("resources", escape(str(settings.resources_path)), str(counts.get("resources", 0)))
        self._console.print(table)
        self._console.print(f"Last sync: {format_timestamp(settings.last_sync_time)}")


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
