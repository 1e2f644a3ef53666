"""Command-line interface for archiving, restoring and expiring configuration files."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paramguard.archive import ArchiveError, ArchiveService, RetentionInfo
from paramguard.archive.display import (
    UiMode, format_duration, format_size, format_timestamp, project
)
from paramguard.archive.schemas import MAX_RETENTION_DAYS, ArchiveRecord, ArchiveStatistics
from paramguard.core.config import settings

logger = logging.getLogger(__name__)

app = typer.Typer(help="Archive configuration files with a retention period")
console = Console()


def _service(ctx: typer.Context) -> ArchiveService:
    if ctx.obj is None:
        db_path = ctx.meta.get("db_path", settings.db_path)
        logger.debug(f"Opening archive store at {db_path}")
        ctx.obj = ArchiveService(db_path)
        ctx.call_on_close(ctx.obj.close)
    return ctx.obj


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1)


@app.callback()
def archive_main(
    ctx: typer.Context,
    db_path: Optional[Path] = typer.Option(
        None, "--db", envvar="PARAMGUARD_DB_PATH", help="Path to the archive store file"
    ),
):
    """Manage archived configuration files."""
    ctx.meta["db_path"] = str(db_path) if db_path is not None else settings.db_path


def _display_archives(records: List[ArchiveRecord], detailed: bool) -> None:
    mode = UiMode.CLI_DETAILED if detailed else UiMode.CLI_TERSE
    rows = [project(record, mode) for record in records]

    table = Table(title="Archives")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Age", style="green")
    table.add_column("Status", style="yellow")
    if detailed:
        table.add_column("Path")
        table.add_column("Format", style="magenta")
        table.add_column("Size")
        table.add_column("Reason")

    for info in rows:
        cells = [str(info.id), escape(info.name), info.age, info.status]
        if detailed:
            cells += [escape(info.path), escape(info.format), info.size or "-", escape(info.reason or "None")]
        table.add_row(*cells)

    console.print(table)


def _display_retention_info(archive_id: int, info: RetentionInfo) -> None:
    console.print(f"[bold]Retention Information for Archive {archive_id}[/bold]")
    console.print(f"Archive date:       {format_timestamp(info.archive_timestamp)}")
    console.print(f"Retention period:   {info.retention_period.days} days")
    if info.time_remaining is not None:
        console.print(f"Time remaining:     {format_duration(info.time_remaining)}")
    else:
        console.print("Status:             [green]Expired (can be deleted)[/green]")


def _display_statistics(stats: ArchiveStatistics) -> None:
    table = Table(title="Archive Statistics")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total archives", str(stats.total_archives))
    table.add_row("Active archives", str(stats.active_count))
    table.add_row("Expired archives", str(stats.expired_count))
    table.add_row("Total size", format_size(stats.total_size))
    table.add_row("Avg retention", f"{stats.avg_retention_days:.1f} days")
    console.print(table)


@app.command("store")
def store_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name to archive the file under"),
    path: Path = typer.Argument(..., help="Path to the configuration file to archive"),
    retention_days: int = typer.Option(
        settings.default_retention_days, "--retention-days", "-r", min=0, max=MAX_RETENTION_DAYS,
        help="Days to keep the archive before it may be deleted",
    ),
    reason: Optional[str] = typer.Option(None, "--reason", help="Why the file is archived"),
):
    """Archive a configuration file."""
    try:
        archive_id = _service(ctx).store(name, path, retention_days, reason)
    except ArchiveError as e:
        console.print(f"[red]Failed to archive {escape(name)}![/red]")
        _fail(e)
    console.print(f"Archived '{escape(name)}' with ID: {archive_id}")


@app.command("restore")
def restore_cmd(
    ctx: typer.Context,
    archive_id: int = typer.Argument(..., help="ID of the archive to restore"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="File or directory to restore into (default: original path)"
    ),
):
    """Restore an archived file to disk, overwriting any existing file."""
    try:
        restored = _service(ctx).restore(archive_id, output)
    except ArchiveError as e:
        _fail(e)
    console.print(f"Restored archive {archive_id} to {escape(str(restored))}")


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Number of archives to show"),
    expired: bool = typer.Option(False, "--expired", help="Only show archives past their retention period"),
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Show path, format, size and reason"),
):
    """List archives, most recent first."""
    try:
        service = _service(ctx)
        records = service.expired() if expired else service.list()
    except ArchiveError as e:
        _fail(e)

    if not records:
        console.print("No archives found.")
        return

    total = len(records)
    if limit is not None:
        records = records[:limit]
    _display_archives(records, detailed)
    if len(records) < total:
        console.print(f"\nShowing {len(records)} of {total} archives. Use --limit to show more.")


@app.command("search")
def search_cmd(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for in name, path or reason"),
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Show path, format, size and reason"),
):
    """Search archives by name, original path or reason."""
    try:
        records = _service(ctx).search(query)
    except ArchiveError as e:
        _fail(e)

    if not records:
        console.print(f"No archives matching '{escape(query)}'.")
        return
    _display_archives(records, detailed)


@app.command("info")
def info_cmd(
    ctx: typer.Context,
    archive_id: int = typer.Argument(..., help="ID of the archive"),
):
    """Show details and retention status of one archive."""
    try:
        service = _service(ctx)
        record = service.get_info(archive_id)
        retention = service.get_retention_info(archive_id)
    except ArchiveError as e:
        _fail(e)

    info = project(record, UiMode.CLI_TERSE)
    console.print(f"[bold]Archive:[/bold] {info.id} {escape(info.name)}")
    console.print(f"[bold]Path:[/bold] {escape(info.path)}")
    console.print(f"[bold]Format:[/bold] {escape(info.format)}")
    console.print(f"[bold]Hash:[/bold] {record.content_hash}")
    console.print(f"[bold]Reason:[/bold] {escape(info.reason or 'None')}")
    if info.size:
        console.print(f"[bold]Size:[/bold] {info.size}")
    if info.created:
        console.print(f"[bold]Created:[/bold] {info.created}")
    if info.modified:
        console.print(f"[bold]Modified:[/bold] {info.modified}")
    _display_retention_info(archive_id, retention)


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    archive_id: int = typer.Argument(..., help="ID of the archive to delete"),
):
    """Delete an archive whose retention period has expired."""
    try:
        _service(ctx).delete(archive_id)
    except ArchiveError as e:
        _fail(e)
    console.print(f"Deleted archive {archive_id}")


@app.command("cleanup")
def cleanup_cmd(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without deleting"),
):
    """Remove every archive past its retention period."""
    try:
        service = _service(ctx)
        if dry_run:
            expired = service.expired()
            console.print(f"[yellow]Dry run:[/yellow] {len(expired)} expired archives would be removed")
            for record in expired:
                console.print(f"  {record.id}: {escape(record.name)}")
            return
        count = service.cleanup()
    except ArchiveError as e:
        _fail(e)
    console.print(f"Cleaned up {count} expired archives")


@app.command("stats")
def stats_cmd(ctx: typer.Context):
    """Show archive statistics."""
    try:
        stats = _service(ctx).get_statistics()
    except ArchiveError as e:
        _fail(e)
    _display_statistics(stats)


@app.command("retention")
def retention_cmd(
    ctx: typer.Context,
    archive_id: int = typer.Argument(..., help="ID of the archive"),
    days: int = typer.Argument(..., min=0, max=MAX_RETENTION_DAYS, help="New retention period in days"),
):
    """Change the retention period of an archive."""
    try:
        service = _service(ctx)
        service.update_retention(archive_id, days)
        info = service.get_retention_info(archive_id)
    except ArchiveError as e:
        _fail(e)
    console.print(f"Updated retention period for archive {archive_id} to {days} days")
    _display_retention_info(archive_id, info)


@app.command("verify")
def verify_cmd(
    ctx: typer.Context,
    archive_id: int = typer.Argument(..., help="ID of the archive to verify"),
):
    """Check an archive's content against its stored hash."""
    try:
        ok = _service(ctx).verify(archive_id)
    except ArchiveError as e:
        _fail(e)
    if not ok:
        console.print(f"[bold red]Archive {archive_id} failed integrity check[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Archive {archive_id} content matches its hash[/green]")
