"""Main CLI entrypoint for squadlens.

Provides commands for inspecting a squad's members, tasks, logs and decisions.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from squadlens import __version__
from squadlens.activity import HEATMAP_DAYS, VELOCITY_DAYS
from squadlens.config import get_config
from squadlens.decisions.search import SearchCriteria, filter_decisions
from squadlens.errors import TaskNotFoundError
from squadlens.health.checks import CheckStatus, format_results, run_all
from squadlens.models import MemberStatus, TaskStatus
from squadlens.provider import get_provider, reset_provider

console = Console()

STATUS_STYLES = {
    MemberStatus.WORKING_ON_ISSUE: "green",
    MemberStatus.REVIEWING_PR: "magenta",
    MemberStatus.WAITING_REVIEW: "yellow",
    MemberStatus.WORKING: "green",
    MemberStatus.IDLE: "dim",
}

TASK_STYLES = {
    TaskStatus.PENDING: "dim",
    TaskStatus.IN_PROGRESS: "yellow",
    TaskStatus.COMPLETED: "green",
}


def setup_logging() -> None:
    """Configure logging with rich output."""
    config = get_config()

    logging.basicConfig(
        level=getattr(logging, config.logging.level),
        format=config.logging.format,
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="squadlens")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--root",
    "-r",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root containing the squad folder (default: from config)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, root: Path | None) -> None:
    """squadlens – activity and decisions from a squad's markdown.

    Reads team, log and decision documents; never writes them.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    config = get_config()
    if verbose:
        config.logging.level = "DEBUG"
    if root is not None:
        config.workspace.root = root
        reset_provider()

    setup_logging()


@cli.command()
def members() -> None:
    """Show roster members with their current status."""
    provider = get_provider()
    roster = provider.get_roster()
    team = provider.get_members()

    if not team:
        console.print("[yellow]No members found.[/] Run [cyan]squadlens health[/] for hints.")
        return

    table = Table(title=f"Members ({roster.source.value})")
    table.add_column("Name", style="cyan")
    table.add_column("Role")
    table.add_column("Status", no_wrap=True)
    table.add_column("Activity")

    for member in team:
        style = STATUS_STYLES[member.status]
        activity = member.activity.description if member.activity else ""
        table.add_row(member.name, member.role, f"[{style}]{member.status.value}[/]", activity)

    console.print(table)
    if roster.repository:
        console.print(f"Repository: [cyan]{roster.repository}[/]")
    if roster.owner:
        console.print(f"Owner: [cyan]{roster.owner}[/]")


@cli.command()
@click.option("--member", "-m", default=None, help="Only tasks assigned to this member")
@click.option(
    "--history",
    is_flag=True,
    help="Derive from every log directory instead of orchestration logs only",
)
@click.option(
    "--status",
    "status_filter",
    type=click.Choice([status.value for status in TaskStatus]),
    default=None,
    help="Only tasks with this status",
)
def tasks(member: str | None, history: bool, status_filter: str | None) -> None:
    """List tasks derived from the logs."""
    provider = get_provider()
    items = provider.get_history_tasks() if history else provider.get_tasks()
    if member:
        items = [task for task in items if task.assignee.lower() == member.lower()]
    if status_filter:
        items = [task for task in items if task.status.value == status_filter]

    if not items:
        console.print("[yellow]No tasks found.[/]")
        return

    table = Table(title=f"Tasks ({len(items)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Status", no_wrap=True)
    table.add_column("Assignee")
    table.add_column("Started")

    for task in items:
        style = TASK_STYLES[task.status]
        table.add_row(
            task.id,
            task.title,
            f"[{style}]{task.status.value}[/]",
            task.assignee,
            task.started_at.isoformat() if task.started_at else "",
        )

    console.print(table)


@cli.command()
@click.argument("task_id")
def task(task_id: str) -> None:
    """Show one task with its member and related log entries."""
    try:
        details = get_provider().get_work_details(task_id)
    except TaskNotFoundError as e:
        raise click.UsageError(str(e)) from e

    current = details.task
    console.print(f"[bold cyan]{current.id}[/] {current.title}")
    console.print(f"  Status: {current.status.value}")
    console.print(f"  Assignee: {details.member.name} ({details.member.role})")
    if current.started_at:
        console.print(f"  Started: {current.started_at.isoformat()}")
    if current.completed_at:
        console.print(f"  Completed: {current.completed_at.isoformat()}")
    if current.description:
        console.print(f"\n{current.description}")

    if details.log_entries:
        console.print("\n[bold]Related logs:[/]")
        for entry in details.log_entries:
            console.print(f"  • {entry.date.isoformat()} [cyan]{entry.topic}[/]: {entry.summary}")


@cli.command()
@click.option("--limit", "-n", default=20, show_default=True, help="Number of entries to show")
@click.option("--participant", "-p", default=None, help="Only entries with this participant")
def logs(limit: int, participant: str | None) -> None:
    """Show recent log entries from every log directory."""
    entries = get_provider().get_log_entries()
    if participant:
        wanted = participant.lower()
        entries = [e for e in entries if wanted in (p.lower() for p in e.participants)]

    if not entries:
        console.print("[yellow]No log entries found.[/]")
        return

    table = Table(title="Log Entries")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Topic")
    table.add_column("Participants")
    table.add_column("Summary", overflow="fold")

    for entry in entries[:limit]:
        when = entry.date.isoformat()
        if entry.timestamp:
            when += f" {entry.timestamp.strftime('%H:%M')}"
        table.add_row(when, entry.topic, ", ".join(entry.participants), entry.summary)

    console.print(table)
    if len(entries) > limit:
        console.print(f"[dim]… {len(entries) - limit} older entries not shown[/]")


def _validate_date(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> str | None:
    """Accept only YYYY-MM-DD dates."""
    if value is None:
        return None
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter("Date must be in YYYY-MM-DD format.") from exc
    return value


@cli.command()
@click.argument("query", required=False)
@click.option("--since", "start_date", callback=_validate_date, help="Inclusive start date")
@click.option("--until", "end_date", callback=_validate_date, help="Inclusive end date")
@click.option("--author", "-a", default=None, help="Case-insensitive author substring")
@click.option("--full", is_flag=True, help="Print decision content")
def decisions(
    query: str | None,
    start_date: str | None,
    end_date: str | None,
    author: str | None,
    full: bool,
) -> None:
    """Search and filter recorded decisions.

    Without QUERY decisions are listed most recent first.
    """
    criteria = SearchCriteria(
        query=query, start_date=start_date, end_date=end_date, author=author
    )
    results = filter_decisions(get_provider().get_decisions(), criteria)

    if not results:
        console.print("[yellow]No decisions found.[/]")
        return

    for entry in results:
        meta = " · ".join(part for part in (entry.date, entry.author) if part)
        console.print(f"[bold]{entry.title}[/]" + (f"  [dim]{meta}[/]" if meta else ""))
        console.print(f"  [dim]{entry.file_path}:{entry.line_number}[/]")
        if full and entry.content:
            console.print(entry.content)
            console.print()

    console.print(f"\n[bold]{len(results)}[/] decision(s)")


@cli.command()
@click.option("--days", default=VELOCITY_DAYS, show_default=True, help="Velocity window in days")
@click.option(
    "--heatmap-days", default=HEATMAP_DAYS, show_default=True, help="Heatmap window in days"
)
def activity(days: int, heatmap_days: int) -> None:
    """Show task velocity and member participation."""
    provider = get_provider()

    velocity = provider.get_velocity(days)
    total = sum(point.completed_tasks for point in velocity)
    console.print(f"[bold]Velocity[/] (last {days} days): {total} task(s) completed")
    for point in velocity:
        if point.completed_tasks:
            bar = "█" * point.completed_tasks
            console.print(f"  {point.date.isoformat()} [green]{bar}[/] {point.completed_tasks}")

    table = Table(title=f"Participation (last {heatmap_days} days)")
    table.add_column("Member", style="cyan")
    table.add_column("Activity")
    for point in provider.get_heatmap(heatmap_days):
        table.add_row(point.member, f"{point.activity_level:.0%}")
    console.print(table)


@cli.command()
def health() -> None:
    """Diagnose the squad folder."""
    provider = get_provider()
    results = run_all(provider.workspace, provider.source)
    console.print(format_results(results), highlight=False)

    if any(result.status is CheckStatus.FAIL for result in results):
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: from config)")
@click.option("--port", type=int, default=None, help="Port to bind to (default: from config)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the read-only squadlens API server.

    The server binds to localhost by default. It has no authentication.
    """
    import uvicorn

    config = get_config()
    host = host or config.api.host
    port = port or config.api.port

    if host != "127.0.0.1" and host != "localhost":
        console.print(
            f"[bold yellow]⚠️  Warning:[/] Binding to non-localhost address [cyan]{host}[/]"
        )
        console.print("   This exposes the squad data to your network.")
        console.print()

    console.print("[bold blue]Starting squadlens API server...[/]")
    console.print(f"  Squad folder: [cyan]{get_provider().workspace.squad_dir}[/]")
    console.print(f"  URL: [cyan]http://{host}:{port}[/]")
    console.print(f"  API docs: [cyan]http://{host}:{port}/docs[/]")
    console.print()
    console.print("Press [bold]Ctrl+C[/] to stop the server.\n")

    if reload:
        # the reloader imports the app in a child process
        os.environ["SQUADLENS_ROOT"] = str(config.workspace.root)

    uvicorn.run(
        "squadlens.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    cli()
