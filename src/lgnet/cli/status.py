# Copyright (c) Syntropy Systems
"""lgnet status command."""

from datetime import datetime, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lgnet.config import get_db_path, require_lgnet_dir
from lgnet.db import count_jobs_by_status, get_active_jobs, get_connection, get_job, get_recent_results
from lgnet.models.db import JobRecord
from lgnet.models.network import ResultRecord

console = Console()

STATUS_STYLES = {
    "queued": "yellow",
    "running": "blue",
    "completed": "green",
    "failed": "red",
}


def format_time_ago(timestamp: Optional[str]) -> str:
    """Format a timestamp as time ago."""
    if not timestamp:
        return "-"

    try:
        ts = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return "-"

    total_seconds = int((datetime.now(timezone.utc) - ts).total_seconds())

    if total_seconds < 60:
        return "just now"
    elif total_seconds < 3600:
        return f"{total_seconds // 60}m ago"
    elif total_seconds < 86400:
        return f"{total_seconds // 3600}h ago"
    else:
        return f"{total_seconds // 86400}d ago"


def status(
    task_id: Optional[int] = typer.Argument(
        None,
        help="Task ID to show queue details for",
    ),
) -> None:
    """
    Show queue status.

    Without arguments, shows queue counts, active tasks and the most recent
    results. With a task ID, shows that task's queue record.
    """
    try:
        lgnet_dir = require_lgnet_dir()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    conn = get_connection(get_db_path(lgnet_dir))

    try:
        if task_id is not None:
            job = get_job(conn, task_id)
            if job is None:
                console.print(f"[red]Error:[/red] Task #{task_id} not found")
                raise typer.Exit(1)

            _show_job_details(job)
        else:
            counts = count_jobs_by_status(conn)
            console.print(
                "  ".join(
                    f"[{style}]{name}:[/{style}] {counts.get(name, 0)}"
                    for name, style in STATUS_STYLES.items()
                )
            )
            _show_job_table(get_active_jobs(conn))
            _show_result_table(get_recent_results(conn, limit=10))
    finally:
        conn.close()


def _show_job_table(jobs: list[JobRecord]) -> None:
    """Display active tasks in a table."""
    if not jobs:
        console.print("[dim]No active tasks[/dim]")
        return

    table = Table(show_header=True, header_style="bold", title="Active tasks")
    table.add_column("ID", style="dim")
    table.add_column("Status")
    table.add_column("Attempt")
    table.add_column("Units")
    table.add_column("Submitted")

    for job in jobs:
        style = STATUS_STYLES.get(job.status, "white")
        connections = job.payload.get("connections") or []
        table.add_row(
            job.task_id,
            f"[{style}]{job.status}[/{style}]",
            f"{job.attempt}/{job.max_attempts}",
            str(len(connections)) if isinstance(connections, list) else "-",
            format_time_ago(job.created_at),
        )

    console.print(table)


def _show_result_table(records: list[ResultRecord]) -> None:
    """Display recent results, newest first."""
    if not records:
        console.print("[dim]No results yet[/dim]")
        return

    table = Table(show_header=True, header_style="bold", title="Recent results")
    table.add_column("Task", style="dim")
    table.add_column("O_final", justify="right")
    table.add_column("Units", justify="right")
    table.add_column("Finished")

    for record in records:
        table.add_row(
            record.task_id,
            str(record.o_final),
            str(len(record.connections)),
            format_time_ago(record.timestamp.isoformat()),
        )

    console.print(table)


def _show_job_details(job: JobRecord) -> None:
    """Display detailed task information."""
    style = STATUS_STYLES.get(job.status, "white")

    console.print(f"\n[bold]Task #{job.task_id}[/bold]")
    console.print(f"  [dim]status:[/dim] [{style}]{job.status}[/{style}]")
    console.print(f"  [dim]attempt:[/dim] {job.attempt}/{job.max_attempts}")
    console.print(f"  [dim]created:[/dim] {format_time_ago(job.created_at)}")

    if job.started_at:
        console.print(f"  [dim]started:[/dim] {format_time_ago(job.started_at)}")
    if job.finished_at:
        console.print(f"  [dim]finished:[/dim] {format_time_ago(job.finished_at)}")
    if job.worker_id:
        console.print(f"  [dim]worker:[/dim] {job.worker_id}")
    if job.result is not None:
        console.print(f"  [dim]O_final:[/dim] {job.result}")
    if job.error_message:
        console.print(f"  [dim]error:[/dim] {job.error_message}")
