# Copyright (c) Syntropy Systems
"""lgnet result command."""

import json

import typer
from rich.console import Console

from lgnet.config import get_db_path, require_lgnet_dir
from lgnet.db import get_connection, get_result
from lgnet.errors import LGNetError

console = Console()


def result(
    task_id: str = typer.Argument(..., help="Task ID to look up"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw record as JSON"),
) -> None:
    """Show the persisted result of a task."""
    try:
        lgnet_dir = require_lgnet_dir()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    conn = get_connection(get_db_path(lgnet_dir))
    try:
        record = get_result(conn, task_id)
    except LGNetError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        conn.close()

    if record is None:
        console.print(f"[red]Error:[/red] Result not found for task #{task_id}")
        raise typer.Exit(1)

    if as_json:
        print(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2))
        return

    console.print(f"\n[bold]Task #{record.task_id}[/bold]")
    console.print(f"  [dim]O_final:[/dim] {record.o_final}")
    console.print(f"  [dim]timestamp:[/dim] {record.timestamp.isoformat()}")
    console.print(f"  [dim]inputs:[/dim] {list(record.inputs)}")
    console.print(f"  [dim]units:[/dim] {len(record.connections)}")
    for unit in record.connections:
        console.print(f"    - {unit.lg_id} [dim]({unit.type.value})[/dim]")
    console.print(f"  [dim]lgConfig:[/dim] {len(record.lg_config)} entries")
