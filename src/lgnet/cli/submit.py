# Copyright (c) Syntropy Systems
"""lgnet submit command."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from lgnet.cli._task_file import read_task_file
from lgnet.config import get_db_path, load_config, require_lgnet_dir
from lgnet.db import create_job, get_connection
from lgnet.errors import LGNetError

console = Console()


def submit(
    task_file: Path = typer.Argument(
        ...,
        help="JSON file with inputs, connections, biases and lgConfig ('-' for stdin)",
    ),
) -> None:
    """Submit a network evaluation to the queue.

        lgnet submit network.json

    The file holds the same body the server accepts on /submit_task:

        {"inputs": [], "connections": [{"type": "simple", "lgId": "u1",
         "stInputs": [10], "ptInputs": [3]}], "biases": {"u1": 4}, "lgConfig": []}
    """
    try:
        lgnet_dir = require_lgnet_dir()
        request = read_task_file(task_file)
    except (RuntimeError, ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    config = load_config(lgnet_dir)
    conn = get_connection(get_db_path(lgnet_dir))
    try:
        job_id = create_job(
            conn,
            request.model_dump(mode="json", by_alias=True),
            max_attempts=config.max_attempts,
        )
    except LGNetError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    finally:
        conn.close()

    console.print(f"[green]Submitted task #{job_id}[/green] ({len(request.connections)} units)")
