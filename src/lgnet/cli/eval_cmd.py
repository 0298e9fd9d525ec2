# Copyright (c) Syntropy Systems
"""lgnet eval command."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from lgnet.cli._task_file import read_task_file
from lgnet.errors import LGNetError
from lgnet.network import evaluate_network

console = Console()


def eval_network(
    task_file: Path = typer.Argument(
        ...,
        help="JSON task file ('-' for stdin)",
    ),
) -> None:
    """Evaluate a network locally and show each unit's output.

    Nothing is queued or persisted, and no adaptation runs.
    """
    try:
        request = read_task_file(task_file)
        evaluation = evaluate_network(request.connections, request.biases)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except LGNetError as e:
        console.print(f"[red]Error:[/red] {e.describe()}")
        raise typer.Exit(1) from e

    table = Table(show_header=True, header_style="bold")
    table.add_column("Unit")
    table.add_column("Type")
    table.add_column("O", justify="right")
    table.add_column("Q", justify="right")
    table.add_column("Q2", justify="right")

    for unit, result in evaluation.results:
        table.add_row(unit.lg_id, unit.type.value, str(result.O), str(result.Q), str(result.Q2))

    if evaluation.results:
        console.print(table)
    console.print(f"[bold]O_final:[/bold] {evaluation.total}")
