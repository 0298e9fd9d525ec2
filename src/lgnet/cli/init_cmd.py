# Copyright (c) Syntropy Systems
"""lgnet init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from lgnet.config import LGNetConfig
from lgnet.db import init_db

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Initialize a new lgnet project.

    Creates a .lgnet directory with configuration and database.
    """
    target = path.resolve()
    lgnet_dir = target / ".lgnet"

    if lgnet_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {lgnet_dir}")
        return

    lgnet_dir.mkdir(parents=True)

    config_path = lgnet_dir / "config.yaml"
    with config_path.open("w") as f:
        yaml.dump(LGNetConfig().to_dict(), f, default_flow_style=False)

    db_path = lgnet_dir / "lgnet.db"
    init_db(db_path)

    console.print(f"[green]Initialized lgnet project:[/green] {lgnet_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
    console.print(f"  [dim]database:[/dim] {db_path}")
