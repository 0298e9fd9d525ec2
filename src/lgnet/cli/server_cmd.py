# Copyright (c) Syntropy Systems
"""CLI command for running the lgnet server."""

import typer
from rich.console import Console

from lgnet.config import get_db_path, load_config, require_lgnet_dir

console = Console()


def server(
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
):
    """
    Start the HTTP server for task submission and result lookup.

    Endpoints:

        POST /submit_task        queue a network, returns {"taskId": ...}

        GET  /results/{taskId}   persisted result, 404 if not found

    Run workers separately with 'lgnet worker'.
    """
    try:
        import uvicorn

        from lgnet.server.app import create_app
    except ImportError as e:
        console.print(f"[red]Error:[/red] Missing dependency: {e}")
        console.print("Install server dependencies with: pip install lgnet[server]")
        raise typer.Exit(1)

    try:
        lgnet_dir = require_lgnet_dir()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    config = load_config(lgnet_dir)
    db_path = get_db_path(lgnet_dir)

    console.print("[bold]lgnet server[/bold]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Database: {db_path}")
    console.print()

    app = create_app(db_path, max_attempts=config.max_attempts)
    uvicorn.run(app, host=host, port=port, log_level="info")
