# Copyright (c) Syntropy Systems
"""Main CLI entry point for lgnet."""

import logging

import typer
from rich.logging import RichHandler

from lgnet.cli.eval_cmd import eval_network
from lgnet.cli.init_cmd import init
from lgnet.cli.result import result
from lgnet.cli.server_cmd import server
from lgnet.cli.status import status
from lgnet.cli.submit import submit
from lgnet.cli.worker import worker

app = typer.Typer(
    name="lgnet",
    help=(
        "LG unit networks on a queue. Submit networks, run workers, "
        "watch the network grow."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every state transition"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


# Register commands
_ = app.command()(init)
_ = app.command()(submit)
_ = app.command(name="eval")(eval_network)
_ = app.command()(worker)
_ = app.command()(status)
_ = app.command()(result)
_ = app.command()(server)


if __name__ == "__main__":
    app()
