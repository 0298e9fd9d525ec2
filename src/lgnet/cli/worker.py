# Copyright (c) Syntropy Systems
"""lgnet worker command."""

import signal
import socket
from threading import Event, Thread

import typer
from rich.console import Console

from lgnet.config import get_db_path, load_config, require_lgnet_dir
from lgnet.db import SQLiteJobQueue, SQLiteResultStore, get_connection, requeue_stale_jobs
from lgnet.errors import LGNetError
from lgnet.processor import TaskProcessor, Worker

console = Console()

# Shutdown event for graceful termination
_shutdown_event = Event()


def _signal_handler(signum, frame):
    """Handle SIGINT/SIGTERM for graceful shutdown."""
    console.print("\n[yellow]Shutdown requested, finishing current task...[/yellow]")
    _shutdown_event.set()


def worker(
    concurrency: int = typer.Option(
        1,
        "--concurrency", "-c",
        min=1,
        help="Number of tasks processed in parallel",
    ),
    once: bool = typer.Option(
        False,
        "--once",
        help="Drain the queue and exit instead of polling forever",
    ),
) -> None:
    """
    Start a worker to process tasks from the queue.

    Each task is evaluated, the network is adapted from the 10 most recent
    results, and the result is persisted before the task is acknowledged.

    Examples:

        lgnet worker

        lgnet worker --concurrency 4
    """
    try:
        lgnet_dir = require_lgnet_dir()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    config = load_config(lgnet_dir)
    db_path = get_db_path(lgnet_dir)

    conn = get_connection(db_path)
    try:
        stale = requeue_stale_jobs(conn, config.stale_timeout)
    except LGNetError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        conn.close()
    if stale:
        console.print(f"[yellow]Requeued {len(stale)} stale task(s)[/yellow]")
        for job in stale:
            console.print(f"  - Task #{job.task_id} (attempt {job.attempt})")

    queue = SQLiteJobQueue(db_path, max_attempts=config.max_attempts)
    processor = TaskProcessor(SQLiteResultStore(db_path), policy=config.adaptation_policy())

    hostname = socket.gethostname()
    workers = [
        Worker(queue, processor, f"{hostname}:{i}", poll_interval=config.poll_interval)
        for i in range(concurrency)
    ]

    if once:
        _drain(workers)
        return

    _shutdown_event.clear()
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    console.print(f"[green]Worker started:[/green] {hostname} x{concurrency}")
    console.print(f"[dim]Polling for tasks every {config.poll_interval}s...[/dim]")

    threads = [Thread(target=w.run, args=(_shutdown_event,), name=w.worker_id) for w in workers]
    for t in threads:
        t.start()
    try:
        for t in threads:
            t.join()
    finally:
        console.print("[dim]Worker stopped[/dim]")


def _drain(workers: list[Worker]) -> None:
    """Process queued tasks until every worker finds the queue empty."""
    processed: list[int] = [0] * len(workers)

    def drain_one(index: int) -> None:
        while workers[index].run_once() is not None:
            processed[index] += 1

    threads = [Thread(target=drain_one, args=(i,)) for i in range(len(workers))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    console.print(f"[green]Processed {sum(processed)} task(s)[/green]")
