# Copyright (c) Syntropy Systems
"""FastAPI application for submitting tasks and looking up results."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request

from lgnet import __version__
from lgnet.db import (
    count_jobs_by_status,
    create_job,
    get_connection,
    get_job,
    get_result,
    init_db,
)
from lgnet.models.api import (
    HealthResponse,
    StatusResponse,
    TaskStatusResponse,
    TaskSubmit,
    TaskSubmitResponse,
)


def get_conn(request: Request) -> Iterator[sqlite3.Connection]:
    """Open a database connection for the duration of one request."""
    conn = get_connection(request.app.state.db_path, check_same_thread=False)
    try:
        yield conn
    finally:
        conn.close()


def create_app(db_path: Path, max_attempts: int = 3) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        db_path: SQLite database holding the job queue and results
        max_attempts: Deliveries per submitted task before it is marked failed

    Returns:
        Configured FastAPI application
    """
    init_db(db_path)

    app = FastAPI(
        title="lgnet server",
        description="Queue LG network evaluations and look up their results",
        version=__version__,
    )
    app.state.db_path = db_path
    app.state.max_attempts = max_attempts

    @app.post("/submit_task", response_model=TaskSubmitResponse)
    def submit_task(request: TaskSubmit, conn: sqlite3.Connection = Depends(get_conn)):
        """Queue a network evaluation."""
        payload = request.model_dump(mode="json", by_alias=True)
        job_id = create_job(conn, payload, max_attempts=app.state.max_attempts)
        return TaskSubmitResponse(task_id=str(job_id))

    @app.get("/results/{task_id}")
    def get_task_result(task_id: str, conn: sqlite3.Connection = Depends(get_conn)):
        """Get the persisted result of a task."""
        record = get_result(conn, task_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Result not found")
        return record.model_dump(mode="json", by_alias=True)

    @app.get("/api/v1/tasks/{task_id}", response_model=TaskStatusResponse)
    def get_task_status(task_id: str, conn: sqlite3.Connection = Depends(get_conn)):
        """Get the queue status of a task."""
        job = get_job(conn, int(task_id)) if task_id.isdigit() else None
        if job is None:
            raise HTTPException(status_code=404, detail=f"Task {task_id} not found")

        return TaskStatusResponse(
            task_id=job.task_id,
            status=job.status,
            attempt=job.attempt,
            max_attempts=job.max_attempts,
            result=job.result,
            error_message=job.error_message,
            created_at=job.created_at,
            finished_at=job.finished_at,
        )

    @app.get("/api/v1/status", response_model=StatusResponse)
    def get_status(conn: sqlite3.Connection = Depends(get_conn)):
        """Get queue statistics."""
        counts = count_jobs_by_status(conn)
        return StatusResponse(
            queued=counts.get("queued", 0),
            running=counts.get("running", 0),
            completed=counts.get("completed", 0),
            failed=counts.get("failed", 0),
        )

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    return app
