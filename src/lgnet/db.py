# Copyright (c) Syntropy Systems
"""SQLite job queue and result store with WAL mode and atomic claims."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from lgnet.errors import PersistenceFailure, QueueFailure
from lgnet.models.db import JobRecord
from lgnet.models.network import ResultRecord

SCHEMA = """
-- Jobs table (queue of network evaluation tasks)
CREATE TABLE IF NOT EXISTS jobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    payload TEXT NOT NULL,        -- JSON task body: inputs, connections, biases, lgConfig
    status TEXT DEFAULT 'queued',  -- queued, running, completed, failed

    -- Retry tracking
    attempt INTEGER DEFAULT 1,
    max_attempts INTEGER DEFAULT 3,

    -- Timestamps
    created_at TEXT,
    started_at TEXT,
    finished_at TEXT,

    -- Worker assignment
    worker_id TEXT,

    -- Outcome
    result TEXT,                  -- decimal O_final; unbounded integers
    error_message TEXT
);

-- Results table (one record per processed task)
CREATE TABLE IF NOT EXISTS results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id TEXT NOT NULL UNIQUE,
    o_final TEXT NOT NULL,      -- decimal; unbounded integers
    inputs TEXT NOT NULL,       -- JSON array
    connections TEXT NOT NULL,  -- JSON array of units
    lg_config TEXT NOT NULL,    -- JSON array of adaptation records
    timestamp TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_results_timestamp ON results(timestamp);
"""


def get_connection(db_path: Path, check_same_thread: bool = True) -> sqlite3.Connection:
    """
    Get a database connection with proper settings for concurrent access.

    - isolation_level=None for explicit transaction control
    - WAL mode for concurrent readers/writers
    - busy_timeout to wait for locks instead of failing immediately
    - Row factory for dict-like access

    Pass check_same_thread=False when a connection is opened and used on
    different threads, as with request-scoped connections in the server.
    """
    conn = sqlite3.connect(
        str(db_path),
        timeout=5.0,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path) -> None:
    """Initialize the database with the schema."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA)
    finally:
        conn.close()


def utcnow() -> str:
    """Get current UTC time as an ISO format string with microseconds."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@contextmanager
def _queue_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise QueueFailure(f"Failed to {action}: {e}") from e


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise PersistenceFailure(f"Failed to {action}: {e}") from e


# --- Job Operations ---

def create_job(
    conn: sqlite3.Connection,
    payload: dict[str, Any],
    max_attempts: int = 3,
) -> int:
    """Queue a task payload and return its job ID."""
    with _queue_errors("submit job"):
        cursor = conn.execute(
            """
            INSERT INTO jobs (payload, max_attempts, created_at)
            VALUES (?, ?, ?)
            """,
            (json.dumps(payload), max_attempts, utcnow()),
        )
    return cursor.lastrowid


def claim_job(conn: sqlite3.Connection, worker_id: str) -> Optional[JobRecord]:
    """
    Atomically claim the next queued job for a worker.

    Uses UPDATE...RETURNING with subquery for atomic claim.
    Returns the job if claimed, None if no jobs available.
    """
    with _queue_errors("claim job"):
        try:
            conn.execute("BEGIN IMMEDIATE")

            now = utcnow()
            cursor = conn.execute(
                """
                UPDATE jobs
                SET status = 'running',
                    worker_id = ?,
                    started_at = ?
                WHERE id = (
                    SELECT id FROM jobs
                    WHERE status = 'queued'
                    ORDER BY created_at, id
                    LIMIT 1
                )
                RETURNING *
                """,
                (worker_id, now),
            )

            row = cursor.fetchone()
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise

    if row is None:
        return None
    return JobRecord.model_validate(dict(row))


def complete_job(conn: sqlite3.Connection, job_id: int, result: int) -> None:
    """Acknowledge a job as completed with its result value."""
    with _queue_errors("acknowledge job"):
        conn.execute(
            """
            UPDATE jobs
            SET status = 'completed', finished_at = ?, result = ?, error_message = NULL
            WHERE id = ?
            """,
            (utcnow(), str(result), job_id),
        )


def fail_job(conn: sqlite3.Connection, job_id: int, error_message: str) -> str:
    """
    Report a processing failure and apply the retry policy.

    The job goes back to the queue with an incremented attempt counter while
    attempts remain; otherwise it is marked failed. Returns the new status.
    """
    with _queue_errors("fail job"):
        row = conn.execute(
            "SELECT attempt, max_attempts FROM jobs WHERE id = ?",
            (job_id,),
        ).fetchone()
        if row is None:
            raise QueueFailure(f"Job {job_id} not found")

        if row["attempt"] < row["max_attempts"]:
            conn.execute(
                """
                UPDATE jobs
                SET status = 'queued',
                    attempt = attempt + 1,
                    worker_id = NULL,
                    started_at = NULL,
                    error_message = ?
                WHERE id = ?
                """,
                (error_message, job_id),
            )
            return "queued"

        conn.execute(
            """
            UPDATE jobs
            SET status = 'failed', finished_at = ?, error_message = ?
            WHERE id = ?
            """,
            (utcnow(), error_message, job_id),
        )
        return "failed"


def get_job(conn: sqlite3.Connection, job_id: int) -> Optional[JobRecord]:
    """Get a job by ID."""
    with _queue_errors("read job"):
        row = conn.execute(
            "SELECT * FROM jobs WHERE id = ?",
            (job_id,),
        ).fetchone()

    if row is None:
        return None
    return JobRecord.model_validate(dict(row))


def get_active_jobs(conn: sqlite3.Connection) -> list[JobRecord]:
    """Get all queued and running jobs."""
    with _queue_errors("list jobs"):
        rows = conn.execute(
            """
            SELECT * FROM jobs
            WHERE status IN ('queued', 'running')
            ORDER BY created_at, id
            """
        ).fetchall()

    return [JobRecord.model_validate(dict(row)) for row in rows]


def count_jobs_by_status(conn: sqlite3.Connection) -> dict[str, int]:
    """Count jobs per status."""
    with _queue_errors("count jobs"):
        rows = conn.execute(
            "SELECT status, COUNT(*) AS n FROM jobs GROUP BY status"
        ).fetchall()
    return {row["status"]: row["n"] for row in rows}


def requeue_stale_jobs(conn: sqlite3.Connection, timeout_seconds: int = 300) -> list[JobRecord]:
    """
    Return running jobs that were claimed too long ago to the queue.

    A worker that dies mid-task never acknowledges its job; requeueing it
    gives at-least-once delivery. Returns the requeued jobs.
    """
    cutoff_dt = datetime.now(timezone.utc) - timedelta(seconds=timeout_seconds)
    cutoff = cutoff_dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    with _queue_errors("requeue stale jobs"):
        rows = conn.execute(
            """
            UPDATE jobs
            SET status = 'queued',
                worker_id = NULL,
                started_at = NULL,
                attempt = attempt + 1
            WHERE status = 'running'
              AND started_at IS NOT NULL
              AND started_at < ?
            RETURNING *
            """,
            (cutoff,),
        ).fetchall()

    return [JobRecord.model_validate(dict(row)) for row in rows]


# --- Result Operations ---

def _deserialize_result(row: sqlite3.Row) -> ResultRecord:
    return ResultRecord(
        task_id=row["task_id"],
        o_final=int(row["o_final"]),
        inputs=json.loads(row["inputs"]),
        connections=json.loads(row["connections"]),
        lg_config=json.loads(row["lg_config"]),
        timestamp=row["timestamp"],
    )


def insert_result(conn: sqlite3.Connection, record: ResultRecord) -> bool:
    """
    Insert a result record.

    Records are immutable: inserting a second record for the same task
    leaves the first untouched. Returns True if a row was written.
    """
    data = record.model_dump(mode="json", by_alias=True)
    with _store_errors("insert result"):
        cursor = conn.execute(
            """
            INSERT INTO results (task_id, o_final, inputs, connections, lg_config, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(task_id) DO NOTHING
            """,
            (
                record.task_id,
                str(record.o_final),
                json.dumps(data["inputs"]),
                json.dumps(data["connections"]),
                json.dumps(data["lgConfig"]),
                record.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            ),
        )
    return cursor.rowcount == 1


def get_recent_results(conn: sqlite3.Connection, limit: int = 10) -> list[ResultRecord]:
    """Get the most recent results, newest first."""
    with _store_errors("query recent results"):
        rows = conn.execute(
            "SELECT * FROM results ORDER BY timestamp DESC, id DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [_deserialize_result(row) for row in rows]


def get_result(conn: sqlite3.Connection, task_id: str) -> Optional[ResultRecord]:
    """Get the result for a task, or None if it has not been persisted."""
    with _store_errors("read result"):
        row = conn.execute(
            "SELECT * FROM results WHERE task_id = ?",
            (task_id,),
        ).fetchone()

    if row is None:
        return None
    return _deserialize_result(row)


# --- Collaborator wrappers ---

class SQLiteResultStore:
    """Result store backed by the project database, one connection per call."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with _store_errors("open database"):
            conn = get_connection(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def insert(self, record: ResultRecord) -> bool:
        with self._connect() as conn:
            return insert_result(conn, record)

    def query_recent(self, limit: int = 10) -> list[ResultRecord]:
        with self._connect() as conn:
            return get_recent_results(conn, limit)

    def find_one(self, task_id: str) -> Optional[ResultRecord]:
        with self._connect() as conn:
            return get_result(conn, task_id)


class SQLiteJobQueue:
    """Job queue backed by the project database, one connection per call."""

    def __init__(self, db_path: Path, max_attempts: int = 3) -> None:
        self.db_path = db_path
        self.max_attempts = max_attempts

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with _queue_errors("open database"):
            conn = get_connection(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def submit(self, payload: dict[str, Any]) -> int:
        with self._connect() as conn:
            return create_job(conn, payload, max_attempts=self.max_attempts)

    def receive(self, worker_id: str) -> Optional[JobRecord]:
        with self._connect() as conn:
            return claim_job(conn, worker_id)

    def ack(self, job_id: int, result: int) -> None:
        with self._connect() as conn:
            complete_job(conn, job_id, result)

    def fail(self, job_id: int, error_message: str) -> str:
        with self._connect() as conn:
            return fail_job(conn, job_id, error_message)
