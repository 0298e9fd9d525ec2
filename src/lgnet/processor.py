# Copyright (c) Syntropy Systems
"""Task processing: evaluate, adapt, persist, acknowledge.

Each task moves through ``received -> evaluated -> adapted -> persisted ->
acknowledged``. A failure before persistence leaves no result record and is
reported to the queue, whose retry policy decides what happens next; the
processor never retries on its own.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from threading import Event
from typing import Optional, Protocol

from lgnet.adapt import AdaptationPolicy, adapt
from lgnet.errors import LGNetError, QueueFailure
from lgnet.models.db import JobRecord
from lgnet.models.network import ResultRecord, Task, parse_task
from lgnet.network import compute_network

logger = logging.getLogger(__name__)


class ResultStore(Protocol):
    """Persistent store for result records."""

    def insert(self, record: ResultRecord) -> bool:
        ...

    def query_recent(self, limit: int = 10) -> list[ResultRecord]:
        ...

    def find_one(self, task_id: str) -> Optional[ResultRecord]:
        ...


class JobQueue(Protocol):
    """Consumer side of the job queue."""

    def receive(self, worker_id: str) -> Optional[JobRecord]:
        ...

    def ack(self, job_id: int, result: int) -> None:
        ...

    def fail(self, job_id: int, error_message: str) -> str:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class TaskProcessor:
    """Evaluates a task's network, adapts its structure and persists the result."""

    def __init__(
        self,
        store: ResultStore,
        policy: Optional[AdaptationPolicy] = None,
        now: Callable[[], datetime] = _utcnow,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.store = store
        self.policy = policy or AdaptationPolicy()
        self.now = now
        self.clock = clock

    def process(self, task: Task) -> int:
        """Process one task and return its ``O_final``.

        ``O_final`` is computed from the submitted network; adaptation only
        changes the connections and lgConfig stored with the record.
        """
        logger.debug("Task %s received (%d units)", task.id, len(task.connections))

        o_final = compute_network(task.connections, task.biases)
        logger.debug("Task %s evaluated: O_final=%d", task.id, o_final)

        history = [r.o_final for r in self.store.query_recent(self.policy.history_limit)]
        adapted = adapt(task.connections, task.lg_config, history, self.policy, self.clock)
        logger.debug("Task %s adapted (grew=%s)", task.id, adapted.grew)

        record = ResultRecord(
            task_id=task.id,
            o_final=o_final,
            inputs=task.inputs,
            connections=adapted.connections,
            lg_config=adapted.lg_config,
            timestamp=self.now(),
        )
        if not self.store.insert(record):
            logger.warning("Task %s already has a result record; keeping the existing one", task.id)
        logger.debug("Task %s persisted", task.id)

        return o_final


class Worker:
    """Pull-process-ack loop over a job queue."""

    def __init__(
        self,
        queue: JobQueue,
        processor: TaskProcessor,
        worker_id: str,
        poll_interval: float = 5.0,
    ) -> None:
        self.queue = queue
        self.processor = processor
        self.worker_id = worker_id
        self.poll_interval = poll_interval

    def run_once(self) -> Optional[JobRecord]:
        """Claim and process one job. Returns the job, or None if the queue was empty."""
        job = self.queue.receive(self.worker_id)
        if job is None:
            return None

        logger.info("[%s] Processing task %s (attempt %d)", self.worker_id, job.task_id, job.attempt)
        try:
            task = parse_task(job.task_id, job.payload)
            o_final = self.processor.process(task)
        except LGNetError as e:
            status = self.queue.fail(job.id, e.describe())
            logger.error("[%s] Task %s failed (%s), now %s", self.worker_id, job.task_id, e.describe(), status)
            return job
        except Exception as e:
            status = self.queue.fail(job.id, f"error: {e}")
            logger.exception("[%s] Task %s raised unexpectedly, now %s", self.worker_id, job.task_id, status)
            return job

        self.queue.ack(job.id, o_final)
        logger.info("[%s] Task %s completed: O_final=%d", self.worker_id, job.task_id, o_final)
        return job

    def run(self, shutdown_event: Event) -> None:
        """Process jobs until ``shutdown_event`` is set.

        An in-flight task always runs to completion; the event is only
        checked between tasks.
        """
        while not shutdown_event.is_set():
            try:
                job = self.run_once()
            except QueueFailure as e:
                logger.warning("[%s] Queue unavailable: %s", self.worker_id, e)
                job = None
            if job is None:
                shutdown_event.wait(timeout=self.poll_interval)
