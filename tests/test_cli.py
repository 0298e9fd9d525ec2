# Copyright (c) Syntropy Systems
"""Tests for lgnet CLI commands."""

import json
import os
from pathlib import Path

from typer.testing import CliRunner

from lgnet.cli.main import app

runner = CliRunner()


def _write_task(directory: Path, payload: dict, name: str = "task.json") -> Path:
    path = directory / name
    path.write_text(json.dumps(payload))
    return path


class TestInitCommand:
    """Tests for lgnet init command."""

    def test_init_creates_directory(self, temp_dir: Path) -> None:
        """Init creates the .lgnet directory, config and database."""
        os.chdir(temp_dir)

        result = runner.invoke(app, ["init", str(temp_dir)])

        assert result.exit_code == 0
        assert (temp_dir / ".lgnet" / "lgnet.db").exists()
        assert (temp_dir / ".lgnet" / "config.yaml").exists()

    def test_init_already_initialized(self, lgnet_project: Path) -> None:
        """Init on an existing project is a no-op."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Already initialized" in result.stdout


class TestSubmitAndWorker:
    """Tests for submit, worker, result and status."""

    def test_submit(self, lgnet_project: Path, simple_payload: dict) -> None:
        """Submitting a task file queues it."""
        task_file = _write_task(lgnet_project, simple_payload)

        result = runner.invoke(app, ["submit", str(task_file)])

        assert result.exit_code == 0
        assert "Submitted task #1" in result.stdout

    def test_submit_rejects_unknown_type(self, lgnet_project: Path, simple_payload: dict) -> None:
        """Invalid task files are rejected before queuing."""
        simple_payload["connections"][0]["type"] = "quantum"
        task_file = _write_task(lgnet_project, simple_payload)

        result = runner.invoke(app, ["submit", str(task_file)])

        assert result.exit_code == 1
        assert "Invalid task" in result.stdout

    def test_submit_rejects_bad_json(self, lgnet_project: Path) -> None:
        """Unparseable files are rejected."""
        task_file = lgnet_project / "task.json"
        task_file.write_text("{not json")

        result = runner.invoke(app, ["submit", str(task_file)])

        assert result.exit_code == 1
        assert "not valid JSON" in result.stdout

    def test_submit_outside_project(self, temp_dir: Path, simple_payload: dict) -> None:
        """Submitting needs an lgnet project."""
        os.chdir(temp_dir)
        task_file = _write_task(temp_dir, simple_payload)

        result = runner.invoke(app, ["submit", str(task_file)])

        assert result.exit_code == 1
        assert "lgnet init" in result.stdout

    def test_worker_once_then_result(self, lgnet_project: Path, simple_payload: dict) -> None:
        """A drained worker leaves a result that result --json prints."""
        task_file = _write_task(lgnet_project, simple_payload)
        assert runner.invoke(app, ["submit", str(task_file)]).exit_code == 0

        worker_result = runner.invoke(app, ["worker", "--once"])
        assert worker_result.exit_code == 0
        assert "Processed 1 task(s)" in worker_result.stdout

        result = runner.invoke(app, ["result", "1", "--json"])
        assert result.exit_code == 0
        assert '"O_final": 4' in result.stdout
        assert '"taskId": "1"' in result.stdout

    def test_result_not_found(self, lgnet_project: Path) -> None:
        """Looking up an unknown task fails explicitly."""
        result = runner.invoke(app, ["result", "99"])

        assert result.exit_code == 1
        assert "Result not found" in result.stdout

    def test_status(self, lgnet_project: Path, simple_payload: dict) -> None:
        """Status lists queued tasks."""
        task_file = _write_task(lgnet_project, simple_payload)
        _ = runner.invoke(app, ["submit", str(task_file)])

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "queued: 1" in result.stdout

    def test_status_single_task(self, lgnet_project: Path, simple_payload: dict) -> None:
        """Status with an ID shows the task's queue record."""
        task_file = _write_task(lgnet_project, simple_payload)
        _ = runner.invoke(app, ["submit", str(task_file)])
        _ = runner.invoke(app, ["worker", "--once"])

        result = runner.invoke(app, ["status", "1"])

        assert result.exit_code == 0
        assert "Task #1" in result.stdout
        assert "completed" in result.stdout

    def test_failed_task_reaches_failed_status(self, lgnet_project: Path, simple_payload: dict) -> None:
        """A task with a bad bias is retried by the queue, then marked failed."""
        simple_payload["biases"] = {"u1": 0}
        task_file = _write_task(lgnet_project, simple_payload)
        _ = runner.invoke(app, ["submit", str(task_file)])

        _ = runner.invoke(app, ["worker", "--once"])
        result = runner.invoke(app, ["status", "1"])

        assert "failed" in result.stdout
        assert "invalid_bias" in result.stdout
        assert runner.invoke(app, ["result", "1"]).exit_code == 1


class TestEvalCommand:
    """Tests for lgnet eval command."""

    def test_eval_prints_total(self, temp_dir: Path, simple_payload: dict) -> None:
        """Eval works without a project and prints O_final."""
        task_file = _write_task(temp_dir, simple_payload)

        result = runner.invoke(app, ["eval", str(task_file)])

        assert result.exit_code == 0
        assert "O_final: 4" in result.stdout

    def test_eval_missing_bias(self, temp_dir: Path, simple_payload: dict) -> None:
        """Evaluation errors are reported with their kind."""
        simple_payload["biases"] = {}
        task_file = _write_task(temp_dir, simple_payload)

        result = runner.invoke(app, ["eval", str(task_file)])

        assert result.exit_code == 1
        assert "invalid_bias" in result.stdout
