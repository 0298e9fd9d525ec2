# Copyright (c) Syntropy Systems
"""Reading task payloads from JSON files for the CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from pydantic import ValidationError

from lgnet.models.api import TaskSubmit


def read_task_file(path: Path) -> TaskSubmit:
    """Load and validate a task payload; ``-`` reads stdin.

    Raises:
        ValueError: if the file is not valid JSON or not a valid task.
    """
    text = sys.stdin.read() if str(path) == "-" else path.read_text()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"{path} is not valid JSON: {e}"
        raise ValueError(msg) from e

    try:
        return TaskSubmit.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first["loc"])
        msg = f"Invalid task in {path}: {loc}: {first['msg']}"
        raise ValueError(msg) from e
