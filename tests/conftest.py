# Copyright (c) Syntropy Systems
"""Pytest fixtures for lgnet tests."""

import os
import sqlite3
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def lgnet_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary lgnet project directory."""
    from lgnet.db import init_db

    lgnet_dir = temp_dir / ".lgnet"
    lgnet_dir.mkdir()
    init_db(lgnet_dir / "lgnet.db")

    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def db_path(lgnet_project: Path) -> Path:
    """Path to the test project's database."""
    return lgnet_project / ".lgnet" / "lgnet.db"


@pytest.fixture
def db_connection(db_path: Path) -> Generator[sqlite3.Connection, None, None]:
    """Get a database connection for the test project."""
    from lgnet.db import get_connection

    conn = get_connection(db_path)
    yield conn
    conn.close()


@pytest.fixture
def simple_payload() -> dict:
    """A one-unit task whose network output is 4."""
    return {
        "inputs": [],
        "connections": [
            {"type": "simple", "lgId": "u1", "stInputs": [10], "ptInputs": [3]},
        ],
        "biases": {"u1": 4},
        "lgConfig": [],
    }
