# Copyright (c) Syntropy Systems
"""Configuration management for lgnet."""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import cast

import yaml

from lgnet.adapt import AdaptationPolicy


@dataclass
class LGNetConfig:
    """Configuration for lgnet."""

    # Poll interval for worker when no jobs available (seconds)
    poll_interval: float = 5.0

    # Running jobs older than this are requeued on worker start (seconds)
    stale_timeout: int = 300

    # Deliveries per task before it is marked failed
    max_attempts: int = 3

    # Adaptation rule
    history_limit: int = 10
    mean_threshold: float = 100
    growth_bias: int = 3
    growth_iterations: int = 5

    def adaptation_policy(self) -> AdaptationPolicy:
        """Build the adaptation policy from this config."""
        return AdaptationPolicy(
            history_limit=self.history_limit,
            mean_threshold=self.mean_threshold,
            growth_bias=self.growth_bias,
            growth_iterations=self.growth_iterations,
        )

    def to_dict(self) -> dict[str, object]:
        """Return the config as a plain mapping, as written to config.yaml."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def find_lgnet_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .lgnet directory by walking up from start_path.

    Returns None if no .lgnet directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        lgnet_dir = current / ".lgnet"
        if lgnet_dir.is_dir():
            return lgnet_dir
        current = current.parent

    # Check root
    lgnet_dir = current / ".lgnet"
    if lgnet_dir.is_dir():
        return lgnet_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global lgnet config directory (~/.lgnet)."""
    return Path.home() / ".lgnet"


def load_config(lgnet_dir: Path | None = None) -> LGNetConfig:
    """Load configuration from .lgnet/config.yaml or defaults.

    Looks for config in:
    1. Provided lgnet_dir
    2. Nearest .lgnet directory walking up
    3. ~/.lgnet/config.yaml
    4. Defaults
    """
    config = LGNetConfig()

    config_path = None

    if lgnet_dir is not None:
        config_path = lgnet_dir / "config.yaml"
    else:
        found_dir = find_lgnet_dir()
        if found_dir is not None:
            config_path = found_dir / "config.yaml"
        else:
            global_config = get_global_config_dir() / "config.yaml"
            if global_config.exists():
                config_path = global_config

    if config_path is not None and config_path.exists():
        with config_path.open() as f:
            data = cast("dict[str, object]", yaml.safe_load(f) or {})

        for name in ("stale_timeout", "max_attempts",
                     "history_limit", "growth_bias", "growth_iterations"):
            value = data.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(config, name, int(value))
        poll_interval = data.get("poll_interval")
        if (
            isinstance(poll_interval, (int, float))
            and not isinstance(poll_interval, bool)
            and poll_interval > 0
        ):
            config.poll_interval = float(poll_interval)
        mean_threshold = data.get("mean_threshold")
        if isinstance(mean_threshold, (int, float)) and not isinstance(mean_threshold, bool):
            config.mean_threshold = mean_threshold

    return config


def get_db_path(lgnet_dir: Path | None = None) -> Path:
    """Get the path to the SQLite database."""
    if lgnet_dir is None:
        lgnet_dir = require_lgnet_dir()
    return lgnet_dir / "lgnet.db"


def require_lgnet_dir() -> Path:
    """Get lgnet directory or raise an error if not found."""
    lgnet_dir = find_lgnet_dir()
    if lgnet_dir is None:
        msg = "No .lgnet directory found. Run 'lgnet init' first."
        raise RuntimeError(
            msg
        )
    return lgnet_dir
