# Copyright (c) Syntropy Systems
"""Pydantic models for lgnet."""

from .db import JobRecord
from .network import (
    AdaptationRecord,
    AssociatedBias,
    HistoryStats,
    LGUnit,
    NetworkConfig,
    ResultRecord,
    Task,
    UnitType,
    parse_task,
)

__all__ = [
    "AdaptationRecord",
    "AssociatedBias",
    "HistoryStats",
    "JobRecord",
    "LGUnit",
    "NetworkConfig",
    "ResultRecord",
    "Task",
    "UnitType",
    "parse_task",
]
