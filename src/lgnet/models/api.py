# Copyright (c) Syntropy Systems
"""Pydantic models for lgnet API requests and responses."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from .base import JSONValue, LGNetBaseModel
from .network import AdaptationRecord, LGUnit, NumberValue


class TaskSubmit(LGNetBaseModel):
    """Request to queue a network evaluation."""

    inputs: list[NumberValue] = Field(default_factory=list)
    connections: list[LGUnit] = Field(default_factory=list)
    biases: dict[str, JSONValue] = Field(default_factory=dict)
    lg_config: list[AdaptationRecord] = Field(default_factory=list, alias="lgConfig")


class TaskSubmitResponse(LGNetBaseModel):
    """Response from submitting a task."""

    task_id: str = Field(alias="taskId")


class TaskStatusResponse(LGNetBaseModel):
    """Queue status of a task."""

    task_id: str = Field(alias="taskId")
    status: str
    attempt: int
    max_attempts: int = Field(alias="maxAttempts")
    result: Optional[int] = None
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    finished_at: Optional[str] = Field(default=None, alias="finishedAt")


class StatusResponse(LGNetBaseModel):
    """Queue status counts."""

    queued: int
    running: int
    completed: int
    failed: int


class HealthResponse(LGNetBaseModel):
    """Health check response."""

    status: str
