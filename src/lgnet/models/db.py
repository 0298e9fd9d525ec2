# Copyright (c) Syntropy Systems
"""Pydantic models for database records."""

from __future__ import annotations

import json
from typing import Optional, cast

from pydantic import Field, field_validator

from .base import JSONValue, LGNetBaseModel


class JobRecord(LGNetBaseModel):
    """Database job record."""

    id: int
    payload: dict[str, JSONValue] = Field(default_factory=dict)
    status: str
    attempt: int = 1
    max_attempts: int = 3
    created_at: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    worker_id: Optional[str] = None
    result: Optional[int] = None
    error_message: Optional[str] = None

    @field_validator("payload", mode="before")
    @classmethod
    def _parse_payload(cls, value: object) -> dict[str, JSONValue]:
        if value is None:
            return {}
        if isinstance(value, str):
            return cast("dict[str, JSONValue]", json.loads(value))
        return cast("dict[str, JSONValue]", value)

    @field_validator("result", mode="before")
    @classmethod
    def _parse_result(cls, value: object) -> object:
        # Stored as decimal text so values beyond 64 bits survive
        if isinstance(value, str):
            return int(value)
        return value

    @property
    def task_id(self) -> str:
        """Task identifier exposed to submitters."""
        return str(self.id)
