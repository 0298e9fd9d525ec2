# Copyright (c) Syntropy Systems
"""Pydantic models for LG units, network configurations, tasks and results."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Union

from pydantic import BeforeValidator, Field, ValidationError, field_validator
from typing_extensions import Annotated

from lgnet.errors import MalformedInput, UnknownUnitType
from lgnet.units import DEFAULT_ITERATIONS, to_int

from .base import ExtraAllowModel, FrozenModel, JSONValue


def _integral(value: object) -> int:
    try:
        return to_int(value)
    except MalformedInput as e:
        raise ValueError(str(e)) from e


def _finite_number(value: object) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"Non-finite input value: {value!r}")
    return value


IntegralValue = Annotated[int, BeforeValidator(_integral)]
NumberValue = Annotated[Union[int, float], BeforeValidator(_finite_number)]


class UnitType(str, Enum):
    """Closed set of LG unit variants."""

    SIMPLE = "simple"
    ASSOCIATED = "associated"
    LOOPED = "looped"


class LGUnit(FrozenModel):
    """One connection in a network."""

    lg_id: str = Field(alias="lgId")
    type: UnitType
    st_inputs: tuple[IntegralValue, ...] = Field(default=(), alias="stInputs")
    pt_inputs: tuple[IntegralValue, ...] = Field(default=(), alias="ptInputs")
    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1, strict=True)

    @field_validator("iterations", mode="before")
    @classmethod
    def _default_iterations(cls, value: object) -> object:
        if value is None:
            return DEFAULT_ITERATIONS
        return value


class AssociatedBias(FrozenModel):
    """Bias pair for an associated unit."""

    b1: JSONValue
    b2: JSONValue


class AdaptationRecord(ExtraAllowModel):
    """Structural-adaptation entry in ``lgConfig``."""

    type: str
    bias: JSONValue = None


class NetworkConfig(FrozenModel):
    """Everything needed to evaluate a network.

    ``biases`` stays loosely typed so that a bad entry is reported as an
    invalid bias for the unit that references it, at evaluation time.
    """

    inputs: tuple[NumberValue, ...] = ()
    connections: tuple[LGUnit, ...] = ()
    biases: dict[str, JSONValue] = Field(default_factory=dict)
    lg_config: tuple[AdaptationRecord, ...] = Field(default=(), alias="lgConfig")


class Task(NetworkConfig):
    """A network configuration queued for processing."""

    id: str


class HistoryStats(FrozenModel):
    """Summary statistics over recent ``O_final`` values."""

    count: int
    mean: float
    median: Union[int, float]
    mode: Union[int, float]


class ResultRecord(FrozenModel):
    """Persisted outcome of one processed task."""

    task_id: str = Field(alias="taskId")
    o_final: int = Field(alias="O_final")
    inputs: tuple[NumberValue, ...] = ()
    connections: tuple[LGUnit, ...] = ()
    lg_config: tuple[AdaptationRecord, ...] = Field(default=(), alias="lgConfig")
    timestamp: datetime


def _is_type_error(error: dict) -> bool:
    loc = error.get("loc", ())
    return len(loc) >= 3 and loc[0] == "connections" and loc[-1] == "type" and error.get("type") == "enum"


def parse_task(task_id: str, payload: dict[str, JSONValue]) -> Task:
    """Validate a raw queued payload into a Task.

    Raises:
        UnknownUnitType: if a connection carries an unrecognized ``type`` tag.
        MalformedInput: for any other validation failure.
    """
    try:
        return Task.model_validate({**payload, "id": task_id})
    except ValidationError as e:
        errors = e.errors()
        for error in errors:
            if _is_type_error(error):
                raise UnknownUnitType(
                    f"Unknown unit type {error.get('input')!r} at {_loc(error)}"
                ) from e
        first = errors[0]
        raise MalformedInput(f"{_loc(first)}: {first.get('msg')}") from e


def _loc(error: dict) -> str:
    return ".".join(str(part) for part in error.get("loc", ()))
