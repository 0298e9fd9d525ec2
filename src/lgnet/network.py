# Copyright (c) Syntropy Systems
"""Network evaluation: dispatch each unit to its evaluator and sum outputs."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from pydantic import ValidationError

from lgnet.errors import InvalidBias, UnknownUnitType
from lgnet.models.network import AssociatedBias, LGUnit, UnitType
from lgnet.units import LGResult, associated_lg, looped_lg, simple_lg

logger = logging.getLogger(__name__)


@dataclass
class NetworkEvaluation:
    """Per-unit results of a network run, in connection order."""

    results: list[tuple[LGUnit, LGResult]] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Sum of every unit's ``O``."""
        return sum(result.O for _, result in self.results)


def _lookup_bias(unit: LGUnit, biases: Mapping[str, object]) -> object:
    if unit.lg_id not in biases:
        raise InvalidBias(f"No bias for unit {unit.lg_id!r}")
    bias = biases[unit.lg_id]
    if bias is None:
        raise InvalidBias(f"No bias for unit {unit.lg_id!r}")
    return bias


def _associated_bias(unit: LGUnit, bias: object) -> AssociatedBias:
    if isinstance(bias, AssociatedBias):
        return bias
    try:
        return AssociatedBias.model_validate(bias)
    except ValidationError as e:
        raise InvalidBias(
            f"Associated unit {unit.lg_id!r} needs a {{b1, b2}} bias, got {bias!r}"
        ) from e


def evaluate_unit(unit: LGUnit, biases: Mapping[str, object]) -> LGResult:
    """Evaluate one unit against its entry in the bias table.

    Raises:
        InvalidBias: if the unit's bias is missing, zero or the wrong shape.
        UnknownUnitType: if the unit's type has no evaluator.
    """
    bias = _lookup_bias(unit, biases)

    if unit.type is UnitType.SIMPLE:
        if isinstance(bias, Mapping):
            raise InvalidBias(f"Simple unit {unit.lg_id!r} needs a scalar bias, got {bias!r}")
        return simple_lg(unit.st_inputs, unit.pt_inputs, bias)
    if unit.type is UnitType.ASSOCIATED:
        pair = _associated_bias(unit, bias)
        return associated_lg(unit.st_inputs, unit.pt_inputs, pair.b1, pair.b2)
    if unit.type is UnitType.LOOPED:
        if isinstance(bias, Mapping):
            raise InvalidBias(f"Looped unit {unit.lg_id!r} needs a scalar bias, got {bias!r}")
        return looped_lg(unit.st_inputs, unit.pt_inputs, bias, unit.iterations)

    raise UnknownUnitType(f"No evaluator for unit type {unit.type!r}")


def evaluate_network(connections: Iterable[LGUnit], biases: Mapping[str, object]) -> NetworkEvaluation:
    """Evaluate every unit, keeping the per-unit results."""
    evaluation = NetworkEvaluation()
    for unit in connections:
        result = evaluate_unit(unit, biases)
        logger.debug("Unit %s (%s) -> O=%d Q=%d Q2=%d", unit.lg_id, unit.type.value, result.O, result.Q, result.Q2)
        evaluation.results.append((unit, result))
    return evaluation


def compute_network(connections: Iterable[LGUnit], biases: Mapping[str, object]) -> int:
    """Return the network output: the sum of every unit's ``O``."""
    return evaluate_network(connections, biases).total
