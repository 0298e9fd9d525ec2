# Copyright (c) Syntropy Systems
"""Adaptation engine: grow the network when recent outputs run high.

This is a heuristic over the last few persisted ``O_final`` values, not
gradient-based learning. Growth is one-directional: units are only ever
appended.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional, Union

from lgnet.errors import MalformedInput
from lgnet.models.network import AdaptationRecord, HistoryStats, LGUnit, UnitType
from lgnet.units import DEFAULT_ITERATIONS

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class AdaptationPolicy:
    """Thresholds and shape of the growth rule."""

    history_limit: int = 10
    mean_threshold: float = 100
    growth_bias: int = 3
    growth_iterations: int = DEFAULT_ITERATIONS


@dataclass(frozen=True)
class AdaptationResult:
    """Connections and lgConfig after adaptation."""

    connections: tuple[LGUnit, ...]
    lg_config: tuple[AdaptationRecord, ...]
    stats: Optional[HistoryStats] = None
    grew: bool = False


def _check_history(history: Sequence[object]) -> list[Number]:
    values: list[Number] = []
    for value in history:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedInput(f"History contains a non-numeric value: {value!r}")
        if not math.isfinite(value):
            raise MalformedInput(f"History contains a non-finite value: {value!r}")
        values.append(value)
    return values


def mean(values: Sequence[Number]) -> float:
    return sum(values) / len(values)


def median(values: Sequence[Number]) -> Number:
    """Element at ``n // 2`` of the ascending sort (upper median for even n)."""
    return sorted(values)[len(values) // 2]


def mode(values: Sequence[Number]) -> Number:
    """Most frequent value; on a tie the first value to reach the top count wins."""
    counts: dict[Number, int] = {}
    best = values[0]
    best_count = 0
    for value in values:
        counts[value] = counts.get(value, 0) + 1
        if counts[value] > best_count:
            best, best_count = value, counts[value]
    return best


def compute_stats(history: Sequence[object]) -> Optional[HistoryStats]:
    """Summarize history; ``None`` when there is no history.

    Raises:
        MalformedInput: if any entry is not a finite number.
    """
    values = _check_history(history)
    if not values:
        return None
    return HistoryStats(
        count=len(values),
        mean=mean(values),
        median=median(values),
        mode=mode(values),
    )


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def adapt(
    connections: Sequence[LGUnit],
    lg_config: Sequence[AdaptationRecord],
    history: Sequence[object],
    policy: Optional[AdaptationPolicy] = None,
    clock: Callable[[], int] = _epoch_millis,
) -> AdaptationResult:
    """Return the (possibly grown) connections and lgConfig.

    ``history`` is the most recent ``O_final`` values, newest first. The
    inputs are never mutated; a grown network is returned as new tuples.
    """
    policy = policy or AdaptationPolicy()
    connections = tuple(connections)
    lg_config = tuple(lg_config)

    stats = compute_stats(history)
    if stats is None:
        return AdaptationResult(connections=connections, lg_config=lg_config)

    logger.debug(
        "History stats over %d results: mean=%.2f median=%s mode=%s",
        stats.count, stats.mean, stats.median, stats.mode,
    )

    if stats.mean <= policy.mean_threshold:
        return AdaptationResult(connections=connections, lg_config=lg_config, stats=stats)

    unit = LGUnit(
        lg_id=f"lg{clock()}",
        type=UnitType.LOOPED,
        st_inputs=(),
        pt_inputs=(),
        iterations=policy.growth_iterations,
    )
    record = AdaptationRecord(type=UnitType.LOOPED.value, bias=policy.growth_bias)
    logger.info("Mean %.2f above %s, adding looped unit %s", stats.mean, policy.mean_threshold, unit.lg_id)
    return AdaptationResult(
        connections=(*connections, unit),
        lg_config=(*lg_config, record),
        stats=stats,
        grew=True,
    )
