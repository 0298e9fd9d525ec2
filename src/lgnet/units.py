# Copyright (c) Syntropy Systems
"""LG unit evaluators.

An LG unit combines a summed "state" input ``I1`` and a multiplied
"pass-through" input ``I2`` using integer division against a bias:

    Q1, R1 = I1 // b, I1 rem b      (R1 == 0 is replaced by 1)
    Q2, R2 = I2 // R1, I2 rem R1
    Q = Q1 + R2
    O = Q + Q2

Quotients are floored; remainders take the sign of the dividend.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from lgnet.errors import InvalidBias, MalformedInput

DEFAULT_ITERATIONS = 5


@dataclass(frozen=True)
class LGResult:
    """Output of one LG unit evaluation."""

    O: int  # noqa: E741
    Q: int
    Q2: int


def to_int(value: object) -> int:
    """Return ``value`` as an int if it is an integer-valued finite number.

    Raises:
        MalformedInput: for booleans, non-numbers, non-finite or fractional values.
    """
    if isinstance(value, bool):
        raise MalformedInput(f"Expected a number, got boolean {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedInput(f"Non-finite input value: {value!r}")
        if not value.is_integer():
            raise MalformedInput(f"Non-integral input value: {value!r}")
        return int(value)
    raise MalformedInput(f"Expected a number, got {type(value).__name__} {value!r}")


def _bias(value: object) -> int:
    try:
        bias = to_int(value)
    except MalformedInput as e:
        raise InvalidBias(f"Bias must be a nonzero integer: {e}") from e
    if bias == 0:
        raise InvalidBias("Bias must be nonzero")
    return bias


def _rem(dividend: int, divisor: int) -> int:
    """Remainder with the sign of the dividend."""
    r = abs(dividend) % abs(divisor)
    return r if dividend >= 0 else -r


def _sum(values: Iterable[object]) -> int:
    return sum(to_int(v) for v in values)


def _product(values: Iterable[object]) -> int:
    return math.prod(to_int(v) for v in values)


def simple_lg(st_inputs: Iterable[object], pt_inputs: Iterable[object], b: object) -> LGResult:
    """Evaluate a simple LG unit."""
    bias = _bias(b)
    i1 = _sum(st_inputs)
    i2 = _product(pt_inputs)

    q1 = i1 // bias
    r1 = _rem(i1, bias)
    if r1 == 0:
        r1 = 1

    q2 = i2 // r1
    r2 = _rem(i2, r1)
    q = q1 + r2
    return LGResult(O=q + q2, Q=q, Q2=q2)


def associated_lg(
    st_inputs: Iterable[object],
    pt_inputs: Iterable[object],
    b1: object,
    b2: object,
) -> LGResult:
    """Evaluate two chained simple units.

    The second unit takes the first unit's ``Q2`` as its state input and
    its ``Q`` as its pass-through input.
    """
    bias2 = _bias(b2)
    first = simple_lg(st_inputs, pt_inputs, b1)
    return simple_lg([first.Q2], [first.Q], bias2)


def looped_lg(
    st_inputs: Iterable[object],
    pt_inputs: Iterable[object],
    b: object,
    iterations: int = DEFAULT_ITERATIONS,
) -> LGResult:
    """Feed a simple unit's output back into itself ``iterations`` times.

    Each pass feeds ``Q2`` back as the state input and ``Q`` as the
    pass-through input. The result of the last pass is returned.
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise MalformedInput(f"iterations must be a positive integer, got {iterations!r}")
    bias = _bias(b)
    i1 = _sum(st_inputs)
    i2 = _product(pt_inputs)

    result = simple_lg([i1], [i2], bias)
    for _ in range(iterations - 1):
        result = simple_lg([result.Q2], [result.Q], bias)
    return result
