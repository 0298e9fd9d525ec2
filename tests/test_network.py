# Copyright (c) Syntropy Systems
"""Tests for network evaluation and task parsing."""

import pytest
from pydantic import ValidationError

from lgnet.errors import InvalidBias, MalformedInput, UnknownUnitType
from lgnet.models.network import LGUnit, UnitType, parse_task
from lgnet.network import compute_network, evaluate_network, evaluate_unit
from lgnet.units import associated_lg, looped_lg, simple_lg


def _unit(lg_id: str, unit_type: str, st: list, pt: list, **kwargs) -> LGUnit:
    return LGUnit.model_validate(
        {"lgId": lg_id, "type": unit_type, "stInputs": st, "ptInputs": pt, **kwargs}
    )


class TestComputeNetwork:
    """Tests for compute_network."""

    def test_empty_network_is_zero(self) -> None:
        """No units means an output of zero, whatever the biases."""
        assert compute_network([], {}) == 0
        assert compute_network([], {"u1": 4, "u2": {"b1": 1, "b2": 2}}) == 0

    def test_single_simple_unit(self) -> None:
        """The worked example evaluates to 4."""
        units = [_unit("u1", "simple", [10], [3])]
        assert compute_network(units, {"u1": 4}) == 4

    def test_sum_of_unit_outputs(self) -> None:
        """The network output is the sum of each unit's O, in any order."""
        units = [
            _unit("s", "simple", [10], [3]),
            _unit("a", "associated", [7, 5], [2]),
            _unit("l", "looped", [9], [4], iterations=3),
        ]
        biases = {"s": 4, "a": {"b1": 5, "b2": 2}, "l": 2}

        expected = (
            simple_lg([10], [3], 4).O
            + associated_lg([7, 5], [2], 5, 2).O
            + looped_lg([9], [4], 2, 3).O
        )
        assert compute_network(units, biases) == expected
        assert compute_network(list(reversed(units)), biases) == expected
        assert sum(evaluate_unit(u, biases).O for u in units) == expected

    def test_evaluation_keeps_per_unit_results(self) -> None:
        """evaluate_network reports every unit in connection order."""
        units = [_unit("a", "simple", [10], [3]), _unit("b", "looped", [10], [3])]
        evaluation = evaluate_network(units, {"a": 4, "b": 4})

        assert [u.lg_id for u, _ in evaluation.results] == ["a", "b"]
        assert evaluation.total == compute_network(units, {"a": 4, "b": 4})


class TestBiasLookup:
    """Tests for bias resolution during evaluation."""

    def test_missing_bias(self) -> None:
        """A unit without a bias entry fails instead of contributing zero."""
        units = [_unit("u1", "simple", [10], [3])]
        with pytest.raises(InvalidBias, match="u1"):
            compute_network(units, {})

    def test_null_bias(self) -> None:
        """A null bias entry is treated as missing."""
        with pytest.raises(InvalidBias):
            compute_network([_unit("u1", "simple", [10], [3])], {"u1": None})

    def test_zero_bias(self) -> None:
        """A zero bias is invalid."""
        with pytest.raises(InvalidBias):
            compute_network([_unit("u1", "looped", [10], [3])], {"u1": 0})

    def test_associated_needs_pair(self) -> None:
        """An associated unit needs both b1 and b2."""
        units = [_unit("a", "associated", [10], [3])]
        with pytest.raises(InvalidBias):
            compute_network(units, {"a": 4})
        with pytest.raises(InvalidBias):
            compute_network(units, {"a": {"b1": 4}})

    def test_scalar_units_reject_pairs(self) -> None:
        """Simple and looped units need a scalar bias."""
        with pytest.raises(InvalidBias):
            compute_network([_unit("s", "simple", [10], [3])], {"s": {"b1": 4, "b2": 3}})
        with pytest.raises(InvalidBias):
            compute_network([_unit("l", "looped", [10], [3])], {"l": {"b1": 4, "b2": 3}})


class TestParseTask:
    """Tests for validating raw queued payloads."""

    def test_parses_camel_case_payload(self, simple_payload: dict) -> None:
        """Wire names map onto the model fields."""
        task = parse_task("7", simple_payload)

        assert task.id == "7"
        assert task.connections[0].lg_id == "u1"
        assert task.connections[0].type is UnitType.SIMPLE
        assert task.connections[0].st_inputs == (10,)
        assert task.connections[0].iterations == 5
        assert task.biases == {"u1": 4}

    def test_defaults(self) -> None:
        """Missing sections default to empty."""
        task = parse_task("1", {})
        assert task.connections == ()
        assert task.lg_config == ()
        assert task.biases == {}

    def test_unknown_unit_type(self, simple_payload: dict) -> None:
        """An unrecognized type tag is reported as such."""
        simple_payload["connections"][0]["type"] = "quantum"
        with pytest.raises(UnknownUnitType, match="quantum"):
            parse_task("1", simple_payload)

    @pytest.mark.parametrize("bad", [1.5, "ten", None])
    def test_malformed_inputs(self, simple_payload: dict, bad: object) -> None:
        """Non-integral or non-numeric unit inputs are malformed."""
        simple_payload["connections"][0]["stInputs"] = [bad]
        with pytest.raises(MalformedInput):
            parse_task("1", simple_payload)

    def test_iterations_must_be_positive(self, simple_payload: dict) -> None:
        """A looped unit needs at least one iteration."""
        simple_payload["connections"][0].update(type="looped", iterations=0)
        with pytest.raises(MalformedInput):
            parse_task("1", simple_payload)

    def test_null_iterations_means_default(self, simple_payload: dict) -> None:
        """An explicit null iteration count falls back to five."""
        simple_payload["connections"][0].update(type="looped", iterations=None)
        assert parse_task("1", simple_payload).connections[0].iterations == 5

    @pytest.mark.parametrize("bad", [-1, 2.5, "3"])
    def test_iterations_must_be_an_integer(self, simple_payload: dict, bad: object) -> None:
        """Negative or non-integer iteration counts are malformed."""
        simple_payload["connections"][0].update(type="looped", iterations=bad)
        with pytest.raises(MalformedInput):
            parse_task("1", simple_payload)

    def test_fractional_network_inputs_allowed(self, simple_payload: dict) -> None:
        """Network-level inputs are informational and may be any finite number."""
        simple_payload["inputs"] = [0.5, 2]
        assert parse_task("1", simple_payload).inputs == (0.5, 2)

    def test_task_is_immutable(self, simple_payload: dict) -> None:
        """Parsed tasks are frozen."""
        task = parse_task("1", simple_payload)
        with pytest.raises(ValidationError):
            task.connections = ()
