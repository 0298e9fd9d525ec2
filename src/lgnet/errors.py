# Copyright (c) Syntropy Systems
"""Typed failures raised while evaluating, adapting and persisting tasks."""

from __future__ import annotations


class LGNetError(Exception):
    """Base class for lgnet failures."""

    kind = "error"

    def describe(self) -> str:
        """Return the ``"<kind>: <message>"`` form stored on failed jobs."""
        return f"{self.kind}: {self}"


class InvalidBias(LGNetError):
    """A referenced unit has a zero, missing or malformed bias."""

    kind = "invalid_bias"


class UnknownUnitType(LGNetError):
    """A connection carries an unrecognized unit type tag."""

    kind = "unknown_unit_type"


class MalformedInput(LGNetError):
    """Input values are non-numeric, non-finite or not integer-valued."""

    kind = "malformed_input"


class PersistenceFailure(LGNetError):
    """The result store is unavailable or rejected a write."""

    kind = "persistence_failure"


class QueueFailure(LGNetError):
    """The job queue could not dequeue, acknowledge or fail a job."""

    kind = "queue_failure"
