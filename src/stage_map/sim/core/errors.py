"""Exception types raised by the map engine.

- :class:`ConfigurationError` -- bad layer specs, blueprints or catalogs.
  Fatal at generation time; no partial map is ever returned.
- :class:`InvalidMoveError` -- a rejected node selection.  Recoverable and
  usually surfaced as a rejected :class:`MoveResult` instead of raised.
- :class:`CorruptPersistedStateError` -- a saved map that fails to parse or
  violates a graph invariant.  Recoverable by regenerating.
"""

from __future__ import annotations

from enum import Enum


class MoveRejection(str, Enum):
    """Why a node selection was refused."""

    OUT_OF_START_LAYER = "out_of_start_layer"
    NOT_REACHABLE = "not_reachable"
    BUSY = "busy"


class ConfigurationError(ValueError):
    """The map configuration or content catalog cannot produce a valid map."""


class CorruptPersistedStateError(ValueError):
    """A persisted map could not be decoded or fails graph invariants."""


class InvalidMoveError(Exception):
    """A node selection was rejected.

    Parameters
    ----------
    reason:
        The :class:`MoveRejection` explaining the refusal.
    point:
        The point the caller tried to move to, if known.
    """

    def __init__(self, reason: MoveRejection, point: object | None = None) -> None:
        self.reason = reason
        self.point = point
        if point is None:
            message = f"Move rejected: {reason.value}"
        else:
            message = f"Move to {point} rejected: {reason.value}"
        super().__init__(message)
