"""Traversal validator -- accepts or rejects the player's next move.

The path has two states: before the first move any layer-0 node may be
picked; afterwards only the outgoing edges of the last visited node.  An
accepted move appends to ``GameMap.path``; a rejected one leaves it as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from stage_map.sim.core.errors import InvalidMoveError, MoveRejection
from stage_map.sim.dungeon.graph import GameMap, Point

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    """Outcome of a node selection."""

    accepted: bool
    point: Point
    reason: MoveRejection | None = None  # None when accepted
    attainable: list[Point] = field(default_factory=list)

    def raise_if_rejected(self) -> "MoveResult":
        """Raise :class:`InvalidMoveError` if the move was rejected."""
        if not self.accepted:
            raise InvalidMoveError(self.reason, self.point)
        return self

    @classmethod
    def rejected(
        cls, point: Point, reason: MoveRejection, attainable: list[Point],
    ) -> "MoveResult":
        return cls(accepted=False, point=point, reason=reason, attainable=attainable)


class TraversalValidator:
    """Validates moves and records accepted ones on the map's path."""

    def check(self, game_map: GameMap, point: Point) -> MoveRejection | None:
        """Return why a move to *point* would be rejected, or ``None``."""
        if not game_map.path:
            if point.y != 0:
                return MoveRejection.OUT_OF_START_LAYER
            if game_map.get_node(point) is None:
                return MoveRejection.NOT_REACHABLE
            return None

        if point not in game_map.attainable_points():
            return MoveRejection.NOT_REACHABLE
        return None

    def select_node(self, game_map: GameMap, point: Point) -> MoveResult:
        """Try to move to *point*.

        On success the point is appended to ``game_map.path`` and the
        result carries the new attainable set.  On failure the path is
        untouched and the result carries the current attainable set.
        """
        reason = self.check(game_map, point)
        if reason is not None:
            logger.warning(
                "Rejected move to %s from %s: %s",
                point, game_map.current_point(), reason.value,
            )
            return MoveResult.rejected(point, reason, game_map.attainable_points())

        game_map.path.append(point)
        logger.debug("Moved to %s (path length %d)", point, len(game_map.path))
        return MoveResult(
            accepted=True,
            point=point,
            attainable=game_map.attainable_points(),
        )
