"""Persistence adapter -- saves and restores the current map as JSON.

The document is ``GameMap.model_dump_json()``: nodes with their outgoing
edges as points, plus the visited path.  Loading re-runs the graph
validation, so a tampered or truncated save is detected rather than
resumed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from stage_map.sim.core.errors import CorruptPersistedStateError
from stage_map.sim.dungeon.graph import GameMap

logger = logging.getLogger(__name__)


class MapPersistence:
    """Reads and writes one map file.

    Parameters
    ----------
    path:
        Location of the JSON document.
    generate:
        Called with no arguments to build a fresh map when the saved one
        is finished or unreadable.
    """

    def __init__(self, path: str | Path, generate: Callable[[], GameMap]) -> None:
        self.path = Path(path)
        self._generate = generate

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, game_map: GameMap) -> None:
        """Write *game_map* to disk, replacing any previous save."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(game_map.model_dump_json(indent=2))
        tmp.replace(self.path)
        logger.debug("Saved map %s (%d visited) to %s", game_map.name, len(game_map.path), self.path)

    def read(self) -> GameMap:
        """Parse the saved map.

        Raises
        ------
        FileNotFoundError
            If nothing has been saved.
        CorruptPersistedStateError
            If the document is not UTF-8 JSON or breaks a graph invariant.
        """
        data = self.path.read_bytes()
        try:
            return GameMap.model_validate_json(data.decode("utf-8"))
        except (UnicodeDecodeError, ValidationError) as exc:
            raise CorruptPersistedStateError(
                f"Saved map at {self.path} is invalid: {exc}"
            ) from exc

    def load(self) -> GameMap | None:
        """Return the map to play on, or ``None`` if nothing was saved.

        A map whose stage boss has been reached is replaced by a fresh one,
        as is a map that cannot be read.
        """
        if not self.exists():
            return None

        try:
            game_map = self.read()
        except CorruptPersistedStateError as exc:
            logger.warning("Discarding corrupt save: %s", exc)
            return self._generate()

        if game_map.is_stage_complete():
            logger.info("Stage boss of %s already reached, generating a new map", game_map.name)
            return self._generate()

        logger.info(
            "Resuming map %s at %s", game_map.name, game_map.current_point(),
        )
        return game_map

    def clear(self) -> None:
        """Delete the save, if any."""
        self.path.unlink(missing_ok=True)
