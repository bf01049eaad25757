"""Dungeon module -- map generation, traversal, persistence and sessions."""

from stage_map.sim.dungeon.config_gen import (
    branching_config,
    sequential_config,
    simple_config,
    validate_config,
)
from stage_map.sim.dungeon.dispatcher import (
    Dispatch,
    EncounterAction,
    EncounterDispatcher,
    EncounterHandler,
    LoggingEncounterHandler,
)
from stage_map.sim.dungeon.graph import GameMap, Node, Point
from stage_map.sim.dungeon.map_gen import MapGenerator
from stage_map.sim.dungeon.persistence import MapPersistence
from stage_map.sim.dungeon.progression import ProgressionLedger
from stage_map.sim.dungeon.session import MapSession
from stage_map.sim.dungeon.traversal import MoveResult, TraversalValidator

__all__ = [
    "Dispatch",
    "EncounterAction",
    "EncounterDispatcher",
    "EncounterHandler",
    "GameMap",
    "LoggingEncounterHandler",
    "MapGenerator",
    "MapPersistence",
    "MapSession",
    "MoveResult",
    "Node",
    "Point",
    "ProgressionLedger",
    "TraversalValidator",
    "branching_config",
    "sequential_config",
    "simple_config",
    "validate_config",
]
