"""Core engine primitives -- RNG, scheduler, and error types."""

from stage_map.sim.core.errors import (
    ConfigurationError,
    CorruptPersistedStateError,
    InvalidMoveError,
    MoveRejection,
)
from stage_map.sim.core.rng import GameRNG
from stage_map.sim.core.scheduler import ScheduledTask, TaskScheduler

__all__ = [
    "ConfigurationError",
    "CorruptPersistedStateError",
    "GameRNG",
    "InvalidMoveError",
    "MoveRejection",
    "ScheduledTask",
    "TaskScheduler",
]
