"""Intermediate Representation (IR) schema for map content and rules.

Blueprints, layer specs, map configs and engine settings are Pydantic
models that serialise cleanly to/from JSON.  A :class:`MapConfig` is the
single input handed to the map generator.
"""

from .blueprints import (
    BATTLE_NODE_TYPES,
    REWARD_NODE_TYPES,
    BossType,
    MinionData,
    NodeBlueprint,
    NodeType,
)
from .layers import FloatRange, IntRange, LayerSpec
from .map_config import MapConfig
from .settings import EngineSettings

__all__ = [
    # blueprints
    "BATTLE_NODE_TYPES",
    "BossType",
    "MinionData",
    "NodeBlueprint",
    "NodeType",
    "REWARD_NODE_TYPES",
    # layers
    "FloatRange",
    "IntRange",
    "LayerSpec",
    # map_config
    "MapConfig",
    # settings
    "EngineSettings",
]
