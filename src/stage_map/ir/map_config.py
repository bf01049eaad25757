"""Map config -- the complete, immutable input to the map generator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .blueprints import REWARD_NODE_TYPES, NodeBlueprint, NodeType
from .layers import IntRange, LayerSpec


class MapConfig(BaseModel):
    """Layer rules plus the content catalog they draw from.

    Serialise to JSON to author configs by hand; build one with the
    factories in :mod:`stage_map.sim.dungeon.config_gen` for the standard
    layouts.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "map"
    """Name stamped on every map generated from this config."""

    layers: list[LayerSpec] = []
    """Layer rules, bottom (y=0) first."""

    blueprints: list[NodeBlueprint] = []
    """Content catalog: every blueprint a generated node may reference."""

    reward_node_types: list[NodeType] = Field(
        default_factory=lambda: list(REWARD_NODE_TYPES),
    )
    """Types drawn from when a layer randomizes a node."""

    extra_paths: int = Field(default=1, ge=0)
    """Additional edges added on top of the minimal connection."""

    minion_nodes: IntRange = Field(default_factory=lambda: IntRange(min=3, max=4))
    """Node count for minion layers that cannot reuse the previous count."""

    reward_nodes: IntRange = Field(default_factory=lambda: IntRange(min=2, max=3))
    """Node count for reward layers without their own count."""

    # -- validation ---------------------------------------------------------

    @model_validator(mode="after")
    def _validate_blueprint_ids(self) -> "MapConfig":
        """Blueprint ids are persisted in saves, so they must be unique."""
        seen: set[str] = set()
        duplicates: set[str] = set()
        for blueprint in self.blueprints:
            if blueprint.id in seen:
                duplicates.add(blueprint.id)
            seen.add(blueprint.id)
        if duplicates:
            raise ValueError(
                f"Duplicate blueprint id(s): {', '.join(sorted(duplicates))}"
            )
        return self

    @model_validator(mode="after")
    def _validate_reward_types(self) -> "MapConfig":
        """Bosses and minions are placed by layer rules, never as rewards."""
        bad = [t.value for t in self.reward_node_types if t in (NodeType.BOSS, NodeType.MINION)]
        if bad:
            raise ValueError(
                f"reward_node_types may not contain battle types: {', '.join(bad)}"
            )
        return self
