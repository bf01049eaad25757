"""Layer specs -- the declarative rule set for a single row of the map."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .blueprints import BossType, NodeType


class FloatRange(BaseModel):
    """Inclusive ``[min, max]`` float range."""

    min: float = 0.0
    max: float = 0.0

    @model_validator(mode="after")
    def _check_order(self) -> "FloatRange":
        if self.min > self.max:
            raise ValueError(f"range min {self.min} is greater than max {self.max}")
        return self


class IntRange(BaseModel):
    """Inclusive ``[min, max]`` integer range."""

    min: int = Field(ge=1)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_order(self) -> "IntRange":
        if self.min > self.max:
            raise ValueError(f"range min {self.min} is greater than max {self.max}")
        return self


class LayerSpec(BaseModel):
    """Generation rules for one layer of the map."""

    node_type: NodeType
    """Type given to nodes that are not randomized."""

    distance_from_previous: FloatRange = Field(default_factory=FloatRange)
    """Vertical distance from the previous layer (from 0 for the first)."""

    nodes_apart_distance: float = Field(default=2.0, gt=0.0)
    """Nominal horizontal spacing between neighbouring nodes."""

    randomize_position: float = Field(default=0.0, ge=0.0, le=1.0)
    """Jitter applied to node positions, as a fraction of the spacing."""

    randomize_nodes: float = Field(default=0.0, ge=0.0, le=1.0)
    """0 = every node is ``node_type``; 1 = every node is a reward type."""

    node_count: IntRange | None = None
    """Fixed node count for this layer.  None lets the generator decide."""

    boss_filter: BossType | None = None
    """Boss whose stage this layer belongs to (scopes minion and boss
    blueprints)."""

    @model_validator(mode="after")
    def _check_distance(self) -> "LayerSpec":
        if self.distance_from_previous.min < 0:
            raise ValueError("distance_from_previous must not be negative")
        return self
