"""Blueprint registry and catalog -- loads and serves node blueprints.

Vanilla blueprints are loaded from ``data/vanilla/blueprints.json`` inside
the package.  The :class:`BlueprintCatalog` answers the generator's
"which blueprint fits this (type, context)?" question.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from stage_map.ir.blueprints import BossType, NodeBlueprint, NodeType
from stage_map.sim.core.errors import ConfigurationError
from stage_map.sim.core.rng import GameRNG

logger = logging.getLogger(__name__)

# Default path inside the package: sim/content -> stage_map/data/vanilla
_PACKAGE_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_BLUEPRINTS_PATH = _PACKAGE_ROOT / "data" / "vanilla" / "blueprints.json"


@dataclass(frozen=True)
class BlueprintContext:
    """Where in the map a blueprint is being requested.

    Attributes
    ----------
    layer_index:
        The y of the layer being built.
    boss:
        The boss whose stage the layer belongs to, if known.
    stage_boss_layer:
        True for the terminal layer holding the stage boss.
    convergence_slot:
        Position on a boss convergence layer (one node per boss type), or
        ``None`` for every other layer.
    """

    layer_index: int
    boss: BossType | None = None
    stage_boss_layer: bool = False
    convergence_slot: int | None = None

    def describe(self) -> str:
        parts = [f"layer {self.layer_index}"]
        if self.boss is not None:
            parts.append(f"boss {self.boss.value}")
        if self.stage_boss_layer:
            parts.append("stage boss")
        if self.convergence_slot is not None:
            parts.append(f"convergence slot {self.convergence_slot}")
        return ", ".join(parts)


class BlueprintCatalog:
    """Read-only view over a list of blueprints, indexed for lookup.

    Parameters
    ----------
    blueprints:
        The blueprints to serve, in catalog order.
    """

    def __init__(self, blueprints: Iterable[NodeBlueprint]) -> None:
        self._blueprints: list[NodeBlueprint] = list(blueprints)
        self._by_id: dict[str, NodeBlueprint] = {b.id: b for b in self._blueprints}

    def __len__(self) -> int:
        return len(self._blueprints)

    def __contains__(self, blueprint_id: object) -> bool:
        return blueprint_id in self._by_id

    def get(self, blueprint_id: str) -> NodeBlueprint:
        """Return the blueprint with *blueprint_id*.

        Raises
        ------
        KeyError
            If no blueprint has that id.
        """
        try:
            return self._by_id[blueprint_id]
        except KeyError:
            raise KeyError(f"Unknown blueprint id: {blueprint_id!r}") from None

    def of_type(self, node_type: NodeType) -> list[NodeBlueprint]:
        """Return all blueprints of *node_type*, in catalog order."""
        return [b for b in self._blueprints if b.node_type == node_type]

    def supported_types(self, node_types: Iterable[NodeType]) -> list[NodeType]:
        """Filter *node_types* to those with at least one blueprint."""
        return [t for t in node_types if self.of_type(t)]

    def unique_bosses(self) -> list[NodeBlueprint]:
        """Return the first boss blueprint for each boss type."""
        unique: list[NodeBlueprint] = []
        seen: set[BossType] = set()
        for blueprint in self.of_type(NodeType.BOSS):
            if blueprint.boss_type not in seen:
                unique.append(blueprint)
                seen.add(blueprint.boss_type)
        return unique

    def candidates(
        self, node_type: NodeType, context: BlueprintContext,
    ) -> list[NodeBlueprint]:
        """Return every blueprint that may be bound to a *node_type* node in
        *context*.  An empty list means the catalog cannot supply one."""
        if node_type == NodeType.BOSS:
            if context.boss is not None:
                return [b for b in self.of_type(NodeType.BOSS) if b.boss_type == context.boss]
            if context.convergence_slot is not None:
                unique = self.unique_bosses()
                if context.convergence_slot < len(unique):
                    return [unique[context.convergence_slot]]
                return unique
            return self.of_type(NodeType.BOSS)

        if node_type == NodeType.MINION and context.boss is not None:
            return [
                b for b in self.of_type(NodeType.MINION)
                if b.associated_boss == context.boss
            ]

        return self.of_type(node_type)

    def blueprint_for(
        self,
        node_type: NodeType,
        context: BlueprintContext,
        rng: GameRNG,
    ) -> NodeBlueprint:
        """Pick a blueprint for a *node_type* node, weighted by
        ``NodeBlueprint.weight``.

        Raises
        ------
        ConfigurationError
            If no blueprint fits the type and context.
        """
        matching = self.candidates(node_type, context)
        if not matching:
            raise ConfigurationError(
                f"No {node_type.value} blueprint available for {context.describe()}"
            )
        return rng.weighted_choice(matching, [b.weight for b in matching])


class BlueprintRegistry:
    """Loads node blueprints from JSON and hands out catalogs.

    Usage::

        registry = BlueprintRegistry()
        registry.load_vanilla_blueprints()

        shop = registry.get_blueprint("shop")
        config = sequential_config(registry.all_blueprints())
    """

    def __init__(self) -> None:
        self.blueprints: dict[str, NodeBlueprint] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_vanilla_blueprints(self, path: str | Path | None = None) -> None:
        """Load the shipped blueprints.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to
            ``data/vanilla/blueprints.json`` inside the package.
        """
        if path is None:
            path = _DEFAULT_BLUEPRINTS_PATH
        self.load_blueprints(path)

    def load_blueprints(self, path: str | Path) -> None:
        """Load blueprints from a JSON list, replacing any with the same id."""
        path = Path(path)

        with open(path) as f:
            raw_blueprints: list[dict[str, Any]] = json.load(f)

        loaded = 0
        for raw in raw_blueprints:
            if "_section" in raw:
                continue  # Skip organizational section markers
            self.add(NodeBlueprint.model_validate(raw))
            loaded += 1
        logger.debug("Loaded %d blueprints from %s", loaded, path)

    def add(self, blueprint: NodeBlueprint) -> None:
        """Register a single blueprint."""
        if blueprint.id in self.blueprints:
            logger.debug("Replacing blueprint %r", blueprint.id)
        self.blueprints[blueprint.id] = blueprint

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_blueprint(self, blueprint_id: str) -> NodeBlueprint | None:
        """Return the blueprint with the given id, or ``None``."""
        return self.blueprints.get(blueprint_id)

    def all_blueprints(self) -> list[NodeBlueprint]:
        """Return every registered blueprint, in load order."""
        return list(self.blueprints.values())

    def get_bosses(self) -> list[NodeBlueprint]:
        """Return all boss blueprints."""
        return [b for b in self.blueprints.values() if b.node_type == NodeType.BOSS]

    def get_minions_for_boss(self, boss: BossType) -> list[NodeBlueprint]:
        """Return the minion blueprints associated with *boss*."""
        return [
            b for b in self.blueprints.values()
            if b.node_type == NodeType.MINION and b.associated_boss == boss
        ]

    def catalog(self) -> BlueprintCatalog:
        """Return a catalog over every registered blueprint."""
        return BlueprintCatalog(self.blueprints.values())
