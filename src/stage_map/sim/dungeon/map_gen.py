"""Map generator -- builds a layered branching map from a :class:`MapConfig`.

Per layer, bottom to top:

1. Offset the layer by a distance drawn from its range.
2. Decide the node count (fixed by the layer, or by its kind).
3. Lay the nodes out evenly and jitter them without reordering.
4. Roll each node's type (reward layers draw from the reward types).
5. Bind a blueprint scoped to the layer's boss.
6. Connect the layer to the one below with a nearest-x monotone pass:
   every lower node gets an outgoing edge, every upper node an incoming
   edge, and no two of these edges cross.

Finally ``extra_paths`` edges are added between unconnected neighbours
using a forked RNG stream, so the minimal connection is the same whatever
the budget.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from stage_map.ir.blueprints import BossType, NodeBlueprint, NodeType
from stage_map.ir.layers import LayerSpec
from stage_map.ir.map_config import MapConfig
from stage_map.sim.content.registry import BlueprintCatalog, BlueprintContext
from stage_map.sim.core.errors import ConfigurationError
from stage_map.sim.core.rng import GameRNG
from stage_map.sim.dungeon.graph import GameMap, Node, Point

logger = logging.getLogger(__name__)

# A convergence layer never shows more bosses than this.
_MAX_CONVERGENCE_BOSSES = 5


class MapGenerator:
    """Generates a :class:`GameMap` from a :class:`MapConfig`.

    The generator holds no state between calls; the same config and seed
    always produce the same map.
    """

    def generate(self, config: MapConfig, rng: GameRNG) -> GameMap:
        """Generate a map.

        Raises
        ------
        ConfigurationError
            If the config has no layers, does not end in a boss layer, the
            catalog lacks a required blueprint, or the extra-path budget
            cannot be met.
        """
        self._check_structure(config)

        catalog = BlueprintCatalog(config.blueprints)
        reward_types = catalog.supported_types(config.reward_node_types)
        distances = [
            rng.random_uniform(spec.distance_from_previous.min, spec.distance_from_previous.max)
            for spec in config.layers
        ]

        layers: list[list[Node]] = []
        offset = 0.0
        for y, spec in enumerate(config.layers):
            offset += distances[y]
            count = self._node_count(config, catalog, y, layers, rng)
            nodes = self._place_layer(
                config, catalog, reward_types, y, count, rng,
            )
            self._layout_layer(nodes, spec, offset, distances, y, rng)
            if layers:
                self._connect_layers(layers[-1], nodes)
            layers.append(nodes)

        self._add_extra_paths(layers, config.extra_paths, rng.fork("extra_paths"))

        game_map = GameMap(
            name=config.name,
            nodes=[node for layer in layers for node in layer],
        )
        self._log_structure(game_map)
        return game_map

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _check_structure(self, config: MapConfig) -> None:
        if not config.layers:
            raise ConfigurationError(f"Map config {config.name!r} has no layers")
        final = config.layers[-1]
        if final.node_type != NodeType.BOSS:
            raise ConfigurationError(
                f"Final layer of {config.name!r} must be a Boss layer, "
                f"got {final.node_type.value}"
            )
        if final.node_count is not None and final.node_count.max != 1:
            raise ConfigurationError(
                "The stage boss layer holds exactly one node; "
                f"node_count {final.node_count.min}-{final.node_count.max} is invalid"
            )

    def _node_count(
        self,
        config: MapConfig,
        catalog: BlueprintCatalog,
        y: int,
        built: list[list[Node]],
        rng: GameRNG,
    ) -> int:
        """Decide how many nodes layer *y* gets."""
        spec = config.layers[y]
        if y == len(config.layers) - 1:
            return 1
        if spec.node_count is not None:
            return rng.random_int(spec.node_count.min, spec.node_count.max)

        if spec.node_type == NodeType.BOSS:
            if spec.boss_filter is not None:
                return 1
            count = min(len(catalog.unique_bosses()), _MAX_CONVERGENCE_BOSSES)
            if count == 0:
                raise ConfigurationError(f"No boss blueprints for convergence layer {y}")
            return count

        if spec.node_type == NodeType.MINION:
            # Reuse the previous width to keep the graph connective, except
            # at the start of a stage where the previous layer is a boss.
            if y == 0 or config.layers[y - 1].node_type == NodeType.BOSS:
                return rng.random_int(config.minion_nodes.min, config.minion_nodes.max)
            return len(built[-1])

        return rng.random_int(config.reward_nodes.min, config.reward_nodes.max)

    def _is_convergence_layer(self, config: MapConfig, y: int) -> bool:
        spec = config.layers[y]
        return (
            spec.node_type == NodeType.BOSS
            and spec.boss_filter is None
            and y < len(config.layers) - 1
        )

    def _boss_for_layer(self, config: MapConfig, y: int) -> BossType | None:
        """The boss filter of the next boss layer above *y*, if any."""
        for later in config.layers[y + 1:]:
            if later.node_type == NodeType.BOSS:
                return later.boss_filter
        return None

    # ------------------------------------------------------------------
    # Node placement
    # ------------------------------------------------------------------

    def _place_layer(
        self,
        config: MapConfig,
        catalog: BlueprintCatalog,
        reward_types: list[NodeType],
        y: int,
        count: int,
        rng: GameRNG,
    ) -> list[Node]:
        spec = config.layers[y]
        stage_boss_layer = y == len(config.layers) - 1
        convergence = self._is_convergence_layer(config, y)

        nodes: list[Node] = []
        for x in range(count):
            node_type = self._roll_node_type(spec, reward_types, stage_boss_layer, rng)
            blueprint = self._pick_blueprint(
                config, catalog, node_type, y, x, stage_boss_layer, convergence, rng,
            )
            instance_id = (
                f"{node_type.value}_{blueprint.id}_{x}_{y}_"
                f"{rng.random_int(0, 0xFFFFFFFF):08x}"
            )
            nodes.append(Node(
                point=Point(x=x, y=y),
                node_type=node_type,
                blueprint_id=blueprint.id,
                instance_id=instance_id,
            ))
        return nodes

    def _roll_node_type(
        self,
        spec: LayerSpec,
        reward_types: list[NodeType],
        stage_boss_layer: bool,
        rng: GameRNG,
    ) -> NodeType:
        """Default type, or a reward type with probability
        ``spec.randomize_nodes``."""
        if stage_boss_layer:
            return NodeType.BOSS
        if spec.randomize_nodes > 0 and reward_types:
            if rng.random_float() < spec.randomize_nodes:
                return rng.random_choice(reward_types)
        return spec.node_type

    def _pick_blueprint(
        self,
        config: MapConfig,
        catalog: BlueprintCatalog,
        node_type: NodeType,
        y: int,
        x: int,
        stage_boss_layer: bool,
        convergence: bool,
        rng: GameRNG,
    ) -> NodeBlueprint:
        spec = config.layers[y]
        boss: BossType | None = None
        inferred = False
        if node_type in (NodeType.MINION, NodeType.BOSS):
            boss = spec.boss_filter
            if boss is None and node_type == NodeType.MINION:
                boss = self._boss_for_layer(config, y)
                inferred = boss is not None

        context = BlueprintContext(
            layer_index=y,
            boss=boss,
            stage_boss_layer=stage_boss_layer,
            convergence_slot=x if convergence and node_type == NodeType.BOSS else None,
        )
        if inferred and not catalog.candidates(node_type, context):
            logger.warning(
                "No minions found for boss %s on layer %d, using all minions",
                boss.value, y,
            )
            context = replace(context, boss=None)

        blueprint = catalog.blueprint_for(node_type, context, rng)
        logger.debug(
            "Layer %d slot %d: %s -> %s", y, x, node_type.value, blueprint.id,
        )
        return blueprint

    def _layout_layer(
        self,
        nodes: list[Node],
        spec: LayerSpec,
        offset: float,
        distances: list[float],
        y: int,
        rng: GameRNG,
    ) -> None:
        """Centre the layer on x=0 and jitter positions.

        The x jitter stays under half the spacing in either direction, so
        neighbours never swap order.
        """
        spacing = spec.nodes_apart_distance
        jitter = spec.randomize_position
        start = -spacing * (len(nodes) - 1) / 2
        to_previous = distances[y]
        to_next = distances[y + 1] if y + 1 < len(distances) else 0.0

        for i, node in enumerate(nodes):
            x_rnd = rng.random_float() - 0.5
            y_rnd = rng.random_float() - 0.5
            x = start + i * spacing + x_rnd * spacing * jitter
            y_shift = (to_previous if y_rnd < 0 else to_next) * y_rnd * jitter
            node.position = (x, offset + y_shift)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _connect_layers(self, lower: list[Node], upper: list[Node]) -> None:
        """Nearest-x monotone connection between two adjacent layers.

        Walks from the leftmost pair to the rightmost pair, each step
        advancing the lower cursor, the upper cursor, or both, picking
        whichever new pair is closest horizontally (diagonal on ties).
        """
        i = j = 0
        lower[0].add_outgoing(upper[0].point)
        last_i, last_j = len(lower) - 1, len(upper) - 1

        while i < last_i or j < last_j:
            options: list[tuple[int, int]] = []
            if i < last_i and j < last_j:
                options.append((i + 1, j + 1))
            if i < last_i:
                options.append((i + 1, j))
            if j < last_j:
                options.append((i, j + 1))
            i, j = min(
                options,
                key=lambda ij: abs(lower[ij[0]].position[0] - upper[ij[1]].position[0]),
            )
            lower[i].add_outgoing(upper[j].point)

    def _add_extra_paths(
        self, layers: list[list[Node]], extra_paths: int, rng: GameRNG,
    ) -> None:
        """Add *extra_paths* edges between unconnected adjacent-layer
        pairs, uniformly at random."""
        if extra_paths == 0:
            return

        candidates: list[tuple[Node, Point]] = [
            (source, target.point)
            for lower, upper in zip(layers, layers[1:])
            for source in lower
            for target in upper
            if not source.connects_to(target.point)
        ]
        if extra_paths > len(candidates):
            raise ConfigurationError(
                f"Cannot add {extra_paths} extra paths: only "
                f"{len(candidates)} unconnected pairs exist"
            )

        for _ in range(extra_paths):
            source, target = candidates.pop(rng.random_int(0, len(candidates) - 1))
            source.add_outgoing(target)
            logger.debug("Extra path %s -> %s", source.point, target)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _log_structure(self, game_map: GameMap) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug("=== map %s: %d layers ===", game_map.name, game_map.layer_count)
        for y in range(game_map.layer_count):
            layer = game_map.layer(y)
            logger.debug(
                "Layer %d: %d nodes: %s",
                y,
                len(layer),
                ", ".join(f"{n.node_type.value}:{n.blueprint_id}" for n in layer),
            )
