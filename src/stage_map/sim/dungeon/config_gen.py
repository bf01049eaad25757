"""Map config factory -- the standard map layouts.

Three layouts are provided:

- **simple**: one stage, 3 minion layers -> reward layer -> boss.
- **sequential**: one stage per boss, each 3 minion layers -> reward
  layer -> boss, with minions scoped to the stage's boss.
- **branching**: a short, wide map that converges on a choice of bosses
  before the stage boss.

Layer constants:
- Minion layers: spacing 2.0, jitter 0.1 on the first layer and 0.3 after,
  distance 1-2 for the first layer and 3-5 after.
- Reward layers: spacing 2.5, jitter 0.4, distance 3-5, fully randomized.
- Boss layers: spacing 3.0, jitter 0.1, distance 4-6 (5-7 for the final).
"""

from __future__ import annotations

from typing import Iterable

from stage_map.ir.blueprints import REWARD_NODE_TYPES, BossType, NodeBlueprint, NodeType
from stage_map.ir.layers import FloatRange, IntRange, LayerSpec
from stage_map.ir.map_config import MapConfig
from stage_map.sim.content.registry import BlueprintCatalog
from stage_map.sim.core.errors import ConfigurationError
from stage_map.sim.core.rng import GameRNG

_MINION_LAYERS_PER_STAGE = 3


# -- layer builders -------------------------------------------------------


def minion_layer(
    first: bool = False,
    boss: BossType | None = None,
    node_count: IntRange | None = None,
) -> LayerSpec:
    """A minion layer.  *first* marks the bottom layer of the whole map."""
    return LayerSpec(
        node_type=NodeType.MINION,
        distance_from_previous=FloatRange(min=1.0, max=2.0) if first else FloatRange(min=3.0, max=5.0),
        nodes_apart_distance=2.0,
        randomize_position=0.1 if first else 0.3,
        randomize_nodes=0.0,
        node_count=node_count,
        boss_filter=boss,
    )


def reward_layer(node_count: IntRange | None = None) -> LayerSpec:
    """A reward layer: every node is randomized to a reward type."""
    return LayerSpec(
        node_type=NodeType.SHOP,
        distance_from_previous=FloatRange(min=3.0, max=5.0),
        nodes_apart_distance=2.5,
        randomize_position=0.4,
        randomize_nodes=1.0,
        node_count=node_count,
    )


def boss_layer(final: bool = False, boss: BossType | None = None) -> LayerSpec:
    """A boss layer.  The final one sits further from its predecessor."""
    return LayerSpec(
        node_type=NodeType.BOSS,
        distance_from_previous=FloatRange(min=5.0, max=7.0) if final else FloatRange(min=4.0, max=6.0),
        nodes_apart_distance=3.0,
        randomize_position=0.1,
        randomize_nodes=0.0,
        boss_filter=boss,
    )


def _fixed(count: int) -> IntRange:
    return IntRange(min=count, max=count)


# -- standard layouts -----------------------------------------------------


def simple_config(blueprints: Iterable[NodeBlueprint], name: str = "simple") -> MapConfig:
    """Single stage: 3 minion layers -> reward layer -> boss layer."""
    layers = [minion_layer(first=i == 0) for i in range(_MINION_LAYERS_PER_STAGE)]
    layers.append(reward_layer())
    layers.append(boss_layer())
    return MapConfig(
        name=name,
        layers=layers,
        blueprints=list(blueprints),
        reward_node_types=list(REWARD_NODE_TYPES),
        extra_paths=1,
    )


def sequential_config(
    blueprints: Iterable[NodeBlueprint],
    num_bosses: int = 5,
    name: str = "sequential",
) -> MapConfig:
    """One stage per boss, in catalog order.

    Each stage is 3 minion layers scoped to the boss, a reward layer and
    the boss layer.  The last boss layer is the stage boss.

    Raises
    ------
    ConfigurationError
        If the catalog has fewer than *num_bosses* distinct bosses.
    """
    blueprints = list(blueprints)
    if num_bosses < 1:
        raise ConfigurationError(f"num_bosses must be at least 1, got {num_bosses}")

    bosses = [b.boss_type for b in BlueprintCatalog(blueprints).unique_bosses()]
    if len(bosses) < num_bosses:
        raise ConfigurationError(
            f"Sequential map needs {num_bosses} bosses, catalog has {len(bosses)}"
        )

    layers: list[LayerSpec] = []
    for stage, boss in enumerate(bosses[:num_bosses]):
        for i in range(_MINION_LAYERS_PER_STAGE):
            layers.append(minion_layer(first=stage == 0 and i == 0, boss=boss))
        layers.append(reward_layer())
        layers.append(boss_layer(final=stage == num_bosses - 1, boss=boss))

    return MapConfig(
        name=name,
        layers=layers,
        blueprints=blueprints,
        reward_node_types=list(REWARD_NODE_TYPES),
        extra_paths=1,
    )


def branching_config(
    blueprints: Iterable[NodeBlueprint],
    rng: GameRNG,
    num_bosses: int = 5,
    name: str = "branching",
) -> MapConfig:
    """A wide map that converges on a choice of bosses.

    2 starting minions -> two minion layers of 3-5 -> reward layer of 4-6
    -> one node per boss (up to *num_bosses*) -> stage boss.  Layer widths
    are rolled from *rng* when the config is built.
    """
    blueprints = list(blueprints)
    unique_bosses = len(BlueprintCatalog(blueprints).unique_bosses())
    convergence = min(num_bosses, unique_bosses)

    layers = [
        minion_layer(first=True, node_count=_fixed(2)),
        minion_layer(node_count=_fixed(rng.random_int(3, 5))),
        minion_layer(node_count=_fixed(rng.random_int(3, 5))),
        reward_layer(node_count=_fixed(rng.random_int(4, 6))),
    ]
    convergence_layer = boss_layer()
    if convergence > 0:
        convergence_layer = convergence_layer.model_copy(
            update={"node_count": _fixed(convergence)},
        )
    layers.append(convergence_layer)
    layers.append(boss_layer(final=True))

    return MapConfig(
        name=name,
        layers=layers,
        blueprints=blueprints,
        reward_node_types=list(REWARD_NODE_TYPES),
        extra_paths=2,
    )


# -- validation -----------------------------------------------------------


def validate_config(config: MapConfig) -> list[str]:
    """Check that the catalog can supply every layer of *config*.

    Returns a list of human-readable problems; empty means the config is
    expected to generate.  The one thing not checked is the extra-path
    budget, which depends on the rolled layer widths.
    """
    problems: list[str] = []
    if not config.layers:
        return ["config has no layers"]

    catalog = BlueprintCatalog(config.blueprints)
    if config.layers[-1].node_type != NodeType.BOSS:
        problems.append(
            f"final layer is {config.layers[-1].node_type.value}, not Boss"
        )
    if not catalog.of_type(NodeType.BOSS):
        problems.append("no Boss blueprints")

    reward_types = catalog.supported_types(config.reward_node_types)
    checked_bosses: set[BossType] = set()

    for y, layer in enumerate(config.layers):
        if layer.randomize_nodes > 0 and not reward_types:
            problems.append(f"layer {y}: randomizes nodes but no reward type has blueprints")
        if layer.randomize_nodes < 1 and not catalog.of_type(layer.node_type):
            problems.append(f"layer {y}: no {layer.node_type.value} blueprints")

        boss = layer.boss_filter
        if boss is None or boss in checked_bosses:
            continue
        checked_bosses.add(boss)
        if not any(b.boss_type == boss for b in catalog.of_type(NodeType.BOSS)):
            problems.append(f"no Boss blueprint for {boss.value}")
        if not any(b.associated_boss == boss for b in catalog.of_type(NodeType.MINION)):
            problems.append(f"no Minion blueprints for {boss.value}")

    return problems
