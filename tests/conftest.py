"""Shared fixtures for map engine tests."""

from __future__ import annotations

import pytest

from stage_map.ir.blueprints import NodeBlueprint, NodeType
from stage_map.sim.content.registry import BlueprintCatalog, BlueprintRegistry
from stage_map.sim.dungeon.graph import GameMap, Node, Point


@pytest.fixture(scope="session")
def registry() -> BlueprintRegistry:
    """Session-scoped registry with the vanilla blueprints loaded once."""
    reg = BlueprintRegistry()
    reg.load_vanilla_blueprints()
    return reg


@pytest.fixture
def blueprints(registry) -> list[NodeBlueprint]:
    return registry.all_blueprints()


@pytest.fixture
def catalog(registry) -> BlueprintCatalog:
    return registry.catalog()


def _node(x: int, y: int, node_type: NodeType, blueprint_id: str, *targets: tuple[int, int]) -> Node:
    return Node(
        point=Point(x=x, y=y),
        node_type=node_type,
        blueprint_id=blueprint_id,
        outgoing=[Point(x=tx, y=ty) for tx, ty in targets],
        position=(float(x), float(y)),
        instance_id=f"{node_type.value}_{blueprint_id}_{x}_{y}",
    )


@pytest.fixture
def small_map() -> GameMap:
    """Hand-built four-layer map.

    ::

        y=3   Treasure(0,3)   Boss(1,3)   Shop(2,3)
        y=2   Shop(0,2) -> (0,3),(1,3)    Regen(1,2) -> (0,3),(2,3)
        y=1   Minion(0,1) -> (0,2),(1,2)  Minion(1,1) -> (1,2)
        y=0   Minion(0,0) -> (0,1)        Minion(1,0) -> (1,1)
    """
    return GameMap(
        name="small",
        nodes=[
            _node(0, 0, NodeType.MINION, "minion_barfly", (0, 1)),
            _node(1, 0, NodeType.MINION, "minion_bouncer", (1, 1)),
            _node(0, 1, NodeType.MINION, "minion_tapster", (0, 2), (1, 2)),
            _node(1, 1, NodeType.MINION, "minion_barfly", (1, 2)),
            _node(0, 2, NodeType.SHOP, "shop", (0, 3), (1, 3)),
            _node(1, 2, NodeType.REGEN, "regen", (0, 3), (2, 3)),
            _node(0, 3, NodeType.TREASURE, "treasure_chest"),
            _node(1, 3, NodeType.BOSS, "boss_drunkard"),
            _node(2, 3, NodeType.SHOP, "shop"),
        ],
    )
