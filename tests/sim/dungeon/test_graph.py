"""Tests for Point, Node and GameMap invariants."""

import pytest
from pydantic import ValidationError

from stage_map.ir.blueprints import NodeType
from stage_map.sim.dungeon.graph import GameMap, Node, Point


def _p(x, y):
    return Point(x=x, y=y)


def _two_layer_map(**overrides) -> dict:
    """Raw document for a minimal valid map: two minions into one boss."""
    doc = {
        "name": "tiny",
        "nodes": [
            {"point": {"x": 0, "y": 0}, "node_type": "Minion", "blueprint_id": "m",
             "outgoing": [{"x": 0, "y": 1}]},
            {"point": {"x": 1, "y": 0}, "node_type": "Minion", "blueprint_id": "m",
             "outgoing": [{"x": 0, "y": 1}]},
            {"point": {"x": 0, "y": 1}, "node_type": "Boss", "blueprint_id": "b"},
        ],
        "path": [],
    }
    doc.update(overrides)
    return doc


class TestPoint:
    def test_structural_equality_and_hash(self):
        assert _p(1, 2) == _p(1, 2)
        assert len({_p(1, 2), _p(1, 2), _p(2, 1)}) == 2

    def test_str(self):
        assert str(_p(3, 4)) == "(3, 4)"

    def test_frozen(self):
        with pytest.raises(ValidationError):
            _p(0, 0).x = 1


class TestNode:
    def test_add_outgoing_dedupes(self):
        node = Node(point=_p(0, 0), node_type=NodeType.SHOP, blueprint_id="shop")
        assert node.add_outgoing(_p(0, 1)) is True
        assert node.add_outgoing(_p(0, 1)) is False
        assert node.outgoing == [_p(0, 1)]

    def test_outgoing_not_shared_between_nodes(self):
        a = Node(point=_p(0, 0), node_type=NodeType.SHOP, blueprint_id="shop")
        b = Node(point=_p(1, 0), node_type=NodeType.SHOP, blueprint_id="shop")
        a.add_outgoing(_p(0, 1))
        assert b.outgoing == []


class TestGameMapQueries:
    def test_layers(self, small_map):
        assert small_map.layer_count == 4
        assert small_map.top_layer == 3
        assert [n.point.x for n in small_map.layer(3)] == [0, 1, 2]

    def test_get_node(self, small_map):
        assert small_map.get_node(_p(1, 2)).node_type == NodeType.REGEN
        assert small_map.get_node(_p(5, 5)) is None

    def test_get_node_returns_stored_node(self, small_map):
        for node in small_map.nodes:
            assert small_map.get_node(node.point) is node

    def test_lookup_after_parse_and_copy(self, small_map):
        parsed = GameMap.model_validate_json(small_map.model_dump_json())
        copied = small_map.model_copy(deep=True)
        for game_map in (parsed, copied):
            node = game_map.get_node(_p(1, 3))
            assert node is not None and node in game_map.nodes
            assert node.blueprint_id == "boss_drunkard"

    def test_incoming_is_derived(self, small_map):
        assert set(small_map.incoming(_p(0, 3))) == {_p(0, 2), _p(1, 2)}
        assert small_map.incoming(_p(0, 0)) == []

    def test_edges(self, small_map):
        assert small_map.edge_count() == len(small_map.edges()) == 9

    def test_attainable_before_first_move(self, small_map):
        assert small_map.current_point() is None
        assert small_map.attainable_points() == [_p(0, 0), _p(1, 0)]

    def test_attainable_after_move(self, small_map):
        small_map.path.extend([_p(0, 0), _p(0, 1), _p(1, 2)])
        assert small_map.attainable_points() == [_p(0, 3), _p(2, 3)]

    def test_stage_boss(self, small_map):
        assert small_map.stage_boss_node().point == _p(1, 3)
        assert not small_map.is_stage_complete()

    def test_stage_complete_when_boss_reached(self, small_map):
        small_map.path.extend([_p(0, 0), _p(0, 1), _p(0, 2), _p(1, 3)])
        assert small_map.is_stage_complete()


class TestGameMapValidation:
    def test_valid_document(self):
        game_map = GameMap.model_validate(_two_layer_map())
        assert len(game_map.nodes) == 3

    def test_empty_map_rejected(self):
        with pytest.raises(ValidationError, match="at least one node"):
            GameMap(nodes=[])

    def test_duplicate_points_rejected(self):
        doc = _two_layer_map()
        doc["nodes"][1]["point"] = {"x": 0, "y": 0}
        with pytest.raises(ValidationError, match="duplicate node"):
            GameMap.model_validate(doc)

    def test_layer_skipping_edge_rejected(self):
        doc = _two_layer_map()
        doc["nodes"][0]["outgoing"].append({"x": 0, "y": 2})
        with pytest.raises(ValidationError, match="skips or reverses layers"):
            GameMap.model_validate(doc)

    def test_edge_to_missing_node_rejected(self):
        doc = _two_layer_map()
        doc["nodes"][0]["outgoing"].append({"x": 4, "y": 1})
        with pytest.raises(ValidationError, match="targets a missing node"):
            GameMap.model_validate(doc)

    def test_dead_end_rejected(self):
        doc = _two_layer_map()
        doc["nodes"][1]["outgoing"] = []
        with pytest.raises(ValidationError, match="dead end"):
            GameMap.model_validate(doc)

    def test_unreachable_rejected(self):
        doc = _two_layer_map()
        doc["nodes"].append({"point": {"x": 1, "y": 1}, "node_type": "Shop", "blueprint_id": "shop"})
        with pytest.raises(ValidationError, match="unreachable"):
            GameMap.model_validate(doc)

    def test_terminal_layer_needs_one_boss(self):
        doc = _two_layer_map()
        doc["nodes"][2]["node_type"] = "Shop"
        with pytest.raises(ValidationError, match="exactly one Boss"):
            GameMap.model_validate(doc)

    def test_path_must_start_on_layer_zero(self):
        with pytest.raises(ValidationError, match="not on layer 0"):
            GameMap.model_validate(_two_layer_map(path=[{"x": 0, "y": 1}]))

    def test_path_must_follow_edges(self):
        doc = _two_layer_map(path=[{"x": 0, "y": 0}, {"x": 1, "y": 0}])
        with pytest.raises(ValidationError, match="does not follow an edge"):
            GameMap.model_validate(doc)

    def test_errors_are_collected(self):
        doc = _two_layer_map()
        doc["nodes"][1]["outgoing"] = []
        doc["nodes"][2]["node_type"] = "Shop"
        with pytest.raises(ValidationError, match=r"2 error\(s\)"):
            GameMap.model_validate(doc)

    def test_json_round_trip(self, small_map):
        small_map.path.extend([_p(1, 0), _p(1, 1)])
        restored = GameMap.model_validate_json(small_map.model_dump_json())
        assert restored == small_map
        assert restored.edges() == small_map.edges()
