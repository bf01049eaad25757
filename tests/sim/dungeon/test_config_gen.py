"""Tests for the standard map layouts and config validation."""

import pytest

from stage_map.ir.blueprints import BossType, NodeType
from stage_map.ir.layers import LayerSpec
from stage_map.ir.map_config import MapConfig
from stage_map.sim.core.errors import ConfigurationError
from stage_map.sim.core.rng import GameRNG
from stage_map.sim.dungeon.config_gen import (
    boss_layer,
    branching_config,
    minion_layer,
    reward_layer,
    sequential_config,
    simple_config,
    validate_config,
)


class TestLayerBuilders:
    def test_first_minion_layer(self):
        layer = minion_layer(first=True)
        assert layer.node_type == NodeType.MINION
        assert (layer.distance_from_previous.min, layer.distance_from_previous.max) == (1.0, 2.0)
        assert layer.randomize_position == 0.1
        assert layer.nodes_apart_distance == 2.0

    def test_later_minion_layer(self):
        layer = minion_layer(boss=BossType.THE_THIEF)
        assert (layer.distance_from_previous.min, layer.distance_from_previous.max) == (3.0, 5.0)
        assert layer.randomize_position == 0.3
        assert layer.boss_filter == BossType.THE_THIEF

    def test_reward_layer(self):
        layer = reward_layer()
        assert layer.randomize_nodes == 1.0
        assert layer.randomize_position == 0.4
        assert layer.nodes_apart_distance == 2.5

    def test_boss_layers(self):
        assert boss_layer().distance_from_previous.max == 6.0
        assert boss_layer(final=True).distance_from_previous.min == 5.0
        assert boss_layer().nodes_apart_distance == 3.0


class TestSimpleConfig:
    def test_layer_types(self, blueprints):
        config = simple_config(blueprints)
        types = [layer.node_type for layer in config.layers]
        assert types == [NodeType.MINION] * 3 + [NodeType.SHOP, NodeType.BOSS]
        assert config.extra_paths == 1
        assert validate_config(config) == []


class TestSequentialConfig:
    def test_five_stages(self, blueprints):
        config = sequential_config(blueprints)
        assert len(config.layers) == 25
        bosses = [layer.boss_filter for layer in config.layers if layer.node_type == NodeType.BOSS]
        assert bosses == [
            BossType.THE_DRUNKARD,
            BossType.THE_FORTUNE_TELLER,
            BossType.THE_THIEF,
            BossType.THE_FORGETFUL_SEER,
            BossType.THE_HUNTER,
        ]

    def test_minion_layers_filtered_by_stage_boss(self, blueprints):
        config = sequential_config(blueprints, num_bosses=2)
        assert [layer.boss_filter for layer in config.layers[5:8]] == [BossType.THE_FORTUNE_TELLER] * 3

    def test_only_last_boss_is_final(self, blueprints):
        config = sequential_config(blueprints, num_bosses=3)
        assert config.layers[4].distance_from_previous.min == 4.0
        assert config.layers[-1].distance_from_previous.min == 5.0

    def test_only_first_layer_is_tight(self, blueprints):
        config = sequential_config(blueprints, num_bosses=2)
        assert config.layers[0].distance_from_previous.max == 2.0
        assert config.layers[5].distance_from_previous.max == 5.0

    def test_too_many_bosses(self, blueprints):
        with pytest.raises(ConfigurationError, match="needs 6 bosses"):
            sequential_config(blueprints, num_bosses=6)

    def test_zero_bosses(self, blueprints):
        with pytest.raises(ConfigurationError):
            sequential_config(blueprints, num_bosses=0)

    def test_validates(self, blueprints):
        assert validate_config(sequential_config(blueprints)) == []


class TestBranchingConfig:
    def test_shape(self, blueprints):
        config = branching_config(blueprints, GameRNG(seed=42))
        counts = [layer.node_count for layer in config.layers]
        assert counts[0].min == counts[0].max == 2
        for count in counts[1:3]:
            assert count.min == count.max and 3 <= count.min <= 5
        assert counts[3].min == counts[3].max and 4 <= counts[3].min <= 6
        assert counts[4].min == counts[4].max == 5
        assert counts[5] is None
        assert config.extra_paths == 2

    def test_convergence_capped_by_num_bosses(self, blueprints):
        config = branching_config(blueprints, GameRNG(seed=1), num_bosses=3)
        assert config.layers[4].node_count.max == 3

    def test_same_rng_same_config(self, blueprints):
        assert branching_config(blueprints, GameRNG(seed=5)) == branching_config(blueprints, GameRNG(seed=5))


class TestValidateConfig:
    def test_no_layers(self):
        assert validate_config(MapConfig()) == ["config has no layers"]

    def test_final_layer_not_boss(self, blueprints):
        config = MapConfig(layers=[minion_layer(first=True)], blueprints=blueprints)
        assert "final layer is Minion, not Boss" in validate_config(config)

    def test_missing_minions_for_filtered_boss(self, blueprints):
        pruned = [
            b for b in blueprints
            if not (b.node_type == NodeType.MINION and b.associated_boss == BossType.THE_HUNTER)
        ]
        problems = validate_config(sequential_config(pruned))
        assert problems == ["no Minion blueprints for TheHunter"]

    def test_missing_rewards(self, blueprints):
        battles_only = [b for b in blueprints if b.node_type in (NodeType.MINION, NodeType.BOSS)]
        problems = validate_config(simple_config(battles_only))
        assert problems == ["layer 3: randomizes nodes but no reward type has blueprints"]

    def test_missing_default_type(self, blueprints):
        config = MapConfig(
            layers=[LayerSpec(node_type=NodeType.REGEN), boss_layer(final=True)],
            blueprints=[b for b in blueprints if b.node_type != NodeType.REGEN],
        )
        assert validate_config(config) == ["layer 0: no Regen blueprints"]

    def test_missing_bosses(self, blueprints):
        no_bosses = [b for b in blueprints if b.node_type != NodeType.BOSS]
        problems = validate_config(simple_config(no_bosses))
        assert "no Boss blueprints" in problems
