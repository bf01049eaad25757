"""Tests for the boss progression ledger."""

from stage_map.ir.blueprints import BossType
from stage_map.sim.dungeon.progression import ProgressionLedger


class TestBossUnlock:
    def test_locked_by_default(self):
        assert not ProgressionLedger().is_boss_unlocked(BossType.THE_DRUNKARD)

    def test_explicit_unlock(self):
        ledger = ProgressionLedger()
        ledger.unlock_boss(BossType.THE_THIEF)
        ledger.unlock_boss(BossType.THE_THIEF)
        assert ledger.is_boss_unlocked(BossType.THE_THIEF)
        assert ledger.unlocked_bosses == [BossType.THE_THIEF]

    def test_unlocks_after_two_minions(self, registry):
        ledger = ProgressionLedger()
        barfly = registry.get_blueprint("minion_barfly")
        bouncer = registry.get_blueprint("minion_bouncer")

        ledger.record_victory(barfly, "Minion_minion_barfly_0_0_a")
        assert not ledger.is_boss_unlocked(BossType.THE_DRUNKARD)

        ledger.record_victory(bouncer, "Minion_minion_bouncer_1_1_b")
        assert ledger.is_boss_unlocked(BossType.THE_DRUNKARD)
        assert ledger.minions_defeated_for(BossType.THE_DRUNKARD) == 2
        assert not ledger.is_boss_unlocked(BossType.THE_THIEF)

    def test_repeat_minion_counts_once(self, registry):
        ledger = ProgressionLedger()
        barfly = registry.get_blueprint("minion_barfly")
        ledger.record_victory(barfly, "Minion_minion_barfly_0_0_a")
        ledger.record_victory(barfly, "Minion_minion_barfly_2_1_b")
        assert not ledger.is_boss_unlocked(BossType.THE_DRUNKARD)
        assert ledger.minions_defeated_for(BossType.THE_DRUNKARD) == 1
        assert ledger.defeated_instances == [
            "Minion_minion_barfly_0_0_a", "Minion_minion_barfly_2_1_b",
        ]

    def test_custom_threshold(self, registry):
        ledger = ProgressionLedger(minions_to_unlock=1)
        ledger.record_victory(registry.get_blueprint("minion_fence"))
        assert ledger.is_boss_unlocked(BossType.THE_THIEF)


class TestVictories:
    def test_boss_victory(self, registry):
        ledger = ProgressionLedger()
        ledger.record_victory(registry.get_blueprint("boss_hunter"), "Boss_boss_hunter_0_4_c")
        assert ledger.is_boss_defeated(BossType.THE_HUNTER)
        assert ledger.is_instance_defeated("Boss_boss_hunter_0_4_c")

    def test_reward_nodes_ignored(self, registry):
        ledger = ProgressionLedger()
        ledger.record_victory(registry.get_blueprint("shop"), "Shop_shop_0_3_d")
        assert ledger.defeated_instances == []

    def test_empty_instance_never_defeated(self, registry):
        ledger = ProgressionLedger()
        ledger.record_victory(registry.get_blueprint("minion_barfly"))
        assert not ledger.is_instance_defeated("")
        assert ledger.defeated_instances == []


class TestPersistence:
    def test_save_and_load(self, tmp_path, registry):
        ledger = ProgressionLedger()
        ledger.record_victory(registry.get_blueprint("minion_acolyte"), "inst-1")
        ledger.unlock_boss(BossType.THE_PYRO)
        path = tmp_path / "progress" / "ledger.json"
        ledger.save(path)
        assert ProgressionLedger.load(path) == ledger

    def test_resume_missing_file(self, tmp_path):
        assert ProgressionLedger.resume(tmp_path / "none.json") == ProgressionLedger()

    def test_resume_saved(self, tmp_path):
        ledger = ProgressionLedger(unlocked_bosses=[BossType.THE_LIAR])
        path = tmp_path / "ledger.json"
        ledger.save(path)
        assert ProgressionLedger.resume(path) == ledger

    def test_resume_corrupt_starts_fresh(self, tmp_path, caplog):
        path = tmp_path / "ledger.json"
        path.write_bytes(b"\xff{not json")
        assert ProgressionLedger.resume(path) == ProgressionLedger()
        assert "Discarding corrupt progression" in caplog.text
