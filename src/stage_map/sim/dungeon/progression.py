"""Boss progression ledger -- which bosses are unlocked and what is beaten.

A boss unlocks either explicitly or once enough of its minions have been
defeated.  Defeated node instances are tracked separately so that a
minion node that was already beaten is not fought again.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from stage_map.ir.blueprints import BossType, NodeBlueprint, NodeType

logger = logging.getLogger(__name__)

# Defeated minions needed before their boss unlocks.
MINIONS_TO_UNLOCK_BOSS = 2


class ProgressionLedger(BaseModel):
    """Serialisable record of boss unlocks and defeats."""

    unlocked_bosses: list[BossType] = []
    defeated_bosses: list[BossType] = []
    defeated_minions: dict[BossType, list[str]] = {}
    """Defeated minion blueprint ids, keyed by associated boss."""

    defeated_instances: list[str] = []
    """``Node.instance_id`` of every battle node won."""

    minions_to_unlock: int = Field(default=MINIONS_TO_UNLOCK_BOSS, ge=0)

    # -- queries ------------------------------------------------------------

    def is_boss_unlocked(self, boss: BossType) -> bool:
        """True if *boss* was unlocked explicitly or through its minions."""
        if boss in self.unlocked_bosses:
            return True
        return len(self.defeated_minions.get(boss, [])) >= self.minions_to_unlock

    def is_boss_defeated(self, boss: BossType) -> bool:
        return boss in self.defeated_bosses

    def is_instance_defeated(self, instance_id: str) -> bool:
        return bool(instance_id) and instance_id in self.defeated_instances

    def minions_defeated_for(self, boss: BossType) -> int:
        return len(self.defeated_minions.get(boss, []))

    # -- updates ------------------------------------------------------------

    def unlock_boss(self, boss: BossType) -> None:
        if boss not in self.unlocked_bosses:
            self.unlocked_bosses.append(boss)
            logger.info("Boss %s unlocked", boss.value)

    def record_victory(self, blueprint: NodeBlueprint, instance_id: str = "") -> None:
        """Record a won battle against *blueprint*.

        A minion blueprint counts towards its boss once, however many of its
        nodes are beaten.  Non-battle blueprints are ignored.
        """
        if blueprint.node_type == NodeType.MINION:
            boss = blueprint.associated_boss
            was_unlocked = self.is_boss_unlocked(boss)
            defeated = self.defeated_minions.setdefault(boss, [])
            if blueprint.id not in defeated:
                defeated.append(blueprint.id)
            logger.info(
                "Minion %s defeated (%d for %s)", blueprint.id, len(defeated), boss.value,
            )
            if not was_unlocked and self.is_boss_unlocked(boss):
                logger.info("Boss %s unlocked by minion defeats", boss.value)
        elif blueprint.node_type == NodeType.BOSS:
            if blueprint.boss_type not in self.defeated_bosses:
                self.defeated_bosses.append(blueprint.boss_type)
            logger.info("Boss %s defeated", blueprint.boss_type.value)
        else:
            return

        if instance_id and instance_id not in self.defeated_instances:
            self.defeated_instances.append(instance_id)

    # -- persistence --------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> "ProgressionLedger":
        """Load a ledger from a JSON file."""
        return cls.model_validate_json(Path(path).read_text())

    @classmethod
    def resume(cls, path: str | Path) -> "ProgressionLedger":
        """Load the ledger at *path*, or start an empty one.

        A missing or unreadable file yields a fresh ledger.
        """
        path = Path(path)
        if not path.is_file():
            return cls()
        try:
            return cls.load(path)
        except (UnicodeDecodeError, ValidationError) as exc:
            logger.warning("Discarding corrupt progression at %s: %s", path, exc)
            return cls()

    def save(self, path: str | Path) -> None:
        """Write the ledger to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))
