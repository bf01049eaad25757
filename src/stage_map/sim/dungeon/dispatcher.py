"""Encounter dispatcher -- turns an entered node into an external call.

The battle, reward and shop subsystems live outside the map engine.  They
are reached through an :class:`EncounterHandler`; the dispatcher picks the
one entry point that matches the node and reports whether the map should
stay locked until the subsystem hands control back.

============  ==================================  ====================
Node type     Call                                Lock
============  ==================================  ====================
Minion        ``start_minion_battle(blueprint)``  held
Boss          ``start_boss_battle(boss_type)``    held (released if the
                                                  boss is locked)
Regen         ``grant_regen()``                   released
Treasure      ``roll_treasure_reward(chance)``    released
Shop          ``open_shop()``                     released
============  ==================================  ====================
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from stage_map.ir.blueprints import BossType, NodeBlueprint, NodeType
from stage_map.sim.content.registry import BlueprintCatalog
from stage_map.sim.dungeon.graph import Node
from stage_map.sim.dungeon.progression import ProgressionLedger

logger = logging.getLogger(__name__)


class EncounterHandler(ABC):
    """External subsystems the map hands control to.

    Every call is fire-and-forget: battles report back later through the
    session's ``on_battle_won`` / ``on_battle_lost``.
    """

    @abstractmethod
    def start_minion_battle(self, blueprint: NodeBlueprint) -> None:
        """Begin a battle against the minion described by *blueprint*."""

    @abstractmethod
    def start_boss_battle(self, boss: BossType) -> None:
        """Begin a battle against *boss*."""

    @abstractmethod
    def is_boss_unlocked(self, boss: BossType) -> bool:
        """Whether *boss* may be fought yet."""

    @abstractmethod
    def grant_regen(self) -> None:
        """Restore the player (campfire)."""

    @abstractmethod
    def roll_treasure_reward(self, tarot_card_chance: float) -> None:
        """Award treasure, granting a tarot card with the given chance."""

    @abstractmethod
    def open_shop(self) -> None:
        """Open the shop."""


class LoggingEncounterHandler(EncounterHandler):
    """Handler that only logs, backed by a :class:`ProgressionLedger`.

    Useful headless (scripts, tests) and as the default when no game is
    attached.
    """

    def __init__(self, ledger: ProgressionLedger | None = None) -> None:
        self.ledger = ledger if ledger is not None else ProgressionLedger()

    def start_minion_battle(self, blueprint: NodeBlueprint) -> None:
        logger.info("Minion battle: %s", blueprint.name)

    def start_boss_battle(self, boss: BossType) -> None:
        logger.info("Boss battle: %s", boss.value)

    def is_boss_unlocked(self, boss: BossType) -> bool:
        return self.ledger.is_boss_unlocked(boss)

    def grant_regen(self) -> None:
        logger.info("Regen granted")

    def roll_treasure_reward(self, tarot_card_chance: float) -> None:
        logger.info("Treasure rolled (tarot chance %.2f)", tarot_card_chance)

    def open_shop(self) -> None:
        logger.info("Shop opened")


class EncounterAction(str, Enum):
    """What the dispatcher did with an entered node."""

    MINION_BATTLE = "minion_battle"
    BOSS_BATTLE = "boss_battle"
    BOSS_LOCKED = "boss_locked"
    REGEN = "regen"
    TREASURE = "treasure"
    SHOP = "shop"
    SKIPPED = "skipped"


@dataclass
class Dispatch:
    """Result of dispatching one node."""

    node: Node
    blueprint: NodeBlueprint
    action: EncounterAction
    holds_lock: bool


class EncounterDispatcher:
    """Routes entered nodes to an :class:`EncounterHandler`.

    Parameters
    ----------
    handler:
        The external subsystems.
    catalog:
        Resolves ``Node.blueprint_id``.
    ledger:
        Progression record; minion nodes already beaten are skipped.
    """

    def __init__(
        self,
        handler: EncounterHandler,
        catalog: BlueprintCatalog,
        ledger: ProgressionLedger | None = None,
    ) -> None:
        self.handler = handler
        self.catalog = catalog
        self.ledger = ledger if ledger is not None else ProgressionLedger()

    def dispatch(self, node: Node) -> Dispatch:
        """Make exactly one handler call for *node*.

        Raises
        ------
        KeyError
            If the node's blueprint is not in the catalog.
        """
        blueprint = self.catalog.get(node.blueprint_id)
        logger.info("Entering %s node %s (%s)", node.node_type.value, node.point, blueprint.id)

        if node.node_type == NodeType.MINION:
            if self.ledger.is_instance_defeated(node.instance_id):
                logger.info("Minion at %s already defeated, skipping battle", node.point)
                return Dispatch(node, blueprint, EncounterAction.SKIPPED, holds_lock=False)
            self.handler.start_minion_battle(blueprint)
            return Dispatch(node, blueprint, EncounterAction.MINION_BATTLE, holds_lock=True)

        if node.node_type == NodeType.BOSS:
            boss = blueprint.boss_type
            if not self.handler.is_boss_unlocked(boss):
                logger.warning("Boss %s is locked, releasing the map", boss.value)
                return Dispatch(node, blueprint, EncounterAction.BOSS_LOCKED, holds_lock=False)
            self.handler.start_boss_battle(boss)
            return Dispatch(node, blueprint, EncounterAction.BOSS_BATTLE, holds_lock=True)

        if node.node_type == NodeType.REGEN:
            self.handler.grant_regen()
            action = EncounterAction.REGEN
        elif node.node_type == NodeType.TREASURE:
            self.handler.roll_treasure_reward(blueprint.tarot_card_chance)
            action = EncounterAction.TREASURE
        elif node.node_type == NodeType.SHOP:
            self.handler.open_shop()
            action = EncounterAction.SHOP
        else:
            raise ValueError(f"Unhandled node type: {node.node_type}")

        return Dispatch(node, blueprint, action, holds_lock=False)
