"""Node blueprints -- the static content bound to every generated map node."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class NodeType(str, Enum):
    """The five kinds of map node."""

    MINION = "Minion"
    BOSS = "Boss"
    REGEN = "Regen"
    TREASURE = "Treasure"
    SHOP = "Shop"


# Node types that can appear on reward layers.
REWARD_NODE_TYPES: tuple[NodeType, ...] = (
    NodeType.SHOP,
    NodeType.REGEN,
    NodeType.TREASURE,
)

# Node types whose encounter is resolved by an external battle.
BATTLE_NODE_TYPES: frozenset[NodeType] = frozenset({NodeType.MINION, NodeType.BOSS})


class BossType(str, Enum):
    """The boss roster.  Each stage of a sequential map belongs to one boss."""

    THE_DRUNKARD = "TheDrunkard"
    THE_FORTUNE_TELLER = "TheFortuneTeller"
    THE_THIEF = "TheThief"
    THE_FORGETFUL_SEER = "TheForgetfulSeer"
    THE_HUNTER = "TheHunter"
    THE_CHIROMANCER = "TheChiromancer"
    THE_CAPTAIN = "TheCaptain"
    THE_TRAITOR = "TheTraitor"
    THE_DIPLOMAT = "TheDiplomat"
    THE_MAGICIAN = "TheMagician"
    THE_SEDUCTRESS = "TheSeductress"
    THE_DEGENERATE = "TheDegenerate"
    THE_COLLECTOR = "TheCollector"
    THE_MADMAN = "TheMadman"
    THE_INSATIABLE = "TheInsatiable"
    THE_CORRUPTOR = "TheCorruptor"
    THE_LIAR = "TheLiar"
    THE_ALCHEMIST = "TheAlchemist"
    THE_SORCERER = "TheSorcerer"
    THE_NAUGHTY_CHILD = "TheNaughtyChild"
    THE_EMPRESS = "TheEmpress"
    THE_GYPSY = "TheGypsy"
    THE_PYRO = "ThePyro"


class MinionData(BaseModel):
    """Battle data for a minion encounter."""

    name: str
    """Display name of the minion."""

    associated_boss: BossType
    """The boss whose stage this minion belongs to."""

    max_health: int = Field(default=1, ge=1)
    """Number of won rounds needed to defeat the minion."""

    hands_per_round: int = Field(default=5, ge=1)
    """Hands available to the player in this battle."""

    difficulty_multiplier: float = Field(default=0.5, gt=0.0)
    """Scales the minion's strength relative to a boss."""


class NodeBlueprint(BaseModel):
    """Complete definition of one kind of map node."""

    id: str
    """Unique identifier referenced from generated nodes and saves."""

    name: str
    """Display name shown on the map."""

    node_type: NodeType
    """Which encounter this node triggers."""

    description: str = ""
    """Tooltip text."""

    boss_type: BossType | None = None
    """The boss fought at this node.  Required for Boss blueprints."""

    minion: MinionData | None = None
    """Minion battle data.  Required for Minion blueprints."""

    tarot_card_chance: float = Field(default=0.5, ge=0.0, le=1.0)
    """Probability that a treasure node grants a tarot card."""

    weight: float = Field(default=1.0, gt=0.0)
    """Relative selection weight among blueprints of the same type."""

    @property
    def associated_boss(self) -> BossType | None:
        """The boss this blueprint is scoped to, if any."""
        if self.node_type == NodeType.BOSS:
            return self.boss_type
        if self.minion is not None:
            return self.minion.associated_boss
        return None

    @model_validator(mode="after")
    def _validate_battle_data(self) -> "NodeBlueprint":
        """Battle nodes need the data their encounter is started with."""
        if self.node_type == NodeType.BOSS and self.boss_type is None:
            raise ValueError(f"Boss blueprint {self.id!r} has no boss_type")
        if self.node_type == NodeType.MINION and self.minion is None:
            raise ValueError(f"Minion blueprint {self.id!r} has no minion data")
        return self
