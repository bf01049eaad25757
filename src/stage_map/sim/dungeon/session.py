"""Map session -- the engine surface the game talks to.

A session owns the current :class:`GameMap` and wires the other pieces
together:

1. ``select_node`` validates the move, locks the map, saves, and schedules
   the node entry on the :class:`TaskScheduler`.
2. When the entry task fires, the :class:`EncounterDispatcher` calls the
   external subsystem.  Reward nodes release the lock straight away.
3. Battles release the lock when the game reports back through
   ``on_battle_won`` / ``on_battle_lost`` / ``on_node_resolved``.

All collaborators are injected; use :meth:`MapSession.create` for the
standard wiring.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from stage_map.ir.map_config import MapConfig
from stage_map.ir.settings import EngineSettings
from stage_map.sim.content.registry import BlueprintCatalog
from stage_map.sim.core.errors import MoveRejection
from stage_map.sim.core.rng import GameRNG
from stage_map.sim.core.scheduler import ScheduledTask, TaskScheduler
from stage_map.sim.dungeon.dispatcher import (
    Dispatch,
    EncounterDispatcher,
    EncounterHandler,
    LoggingEncounterHandler,
)
from stage_map.sim.dungeon.graph import GameMap, Point
from stage_map.sim.dungeon.map_gen import MapGenerator
from stage_map.sim.dungeon.persistence import MapPersistence
from stage_map.sim.dungeon.progression import ProgressionLedger
from stage_map.sim.dungeon.traversal import MoveResult, TraversalValidator

logger = logging.getLogger(__name__)


class MapSession:
    """One player's progress through generated maps.

    Parameters
    ----------
    config_factory:
        Returns the :class:`MapConfig` for the next map.  Called once per
        generation.
    persistence:
        Where the current map is saved, or ``None`` to keep it in memory.
    dispatcher:
        Routes entered nodes to the game.
    scheduler:
        Runs the delayed node entry; the caller advances it.
    rng:
        Master RNG.  Each generated map uses its own fork.
    settings:
        Entry delay and lock policy.
    ledger_path:
        Where the progression ledger is written after each won battle, or
        ``None`` to keep it in memory.
    """

    def __init__(
        self,
        config_factory: Callable[[], MapConfig],
        persistence: MapPersistence | None,
        dispatcher: EncounterDispatcher,
        scheduler: TaskScheduler,
        rng: GameRNG,
        settings: EngineSettings | None = None,
        ledger_path: str | Path | None = None,
    ) -> None:
        self.config_factory = config_factory
        self.persistence = persistence
        self.dispatcher = dispatcher
        self.scheduler = scheduler
        self.rng = rng
        self.settings = settings if settings is not None else EngineSettings()
        self.ledger_path = Path(ledger_path) if ledger_path is not None else None

        self.generator = MapGenerator()
        self.validator = TraversalValidator()

        self._map: GameMap | None = None
        self._generation = 0
        self._locked = False
        self._pending: list[ScheduledTask] = []
        self._active: Dispatch | None = None

    @classmethod
    def create(
        cls,
        config_factory: Callable[[], MapConfig],
        catalog: BlueprintCatalog,
        handler: EncounterHandler | None = None,
        settings: EngineSettings | None = None,
        rng: GameRNG | None = None,
        scheduler: TaskScheduler | None = None,
        ledger: ProgressionLedger | None = None,
    ) -> "MapSession":
        """Build a session with file persistence at ``settings.save_path``.

        The RNG defaults to ``settings.seed``, or fresh entropy when unset.
        Without an explicit *ledger*, progression resumes from
        ``settings.ledger_path()``, where it is also saved.
        """
        settings = settings if settings is not None else EngineSettings()
        if rng is None:
            rng = GameRNG(settings.seed) if settings.seed is not None else GameRNG.from_entropy()
        ledger_path = settings.ledger_path()
        if ledger is None:
            ledger = ProgressionLedger.resume(ledger_path)
        if handler is None:
            handler = LoggingEncounterHandler(ledger)

        persistence = MapPersistence(settings.save_path, lambda: session.generate_map())
        session = cls(
            config_factory=config_factory,
            persistence=persistence,
            dispatcher=EncounterDispatcher(handler, catalog, ledger),
            scheduler=scheduler if scheduler is not None else TaskScheduler(),
            rng=rng,
            settings=settings,
            ledger_path=ledger_path,
        )
        return session

    # ------------------------------------------------------------------
    # Map lifecycle
    # ------------------------------------------------------------------

    def start(self) -> GameMap:
        """Resume the saved map or generate a new one."""
        return self.load()

    def generate_map(self) -> GameMap:
        """Generate a new map from the config factory.  Does not install it."""
        rng = self.rng.fork(f"map_{self._generation}")
        self._generation += 1
        config = self.config_factory()
        game_map = self.generator.generate(config, rng)
        logger.info(
            "Generated map %s: %d layers, %d nodes, %d edges",
            game_map.name, game_map.layer_count, len(game_map.nodes), game_map.edge_count(),
        )
        return game_map

    def load(self) -> GameMap:
        """Install the persisted map (or a fresh one) as the current map."""
        self._reset_encounter_state()
        game_map = self.persistence.load() if self.persistence is not None else None
        if game_map is None:
            game_map = self.generate_map()
        self._map = game_map
        self.save()
        return game_map

    def regenerate(self) -> GameMap:
        """Replace the current map with a freshly generated one."""
        self._reset_encounter_state()
        self._map = self.generate_map()
        logger.info("Regenerated map %s", self._map.name)
        self.save()
        return self._map

    def save(self) -> None:
        if self.persistence is not None and self._map is not None:
            self.persistence.save(self._map)

    def save_progress(self) -> None:
        if self.ledger_path is not None:
            self.ledger.save(self.ledger_path)

    def current_map(self) -> GameMap:
        """Return the current map, starting the session if needed."""
        if self._map is None:
            self.start()
        return self._map

    @property
    def ledger(self) -> ProgressionLedger:
        return self.dispatcher.ledger

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        """True while a node entry or battle is in flight."""
        return self._locked

    def attainable_nodes(self) -> list[Point]:
        return self.current_map().attainable_points()

    def select_node(self, point: Point) -> MoveResult:
        """Move to *point* and schedule entering it.

        Rejected with ``BUSY`` while the map is locked.
        """
        game_map = self.current_map()
        if self._locked:
            logger.warning("Rejected move to %s: map is locked", point)
            return MoveResult.rejected(point, MoveRejection.BUSY, game_map.attainable_points())

        result = self.validator.select_node(game_map, point)
        if not result.accepted:
            return result

        if self.settings.lock_after_selecting:
            self._locked = True
        self.save()
        task = self.scheduler.schedule(
            self.settings.enter_node_delay,
            lambda: self._enter_node(point),
            name=f"enter {point}",
        )
        self._pending.append(task)
        return result

    def _enter_node(self, point: Point) -> None:
        self._pending = [t for t in self._pending if t.pending]
        node = self.current_map().get_node(point)
        dispatch = self.dispatcher.dispatch(node)
        if dispatch.holds_lock:
            self._active = dispatch
        else:
            self._release(f"{dispatch.action.value} at {point}")

    # ------------------------------------------------------------------
    # Return-to-map callbacks
    # ------------------------------------------------------------------

    def on_battle_won(self) -> bool:
        """The active battle was won.  Returns False if none was active."""
        active = self._active
        if active is None:
            return False
        self.ledger.record_victory(active.blueprint, active.node.instance_id)
        self.save_progress()
        self._active = None
        self._release(f"battle won at {active.node.point}")
        return True

    def on_battle_lost(self) -> bool:
        """The active battle was lost.  Returns False if none was active."""
        active = self._active
        if active is None:
            return False
        self._active = None
        self._release(f"battle lost at {active.node.point}")
        return True

    def on_node_resolved(self) -> bool:
        """Generic return to the map.  Returns False if nothing was held."""
        if self._active is None and (not self._locked or self._pending):
            return False
        self._active = None
        self._release("node resolved")
        return True

    def unlock(self) -> None:
        """Release the map, cancelling any node entry not yet fired."""
        self._reset_encounter_state()
        logger.info("Map unlocked")

    def _release(self, why: str) -> None:
        if self._locked:
            self._locked = False
            logger.info("Lock released (%s)", why)

    def _reset_encounter_state(self) -> None:
        for task in self._pending:
            task.cancel()
        self._pending.clear()
        self._active = None
        self._locked = False
