"""Stress-test generation and traversal with random walks.

Generates one map per seed, walks it from layer 0 to the stage boss by
picking random attainable nodes through a :class:`MapSession`, and checks
that the save round-trips and a finished map is regenerated.

Usage:
    uv run python scripts/simulate_walks.py [--maps 200] [--layout branching]
"""

from __future__ import annotations

import argparse
import logging
import tempfile
import time
from collections import Counter
from pathlib import Path

from stage_map.ir.settings import EngineSettings
from stage_map.sim.content.registry import BlueprintRegistry
from stage_map.sim.core.rng import GameRNG
from stage_map.sim.dungeon.config_gen import branching_config, sequential_config, simple_config
from stage_map.sim.dungeon.dispatcher import LoggingEncounterHandler
from stage_map.sim.dungeon.progression import ProgressionLedger
from stage_map.sim.dungeon.session import MapSession


def walk(session: MapSession, rng: GameRNG, outcomes: Counter) -> int:
    """Walk to the stage boss, winning every battle.  Returns steps taken."""
    steps = 0
    game_map = session.current_map()
    while not game_map.is_stage_complete():
        point = rng.random_choice(session.attainable_nodes())
        result = session.select_node(point)
        result.raise_if_rejected()
        session.scheduler.advance(session.settings.enter_node_delay)
        outcomes[game_map.get_node(point).node_type.value] += 1
        if session.locked:
            session.on_battle_won()
        steps += 1
    return steps


def main() -> None:
    parser = argparse.ArgumentParser(description="Random-walk stress test")
    parser.add_argument("--maps", type=int, default=200, help="Number of maps")
    parser.add_argument(
        "--layout", choices=["simple", "sequential", "branching"], default="sequential",
    )
    parser.add_argument("--seed", type=int, default=0, help="Base seed")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    registry = BlueprintRegistry()
    registry.load_vanilla_blueprints()
    blueprints = registry.all_blueprints()

    outcomes: Counter = Counter()
    total_steps = 0
    failures = 0
    t0 = time.perf_counter()

    with tempfile.TemporaryDirectory() as tmp:
        for i in range(args.maps):
            seed = args.seed + i
            rng = GameRNG(seed)
            config_rng = rng.fork("config")

            def factory():
                if args.layout == "simple":
                    return simple_config(blueprints)
                if args.layout == "branching":
                    return branching_config(blueprints, config_rng)
                return sequential_config(blueprints)

            # Bosses start unlocked so every walk reaches the stage boss.
            ledger = ProgressionLedger()
            for boss in registry.get_bosses():
                ledger.unlock_boss(boss.boss_type)

            settings = EngineSettings(save_path=Path(tmp) / f"map_{seed}.json", seed=seed)
            session = MapSession.create(
                factory, registry.catalog(), LoggingEncounterHandler(ledger),
                settings=settings, ledger=ledger,
            )
            first = session.start()
            total_steps += walk(session, rng.fork("walk"), outcomes)

            reloaded = session.persistence.read()
            if reloaded != first:
                print(f"  seed={seed}: save does not round-trip")
                failures += 1
            if session.load() == first:
                print(f"  seed={seed}: finished map was resumed instead of regenerated")
                failures += 1

    elapsed = time.perf_counter() - t0
    print(f"Walked {args.maps} maps ({total_steps} steps) in {elapsed:.2f}s")
    for node_type, count in outcomes.most_common():
        print(f"  {node_type:<10} {count:6d}")
    print(f"Failures: {failures}")
    if failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
