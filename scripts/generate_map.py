"""Generate a map and print its layers.

Usage:
    uv run python scripts/generate_map.py [--layout sequential] [--seed 42] [--output saves/map.json]
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from stage_map.sim.content.registry import BlueprintRegistry
from stage_map.sim.core.rng import GameRNG
from stage_map.sim.dungeon.config_gen import (
    branching_config,
    sequential_config,
    simple_config,
    validate_config,
)
from stage_map.sim.dungeon.graph import GameMap
from stage_map.sim.dungeon.map_gen import MapGenerator


def print_map(game_map: GameMap) -> None:
    """Print the map top layer first, one line per layer."""
    for y in reversed(range(game_map.layer_count)):
        cells = []
        for node in game_map.layer(y):
            targets = ",".join(str(p.x) for p in node.outgoing)
            label = f"{node.node_type.value[:4]}:{node.blueprint_id}"
            cells.append(f"{label}->[{targets}]" if targets else label)
        print(f"  {y:3d} | " + "  ".join(cells))


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a stage map")
    parser.add_argument(
        "--layout", choices=["simple", "sequential", "branching"], default="sequential",
        help="Map layout",
    )
    parser.add_argument("--seed", type=int, default=42, help="Generation seed")
    parser.add_argument("--bosses", type=int, default=5, help="Number of bosses")
    parser.add_argument("--blueprints", type=str, default=None, help="Blueprint JSON file")
    parser.add_argument("--output", type=str, default=None, help="Write the map JSON here")
    parser.add_argument("--verbose", action="store_true", help="Log generation details")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    registry = BlueprintRegistry()
    registry.load_vanilla_blueprints(args.blueprints)
    print(f"Loaded {len(registry.blueprints)} blueprints")

    rng = GameRNG(args.seed)
    blueprints = registry.all_blueprints()
    if args.layout == "simple":
        config = simple_config(blueprints)
    elif args.layout == "sequential":
        config = sequential_config(blueprints, num_bosses=args.bosses)
    else:
        config = branching_config(blueprints, rng.fork("config"), num_bosses=args.bosses)

    problems = validate_config(config)
    if problems:
        print("Config problems:")
        for problem in problems:
            print(f"  - {problem}")
        raise SystemExit(1)

    game_map = MapGenerator().generate(config, rng.fork("map"))
    print(
        f"Map {game_map.name!r}: {game_map.layer_count} layers, "
        f"{len(game_map.nodes)} nodes, {game_map.edge_count()} edges"
    )
    print_map(game_map)

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(game_map.model_dump_json(indent=2))
        print(f"Saved map to {out}")


if __name__ == "__main__":
    main()
