"""caverns.cli
==============

Command-line entry point. Two subcommands share one parser:

``caverns cave --depth 510 --target 10,10``
    prints the total risk of the rectangle and the fastest rescue time.

``caverns combat --infile map.txt [--elf-power N] [--find-boost] [--show-map]``
    runs the combat on a map file and prints the outcome.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .cave import CaveConfig, CaveExplorer
from .combat import Arena, CombatConfig, Race, find_minimum_boost
from .logging_utils import configure_logging, log_unsolved
from .search import SearchConfig
from .terrain import CaveTerrain
from .types import Coord


def parse_coord(text: str) -> Coord:
    """Parse ``"x,y"`` into a non-negative coordinate."""

    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"expected 'x,y', got {text!r}")
    try:
        x, y = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"expected integer coordinates, got {text!r}") from exc
    if x < 0 or y < 0:
        raise ValueError(f"coordinates must be non-negative, got {text!r}")
    return (x, y)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("caverns")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log search and round progress")
    parser.add_argument("--fail-log", default=None, help="JSONL file recording unsolved runs")
    sub = parser.add_subparsers(dest="command", required=True)

    cave = sub.add_parser("cave", help="Cave risk and rescue time")
    cave.add_argument("--depth", type=int, required=True, help="Cave depth")
    cave.add_argument("--target", required=True, help="Target coordinate as x,y")
    cave.add_argument("--max-expansions", type=int, default=None, help="Stop the search after this many expansions")
    cave.add_argument("--no-heuristic", action="store_true", help="Run plain Dijkstra")
    cave.add_argument("--show-map", action="store_true", help="Print the mouth-to-target rectangle")

    combat = sub.add_parser("combat", help="Elf vs goblin combat")
    combat.add_argument("--infile", required=True, help="Map file")
    combat.add_argument("--elf-power", type=int, default=None, help="Attack power for every elf")
    combat.add_argument("--find-boost", action="store_true", help="Search for the smallest flawless elf power")
    combat.add_argument("--max-rounds", type=int, default=None, help="Abort when combat runs longer than this")
    combat.add_argument("--show-map", action="store_true", help="Print the final map with hit points")
    return parser


def run_cave(args: argparse.Namespace) -> int:
    target = parse_coord(args.target)
    if args.depth < 0:
        raise ValueError(f"depth must be non-negative, got {args.depth}")
    terrain = CaveTerrain(args.depth, target)
    print(f"Total risk: {terrain.total_risk()}")
    if args.show_map:
        print(terrain.render())

    search_config = SearchConfig(
        use_heuristic=not args.no_heuristic,
        max_expansions=args.max_expansions,
        verbose=args.verbose,
    )
    result = CaveExplorer(terrain, CaveConfig(), search_config).find_target()
    if result is None:
        print("Fastest route: unreachable")
        log_unsolved(
            f"cave-{args.depth}-{target[0]}-{target[1]}",
            {"kind": "cave", "depth": args.depth, "target": list(target)},
            args.fail_log,
        )
        return 1
    print(f"Fastest route: {result.cost} minutes")
    return 0


def run_combat(args: argparse.Namespace) -> int:
    text = Path(args.infile).read_text()
    if args.find_boost:
        boost = find_minimum_boost(text, config=CombatConfig(max_rounds=args.max_rounds))
        if boost is None:
            print("No elf attack power keeps every elf alive")
            log_unsolved(f"combat-{Path(args.infile).name}", {"kind": "boost", "infile": args.infile}, args.fail_log)
            return 1
        print(f"Minimum elf attack power: {boost.attack_power}")
        print(f"Outcome: {boost.result.outcome}")
        return 0

    overrides = {} if args.elf_power is None else {Race.ELF: args.elf_power}
    arena = Arena.from_text(text, CombatConfig(attack_overrides=overrides, max_rounds=args.max_rounds))
    result = arena.run()
    winner = "nobody" if result.winner is None else result.winner.name.lower() + "s"
    print(f"Combat ends after {result.rounds} full rounds ({result.state.value})")
    print(f"Winner: {winner} with {result.remaining_hit_points} total hit points left")
    print(f"Outcome: {result.outcome}")
    if args.show_map:
        print(arena.render(with_health=True))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI arguments and dispatch to the chosen subcommand."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    handler = run_cave if args.command == "cave" else run_combat
    try:
        return handler(args)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


__all__ = ["main", "parse_coord", "build_parser"]


if __name__ == "__main__":
    sys.exit(main())
