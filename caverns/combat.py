"""caverns.combat
==================

Turn-based elf vs goblin combat on a character map.

Each round every unit acts once, in reading order of where it stood when the
round began. A unit next to an enemy attacks; otherwise it steps once along a
shortest path towards the nearest square next to an enemy and then attacks if
it can. Combat ends when a unit begins its turn with no enemies left.

Units are keyed by position and move between keys, so a position captured at
the start of the round may later hold a different unit. Every unit carries a
``uid`` assigned at parse time, and a turn only goes ahead when the unit found
at the captured position still has the captured ``uid``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .constants import BOOST_CANDIDATES, DEFAULT_ATTACK_POWER, DEFAULT_HIT_POINTS
from .encoders import CharGridEncoder, iter_cells
from .grid_utils import neighbours, reading_order
from .logging_utils import get_logger
from .types import Coord

logger = get_logger(__name__)

WALL = "#"
OPEN = "."


class Race(Enum):
    ELF = "E"
    GOBLIN = "G"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def enemy(self) -> "Race":
        return Race.GOBLIN if self is Race.ELF else Race.ELF


class CombatState(Enum):
    RUNNING = "running"
    OVER = "over"
    STALEMATE = "stalemate"


@dataclass
class Unit:
    uid: int
    race: Race
    hit_points: int = DEFAULT_HIT_POINTS
    attack_power: int = DEFAULT_ATTACK_POWER

    @property
    def alive(self) -> bool:
        return self.hit_points > 0

    def take_hit(self, power: int) -> bool:
        """Subtract ``power`` hit points; return True when the unit dies."""

        self.hit_points -= power
        return not self.alive

    def health_label(self) -> str:
        return f"{self.race.symbol}({self.hit_points})"


@dataclass
class CombatConfig:
    """Starting statistics for every unit on the map."""

    hit_points: int = DEFAULT_HIT_POINTS
    attack_power: int = DEFAULT_ATTACK_POWER
    attack_overrides: Dict[Race, int] = field(default_factory=dict)
    max_rounds: Optional[int] = None

    def __post_init__(self) -> None:
        if self.hit_points <= 0:
            raise ValueError(f"hit points must be positive, got {self.hit_points}")
        if self.attack_power <= 0:
            raise ValueError(f"attack power must be positive, got {self.attack_power}")
        for race, power in self.attack_overrides.items():
            if power <= 0:
                raise ValueError(f"{race.name.lower()} attack power must be positive, got {power}")

    def attack_for(self, race: Race) -> int:
        return self.attack_overrides.get(race, self.attack_power)


@dataclass
class RoundReport:
    completed: bool = False
    moves: int = 0
    attacks: int = 0
    deaths: int = 0
    elf_deaths: int = 0
    skipped: int = 0

    @property
    def actions(self) -> int:
        return self.moves + self.attacks

    @property
    def stalemate(self) -> bool:
        """A completed round in which no unit moved or attacked."""

        return self.completed and self.actions == 0


@dataclass
class CombatResult:
    rounds: int
    remaining_hit_points: int
    winner: Optional[Race]
    state: CombatState
    elf_deaths: int
    goblin_deaths: int

    @property
    def outcome(self) -> int:
        return self.rounds * self.remaining_hit_points


@dataclass
class BoostResult:
    attack_power: int
    result: CombatResult


def enforce_invariants(fn):
    """Decorator checking the placement invariants after a round.

    A unit standing in a wall or a dead unit left on the map raises
    ``AssertionError``.
    """

    @wraps(fn)
    def wrapper(self: "Arena", *args, **kwargs):
        out = fn(self, *args, **kwargs)
        for position, unit in self.units.items():
            if self.is_wall(position):
                raise AssertionError(f"{fn.__name__}: unit {unit.uid} stands inside a wall at {position}")
            if not unit.alive:
                raise AssertionError(f"{fn.__name__}: dead unit {unit.uid} left on the map at {position}")
        return out

    return wrapper


class Arena:
    """Walls plus the coordinate-keyed placement of living units."""

    _encoder = CharGridEncoder({WALL, OPEN, Race.ELF.symbol, Race.GOBLIN.symbol})

    def __init__(
        self,
        walls: Set[Coord],
        width: int,
        height: int,
        units: Dict[Coord, Unit],
        config: Optional[CombatConfig] = None,
    ) -> None:
        self.walls = walls
        self.width = width
        self.height = height
        self.units = units
        self.config = config or CombatConfig()
        self.state = CombatState.RUNNING
        self.rounds_completed = 0
        self.casualties: Dict[Race, int] = {Race.ELF: 0, Race.GOBLIN: 0}

    @classmethod
    def from_text(cls, text: str, config: Optional[CombatConfig] = None) -> "Arena":
        """Parse a map; ids are handed out in reading order starting at 0."""

        cfg = config or CombatConfig()
        rows = cls._encoder.to_grid(text)
        walls: Set[Coord] = set()
        units: Dict[Coord, Unit] = {}
        for position, char in iter_cells(rows):
            if char == WALL:
                walls.add(position)
            elif char != OPEN:
                race = Race(char)
                units[position] = Unit(
                    uid=len(units),
                    race=race,
                    hit_points=cfg.hit_points,
                    attack_power=cfg.attack_for(race),
                )
        return cls(walls, len(rows[0]), len(rows), units, cfg)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_wall(self, position: Coord) -> bool:
        x, y = position
        if not (0 <= x < self.width and 0 <= y < self.height):
            return True
        return position in self.walls

    def is_open(self, position: Coord) -> bool:
        return not self.is_wall(position) and position not in self.units

    def units_in_reading_order(self) -> List[Tuple[Coord, Unit]]:
        return sorted(self.units.items(), key=lambda item: reading_order(item[0]))

    def units_of(self, race: Race) -> List[Tuple[Coord, Unit]]:
        return [(position, unit) for position, unit in self.units_in_reading_order() if unit.race is race]

    def targets_for(self, unit: Unit) -> List[Tuple[Coord, Unit]]:
        return self.units_of(unit.race.enemy)

    def adjacent_target(self, position: Coord, unit: Unit) -> Optional[Tuple[Coord, Unit]]:
        """Enemy next to ``position`` with the fewest hit points, then first in reading order."""

        adjacent = []
        for square in neighbours(position):
            other = self.units.get(square)  # type: ignore[arg-type]
            if other is not None and other.race is unit.race.enemy:
                adjacent.append((square, other))
        if not adjacent:
            return None
        return min(adjacent, key=lambda item: (item[1].hit_points, reading_order(item[0])))

    def remaining_hit_points(self) -> int:
        return sum(unit.hit_points for unit in self.units.values())

    def _distances_from(self, origin: Coord) -> Dict[Coord, int]:
        """Breadth-first step counts from ``origin`` over open squares."""

        distances = {origin: 0}
        queue = deque([origin])
        while queue:
            current = queue.popleft()
            for nxt in neighbours(current):
                if nxt in distances or not self.is_open(nxt):  # type: ignore[arg-type]
                    continue
                distances[nxt] = distances[current] + 1  # type: ignore[index]
                queue.append(nxt)  # type: ignore[arg-type]
        return distances

    def choose_step(self, position: Coord, unit: Unit) -> Optional[Coord]:
        """Pick the single step ``unit`` takes towards the nearest enemy.

        The destination is the reachable square next to an enemy with the
        fewest steps, ties going to the first in reading order. The step is the
        open neighbour of ``position`` that starts a shortest path to that
        destination, ties again going to the first in reading order. Returns
        ``None`` when no such square is reachable.
        """

        distances = self._distances_from(position)
        in_range: Set[Coord] = set()
        for target_position, _target in self.targets_for(unit):
            for square in neighbours(target_position):
                if square != position and square in distances:
                    in_range.add(square)  # type: ignore[arg-type]
        if not in_range:
            return None
        destination = min(in_range, key=lambda square: (distances[square], reading_order(square)))
        back = self._distances_from(destination)
        steps = [square for square in neighbours(position) if square in back]
        if not steps:
            return None
        return min(steps, key=lambda square: (back[square], reading_order(square)))  # type: ignore[return-value,index]

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def _strike(self, attacker: Unit, engaged: Tuple[Coord, Unit], report: RoundReport) -> None:
        target_position, target = engaged
        report.attacks += 1
        if target.take_hit(attacker.attack_power):
            del self.units[target_position]
            self.casualties[target.race] += 1
            report.deaths += 1
            if target.race is Race.ELF:
                report.elf_deaths += 1

    def _both_sides_present(self) -> bool:
        races = {unit.race for unit in self.units.values()}
        return len(races) == 2

    @enforce_invariants
    def execute_round(self) -> RoundReport:
        """Play one round and update :attr:`state`.

        The report's ``completed`` flag is false when combat ended during (or
        before) the round, in which case the round does not count.
        """

        report = RoundReport()
        if self.state is not CombatState.RUNNING:
            return report
        if not self._both_sides_present():
            self.state = CombatState.OVER
            return report

        turn_order = [(position, unit.uid) for position, unit in self.units_in_reading_order()]
        for position, uid in turn_order:
            unit = self.units.get(position)
            if unit is None or unit.uid != uid:
                # killed earlier this round; the square may now hold someone else
                report.skipped += 1
                continue
            if not self.targets_for(unit):
                self.state = CombatState.OVER
                return report
            engaged = self.adjacent_target(position, unit)
            if engaged is None:
                step = self.choose_step(position, unit)
                if step is not None:
                    del self.units[position]
                    self.units[step] = unit
                    position = step
                    report.moves += 1
                    engaged = self.adjacent_target(position, unit)
            if engaged is not None:
                self._strike(unit, engaged, report)

        report.completed = True
        self.rounds_completed += 1
        if report.stalemate:
            self.state = CombatState.STALEMATE
        return report

    def run(self, max_rounds: Optional[int] = None) -> CombatResult:
        """Play rounds until combat is over or nobody can act."""

        limit = max_rounds if max_rounds is not None else self.config.max_rounds
        while self.state is CombatState.RUNNING:
            if limit is not None and self.rounds_completed >= limit:
                raise RuntimeError(f"combat still running after {limit} rounds")
            report = self.execute_round()
            logger.debug(
                "round %d: completed=%s moves=%d attacks=%d deaths=%d",
                self.rounds_completed,
                report.completed,
                report.moves,
                report.attacks,
                report.deaths,
            )
        return self.result()

    def result(self) -> CombatResult:
        races = {unit.race for unit in self.units.values()}
        winner = races.pop() if len(races) == 1 else None
        return CombatResult(
            rounds=self.rounds_completed,
            remaining_hit_points=self.remaining_hit_points(),
            winner=winner,
            state=self.state,
            elf_deaths=self.casualties[Race.ELF],
            goblin_deaths=self.casualties[Race.GOBLIN],
        )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------
    def render(self, with_health: bool = False) -> str:
        rows = []
        for y in range(self.height):
            chars = []
            labels = []
            for x in range(self.width):
                position = (x, y)
                unit = self.units.get(position)
                if position in self.walls:
                    chars.append(WALL)
                elif unit is not None:
                    chars.append(unit.race.symbol)
                    labels.append(unit.health_label())
                else:
                    chars.append(OPEN)
            row = "".join(chars)
            if with_health and labels:
                row += "   " + ", ".join(labels)
            rows.append(row)
        return self._encoder.to_text(rows)


def simulate(
    text: str,
    attack_overrides: Optional[Dict[Race, int]] = None,
    config: Optional[CombatConfig] = None,
) -> CombatResult:
    """Parse ``text`` and run combat to the end."""

    cfg = config or CombatConfig()
    if attack_overrides:
        cfg = CombatConfig(
            hit_points=cfg.hit_points,
            attack_power=cfg.attack_power,
            attack_overrides={**cfg.attack_overrides, **attack_overrides},
            max_rounds=cfg.max_rounds,
        )
    return Arena.from_text(text, cfg).run()


def boost_candidates(hit_points: int = DEFAULT_HIT_POINTS) -> Tuple[int, ...]:
    """Ascending attack powers above the default, one per distinct hits-to-kill.

    A power needing as many hits as a smaller one can never do better, so only
    the first power of each group is kept.
    """

    if hit_points == DEFAULT_HIT_POINTS:
        return BOOST_CANDIDATES
    lowest = DEFAULT_ATTACK_POWER + 1
    powers = []
    last_hits = None
    for power in range(lowest, max(hit_points, lowest) + 1):
        hits = -(-hit_points // power)
        if hits != last_hits:
            powers.append(power)
            last_hits = hits
    return tuple(powers)


def find_minimum_boost(
    text: str,
    candidates: Optional[Iterable[int]] = None,
    race: Race = Race.ELF,
    config: Optional[CombatConfig] = None,
) -> Optional[BoostResult]:
    """Smallest attack power for ``race`` that wins without a single loss.

    Every candidate fights to the end before its casualties are checked.
    ``candidates`` defaults to :func:`boost_candidates` for the configured hit
    points. Returns ``None`` when no candidate works.
    """

    if candidates is None:
        candidates = boost_candidates((config or CombatConfig()).hit_points)
    for power in sorted(set(candidates)):
        result = simulate(text, {race: power}, config)
        losses = result.elf_deaths if race is Race.ELF else result.goblin_deaths
        logger.debug("%s attack power %d: %d losses, outcome %d", race.name.lower(), power, losses, result.outcome)
        if losses == 0 and result.winner is race:
            return BoostResult(attack_power=power, result=result)
    return None


__all__ = [
    "Race",
    "CombatState",
    "Unit",
    "CombatConfig",
    "RoundReport",
    "CombatResult",
    "BoostResult",
    "boost_candidates",
    "Arena",
    "enforce_invariants",
    "simulate",
    "find_minimum_boost",
]
