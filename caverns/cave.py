"""caverns.cave
================

The cave rescue problem expressed as a priority search. A search state is a
``(position, tool)`` pair: reaching the same square with a different tool is a
different state because the cost of continuing from it differs.

Two kinds of transition exist. Moving to an adjacent region costs
``move_cost`` and is only allowed when the equipped tool is usable there.
Switching to another tool usable in the current region costs ``switch_cost``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from .constants import MOUTH, MOVE_COST, SWITCH_COST
from .grid_utils import in_bounds, manhattan, neighbours, non_negative
from .logging_utils import get_logger
from .search import SearchConfig, SearchResult, uniform_cost_search
from .terrain import CaveTerrain, RegionType
from .types import Coord, Cost, SearchState

logger = get_logger(__name__)


class Tool(Enum):
    NEITHER = "neither"
    TORCH = "torch"
    CLIMBING_GEAR = "climbing_gear"


ALLOWED_TOOLS: Dict[RegionType, FrozenSet[Tool]] = {
    RegionType.ROCKY: frozenset({Tool.CLIMBING_GEAR, Tool.TORCH}),
    RegionType.WET: frozenset({Tool.CLIMBING_GEAR, Tool.NEITHER}),
    RegionType.NARROW: frozenset({Tool.TORCH, Tool.NEITHER}),
}

# fixed iteration order for switches so successor generation is deterministic
_TOOL_ORDER: Tuple[Tool, ...] = (Tool.NEITHER, Tool.TORCH, Tool.CLIMBING_GEAR)


@dataclass
class CaveConfig:
    """Costs and tool requirements for a cave traversal."""

    move_cost: Cost = MOVE_COST
    switch_cost: Cost = SWITCH_COST
    start_tool: Tool = Tool.TORCH
    goal_tool: Tool = Tool.TORCH
    # inclusive (max_x, max_y) limit; None lets the search wander freely
    bounds: Optional[Coord] = None

    def __post_init__(self) -> None:
        if self.move_cost < 0 or self.switch_cost < 0:
            raise ValueError("move and switch costs must be non-negative")


class CaveExplorer:
    """Bind a :class:`CaveTerrain` to the generic search engine."""

    def __init__(
        self,
        terrain: CaveTerrain,
        config: Optional[CaveConfig] = None,
        search_config: Optional[SearchConfig] = None,
    ) -> None:
        self.terrain = terrain
        self.config = config or CaveConfig()
        self.search_config = search_config or SearchConfig()

    @property
    def start(self) -> SearchState:
        return SearchState(MOUTH, self.config.start_tool)

    def allowed(self, coord: Coord, tool: Tool) -> bool:
        return tool in ALLOWED_TOOLS[self.terrain.classify(coord)]

    def is_valid(self, state: SearchState) -> bool:
        return self.allowed(state.position, state.aux)

    def is_goal(self, state: SearchState) -> bool:
        return state.position == self.terrain.target and state.aux == self.config.goal_tool

    def heuristic(self, state: SearchState) -> Cost:
        return manhattan(state.position, self.terrain.target) * self.config.move_cost

    def successors(self, state: SearchState) -> Iterator[Tuple[SearchState, Cost]]:
        position, tool = state.position, state.aux
        for adjacent in neighbours(position):
            if not non_negative(adjacent):
                continue
            if self.config.bounds is not None and not in_bounds(adjacent, self.config.bounds):
                continue
            if self.allowed(adjacent, tool):  # type: ignore[arg-type]
                yield SearchState(adjacent, tool), self.config.move_cost  # type: ignore[arg-type]
        usable = ALLOWED_TOOLS[self.terrain.classify(position)]
        for other in _TOOL_ORDER:
            if other != tool and other in usable:
                yield SearchState(position, other), self.config.switch_cost

    def find_target(self) -> Optional[SearchResult[SearchState]]:
        """Search from the mouth to the target; ``None`` when unreachable."""

        if not self.is_valid(self.start):
            logger.warning("start tool %s is unusable at the mouth", self.config.start_tool.value)
            return None
        target_region = self.terrain.classify(self.terrain.target)
        if self.config.goal_tool not in ALLOWED_TOOLS[target_region]:
            logger.warning(
                "goal tool %s is unusable in the %s target region",
                self.config.goal_tool.value,
                target_region.name.lower(),
            )
            return None
        result = uniform_cost_search(
            self.start,
            self.is_goal,
            self.successors,
            is_valid=self.is_valid,
            heuristic=self.heuristic,
            config=self.search_config,
        )
        if result is None:
            logger.warning("no route from %s to %s", MOUTH, self.terrain.target)
        else:
            logger.debug(
                "route to %s costs %d (%d regions classified)",
                self.terrain.target,
                result.cost,
                len(self.terrain.region_types),
            )
        return result


def tool_changes(path: Tuple[SearchState, ...]) -> List[Tuple[Coord, Tool, Tool]]:
    """List ``(position, old, new)`` for every tool switch along ``path``."""

    changes: List[Tuple[Coord, Tool, Tool]] = []
    for before, after in zip(path, path[1:]):
        if before.aux != after.aux:
            changes.append((after.position, before.aux, after.aux))
    return changes


def total_risk(depth: int, target: Coord) -> int:
    """Sum of risk levels over the rectangle from the mouth to ``target``."""

    return CaveTerrain(depth, target).total_risk()


def fastest_route(
    depth: int,
    target: Coord,
    config: Optional[CaveConfig] = None,
    search_config: Optional[SearchConfig] = None,
) -> Optional[Cost]:
    """Minimum time to reach ``target`` holding the goal tool, or ``None``."""

    explorer = CaveExplorer(CaveTerrain(depth, target), config, search_config)
    result = explorer.find_target()
    return None if result is None else result.cost


__all__ = [
    "Tool",
    "ALLOWED_TOOLS",
    "CaveConfig",
    "CaveExplorer",
    "tool_changes",
    "total_risk",
    "fastest_route",
]
