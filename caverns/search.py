from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from .logging_utils import get_logger
from .types import Cost

logger = get_logger(__name__)

S = TypeVar("S")

Successors = Callable[[S], Iterable[Tuple[S, Cost]]]


# -----------------------------------------------------------------------------
# Configs
# -----------------------------------------------------------------------------
@dataclass
class SearchConfig:
    """Configuration knobs for the priority search."""

    use_heuristic: bool = True
    max_expansions: Optional[int] = None
    track_path: bool = True
    verbose: bool = False
    progress_every: int = 100_000

    def __post_init__(self) -> None:
        if self.max_expansions is not None and self.max_expansions < 0:
            self.max_expansions = 0
        if self.progress_every <= 0:
            self.progress_every = 100_000


@dataclass
class SearchStats:
    time_elapsed: float = 0.0
    expanded: int = 0
    pushed: int = 0
    stale_skipped: int = 0
    invalid_skipped: int = 0
    max_frontier: int = 0
    budget_exhausted: bool = False


@dataclass(order=True)
class FrontierEntry(Generic[S]):
    """Heap entry ordered by priority, then cost, then insertion sequence.

    The sequence number keeps equal-priority pops in insertion order, which
    makes results reproducible without ever comparing states.
    """

    priority: Cost
    cost: Cost
    sequence: int
    state: S = field(compare=False)


@dataclass
class SearchResult(Generic[S]):
    cost: Cost
    state: S
    path: Tuple[S, ...]
    stats: SearchStats


def _reconstruct(parents: Dict[S, Optional[S]], goal: S) -> Tuple[S, ...]:
    path: List[S] = [goal]
    current = parents.get(goal)
    while current is not None:
        path.append(current)
        current = parents.get(current)
    path.reverse()
    return tuple(path)


def uniform_cost_search(
    start: S,
    is_goal: Callable[[S], bool],
    successors: Successors,
    *,
    is_valid: Optional[Callable[[S], bool]] = None,
    heuristic: Optional[Callable[[S], Cost]] = None,
    config: Optional[SearchConfig] = None,
) -> Optional[SearchResult[S]]:
    """Find the cheapest path from ``start`` to any state accepted by ``is_goal``.

    Parameters
    ----------
    start:
        Initial state. States must be hashable.
    is_goal:
        Predicate identifying goal states.
    successors:
        Callable yielding ``(next_state, step_cost)`` pairs. Step costs must be
        non-negative integers.
    is_valid:
        Optional guard applied to every popped state; states failing it are
        dropped without being expanded.
    heuristic:
        Optional consistent lower bound on the remaining cost. Ignored when
        ``config.use_heuristic`` is false. Without it the search is plain
        Dijkstra.
    config:
        Search knobs; defaults to :class:`SearchConfig`.

    Returns
    -------
    SearchResult | None
        The goal state with its minimal cost (and the path when tracked), or
        ``None`` when the frontier empties or the expansion budget runs out.

    Notes
    -----
    Costs are recorded when a state is popped. A popped entry whose state was
    already settled at the same or a lower cost is stale and skipped, so the
    frontier can hold duplicates without any decrease-key support.
    """

    cfg = config or SearchConfig()
    stats = SearchStats()
    started = time.time()
    estimate = heuristic if (heuristic is not None and cfg.use_heuristic) else (lambda _state: 0)
    sequence = itertools.count()

    best_costs: Dict[S, Cost] = {}
    parents: Dict[S, Optional[S]] = {}
    # cheapest known predecessor per state, promoted into ``parents`` on settle
    candidate_parents: Dict[S, Tuple[Cost, Optional[S]]] = {start: (0, None)}

    frontier: List[FrontierEntry[S]] = [FrontierEntry(estimate(start), 0, next(sequence), start)]
    stats.pushed = 1
    stats.max_frontier = 1

    def _finish() -> None:
        stats.time_elapsed = time.time() - started

    while frontier:
        entry = heapq.heappop(frontier)
        state, cost = entry.state, entry.cost

        if is_valid is not None and not is_valid(state):
            stats.invalid_skipped += 1
            continue

        recorded = best_costs.get(state)
        if recorded is not None and recorded <= cost:
            stats.stale_skipped += 1
            continue

        best_costs[state] = cost
        if cfg.track_path:
            parents[state] = candidate_parents.get(state, (cost, None))[1]

        if is_goal(state):
            _finish()
            path = _reconstruct(parents, state) if cfg.track_path else ()
            if cfg.verbose:
                logger.debug(
                    "goal reached at cost %d after %d expansions (%d stale, %d invalid)",
                    cost,
                    stats.expanded,
                    stats.stale_skipped,
                    stats.invalid_skipped,
                )
            return SearchResult(cost=cost, state=state, path=path, stats=stats)

        if cfg.max_expansions is not None and stats.expanded >= cfg.max_expansions:
            stats.budget_exhausted = True
            _finish()
            logger.warning("search budget of %d expansions exhausted", cfg.max_expansions)
            return None

        stats.expanded += 1
        if cfg.verbose and stats.expanded % cfg.progress_every == 0:
            logger.debug("expanded %d states, frontier=%d, cost=%d", stats.expanded, len(frontier), cost)

        for next_state, step_cost in successors(state):
            if step_cost < 0:
                raise ValueError(f"negative step cost {step_cost} from {state!r} to {next_state!r}")
            next_cost = cost + step_cost
            settled = best_costs.get(next_state)
            if settled is not None and settled <= next_cost:
                continue
            if cfg.track_path:
                known = candidate_parents.get(next_state)
                if known is None or next_cost < known[0]:
                    candidate_parents[next_state] = (next_cost, state)
            heapq.heappush(
                frontier,
                FrontierEntry(next_cost + estimate(next_state), next_cost, next(sequence), next_state),
            )
            stats.pushed += 1
        stats.max_frontier = max(stats.max_frontier, len(frontier))

    _finish()
    if cfg.verbose:
        logger.debug("frontier exhausted after %d expansions; no path", stats.expanded)
    return None


__all__ = [
    "SearchConfig",
    "SearchStats",
    "FrontierEntry",
    "SearchResult",
    "uniform_cost_search",
]
