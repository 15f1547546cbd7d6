"""Public package interface for caverns."""

from .cave import CaveConfig, CaveExplorer, Tool, fastest_route, total_risk
from .cli import main
from .combat import Arena, CombatConfig, CombatResult, Race, find_minimum_boost, simulate
from .search import SearchConfig, SearchResult, uniform_cost_search
from .terrain import CaveTerrain, RegionType

__all__ = [
    "main",
    "CaveTerrain",
    "RegionType",
    "Tool",
    "CaveConfig",
    "CaveExplorer",
    "total_risk",
    "fastest_route",
    "SearchConfig",
    "SearchResult",
    "uniform_cost_search",
    "Arena",
    "CombatConfig",
    "CombatResult",
    "Race",
    "simulate",
    "find_minimum_boost",
]
