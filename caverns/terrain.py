"""caverns.terrain
===================

Lazy cave generator. Regions are classified on demand from the cave depth and
the target coordinate; nothing is materialised up front because the search
frontier decides which squares are ever looked at.

Every cache lives on the :class:`CaveTerrain` instance and only grows. Terrain
never changes once computed, so entries are never invalidated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from .constants import EROSION_MODULO, GEOLOGIC_X_FACTOR, GEOLOGIC_Y_FACTOR, MOUTH
from .grid_utils import left, non_negative, up
from .types import Coord


class RegionType(Enum):
    """Region classification; the value doubles as the risk level."""

    ROCKY = 0
    WET = 1
    NARROW = 2

    @property
    def risk(self) -> int:
        return self.value

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "RegionType":
        try:
            return _FROM_SYMBOL[symbol]
        except KeyError as exc:
            raise ValueError(f"Unknown region symbol {symbol!r}. Expected one of {sorted(_FROM_SYMBOL)}") from exc


_SYMBOLS: Dict[RegionType, str] = {
    RegionType.ROCKY: ".",
    RegionType.WET: "=",
    RegionType.NARROW: "|",
}
_FROM_SYMBOL: Dict[str, RegionType] = {symbol: region for region, symbol in _SYMBOLS.items()}

MOUTH_SYMBOL = "M"
TARGET_SYMBOL = "T"


@dataclass
class TerrainStats:
    hits: int = 0
    computed: int = 0


class CaveTerrain:
    """Memoising region classifier for one cave.

    Parameters
    ----------
    depth:
        Cave depth, added to every geologic index before taking the erosion
        modulus.
    target:
        Coordinate of the target. Like the mouth, its geologic index is fixed
        at zero regardless of the formula.

    Notes
    -----
    Geologic indices depend on the erosion levels to the left and above, so a
    naive recursive evaluation reaches depths of ``x + y`` and trips the
    interpreter's recursion limit on real inputs. :meth:`_fill` walks the same
    dependencies with an explicit stack instead.
    """

    def __init__(self, depth: int, target: Coord) -> None:
        if depth < 0:
            raise ValueError(f"cave depth must be non-negative, got {depth}")
        target = tuple(target)
        if len(target) != 2 or not non_negative(target):
            raise ValueError(f"target must be a non-negative (x, y) pair, got {target!r}")
        self.depth = depth
        self.target: Coord = target  # type: ignore[assignment]
        self.geologic_indices: Dict[Coord, int] = {MOUTH: 0, self.target: 0}
        self.erosion_levels: Dict[Coord, int] = {}
        self.region_types: Dict[Coord, RegionType] = {}
        self.stats = TerrainStats()

    # ------------------------------------------------------------------
    # Recurrence
    # ------------------------------------------------------------------
    def _require_valid(self, coord: Coord) -> None:
        if len(coord) != 2 or not non_negative(coord):
            raise AssertionError(f"terrain queried outside the cave at {coord!r}")

    def _dependencies(self, coord: Coord) -> Tuple[Coord, ...]:
        x, y = coord
        if coord == MOUTH or coord == self.target or x == 0 or y == 0:
            return ()
        return (left(coord), up(coord))  # type: ignore[return-value]

    def _index_from_dependencies(self, coord: Coord) -> int:
        x, y = coord
        if coord == MOUTH or coord == self.target:
            return 0
        if y == 0:
            return x * GEOLOGIC_X_FACTOR
        if x == 0:
            return y * GEOLOGIC_Y_FACTOR
        return self.erosion_levels[left(coord)] * self.erosion_levels[up(coord)]  # type: ignore[index]

    def _fill(self, coord: Coord) -> None:
        if coord in self.erosion_levels:
            return
        stack = [coord]
        while stack:
            current = stack[-1]
            if current in self.erosion_levels:
                stack.pop()
                continue
            pending = [dep for dep in self._dependencies(current) if dep not in self.erosion_levels]
            if pending:
                stack.extend(pending)
                continue
            stack.pop()
            index = self._index_from_dependencies(current)
            self.geologic_indices.setdefault(current, index)
            self.erosion_levels.setdefault(current, (index + self.depth) % EROSION_MODULO)

    def geologic_index(self, coord: Coord) -> int:
        coord = tuple(coord)  # type: ignore[assignment]
        self._require_valid(coord)
        self._fill(coord)
        return self.geologic_indices[coord]

    def erosion_level(self, coord: Coord) -> int:
        coord = tuple(coord)  # type: ignore[assignment]
        self._require_valid(coord)
        self._fill(coord)
        return self.erosion_levels[coord]

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------
    def classify(self, coord: Coord) -> RegionType:
        """Return the region at ``coord``, computing and caching it on first use."""

        coord = tuple(coord)  # type: ignore[assignment]
        cached = self.region_types.get(coord)
        if cached is not None:
            self.stats.hits += 1
            return cached
        region = RegionType(self.erosion_level(coord) % 3)
        self.stats.computed += 1
        # first writer wins; the classification is pure so a second writer
        # would store the same value anyway
        return self.region_types.setdefault(coord, region)

    def risk_level(self, coord: Coord) -> int:
        return self.classify(coord).risk

    def region_array(self, width: int, height: int) -> np.ndarray:
        """Return region codes for the ``height`` x ``width`` rectangle at the mouth."""

        out = np.zeros((max(0, height), max(0, width)), dtype=int)
        for y in range(height):
            for x in range(width):
                out[y, x] = self.classify((x, y)).value
        return out

    def total_risk(self) -> int:
        """Sum of risk levels over the rectangle from the mouth to the target."""

        target_x, target_y = self.target
        return int(self.region_array(target_x + 1, target_y + 1).sum())

    def render(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        *,
        mark_special: bool = True,
    ) -> str:
        """Draw the cave, one character per region.

        ``width`` and ``height`` default to the rectangle spanning the mouth
        and the target. With ``mark_special`` the mouth is drawn as ``M`` and
        the target as ``T``.
        """

        target_x, target_y = self.target
        width = target_x + 1 if width is None else width
        height = target_y + 1 if height is None else height
        rows = []
        for y in range(height):
            row = []
            for x in range(width):
                coord = (x, y)
                if mark_special and coord == MOUTH:
                    row.append(MOUTH_SYMBOL)
                elif mark_special and coord == self.target:
                    row.append(TARGET_SYMBOL)
                else:
                    row.append(self.classify(coord).symbol)
            rows.append("".join(row))
        return "\n".join(rows)

    def cached_regions(self, coords: Iterable[Coord]) -> Dict[Coord, RegionType]:
        """Return the cached classification of ``coords`` (skipping unknown ones)."""

        return {coord: self.region_types[coord] for coord in coords if coord in self.region_types}


__all__ = [
    "RegionType",
    "TerrainStats",
    "CaveTerrain",
    "MOUTH_SYMBOL",
    "TARGET_SYMBOL",
]
