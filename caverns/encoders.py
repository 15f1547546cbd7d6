"""caverns.encoders
===================

Text encoding helpers for character maps. Both the cave drawing and the combat
arena are rectangles of single characters; these encoders turn that text into
validated rows (or a coordinate mapping) and back. Keeping them apart from the
simulation code means the simulators never have to worry about stray
whitespace or ragged input.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from .terrain import MOUTH_SYMBOL, TARGET_SYMBOL, RegionType
from .types import Coord

CharRows = List[str]


class GridEncoder(Protocol):
    """Interface for components converting a map to and from text."""

    def to_text(self, grid) -> str:
        """Serialise ``grid`` into its display string."""

    def to_grid(self, text: str):
        """Parse ``text`` back into the in-memory representation."""


class CharGridEncoder:
    """Rectangular grid of characters drawn from a fixed alphabet.

    Parameters
    ----------
    alphabet:
        Characters allowed in the grid. Anything else is rejected with a
        ``ValueError`` naming the offending row and column.
    """

    def __init__(self, alphabet: Iterable[str]) -> None:
        self.alphabet = frozenset(alphabet)

    def to_text(self, grid: CharRows) -> str:
        return "\n".join(grid)

    def to_grid(self, text: str) -> CharRows:
        lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not lines:
            raise ValueError("map text is empty")
        width = len(lines[0])
        for y, line in enumerate(lines):
            if len(line) != width:
                raise ValueError(f"row {y} has width {len(line)}, expected {width}")
            for x, char in enumerate(line):
                if char not in self.alphabet:
                    raise ValueError(f"unknown map character {char!r} at row {y}, column {x}")
        return lines


class CaveMapEncoder:
    """Encoder between a cave drawing and a ``{coord: RegionType}`` mapping.

    Parameters
    ----------
    special:
        Region reported for the mouth (``M``) and target (``T``) markers.
        Both default to rocky; pass the real regions when the cave depth
        classifies them otherwise.
    """

    def __init__(self, special: Optional[Mapping[str, RegionType]] = None) -> None:
        self.special: Dict[str, RegionType] = {
            MOUTH_SYMBOL: RegionType.ROCKY,
            TARGET_SYMBOL: RegionType.ROCKY,
        }
        if special:
            self.special.update(special)
        symbols = [region.symbol for region in RegionType] + list(self.special)
        self._rows = CharGridEncoder(symbols)

    def to_text(self, grid: Mapping[Coord, RegionType]) -> str:
        if not grid:
            return ""
        width = max(x for x, _ in grid) + 1
        height = max(y for _, y in grid) + 1
        rows = []
        for y in range(height):
            try:
                rows.append("".join(grid[(x, y)].symbol for x in range(width)))
            except KeyError as exc:
                raise ValueError(f"cave mapping has a hole at {exc.args[0]!r}") from exc
        return self._rows.to_text(rows)

    def to_grid(self, text: str) -> Dict[Coord, RegionType]:
        cells: Dict[Coord, RegionType] = {}
        for y, line in enumerate(self._rows.to_grid(text)):
            for x, char in enumerate(line):
                region = self.special.get(char)
                cells[(x, y)] = region if region is not None else RegionType.from_symbol(char)
        return cells


def iter_cells(rows: CharRows) -> Iterable[Tuple[Coord, str]]:
    """Yield ``((x, y), char)`` for every cell in reading order."""

    for y, line in enumerate(rows):
        for x, char in enumerate(line):
            yield (x, y), char


__all__ = [
    "GridEncoder",
    "CharGridEncoder",
    "CaveMapEncoder",
    "iter_cells",
]
