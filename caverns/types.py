"""caverns.types
=================

Foundational type aliases and small value types shared by the cave search and
the combat simulator. Every module imports its coordinate aliases from here so
that a ``Coord`` means the same thing everywhere.

The module stays definitions-only: importing it never triggers runtime side
effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Tuple

# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------
Coord = Tuple[int, int]
Coord3 = Tuple[int, int, int]
Cost = int

# Search states only need to be hashable; the engine never looks inside them.
State = Hashable


@dataclass(frozen=True)
class SearchState:
    """A position paired with an auxiliary state (e.g. the equipped tool).

    Parameters
    ----------
    position:
        Grid coordinate of the state.
    aux:
        Small auxiliary value that changes the cost of reaching ``position``.
        Two states are equal only when both fields match, so the same square
        reached with different tools is explored separately.
    """

    position: Coord
    aux: Any


__all__ = [
    "Coord",
    "Coord3",
    "Cost",
    "State",
    "SearchState",
]
