from __future__ import annotations

from typing import List, Sequence, Tuple

from .types import Coord

# ---------------------------------------------------------------------------
# Cardinal transitions
# ---------------------------------------------------------------------------
def up(coord: Tuple[int, ...]) -> Tuple[int, ...]:
    """Return the coordinate one row above ``coord`` (``y`` decreases)."""

    return (coord[0], coord[1] - 1) + tuple(coord[2:])


def down(coord: Tuple[int, ...]) -> Tuple[int, ...]:
    """Return the coordinate one row below ``coord`` (``y`` increases)."""

    return (coord[0], coord[1] + 1) + tuple(coord[2:])


def left(coord: Tuple[int, ...]) -> Tuple[int, ...]:
    """Return the coordinate one column to the left (``x`` decreases)."""

    return (coord[0] - 1,) + tuple(coord[1:])


def right(coord: Tuple[int, ...]) -> Tuple[int, ...]:
    """Return the coordinate one column to the right (``x`` increases)."""

    return (coord[0] + 1,) + tuple(coord[1:])


def above(coord: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """Move one unit along ``z`` towards negative infinity (3D only)."""

    x, y, z = coord
    return (x, y, z - 1)


def below(coord: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """Move one unit along ``z`` towards positive infinity (3D only)."""

    x, y, z = coord
    return (x, y, z + 1)


def neighbours(coord: Tuple[int, ...]) -> List[Tuple[int, ...]]:
    """Return the cardinal neighbours of ``coord``.

    Parameters
    ----------
    coord:
        A 2D ``(x, y)`` or 3D ``(x, y, z)`` integer tuple.

    Returns
    -------
    list[tuple]
        Four neighbours for 2D input, six for 3D input. The 2D part is listed in
        reading order (up, left, right, down) so callers that scan neighbours
        in order get reading-order tie-breaks for free; ``above`` and ``below``
        follow for 3D input.
    """

    if len(coord) not in (2, 3):
        raise ValueError(f"expected a 2D or 3D coordinate, got {coord!r}")
    result = [up(coord), left(coord), right(coord), down(coord)]
    if len(coord) == 3:
        result.extend([above(coord), below(coord)])  # type: ignore[arg-type]
    return result


# ---------------------------------------------------------------------------
# Distances, bounds and ordering
# ---------------------------------------------------------------------------
def manhattan(start: Sequence[int], end: Sequence[int]) -> int:
    """Sum of absolute per-axis differences between ``start`` and ``end``."""

    if len(start) != len(end):
        raise ValueError(f"dimension mismatch: {start!r} vs {end!r}")
    return sum(abs(a - b) for a, b in zip(start, end))


def in_bounds(coord: Sequence[int], bounds: Sequence[int], minimum: int = 0) -> bool:
    """Check ``minimum <= coord[i] <= bounds[i]`` on every axis."""

    if len(coord) != len(bounds):
        raise ValueError(f"dimension mismatch: {coord!r} vs bounds {bounds!r}")
    return all(minimum <= value <= limit for value, limit in zip(coord, bounds))


def non_negative(coord: Sequence[int]) -> bool:
    """True when no component of ``coord`` is negative."""

    return all(value >= 0 for value in coord)


def reading_order(coord: Coord) -> Tuple[int, int]:
    """Sort key placing coordinates top-to-bottom, then left-to-right."""

    x, y = coord
    return (y, x)


def is_adjacent(first: Coord, second: Coord) -> bool:
    """True when the two coordinates are orthogonal neighbours."""

    return manhattan(first, second) == 1


__all__ = [
    "up",
    "down",
    "left",
    "right",
    "above",
    "below",
    "neighbours",
    "manhattan",
    "in_bounds",
    "non_negative",
    "reading_order",
    "is_adjacent",
]
