"""caverns.constants
=====================

Global constants used across the package. Keeping them here avoids import
cycles between the terrain, search and combat modules and keeps the
cave and combat parameters in one place.
"""

from __future__ import annotations

# Cave generation
MOUTH = (0, 0)
GEOLOGIC_X_FACTOR = 16807
GEOLOGIC_Y_FACTOR = 48271
EROSION_MODULO = 20183

# Cave traversal
MOVE_COST = 1
SWITCH_COST = 7

# Combat
DEFAULT_HIT_POINTS = 200
DEFAULT_ATTACK_POWER = 3

# Ascending elf attack powers tried when looking for a boost. With the default
# hit points, powers between two entries need the same number of hits to kill
# a goblin as the entry below them.
BOOST_CANDIDATES = (
    4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17, 19, 20, 23, 25, 29, 34, 40, 50, 67, 100, 200,
)

FAIL_LOG = "unsolved_runs.jsonl"

__all__ = [
    "MOUTH",
    "GEOLOGIC_X_FACTOR",
    "GEOLOGIC_Y_FACTOR",
    "EROSION_MODULO",
    "MOVE_COST",
    "SWITCH_COST",
    "DEFAULT_HIT_POINTS",
    "DEFAULT_ATTACK_POWER",
    "BOOST_CANDIDATES",
    "FAIL_LOG",
]
