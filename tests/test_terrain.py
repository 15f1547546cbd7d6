from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pytest

from caverns.encoders import CaveMapEncoder, CharGridEncoder, iter_cells
from caverns.terrain import CaveTerrain, RegionType


def make_terrain() -> CaveTerrain:
    return CaveTerrain(510, (10, 10))


def test_reference_indices_and_erosion():
    terrain = make_terrain()
    expected = {
        (0, 0): (0, 510, RegionType.ROCKY),
        (1, 0): (16807, 17317, RegionType.WET),
        (0, 1): (48271, 8415, RegionType.ROCKY),
        (1, 1): (145722555, 1805, RegionType.NARROW),
        (10, 10): (0, 510, RegionType.ROCKY),
    }
    for coord, (index, erosion, region) in expected.items():
        assert terrain.geologic_index(coord) == index
        assert terrain.erosion_level(coord) == erosion
        assert terrain.classify(coord) is region


def test_total_risk_reference():
    assert make_terrain().total_risk() == 114


def test_first_row_render():
    assert make_terrain().render(16, 1) == "M=.|=.|.|=.|=|=."
    assert make_terrain().render(16, 1, mark_special=False) == ".=.|=.|.|=.|=|=."


def test_classification_is_cached():
    terrain = make_terrain()
    first = terrain.classify((3, 3))
    assert terrain.stats.computed == 1
    assert terrain.stats.hits == 0
    assert terrain.classify((3, 3)) is first
    assert terrain.stats.computed == 1
    assert terrain.stats.hits == 1
    assert terrain.cached_regions([(3, 3), (7, 7)]) == {(3, 3): first}


def test_terrain_is_deterministic():
    first = make_terrain().region_array(20, 15)
    # warm a second instance in a different order before comparing
    second_terrain = make_terrain()
    second_terrain.classify((19, 14))
    second = second_terrain.region_array(20, 15)
    assert first.shape == (15, 20)
    assert np.array_equal(first, second)


def test_risk_level_matches_region_value():
    terrain = make_terrain()
    for coord in [(0, 0), (1, 0), (1, 1), (4, 7)]:
        assert terrain.risk_level(coord) == terrain.classify(coord).value


def test_far_coordinate_does_not_recurse():
    terrain = CaveTerrain(510, (10, 10))
    region = terrain.classify((50, 2000))
    assert isinstance(region, RegionType)
    assert (49, 2000) in terrain.erosion_levels


def test_negative_query_is_contract_breach():
    terrain = make_terrain()
    with pytest.raises(AssertionError):
        terrain.classify((-1, 0))
    with pytest.raises(AssertionError):
        terrain.erosion_level((0, -3))


def test_invalid_construction():
    with pytest.raises(ValueError):
        CaveTerrain(-1, (1, 1))
    with pytest.raises(ValueError):
        CaveTerrain(10, (-1, 1))


def test_region_symbols():
    for region in RegionType:
        assert RegionType.from_symbol(region.symbol) is region
    with pytest.raises(ValueError):
        RegionType.from_symbol("x")


def test_render_parses_back_to_regions():
    terrain = make_terrain()
    parsed = CaveMapEncoder().to_grid(terrain.render())
    assert len(parsed) == 11 * 11
    for coord, region in parsed.items():
        assert terrain.classify(coord) is region


def test_encoder_writes_plain_render():
    terrain = make_terrain()
    mapping = {(x, y): terrain.classify((x, y)) for y in range(11) for x in range(11)}
    encoder = CaveMapEncoder()
    assert encoder.to_text(mapping) == terrain.render(mark_special=False)
    del mapping[(4, 4)]
    with pytest.raises(ValueError):
        encoder.to_text(mapping)


def test_char_grid_encoder_rejects_bad_input():
    encoder = CharGridEncoder("#.")
    with pytest.raises(ValueError):
        encoder.to_grid("")
    with pytest.raises(ValueError):
        encoder.to_grid("##\n#")
    with pytest.raises(ValueError):
        encoder.to_grid("#x")
    rows = encoder.to_grid("\n#.\n.#\n")
    assert rows == ["#.", ".#"]
    assert list(iter_cells(rows))[1] == ((1, 0), ".")


def test_plain_render_parses_to_region_cache():
    terrain = make_terrain()
    parsed = CaveMapEncoder().to_grid(terrain.render(mark_special=False))
    assert parsed == terrain.cached_regions(parsed)
