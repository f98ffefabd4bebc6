"""Tests for the map context lookups."""

import numpy as np
import pytest

from conftest import make_context
from fmg_labels.core.map_context import Feature, MapContext, State


@pytest.fixture
def half_map():
    return make_context(100, 50, 10, lambda x, y: 1 if x < 50 else 2)


class TestMapContext:
    """Test cell lookups and validation."""

    def test_closest_cell(self, half_map):
        """Test the closest cell lookup."""
        cell = half_map.cell_at(12, 27)
        assert tuple(half_map.points[cell]) == (15, 25)
        assert half_map.region_of(cell) == 1
        assert half_map.feature_of(cell).id == 1

    def test_batched_lookup_matches_single(self, half_map):
        """Test batched lookups agree with single lookups."""
        points = np.array([[1, 1], [99, 49], [51, 20]])
        assert list(half_map.cells_at(points)) == [half_map.cell_at(x, y) for x, y in points]
        assert len(half_map.cells_at(np.zeros((0, 2)))) == 0

    def test_in_canvas(self, half_map):
        """Test canvas bounds checks."""
        assert half_map.in_canvas(0, 50)
        assert not half_map.in_canvas(-0.1, 10)
        mask = half_map.in_canvas_mask(np.array([[10, 10], [101, 10], [10, -1]]))
        assert list(mask) == [True, False, False]

    def test_state_cells(self, half_map):
        """Test state cell counts."""
        assert half_map.state_cells(State(id=1, name="West")) == 25
        assert half_map.state_cells(State(id=1, name="West", cells=7)) == 7

    def test_mismatched_arrays(self):
        """Test cell arrays of different lengths are rejected."""
        with pytest.raises(ValueError):
            MapContext(10, 10, [[1, 1], [2, 2]], [1], [1, 1], [None, Feature(1, "island", 2)])

    def test_unknown_feature(self):
        """Test cells referencing a missing feature are rejected."""
        with pytest.raises(ValueError):
            MapContext(10, 10, [[1, 1]], [1], [2], [None, Feature(1, "island", 1)])

    def test_misplaced_feature(self):
        """Test features stored at the wrong index are rejected."""
        with pytest.raises(ValueError):
            MapContext(10, 10, [[1, 1]], [1], [1], [None, Feature(2, "island", 1)])


def test_state_display_name():
    """Test the full name falls back to the short name."""
    assert State(id=1, name="Rus").display_full_name == "Rus"
    assert State(id=1, name="Rus", full_name="Tsardom of Rus").display_full_name == "Tsardom of Rus"
