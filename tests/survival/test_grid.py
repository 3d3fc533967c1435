"""
Tests for default time grid construction.
"""

import numpy as np
import pytest

from pymtlr.core.exceptions import ValidationError
from pymtlr.survival._grid import (
    check_time_grid,
    default_n_intervals,
    default_time_grid,
)


class TestDefaultGrid:

    @pytest.mark.parametrize("n, expected", [(1, 1), (10, 4), (100, 10), (101, 11)])
    def test_default_size(self, n, expected):
        assert default_n_intervals(n) == expected

    def test_strictly_increasing_and_positive(self, rng):
        time = rng.exponential(size=100)
        grid = default_time_grid(time)
        assert grid.shape[0] == 10
        assert np.all(np.diff(grid) > 0)
        assert np.all(grid > 0)

    def test_inside_observed_range(self, rng):
        time = rng.uniform(1.0, 5.0, size=50)
        grid = default_time_grid(time, 5)
        assert grid.min() > time.min()
        assert grid.max() < time.max()

    def test_duplicates_removed(self):
        time = np.array([1.0] * 20 + [2.0] * 20)
        grid = default_time_grid(time, 6)
        np.testing.assert_array_equal(grid, np.unique(grid))
        assert grid.shape[0] < 6

    def test_bad_n_intervals(self):
        with pytest.raises(ValidationError):
            default_time_grid(np.array([1.0, 2.0]), 0)


class TestCheckTimeGrid:

    def test_valid(self):
        grid = check_time_grid([1, 2, 3])
        np.testing.assert_array_equal(grid, [1.0, 2.0, 3.0])

    @pytest.mark.parametrize("grid", [[], [0.0, 1.0], [2.0, 1.0], [1.0, 1.0]])
    def test_invalid(self, grid):
        with pytest.raises(ValidationError):
            check_time_grid(grid)
