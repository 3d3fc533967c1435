"""
Time grid construction.

The default grid places ceil(sqrt(N)) cut points at evenly spaced
interior quantiles of the observed times (quantile levels
1/(k+1), ..., k/(k+1)), with duplicates removed. The implicit anchor at
time 0 is never part of the grid; curves prepend it.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import ValidationError
from pymtlr.core.validation import check_array, check_finite


def default_n_intervals(n: int) -> int:
    """Default number of grid points for ``n`` subjects."""
    return max(1, math.ceil(math.sqrt(n)))


def default_time_grid(time: NDArray, n_intervals: int | None = None) -> NDArray:
    """Quantile-based time grid.

    Parameters
    ----------
    time : NDArray
        Observed (event or censoring) times, positive.
    n_intervals : int or None
        Number of quantile levels. Defaults to ceil(sqrt(len(time))).

    Returns
    -------
    NDArray
        Strictly increasing positive cut points (may be shorter than
        ``n_intervals`` when quantiles coincide).
    """
    time = np.asarray(time, dtype=np.float64)
    if n_intervals is None:
        n_intervals = default_n_intervals(time.shape[0])
    if int(n_intervals) < 1:
        raise ValidationError(f"n_intervals must be >= 1, got {n_intervals}")
    n_intervals = int(n_intervals)

    levels = np.linspace(0.0, 1.0, n_intervals + 2)[1:-1]
    grid = np.unique(np.quantile(time, levels))
    return grid[grid > 0]


def check_time_grid(time_grid) -> NDArray:
    """Validate a caller-supplied time grid.

    Raises
    ------
    ValidationError
        If the grid is empty, non-finite, non-positive, or not strictly
        increasing.
    """
    grid = check_array(time_grid, "time_grid").ravel()
    if grid.shape[0] == 0:
        raise ValidationError("time_grid must contain at least one time point")
    check_finite(grid, "time_grid")
    if np.any(grid <= 0):
        raise ValidationError(
            f"time_grid must be positive (time 0 is implicit), got min={grid.min():.6g}"
        )
    if np.any(np.diff(grid) <= 0):
        raise ValidationError("time_grid must be strictly increasing")
    return grid
