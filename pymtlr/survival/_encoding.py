"""
Sequence encoding of censored survival observations.

MTLR models a subject's survival as a binary sequence over the time grid
boundaries [0, tau_1, ..., tau_m]: 1 while alive, 0 once dead. Only m+1
such sequences are monotone, one per transition index k in {0..m}, where
k means death in (tau_k, tau_{k+1}] with tau_0 = 0 and tau_{m+1} = inf.

Each observation restricts k to a contiguous range [lower, upper]:

    none      at t:      lower = upper = #{tau_j < t}
    right     at c:      lower = #{tau_j <= c},  upper = m
    left      at c:      lower = 0,              upper = #{tau_j < c}
    interval  (l, u]:    lower = #{tau_j <= l},  upper = #{tau_j < u}

The likelihood marginalizes over every transition in the range, so the
range is the whole encoding; ``mask`` and ``status`` are derived views.
Times past tau_m land in the last, open interval.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import EncodingError
from pymtlr.survival._common import (
    CENSOR_INTERVAL,
    CENSOR_LEFT,
    CENSOR_NONE,
    CENSOR_RIGHT,
    CENSOR_TYPES,
)


@dataclass(frozen=True)
class EncodedTargets:
    """Consistent transition-index ranges for N subjects on an m-point grid."""

    lower: NDArray      # (N,) int: first consistent transition index
    upper: NDArray      # (N,) int: last consistent transition index
    n_points: int       # m

    @property
    def n(self) -> int:
        return int(self.lower.shape[0])

    @property
    def mask(self) -> NDArray:
        """(N, m+1) bool: True where transition index k is consistent."""
        k = np.arange(self.n_points + 1)
        return (k >= self.lower[:, None]) & (k <= self.upper[:, None])

    @property
    def status(self) -> NDArray:
        """(N, m+1) alive indicator at each boundary: 1, 0, or NaN if marginalized.

        Alive at boundary j is certain when every consistent transition
        index is >= j, and death is certain when every one is < j.
        """
        j = np.arange(self.n_points + 1)
        out = np.full((self.n, self.n_points + 1), np.nan)
        out[j <= self.lower[:, None]] = 1.0
        out[j > self.upper[:, None]] = 0.0
        return out

    @property
    def is_exact(self) -> NDArray:
        """(N,) bool: transition fully determined."""
        return self.lower == self.upper

    def subset(self, indices) -> EncodedTargets:
        idx = np.asarray(indices, dtype=np.intp)
        return EncodedTargets(
            lower=self.lower[idx], upper=self.upper[idx], n_points=self.n_points
        )


def encode_targets(
    time: NDArray,
    censor_type: NDArray,
    time_grid: NDArray,
    upper: NDArray | None = None,
) -> EncodedTargets:
    """Encode observations as ranges of consistent transition indices.

    Parameters
    ----------
    time : NDArray
        (N,) event time, censoring time, or interval lower bound.
    censor_type : NDArray
        (N,) labels from {"none", "right", "left", "interval"}.
    time_grid : NDArray
        (m,) strictly increasing positive cut points.
    upper : NDArray or None
        (N,) interval upper bounds (+inf allowed); required when any
        subject is interval-censored.

    Returns
    -------
    EncodedTargets

    Raises
    ------
    EncodingError
        Unrecognized censoring type, NaN or negative time, or a missing
        or inconsistent interval upper bound.
    """
    time = np.asarray(time, dtype=np.float64).ravel()
    censor_type = np.asarray(censor_type, dtype=object).ravel()
    grid = np.asarray(time_grid, dtype=np.float64).ravel()
    n, m = time.shape[0], grid.shape[0]

    unknown = ~np.isin(censor_type, CENSOR_TYPES)
    if np.any(unknown):
        idx = int(np.flatnonzero(unknown)[0])
        raise EncodingError(
            f"unrecognized censoring type {censor_type[idx]!r} at position {idx}",
            index=idx,
        )

    bad_time = np.isnan(time) | (time < 0)
    if np.any(bad_time):
        idx = int(np.flatnonzero(bad_time)[0])
        raise EncodingError(
            f"time {time[idx]!r} at position {idx} cannot be placed on the grid",
            index=idx,
        )

    # Number of cut points strictly below / at or below each time
    below = np.searchsorted(grid, time, side="left")
    at_or_below = np.searchsorted(grid, time, side="right")

    lower = np.empty(n, dtype=np.intp)
    upper_idx = np.empty(n, dtype=np.intp)

    exact = censor_type == CENSOR_NONE
    lower[exact] = below[exact]
    upper_idx[exact] = below[exact]

    right = censor_type == CENSOR_RIGHT
    lower[right] = at_or_below[right]
    upper_idx[right] = m

    left = censor_type == CENSOR_LEFT
    lower[left] = 0
    upper_idx[left] = below[left]

    interval = censor_type == CENSOR_INTERVAL
    if np.any(interval):
        if upper is None:
            raise EncodingError(
                "interval-censored observations require upper bounds",
                index=int(np.flatnonzero(interval)[0]),
            )
        u = np.asarray(upper, dtype=np.float64).ravel()[interval]
        bad = np.isnan(u) | ~(u > time[interval])
        if np.any(bad):
            idx = int(np.flatnonzero(interval)[bad][0])
            raise EncodingError(
                f"interval at position {idx} has upper bound not above "
                f"its lower bound",
                index=idx,
            )
        lower[interval] = at_or_below[interval]
        upper_idx[interval] = np.searchsorted(grid, u, side="left")

    return EncodedTargets(lower=lower, upper=upper_idx, n_points=m)
