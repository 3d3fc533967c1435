"""
Monotone smoothing of discrete survival curves.

Between knots the curve is a PCHIP interpolant, which is monotone on each
interval and never overshoots the knot values, so it stays inside [0, 1]
and reproduces every knot exactly. Past the last knot T the curve follows
the straight line through (0, 1) and (T, S(T)), floored at zero:

    S(t) = max(0, 1 - slope * t),   slope = (1 - S(T)) / T.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.interpolate import PchipInterpolator
from scipy.optimize import brentq

from pymtlr.core.exceptions import DimensionError, ValidationError


class SmoothCurve:
    """
    Continuous, non-increasing survival function for one subject.

    Parameters
    ----------
    times : NDArray
        Knot times. If the first knot is not 0, the anchor (0, 1) is
        prepended.
    probs : NDArray
        Survival probability at each knot, non-increasing.
    """

    def __init__(self, times, probs):
        times = np.asarray(times, dtype=np.float64).ravel()
        probs = np.asarray(probs, dtype=np.float64).ravel()
        if times.shape != probs.shape:
            raise DimensionError(
                f"times and probs must match, got {times.shape} and {probs.shape}"
            )
        if times.shape[0] == 0 or times[0] != 0.0:
            times = np.concatenate([[0.0], times])
            probs = np.concatenate([[1.0], probs])
        if np.any(np.diff(times) <= 0):
            raise ValidationError("curve times must be strictly increasing")
        if times.shape[0] < 2:
            raise ValidationError("a curve needs at least one time point after 0")

        probs = np.minimum.accumulate(np.clip(probs, 0.0, 1.0))
        self.times = times
        self.probs = probs
        self._pchip = PchipInterpolator(times, probs, extrapolate=False)

    @property
    def last_time(self) -> float:
        return float(self.times[-1])

    @property
    def last_prob(self) -> float:
        return float(self.probs[-1])

    @property
    def slope(self) -> float:
        """Rate of decline of the extrapolation line (>= 0)."""
        return (1.0 - self.last_prob) / self.last_time

    @property
    def zero_time(self) -> float:
        """Time where the extrapolation line reaches 0 (inf for a flat curve)."""
        if self.slope <= 0:
            return np.inf
        return self.last_time / (1.0 - self.last_prob)

    def __call__(self, t):
        scalar = np.ndim(t) == 0
        t_arr = np.atleast_1d(np.asarray(t, dtype=np.float64))
        out = np.empty_like(t_arr)
        inside = t_arr <= self.last_time
        out[inside] = np.clip(self._pchip(np.maximum(t_arr[inside], 0.0)), 0.0, 1.0)
        out[~inside] = np.maximum(0.0, 1.0 - self.slope * t_arr[~inside])

        # Knots return their stored value exactly
        idx = np.clip(np.searchsorted(self.times, t_arr), 0, self.times.shape[0] - 1)
        on_knot = self.times[idx] == t_arr
        out[on_knot] = self.probs[idx[on_knot]]
        return float(out[0]) if scalar else out

    def integrate(self, a: float, b: float) -> float:
        """Area under the curve on [a, b], 0 <= a <= b (b may be inf)."""
        if a < 0 or b < a:
            raise ValidationError(f"integration bounds must satisfy 0 <= a <= b, got ({a}, {b})")
        T = self.last_time
        area = 0.0
        if a < T:
            area += float(self._pchip.integrate(a, min(b, T)))
        lo, hi = max(a, T), min(b, self.zero_time)
        if hi > lo:
            if not np.isfinite(hi):
                return np.inf
            area += (hi - lo) - 0.5 * self.slope * (hi * hi - lo * lo)
        return area

    def time_at(self, prob: float) -> float:
        """First time at which the curve falls to ``prob``."""
        if not 0.0 <= prob <= 1.0:
            raise ValidationError(f"prob must lie in [0, 1], got {prob}")
        hit = np.flatnonzero(self.probs <= prob)
        if hit.shape[0] == 0:
            if self.slope <= 0:
                return np.inf
            return (1.0 - prob) / self.slope
        j = int(hit[0])
        if self.probs[j] == prob or j == 0:
            return float(self.times[j])
        return float(brentq(
            lambda t: float(self._pchip(t)) - prob,
            self.times[j - 1], self.times[j],
            xtol=1e-12,
        ))


def smooth_curves(curves: NDArray) -> list[SmoothCurve]:
    """One SmoothCurve per subject column of a SurvivalCurveMatrix."""
    curves = np.asarray(curves, dtype=np.float64)
    if curves.ndim != 2 or curves.shape[1] < 2:
        raise DimensionError(
            f"expected an (m+1, 1+N) curve matrix, got shape {curves.shape}"
        )
    times = curves[:, 0]
    return [SmoothCurve(times, curves[:, i]) for i in range(1, curves.shape[1])]


def dense_curves(curves: NDArray, n_points: int = 200) -> NDArray:
    """Smoothed curves on an evenly spaced grid from 0 to the last time.

    Returns an (n_points, 1+N) matrix laid out like the input.
    """
    smooth = smooth_curves(curves)
    times = np.linspace(0.0, float(curves[-1, 0]), int(n_points))
    return np.column_stack([times] + [s(times) for s in smooth])
