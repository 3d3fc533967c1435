"""
Point statistics derived from survival curves.

All statistics share the SmoothCurve primitive, including its linear
extrapolation past the last grid time T along the line through (0, 1)
and (T, S(T)):

    mean          area under the curve from 0 to where the line hits 0
                  (the curve part plus a triangle of height S(T))
    median        first time the curve reaches 0.5; on the line if S(T) > 0.5
    prob_at_time  curve value at the queried time; on the line, floored
                  at 0, past T
"""

from __future__ import annotations

import warnings
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import (
    DimensionError,
    PredictionRangeWarning,
    ValidationError,
)
from pymtlr.core.validation import check_array, check_choice
from pymtlr.survival._common import MEDIAN_PROBABILITY
from pymtlr.survival._smoothing import smooth_curves


def _warn_unbounded(values: NDArray, what: str) -> None:
    n_inf = int(np.sum(np.isinf(values)))
    if n_inf:
        warnings.warn(
            f"{n_inf} survival curves never decline, so the {what} survival "
            f"time is infinite",
            PredictionRangeWarning,
            stacklevel=4,
        )


def mean_survival_time(curves: NDArray) -> NDArray:
    """Mean survival time per subject of a SurvivalCurveMatrix."""
    smooth = smooth_curves(curves)
    values = np.array([s.integrate(0.0, s.zero_time) for s in smooth])
    _warn_unbounded(values, "mean")
    return values


def median_survival_time(curves: NDArray) -> NDArray:
    """Median survival time per subject of a SurvivalCurveMatrix."""
    smooth = smooth_curves(curves)
    values = np.array([s.time_at(MEDIAN_PROBABILITY) for s in smooth])
    _warn_unbounded(values, "median")
    return values


def survival_probability_at(curves: NDArray, query_time) -> NDArray:
    """Survival probability of subject i at query_time[i].

    Raises
    ------
    ValidationError
        If query_time is missing, negative, or non-finite.
    DimensionError
        If query_time does not have one entry per subject.
    """
    smooth = smooth_curves(curves)
    if query_time is None:
        raise ValidationError("query_time is required for kind='prob_at_time'")
    t = check_array(query_time, "query_time").ravel()
    if t.shape[0] == 1 and len(smooth) > 1:
        t = np.repeat(t, len(smooth))
    if t.shape[0] != len(smooth):
        raise DimensionError(
            f"query_time has {t.shape[0]} entries but there are "
            f"{len(smooth)} subjects"
        )
    if not np.all(np.isfinite(t)) or np.any(t < 0):
        raise ValidationError("query_time must be finite and non-negative")

    last = float(curves[-1, 0])
    n_beyond = int(np.sum(t > last))
    if n_beyond:
        warnings.warn(
            f"{n_beyond} query times exceed the last grid time {last:.6g}; "
            f"using linear extrapolation",
            PredictionRangeWarning,
            stacklevel=3,
        )
    return np.array([s(ti) for s, ti in zip(smooth, t)])


STATISTICS: dict[str, Callable[..., NDArray]] = {
    "mean": lambda curves, query_time: mean_survival_time(curves),
    "median": lambda curves, query_time: median_survival_time(curves),
    "prob_at_time": survival_probability_at,
}


def compute_statistic(curves: NDArray, kind: str, query_time=None) -> NDArray:
    """Dispatch to the statistic named by ``kind``."""
    check_choice(kind, STATISTICS, "kind")
    return STATISTICS[kind](curves, query_time)

