"""
Per-subject survival curves from fitted MTLR weights.

Survival at grid boundary j is the probability that the transition index
is at least j:

    S_j = sum_{k >= j} P(k),   j = 0..m,

so S_0 = 1 and the sequence is non-increasing by construction. Floating
point noise is removed by clipping to [0, 1] and a running minimum.
"""

from __future__ import annotations

import warnings

import numpy as np
from numpy.typing import NDArray
from scipy.special import softmax

from pymtlr.core.exceptions import DimensionError, PredictionRangeWarning
from pymtlr.core.validation import check_array, check_finite
from pymtlr.survival._common import MTLRParams
from pymtlr.survival._objective import add_bias_column, transition_scores


def prepare_features(params: MTLRParams, X) -> NDArray:
    """Validate query rows and map them onto the normalized training scale.

    Rows outside the training range of any feature trigger a
    PredictionRangeWarning; they are still scored.
    """
    p = params.n_features
    if X is None:
        if p > 0:
            raise DimensionError(f"X is required: the model has {p} features")
        X_arr = np.zeros((1, 0))
    else:
        X_arr = check_array(X, "X")
        if X_arr.ndim == 1:
            # A single-feature model reads a vector as a column, otherwise as one row
            X_arr = X_arr.reshape(-1, 1) if p == 1 else X_arr.reshape(1, -1)
        if X_arr.ndim != 2:
            raise DimensionError(f"X: expected 1D or 2D array, got {X_arr.ndim}D")
    if X_arr.shape[1] != p:
        raise DimensionError(
            f"X has {X_arr.shape[1]} columns but the model was fit on {p} "
            f"features ({', '.join(params.feature_names)})"
        )
    check_finite(X_arr, "X")

    if p > 0:
        outside = (X_arr < params.feature_min) | (X_arr > params.feature_max)
        if np.any(outside):
            cols = np.flatnonzero(np.any(outside, axis=0))
            names = ", ".join(params.feature_names[c] for c in cols)
            warnings.warn(
                f"{int(np.sum(np.any(outside, axis=1)))} rows have feature "
                f"values outside the training range ({names})",
                PredictionRangeWarning,
                stacklevel=3,
            )

    return (X_arr - params.center) / params.scale


def survival_probabilities(Xn: NDArray, weights: NDArray) -> NDArray:
    """Survival probabilities (N, m+1) at boundaries [0, tau_1..tau_m].

    Parameters
    ----------
    Xn : NDArray
        (N, p) normalized features, no bias column.
    weights : NDArray
        (p+1, m) weight matrix, bias row first.
    """
    P = softmax(transition_scores(add_bias_column(Xn), weights), axis=1)
    S = np.cumsum(P[:, ::-1], axis=1)[:, ::-1]
    S = np.clip(S, 0.0, 1.0)
    S[:, 0] = 1.0
    return np.minimum.accumulate(S, axis=1)


def curve_matrix(time_grid: NDArray, survival: NDArray) -> NDArray:
    """(m+1, 1+N) matrix: times [0, tau_1..tau_m] then one column per subject."""
    times = np.concatenate([[0.0], np.asarray(time_grid, dtype=np.float64)])
    return np.column_stack([times, survival.T])


def build_curves(params: MTLRParams, X) -> NDArray:
    """Survival probabilities (N, m+1) for raw query rows."""
    Xn = prepare_features(params, X)
    return survival_probabilities(Xn, params.weights)
