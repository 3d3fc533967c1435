"""
Public API for MTLR survival models.

    mtlr(X, time, censor_type) → MTLRModel
    predict_curves(model, X) → SurvivalCurveMatrix
    predict_statistic(model, X, kind, query_time) → per-subject values

mtlr() validates inputs, creates an MTLRDesign, runs the CPU backend and
wraps the Result in an MTLRModel.
"""

from __future__ import annotations

import warnings
from typing import Literal, Sequence

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import ConvergenceWarning, ValidationError
from pymtlr.core.validation import check_positive_scalar
from pymtlr.survival._common import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    DEFAULT_WEIGHT_BOUND,
    StatisticKind,
)
from pymtlr.survival.backends.cpu import CPUMTLRBackend
from pymtlr.survival.design import MTLRDesign
from pymtlr.survival.solution import MTLRModel


def mtlr(
    X,
    time=None,
    censor_type=None,
    *,
    upper=None,
    time_grid=None,
    n_intervals: int | None = None,
    C1: float = 1.0,
    C2: float = 1.0,
    normalize: bool = True,
    train_biases: bool = True,
    train_uncensored: bool = True,
    warm_start=None,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
    weight_bound: float | None = DEFAULT_WEIGHT_BOUND,
    feature_names: Sequence[str] | None = None,
    na_action: Literal["fail", "omit"] = "fail",
) -> MTLRModel:
    """Fit a Multi-Task Logistic Regression survival model.

    Accepts EITHER an MTLRDesign as the first argument, or raw arrays.

    Parameters
    ----------
    X : array-like, MTLRDesign, or None
        Covariate matrix (n, p). None fits a covariate-free model.
    time : array-like
        Event time, censoring time, or interval lower bound.
    censor_type : array-like or str
        "none", "right", "left", or "interval" per subject; 0/1 event
        indicators are also accepted (0 = right-censored).
    upper : array-like or None
        Interval upper bounds (used for "interval" subjects only).
    time_grid : array-like or None
        Time points. If None, ceil(sqrt(n)) quantiles of ``time``.
    n_intervals : int or None
        Number of quantiles for the default grid.
    C1 : float
        Inverse strength of the L2 penalty on feature weights. Small
        values shrink all subjects toward one population curve.
    C2 : float
        Strength of the penalty on differences between adjacent time
        columns. 0 disables it.
    normalize : bool
        Center and scale features before fitting.
    train_biases : bool
        Initialize by fitting the bias row alone.
    train_uncensored : bool
        Initialize by fitting on uncensored subjects only.
    warm_start : array-like or None
        (p+1, m) initial weights; skips both initialization stages.
    tol : float
        Relative objective-decrease tolerance.
    max_iter : int
        Maximum optimizer iterations.
    weight_bound : float or None
        Box bound on every weight. None disables it.
    feature_names : sequence of str or None
        Column names; taken from DataFrame columns when available.
    na_action : str
        "fail" (default) or "omit" rows with missing values.

    Returns
    -------
    MTLRModel
        Always returned; if the optimizer stopped early a
        ConvergenceWarning is emitted and ``model.converged`` is False.
    """
    if isinstance(X, MTLRDesign):
        design = X
    else:
        if time is None or censor_type is None:
            raise ValidationError("time and censor_type are required")
        design = MTLRDesign.for_fit(
            X, time, censor_type,
            upper=upper, feature_names=feature_names, na_action=na_action,
        )

    C1 = check_positive_scalar(C1, "C1")
    if not np.isfinite(C2) or C2 < 0:
        raise ValidationError(f"C2 must be finite and non-negative, got {C2}")
    tol = check_positive_scalar(tol, "tol")
    if int(max_iter) < 1:
        raise ValidationError(f"max_iter must be >= 1, got {max_iter}")
    if weight_bound is not None:
        weight_bound = check_positive_scalar(weight_bound, "weight_bound")

    backend = CPUMTLRBackend()
    result = backend.solve(
        design,
        time_grid=time_grid,
        n_intervals=n_intervals,
        C1=C1,
        C2=float(C2),
        normalize=normalize,
        train_biases=train_biases,
        train_uncensored=train_uncensored,
        warm_start=warm_start,
        tol=tol,
        max_iter=int(max_iter),
        weight_bound=weight_bound,
    )

    for message in result.warnings:
        warnings.warn(message, ConvergenceWarning, stacklevel=2)

    return MTLRModel(_result=result)


def predict_curves(model: MTLRModel, X) -> NDArray:
    """SurvivalCurveMatrix (m+1, 1+N).

    Column 0 is the time grid with 0 prepended; column i+1 is the
    survival curve of row i of X.
    """
    return model.predict_curves(X)


def predict_statistic(
    model: MTLRModel,
    X,
    kind: StatisticKind = "mean",
    query_time=None,
) -> NDArray:
    """Per-subject mean or median survival time, or probability at query_time.

    Parameters
    ----------
    model : MTLRModel
    X : array-like
        (N, p) query rows.
    kind : str
        "mean", "median", or "prob_at_time".
    query_time : array-like or None
        One time per row of X; required for "prob_at_time".
    """
    return model.predict_statistic(X, kind=kind, query_time=query_time)
