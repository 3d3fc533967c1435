"""
Public API for cross-validation.

    make_folds(time, censor_type, nfolds, fold_type, seed) → FoldAssignment
    cross_validate(X, time, censor_type, C1_candidates, ...) → CVSolution
"""

from __future__ import annotations

import logging
import warnings
from typing import Literal, Sequence

import numpy as np
from joblib import Parallel, delayed

from pymtlr.core.compute.timing import Timer
from pymtlr.core.exceptions import ValidationError
from pymtlr.core.result import Result
from pymtlr.core.validation import (
    check_array,
    check_choice,
    check_consistent_length,
    check_finite,
)
from pymtlr.crossval._common import (
    DEFAULT_C1_CANDIDATES,
    FOLD_TYPES,
    LOSSES,
    CVParams,
    FoldAssignment,
    FoldType,
    LossType,
)
from pymtlr.crossval._cv import evaluate_fold
from pymtlr.crossval._folds import assign_folds
from pymtlr.crossval.solution import CVSolution
from pymtlr.survival.design import MTLRDesign, as_censor_types

logger = logging.getLogger(__name__)

# Keyword arguments of mtlr() that cross_validate() forwards to every fit
_FIT_KWARGS = frozenset({
    "C2", "time_grid", "n_intervals", "normalize", "train_biases",
    "train_uncensored", "tol", "max_iter", "weight_bound",
})


def make_folds(
    time,
    censor_type,
    nfolds: int = 5,
    fold_type: FoldType = "fullstrat",
    seed: int | None = None,
) -> FoldAssignment:
    """Assign subjects to cross-validation folds.

    Parameters
    ----------
    time : array-like
        Event or censoring times.
    censor_type : array-like or str
        Censoring labels or 0/1 event indicators; everything other than
        "none" counts as censored.
    nfolds : int
        Number of folds, 2 <= nfolds <= n.
    fold_type : str
        "fullstrat" (default), "censorstrat", or "random".
    seed : int or None
        Random seed for reproducible assignment.

    Returns
    -------
    FoldAssignment
    """
    check_choice(fold_type, FOLD_TYPES, "fold_type")
    time_arr = check_array(time, "time").ravel()
    check_finite(time_arr, "time")
    n = time_arr.shape[0]
    ctype = as_censor_types(censor_type, n)
    check_consistent_length(time_arr, ctype, names=("time", "censor_type"))

    if int(nfolds) != nfolds or nfolds < 2:
        raise ValidationError(f"nfolds must be an integer >= 2, got {nfolds}")
    if nfolds > n:
        raise ValidationError(
            f"nfolds ({nfolds}) cannot exceed the number of subjects ({n})"
        )

    fold_ids = assign_folds(time_arr, ctype, int(nfolds), fold_type, seed)
    return FoldAssignment(
        fold_ids=fold_ids, n_folds=int(nfolds), fold_type=fold_type, seed=seed,
    )


def cross_validate(
    X,
    time=None,
    censor_type=None,
    *,
    upper=None,
    C1_candidates: Sequence[float] = DEFAULT_C1_CANDIDATES,
    nfolds: int = 5,
    fold_type: FoldType = "fullstrat",
    loss: LossType = "ll",
    seed: int | None = None,
    n_jobs: int = 1,
    previous_weights: bool = True,
    feature_names: Sequence[str] | None = None,
    na_action: Literal["fail", "omit"] = "fail",
    **fit_kwargs,
) -> CVSolution:
    """Choose C1 by k-fold cross-validation.

    Parameters
    ----------
    X, time, censor_type, upper :
        As for mtlr(). X may also be an MTLRDesign.
    C1_candidates : sequence of float
        Values of C1 to compare, fit in the given order.
    nfolds : int
        Number of folds.
    fold_type : str
        "fullstrat", "censorstrat", or "random".
    loss : str
        "ll" (mean held-out negative log-likelihood) or "concordance"
        (1 - Harrell's C of predicted median times).
    seed : int or None
        Seed for fold assignment.
    n_jobs : int
        Number of joblib workers; folds are evaluated in parallel.
    previous_weights : bool
        Warm-start each candidate from the previous candidate's weights.
    **fit_kwargs :
        Forwarded to mtlr(): C2, time_grid, n_intervals, normalize,
        train_biases, train_uncensored, tol, max_iter, weight_bound.

    Returns
    -------
    CVSolution
    """
    unknown = set(fit_kwargs) - _FIT_KWARGS
    if unknown:
        raise ValidationError(
            f"unsupported keyword arguments for cross_validate: {sorted(unknown)}"
        )
    check_choice(loss, LOSSES, "loss")

    candidates = check_array(C1_candidates, "C1_candidates").ravel()
    if candidates.shape[0] == 0:
        raise ValidationError("C1_candidates must not be empty")
    if not np.all(np.isfinite(candidates)) or np.any(candidates <= 0):
        raise ValidationError("C1_candidates must be finite and positive")

    if isinstance(X, MTLRDesign):
        design = X
    else:
        if time is None or censor_type is None:
            raise ValidationError("time and censor_type are required")
        design = MTLRDesign.for_fit(
            X, time, censor_type,
            upper=upper, feature_names=feature_names, na_action=na_action,
        )

    timer = Timer()
    timer.start()

    with timer.section('folds'):
        folds = make_folds(design.time, design.censor_type, nfolds, fold_type, seed)

    logger.debug(
        "cross-validating %d C1 values over %d %s folds (n_jobs=%d)",
        candidates.shape[0], folds.n_folds, fold_type, n_jobs,
    )

    with timer.section('fits'):
        outputs = Parallel(n_jobs=n_jobs)(
            delayed(evaluate_fold)(
                design, train, test, candidates, loss, previous_weights, fit_kwargs,
            )
            for train, test in folds.splits()
        )

    fold_losses = np.vstack([losses for losses, _ in outputs])
    n_unconverged = int(sum(k for _, k in outputs))
    if np.all(np.isnan(fold_losses)):
        raise ValidationError(
            "no fold had subjects usable for the concordance loss"
        )
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        per_candidate = np.nanmean(fold_losses, axis=0)
    best = int(np.nanargmin(per_candidate))

    timer.stop()

    warnings_list = []
    if n_unconverged:
        warnings_list.append(
            f"{n_unconverged} of {fold_losses.size} fits did not converge"
        )

    params = CVParams(
        C1_candidates=candidates,
        fold_losses=fold_losses,
        per_candidate_loss=per_candidate,
        best_C1=float(candidates[best]),
        loss=loss,
        folds=folds,
        n_unconverged=n_unconverged,
    )
    result = Result(
        params=params,
        info={
            'method': f'{folds.n_folds}-fold cross-validation',
            'fold_type': fold_type,
            'previous_weights': previous_weights,
            'n_jobs': n_jobs,
        },
        timing=timer.result(),
        backend_name='cpu_cv',
        warnings=tuple(warnings_list),
    )
    return CVSolution(_result=result)
