"""
Per-fold fit and evaluation for cross-validating C1.

Each fold is an independent task: it fits one model per C1 candidate on
the training subjects (optionally warm-starting each candidate from the
previous one) and scores it on the held-out subjects. Tasks share no
mutable state and run in separate joblib workers.

Losses (lower is better):
    ll           mean held-out negative log-likelihood
    concordance  1 - Harrell's C of predicted median survival time
"""

from __future__ import annotations

import logging
import warnings
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import ConvergenceWarning, PredictionRangeWarning
from pymtlr.survival._common import CENSOR_NONE, CENSOR_RIGHT
from pymtlr.survival.design import MTLRDesign
from pymtlr.survival.solvers import mtlr
from pymtlr.survival.solution import MTLRModel

logger = logging.getLogger(__name__)


def concordance_index(predicted_time: NDArray, time: NDArray, event: NDArray) -> float:
    """Harrell's concordance statistic for predicted survival times.

    C = P(pred_i < pred_j | T_i < T_j, event_i = 1)
    """
    comparable = (event[:, None] == 1) & (time[None, :] > time[:, None])
    if not np.any(comparable):
        return 0.5

    diff = predicted_time[None, :] - predicted_time[:, None]
    concordant = np.sum(comparable & (diff > 0))
    tied = np.sum(comparable & (diff == 0))
    total = np.sum(comparable)
    return float((concordant + 0.5 * tied) / total)


def held_out_loss(model: MTLRModel, test: MTLRDesign, loss: str) -> float:
    """Loss of ``model`` on held-out subjects."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", PredictionRangeWarning)
        if loss == "ll":
            ll = model.log_likelihood(
                test.X, test.time, test.censor_type, upper=test.upper
            )
            return float(-np.mean(ll))

        # Only exact and right-censored times order subjects unambiguously
        usable = np.isin(test.censor_type, (CENSOR_NONE, CENSOR_RIGHT))
        if not np.any(usable):
            return np.nan
        median = model.predict_statistic(test.X[usable], kind="median")
        event = (test.censor_type[usable] == CENSOR_NONE).astype(np.float64)
        return 1.0 - concordance_index(median, test.time[usable], event)


def evaluate_fold(
    design: MTLRDesign,
    train_idx: NDArray,
    test_idx: NDArray,
    C1_candidates: NDArray,
    loss: str,
    previous_weights: bool,
    fit_kwargs: dict[str, Any],
) -> tuple[NDArray, int]:
    """Held-out loss for every C1 candidate on one fold.

    Returns
    -------
    losses : NDArray
        (n_C1,) loss per candidate.
    n_unconverged : int
        Number of fits that stopped without converging.
    """
    train = design.subset(train_idx)
    test = design.subset(test_idx)

    losses = np.empty(C1_candidates.shape[0])
    n_unconverged = 0
    weights = None
    for j, C1 in enumerate(C1_candidates):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            model = mtlr(
                train,
                C1=float(C1),
                warm_start=weights if previous_weights else None,
                **fit_kwargs,
            )
        if not model.converged:
            n_unconverged += 1
        weights = np.array(model.weights)
        losses[j] = held_out_loss(model, test, loss)
        logger.debug(
            "fold n_train=%d n_test=%d C1=%g loss=%.6f",
            train.n, test.n, C1, losses[j],
        )
    return losses, n_unconverged

