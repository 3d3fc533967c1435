"""
Stratified fold assignment.

Subjects are first arranged in a deal order and then dealt round-robin
into folds 1, 2, ..., k, 1, 2, ... continuing across groups, which keeps
fold sizes within one of each other.

    fullstrat    censored group sorted by time, then uncensored group
                 sorted by time; balances censoring rate and time range
    censorstrat  censored group, then uncensored group, each shuffled;
                 balances censoring rate only
    random       all subjects shuffled

A seeded shuffle precedes the stable sort in fullstrat, so tied times
are broken reproducibly.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pymtlr.survival._common import CENSOR_NONE


def deal_order(
    time: NDArray,
    censor_type: NDArray,
    fold_type: str,
    rng: np.random.Generator,
) -> NDArray:
    """Order in which subjects are dealt to folds."""
    n = time.shape[0]
    if fold_type == "random":
        return rng.permutation(n)

    shuffled = rng.permutation(n)
    censored = censor_type[shuffled] != CENSOR_NONE
    groups = [shuffled[censored], shuffled[~censored]]
    if fold_type == "fullstrat":
        groups = [g[np.argsort(time[g], kind="stable")] for g in groups]
    return np.concatenate(groups)


def assign_folds(
    time: NDArray,
    censor_type: NDArray,
    n_folds: int,
    fold_type: str,
    seed: int | None,
) -> NDArray:
    """1-based fold id per subject."""
    rng = np.random.default_rng(seed)
    order = deal_order(time, censor_type, fold_type, rng)
    fold_ids = np.empty(time.shape[0], dtype=np.intp)
    fold_ids[order] = np.arange(order.shape[0]) % n_folds + 1
    return fold_ids
