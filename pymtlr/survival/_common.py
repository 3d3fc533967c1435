"""
Shared constants and the parameter payload for MTLR results.

MTLRParams is the frozen payload carried inside a Result[P] envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
from numpy.typing import NDArray


CENSOR_NONE = "none"
CENSOR_RIGHT = "right"
CENSOR_LEFT = "left"
CENSOR_INTERVAL = "interval"

CENSOR_TYPES = (CENSOR_NONE, CENSOR_RIGHT, CENSOR_LEFT, CENSOR_INTERVAL)

CensorType = Literal["none", "right", "left", "interval"]
StatisticKind = Literal["mean", "median", "prob_at_time"]

# Survival probability defining the median survival time
MEDIAN_PROBABILITY = 0.5

# Box bound on every weight. Unpenalized biases can otherwise run off to
# infinity when an interval contains no events.
DEFAULT_WEIGHT_BOUND = 15.0

DEFAULT_TOL = 1e-9
DEFAULT_MAX_ITER = 5000


@dataclass(frozen=True)
class MTLRParams:
    """Fitted MTLR parameters.

    Row 0 of ``weights`` holds the per-time-point biases; rows 1..p hold
    the feature weights on the normalized scale described by ``center``
    and ``scale``.
    """

    weights: NDArray             # (p+1, m): bias row + feature weights
    time_grid: NDArray           # (m,): strictly increasing cut points
    feature_names: tuple[str, ...]
    center: NDArray              # (p,): subtracted before prediction
    scale: NDArray               # (p,): divided after centering
    feature_min: NDArray         # (p,): training range, raw scale
    feature_max: NDArray         # (p,)
    C1: float                    # inverse magnitude-penalty strength
    C2: float                    # smoothness-penalty strength
    loglik: float                # training log-likelihood at the optimum
    objective: float             # penalized negative log-likelihood
    n_iter: int                  # optimizer iterations, final stage
    converged: bool
    n_observations: int
    censor_counts: dict[str, int]

    @property
    def n_time_points(self) -> int:
        return int(self.time_grid.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.weights.shape[0] - 1)


def readonly(array) -> NDArray:
    """Float64 copy of ``array`` that cannot be written to."""
    out = np.array(array, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out
