"""
CPU backend for MTLR using bounded L-BFGS-B.

Training runs in up to three stages, each seeding the next:

    1. biases    : bias row only (feature weights held at zero)
    2. uncensored: all weights, uncensored subjects only
    3. full      : all weights, all subjects

Only the final stage determines convergence. A caller-supplied warm start
skips stages 1 and 2.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize

from pymtlr.core.exceptions import DimensionError
from pymtlr.core.result import Result
from pymtlr.core.compute.timing import Timer
from pymtlr.survival._common import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    DEFAULT_WEIGHT_BOUND,
    MTLRParams,
    readonly,
)
from pymtlr.survival._encoding import encode_targets
from pymtlr.survival._grid import check_time_grid, default_time_grid
from pymtlr.survival._objective import MTLRObjective
from pymtlr.survival.design import MTLRDesign

logger = logging.getLogger(__name__)


class CPUMTLRBackend:
    """
    CPU backend for MTLR.

    Minimizes the penalized negative log-likelihood jointly over the full
    flattened weight matrix, so adjacent time columns stay coupled through
    the smoothness penalty.
    """

    @property
    def name(self) -> str:
        return 'cpu_lbfgsb'

    def solve(
        self,
        design: MTLRDesign,
        *,
        time_grid: NDArray | None = None,
        n_intervals: int | None = None,
        C1: float = 1.0,
        C2: float = 1.0,
        normalize: bool = True,
        train_biases: bool = True,
        train_uncensored: bool = True,
        warm_start: NDArray | None = None,
        tol: float = DEFAULT_TOL,
        max_iter: int = DEFAULT_MAX_ITER,
        weight_bound: float | None = DEFAULT_WEIGHT_BOUND,
    ) -> Result[MTLRParams]:
        """
        Fit MTLR weights.

        Parameters
        ----------
        design : MTLRDesign
            Validated survival data.
        time_grid : NDArray or None
            Cut points; None uses the quantile heuristic.
        n_intervals : int or None
            Size of the default grid.
        C1, C2 : float
            Penalty parameters (see MTLRObjective).
        normalize : bool
            Standardize features before fitting.
        train_biases, train_uncensored : bool
            Run the corresponding initialization stage.
        warm_start : NDArray or None
            (p+1, m) initial weights on the normalized scale.
        tol : float
            Relative objective-decrease tolerance.
        max_iter : int
            Iteration cap per stage.
        weight_bound : float or None
            Box bound on every weight; None leaves weights unbounded.

        Returns
        -------
        Result[MTLRParams]
        """
        timer = Timer()
        timer.start()
        warnings_list = []

        with timer.section('encoding'):
            if time_grid is None:
                grid = default_time_grid(design.time, n_intervals)
            else:
                grid = check_time_grid(time_grid)
            center, scale = design.normalization(normalize)
            Xn = (design.X - center) / scale
            targets = encode_targets(
                design.time, design.censor_type, grid, design.upper
            )

        m, p = grid.shape[0], design.p
        W = np.zeros((p + 1, m))
        stage_iters: dict[str, int] = {}

        if warm_start is not None:
            W = np.array(warm_start, dtype=np.float64, copy=True)
            if W.shape != (p + 1, m):
                raise DimensionError(
                    f"warm_start must have shape {(p + 1, m)}, got {W.shape}"
                )
        else:
            if train_biases:
                with timer.section('stage_biases'):
                    bias_obj = MTLRObjective(np.zeros((design.n, 0)), targets, C1, C2)
                    bias_obj.stage = 'biases'
                    opt = _minimize(bias_obj, W[:1], tol, max_iter, weight_bound)
                    W[0] = opt.x
                    stage_iters['biases'] = int(opt.nit)

            uncensored = design.is_uncensored
            n_unc = int(np.sum(uncensored))
            if train_uncensored and p > 0 and 0 < n_unc < design.n:
                with timer.section('stage_uncensored'):
                    unc_obj = MTLRObjective(
                        Xn[uncensored], targets.subset(np.flatnonzero(uncensored)),
                        C1, C2,
                    )
                    unc_obj.stage = 'uncensored'
                    opt = _minimize(unc_obj, W, tol, max_iter, weight_bound)
                    W = unc_obj.unpack(opt.x)
                    stage_iters['uncensored'] = int(opt.nit)

        with timer.section('optimization'):
            objective = MTLRObjective(Xn, targets, C1, C2)
            opt = _minimize(objective, W, tol, max_iter, weight_bound)
            W = objective.unpack(opt.x)
            stage_iters['full'] = int(opt.nit)

        with timer.section('log_likelihood'):
            loglik = float(np.sum(objective.log_likelihood(W)))

        if not opt.success:
            msg = getattr(opt, 'message', 'Unknown convergence failure')
            if isinstance(msg, bytes):
                msg = msg.decode()
            warnings_list.append(
                f"Optimization did not converge after {opt.nit} iterations: {msg}"
            )

        logger.debug(
            "MTLR fit: n=%d p=%d m=%d C1=%g C2=%g objective=%.6f converged=%s",
            design.n, p, m, C1, C2, float(opt.fun), bool(opt.success),
        )

        timer.stop()

        if p > 0:
            feature_min, feature_max = design.X.min(axis=0), design.X.max(axis=0)
        else:
            feature_min, feature_max = np.zeros(0), np.zeros(0)

        params = MTLRParams(
            weights=readonly(W),
            time_grid=readonly(grid),
            feature_names=design.feature_names,
            center=readonly(center),
            scale=readonly(scale),
            feature_min=readonly(feature_min),
            feature_max=readonly(feature_max),
            C1=float(C1),
            C2=float(C2),
            loglik=loglik,
            objective=float(opt.fun),
            n_iter=int(opt.nit),
            converged=bool(opt.success),
            n_observations=design.n,
            censor_counts=design.censor_counts,
        )

        return Result(
            params=params,
            info={
                'method': 'L-BFGS-B',
                'objective_value': float(opt.fun),
                'n_function_evals': int(getattr(opt, 'nfev', 0)),
                'stage_iterations': stage_iters,
                'message': str(getattr(opt, 'message', '')),
                'normalize': bool(normalize),
                'weight_bound': weight_bound,
                'tol': float(tol),
                'max_iter': int(max_iter),
                'n_time_points': m,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def _minimize(
    objective: MTLRObjective,
    W0: NDArray,
    tol: float,
    max_iter: int,
    weight_bound: float | None,
):
    """Run bounded L-BFGS-B on one training stage."""
    theta0 = np.asarray(W0, dtype=np.float64).ravel()
    bounds = None
    if weight_bound is not None and np.isfinite(weight_bound):
        bounds = [(-weight_bound, weight_bound)] * theta0.shape[0]
        theta0 = np.clip(theta0, -weight_bound, weight_bound)

    logger.debug(
        "stage %s: %d parameters, %d subjects",
        objective.stage, objective.n_params, objective.n_obs,
    )
    return minimize(
        objective.value_and_gradient,
        theta0,
        jac=True,
        method='L-BFGS-B',
        bounds=bounds,
        options={
            'maxiter': max_iter,
            'ftol': tol,
            'gtol': 1e-8,
        },
    )
