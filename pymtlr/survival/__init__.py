"""
MTLR survival models.

Public API:
    mtlr(X, time, censor_type, ...) -> MTLRModel
    predict_curves(model, X) -> SurvivalCurveMatrix
    predict_statistic(model, X, kind, query_time) -> NDArray
"""

from pymtlr.survival.solvers import mtlr, predict_curves, predict_statistic
from pymtlr.survival.solution import MTLRModel
from pymtlr.survival.design import MTLRDesign
from pymtlr.survival._encoding import EncodedTargets, encode_targets
from pymtlr.survival._grid import default_time_grid
from pymtlr.survival._smoothing import SmoothCurve, smooth_curves, dense_curves
from pymtlr.survival._statistics import (
    mean_survival_time,
    median_survival_time,
    survival_probability_at,
)

__all__ = [
    "mtlr",
    "predict_curves",
    "predict_statistic",
    "MTLRModel",
    "MTLRDesign",
    "EncodedTargets",
    "encode_targets",
    "default_time_grid",
    "SmoothCurve",
    "smooth_curves",
    "dense_curves",
    "mean_survival_time",
    "median_survival_time",
    "survival_probability_at",
]
