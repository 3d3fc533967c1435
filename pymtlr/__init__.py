"""
pymtlr: multi-task logistic regression for survival prediction.

Fits individual survival distributions over a discrete time grid and
turns them into smooth curves and point statistics.

Submodules:
    survival: Model fitting, curves, and survival statistics
    crossval: Fold assignment and cross-validation of C1
"""

__version__ = "0.1.0"

from pymtlr import survival
from pymtlr import crossval
from pymtlr.survival import mtlr, predict_curves, predict_statistic, MTLRModel
from pymtlr.crossval import make_folds, cross_validate, CVSolution, FoldAssignment
from pymtlr.core.exceptions import (
    PyMTLRError,
    ValidationError,
    DataError,
    EncodingError,
    ConvergenceWarning,
    PredictionRangeWarning,
)

__all__ = [
    "__version__",
    "survival",
    "crossval",
    "mtlr",
    "predict_curves",
    "predict_statistic",
    "MTLRModel",
    "make_folds",
    "cross_validate",
    "CVSolution",
    "FoldAssignment",
    "PyMTLRError",
    "ValidationError",
    "DataError",
    "EncodingError",
    "ConvergenceWarning",
    "PredictionRangeWarning",
]
