"""
Cross-validation for MTLR.

Public API:
    make_folds(time, censor_type, nfolds, fold_type, seed) -> FoldAssignment
    cross_validate(X, time, censor_type, C1_candidates, ...) -> CVSolution
"""

from pymtlr.crossval.solvers import make_folds, cross_validate
from pymtlr.crossval.solution import CVSolution
from pymtlr.crossval._common import FoldAssignment, DEFAULT_C1_CANDIDATES
from pymtlr.crossval._cv import concordance_index

__all__ = [
    "make_folds",
    "cross_validate",
    "CVSolution",
    "FoldAssignment",
    "DEFAULT_C1_CANDIDATES",
    "concordance_index",
]
