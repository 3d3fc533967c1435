"""
Solution wrapper for cross-validation results.
"""

from __future__ import annotations

from pymtlr.core.result import Result
from pymtlr.crossval._common import CVParams, FoldAssignment


class CVSolution:
    """Cross-validated choice of C1."""

    __slots__ = ('_result',)

    def __init__(self, _result: Result[CVParams]) -> None:
        self._result = _result

    @property
    def best_C1(self) -> float:
        return self._result.params.best_C1

    @property
    def per_candidate_loss(self):
        """Mean held-out loss for each C1 candidate."""
        return self._result.params.per_candidate_loss

    @property
    def fold_losses(self):
        """(n_folds, n_C1) held-out loss per fold and candidate."""
        return self._result.params.fold_losses

    @property
    def C1_candidates(self):
        return self._result.params.C1_candidates

    @property
    def loss(self) -> str:
        return self._result.params.loss

    @property
    def folds(self) -> FoldAssignment:
        return self._result.params.folds

    @property
    def n_folds(self) -> int:
        return self._result.params.folds.n_folds

    @property
    def n_unconverged(self) -> int:
        return self._result.params.n_unconverged

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def timing(self):
        return self._result.timing

    def summary(self) -> str:
        """Table of mean held-out loss per C1 candidate."""
        label = {"ll": "neg. log-lik", "concordance": "1 - C-index"}[self.loss]
        lines = []
        lines.append("Call: cross_validate()")
        lines.append("")
        lines.append(
            f"  n={self.folds.n}, folds={self.n_folds} "
            f"({self.folds.fold_type}), loss={self.loss}"
        )
        lines.append("")
        lines.append(f"  {'C1':>12s}  {label:>14s}")
        for c1, value in zip(self.C1_candidates, self.per_candidate_loss):
            marker = "  *" if c1 == self.best_C1 else ""
            lines.append(f"  {c1:12.6g}  {value:14.6f}{marker}")
        lines.append("")
        lines.append(f"  best C1 = {self.best_C1:g}")
        for w in self.warnings:
            lines.append(f"  Warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CVSolution(best_C1={self.best_C1:g}, "
            f"n_folds={self.n_folds}, loss='{self.loss}')"
        )
