"""
Data structures for cross-validation.

FoldAssignment is returned directly by make_folds(); CVParams is the
payload wrapped by Result[P] and exposed through CVSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import ValidationError


FOLD_TYPES = ("fullstrat", "censorstrat", "random")
LOSSES = ("ll", "concordance")

FoldType = Literal["fullstrat", "censorstrat", "random"]
LossType = Literal["ll", "concordance"]

DEFAULT_C1_CANDIDATES = (0.001, 0.01, 0.1, 1.0, 10.0, 100.0, 1000.0)


@dataclass(frozen=True)
class FoldAssignment:
    """Partition of subjects into folds 1..n_folds.

    Every subject appears in exactly one fold and fold sizes differ by at
    most one.
    """

    fold_ids: NDArray            # (n,): fold of each subject, 1-based
    n_folds: int
    fold_type: str
    seed: int | None

    @property
    def n(self) -> int:
        return int(self.fold_ids.shape[0])

    @property
    def sizes(self) -> NDArray:
        """(n_folds,) number of subjects per fold."""
        return np.bincount(self.fold_ids, minlength=self.n_folds + 1)[1:]

    def indices(self, fold: int) -> NDArray:
        """Subject indices in ``fold`` (1-based)."""
        if not 1 <= fold <= self.n_folds:
            raise ValidationError(
                f"fold must be in 1..{self.n_folds}, got {fold}"
            )
        return np.flatnonzero(self.fold_ids == fold)

    def splits(self) -> Iterator[tuple[NDArray, NDArray]]:
        """Yield (train_indices, test_indices) for each fold in order."""
        for fold in range(1, self.n_folds + 1):
            test = self.fold_ids == fold
            yield np.flatnonzero(~test), np.flatnonzero(test)


@dataclass(frozen=True)
class CVParams:
    """Cross-validation results over a grid of C1 values."""

    C1_candidates: NDArray       # (n_C1,)
    fold_losses: NDArray         # (n_folds, n_C1): held-out loss per fold
    per_candidate_loss: NDArray  # (n_C1,): mean over folds
    best_C1: float
    loss: str                    # "ll" or "concordance"
    folds: FoldAssignment
    n_unconverged: int           # fits that stopped without converging
