"""
Tests for cross_validate() and the concordance index.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from pymtlr.core.exceptions import ValidationError
from pymtlr.crossval import CVSolution, concordance_index, cross_validate


CANDIDATES = (0.01, 1.0)


# ═══════════════════════════════════════════════════════════════════════
# Concordance
# ═══════════════════════════════════════════════════════════════════════


class TestConcordance:

    def test_perfect_ordering(self):
        time = np.array([1.0, 2.0, 3.0, 4.0])
        event = np.ones(4)
        assert concordance_index(time * 10, time, event) == 1.0

    def test_reversed_ordering(self):
        time = np.array([1.0, 2.0, 3.0, 4.0])
        event = np.ones(4)
        assert concordance_index(-time, time, event) == 0.0

    def test_ties_count_half(self):
        time = np.array([1.0, 2.0])
        assert concordance_index(np.array([5.0, 5.0]), time, np.ones(2)) == 0.5

    def test_censored_subject_cannot_anchor_a_pair(self):
        # Only the censored subject has the earlier time: no comparable pairs
        time = np.array([1.0, 2.0])
        event = np.array([0.0, 1.0])
        assert concordance_index(np.array([9.0, 1.0]), time, event) == 0.5


# ═══════════════════════════════════════════════════════════════════════
# cross_validate
# ═══════════════════════════════════════════════════════════════════════


class TestCrossValidate:

    def test_log_likelihood_loss(self, survival_data):
        X, time, ctype = survival_data
        cv = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                            nfolds=3, seed=0, n_intervals=4)

        assert isinstance(cv, CVSolution)
        assert cv.fold_losses.shape == (3, 2)
        assert np.all(np.isfinite(cv.fold_losses))
        assert np.all(cv.fold_losses > 0)
        assert cv.best_C1 in CANDIDATES
        assert_allclose(cv.per_candidate_loss, cv.fold_losses.mean(axis=0))
        assert cv.best_C1 == CANDIDATES[int(np.argmin(cv.per_candidate_loss))]
        assert cv.n_folds == 3
        assert cv.backend_name == "cpu_cv"

    def test_concordance_loss(self, survival_data):
        X, time, ctype = survival_data
        cv = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                            nfolds=3, seed=0, loss="concordance", n_intervals=4)
        assert cv.loss == "concordance"
        assert np.all((cv.per_candidate_loss >= 0) & (cv.per_candidate_loss <= 1))

    def test_reproducible_with_seed(self, survival_data):
        X, time, ctype = survival_data
        a = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                           nfolds=3, seed=5, n_intervals=4)
        b = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                           nfolds=3, seed=5, n_intervals=4)
        assert_array_equal(a.folds.fold_ids, b.folds.fold_ids)
        assert_allclose(a.fold_losses, b.fold_losses)

    def test_parallel_matches_serial(self, survival_data):
        X, time, ctype = survival_data
        serial = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                                nfolds=3, seed=2, n_intervals=4, n_jobs=1)
        parallel = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                                  nfolds=3, seed=2, n_intervals=4, n_jobs=2)
        assert_allclose(parallel.fold_losses, serial.fold_losses)

    def test_without_previous_weights(self, survival_data):
        X, time, ctype = survival_data
        cv = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                            nfolds=3, seed=0, n_intervals=4,
                            previous_weights=False)
        assert np.all(np.isfinite(cv.per_candidate_loss))

    def test_summary(self, survival_data):
        X, time, ctype = survival_data
        cv = cross_validate(X, time, ctype, C1_candidates=CANDIDATES,
                            nfolds=3, seed=0, n_intervals=4)
        text = cv.summary()
        assert "best C1" in text
        assert "CVSolution(best_C1=" in repr(cv)

    @pytest.mark.parametrize("kwargs", [
        {"C1": 1.0},
        {"warm_start": None},
        {"loss": "auc"},
        {"C1_candidates": ()},
        {"C1_candidates": (1.0, -1.0)},
    ])
    def test_invalid_arguments(self, survival_data, kwargs):
        X, time, ctype = survival_data
        with pytest.raises(ValidationError):
            cross_validate(X, time, ctype, nfolds=3, **kwargs)
