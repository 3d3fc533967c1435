"""
Tests for mtlr() fitting and curve prediction.
"""

import warnings

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pymtlr.core.exceptions import (
    ConvergenceWarning,
    DataError,
    DimensionError,
    EncodingError,
    PredictionRangeWarning,
    ValidationError,
)
from pymtlr.survival import MTLRDesign, MTLRModel, mtlr, predict_curves


# ═══════════════════════════════════════════════════════════════════════
# Basic fit
# ═══════════════════════════════════════════════════════════════════════


class TestMTLRBasic:

    def test_basic_fit(self, survival_data):
        X, time, ctype = survival_data
        model = mtlr(X, time, ctype)

        assert isinstance(model, MTLRModel)
        assert model.converged
        assert model.n_observations == 60
        assert model.n_features == 2
        assert model.n_time_points == 8
        assert model.weights.shape == (3, 8)
        assert model.feature_names == ("x0", "x1")
        assert model.backend_name == "cpu_lbfgsb"
        assert model.censor_counts["none"] + model.censor_counts["right"] == 60

    def test_weights_read_only(self, survival_data):
        model = mtlr(*survival_data)
        with pytest.raises(ValueError):
            model.weights[0, 0] = 1.0

    def test_weights_within_bound(self, survival_data):
        model = mtlr(*survival_data, weight_bound=0.5)
        assert np.all(np.abs(model.weights) <= 0.5 + 1e-12)

    def test_loglik_matches_held_in_log_likelihood(self, survival_data):
        X, time, ctype = survival_data
        model = mtlr(X, time, ctype)
        assert_allclose(np.sum(model.log_likelihood(X, time, ctype)),
                        model.loglik, rtol=1e-10)

    def test_event_indicators_accepted(self, survival_data):
        X, time, ctype = survival_data
        event = (ctype == "none").astype(int)
        by_label = mtlr(X, time, ctype)
        by_indicator = mtlr(X, time, event)
        assert_allclose(by_indicator.weights, by_label.weights)

    def test_design_input(self, survival_data):
        X, time, ctype = survival_data
        design = MTLRDesign.for_fit(X, time, ctype, feature_names=["age", "dose"])
        model = mtlr(design)
        assert model.feature_names == ("age", "dose")

    def test_explicit_time_grid(self, survival_data):
        model = mtlr(*survival_data, time_grid=[0.25, 0.5, 1.0, 2.0])
        assert_allclose(model.time_grid, [0.25, 0.5, 1.0, 2.0])

    def test_timing_sections(self, survival_data):
        model = mtlr(*survival_data)
        for key in ("total_seconds", "encoding", "optimization"):
            assert key in model.timing

    def test_mixed_censoring(self, mixed_censoring_data):
        X, time, kinds, upper = mixed_censoring_data
        model = mtlr(X, time, kinds, upper=upper)
        assert model.converged
        assert model.censor_counts == {
            "none": 12, "right": 12, "left": 12, "interval": 12,
        }
        assert np.isfinite(model.loglik)

    def test_covariate_free(self, survival_data):
        _, time, ctype = survival_data
        model = mtlr(None, time, ctype)
        assert model.n_features == 0
        curves = predict_curves(model, None)
        assert curves.shape == (model.n_time_points + 1, 2)

    def test_warm_start_skips_initialization(self, survival_data):
        first = mtlr(*survival_data)
        second = mtlr(*survival_data, warm_start=first.weights)
        assert "biases" not in second.info["stage_iterations"]
        assert_allclose(second.weights, first.weights, atol=1e-3)

    def test_warm_start_wrong_shape(self, survival_data):
        with pytest.raises(DimensionError):
            mtlr(*survival_data, warm_start=np.zeros((2, 2)))

    def test_summary_and_repr(self, survival_data):
        model = mtlr(*survival_data)
        text = model.summary()
        assert "log-likelihood" in text
        assert "(bias)" in text
        assert "MTLRModel(n=60" in repr(model)


# ═══════════════════════════════════════════════════════════════════════
# Survival curves
# ═══════════════════════════════════════════════════════════════════════


class TestCurves:

    def test_curve_matrix_layout(self, survival_data):
        X, time, ctype = survival_data
        model = mtlr(X, time, ctype)
        curves = predict_curves(model, X[:5])

        assert curves.shape == (model.n_time_points + 1, 6)
        assert curves[0, 0] == 0.0
        assert_allclose(curves[1:, 0], model.time_grid)

    def test_curves_are_valid_survival_functions(self, survival_data):
        X, time, ctype = survival_data
        model = mtlr(X, time, ctype)
        S = predict_curves(model, X)[:, 1:]

        assert np.all(S[0] == 1.0)
        assert np.all((S >= 0.0) & (S <= 1.0))
        assert np.all(np.diff(S, axis=0) <= 0.0)

    def test_risk_factor_lowers_survival(self, survival_data):
        X, time, ctype = survival_data
        model = mtlr(X, time, ctype)
        low = np.array([[-1.0, 0.0]])
        high = np.array([[1.0, 0.0]])
        S_low = model.survival_probabilities(low)[0]
        S_high = model.survival_probabilities(high)[0]
        assert S_high.sum() < S_low.sum()

    def test_wrong_column_count(self, survival_data):
        model = mtlr(*survival_data)
        with pytest.raises(DimensionError):
            predict_curves(model, np.zeros((3, 3)))

    def test_single_row_vector(self, survival_data):
        model = mtlr(*survival_data)
        curves = predict_curves(model, np.array([0.0, 0.0]))
        assert curves.shape[1] == 2

    def test_out_of_range_features_warn(self, survival_data):
        model = mtlr(*survival_data)
        with pytest.warns(PredictionRangeWarning):
            predict_curves(model, np.array([[100.0, 0.0]]))


# ═══════════════════════════════════════════════════════════════════════
# Regularization behaviour
# ═══════════════════════════════════════════════════════════════════════


class TestRegularization:

    def test_strong_penalty_pools_subjects(self, survival_data):
        """Tiny C1 forces every subject onto one population curve."""
        X, time, ctype = survival_data
        model = mtlr(X, time, ctype, C1=1e-6)
        S = predict_curves(model, X)[:, 1:]
        spread = S.max(axis=1) - S.min(axis=1)
        assert np.all(spread < 1e-2)

    def test_smoothness_equalizes_columns(self, survival_data):
        """Large C2 drives adjacent time columns toward one weight vector."""
        X, time, ctype = survival_data
        rough = mtlr(X, time, ctype, C1=1e3, C2=0.0)
        smooth = mtlr(X, time, ctype, C1=1e3, C2=1e5)
        rough_diff = np.max(np.abs(np.diff(rough.coefficients, axis=1)))
        smooth_diff = np.max(np.abs(np.diff(smooth.coefficients, axis=1)))
        assert smooth_diff < 0.1 * rough_diff

    def test_reproduces_step_function(self):
        """A perfectly separating binary feature yields step-shaped curves."""
        x = np.repeat([0.0, 1.0], 20)
        time = np.where(x == 0.0, 1.5, 3.5)
        model = mtlr(x, time, "none", time_grid=[1.0, 2.0, 3.0, 4.0],
                     C1=1e3, C2=0.0)

        S = model.survival_probabilities(np.array([[0.0], [1.0]]))
        assert_allclose(S[0], [1, 1, 0, 0, 0], atol=0.05)
        assert_allclose(S[1], [1, 1, 1, 1, 0], atol=0.05)


# ═══════════════════════════════════════════════════════════════════════
# Convergence and invalid input
# ═══════════════════════════════════════════════════════════════════════


class TestConvergence:

    def test_iteration_cap_warns(self, survival_data):
        with pytest.warns(ConvergenceWarning):
            model = mtlr(*survival_data, max_iter=1)
        assert not model.converged
        assert any("did not converge" in w for w in model.warnings)

    def test_converged_fit_is_silent(self, survival_data):
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            mtlr(*survival_data)


class TestInvalidInput:

    def test_missing_feature_fails(self, survival_data):
        X, time, ctype = survival_data
        X = X.copy()
        X[3, 1] = np.nan
        with pytest.raises(DataError) as excinfo:
            mtlr(X, time, ctype)
        assert excinfo.value.rows == (3,)

    def test_missing_rows_omitted(self, survival_data):
        X, time, ctype = survival_data
        X = X.copy()
        X[3, 1] = np.nan
        model = mtlr(X, time, ctype, na_action="omit")
        assert model.n_observations == 59

    def test_non_positive_time(self, survival_data):
        X, time, ctype = survival_data
        time = time.copy()
        time[0] = 0.0
        with pytest.raises(DataError):
            mtlr(X, time, ctype)

    def test_interval_upper_not_above_lower(self):
        with pytest.raises(DataError):
            mtlr(np.zeros((2, 1)), [1.0, 2.0], ["interval", "none"],
                 upper=[0.5, np.nan])

    def test_unknown_censor_type(self, survival_data):
        X, time, _ = survival_data
        with pytest.raises(EncodingError):
            mtlr(X, time, "sideways")

    def test_length_mismatch(self, survival_data):
        X, time, ctype = survival_data
        with pytest.raises(DimensionError):
            mtlr(X[:-1], time, ctype)

    @pytest.mark.parametrize("kwargs", [
        {"C1": 0.0}, {"C1": -1.0}, {"C2": -1.0}, {"tol": 0.0}, {"max_iter": 0},
    ])
    def test_bad_hyperparameters(self, survival_data, kwargs):
        with pytest.raises(ValidationError):
            mtlr(*survival_data, **kwargs)

    def test_time_required(self, survival_data):
        X, _, _ = survival_data
        with pytest.raises(ValidationError):
            mtlr(X)
