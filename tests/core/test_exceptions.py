"""
Tests for the pymtlr exception and warning hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyMTLRError)
    - Warnings filterable as a group via PyMTLRWarning
    - Diagnostic attributes on DataError, EncodingError, NumericalError
"""

import warnings

import pytest

from pymtlr.core.exceptions import (
    ConvergenceWarning,
    DataError,
    DimensionError,
    EncodingError,
    NumericalError,
    PredictionRangeWarning,
    PyMTLRError,
    PyMTLRWarning,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyMTLRError."""

    def test_validation_error_is_pymtlr_error(self):
        with pytest.raises(PyMTLRError):
            raise ValidationError("bad input")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_data_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DataError("missing values")

    def test_encoding_error_is_pymtlr_error(self):
        with pytest.raises(PyMTLRError):
            raise EncodingError("unknown censor type")

    def test_encoding_error_is_not_validation_error(self):
        assert not issubclass(EncodingError, ValidationError)

    def test_numerical_error_is_pymtlr_error(self):
        with pytest.raises(PyMTLRError):
            raise NumericalError("non-finite objective")


class TestWarnings:
    """Warnings share a base class and are user warnings."""

    def test_convergence_warning_is_runtime_warning(self):
        assert issubclass(ConvergenceWarning, RuntimeWarning)
        assert issubclass(ConvergenceWarning, PyMTLRWarning)

    def test_prediction_range_warning(self):
        assert issubclass(PredictionRangeWarning, PyMTLRWarning)
        assert issubclass(PredictionRangeWarning, UserWarning)

    def test_filter_as_group(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warnings.filterwarnings("ignore", category=PyMTLRWarning)
            warnings.warn("stopped early", ConvergenceWarning)
            warnings.warn("extrapolating", PredictionRangeWarning)
        assert caught == []


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestDiagnostics:
    """Exceptions carry the offending rows or stage."""

    def test_data_error_attributes(self):
        err = DataError("bad rows", n_bad=3, rows=(0, 4, 7))
        assert err.n_bad == 3
        assert err.rows == (0, 4, 7)
        assert str(err) == "bad rows"

    def test_data_error_defaults(self):
        err = DataError("bad rows")
        assert err.n_bad is None
        assert err.rows is None

    def test_encoding_error_index(self):
        err = EncodingError("unknown", index=5)
        assert err.index == 5

    def test_numerical_error_stage(self):
        err = NumericalError("overflow", stage="full")
        assert err.stage == "full"
        assert NumericalError("overflow").stage is None
