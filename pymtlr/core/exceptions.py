"""
Exception and warning hierarchy for pymtlr.

All exceptions inherit from PyMTLRError to allow catching any
library-specific error. All warnings inherit from PyMTLRWarning so they
can be filtered as a group.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Recoverable numerical conditions are warnings, not exceptions
"""


class PyMTLRError(Exception):
    """Base exception for all pymtlr errors."""
    pass


class ValidationError(PyMTLRError):
    """
    Input validation failed.

    Raised when user-provided arguments fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class DataError(ValidationError):
    """
    Survival data is unusable as given.

    Raised for missing values, non-finite features, non-positive event
    times, or interval bounds with lower >= upper. Fitting does not proceed.

    Attributes:
        n_bad: Number of offending observations
        rows: Indices of the offending observations (first few only)
    """

    def __init__(
        self,
        message: str,
        n_bad: int | None = None,
        rows: tuple[int, ...] | None = None,
    ):
        super().__init__(message)
        self.n_bad = n_bad
        self.rows = rows


class EncodingError(PyMTLRError):
    """
    An observation cannot be placed on the time grid.

    Raised for unrecognized censoring types or event times that cannot be
    clipped onto the grid (NaN, negative).

    Attributes:
        index: Position of the first offending observation, if known
    """

    def __init__(self, message: str, index: int | None = None):
        super().__init__(message)
        self.index = index


class NumericalError(PyMTLRError):
    """
    Numerical computation failed.

    Raised when the objective or its gradient becomes non-finite. No
    training signal can be trusted at that point, so fitting aborts.

    Attributes:
        stage: Training stage in which the failure occurred
    """

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage


class PyMTLRWarning(UserWarning):
    """Base warning for all pymtlr warnings."""
    pass


class ConvergenceWarning(PyMTLRWarning, RuntimeWarning):
    """
    Optimizer stopped without meeting its tolerance.

    The best iterate found is still returned; the fitted model records
    converged=False.
    """
    pass


class PredictionRangeWarning(PyMTLRWarning):
    """
    Prediction falls outside what the training data covers.

    Emitted when a query time lies past the last grid point (linear
    extrapolation is used), when feature rows lie outside the training
    range, or when a curve never drops so a statistic is unbounded.
    """
    pass
