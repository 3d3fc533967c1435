"""
Core infrastructure for pymtlr.

Shared abstractions and utilities used by the survival and crossval
subpackages. Nothing here knows about survival semantics.

Key components:
    protocols: DataSource, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception and warning hierarchy
    validation: Input validators
    compute: Timing utilities
"""

from pymtlr.core.protocols import DataSource, Backend
from pymtlr.core.result import Result
from pymtlr.core.exceptions import (
    PyMTLRError,
    ValidationError,
    DimensionError,
    DataError,
    EncodingError,
    NumericalError,
    PyMTLRWarning,
    ConvergenceWarning,
    PredictionRangeWarning,
)

__all__ = [
    # Protocols
    "DataSource",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyMTLRError",
    "ValidationError",
    "DimensionError",
    "DataError",
    "EncodingError",
    "NumericalError",
    # Warnings
    "PyMTLRWarning",
    "ConvergenceWarning",
    "PredictionRangeWarning",
]
