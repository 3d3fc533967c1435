"""
Core protocols for pymtlr.

These define structural interfaces that domain implementations satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so
designs and backends stay plain frozen dataclasses and classes.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Capability-driven: use supports() for optional features
"""

from typing import Protocol, TypeVar, Any, runtime_checkable

P = TypeVar('P')  # Parameter payload type
D = TypeVar('D', contravariant=True)  # DataSource type

# Data is held as full numpy arrays in memory
CAPABILITY_MATERIALIZED = 'materialized'

# Data can be iterated multiple times (staged training, held-out scoring)
CAPABILITY_REPEATABLE = 'repeatable'


@runtime_checkable
class DataSource(Protocol):
    """
    Minimal protocol for any data container used in model fitting.

    MTLRDesign implements this protocol and adds survival-specific
    accessors (time, censor_type, upper).
    """

    @property
    def n_observations(self) -> int:
        """Number of subjects."""
        ...

    @property
    def metadata(self) -> dict[str, Any]:
        """
        Domain-specific metadata.

        Example:
            {'n': 100, 'p': 5, 'n_right': 40, 'n_left': 0, ...}
        """
        ...

    def supports(self, capability: str) -> bool:
        """
        Check if this data source supports a given capability.

        Unknown capabilities MUST return False, never raise.
        """
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    A backend takes a DataSource and produces a Result envelope around a
    domain-specific parameter payload. Backends are stateless; all
    configuration is passed to solve().
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_lbfgsb'.
        """
        ...

    def solve(self, design: D, **kwargs: Any) -> 'Result[P]':
        """
        Execute the computation.

        Raises:
            NumericalError: If the objective becomes non-finite
            ValidationError: If design is invalid for this backend
        """
        ...
