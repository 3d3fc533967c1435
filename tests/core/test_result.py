"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pymtlr.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def _result(**kwargs):
    defaults = dict(
        params=FakeParams(value=1.0),
        info={"method": "test"},
        timing={"total_seconds": 0.01},
        backend_name="cpu",
    )
    defaults.update(kwargs)
    return Result(**defaults)


# ═══════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = _result()
        assert result.params.value == 1.0
        assert result.info["method"] == "test"
        assert result.timing["total_seconds"] == 0.01
        assert result.backend_name == "cpu"

    def test_timing_none(self):
        assert _result(timing=None).timing is None

    def test_default_warnings_empty(self):
        assert _result().warnings == ()

    def test_frozen(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.backend_name = "other"


# ═══════════════════════════════════════════════════════════════════════
# Warnings and provenance
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:

    def test_substring_match(self):
        result = _result(warnings=("Optimization did not converge",))
        assert result.has_warning("did not converge")
        assert not result.has_warning("singular")


class TestProvenance:

    def test_default_keys(self):
        prov = _default_provenance()
        for key in ("pymtlr_version", "numpy_version", "scipy_version",
                    "python_version"):
            assert key in prov

    def test_attached_by_default(self):
        assert "pymtlr_version" in _result().provenance

    def test_explicit_provenance(self):
        result = _result(provenance={"pymtlr_version": "0.0.0"})
        assert result.provenance == {"pymtlr_version": "0.0.0"}
