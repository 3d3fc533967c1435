"""
Tests for structural protocols and timing utilities.
"""

import numpy as np
import pytest

from pymtlr.core.compute import Timer, timed
from pymtlr.core.protocols import (
    CAPABILITY_MATERIALIZED,
    CAPABILITY_REPEATABLE,
    Backend,
    DataSource,
)
from pymtlr.survival import MTLRDesign
from pymtlr.survival.backends import CPUMTLRBackend


class TestProtocols:

    def test_design_is_data_source(self):
        design = MTLRDesign.for_fit(np.zeros((3, 1)), [1.0, 2.0, 3.0], "none")
        assert isinstance(design, DataSource)
        assert design.metadata["n_none"] == 3

    def test_capabilities(self):
        design = MTLRDesign.for_fit(None, [1.0, 2.0], [1, 0])
        assert design.supports(CAPABILITY_MATERIALIZED)
        assert design.supports(CAPABILITY_REPEATABLE)
        assert not design.supports("streaming")

    def test_cpu_backend_is_backend(self):
        backend = CPUMTLRBackend()
        assert isinstance(backend, Backend)
        assert backend.name == "cpu_lbfgsb"


class TestTimer:

    def test_sections_accumulate(self):
        timer = Timer()
        timer.start()
        with timer.section("fit"):
            pass
        with timer.section("fit"):
            pass
        timer.stop()
        result = timer.result()
        assert result["fit"] >= 0.0
        assert result["total_seconds"] >= result["fit"]

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError):
            timer.result()

    def test_timed_context(self):
        with timed() as timer:
            pass
        assert "total_seconds" in timer.result()
