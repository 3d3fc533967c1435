"""
Shared compute infrastructure for pymtlr.

Domain-specific numerical code lives in {domain}/backends/. This module
only holds utilities shared across domains.

Submodules:
    timing: Execution timing utilities
"""

from pymtlr.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
