"""Computational backends for MTLR."""

from pymtlr.survival.backends.cpu import CPUMTLRBackend

__all__ = ["CPUMTLRBackend"]
