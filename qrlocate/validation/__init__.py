"""Candidate validation by decoding."""

from qrlocate.validation.oracle import ValidationOracle

__all__ = ["ValidationOracle"]
