"""Preprocessing operator library and operation variants."""

from qrlocate.preprocessing.operations import (
    Operation,
    OperationKind,
    apply_operation,
    parse_step,
)

__all__ = [
    "Operation",
    "OperationKind",
    "apply_operation",
    "parse_step",
]
