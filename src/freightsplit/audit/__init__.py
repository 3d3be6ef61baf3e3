"""Audit — read-only проверка финансовых инвариантов групп."""

from .invariants import (
    BatchValidationSummary,
    InvariantCheck,
    InvariantValidator,
    InvariantViolation,
    OrderChecks,
    ValidationReport,
    ValidatorConfig,
    validate_all,
)

__all__ = [
    "InvariantValidator",
    "ValidatorConfig",
    "ValidationReport",
    "InvariantCheck",
    "InvariantViolation",
    "OrderChecks",
    "BatchValidationSummary",
    "validate_all",
]
