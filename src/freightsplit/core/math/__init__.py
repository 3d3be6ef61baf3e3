"""
Core math modules для freightsplit

Денежные примитивы и пропорциональное распределение с гарантией
сохранения суммы.
"""

# Money
from freightsplit.core.math.money import (
    # Constants
    CURRENCY_SYMBOL,
    DEFAULT_TOLERANCE,
    MONEY_QUANT,
    ZERO,
    # Exceptions
    InvalidMoneyInput,
    MoneyDivisionByZero,
    # Types
    MoneyLike,
    # Arithmetic
    add,
    divide,
    multiply,
    round_money,
    subtract,
    sum_money,
    to_money,
    # Comparison and validation
    equals,
    is_valid,
    validate_money,
    # Formatting
    format_money,
)

# Proportional Distribution
from freightsplit.core.math.distribution import distribute

__all__ = [
    # Money — Constants
    "CURRENCY_SYMBOL",
    "DEFAULT_TOLERANCE",
    "MONEY_QUANT",
    "ZERO",
    # Money — Exceptions
    "InvalidMoneyInput",
    "MoneyDivisionByZero",
    # Money — Types
    "MoneyLike",
    # Money — Arithmetic
    "add",
    "divide",
    "multiply",
    "round_money",
    "subtract",
    "sum_money",
    "to_money",
    # Money — Comparison and validation
    "equals",
    "is_valid",
    "validate_money",
    # Money — Formatting
    "format_money",
    # Distribution
    "distribute",
]
