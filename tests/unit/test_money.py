"""
Тесты для модуля Money

Проверяет:
1. Округление half-away-from-zero до двух знаков
2. Арифметику с округлением (add/subtract/multiply/divide/sum)
3. Устойчивость к двоичной погрешности float
4. Сравнение с толерантностью
5. Валидацию входных значений (NaN/Inf/нечисловые/отрицательные)
6. Форматирование BRL
"""

from decimal import Decimal

import pytest

from freightsplit.core.math.money import (
    DEFAULT_TOLERANCE,
    MONEY_QUANT,
    ZERO,
    InvalidMoneyInput,
    MoneyDivisionByZero,
    add,
    divide,
    equals,
    format_money,
    is_valid,
    multiply,
    round_money,
    subtract,
    sum_money,
    to_money,
    validate_money,
)

# =============================================================================
# ОКРУГЛЕНИЕ
# =============================================================================


class TestRoundMoney:
    """Тесты для round_money"""

    def test_rounds_to_two_places(self) -> None:
        """Округление до двух знаков"""
        assert round_money(10.126) == Decimal("10.13")
        assert round_money(10.124) == Decimal("10.12")

    def test_half_rounds_away_from_zero(self) -> None:
        """Половина округляется от нуля"""
        assert round_money(10.125) == Decimal("10.13")
        assert round_money(0.005) == Decimal("0.01")
        assert round_money("2.675") == Decimal("2.68")

    def test_negative_values_symmetric(self) -> None:
        """Отрицательные значения округляются симметрично"""
        assert round_money(-10.126) == Decimal("-10.13")
        assert round_money(-0.005) == Decimal("-0.01")

    def test_whole_numbers(self) -> None:
        """Целые числа получают два знака"""
        assert round_money(10) == Decimal("10.00")
        assert round_money(10.0) == 10
        assert round_money(10).as_tuple().exponent == -2

    def test_result_is_quantized(self) -> None:
        """Результат всегда квантован до MONEY_QUANT"""
        assert round_money(Decimal("1.23456")).as_tuple().exponent == MONEY_QUANT.as_tuple().exponent

    def test_rejects_non_finite(self) -> None:
        """NaN/Inf отклоняются"""
        with pytest.raises(InvalidMoneyInput):
            round_money(float("nan"))
        with pytest.raises(InvalidMoneyInput):
            round_money(float("inf"))
        with pytest.raises(InvalidMoneyInput):
            round_money(Decimal("-Infinity"))

    def test_rejects_non_numeric(self) -> None:
        """Нечисловые значения отклоняются"""
        with pytest.raises(InvalidMoneyInput, match="not a monetary value"):
            round_money("abc")
        with pytest.raises(InvalidMoneyInput):
            round_money(None)  # type: ignore[arg-type]
        with pytest.raises(InvalidMoneyInput):
            round_money(True)  # type: ignore[arg-type]

    def test_rejects_out_of_range(self) -> None:
        """Конечное, но слишком большое для квантования значение — InvalidMoneyInput"""
        with pytest.raises(InvalidMoneyInput, match="out of range"):
            round_money(1e30)
        with pytest.raises(InvalidMoneyInput):
            add("1e27", 0)
        assert round_money("1e20") == Decimal("100000000000000000000.00")

    def test_invalid_input_is_value_error(self) -> None:
        """InvalidMoneyInput — подкласс ValueError"""
        with pytest.raises(ValueError):
            to_money([1, 2])  # type: ignore[arg-type]


class TestToMoney:
    """Тесты для to_money"""

    def test_float_uses_shortest_repr(self) -> None:
        """Float преобразуется без двоичного хвоста"""
        assert to_money(0.1) == Decimal("0.1")
        assert to_money(1e-20) == Decimal("1E-20")

    def test_string_and_int(self) -> None:
        assert to_money(" 10.50 ") == Decimal("10.50")
        assert to_money(7) == Decimal(7)

    def test_no_rounding(self) -> None:
        """to_money не округляет"""
        assert to_money(10.126) == Decimal("10.126")


# =============================================================================
# АРИФМЕТИКА
# =============================================================================


class TestArithmetic:
    """Тесты для add/subtract/multiply/divide"""

    def test_add(self) -> None:
        assert add(10.10, 5.05) == Decimal("15.15")
        assert add(1000.99, 2000.99) == Decimal("3001.98")

    def test_add_float_drift(self) -> None:
        """0.1 + 0.2 == 0.30 точно"""
        assert add(0.1, 0.2) == Decimal("0.30")
        assert 0.1 + 0.2 != 0.3  # контроль: в float это не так

    def test_subtract(self) -> None:
        assert subtract(10.50, 5.25) == Decimal("5.25")
        assert subtract(0.3, 0.1) == Decimal("0.20")

    def test_multiply(self) -> None:
        assert multiply(10.00, 3) == Decimal("30.00")
        assert multiply(3.33, 3) == Decimal("9.99")
        assert multiply(1.5, 2.5) == Decimal("3.75")
        assert multiply(10.50, 1.5) == Decimal("15.75")

    def test_divide(self) -> None:
        assert divide(10.00, 3) == Decimal("3.33")
        assert divide(100.00, 7) == Decimal("14.29")

    def test_divide_by_zero(self) -> None:
        """Деление на ноль — явная ошибка"""
        with pytest.raises(MoneyDivisionByZero, match="Division by zero"):
            divide(10, 0)
        with pytest.raises(ZeroDivisionError):
            divide(10, Decimal("0.00"))


class TestSumMoney:
    """Тесты для sum_money"""

    def test_sum_float_series(self) -> None:
        """Десять раз по 0.1 — ровно 1.00"""
        assert sum_money([0.1] * 10) == Decimal("1.00")

    def test_sum_rounds_once(self) -> None:
        """Округление один раз в конце, а не после каждого сложения"""
        assert sum_money([0.004, 0.004, 0.004]) == Decimal("0.01")

    def test_sum_empty(self) -> None:
        assert sum_money([]) == ZERO

    def test_sum_generator(self) -> None:
        assert sum_money(x for x in ("3.33", "3.33", "3.34")) == Decimal("10.00")


# =============================================================================
# СРАВНЕНИЯ И ВАЛИДАЦИЯ
# =============================================================================


class TestEquals:
    """Тесты для equals"""

    def test_within_default_tolerance(self) -> None:
        assert DEFAULT_TOLERANCE == Decimal("0.005")
        assert equals(10.001, 10.000)
        assert equals(10.004, 10)

    def test_outside_default_tolerance(self) -> None:
        assert not equals(10.02, 10.00)
        assert not equals(10.01, 10.00)

    def test_boundary_is_exclusive(self) -> None:
        """|a - b| == tolerance не считается равенством"""
        assert not equals(10.005, 10)

    def test_custom_tolerance(self) -> None:
        assert equals(10.009, 10, tolerance=0.01)
        assert not equals(10.01, 10, tolerance=0.01)


class TestIsValid:
    """Тесты для is_valid"""

    def test_valid_values(self) -> None:
        assert is_valid(0)
        assert is_valid(10.5)
        assert is_valid(Decimal("99.99"))

    def test_rejects_negative(self) -> None:
        assert not is_valid(-0.01)

    def test_rejects_nan_and_inf(self) -> None:
        assert not is_valid(float("nan"))
        assert not is_valid(float("inf"))
        assert not is_valid(float("-inf"))

    def test_rejects_non_numeric(self) -> None:
        assert not is_valid("abc")
        assert not is_valid(None)
        assert not is_valid(False)
        assert not is_valid({})

    def test_agrees_with_round_money(self) -> None:
        """is_valid отклоняет всё, что отклоняет round_money"""
        assert not is_valid(1e30)
        assert not is_valid(Decimal("1e40"))
        assert is_valid("1e20")


class TestValidateMoney:
    """Тесты для validate_money"""

    def test_returns_decimal(self) -> None:
        assert validate_money(1.5, "price") == Decimal("1.5")

    def test_negative_raises(self) -> None:
        with pytest.raises(InvalidMoneyInput, match="price must be non-negative"):
            validate_money(-1, "price")


# =============================================================================
# ФОРМАТИРОВАНИЕ
# =============================================================================


class TestFormatMoney:
    """Тесты для format_money"""

    def test_thousands_and_decimal_separators(self) -> None:
        assert format_money(1234.5) == "R$\xa01.234,50"
        assert format_money(1234567.891) == "R$\xa01.234.567,89"

    def test_small_values(self) -> None:
        assert format_money(0) == "R$\xa00,00"
        assert format_money(0.1 + 0.2) == "R$\xa00,30"

    def test_negative(self) -> None:
        assert format_money(-3.339) == "-R$\xa03,34"
