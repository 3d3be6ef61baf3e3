"""
Money — Денежные примитивы с фиксированной точностью

Все денежные значения — BRL с двумя знаками после запятой.
Модуль является единственным местом, где определена политика округления:
все остальные операции (сложение, вычитание, умножение, деление, суммирование)
проходят через round_money.

Внутреннее представление — decimal.Decimal. Float на входе преобразуется
через его кратчайший repr (0.1 → Decimal("0.1")), поэтому двоичная
погрешность float не попадает ни в суммы, ни в сравнения.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Округление half-away-from-zero до 0.01 (ROUND_HALF_UP в терминах decimal)
2. NaN/Inf/нечисловые значения отклоняются на границе (InvalidMoneyInput)
3. Деление на ноль — явная ошибка (MoneyDivisionByZero), не fallback
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final, Iterable, Union

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Шаг квантования: два знака после запятой
MONEY_QUANT: Final[Decimal] = Decimal("0.01")

# Денежный ноль (уже квантованный)
ZERO: Final[Decimal] = Decimal("0.00")

# Толерантность сравнения по умолчанию (полцента)
DEFAULT_TOLERANCE: Final[Decimal] = Decimal("0.005")

# Отображение валюты (pt-BR / BRL)
CURRENCY_SYMBOL: Final[str] = "R$"
THOUSANDS_SEPARATOR: Final[str] = "."
DECIMAL_SEPARATOR: Final[str] = ","

MoneyLike = Union[Decimal, int, float, str]


# =============================================================================
# ИСКЛЮЧЕНИЯ
# =============================================================================


class InvalidMoneyInput(ValueError):
    """Нечисловое, бесконечное, NaN или отрицательное денежное значение."""


class MoneyDivisionByZero(ZeroDivisionError):
    """Деление денежного значения на ноль."""


# =============================================================================
# ПРЕОБРАЗОВАНИЕ НА ГРАНИЦЕ
# =============================================================================


def to_money(value: MoneyLike) -> Decimal:
    """
    Преобразование входного значения в Decimal без округления.

    Args:
        value: Decimal, int, float или строка с числом

    Returns:
        Конечное Decimal значение

    Raises:
        InvalidMoneyInput: Если значение bool/None, нечисловое, NaN или Inf

    Examples:
        >>> to_money(0.1)
        Decimal('0.1')
        >>> to_money("10.50")
        Decimal('10.50')
    """
    # bool — подкласс int, но деньгами не является
    if isinstance(value, bool) or value is None:
        raise InvalidMoneyInput(f"not a monetary value: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidMoneyInput(f"not a monetary value: {value!r}") from None
    else:
        raise InvalidMoneyInput(f"not a monetary value: {value!r}")

    if not result.is_finite():
        raise InvalidMoneyInput(f"monetary value must be finite, got {value!r}")

    return result


def round_money(value: MoneyLike) -> Decimal:
    """
    Округление до двух знаков, half-away-from-zero.

    Масштабирует на 100, округляет до целого (половина — от нуля),
    масштабирует обратно. Отрицательные значения округляются симметрично.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money(-10.126)
        Decimal('-10.13')

    Raises:
        InvalidMoneyInput: Если значение не число или не помещается в
            точность decimal-контекста после квантования (по умолчанию 28 цифр)
    """
    money = to_money(value)
    try:
        return money.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidMoneyInput(f"monetary value out of range: {value!r}") from None


# =============================================================================
# АРИФМЕТИКА
# =============================================================================


def add(a: MoneyLike, b: MoneyLike) -> Decimal:
    """Сложение с округлением результата."""
    return round_money(to_money(a) + to_money(b))


def subtract(a: MoneyLike, b: MoneyLike) -> Decimal:
    """Вычитание с округлением результата."""
    return round_money(to_money(a) - to_money(b))


def multiply(value: MoneyLike, factor: MoneyLike) -> Decimal:
    """
    Умножение денежного значения на количество/коэффициент.

    Examples:
        >>> multiply(3.33, 3)
        Decimal('9.99')
        >>> multiply(10.50, 1.5)
        Decimal('15.75')
    """
    return round_money(to_money(value) * to_money(factor))


def divide(value: MoneyLike, divisor: MoneyLike) -> Decimal:
    """
    Деление денежного значения с округлением.

    Raises:
        MoneyDivisionByZero: Если divisor == 0

    Examples:
        >>> divide(100, 7)
        Decimal('14.29')
    """
    divisor_dec = to_money(divisor)
    if divisor_dec == 0:
        raise MoneyDivisionByZero("Division by zero")
    return round_money(to_money(value) / divisor_dec)


def sum_money(values: Iterable[MoneyLike]) -> Decimal:
    """
    Сумма денежных значений.

    Суммирование точное (Decimal), округление — один раз в конце,
    поэтому ошибка не накапливается попарно.
    """
    total = Decimal(0)
    for value in values:
        total += to_money(value)
    return round_money(total)


# =============================================================================
# СРАВНЕНИЯ И ВАЛИДАЦИЯ
# =============================================================================


def equals(a: MoneyLike, b: MoneyLike, tolerance: MoneyLike = DEFAULT_TOLERANCE) -> bool:
    """
    Сравнение с абсолютной толерантностью: |a - b| < tolerance.

    Examples:
        >>> equals(10.001, 10.000)
        True
        >>> equals(10.02, 10.00)
        False
    """
    return abs(to_money(a) - to_money(b)) < to_money(tolerance)


def is_valid(value: object) -> bool:
    """
    Проверка, является ли значение допустимой денежной суммой.

    Отклоняет NaN, ±Inf, нечисловые, вне диапазона и отрицательные суммы
    (то же, что отклоняет round_money). Никогда не выбрасывает исключение.
    """
    try:
        money = to_money(value)  # type: ignore[arg-type]
        round_money(money)
    except InvalidMoneyInput:
        return False
    return money >= 0


def validate_money(value: MoneyLike, name: str) -> Decimal:
    """
    Валидация денежного значения на границе модуля.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        Значение как Decimal (без округления)

    Raises:
        InvalidMoneyInput: Если значение невалидно или отрицательно
    """
    money = to_money(value)
    if money < 0:
        raise InvalidMoneyInput(f"{name} must be non-negative, got {value}")
    return money


# =============================================================================
# ФОРМАТИРОВАНИЕ
# =============================================================================


def format_money(value: MoneyLike) -> str:
    """
    Форматирование в BRL (pt-BR): "R$ 1.234,56".

    Между символом валюты и числом — неразрывный пробел, как в Intl pt-BR.

    Examples:
        >>> format_money(1234.5)
        'R$\\xa01.234,50'
        >>> format_money(-3.339)
        '-R$\\xa03,34'
    """
    rounded = round_money(value)
    sign = "-" if rounded < 0 else ""
    units, cents = f"{abs(rounded):.2f}".split(".")
    grouped = f"{int(units):,}".replace(",", THOUSANDS_SEPARATOR)
    return f"{sign}{CURRENCY_SYMBOL}\xa0{grouped}{DECIMAL_SEPARATOR}{cents}"
