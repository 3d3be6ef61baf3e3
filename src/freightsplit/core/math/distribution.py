"""
Proportional Distribution — Пропорциональное распределение суммы по весам

Делит общую сумму (например, стоимость доставки группы) между получателями
пропорционально их весам так, что сумма долей РОВНО равна round_money(total).

Алгоритм:
1. Пустой список весов → пустой результат
2. sum(weights) == 0 → все доли нулевые (нет веса — нет доли, не поровну)
3. Каждая позиция кроме последней: round(w_i / W * total)
4. Последняя позиция (по входному порядку, не по сортировке) получает остаток
   round(total - distributed_sum) и поглощает всю ошибку округления
5. Отступление от п.4: если остаток отрицателен (ранние доли округлились
   вверх, последний вес мал), _settle_negative_residual забирает по центу
   у округлённых вверх долей с конца, чтобы все доли были неотрицательны

Распределитель детерминирован и позиционен. Если нужен другой порядок
поглощения остатка (например, largest-remainder), вызывающий код сортирует
веса до вызова и восстанавливает порядок результата сам.
"""

from decimal import Decimal
from typing import Sequence

from .money import MONEY_QUANT, ZERO, MoneyLike, add, round_money, subtract, to_money


def distribute(total: MoneyLike, weights: Sequence[MoneyLike]) -> list[Decimal]:
    """
    Пропорциональное распределение total по weights.

    Отрицательные веса — ошибка вызывающего кода, здесь не проверяются.

    Args:
        total: Распределяемая сумма (>= 0)
        weights: Упорядоченный список неотрицательных весов

    Returns:
        Список долей той же длины, sum(result) == round_money(total)

    Examples:
        >>> distribute(10, [1, 1, 1])
        [Decimal('3.33'), Decimal('3.33'), Decimal('3.34')]
        >>> distribute(100, [1, 2, 3])
        [Decimal('16.67'), Decimal('33.33'), Decimal('50.00')]
        >>> distribute(100, [0, 0, 0])
        [Decimal('0.00'), Decimal('0.00'), Decimal('0.00')]
    """
    weights_dec = [to_money(w) for w in weights]
    if not weights_dec:
        return []

    total_weight = sum(weights_dec, Decimal(0))
    if total_weight == 0:
        return [ZERO for _ in weights_dec]

    total_dec = to_money(total)
    last_index = len(weights_dec) - 1

    distributed: list[Decimal] = []
    distributed_sum = ZERO

    for index, weight in enumerate(weights_dec):
        if index == last_index:
            # Последняя позиция получает остаток: сумма сохраняется точно
            amount = subtract(total_dec, distributed_sum)
        else:
            amount = round_money(weight / total_weight * total_dec)
            distributed_sum = add(distributed_sum, amount)
        distributed.append(amount)

    if distributed[last_index] < 0:
        _settle_negative_residual(distributed, weights_dec, total_weight, total_dec)

    return distributed


def _settle_negative_residual(
    distributed: list[Decimal],
    weights: list[Decimal],
    total_weight: Decimal,
    total: Decimal,
) -> None:
    """
    Возврат центов в последнюю позицию, если остаток ушёл в минус.

    Происходит только когда последний вес очень мал, а предыдущие доли
    округлились вверх. Центы снимаются с позиций, округлённых вверх,
    от конца к началу; сумма распределения при этом не меняется.
    """
    last_index = len(distributed) - 1
    for index in range(last_index - 1, -1, -1):
        if distributed[last_index] >= 0:
            break
        exact_share = weights[index] / total_weight * total
        if distributed[index] > exact_share:
            distributed[index] -= MONEY_QUANT
            distributed[last_index] += MONEY_QUANT
