"""
Recipient — Получатель доли при пропорциональном распределении

allocate() применяет distribute() к списку получателей и возвращает их копии
с заполненным allocated_fee, сохраняя входной порядок.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from freightsplit.core.math.distribution import distribute
from freightsplit.core.math.money import MoneyLike, to_money


class Recipient(BaseModel):
    """Участник распределения: вес и назначенная доля."""

    key: str = Field(..., min_length=1, description="Идентификатор получателя")
    weight: Decimal = Field(..., ge=0, description="Вес (может быть нулевым)")
    allocated_fee: Optional[Decimal] = Field(
        default=None, description="Назначенная доля (None до распределения)"
    )

    model_config = {"frozen": True}

    @field_validator("weight", mode="before")
    @classmethod
    def validate_weight(cls, v: Any) -> Decimal:
        return to_money(v)


def allocate(total: MoneyLike, recipients: Sequence[Recipient]) -> tuple[Recipient, ...]:
    """
    Распределение total между получателями пропорционально весу.

    Args:
        total: Распределяемая сумма
        recipients: Получатели в значимом порядке (последний берёт остаток)

    Returns:
        Копии получателей с allocated_fee, в том же порядке
    """
    fees = distribute(total, [recipient.weight for recipient in recipients])
    return tuple(
        recipient.model_copy(update={"allocated_fee": fee})
        for recipient, fee in zip(recipients, fees)
    )
