"""
Order — Модель заказа участника группы и его позиций

Immutable Pydantic модели. Заказ агрегирует позиции (Item) и хранит
производные значения subtotal / shipping_fee / total, которые меняет только
каскад пересчёта: любое изменение создаёт новый экземпляр (model_copy).

Инварианты после успешного пересчёта:
- subtotal == sum(item.line_subtotal)
- total == subtotal + shipping_fee (точно)
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from freightsplit.core.math.money import ZERO, add, multiply, round_money, sum_money, to_money


# =============================================================================
# ITEM MODEL
# =============================================================================


class Item(BaseModel):
    """
    Позиция заказа: товар × количество.

    unit_price округляется до центов при создании; unit_weight хранится
    как есть (вес — не деньги, дробные граммы допустимы).
    """

    product_id: str = Field(..., min_length=1, description="Идентификатор товара")
    quantity: int = Field(..., ge=1, description="Количество (>= 1)")
    unit_price: Decimal = Field(..., ge=0, description="Цена за единицу (BRL)")
    unit_weight: Decimal = Field(..., ge=0, description="Вес единицы товара")

    model_config = {"frozen": True}

    @field_validator("unit_price", mode="before")
    @classmethod
    def validate_unit_price(cls, v: Any) -> Decimal:
        return round_money(v)

    @field_validator("unit_weight", mode="before")
    @classmethod
    def validate_unit_weight(cls, v: Any) -> Decimal:
        return to_money(v)

    @property
    def line_subtotal(self) -> Decimal:
        """Стоимость позиции: quantity × unit_price (округлено)."""
        return multiply(self.unit_price, self.quantity)

    @property
    def line_weight(self) -> Decimal:
        """Вес позиции: quantity × unit_weight (без округления)."""
        return self.unit_weight * self.quantity


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Заказ участника группы.

    subtotal / shipping_fee / total по умолчанию нулевые и заполняются
    каскадом пересчёта. Вне каскада их менять нельзя.
    """

    # Идентификация
    id: str = Field(..., min_length=1, description="Идентификатор заказа")
    group_id: str = Field(..., min_length=1, description="Группа (кампания) заказа")
    customer_name: str = Field(default="", description="Имя покупателя")

    # Состав
    items: tuple[Item, ...] = Field(default=(), description="Позиции заказа")

    # Производные суммы
    subtotal: Decimal = Field(default=ZERO, ge=0, description="Сумма позиций")
    shipping_fee: Decimal = Field(default=ZERO, ge=0, description="Доля доставки")
    total: Decimal = Field(default=ZERO, ge=0, description="subtotal + shipping_fee")

    # Оплата
    is_paid: bool = Field(default=False, description="Заказ оплачен")

    model_config = {"frozen": True}

    @field_validator("subtotal", "shipping_fee", "total", mode="before")
    @classmethod
    def validate_money_fields(cls, v: Any) -> Decimal:
        return round_money(v)

    def items_subtotal(self) -> Decimal:
        """Сумма стоимостей позиций, пересчитанная из items."""
        return sum_money(item.line_subtotal for item in self.items)

    def weight(self) -> Decimal:
        """Общий вес заказа: sum(quantity × unit_weight)."""
        return sum((item.line_weight for item in self.items), Decimal(0))

    def has_weight(self) -> bool:
        return self.weight() > 0

    def expected_total(self) -> Decimal:
        """Итог по текущим subtotal и shipping_fee."""
        return add(self.subtotal, self.shipping_fee)

    def find_item(self, product_id: str) -> Item | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None
