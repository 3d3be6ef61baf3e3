"""
Group — Модель группы (кампании) совместной закупки

Группа владеет общим cost pool (стоимость доставки) и набором заказов,
между которыми этот пул распределяется пропорционально весу.

Снапшот группы, полученный от слоя хранения, проверяется против
JSON Schema контракта (group_snapshot.json) до построения моделей.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable

from pydantic import BaseModel, Field, field_validator, model_validator

from freightsplit.core.contracts import validate_group_snapshot
from freightsplit.core.math.money import round_money, sum_money

from .order import Order


# =============================================================================
# COST POOL
# =============================================================================


class CostPool(BaseModel):
    """Общая сумма, распределяемая между заказами группы."""

    total: Decimal = Field(..., ge=0, description="Сумма пула (BRL)")

    model_config = {"frozen": True}

    @field_validator("total", mode="before")
    @classmethod
    def validate_total(cls, v: Any) -> Decimal:
        return round_money(v)


# =============================================================================
# GROUP MODEL
# =============================================================================


class Group(BaseModel):
    """
    Группа с cost pool и заказами.

    Порядок orders значим: последний взвешенный заказ поглощает
    остаток округления при распределении доставки.

    Каждый заказ принадлежит этой группе (order.group_id == id),
    id заказов уникальны внутри группы.
    """

    id: str = Field(..., min_length=1, description="Идентификатор группы")
    name: str = Field(default="", description="Название группы")
    cost_pool: CostPool = Field(..., description="Общая стоимость доставки")
    orders: tuple[Order, ...] = Field(default=(), description="Заказы группы")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_orders_membership(self) -> "Group":
        self.check_membership()
        return self

    def check_membership(self) -> None:
        """
        Проверка принадлежности заказов группе.

        Raises:
            ValueError: Если заказ принадлежит другой группе или id заказа повторяется
        """
        seen: set[str] = set()
        for order in self.orders:
            if order.group_id != self.id:
                raise ValueError(
                    f"Order {order.id} belongs to group {order.group_id}, not {self.id}"
                )
            if order.id in seen:
                raise ValueError(f"Duplicate order id {order.id} in group {self.id}")
            seen.add(order.id)

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "Group":
        """
        Построение группы из JSON снапшота.

        Raises:
            jsonschema.ValidationError: Если снапшот нарушает контракт
            pydantic.ValidationError: Если значения нарушают ограничения моделей
        """
        validate_group_snapshot(data)
        return cls.model_validate(data)

    def to_snapshot(self) -> Dict[str, Any]:
        """Сериализация в снапшот (деньги — строки с двумя знаками)."""
        return self.model_dump(mode="json")

    @property
    def shipping_cost(self) -> Decimal:
        return self.cost_pool.total

    def order(self, order_id: str) -> Order | None:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def with_orders(self, orders: Iterable[Order]) -> "Group":
        # Через конструктор: model_copy не запускает валидацию
        return Group(id=self.id, name=self.name, cost_pool=self.cost_pool, orders=tuple(orders))

    def with_shipping_cost(self, total: Any) -> "Group":
        return self.model_copy(update={"cost_pool": CostPool(total=total)})

    def has_weighted_orders(self) -> bool:
        return any(order.has_weight() for order in self.orders)

    # Агрегаты по сохранённым значениям заказов

    def sum_subtotals(self) -> Decimal:
        return sum_money(order.subtotal for order in self.orders)

    def sum_shipping_fees(self) -> Decimal:
        return sum_money(order.shipping_fee for order in self.orders)

    def sum_totals(self) -> Decimal:
        return sum_money(order.total for order in self.orders)

    def sum_paid_totals(self) -> Decimal:
        return sum_money(order.total for order in self.orders if order.is_paid)

    def sum_unpaid_totals(self) -> Decimal:
        return sum_money(order.total for order in self.orders if not order.is_paid)
