"""
Persistence collaborator — интерфейс слоя хранения для каскада пересчёта

Движок не хранит данные сам. Слой хранения обязан:
- load_group_with_orders(group_id): вернуть группу со всеми заказами и
  позициями (вес товаров доступен сразу)
- save_order(order): идемпотентный upsert subtotal / shipping_fee / total
- list_group_ids(): перечислить группы (для пакетного пересчёта и аудита)

Все вызовы выполняются внутри транзакции, которой управляет слой хранения.
"""

from typing import Protocol, runtime_checkable

from freightsplit.core.domain import Group, Order


class GroupNotFound(LookupError):
    """Группа, на которую ссылается пересчёт, не существует."""

    def __init__(self, group_id: str):
        super().__init__(f"Group not found: {group_id}")
        self.group_id = group_id


class OrderNotFound(LookupError):
    """Заказ, на который ссылается пересчёт, не существует."""

    def __init__(self, order_id: str, group_id: str | None = None):
        where = f" in group {group_id}" if group_id else ""
        super().__init__(f"Order not found: {order_id}{where}")
        self.order_id = order_id
        self.group_id = group_id


@runtime_checkable
class GroupRepository(Protocol):
    """Контракт слоя хранения, который использует каскад."""

    def load_group_with_orders(self, group_id: str) -> Group:
        """Raises GroupNotFound если группы нет."""
        ...

    def save_order(self, order: Order) -> None:
        ...

    def list_group_ids(self) -> list[str]:
        ...
