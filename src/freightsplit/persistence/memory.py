"""
InMemoryGroupRepository — слой хранения в памяти

Реализация GroupRepository для тестов, скриптов обслуживания и встраивания.
Помимо контракта каскада предоставляет CRUD-операции над позициями и
заказами (то, что в сервисе делает слой хранения перед вызовом каскада).

CRUD-операции каскад НЕ вызывают: вызывающий код обязан запустить пересчёт
группы сразу после изменения, в той же транзакции.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator

from freightsplit.core.domain import Group, Item, Order

from .repository import GroupNotFound, OrderNotFound

logger = logging.getLogger(__name__)


class InMemoryGroupRepository:
    """
    Хранилище групп в памяти.

    Модели immutable, поэтому снапшот состояния для отката транзакции —
    поверхностная копия словаря групп.
    """

    def __init__(self, groups: Iterable[Group] = ()):
        self._groups: Dict[str, Group] = {}
        for group in groups:
            self.add_group(group)

    @classmethod
    def from_snapshots(cls, snapshots: Iterable[Dict[str, Any]]) -> "InMemoryGroupRepository":
        """Построение хранилища из JSON снапшотов (с проверкой контракта)."""
        return cls(Group.from_snapshot(snapshot) for snapshot in snapshots)

    # =========================================================================
    # GroupRepository
    # =========================================================================

    def load_group_with_orders(self, group_id: str) -> Group:
        try:
            return self._groups[group_id]
        except KeyError:
            raise GroupNotFound(group_id) from None

    def save_order(self, order: Order) -> None:
        """Upsert заказа в его группу (по order.id)."""
        group = self.load_group_with_orders(order.group_id)
        orders = list(group.orders)
        for index, existing in enumerate(orders):
            if existing.id == order.id:
                orders[index] = order
                break
        else:
            orders.append(order)
        self._groups[group.id] = group.with_orders(orders)

    def list_group_ids(self) -> list[str]:
        return list(self._groups)

    # =========================================================================
    # ТРАНЗАКЦИЯ
    # =========================================================================

    @contextmanager
    def transaction(self) -> Iterator["InMemoryGroupRepository"]:
        """
        Единица работы: при исключении внутри блока состояние откатывается.

        Example:
            >>> with repo.transaction():
            ...     repo.add_item("g1", "o1", item)
            ...     recalculator.recalculate_order("g1", "o1")
        """
        snapshot = dict(self._groups)
        try:
            yield self
        except BaseException:
            self._groups = snapshot
            logger.debug("Transaction rolled back (%d groups restored)", len(snapshot))
            raise

    # =========================================================================
    # CRUD
    # =========================================================================

    def add_group(self, group: Group) -> None:
        self._groups[group.id] = group

    def get_order(self, group_id: str, order_id: str) -> Order:
        order = self.load_group_with_orders(group_id).order(order_id)
        if order is None:
            raise OrderNotFound(order_id, group_id)
        return order

    def add_order(self, order: Order) -> None:
        group = self.load_group_with_orders(order.group_id)
        if group.order(order.id) is not None:
            raise ValueError(f"Order already exists: {order.id}")
        self.save_order(order)

    def delete_order(self, group_id: str, order_id: str) -> None:
        group = self.load_group_with_orders(group_id)
        if group.order(order_id) is None:
            raise OrderNotFound(order_id, group_id)
        self._groups[group_id] = group.with_orders(
            order for order in group.orders if order.id != order_id
        )

    def add_item(self, group_id: str, order_id: str, item: Item) -> None:
        order = self.get_order(group_id, order_id)
        self.save_order(order.model_copy(update={"items": order.items + (item,)}))

    def remove_item(self, group_id: str, order_id: str, product_id: str) -> None:
        order = self.get_order(group_id, order_id)
        if order.find_item(product_id) is None:
            raise LookupError(f"Item not found: {product_id} in order {order_id}")
        items = tuple(item for item in order.items if item.product_id != product_id)
        self.save_order(order.model_copy(update={"items": items}))

    def update_item_quantity(
        self, group_id: str, order_id: str, product_id: str, quantity: int
    ) -> None:
        order = self.get_order(group_id, order_id)
        item = order.find_item(product_id)
        if item is None:
            raise LookupError(f"Item not found: {product_id} in order {order_id}")
        # Валидация через конструктор (quantity >= 1)
        updated = Item(
            product_id=item.product_id,
            quantity=quantity,
            unit_price=item.unit_price,
            unit_weight=item.unit_weight,
        )
        items = tuple(updated if i.product_id == product_id else i for i in order.items)
        self.save_order(order.model_copy(update={"items": items}))

    def set_shipping_cost(self, group_id: str, total: Any) -> None:
        group = self.load_group_with_orders(group_id)
        self._groups[group_id] = group.with_shipping_cost(total)

    def set_paid(self, group_id: str, order_id: str, is_paid: bool = True) -> None:
        order = self.get_order(group_id, order_id)
        self.save_order(order.model_copy(update={"is_paid": is_paid}))
