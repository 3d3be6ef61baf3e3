"""Recalculation Cascade — пересчёт subtotal / доставки / total по группе.

Стадии (на один вызов, без персистентного состояния):
    ITEMS_CHANGED → SUBTOTAL_RECOMPUTED → GROUP_FEES_REDISTRIBUTED
    → TOTALS_UPDATED → DONE

Изменение веса одного заказа сдвигает доли ВСЕХ остальных, поэтому каждый
запуск перечитывает и перезаписывает всю группу (O(n) на правку). Частичный
пересчёт только изменённого заказа нарушает сохранение суммы доставки.

Каскад не берёт блокировок и не открывает транзакций: вызывающий код
сериализует запуски по группе (GroupLockRegistry) и оборачивает изменение +
пересчёт в одну единицу работы. Заказы сохраняются только после того, как
все стадии успешно посчитаны.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from freightsplit.core.domain import Group, Order, Recipient, allocate
from freightsplit.core.math.money import ZERO, InvalidMoneyInput, add, sum_money
from freightsplit.persistence.repository import GroupRepository, OrderNotFound

logger = logging.getLogger(__name__)


class CascadeStage(str, Enum):
    """Стадия каскада пересчёта."""
    ITEMS_CHANGED = "ITEMS_CHANGED"
    SUBTOTAL_RECOMPUTED = "SUBTOTAL_RECOMPUTED"
    GROUP_FEES_REDISTRIBUTED = "GROUP_FEES_REDISTRIBUTED"
    TOTALS_UPDATED = "TOTALS_UPDATED"
    DONE = "DONE"


@dataclass(frozen=True)
class CascadeConfig:
    """Конфигурация каскада.

    skip_unchanged_saves: не сохранять заказы, у которых subtotal,
    shipping_fee и total не изменились.
    """
    skip_unchanged_saves: bool = False


@dataclass(frozen=True)
class CascadeResult:
    """Результат пересчёта группы."""

    group_id: str
    changed_order_id: Optional[str]
    orders: tuple[Order, ...]

    # Заказы, участвовавшие в распределении (в позиционном порядке)
    weighted_order_ids: tuple[str, ...]
    distributed_shipping: Decimal

    stages: tuple[CascadeStage, ...]

    # Для отладки
    details: str

    def order(self, order_id: str) -> Order:
        for order in self.orders:
            if order.id == order_id:
                return order
        raise OrderNotFound(order_id, self.group_id)


@dataclass(frozen=True)
class BatchRecalculationSummary:
    """Итог пакетного пересчёта всех групп."""

    total: int
    succeeded: int
    failed: int
    errors: Dict[str, str] = field(default_factory=dict)


def recompute_group(group: Group, changed_order_id: Optional[str] = None) -> CascadeResult:
    """Чистый пересчёт группы без I/O.

    Args:
        group: группа со всеми заказами и позициями
        changed_order_id: заказ, изменение которого запустило пересчёт
            (None — изменение уровня группы: удаление заказа, новая стоимость доставки)

    Returns:
        CascadeResult с обновлёнными заказами в исходном порядке

    Raises:
        OrderNotFound: changed_order_id не принадлежит группе
        InvalidMoneyInput: отрицательный вес заказа
        ValueError: заказ другой группы или повтор id заказа
    """
    stages = [CascadeStage.ITEMS_CHANGED]

    # Группа могла прийти из model_copy/model_construct в обход валидации
    group.check_membership()

    if changed_order_id is not None and group.order(changed_order_id) is None:
        raise OrderNotFound(changed_order_id, group.id)

    # 1. Subtotal из позиций (для всех заказов: пересчёт идемпотентен)
    orders = [
        order.model_copy(update={"subtotal": order.items_subtotal()})
        for order in group.orders
    ]
    stages.append(CascadeStage.SUBTOTAL_RECOMPUTED)
    logger.debug("group=%s subtotals recomputed for %d orders", group.id, len(orders))

    # 2. Вектор весов: заказы с нулевым весом исключаются, их доставка = 0
    weighted_positions: list[int] = []
    recipients: list[Recipient] = []
    for position, order in enumerate(orders):
        weight = order.weight()
        if weight < 0:
            raise InvalidMoneyInput(f"order {order.id} has negative weight {weight}")
        if weight > 0:
            weighted_positions.append(position)
            recipients.append(Recipient(key=order.id, weight=weight))

    # 3. Распределение доставки (позиционно, остаток — последнему взвешенному)
    fees = [ZERO] * len(orders)
    for position, recipient in zip(weighted_positions, allocate(group.shipping_cost, recipients)):
        fees[position] = recipient.allocated_fee
    stages.append(CascadeStage.GROUP_FEES_REDISTRIBUTED)

    # 4. Total для каждого заказа (взвешенного или нет)
    orders = [
        order.model_copy(update={"shipping_fee": fee, "total": add(order.subtotal, fee)})
        for order, fee in zip(orders, fees)
    ]
    stages.append(CascadeStage.TOTALS_UPDATED)
    stages.append(CascadeStage.DONE)

    distributed = sum_money(fees)
    return CascadeResult(
        group_id=group.id,
        changed_order_id=changed_order_id,
        orders=tuple(orders),
        weighted_order_ids=tuple(recipient.key for recipient in recipients),
        distributed_shipping=distributed,
        stages=tuple(stages),
        details=(
            f"group={group.id}, orders={len(orders)}, weighted={len(recipients)}, "
            f"shipping_cost={group.shipping_cost}, distributed={distributed}"
        ),
    )


class ShippingRecalculator:
    """Каскад пересчёта, привязанный к слою хранения.

    Использование (изменение + пересчёт в одной единице работы, под
    блокировкой группы):

        with locks.hold(group_id), repo.transaction():
            repo.add_item(group_id, order_id, item)
            recalculator.recalculate_order(group_id, order_id)
    """

    def __init__(self, repository: GroupRepository, config: Optional[CascadeConfig] = None):
        """
        Args:
            repository: слой хранения (load_group_with_orders / save_order)
            config: конфигурация каскада
        """
        self.repository = repository
        self.config = config or CascadeConfig()

    def recalculate_order(self, group_id: str, order_id: str) -> CascadeResult:
        """Пересчёт после изменения позиций заказа (добавление, удаление, количество).

        Raises:
            GroupNotFound: группа исчезла
            OrderNotFound: заказ исчез
        """
        group = self.repository.load_group_with_orders(group_id)
        result = recompute_group(group, changed_order_id=order_id)
        self._persist(group, result)
        return result

    def redistribute_group(self, group_id: str) -> CascadeResult:
        """Пересчёт после изменения уровня группы (удалён заказ, изменена доставка).

        Raises:
            GroupNotFound: группа исчезла
        """
        group = self.repository.load_group_with_orders(group_id)
        result = recompute_group(group)
        self._persist(group, result)
        return result

    def recalculate_all(self) -> BatchRecalculationSummary:
        """Пакетный пересчёт всех групп (обслуживание).

        Ошибка одной группы не прерывает остальные и попадает в summary.
        """
        group_ids = self.repository.list_group_ids()
        errors: Dict[str, str] = {}
        succeeded = 0

        for group_id in group_ids:
            try:
                self.redistribute_group(group_id)
            except (LookupError, ValueError) as e:
                logger.error("Recalculation failed for group=%s: %s", group_id, e)
                errors[group_id] = str(e)
            else:
                succeeded += 1

        logger.info(
            "Recalculated %d groups: %d succeeded, %d failed",
            len(group_ids), succeeded, len(errors),
        )
        return BatchRecalculationSummary(
            total=len(group_ids),
            succeeded=succeeded,
            failed=len(errors),
            errors=errors,
        )

    def _persist(self, before: Group, result: CascadeResult) -> None:
        """Сохранение всех заказов группы после успешного пересчёта."""
        saved = 0
        for order in result.orders:
            if self.config.skip_unchanged_saves and not _order_changed(before.order(order.id), order):
                continue
            self.repository.save_order(order)
            saved += 1

        logger.info(
            "Cascade done: %s, saved=%d, changed_order=%s",
            result.details, saved, result.changed_order_id,
        )


def _order_changed(previous: Optional[Order], current: Order) -> bool:
    if previous is None:
        return True
    return (
        previous.subtotal != current.subtotal
        or previous.shipping_fee != current.shipping_fee
        or previous.total != current.total
    )
