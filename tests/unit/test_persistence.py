"""
Тесты для слоя хранения в памяти и реестра блокировок групп

Проверяет:
1. Контракт GroupRepository (load / save upsert / list)
2. CRUD позиций и заказов
3. Откат транзакции при исключении
4. Построение из JSON снапшотов
5. GroupLockRegistry: один мьютекс на группу, таймаут
"""

import threading
from decimal import Decimal

import pytest
from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError

from freightsplit.core.domain import CostPool, Group, Item, Order
from freightsplit.persistence import (
    GroupLockRegistry,
    GroupNotFound,
    GroupRepository,
    InMemoryGroupRepository,
    OrderNotFound,
)


@pytest.fixture
def repo() -> InMemoryGroupRepository:
    group = Group(
        id="g1",
        cost_pool=CostPool(total=90),
        orders=[
            Order(
                id="o1",
                group_id="g1",
                items=[Item(product_id="p1", quantity=1, unit_price=10, unit_weight=1)],
            )
        ],
    )
    return InMemoryGroupRepository([group])


class TestInMemoryGroupRepository:
    """Тесты InMemoryGroupRepository"""

    def test_implements_protocol(self, repo) -> None:
        assert isinstance(repo, GroupRepository)

    def test_load_missing_group(self, repo) -> None:
        with pytest.raises(GroupNotFound, match="Group not found: g9"):
            repo.load_group_with_orders("g9")

    def test_save_order_replaces_in_place(self, repo) -> None:
        repo.add_order(Order(id="o2", group_id="g1"))
        repo.save_order(Order(id="o1", group_id="g1", subtotal=5, total=5))

        group = repo.load_group_with_orders("g1")
        assert [o.id for o in group.orders] == ["o1", "o2"]
        assert group.order("o1").total == Decimal("5.00")

    def test_save_order_upserts_new(self, repo) -> None:
        repo.save_order(Order(id="o9", group_id="g1"))
        assert repo.load_group_with_orders("g1").order("o9") is not None

    def test_save_order_missing_group(self, repo) -> None:
        with pytest.raises(GroupNotFound):
            repo.save_order(Order(id="o1", group_id="g9"))

    def test_list_group_ids(self, repo) -> None:
        repo.add_group(Group(id="g2", cost_pool=CostPool(total=0)))
        assert repo.list_group_ids() == ["g1", "g2"]

    def test_add_duplicate_order(self, repo) -> None:
        with pytest.raises(ValueError, match="already exists"):
            repo.add_order(Order(id="o1", group_id="g1"))

    def test_delete_order(self, repo) -> None:
        repo.delete_order("g1", "o1")
        assert repo.load_group_with_orders("g1").orders == ()

        with pytest.raises(OrderNotFound):
            repo.delete_order("g1", "o1")

    def test_add_and_remove_item(self, repo) -> None:
        repo.add_item("g1", "o1", Item(product_id="p2", quantity=2, unit_price=3, unit_weight=1))
        assert len(repo.get_order("g1", "o1").items) == 2

        repo.remove_item("g1", "o1", "p1")
        assert [i.product_id for i in repo.get_order("g1", "o1").items] == ["p2"]

        with pytest.raises(LookupError, match="Item not found"):
            repo.remove_item("g1", "o1", "p1")

    def test_update_item_quantity(self, repo) -> None:
        repo.update_item_quantity("g1", "o1", "p1", 4)
        assert repo.get_order("g1", "o1").items[0].quantity == 4

    def test_update_item_quantity_validates(self, repo) -> None:
        with pytest.raises(ValidationError):
            repo.update_item_quantity("g1", "o1", "p1", 0)

    def test_get_missing_order(self, repo) -> None:
        with pytest.raises(OrderNotFound, match="o7 in group g1"):
            repo.get_order("g1", "o7")

    def test_set_shipping_cost_and_paid(self, repo) -> None:
        repo.set_shipping_cost("g1", "12.345")
        repo.set_paid("g1", "o1")

        group = repo.load_group_with_orders("g1")
        assert group.shipping_cost == Decimal("12.35")
        assert group.order("o1").is_paid

    def test_transaction_commits(self, repo) -> None:
        with repo.transaction():
            repo.set_shipping_cost("g1", 1)
        assert repo.load_group_with_orders("g1").shipping_cost == Decimal("1.00")

    def test_transaction_rolls_back(self, repo) -> None:
        before = repo.load_group_with_orders("g1")

        with pytest.raises(RuntimeError):
            with repo.transaction():
                repo.delete_order("g1", "o1")
                repo.add_group(Group(id="g2", cost_pool=CostPool(total=0)))
                raise RuntimeError("abort")

        assert repo.load_group_with_orders("g1") == before
        assert repo.list_group_ids() == ["g1"]

    def test_from_snapshots(self) -> None:
        repo = InMemoryGroupRepository.from_snapshots(
            [{"id": "g1", "cost_pool": {"total": "10.00"}, "orders": []}]
        )
        assert repo.load_group_with_orders("g1").shipping_cost == Decimal("10.00")

    def test_from_snapshots_contract_violation(self) -> None:
        with pytest.raises(SchemaValidationError):
            InMemoryGroupRepository.from_snapshots([{"id": "g1", "orders": []}])


class TestGroupLockRegistry:
    """Тесты GroupLockRegistry"""

    def test_same_lock_per_group(self) -> None:
        locks = GroupLockRegistry()
        assert locks.lock_for("g1") is locks.lock_for("g1")
        assert locks.lock_for("g1") is not locks.lock_for("g2")

    def test_hold_releases(self) -> None:
        locks = GroupLockRegistry()
        with locks.hold("g1"):
            assert locks.lock_for("g1").locked()
        assert not locks.lock_for("g1").locked()

    def test_hold_releases_on_error(self) -> None:
        locks = GroupLockRegistry()
        with pytest.raises(KeyError):
            with locks.hold("g1"):
                raise KeyError("boom")
        assert not locks.lock_for("g1").locked()

    def test_timeout(self) -> None:
        locks = GroupLockRegistry()
        with locks.hold("g1"):
            with pytest.raises(TimeoutError, match="g1"):
                with locks.hold("g1", timeout=0.01):
                    pass

    def test_other_groups_not_blocked(self) -> None:
        locks = GroupLockRegistry()
        entered = threading.Event()

        def worker() -> None:
            with locks.hold("g2", timeout=1):
                entered.set()

        with locks.hold("g1"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join(timeout=2)

        assert entered.is_set()
