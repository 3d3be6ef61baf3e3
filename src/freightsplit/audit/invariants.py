"""Invariant Validator — аудит финансовой целостности группы

Read-only оракул: заново выводит инварианты, которые должен поддерживать
каскад пересчёта, и возвращает pass/fail по каждой проверке. Ничего не пишет,
поэтому может вызываться в любой момент без координации с пересчётом.

Групповые проверки (сравнение с толерантностью):
- shipping_distribution: sum(shipping_fee) ≈ cost_pool.total
- total_calculation:     sum(total) ≈ sum(subtotal) + cost_pool.total
- paid_unpaid_sum:       sum(total) ≈ sum(total paid) + sum(total unpaid)

Если ни у одного заказа нет положительного веса, пул распределить некому:
ожидаемая сумма доставки в первых двух проверках — ноль.

Проверки по заказам (точные):
- subtotal_matches_items: subtotal == sum(line_subtotal)
- total_matches_parts:    total == subtotal + shipping_fee
- zero_weight_zero_fee:   заказ без веса не платит за доставку
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from freightsplit.core.domain import Group, Order
from freightsplit.core.math.money import DEFAULT_TOLERANCE, ZERO, add, equals
from freightsplit.persistence.repository import GroupRepository

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT TYPES
# =============================================================================


@dataclass(frozen=True)
class InvariantCheck:
    """Результат одной проверки."""

    passed: bool
    expected: Decimal
    actual: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"passed": self.passed, "expected": str(self.expected), "actual": str(self.actual)}


@dataclass(frozen=True)
class InvariantViolation:
    """Запись о нарушенном инварианте (отчёт, не исключение)."""

    check: str
    expected: Decimal
    actual: Decimal
    order_id: Optional[str] = None

    @property
    def difference(self) -> Decimal:
        return self.actual - self.expected


@dataclass(frozen=True)
class OrderChecks:
    """Проверки одного заказа."""

    order_id: str
    subtotal_matches_items: InvariantCheck
    total_matches_parts: InvariantCheck
    zero_weight_zero_fee: InvariantCheck

    @property
    def passed(self) -> bool:
        return (
            self.subtotal_matches_items.passed
            and self.total_matches_parts.passed
            and self.zero_weight_zero_fee.passed
        )

    def as_mapping(self) -> Dict[str, InvariantCheck]:
        return {
            "subtotal_matches_items": self.subtotal_matches_items,
            "total_matches_parts": self.total_matches_parts,
            "zero_weight_zero_fee": self.zero_weight_zero_fee,
        }


@dataclass(frozen=True)
class ValidationReport:
    """Отчёт аудита группы."""

    group_id: str
    passed: bool
    checks: Dict[str, InvariantCheck]
    order_checks: tuple[OrderChecks, ...] = ()

    @property
    def violations(self) -> tuple[InvariantViolation, ...]:
        found = [
            InvariantViolation(check=name, expected=check.expected, actual=check.actual)
            for name, check in self.checks.items()
            if not check.passed
        ]
        for order_check in self.order_checks:
            for name, check in order_check.as_mapping().items():
                if not check.passed:
                    found.append(
                        InvariantViolation(
                            check=name,
                            expected=check.expected,
                            actual=check.actual,
                            order_id=order_check.order_id,
                        )
                    )
        return tuple(found)

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в {passed, checks: {name: {passed, expected, actual}}}."""
        return {
            "group_id": self.group_id,
            "passed": self.passed,
            "checks": {name: check.to_dict() for name, check in self.checks.items()},
            "orders": {
                order_check.order_id: {
                    name: check.to_dict() for name, check in order_check.as_mapping().items()
                }
                for order_check in self.order_checks
            },
        }


@dataclass(frozen=True)
class BatchValidationSummary:
    """Итог аудита всех групп."""

    total: int
    passed: int
    failed: int
    reports: Dict[str, ValidationReport] = field(default_factory=dict)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class ValidatorConfig:
    """Конфигурация аудита.

    tolerance: допуск групповых сравнений (|a - b| < tolerance)
    """

    tolerance: Decimal = DEFAULT_TOLERANCE


# =============================================================================
# VALIDATOR
# =============================================================================


class InvariantValidator:
    """Аудит инвариантов группы по сохранённым значениям заказов."""

    def __init__(self, config: ValidatorConfig | None = None):
        self.config = config or ValidatorConfig()

    def validate(self, group: Group) -> ValidationReport:
        """Проверка группы.

        Args:
            group: группа со всеми заказами

        Returns:
            ValidationReport; passed — конъюнкция всех проверок
        """
        sum_subtotals = group.sum_subtotals()
        sum_fees = group.sum_shipping_fees()
        sum_totals = group.sum_totals()

        distributable = group.shipping_cost if group.has_weighted_orders() else ZERO

        checks = {
            "shipping_distribution": self._check(expected=distributable, actual=sum_fees),
            "total_calculation": self._check(
                expected=add(sum_subtotals, distributable), actual=sum_totals
            ),
            "paid_unpaid_sum": self._check(
                expected=add(group.sum_paid_totals(), group.sum_unpaid_totals()),
                actual=sum_totals,
            ),
        }
        order_checks = tuple(self._check_order(order) for order in group.orders)

        passed = all(check.passed for check in checks.values()) and all(
            order_check.passed for order_check in order_checks
        )
        report = ValidationReport(
            group_id=group.id,
            passed=passed,
            checks=checks,
            order_checks=order_checks,
        )

        if not passed:
            for violation in report.violations:
                logger.warning(
                    "Invariant violated: group=%s order=%s check=%s expected=%s actual=%s",
                    group.id, violation.order_id, violation.check,
                    violation.expected, violation.actual,
                )
        return report

    def _check(self, expected: Decimal, actual: Decimal) -> InvariantCheck:
        return InvariantCheck(
            passed=equals(expected, actual, self.config.tolerance),
            expected=expected,
            actual=actual,
        )

    def _check_order(self, order: Order) -> OrderChecks:
        items_subtotal = order.items_subtotal()
        expected_total = order.expected_total()
        expected_fee = order.shipping_fee if order.has_weight() else ZERO

        return OrderChecks(
            order_id=order.id,
            subtotal_matches_items=InvariantCheck(
                passed=order.subtotal == items_subtotal,
                expected=items_subtotal,
                actual=order.subtotal,
            ),
            total_matches_parts=InvariantCheck(
                passed=order.total == expected_total,
                expected=expected_total,
                actual=order.total,
            ),
            zero_weight_zero_fee=InvariantCheck(
                passed=order.shipping_fee == expected_fee,
                expected=expected_fee,
                actual=order.shipping_fee,
            ),
        )


def validate_all(
    repository: GroupRepository, validator: InvariantValidator | None = None
) -> BatchValidationSummary:
    """Аудит всех групп хранилища."""
    validator = validator or InvariantValidator()
    reports: Dict[str, ValidationReport] = {}

    for group_id in repository.list_group_ids():
        reports[group_id] = validator.validate(repository.load_group_with_orders(group_id))

    passed = sum(1 for report in reports.values() if report.passed)
    logger.info("Validated %d groups: %d passed, %d failed", len(reports), passed, len(reports) - passed)
    return BatchValidationSummary(
        total=len(reports),
        passed=passed,
        failed=len(reports) - passed,
        reports=reports,
    )
