"""Cascade — пересчёт заказов группы после любых изменений позиций или доставки.

- Пересчёт subtotal из позиций
- Пропорциональное распределение доставки по весу по всем заказам группы
- Обновление total каждого заказа
"""

from .recalculation import (
    BatchRecalculationSummary,
    CascadeConfig,
    CascadeResult,
    CascadeStage,
    ShippingRecalculator,
    recompute_group,
)

__all__ = [
    "ShippingRecalculator",
    "CascadeConfig",
    "CascadeResult",
    "CascadeStage",
    "BatchRecalculationSummary",
    "recompute_group",
]
