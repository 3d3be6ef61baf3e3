"""
freightsplit — распределение общей доставки группы по заказам пропорционально весу.

Слои:
- freightsplit.core.math:     Money и пропорциональное распределение
- freightsplit.core.domain:   Item, Order, CostPool, Group, Recipient
- freightsplit.cascade:       каскад пересчёта subtotal / доставки / total
- freightsplit.audit:         аудит инвариантов
- freightsplit.persistence:   контракт слоя хранения, хранилище в памяти, блокировки
"""

__version__ = "0.1.0"
