"""
Domain models and value objects.

Contains the group-buying entities: Item, Order, CostPool, Group, Recipient.
"""

from freightsplit.core.domain.group import CostPool, Group
from freightsplit.core.domain.order import Item, Order
from freightsplit.core.domain.recipient import Recipient, allocate

__all__ = [
    # Order model
    "Item",
    "Order",
    # Group model
    "CostPool",
    "Group",
    # Distribution participants
    "Recipient",
    "allocate",
]
