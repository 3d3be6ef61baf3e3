"""Persistence collaborator: интерфейс, хранилище в памяти, блокировки групп."""

from .locking import GroupLockRegistry
from .memory import InMemoryGroupRepository
from .repository import GroupNotFound, GroupRepository, OrderNotFound

__all__ = [
    "GroupRepository",
    "GroupNotFound",
    "OrderNotFound",
    "InMemoryGroupRepository",
    "GroupLockRegistry",
]
