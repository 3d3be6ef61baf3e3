"""
GroupLockRegistry — сериализация пересчётов по группе

Все заказы группы — разделяемое изменяемое состояние: два параллельных
пересчёта одной группы могут перемешать read-modify-write и нарушить
сохранение суммы доставки (lost update).

Движок блокировок не берёт. Реестр принадлежит вызывающему коду, который
держит блокировку группы на время изменения + пересчёта.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


class GroupLockRegistry:
    """Реестр мьютексов, по одному на group_id."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, group_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(group_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[group_id] = lock
            return lock

    @contextmanager
    def hold(self, group_id: str, timeout: Optional[float] = None) -> Iterator[None]:
        """
        Удержание блокировки группы.

        Args:
            group_id: Группа
            timeout: Таймаут ожидания в секундах (None — ждать бесконечно)

        Raises:
            TimeoutError: Если блокировку не удалось получить за timeout
        """
        lock = self.lock_for(group_id)
        acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise TimeoutError(f"Timed out waiting for group lock: {group_id}")
        try:
            yield
        finally:
            lock.release()
