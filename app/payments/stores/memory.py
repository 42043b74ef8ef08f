"""
In-memory store backend.

Suitable for tests and single-process deployments. Records are immutable,
so handing out the stored instance is safe; the internal mutex only
protects the dictionaries themselves.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from payments.locks import KeyedLock

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from payments.records import Order, Payment


class InMemoryOrderStore:
    """Order store backed by a dict and a per-order ``KeyedLock``."""

    def __init__(self, lock_timeout: float | None = None) -> None:
        self._mutex = threading.Lock()
        self._orders: dict[str, Order] = {}
        self._gateway_index: dict[str, str] = {}
        self._locks = KeyedLock(timeout=lock_timeout)

    def put(self, order: Order) -> None:
        with self._mutex:
            self._orders[order.id] = order
            if order.gateway_order_id:
                self._gateway_index[order.gateway_order_id] = order.id

    def get(self, order_id: str) -> Order | None:
        with self._mutex:
            return self._orders.get(order_id)

    def get_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        with self._mutex:
            order_id = self._gateway_index.get(gateway_order_id)
            return self._orders.get(order_id) if order_id else None

    def lock(self, order_id: str) -> AbstractContextManager:
        return self._locks.hold(order_id)

    def __len__(self) -> int:
        with self._mutex:
            return len(self._orders)


class InMemoryPaymentStore:
    """Payment store backed by a dict plus a per-user index."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._payments: dict[str, Payment] = {}
        self._by_user: dict[str, list[str]] = {}

    def put(self, payment: Payment) -> None:
        with self._mutex:
            if payment.id not in self._payments:
                self._by_user.setdefault(payment.user_id, []).append(payment.id)
            self._payments[payment.id] = payment

    def get(self, payment_id: str) -> Payment | None:
        with self._mutex:
            return self._payments.get(payment_id)

    def list_by_user(self, user_id: str) -> list[Payment]:
        with self._mutex:
            return [self._payments[pid] for pid in self._by_user.get(user_id, [])]

    def __len__(self) -> int:
        with self._mutex:
            return len(self._payments)
