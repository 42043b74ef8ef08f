"""
Protocol definitions for order and payment stores.

Concurrency contract every backend must honour:

- ``put`` and ``get`` are atomic per record: a reader observes either the
  previous record or the new one, never a partially written record.
- ``OrderStore.lock(order_id)`` gives mutual exclusion scoped to one order
  id. Unrelated orders never contend.
- No method performs network calls other than the backend's own access.
- Absence is a normal result (None or an empty list), not an exception.
  Backend outages raise ``StoreUnavailableError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from payments.records import Order, Payment


@runtime_checkable
class OrderStore(Protocol):
    """
    Keyed store of Order records, the source of truth for order lifecycle.

    Example:
        with store.lock(order_id):
            order = store.get(order_id)
            store.put(replace(order, status=OrderStatus.PAID))
    """

    def put(self, order: Order) -> None:
        """Insert or replace the order, indexing its gateway order id if set."""
        ...

    def get(self, order_id: str) -> Order | None:
        """Return the order with this local id, or None."""
        ...

    def get_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        """Return the order the gateway knows by this id, or None."""
        ...

    def lock(self, order_id: str) -> AbstractContextManager:
        """Context manager holding the per-order lock."""
        ...


@runtime_checkable
class PaymentStore(Protocol):
    """
    Keyed store of Payment records, indexed by payment id and owning user.
    """

    def put(self, payment: Payment) -> None:
        """Insert or replace the payment."""
        ...

    def get(self, payment_id: str) -> Payment | None:
        """Return the payment with this gateway payment id, or None."""
        ...

    def list_by_user(self, user_id: str) -> list[Payment]:
        """Return the user's payments in insertion order."""
        ...


__all__ = [
    "OrderStore",
    "PaymentStore",
]
