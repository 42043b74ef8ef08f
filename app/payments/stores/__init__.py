"""
Order and payment stores.

The payment core depends only on the ``OrderStore`` / ``PaymentStore``
protocols; backends are injected. Two backends ship with the app:

- memory: dicts guarded by locks, per-order ``KeyedLock`` (single process)
- redis: JSON records in Redis, per-order ``DistributedLock``

Usage:
    from payments.stores import get_order_store, get_payment_store

    lifecycle = OrderLifecycle(config, get_order_store(), get_payment_store())
"""

from payments.stores.base import OrderStore, PaymentStore
from payments.stores.factory import (
    get_order_store,
    get_payment_store,
    get_store_backend,
    reset_memory_stores,
)
from payments.stores.memory import InMemoryOrderStore, InMemoryPaymentStore
from payments.stores.redis_backend import RedisOrderStore, RedisPaymentStore

__all__ = [
    "InMemoryOrderStore",
    "InMemoryPaymentStore",
    "OrderStore",
    "PaymentStore",
    "RedisOrderStore",
    "RedisPaymentStore",
    "get_order_store",
    "get_payment_store",
    "get_store_backend",
    "reset_memory_stores",
]
