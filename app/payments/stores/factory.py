"""
Factory functions for store backend selection.

The backend is chosen by the ``PAYMENTS_STORE_BACKEND`` setting:

- ``"memory"`` (default): process-local stores. Order and payment stores
  are module singletons so every request in the process shares them.
- ``"redis"``: stores on the django-redis "default" connection.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

if TYPE_CHECKING:
    from payments.stores.base import OrderStore, PaymentStore


_memory_lock = threading.Lock()
_memory_stores: dict[str, object] = {}

BACKENDS = ("memory", "redis")


def get_store_backend() -> str:
    """Return the configured backend name, validating it."""
    backend = getattr(settings, "PAYMENTS_STORE_BACKEND", "memory")
    if backend not in BACKENDS:
        raise ImproperlyConfigured(
            f"PAYMENTS_STORE_BACKEND must be one of {BACKENDS}, got {backend!r}"
        )
    return backend


def _memory_store(name: str, factory) -> object:
    with _memory_lock:
        if name not in _memory_stores:
            _memory_stores[name] = factory()
        return _memory_stores[name]


def reset_memory_stores() -> None:
    """Drop the process-local stores (used between tests)."""
    with _memory_lock:
        _memory_stores.clear()


def get_order_store() -> OrderStore:
    """
    Get the order store for the configured backend.

    Usage:
        store = get_order_store()
        order = store.get(order_id)
    """
    timeout = getattr(settings, "PAYMENTS_LOCK_TIMEOUT_SECONDS", 5.0)

    if get_store_backend() == "redis":
        from django_redis import get_redis_connection

        from payments.stores.redis_backend import RedisOrderStore

        return RedisOrderStore(
            get_redis_connection("default"),
            lock_ttl=getattr(settings, "PAYMENTS_LOCK_TTL_SECONDS", 30),
            lock_timeout=timeout,
        )

    from payments.stores.memory import InMemoryOrderStore

    return _memory_store("orders", lambda: InMemoryOrderStore(lock_timeout=timeout))


def get_payment_store() -> PaymentStore:
    """Get the payment store for the configured backend."""
    if get_store_backend() == "redis":
        from django_redis import get_redis_connection

        from payments.stores.redis_backend import RedisPaymentStore

        return RedisPaymentStore(get_redis_connection("default"))

    from payments.stores.memory import InMemoryPaymentStore

    return _memory_store("payments", InMemoryPaymentStore)
