"""
Redis store backend.

Key layout:
    payments:order:<order_id>                 JSON Order
    payments:order:gateway:<gateway_order_id> local order id
    payments:payment:<payment_id>             JSON Payment
    payments:user:<user_id>:payments          list of payment ids (insertion order)

Records are written with a single SET each, so readers see whole records.
Per-order mutual exclusion uses ``DistributedLock`` on ``order:<order_id>``.
Redis connection errors are translated to ``StoreUnavailableError``.

Usage:
    from django_redis import get_redis_connection

    client = get_redis_connection("default")
    orders = RedisOrderStore(client, lock_ttl=30, lock_timeout=5.0)
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from payments.exceptions import StoreUnavailableError
from payments.locks import DistributedLock
from payments.records import Order, Payment

if TYPE_CHECKING:
    from collections.abc import Generator

    from redis import Redis


logger = logging.getLogger(__name__)

KEY_PREFIX = "payments"


@contextmanager
def _translate_errors(operation: str, key: str) -> Generator[None, None, None]:
    try:
        yield
    except RedisError as e:
        logger.error(
            f"Redis store operation failed: {type(e).__name__}",
            extra={"operation": operation, "key": key},
        )
        raise StoreUnavailableError(
            "Payment store is temporarily unavailable",
            details={"operation": operation},
        ) from e


def _decode(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisOrderStore:
    """Order store persisted in Redis."""

    def __init__(self, redis: Redis, lock_ttl: int = 30, lock_timeout: float = 5.0) -> None:
        self._redis = redis
        self.lock_ttl = lock_ttl
        self.lock_timeout = lock_timeout

    @staticmethod
    def order_key(order_id: str) -> str:
        return f"{KEY_PREFIX}:order:{order_id}"

    @staticmethod
    def gateway_key(gateway_order_id: str) -> str:
        return f"{KEY_PREFIX}:order:gateway:{gateway_order_id}"

    def put(self, order: Order) -> None:
        key = self.order_key(order.id)
        with _translate_errors("put_order", key):
            pipe = self._redis.pipeline(transaction=True)
            pipe.set(key, json.dumps(order.to_dict()))
            if order.gateway_order_id:
                pipe.set(self.gateway_key(order.gateway_order_id), order.id)
            pipe.execute()

    def get(self, order_id: str) -> Order | None:
        key = self.order_key(order_id)
        with _translate_errors("get_order", key):
            raw = self._redis.get(key)
        if raw is None:
            return None
        return Order.from_dict(json.loads(raw))

    def get_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        key = self.gateway_key(gateway_order_id)
        with _translate_errors("get_order_by_gateway_id", key):
            order_id = _decode(self._redis.get(key))
        if order_id is None:
            return None
        return self.get(order_id)

    def lock(self, order_id: str) -> DistributedLock:
        return DistributedLock(
            f"order:{order_id}",
            redis=self._redis,
            ttl=self.lock_ttl,
            timeout=self.lock_timeout,
        )


class RedisPaymentStore:
    """Payment store persisted in Redis with a per-user id list."""

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    @staticmethod
    def payment_key(payment_id: str) -> str:
        return f"{KEY_PREFIX}:payment:{payment_id}"

    @staticmethod
    def user_key(user_id: str) -> str:
        return f"{KEY_PREFIX}:user:{user_id}:payments"

    def put(self, payment: Payment) -> None:
        key = self.payment_key(payment.id)
        data = json.dumps(payment.to_dict())
        with _translate_errors("put_payment", key):
            # Only the first write indexes the payment under its user
            if self._redis.set(key, data, nx=True):
                self._redis.rpush(self.user_key(payment.user_id), payment.id)
            else:
                self._redis.set(key, data)

    def get(self, payment_id: str) -> Payment | None:
        key = self.payment_key(payment_id)
        with _translate_errors("get_payment", key):
            raw = self._redis.get(key)
        if raw is None:
            return None
        return Payment.from_dict(json.loads(raw))

    def list_by_user(self, user_id: str) -> list[Payment]:
        key = self.user_key(user_id)
        with _translate_errors("list_payments", key):
            payment_ids = [_decode(pid) for pid in self._redis.lrange(key, 0, -1)]
            if not payment_ids:
                return []
            raw_records = self._redis.mget([self.payment_key(pid) for pid in payment_ids])
        return [Payment.from_dict(json.loads(raw)) for raw in raw_records if raw is not None]
