"""
Tests for the Redis store backend.

The redis client is a MagicMock; these tests pin the key layout and the
commands issued, and the translation of Redis failures.
"""

import json

import pytest

from payments.exceptions import StoreUnavailableError
from payments.locks import DistributedLock
from payments.stores import RedisOrderStore, RedisPaymentStore
from payments.tests.factories import OrderFactory, PaymentFactory


class TestRedisOrderStore:
    """Tests for RedisOrderStore."""

    def test_put_writes_record_and_gateway_index(self, redis_client):
        """Both keys should be written in one transaction."""
        store = RedisOrderStore(redis_client)
        order = OrderFactory(gateway_order_id="order_Rzp123")

        store.put(order)

        redis_client.pipeline.assert_called_once_with(transaction=True)
        pipe = redis_client.pipeline.return_value
        keys = [call.args[0] for call in pipe.set.call_args_list]
        assert keys == [f"payments:order:{order.id}", "payments:order:gateway:order_Rzp123"]
        assert json.loads(pipe.set.call_args_list[0].args[1]) == order.to_dict()
        pipe.execute.assert_called_once()

    def test_put_without_gateway_id(self, redis_client):
        store = RedisOrderStore(redis_client)

        store.put(OrderFactory())

        assert redis_client.pipeline.return_value.set.call_count == 1

    def test_get_decodes_record(self, redis_client):
        order = OrderFactory(gateway_order_id="order_Rzp123")
        redis_client.get.return_value = json.dumps(order.to_dict()).encode()

        assert RedisOrderStore(redis_client).get(order.id) == order
        redis_client.get.assert_called_once_with(f"payments:order:{order.id}")

    def test_get_missing(self, redis_client):
        assert RedisOrderStore(redis_client).get("order_missing") is None

    def test_get_by_gateway_order_id(self, redis_client):
        order = OrderFactory(gateway_order_id="order_Rzp123")
        redis_client.get.side_effect = [
            order.id.encode(),
            json.dumps(order.to_dict()).encode(),
        ]

        found = RedisOrderStore(redis_client).get_by_gateway_order_id("order_Rzp123")

        assert found == order
        assert redis_client.get.call_args_list[0].args == ("payments:order:gateway:order_Rzp123",)

    def test_get_by_unknown_gateway_id(self, redis_client):
        assert RedisOrderStore(redis_client).get_by_gateway_order_id("order_Other") is None

    def test_lock_is_distributed(self, redis_client):
        store = RedisOrderStore(redis_client, lock_ttl=12, lock_timeout=1.5)

        lock = store.lock("order_1")

        assert isinstance(lock, DistributedLock)
        assert lock.key == "lock:order:order_1"
        assert lock.ttl == 12
        assert lock.timeout == 1.5

    def test_redis_failure_is_store_unavailable(self, redis_down):
        store = RedisOrderStore(redis_down)

        with pytest.raises(StoreUnavailableError) as exc_info:
            store.get("order_1")

        assert exc_info.value.is_retryable is True

        with pytest.raises(StoreUnavailableError):
            store.put(OrderFactory())


class TestRedisPaymentStore:
    """Tests for RedisPaymentStore."""

    def test_first_put_indexes_user(self, redis_client):
        """A new payment id is appended to its user's list."""
        payment = PaymentFactory(user_id="u1")

        RedisPaymentStore(redis_client).put(payment)

        args, kwargs = redis_client.set.call_args
        assert args[0] == f"payments:payment:{payment.id}"
        assert kwargs == {"nx": True}
        redis_client.rpush.assert_called_once_with("payments:user:u1:payments", payment.id)

    def test_rewrite_does_not_reindex(self, redis_client):
        redis_client.set.side_effect = [None, True]
        payment = PaymentFactory(user_id="u1")

        RedisPaymentStore(redis_client).put(payment)

        assert redis_client.set.call_count == 2
        redis_client.rpush.assert_not_called()

    def test_get(self, redis_client):
        payment = PaymentFactory(method="card")
        redis_client.get.return_value = json.dumps(payment.to_dict())

        assert RedisPaymentStore(redis_client).get(payment.id) == payment

    def test_list_by_user(self, redis_client):
        first = PaymentFactory(user_id="u1")
        second = PaymentFactory(user_id="u1")
        redis_client.lrange.return_value = [first.id.encode(), second.id.encode()]
        redis_client.mget.return_value = [
            json.dumps(first.to_dict()).encode(),
            json.dumps(second.to_dict()).encode(),
        ]

        payments = RedisPaymentStore(redis_client).list_by_user("u1")

        assert payments == [first, second]
        redis_client.mget.assert_called_once_with(
            [f"payments:payment:{first.id}", f"payments:payment:{second.id}"]
        )

    def test_list_by_user_empty(self, redis_client):
        assert RedisPaymentStore(redis_client).list_by_user("nobody") == []
        redis_client.mget.assert_not_called()

    def test_redis_failure_is_store_unavailable(self, redis_down):
        with pytest.raises(StoreUnavailableError):
            RedisPaymentStore(redis_down).list_by_user("u1")
