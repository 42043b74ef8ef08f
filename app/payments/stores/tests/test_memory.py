"""
Tests for the in-memory store backend.
"""

from dataclasses import replace

from payments.state_machines import OrderStatus
from payments.stores import InMemoryOrderStore, InMemoryPaymentStore, OrderStore, PaymentStore
from payments.tests.factories import OrderFactory, PaymentFactory


class TestInMemoryOrderStore:
    """Tests for InMemoryOrderStore."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryOrderStore(), OrderStore)

    def test_put_and_get(self):
        store = InMemoryOrderStore()
        order = OrderFactory()

        store.put(order)

        assert store.get(order.id) is order
        assert store.get("order_missing") is None

    def test_put_replaces(self):
        store = InMemoryOrderStore()
        order = OrderFactory()
        store.put(order)

        store.put(replace(order, status=OrderStatus.FAILED, attempts=1))

        assert store.get(order.id).status == OrderStatus.FAILED
        assert len(store) == 1

    def test_gateway_index(self):
        """Orders should be found by the gateway's id once it is set."""
        store = InMemoryOrderStore()
        order = OrderFactory(gateway_order_id="order_Rzp123")

        store.put(order)

        assert store.get_by_gateway_order_id("order_Rzp123") == order
        assert store.get_by_gateway_order_id("order_Other") is None

    def test_local_orders_not_in_gateway_index(self):
        store = InMemoryOrderStore()
        order = OrderFactory()

        store.put(order)

        assert store.get_by_gateway_order_id(order.id) is None


class TestInMemoryPaymentStore:
    """Tests for InMemoryPaymentStore."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryPaymentStore(), PaymentStore)

    def test_list_by_user_in_insertion_order(self):
        store = InMemoryPaymentStore()
        first = PaymentFactory(user_id="u1")
        second = PaymentFactory(user_id="u1")
        other = PaymentFactory(user_id="u2")

        for payment in (first, second, other):
            store.put(payment)

        assert store.list_by_user("u1") == [first, second]
        assert store.list_by_user("u2") == [other]
        assert store.list_by_user("nobody") == []

    def test_rewrite_does_not_duplicate_index(self):
        """Putting the same payment id twice should list it once."""
        store = InMemoryPaymentStore()
        payment = PaymentFactory(user_id="u1")

        store.put(payment)
        store.put(replace(payment, method="upi"))

        assert len(store.list_by_user("u1")) == 1
        assert store.get(payment.id).method == "upi"
        assert len(store) == 1
