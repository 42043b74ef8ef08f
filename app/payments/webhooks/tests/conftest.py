"""
Pytest fixtures for webhook tests.

Provides a dispatcher over an in-memory OrderLifecycle that registers
orders with the fake gateway, Razorpay-shaped event bodies and a helper
that signs bodies with the webhook secret.
"""

import json

import pytest

from payments.tests.conftest import (  # noqa: F401
    WEBHOOK_SECRET,
    fake_gateway,
    gateway_lifecycle,
    order_store,
    payment_config,
    payment_store,
    verifier,
)
from payments.webhooks import WebhookDispatcher


# =============================================================================
# Dispatcher Fixtures
# =============================================================================


@pytest.fixture
def dispatcher(verifier, gateway_lifecycle):
    return WebhookDispatcher(verifier, gateway_lifecycle)


@pytest.fixture
def gateway_order(gateway_lifecycle):
    """Descriptor of a created order known to the gateway as order_fake_*."""
    return gateway_lifecycle.create_order("u1", "standard", {"name": "Asha"})


@pytest.fixture
def sign_body(verifier):
    """Sign a raw webhook body with the webhook secret."""
    return verifier.sign_webhook


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def payment_event():
    """Build a Razorpay payment.* webhook body (bytes)."""

    def _create(
        event: str = "payment.captured",
        order_id: str = "order_missing",
        payment_id: str = "pay_29QQoUBi66xm2f",
        method: str = "upi",
        **entity_fields,
    ) -> bytes:
        entity = {
            "id": payment_id,
            "entity": "payment",
            "amount": 29900,
            "currency": "INR",
            "status": "failed" if event == "payment.failed" else "captured",
            "order_id": order_id,
            "method": method,
            **entity_fields,
        }
        body = {
            "entity": "event",
            "account_id": "acc_BFQ7uQEaa7j2z7",
            "event": event,
            "contains": ["payment"],
            "payload": {"payment": {"entity": entity}},
            "created_at": 1700000000,
        }
        return json.dumps(body).encode()

    return _create


@pytest.fixture
def order_paid_event():
    """Build a Razorpay order.paid webhook body (bytes)."""

    def _create(order_id: str, payment_id: str = "pay_29QQoUBi66xm2f") -> bytes:
        body = {
            "entity": "event",
            "event": "order.paid",
            "contains": ["payment", "order"],
            "payload": {
                "payment": {
                    "entity": {"id": payment_id, "order_id": order_id, "method": "card"},
                },
                "order": {
                    "entity": {"id": order_id, "status": "paid", "amount_paid": 29900},
                },
            },
        }
        return json.dumps(body).encode()

    return _create


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET
