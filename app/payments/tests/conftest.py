"""
Pytest fixtures for payment tests.

Fixtures provide an OrderLifecycle wired to fresh in-memory stores and
throwaway secrets, plus orders in the states the state machine cares
about.

Usage:
    def test_confirm(lifecycle, created_order, sign_confirmation):
        signature = sign_confirmation(created_order.order_id, "pay_1")
        lifecycle.verify_payment(created_order.order_id, "pay_1", signature)
"""

import pytest

from payments.adapters import FakeGateway
from payments.config import PaymentConfig
from payments.services import OrderLifecycle
from payments.signatures import SignatureVerifier
from payments.stores import InMemoryOrderStore, InMemoryPaymentStore

KEY_ID = "rzp_test_1DP5mmOlF5G5ag"
KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"


# =============================================================================
# Configuration and Collaborators
# =============================================================================


@pytest.fixture
def payment_config():
    """PaymentConfig with test secrets and the default catalog."""
    return PaymentConfig(
        key_id=KEY_ID,
        key_secret=KEY_SECRET,
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def verifier(payment_config):
    return SignatureVerifier(
        confirmation_secret=payment_config.key_secret,
        webhook_secret=payment_config.webhook_secret,
    )


@pytest.fixture
def order_store():
    return InMemoryOrderStore(lock_timeout=5.0)


@pytest.fixture
def payment_store():
    return InMemoryPaymentStore()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def lifecycle(payment_config, order_store, payment_store):
    """OrderLifecycle without a gateway: orders are known by their local id."""
    return OrderLifecycle(payment_config, order_store, payment_store)


@pytest.fixture
def gateway_lifecycle(payment_config, order_store, payment_store, fake_gateway):
    """OrderLifecycle that registers orders with the fake gateway."""
    return OrderLifecycle(payment_config, order_store, payment_store, gateway=fake_gateway)


@pytest.fixture
def sign_confirmation(verifier):
    """Sign a confirmation the way the gateway's checkout does."""
    return verifier.sign_confirmation


# =============================================================================
# Order State Fixtures
# =============================================================================


@pytest.fixture
def created_order(lifecycle):
    """Descriptor of a created 'standard' order for user u1."""
    return lifecycle.create_order("u1", "standard", {"name": "Asha", "contact": "9999999999"})


@pytest.fixture
def paid_order(lifecycle, created_order, sign_confirmation):
    """Confirmation of created_order paid with pay_first."""
    signature = sign_confirmation(created_order.order_id, "pay_first")
    return lifecycle.verify_payment(created_order.order_id, "pay_first", signature)


@pytest.fixture
def failed_order(lifecycle, created_order):
    """FailureOutcome of created_order after one failed attempt."""
    return lifecycle.handle_payment_failure(
        created_order.order_id,
        {"code": "BAD_REQUEST_ERROR", "description": "Card declined"},
    )


# =============================================================================
# Redis Fixtures
# =============================================================================


@pytest.fixture
def mock_redis(mocker):
    """
    Mock Redis client for distributed lock tests.

    Returns a MagicMock configured for basic lock operations.
    """
    mock_client = mocker.MagicMock()
    mock_client.set.return_value = True
    mock_client.get.return_value = None
    mock_client.eval.return_value = 1
    return mock_client
