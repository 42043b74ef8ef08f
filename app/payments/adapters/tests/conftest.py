"""
Pytest fixtures for Razorpay adapter tests.

This module provides a mock Razorpay client, order responses and the SDK
and transport errors the adapter translates.

Sections:
    - Mock Razorpay Client Fixtures
    - Error Fixtures
"""

import pytest
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError

from payments.adapters import RazorpayGateway


# =============================================================================
# Mock Razorpay Client Fixtures
# =============================================================================


@pytest.fixture
def razorpay_order():
    """Create a Razorpay order response as returned by client.order.create."""

    def _create(
        id: str = "order_IluGWxBm9U8zJ8",
        amount: int = 29900,
        currency: str = "INR",
        receipt: str = "order_1700000000000_0123456789abcdef0123",
        notes: dict | None = None,
    ) -> dict:
        return {
            "id": id,
            "entity": "order",
            "amount": amount,
            "amount_paid": 0,
            "amount_due": amount,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
            "attempts": 0,
            "notes": notes or {},
        }

    return _create


@pytest.fixture
def mock_client(mocker, razorpay_order):
    """MagicMock standing in for razorpay.Client."""
    client = mocker.MagicMock()
    client.order.create.return_value = razorpay_order()
    return client


@pytest.fixture
def gateway(mock_client):
    """RazorpayGateway wired to the mock client."""
    return RazorpayGateway("rzp_test_key", "rzp_test_secret", timeout=7, client=mock_client)


# =============================================================================
# Error Fixtures
# =============================================================================


@pytest.fixture(
    params=[
        ServerError("Internal server error"),
        GatewayError("Gateway timed out"),
        requests.exceptions.Timeout("read timed out"),
        requests.exceptions.ConnectionError("connection refused"),
    ],
    ids=["server-error", "gateway-error", "timeout", "connection-error"],
)
def transient_error(request):
    """Errors after which a retry may succeed."""
    return request.param


@pytest.fixture
def bad_request_error():
    return BadRequestError("The amount must be atleast INR 1.00")
