"""
Tests for the payments API views.

Requests go through the URLconf and DRF views with the fake gateway and
the in-memory stores, which are reset between tests.
"""

import pytest
from rest_framework.test import APIClient

from payments.signatures import sign

KEY_SECRET = "view_key_secret"


@pytest.fixture(autouse=True)
def payment_settings(settings):
    settings.RAZORPAY_KEY_ID = "rzp_test_view"
    settings.RAZORPAY_KEY_SECRET = KEY_SECRET
    settings.RAZORPAY_WEBHOOK_SECRET = "view_webhook_secret"
    settings.PAYMENTS_GATEWAY = "fake"
    settings.PAYMENTS_STORE_BACKEND = "memory"
    settings.PAYMENT_PLANS = {}
    return settings


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def created(api_client):
    """Create an order through the API and return the checkout descriptor."""
    response = api_client.post(
        "/api/v1/payments/orders/",
        {"user_id": "u1", "plan_type": "standard", "user_details": {"name": "Asha"}},
        format="json",
    )
    assert response.status_code == 201
    return response.data["order"]


def confirm(api_client, order_id, payment_id, signature=None):
    if signature is None:
        signature = sign(KEY_SECRET, f"{order_id}|{payment_id}")
    return api_client.post(
        "/api/v1/payments/confirm/",
        {"order_id": order_id, "payment_id": payment_id, "signature": signature},
        format="json",
    )


class TestPlanListView:
    def test_lists_plans(self, api_client):
        response = api_client.get("/api/v1/payments/plans/")

        assert response.status_code == 200
        assert [plan["id"] for plan in response.data["plans"]] == ["basic", "standard", "premium", "report"]


class TestCreateOrderView:
    """Tests for POST orders/."""

    def test_creates_order(self, created):
        """The descriptor should use the fake gateway's order id."""
        assert created["id"].startswith("order_fake_")
        assert created["local_order_id"].startswith("order_")
        assert created["amount"] == 29900
        assert created["key"] == "rzp_test_view"
        assert created["prefill"]["name"] == "Asha"

    def test_unknown_plan_is_400(self, api_client):
        response = api_client.post(
            "/api/v1/payments/orders/",
            {"user_id": "u1", "plan_type": "platinum"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "INVALID_PLAN"
        assert response.data["retryable"] is False

    def test_missing_user_is_400(self, api_client):
        response = api_client.post("/api/v1/payments/orders/", {"plan_type": "basic"}, format="json")

        assert response.status_code == 400
        assert "user_id" in response.data

    def test_gateway_outage_is_503(self, api_client, mocker):
        """A transient gateway failure tells the client to retry."""
        from payments.adapters import FakeGateway
        from payments.exceptions import GatewayUnavailableError

        mocker.patch(
            "payments.adapters.FakeGateway",
            return_value=FakeGateway(fail_with=GatewayUnavailableError("down")),
        )

        response = api_client.post(
            "/api/v1/payments/orders/",
            {"user_id": "u1", "plan_type": "basic"},
            format="json",
        )

        assert response.status_code == 503
        assert response.data["retryable"] is True

    def test_gateway_rejection_is_502(self, api_client, mocker):
        """A permanent gateway rejection is reported as a bad gateway, not retried."""
        from payments.adapters import FakeGateway
        from payments.exceptions import GatewayBadRequestError

        mocker.patch(
            "payments.adapters.FakeGateway",
            return_value=FakeGateway(fail_with=GatewayBadRequestError("amount too small")),
        )

        response = api_client.post(
            "/api/v1/payments/orders/",
            {"user_id": "u1", "plan_type": "basic"},
            format="json",
        )

        assert response.status_code == 502
        assert response.data["error_code"] == "GATEWAY_BAD_REQUEST"
        assert response.data["retryable"] is False

    def test_free_form_email_accepted(self, api_client):
        """Prefill details are passed through, not validated."""
        response = api_client.post(
            "/api/v1/payments/orders/",
            {"user_id": "u1", "plan_type": "basic", "user_details": {"name": "Asha", "email": "asha at example"}},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["order"]["prefill"]["email"] == "asha at example"


class TestVerifyPaymentView:
    """Tests for POST confirm/."""

    def test_valid_confirmation(self, api_client, created):
        response = confirm(api_client, created["id"], "pay_1")

        assert response.status_code == 200
        assert response.data["payment"]["id"] == "pay_1"
        assert response.data["order"]["status"] == "paid"

    def test_replay_returns_identical_body(self, api_client, created):
        """A repeated confirmation should return exactly the same response."""
        first = confirm(api_client, created["id"], "pay_1")
        second = confirm(api_client, created["id"], "pay_1")

        assert second.status_code == 200
        assert second.data == first.data

    def test_widget_field_names_accepted(self, api_client, created):
        """The checkout widget's razorpay_* names should work as-is."""
        response = api_client.post(
            "/api/v1/payments/confirm/",
            {
                "razorpay_order_id": created["id"],
                "razorpay_payment_id": "pay_1",
                "razorpay_signature": sign(KEY_SECRET, f"{created['id']}|pay_1"),
            },
            format="json",
        )

        assert response.status_code == 200

    def test_bad_signature_is_400(self, api_client, created):
        response = confirm(api_client, created["id"], "pay_1", signature="f" * 64)

        assert response.status_code == 400
        assert response.data["error_code"] == "INVALID_PAYMENT_SIGNATURE"
        status = api_client.get(f"/api/v1/payments/orders/{created['local_order_id']}/")
        assert status.data["order"]["status"] == "created"

    def test_unknown_order_is_404(self, api_client):
        response = confirm(api_client, "order_missing", "pay_1")

        assert response.status_code == 404
        assert response.data["error_code"] == "ORDER_NOT_FOUND"

    def test_second_payment_is_409(self, api_client, created):
        confirm(api_client, created["id"], "pay_1")

        response = confirm(api_client, created["id"], "pay_2")

        assert response.status_code == 409
        assert response.data["error_code"] == "INVALID_STATE_TRANSITION"

    def test_missing_fields_is_400(self, api_client):
        response = api_client.post("/api/v1/payments/confirm/", {"order_id": "order_1"}, format="json")

        assert response.status_code == 400
        assert set(response.data) == {"payment_id", "signature"}


class TestPaymentFailureView:
    """Tests for POST failure/."""

    def test_records_failure(self, api_client, created):
        response = api_client.post(
            "/api/v1/payments/failure/",
            {"order_id": created["id"], "error": {"code": "BAD_REQUEST_ERROR", "description": "declined"}},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["applied"] is True
        assert response.data["status"] == "failed"

    def test_failure_after_payment_ignored(self, api_client, created):
        confirm(api_client, created["id"], "pay_1")

        response = api_client.post("/api/v1/payments/failure/", {"order_id": created["id"]}, format="json")

        assert response.status_code == 200
        assert response.data["applied"] is False
        assert response.data["status"] == "paid"


class TestStatusAndHistoryViews:
    """Tests for GET orders/<id>/ and users/<id>/payments/."""

    def test_unknown_order_status_is_404(self, api_client):
        response = api_client.get("/api/v1/payments/orders/order_missing/")

        assert response.status_code == 404

    def test_status_by_gateway_id(self, api_client, created):
        response = api_client.get(f"/api/v1/payments/orders/{created['id']}/")

        assert response.status_code == 200
        assert response.data["order"]["id"] == created["local_order_id"]
        assert response.data["order"]["gateway_order_id"] == created["id"]

    def test_history(self, api_client, created):
        confirm(api_client, created["id"], "pay_1")

        response = api_client.get("/api/v1/payments/users/u1/payments/")

        assert response.status_code == 200
        assert [entry["id"] for entry in response.data["payments"]] == ["pay_1"]
        assert response.data["payments"][0]["plan_name"] == "Standard Plan"
