"""
DRF views for payments app.

This module provides API views for:
- Order creation
- Client payment confirmation and failure callback
- Order status and payment history
- Plan catalog

Related files:
    - services/order_lifecycle.py: OrderLifecycle
    - serializers.py: Request serializers
    - webhooks/views.py: Razorpay webhook endpoint
    - urls.py: URL routing

Endpoints:
    GET  /api/v1/payments/plans/ - List purchasable plans
    POST /api/v1/payments/orders/ - Create an order
    GET  /api/v1/payments/orders/<order_id>/ - Order status
    POST /api/v1/payments/confirm/ - Verify a signed payment confirmation
    POST /api/v1/payments/failure/ - Record a failed payment attempt
    GET  /api/v1/payments/users/<user_id>/payments/ - Payment history
    POST /api/v1/payments/webhooks/razorpay/ - Razorpay webhook endpoint

Security:
    - User identity is supplied by the calling application
    - Payment confirmations are trusted only after HMAC verification
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

from payments.exceptions import (
    InvalidWebhookSignatureError,
    PaymentError,
    SignatureError,
    is_retryable,
)
from payments.serializers import (
    CreateOrderSerializer,
    PaymentFailureSerializer,
    VerifyPaymentSerializer,
)
from payments.services import build_order_lifecycle
from payments.webhooks.views import razorpay_webhook

logger = logging.getLogger(__name__)


def status_for_error(error: PaymentError) -> int:
    """Map a payment error to its HTTP status code."""
    if is_retryable(error):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(error, InvalidWebhookSignatureError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, (ValidationError, SignatureError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, ExternalServiceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(error: PaymentError) -> Response:
    response_status = status_for_error(error)
    log = logger.warning if response_status < 500 else logger.error
    log(
        f"Payment request failed: {error.error_code}",
        extra={"error_code": error.error_code, "status": response_status},
    )
    return Response({"success": False, **error.to_dict()}, status=response_status)


class PaymentAPIView(APIView):
    """Base view: no DRF authentication, payment errors mapped to responses."""

    authentication_classes: list = []
    permission_classes = [AllowAny]

    def get_lifecycle(self):
        return build_order_lifecycle()

    def handle_exception(self, exc):
        if isinstance(exc, PaymentError):
            return error_response(exc)
        return super().handle_exception(exc)


class PlanListView(PaymentAPIView):
    """
    List purchasable plans.

    GET /api/v1/payments/plans/
    """

    def get(self, request):
        plans = self.get_lifecycle().list_plans()
        return Response({"success": True, "plans": [plan.to_dict() for plan in plans]})


class CreateOrderView(PaymentAPIView):
    """
    Create an order for a plan.

    POST /api/v1/payments/orders/

    Request body:
        {"user_id": "u1", "plan_type": "standard", "user_details": {...}}

    Returns:
        201 with the checkout descriptor
    """

    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        descriptor = self.get_lifecycle().create_order(
            data["user_id"],
            data["plan_type"],
            data.get("user_details"),
        )
        return Response(
            {"success": True, "order": descriptor.to_dict()},
            status=status.HTTP_201_CREATED,
        )


class OrderStatusView(PaymentAPIView):
    """
    Order status with its payment.

    GET /api/v1/payments/orders/<order_id>/
    """

    def get(self, request, order_id):
        snapshot = self.get_lifecycle().get_status(order_id)
        if snapshot is None:
            return Response(
                {"success": False, "error": "Order not found", "error_code": "ORDER_NOT_FOUND"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"success": True, **snapshot.to_dict()})


class VerifyPaymentView(PaymentAPIView):
    """
    Verify the signed confirmation returned by the checkout widget.

    POST /api/v1/payments/confirm/

    Request body:
        {"order_id": "...", "payment_id": "...", "signature": "..."}

    Returns:
        200 with the payment and order; a repeated confirmation returns
        the same body
    """

    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        confirmation = self.get_lifecycle().verify_payment(
            data["order_id"],
            data["payment_id"],
            data["signature"],
        )
        return Response(
            {
                "success": True,
                "message": "Payment verified successfully",
                **confirmation.to_dict(),
            }
        )


class PaymentFailureView(PaymentAPIView):
    """
    Record a failed attempt reported by the client.

    POST /api/v1/payments/failure/
    """

    def post(self, request):
        serializer = PaymentFailureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = self.get_lifecycle().handle_payment_failure(data["order_id"], data.get("error"))
        return Response({"success": outcome.applied, **outcome.to_dict()})


class PaymentHistoryView(PaymentAPIView):
    """
    A user's payments, most recent first.

    GET /api/v1/payments/users/<user_id>/payments/
    """

    def get(self, request, user_id):
        history = self.get_lifecycle().get_history(user_id)
        return Response({"success": True, "payments": [entry.to_dict() for entry in history]})


__all__ = [
    "CreateOrderView",
    "OrderStatusView",
    "PaymentFailureView",
    "PaymentHistoryView",
    "PlanListView",
    "VerifyPaymentView",
    "razorpay_webhook",
    "status_for_error",
]
