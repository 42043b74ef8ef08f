"""
DRF serializers for payments app.

This module provides request serializers for:
- Order creation
- Client payment confirmation
- Client failure callback

Responses are built from the service result types' ``to_dict()``.

Related files:
    - services/order_lifecycle.py: OrderLifecycle
    - views.py: Payment API views

Usage:
    serializer = CreateOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
"""

from __future__ import annotations

from rest_framework import serializers


class UserDetailsSerializer(serializers.Serializer):
    """Prefill details shown on the payment prompt. All optional."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    contact = serializers.CharField(required=False, allow_blank=True, max_length=32)
    mobile = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.CharField(required=False, allow_blank=True, max_length=254)


class CreateOrderSerializer(serializers.Serializer):
    """
    Order creation request.

    Request body:
        {
            "user_id": "u1",
            "plan_type": "standard",
            "user_details": {"name": "Asha", "contact": "9999999999"}
        }

    ``plan_type`` is checked against the catalog by the service so that an
    unknown plan reports the available plans.
    """

    user_id = serializers.CharField(max_length=128)
    plan_type = serializers.CharField(max_length=64)
    user_details = UserDetailsSerializer(required=False)


class VerifyPaymentSerializer(serializers.Serializer):
    """
    Payment confirmation as returned by the checkout widget.

    Accepts both our field names and the widget's ``razorpay_*`` names.
    """

    order_id = serializers.CharField(required=False, allow_blank=True)
    payment_id = serializers.CharField(required=False, allow_blank=True)
    signature = serializers.CharField(required=False, allow_blank=True)

    WIDGET_FIELDS = {
        "razorpay_order_id": "order_id",
        "razorpay_payment_id": "payment_id",
        "razorpay_signature": "signature",
    }

    def to_internal_value(self, data):
        if hasattr(data, "items"):
            data = dict(data.items())
            for widget_name, name in self.WIDGET_FIELDS.items():
                if widget_name in data and not data.get(name):
                    data[name] = data[widget_name]
        return super().to_internal_value(data)

    def validate(self, attrs):
        missing = [name for name in ("order_id", "payment_id", "signature") if not attrs.get(name)]
        if missing:
            raise serializers.ValidationError(
                {name: ["This field is required."] for name in missing}
            )
        return attrs


class PaymentFailureSerializer(serializers.Serializer):
    """
    Client-reported payment failure.

    Request body:
        {"order_id": "order_...", "error": {"code": "...", "description": "..."}}
    """

    order_id = serializers.CharField()
    error = serializers.DictField(required=False, allow_null=True)
