"""
Payments app configuration.

This app provides the payment trust boundary:
- Razorpay order creation
- HMAC verification of client confirmations and webhooks
- The created/paid/failed order state machine
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    name = "payments"
    verbose_name = "Payments"
