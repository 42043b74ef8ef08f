"""
Webhook handling for payment events from Razorpay.

Webhooks are authenticated by an HMAC-SHA256 signature over the raw body,
then routed through a handler registry into the OrderLifecycle, so they
share the idempotent transitions used by client confirmations.

Usage:
    # In urls.py
    from payments.webhooks.views import razorpay_webhook

    urlpatterns = [
        path("webhooks/razorpay/", razorpay_webhook, name="razorpay_webhook"),
    ]
"""

from payments.webhooks.dispatcher import (
    WEBHOOK_HANDLERS,
    WebhookDispatcher,
    WebhookEvent,
    WebhookOutcome,
    register_handler,
)

__all__ = [
    "WEBHOOK_HANDLERS",
    "WebhookDispatcher",
    "WebhookEvent",
    "WebhookOutcome",
    "register_handler",
]
