"""
Webhook endpoint view for Razorpay.

The view hands the request body to the WebhookDispatcher exactly as
received; re-serialising the JSON would break the signature.

Responses:
    - 200: Event processed, or ignored as an unknown event type
    - 202: Event authenticated but references an order we do not know
    - 400: Malformed payload
    - 401: Missing or invalid signature
    - 409: Event conflicts with the order's state
    - 503: Transient failure; the gateway should retry

Usage:
    # In urls.py
    from payments.webhooks.views import razorpay_webhook

    urlpatterns = [
        path("webhooks/razorpay/", razorpay_webhook, name="razorpay_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.exceptions import (
    InvalidWebhookSignatureError,
    MalformedWebhookPayloadError,
    PaymentError,
    PaymentNotFoundError,
    is_retryable,
)
from payments.services import build_order_lifecycle
from payments.webhooks.dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Razorpay-Signature"


def get_dispatcher() -> WebhookDispatcher:
    lifecycle = build_order_lifecycle()
    return WebhookDispatcher(lifecycle.verifier, lifecycle)


@csrf_exempt
@require_POST
def razorpay_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive and process a Razorpay webhook event.

    Security:
    - HMAC-SHA256 of the raw body with the webhook secret
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - Redeliveries of a processed event find the order already paid
      with the same payment id and change nothing
    """
    signature = request.headers.get(SIGNATURE_HEADER, "")

    try:
        result = get_dispatcher().handle(request.body, signature)
    except InvalidWebhookSignatureError as e:
        return JsonResponse({"success": False, **e.to_dict()}, status=401)
    except MalformedWebhookPayloadError as e:
        logger.warning("Malformed webhook payload", extra={"error": e.message})
        return JsonResponse({"success": False, **e.to_dict()}, status=400)
    except PaymentNotFoundError as e:
        # Redelivery cannot make an unknown order appear
        logger.warning("Webhook references unknown order", extra={"details": e.details})
        return JsonResponse({"success": False, **e.to_dict()}, status=202)
    except PaymentError as e:
        status = 503 if is_retryable(e) else 409
        logger.error(
            f"Webhook processing failed: {e.error_code}",
            extra={"error_code": e.error_code, "status": status},
        )
        return JsonResponse({"success": False, **e.to_dict()}, status=status)

    return JsonResponse(result.to_response(), status=200)
