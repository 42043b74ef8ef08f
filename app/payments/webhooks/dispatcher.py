"""
Authenticated dispatch of Razorpay webhook events.

The dispatcher verifies the HMAC signature over the raw request body,
parses the envelope and routes it to a registered handler. Handlers only
translate the event into an OrderLifecycle call, so webhook and client
confirmation paths share the same idempotent transitions.

The handler registry allows:
- Clean separation between event routing and handling
- Easy extension for new event types

Usage:
    from payments.webhooks.dispatcher import WebhookDispatcher, register_handler

    # Register a custom handler
    @register_handler("refund.processed")
    def handle_refund(lifecycle: OrderLifecycle, event: WebhookEvent) -> WebhookOutcome:
        ...

    dispatcher = WebhookDispatcher(verifier, lifecycle)
    result = dispatcher.handle(request.body, request.headers.get("X-Razorpay-Signature"))
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from core.services import BaseService, ServiceResult

from payments.exceptions import (
    InvalidWebhookSignatureError,
    MalformedWebhookPayloadError,
)

if TYPE_CHECKING:
    from payments.services import OrderLifecycle
    from payments.signatures import SignatureVerifier


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookEvent:
    """A parsed, authenticated webhook envelope."""

    event_type: str
    payload: dict[str, Any]
    raw: dict[str, Any] = field(repr=False, default_factory=dict)

    def entity(self, name: str) -> dict[str, Any]:
        """
        Return ``payload.<name>.entity`` or an empty dict.

        Raises:
            MalformedWebhookPayloadError: The section exists but is not an object
        """
        section = self.payload.get(name) or {}
        if not isinstance(section, dict):
            raise MalformedWebhookPayloadError(
                f"Webhook payload section '{name}' is not an object",
                details={"event_type": self.event_type},
            )
        entity = section.get("entity") or {}
        if not isinstance(entity, dict):
            raise MalformedWebhookPayloadError(
                f"Webhook entity '{name}' is not an object",
                details={"event_type": self.event_type},
            )
        return entity


@dataclass(frozen=True)
class WebhookOutcome:
    """What a webhook did to the order it referenced."""

    event_type: str
    handled: bool
    order_id: str | None = None
    payment_id: str | None = None
    status: str | None = None
    applied: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event_type,
            "handled": self.handled,
            "order_id": self.order_id,
            "payment_id": self.payment_id,
            "status": self.status,
            "applied": self.applied,
        }


# =============================================================================
# Handler Registry
# =============================================================================


WebhookHandler = Callable[["OrderLifecycle", WebhookEvent], WebhookOutcome]

# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, WebhookHandler] = {}


def register_handler(event_type: str) -> Callable[[WebhookHandler], WebhookHandler]:
    """
    Decorator to register a webhook event handler.

    Args:
        event_type: The Razorpay event name (e.g., "payment.captured")
    """

    def decorator(func: WebhookHandler) -> WebhookHandler:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def _require(value: Any, name: str, event: WebhookEvent) -> str:
    if not value or not isinstance(value, str):
        logger.warning(
            f"{event.event_type}: missing {name}",
            extra={"event_type": event.event_type},
        )
        raise MalformedWebhookPayloadError(
            f"Webhook {event.event_type} is missing {name}",
            details={"event_type": event.event_type, "missing_fields": [name]},
        )
    return value


# =============================================================================
# Payment Handlers
# =============================================================================


@register_handler("payment.captured")
def handle_payment_captured(lifecycle: OrderLifecycle, event: WebhookEvent) -> WebhookOutcome:
    """Mark the referenced order paid with the captured payment."""
    payment = event.entity("payment")
    order_id = _require(payment.get("order_id"), "order_id", event)
    payment_id = _require(payment.get("id"), "payment id", event)

    confirmation = lifecycle.record_gateway_payment(order_id, payment_id, method=payment.get("method"))
    return WebhookOutcome(
        event_type=event.event_type,
        handled=True,
        order_id=confirmation.order.id,
        payment_id=payment_id,
        status=str(confirmation.order.status),
        applied=confirmation.created,
    )


@register_handler("order.paid")
def handle_order_paid(lifecycle: OrderLifecycle, event: WebhookEvent) -> WebhookOutcome:
    """Mark the order paid; the order entity id wins over the payment's order_id."""
    order = event.entity("order")
    payment = event.entity("payment")
    order_id = _require(order.get("id") or payment.get("order_id"), "order_id", event)
    payment_id = _require(payment.get("id"), "payment id", event)

    confirmation = lifecycle.record_gateway_payment(order_id, payment_id, method=payment.get("method"))
    return WebhookOutcome(
        event_type=event.event_type,
        handled=True,
        order_id=confirmation.order.id,
        payment_id=payment_id,
        status=str(confirmation.order.status),
        applied=confirmation.created,
    )


@register_handler("payment.failed")
def handle_payment_failed(lifecycle: OrderLifecycle, event: WebhookEvent) -> WebhookOutcome:
    """Record a failed attempt; ignored by the lifecycle if the order is paid."""
    payment = event.entity("payment")
    order_id = _require(payment.get("order_id"), "order_id", event)

    error = {
        "code": payment.get("error_code"),
        "description": payment.get("error_description"),
        "source": payment.get("error_source"),
        "step": payment.get("error_step"),
        "reason": payment.get("error_reason"),
    }
    outcome = lifecycle.handle_payment_failure(order_id, error)
    return WebhookOutcome(
        event_type=event.event_type,
        handled=True,
        order_id=outcome.order.id,
        payment_id=payment.get("id"),
        status=str(outcome.order.status),
        applied=outcome.applied,
    )


# =============================================================================
# Dispatcher
# =============================================================================


class WebhookDispatcher(BaseService):
    """
    Verify, parse and route webhook deliveries.

    Args:
        verifier: Holds the webhook secret
        lifecycle: Receives the resulting transitions
        handlers: Registry to dispatch with (defaults to WEBHOOK_HANDLERS)
    """

    def __init__(
        self,
        verifier: SignatureVerifier,
        lifecycle: OrderLifecycle,
        handlers: dict[str, WebhookHandler] | None = None,
    ) -> None:
        self.verifier = verifier
        self.lifecycle = lifecycle
        self.handlers = WEBHOOK_HANDLERS if handlers is None else handlers

    def handle(self, raw_body: bytes | str, signature: str | None) -> ServiceResult[WebhookOutcome]:
        """
        Process one webhook delivery.

        Args:
            raw_body: Request body exactly as received
            signature: Value of the X-Razorpay-Signature header

        Returns:
            ServiceResult wrapping the WebhookOutcome; unknown event types
            succeed with ``handled=False``

        Raises:
            InvalidWebhookSignatureError: Missing or mismatched signature
            MalformedWebhookPayloadError: Body is not a usable event envelope
            PaymentError: Whatever the lifecycle transition raised
        """
        log = self.get_logger()

        if not self.verifier.verify_webhook(raw_body, signature):
            log.warning(
                "Webhook signature verification failed",
                extra={"signature_present": bool(signature)},
            )
            raise InvalidWebhookSignatureError("Invalid webhook signature")

        event = self.parse(raw_body)

        handler = self.handlers.get(event.event_type)
        if handler is None:
            log.info(
                f"No handler registered for event type: {event.event_type}",
                extra={"event_type": event.event_type},
            )
            return ServiceResult.success(WebhookOutcome(event_type=event.event_type, handled=False))

        log.info(
            f"Dispatching {event.event_type} to handler",
            extra={"event_type": event.event_type},
        )
        outcome = handler(self.lifecycle, event)

        log.info(
            "Webhook processed",
            extra={
                "event_type": event.event_type,
                "order_id": outcome.order_id,
                "payment_id": outcome.payment_id,
                "applied": outcome.applied,
            },
        )
        return ServiceResult.success(outcome)

    @staticmethod
    def parse(raw_body: bytes | str) -> WebhookEvent:
        """
        Parse a webhook body into a WebhookEvent.

        Raises:
            MalformedWebhookPayloadError: Invalid JSON, non-object body or
                missing event type
        """
        try:
            data = json.loads(raw_body)
        except (TypeError, ValueError) as e:
            raise MalformedWebhookPayloadError("Webhook body is not valid JSON") from e

        if not isinstance(data, dict):
            raise MalformedWebhookPayloadError("Webhook body must be a JSON object")

        event_type = data.get("event") or data.get("type")
        if not event_type or not isinstance(event_type, str):
            raise MalformedWebhookPayloadError("Webhook body has no event type")

        payload = data.get("payload") or {}
        if not isinstance(payload, dict):
            raise MalformedWebhookPayloadError(
                "Webhook payload must be a JSON object",
                details={"event_type": event_type},
            )

        return WebhookEvent(event_type=event_type, payload=payload, raw=data)
