"""
Payment-specific exceptions for order and payment operations.

Every exception carries ``is_retryable`` so the HTTP layer (and any caller)
can decide between three reactions:

- retry is safe: transient store or gateway unavailability
- retry is useless: bad signature, unknown order, conflicting state
- client must resubmit with corrected input: invalid plan, missing fields

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError
    │   └── OrderNotFoundError - Order lookup failures
    ├── PaymentValidationError
    │   └── InvalidPlanError - Unknown plan identifier
    ├── SignatureError - Keyed-hash authentication failures
    │   ├── InvalidSignatureError - Client payment confirmation rejected
    │   └── InvalidWebhookSignatureError - Webhook body rejected
    ├── WebhookError
    │   └── MalformedWebhookPayloadError - Authentic but unusable body
    ├── StoreUnavailableError - Order/payment store unreachable (transient)
    └── PaymentProcessingError
        └── GatewayError - Base for payment gateway errors (inherits ExternalServiceError)
            ├── GatewayBadRequestError - Rejected request (permanent)
            └── GatewayUnavailableError - Network/5xx/timeout (transient)

    LockAcquisitionError - Per-order lock timeout (inherits ConflictError)
    InvalidStateTransitionError - Transition not allowed (inherits ConflictError)

Usage:
    from payments.exceptions import InvalidSignatureError, OrderNotFoundError

    if not verifier.verify_confirmation(order_id, payment_id, signature):
        raise InvalidSignatureError(
            "Payment signature does not match",
            details={"order_id": order_id, "payment_id": payment_id},
        )

Note:
    Never place secrets or the supplied signature in ``details``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    Example:
        try:
            lifecycle.verify_payment(order_id, payment_id, signature)
        except PaymentError as e:
            logger.error(f"Payment operation failed: {e}")
            return Response(e.to_dict(), status=400)
    """

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError, NotFoundError):
    """Raised when a payment entity cannot be found."""

    default_error_code: str = "PAYMENT_NOT_FOUND"


class OrderNotFoundError(PaymentNotFoundError):
    """
    Raised when an order id (local or gateway) matches no stored order.

    Retrying with the same id is useless.

    Example:
        order = self.find_order(order_id)
        if order is None:
            raise OrderNotFoundError(
                f"Order {order_id} not found",
                details={"order_id": order_id},
            )
    """

    default_error_code: str = "ORDER_NOT_FOUND"


class PaymentValidationError(PaymentError, ValidationError):
    """
    Raised when payment input validation fails.

    Use for:
    - Missing confirmation fields
    - Missing user id
    - Business rule violations on input
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"


class InvalidPlanError(PaymentValidationError):
    """
    Raised when the requested plan is not in the catalog.

    The client must resubmit with one of the catalog's plan ids,
    which are listed in ``details["available_plans"]``.
    """

    default_error_code: str = "INVALID_PLAN"


# =============================================================================
# Authentication Exceptions
# =============================================================================


class SignatureError(PaymentError):
    """Base exception for keyed-hash verification failures."""

    default_error_code: str = "INVALID_SIGNATURE"


class InvalidSignatureError(SignatureError):
    """
    Client-submitted payment confirmation failed HMAC verification.

    Raised before any state is touched; the order keeps its status.
    """

    default_error_code: str = "INVALID_PAYMENT_SIGNATURE"


class InvalidWebhookSignatureError(SignatureError):
    """
    Webhook body failed HMAC verification with the webhook secret.

    The sender should not retry: the same bytes will never verify.
    """

    default_error_code: str = "INVALID_WEBHOOK_SIGNATURE"


# =============================================================================
# Webhook Exceptions
# =============================================================================


class WebhookError(PaymentError):
    """Base exception for webhook processing failures."""

    default_error_code: str = "WEBHOOK_ERROR"


class MalformedWebhookPayloadError(WebhookError):
    """
    Authenticated webhook body that cannot be interpreted.

    Raised for invalid JSON, a missing event type, or a recognised event
    whose payload lacks the order or payment identifiers it needs.
    """

    default_error_code: str = "MALFORMED_WEBHOOK_PAYLOAD"


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class StoreUnavailableError(PaymentError):
    """
    The order or payment store could not be reached.

    Transient: the operation did not complete and is safe to retry,
    since every transition is idempotent.
    """

    default_error_code: str = "STORE_UNAVAILABLE"
    is_retryable: bool = True


class PaymentProcessingError(PaymentError):
    """Raised when payment processing with the external gateway fails."""

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"


class GatewayError(PaymentProcessingError, ExternalServiceError):
    """
    Base exception for payment gateway errors.

    Retryable unless a subclass says otherwise: an unexpected gateway
    failure is treated like an outage.

    Attributes:
        gateway_code: Error code reported by the gateway, if any

    Example:
        try:
            remote_id = gateway.create_remote_order(29900, "INR", metadata)
        except GatewayError as e:
            if e.is_retryable:
                schedule_retry()
            else:
                notify_user_permanent_failure(e)
    """

    default_error_code: str = "GATEWAY_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        gateway_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if gateway_code:
            details["gateway_code"] = gateway_code
        super().__init__(message, error_code=error_code, details=details)
        self.gateway_code = gateway_code


class GatewayBadRequestError(GatewayError):
    """
    The gateway rejected the request (bad parameters or credentials).

    Permanent - the same request will never succeed.
    """

    default_error_code: str = "GATEWAY_BAD_REQUEST"
    is_retryable: bool = False


class GatewayUnavailableError(GatewayError):
    """
    The gateway could not be reached or answered with a server error.

    Transient - retry with backoff.
    """

    default_error_code: str = "GATEWAY_UNAVAILABLE"


# =============================================================================
# Concurrency Control Exceptions
# =============================================================================


class LockAcquisitionError(PaymentError, ConflictError):
    """
    Raised when a per-order lock cannot be acquired within its timeout.

    Another request is transitioning the same order. Retrying after a
    short delay will observe its result.

    Example:
        raise LockAcquisitionError(
            "Failed to acquire lock 'lock:order:order_1' within 5.0s",
            details={"key": "lock:order:order_1", "timeout": 5.0},
        )
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"
    is_retryable: bool = True


class InvalidStateTransitionError(PaymentError, ConflictError):
    """
    Raised when an order transition is not allowed.

    The main case is a paid order receiving a second, different payment
    id: an order has at most one payment.

    Attributes:
        details: Contains order_id, current_state and target_state
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


def is_retryable(error: Exception) -> bool:
    """
    Check whether an error is transient.

    Args:
        error: The exception to check

    Returns:
        True if repeating the operation may succeed
    """
    return bool(getattr(error, "is_retryable", False))


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "PaymentNotFoundError",
    "OrderNotFoundError",
    "PaymentValidationError",
    "InvalidPlanError",
    # Authentication
    "SignatureError",
    "InvalidSignatureError",
    "InvalidWebhookSignatureError",
    # Webhooks
    "WebhookError",
    "MalformedWebhookPayloadError",
    # Infrastructure
    "StoreUnavailableError",
    "PaymentProcessingError",
    "GatewayError",
    "GatewayBadRequestError",
    "GatewayUnavailableError",
    # Concurrency control
    "LockAcquisitionError",
    "InvalidStateTransitionError",
    "is_retryable",
]
