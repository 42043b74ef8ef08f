"""
Order lifecycle service: order creation, payment verification and the
order state machine.

This is the single place where Order and Payment records change. Both
trust paths end up here:

- the client submits a signed payment confirmation (``verify_payment``)
- the gateway pushes an authenticated webhook (``record_gateway_payment``,
  ``handle_payment_failure``)

so the two paths converge on the same idempotent transitions.

State Machine:
    created → paid      verified confirmation or capture webhook
    created → failed    client failure callback or payment.failed webhook
    failed  → failed    another failed attempt
    failed  → paid      late capture (failure was only client-reported)
    paid    → *         refused; failure events are logged and discarded

Concurrency:
    Every transition runs under ``OrderStore.lock(order_id)`` and re-reads
    the order inside the lock. Concurrent confirmations and webhooks for
    one order therefore produce exactly one paid transition; the others
    see ``payment_id`` already set and return the stored Payment. The
    gateway network call in ``create_order`` happens before any lock is
    taken.

Usage:
    from payments.services import build_order_lifecycle

    lifecycle = build_order_lifecycle()
    descriptor = lifecycle.create_order("u1", "standard", {"name": "Asha"})
    confirmation = lifecycle.verify_payment(order_id, payment_id, signature)
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from django.utils import timezone

from core.services import BaseService

from payments.exceptions import (
    InvalidPlanError,
    InvalidSignatureError,
    InvalidStateTransitionError,
    OrderNotFoundError,
    PaymentValidationError,
)
from payments.records import Order, Payment, UserDetails
from payments.signatures import SignatureVerifier
from payments.state_machines import (
    OrderStatus,
    PaymentSource,
    PaymentStatus,
    can_transition,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime
    from typing import Any

    from payments.adapters.base import PaymentGateway
    from payments.catalog import Plan
    from payments.config import PaymentConfig
    from payments.stores.base import OrderStore, PaymentStore


logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    """
    Generate a fresh local order id.

    Format: ``order_<unix-ms>_<20 hex chars>``. The random part carries
    80 bits from ``secrets``, so collisions are negligible even across
    processes generating ids in the same millisecond.
    """
    return f"order_{time.time_ns() // 1_000_000}_{secrets.token_hex(10)}"


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class OrderDescriptor:
    """
    Everything the client needs to render the gateway's payment prompt.

    ``order_id`` is the id the gateway knows the order by (the remote
    order id when one was created); ``local_order_id`` is ours.
    """

    order_id: str
    local_order_id: str
    amount_minor_units: int
    currency: str
    key_id: str
    merchant_name: str
    description: str
    image: str
    prefill: UserDetails
    theme_color: str
    plan: Plan

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.order_id,
            "local_order_id": self.local_order_id,
            "amount": self.amount_minor_units,
            "currency": self.currency,
            "key": self.key_id,
            "name": self.merchant_name,
            "description": self.description,
            "image": self.image,
            "prefill": self.prefill.to_dict(),
            "theme": {"color": self.theme_color},
        }


@dataclass(frozen=True)
class PaymentConfirmation:
    """
    Result of a paid transition.

    ``created`` is False when the transition was an idempotent replay;
    ``to_dict`` leaves it out so replays produce identical responses.
    """

    payment: Payment
    order: Order
    created: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "payment": self.payment.to_dict(),
            "order": self.order.to_dict(),
        }


@dataclass(frozen=True)
class FailureOutcome:
    """Result of a failure report; ``applied`` is False for paid orders."""

    order: Order
    applied: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "applied": self.applied,
            "message": self.message,
            "order_id": self.order.id,
            "status": str(self.order.status),
            "error": self.order.failure if self.applied else None,
        }


@dataclass(frozen=True)
class OrderStatusSnapshot:
    """An order together with its payment, if any."""

    order: Order
    payment: Payment | None

    def to_dict(self) -> dict[str, Any]:
        payment = None
        if self.payment is not None:
            payment = {
                "id": self.payment.id,
                "status": str(self.payment.status),
                "method": self.payment.method,
                "verified_at": self.payment.verified_at.isoformat(),
            }
        return {
            "order": {
                "id": self.order.id,
                "gateway_order_id": self.order.gateway_order_id,
                "amount": self.order.amount_minor_units,
                "currency": self.order.currency,
                "status": str(self.order.status),
                "attempts": self.order.attempts,
                "created_at": self.order.created_at.isoformat(),
            },
            "payment": payment,
        }


@dataclass(frozen=True)
class PaymentHistoryEntry:
    """One row of a user's payment history."""

    id: str
    order_id: str
    amount_minor_units: int
    currency: str
    plan_type: str
    plan_name: str
    questions: int
    status: str
    created_at: datetime

    @property
    def amount(self) -> float:
        return self.amount_minor_units / 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "amount": self.amount,
            "amount_minor_units": self.amount_minor_units,
            "currency": self.currency,
            "plan_type": self.plan_type,
            "plan_name": self.plan_name,
            "questions": self.questions,
            "status": str(self.status),
            "created_at": self.created_at.isoformat(),
        }


# =============================================================================
# Order Lifecycle
# =============================================================================


class OrderLifecycle(BaseService):
    """
    Owner of the order/payment state machine.

    Args:
        config: Payment configuration (catalog, currency, secrets)
        orders: Order store
        payments: Payment store
        gateway: Optional gateway; when set, create_order registers the
            order remotely and stores the gateway order id
        verifier: Signature verifier (built from config if omitted)
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        config: PaymentConfig,
        orders: OrderStore,
        payments: PaymentStore,
        gateway: PaymentGateway | None = None,
        verifier: SignatureVerifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.orders = orders
        self.payments = payments
        self.gateway = gateway
        self.verifier = verifier or SignatureVerifier(
            confirmation_secret=config.key_secret,
            webhook_secret=config.webhook_secret,
        )
        self.clock = clock or timezone.now

    # =========================================================================
    # Catalog
    # =========================================================================

    def get_plan(self, plan_type: str) -> Plan | None:
        return self.config.catalog.get(plan_type)

    def list_plans(self) -> list[Plan]:
        return self.config.catalog.all()

    # =========================================================================
    # Order Creation
    # =========================================================================

    def create_order(
        self,
        user_id: str,
        plan_type: str,
        user_details: UserDetails | Mapping[str, Any] | None = None,
    ) -> OrderDescriptor:
        """
        Create an order in ``created`` status for one catalog plan.

        Args:
            user_id: Owning user
            plan_type: Catalog plan id
            user_details: Name/contact/email for the payment prompt

        Returns:
            OrderDescriptor for the checkout widget

        Raises:
            PaymentValidationError: user_id missing
            InvalidPlanError: plan_type not in the catalog
            GatewayError: The gateway refused or could not be reached;
                no order is stored in that case
        """
        missing = self.missing_fields(user_id=user_id)
        if missing:
            raise PaymentValidationError(
                "user_id is required",
                details={"missing_fields": missing},
            )

        plan = self.get_plan(plan_type)
        if plan is None:
            raise InvalidPlanError(
                f"Invalid plan type: {plan_type}",
                details={"plan_type": plan_type, "available_plans": self.config.catalog.ids()},
            )

        details = UserDetails.from_value(user_details)
        order_id = generate_order_id()

        gateway_order_id = None
        if self.gateway is not None:
            gateway_order_id = self.gateway.create_remote_order(
                plan.price_minor_units,
                self.config.currency,
                {
                    "receipt": order_id,
                    "user_id": str(user_id),
                    "plan_type": plan.plan_id,
                    "user_name": details.name,
                    "user_mobile": details.contact,
                },
            )

        order = Order(
            id=order_id,
            user_id=str(user_id),
            plan_type=plan.plan_id,
            amount_minor_units=plan.price_minor_units,
            currency=self.config.currency,
            created_at=self.clock(),
            user_details=details,
            gateway_order_id=gateway_order_id,
        )
        self.orders.put(order)

        logger.info(
            "Payment order created",
            extra={
                "order_id": order.id,
                "gateway_order_id": gateway_order_id,
                "plan_type": plan.plan_id,
                "amount_minor_units": order.amount_minor_units,
                "user_id": order.user_id,
            },
        )

        return OrderDescriptor(
            order_id=order.gateway_reference,
            local_order_id=order.id,
            amount_minor_units=order.amount_minor_units,
            currency=order.currency,
            key_id=self.config.key_id,
            merchant_name=self.config.merchant_name,
            description=plan.description,
            image=self.config.checkout_image,
            prefill=details,
            theme_color=self.config.theme_color,
            plan=plan,
        )

    # =========================================================================
    # Paid Transition
    # =========================================================================

    def find_order(self, order_id: str) -> Order | None:
        """Look an order up by local id, then by gateway order id."""
        if not order_id:
            return None
        return self.orders.get(order_id) or self.orders.get_by_gateway_order_id(order_id)

    def _require_order(self, order_id: str) -> Order:
        order = self.find_order(order_id)
        if order is None:
            logger.warning("Order not found", extra={"order_id": order_id})
            raise OrderNotFoundError(
                f"Order {order_id} not found",
                details={"order_id": order_id},
            )
        return order

    def verify_payment(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> PaymentConfirmation:
        """
        Verify a client-submitted payment confirmation and mark the order paid.

        The signature must be the confirmation-secret HMAC of
        ``"{gateway order id}|{payment_id}"``. Submitting the same valid
        confirmation again returns the stored payment unchanged.

        Raises:
            PaymentValidationError: A field is missing
            OrderNotFoundError: No such order
            InvalidSignatureError: Signature mismatch; the order is untouched
            InvalidStateTransitionError: The order is already paid with a
                different payment id
        """
        missing = self.missing_fields(order_id=order_id, payment_id=payment_id, signature=signature)
        if missing:
            raise PaymentValidationError(
                "Missing payment verification data",
                details={"missing_fields": missing},
            )

        order = self._require_order(order_id)

        if not self.verifier.verify_confirmation(order.gateway_reference, payment_id, signature):
            logger.warning(
                "Payment signature verification failed",
                extra={"order_id": order.id, "payment_id": payment_id},
            )
            raise InvalidSignatureError(
                "Invalid payment signature",
                details={"order_id": order_id, "payment_id": payment_id},
            )

        return self._mark_paid(order.id, payment_id, PaymentSource.CONFIRMATION, method=None)

    def record_gateway_payment(
        self,
        order_id: str,
        payment_id: str,
        method: str | None = None,
    ) -> PaymentConfirmation:
        """
        Mark an order paid from an already-authenticated gateway event.

        Args:
            order_id: Local or gateway order id
            payment_id: Gateway payment id
            method: Payment method reported by the gateway

        Raises:
            OrderNotFoundError: No such order
            InvalidStateTransitionError: Already paid with another payment id
        """
        order = self._require_order(order_id)
        return self._mark_paid(order.id, payment_id, PaymentSource.WEBHOOK, method=method)

    def _mark_paid(
        self,
        order_id: str,
        payment_id: str,
        source: str,
        method: str | None,
    ) -> PaymentConfirmation:
        with self.orders.lock(order_id):
            order = self._require_order(order_id)

            if order.payment_id:
                if order.payment_id != payment_id:
                    logger.error(
                        "Order already paid with a different payment",
                        extra={
                            "order_id": order.id,
                            "payment_id": payment_id,
                            "existing_payment_id": order.payment_id,
                        },
                    )
                    raise InvalidStateTransitionError(
                        f"Order {order.id} is already paid",
                        details={
                            "order_id": order.id,
                            "current_state": str(order.status),
                            "target_state": OrderStatus.PAID.value,
                        },
                    )

                payment = self.payments.get(payment_id)
                if payment is None:
                    # Order written but payment lost (backend without
                    # multi-key atomicity); rebuild it from the order.
                    payment = self._build_payment(order, payment_id, source, method)
                    self.payments.put(payment)
                logger.info(
                    "Payment already recorded, returning existing payment",
                    extra={"order_id": order.id, "payment_id": payment_id, "source": str(source)},
                )
                return PaymentConfirmation(payment=payment, order=order, created=False)

            if not can_transition(order.status, OrderStatus.PAID):
                raise InvalidStateTransitionError(
                    f"Cannot mark order {order.id} paid from '{order.status}' state",
                    details={
                        "order_id": order.id,
                        "current_state": str(order.status),
                        "target_state": OrderStatus.PAID.value,
                    },
                )

            payment = self.payments.get(payment_id)
            if payment is not None and payment.order_id != order.id:
                logger.error(
                    "Payment id already recorded for another order",
                    extra={"order_id": order.id, "payment_id": payment_id},
                )
                raise InvalidStateTransitionError(
                    f"Payment {payment_id} belongs to another order",
                    details={"order_id": order.id, "payment_id": payment_id},
                )
            if payment is None:
                payment = self._build_payment(order, payment_id, source, method)
                self.payments.put(payment)

            paid_order = replace(
                order,
                status=OrderStatus.PAID,
                payment_id=payment_id,
                paid_at=payment.verified_at,
                attempts=order.attempts + 1,
            )
            self.orders.put(paid_order)

        logger.info(
            "Payment verified successfully",
            extra={
                "order_id": paid_order.id,
                "payment_id": payment_id,
                "source": str(source),
                "previous_status": str(order.status),
                "amount_minor_units": paid_order.amount_minor_units,
            },
        )
        return PaymentConfirmation(payment=payment, order=paid_order, created=True)

    def _build_payment(
        self,
        order: Order,
        payment_id: str,
        source: str,
        method: str | None,
    ) -> Payment:
        now = self.clock()
        return Payment(
            id=payment_id,
            order_id=order.id,
            user_id=order.user_id,
            plan_type=order.plan_type,
            amount_minor_units=order.amount_minor_units,
            currency=order.currency,
            verified_at=now,
            created_at=now,
            status=PaymentStatus.CAPTURED,
            source=source,
            method=method,
        )

    # =========================================================================
    # Failed Transition
    # =========================================================================

    def handle_payment_failure(
        self,
        order_id: str,
        error: Mapping[str, Any] | str | None = None,
    ) -> FailureOutcome:
        """
        Record a failed payment attempt.

        A paid order is never marked failed: the event is logged and the
        order returned unchanged with ``applied=False``.

        Args:
            order_id: Local or gateway order id
            error: Error detail reported by the client or gateway

        Raises:
            OrderNotFoundError: No such order
        """
        order = self._require_order(order_id)
        failure = _failure_detail(error)

        with self.orders.lock(order.id):
            order = self._require_order(order.id)

            if not can_transition(order.status, OrderStatus.FAILED):
                logger.warning(
                    "Ignoring payment failure for order in terminal state",
                    extra={
                        "order_id": order.id,
                        "status": str(order.status),
                        "failure_code": failure.get("code"),
                    },
                )
                return FailureOutcome(
                    order=order,
                    applied=False,
                    message="Order is already paid; failure ignored.",
                )

            failed_order = replace(
                order,
                status=OrderStatus.FAILED,
                attempts=order.attempts + 1,
                failure=failure,
                failed_at=self.clock(),
            )
            self.orders.put(failed_order)

        logger.info(
            "Payment failed",
            extra={
                "order_id": failed_order.id,
                "attempts": failed_order.attempts,
                "failure_description": failure.get("description") or "Unknown error",
            },
        )
        return FailureOutcome(
            order=failed_order,
            applied=True,
            message="Payment failed. Please try again.",
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_status(self, order_id: str) -> OrderStatusSnapshot | None:
        """Return the order and its payment, or None for an unknown id."""
        order = self.find_order(order_id)
        if order is None:
            return None
        payment = self.payments.get(order.payment_id) if order.payment_id else None
        return OrderStatusSnapshot(order=order, payment=payment)

    def get_history(self, user_id: str) -> list[PaymentHistoryEntry]:
        """
        Return the user's payments, most recent first.

        Payments created at the same instant keep their insertion order.
        """
        payments = sorted(
            self.payments.list_by_user(str(user_id)),
            key=lambda payment: payment.created_at,
            reverse=True,
        )

        entries = []
        for payment in payments:
            plan = self.get_plan(payment.plan_type)
            entries.append(
                PaymentHistoryEntry(
                    id=payment.id,
                    order_id=payment.order_id,
                    amount_minor_units=payment.amount_minor_units,
                    currency=payment.currency,
                    plan_type=payment.plan_type,
                    plan_name=plan.display_name if plan else payment.plan_type,
                    questions=plan.question_count if plan else 0,
                    status=payment.status,
                    created_at=payment.created_at,
                )
            )
        return entries


def _failure_detail(error: Mapping[str, Any] | str | None) -> dict[str, Any]:
    if error is None:
        return {}
    if isinstance(error, str):
        return {"description": error}
    return {str(key): value for key, value in error.items()}


def build_order_lifecycle(config: PaymentConfig | None = None) -> OrderLifecycle:
    """
    Wire an OrderLifecycle from Django settings.

    Uses the configured store backend and gateway (Razorpay when
    PAYMENTS_GATEWAY="razorpay" and credentials are present).
    """
    from payments.adapters import get_gateway
    from payments.config import PaymentConfig
    from payments.stores import get_order_store, get_payment_store

    config = config or PaymentConfig.from_settings()
    return OrderLifecycle(
        config,
        orders=get_order_store(),
        payments=get_payment_store(),
        gateway=get_gateway(config),
    )


__all__ = [
    "FailureOutcome",
    "OrderDescriptor",
    "OrderLifecycle",
    "OrderStatusSnapshot",
    "PaymentConfirmation",
    "PaymentHistoryEntry",
    "build_order_lifecycle",
    "generate_order_id",
]
