"""
Payment services.

This module provides:
- OrderLifecycle: Order creation, payment verification and the
  created/paid/failed state machine
- build_order_lifecycle: Wires an OrderLifecycle from Django settings

Usage:
    from payments.services import build_order_lifecycle

    lifecycle = build_order_lifecycle()

    # Create an order for a catalog plan
    descriptor = lifecycle.create_order("user-1", "standard", {"name": "Asha"})

    # Verify the signed confirmation the client receives from the gateway
    confirmation = lifecycle.verify_payment(order_id, payment_id, signature)

    # Record a failed attempt
    outcome = lifecycle.handle_payment_failure(order_id, {"code": "BAD_REQUEST_ERROR"})
"""

from payments.services.order_lifecycle import (
    FailureOutcome,
    OrderDescriptor,
    OrderLifecycle,
    OrderStatusSnapshot,
    PaymentConfirmation,
    PaymentHistoryEntry,
    build_order_lifecycle,
    generate_order_id,
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
