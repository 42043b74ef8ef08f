"""
State enums for order and payment records.

These are Django TextChoices so the values serialize as plain strings
(JSON, Redis, HTTP responses) while still reading as enums in code.

State Machines Overview:

Order States:
    created → paid (client confirmation or webhook)
    created → failed (client failure callback or payment.failed webhook)
    failed → failed (another failed attempt)
    failed → paid (late but authentic capture; failure is only what the
                   client reported, not gateway ground truth)

    paid is terminal: failure events for a paid order are logged and
    discarded.

Payment States:
    captured (the only state this service records)
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    States for the Order lifecycle.

    Terminal states: PAID
    Recoverable states: FAILED (may still become PAID)
    """

    CREATED = "created", "Created"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"


class PaymentStatus(models.TextChoices):
    """States for Payment records."""

    CAPTURED = "captured", "Captured"


class PaymentSource(models.TextChoices):
    """Which trust path produced a Payment record."""

    CONFIRMATION = "confirmation", "Client confirmation"
    WEBHOOK = "webhook", "Gateway webhook"


# Allowed (from, to) pairs for Order.status
ORDER_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.PAID, OrderStatus.FAILED}),
    OrderStatus.FAILED: frozenset({OrderStatus.PAID, OrderStatus.FAILED}),
    OrderStatus.PAID: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Return True if an order in ``current`` may move to ``target``."""
    return target in ORDER_TRANSITIONS.get(current, frozenset())


__all__ = [
    "OrderStatus",
    "PaymentStatus",
    "PaymentSource",
    "ORDER_TRANSITIONS",
    "can_transition",
]
