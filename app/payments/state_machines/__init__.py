"""
State machine enums and helpers for order and payment records.
"""

from payments.state_machines.states import (
    ORDER_TRANSITIONS,
    OrderStatus,
    PaymentSource,
    PaymentStatus,
    can_transition,
)

__all__ = [
    "ORDER_TRANSITIONS",
    "OrderStatus",
    "PaymentSource",
    "PaymentStatus",
    "can_transition",
]
