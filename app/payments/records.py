"""
Order and Payment records.

Records are frozen dataclasses. A transition never mutates a stored
record in place; it builds a new one with ``dataclasses.replace`` and
puts it back into the store, so a concurrent reader sees either the old
record or the new one, never a mix.

Amounts are integers in the smallest currency unit (paise for INR).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from payments.state_machines import OrderStatus, PaymentSource, PaymentStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any


def _dt(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class UserDetails:
    """
    Contact details shown in the gateway's payment prompt.

    All fields are optional on input; ``name`` falls back to "User".
    """

    name: str = "User"
    contact: str = ""
    email: str = ""

    @classmethod
    def from_value(cls, value: UserDetails | Mapping[str, Any] | None) -> UserDetails:
        """
        Build details from a mapping, an existing instance or None.

        ``mobile`` is accepted as an alias of ``contact``.
        """
        if isinstance(value, UserDetails):
            return value
        value = value or {}
        return cls(
            name=value.get("name") or "User",
            contact=value.get("contact") or value.get("mobile") or "",
            email=value.get("email") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class Order:
    """
    A purchase intent, keyed by a locally generated id.

    Attributes:
        id: Local order id, never reused
        user_id: Owning user
        plan_type: Catalog plan id
        amount_minor_units: Price in the smallest currency unit
        currency: ISO currency code
        status: created / paid / failed
        attempts: Number of failed or successful payment attempts recorded
        created_at: Creation time
        user_details: Prefill details for the payment prompt
        gateway_order_id: Order id assigned by the gateway, when one was created
        payment_id: Gateway payment id, set once on the paid transition
        paid_at: Time of the paid transition
        failure: Error detail of the latest failed attempt
        failed_at: Time of the latest failed attempt
    """

    id: str
    user_id: str
    plan_type: str
    amount_minor_units: int
    currency: str
    created_at: datetime
    status: str = OrderStatus.CREATED
    attempts: int = 0
    user_details: UserDetails = field(default_factory=UserDetails)
    gateway_order_id: str | None = None
    payment_id: str | None = None
    paid_at: datetime | None = None
    failure: dict[str, Any] | None = None
    failed_at: datetime | None = None

    @property
    def gateway_reference(self) -> str:
        """The order id the gateway knows this order by."""
        return self.gateway_order_id or self.id

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "plan_type": self.plan_type,
            "amount_minor_units": self.amount_minor_units,
            "currency": self.currency,
            "status": str(self.status),
            "attempts": self.attempts,
            "created_at": _iso(self.created_at),
            "user_details": self.user_details.to_dict(),
            "gateway_order_id": self.gateway_order_id,
            "payment_id": self.payment_id,
            "paid_at": _iso(self.paid_at),
            "failure": self.failure,
            "failed_at": _iso(self.failed_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Order:
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            plan_type=data["plan_type"],
            amount_minor_units=int(data["amount_minor_units"]),
            currency=data["currency"],
            created_at=_dt(data["created_at"]),
            status=OrderStatus(data.get("status", OrderStatus.CREATED)),
            attempts=int(data.get("attempts", 0)),
            user_details=UserDetails.from_value(data.get("user_details")),
            gateway_order_id=data.get("gateway_order_id"),
            payment_id=data.get("payment_id"),
            paid_at=_dt(data.get("paid_at")),
            failure=data.get("failure"),
            failed_at=_dt(data.get("failed_at")),
        )


@dataclass(frozen=True)
class Payment:
    """
    A successfully authenticated capture tied to exactly one Order.

    Amount and currency are copied from the Order, never from the
    confirmation or webhook that produced the payment.

    ``method`` is only known when it came from an authenticated webhook
    payload; client confirmations do not carry it and leave it None.
    """

    id: str
    order_id: str
    user_id: str
    plan_type: str
    amount_minor_units: int
    currency: str
    verified_at: datetime
    created_at: datetime
    status: str = PaymentStatus.CAPTURED
    source: str = PaymentSource.CONFIRMATION
    method: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "user_id": self.user_id,
            "plan_type": self.plan_type,
            "amount_minor_units": self.amount_minor_units,
            "currency": self.currency,
            "status": str(self.status),
            "source": str(self.source),
            "method": self.method,
            "verified_at": _iso(self.verified_at),
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Payment:
        return cls(
            id=data["id"],
            order_id=data["order_id"],
            user_id=data["user_id"],
            plan_type=data["plan_type"],
            amount_minor_units=int(data["amount_minor_units"]),
            currency=data["currency"],
            verified_at=_dt(data["verified_at"]),
            created_at=_dt(data["created_at"]),
            status=PaymentStatus(data.get("status", PaymentStatus.CAPTURED)),
            source=PaymentSource(data.get("source", PaymentSource.CONFIRMATION)),
            method=data.get("method"),
        )


__all__ = [
    "Order",
    "Payment",
    "UserDetails",
]
