"""
In-process gateway stand-in.

Returns unique Razorpay-shaped order ids and records every call, so
tests can assert on what would have been sent. A failure can be injected
to exercise the error paths of order creation.
"""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from payments.adapters.base import PaymentGateway

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class RemoteOrderCall:
    amount_minor_units: int
    currency: str
    metadata: dict[str, str]
    remote_order_id: str


class FakeGateway(PaymentGateway):
    """
    Gateway that never leaves the process.

    Args:
        prefix: Prefix of generated order ids
        fail_with: Exception raised by every create_remote_order call
    """

    name = "fake"

    def __init__(self, prefix: str = "order_fake", fail_with: Exception | None = None) -> None:
        self.prefix = prefix
        self.fail_with = fail_with
        self.calls: list[RemoteOrderCall] = []
        self._lock = threading.Lock()

    def create_remote_order(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            remote_order_id = f"{self.prefix}_{secrets.token_hex(7)}"
            self.calls.append(
                RemoteOrderCall(
                    amount_minor_units=amount_minor_units,
                    currency=currency,
                    metadata=dict(metadata),
                    remote_order_id=remote_order_id,
                )
            )
        return remote_order_id
