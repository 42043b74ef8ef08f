"""
Abstract payment gateway capability.

The payment core only needs one thing from the gateway: register an order
remotely and get back the gateway's order id. Every network concern
(credentials, timeouts, error translation) stays behind this interface.

Implementations:
    RazorpayGateway - talks to the Razorpay Orders API
    FakeGateway - deterministic in-process stand-in for tests and local runs

Usage:
    class MyGateway(PaymentGateway):
        name = "my_gateway"

        def create_remote_order(self, amount_minor_units, currency, metadata):
            return my_sdk.create(amount_minor_units, currency, metadata)["id"]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class PaymentGateway(ABC):
    """
    Contract for the gateway's order-creation API.

    Implementations raise ``GatewayError`` subclasses on failure and must
    not retry internally: retry policy belongs to the caller, which can
    read ``is_retryable`` off the error.
    """

    name: str = "gateway"

    @abstractmethod
    def create_remote_order(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> str:
        """
        Create the order on the gateway.

        Args:
            amount_minor_units: Amount in the smallest currency unit
            currency: ISO currency code
            metadata: Key-value notes attached to the remote order
                (includes the local order id as ``receipt``)

        Returns:
            The gateway's order id

        Raises:
            GatewayBadRequestError: Request rejected (do not retry)
            GatewayUnavailableError: Gateway unreachable (retry with backoff)
        """
        ...
