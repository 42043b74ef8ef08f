"""
Payment gateway adapters.

All calls to the external payment gateway go through a ``PaymentGateway``
implementation so that error handling, timeouts and logging are uniform,
and so the payment core can be exercised without the network.

Usage:
    from payments.adapters import FakeGateway, RazorpayGateway, get_gateway

    gateway = get_gateway(config)  # Razorpay when configured, fake otherwise
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from payments.adapters.base import PaymentGateway
from payments.adapters.fake import FakeGateway, RemoteOrderCall
from payments.adapters.razorpay_adapter import RazorpayGateway

if TYPE_CHECKING:
    from payments.config import PaymentConfig


logger = logging.getLogger(__name__)


def get_gateway(config: PaymentConfig, name: str | None = None) -> PaymentGateway:
    """
    Select the gateway implementation.

    Args:
        config: Payment configuration carrying the credentials
        name: "razorpay" or "fake" (defaults to the PAYMENTS_GATEWAY setting)

    Returns:
        RazorpayGateway if requested and credentials are present,
        FakeGateway otherwise
    """
    if name is None:
        from django.conf import settings

        name = getattr(settings, "PAYMENTS_GATEWAY", "fake")

    if name == "razorpay":
        if config.has_gateway_credentials:
            return RazorpayGateway.from_config(config)
        logger.warning("Razorpay gateway requested without credentials, using fake gateway")

    return FakeGateway()


__all__ = [
    "FakeGateway",
    "PaymentGateway",
    "RazorpayGateway",
    "RemoteOrderCall",
    "get_gateway",
]
