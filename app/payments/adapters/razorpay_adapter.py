"""
Razorpay API adapter for order creation.

All Razorpay calls go through this adapter so that timeouts, error
translation and logging are consistent.

Features:
- Configurable timeout on every API call
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Credentials never logged

Configuration (via PaymentConfig):
- key_id / key_secret: Razorpay API credentials
- api_timeout_seconds: API call timeout (default: 10)

Usage:
    from payments.adapters import RazorpayGateway

    gateway = RazorpayGateway.from_config(config)
    remote_order_id = gateway.create_remote_order(
        29900, "INR", {"receipt": "order_1700000000000_ab12", "plan_type": "standard"}
    )
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import razorpay
import requests
from razorpay.errors import BadRequestError, ServerError
from razorpay.errors import GatewayError as RazorpayGatewayError

from payments.adapters.base import PaymentGateway
from payments.exceptions import (
    GatewayBadRequestError,
    GatewayError,
    GatewayUnavailableError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from payments.config import PaymentConfig


# Razorpay caps receipts at 40 characters
MAX_RECEIPT_LENGTH = 40


class RazorpayGateway(PaymentGateway):
    """
    PaymentGateway backed by the Razorpay Orders API.

    Thread-safe: the underlying client holds only credentials and a
    requests session.
    """

    name = "razorpay"

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        timeout: int = 10,
        client: Any = None,
    ) -> None:
        self.key_id = key_id
        self.timeout = timeout
        self._client = client or razorpay.Client(auth=(key_id, key_secret))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key_id={self.key_id!r})"

    @classmethod
    def from_config(cls, config: PaymentConfig) -> RazorpayGateway:
        return cls(
            key_id=config.key_id,
            key_secret=config.key_secret,
            timeout=config.api_timeout_seconds,
        )

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    def create_remote_order(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> str:
        """
        Create a Razorpay order.

        Raises:
            GatewayBadRequestError: Invalid parameters or credentials
            GatewayUnavailableError: Razorpay unreachable or failing
        """
        logger = self.get_logger()
        notes = {key: str(value) for key, value in metadata.items()}
        receipt = notes.pop("receipt", "")[:MAX_RECEIPT_LENGTH]

        log_context = {
            "operation": "create_order",
            "amount_minor_units": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
        }

        start_time = time.time()
        logger.info("Starting Razorpay operation", extra=log_context)

        try:
            response = self._client.order.create(
                data={
                    "amount": amount_minor_units,
                    "currency": currency,
                    "receipt": receipt,
                    "notes": notes,
                },
                timeout=self.timeout,
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_razorpay_error(e, log_context, duration_ms)
            raise

        remote_order_id = response.get("id") if isinstance(response, dict) else None
        duration_ms = (time.time() - start_time) * 1000
        if not remote_order_id:
            logger.error("Razorpay order response missing id", extra=log_context)
            raise GatewayUnavailableError("Razorpay returned an order without an id")

        logger.info(
            "Razorpay operation completed",
            extra={
                **log_context,
                "gateway_order_id": remote_order_id,
                "duration_ms": duration_ms,
            },
        )
        return remote_order_id

    def _handle_razorpay_error(
        self,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Razorpay SDK and transport exceptions to domain exceptions.

        Raises:
            GatewayBadRequestError: 4xx from Razorpay
            GatewayUnavailableError: 5xx, gateway-side or network failure
            GatewayError: Anything else
        """
        logger = self.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, BadRequestError):
            logger.error("Invalid request to Razorpay", extra=log_context)
            raise GatewayBadRequestError(
                str(error) or "Razorpay rejected the request",
                gateway_code="BAD_REQUEST_ERROR",
            ) from error

        if isinstance(error, (ServerError, RazorpayGatewayError)):
            logger.error("Razorpay server error", extra=log_context)
            raise GatewayUnavailableError(
                "Razorpay is temporarily unavailable. Please retry.",
                gateway_code=type(error).__name__,
            ) from error

        if isinstance(error, requests.exceptions.Timeout):
            logger.error("Razorpay request timed out", extra=log_context)
            raise GatewayUnavailableError(
                f"Razorpay did not respond within {self.timeout}s",
                error_code="GATEWAY_TIMEOUT",
            ) from error

        if isinstance(error, requests.exceptions.RequestException):
            logger.error("Connection error to Razorpay", extra=log_context, exc_info=True)
            raise GatewayUnavailableError(
                "Could not connect to Razorpay. Please retry.",
            ) from error

        logger.error(
            f"Unexpected Razorpay error: {type(error).__name__}",
            extra=log_context,
            exc_info=True,
        )
        raise GatewayError(f"Unexpected payment gateway error: {type(error).__name__}") from error
