"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for acknowledged outcomes
- BaseService: Base class with common service utilities

Pattern Comparison:
    - ServiceResult: Use for outcomes the caller inspects (handled / ignored)
    - Exceptions: Use for failures the caller must react to (bad signature,
      unknown order, store unavailable)

Usage:
    from core.services import BaseService, ServiceResult

    class WebhookDispatcher(BaseService):
        def handle(self, raw_body: bytes, signature: str) -> ServiceResult[WebhookOutcome]:
            ...
            self.get_logger().info("Webhook processed")
            return ServiceResult.success(outcome)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Failures are raised as exceptions; a result always describes an
    outcome the caller acknowledges, including "nothing to do".

    Attributes:
        success: Whether the operation succeeded
        data: Result data

    Usage:
        result = dispatcher.handle(body, signature)
        if result:
            outcome = result.data
    """

    success: bool
    data: T | None = None

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and the data, serialized via
            ``to_dict()`` when it has one
        """
        data = self.data
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        return {"success": self.success, "data": data}

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Required-field validation

    Design Notes:
        - Collaborators (stores, gateways, configuration) are injected
          through __init__, never looked up from module globals
        - Raise exceptions for failures the caller must handle
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def missing_fields(**kwargs: Any) -> list[str]:
        """
        Return the names of required fields that are None or blank.

        Example:
            missing = self.missing_fields(order_id=order_id, signature=signature)
            if missing:
                raise PaymentValidationError(...)
        """
        return [
            name
            for name, value in kwargs.items()
            if value is None or (isinstance(value, str) and not value.strip())
        ]
