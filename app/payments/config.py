"""
Configuration struct for the payment core.

The core never reads Django settings or the environment itself. Everything
it needs (credentials, currency, catalog, checkout branding) arrives in a
``PaymentConfig`` built once at the edge:

    config = PaymentConfig.from_settings()
    lifecycle = OrderLifecycle(config, order_store, payment_store)

Tests build the struct directly with throwaway secrets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from payments.catalog import PlanCatalog

if TYPE_CHECKING:
    from typing import Any


@dataclass(frozen=True)
class PaymentConfig:
    """
    Settings consumed by the payment core.

    Attributes:
        key_id: Public gateway key id, sent to the checkout widget
        key_secret: Gateway API secret; signs payment confirmations
        webhook_secret: Webhook signing secret, independent of key_secret
        catalog: Plan catalog
        currency: Single currency for every order
        merchant_name: Name shown in the payment prompt
        checkout_image: Logo URL shown in the payment prompt
        theme_color: Checkout theme colour
        api_timeout_seconds: Timeout for gateway API calls
        lock_ttl_seconds: Lifetime of a distributed per-order lock
        lock_timeout_seconds: How long to wait for a per-order lock
    """

    key_id: str
    key_secret: str = field(repr=False)
    webhook_secret: str = field(repr=False)
    catalog: PlanCatalog = field(default_factory=PlanCatalog.default, repr=False)
    currency: str = "INR"
    merchant_name: str = "ChatAstro"
    checkout_image: str = ""
    theme_color: str = "#4a148c"
    api_timeout_seconds: int = 10
    lock_ttl_seconds: int = 30
    lock_timeout_seconds: float = 5.0

    @property
    def has_gateway_credentials(self) -> bool:
        return bool(self.key_id and self.key_secret)

    @classmethod
    def from_settings(cls, settings: Any = None) -> PaymentConfig:
        """
        Build the config from Django settings.

        Args:
            settings: Settings object (defaults to django.conf.settings)
        """
        if settings is None:
            from django.conf import settings

        plans = getattr(settings, "PAYMENT_PLANS", None)
        catalog = PlanCatalog.from_mapping(plans) if plans else PlanCatalog.default()

        return cls(
            key_id=getattr(settings, "RAZORPAY_KEY_ID", ""),
            key_secret=getattr(settings, "RAZORPAY_KEY_SECRET", ""),
            webhook_secret=getattr(settings, "RAZORPAY_WEBHOOK_SECRET", ""),
            catalog=catalog,
            currency=getattr(settings, "PAYMENTS_CURRENCY", "INR"),
            merchant_name=getattr(settings, "PAYMENTS_MERCHANT_NAME", "ChatAstro"),
            checkout_image=getattr(settings, "PAYMENTS_CHECKOUT_IMAGE", ""),
            theme_color=getattr(settings, "PAYMENTS_THEME_COLOR", "#4a148c"),
            api_timeout_seconds=getattr(settings, "RAZORPAY_API_TIMEOUT_SECONDS", 10),
            lock_ttl_seconds=getattr(settings, "PAYMENTS_LOCK_TTL_SECONDS", 30),
            lock_timeout_seconds=getattr(settings, "PAYMENTS_LOCK_TIMEOUT_SECONDS", 5.0),
        )
