"""
URL configuration for the payment service.

URL Structure:
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /docs/                         - ReDoc API documentation
    /api/v1/payments/              - Payment endpoints
        plans/                     - Plan catalog (GET)
        orders/                    - Create order (POST)
        orders/{id}/               - Order status (GET)
        confirm/                   - Verify payment confirmation (POST)
        failure/                   - Record failed attempt (POST)
        users/{id}/payments/       - Payment history (GET)
        webhooks/razorpay/         - Razorpay webhook endpoint (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    path("health/", health_check, name="health_check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("api/v1/", include(api_v1_patterns)),
]
