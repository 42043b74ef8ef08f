"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks.
"""

import logging

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - store: payment store backend name
        - redis: "connected", "disconnected" or "unused"

    HTTP Status Codes:
        200: All systems operational
        503: The Redis store backend is configured but unreachable

    Example Response:
        {
            "status": "healthy",
            "store": "redis",
            "redis": "connected"
        }
    """
    backend = getattr(settings, "PAYMENTS_STORE_BACKEND", "memory")
    health_status = {
        "status": "healthy",
        "store": backend,
        "redis": "unused",
    }
    is_healthy = True

    # Redis is only critical when orders are stored there
    if backend == "redis":
        from django_redis import get_redis_connection
        from redis.exceptions import RedisError

        try:
            get_redis_connection("default").ping()
            health_status["redis"] = "connected"
        except RedisError:
            logger.error("Health check could not reach Redis", exc_info=True)
            health_status["redis"] = "disconnected"
            health_status["status"] = "unhealthy"
            is_healthy = False

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
