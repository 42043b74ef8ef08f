"""
Tests for the health check endpoint.
"""

import json

from redis.exceptions import ConnectionError as RedisConnectionError


class TestHealthCheck:
    def test_memory_backend(self, client, settings):
        settings.PAYMENTS_STORE_BACKEND = "memory"

        response = client.get("/health/")

        assert response.status_code == 200
        assert json.loads(response.content) == {"status": "healthy", "store": "memory", "redis": "unused"}

    def test_redis_connected(self, client, settings, mocker):
        settings.PAYMENTS_STORE_BACKEND = "redis"
        mocker.patch("django_redis.get_redis_connection")

        response = client.get("/health/")

        assert response.status_code == 200
        assert json.loads(response.content)["redis"] == "connected"

    def test_redis_unreachable(self, client, settings, mocker):
        settings.PAYMENTS_STORE_BACKEND = "redis"
        connection = mocker.patch("django_redis.get_redis_connection").return_value
        connection.ping.side_effect = RedisConnectionError("refused")

        response = client.get("/health/")

        assert response.status_code == 503
        assert json.loads(response.content)["status"] == "unhealthy"
