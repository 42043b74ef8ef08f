"""
Pytest fixtures for store backend tests.
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError


@pytest.fixture
def redis_client():
    """MagicMock standing in for a redis-py client."""
    client = MagicMock()
    client.get.return_value = None
    client.set.return_value = True
    client.lrange.return_value = []
    client.mget.return_value = []
    return client


@pytest.fixture
def redis_down(redis_client):
    """Client whose every command fails as if Redis were unreachable."""
    error = RedisConnectionError("Error 111 connecting to localhost:6379")
    redis_client.get.side_effect = error
    redis_client.set.side_effect = error
    redis_client.lrange.side_effect = error
    redis_client.pipeline.return_value.execute.side_effect = error
    return redis_client
