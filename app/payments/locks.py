"""
Per-order mutual exclusion for payment transitions.

Concurrent confirmations and webhook deliveries for the *same* order must
serialize so exactly one paid transition happens; unrelated orders must
not wait on each other. Two lock flavours cover the two store backends:

1. **KeyedLock** - in-process, one ``threading.Lock`` per key
   - Locks are created on demand and dropped when nobody holds or waits
   - Use with the in-memory stores

2. **DistributedLock** - Redis-based, shared by every process
   - Handed out by the Redis order store
   - A TTL frees locks left behind by crashed holders

Usage:

    locks = KeyedLock(timeout=5.0)
    with locks.hold("order_123"):
        ...

    with DistributedLock("order:order_123", redis=client, ttl=30, timeout=5.0):
        ...
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from payments.exceptions import LockAcquisitionError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

    from redis import Redis


logger = logging.getLogger(__name__)


# =============================================================================
# In-process Locks
# =============================================================================


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLock:
    """
    A registry of per-key locks for a single process.

    The registry itself is guarded by one short-lived mutex that is only
    held while looking up or releasing an entry, never while the caller's
    critical section runs.

    Args:
        timeout: Seconds to wait for a key (None waits forever)
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._mutex = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def _checkout(self, key: str) -> _Entry:
        with self._mutex:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, key: str, entry: _Entry) -> None:
        with self._mutex:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)

    @contextmanager
    def hold(self, key: str) -> Generator[None, None, None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Raises:
            LockAcquisitionError: If the lock isn't free within the timeout
        """
        entry = self._checkout(key)
        timeout = -1 if self.timeout is None else self.timeout
        if not entry.lock.acquire(timeout=timeout):
            self._checkin(key, entry)
            raise LockAcquisitionError(
                f"Failed to acquire lock '{key}' within {self.timeout}s",
                details={"key": key, "timeout": self.timeout},
            )
        try:
            yield
        finally:
            entry.lock.release()
            self._checkin(key, entry)

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        with self._mutex:
            return len(self._entries)


# =============================================================================
# Distributed Locks
# =============================================================================


class DistributedLock:
    """
    Per-order lock shared by every process using the Redis stores.

    ``SET lock:<key> <token> NX EX <ttl>`` claims the lock. Release deletes
    the key only while it still holds our token, so a holder whose TTL ran
    out cannot free a lock another process has taken since.

    Args:
        key: Lock name, stored as ``lock:<key>``
        redis: The client the stores use
        ttl: Seconds before Redis drops a lock abandoned by a crashed holder
        timeout: Seconds to keep retrying; 0 tries exactly once

    Raises (on acquire):
        LockAcquisitionError: Still held by someone else after ``timeout``
        StoreUnavailableError: Redis could not be reached
    """

    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    end
    return 0
    """

    POLL_INTERVAL = 0.05

    def __init__(self, key: str, redis: Redis, ttl: int = 30, timeout: float = 5.0) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.timeout = timeout
        self._redis = redis
        self._token: str | None = None

    @property
    def is_held(self) -> bool:
        return self._token is not None

    def acquire(self) -> None:
        token = secrets.token_hex(16)
        deadline = time.monotonic() + self.timeout
        while not self._claim(token):
            if time.monotonic() >= deadline:
                raise LockAcquisitionError(
                    f"Failed to acquire lock '{self.key}' within {self.timeout}s",
                    details={"key": self.key, "timeout": self.timeout},
                )
            time.sleep(self.POLL_INTERVAL)
        self._token = token

    def _claim(self, token: str) -> bool:
        try:
            return bool(self._redis.set(self.key, token, nx=True, ex=self.ttl))
        except RedisError as e:
            raise StoreUnavailableError(
                "Payment store is temporarily unavailable",
                details={"operation": "lock"},
            ) from e

    def release(self) -> bool:
        """
        Release the lock if this instance holds it.

        Returns:
            True if the key was deleted; False if we did not hold it, it had
            already expired, or Redis could not be reached (the TTL then
            frees it)
        """
        if self._token is None:
            return False
        token, self._token = self._token, None
        try:
            return bool(self._redis.eval(self.RELEASE_SCRIPT, 1, self.key, token))
        except RedisError:
            logger.warning(
                "Could not release order lock, leaving it to expire",
                extra={"key": self.key, "ttl": self.ttl},
                exc_info=True,
            )
            return False

    def __enter__(self) -> DistributedLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.release()


__all__ = [
    "DistributedLock",
    "KeyedLock",
]
