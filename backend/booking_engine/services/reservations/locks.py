# backend/booking_engine/services/reservations/locks.py
"""
Reservation locks.

reserve() serializes on (tenant, session type, bucket) for every bucket
the candidate interval touches. Two overlapping candidates always share a
bucket, so their capacity decisions are linearized; keys are acquired in
sorted order so two reservations never wait on each other in a cycle.

Backends:
- InProcessReservationLock: threading locks, single process
- RedisReservationLock: redis-py locks, any number of processes
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from redis import Redis
from redis.exceptions import LockError

from ...errors import SlotUnavailableError
from ..intervals import Interval, bucket_range

logger = logging.getLogger(__name__)


def lock_keys(
    tenant_id: str,
    session_type_id: str,
    interval: Interval,
    bucket_ms: int,
) -> list[str]:
    return sorted(
        f"reserve:{tenant_id}:{session_type_id}:{bucket}"
        for bucket in bucket_range(interval, bucket_ms)
    )


class ReservationBusyError(SlotUnavailableError):
    """Slot is being reserved by another request, try again."""

    code = "slot_busy"


class ReservationLock:
    def hold(self, keys: list[str]):
        """Context manager holding every key until exit."""
        raise NotImplementedError


class InProcessReservationLock(ReservationLock):
    """Keyed threading locks; entries are dropped once nobody holds them."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    @contextmanager
    def hold(self, keys: list[str]) -> Iterator[None]:
        acquired: list[tuple[str, threading.Lock]] = []
        try:
            for key in keys:
                lock = self._checkout(key)
                if not lock.acquire(timeout=self.timeout):
                    self._checkin(key)
                    logger.warning(f"Timed out waiting for reservation lock {key}")
                    raise ReservationBusyError()
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)

    @property
    def held_keys(self) -> list[str]:
        with self._guard:
            return sorted(self._locks)


class RedisReservationLock(ReservationLock):
    """
    Redis locks shared by every engine process.

    lease_seconds bounds how long a crashed holder can keep a key; it must
    exceed the validate-and-persist step by a wide margin.
    """

    def __init__(self, redis: Redis, timeout: float = 10.0, lease_seconds: float = 30.0):
        self.redis = redis
        self.timeout = timeout
        self.lease_seconds = lease_seconds

    @contextmanager
    def hold(self, keys: list[str]) -> Iterator[None]:
        acquired = []
        try:
            for key in keys:
                lock = self.redis.lock(
                    f"lock:{key}",
                    timeout=self.lease_seconds,
                    blocking_timeout=self.timeout,
                )
                if not lock.acquire():
                    logger.warning(f"Timed out waiting for reservation lock {key}")
                    raise ReservationBusyError()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                try:
                    lock.release()
                except LockError:
                    logger.warning(f"Reservation lock {lock.name} expired before release")
