import threading

import pytest
from redis.exceptions import LockError

from booking_engine.services.intervals import DAY_MS, Interval
from booking_engine.services.reservations import (
    InProcessReservationLock,
    RedisReservationLock,
    ReservationBusyError,
    lock_keys,
)


def test__lock_keys_cover_every_bucket_in_order() -> None:
    keys = lock_keys("t1", "s1", Interval(DAY_MS - 1000, DAY_MS + 1000), DAY_MS)
    assert keys == ["reserve:t1:s1:0", "reserve:t1:s1:1"]

    assert lock_keys("t1", "s1", Interval(0, 1000), DAY_MS) == ["reserve:t1:s1:0"]


def test__in_process_lock_releases_and_forgets_keys() -> None:
    lock = InProcessReservationLock(timeout=1)

    with lock.hold(["a", "b"]):
        assert lock.held_keys == ["a", "b"]

    assert lock.held_keys == []


def test__in_process_lock_releases_on_error() -> None:
    lock = InProcessReservationLock(timeout=1)

    with pytest.raises(RuntimeError):
        with lock.hold(["a"]):
            raise RuntimeError("boom")

    with lock.hold(["a"]):
        pass
    assert lock.held_keys == []


def test__in_process_lock_times_out_when_held() -> None:
    lock = InProcessReservationLock(timeout=0.05)
    holding = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with lock.hold(["a"]):
            holding.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    holding.wait(5)
    try:
        with pytest.raises(ReservationBusyError) as exc:
            with lock.hold(["b", "a"]):
                pass
        assert exc.value.code == "slot_busy"
    finally:
        release.set()
        thread.join()

    assert lock.held_keys == []


class StubRedisLock:
    def __init__(self, registry: dict, name: str, acquirable: bool, expired: bool):
        self.registry = registry
        self.name = name
        self.acquirable = acquirable
        self.expired = expired

    def acquire(self) -> bool:
        if not self.acquirable:
            return False
        self.registry["held"].append(self.name)
        return True

    def release(self) -> None:
        self.registry["released"].append(self.name)
        if self.expired:
            raise LockError("Cannot release an unlocked lock")


class StubRedis:
    def __init__(self, busy: tuple[str, ...] = (), expired: tuple[str, ...] = ()):
        self.busy = busy
        self.expired = expired
        self.registry = {"held": [], "released": [], "leases": []}

    def lock(self, name: str, timeout: float, blocking_timeout: float) -> StubRedisLock:
        self.registry["leases"].append((timeout, blocking_timeout))
        return StubRedisLock(self.registry, name, name not in self.busy, name in self.expired)


def test__redis_lock_acquires_in_order_and_releases_in_reverse() -> None:
    redis = StubRedis()
    lock = RedisReservationLock(redis, timeout=2, lease_seconds=30)

    with lock.hold(["a", "b"]):
        assert redis.registry["held"] == ["lock:a", "lock:b"]

    assert redis.registry["released"] == ["lock:b", "lock:a"]
    assert redis.registry["leases"] == [(30, 2), (30, 2)]


def test__redis_lock_busy_releases_what_it_took() -> None:
    redis = StubRedis(busy=("lock:b",))
    lock = RedisReservationLock(redis, timeout=0.1)

    with pytest.raises(ReservationBusyError):
        with lock.hold(["a", "b"]):
            pass

    assert redis.registry["released"] == ["lock:a"]


def test__redis_lock_expired_lease_is_logged_not_raised() -> None:
    redis = StubRedis(expired=("lock:a",))
    lock = RedisReservationLock(redis)

    with lock.hold(["a"]):
        pass

    assert redis.registry["released"] == ["lock:a"]
