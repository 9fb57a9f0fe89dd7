import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from booking_engine.database import create_db_engine, create_session_factory
from booking_engine.models import Base, DayOfWeek, SessionTypes, Tenants
from booking_engine.services.events import EventEmitter
from booking_engine.services.reservations import InProcessReservationLock, ReservationCoordinator
from booking_engine.services.slots import SlotConfig
from booking_engine.services.timezones import to_instant
from booking_engine.services.weekly_hours import WeeklyHoursRule, WeeklyHoursStore

# Tuesday, 2030-01-01 00:00 UTC
NOW = to_instant(datetime(2030, 1, 1, tzinfo=timezone.utc))


def utc_ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    return to_instant(datetime(year, month, day, hour, minute, tzinfo=timezone.utc))


class FakeClock:
    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now += minutes * 60_000


class RecordingRedis:
    """Just enough of redis.Redis for the event emitter."""

    def __init__(self):
        self.queues: dict[str, list[str]] = {}

    def rpush(self, name: str, *values: str) -> int:
        queue = self.queues.setdefault(name, [])
        queue.extend(values)
        return len(queue)

    def events(self, queue: str = EventEmitter.QUEUE) -> list[dict]:
        return [json.loads(raw) for raw in self.queues.get(queue, [])]


@pytest.fixture
def ms():
    return utc_ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'engine.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def redis() -> RecordingRedis:
    return RecordingRedis()


@pytest.fixture
def events(redis, clock) -> EventEmitter:
    return EventEmitter(redis, clock)


@pytest.fixture
def slot_config() -> SlotConfig:
    return SlotConfig()


@pytest.fixture
def make_tenant(db):
    def make(tenant_id: str = "tenant-1", tz: str = "UTC") -> Tenants:
        tenant = Tenants(id=tenant_id, name=f"Studio {tenant_id}", slug=tenant_id, timezone=tz, created_at_ms=0)
        db.add(tenant)
        db.commit()
        return tenant

    return make


@pytest.fixture
def make_session_type(db):
    def make(
        tenant: Tenants,
        session_type_id: str = "consult-30",
        duration_minutes: int = 30,
        capacity: int = 1,
        price: str = "50.00",
        is_active: bool = True,
    ) -> SessionTypes:
        session_type = SessionTypes(
            id=session_type_id,
            tenant_id=tenant.id,
            name=f"Session {session_type_id}",
            duration_minutes=duration_minutes,
            capacity=capacity,
            price=Decimal(price),
            currency="USD",
            is_active=is_active,
        )
        db.add(session_type)
        db.commit()
        return session_type

    return make


@pytest.fixture
def tenant(make_tenant) -> Tenants:
    return make_tenant()


@pytest.fixture
def open_monday(db, tenant):
    """Tenant open on Mondays 09:00-17:00 only."""
    WeeklyHoursStore(db).replace_all(
        tenant.id, [WeeklyHoursRule.parse(DayOfWeek.MONDAY, "09:00", "17:00")]
    )


@pytest.fixture
def lock() -> InProcessReservationLock:
    return InProcessReservationLock(timeout=5)


@pytest.fixture
def make_coordinator(db, lock, events, slot_config, clock):
    def make(session=None, payments_enabled: bool = True) -> ReservationCoordinator:
        return ReservationCoordinator(
            session if session is not None else db,
            lock,
            events,
            slot_config,
            payments_enabled=payments_enabled,
            clock=clock,
        )

    return make
