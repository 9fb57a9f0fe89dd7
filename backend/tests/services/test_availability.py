from datetime import date

import pytest

from booking_engine.errors import NotFoundError, ValidationError
from booking_engine.services.blocked_intervals import BlockedIntervalStore
from booking_engine.services.intervals import Interval
from booking_engine.services.slots import SlotConfig, SlotReason, SlotService

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


@pytest.fixture
def service(db, slot_config, clock) -> SlotService:
    return SlotService(db, slot_config, clock)


def test__day_outside_weekly_hours(service, tenant, open_monday, make_session_type) -> None:
    session_type = make_session_type(tenant)
    slots = service.generate_slots(tenant.id, session_type.id, TUESDAY)

    assert slots
    assert all(s.reason == SlotReason.OUTSIDE_HOURS for s in slots)


def test__blocked_interval_hides_one_slot(
    service, db, clock, tenant, open_monday, make_session_type, ms
) -> None:
    session_type = make_session_type(tenant)
    BlockedIntervalStore(db, clock).create(tenant.id, Interval(ms(2030, 1, 7, 10), ms(2030, 1, 7, 10, 30)))

    slots = {s.start: s for s in service.generate_slots(tenant.id, session_type.id, MONDAY)}

    assert not slots[ms(2030, 1, 7, 10)].available
    assert slots[ms(2030, 1, 7, 10)].reason == SlotReason.BLOCKED
    assert slots[ms(2030, 1, 7, 9, 30)].available
    assert slots[ms(2030, 1, 7, 10, 30)].available


def test__bookings_of_other_session_types_do_not_count(
    service, tenant, open_monday, make_session_type, make_coordinator, ms
) -> None:
    consult = make_session_type(tenant)
    workshop = make_session_type(tenant, "workshop", capacity=5)
    make_coordinator().reserve(tenant.id, consult.id, "cust-1", ms(2030, 1, 7, 10))

    consult_slots = {s.start: s for s in service.generate_slots(tenant.id, consult.id, MONDAY)}
    workshop_slots = {s.start: s for s in service.generate_slots(tenant.id, workshop.id, MONDAY)}

    assert consult_slots[ms(2030, 1, 7, 10)].reason == SlotReason.AT_CAPACITY
    assert workshop_slots[ms(2030, 1, 7, 10)].available


def test__calendar_is_clamped_to_today_and_horizon(
    db, clock, tenant, open_monday, make_session_type
) -> None:
    session_type = make_session_type(tenant)
    service = SlotService(db, SlotConfig(horizon_days=10), clock)

    days = service.calendar(tenant.id, session_type.id, date(2029, 12, 25), date(2030, 2, 1))

    assert days[0].day == date(2030, 1, 1)
    assert days[-1].day == date(2030, 1, 11)
    assert [d.day for d in days if d.has_slots] == [MONDAY]
    assert next(d for d in days if d.day == MONDAY).open_slots_count == 16


def test__calendar_counts_only_open_slots(
    service, tenant, open_monday, make_session_type, make_coordinator, ms
) -> None:
    session_type = make_session_type(tenant)
    make_coordinator().reserve(tenant.id, session_type.id, "cust-1", ms(2030, 1, 7, 9))

    [monday] = service.calendar(tenant.id, session_type.id, MONDAY, MONDAY)
    assert monday.open_slots_count == 15


def test__check_start_rejects_off_grid(service, db, tenant, open_monday, make_session_type, ms) -> None:
    session_type = make_session_type(tenant)
    with pytest.raises(ValidationError):
        service.check_start(tenant, session_type, ms(2030, 1, 7, 9, 10))


def test__check_start_agrees_with_generator(service, tenant, open_monday, make_session_type, ms) -> None:
    session_type = make_session_type(tenant)
    assert service.check_start(tenant, session_type, ms(2030, 1, 7, 9)) is None
    assert service.check_start(tenant, session_type, ms(2030, 1, 7, 17)) == SlotReason.OUTSIDE_HOURS
    assert service.check_start(tenant, session_type, ms(2030, 1, 8, 9)) == SlotReason.OUTSIDE_HOURS


def test__inactive_session_type_is_not_found(service, tenant, make_session_type) -> None:
    session_type = make_session_type(tenant, is_active=False)
    with pytest.raises(NotFoundError):
        service.generate_slots(tenant.id, session_type.id, MONDAY)


def test__unknown_tenant_is_not_found(service) -> None:
    with pytest.raises(NotFoundError):
        service.generate_slots("nope", "consult-30", MONDAY)
