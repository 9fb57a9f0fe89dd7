import pytest

from booking_engine.errors import BlockConflictError, ValidationError
from booking_engine.services.blocked_intervals import BlockedIntervalStore
from booking_engine.services.intervals import Interval


def test__create_and_list(db, tenant, clock, ms) -> None:
    store = BlockedIntervalStore(db, clock)
    block = store.create(tenant.id, Interval(ms(2030, 1, 7, 10), ms(2030, 1, 7, 11)), reason="Lunch")

    assert block.created_at_ms == clock.now
    assert [b.id for b in store.list_for_tenant(tenant.id)] == [block.id]
    assert store.list_overlapping(tenant.id, Interval(ms(2030, 1, 7, 11), ms(2030, 1, 7, 12))) == []
    assert store.list_overlapping(tenant.id, Interval(ms(2030, 1, 7, 10, 30), ms(2030, 1, 7, 12))) == [block]


def test__past_block_is_rejected(db, tenant, clock) -> None:
    store = BlockedIntervalStore(db, clock)
    with pytest.raises(ValidationError):
        store.create(tenant.id, Interval(clock.now - 60_000, clock.now + 60_000))


def test__upcoming_only_hides_finished_blocks(db, tenant, clock, ms) -> None:
    store = BlockedIntervalStore(db, clock)
    store.create(tenant.id, Interval(ms(2030, 1, 2, 10), ms(2030, 1, 2, 11)))
    later = store.create(tenant.id, Interval(ms(2030, 1, 9, 10), ms(2030, 1, 9, 11)))

    clock.now = ms(2030, 1, 5)
    assert [b.id for b in store.list_for_tenant(tenant.id, upcoming_only=True)] == [later.id]
    assert len(store.list_for_tenant(tenant.id)) == 2


def test__block_over_active_booking_needs_force(
    db, tenant, open_monday, make_session_type, make_coordinator, clock, ms
) -> None:
    session_type = make_session_type(tenant)
    booking = make_coordinator().reserve(tenant.id, session_type.id, "cust-1", ms(2030, 1, 7, 10))
    store = BlockedIntervalStore(db, clock)
    window = Interval(ms(2030, 1, 7, 9), ms(2030, 1, 7, 12))

    with pytest.raises(BlockConflictError) as exc:
        store.create(tenant.id, window)
    assert booking.id in exc.value.detail
    assert store.list_for_tenant(tenant.id) == []

    assert store.create(tenant.id, window, force=True).start_ms == window.start


def test__block_next_to_booking_is_not_a_conflict(
    db, tenant, open_monday, make_session_type, make_coordinator, clock, ms
) -> None:
    session_type = make_session_type(tenant)
    make_coordinator().reserve(tenant.id, session_type.id, "cust-1", ms(2030, 1, 7, 10))

    block = BlockedIntervalStore(db, clock).create(tenant.id, Interval(ms(2030, 1, 7, 10, 30), ms(2030, 1, 7, 11)))
    assert block.id


def test__delete_is_idempotent(db, tenant, clock, ms) -> None:
    store = BlockedIntervalStore(db, clock)
    block = store.create(tenant.id, Interval(ms(2030, 1, 7, 10), ms(2030, 1, 7, 11)))

    assert store.delete(tenant.id, block.id) is True
    assert store.delete(tenant.id, block.id) is False
    assert store.list_for_tenant(tenant.id) == []


def test__delete_is_scoped_to_tenant(db, tenant, make_tenant, clock, ms) -> None:
    store = BlockedIntervalStore(db, clock)
    other = make_tenant("tenant-2")
    block = store.create(tenant.id, Interval(ms(2030, 1, 7, 10), ms(2030, 1, 7, 11)))

    assert store.delete(other.id, block.id) is False
    assert len(store.list_for_tenant(tenant.id)) == 1
