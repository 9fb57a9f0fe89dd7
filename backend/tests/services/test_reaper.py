import asyncio
from datetime import timedelta

from booking_engine.models import BookingStatus
from booking_engine.services.reservations import pending_reaper_loop, run_reaper_once


def factory_for(make_coordinator):
    return lambda session: make_coordinator(session=session)


def test__run_reaper_once_uses_its_own_session(
    db, make_coordinator, session_factory, clock, tenant, open_monday, make_session_type, ms
) -> None:
    consult = make_session_type(tenant)
    booking = make_coordinator().reserve(tenant.id, consult.id, "cust-1", ms(2030, 1, 7, 10))
    clock.advance(31)

    reaped = run_reaper_once(factory_for(make_coordinator), session_factory, timedelta(minutes=30))

    assert reaped == [booking.id]
    db.expire_all()
    assert make_coordinator().get_booking(booking.id).status == BookingStatus.CANCELLED


def test__reaper_loop_keeps_running_after_errors(make_coordinator, session_factory) -> None:
    calls = []

    def flaky_factory(session):
        calls.append(session)
        if len(calls) == 1:
            raise RuntimeError("database went away")
        return make_coordinator(session=session)

    async def run() -> None:
        task = asyncio.create_task(pending_reaper_loop(
            flaky_factory, session_factory, older_than=timedelta(minutes=30), interval_seconds=0.01
        ))
        while len(calls) < 2:
            await asyncio.sleep(0.01)
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    asyncio.run(run())
    assert len(calls) >= 2
