"""
Pending-payment reaper.

Periodically cancels PENDING_PAYMENT bookings whose payment never
completed, so their capacity returns to the pool.

The engine never schedules this itself: the hosting application starts
pending_reaper_loop() in its lifespan (or an external cron calls the
internal endpoint). Uses synchronous DB and Redis (via asyncio.to_thread).
"""

import asyncio
import logging
from datetime import timedelta
from typing import Callable

from sqlalchemy.orm import Session

from .coordinator import ReservationCoordinator

logger = logging.getLogger(__name__)


async def pending_reaper_loop(
    coordinator_factory: Callable[[Session], ReservationCoordinator],
    session_factory: Callable[[], Session],
    older_than: timedelta,
    interval_seconds: float,
) -> None:
    """
    Periodic loop that reaps expired PENDING_PAYMENT bookings.

    Errors of a single pass are logged; the loop keeps running until
    cancelled.
    """
    logger.info("pending_reaper_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(
                    run_reaper_once, coordinator_factory, session_factory, older_than
                )
            except asyncio.CancelledError:
                logger.info("pending_reaper_loop cancelled")
                raise
            except Exception:
                logger.exception("pending_reaper_loop error")

            await asyncio.sleep(interval_seconds)
    except asyncio.CancelledError:
        pass


def run_reaper_once(
    coordinator_factory: Callable[[Session], ReservationCoordinator],
    session_factory: Callable[[], Session],
    older_than: timedelta,
) -> list[str]:
    """One reaper pass in its own session (synchronous)."""
    db = session_factory()
    try:
        return coordinator_factory(db).reap_expired(older_than)
    finally:
        db.close()
