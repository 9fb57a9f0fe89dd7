# backend/booking_engine/main.py
"""
FastAPI application factory.

    uvicorn booking_engine.main:create_app --factory
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .database import create_db_engine, create_session_factory
from .errors import BookingEngineError, SlotUnavailableError
from .redis_client import create_redis_client
from .routers import blocked_intervals, bookings, internal, payments, slots, weekly_hours
from .services.events import EventEmitter
from .services.reservations import (
    InProcessReservationLock,
    RedisReservationLock,
    ReservationCoordinator,
    ReservationLock,
    pending_reaper_loop,
)
from .services.slots import SlotConfig
from .services.timezones import now_ms

logger = logging.getLogger(__name__)


def build_lock(settings: Settings, redis) -> ReservationLock:
    if settings.lock_backend == "redis":
        if redis is None:
            raise RuntimeError("lock_backend=redis requires REDIS_URL")
        return RedisReservationLock(
            redis,
            timeout=settings.lock_timeout_seconds,
            lease_seconds=settings.lock_lease_seconds,
        )
    return InProcessReservationLock(timeout=settings.lock_timeout_seconds)


def create_app(
    settings: Optional[Settings] = None,
    clock: Callable[[], int] = now_ms,
    events: Optional[EventEmitter] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_db_engine(settings.resolved_database_url)
    session_factory = create_session_factory(engine)
    redis = create_redis_client(settings.redis_url)
    slot_config = SlotConfig.from_settings(settings)
    lock = build_lock(settings, redis)
    events = events or EventEmitter(redis, clock)

    def coordinator_factory(db: Session) -> ReservationCoordinator:
        return ReservationCoordinator(
            db,
            lock,
            events,
            slot_config,
            payments_enabled=settings.payments_enabled,
            clock=clock,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if settings.reaper_interval_seconds > 0:
            task = asyncio.create_task(pending_reaper_loop(
                coordinator_factory,
                session_factory,
                older_than=timedelta(minutes=settings.pending_payment_ttl_minutes),
                interval_seconds=settings.reaper_interval_seconds,
            ))
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
            engine.dispose()

    app = FastAPI(title="Booking availability engine", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.slot_config = slot_config
    app.state.clock = clock
    app.state.coordinator_factory = coordinator_factory

    @app.exception_handler(BookingEngineError)
    async def engine_error_handler(request: Request, exc: BookingEngineError):
        content = {"detail": exc.detail, "code": exc.code}
        if isinstance(exc, SlotUnavailableError):
            content["reason"] = exc.reason
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.get("/health")
    def health():
        return {"redis": redis.ping() if redis is not None else None}

    app.include_router(slots.router)
    app.include_router(weekly_hours.router)
    app.include_router(blocked_intervals.router)
    app.include_router(bookings.router)
    app.include_router(payments.router)
    app.include_router(internal.router)

    return app
