# backend/booking_engine/deps.py
"""
FastAPI dependencies.

Everything the engine needs (session factory, lock, event emitter, slot
config, clock) lives on app.state and is handed to the services per
request; no module-level handles.
"""

from typing import Iterator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .errors import PermissionDeniedError
from .services.blocked_intervals import BlockedIntervalStore
from .services.reservations import Actor, ActorKind, ReservationCoordinator
from .services.slots import SlotService
from .services.weekly_hours import WeeklyHoursStore


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_slot_service(request: Request, db: Session = Depends(get_db)) -> SlotService:
    state = request.app.state
    return SlotService(db, state.slot_config, state.clock)


def get_weekly_hours_store(db: Session = Depends(get_db)) -> WeeklyHoursStore:
    return WeeklyHoursStore(db)


def get_blocked_interval_store(request: Request, db: Session = Depends(get_db)) -> BlockedIntervalStore:
    return BlockedIntervalStore(db, request.app.state.clock)


def get_coordinator(request: Request, db: Session = Depends(get_db)) -> ReservationCoordinator:
    return request.app.state.coordinator_factory(db)


def get_actor(
    x_actor_kind: Optional[str] = Header(None),
    x_actor_id: Optional[str] = Header(None, max_length=36),
    x_actor_tenant: Optional[str] = Header(None, max_length=36),
) -> Actor:
    """Identity forwarded by the gateway after authentication."""
    if not x_actor_kind or not x_actor_id:
        raise PermissionDeniedError("Missing actor identity")
    try:
        kind = ActorKind(x_actor_kind.upper())
    except ValueError:
        raise PermissionDeniedError(f"Unknown actor kind: {x_actor_kind}")
    return Actor(kind=kind, id=x_actor_id, tenant_id=x_actor_tenant)


def require_business(tenant_id: str, actor: Actor = Depends(get_actor)) -> Actor:
    """Business-management routes: only the tenant's own staff or the system."""
    if actor.kind == ActorKind.SYSTEM:
        return actor
    if actor.kind == ActorKind.BUSINESS and actor.tenant_id == tenant_id:
        return actor
    raise PermissionDeniedError(f"{actor.kind.value} {actor.id} may not manage tenant {tenant_id}")
