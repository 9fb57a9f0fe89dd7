# backend/booking_engine/routers/bookings.py

from typing import Optional

from fastapi import APIRouter, Depends, status

from ..deps import get_actor, get_coordinator, require_business
from ..errors import PermissionDeniedError
from ..models import BookingStatus
from ..schemas.bookings import BookingCancel, BookingCreate, BookingRead
from ..services.reservations import Actor, ActorKind, ReservationCoordinator

router = APIRouter(tags=["bookings"])


@router.post(
    "/tenants/{tenant_id}/bookings",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
)
def reserve_slot(
    tenant_id: str,
    data: BookingCreate,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    """
    Provisionally hold a slot. 409 slot_unavailable means: re-fetch
    availability and pick another slot.
    """
    return coordinator.reserve(
        tenant_id,
        data.session_type_id,
        data.customer_id,
        data.start_ms,
        participants=data.participants,
        notes=data.notes,
        customer_timezone=data.customer_timezone,
    )


@router.get(
    "/tenants/{tenant_id}/bookings",
    response_model=list[BookingRead],
    dependencies=[Depends(require_business)],
)
def list_bookings(
    tenant_id: str,
    status: Optional[BookingStatus] = None,
    upcoming_only: bool = False,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    return coordinator.list_bookings(tenant_id, status=status, upcoming_only=upcoming_only)


@router.get("/customers/{customer_id}/bookings", response_model=list[BookingRead])
def list_customer_bookings(
    customer_id: str,
    actor: Actor = Depends(get_actor),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    if actor.kind == ActorKind.CUSTOMER and actor.id != customer_id:
        raise PermissionDeniedError(f"CUSTOMER {actor.id} may not list bookings of {customer_id}")
    bookings = coordinator.list_customer_bookings(customer_id)
    if actor.kind == ActorKind.BUSINESS:
        bookings = [b for b in bookings if b.tenant_id == actor.tenant_id]
    return bookings


@router.get("/bookings/{booking_id}", response_model=BookingRead)
def get_booking(
    booking_id: str,
    actor: Actor = Depends(get_actor),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    booking = coordinator.get_booking(booking_id)
    if not actor.can_access(booking):
        raise PermissionDeniedError(f"{actor.kind.value} {actor.id} may not read booking {booking_id}")
    return booking


@router.post("/bookings/{booking_id}/cancel", response_model=BookingRead)
def cancel_booking(
    booking_id: str,
    data: Optional[BookingCancel] = None,
    actor: Actor = Depends(get_actor),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    return coordinator.cancel(booking_id, actor, reason=data.reason if data else None)
