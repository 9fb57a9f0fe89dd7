# backend/booking_engine/services/occupancy.py
"""Queries for bookings that currently hold capacity."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models import ACTIVE_BOOKING_STATUSES, Bookings
from .intervals import Interval


def find_active_bookings(
    db: Session,
    tenant_id: str,
    window: Interval,
    session_type_id: Optional[str] = None,
) -> list[Bookings]:
    """
    PENDING_PAYMENT / CONFIRMED bookings overlapping window (half-open).

    Restricted to one session type when session_type_id is given.
    """
    query = db.query(Bookings).filter(
        Bookings.tenant_id == tenant_id,
        Bookings.status.in_(ACTIVE_BOOKING_STATUSES),
        Bookings.start_ms < window.end,
        Bookings.end_ms > window.start,
    )
    if session_type_id is not None:
        query = query.filter(Bookings.session_type_id == session_type_id)
    return query.order_by(Bookings.start_ms).all()
