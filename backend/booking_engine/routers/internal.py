# backend/booking_engine/routers/internal.py
"""
Internal API endpoints for trusted consumers.

Called directly by the scheduling collaborator (cron); not proxied by
the public gateway.
"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..deps import get_coordinator
from ..schemas.bookings import ReapResult
from ..services.reservations import ReservationCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", tags=["internal"])


@router.post("/bookings/reap-expired", response_model=ReapResult)
def reap_expired_bookings(
    request: Request,
    older_than_minutes: Optional[int] = Query(None, ge=1),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    """Cancel PENDING_PAYMENT bookings older than the given age."""
    if older_than_minutes is None:
        older_than_minutes = request.app.state.settings.pending_payment_ttl_minutes

    reaped = coordinator.reap_expired(timedelta(minutes=older_than_minutes))
    logger.info(f"reap-expired: {len(reaped)} booking(s) cancelled")
    return ReapResult(older_than_minutes=older_than_minutes, reaped=reaped)
