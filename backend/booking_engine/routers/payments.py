# backend/booking_engine/routers/payments.py
"""
Payment collaborator callbacks.

Called asynchronously after out-of-band settlement; the booking id is the
only context required. Stale callbacks (booking already cancelled or
failed) are logged and acknowledged so the collaborator stops retrying.
"""

import logging

from fastapi import APIRouter, Depends

from ..deps import get_coordinator
from ..errors import StaleTransitionError
from ..schemas.bookings import PaymentCallbackResult
from ..services.reservations import ReservationCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/{booking_id}/confirm", response_model=PaymentCallbackResult)
def confirm_payment(
    booking_id: str,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        booking = coordinator.confirm_payment(booking_id)
    except StaleTransitionError as e:
        logger.warning(f"Stale payment success callback ignored: {e}")
        return _stale(coordinator, booking_id)
    return PaymentCallbackResult(booking_id=booking_id, applied=True, status=booking.status)


@router.post("/{booking_id}/fail", response_model=PaymentCallbackResult)
def fail_payment(
    booking_id: str,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        booking = coordinator.fail_payment(booking_id)
    except StaleTransitionError as e:
        logger.warning(f"Stale payment failure callback ignored: {e}")
        return _stale(coordinator, booking_id)
    return PaymentCallbackResult(booking_id=booking_id, applied=True, status=booking.status)


def _stale(coordinator: ReservationCoordinator, booking_id: str) -> PaymentCallbackResult:
    booking = coordinator.get_booking(booking_id)
    return PaymentCallbackResult(booking_id=booking_id, applied=False, status=booking.status)
