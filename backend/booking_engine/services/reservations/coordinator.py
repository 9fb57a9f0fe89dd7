# backend/booking_engine/services/reservations/coordinator.py
"""
Reservation coordinator.

Claims a slot for a customer and drives the booking lifecycle:

    NONE -> PENDING_PAYMENT -> CONFIRMED | PAYMENT_FAILED | CANCELLED
    CONFIRMED -> CANCELLED

reserve() holds the reservation lock only while it re-validates the slot
and persists the PENDING_PAYMENT row. Payment settles out of band and
comes back through confirm_payment() / fail_payment(), which need nothing
but the booking id.
"""

import enum
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import (
    NotFoundError,
    PermissionDeniedError,
    SlotUnavailableError,
    StaleTransitionError,
    ValidationError,
)
from ...models import Bookings, BookingStatus, SessionTypes
from ..events import BOOKING_CANCELLED, BOOKING_CONFIRMED, EventEmitter
from ..intervals import Interval
from ..slots.availability import SlotService
from ..slots.config import SlotConfig
from ..tenants import get_session_type, get_tenant
from ..timezones import now_ms
from .locks import ReservationLock, lock_keys

logger = logging.getLogger(__name__)

PAYMENT_TIMEOUT_REASON = "payment_timeout"


class ActorKind(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    BUSINESS = "BUSINESS"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller, as supplied by the identity collaborator."""
    kind: ActorKind
    id: str
    tenant_id: Optional[str] = None

    def can_access(self, booking: Bookings) -> bool:
        """Customers reach their own bookings, business staff their tenant's."""
        if self.kind == ActorKind.SYSTEM:
            return True
        if self.kind == ActorKind.BUSINESS:
            return self.tenant_id == booking.tenant_id
        return self.id == booking.customer_id


SYSTEM_ACTOR = Actor(ActorKind.SYSTEM, "system")


class ReservationCoordinator:
    def __init__(
        self,
        db: Session,
        lock: ReservationLock,
        events: EventEmitter,
        config: SlotConfig,
        payments_enabled: bool = True,
        clock: Callable[[], int] = now_ms,
    ):
        self.db = db
        self.lock = lock
        self.events = events
        self.config = config
        self.payments_enabled = payments_enabled
        self.clock = clock
        self.slots = SlotService(db, config, clock)

    # ── Reserve ──────────────────────────────────────────────────────────

    def reserve(
        self,
        tenant_id: str,
        session_type_id: str,
        customer_id: str,
        start: int,
        participants: int = 1,
        notes: Optional[str] = None,
        customer_timezone: Optional[str] = None,
    ) -> Bookings:
        """
        Claim the slot starting at start.

        Returns the persisted booking: PENDING_PAYMENT, or CONFIRMED when no
        payment is needed.

        Raises:
            NotFoundError: unknown tenant or session type.
            ValidationError: bad participants or an off-grid start.
            SlotUnavailableError: the slot fails any availability check.
        """
        tenant = get_tenant(self.db, tenant_id)
        session_type = get_session_type(self.db, tenant_id, session_type_id)

        if participants < 1:
            raise ValidationError("participants must be at least 1")
        if participants > session_type.capacity:
            raise ValidationError(
                f"participants ({participants}) exceed session capacity ({session_type.capacity})"
            )

        candidate = Interval.from_start(start, session_type.duration_minutes)
        keys = lock_keys(tenant.id, session_type.id, candidate, self.config.lock_bucket_ms)

        with self.lock.hold(keys):
            reason = self.slots.check_start(tenant, session_type, start, participants)
            if reason is not None:
                logger.info(
                    f"Reservation refused for tenant={tenant.id} "
                    f"session_type={session_type.id} start={start}: {reason.value}"
                )
                raise SlotUnavailableError(reason.value)

            booking = self._persist_new_booking(
                session_type, customer_id, candidate, participants, notes, customer_timezone
            )

        logger.info(
            f"Booking {booking.id} created with status: {booking.status.value} "
            f"(payments enabled: {self.payments_enabled}, free session: {_is_free(session_type)})"
        )
        if booking.status == BookingStatus.CONFIRMED:
            self.events.booking_event(BOOKING_CONFIRMED, booking)
        return booking

    def _persist_new_booking(
        self,
        session_type: SessionTypes,
        customer_id: str,
        candidate: Interval,
        participants: int,
        notes: Optional[str],
        customer_timezone: Optional[str],
    ) -> Bookings:
        if self.payments_enabled and not _is_free(session_type):
            status = BookingStatus.PENDING_PAYMENT
        else:
            status = BookingStatus.CONFIRMED

        now = self.clock()
        booking = Bookings(
            id=str(uuid.uuid4()),
            tenant_id=session_type.tenant_id,
            session_type_id=session_type.id,
            customer_id=customer_id,
            start_ms=candidate.start,
            end_ms=candidate.end,
            status=status,
            participants=participants,
            notes=notes,
            customer_timezone=customer_timezone,
            created_at_ms=now,
            updated_at_ms=now,
        )
        try:
            self.db.add(booking)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                f"Failed to persist booking for session_type={session_type.id} start={candidate.start}"
            )
            raise

        self.db.refresh(booking)
        return booking

    # ── Payment callbacks ────────────────────────────────────────────────

    def confirm_payment(self, booking_id: str) -> Bookings:
        """
        PENDING_PAYMENT -> CONFIRMED. Already CONFIRMED is a no-op.

        Raises:
            StaleTransitionError: booking is CANCELLED or PAYMENT_FAILED.
        """
        booking = self._get_for_update(booking_id)

        if booking.status == BookingStatus.CONFIRMED:
            self.db.rollback()
            logger.info(f"Booking {booking_id} already CONFIRMED, ignoring duplicate callback")
            return booking
        if booking.status != BookingStatus.PENDING_PAYMENT:
            self.db.rollback()
            raise StaleTransitionError(booking_id, booking.status.value, BookingStatus.CONFIRMED.value)

        self._transition(booking, BookingStatus.CONFIRMED)
        logger.info(f"Booking {booking_id} status updated to CONFIRMED")
        self.events.booking_event(BOOKING_CONFIRMED, booking)
        return booking

    def fail_payment(self, booking_id: str) -> Bookings:
        """
        PENDING_PAYMENT -> PAYMENT_FAILED, releasing the held capacity.
        Already PAYMENT_FAILED is a no-op.

        Raises:
            StaleTransitionError: booking is CONFIRMED or CANCELLED.
        """
        booking = self._get_for_update(booking_id)

        if booking.status == BookingStatus.PAYMENT_FAILED:
            self.db.rollback()
            logger.info(f"Booking {booking_id} already PAYMENT_FAILED, ignoring duplicate callback")
            return booking
        if booking.status != BookingStatus.PENDING_PAYMENT:
            self.db.rollback()
            raise StaleTransitionError(
                booking_id, booking.status.value, BookingStatus.PAYMENT_FAILED.value
            )

        self._transition(booking, BookingStatus.PAYMENT_FAILED)
        logger.info(f"Booking {booking_id} status updated to PAYMENT_FAILED")
        return booking

    # ── Cancellation ─────────────────────────────────────────────────────

    def cancel(self, booking_id: str, actor: Actor, reason: Optional[str] = None) -> Bookings:
        """
        Move an active booking to CANCELLED. Idempotent: a booking that is
        already CANCELLED or PAYMENT_FAILED holds no capacity and is
        returned unchanged.

        Raises:
            PermissionDeniedError: actor may not cancel this booking.
        """
        booking = self._get_for_update(booking_id)

        if not actor.can_access(booking):
            self.db.rollback()
            raise PermissionDeniedError(
                f"{actor.kind.value} {actor.id} may not cancel booking {booking_id}"
            )

        if not booking.is_active:
            self.db.rollback()
            logger.info(f"Booking {booking_id} is {booking.status.value}, cancel is a no-op")
            return booking

        now = self.clock()
        booking.cancel_reason = reason
        booking.cancelled_by = f"{actor.kind.value}:{actor.id}"
        booking.cancelled_at_ms = now
        self._transition(booking, BookingStatus.CANCELLED)

        logger.info(f"Booking {booking_id} cancelled by {booking.cancelled_by}")
        self.events.booking_event(BOOKING_CANCELLED, booking)
        return booking

    def reap_expired(self, older_than: timedelta) -> list[str]:
        """
        Cancel PENDING_PAYMENT bookings created more than older_than ago.

        Invoked by an external scheduler. Returns the ids of reaped bookings.
        """
        cutoff = self.clock() - older_than // timedelta(milliseconds=1)

        stale_ids = [
            row.id
            for row in self.db.query(Bookings.id)
            .filter(
                Bookings.status == BookingStatus.PENDING_PAYMENT,
                Bookings.created_at_ms < cutoff,
            )
            .all()
        ]
        self.db.rollback()

        reaped = []
        for booking_id in stale_ids:
            try:
                booking = self._get_for_update(booking_id)
                # A payment callback may have landed since the scan
                if booking.status != BookingStatus.PENDING_PAYMENT:
                    self.db.rollback()
                    continue
                booking.cancel_reason = PAYMENT_TIMEOUT_REASON
                booking.cancelled_by = f"{SYSTEM_ACTOR.kind.value}:{SYSTEM_ACTOR.id}"
                booking.cancelled_at_ms = self.clock()
                self._transition(booking, BookingStatus.CANCELLED)
            except (NotFoundError, SQLAlchemyError):
                logger.exception(f"Error reaping booking {booking_id}")
                continue

            reaped.append(booking_id)
            self.events.booking_event(BOOKING_CANCELLED, booking)

        if reaped:
            logger.info(f"Reaped {len(reaped)} expired PENDING_PAYMENT booking(s)")
        return reaped

    # ── Reads ────────────────────────────────────────────────────────────

    def get_booking(self, booking_id: str) -> Bookings:
        booking = self.db.get(Bookings, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def list_bookings(
        self,
        tenant_id: str,
        status: Optional[BookingStatus] = None,
        upcoming_only: bool = False,
    ) -> list[Bookings]:
        get_tenant(self.db, tenant_id)
        query = self.db.query(Bookings).filter(Bookings.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(Bookings.status == status)
        if upcoming_only:
            query = query.filter(Bookings.start_ms >= self.clock())
        return query.order_by(Bookings.start_ms).all()

    def list_customer_bookings(self, customer_id: str) -> list[Bookings]:
        return (
            self.db.query(Bookings)
            .filter(Bookings.customer_id == customer_id)
            .order_by(Bookings.start_ms)
            .all()
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _get_for_update(self, booking_id: str) -> Bookings:
        booking = (
            self.db.query(Bookings)
            .filter(Bookings.id == booking_id)
            .populate_existing()
            .with_for_update()
            .first()
        )
        if not booking:
            self.db.rollback()
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def _transition(self, booking: Bookings, status: BookingStatus) -> None:
        booking.status = status
        booking.updated_at_ms = self.clock()
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to move booking {booking.id} to {status.value}")
            raise
        self.db.refresh(booking)


def _is_free(session_type: SessionTypes) -> bool:
    return session_type.price is None or Decimal(session_type.price) == 0
