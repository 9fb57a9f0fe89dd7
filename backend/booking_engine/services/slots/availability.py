# backend/booking_engine/services/slots/availability.py
"""
Slot availability for a tenant's session type.

Loads a fresh snapshot from the stores on every call and hands it to the
pure generator. No caching: a stale snapshot would let two customers
reserve the same capacity.

Also used by the reservation coordinator to re-check a single start
instant under the reservation lock.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...errors import ValidationError
from ...models import DayOfWeek, SessionTypes, Tenants
from ..blocked_intervals import BlockedIntervalStore
from ..intervals import MINUTE_MS, Interval
from ..occupancy import find_active_bookings
from ..tenants import get_session_type, get_tenant, get_tenant_zone
from ..timezones import day_bounds, local_date, now_ms
from ..weekly_hours import WeeklyHoursStore
from .config import SlotConfig
from .generator import (
    DaySnapshot,
    Occupancy,
    Slot,
    SlotReason,
    evaluate_candidate,
    generate_slots,
    rule_windows,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySummary:
    day: date
    open_slots_count: int

    @property
    def has_slots(self) -> bool:
        return self.open_slots_count > 0


class SlotService:
    def __init__(
        self,
        db: Session,
        config: SlotConfig,
        clock: Callable[[], int] = now_ms,
    ):
        self.db = db
        self.config = config
        self.clock = clock
        self.hours = WeeklyHoursStore(db)
        self.blocks = BlockedIntervalStore(db, clock)

    def generate_slots(self, tenant_id: str, session_type_id: str, day: date) -> list[Slot]:
        tenant = get_tenant(self.db, tenant_id)
        session_type = get_session_type(self.db, tenant_id, session_type_id)
        return self._day_slots(tenant, session_type, day, self.clock())

    def calendar(
        self,
        tenant_id: str,
        session_type_id: str,
        start_date: date,
        end_date: date,
    ) -> list[DaySummary]:
        """
        Open slot count per tenant-local date in [start_date, end_date].

        The range is clamped to today .. today + horizon_days.
        """
        tenant = get_tenant(self.db, tenant_id)
        session_type = get_session_type(self.db, tenant_id, session_type_id)
        zone = get_tenant_zone(tenant)
        now = self.clock()

        today = local_date(now, zone)
        start_date = max(start_date, today)
        end_date = min(end_date, today + timedelta(days=self.config.horizon_days))

        days = []
        current = start_date
        while current <= end_date:
            slots = self._day_slots(tenant, session_type, current, now)
            days.append(DaySummary(current, sum(1 for s in slots if s.available)))
            current += timedelta(days=1)

        return days

    def check_start(
        self,
        tenant: Tenants,
        session_type: SessionTypes,
        start: int,
        participants: int = 1,
    ) -> Optional[SlotReason]:
        """
        Re-evaluate one start instant with the generator rules.

        Raises:
            ValidationError: start is not on the slot grid of its day.
        """
        zone = get_tenant_zone(tenant)
        day = local_date(start, zone)
        bounds = day_bounds(day, zone)
        if (start - bounds.start) % self.config.step_ms:
            raise ValidationError(
                f"Start must be aligned to the {self.config.slot_step_minutes}-minute slot grid"
            )

        candidate = Interval.from_start(start, session_type.duration_minutes)
        snapshot = self.load_snapshot(tenant, session_type, day, window=candidate)
        return evaluate_candidate(
            candidate,
            self.clock(),
            rule_windows(day, zone, snapshot.ranges),
            snapshot.blocks,
            snapshot.bookings,
            session_type.capacity,
            participants,
        )

    def load_snapshot(
        self,
        tenant: Tenants,
        session_type: SessionTypes,
        day: date,
        window: Optional[Interval] = None,
    ) -> DaySnapshot:
        """
        Read weekly ranges, blocks and active bookings relevant to day.

        By default the window covers the whole local day plus one session
        duration, since the last candidates of the day reach past midnight.
        """
        zone = get_tenant_zone(tenant)
        if window is None:
            bounds = day_bounds(day, zone)
            window = Interval(
                bounds.start,
                bounds.end + session_type.duration_minutes * MINUTE_MS,
            )

        ranges = self.hours.get_effective_ranges(
            tenant.id, DayOfWeek.from_weekday(day.weekday())
        )
        blocks = [b.interval for b in self.blocks.list_overlapping(tenant.id, window)]
        bookings = [
            Occupancy(b.interval, b.participants or 1)
            for b in find_active_bookings(self.db, tenant.id, window, session_type.id)
        ]
        return DaySnapshot(day=day, zone=zone, ranges=ranges, blocks=blocks, bookings=bookings)

    def _day_slots(
        self,
        tenant: Tenants,
        session_type: SessionTypes,
        day: date,
        now: int,
    ) -> list[Slot]:
        snapshot = self.load_snapshot(tenant, session_type, day)
        slots = generate_slots(
            snapshot,
            session_type.duration_minutes,
            session_type.capacity,
            now,
            self.config,
        )
        logger.debug(
            f"Slots for tenant={tenant.id} session_type={session_type.id} day={day}: "
            f"{sum(1 for s in slots if s.available)}/{len(slots)} available"
        )
        return slots
