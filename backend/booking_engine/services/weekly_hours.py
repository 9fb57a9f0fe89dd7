# backend/booking_engine/services/weekly_hours.py
"""
Weekly hours store.

Recurring per-tenant availability template, keyed by day of week.
Times are tenant-local "HH:MM" strings; they are resolved to instants
only by the slot generator, for a concrete date.

Writes replace the whole template at once (all-or-nothing).
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models import DayOfWeek, WeeklyHours
from .timezones import format_hhmm, parse_hhmm

logger = logging.getLogger(__name__)

MAX_RULES_PER_DAY = 8

DEFAULT_OPEN = time(9, 0)
DEFAULT_CLOSE = time(17, 0)
DEFAULT_DAYS = (
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
)


@dataclass(frozen=True, order=True)
class TimeRange:
    start: time
    end: time

    def as_strings(self) -> tuple[str, str]:
        return format_hhmm(self.start), format_hhmm(self.end)


@dataclass(frozen=True)
class WeeklyHoursRule:
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    enabled: bool = True

    @classmethod
    def parse(
        cls,
        day_of_week: DayOfWeek | str,
        start_time: str,
        end_time: str,
        enabled: bool = True,
    ) -> "WeeklyHoursRule":
        try:
            day = DayOfWeek(day_of_week)
        except ValueError:
            raise ValidationError(f"Unknown day of week: {day_of_week!r}")
        return cls(day, parse_hhmm(start_time), parse_hhmm(end_time), enabled)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)


def validate_rules(rules: list[WeeklyHoursRule]) -> None:
    """
    Reject a template that cannot be stored.

    - start_time must be before end_time
    - enabled ranges of one day must not overlap
    - at most MAX_RULES_PER_DAY rules per day
    """
    per_day: dict[DayOfWeek, list[WeeklyHoursRule]] = {}

    for rule in rules:
        if rule.start_time >= rule.end_time:
            raise ValidationError(
                f"{rule.day_of_week.value}: start {format_hhmm(rule.start_time)} "
                f"must be before end {format_hhmm(rule.end_time)}"
            )
        per_day.setdefault(rule.day_of_week, []).append(rule)

    for day, day_rules in per_day.items():
        if len(day_rules) > MAX_RULES_PER_DAY:
            raise ValidationError(
                f"{day.value}: at most {MAX_RULES_PER_DAY} ranges per day, got {len(day_rules)}"
            )

        enabled = sorted(r.time_range for r in day_rules if r.enabled)
        for prev, nxt in zip(enabled, enabled[1:]):
            if nxt.start < prev.end:
                raise ValidationError(
                    f"{day.value}: ranges {'-'.join(prev.as_strings())} "
                    f"and {'-'.join(nxt.as_strings())} overlap"
                )


class WeeklyHoursStore:
    """Read/replace a tenant's weekly template."""

    def __init__(self, db: Session):
        self.db = db

    # ── Read ─────────────────────────────────────────────────────────────

    def get_effective_ranges(self, tenant_id: str, day_of_week: DayOfWeek) -> list[TimeRange]:
        """Enabled ranges for one day, ordered by start. Empty = closed."""
        rows = (
            self.db.query(WeeklyHours)
            .filter(
                WeeklyHours.tenant_id == tenant_id,
                WeeklyHours.day_of_week == day_of_week,
                WeeklyHours.enabled.is_(True),
            )
            .all()
        )
        return sorted(_to_rule(row).time_range for row in rows)

    def get_weekly_template(self, tenant_id: str) -> dict[DayOfWeek, list[TimeRange]]:
        """Enabled ranges for every day that has any."""
        template: dict[DayOfWeek, list[TimeRange]] = {}
        for rule in self.list_rules(tenant_id):
            if rule.enabled:
                template.setdefault(rule.day_of_week, []).append(rule.time_range)
        return {day: sorted(ranges) for day, ranges in template.items()}

    def list_rules(self, tenant_id: str) -> list[WeeklyHoursRule]:
        """All stored rules, disabled ones included."""
        rows = self.db.query(WeeklyHours).filter(WeeklyHours.tenant_id == tenant_id).all()
        day_order = list(DayOfWeek)
        return sorted(
            (_to_rule(row) for row in rows),
            key=lambda r: (day_order.index(r.day_of_week), r.start_time, r.end_time),
        )

    # ── Write ────────────────────────────────────────────────────────────

    def replace_all(self, tenant_id: str, rules: list[WeeklyHoursRule]) -> list[WeeklyHoursRule]:
        """
        Replace the full weekly template.

        Validation runs before anything is touched; the delete and the
        inserts share one transaction, so a failure keeps the old template.
        """
        validate_rules(rules)

        try:
            self.db.query(WeeklyHours).filter(
                WeeklyHours.tenant_id == tenant_id
            ).delete(synchronize_session=False)

            for rule in rules:
                self.db.add(WeeklyHours(
                    id=str(uuid.uuid4()),
                    tenant_id=tenant_id,
                    day_of_week=rule.day_of_week,
                    start_time=format_hhmm(rule.start_time),
                    end_time=format_hhmm(rule.end_time),
                    enabled=rule.enabled,
                ))

            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to replace weekly hours for tenant {tenant_id}")
            raise

        logger.info(f"Weekly hours replaced for tenant {tenant_id}: {len(rules)} rules")
        return self.list_rules(tenant_id)

    def initialize_defaults(self, tenant_id: str) -> list[WeeklyHoursRule]:
        """Monday–Friday 09:00–17:00 for a tenant without any rules."""
        existing = self.list_rules(tenant_id)
        if existing:
            return existing

        defaults = [
            WeeklyHoursRule(day, DEFAULT_OPEN, DEFAULT_CLOSE)
            for day in DEFAULT_DAYS
        ]
        return self.replace_all(tenant_id, defaults)


def _to_rule(row: WeeklyHours) -> WeeklyHoursRule:
    return WeeklyHoursRule(
        day_of_week=DayOfWeek(row.day_of_week),
        start_time=parse_hhmm(row.start_time),
        end_time=parse_hhmm(row.end_time),
        enabled=bool(row.enabled),
    )
