# backend/booking_engine/services/timezones.py
"""
Tenant wall-clock <-> instant conversion.

Every conversion goes through the tenant's IANA zone rules for the specific
date, so DST transitions are honoured. Arithmetic stays in integers.
"""

import re
import time as _time
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ValidationError
from .intervals import Interval

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def now_ms() -> int:
    """Current instant."""
    return _time.time_ns() // 1_000_000


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}")


def to_instant(dt: datetime) -> int:
    if dt.tzinfo is None:
        raise ValidationError("Naive datetimes cannot be converted to instants")
    return (dt - EPOCH) // ONE_MS


def from_instant(instant: int, zone: ZoneInfo) -> datetime:
    try:
        return (EPOCH + timedelta(milliseconds=instant)).astimezone(zone)
    except OverflowError:
        raise ValidationError(f"Instant {instant} is out of range")


def local_to_instant(day: date, wall: time, zone: ZoneInfo) -> int:
    """
    Resolve a tenant-local date + wall-clock time to an instant.

    Times inside a spring-forward gap resolve with the pre-transition
    offset (fold=0), i.e. they land after the gap.
    """
    try:
        return to_instant(datetime.combine(day, wall, tzinfo=zone))
    except OverflowError:
        raise ValidationError(f"Date {day} is out of range")


def local_date(instant: int, zone: ZoneInfo) -> date:
    return from_instant(instant, zone).date()


def day_bounds(day: date, zone: ZoneInfo) -> Interval:
    """Tenant-local calendar day [midnight, next midnight) as instants."""
    try:
        next_day = day + timedelta(days=1)
    except OverflowError:
        raise ValidationError(f"Date {day} is out of range")
    return Interval(
        local_to_instant(day, time(0, 0), zone),
        local_to_instant(next_day, time(0, 0), zone),
    )


def parse_hhmm(value: str) -> time:
    """Parse "HH:MM" (24h)."""
    match = _HHMM_RE.match(value or "")
    if not match:
        raise ValidationError(f"Expected time in HH:MM format, got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"
