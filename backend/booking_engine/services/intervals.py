# backend/booking_engine/services/intervals.py
"""
Half-open instant intervals.

An instant is an int: milliseconds since the UTC epoch.
An interval is [start, end) with start < end.

Two intervals overlap iff a.start < b.end and b.start < a.end,
so back-to-back intervals (a.end == b.start) never conflict.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from ..errors import ValidationError

MINUTE_MS = 60_000
DAY_MS = 24 * 60 * MINUTE_MS

# Supported instants: years 1000 .. 9000, well inside datetime and BIGINT
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MIN_INSTANT = (datetime(1000, 1, 1, tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)
MAX_INSTANT = (datetime(9000, 1, 1, tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True, order=True)
class Interval:
    start: int
    end: int

    def __post_init__(self):
        for name in ("start", "end"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"Interval {name} must be an integer instant, got {value!r}")
            if not MIN_INSTANT <= value <= MAX_INSTANT:
                raise ValidationError(f"Interval {name} {value} is outside the supported range")
        if self.start >= self.end:
            raise ValidationError(
                f"Interval start must be before end ({self.start} >= {self.end})"
            )

    @classmethod
    def from_start(cls, start: int, minutes: int) -> "Interval":
        return cls(start, start + minutes * MINUTE_MS)

    @property
    def duration_ms(self) -> int:
        return self.end - self.start


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and b.start < a.end


def contains(outer: Interval, point: int) -> bool:
    return outer.start <= point < outer.end


def covers(outer: Interval, inner: Interval) -> bool:
    """True if inner lies entirely inside outer."""
    return outer.start <= inner.start and inner.end <= outer.end


def subtract_all(universe: Interval, holes: list[Interval]) -> list[Interval]:
    """
    Free sub-ranges of universe after removing every hole.

    Holes may overlap each other and may stick out of universe.
    Result is ordered by start and never contains empty intervals.
    """
    free: list[Interval] = []
    cursor = universe.start

    for hole in sorted(holes):
        if hole.end <= cursor:
            continue
        if hole.start >= universe.end:
            break
        if hole.start > cursor:
            free.append(Interval(cursor, hole.start))
        cursor = max(cursor, hole.end)
        if cursor >= universe.end:
            break

    if cursor < universe.end:
        free.append(Interval(cursor, universe.end))

    return free


def bucket_range(interval: Interval, bucket_ms: int) -> range:
    """
    Indexes of the fixed-size buckets an interval touches.

    Overlapping intervals always share at least one bucket.
    """
    if bucket_ms <= 0:
        raise ValueError(f"bucket_ms must be positive, got {bucket_ms}")
    return range(interval.start // bucket_ms, (interval.end - 1) // bucket_ms + 1)
