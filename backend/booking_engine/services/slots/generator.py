# backend/booking_engine/services/slots/generator.py
"""
Pure slot generation.

Works on a snapshot (weekly ranges, blocks, bookings) and the evaluator's
current instant. Nothing here touches the database or keeps state between
calls, so the same inputs always give the same slots.

For each trial instant t of the tenant-local day:
    candidate = [t, t + duration)
    PAST           t <= now
    OUTSIDE_HOURS  candidate not inside any enabled weekly range
    BLOCKED        candidate overlaps a blocked interval
    AT_CAPACITY    occupancy of overlapping active bookings reached capacity
First matching reason wins; no reason = available.
"""

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from zoneinfo import ZoneInfo

from ..intervals import Interval, covers, overlaps
from ..timezones import day_bounds, local_to_instant
from ..weekly_hours import TimeRange
from .config import SlotConfig


class SlotReason(str, enum.Enum):
    PAST = "PAST"
    OUTSIDE_HOURS = "OUTSIDE_HOURS"
    BLOCKED = "BLOCKED"
    AT_CAPACITY = "AT_CAPACITY"


@dataclass(frozen=True)
class Occupancy:
    """An active booking as seen by the generator."""
    interval: Interval
    participants: int = 1


@dataclass(frozen=True)
class DaySnapshot:
    day: date
    zone: ZoneInfo
    ranges: list[TimeRange] = field(default_factory=list)
    blocks: list[Interval] = field(default_factory=list)
    bookings: list[Occupancy] = field(default_factory=list)


@dataclass(frozen=True)
class Slot:
    start: int
    end: int
    available: bool
    reason: Optional[SlotReason] = None


def trial_instants(day: date, zone: ZoneInfo, step_ms: int) -> list[int]:
    """
    Trial start instants from local midnight up to the next local midnight.

    Stepping is done on instants, so a 23h or 25h DST day simply yields
    fewer or more trials.
    """
    bounds = day_bounds(day, zone)
    return list(range(bounds.start, bounds.end, step_ms))


def rule_windows(day: date, zone: ZoneInfo, ranges: list[TimeRange]) -> list[Interval]:
    """Weekly ranges of the day resolved to instant windows."""
    windows = []
    for time_range in ranges:
        start = local_to_instant(day, time_range.start, zone)
        end = local_to_instant(day, time_range.end, zone)
        if start < end:
            windows.append(Interval(start, end))
    return windows


def occupancy_of(candidate: Interval, bookings: list[Occupancy]) -> int:
    return sum(b.participants for b in bookings if overlaps(b.interval, candidate))


def evaluate_candidate(
    candidate: Interval,
    now: int,
    windows: list[Interval],
    blocks: list[Interval],
    bookings: list[Occupancy],
    capacity: int,
    participants: int = 1,
) -> Optional[SlotReason]:
    """Reason the candidate is unavailable, or None if it can be booked."""
    if candidate.start <= now:
        return SlotReason.PAST
    if not any(covers(window, candidate) for window in windows):
        return SlotReason.OUTSIDE_HOURS
    if any(overlaps(block, candidate) for block in blocks):
        return SlotReason.BLOCKED
    if occupancy_of(candidate, bookings) + participants > capacity:
        return SlotReason.AT_CAPACITY
    return None


def generate_slots(
    snapshot: DaySnapshot,
    duration_minutes: int,
    capacity: int,
    now: int,
    config: SlotConfig,
) -> list[Slot]:
    """All trial slots of snapshot.day with availability and reason."""
    windows = rule_windows(snapshot.day, snapshot.zone, snapshot.ranges)
    slots = []

    for t in trial_instants(snapshot.day, snapshot.zone, config.step_ms):
        candidate = Interval.from_start(t, duration_minutes)
        reason = evaluate_candidate(
            candidate,
            now,
            windows,
            snapshot.blocks,
            snapshot.bookings,
            capacity,
        )
        slots.append(Slot(
            start=candidate.start,
            end=candidate.end,
            available=reason is None,
            reason=reason,
        ))

    return slots
