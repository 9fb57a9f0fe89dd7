from datetime import time

import pytest

from booking_engine.errors import ValidationError
from booking_engine.models import DayOfWeek, WeeklyHours
from booking_engine.services.weekly_hours import (
    MAX_RULES_PER_DAY,
    TimeRange,
    WeeklyHoursRule,
    WeeklyHoursStore,
)


def rule(day: DayOfWeek, start: str, end: str, enabled: bool = True) -> WeeklyHoursRule:
    return WeeklyHoursRule.parse(day, start, end, enabled)


def test__replace_all_round_trip(db, tenant) -> None:
    store = WeeklyHoursStore(db)
    store.replace_all(tenant.id, [
        rule(DayOfWeek.MONDAY, "13:00", "17:00"),
        rule(DayOfWeek.MONDAY, "09:00", "12:00"),
        rule(DayOfWeek.WEDNESDAY, "10:00", "14:00", enabled=False),
    ])

    assert store.get_effective_ranges(tenant.id, DayOfWeek.MONDAY) == [
        TimeRange(time(9, 0), time(12, 0)),
        TimeRange(time(13, 0), time(17, 0)),
    ]
    assert store.get_effective_ranges(tenant.id, DayOfWeek.WEDNESDAY) == []
    assert store.get_effective_ranges(tenant.id, DayOfWeek.SUNDAY) == []
    assert list(store.get_weekly_template(tenant.id)) == [DayOfWeek.MONDAY]
    assert len(store.list_rules(tenant.id)) == 3


def test__replace_all_replaces_everything(db, tenant) -> None:
    store = WeeklyHoursStore(db)
    store.replace_all(tenant.id, [rule(DayOfWeek.MONDAY, "09:00", "17:00")])
    store.replace_all(tenant.id, [rule(DayOfWeek.FRIDAY, "08:00", "12:00")])

    assert store.get_effective_ranges(tenant.id, DayOfWeek.MONDAY) == []
    assert store.get_effective_ranges(tenant.id, DayOfWeek.FRIDAY) == [TimeRange(time(8, 0), time(12, 0))]


@pytest.mark.parametrize(
    "rules",
    [
        [rule(DayOfWeek.MONDAY, "17:00", "09:00")],
        [rule(DayOfWeek.MONDAY, "09:00", "09:00")],
        [rule(DayOfWeek.MONDAY, "09:00", "12:00"), rule(DayOfWeek.MONDAY, "11:00", "15:00")],
        [rule(DayOfWeek.MONDAY, f"{h:02d}:00", f"{h:02d}:30") for h in range(MAX_RULES_PER_DAY + 1)],
    ],
)
def test__invalid_template_keeps_previous(db, tenant, rules: list[WeeklyHoursRule]) -> None:
    store = WeeklyHoursStore(db)
    store.replace_all(tenant.id, [rule(DayOfWeek.TUESDAY, "09:00", "17:00")])

    with pytest.raises(ValidationError):
        store.replace_all(tenant.id, rules)

    assert store.get_effective_ranges(tenant.id, DayOfWeek.TUESDAY) == [TimeRange(time(9, 0), time(17, 0))]
    assert db.query(WeeklyHours).count() == 1


def test__adjacent_and_disabled_overlapping_ranges_are_allowed(db, tenant) -> None:
    store = WeeklyHoursStore(db)
    store.replace_all(tenant.id, [
        rule(DayOfWeek.MONDAY, "09:00", "12:00"),
        rule(DayOfWeek.MONDAY, "12:00", "15:00"),
        rule(DayOfWeek.MONDAY, "10:00", "11:00", enabled=False),
    ])
    assert len(store.get_effective_ranges(tenant.id, DayOfWeek.MONDAY)) == 2


def test__parse_rejects_unknown_day() -> None:
    with pytest.raises(ValidationError):
        WeeklyHoursRule.parse("FUNDAY", "09:00", "17:00")


def test__initialize_defaults_only_for_empty_template(db, tenant) -> None:
    store = WeeklyHoursStore(db)
    rules = store.initialize_defaults(tenant.id)

    assert [r.day_of_week for r in rules] == [
        DayOfWeek.MONDAY,
        DayOfWeek.TUESDAY,
        DayOfWeek.WEDNESDAY,
        DayOfWeek.THURSDAY,
        DayOfWeek.FRIDAY,
    ]
    assert store.get_effective_ranges(tenant.id, DayOfWeek.SATURDAY) == []

    store.replace_all(tenant.id, [rule(DayOfWeek.SUNDAY, "10:00", "14:00")])
    assert [r.day_of_week for r in store.initialize_defaults(tenant.id)] == [DayOfWeek.SUNDAY]
