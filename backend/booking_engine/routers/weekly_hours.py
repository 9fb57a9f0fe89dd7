# backend/booking_engine/routers/weekly_hours.py

from fastapi import APIRouter, Depends

from ..deps import get_weekly_hours_store, require_business
from ..schemas.weekly_hours import (
    TimeRangeRead,
    WeeklyHoursRead,
    WeeklyHoursReplace,
    WeeklyHoursRuleRead,
)
from ..services.tenants import get_tenant
from ..services.weekly_hours import WeeklyHoursRule, WeeklyHoursStore

router = APIRouter(prefix="/tenants/{tenant_id}/weekly-hours", tags=["weekly-hours"])


@router.get("", response_model=WeeklyHoursRead)
def get_weekly_hours(
    tenant_id: str,
    store: WeeklyHoursStore = Depends(get_weekly_hours_store),
):
    get_tenant(store.db, tenant_id)
    return _read(tenant_id, store)


@router.put("", response_model=WeeklyHoursRead, dependencies=[Depends(require_business)])
def replace_weekly_hours(
    tenant_id: str,
    data: WeeklyHoursReplace,
    store: WeeklyHoursStore = Depends(get_weekly_hours_store),
):
    get_tenant(store.db, tenant_id)
    rules = [
        WeeklyHoursRule.parse(r.day_of_week, r.start_time, r.end_time, r.enabled)
        for r in data.rules
    ]
    store.replace_all(tenant_id, rules)
    return _read(tenant_id, store)


def _read(tenant_id: str, store: WeeklyHoursStore) -> WeeklyHoursRead:
    rules = [
        WeeklyHoursRuleRead(
            day_of_week=rule.day_of_week,
            start_time=rule.time_range.as_strings()[0],
            end_time=rule.time_range.as_strings()[1],
            enabled=rule.enabled,
        )
        for rule in store.list_rules(tenant_id)
    ]
    template = {
        day: [TimeRangeRead(start=start, end=end) for start, end in (r.as_strings() for r in ranges)]
        for day, ranges in store.get_weekly_template(tenant_id).items()
    }
    return WeeklyHoursRead(tenant_id=tenant_id, rules=rules, template=template)
