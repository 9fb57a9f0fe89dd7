# backend/booking_engine/schemas/weekly_hours.py

from pydantic import BaseModel, Field

from ..models import DayOfWeek

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class WeeklyHoursRuleIn(BaseModel):
    day_of_week: DayOfWeek
    start_time: str = Field(pattern=HHMM_PATTERN, description="Tenant-local HH:MM")
    end_time: str = Field(pattern=HHMM_PATTERN, description="Tenant-local HH:MM")
    enabled: bool = True


class WeeklyHoursReplace(BaseModel):
    """Full weekly template; replaces everything stored for the tenant."""
    rules: list[WeeklyHoursRuleIn]


class WeeklyHoursRuleRead(BaseModel):
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    enabled: bool


class TimeRangeRead(BaseModel):
    start: str
    end: str


class WeeklyHoursRead(BaseModel):
    tenant_id: str
    rules: list[WeeklyHoursRuleRead]
    # Enabled ranges only, keyed by day
    template: dict[DayOfWeek, list[TimeRangeRead]]
