from .tables import (
    ACTIVE_BOOKING_STATUSES,
    Base,
    BlockedIntervals,
    Bookings,
    BookingStatus,
    DayOfWeek,
    SessionTypes,
    Tenants,
    WeeklyHours,
    metadata,
)

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "Base",
    "BlockedIntervals",
    "Bookings",
    "BookingStatus",
    "DayOfWeek",
    "SessionTypes",
    "Tenants",
    "WeeklyHours",
    "metadata",
]
