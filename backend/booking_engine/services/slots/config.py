# backend/booking_engine/services/slots/config.py
"""
Slot generation configuration.
"""

from dataclasses import dataclass

from ..intervals import MINUTE_MS

ALLOWED_STEPS = (5, 10, 15, 20, 30, 60)


@dataclass(frozen=True)
class SlotConfig:
    """
    Configuration for slot generation and reservation.

    Attributes:
        slot_step_minutes: Spacing of trial start instants (independent of
            session duration)
        horizon_days: How many days ahead the calendar summary may reach
        lock_bucket_minutes: Size of the reservation lock buckets
    """
    slot_step_minutes: int = 30
    horizon_days: int = 60
    lock_bucket_minutes: int = 24 * 60

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in ALLOWED_STEPS:
            raise ValueError(
                f"slot_step_minutes must be one of {ALLOWED_STEPS}, got {self.slot_step_minutes}"
            )
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be positive, got {self.horizon_days}")
        if self.lock_bucket_minutes < 1:
            raise ValueError(f"lock_bucket_minutes must be positive, got {self.lock_bucket_minutes}")

    @property
    def step_ms(self) -> int:
        return self.slot_step_minutes * MINUTE_MS

    @property
    def lock_bucket_ms(self) -> int:
        return self.lock_bucket_minutes * MINUTE_MS

    @classmethod
    def from_settings(cls, settings) -> "SlotConfig":
        return cls(
            slot_step_minutes=settings.slot_step_minutes,
            horizon_days=settings.horizon_days,
            lock_bucket_minutes=settings.lock_bucket_minutes,
        )
