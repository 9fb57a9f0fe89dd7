# backend/booking_engine/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from ..services.slots import SlotReason


class SlotRead(BaseModel):
    """A single trial slot."""
    start: int = Field(description="Start instant, ms since epoch (UTC)")
    end: int = Field(description="End instant (exclusive)")
    available: bool
    reason: Optional[SlotReason] = None

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Every trial slot of one tenant-local day."""
    tenant_id: str
    session_type_id: str
    date: date
    timezone: str
    duration_minutes: int
    slot_step_minutes: int
    slots: list[SlotRead]


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_slots: bool
    open_slots_count: int = 0

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    tenant_id: str
    session_type_id: str
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int
    slot_step_minutes: int
