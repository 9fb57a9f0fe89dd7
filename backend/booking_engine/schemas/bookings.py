# backend/booking_engine/schemas/bookings.py

from typing import Optional

from pydantic import BaseModel, Field

from ..models import BookingStatus
from ..services.intervals import MAX_INSTANT, MIN_INSTANT


class BookingCreate(BaseModel):
    session_type_id: str = Field(max_length=36)
    customer_id: str = Field(min_length=1, max_length=36)
    start_ms: int = Field(
        ge=MIN_INSTANT, le=MAX_INSTANT, description="Chosen slot start, ms since epoch (UTC)"
    )
    participants: int = Field(1, ge=1)
    notes: Optional[str] = Field(None, max_length=2000)
    customer_timezone: Optional[str] = Field(None, max_length=64)


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingRead(BaseModel):
    id: str
    confirmation_number: str

    tenant_id: str
    session_type_id: str
    customer_id: str

    start_ms: int
    end_ms: int
    participants: int

    status: BookingStatus
    notes: Optional[str] = None
    customer_timezone: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    cancelled_at_ms: Optional[int] = None

    created_at_ms: int
    updated_at_ms: int

    model_config = {"from_attributes": True}


class PaymentCallbackResult(BaseModel):
    """Acknowledgement returned to the payment collaborator."""
    booking_id: str
    acknowledged: bool = True
    applied: bool
    status: BookingStatus


class ReapResult(BaseModel):
    older_than_minutes: int
    reaped: list[str]
