# backend/booking_engine/schemas/blocked_intervals.py

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..services.intervals import MAX_INSTANT, MIN_INSTANT


class BlockedIntervalCreate(BaseModel):
    start_ms: int = Field(ge=MIN_INSTANT, le=MAX_INSTANT, description="Block start, ms since epoch (UTC)")
    end_ms: int = Field(ge=MIN_INSTANT, le=MAX_INSTANT, description="Block end (exclusive), ms since epoch (UTC)")
    reason: Optional[str] = Field(None, max_length=500)
    force: bool = Field(False, description="Block even if active bookings overlap")

    @model_validator(mode="after")
    def check_order(self):
        if self.start_ms >= self.end_ms:
            raise ValueError("start_ms must be before end_ms")
        return self


class BlockedIntervalRead(BaseModel):
    id: str
    tenant_id: str
    start_ms: int
    end_ms: int
    reason: Optional[str] = None
    created_by: Optional[str] = None
    created_at_ms: int

    model_config = {"from_attributes": True}


class BlockedIntervalDeleted(BaseModel):
    id: str
    deleted: bool
