# backend/booking_engine/routers/slots.py
"""
Slots API endpoints (public booking page).

GET /tenants/{tenant_id}/session-types/{session_type_id}/slots          - every slot of a day
GET /tenants/{tenant_id}/session-types/{session_type_id}/slots/calendar - open slot count per day
"""

from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_slot_service
from ..schemas.slots import (
    SlotRead,
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
)
from ..services.slots import SlotService
from ..services.tenants import get_session_type, get_tenant, get_tenant_zone
from ..services.timezones import local_date


router = APIRouter(
    prefix="/tenants/{tenant_id}/session-types/{session_type_id}/slots",
    tags=["slots"],
)


@router.get("", response_model=SlotsDayResponse)
def get_slots_day(
    tenant_id: str,
    session_type_id: str,
    target_date: date = Query(..., alias="date"),
    service: SlotService = Depends(get_slot_service),
):
    """Every trial slot of a tenant-local day, with availability and reason."""
    slots = service.generate_slots(tenant_id, session_type_id, target_date)
    tenant = get_tenant(service.db, tenant_id)
    session_type = get_session_type(service.db, tenant_id, session_type_id)

    return SlotsDayResponse(
        tenant_id=tenant_id,
        session_type_id=session_type_id,
        date=target_date,
        timezone=tenant.timezone,
        duration_minutes=session_type.duration_minutes,
        slot_step_minutes=service.config.slot_step_minutes,
        slots=[SlotRead.model_validate(slot) for slot in slots],
    )


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    tenant_id: str,
    session_type_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: SlotService = Depends(get_slot_service),
):
    """Calendar of days with open slots (defaults to today .. today + horizon)."""
    config = service.config
    zone = get_tenant_zone(get_tenant(service.db, tenant_id))
    today = local_date(service.clock(), zone)

    if start_date is None:
        start_date = today
    if end_date is None:
        end_date = today + timedelta(days=config.horizon_days)

    days = service.calendar(tenant_id, session_type_id, start_date, end_date)

    return SlotsCalendarResponse(
        tenant_id=tenant_id,
        session_type_id=session_type_id,
        start_date=days[0].day if days else start_date,
        end_date=days[-1].day if days else end_date,
        days=[
            SlotsDayStatus(date=d.day, has_slots=d.has_slots, open_slots_count=d.open_slots_count)
            for d in days
        ],
        horizon_days=config.horizon_days,
        slot_step_minutes=config.slot_step_minutes,
    )
