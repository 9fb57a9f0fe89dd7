# backend/booking_engine/routers/blocked_intervals.py

from typing import Optional

from fastapi import APIRouter, Depends, status

from ..deps import get_blocked_interval_store, require_business
from ..schemas.blocked_intervals import (
    BlockedIntervalCreate,
    BlockedIntervalDeleted,
    BlockedIntervalRead,
)
from ..services.blocked_intervals import BlockedIntervalStore
from ..services.intervals import Interval
from ..services.reservations import Actor
from ..services.tenants import get_tenant

router = APIRouter(
    prefix="/tenants/{tenant_id}/blocked-intervals",
    tags=["blocked-intervals"],
)


@router.get("", response_model=list[BlockedIntervalRead], dependencies=[Depends(require_business)])
def list_blocked_intervals(
    tenant_id: str,
    start_ms: Optional[int] = None,
    end_ms: Optional[int] = None,
    upcoming_only: bool = False,
    store: BlockedIntervalStore = Depends(get_blocked_interval_store),
):
    get_tenant(store.db, tenant_id)
    if start_ms is not None and end_ms is not None:
        return store.list_overlapping(tenant_id, Interval(start_ms, end_ms))
    return store.list_for_tenant(tenant_id, upcoming_only=upcoming_only)


@router.post("", response_model=BlockedIntervalRead, status_code=status.HTTP_201_CREATED)
def create_blocked_interval(
    tenant_id: str,
    data: BlockedIntervalCreate,
    actor: Actor = Depends(require_business),
    store: BlockedIntervalStore = Depends(get_blocked_interval_store),
):
    get_tenant(store.db, tenant_id)
    return store.create(
        tenant_id,
        Interval(data.start_ms, data.end_ms),
        reason=data.reason,
        force=data.force,
        created_by=actor.id,
    )


@router.delete("/{block_id}", response_model=BlockedIntervalDeleted, dependencies=[Depends(require_business)])
def delete_blocked_interval(
    tenant_id: str,
    block_id: str,
    store: BlockedIntervalStore = Depends(get_blocked_interval_store),
):
    return BlockedIntervalDeleted(id=block_id, deleted=store.delete(tenant_id, block_id))
