# backend/booking_engine/services/blocked_intervals.py
"""
Blocked-interval store.

Ad-hoc unavailability windows of a tenant (holidays, breaks, manual
blocks). The slot generator treats them as opaque: any overlap makes a
candidate BLOCKED, regardless of why the block exists.
"""

import logging
import uuid
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import BlockConflictError, ValidationError
from ..models import BlockedIntervals
from .intervals import Interval
from .occupancy import find_active_bookings
from .timezones import now_ms

logger = logging.getLogger(__name__)


class BlockedIntervalStore:
    def __init__(self, db: Session, clock: Callable[[], int] = now_ms):
        self.db = db
        self.clock = clock

    # ── Read ─────────────────────────────────────────────────────────────

    def list_overlapping(self, tenant_id: str, window: Interval) -> list[BlockedIntervals]:
        return (
            self.db.query(BlockedIntervals)
            .filter(
                BlockedIntervals.tenant_id == tenant_id,
                BlockedIntervals.start_ms < window.end,
                BlockedIntervals.end_ms > window.start,
            )
            .order_by(BlockedIntervals.start_ms)
            .all()
        )

    def list_for_tenant(self, tenant_id: str, upcoming_only: bool = False) -> list[BlockedIntervals]:
        query = self.db.query(BlockedIntervals).filter(BlockedIntervals.tenant_id == tenant_id)
        if upcoming_only:
            query = query.filter(BlockedIntervals.end_ms > self.clock())
        return query.order_by(BlockedIntervals.start_ms).all()

    # ── Write ────────────────────────────────────────────────────────────

    def create(
        self,
        tenant_id: str,
        interval: Interval,
        reason: Optional[str] = None,
        force: bool = False,
        created_by: Optional[str] = None,
    ) -> BlockedIntervals:
        """
        Block interval for tenant.

        Raises:
            ValidationError: interval starts at or before now.
            BlockConflictError: an active booking overlaps and force is False.
        """
        now = self.clock()
        if interval.start <= now:
            raise ValidationError("Cannot block time in the past")

        if not force:
            conflicts = find_active_bookings(self.db, tenant_id, interval)
            if conflicts:
                ids = ", ".join(b.id for b in conflicts)
                raise BlockConflictError(
                    f"Interval overlaps {len(conflicts)} active booking(s): {ids}"
                )

        block = BlockedIntervals(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            start_ms=interval.start,
            end_ms=interval.end,
            reason=reason,
            created_by=created_by,
            created_at_ms=now,
        )
        try:
            self.db.add(block)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create block for tenant {tenant_id}")
            raise

        self.db.refresh(block)
        logger.info(
            f"Block {block.id} created for tenant {tenant_id}: "
            f"[{interval.start}, {interval.end}) force={force}"
        )
        return block

    def delete(self, tenant_id: str, block_id: str) -> bool:
        """Delete a block. Missing blocks are a no-op (returns False)."""
        block = (
            self.db.query(BlockedIntervals)
            .filter(
                BlockedIntervals.id == block_id,
                BlockedIntervals.tenant_id == tenant_id,
            )
            .first()
        )
        if not block:
            return False

        try:
            self.db.delete(block)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete block {block_id}")
            raise

        logger.info(f"Block {block_id} deleted for tenant {tenant_id}")
        return True
