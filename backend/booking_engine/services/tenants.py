# backend/booking_engine/services/tenants.py
"""
Lookups of tenant configuration owned by the tenant-management side.

The engine only reads these rows; it never creates or edits them.
"""

from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models import SessionTypes, Tenants
from .timezones import get_zone


def get_tenant(db: Session, tenant_id: str) -> Tenants:
    tenant = db.get(Tenants, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant {tenant_id} not found")
    return tenant


def get_tenant_zone(tenant: Tenants) -> ZoneInfo:
    return get_zone(tenant.timezone or "UTC")


def get_session_type(
    db: Session,
    tenant_id: str,
    session_type_id: str,
    active_only: bool = True,
) -> SessionTypes:
    """
    Get a session type belonging to tenant.

    Inactive session types are not bookable and are reported as missing
    unless active_only is False.
    """
    session_type = (
        db.query(SessionTypes)
        .filter(
            SessionTypes.id == session_type_id,
            SessionTypes.tenant_id == tenant_id,
        )
        .first()
    )
    if not session_type or (active_only and not session_type.is_active):
        raise NotFoundError(f"Session type {session_type_id} not found")
    return session_type
