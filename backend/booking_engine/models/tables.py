import enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

from ..services.intervals import Interval

Base = declarative_base()
metadata = Base.metadata


class DayOfWeek(str, enum.Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_weekday(cls, weekday: int) -> "DayOfWeek":
        """0 = Monday, 6 = Sunday (``date.weekday()``)."""
        return list(cls)[weekday]


class BookingStatus(str, enum.Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    CONFIRMED = "CONFIRMED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    CANCELLED = "CANCELLED"


# Statuses that hold capacity
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING_PAYMENT, BookingStatus.CONFIRMED)


class Tenants(Base):
    __tablename__ = 'tenants'

    id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    timezone = Column(Text, nullable=False, server_default=text("'UTC'"))
    status = Column(Text, nullable=False, server_default=text("'ACTIVE'"))
    created_at_ms = Column(BigInteger)

    session_types = relationship('SessionTypes', back_populates='tenant')
    weekly_hours = relationship('WeeklyHours', back_populates='tenant')
    blocked_intervals = relationship('BlockedIntervals', back_populates='tenant')


class SessionTypes(Base):
    __tablename__ = 'session_types'

    id = Column(String(36), primary_key=True)
    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False, server_default=text('1'))
    price = Column(Numeric(10, 2), nullable=False, server_default=text('0'))
    currency = Column(String(3), nullable=False, server_default=text("'USD'"))
    is_active = Column(Boolean, nullable=False, server_default=text('1'))
    description = Column(Text)

    tenant = relationship('Tenants', back_populates='session_types')


class WeeklyHours(Base):
    __tablename__ = 'weekly_hours'
    __table_args__ = (
        Index('ix_weekly_hours_tenant_day', 'tenant_id', 'day_of_week'),
    )

    id = Column(String(36), primary_key=True)
    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Enum(DayOfWeek, native_enum=False, length=9), nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM", tenant-local
    end_time = Column(String(5), nullable=False)
    enabled = Column(Boolean, nullable=False, server_default=text('1'))

    tenant = relationship('Tenants', back_populates='weekly_hours')


class BlockedIntervals(Base):
    __tablename__ = 'blocked_intervals'
    __table_args__ = (
        Index('ix_blocked_intervals_tenant_start', 'tenant_id', 'start_ms'),
    )

    id = Column(String(36), primary_key=True)
    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    start_ms = Column(BigInteger, nullable=False)
    end_ms = Column(BigInteger, nullable=False)
    reason = Column(Text)
    created_by = Column(String(36))
    created_at_ms = Column(BigInteger, nullable=False)

    tenant = relationship('Tenants', back_populates='blocked_intervals')

    @property
    def interval(self) -> Interval:
        return Interval(self.start_ms, self.end_ms)


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_tenant_session_start', 'tenant_id', 'session_type_id', 'start_ms'),
        Index('ix_bookings_status_created', 'status', 'created_at_ms'),
    )

    id = Column(String(36), primary_key=True)
    tenant_id = Column(ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    session_type_id = Column(ForeignKey('session_types.id', ondelete='CASCADE'), nullable=False)
    customer_id = Column(String(36), nullable=False)
    start_ms = Column(BigInteger, nullable=False)
    end_ms = Column(BigInteger, nullable=False)
    status = Column(
        Enum(BookingStatus, native_enum=False, length=16),
        nullable=False,
        server_default=text("'PENDING_PAYMENT'"),
    )
    participants = Column(Integer, nullable=False, server_default=text('1'))
    notes = Column(Text)
    customer_timezone = Column(Text)
    cancel_reason = Column(Text)
    cancelled_by = Column(Text)
    cancelled_at_ms = Column(BigInteger)
    created_at_ms = Column(BigInteger, nullable=False)
    updated_at_ms = Column(BigInteger, nullable=False)

    session_type = relationship('SessionTypes')

    @property
    def interval(self) -> Interval:
        return Interval(self.start_ms, self.end_ms)

    @property
    def confirmation_number(self) -> str:
        return "BK-" + self.id.replace("-", "")[:8].upper()

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES
