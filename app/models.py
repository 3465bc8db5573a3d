import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ACTIVE_RESERVATION_STATUSES = ("pending", "confirmed")
IDEMPOTENCY_KEY_MAX_LENGTH = 128


def generate_id(prefix: str = "") -> str:
    """Generate an opaque document identifier, optionally prefixed"""
    token = uuid.uuid4().hex[:20]
    return f"{prefix}_{token}" if prefix else token


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(64), primary_key=True, default=lambda: generate_id("tenant"))
    name = Column(String(255), nullable=False)
    domain = Column(String(255), nullable=False, index=True)
    # {"reservationTypes": {key: ReservationTypeSchema}, "reservationFields": [...], "requiresApproval": bool}
    schema_config = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="active")  # active, suspended, pending
    # {"timeZone": str, "businessHours": {"start", "end"}, "maxAdvanceBooking": int}
    settings = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    calendars = relationship("Calendar", back_populates="tenant")

    @property
    def reservation_types(self) -> dict:
        return (self.schema_config or {}).get("reservationTypes") or {}


class Calendar(Base):
    __tablename__ = "calendars"

    id = Column(String(64), primary_key=True, default=lambda: generate_id("calendar"))
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    reservation_type_key = Column(String(100), nullable=True)  # Default reservation type
    # {"monday": {"start": "09:00", "end": "17:00", "breaks": [{"start", "end", "name"}]}, ...}
    availability = Column(JSON, nullable=False, default=dict)
    slot_duration = Column(Integer, nullable=False, default=30)  # minutes
    buffer_time = Column(Integer, nullable=True)  # minutes
    max_concurrent_bookings = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    # {"minAdvanceNotice": hours, "maxBookingDuration": minutes, "allowWeekends": bool}
    booking_rules = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="calendars")


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_calendar_window", "tenant_id", "calendar_id", "start", "end"),
        UniqueConstraint(
            "tenant_id", "user_id", "idempotency_key", name="uq_reservations_idempotency"
        ),
    )

    id = Column(String(64), primary_key=True, default=generate_id)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    calendar_id = Column(String(64), ForeignKey("calendars.id"), nullable=False, index=True)
    reservation_type_key = Column(String(100), nullable=False)
    start = Column(DateTime, nullable=False)  # naive UTC
    end = Column(DateTime, nullable=False)  # naive UTC
    user_id = Column(String(128), nullable=False, index=True)
    details = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="pending")
    approved_by = Column(String(128), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    # {"source": "web" | "api" | "admin", "ipAddress": str, "userAgent": str}
    request_metadata = Column("metadata", JSON, nullable=True)
    idempotency_key = Column(String(IDEMPOTENCY_KEY_MAX_LENGTH), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class User(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)  # Firebase UID
    email = Column(String(255), nullable=False, index=True)
    display_name = Column(String(255), nullable=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="user")  # admin, staff, user
    is_active = Column(Boolean, nullable=False, default=True)
    preferences = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    last_login_at = Column(DateTime, nullable=True)
