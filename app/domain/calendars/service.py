"""Calendar service - Business logic for calendar operations"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, ensure_tenant_access
from ...models import Calendar
from .repository import CalendarRepository
from .schemas import CalendarCreate, CalendarResponse

logger = logging.getLogger(__name__)


def to_response(calendar: Calendar) -> CalendarResponse:
    return CalendarResponse(
        id=calendar.id,
        tenantId=calendar.tenant_id,
        name=calendar.name,
        description=calendar.description,
        reservationTypeKey=calendar.reservation_type_key,
        availability=calendar.availability or {},
        slotDuration=calendar.slot_duration,
        bufferTime=calendar.buffer_time,
        maxConcurrentBookings=calendar.max_concurrent_bookings,
        isActive=calendar.is_active,
        bookingRules=calendar.booking_rules,
        createdAt=calendar.created_at,
        updatedAt=calendar.updated_at,
    )


class CalendarService:
    """Service layer for calendar business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CalendarRepository()

    def get_calendar(self, calendar_id: str, identity: CallerIdentity) -> Calendar:
        calendar = self.repo.get_calendar(self.db, calendar_id)
        if not calendar:
            raise HTTPException(status_code=404, detail="Calendar not found")
        ensure_tenant_access(identity, calendar.tenant_id, self.db)
        return calendar

    def get_calendars(
        self, tenant_id: str, identity: CallerIdentity, active_only: bool = True
    ) -> list[Calendar]:
        ensure_tenant_access(identity, tenant_id, self.db)
        return self.repo.get_calendars_by_tenant(self.db, tenant_id, active_only)

    def create_calendar(self, data: CalendarCreate, identity: CallerIdentity) -> Calendar:
        """Create a calendar for a tenant (tenant admins only)"""
        ensure_tenant_access(identity, data.tenantId)
        if not identity.has_role("admin"):
            raise HTTPException(status_code=403, detail="Insufficient permissions")

        tenant = self.repo.get_tenant(self.db, data.tenantId)
        if not tenant:
            raise HTTPException(status_code=404, detail="Tenant not found")

        if data.reservationTypeKey and data.reservationTypeKey not in tenant.reservation_types:
            raise HTTPException(status_code=400, detail="Invalid reservation type key")

        calendar = self.repo.create_calendar(
            self.db,
            tenant_id=data.tenantId,
            name=data.name.strip(),
            description=data.description,
            reservation_type_key=data.reservationTypeKey,
            availability={
                day: window.model_dump(exclude_none=True)
                for day, window in data.availability.items()
            },
            slot_duration=data.slotDuration,
            buffer_time=data.bufferTime,
            max_concurrent_bookings=data.maxConcurrentBookings,
            booking_rules=data.bookingRules.model_dump(exclude_none=True) if data.bookingRules else None,
            is_active=True,
        )
        logger.info(f"📅 Calendar {calendar.id} created for tenant {data.tenantId}")
        return calendar
