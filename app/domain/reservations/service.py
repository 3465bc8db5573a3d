"""Reservation service - Business logic for managing existing reservations"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, ensure_tenant_access
from ...models import Reservation
from ...shared.validators import parse_iso_datetime, to_iso
from .conflicts import ConflictChecker
from .repository import ReservationRepository
from .schemas import AvailabilityResponse, ReservationResponse, ReservationStatusUpdate

logger = logging.getLogger(__name__)

def to_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        id=reservation.id,
        tenantId=reservation.tenant_id,
        calendarId=reservation.calendar_id,
        reservationTypeKey=reservation.reservation_type_key,
        start=to_iso(reservation.start),
        end=to_iso(reservation.end),
        userId=reservation.user_id,
        details=reservation.details or {},
        status=reservation.status,
        approvedBy=reservation.approved_by,
        approvedAt=to_iso(reservation.approved_at),
        cancellationReason=reservation.cancellation_reason,
        notes=reservation.notes,
        metadata=reservation.request_metadata,
        createdAt=reservation.created_at,
        updatedAt=reservation.updated_at,
    )


def parse_query_datetime(value: Optional[str], name: str) -> Optional[datetime]:
    if value is None:
        return None
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name}. Use ISO 8601 format.")
    return parsed


class ReservationService:
    """Service layer for reservation lookups and status changes"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReservationRepository(db)
        self.conflicts = ConflictChecker(self.repo)

    def get_reservation(self, reservation_id: str, identity: CallerIdentity) -> Reservation:
        """Get a reservation visible to the caller"""
        reservation = self.repo.get_reservation(reservation_id)
        if not reservation:
            raise HTTPException(status_code=404, detail="Reservation not found")

        if reservation.user_id != identity.uid and not identity.is_staff_of(
            reservation.tenant_id
        ):
            # Hide existence from other tenants' users
            raise HTTPException(status_code=404, detail="Reservation not found")
        return reservation

    def list_tenant_reservations(
        self,
        tenant_id: str,
        identity: CallerIdentity,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Reservation]:
        """List a tenant's reservations (staff and admins only)"""
        ensure_tenant_access(identity, tenant_id)
        if not identity.is_staff_of(tenant_id):
            raise HTTPException(status_code=403, detail="Insufficient permissions")

        return self.repo.get_reservations_by_tenant(
            tenant_id,
            start_date=parse_query_datetime(start, "start"),
            end_date=parse_query_datetime(end, "end"),
            status=status,
        )

    def list_calendar_reservations(
        self, calendar_id: str, identity: CallerIdentity, start: str, end: str
    ) -> list[Reservation]:
        """Active reservations on a calendar starting inside a window"""
        calendar = self.repo.get_calendar(calendar_id)
        if not calendar:
            raise HTTPException(status_code=404, detail="Calendar not found")
        ensure_tenant_access(identity, calendar.tenant_id, self.db)

        return self.repo.get_reservations_by_calendar(
            calendar_id,
            parse_query_datetime(start, "start"),
            parse_query_datetime(end, "end"),
        )

    def check_availability(
        self,
        tenant_id: str,
        calendar_id: str,
        start: str,
        end: str,
        identity: CallerIdentity,
        exclude_reservation_id: Optional[str] = None,
    ) -> AvailabilityResponse:
        """Report whether an interval is free on a calendar"""
        ensure_tenant_access(identity, tenant_id, self.db)

        start_dt = parse_query_datetime(start, "start")
        end_dt = parse_query_datetime(end, "end")
        if end_dt <= start_dt:
            raise HTTPException(status_code=400, detail="End time must be after start time")

        calendar = self.repo.get_calendar(calendar_id)
        if not calendar or calendar.tenant_id != tenant_id:
            raise HTTPException(status_code=404, detail="Calendar not found")

        conflicts = self.conflicts.find_conflicts(
            tenant_id, calendar_id, start_dt, end_dt, exclude_reservation_id
        )
        return AvailabilityResponse(available=not conflicts, conflicts=len(conflicts))

    def update_status(
        self, reservation_id: str, data: ReservationStatusUpdate, identity: CallerIdentity
    ) -> Reservation:
        """
        Change a reservation's status.

        Staff and admins of the tenant may set any status. The owner may only
        cancel. Confirming re-checks the slot, ignoring the reservation itself.
        """
        reservation = self.get_reservation(reservation_id, identity)
        is_staff = identity.is_staff_of(reservation.tenant_id)

        if not is_staff and data.status != "cancelled":
            raise HTTPException(status_code=403, detail="Only staff can change this status")
        if reservation.status == "cancelled" and data.status != "cancelled":
            raise HTTPException(status_code=409, detail="Cancelled reservations cannot be reopened")

        updates = {"status": data.status}
        if data.notes is not None:
            updates["notes"] = data.notes
        if data.status == "cancelled":
            updates["cancellation_reason"] = data.cancellationReason

        if data.status == "confirmed" and reservation.status != "confirmed":
            with self.repo.slot_guard(reservation.calendar_id):
                if self.conflicts.has_conflict(
                    reservation.tenant_id,
                    reservation.calendar_id,
                    reservation.start,
                    reservation.end,
                    exclude_reservation_id=reservation.id,
                ):
                    raise HTTPException(status_code=409, detail="Time slot not available")
                updates["approved_by"] = identity.uid
                updates["approved_at"] = datetime.now(timezone.utc).replace(tzinfo=None)
                reservation = self.repo.update_reservation(reservation, **updates)
        else:
            reservation = self.repo.update_reservation(reservation, **updates)

        logger.info(f"📝 Reservation {reservation.id} set to {data.status} by {identity.uid}")
        return reservation
