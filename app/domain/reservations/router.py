"""Reservation router - FastAPI endpoints for reservation operations"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, get_current_identity, get_optional_identity
from ...config import RESERVATION_RATE_LIMIT, RESERVATION_RATE_WINDOW
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .admission import (
    AdmissionError,
    AdmissionSettings,
    ErrorKind,
    RequestContext,
    ReservationAdmissionService,
)
from .repository import ReservationRepository
from .schemas import (
    AvailabilityResponse,
    CreateReservationResponse,
    ReservationResponse,
    ReservationStatusUpdate,
)
from .service import ReservationService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reservations"])

rate_limit_reservations = create_rate_limiter(
    limit=RESERVATION_RATE_LIMIT,
    window_seconds=RESERVATION_RATE_WINDOW,
    key_prefix="reservations",
)

ERROR_STATUS_CODES = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FAILED_PRECONDITION: 409,
    ErrorKind.INTERNAL: 500,
}


def get_admission_settings(request: Request) -> AdmissionSettings:
    """Settings built at startup and stored on the application"""
    settings = getattr(request.app.state, "admission_settings", None)
    return settings or AdmissionSettings.from_config()


def get_admission_service(
    db: Session = Depends(get_db),
    settings: AdmissionSettings = Depends(get_admission_settings),
) -> ReservationAdmissionService:
    """Dependency injection for ReservationAdmissionService"""
    return ReservationAdmissionService(ReservationRepository(db), settings)


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    """Dependency injection for ReservationService"""
    return ReservationService(db)


def request_context(request: Request) -> RequestContext:
    client_ip = request.client.host if request.client else None
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
    return RequestContext(
        source="api",
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
    )


def raise_admission_error(error: AdmissionError) -> None:
    raise HTTPException(
        status_code=ERROR_STATUS_CODES[error.kind],
        detail={"error": error.kind.value, "message": error.message},
    )


@router.post("/reservations", response_model=CreateReservationResponse, status_code=201)
async def create_reservation(
    request: Request,
    payload: Any = Body(...),
    identity: Optional[CallerIdentity] = Depends(get_optional_identity),
    service: ReservationAdmissionService = Depends(get_admission_service),
    _: None = Depends(rate_limit_reservations),
):
    """Create a reservation after schema validation and conflict checking"""
    result = service.admit(identity, payload, request_context(request))
    if isinstance(result, AdmissionError):
        raise_admission_error(result)

    return CreateReservationResponse(reservationId=result.reservation_id, status=result.status)


@router.get("/reservations/availability", response_model=AvailabilityResponse)
async def check_availability(
    tenantId: str = Query(...),
    calendarId: str = Query(...),
    start: str = Query(...),
    end: str = Query(...),
    excludeReservationId: Optional[str] = Query(None),
    identity: CallerIdentity = Depends(get_current_identity),
    service: ReservationService = Depends(get_reservation_service),
):
    """Check whether a time slot is free on a calendar"""
    return service.check_availability(
        tenantId, calendarId, start, end, identity, excludeReservationId
    )


@router.get("/reservations", response_model=list[ReservationResponse])
async def list_reservations(
    tenantId: str = Query(...),
    start: Optional[str] = Query(None, description="Earliest start (ISO 8601)"),
    end: Optional[str] = Query(None, description="Latest start (ISO 8601)"),
    status: Optional[str] = Query(None),
    identity: CallerIdentity = Depends(get_current_identity),
    service: ReservationService = Depends(get_reservation_service),
):
    """List a tenant's reservations ordered by start time"""
    reservations = service.list_tenant_reservations(tenantId, identity, start, end, status)
    return [to_response(r) for r in reservations]


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    identity: CallerIdentity = Depends(get_current_identity),
    service: ReservationService = Depends(get_reservation_service),
):
    return to_response(service.get_reservation(reservation_id, identity))


@router.patch("/reservations/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: str,
    data: ReservationStatusUpdate,
    identity: CallerIdentity = Depends(get_current_identity),
    service: ReservationService = Depends(get_reservation_service),
):
    """Approve, cancel or close out a reservation"""
    return to_response(service.update_status(reservation_id, data, identity))


@router.get("/calendars/{calendar_id}/reservations", response_model=list[ReservationResponse])
async def list_calendar_reservations(
    calendar_id: str,
    start: str = Query(...),
    end: str = Query(...),
    identity: CallerIdentity = Depends(get_current_identity),
    service: ReservationService = Depends(get_reservation_service),
):
    """Pending and confirmed reservations starting inside the window"""
    reservations = service.list_calendar_reservations(calendar_id, identity, start, end)
    return [to_response(r) for r in reservations]
