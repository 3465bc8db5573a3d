"""Calendar router - FastAPI endpoints for calendar operations"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, get_current_identity
from ...database import get_db
from .schemas import CalendarCreate, CalendarCreatedResponse, CalendarResponse
from .service import CalendarService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Calendars"])


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    """Dependency injection for CalendarService"""
    return CalendarService(db)


@router.post("/calendars", response_model=CalendarCreatedResponse, status_code=201)
async def create_calendar(
    data: CalendarCreate,
    identity: CallerIdentity = Depends(get_current_identity),
    service: CalendarService = Depends(get_calendar_service),
):
    """Create a bookable calendar for a tenant"""
    calendar = service.create_calendar(data, identity)
    return CalendarCreatedResponse(calendarId=calendar.id)


@router.get("/calendars/{calendar_id}", response_model=CalendarResponse)
async def get_calendar(
    calendar_id: str,
    identity: CallerIdentity = Depends(get_current_identity),
    service: CalendarService = Depends(get_calendar_service),
):
    return to_response(service.get_calendar(calendar_id, identity))


@router.get("/tenants/{tenant_id}/calendars", response_model=list[CalendarResponse])
async def get_tenant_calendars(
    tenant_id: str,
    activeOnly: bool = Query(True),
    identity: CallerIdentity = Depends(get_current_identity),
    service: CalendarService = Depends(get_calendar_service),
):
    return [to_response(c) for c in service.get_calendars(tenant_id, identity, activeOnly)]
