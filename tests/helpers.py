"""Shared schemas and seeding helpers for the test suite"""

from datetime import datetime

from app.models import Reservation

MEETING_SCHEMA = {
    "fields": [
        {"name": "title", "type": "string", "required": True},
        {"name": "attendees", "type": "number", "required": False, "min": 1, "max": 20},
    ],
    "requiresApproval": False,
    "name": "Meeting",
}

APPROVAL_SCHEMA = {
    "fields": [{"name": "purpose", "type": "string", "required": True}],
    "requiresApproval": True,
}


def dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


def add_reservation(db, start, end, status="confirmed", calendar_id="calendar-c", **fields):
    reservation = Reservation(
        tenant_id=fields.pop("tenant_id", "tenant-t"),
        calendar_id=calendar_id,
        reservation_type_key=fields.pop("reservation_type_key", "meeting"),
        start=start,
        end=end,
        user_id=fields.pop("user_id", "someone-else"),
        details=fields.pop("details", {"title": "Existing"}),
        status=status,
        **fields,
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation
