"""Calendar domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import parse_clock_time, validate_availability


class BreakWindow(BaseModel):
    start: str
    end: str
    name: str = ""


class DayAvailability(BaseModel):
    start: str
    end: str
    breaks: Optional[list[BreakWindow]] = None

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, v):
        parse_clock_time(v)
        return v


class BookingRules(BaseModel):
    minAdvanceNotice: int = Field(0, ge=0)  # hours
    maxBookingDuration: Optional[int] = Field(None, ge=1)  # minutes
    allowWeekends: bool = True


def default_availability() -> dict[str, DayAvailability]:
    """Monday to Friday, 09:00-17:00"""
    return {
        day: DayAvailability(start="09:00", end="17:00")
        for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
    }


class CalendarCreate(BaseModel):
    """Schema for creating a new calendar"""

    tenantId: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    reservationTypeKey: Optional[str] = None
    availability: dict[str, DayAvailability] = Field(default_factory=default_availability)
    slotDuration: int = Field(30, ge=1)
    bufferTime: Optional[int] = Field(None, ge=0)
    maxConcurrentBookings: int = Field(1, ge=1)
    bookingRules: Optional[BookingRules] = None

    @field_validator("availability")
    @classmethod
    def validate_week(cls, v):
        normalized = validate_availability(
            {day: window.model_dump(exclude_none=True) for day, window in v.items()}
        )
        return {day: DayAvailability(**window) for day, window in normalized.items()}


class CalendarResponse(BaseModel):
    """Schema for calendar response"""

    id: str
    tenantId: str
    name: str
    description: Optional[str] = None
    reservationTypeKey: Optional[str] = None
    availability: dict
    slotDuration: int
    bufferTime: Optional[int] = None
    maxConcurrentBookings: int
    isActive: bool
    bookingRules: Optional[dict] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CalendarCreatedResponse(BaseModel):
    success: bool = True
    calendarId: str
    message: str = "Calendar created successfully"
