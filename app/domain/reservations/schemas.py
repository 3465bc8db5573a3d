"""Reservation domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FieldType = Literal["string", "number", "boolean", "array", "object"]
ReservationStatus = Literal["pending", "confirmed", "cancelled", "completed", "no-show"]


class SchemaFieldDefinition(BaseModel):
    """One typed field of a reservation type; label/placeholder are presentation only"""

    name: str = Field(..., min_length=1)
    type: FieldType
    required: bool = False
    options: Optional[list[str]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    label: Optional[str] = None
    placeholder: Optional[str] = None


class ReservationTypeSchema(BaseModel):
    """Field contract and approval policy for one reservation type"""

    fields: list[SchemaFieldDefinition] = Field(default_factory=list)
    requiresApproval: bool = False
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("fields")
    @classmethod
    def validate_unique_names(cls, v):
        names = [f.name for f in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names: {', '.join(duplicates)}")
        return v


class SchemaConfig(BaseModel):
    """Per-tenant registry of reservation types"""

    reservationTypes: dict[str, ReservationTypeSchema] = Field(default_factory=dict)
    # Legacy fields for backward compatibility
    reservationFields: Optional[list[str]] = None
    requiresApproval: Optional[bool] = None


class ReservationMetadata(BaseModel):
    source: Literal["web", "api", "admin"] = "api"
    ipAddress: Optional[str] = None
    userAgent: Optional[str] = None


class CreateReservationResponse(BaseModel):
    success: bool = True
    reservationId: str
    status: ReservationStatus


class ReservationStatusUpdate(BaseModel):
    """Schema for changing a reservation's status"""

    status: ReservationStatus
    notes: Optional[str] = None
    cancellationReason: Optional[str] = None


class ReservationResponse(BaseModel):
    """Schema for reservation response"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    tenantId: str
    calendarId: str
    reservationTypeKey: str
    start: str
    end: str
    userId: str
    details: dict[str, Any]
    status: ReservationStatus
    approvedBy: Optional[str] = None
    approvedAt: Optional[str] = None
    cancellationReason: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[ReservationMetadata] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class AvailabilityResponse(BaseModel):
    available: bool
    conflicts: int
