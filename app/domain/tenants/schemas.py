"""Tenant domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import parse_clock_time
from ..reservations.schemas import SchemaConfig

TenantStatus = Literal["active", "suspended", "pending"]


class BusinessHours(BaseModel):
    start: str = "09:00"
    end: str = "17:00"

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, v):
        parse_clock_time(v)
        return v


class TenantSettings(BaseModel):
    timeZone: str = "UTC"
    businessHours: BusinessHours = Field(default_factory=BusinessHours)
    maxAdvanceBooking: int = Field(90, ge=1)  # days


class TenantCreate(BaseModel):
    """Schema for creating a new tenant"""

    name: str = Field(..., min_length=1, max_length=255)
    domain: str = Field(..., min_length=1, max_length=255)
    schemaConfig: SchemaConfig = Field(default_factory=SchemaConfig)
    settings: Optional[TenantSettings] = None


class TenantUpdate(BaseModel):
    """Schema for updating tenant details and settings"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    domain: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[TenantStatus] = None
    schemaConfig: Optional[SchemaConfig] = None
    settings: Optional[TenantSettings] = None


class TenantResponse(BaseModel):
    """Schema for tenant response"""

    id: str
    name: str
    domain: str
    schemaConfig: dict
    status: TenantStatus
    settings: Optional[dict] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class TenantCreatedResponse(BaseModel):
    success: bool = True
    tenantId: str
    message: str = "Tenant created successfully"
