"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email

UserRole = Literal["admin", "staff", "user"]


class NotificationPreferences(BaseModel):
    email: bool = True
    sms: bool = False


class UserPreferences(BaseModel):
    timezone: str = "UTC"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)


class UserCreate(BaseModel):
    """Schema for registering the caller's profile within a tenant"""

    email: str
    displayName: str = Field(..., min_length=1, max_length=255)
    tenantId: str = Field(..., min_length=1)
    role: UserRole = "user"
    preferences: Optional[UserPreferences] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class UserResponse(BaseModel):
    """Schema for user response"""

    id: str
    email: str
    displayName: Optional[str] = None
    tenantId: str
    role: UserRole
    isActive: bool
    preferences: Optional[dict] = None
    createdAt: Optional[datetime] = None
    lastLoginAt: Optional[datetime] = None
