"""User service - Business logic for tenant user profiles"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, ensure_tenant_access
from ...models import User
from .repository import UserRepository
from .schemas import UserCreate, UserResponse

logger = logging.getLogger(__name__)


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        displayName=user.display_name,
        tenantId=user.tenant_id,
        role=user.role,
        isActive=user.is_active,
        preferences=user.preferences,
        createdAt=user.created_at,
        lastLoginAt=user.last_login_at,
    )


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_user(self, user_id: str, identity: CallerIdentity) -> User:
        user = self.repo.get_user(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        if user.id != identity.uid:
            ensure_tenant_access(identity, user.tenant_id, self.db)
        return user

    def get_tenant_users(self, tenant_id: str, identity: CallerIdentity) -> list[User]:
        """Active users of a tenant (staff and admins only)"""
        ensure_tenant_access(identity, tenant_id)
        if not identity.is_staff_of(tenant_id):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return self.repo.get_users_by_tenant(self.db, tenant_id)

    def create_profile(self, data: UserCreate, identity: CallerIdentity) -> User:
        """
        Register the caller's profile in a tenant.

        The role is taken from the caller's verified claims, so a user cannot
        grant themselves a role the identity provider did not issue.
        """
        ensure_tenant_access(identity, data.tenantId)
        if data.role != "user" and not identity.has_role(data.role):
            raise HTTPException(status_code=403, detail=f"Caller does not hold the '{data.role}' role")
        if not self.repo.tenant_exists(self.db, data.tenantId):
            raise HTTPException(status_code=404, detail="Tenant not found")
        if self.repo.get_user(self.db, identity.uid):
            raise HTTPException(status_code=409, detail="User profile already exists")

        try:
            user = self.repo.create_user(
                self.db,
                id=identity.uid,
                email=data.email,
                display_name=data.displayName,
                tenant_id=data.tenantId,
                role=data.role,
                preferences=data.preferences.model_dump() if data.preferences else None,
                is_active=True,
            )
        except IntegrityError as e:
            # Handle race condition where the profile was created between check and insert
            self.db.rollback()
            raise HTTPException(status_code=409, detail="User profile already exists") from e

        logger.info(f"🆕 User profile created: {user.id} in tenant {user.tenant_id}")
        return user

    def record_login(self, identity: CallerIdentity) -> User:
        user = self.repo.get_user(self.db, identity.uid)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return self.repo.update_last_login(self.db, user)
