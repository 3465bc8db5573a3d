"""User router - FastAPI endpoints for tenant user profiles"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, get_current_identity
from ...database import get_db
from .schemas import UserCreate, UserResponse
from .service import UserService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user_profile(
    data: UserCreate,
    identity: CallerIdentity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    """Create the calling user's profile"""
    return to_response(service.create_profile(data, identity))


@router.post("/users/me/login", response_model=UserResponse)
async def record_login(
    identity: CallerIdentity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    return to_response(service.record_login(identity))


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    identity: CallerIdentity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    return to_response(service.get_user(user_id, identity))


@router.get("/tenants/{tenant_id}/users", response_model=list[UserResponse])
async def get_tenant_users(
    tenant_id: str,
    identity: CallerIdentity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    return [to_response(u) for u in service.get_tenant_users(tenant_id, identity)]
