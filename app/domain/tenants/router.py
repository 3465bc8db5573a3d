"""Tenant router - FastAPI endpoints for tenant operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, get_current_identity, require_roles
from ...database import get_db
from .schemas import TenantCreate, TenantCreatedResponse, TenantResponse, TenantUpdate
from .service import TenantService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


def get_tenant_service(db: Session = Depends(get_db)) -> TenantService:
    """Dependency injection for TenantService"""
    return TenantService(db)


@router.post("", response_model=TenantCreatedResponse, status_code=201)
async def create_tenant(
    data: TenantCreate,
    identity: CallerIdentity = Depends(require_roles("admin")),
    service: TenantService = Depends(get_tenant_service),
):
    """Create a new tenant with its reservation type registry"""
    tenant = service.create_tenant(data, identity)
    return TenantCreatedResponse(tenantId=tenant.id)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: str,
    identity: CallerIdentity = Depends(get_current_identity),
    service: TenantService = Depends(get_tenant_service),
):
    return to_response(service.get_tenant(tenant_id, identity))


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: str,
    data: TenantUpdate,
    identity: CallerIdentity = Depends(get_current_identity),
    service: TenantService = Depends(get_tenant_service),
):
    """Update tenant details, schema config or settings"""
    return to_response(service.update_tenant(tenant_id, data, identity))
