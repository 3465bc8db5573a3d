"""Tenant service - Business logic for tenant operations"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import CallerIdentity, ensure_tenant_access
from ...models import Tenant
from .repository import TenantRepository
from .schemas import TenantCreate, TenantResponse, TenantUpdate

logger = logging.getLogger(__name__)


def to_response(tenant: Tenant) -> TenantResponse:
    return TenantResponse(
        id=tenant.id,
        name=tenant.name,
        domain=tenant.domain,
        schemaConfig=tenant.schema_config or {},
        status=tenant.status,
        settings=tenant.settings,
        createdAt=tenant.created_at,
        updatedAt=tenant.updated_at,
    )


class TenantService:
    """Service layer for tenant business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TenantRepository()

    def get_tenant(self, tenant_id: str, identity: CallerIdentity) -> Tenant:
        """Get a tenant the caller belongs to"""
        ensure_tenant_access(identity, tenant_id, self.db)
        tenant = self.repo.get_tenant(self.db, tenant_id)
        if not tenant:
            raise HTTPException(status_code=404, detail="Tenant not found")
        return tenant

    def create_tenant(self, data: TenantCreate, identity: CallerIdentity) -> Tenant:
        """Create a new tenant (platform admins only)"""
        if not identity.is_platform_admin:
            raise HTTPException(status_code=403, detail="Only platform admins can create tenants")

        tenant = self.repo.create_tenant(
            self.db,
            name=data.name.strip(),
            domain=data.domain.strip().lower(),
            schema_config=data.schemaConfig.model_dump(exclude_none=True),
            settings=data.settings.model_dump() if data.settings else None,
            status="active",
        )
        logger.info(f"🏢 Tenant {tenant.id} created by {identity.uid}")
        return tenant

    def update_tenant(self, tenant_id: str, data: TenantUpdate, identity: CallerIdentity) -> Tenant:
        """Update tenant details, schema config or settings (tenant admins only)"""
        tenant = self.get_tenant(tenant_id, identity)
        if not identity.has_role("admin"):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        if data.status is not None and not identity.is_platform_admin:
            raise HTTPException(status_code=403, detail="Only platform admins can change tenant status")

        updates = {
            "name": data.name.strip() if data.name else None,
            "domain": data.domain.strip().lower() if data.domain else None,
            "status": data.status,
            "schema_config": (
                data.schemaConfig.model_dump(exclude_none=True) if data.schemaConfig else None
            ),
            "settings": data.settings.model_dump() if data.settings else None,
        }
        tenant = self.repo.update_tenant(self.db, tenant, **updates)
        logger.info(f"📝 Tenant {tenant.id} updated by {identity.uid}")
        return tenant
