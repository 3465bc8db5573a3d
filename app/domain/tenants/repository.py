"""Tenant repository - Database operations for tenants"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Tenant


class TenantRepository:
    """Repository for tenant database operations"""

    @staticmethod
    def get_tenant(db: Session, tenant_id: str) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.id == tenant_id).first()

    @staticmethod
    def create_tenant(db: Session, **tenant_data) -> Tenant:
        tenant = Tenant(**tenant_data)
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    @staticmethod
    def update_tenant(db: Session, tenant: Tenant, **updates) -> Tenant:
        """Update a tenant with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(tenant, key):
                setattr(tenant, key, value)

        db.commit()
        db.refresh(tenant)
        return tenant
