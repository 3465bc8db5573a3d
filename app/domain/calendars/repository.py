"""Calendar repository - Database operations for calendars"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Calendar, Tenant


class CalendarRepository:
    """Repository for calendar database operations"""

    @staticmethod
    def get_calendar(db: Session, calendar_id: str) -> Optional[Calendar]:
        return db.query(Calendar).filter(Calendar.id == calendar_id).first()

    @staticmethod
    def get_calendars_by_tenant(db: Session, tenant_id: str, active_only: bool = True) -> list[Calendar]:
        query = db.query(Calendar).filter(Calendar.tenant_id == tenant_id)

        if active_only:
            query = query.filter(Calendar.is_active.is_(True))

        return query.order_by(Calendar.created_at.asc()).all()

    @staticmethod
    def create_calendar(db: Session, **calendar_data) -> Calendar:
        calendar = Calendar(**calendar_data)
        db.add(calendar)
        db.commit()
        db.refresh(calendar)
        return calendar

    @staticmethod
    def get_tenant(db: Session, tenant_id: str) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.id == tenant_id).first()
