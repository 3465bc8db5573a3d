"""User repository - Database operations for tenant users"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Tenant, User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_users_by_tenant(db: Session, tenant_id: str) -> list[User]:
        return (
            db.query(User)
            .filter(User.tenant_id == tenant_id, User.is_active.is_(True))
            .order_by(User.created_at.asc())
            .all()
        )

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_last_login(db: Session, user: User) -> User:
        user.last_login_at = datetime.now(timezone.utc).replace(tzinfo=None)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def tenant_exists(db: Session, tenant_id: str) -> bool:
        return db.query(Tenant.id).filter(Tenant.id == tenant_id).first() is not None
