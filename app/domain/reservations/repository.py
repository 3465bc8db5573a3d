"""Reservation repository - Store access for tenants, calendars and reservations"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import ContextManager, Optional, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import ACTIVE_RESERVATION_STATUSES, Calendar, Reservation, Tenant

logger = logging.getLogger(__name__)


class DuplicateReservationError(Exception):
    """Another reservation already carries this caller's idempotency key"""


class ReservationStore(Protocol):
    """Operations the admission flow needs from the document store"""

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]: ...

    def get_calendar(self, calendar_id: str) -> Optional[Calendar]: ...

    def find_overlapping(
        self, tenant_id: str, calendar_id: str, start: datetime, end: datetime
    ) -> list[Reservation]: ...

    def find_by_idempotency_key(
        self, tenant_id: str, user_id: str, idempotency_key: str
    ) -> Optional[Reservation]: ...

    def create_reservation(self, **data) -> Reservation: ...

    def slot_guard(self, calendar_id: str) -> ContextManager[None]: ...


class ReservationRepository:
    """SQLAlchemy-backed ReservationStore plus the listing queries used by the API"""

    def __init__(self, db: Session):
        self.db = db

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_calendar(self, calendar_id: str) -> Optional[Calendar]:
        return self.db.query(Calendar).filter(Calendar.id == calendar_id).first()

    def find_overlapping(
        self, tenant_id: str, calendar_id: str, start: datetime, end: datetime
    ) -> list[Reservation]:
        """Non-cancelled reservations on the calendar whose [start, end) meets the window"""
        return (
            self.db.query(Reservation)
            .filter(
                Reservation.tenant_id == tenant_id,
                Reservation.calendar_id == calendar_id,
                Reservation.status != "cancelled",
                Reservation.start < end,
                Reservation.end > start,
            )
            .order_by(Reservation.start.asc())
            .all()
        )

    def find_by_idempotency_key(
        self, tenant_id: str, user_id: str, idempotency_key: str
    ) -> Optional[Reservation]:
        return (
            self.db.query(Reservation)
            .filter(
                Reservation.tenant_id == tenant_id,
                Reservation.user_id == user_id,
                Reservation.idempotency_key == idempotency_key,
            )
            .first()
        )

    def create_reservation(self, **data) -> Reservation:
        """
        Insert a reservation.

        Raises:
            DuplicateReservationError: If the idempotency key is already taken
        """
        reservation = Reservation(**data)
        self.db.add(reservation)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if data.get("idempotency_key"):
                raise DuplicateReservationError(data["idempotency_key"]) from e
            raise
        self.db.refresh(reservation)
        return reservation

    @contextmanager
    def slot_guard(self, calendar_id: str) -> Iterator[None]:
        """
        Serialize conflict check and insert for one calendar.

        The calendar row is locked with SELECT ... FOR UPDATE, so a second
        admission for the same calendar waits until this transaction commits
        and then sees the new reservation in its own overlap query. SQLite
        ignores the lock clause and relies on its single-writer model.
        """
        self.db.query(Calendar).filter(Calendar.id == calendar_id).with_for_update().first()
        try:
            yield
        except Exception:
            self.db.rollback()
            raise
        finally:
            # Releases the lock on the rejection path; a no-op after create commits
            if self.db.in_transaction():
                self.db.commit()

    # Listing and management

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self.db.query(Reservation).filter(Reservation.id == reservation_id).first()

    def get_reservations_by_tenant(
        self,
        tenant_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> list[Reservation]:
        """Reservations for a tenant, optionally filtered by start range and status"""
        query = self.db.query(Reservation).filter(Reservation.tenant_id == tenant_id)

        if start_date:
            query = query.filter(Reservation.start >= start_date)
        if end_date:
            query = query.filter(Reservation.start <= end_date)
        if status:
            query = query.filter(Reservation.status == status)

        return query.order_by(Reservation.start.asc()).all()

    def get_reservations_by_calendar(
        self, calendar_id: str, start_date: datetime, end_date: datetime
    ) -> list[Reservation]:
        """Pending and confirmed reservations starting inside the window"""
        return (
            self.db.query(Reservation)
            .filter(
                Reservation.calendar_id == calendar_id,
                Reservation.start >= start_date,
                Reservation.start <= end_date,
                Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
            )
            .order_by(Reservation.start.asc())
            .all()
        )

    def update_reservation(self, reservation: Reservation, **updates) -> Reservation:
        for key, value in updates.items():
            if hasattr(reservation, key):
                setattr(reservation, key, value)

        self.db.commit()
        self.db.refresh(reservation)
        return reservation
