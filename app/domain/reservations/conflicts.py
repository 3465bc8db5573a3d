"""Time-overlap conflict detection for calendar reservations"""

import logging
from datetime import datetime
from typing import Optional

from ...models import Reservation
from .repository import ReservationStore

logger = logging.getLogger(__name__)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open intervals [a_start, a_end) and [b_start, b_end) intersect; touching ends do not"""
    return a_start < b_end and a_end > b_start


class ConflictChecker:
    """Finds existing reservations that block a proposed interval on a calendar"""

    def __init__(self, store: ReservationStore):
        self.store = store

    def find_conflicts(
        self,
        tenant_id: str,
        calendar_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
    ) -> list[Reservation]:
        candidates = self.store.find_overlapping(tenant_id, calendar_id, start, end)
        return [
            r
            for r in candidates
            if r.id != exclude_reservation_id
            and r.status != "cancelled"
            and intervals_overlap(r.start, r.end, start, end)
        ]

    def has_conflict(
        self,
        tenant_id: str,
        calendar_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        capacity: int = 1,
    ) -> bool:
        """
        True when the interval cannot be booked.

        With the default capacity of 1 any overlap is a conflict. A larger
        capacity allows that many overlapping reservations before the slot
        counts as full.
        """
        conflicts = self.find_conflicts(
            tenant_id, calendar_id, start, end, exclude_reservation_id
        )
        if conflicts:
            logger.debug(
                f"🔍 {len(conflicts)} overlapping reservation(s) on calendar {calendar_id} "
                f"for {start.isoformat()} - {end.isoformat()}"
            )
        return len(conflicts) >= max(1, capacity)
