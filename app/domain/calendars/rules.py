"""
Calendar booking policy checks.

These run only when booking-rule enforcement is switched on. All instants
arrive as naive UTC datetimes and are compared against the calendar's weekly
template in the tenant's local timezone.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...models import Calendar
from ...shared.validators import WEEKDAYS, parse_clock_time

logger = logging.getLogger(__name__)


def _local_zone(tz_name: Optional[str]):
    if not tz_name:
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"⚠️ Unknown timezone '{tz_name}', falling back to UTC")
        return timezone.utc


def _to_local(dt: datetime, zone) -> datetime:
    return dt.replace(tzinfo=timezone.utc).astimezone(zone)


def _last_moment(local_end: datetime) -> datetime:
    """Last instant inside a half-open interval ending at local_end"""
    return local_end - timedelta(microseconds=1)


def _check_availability(calendar: Calendar, local_start: datetime, local_end: datetime) -> list[str]:
    availability = calendar.availability or {}
    if not availability:
        return []

    day = WEEKDAYS[local_start.weekday()]
    window = availability.get(day)
    if not window:
        return [f"Calendar is not available on {day}"]

    # An end at midnight closes the start day
    end_time = local_end.time() if local_end.date() == local_start.date() else time.max

    open_at = parse_clock_time(window["start"])
    close_at = parse_clock_time(window["end"])
    if (
        _last_moment(local_end).date() != local_start.date()
        or local_start.time() < open_at
        or end_time > close_at
    ):
        return [f"Reservation must fall within {window['start']}-{window['end']} on {day}"]

    errors = []
    for brk in window.get("breaks") or []:
        brk_start = parse_clock_time(brk["start"])
        brk_end = parse_clock_time(brk["end"])
        if local_start.time() < brk_end and end_time > brk_start:
            errors.append(f"Reservation overlaps break '{brk.get('name') or brk['start']}'")
    return errors


def check_booking_rules(
    calendar: Calendar,
    start: datetime,
    end: datetime,
    now: datetime,
    tz_name: Optional[str] = None,
    max_advance_days: Optional[int] = None,
) -> list[str]:
    """Return every booking-policy violation for the proposed interval"""
    if not calendar.is_active:
        return ["Calendar is not accepting bookings"]

    errors = []
    rules = calendar.booking_rules or {}

    min_notice = rules.get("minAdvanceNotice")
    if min_notice and start - now < timedelta(hours=min_notice):
        errors.append(f"Reservations require at least {min_notice} hours advance notice")

    max_duration = rules.get("maxBookingDuration")
    if max_duration and end - start > timedelta(minutes=max_duration):
        errors.append(f"Reservations cannot exceed {max_duration} minutes")

    zone = _local_zone(tz_name)
    local_start = _to_local(start, zone)
    local_end = _to_local(end, zone)

    if rules.get("allowWeekends") is False and (
        local_start.weekday() >= 5 or _last_moment(local_end).weekday() >= 5
    ):
        errors.append("Weekend reservations are not allowed")

    errors.extend(_check_availability(calendar, local_start, local_end))

    if max_advance_days and start - now > timedelta(days=max_advance_days):
        errors.append(f"Reservations cannot be made more than {max_advance_days} days in advance")

    return errors
