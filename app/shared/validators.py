"""Shared validation utilities"""

import re
from datetime import datetime, time, timezone
from typing import Optional

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_TIME_RE = re.compile(r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$")


def parse_iso_datetime(value: str) -> Optional[datetime]:
    """
    Parse an ISO-8601 date/time string into a naive UTC datetime.

    Offsets (including a trailing "Z") are converted to UTC; values without an
    offset are taken to already be UTC.

    Returns:
        The parsed datetime, or None if the string is not ISO-8601
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Format a stored naive UTC datetime as ISO-8601 with a Z suffix"""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat() + "Z"


def parse_clock_time(value: str) -> time:
    """
    Parse a "HH:MM" wall-clock time. "24:00" is the end of the day.

    Raises:
        ValueError: If the value is not a 24h HH:MM string
    """
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    if value == "24:00":
        return time.max
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def validate_availability(availability: dict) -> dict:
    """
    Validate a weekly availability map and normalize weekday keys to lowercase.

    Raises:
        ValueError: If a weekday or time window is invalid
    """
    normalized = {}
    for weekday, window in (availability or {}).items():
        day = str(weekday).lower()
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday '{weekday}'")
        if parse_clock_time(window["start"]) >= parse_clock_time(window["end"]):
            raise ValueError(f"Availability for {day} must end after it starts")
        for brk in window.get("breaks") or []:
            if parse_clock_time(brk["start"]) >= parse_clock_time(brk["end"]):
                raise ValueError(f"Break '{brk.get('name', '')}' on {day} must end after it starts")
        normalized[day] = window
    return normalized


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email
