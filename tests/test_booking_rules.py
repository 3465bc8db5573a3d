from datetime import datetime, time

from app.domain.calendars.rules import check_booking_rules
from app.models import Calendar
from app.shared.validators import parse_clock_time

NOW = datetime(2025, 1, 6, 8, 0)  # Monday

WEEKDAY_HOURS = {
    day: {"start": "09:00", "end": "17:00"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}


def make_calendar(**fields):
    fields.setdefault("is_active", True)
    fields.setdefault("availability", {})
    fields.setdefault("booking_rules", {})
    return Calendar(id="calendar-c", tenant_id="tenant-t", name="Room C", **fields)


def test_no_rules_no_violations():
    calendar = make_calendar()
    assert check_booking_rules(
        calendar, datetime(2025, 1, 11, 3, 0), datetime(2025, 1, 11, 23, 0), NOW
    ) == []


def test_inactive_calendar_short_circuits():
    calendar = make_calendar(is_active=False, booking_rules={"maxBookingDuration": 1})
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 10, 0), datetime(2025, 1, 7, 12, 0), NOW
    ) == ["Calendar is not accepting bookings"]


def test_min_advance_notice():
    calendar = make_calendar(booking_rules={"minAdvanceNotice": 24})
    assert check_booking_rules(
        calendar, datetime(2025, 1, 6, 12, 0), datetime(2025, 1, 6, 13, 0), NOW
    ) == ["Reservations require at least 24 hours advance notice"]
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 8, 0), datetime(2025, 1, 7, 9, 0), NOW
    ) == []


def test_max_booking_duration():
    calendar = make_calendar(booking_rules={"maxBookingDuration": 90})
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 10, 0), datetime(2025, 1, 7, 11, 30), NOW
    ) == []
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 10, 0), datetime(2025, 1, 7, 12, 0), NOW
    ) == ["Reservations cannot exceed 90 minutes"]


def test_weekends_blocked_when_disallowed():
    calendar = make_calendar(booking_rules={"allowWeekends": False})
    assert check_booking_rules(
        calendar, datetime(2025, 1, 11, 10, 0), datetime(2025, 1, 11, 11, 0), NOW
    ) == ["Weekend reservations are not allowed"]


def test_weekly_availability_window():
    calendar = make_calendar(availability=WEEKDAY_HOURS)

    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 9, 0), datetime(2025, 1, 7, 17, 0), NOW
    ) == []
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 16, 0), datetime(2025, 1, 7, 18, 0), NOW
    ) == ["Reservation must fall within 09:00-17:00 on tuesday"]
    assert check_booking_rules(
        calendar, datetime(2025, 1, 12, 10, 0), datetime(2025, 1, 12, 11, 0), NOW
    ) == ["Calendar is not available on sunday"]


def test_breaks_are_unavailable():
    hours = {
        "tuesday": {
            "start": "09:00",
            "end": "17:00",
            "breaks": [{"start": "12:00", "end": "13:00", "name": "Lunch"}],
        }
    }
    calendar = make_calendar(availability=hours)

    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 12, 30), datetime(2025, 1, 7, 13, 30), NOW
    ) == ["Reservation overlaps break 'Lunch'"]
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 13, 0), datetime(2025, 1, 7, 14, 0), NOW
    ) == []


def test_window_is_evaluated_in_tenant_timezone():
    calendar = make_calendar(availability=WEEKDAY_HOURS)
    # 15:00-16:00 UTC is 10:00-11:00 in New York
    assert check_booking_rules(
        calendar,
        datetime(2025, 1, 7, 15, 0),
        datetime(2025, 1, 7, 16, 0),
        NOW,
        tz_name="America/New_York",
    ) == []
    # 13:00-14:00 UTC is 08:00-09:00 in New York
    assert check_booking_rules(
        calendar,
        datetime(2025, 1, 7, 13, 0),
        datetime(2025, 1, 7, 14, 0),
        NOW,
        tz_name="America/New_York",
    ) == ["Reservation must fall within 09:00-17:00 on tuesday"]


def test_unknown_timezone_falls_back_to_utc():
    calendar = make_calendar(availability=WEEKDAY_HOURS)
    assert check_booking_rules(
        calendar, datetime(2025, 1, 7, 10, 0), datetime(2025, 1, 7, 11, 0), NOW, tz_name="Mars/Olympus"
    ) == []


def test_max_advance_booking_days():
    calendar = make_calendar()
    assert check_booking_rules(
        calendar, datetime(2025, 3, 1, 10, 0), datetime(2025, 3, 1, 11, 0), NOW, max_advance_days=30
    ) == ["Reservations cannot be made more than 30 days in advance"]


def test_all_violations_are_reported():
    calendar = make_calendar(
        availability=WEEKDAY_HOURS,
        booking_rules={"minAdvanceNotice": 48, "maxBookingDuration": 30},
    )
    errors = check_booking_rules(
        calendar, datetime(2025, 1, 6, 18, 0), datetime(2025, 1, 6, 20, 0), NOW
    )
    assert errors == [
        "Reservations require at least 48 hours advance notice",
        "Reservations cannot exceed 30 minutes",
        "Reservation must fall within 09:00-17:00 on monday",
    ]


def test_friday_booking_ending_at_midnight_is_not_weekend():
    calendar = make_calendar(booking_rules={"allowWeekends": False})
    assert check_booking_rules(
        calendar, datetime(2025, 1, 10, 23, 0), datetime(2025, 1, 11, 0, 0), NOW
    ) == []
    assert check_booking_rules(
        calendar, datetime(2025, 1, 10, 23, 0), datetime(2025, 1, 11, 0, 30), NOW
    ) == ["Weekend reservations are not allowed"]


def test_window_closing_at_midnight():
    late = make_calendar(availability={"tuesday": {"start": "18:00", "end": "24:00"}})
    early = make_calendar(availability={"tuesday": {"start": "18:00", "end": "23:00"}})

    assert check_booking_rules(
        late, datetime(2025, 1, 7, 23, 0), datetime(2025, 1, 8, 0, 0), NOW
    ) == []
    assert check_booking_rules(
        early, datetime(2025, 1, 7, 23, 0), datetime(2025, 1, 8, 0, 0), NOW
    ) == ["Reservation must fall within 18:00-23:00 on tuesday"]
    assert check_booking_rules(
        late, datetime(2025, 1, 7, 23, 0), datetime(2025, 1, 8, 0, 30), NOW
    ) == ["Reservation must fall within 18:00-24:00 on tuesday"]


def test_end_of_day_clock_time():
    assert parse_clock_time("24:00") == time.max
    assert parse_clock_time("23:59") == time(23, 59)
