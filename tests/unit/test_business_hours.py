"""Unit tests for business hours and closure periods."""

from datetime import date, datetime, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from rentalcore.errors import ValidationFailedError
from rentalcore.models import BusinessHours, ClosurePeriod, DaySchedule
from rentalcore.services.business_hours import (
    CLOSURE_PERIOD,
    DAY_CLOSED,
    DAY_KEYS,
    OUTSIDE_HOURS,
    format_day_schedule,
    generate_time_slots,
    get_available_time_slots,
    get_day_schedule,
    get_next_available_date,
    get_upcoming_closures,
    is_date_available,
    is_in_closure_period,
    is_within_business_hours,
    validate_rental_period,
)

PARIS = "Europe/Paris"


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_day_keys_start_on_monday():
    """Test settings forms list Monday first and Sunday last."""
    assert DAY_KEYS == (1, 2, 3, 4, 5, 6, 0)


def test_within_business_hours_in_store_timezone(business_hours):
    """Test opening hours are read in Paris time."""
    # 10:00 UTC is 11:00 in Paris
    assert is_within_business_hours(utc(2026, 1, 5, 10, 0), business_hours, PARIS).valid is True
    # 17:30 UTC is 18:30 in Paris
    check = is_within_business_hours(utc(2026, 1, 5, 17, 30), business_hours, PARIS)
    assert check.valid is False
    assert check.reason == OUTSIDE_HOURS


def test_closing_time_is_inclusive(business_hours):
    """Test a return exactly at closing time is accepted."""
    assert is_within_business_hours(utc(2026, 1, 5, 17, 0), business_hours, PARIS).valid is True
    assert is_within_business_hours(utc(2026, 1, 5, 8, 0), business_hours, PARIS).valid is True


def test_closed_weekday(business_hours):
    """Test Saturday is closed by default."""
    check = is_within_business_hours(utc(2026, 1, 10, 11, 0), business_hours, PARIS)

    assert check.valid is False
    assert check.reason == DAY_CLOSED


def test_closure_period_wins_over_schedule(business_hours):
    """Test a weekday inside a closure period is rejected with the closure."""
    check = is_within_business_hours(utc(2026, 1, 13, 10, 0), business_hours, PARIS)

    assert check.valid is False
    assert check.reason == CLOSURE_PERIOD
    assert check.closure_period.name == "Inventaire"


def test_closure_day_depends_on_timezone(business_hours):
    """Test late Sunday UTC is already Monday 12th in Paris."""
    value = utc(2026, 1, 11, 23, 30)

    assert is_within_business_hours(value, business_hours, PARIS).reason == CLOSURE_PERIOD
    assert is_within_business_hours(value, business_hours, "UTC").reason == DAY_CLOSED


def test_disabled_business_hours_accept_everything(business_hours):
    """Test disabled or missing hours never reject."""
    disabled = business_hours.model_copy(update={"enabled": False})

    assert is_within_business_hours(utc(2026, 1, 10, 3, 0), disabled, PARIS).valid is True
    assert is_within_business_hours(utc(2026, 1, 10, 3, 0), None, PARIS).valid is True
    assert is_date_available(date(2026, 1, 13), None).available is True


def test_invalid_closure_period_is_skipped():
    """Test closures ending before they start are ignored with a warning."""
    closures = [
        ClosurePeriod(id="broken", start_date=date(2026, 2, 10), end_date=date(2026, 2, 1)),
        ClosurePeriod(id="open-ended", start_date=date(2026, 2, 1)),
        ClosurePeriod(id="ok", start_date=date(2026, 2, 5), end_date=date(2026, 2, 5)),
    ]

    with patch("rentalcore.services.business_hours.logger") as mock_logger:
        result = is_in_closure_period(date(2026, 2, 5), closures)

    assert result.id == "ok"
    assert mock_logger.warning.call_count == 2
    assert mock_logger.warning.call_args_list[0].args[0] == "invalid_closure_period_skipped"



def test_closure_end_date_is_inclusive(business_hours):
    """Test the last closure day is closed all day and the next day is not."""
    closures = business_hours.closure_periods

    assert is_in_closure_period(date(2026, 1, 14), closures).id == "winter"
    assert is_in_closure_period(utc(2026, 1, 14, 16, 0), closures, PARIS).id == "winter"
    # 23:30 UTC on the 14th is already the 15th in Paris
    assert is_in_closure_period(utc(2026, 1, 14, 23, 30), closures, PARIS) is None
    assert is_in_closure_period(date(2026, 1, 15), closures) is None
    assert is_date_available(date(2026, 1, 15), business_hours).available is True


def test_is_date_available(business_hours):
    """Test open days, closed days and closures."""
    assert is_date_available(date(2026, 1, 5), business_hours).available is True
    assert is_date_available(date(2026, 1, 11), business_hours).reason == DAY_CLOSED

    check = is_date_available(date(2026, 1, 14), business_hours)
    assert check.available is False
    assert check.closure_period.id == "winter"


def test_missing_schedule_day_is_closed():
    """Test a weekday absent from the table counts as closed."""
    hours = BusinessHours(enabled=True, schedule={1: DaySchedule()})

    assert get_day_schedule(date(2026, 1, 6), hours).is_open is False
    assert is_date_available(date(2026, 1, 6), hours).reason == DAY_CLOSED
    assert is_date_available(date(2026, 1, 5), hours).available is True


def test_generate_time_slots():
    """Test slots include both bounds."""
    assert generate_time_slots("09:00", "10:30", 30) == ["09:00", "09:30", "10:00", "10:30"]
    assert generate_time_slots("09:00", "10:00", 45) == ["09:00", "09:45"]



def test_generate_time_slots_rejects_non_positive_interval():
    """Test a zero or negative interval is refused."""
    with pytest.raises(ValidationFailedError):
        generate_time_slots("09:00", "10:00", 0)

    with pytest.raises(ValidationFailedError):
        generate_time_slots("09:00", "10:00", -15)


def test_available_time_slots(business_hours):
    """Test slots follow the schedule of the day."""
    slots = get_available_time_slots(date(2026, 1, 5), business_hours, 60)

    assert slots[0] == "09:00"
    assert slots[-1] == "18:00"
    assert len(slots) == 10
    assert get_available_time_slots(date(2026, 1, 10), business_hours, 60) == []


def test_available_time_slots_without_hours():
    """Test the configured default range is used when hours are off."""
    slots = get_available_time_slots(date(2026, 1, 10), None, 60)

    assert slots[0] == "07:00"
    assert slots[-1] == "21:00"


def test_validate_rental_period(business_hours):
    """Test pickup and return errors are prefixed."""
    result = validate_rental_period(
        utc(2026, 1, 10, 10, 0), utc(2026, 1, 13, 10, 0), business_hours, PARIS
    )

    assert result.valid is False
    assert result.errors == ["pickup_day_closed", "return_closure_period"]

    ok = validate_rental_period(utc(2026, 1, 5, 9, 0), utc(2026, 1, 6, 9, 0), business_hours, PARIS)
    assert ok.valid is True
    assert ok.errors == []


def test_next_available_date_skips_weekend_and_closure(business_hours):
    """Test Saturday 10th leads to Thursday 15th at local midnight."""
    result = get_next_available_date(utc(2026, 1, 10, 12, 0), business_hours, timezone_name=PARIS)

    assert result == datetime(2026, 1, 15, 0, 0, tzinfo=ZoneInfo(PARIS))


def test_next_available_date_gives_up(business_hours):
    """Test None when nothing opens within the search window."""
    assert get_next_available_date(utc(2026, 1, 10, 12, 0), business_hours, 3, PARIS) is None



def test_next_available_date_zero_search_window(business_hours):
    """Test an explicit zero-day window searches nothing."""
    assert get_next_available_date(utc(2026, 1, 5, 8, 0), business_hours, 0, PARIS) is None


def test_next_available_date_without_hours():
    """Test the input is returned when hours are off."""
    value = utc(2026, 1, 10, 12, 0)

    assert get_next_available_date(value, None) == value


def test_format_day_schedule():
    """Test schedule labels."""
    assert format_day_schedule(DaySchedule()) == "09:00 - 18:00"
    assert format_day_schedule(DaySchedule(is_open=False)) == "closed"


def test_upcoming_closures():
    """Test past closures are dropped and the rest sorted by start."""
    closures = [
        ClosurePeriod(id="summer", start_date=date(2026, 8, 1), end_date=date(2026, 8, 15)),
        ClosurePeriod(id="past", start_date=date(2025, 12, 24), end_date=date(2025, 12, 26)),
        ClosurePeriod(id="current", start_date=date(2026, 1, 1), end_date=date(2026, 1, 7)),
    ]

    upcoming = get_upcoming_closures(closures, date(2026, 1, 5))

    assert [period.id for period in upcoming] == ["current", "summer"]
