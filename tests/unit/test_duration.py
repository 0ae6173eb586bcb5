"""Unit tests for duration arithmetic."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from rentalcore.models import PricingMode
from rentalcore.services.duration import (
    calculate_duration,
    calculate_duration_minutes,
    date_ranges_overlap,
    format_detailed_duration,
    get_default_rental_dates,
    get_detailed_duration,
    get_min_start_date,
    get_min_start_datetime,
    is_date_in_past,
    is_time_slot_available,
    pricing_mode_to_minutes,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_calculate_duration_rounds_up():
    """Test any started period is billed."""
    start = utc(2026, 1, 5, 9, 0)

    assert calculate_duration(start, start + timedelta(hours=24), PricingMode.DAY) == 1
    assert calculate_duration(start, start + timedelta(hours=25), PricingMode.DAY) == 2
    assert calculate_duration(start, start + timedelta(minutes=61), PricingMode.HOUR) == 2
    assert calculate_duration(start, start + timedelta(days=8), PricingMode.WEEK) == 2


def test_calculate_duration_minimum_one():
    """Test empty or reversed ranges still bill one period."""
    start = utc(2026, 1, 5, 9, 0)

    assert calculate_duration(start, start, PricingMode.DAY) == 1
    assert calculate_duration(start, start - timedelta(hours=3), PricingMode.HOUR) == 1
    assert calculate_duration_minutes(start, start) == 1
    assert calculate_duration_minutes(start, start + timedelta(seconds=90)) == 2


def test_naive_datetimes_are_utc():
    """Test naive and aware inputs mix."""
    assert calculate_duration(
        datetime(2026, 1, 5, 9, 0), utc(2026, 1, 5, 12, 0), PricingMode.HOUR
    ) == 3


def test_pricing_mode_to_minutes():
    """Test period lengths."""
    assert pricing_mode_to_minutes(PricingMode.HOUR) == 60
    assert pricing_mode_to_minutes(PricingMode.DAY) == 1440
    assert pricing_mode_to_minutes(PricingMode.WEEK) == 10080


def test_date_ranges_overlap():
    """Test strict overlap; touching ranges do not overlap."""
    a_start, a_end = utc(2026, 1, 5), utc(2026, 1, 7)

    assert date_ranges_overlap(a_start, a_end, utc(2026, 1, 6), utc(2026, 1, 8)) is True
    assert date_ranges_overlap(a_start, a_end, utc(2026, 1, 7), utc(2026, 1, 8)) is False
    assert date_ranges_overlap(a_start, a_end, utc(2026, 1, 1), utc(2026, 1, 5)) is False
    assert date_ranges_overlap(a_start, a_end, utc(2026, 1, 1), utc(2026, 1, 9)) is True


def test_min_start(now):
    """Test advance notice shifts the earliest start."""
    assert get_min_start_datetime(0, now) == now
    assert get_min_start_datetime(90, now) == now + timedelta(minutes=90)

    paris = ZoneInfo("Europe/Paris")
    # 08:00 UTC + 16h is 01:00 on the 6th in Paris
    assert get_min_start_date(16 * 60, now, paris) == datetime(2026, 1, 6, tzinfo=paris)


def test_is_time_slot_available(now):
    """Test slots before the notice cutoff are unavailable."""
    assert is_time_slot_available(date(2026, 1, 5), "09:30", 60, now) is True
    assert is_time_slot_available(date(2026, 1, 5), "08:30", 60, now) is False
    assert is_time_slot_available(date(2026, 1, 5), "09:00", 60, now) is True


def test_default_rental_dates(now):
    """Test tomorrow to the day after, at midnight."""
    start, end = get_default_rental_dates(now)

    assert start == utc(2026, 1, 6)
    assert end == utc(2026, 1, 7)


def test_is_date_in_past(now):
    """Test anything before today's midnight is past."""
    assert is_date_in_past(utc(2026, 1, 4, 23, 59), now) is True
    assert is_date_in_past(utc(2026, 1, 5, 0, 0), now) is False


def test_detailed_duration():
    """Test days and hours split and labels."""
    start = utc(2026, 1, 5, 9, 0)

    assert get_detailed_duration(start, start + timedelta(hours=53, minutes=30)) == (2, 5, 53)
    assert format_detailed_duration(start, start + timedelta(hours=53)) == "2 jours et 5h"
    assert format_detailed_duration(start, start + timedelta(hours=72)) == "3 jours"
    assert format_detailed_duration(start, start + timedelta(hours=8)) == "8h"
    assert format_detailed_duration(start, start + timedelta(hours=30), "en") == "1 day and 6h"
