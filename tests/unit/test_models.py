"""Unit tests for domain model validation."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from rentalcore.models import (
    BusinessHours,
    DaySchedule,
    PricingTier,
    Product,
    Reservation,
    ReservationLine,
    ReservationStatus,
    StoreSettings,
    blocking_statuses,
    parse_iso_datetime,
    parse_money,
)


def test_parse_money():
    """Test lenient amount parsing."""
    assert parse_money("12,50") == Decimal("12.50")
    assert parse_money(" 7.5 ") == Decimal("7.5")
    assert parse_money(3) == Decimal("3")
    assert parse_money("abc") == Decimal("0")
    assert parse_money("NaN") == Decimal("0")
    assert parse_money(None, Decimal("1")) == Decimal("1")
    assert parse_money(True) == Decimal("0")


def test_product_accepts_comma_prices():
    """Test stored comma decimals are accepted."""
    product = Product(id="p", price="12,5", deposit=20.1)

    assert product.price == Decimal("12.5")
    assert product.deposit == Decimal("20.1")


def test_product_rejects_negative_price():
    """Test prices cannot be negative."""
    with pytest.raises(ValidationError):
        Product(id="p", price="-1")


def test_tier_fields_are_optional():
    """Test rate rows without tier fields validate."""
    tier = PricingTier(id="r", period=1440, price="120")

    assert tier.min_duration is None
    assert tier.discount_percent is None


def test_reservation_period_order():
    """Test end before start is rejected and naive dates become UTC."""
    reservation = Reservation(id="r", start_date=datetime(2026, 1, 5, 9), end_date=datetime(2026, 1, 6, 9))

    assert reservation.start_date.tzinfo == timezone.utc
    assert reservation.is_blocking is True

    with pytest.raises(ValidationError):
        Reservation(id="r", start_date=datetime(2026, 1, 6), end_date=datetime(2026, 1, 5))


def test_blocking_statuses():
    """Test pending requests can be excluded."""
    assert ReservationStatus.PENDING in blocking_statuses()
    assert blocking_statuses(False) == {ReservationStatus.CONFIRMED, ReservationStatus.ONGOING}


def test_reservation_line_requires_price_source():
    """Test custom lines need a unit price."""
    with pytest.raises(ValidationError):
        ReservationLine(label="Livraison", quantity=1)

    line = ReservationLine(label="Livraison", quantity=1, unit_price="15,00")
    assert line.unit_price == Decimal("15.00")


def test_store_settings_duration_bounds():
    """Test the minute maximum must not be below the minimum."""
    with pytest.raises(ValidationError):
        StoreSettings(min_rental_minutes=120, max_rental_minutes=60)

    assert StoreSettings(min_rental_minutes=60, max_rental_minutes=60).max_rental_minutes == 60


def test_business_hours_schedule_keys():
    """Test weekday keys must be 0-6 and times HH:MM."""
    with pytest.raises(ValidationError):
        BusinessHours(schedule={7: DaySchedule()})

    with pytest.raises(ValidationError):
        DaySchedule(open_time="9:00")

    hours = BusinessHours()
    assert hours.enabled is False
    assert hours.schedule[1].is_open is True
    assert hours.schedule[0].is_open is False


def test_parse_iso_datetime_accepts_utc_suffix():
    """Test "Z" strings parse as UTC and naive strings default to UTC."""
    expected = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)

    assert parse_iso_datetime("2026-01-05T10:00:00Z") == expected
    assert parse_iso_datetime("2026-01-05T10:00:00.000Z") == expected
    assert parse_iso_datetime("2026-01-05T10:00:00") == expected
    assert parse_iso_datetime("2026-01-05T11:00:00+01:00") == expected

    with pytest.raises(ValueError):
        parse_iso_datetime("not a date")
