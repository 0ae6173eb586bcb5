"""Unit tests for reservation rule warnings."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from rentalcore.models import (
    PeriodWarningType,
    Reservation,
    ReservationItem,
    ReservationStatus,
    StoreSettings,
    WarningCode,
)
from rentalcore.services.reservation_rules import (
    evaluate_availability_warnings,
    evaluate_period_warnings,
    evaluate_reservation_rules,
    format_reservation_warnings_for_log,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def saturday_morning():
    return utc(2026, 1, 10, 9, 0)


def test_warnings_follow_rule_order(store_settings, saturday_morning):
    """Test business hours, advance notice and minimum duration are reported in order."""
    start = utc(2026, 1, 10, 10, 0)
    end = utc(2026, 1, 10, 10, 30)

    warnings = evaluate_reservation_rules(start, end, store_settings, now=saturday_morning)

    assert [warning.code for warning in warnings] == [
        WarningCode.BUSINESS_HOURS,
        WarningCode.ADVANCE_NOTICE,
        WarningCode.MIN_DURATION,
    ]
    assert warnings[0].key == "errors.businessHoursViolation"
    assert warnings[0].params == {"reasons": "pickup_day_closed, return_day_closed"}
    assert warnings[1].params == {"duration": "2h"}
    assert warnings[2].params == {"duration": "1h"}


def test_format_warnings_for_log(store_settings, saturday_morning):
    """Test the one-line activity log summary."""
    warnings = evaluate_reservation_rules(
        utc(2026, 1, 10, 10, 0), utc(2026, 1, 10, 10, 30), store_settings, now=saturday_morning
    )

    assert format_reservation_warnings_for_log(warnings) == (
        "Validation warnings: outside business hours (pickup_day_closed, return_day_closed); "
        "advance notice not met (2h); minimum duration not met (1h)"
    )
    assert format_reservation_warnings_for_log([]) == ""


def test_max_duration_from_hours(now):
    """Test an hour-based maximum is converted and labelled in days."""
    settings = StoreSettings(max_rental_hours=Decimal("24"))

    warnings = evaluate_reservation_rules(
        utc(2026, 1, 6, 9, 0), utc(2026, 1, 7, 10, 0), settings, now=now
    )

    assert [warning.code for warning in warnings] == [WarningCode.MAX_DURATION]
    assert warnings[0].params == {"duration": "1 jour"}
    assert format_reservation_warnings_for_log(warnings) == (
        "Validation warnings: maximum duration exceeded (1 jour)"
    )


def test_default_minimum_applies(now):
    """Test stores without a configured minimum still require one hour."""
    warnings = evaluate_reservation_rules(
        utc(2026, 1, 6, 9, 0), utc(2026, 1, 6, 9, 30), StoreSettings(), now=now
    )

    assert [warning.code for warning in warnings] == [WarningCode.MIN_DURATION]
    assert warnings[0].params == {"duration": "1h"}


def test_no_settings_no_warnings(now):
    """Test missing settings disable every rule."""
    assert evaluate_reservation_rules(utc(2026, 1, 5, 8, 0), utc(2026, 1, 5, 8, 1), None, now=now) == []


def test_valid_period_has_no_warnings(store_settings, now):
    """Test a weekday period within hours passes every rule."""
    warnings = evaluate_reservation_rules(
        utc(2026, 1, 6, 9, 0), utc(2026, 1, 7, 16, 0), store_settings, now=now
    )

    assert warnings == []



def test_advance_notice_boundary_is_allowed(store_settings, now):
    """Test a start exactly at now + notice passes and one minute earlier warns."""
    end = utc(2026, 1, 6, 10, 0)

    assert evaluate_reservation_rules(now + timedelta(minutes=120), end, store_settings, now=now) == []

    warnings = evaluate_reservation_rules(now + timedelta(minutes=119), end, store_settings, now=now)
    assert [warning.code for warning in warnings] == [WarningCode.ADVANCE_NOTICE]


def test_period_warning_advance_notice_boundary(store_settings, now):
    """Test the start field is only flagged before now + notice."""
    assert evaluate_period_warnings(now + timedelta(minutes=120), None, store_settings, now=now) == []

    warnings = evaluate_period_warnings(now + timedelta(minutes=119), None, store_settings, now=now)
    assert [warning.type for warning in warnings] == [PeriodWarningType.ADVANCE_NOTICE]


def test_violations_are_audited(store_settings, saturday_morning):
    """Test rule violations of a known reservation reach the audit log."""
    with patch("rentalcore.services.reservation_rules.AuditLogger") as mock_audit:
        evaluate_reservation_rules(
            utc(2026, 1, 10, 10, 0),
            utc(2026, 1, 10, 10, 30),
            store_settings,
            now=saturday_morning,
            reservation_id="res-1",
        )

    mock_audit.log_rules_violated.assert_called_once()
    args = mock_audit.log_rules_violated.call_args.args
    assert args[0] == "res-1"
    assert args[1] == ["business_hours", "advance_notice", "min_duration"]


def test_period_warnings_start_and_end(store_settings, now):
    """Test advance notice and opening hours are attached to their fields."""
    warnings = evaluate_period_warnings(
        utc(2026, 1, 5, 9, 0), utc(2026, 1, 5, 17, 30), store_settings, now=now
    )

    assert [(warning.type, warning.field) for warning in warnings] == [
        (PeriodWarningType.ADVANCE_NOTICE, "start"),
        (PeriodWarningType.OUTSIDE_HOURS, "end"),
    ]
    assert warnings[0].params == {"duration": "2h"}
    assert warnings[1].params == {"open": "09:00", "close": "18:00"}


def test_period_warning_for_closure(store_settings, now):
    """Test closures carry their name."""
    warnings = evaluate_period_warnings(utc(2026, 1, 13, 10, 0), None, store_settings, now=now)

    assert len(warnings) == 1
    assert warnings[0].type == PeriodWarningType.CLOSURE_PERIOD
    assert warnings[0].params == {"name": "Inventaire"}
    assert warnings[0].details == "Inventaire"


def test_period_warning_for_past_start_without_notice(now):
    """Test a start in the past is flagged even without advance notice."""
    settings = StoreSettings()

    warnings = evaluate_period_warnings(now - timedelta(hours=1), None, settings, now=now)

    assert [warning.type for warning in warnings] == [PeriodWarningType.ADVANCE_NOTICE]
    assert warnings[0].params == {"duration": "0 min"}
    assert evaluate_period_warnings(now + timedelta(hours=1), None, settings, now=now) == []
    assert evaluate_period_warnings(now, None, None, now=now) == []


@pytest.fixture
def existing_reservations():
    return [
        Reservation(
            id="r1",
            status=ReservationStatus.CONFIRMED,
            start_date=utc(2026, 1, 6, 9, 0),
            end_date=utc(2026, 1, 8, 9, 0),
            items=[ReservationItem(product_id="tent", quantity=2)],
        ),
        Reservation(
            id="r2",
            status=ReservationStatus.CANCELLED,
            start_date=utc(2026, 1, 6, 9, 0),
            end_date=utc(2026, 1, 8, 9, 0),
            items=[ReservationItem(product_id="tent", quantity=3)],
        ),
        Reservation(
            id="r3",
            status=ReservationStatus.PENDING,
            start_date=utc(2026, 1, 5, 9, 0),
            end_date=utc(2026, 1, 7, 9, 0),
            items=[ReservationItem(product_id="tent", quantity=3)],
        ),
    ]


def test_availability_warning_for_overbooked_product(tent, existing_reservations):
    """Test overlapping blocking reservations reduce stock; touching ones do not."""
    with patch("rentalcore.services.reservation_rules.AuditLogger") as mock_audit:
        warnings = evaluate_availability_warnings(
            utc(2026, 1, 7, 9, 0),
            utc(2026, 1, 9, 9, 0),
            [ReservationItem(product_id="tent", quantity=2)],
            [tent],
            existing_reservations,
        )

    assert len(warnings) == 1
    assert warnings[0].product_name == "Tente 4 places"
    assert warnings[0].requested_quantity == 2
    assert warnings[0].available_quantity == 1
    assert warnings[0].conflicting_reservations == 2
    mock_audit.log_availability_conflict.assert_called_once_with("tent", 2, 1)


def test_availability_warning_excludes_edited_reservation(tent, existing_reservations):
    """Test the reservation being edited does not conflict with itself."""
    warnings = evaluate_availability_warnings(
        utc(2026, 1, 7, 9, 0),
        utc(2026, 1, 9, 9, 0),
        [ReservationItem(product_id="tent", quantity=2)],
        [tent],
        existing_reservations,
        exclude_reservation_id="r1",
    )

    assert warnings == []


def test_availability_warning_ignores_unknown_products(tent):
    """Test custom lines and unknown products are skipped."""
    warnings = evaluate_availability_warnings(
        utc(2026, 1, 7, 9, 0),
        utc(2026, 1, 9, 9, 0),
        [ReservationItem(product_id="ghost", quantity=9), ReservationItem(quantity=1)],
        [tent],
        [],
    )

    assert warnings == []
