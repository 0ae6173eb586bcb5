"""Store rule evaluation for a reservation period.

Rules never block a reservation made from the dashboard: broken rules are
returned as warnings for the owner to confirm, and recorded in the audit log.
"""

from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from rentalcore.logging import get_logger
from rentalcore.logging.audit import AuditLogger
from rentalcore.models.availability import (
    WARNING_KEYS,
    AvailabilityWarning,
    PeriodWarning,
    PeriodWarningType,
    ReservationValidationWarning,
    WarningCode,
)
from rentalcore.models.reservation import (
    BLOCKING_STATUSES,
    Product,
    Reservation,
    ReservationItem,
    ensure_aware,
)
from rentalcore.models.store import StoreSettings
from rentalcore.services import business_hours
from rentalcore.services.duration import date_ranges_overlap, get_min_start_datetime
from rentalcore.services.rental_duration import (
    format_duration_from_minutes,
    get_max_rental_minutes,
    get_min_rental_minutes,
    validate_max_rental_duration_minutes,
    validate_min_rental_duration_minutes,
)

logger = get_logger(__name__)


def _warning(code: WarningCode, **params) -> ReservationValidationWarning:
    return ReservationValidationWarning(code=code, key=WARNING_KEYS[code], params=params)


def evaluate_reservation_rules(
    start: datetime,
    end: datetime,
    settings: Optional[StoreSettings],
    now: Optional[datetime] = None,
    reservation_id: Optional[str] = None,
) -> list[ReservationValidationWarning]:
    """
    Check a period against the store's rental rules.

    Warnings come in a fixed order: business hours, advance notice,
    minimum duration, maximum duration. A rule that is not configured is
    skipped.

    Args:
        start: Pickup datetime
        end: Return datetime
        settings: Store settings; None disables every rule
        now: Reference time for advance notice (defaults to the current time)
        reservation_id: When given, violations are written to the audit log
    """
    start = ensure_aware(start)
    end = ensure_aware(end)
    warnings: list[ReservationValidationWarning] = []

    hours = business_hours.validate_rental_period(
        start,
        end,
        settings.business_hours if settings else None,
        settings.timezone if settings else None,
    )
    if not hours.valid:
        reasons = ", ".join(hours.errors)
        warnings.append(
            ReservationValidationWarning(
                code=WarningCode.BUSINESS_HOURS,
                key=WARNING_KEYS[WarningCode.BUSINESS_HOURS],
                params={"reasons": reasons},
                details=reasons,
            )
        )

    advance_notice = settings.advance_notice_minutes if settings else 0
    if advance_notice > 0 and start < get_min_start_datetime(advance_notice, now):
        warnings.append(
            _warning(WarningCode.ADVANCE_NOTICE, duration=format_duration_from_minutes(advance_notice))
        )

    min_minutes = get_min_rental_minutes(settings)
    if min_minutes > 0 and not validate_min_rental_duration_minutes(start, end, min_minutes).valid:
        warnings.append(
            _warning(WarningCode.MIN_DURATION, duration=format_duration_from_minutes(min_minutes))
        )

    max_minutes = get_max_rental_minutes(settings)
    if max_minutes is not None and not validate_max_rental_duration_minutes(start, end, max_minutes).valid:
        warnings.append(
            _warning(WarningCode.MAX_DURATION, duration=format_duration_from_minutes(max_minutes))
        )

    if warnings:
        logger.info(
            "reservation_rules_evaluated",
            warnings=len(warnings),
            codes=[warning.code.value for warning in warnings],
        )
        if reservation_id:
            AuditLogger.log_rules_violated(
                reservation_id,
                [warning.code.value for warning in warnings],
                format_reservation_warnings_for_log(warnings),
            )

    return warnings


def format_reservation_warnings_for_log(warnings: Iterable[ReservationValidationWarning]) -> str:
    """One-line summary for activity logs, "" when there is nothing to report."""
    parts = []
    for warning in warnings:
        duration = warning.params.get("duration", "?")
        if warning.code == WarningCode.BUSINESS_HOURS:
            parts.append(
                f"outside business hours ({warning.details})" if warning.details else "outside business hours"
            )
        elif warning.code == WarningCode.ADVANCE_NOTICE:
            parts.append(f"advance notice not met ({duration})")
        elif warning.code == WarningCode.MIN_DURATION:
            parts.append(f"minimum duration not met ({duration})")
        elif warning.code == WarningCode.MAX_DURATION:
            parts.append(f"maximum duration exceeded ({duration})")
        else:
            parts.append(warning.key)

    if not parts:
        return ""
    return f"Validation warnings: {'; '.join(parts)}"


def _hours_warning(
    value: datetime, field: str, settings: StoreSettings
) -> Optional[PeriodWarning]:
    check = business_hours.is_within_business_hours(value, settings.business_hours, settings.timezone)
    if check.valid:
        return None

    if check.reason == business_hours.DAY_CLOSED:
        return PeriodWarning(type=PeriodWarningType.DAY_CLOSED, field=field)

    if check.reason == business_hours.OUTSIDE_HOURS:
        schedule = business_hours.get_day_schedule(value, settings.business_hours, settings.timezone)
        return PeriodWarning(
            type=PeriodWarningType.OUTSIDE_HOURS,
            field=field,
            params={"open": schedule.open_time, "close": schedule.close_time},
        )

    closure = check.closure_period
    return PeriodWarning(
        type=PeriodWarningType.CLOSURE_PERIOD,
        field=field,
        params={"name": closure.name} if closure and closure.name else {},
        details=closure.name if closure and closure.name else None,
    )


def evaluate_period_warnings(
    start: Optional[datetime],
    end: Optional[datetime],
    settings: Optional[StoreSettings],
    now: Optional[datetime] = None,
) -> list[PeriodWarning]:
    """Warnings attached to the start and end fields of the reservation form."""
    warnings: list[PeriodWarning] = []
    if settings is None:
        return warnings

    hours_enabled = settings.business_hours is not None and settings.business_hours.enabled

    if start is not None:
        start = ensure_aware(start)
        advance_notice = settings.advance_notice_minutes
        if start < get_min_start_datetime(advance_notice, now):
            warnings.append(
                PeriodWarning(
                    type=PeriodWarningType.ADVANCE_NOTICE,
                    field="start",
                    params={"duration": format_duration_from_minutes(advance_notice)},
                )
            )
        if hours_enabled:
            warning = _hours_warning(start, "start", settings)
            if warning:
                warnings.append(warning)

    if end is not None and hours_enabled:
        warning = _hours_warning(ensure_aware(end), "end", settings)
        if warning:
            warnings.append(warning)

    return warnings


def evaluate_availability_warnings(
    start: datetime,
    end: datetime,
    requested: Iterable[ReservationItem],
    products: Iterable[Product],
    existing_reservations: Iterable[Reservation],
    exclude_reservation_id: Optional[str] = None,
) -> list[AvailabilityWarning]:
    """Products whose requested quantity exceeds the stock left for the period."""
    reserved: dict[str, int] = defaultdict(int)
    for reservation in existing_reservations:
        if reservation.id == exclude_reservation_id or reservation.status not in BLOCKING_STATUSES:
            continue
        if not date_ranges_overlap(reservation.start_date, reservation.end_date, start, end):
            continue
        for item in reservation.items:
            if item.product_id:
                reserved[item.product_id] += item.quantity

    wanted: dict[str, int] = defaultdict(int)
    for item in requested:
        if item.product_id:
            wanted[item.product_id] += item.quantity

    catalogue = {product.id: product for product in products}
    warnings = []
    for product_id, quantity in wanted.items():
        product = catalogue.get(product_id)
        if product is None:
            continue

        taken = reserved.get(product_id, 0)
        available = max(0, product.quantity - taken)
        if quantity > available:
            AuditLogger.log_availability_conflict(product_id, quantity, available)
            warnings.append(
                AvailabilityWarning(
                    product_id=product_id,
                    product_name=product.name,
                    requested_quantity=quantity,
                    available_quantity=available,
                    conflicting_reservations=taken,
                )
            )
    return warnings
