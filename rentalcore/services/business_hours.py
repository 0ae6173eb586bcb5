"""Opening hours and closure periods of a store.

Weekday and wall-clock time are always read in the store timezone; schedule
keys follow the 0 = Sunday convention.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, NamedTuple, Optional, Union

from rentalcore.config.settings import get_settings
from rentalcore.errors import ValidationFailedError
from rentalcore.logging import get_logger
from rentalcore.models.availability import BusinessHoursValidation
from rentalcore.models.reservation import ensure_aware
from rentalcore.models.store import BusinessHours, ClosurePeriod, DaySchedule
from rentalcore.services.store_date import resolve_timezone

logger = get_logger(__name__)

# Monday first, as shown in settings forms
DAY_KEYS = (1, 2, 3, 4, 5, 6, 0)

CLOSURE_PERIOD = "closure_period"
DAY_CLOSED = "day_closed"
OUTSIDE_HOURS = "outside_hours"

_CLOSED_DAY = DaySchedule(is_open=False)


class HoursCheck(NamedTuple):
    valid: bool
    reason: Optional[str] = None
    closure_period: Optional[ClosurePeriod] = None


class DateCheck(NamedTuple):
    available: bool
    reason: Optional[str] = None
    closure_period: Optional[ClosurePeriod] = None


def to_store_local(value: datetime, timezone_name: Optional[str]) -> datetime:
    return ensure_aware(value).astimezone(resolve_timezone(timezone_name))


def _date_key(value: Union[date, datetime], timezone_name: Optional[str]) -> date:
    if isinstance(value, datetime):
        return to_store_local(value, timezone_name).date()
    return value


def _weekday(local: Union[date, datetime]) -> int:
    # date.weekday() is Monday = 0; schedules use Sunday = 0
    return (local.weekday() + 1) % 7


def is_in_closure_period(
    value: Union[date, datetime],
    closures: Optional[Iterable[ClosurePeriod]],
    timezone_name: Optional[str] = None,
) -> Optional[ClosurePeriod]:
    """Closure period containing the store-local day of ``value``, if any."""
    if not closures:
        return None

    day = _date_key(value, timezone_name)
    for period in closures:
        if period.start_date is None or period.end_date is None or period.end_date < period.start_date:
            logger.warning(
                "invalid_closure_period_skipped",
                closure_id=period.id,
                start_date=str(period.start_date),
                end_date=str(period.end_date),
            )
            continue
        if period.start_date <= day <= period.end_date:
            return period
    return None


def get_day_schedule(
    value: Union[date, datetime], business_hours: BusinessHours, timezone_name: Optional[str] = None
) -> DaySchedule:
    """Schedule of the store-local weekday; days missing from the table are closed."""
    if isinstance(value, datetime):
        value = to_store_local(value, timezone_name)
    return business_hours.schedule.get(_weekday(value), _CLOSED_DAY)


def is_within_business_hours(
    value: datetime, business_hours: Optional[BusinessHours], timezone_name: Optional[str] = None
) -> HoursCheck:
    """Check a pickup or return instant; opening and closing times are inclusive."""
    if business_hours is None or not business_hours.enabled:
        return HoursCheck(valid=True)

    closure = is_in_closure_period(value, business_hours.closure_periods, timezone_name)
    if closure is not None:
        return HoursCheck(valid=False, reason=CLOSURE_PERIOD, closure_period=closure)

    schedule = get_day_schedule(value, business_hours, timezone_name)
    if not schedule.is_open:
        return HoursCheck(valid=False, reason=DAY_CLOSED)

    clock = to_store_local(value, timezone_name).strftime("%H:%M")
    if clock < schedule.open_time or clock > schedule.close_time:
        return HoursCheck(valid=False, reason=OUTSIDE_HOURS)

    return HoursCheck(valid=True)


def is_date_available(
    value: Union[date, datetime],
    business_hours: Optional[BusinessHours],
    timezone_name: Optional[str] = None,
) -> DateCheck:
    """Whether the store opens at all on the day of ``value``."""
    if business_hours is None or not business_hours.enabled:
        return DateCheck(available=True)

    closure = is_in_closure_period(value, business_hours.closure_periods, timezone_name)
    if closure is not None:
        return DateCheck(available=False, reason=CLOSURE_PERIOD, closure_period=closure)

    if not get_day_schedule(value, business_hours, timezone_name).is_open:
        return DateCheck(available=False, reason=DAY_CLOSED)

    return DateCheck(available=True)


def _parse_clock(value: str) -> tuple[int, int]:
    hours, minutes = value.split(":")
    return int(hours), int(minutes)


def generate_time_slots(start_time: str, end_time: str, interval_minutes: Optional[int] = None) -> list[str]:
    """Slots formatted HH:MM from ``start_time`` to ``end_time`` inclusive.

    Raises:
        ValidationFailedError: If the interval is not positive
    """
    if interval_minutes is None:
        interval = get_settings().time_slot_interval_minutes
    else:
        interval = interval_minutes
    if interval <= 0:
        raise ValidationFailedError(f"Time slot interval must be positive, got {interval}")
    start_hour, start_minute = _parse_clock(start_time)
    end_hour, end_minute = _parse_clock(end_time)

    current = start_hour * 60 + start_minute
    last = end_hour * 60 + end_minute
    slots = []
    while current <= last:
        hours, minutes = divmod(current, 60)
        slots.append(f"{hours:02d}:{minutes:02d}")
        current += interval
    return slots


def get_available_time_slots(
    value: Union[date, datetime],
    business_hours: Optional[BusinessHours],
    interval_minutes: Optional[int] = None,
    timezone_name: Optional[str] = None,
) -> list[str]:
    """Pickup/return slots for a day; the configured default range when hours are off."""
    if business_hours is None or not business_hours.enabled:
        settings = get_settings()
        return generate_time_slots(settings.default_slot_open, settings.default_slot_close, interval_minutes)

    if not is_date_available(value, business_hours, timezone_name).available:
        return []

    schedule = get_day_schedule(value, business_hours, timezone_name)
    return generate_time_slots(schedule.open_time, schedule.close_time, interval_minutes)


def validate_rental_period(
    start: datetime,
    end: datetime,
    business_hours: Optional[BusinessHours],
    timezone_name: Optional[str] = None,
) -> BusinessHoursValidation:
    """Check both ends of a rental; errors read ``pickup_<reason>`` / ``return_<reason>``."""
    if business_hours is None or not business_hours.enabled:
        return BusinessHoursValidation(valid=True)

    errors = []
    start_check = is_within_business_hours(start, business_hours, timezone_name)
    if not start_check.valid:
        errors.append(f"pickup_{start_check.reason}")

    end_check = is_within_business_hours(end, business_hours, timezone_name)
    if not end_check.valid:
        errors.append(f"return_{end_check.reason}")

    return BusinessHoursValidation(valid=not errors, errors=errors)


def get_next_available_date(
    from_date: datetime,
    business_hours: Optional[BusinessHours],
    max_days_to_search: Optional[int] = None,
    timezone_name: Optional[str] = None,
) -> Optional[datetime]:
    """Start of the first store-local day the store opens, from ``from_date`` on."""
    if business_hours is None or not business_hours.enabled:
        return from_date

    if max_days_to_search is None:
        days = get_settings().next_available_search_days
    else:
        days = max_days_to_search
    tz = resolve_timezone(timezone_name)
    day = to_store_local(from_date, timezone_name).date()

    for _ in range(days):
        if is_date_available(day, business_hours, timezone_name).available:
            return datetime.combine(day, time.min, tzinfo=tz)
        day += timedelta(days=1)
    return None


def format_day_schedule(schedule: DaySchedule) -> str:
    if not schedule.is_open:
        return "closed"
    return f"{schedule.open_time} - {schedule.close_time}"


def get_upcoming_closures(
    closures: Iterable[ClosurePeriod],
    from_date: Optional[Union[date, datetime]] = None,
    timezone_name: Optional[str] = None,
) -> list[ClosurePeriod]:
    """Closures not yet over, by start date."""
    if from_date is None:
        from_date = datetime.now(resolve_timezone(timezone_name))
    today = _date_key(from_date, timezone_name)

    upcoming = [
        period
        for period in closures
        if period.start_date is not None and period.end_date is not None and period.end_date >= today
    ]
    return sorted(upcoming, key=lambda period: period.start_date)
