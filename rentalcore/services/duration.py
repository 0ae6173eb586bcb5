"""Duration arithmetic shared by pricing and rule evaluation.

Billing always rounds up: any started period is a full period billed.
All datetimes are compared as aware values; naive inputs are taken as UTC.
"""

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import NamedTuple, Optional

from rentalcore.models.pricing import PRICING_MODE_MINUTES, PricingMode
from rentalcore.models.reservation import ensure_aware

_DURATION_WORDS = {
    "fr": {"day": "jour", "days": "jours", "and": "et"},
    "en": {"day": "day", "days": "days", "and": "and"},
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_seconds(start: datetime, end: datetime) -> float:
    return (ensure_aware(end) - ensure_aware(start)).total_seconds()


def pricing_mode_to_minutes(mode: PricingMode) -> int:
    """Length of one billing period."""
    return PRICING_MODE_MINUTES[PricingMode(mode)]


def calculate_duration(start: datetime, end: datetime, pricing_mode: PricingMode) -> int:
    """Number of billed periods between two datetimes, at least 1."""
    period_seconds = pricing_mode_to_minutes(pricing_mode) * 60
    return max(1, math.ceil(_elapsed_seconds(start, end) / period_seconds))


def calculate_duration_minutes(start: datetime, end: datetime) -> int:
    """Started minutes between two datetimes, at least 1."""
    return max(1, math.ceil(_elapsed_seconds(start, end) / 60))


def date_ranges_overlap(
    range1_start: datetime,
    range1_end: datetime,
    range2_start: datetime,
    range2_end: datetime,
) -> bool:
    """Check if two half-open ranges share any instant.

    A range ending exactly when the other starts does not overlap it.
    """
    return ensure_aware(range1_start) < ensure_aware(range2_end) and ensure_aware(
        range2_start
    ) < ensure_aware(range1_end)


def get_min_start_datetime(
    advance_notice_minutes: int = 0, now: Optional[datetime] = None
) -> datetime:
    """Earliest moment a reservation may start."""
    now = ensure_aware(now) if now else _utcnow()
    return now + timedelta(minutes=advance_notice_minutes)


def get_min_start_date(
    advance_notice_minutes: int = 0,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> datetime:
    """First day that may still have bookable slots (midnight in ``tz``)."""
    earliest = get_min_start_datetime(advance_notice_minutes, now).astimezone(tz)
    return earliest.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_time_slot(slot: str) -> time:
    """Parse an "HH:MM" slot."""
    hours, minutes = slot.split(":")
    return time(int(hours), int(minutes))


def is_time_slot_available(
    day: date,
    time_slot: str,
    advance_notice_minutes: int = 0,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> bool:
    """True if the slot starts at or after the advance-notice cutoff."""
    slot_datetime = datetime.combine(day, parse_time_slot(time_slot), tzinfo=tz)
    return slot_datetime >= get_min_start_datetime(advance_notice_minutes, now)


def get_default_rental_dates(
    now: Optional[datetime] = None, tz: tzinfo = timezone.utc
) -> tuple[datetime, datetime]:
    """Tomorrow midnight to the day after, in ``tz``."""
    local_now = (ensure_aware(now) if now else _utcnow()).astimezone(tz)
    start = datetime.combine(local_now.date() + timedelta(days=1), time(), tzinfo=tz)
    return start, start + timedelta(days=1)


def is_date_in_past(
    value: datetime, now: Optional[datetime] = None, tz: tzinfo = timezone.utc
) -> bool:
    """True if ``value`` is before today's midnight in ``tz``."""
    local_now = (ensure_aware(now) if now else _utcnow()).astimezone(tz)
    today = datetime.combine(local_now.date(), time(), tzinfo=tz)
    return ensure_aware(value) < today


class DetailedDuration(NamedTuple):
    days: int
    hours: int
    total_hours: int


def get_detailed_duration(start: datetime, end: datetime) -> DetailedDuration:
    """Split a duration into whole days and remaining whole hours."""
    total_hours = math.floor(_elapsed_seconds(start, end) / 3600)
    return DetailedDuration(
        days=total_hours // 24, hours=total_hours % 24, total_hours=total_hours
    )


def format_detailed_duration(start: datetime, end: datetime, locale: str = "fr") -> str:
    """Examples: "3 jours", "2 jours et 5h", "8h"."""
    words = _DURATION_WORDS.get(locale, _DURATION_WORDS["fr"])
    days, hours, _ = get_detailed_duration(start, end)

    if days == 0:
        return f"{hours}h"

    day_label = words["day"] if days == 1 else words["days"]
    if hours == 0:
        return f"{days} {day_label}"

    return f"{days} {day_label} {words['and']} {hours}h"
