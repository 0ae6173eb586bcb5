"""Minimum / maximum rental duration rules."""

import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from rentalcore.models.pricing import PRICING_MODE_MINUTES
from rentalcore.models.reservation import ensure_aware
from rentalcore.models.store import StoreSettings

# Applied when a store never configured a minimum
DEFAULT_MIN_RENTAL_MINUTES = 60

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 60 * 24
MINUTES_PER_WEEK = MINUTES_PER_DAY * 7

_LABELS = {
    "fr": {"day": "jour", "days": "jours", "week": "semaine", "weeks": "semaines"},
    "en": {"day": "day", "days": "days", "week": "week", "weeks": "weeks"},
}


class DurationCheck(NamedTuple):
    valid: bool
    actual_minutes: int
    limit_minutes: int


def _hours_to_minutes(hours: Decimal) -> int:
    return int((hours * MINUTES_PER_HOUR).to_integral_value(rounding=ROUND_HALF_UP))


def get_min_rental_minutes(settings: Optional[StoreSettings]) -> int:
    """Minimum rental length in minutes, 0 when unrestricted."""
    if settings is None:
        return 0
    if settings.min_rental_minutes is not None:
        return settings.min_rental_minutes
    if settings.min_rental_hours is not None:
        return _hours_to_minutes(settings.min_rental_hours)
    if settings.min_duration is not None:
        return settings.min_duration * PRICING_MODE_MINUTES[settings.pricing_mode]
    return DEFAULT_MIN_RENTAL_MINUTES


def get_max_rental_minutes(settings: Optional[StoreSettings]) -> Optional[int]:
    """Maximum rental length in minutes, None when unlimited."""
    if settings is None:
        return None

    if settings.max_rental_minutes is not None:
        limit = settings.max_rental_minutes
    elif settings.max_rental_hours is not None:
        limit = _hours_to_minutes(settings.max_rental_hours)
    elif settings.max_duration is not None:
        limit = settings.max_duration * PRICING_MODE_MINUTES[settings.pricing_mode]
    else:
        return None

    return limit if limit > 0 else None


def _elapsed_minutes(start: datetime, end: datetime) -> float:
    return (ensure_aware(end) - ensure_aware(start)).total_seconds() / 60


def validate_min_rental_duration_minutes(
    start: datetime, end: datetime, min_minutes: int
) -> DurationCheck:
    elapsed = _elapsed_minutes(start, end)
    return DurationCheck(
        valid=elapsed >= min_minutes,
        actual_minutes=max(0, math.ceil(elapsed)),
        limit_minutes=min_minutes,
    )


def validate_max_rental_duration_minutes(
    start: datetime, end: datetime, max_minutes: int
) -> DurationCheck:
    elapsed = _elapsed_minutes(start, end)
    return DurationCheck(
        valid=elapsed <= max_minutes,
        actual_minutes=max(0, math.ceil(elapsed)),
        limit_minutes=max_minutes,
    )


def format_duration_from_minutes(minutes: int, locale: str = "fr") -> str:
    """Human label for a rule duration.

    Examples: "30 min", "2h", "1h30", "1 jour", "1 jour 4h", "2 semaines".
    """
    labels = _LABELS.get(locale, _LABELS["fr"])
    minutes = max(0, int(minutes))

    if minutes < MINUTES_PER_HOUR:
        return f"{minutes} min"

    if minutes < MINUTES_PER_DAY:
        hours, rest = divmod(minutes, MINUTES_PER_HOUR)
        return f"{hours}h{rest:02d}" if rest else f"{hours}h"

    if minutes % MINUTES_PER_WEEK == 0:
        weeks = minutes // MINUTES_PER_WEEK
        return f"{weeks} {labels['week'] if weeks == 1 else labels['weeks']}"

    days, rest = divmod(minutes, MINUTES_PER_DAY)
    label = f"{days} {labels['day'] if days == 1 else labels['days']}"
    if not rest:
        return label

    hours, rest = divmod(rest, MINUTES_PER_HOUR)
    if rest:
        return f"{label} {hours}h{rest:02d}"
    return f"{label} {hours}h"
