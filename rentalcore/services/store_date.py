"""Timezone-aware date formatting for stores.

All customer- and owner-facing dates go through :func:`format_store_date`,
so they are shown in the store's timezone rather than the server's.

Usage:
    format_store_date(dt, "Europe/Paris", "SHORT_DATETIME")
    format_store_date(dt, "Europe/Paris", "d MMM yyyy 'à' HH:mm")
"""

import re
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rentalcore.config.settings import get_settings
from rentalcore.logging import get_logger
from rentalcore.models.reservation import ensure_aware, parse_iso_datetime

logger = get_logger(__name__)

DATE_FORMATS: dict[str, str] = {
    # "lundi 5 janvier 2026 à 14:00"
    "FULL_DATETIME": "EEEE d MMMM yyyy 'à' HH:mm",
    # "lun. 5 janv. à 14:00"
    "SHORT_DATETIME": "EEE d MMM 'à' HH:mm",
    # "05 janv. 2026 14:00"
    "COMPACT_DATETIME": "dd MMM yyyy HH:mm",
    # "05/01/26 14:00"
    "TIMESTAMP": "dd/MM/yy HH:mm",
    # "5 janv. 2026 à 14:00"
    "DATE_AT_TIME": "d MMM yyyy 'à' HH:mm",
    # "5 janv. à 14:00"
    "SHORT_DATE_AT_TIME": "d MMM 'à' HH:mm",
    # "5 janv. 14:00"
    "RANGE_ELEMENT": "d MMM HH:mm",
    "TIME_ONLY": "HH:mm",
    # "lundi 5 janvier 2026"
    "FULL_DATE": "EEEE d MMMM yyyy",
    # "5 janvier 2026"
    "MEDIUM_DATE": "d MMMM yyyy",
    # "05 janv. 2026"
    "SHORT_DATE": "dd MMM yyyy",
    # "5 janv."
    "SHORTEST_DATE": "d MMM",
    # "lundi 05 janvier"
    "DAY_AND_DATE": "EEEE dd MMMM",
    "COMPACT_DATE": "dd/MM",
    # "5 janvier 2026 à 14:00:00"
    "PRECISE_DATETIME": "d MMMM yyyy 'à' HH:mm:ss",
}

# Indexed by datetime.weekday() (Monday = 0) and month - 1
_NAMES = {
    "fr": {
        "days": ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"],
        "days_short": ["lun.", "mar.", "mer.", "jeu.", "ven.", "sam.", "dim."],
        "months": [
            "janvier", "février", "mars", "avril", "mai", "juin",
            "juillet", "août", "septembre", "octobre", "novembre", "décembre",
        ],
        "months_short": [
            "janv.", "févr.", "mars", "avr.", "mai", "juin",
            "juil.", "août", "sept.", "oct.", "nov.", "déc.",
        ],
    },
    "en": {
        "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
        "days_short": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        "months": [
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ],
        "months_short": [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ],
    },
}

_TOKEN_PATTERN = re.compile(r"'[^']*'|EEEE|EEE|MMMM|MMM|MM|dd|d|yyyy|yy|HH|mm|ss")


def normalize_timezone(value: Optional[str]) -> Optional[str]:
    """Return a valid IANA timezone name, or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    name = value.strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None
    return name


def resolve_timezone(value: Optional[str]) -> tzinfo:
    """Store timezone, falling back to the configured default, then UTC."""
    name = normalize_timezone(value)
    if name is None:
        if value:
            logger.debug("invalid_store_timezone", timezone=value)
        name = normalize_timezone(get_settings().default_timezone)
    return ZoneInfo(name) if name else timezone.utc


def _render(local: datetime, pattern: str, locale: str) -> str:
    names = _NAMES.get(locale, _NAMES["fr"])

    def replace(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith("'"):
            return token[1:-1] if len(token) > 2 else "'"
        if token == "EEEE":
            return names["days"][local.weekday()]
        if token == "EEE":
            return names["days_short"][local.weekday()]
        if token == "MMMM":
            return names["months"][local.month - 1]
        if token == "MMM":
            return names["months_short"][local.month - 1]
        if token == "MM":
            return f"{local.month:02d}"
        if token == "dd":
            return f"{local.day:02d}"
        if token == "d":
            return str(local.day)
        if token == "yyyy":
            return f"{local.year:04d}"
        if token == "yy":
            return f"{local.year % 100:02d}"
        if token == "HH":
            return f"{local.hour:02d}"
        if token == "mm":
            return f"{local.minute:02d}"
        return f"{local.second:02d}"

    return _TOKEN_PATTERN.sub(replace, pattern)


def format_store_date(
    value: datetime | str,
    timezone_name: Optional[str],
    preset: str,
    locale: str = "fr",
) -> str:
    """
    Format a date in the store's timezone.

    Args:
        value: Datetime or ISO string (typically UTC from the database)
        timezone_name: IANA timezone, e.g. "Europe/Paris"; invalid values fall back
        preset: A key of DATE_FORMATS, or a custom pattern using the same tokens
        locale: "fr" or "en"
    """
    if isinstance(value, str):
        value = parse_iso_datetime(value)
    pattern = DATE_FORMATS.get(preset, preset)
    local = ensure_aware(value).astimezone(resolve_timezone(timezone_name))
    return _render(local, pattern, locale)


def format_store_date_range(
    start: datetime | str,
    end: datetime | str,
    timezone_name: Optional[str],
    locale: str = "fr",
) -> str:
    """
    Format a reservation period.

    Same day:  "5 janv. • 14:00 - 18:00"
    Multi-day: "5 janv. 14:00 → 7 janv. 18:00"
    """
    start_short = format_store_date(start, timezone_name, "SHORTEST_DATE", locale)
    end_short = format_store_date(end, timezone_name, "SHORTEST_DATE", locale)

    if start_short == end_short:
        start_time = format_store_date(start, timezone_name, "TIME_ONLY", locale)
        end_time = format_store_date(end, timezone_name, "TIME_ONLY", locale)
        return f"{start_short} • {start_time} - {end_time}"

    start_label = format_store_date(start, timezone_name, "RANGE_ELEMENT", locale)
    end_label = format_store_date(end, timezone_name, "RANGE_ELEMENT", locale)
    return f"{start_label} → {end_label}"


def format_store_time(value: datetime | str, timezone_name: Optional[str]) -> str:
    """Format time only in store timezone."""
    return format_store_date(value, timezone_name, "TIME_ONLY")
