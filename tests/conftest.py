"""Pytest configuration and shared fixtures."""

import sys
from datetime import date, datetime, timezone
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from rentalcore.models import (
    BusinessHours,
    ClosurePeriod,
    PricingMode,
    PricingTier,
    Product,
    StoreSettings,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def now():
    """Monday 5 January 2026, 08:00 UTC (09:00 in Paris)."""
    return datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def business_hours():
    """Mon-Fri 09:00-18:00, weekends closed, closed 12-14 January 2026."""
    return BusinessHours(
        enabled=True,
        closure_periods=[
            ClosurePeriod(
                id="winter",
                name="Inventaire",
                start_date=date(2026, 1, 12),
                end_date=date(2026, 1, 14),
            )
        ],
    )


@pytest.fixture
def store_settings(business_hours):
    """Paris store with business hours and a two-hour advance notice."""
    return StoreSettings(
        timezone="Europe/Paris",
        business_hours=business_hours,
        advance_notice_minutes=120,
        min_rental_minutes=60,
    )


@pytest.fixture
def tent():
    """Day-priced product with a 3-day tier at -10%."""
    return Product(
        id="tent",
        name="Tente 4 places",
        quantity=3,
        price="100",
        deposit="50",
        pricing_mode=PricingMode.DAY,
        pricing_tiers=[PricingTier(id="t3", min_duration=3, discount_percent="10")],
    )


@pytest.fixture
def fixtures_dir():
    """Directory holding YAML fixtures."""
    return FIXTURES_DIR
