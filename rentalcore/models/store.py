"""Store settings domain models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .pricing import PricingMode, _coerce_decimal

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class DaySchedule(BaseModel):
    """Opening hours for one weekday."""

    is_open: bool = True
    open_time: str = Field(default="09:00", pattern=_TIME_PATTERN)
    close_time: str = Field(default="18:00", pattern=_TIME_PATTERN)


class ClosurePeriod(BaseModel):
    """Dates (inclusive) during which the store is closed."""

    id: str = ""
    name: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None


def _default_schedule() -> dict[int, DaySchedule]:
    schedule = {day: DaySchedule() for day in range(1, 6)}
    schedule[0] = DaySchedule(is_open=False)
    schedule[6] = DaySchedule(is_open=False)
    return schedule


class BusinessHours(BaseModel):
    """Weekly schedule keyed by weekday, 0 = Sunday through 6 = Saturday."""

    enabled: bool = False
    schedule: dict[int, DaySchedule] = Field(default_factory=_default_schedule)
    closure_periods: list[ClosurePeriod] = Field(default_factory=list)

    @field_validator("schedule")
    @classmethod
    def validate_weekdays(cls, v: dict[int, DaySchedule]) -> dict[int, DaySchedule]:
        """Ensure weekday keys fall in 0..6."""
        for key in v:
            if key < 0 or key > 6:
                raise ValueError(f"schedule key {key} is not a weekday index (0-6)")
        return v


class TaxDisplayMode(str, Enum):
    """Whether catalogue prices include tax."""

    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


class TaxSettings(BaseModel):
    """Store-level tax configuration."""

    enabled: bool = False
    default_rate: Decimal = Field(default=Decimal("0"), ge=0)
    display_mode: TaxDisplayMode = TaxDisplayMode.INCLUSIVE
    tax_label: Optional[str] = None
    tax_number: Optional[str] = None

    @field_validator("default_rate", mode="before")
    @classmethod
    def normalise_rate(cls, v):
        return _coerce_decimal(v)


class ProductTaxSettings(BaseModel):
    """Per-product tax override."""

    inherit_from_store: bool = True
    custom_rate: Optional[Decimal] = Field(default=None, ge=0)


class ReservationMode(str, Enum):
    """How storefront checkouts become reservations."""

    PAYMENT = "payment"
    REQUEST = "request"


class StoreSettings(BaseModel):
    """Rental rules and locale of a store.

    Duration limits exist in three generations: ``min_duration`` and
    ``max_duration`` count pricing-mode periods (legacy), ``*_rental_hours``
    count hours, ``*_rental_minutes`` count minutes. The most precise one
    that is set wins.
    """

    pricing_mode: PricingMode = PricingMode.DAY
    reservation_mode: ReservationMode = ReservationMode.PAYMENT
    min_duration: Optional[int] = Field(default=None, ge=0)
    max_duration: Optional[int] = Field(default=None, ge=0)
    min_rental_hours: Optional[Decimal] = Field(default=None, ge=0)
    max_rental_hours: Optional[Decimal] = Field(default=None, ge=0)
    min_rental_minutes: Optional[int] = Field(default=None, ge=0)
    max_rental_minutes: Optional[int] = Field(default=None, ge=0)
    advance_notice_minutes: int = Field(default=0, ge=0)
    pending_blocks_availability: bool = True
    business_hours: Optional[BusinessHours] = None
    timezone: Optional[str] = None
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    country: Optional[str] = Field(default=None, min_length=2, max_length=2)
    tax: Optional[TaxSettings] = None

    @model_validator(mode="after")
    def validate_duration_bounds(self) -> "StoreSettings":
        """Reject a minute-based maximum below the minute-based minimum."""
        if (
            self.min_rental_minutes is not None
            and self.max_rental_minutes is not None
            and self.max_rental_minutes < self.min_rental_minutes
        ):
            raise ValueError("max_rental_minutes must be >= min_rental_minutes")
        return self


class Store(BaseModel):
    """Tenant owning products and reservations."""

    id: str
    slug: str = Field(min_length=1)
    name: str = ""
    settings: StoreSettings = Field(default_factory=StoreSettings)
