"""Reservation, product and stock domain models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .pricing import PricingMode, PricingTier, _coerce_decimal
from .store import ProductTaxSettings

DEFAULT_COMBINATION_KEY = "__default"


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 string, including the "Z" UTC suffix; naive means UTC.

    Raises:
        ValueError: If the string is not an ISO datetime
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value))


class ReservationStatus(str, Enum):
    """Reservation lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Statuses that hold stock for their period
BLOCKING_STATUSES: frozenset[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.ONGOING}
)


def blocking_statuses(pending_blocks_availability: bool = True) -> frozenset[ReservationStatus]:
    """Statuses that block stock, optionally ignoring unanswered requests."""
    if pending_blocks_availability:
        return BLOCKING_STATUSES
    return BLOCKING_STATUSES - {ReservationStatus.PENDING}


class ProductStatus(str, Enum):
    """Catalogue status."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class UnitStatus(str, Enum):
    """Physical unit status."""

    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class Product(BaseModel):
    """Rentable product."""

    id: str
    name: str = ""
    quantity: int = Field(default=1, ge=0)
    track_units: bool = False
    status: ProductStatus = ProductStatus.ACTIVE
    price: Decimal = Field(default=Decimal("0"), ge=0)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    pricing_mode: Optional[PricingMode] = None
    base_period_minutes: Optional[int] = None
    enforce_strict_tiers: bool = False
    pricing_tiers: list[PricingTier] = Field(default_factory=list)
    booking_attribute_axes: list[str] = Field(default_factory=list)
    tax_settings: Optional[ProductTaxSettings] = None

    @field_validator("price", "deposit", mode="before")
    @classmethod
    def normalise_money(cls, v: Any) -> Any:
        return _coerce_decimal(v)


class ProductUnit(BaseModel):
    """Individually tracked physical unit of a product."""

    id: str
    product_id: str
    identifier: str = ""
    notes: Optional[str] = None
    status: UnitStatus = UnitStatus.AVAILABLE
    combination_key: Optional[str] = None
    attributes: dict[str, str] = Field(default_factory=dict)


class ReservationItem(BaseModel):
    """Line of a reservation."""

    product_id: Optional[str] = None
    quantity: int = Field(gt=0)
    combination_key: Optional[str] = None
    unit_ids: list[str] = Field(default_factory=list)


class Reservation(BaseModel):
    """Booking of products over a period."""

    id: str
    status: ReservationStatus = ReservationStatus.PENDING
    start_date: datetime
    end_date: datetime
    items: list[ReservationItem] = Field(default_factory=list)

    @field_validator("start_date", "end_date")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def validate_period(self) -> "Reservation":
        """Ensure start_date <= end_date."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES


class ReservationLine(BaseModel):
    """Line being priced on the dashboard reservation form.

    Catalogue lines carry ``product``; custom lines only carry a fixed
    ``unit_price``. ``is_manual_price`` keeps ``unit_price`` even for
    catalogue products.
    """

    product: Optional[Product] = None
    label: str = ""
    quantity: int = Field(gt=0)
    pricing_mode: Optional[PricingMode] = None
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    is_manual_price: bool = False
    deposit_per_unit: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("unit_price", "deposit_per_unit", mode="before")
    @classmethod
    def normalise_money(cls, v: Any) -> Any:
        return _coerce_decimal(v)

    @model_validator(mode="after")
    def validate_price_source(self) -> "ReservationLine":
        """A line without a product must state its unit price."""
        if (self.product is None or self.is_manual_price) and self.unit_price is None:
            raise ValueError("unit_price is required for custom or manually priced lines")
        return self


class PricedReservationLine(BaseModel):
    """Pricing of one reservation line."""

    product_id: Optional[str] = None
    label: str = ""
    quantity: int
    pricing_mode: PricingMode
    duration: int
    unit_price: Decimal
    total_price: Decimal
    original_total: Decimal
    deposit: Decimal
    discount_percent: Decimal = Decimal("0")
    tier_label: Optional[str] = None
    is_manual_price: bool = False


class ReservationPricing(BaseModel):
    """Totals of a reservation being created or edited."""

    lines: list[PricedReservationLine] = Field(default_factory=list)
    subtotal: Decimal
    original_subtotal: Decimal
    deposit: Decimal
    savings: Decimal
    difference: Optional[Decimal] = None
