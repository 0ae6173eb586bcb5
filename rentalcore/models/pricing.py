"""Pricing domain models."""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class PricingMode(str, Enum):
    """Billing period of a tiered product."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


PRICING_MODE_MINUTES: dict[PricingMode, int] = {
    PricingMode.HOUR: 60,
    PricingMode.DAY: 60 * 24,
    PricingMode.WEEK: 60 * 24 * 7,
}

BASE_RATE_ID = "__base__"


def parse_money(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Parse a stored amount leniently.

    Accepts numbers and strings using either decimal separator ("12,50").
    Anything unparsable or non-finite yields ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, (int, float)):
        value = str(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip().replace(",", "."))
        except InvalidOperation:
            return default
        return parsed if parsed.is_finite() else default
    return default


def _coerce_decimal(value: Any) -> Any:
    """Normalise comma decimals before pydantic's own Decimal parsing."""
    if isinstance(value, str):
        return value.strip().replace(",", ".")
    if isinstance(value, float):
        return str(value)
    return value


class PricingTier(BaseModel):
    """Volume-discount rule applied once the rental reaches ``min_duration`` periods.

    Rate-based products store their rows in the same table, so both fields
    may be empty; such rows are ignored by tier lookups.
    """

    id: str = ""
    min_duration: Optional[int] = None
    discount_percent: Optional[Decimal] = None
    period: Optional[int] = Field(default=None, description="Rate period in minutes")
    price: Optional[Decimal] = Field(default=None, description="Rate price for the period")
    display_order: int = 0

    @field_validator("discount_percent", "price", mode="before")
    @classmethod
    def normalise_decimal(cls, v: Any) -> Any:
        """Accept "12,5" style inputs."""
        return _coerce_decimal(v)


class Rate(BaseModel):
    """Fixed price for a fixed period, in minutes."""

    id: str
    price: Decimal
    period: int
    display_order: int = 0

    @field_validator("price", mode="before")
    @classmethod
    def normalise_price(cls, v: Any) -> Any:
        return _coerce_decimal(v)


class ProductPricing(BaseModel):
    """Inputs of the tiered (progressive) pricing calculation."""

    base_price: Decimal = Field(ge=0)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    pricing_mode: PricingMode = PricingMode.DAY
    tiers: list[PricingTier] = Field(default_factory=list)
    enforce_strict_tiers: bool = False

    @field_validator("base_price", "deposit", mode="before")
    @classmethod
    def normalise_money(cls, v: Any) -> Any:
        return _coerce_decimal(v)


class RateBasedPricing(BaseModel):
    """Inputs of the rate-based calculation."""

    base_price: Decimal = Field(ge=0)
    base_period_minutes: int = Field(gt=0)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    rates: list[Rate] = Field(default_factory=list)

    @field_validator("base_price", "deposit", mode="before")
    @classmethod
    def normalise_money(cls, v: Any) -> Any:
        return _coerce_decimal(v)


class PriceCalculationResult(BaseModel):
    """Result of a tiered price calculation."""

    subtotal: Decimal
    deposit: Decimal
    total: Decimal
    effective_price_per_unit: Decimal
    base_price: Decimal
    duration: int
    quantity: int
    discount: Decimal
    discount_percent: Optional[Decimal] = None
    tier_applied: Optional[PricingTier] = None
    original_subtotal: Decimal
    savings: Decimal
    savings_percent: int


class PriceCalculationResultWithTax(PriceCalculationResult):
    """Price calculation with tax amounts split out."""

    subtotal_excl_tax: Decimal
    deposit_excl_tax: Decimal
    total_excl_tax: Decimal
    subtotal_tax: Decimal
    deposit_tax: Decimal
    total_tax: Decimal
    subtotal_incl_tax: Decimal
    deposit_incl_tax: Decimal
    total_incl_tax: Decimal
    tax_rate: Optional[Decimal] = None
    tax_enabled: bool


class RatePlanEntry(BaseModel):
    """How many times a rate is used in a best-rate plan."""

    rate: Rate
    quantity: int


class BestRateResult(BaseModel):
    """Cheapest combination of rates covering a duration."""

    total_cost: Decimal
    covered_minutes: int
    plan: list[RatePlanEntry] = Field(default_factory=list)


class RateCalculationResult(BaseModel):
    """Result of a rate-based price calculation."""

    subtotal: Decimal
    deposit: Decimal
    total: Decimal
    applied_rate: Optional[Rate] = None
    periods_used: int
    savings: Decimal
    reduction_percent: Optional[Decimal] = None
    duration_minutes: int
    quantity: int
    original_subtotal: Decimal


class PricingBreakdown(BaseModel):
    """Pricing snapshot stored on a reservation line."""

    base_price: Decimal
    effective_price: Decimal
    duration: int
    pricing_mode: PricingMode
    discount_percent: Optional[Decimal] = None
    discount_amount: Decimal
    tier_applied: Optional[str] = None
    tax_rate: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    subtotal_excl_tax: Optional[Decimal] = None
    subtotal_incl_tax: Optional[Decimal] = None


class TierDisplay(BaseModel):
    """One tier as shown on a product page."""

    min_duration: int
    label: str
    price: str
    discount: str


class PriceDisplayInfo(BaseModel):
    """Formatted pricing block for a product page."""

    base_price: str
    effective_price: str
    has_tiers: bool
    tier_summary: Optional[str] = None
    max_discount: Optional[Decimal] = None
    tiers: list[TierDisplay] = Field(default_factory=list)


class DurationPreview(BaseModel):
    """Price of a product at a sample duration."""

    duration: int
    label: str
    price: Decimal
    price_formatted: str
    savings: Decimal
    savings_formatted: str
    discount_percent: Optional[Decimal] = None
    is_highlighted: bool


class PricingSummaryLine(BaseModel):
    """One line of a checkout pricing summary."""

    label: str
    value: str
    is_discount: bool = False


class PricingSummary(BaseModel):
    """Checkout pricing summary."""

    line_items: list[PricingSummaryLine]
    subtotal: str
