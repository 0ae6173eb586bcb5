"""Storefront "starting from" price summary.

Tiered and rate-based products are both normalised into rate rows
``(period_minutes, price)`` so the storefront can show the lowest price per
period a customer can reach.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from rentalcore.models.pricing import BASE_RATE_ID, PRICING_MODE_MINUTES, PricingMode, parse_money
from rentalcore.models.reservation import Product
from rentalcore.services.pricing import HUNDRED, compute_reduction_percent, is_rate_based_product, round_currency

FALLBACK_PERIOD_MINUTES = PRICING_MODE_MINUTES[PricingMode.DAY]


class StorefrontTier(BaseModel):
    """Tier row as stored; unparsable amounts read as 0."""

    id: str = ""
    min_duration: Optional[int] = None
    discount_percent: Decimal = Decimal("0")
    period: Optional[int] = None
    price: Decimal = Decimal("0")

    @field_validator("discount_percent", "price", mode="before")
    @classmethod
    def lenient_amount(cls, v: Any) -> Decimal:
        return parse_money(v)


class StorefrontProduct(BaseModel):
    """Pricing fields of a catalogue product as read by the storefront."""

    price: Decimal = Decimal("0")
    pricing_mode: Optional[str] = None
    base_period_minutes: Optional[int] = None
    pricing_tiers: list[StorefrontTier] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def lenient_price(cls, v: Any) -> Decimal:
        return parse_money(v)

    @classmethod
    def from_product(cls, product: Product) -> "StorefrontProduct":
        return cls(
            price=product.price,
            pricing_mode=product.pricing_mode.value if product.pricing_mode else None,
            base_period_minutes=product.base_period_minutes,
            pricing_tiers=[tier.model_dump() for tier in product.pricing_tiers],
        )


class StorefrontRateRow(BaseModel):
    id: str
    period_minutes: int
    price: Decimal
    reduction_percent: Decimal


class StorefrontPricingSummary(BaseModel):
    display_price: Decimal
    display_period_minutes: int
    show_starting_from: bool
    max_reduction_percent: Decimal


def _as_storefront_product(product: Any) -> StorefrontProduct:
    if isinstance(product, StorefrontProduct):
        return product
    if isinstance(product, Product):
        return StorefrontProduct.from_product(product)
    return StorefrontProduct.model_validate(product)


def _legacy_mode(mode: Optional[str]) -> PricingMode:
    if mode in (PricingMode.HOUR.value, PricingMode.WEEK.value):
        return PricingMode(mode)
    return PricingMode.DAY


def get_storefront_rate_rows(product: Any) -> list[StorefrontRateRow]:
    """Base row plus one row per usable tier, by period then price.

    ``product`` may be a :class:`Product`, a :class:`StorefrontProduct` or a
    raw mapping.
    """
    product = _as_storefront_product(product)
    base_price = product.price
    rate_based = is_rate_based_product(product.base_period_minutes)
    base_period = (
        product.base_period_minutes
        if rate_based
        else PRICING_MODE_MINUTES[_legacy_mode(product.pricing_mode)]
    )

    rows = [
        StorefrontRateRow(
            id=BASE_RATE_ID,
            period_minutes=base_period,
            price=base_price,
            reduction_percent=Decimal("0"),
        )
    ]

    for tier in product.pricing_tiers:
        if rate_based:
            if not tier.period or tier.period <= 0:
                continue
            reduction = compute_reduction_percent(base_price, base_period, tier.price, tier.period)
            rows.append(
                StorefrontRateRow(
                    id=tier.id,
                    period_minutes=tier.period,
                    price=tier.price,
                    reduction_percent=max(Decimal("0"), reduction),
                )
            )
        else:
            if not tier.min_duration or tier.min_duration <= 0:
                continue
            discount = max(Decimal("0"), tier.discount_percent)
            unit_price = base_price * (1 - discount / HUNDRED)
            rows.append(
                StorefrontRateRow(
                    id=tier.id,
                    period_minutes=tier.min_duration * base_period,
                    price=unit_price * tier.min_duration,
                    reduction_percent=discount,
                )
            )

    rows.sort(key=lambda row: (row.period_minutes, row.price))
    return rows


def _cheapest_per_minute(rows: list[StorefrontRateRow]) -> StorefrontRateRow:
    best = rows[0]
    for row in rows[1:]:
        # compare price/period without dividing
        current = row.price * best.period_minutes
        reference = best.price * row.period_minutes
        if current < reference or (current == reference and row.period_minutes < best.period_minutes):
            best = row
    return best


def get_storefront_pricing_summary(product: Any) -> StorefrontPricingSummary:
    rows = get_storefront_rate_rows(product)
    if not rows:
        return StorefrontPricingSummary(
            display_price=Decimal("0"),
            display_period_minutes=FALLBACK_PERIOD_MINUTES,
            show_starting_from=False,
            max_reduction_percent=Decimal("0"),
        )

    smallest_period = min(row.period_minutes for row in rows)
    best = _cheapest_per_minute(rows)
    display_price = Decimal("0")
    if best.period_minutes > 0:
        display_price = best.price * smallest_period / best.period_minutes

    return StorefrontPricingSummary(
        display_price=round_currency(display_price),
        display_period_minutes=smallest_period,
        show_starting_from=best.id != BASE_RATE_ID,
        max_reduction_percent=max([row.reduction_percent for row in rows] + [Decimal("0")]),
    )
