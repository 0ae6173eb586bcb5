"""Customer-facing rendering of tiered prices."""

import math
from decimal import Decimal
from typing import Literal, Optional, Sequence

from rentalcore.models.pricing import (
    DurationPreview,
    PriceDisplayInfo,
    PricingMode,
    PricingSummary,
    PricingSummaryLine,
    PricingTier,
    ProductPricing,
    TierDisplay,
)
from rentalcore.services.currency import format_currency
from rentalcore.services.pricing import (
    calculate_effective_price,
    calculate_rental_price,
    format_number,
    sort_tiers_by_duration,
    unit_labels,
)

LabelFormat = Literal["full", "short"]

DEFAULT_PREVIEW_DURATIONS: dict[PricingMode, list[int]] = {
    PricingMode.HOUR: [1, 2, 4, 8, 24],
    PricingMode.DAY: [1, 3, 7, 14, 30],
    PricingMode.WEEK: [1, 2, 4, 8, 12],
}

_TEXT = {
    "fr": {
        "up_to": "Jusqu'à -{discount}% dès {threshold}",
        "long_rental_discount": "Réduction longue durée",
        "saved": "{amount} économisés",
    },
    "en": {
        "up_to": "Up to -{discount}% from {threshold}",
        "long_rental_discount": "Long rental discount",
        "saved": "{amount} saved",
    },
}


def _text(locale: str) -> dict[str, str]:
    return _TEXT.get(locale, _TEXT["fr"])


def _discount_tiers(tiers: Sequence[PricingTier]) -> list[PricingTier]:
    return [
        tier
        for tier in tiers
        if tier.min_duration and tier.min_duration > 0 and tier.discount_percent is not None
    ]


def get_unit_label(
    mode: PricingMode,
    variant: Literal["singular", "plural", "short"] = "singular",
    locale: str = "fr",
) -> str:
    return unit_labels(mode, locale)[variant]


def format_duration(
    duration: int, mode: PricingMode, fmt: LabelFormat = "full", locale: str = "fr"
) -> str:
    """ "3 jours" or "3j"."""
    labels = unit_labels(mode, locale)
    if fmt == "short":
        return f"{duration}{labels['short']}"
    return f"{duration} {labels['singular'] if duration == 1 else labels['plural']}"


def format_price_per_unit(
    price: Decimal,
    mode: PricingMode,
    fmt: LabelFormat = "short",
    currency: Optional[str] = None,
    locale: str = "fr",
) -> str:
    """ "25,00 €/j" or "25,00 €/jour"."""
    labels = unit_labels(mode, locale)
    suffix = labels["short"] if fmt == "short" else labels["singular"]
    return f"{format_currency(price, currency, locale)}/{suffix}"


def format_tier_label(min_duration: int, mode: PricingMode, locale: str = "fr") -> str:
    """ "3+ jours"."""
    labels = unit_labels(mode, locale)
    return f"{min_duration}+ {labels['singular'] if min_duration == 1 else labels['plural']}"


def format_discount(percent: Decimal) -> str:
    """Whole-percent badge, floored: "-20%"."""
    return f"-{math.floor(percent)}%"


def get_price_display_info(
    pricing: ProductPricing, currency: Optional[str] = None, locale: str = "fr"
) -> PriceDisplayInfo:
    mode = pricing.pricing_mode
    tiers = _discount_tiers(pricing.tiers)

    max_discount = None
    tier_summary = None
    if tiers:
        max_tier = max(tiers, key=lambda tier: tier.discount_percent)
        max_discount = max_tier.discount_percent
        tier_summary = _text(locale)["up_to"].format(
            discount=format_number(max_discount),
            threshold=format_tier_label(max_tier.min_duration, mode, locale),
        )

    base_label = format_price_per_unit(pricing.base_price, mode, currency=currency, locale=locale)
    return PriceDisplayInfo(
        base_price=base_label,
        effective_price=base_label,
        has_tiers=bool(tiers),
        tier_summary=tier_summary,
        max_discount=max_discount,
        tiers=[
            TierDisplay(
                min_duration=tier.min_duration,
                label=format_tier_label(tier.min_duration, mode, locale),
                price=format_price_per_unit(
                    calculate_effective_price(pricing.base_price, tier),
                    mode,
                    currency=currency,
                    locale=locale,
                ),
                discount=format_discount(tier.discount_percent),
            )
            for tier in sort_tiers_by_duration(tiers)
        ],
    )


def generate_duration_previews(
    pricing: ProductPricing,
    durations: Optional[Sequence[int]] = None,
    currency: Optional[str] = None,
    locale: str = "fr",
) -> list[DurationPreview]:
    """Price at sample durations; tier thresholds are highlighted."""
    mode = pricing.pricing_mode
    thresholds = {tier.min_duration for tier in _discount_tiers(pricing.tiers)}
    previews = []

    for duration in durations if durations is not None else DEFAULT_PREVIEW_DURATIONS[mode]:
        if duration <= 0:
            continue
        result = calculate_rental_price(pricing, duration, 1)
        previews.append(
            DurationPreview(
                duration=duration,
                label=format_duration(duration, mode, locale=locale),
                price=result.subtotal,
                price_formatted=format_currency(result.subtotal, currency, locale),
                savings=result.savings,
                savings_formatted=(
                    format_currency(result.savings, currency, locale) if result.savings > 0 else "-"
                ),
                discount_percent=result.discount_percent,
                is_highlighted=duration in thresholds,
            )
        )
    return previews


def format_pricing_summary(
    base_price: Decimal,
    effective_price: Decimal,
    duration: int,
    quantity: int,
    mode: PricingMode,
    discount: Optional[Decimal],
    currency: Optional[str] = None,
    locale: str = "fr",
) -> PricingSummary:
    """Checkout lines: base price then the long-rental discount, if any."""
    line_items = [
        PricingSummaryLine(
            label=(
                f"{quantity} × {format_price_per_unit(base_price, mode, 'full', currency, locale)}"
                f" × {format_duration(duration, mode, locale=locale)}"
            ),
            value=format_currency(base_price * duration * quantity, currency, locale),
        )
    ]
    if discount and discount > 0:
        line_items.append(
            PricingSummaryLine(
                label=_text(locale)["long_rental_discount"],
                value=f"- {format_currency(discount, currency, locale)}",
                is_discount=True,
            )
        )

    return PricingSummary(
        line_items=line_items,
        subtotal=format_currency(effective_price * duration * quantity, currency, locale),
    )


def format_savings_badge(
    savings: Decimal,
    discount_percent: Optional[Decimal],
    currency: Optional[str] = None,
    locale: str = "fr",
) -> str:
    saved = _text(locale)["saved"].format(amount=format_currency(savings, currency, locale))
    if discount_percent:
        return f"{format_discount(discount_percent)} ({saved})"
    return saved


def format_tier_badge(
    tiers: Sequence[PricingTier], mode: PricingMode, locale: str = "fr"
) -> Optional[str]:
    """Product card badge, e.g. "Jusqu'à -30% dès 3j"."""
    tiers = _discount_tiers(tiers)
    if not tiers:
        return None

    max_discount = max(tier.discount_percent for tier in tiers)
    min_tier = min(tiers, key=lambda tier: tier.min_duration)
    return _text(locale)["up_to"].format(
        discount=format_number(max_discount),
        threshold=f"{min_tier.min_duration}{unit_labels(mode, locale)['short']}",
    )
