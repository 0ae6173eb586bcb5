"""Rental price calculation.

Two pricing schemes coexist:

- Tiered (progressive) pricing: a base price per hour/day/week, discounted
  by the highest tier whose ``min_duration`` the rental reaches.
- Rate-based pricing: explicit (period, price) rows; the cheapest
  combination of rows covering the rental is billed.

Money is Decimal, rounded half-up to cents on output.
"""

import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from functools import reduce
from typing import Iterable, NamedTuple, Optional, Sequence

from rentalcore.logging import get_logger
from rentalcore.logging.audit import AuditLogger
from rentalcore.models.pricing import (
    BASE_RATE_ID,
    BestRateResult,
    PriceCalculationResult,
    PricingBreakdown,
    PricingMode,
    PricingTier,
    ProductPricing,
    Rate,
    RateBasedPricing,
    RateCalculationResult,
    RatePlanEntry,
)
from rentalcore.models.reservation import (
    PricedReservationLine,
    Product,
    ReservationLine,
    ReservationPricing,
)
from rentalcore.services.duration import calculate_duration, calculate_duration_minutes

logger = get_logger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
MAX_TIER_DISCOUNT = Decimal("99")

UNIT_LABELS: dict[str, dict[PricingMode, dict[str, str]]] = {
    "fr": {
        PricingMode.HOUR: {"singular": "heure", "plural": "heures", "short": "h"},
        PricingMode.DAY: {"singular": "jour", "plural": "jours", "short": "j"},
        PricingMode.WEEK: {"singular": "semaine", "plural": "semaines", "short": "sem"},
    },
    "en": {
        PricingMode.HOUR: {"singular": "hour", "plural": "hours", "short": "h"},
        PricingMode.DAY: {"singular": "day", "plural": "days", "short": "d"},
        PricingMode.WEEK: {"singular": "week", "plural": "weeks", "short": "wk"},
    },
}


def round_currency(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_number(value: Decimal) -> str:
    """Render a Decimal without trailing zeros ("10", "12.5")."""
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text


def unit_labels(mode: PricingMode, locale: str = "fr") -> dict[str, str]:
    return UNIT_LABELS.get(locale, UNIT_LABELS["fr"])[PricingMode(mode)]


def get_pricing_mode_label(mode: PricingMode, plural: bool = False, locale: str = "fr") -> str:
    labels = unit_labels(mode, locale)
    return labels["plural"] if plural else labels["singular"]


# ---------------------------------------------------------------------------
# Tiered pricing
# ---------------------------------------------------------------------------


def find_applicable_tier(
    tiers: Iterable[PricingTier], duration: int
) -> Optional[PricingTier]:
    """Tier with the highest ``min_duration`` that ``duration`` reaches.

    Rows without a positive ``min_duration`` or without a discount are ignored.
    """
    candidates = [
        tier
        for tier in tiers
        if tier.min_duration is not None
        and tier.min_duration > 0
        and tier.discount_percent is not None
    ]
    candidates.sort(key=lambda tier: tier.min_duration, reverse=True)
    return next((tier for tier in candidates if duration >= tier.min_duration), None)


def calculate_effective_price(base_price: Decimal, tier: Optional[PricingTier]) -> Decimal:
    """Per-period price after the tier discount."""
    if tier is None or tier.discount_percent is None:
        return base_price
    return base_price * (1 - tier.discount_percent / HUNDRED)


def calculate_rental_price(
    pricing: ProductPricing, duration: int, quantity: int
) -> PriceCalculationResult:
    """Total price of ``quantity`` units for ``duration`` periods."""
    base_price = pricing.base_price
    tier_applied = find_applicable_tier(pricing.tiers, duration)
    effective_price = calculate_effective_price(base_price, tier_applied)

    original_subtotal = base_price * duration * quantity
    subtotal = effective_price * duration * quantity
    total_deposit = pricing.deposit * quantity
    savings = original_subtotal - subtotal

    savings_percent = 0
    if original_subtotal > 0:
        savings_percent = int(
            (savings / original_subtotal * HUNDRED).to_integral_value(rounding=ROUND_HALF_UP)
        )

    return PriceCalculationResult(
        subtotal=round_currency(subtotal),
        deposit=round_currency(total_deposit),
        total=round_currency(subtotal + total_deposit),
        effective_price_per_unit=round_currency(effective_price),
        base_price=base_price,
        duration=duration,
        quantity=quantity,
        discount=round_currency(savings),
        discount_percent=tier_applied.discount_percent if tier_applied else None,
        tier_applied=tier_applied,
        original_subtotal=round_currency(original_subtotal),
        savings=round_currency(savings),
        savings_percent=savings_percent,
    )


class UnitPrice(NamedTuple):
    price: Decimal
    discount: Optional[Decimal]


def calculate_unit_price(
    base_price: Decimal, tiers: Iterable[PricingTier], duration: int
) -> UnitPrice:
    """Price of one unit for ``duration`` periods (preview)."""
    tier = find_applicable_tier(tiers, duration)
    return UnitPrice(
        price=calculate_effective_price(base_price, tier) * duration,
        discount=tier.discount_percent if tier else None,
    )


def generate_pricing_breakdown(
    result: PriceCalculationResult,
    pricing_mode: PricingMode,
    tax_rate: Optional[Decimal] = None,
    tax_amount: Optional[Decimal] = None,
    subtotal_excl_tax: Optional[Decimal] = None,
    subtotal_incl_tax: Optional[Decimal] = None,
) -> PricingBreakdown:
    """Snapshot stored on the reservation line."""
    tier_label = None
    if result.tier_applied is not None:
        min_duration = result.tier_applied.min_duration or 1
        tier_label = f"{min_duration}+ {get_pricing_mode_label(pricing_mode, min_duration > 1)}"

    return PricingBreakdown(
        base_price=result.base_price,
        effective_price=result.effective_price_per_unit,
        duration=result.duration,
        pricing_mode=pricing_mode,
        discount_percent=result.discount_percent,
        discount_amount=result.savings,
        tier_applied=tier_label,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        subtotal_excl_tax=subtotal_excl_tax,
        subtotal_incl_tax=subtotal_incl_tax,
    )


class TierValidation(NamedTuple):
    valid: bool
    error: Optional[str]


def validate_pricing_tiers(
    tiers: Sequence[PricingTier], resource_id: str = ""
) -> TierValidation:
    """Check tier thresholds are unique, at least 1, and discounts within 0-99%."""
    durations = [tier.min_duration for tier in tiers]
    error = None

    if any(d is None or d < 1 for d in durations):
        error = "Minimum duration must be at least 1"
    elif len(durations) != len(set(durations)):
        error = "Each tier must have a unique minimum duration"
    else:
        for tier in tiers:
            discount = tier.discount_percent
            if discount is None or discount < 0 or discount > MAX_TIER_DISCOUNT:
                error = "Discount must be between 0 and 99%"
                break

    if error:
        AuditLogger.log_tiers_rejected(resource_id, error)
        return TierValidation(False, error)
    return TierValidation(True, None)


def sort_tiers_by_duration(tiers: Iterable[PricingTier]) -> list[PricingTier]:
    return sorted(tiers, key=lambda tier: tier.min_duration or 0)


def get_available_durations(
    tiers: Sequence[PricingTier], enforce_strict_tiers: bool
) -> Optional[list[int]]:
    """Durations a customer may pick under package pricing.

    Returns None for progressive pricing, where any duration is allowed.
    """
    if not enforce_strict_tiers or not tiers:
        return None
    durations = {1} | {tier.min_duration for tier in tiers if tier.min_duration}
    return sorted(durations)


def snap_to_nearest_tier(duration: int, available_durations: Sequence[int]) -> int:
    """Round a duration up to the next allowed package."""
    if not available_durations:
        return duration
    return next((d for d in available_durations if d >= duration), available_durations[-1])


# ---------------------------------------------------------------------------
# Rate-based pricing
# ---------------------------------------------------------------------------


def is_rate_based_product(base_period_minutes: Optional[int]) -> bool:
    return bool(base_period_minutes and base_period_minutes > 0)


def compute_reduction_percent(
    base_price: Decimal,
    base_period_minutes: int,
    price: Decimal,
    period_minutes: int,
) -> Decimal:
    """Per-minute discount of a rate against the base rate, in percent."""
    if base_price <= 0 or base_period_minutes <= 0 or period_minutes <= 0:
        return Decimal("0")
    base_per_minute = base_price / base_period_minutes
    rate_per_minute = price / period_minutes
    return round_currency((1 - rate_per_minute / base_per_minute) * HUNDRED)


def calculate_best_rate(duration_minutes: float, rates: Iterable[Rate]) -> BestRateResult:
    """Cheapest combination of rates covering ``duration_minutes``.

    Unbounded knapsack over steps of gcd(periods) minutes, exploring up to one
    longest period past the target, since overshooting can be cheaper. Equal
    costs prefer fewer segments, then the shorter covered length.
    """
    normalized = sorted(
        (rate for rate in rates if rate.period > 0 and rate.price >= 0),
        key=lambda rate: rate.period,
    )

    if not normalized:
        return BestRateResult(
            total_cost=Decimal("0"), covered_minutes=int(math.ceil(duration_minutes)), plan=[]
        )

    target_minutes = max(1, math.ceil(duration_minutes))
    scale = reduce(math.gcd, (rate.period for rate in normalized)) or 1
    rate_steps = [max(1, round(rate.period / scale)) for rate in normalized]
    target_steps = max(1, math.ceil(target_minutes / scale))
    max_steps = target_steps + max(rate_steps)

    # cost[step] is None while unreachable
    cost: list[Optional[Decimal]] = [None] * (max_steps + 1)
    segments = [0] * (max_steps + 1)
    prev_step = [-1] * (max_steps + 1)
    prev_rate = [-1] * (max_steps + 1)
    cost[0] = Decimal("0")

    for step in range(1, max_steps + 1):
        for index, rate_step in enumerate(rate_steps):
            source = step - rate_step
            if source < 0 or cost[source] is None:
                continue

            candidate_cost = cost[source] + normalized[index].price
            candidate_segments = segments[source] + 1

            if (
                cost[step] is None
                or candidate_cost < cost[step]
                or (candidate_cost == cost[step] and candidate_segments < segments[step])
            ):
                cost[step] = candidate_cost
                segments[step] = candidate_segments
                prev_step[step] = source
                prev_rate[step] = index

    best_step = -1
    for step in range(target_steps, max_steps + 1):
        if cost[step] is None:
            continue
        if (
            best_step == -1
            or cost[step] < cost[best_step]
            or (cost[step] == cost[best_step] and segments[step] < segments[best_step])
        ):
            best_step = step

    if best_step == -1:
        fallback = normalized[0]
        count = math.ceil(target_minutes / fallback.period)
        return BestRateResult(
            total_cost=round_currency(count * fallback.price),
            covered_minutes=count * fallback.period,
            plan=[RatePlanEntry(rate=fallback, quantity=count)],
        )

    quantities = [0] * len(normalized)
    cursor = best_step
    while cursor > 0 and prev_rate[cursor] >= 0:
        quantities[prev_rate[cursor]] += 1
        cursor = prev_step[cursor]

    return BestRateResult(
        total_cost=round_currency(cost[best_step]),
        covered_minutes=best_step * scale,
        plan=[
            RatePlanEntry(rate=rate, quantity=quantity)
            for rate, quantity in zip(normalized, quantities)
            if quantity > 0
        ],
    )


def calculate_rental_price_v2(
    pricing: RateBasedPricing, duration_minutes: float, quantity: int
) -> RateCalculationResult:
    """Total price of ``quantity`` units under rate-based pricing."""
    base_rate = Rate(
        id=BASE_RATE_ID,
        price=pricing.base_price,
        period=pricing.base_period_minutes,
        display_order=-1,
    )
    best = calculate_best_rate(duration_minutes, [base_rate, *pricing.rates])

    subtotal = best.total_cost * quantity
    deposit = pricing.deposit * quantity

    base_periods = math.ceil(duration_minutes / pricing.base_period_minutes)
    original_subtotal = base_periods * pricing.base_price * quantity
    savings = original_subtotal - subtotal
    reduction_percent = (
        round_currency(savings / original_subtotal * HUNDRED) if original_subtotal > 0 else None
    )

    dominant = max(best.plan, key=lambda entry: entry.quantity, default=None)

    return RateCalculationResult(
        subtotal=round_currency(subtotal),
        deposit=round_currency(deposit),
        total=round_currency(subtotal + deposit),
        applied_rate=dominant.rate if dominant else None,
        periods_used=sum(entry.quantity for entry in best.plan),
        savings=round_currency(savings),
        reduction_percent=reduction_percent,
        duration_minutes=max(1, math.ceil(duration_minutes)),
        quantity=quantity,
        original_subtotal=round_currency(original_subtotal),
    )


def get_available_duration_minutes(
    rates: Iterable[Rate], enforce_strict_tiers: bool
) -> Optional[list[int]]:
    """Durations bookable under strict rate packages, or None when free."""
    periods = sorted({rate.period for rate in rates if rate.period > 0})
    if not enforce_strict_tiers or not periods:
        return None
    return periods


def snap_to_nearest_rate_period(duration_minutes: int, available_periods: Sequence[int]) -> int:
    if not available_periods:
        return duration_minutes
    return next((p for p in available_periods if p >= duration_minutes), available_periods[-1])


def product_rates(product: Product) -> list[Rate]:
    """Rate rows of a rate-based product, taken from its tier table."""
    return [
        Rate(id=tier.id, price=tier.price, period=tier.period, display_order=tier.display_order)
        for tier in product.pricing_tiers
        if tier.period and tier.period > 0 and tier.price is not None
    ]


# ---------------------------------------------------------------------------
# Reservation lines
# ---------------------------------------------------------------------------


def _price_product_line(
    line: ReservationLine, product: Product, start: datetime, end: datetime
) -> PricedReservationLine:
    mode = line.pricing_mode or product.pricing_mode or PricingMode.DAY
    duration = calculate_duration(start, end, mode)
    deposit = (line.deposit_per_unit if line.deposit_per_unit is not None else product.deposit)
    deposit = deposit * line.quantity

    if is_rate_based_product(product.base_period_minutes):
        minutes = calculate_duration_minutes(start, end)
        result = calculate_rental_price_v2(
            RateBasedPricing(
                base_price=product.price,
                base_period_minutes=product.base_period_minutes,
                rates=product_rates(product),
            ),
            minutes,
            line.quantity,
        )
        reduction = result.reduction_percent or Decimal("0")
        return PricedReservationLine(
            product_id=product.id,
            label=line.label or product.name,
            quantity=line.quantity,
            pricing_mode=mode,
            duration=duration,
            unit_price=round_currency(result.subtotal / line.quantity),
            total_price=result.subtotal,
            original_total=result.original_subtotal,
            deposit=round_currency(deposit),
            discount_percent=reduction,
            tier_label=f"-{format_number(reduction)}%" if reduction > 0 else None,
        )

    tier = find_applicable_tier(product.pricing_tiers, duration)
    unit_price = calculate_effective_price(product.price, tier)
    discount = tier.discount_percent if tier else Decimal("0")
    tier_label = None
    if tier is not None:
        tier_label = f"-{format_number(discount)}% ({tier.min_duration}+ {unit_labels(mode)['short']})"

    return PricedReservationLine(
        product_id=product.id,
        label=line.label or product.name,
        quantity=line.quantity,
        pricing_mode=mode,
        duration=duration,
        unit_price=round_currency(unit_price),
        total_price=round_currency(unit_price * duration * line.quantity),
        original_total=round_currency(product.price * duration * line.quantity),
        deposit=round_currency(deposit),
        discount_percent=discount,
        tier_label=tier_label,
    )


def _price_fixed_line(line: ReservationLine, start: datetime, end: datetime) -> PricedReservationLine:
    product = line.product
    mode = line.pricing_mode or (product.pricing_mode if product else None) or PricingMode.DAY
    rate_based = product is not None and is_rate_based_product(product.base_period_minutes)
    if rate_based:
        # Manual prices of rate-based products are per base period
        duration = max(1, math.ceil(calculate_duration_minutes(start, end) / product.base_period_minutes))
    else:
        duration = calculate_duration(start, end, mode)
    total = line.unit_price * duration * line.quantity

    deposit_per_unit = line.deposit_per_unit
    if deposit_per_unit is None:
        deposit_per_unit = product.deposit if product else Decimal("0")

    original_total = total
    if product is not None:
        calculated = _price_product_line(line, product, start, end)
        original_total = calculated.original_total
        reference = round_currency(product.price if rate_based else calculated.unit_price)
        if reference != round_currency(line.unit_price):
            AuditLogger.log_price_overridden(product.id, str(reference), str(line.unit_price))

    return PricedReservationLine(
        product_id=product.id if product else None,
        label=line.label or (product.name if product else ""),
        quantity=line.quantity,
        pricing_mode=mode,
        duration=duration,
        unit_price=round_currency(line.unit_price),
        total_price=round_currency(total),
        original_total=round_currency(original_total),
        deposit=round_currency(deposit_per_unit * line.quantity),
        is_manual_price=product is not None,
    )


def price_reservation_lines(
    start: datetime,
    end: datetime,
    lines: Iterable[ReservationLine],
    original_subtotal: Optional[Decimal] = None,
) -> ReservationPricing:
    """Price every line of a reservation for the given period.

    ``original_subtotal`` is the stored subtotal of a reservation being
    edited; the result then reports the difference.
    """
    priced: list[PricedReservationLine] = []
    for line in lines:
        if line.product is not None and not line.is_manual_price:
            priced.append(_price_product_line(line, line.product, start, end))
        else:
            priced.append(_price_fixed_line(line, start, end))

    subtotal = sum((line.total_price for line in priced), Decimal("0"))
    original = sum((line.original_total for line in priced), Decimal("0"))
    deposit = sum((line.deposit for line in priced), Decimal("0"))

    logger.debug(
        "reservation_lines_priced",
        lines=len(priced),
        subtotal=str(subtotal),
    )

    return ReservationPricing(
        lines=priced,
        subtotal=subtotal,
        original_subtotal=original,
        deposit=deposit,
        savings=original - subtotal,
        difference=subtotal - original_subtotal if original_subtotal is not None else None,
    )
