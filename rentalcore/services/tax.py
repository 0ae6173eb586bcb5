"""Tax (VAT) calculation.

Store prices are either tax-exclusive (tax added on top) or tax-inclusive
(tax extracted from the price). Deposits are refunded and never taxed.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from rentalcore.models.pricing import (
    PriceCalculationResult,
    PriceCalculationResultWithTax,
    ProductPricing,
)
from rentalcore.models.store import ProductTaxSettings, TaxDisplayMode, TaxSettings
from rentalcore.services.pricing import HUNDRED, calculate_rental_price, format_number, round_currency


class TaxConfig(BaseModel):
    """Effective tax configuration of a store."""

    enabled: bool
    rate: Decimal
    display_mode: TaxDisplayMode


def calculate_tax_from_exclusive(amount_excl_tax: Decimal, rate: Decimal) -> Decimal:
    return round_currency(amount_excl_tax * rate / HUNDRED)


def extract_exclusive_from_inclusive(amount_incl_tax: Decimal, rate: Decimal) -> Decimal:
    return round_currency(amount_incl_tax / (1 + rate / HUNDRED))


def extract_tax_from_inclusive(amount_incl_tax: Decimal, rate: Decimal) -> Decimal:
    return round_currency(amount_incl_tax - extract_exclusive_from_inclusive(amount_incl_tax, rate))


def tax_settings_to_config(settings: Optional[TaxSettings]) -> Optional[TaxConfig]:
    """None when the store does not charge tax."""
    if settings is None or not settings.enabled:
        return None
    return TaxConfig(
        enabled=True,
        rate=settings.default_rate,
        display_mode=settings.display_mode,
    )


def get_effective_tax_rate(
    config: Optional[TaxConfig], product_tax: Optional[ProductTaxSettings]
) -> Optional[Decimal]:
    """Rate applied to a product, or None when taxes are disabled."""
    if config is None or not config.enabled:
        return None
    if (
        product_tax is not None
        and not product_tax.inherit_from_store
        and product_tax.custom_rate is not None
    ):
        return product_tax.custom_rate
    return config.rate


def apply_tax_to_calculation(
    result: PriceCalculationResult, config: Optional[TaxConfig]
) -> PriceCalculationResultWithTax:
    """Split a price calculation into excl./incl. tax amounts."""
    base = result.model_dump()

    if config is None or not config.enabled:
        return PriceCalculationResultWithTax(
            **base,
            subtotal_excl_tax=result.subtotal,
            deposit_excl_tax=result.deposit,
            total_excl_tax=result.total,
            subtotal_tax=Decimal("0"),
            deposit_tax=Decimal("0"),
            total_tax=Decimal("0"),
            subtotal_incl_tax=result.subtotal,
            deposit_incl_tax=result.deposit,
            total_incl_tax=result.total,
            tax_rate=None,
            tax_enabled=False,
        )

    rate = config.rate
    if config.display_mode == TaxDisplayMode.EXCLUSIVE:
        subtotal_excl_tax = result.subtotal
        subtotal_tax = calculate_tax_from_exclusive(subtotal_excl_tax, rate)
        subtotal_incl_tax = round_currency(subtotal_excl_tax + subtotal_tax)
    else:
        subtotal_incl_tax = result.subtotal
        subtotal_excl_tax = extract_exclusive_from_inclusive(subtotal_incl_tax, rate)
        subtotal_tax = round_currency(subtotal_incl_tax - subtotal_excl_tax)

    return PriceCalculationResultWithTax(
        **base,
        subtotal_excl_tax=subtotal_excl_tax,
        deposit_excl_tax=result.deposit,
        total_excl_tax=round_currency(subtotal_excl_tax + result.deposit),
        subtotal_tax=subtotal_tax,
        deposit_tax=Decimal("0"),
        total_tax=subtotal_tax,
        subtotal_incl_tax=subtotal_incl_tax,
        deposit_incl_tax=result.deposit,
        total_incl_tax=round_currency(subtotal_incl_tax + result.deposit),
        tax_rate=rate,
        tax_enabled=True,
    )


def calculate_rental_price_with_tax(
    pricing: ProductPricing,
    duration: int,
    quantity: int,
    config: Optional[TaxConfig] = None,
) -> PriceCalculationResultWithTax:
    return apply_tax_to_calculation(calculate_rental_price(pricing, duration, quantity), config)


def format_tax_label(label: Optional[str], rate: Decimal, locale: str = "fr") -> str:
    """E.g. "TVA (20%)"."""
    name = label or ("TVA" if locale == "fr" else "VAT")
    return f"{name} ({format_number(Decimal(rate))}%)"
