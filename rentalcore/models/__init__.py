"""Models package - Pydantic domain models."""

from .availability import (
    WARNING_KEYS,
    AdvanceNoticeValidation,
    AvailabilityPeriod,
    AvailabilityResponse,
    AvailabilityStatus,
    AvailabilityWarning,
    BusinessHoursValidation,
    CombinationAvailability,
    PeriodWarning,
    PeriodWarningType,
    ProductAvailability,
    ReservationValidationWarning,
    WarningCode,
)
from .pricing import (
    BASE_RATE_ID,
    PRICING_MODE_MINUTES,
    BestRateResult,
    DurationPreview,
    PriceCalculationResult,
    PriceCalculationResultWithTax,
    PriceDisplayInfo,
    PricingBreakdown,
    PricingMode,
    PricingSummary,
    PricingSummaryLine,
    PricingTier,
    ProductPricing,
    Rate,
    RateBasedPricing,
    RateCalculationResult,
    RatePlanEntry,
    TierDisplay,
    parse_money,
)
from .reservation import (
    BLOCKING_STATUSES,
    DEFAULT_COMBINATION_KEY,
    Product,
    ProductStatus,
    ProductUnit,
    Reservation,
    ReservationItem,
    ReservationLine,
    PricedReservationLine,
    ReservationPricing,
    ReservationStatus,
    UnitStatus,
    blocking_statuses,
    ensure_aware,
    parse_iso_datetime,
)
from .store import (
    BusinessHours,
    ClosurePeriod,
    DaySchedule,
    ProductTaxSettings,
    ReservationMode,
    Store,
    StoreSettings,
    TaxDisplayMode,
    TaxSettings,
)

__all__ = [
    "WARNING_KEYS",
    "AdvanceNoticeValidation",
    "AvailabilityPeriod",
    "AvailabilityResponse",
    "AvailabilityStatus",
    "AvailabilityWarning",
    "BusinessHoursValidation",
    "CombinationAvailability",
    "PeriodWarning",
    "PeriodWarningType",
    "ProductAvailability",
    "ReservationValidationWarning",
    "WarningCode",
    "BASE_RATE_ID",
    "PRICING_MODE_MINUTES",
    "BestRateResult",
    "DurationPreview",
    "PriceCalculationResult",
    "PriceCalculationResultWithTax",
    "PriceDisplayInfo",
    "PricingBreakdown",
    "PricingMode",
    "PricingSummary",
    "PricingSummaryLine",
    "PricingTier",
    "ProductPricing",
    "Rate",
    "RateBasedPricing",
    "RateCalculationResult",
    "RatePlanEntry",
    "TierDisplay",
    "parse_money",
    "BLOCKING_STATUSES",
    "DEFAULT_COMBINATION_KEY",
    "Product",
    "ProductStatus",
    "ProductUnit",
    "Reservation",
    "ReservationItem",
    "ReservationLine",
    "PricedReservationLine",
    "ReservationPricing",
    "ReservationStatus",
    "UnitStatus",
    "blocking_statuses",
    "ensure_aware",
    "parse_iso_datetime",
    "BusinessHours",
    "ClosurePeriod",
    "DaySchedule",
    "ProductTaxSettings",
    "ReservationMode",
    "Store",
    "StoreSettings",
    "TaxDisplayMode",
    "TaxSettings",
]
