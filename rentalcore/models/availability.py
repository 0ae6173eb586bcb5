"""Availability and rule-warning models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class WarningCode(str, Enum):
    """Store rule that a reservation period breaks."""

    BUSINESS_HOURS = "business_hours"
    ADVANCE_NOTICE = "advance_notice"
    MIN_DURATION = "min_duration"
    MAX_DURATION = "max_duration"


WARNING_KEYS: dict[WarningCode, str] = {
    WarningCode.BUSINESS_HOURS: "errors.businessHoursViolation",
    WarningCode.ADVANCE_NOTICE: "errors.advanceNoticeViolation",
    WarningCode.MIN_DURATION: "errors.minRentalDurationViolation",
    WarningCode.MAX_DURATION: "errors.maxRentalDurationViolation",
}


class ReservationValidationWarning(BaseModel):
    """Violated rental rule, carried as a translation key plus parameters."""

    code: WarningCode
    key: str
    params: dict[str, Union[str, int]] = Field(default_factory=dict)
    details: Optional[str] = None


class PeriodWarningType(str, Enum):
    """Per-field problem with a pickup or return time."""

    ADVANCE_NOTICE = "advance_notice"
    DAY_CLOSED = "day_closed"
    OUTSIDE_HOURS = "outside_hours"
    CLOSURE_PERIOD = "closure_period"


class PeriodWarning(BaseModel):
    """Warning attached to the start or end field of a reservation form."""

    type: PeriodWarningType
    field: str = Field(pattern=r"^(start|end)$")
    params: dict[str, str] = Field(default_factory=dict)
    details: Optional[str] = None


class AvailabilityWarning(BaseModel):
    """Requested quantity exceeds the stock left for the period."""

    product_id: str
    product_name: str
    requested_quantity: int
    available_quantity: int
    conflicting_reservations: int


class AvailabilityStatus(str, Enum):
    """Stock level for a period."""

    AVAILABLE = "available"
    LIMITED = "limited"
    UNAVAILABLE = "unavailable"


class CombinationAvailability(BaseModel):
    """Stock of one attribute combination of a unit-tracked product."""

    combination_key: str
    selected_attributes: dict[str, str] = Field(default_factory=dict)
    total_quantity: int
    reserved_quantity: int
    available_quantity: int
    status: AvailabilityStatus


class ProductAvailability(BaseModel):
    """Stock of a product for a period."""

    product_id: str
    total_quantity: int
    reserved_quantity: int
    available_quantity: int
    status: AvailabilityStatus
    combinations: Optional[list[CombinationAvailability]] = None


class BusinessHoursValidation(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class AdvanceNoticeValidation(BaseModel):
    valid: bool
    minimum_start_time: datetime
    advance_notice_minutes: int


class AvailabilityPeriod(BaseModel):
    start_date: str
    end_date: str


class AvailabilityResponse(BaseModel):
    """Storefront availability answer for a period."""

    products: list[ProductAvailability] = Field(default_factory=list)
    period: AvailabilityPeriod
    business_hours_validation: BusinessHoursValidation
    advance_notice_validation: AdvanceNoticeValidation
