"""Stock availability for a rental period.

Untracked products are counted by quantity; unit-tracked products by the
physical units in ``available`` status, grouped by attribute combination.
"""

from collections import defaultdict
from datetime import datetime
from typing import Iterable, NamedTuple, Optional, Sequence, Union

from rentalcore.errors import InvalidPeriodError, NotFoundError
from rentalcore.logging import get_logger
from rentalcore.models.availability import (
    AdvanceNoticeValidation,
    AvailabilityPeriod,
    AvailabilityResponse,
    AvailabilityStatus,
    CombinationAvailability,
    ProductAvailability,
)
from rentalcore.models.reservation import (
    BLOCKING_STATUSES,
    DEFAULT_COMBINATION_KEY,
    Product,
    ProductUnit,
    Reservation,
    ReservationStatus,
    UnitStatus,
    blocking_statuses,
    ensure_aware,
    parse_iso_datetime,
)
from rentalcore.services.business_hours import validate_rental_period
from rentalcore.services.duration import date_ranges_overlap, get_min_start_datetime
from rentalcore.services.store_date import normalize_timezone
from rentalcore.storage.repositories import (
    ProductRepository,
    ReservationRepository,
    StoreRepository,
    UnitRepository,
)

logger = get_logger(__name__)


class ReservedQuantities(NamedTuple):
    by_product: dict[str, int]
    by_combination: dict[tuple[str, str], int]


def _status(available: int, total: int) -> AvailabilityStatus:
    if available == 0:
        return AvailabilityStatus.UNAVAILABLE
    if available < total:
        return AvailabilityStatus.LIMITED
    return AvailabilityStatus.AVAILABLE


def count_reserved_quantities(
    reservations: Iterable[Reservation],
    start: datetime,
    end: datetime,
    blocking: Iterable[ReservationStatus] = BLOCKING_STATUSES,
) -> ReservedQuantities:
    """Quantities held by blocking reservations overlapping ``[start, end)``."""
    blocking = frozenset(blocking)
    by_product: dict[str, int] = defaultdict(int)
    by_combination: dict[tuple[str, str], int] = defaultdict(int)

    for reservation in reservations:
        if reservation.status not in blocking:
            continue
        if not date_ranges_overlap(reservation.start_date, reservation.end_date, start, end):
            continue
        for item in reservation.items:
            if not item.product_id:
                continue
            by_product[item.product_id] += item.quantity
            key = item.combination_key or DEFAULT_COMBINATION_KEY
            by_combination[(item.product_id, key)] += item.quantity

    return ReservedQuantities(dict(by_product), dict(by_combination))


def combination_sort_value(axes: Sequence[str], attributes: dict[str, str]) -> str:
    """Stable ordering key of an attribute combination along the product's axes."""
    if not axes:
        return DEFAULT_COMBINATION_KEY
    return "|".join(f"{axis}:{attributes.get(axis, '')}" for axis in axes)


def compute_product_availability(
    products: Iterable[Product],
    units: Iterable[ProductUnit],
    reserved: ReservedQuantities,
) -> list[ProductAvailability]:
    """Availability of each product, per combination for unit-tracked ones.

    ``units`` are the units in ``available`` status of the tracked products.
    """
    combinations_by_product: dict[str, dict[str, dict]] = defaultdict(dict)
    for unit in units:
        if unit.status != UnitStatus.AVAILABLE:
            continue
        key = unit.combination_key or DEFAULT_COMBINATION_KEY
        entry = combinations_by_product[unit.product_id].get(key)
        if entry is None:
            combinations_by_product[unit.product_id][key] = {
                "total": 1,
                "attributes": dict(unit.attributes),
            }
        else:
            entry["total"] += 1
            if not entry["attributes"] and unit.attributes:
                entry["attributes"] = dict(unit.attributes)

    results = []
    for product in products:
        reserved_quantity = reserved.by_product.get(product.id, 0)

        if not product.track_units:
            available = max(0, product.quantity - reserved_quantity)
            results.append(
                ProductAvailability(
                    product_id=product.id,
                    total_quantity=product.quantity,
                    reserved_quantity=reserved_quantity,
                    available_quantity=available,
                    status=_status(available, product.quantity),
                )
            )
            continue

        combinations = []
        total = 0
        for key, entry in combinations_by_product.get(product.id, {}).items():
            combination_reserved = reserved.by_combination.get((product.id, key), 0)
            combination_available = max(0, entry["total"] - combination_reserved)
            total += entry["total"]
            combinations.append(
                CombinationAvailability(
                    combination_key=key,
                    selected_attributes=entry["attributes"],
                    total_quantity=entry["total"],
                    reserved_quantity=combination_reserved,
                    available_quantity=combination_available,
                    status=_status(combination_available, entry["total"]),
                )
            )

        combinations.sort(
            key=lambda c: (
                combination_sort_value(product.booking_attribute_axes, c.selected_attributes),
                c.combination_key,
            )
        )

        available = max(0, total - reserved_quantity)
        results.append(
            ProductAvailability(
                product_id=product.id,
                total_quantity=total,
                reserved_quantity=reserved_quantity,
                available_quantity=available,
                status=_status(available, total),
                combinations=combinations,
            )
        )

    return results


def _busy_unit_ids(
    reservations: Iterable[Reservation],
    start: datetime,
    end: datetime,
    exclude_reservation_id: Optional[str],
) -> set[str]:
    start = ensure_aware(start)
    end = ensure_aware(end)
    busy = set()
    for reservation in reservations:
        if reservation.id == exclude_reservation_id or reservation.status not in BLOCKING_STATUSES:
            continue
        # closed interval: a unit returned at the pickup instant is still busy
        if reservation.start_date <= end and reservation.end_date >= start:
            for item in reservation.items:
                busy.update(item.unit_ids)
    return busy


def filter_available_units(
    units: Iterable[ProductUnit],
    reservations: Iterable[Reservation],
    start: datetime,
    end: datetime,
    exclude_reservation_id: Optional[str] = None,
    combination_key: Optional[str] = None,
) -> list[ProductUnit]:
    """Units that can be assigned to a reservation over ``[start, end]``."""
    busy = _busy_unit_ids(reservations, start, end, exclude_reservation_id)
    return [
        unit
        for unit in units
        if unit.status == UnitStatus.AVAILABLE
        and (not combination_key or unit.combination_key == combination_key)
        and unit.id not in busy
    ]


def check_units_availability(
    unit_ids: Iterable[str],
    reservations: Iterable[Reservation],
    start: datetime,
    end: datetime,
    exclude_reservation_id: Optional[str] = None,
) -> dict[str, bool]:
    """Map each unit id to whether it is free over ``[start, end]``."""
    busy = _busy_unit_ids(reservations, start, end, exclude_reservation_id)
    return {unit_id: unit_id not in busy for unit_id in unit_ids}


def _parse_period_bound(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return ensure_aware(value)
    try:
        return parse_iso_datetime(value)
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidPeriodError(f"Invalid date: {value!r}") from e


class AvailabilityService:
    """Storefront availability queries."""

    def __init__(
        self,
        store_repo: StoreRepository,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
        unit_repo: UnitRepository,
    ):
        """
        Initialize availability service.

        Args:
            store_repo: Store lookup by slug
            product_repo: Active catalogue products
            reservation_repo: Reservations overlapping a period
            unit_repo: Available physical units
        """
        self.store_repo = store_repo
        self.product_repo = product_repo
        self.reservation_repo = reservation_repo
        self.unit_repo = unit_repo

    async def get_storefront_availability(
        self,
        store_slug: str,
        start: Union[str, datetime],
        end: Union[str, datetime],
        product_ids: Optional[list[str]] = None,
        now: Optional[datetime] = None,
    ) -> AvailabilityResponse:
        """
        Compute stock and rule checks for a requested rental period.

        Args:
            store_slug: Public store slug
            start: Pickup datetime or ISO string
            end: Return datetime or ISO string
            product_ids: Restrict to these products (all active ones if empty)
            now: Reference time for advance notice

        Returns:
            AvailabilityResponse with per-product availability

        Raises:
            InvalidPeriodError: If dates are unparsable or end is not after start
            NotFoundError: If no store has this slug
        """
        start_date = _parse_period_bound(start)
        end_date = _parse_period_bound(end)
        if end_date <= start_date:
            raise InvalidPeriodError("End date must be after start date")

        store = await self.store_repo.get_by_slug(store_slug)
        if store is None:
            logger.warning("availability_store_not_found", store_slug=store_slug)
            raise NotFoundError(
                f"Store not found: {store_slug}",
                key="errors.storeNotFound",
                params={"slug": store_slug},
                template="store_not_found",
            )

        settings = store.settings
        timezone_name = normalize_timezone(settings.timezone)
        hours_validation = validate_rental_period(
            start_date, end_date, settings.business_hours, timezone_name
        )

        advance_notice = settings.advance_notice_minutes
        minimum_start = get_min_start_datetime(advance_notice, now)
        notice_validation = AdvanceNoticeValidation(
            valid=start_date >= minimum_start,
            minimum_start_time=minimum_start,
            advance_notice_minutes=advance_notice,
        )

        period = AvailabilityPeriod(
            start_date=start if isinstance(start, str) else start_date.isoformat(),
            end_date=end if isinstance(end, str) else end_date.isoformat(),
        )

        products = await self.product_repo.list_active(store.id, product_ids or None)
        if not products:
            return AvailabilityResponse(
                products=[],
                period=period,
                business_hours_validation=hours_validation,
                advance_notice_validation=notice_validation,
            )

        statuses = blocking_statuses(settings.pending_blocks_availability)
        reservations = await self.reservation_repo.list_overlapping(
            store.id, start_date, end_date, sorted(statuses, key=lambda s: s.value)
        )
        reserved = count_reserved_quantities(reservations, start_date, end_date, statuses)

        tracked_ids = [product.id for product in products if product.track_units]
        units = await self.unit_repo.list_available(tracked_ids) if tracked_ids else []

        availability = compute_product_availability(products, units, reserved)

        logger.info(
            "storefront_availability_computed",
            store_slug=store_slug,
            products=len(availability),
            reservations=len(reservations),
        )

        return AvailabilityResponse(
            products=availability,
            period=period,
            business_hours_validation=hours_validation,
            advance_notice_validation=notice_validation,
        )
