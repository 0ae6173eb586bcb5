"""Read interfaces the availability service depends on."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from rentalcore.models.reservation import Product, ProductUnit, Reservation, ReservationStatus
from rentalcore.models.store import Store


class StoreRepository(ABC):
    """Store lookup."""

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[Store]:
        """Retrieve store by its public slug."""
        pass


class ProductRepository(ABC):
    """Catalogue queries."""

    @abstractmethod
    async def list_active(
        self, store_id: str, product_ids: Optional[list[str]] = None
    ) -> list[Product]:
        """Active products of a store, optionally restricted to ``product_ids``."""
        pass


class ReservationRepository(ABC):
    """Reservation queries."""

    @abstractmethod
    async def list_overlapping(
        self,
        store_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[ReservationStatus],
    ) -> list[Reservation]:
        """Reservations with one of ``statuses`` starting before ``end`` and ending after ``start``."""
        pass


class UnitRepository(ABC):
    """Physical unit queries."""

    @abstractmethod
    async def list_available(self, product_ids: list[str]) -> list[ProductUnit]:
        """Units in ``available`` status belonging to ``product_ids``."""
        pass
