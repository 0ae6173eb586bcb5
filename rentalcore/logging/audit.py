"""Structured audit logging for rental rule decisions.

Records when a reservation is accepted despite broken store rules, when
stock conflicts are detected, and when prices are set by hand.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from rentalcore.logging import get_logger

logger = get_logger(__name__)


class AuditEventType(str, Enum):
    """Types of auditable events."""

    # Rental rules
    RESERVATION_RULES_VIOLATED = "reservation_rules_violated"
    AVAILABILITY_CONFLICT = "availability_conflict"

    # Pricing
    PRICE_OVERRIDDEN = "price_overridden"
    PRICING_TIERS_REJECTED = "pricing_tiers_rejected"


class AuditLogger:
    """Centralized audit logging service."""

    @staticmethod
    def log_event(
        event_type: AuditEventType,
        resource_type: str,
        resource_id: str,
        action: str,
        success: bool = True,
        metadata: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Log an auditable event with structured context.

        Args:
            event_type: Type of audit event
            resource_type: Type of resource (reservation, product, store)
            resource_id: ID of the affected resource
            action: Human-readable action description
            success: Whether the checked rule passed
            metadata: Additional context (durations, quantities, prices)
            error: Error message if the action failed
        """
        audit_entry = {
            "event_type": event_type.value,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "action": action,
            "success": success,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "metadata": metadata or {},
        }

        if error:
            audit_entry["error"] = error

        logger.info(
            "audit_event",
            **audit_entry,
        )

    @staticmethod
    def log_rules_violated(
        resource_id: str,
        codes: list[str],
        summary: str,
    ) -> None:
        """Log a reservation period that breaks store rules."""
        AuditLogger.log_event(
            event_type=AuditEventType.RESERVATION_RULES_VIOLATED,
            resource_type="reservation",
            resource_id=resource_id,
            action=summary,
            success=False,
            metadata={"codes": codes},
        )

    @staticmethod
    def log_availability_conflict(
        product_id: str,
        requested: int,
        available: int,
    ) -> None:
        """Log a request exceeding remaining stock."""
        AuditLogger.log_event(
            event_type=AuditEventType.AVAILABILITY_CONFLICT,
            resource_type="product",
            resource_id=product_id,
            action=f"Requested {requested}, {available} left",
            success=False,
            metadata={"requested": requested, "available": available},
        )

    @staticmethod
    def log_price_overridden(
        product_id: str,
        calculated_price: str,
        override_price: str,
    ) -> None:
        """Log a manual unit price replacing the calculated one."""
        AuditLogger.log_event(
            event_type=AuditEventType.PRICE_OVERRIDDEN,
            resource_type="product",
            resource_id=product_id,
            action="Unit price overridden",
            metadata={
                "calculated_price": calculated_price,
                "override_price": override_price,
            },
        )

    @staticmethod
    def log_tiers_rejected(resource_id: str, error: str) -> None:
        """Log an invalid pricing tier set."""
        AuditLogger.log_event(
            event_type=AuditEventType.PRICING_TIERS_REJECTED,
            resource_type="product",
            resource_id=resource_id,
            action="Pricing tiers rejected",
            success=False,
            error=error,
        )
