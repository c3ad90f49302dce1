# File: src/ecoride/domain/aggregates.py
"""
Aggregate Roots for EcoRide Car Rental System
Following Domain-Driven Design (DDD) Aggregate Pattern

Aggregates:
1. Booking - Root aggregate for one rental, owning its Invoice

Key Concepts:
- Aggregate Roots enforce business invariants
- Domain events are raised for important state changes
- All modifications go through aggregate root methods
"""

from dataclasses import dataclass
from typing import List, Optional, Dict, Any
from datetime import date, datetime
from decimal import Decimal
import logging

from .models import (
    Entity, Customer, Vehicle, Driver, Invoice, Breakdown,
    BookingStatus, DomainEvent, BookingCreatedEvent,
    BookingCompletedEvent, BookingCancelledEvent, to_decimal
)
from .exceptions import InvalidStateError, ValidationError


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot(Entity):
    """
    Base class for all aggregate roots
    Provides domain event collection and versioning
    """

    def __init__(self, id: Optional[str] = None):
        super().__init__(id)
        self._version: int = 1
        self._changes: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def version(self) -> int:
        return self._version

    def _increment_version(self) -> None:
        self._version += 1

    def _add_domain_event(self, event: DomainEvent) -> None:
        self._changes.append(event)
        self._logger.debug(f"Added domain event: {event.__class__.__name__}")

    def clear_events(self) -> List[DomainEvent]:
        """Clear and return all domain events"""
        events = self._changes.copy()
        self._changes.clear()
        return events

    @property
    def has_changes(self) -> bool:
        return len(self._changes) > 0

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants - to be overridden by subclasses"""
        pass


# ============================================================================
# RENTAL POLICIES
# ============================================================================

@dataclass
class RentalPolicies:
    """Value Object: Rental business policies"""
    lead_time_days: int = 3
    cancellation_lockout_days: int = 2
    discount_min_days: int = 7
    discount_rate: Decimal = Decimal('0.10')
    driver_daily_fee: Decimal = Decimal('2500')
    deposit: Decimal = Decimal('5000')
    currency: str = "LKR"
    low_mileage_ratio: Decimal = Decimal('0.5')

    def __post_init__(self):
        """Validate policy values"""
        self.discount_rate = to_decimal(self.discount_rate)
        self.driver_daily_fee = to_decimal(self.driver_daily_fee)
        self.deposit = to_decimal(self.deposit)
        self.low_mileage_ratio = to_decimal(self.low_mileage_ratio)

        if self.lead_time_days < 0 or self.cancellation_lockout_days < 0:
            raise ValueError("Day thresholds cannot be negative")

        if self.discount_min_days < 1:
            raise ValueError("Discount threshold must be at least one day")

        if not Decimal('0') <= self.discount_rate <= Decimal('1'):
            raise ValueError(f"Discount rate must be between 0 and 1: {self.discount_rate}")

        if self.driver_daily_fee < Decimal('0') or self.deposit < Decimal('0'):
            raise ValueError("Fees and deposit cannot be negative")

        if len(self.currency) != 3:
            raise ValueError(f"Currency must be 3-letter code: {self.currency}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lead_time_days": self.lead_time_days,
            "cancellation_lockout_days": self.cancellation_lockout_days,
            "discount_min_days": self.discount_min_days,
            "discount_rate": str(self.discount_rate),
            "driver_daily_fee": str(self.driver_daily_fee),
            "deposit": str(self.deposit),
            "currency": self.currency
        }


# ============================================================================
# BOOKING AGGREGATE
# ============================================================================

class Booking(AggregateRoot):
    """
    Aggregate Root: One rental of a vehicle, optionally with a driver

    RESERVED -> COMPLETED | CANCELLED. Both target states are terminal.
    The booking references its customer, vehicle and driver; it owns its
    invoice. Asset status changes are driven by BookingLifecycle.
    """

    def __init__(
        self,
        id: str,
        customer: Customer,
        vehicle: Vehicle,
        booking_date: date,
        rental_days: int,
        estimated_distance: Decimal,
        driver: Optional[Driver] = None,
        deposit: Decimal = Decimal('5000'),
        creation_date: Optional[date] = None
    ):
        super().__init__(id)
        self.customer = customer
        self.vehicle = vehicle
        self.driver = driver
        self.booking_date = booking_date
        self.creation_date = creation_date or date.today()
        self.rental_days = rental_days
        self.estimated_distance = to_decimal(estimated_distance)
        self.actual_distance = Decimal('0')
        self.deposit = to_decimal(deposit)
        self.status = BookingStatus.RESERVED
        self.invoice = Invoice(f"INV-{id}", id)
        self.last_updated: datetime = datetime.now()

        self._validate_invariants()

    def _validate_invariants(self) -> None:
        """Validate booking invariants"""
        if isinstance(self.rental_days, bool) or not isinstance(self.rental_days, int) \
                or self.rental_days <= 0:
            raise ValidationError(f"Rental days must be a positive integer: {self.rental_days}", self.id)

        if self.estimated_distance < Decimal('0'):
            raise ValidationError("Estimated distance cannot be negative", self.id)

        if self.actual_distance < Decimal('0'):
            raise ValidationError("Actual distance cannot be negative", self.id)

        if self.deposit < Decimal('0'):
            raise ValidationError("Deposit cannot be negative", self.id)

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def has_driver(self) -> bool:
        return self.driver is not None

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.RESERVED

    @property
    def pricing_distance(self) -> Decimal:
        """Actual distance once completed, the estimate before that"""
        if self.status == BookingStatus.COMPLETED:
            return self.actual_distance
        return self.estimated_distance

    def days_until_pickup(self, today: date) -> int:
        return (self.booking_date - today).days

    def can_cancel(self, today: date, lockout_days: int = 2) -> bool:
        """Cancellation needs strictly more than lockout_days to pickup"""
        return self.is_active and self.days_until_pickup(today) > lockout_days

    def ensure_reserved(self, action: str) -> None:
        if self.status != BookingStatus.RESERVED:
            raise InvalidStateError(
                f"Cannot {action} booking {self.id} with status {self.status}", self.id
            )

    # ========================================================================
    # STATE TRANSITIONS
    # ========================================================================

    def record_creation(self, breakdown: Breakdown) -> None:
        """Attach the initial quote and raise the creation event"""
        self.ensure_reserved("create")
        self.invoice.populate(breakdown)
        self._add_domain_event(BookingCreatedEvent(
            booking_id=self.id,
            customer_id=self.customer.id,
            vehicle_id=self.vehicle.id,
            driver_id=self.driver.id if self.driver else None,
            final_amount=breakdown.final_amount
        ))
        self._logger.info(
            f"Booking {self.id} reserved {self.vehicle.id} for {self.rental_days} day(s) "
            f"from {self.booking_date.isoformat()}"
        )

    def complete(self, actual_distance: Decimal, breakdown: Breakdown) -> None:
        """
        Close the rental with the distance actually travelled
        The breakdown must be priced with that distance
        """
        self.ensure_reserved("complete")
        actual_distance = to_decimal(actual_distance)
        if actual_distance < Decimal('0'):
            raise ValidationError("Actual distance cannot be negative", self.id)

        self.actual_distance = actual_distance
        self.status = BookingStatus.COMPLETED
        self.invoice.populate(breakdown)
        self.last_updated = datetime.now()
        self._increment_version()

        self._add_domain_event(BookingCompletedEvent(
            booking_id=self.id,
            actual_distance=actual_distance,
            final_amount=breakdown.final_amount
        ))
        self._logger.info(
            f"Completed booking {self.id}. Final amount: "
            f"{breakdown.money('final_amount').format()}"
        )

    def cancel(self) -> None:
        self.ensure_reserved("cancel")
        self.status = BookingStatus.CANCELLED
        self.last_updated = datetime.now()
        self._increment_version()

        self._add_domain_event(BookingCancelledEvent(
            booking_id=self.id,
            vehicle_id=self.vehicle.id,
            driver_id=self.driver.id if self.driver else None
        ))
        self._logger.info(f"Cancelled booking {self.id}")

    def reprice(self, breakdown: Breakdown) -> None:
        """Refresh the invoice of a reserved booking; status is unchanged"""
        self.ensure_reserved("reprice")
        self.invoice.populate(breakdown)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer.id,
            "customer_name": self.customer.name,
            "vehicle_id": self.vehicle.id,
            "vehicle_model": self.vehicle.model,
            "driver_id": self.driver.id if self.driver else None,
            "driver_name": self.driver.name if self.driver else None,
            "creation_date": self.creation_date.isoformat(),
            "booking_date": self.booking_date.isoformat(),
            "rental_days": self.rental_days,
            "estimated_distance": str(self.estimated_distance),
            "actual_distance": str(self.actual_distance),
            "status": self.status.name,
            "deposit": str(self.deposit),
            "invoice": self.invoice.to_dict(),
            "version": self.version
        }

    def __str__(self) -> str:
        return f"Booking {self.id}: {self.vehicle.model} for {self.customer.name} ({self.status})"
