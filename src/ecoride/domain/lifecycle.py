# File: src/ecoride/domain/lifecycle.py
"""
Booking Lifecycle for EcoRide Car Rental System

The state machine that decides which booking transitions are legal and
applies every cross-entity side effect of a transition in one place:

    create   : -> RESERVED       vehicle -> RESERVED, driver -> ASSIGNED
    complete : RESERVED -> COMPLETED   vehicle/driver -> AVAILABLE, final price
    cancel   : RESERVED -> CANCELLED   vehicle/driver -> AVAILABLE
    reprice  : RESERVED (no transition, invoice refreshed)

Each transition validates everything first and only then mutates, so a
failed call leaves the store untouched.
"""

from typing import Callable, Optional
from datetime import date
from decimal import Decimal
import logging

from .models import Customer, Vehicle, Driver, Breakdown, to_decimal
from .aggregates import Booking, RentalPolicies
from .pricing import PricingStrategy, StandardPricingStrategy
from .exceptions import (
    AssetUnavailableError, LeadTimeError, CancellationLockedError,
    ValidationError
)


class BookingLifecycle:
    """
    Orchestrates booking transitions against a RentalStore

    Args:
        store: RentalStore holding customers, assets and bookings
        pricing: pricing strategy used for every quote
        policies: lead time, lockout and fee policies
        clock: current-date source
    """

    def __init__(
        self,
        store,
        pricing: Optional[PricingStrategy] = None,
        policies: Optional[RentalPolicies] = None,
        clock: Callable[[], date] = date.today
    ):
        self.store = store
        self.policies = policies or RentalPolicies()
        self.pricing = pricing or StandardPricingStrategy(self.policies)
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def create(
        self,
        customer: Customer,
        vehicle: Vehicle,
        booking_date: date,
        rental_days: int,
        estimated_distance: Decimal,
        driver: Optional[Driver] = None
    ) -> Booking:
        """
        Reserve a vehicle (and optionally a driver) for a future date

        Raises: NotFoundError, AssetUnavailableError, LeadTimeError, ValidationError
        """
        today = self.clock()

        # Validate against the registered assets, which are the ones committed below
        vehicle = self.store.registry.get_vehicle(vehicle.id)
        if driver is not None:
            driver = self.store.registry.get_driver(driver.id)

        if not vehicle.is_available:
            raise AssetUnavailableError(
                f"Vehicle {vehicle.id} is not available ({vehicle.status})", vehicle.id
            )

        if driver is not None and not driver.is_available:
            raise AssetUnavailableError(
                f"Driver {driver.id} is not available ({driver.status})", driver.id
            )

        days_ahead = (booking_date - today).days
        if days_ahead < self.policies.lead_time_days:
            raise LeadTimeError(
                f"Booking date {booking_date.isoformat()} must be at least "
                f"{self.policies.lead_time_days} days after {today.isoformat()}"
            )

        booking = Booking(
            id=self.store.peek_booking_id(),
            customer=customer,
            vehicle=vehicle,
            driver=driver,
            booking_date=booking_date,
            rental_days=rental_days,
            estimated_distance=estimated_distance,
            deposit=self.policies.deposit,
            creation_date=today
        )
        breakdown = self.pricing.price_booking(booking)

        # Commit
        self.store.registry.reserve(vehicle.id)
        if driver is not None:
            self.store.registry.assign_driver(driver.id)
        self.store.next_booking_id()
        self.store.bookings.add(booking)
        booking.record_creation(breakdown)

        return booking

    def complete(self, booking: Booking, actual_distance: Decimal) -> Breakdown:
        """
        Close a reserved booking and price it with the distance travelled

        Raises: InvalidStateError, ValidationError
        """
        booking.ensure_reserved("complete")
        actual_distance = to_decimal(actual_distance)
        if actual_distance < Decimal('0'):
            raise ValidationError("Actual distance cannot be negative", booking.id)

        breakdown = self.pricing.price_booking(booking, distance=actual_distance)

        booking.complete(actual_distance, breakdown)
        self.store.registry.release(booking.vehicle.id)
        if booking.driver is not None:
            self.store.registry.release_driver(booking.driver.id)

        return breakdown

    def cancel(self, booking: Booking) -> Booking:
        """
        Cancel a reserved booking outside the lockout window

        Raises: InvalidStateError, CancellationLockedError
        """
        booking.ensure_reserved("cancel")
        today = self.clock()
        if not booking.can_cancel(today, self.policies.cancellation_lockout_days):
            raise CancellationLockedError(
                f"Booking {booking.id} can no longer be cancelled: pickup is "
                f"{booking.days_until_pickup(today)} day(s) away",
                booking.id
            )

        booking.cancel()
        self.store.registry.release(booking.vehicle.id)
        if booking.driver is not None:
            self.store.registry.release_driver(booking.driver.id)

        return booking

    def reprice(self, booking: Booking) -> Breakdown:
        """Recompute the invoice of a reserved booking from its estimate"""
        booking.ensure_reserved("reprice")
        breakdown = self.pricing.price_booking(booking)
        booking.reprice(breakdown)
        return breakdown

    # ========================================================================
    # POLICY QUERIES
    # ========================================================================

    def is_low_mileage(self, booking: Booking, actual_distance: Decimal) -> bool:
        """
        Actual distance below the configured share of the estimate

        Raises: InvalidStateError when the booking can no longer be completed
        """
        booking.ensure_reserved("complete")
        threshold = booking.estimated_distance * self.policies.low_mileage_ratio
        return to_decimal(actual_distance) < threshold
