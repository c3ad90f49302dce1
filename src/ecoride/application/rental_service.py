# File: src/ecoride/application/rental_service.py
"""
Rental Management Application Service

This module implements the application service layer for the EcoRide car
rental system. It orchestrates the domain logic and handles the use cases
of the system.

Responsibilities:
1. Resolve ids against the RentalStore and hand entities to the lifecycle
2. Execute business transactions (use cases)
3. Publish domain events once a transition has been committed
4. Provide a clean API for the command/presentation layer

Key Principles:
- Dependency Injection for testability (store, clock, pricing, event bus)
- Command/Query separation
- Failed operations leave every entity untouched
"""

from typing import Dict, List, Optional, Any, Callable, Union, Protocol, runtime_checkable
from datetime import date
from decimal import Decimal
import logging

from ..domain.models import (
    Customer, LocalCustomer, ForeignCustomer, Vehicle, Driver,
    VehicleStatus, DriverStatus, BookingStatus, AssetKind,
    AssetStatusChangedEvent, to_decimal
)
from ..domain.aggregates import Booking, RentalPolicies
from ..domain.rates import RateSchedule
from ..domain.pricing import PricingStrategy, StandardPricingStrategy
from ..domain.lifecycle import BookingLifecycle
from ..domain.exceptions import RentalError, ValidationError, ConflictError
from ..infrastructure.repositories import RentalStore
from ..infrastructure.messaging import EventBus, LoggingEventHandler
from .dtos import (
    CustomerCreateDTO, CustomerDTO, CustomerTypeDTO,
    VehicleCreateDTO, VehicleDTO, DriverCreateDTO, DriverDTO,
    BookingRequestDTO, BookingDTO, BreakdownDTO, InvoiceDTO,
    RateTierDTO, SystemStatusDTO
)


# ============================================================================
# SERVICE INTERFACE
# ============================================================================

@runtime_checkable
class IRentalService(Protocol):
    """Interface for the rental service"""

    def create_booking(self, request: BookingRequestDTO) -> BookingDTO:
        ...

    def complete_booking(self, booking_id: str, actual_distance: Decimal) -> InvoiceDTO:
        ...

    def cancel_booking(self, booking_id: str) -> BookingDTO:
        ...

    def price_booking(self, booking_id: str) -> BreakdownDTO:
        ...

    def set_asset_status(self, asset_id: str, new_status: str) -> Union[VehicleDTO, DriverDTO]:
        ...


# ============================================================================
# RENTAL SERVICE
# ============================================================================

class RentalService:
    """
    Main application service for car rental management

    This service orchestrates the use cases of the system:
    1. Customer, vehicle and driver registration
    2. Booking creation, completion and cancellation
    3. Pricing and invoice presentation
    4. Administrative asset status overrides
    5. Status monitoring

    Domain errors (subclasses of RentalError) propagate to the caller.
    """

    def __init__(
        self,
        store: Optional[RentalStore] = None,
        policies: Optional[RentalPolicies] = None,
        pricing: Optional[PricingStrategy] = None,
        rate_schedule: Optional[RateSchedule] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], date] = date.today
    ):
        """
        Initialize the rental service

        Args:
            store: Context object holding all collections; a fresh one if omitted
            policies: Rental business policies
            pricing: Pricing strategy; standard pricing if omitted
            rate_schedule: Rate tier catalogue; the standard tiers if omitted
            event_bus: Bus receiving committed domain events
            clock: Current-date source
        """
        self.logger = logging.getLogger(self.__class__.__name__)

        self.store = store if store is not None else RentalStore()
        self.policies = policies or RentalPolicies()
        self.pricing = pricing or StandardPricingStrategy(self.policies)
        self.rate_schedule = rate_schedule or RateSchedule()
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.clock = clock

        self.lifecycle = BookingLifecycle(
            self.store,
            pricing=self.pricing,
            policies=self.policies,
            clock=self.clock
        )

        self.logger.info("RentalService initialized")

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def register_customer(self, request: CustomerCreateDTO) -> CustomerDTO:
        """Register a local or foreign customer under the next customer id"""
        customer_id = self.store.next_customer_id()
        if request.customer_type == CustomerTypeDTO.FOREIGN.value:
            customer: Customer = ForeignCustomer(
                name=request.name,
                contact_no=request.contact_no,
                email=request.email,
                driving_license=request.driving_license,
                passport_no=request.passport_no,
                id=customer_id
            )
        else:
            customer = LocalCustomer(
                name=request.name,
                contact_no=request.contact_no,
                email=request.email,
                driving_license=request.driving_license,
                nic=request.nic,
                id=customer_id
            )

        self.store.customers.add(customer)
        self.logger.info(f"Registered customer {customer.id} ({customer.customer_type.value})")
        return CustomerDTO.from_domain(customer)

    def update_customer(
        self,
        customer_id: str,
        contact_no: Optional[str] = None,
        email: Optional[str] = None
    ) -> CustomerDTO:
        """Update contact details; omitted or blank values keep the current ones"""
        customer = self.store.customers.get_or_raise(customer_id)
        customer.update_contact_details(contact_no=contact_no, email=email)
        self.logger.info(f"Updated contact details of customer {customer.id}")
        return CustomerDTO.from_domain(customer)

    def register_vehicle(self, request: VehicleCreateDTO) -> VehicleDTO:
        """Register a vehicle on a rate tier chosen by zero-based index"""
        tier = self.rate_schedule.lookup(request.tier_index)
        vehicle = Vehicle(
            model=request.model,
            rate_tier=tier,
            id=self.store.next_vehicle_id()
        )
        self.store.vehicles.add(vehicle)
        self.logger.info(f"Registered vehicle {vehicle.id}: {vehicle.model} on {tier.name}")
        return VehicleDTO.from_domain(vehicle)

    def register_driver(self, request: DriverCreateDTO) -> DriverDTO:
        driver = Driver(
            name=request.name,
            license_no=request.license_no,
            contact_no=request.contact_no,
            id=self.store.next_driver_id()
        )
        self.store.drivers.add(driver)
        self.logger.info(f"Registered driver {driver.id}: {driver.name}")
        return DriverDTO.from_domain(driver)

    # ========================================================================
    # BOOKING USE CASES
    # ========================================================================

    def create_booking(self, request: BookingRequestDTO) -> BookingDTO:
        """
        Reserve a vehicle, and optionally a driver, for a future pickup date

        Use Case: Booking Creation
        1. Resolve customer, vehicle and driver
        2. Check availability and lead time
        3. Price the booking with the estimated distance
        4. Reserve the assets and store the booking
        5. Publish BookingCreated

        Raises: NotFoundError, AssetUnavailableError, LeadTimeError, ValidationError
        """
        self.logger.info(
            f"Processing booking request: customer={request.customer_id} "
            f"vehicle={request.vehicle_id} driver={request.driver_id or '-'}"
        )

        try:
            customer = self.store.customers.get_or_raise(request.customer_id)
            vehicle = self.store.registry.get_vehicle(request.vehicle_id)
            driver = None
            if request.driver_id:
                driver = self.store.registry.get_driver(request.driver_id)

            booking = self.lifecycle.create(
                customer=customer,
                vehicle=vehicle,
                booking_date=request.booking_date,
                rental_days=request.rental_days,
                estimated_distance=request.estimated_distance,
                driver=driver
            )
        except RentalError as e:
            self.logger.warning(f"Booking rejected ({e.error_type}): {e}")
            raise

        self._publish(booking)
        return BookingDTO.from_domain(booking)

    def complete_booking(self, booking_id: str, actual_distance: Decimal) -> InvoiceDTO:
        """
        Close a reserved booking with the distance actually travelled

        Use Case: Vehicle Return
        1. Final price with the actual distance
        2. Booking -> COMPLETED, vehicle and driver -> AVAILABLE
        3. Publish BookingCompleted

        Raises: NotFoundError, InvalidStateError, ValidationError
        """
        self.logger.info(f"Completing booking {booking_id} with {actual_distance} km")

        try:
            booking = self.store.bookings.get_or_raise(booking_id)
            if self.lifecycle.is_low_mileage(booking, actual_distance):
                self.logger.warning(
                    f"Booking {booking.id}: actual distance {actual_distance} km is below "
                    f"{self.policies.low_mileage_ratio:.0%} of the {booking.estimated_distance} km estimate"
                )
            self.lifecycle.complete(booking, actual_distance)
        except RentalError as e:
            self.logger.warning(f"Completion rejected ({e.error_type}): {e}")
            raise

        self._publish(booking)
        return InvoiceDTO.from_domain(booking.invoice, booking)

    def cancel_booking(self, booking_id: str) -> BookingDTO:
        """
        Cancel a reserved booking more than the lockout window before pickup

        Raises: NotFoundError, InvalidStateError, CancellationLockedError
        """
        self.logger.info(f"Cancelling booking {booking_id}")

        try:
            booking = self.store.bookings.get_or_raise(booking_id)
            self.lifecycle.cancel(booking)
        except RentalError as e:
            self.logger.warning(f"Cancellation rejected ({e.error_type}): {e}")
            raise

        self._publish(booking)
        return BookingDTO.from_domain(booking)

    def price_booking(self, booking_id: str) -> BreakdownDTO:
        """
        Quote a booking without changing it

        Completed bookings are priced with the actual distance, all others
        with the estimate.
        """
        booking = self.store.bookings.get_or_raise(booking_id)
        breakdown = self.pricing.price_booking(booking)
        self.logger.debug(f"Priced booking {booking.id}: {breakdown.final_amount}")
        return BreakdownDTO.from_domain(breakdown)

    def reprice_booking(self, booking_id: str) -> InvoiceDTO:
        """Refresh the stored invoice of a reserved booking"""
        booking = self.store.bookings.get_or_raise(booking_id)
        self.lifecycle.reprice(booking)
        return InvoiceDTO.from_domain(booking.invoice, booking)

    def is_low_mileage(self, booking_id: str, actual_distance: Decimal) -> bool:
        """
        True when the actual distance is below the configured share of the estimate

        Raises: NotFoundError, InvalidStateError
        """
        booking = self.store.bookings.get_or_raise(booking_id)
        return self.lifecycle.is_low_mileage(booking, actual_distance)

    # ========================================================================
    # ADMINISTRATION
    # ========================================================================

    def set_asset_status(
        self,
        asset_id: str,
        new_status: Union[str, VehicleStatus, DriverStatus]
    ) -> Union[VehicleDTO, DriverDTO]:
        """
        Administrative override of a vehicle or driver status

        Vehicles move between AVAILABLE and UNDER_MAINTENANCE, drivers between
        AVAILABLE and ON_LEAVE. Assets held by an active booking are rejected.

        Raises: NotFoundError, ValidationError, ConflictError
        """
        asset = self.store.registry.find_asset(asset_id)

        try:
            if isinstance(asset, Vehicle):
                kind = AssetKind.VEHICLE
                status = self._parse_status(VehicleStatus, new_status, asset.id)
                holder = self.store.bookings.find_active_for_vehicle(asset.id)
            else:
                kind = AssetKind.DRIVER
                status = self._parse_status(DriverStatus, new_status, asset.id)
                holder = self.store.bookings.find_active_for_driver(asset.id)

            if holder is not None:
                raise ConflictError(
                    f"{kind.value.capitalize()} {asset.id} is held by active booking {holder.id}",
                    asset.id
                )

            old_status = asset.status
            asset.set_status(status)
        except RentalError as e:
            self.logger.warning(f"Status change rejected ({e.error_type}): {e}")
            raise

        self.logger.info(f"{kind.value.capitalize()} {asset.id} status {old_status} -> {status}")
        if old_status != status:
            self.event_bus.publish(AssetStatusChangedEvent(
                asset_id=asset.id,
                kind=kind,
                old_status=old_status.name,
                new_status=status.name
            ))

        if kind == AssetKind.VEHICLE:
            return VehicleDTO.from_domain(asset)
        return DriverDTO.from_domain(asset)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_booking(self, booking_id: str) -> BookingDTO:
        return BookingDTO.from_domain(self.store.bookings.get_or_raise(booking_id))

    def get_customer(self, customer_id: str) -> CustomerDTO:
        return CustomerDTO.from_domain(self.store.customers.get_or_raise(customer_id))

    def list_bookings(
        self,
        status: Optional[BookingStatus] = None,
        customer_id: Optional[str] = None
    ) -> List[BookingDTO]:
        """Bookings in creation order, optionally filtered by status and customer"""
        if customer_id is None:
            bookings = self.store.bookings.get_all()
        else:
            bookings = self.store.bookings.find_by_customer(customer_id)
        if status is not None:
            bookings = [b for b in bookings if b.status == status]
        return [BookingDTO.from_domain(b) for b in bookings]

    def list_customers(self) -> List[CustomerDTO]:
        return [CustomerDTO.from_domain(c) for c in self.store.customers.get_all()]

    def list_vehicles(self, available_only: bool = False) -> List[VehicleDTO]:
        if available_only:
            vehicles = self.store.registry.list_available(AssetKind.VEHICLE)
        else:
            vehicles = self.store.vehicles.get_all()
        return [VehicleDTO.from_domain(v) for v in vehicles]

    def list_drivers(self, available_only: bool = False) -> List[DriverDTO]:
        if available_only:
            drivers = self.store.registry.list_available(AssetKind.DRIVER)
        else:
            drivers = self.store.drivers.get_all()
        return [DriverDTO.from_domain(d) for d in drivers]

    def list_rate_tiers(self) -> List[RateTierDTO]:
        return [
            RateTierDTO.from_domain(index, tier)
            for index, tier in enumerate(self.rate_schedule.tiers)
        ]

    def get_system_status(self) -> SystemStatusDTO:
        """Dashboard figures for the current store"""
        bookings = self.store.bookings.get_all()
        by_status: Dict[str, int] = {status.value: 0 for status in BookingStatus}
        for booking in bookings:
            by_status[booking.status.value] += 1

        return SystemStatusDTO(
            total_customers=self.store.customers.count(),
            total_vehicles=self.store.vehicles.count(),
            available_vehicles=len(self.store.registry.list_available(AssetKind.VEHICLE)),
            total_drivers=self.store.drivers.count(),
            available_drivers=len(self.store.registry.list_available(AssetKind.DRIVER)),
            total_bookings=len(bookings),
            bookings_by_status=by_status,
            lead_time_days=self.policies.lead_time_days,
            cancellation_lockout_days=self.policies.cancellation_lockout_days,
            discount_min_days=self.policies.discount_min_days,
            discount_rate=self.policies.discount_rate,
            driver_daily_fee=self.policies.driver_daily_fee,
            currency=self.policies.currency,
            system_date=self.clock()
        )

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def _publish(self, booking: Booking) -> None:
        """Publish the events a committed transition left on the aggregate"""
        self.event_bus.publish_all(booking.clear_events())

    @staticmethod
    def _parse_status(status_enum, value, asset_id: str):
        """Accept an enum member, its value or its name (case-insensitive)"""
        if isinstance(value, status_enum):
            return value
        text = str(value).strip()
        for member in status_enum:
            if text.lower() in (member.value, member.name.lower()):
                return member
        allowed = ", ".join(member.name for member in status_enum)
        raise ValidationError(f"Unknown status '{text}'. Expected one of: {allowed}", asset_id)


# ============================================================================
# SERVICE FACTORY
# ============================================================================

class RentalServiceFactory:
    """Factory for creating rental service instances"""

    @staticmethod
    def create_default_service() -> RentalService:
        """Create a rental service with standard policies and an event log"""
        event_bus = EventBus()
        event_bus.subscribe_all(LoggingEventHandler())
        return RentalService(event_bus=event_bus)

    @staticmethod
    def create_service_with_config(config: Dict[str, Any]) -> RentalService:
        """
        Create a rental service with custom configuration

        Recognized keys: any RentalPolicies field, plus "clock" (a callable
        returning a date), "tiers" (a sequence of RateTier) and "store".
        """
        config = dict(config)
        clock = config.pop("clock", date.today)
        tiers = config.pop("tiers", None)
        store = config.pop("store", None)

        policy_fields = set(RentalPolicies.__dataclass_fields__)
        unknown = set(config) - policy_fields
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        for key in ("discount_rate", "driver_daily_fee", "deposit", "low_mileage_ratio"):
            if key in config:
                config[key] = to_decimal(config[key])

        event_bus = EventBus()
        event_bus.subscribe_all(LoggingEventHandler())
        return RentalService(
            store=store,
            policies=RentalPolicies(**config),
            rate_schedule=RateSchedule(tiers) if tiers is not None else None,
            event_bus=event_bus,
            clock=clock
        )
