# File: src/ecoride/domain/models.py
"""
Domain Models for EcoRide Car Rental System
Following Domain-Driven Design (DDD) principles with rich domain models

This module contains:
1. Value Objects: Money, RateTier, Breakdown
2. Entities: Customer, Vehicle, Driver, Invoice
3. Enums: Status enumerations for assets and bookings
4. Domain Events: Events representing booking and asset changes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid
from enum import Enum

from .exceptions import ConflictError


# ============================================================================
# DOMAIN PRIMITIVES / VALUE OBJECTS
# ============================================================================

def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str to Decimal without binary float noise"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Money:
    """
    Value Object: Monetary amount with currency
    Negative amounts are allowed and represent a credit owed to the customer
    """
    amount: Decimal
    currency: str = "LKR"

    def __post_init__(self):
        object.__setattr__(self, 'amount', to_decimal(self.amount))
        if len(self.currency) != 3:
            raise ValueError(f"Currency must be 3-letter code: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money amounts (same currency only)"""
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} to {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract money amounts (same currency only)"""
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract {other.currency} from {self.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, multiplier: Decimal) -> 'Money':
        return Money(self.amount * to_decimal(multiplier), self.currency)

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal('0')

    def format(self) -> str:
        """Format money for display, e.g. 'LKR 39,000.00'"""
        return f"{self.currency} {self.amount:,.2f}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": str(self.amount),
            "currency": self.currency
        }


@dataclass(frozen=True)
class RateTier:
    """
    Value Object: Named pricing plan

    Shared by reference between every vehicle registered on the tier.
    All figures are non-negative; tax_rate_percent is expressed 0-100.
    """
    name: str
    daily_fee: Decimal
    free_distance_per_day: Decimal
    overage_fee_per_unit: Decimal
    tax_rate_percent: Decimal

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Rate tier name cannot be empty")

        for field_name in ('daily_fee', 'free_distance_per_day',
                           'overage_fee_per_unit', 'tax_rate_percent'):
            value = to_decimal(getattr(self, field_name))
            if value < Decimal('0'):
                raise ValueError(f"{field_name} cannot be negative: {value}")
            object.__setattr__(self, field_name, value)

        if self.tax_rate_percent > Decimal('100'):
            raise ValueError(f"Tax rate must be between 0 and 100: {self.tax_rate_percent}")

    def __str__(self) -> str:
        return f"{self.name} ({self.daily_fee:,.0f}/day)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "daily_fee": str(self.daily_fee),
            "free_distance_per_day": str(self.free_distance_per_day),
            "overage_fee_per_unit": str(self.overage_fee_per_unit),
            "tax_rate_percent": str(self.tax_rate_percent)
        }


@dataclass(frozen=True)
class Breakdown:
    """
    Value Object: Itemized result of one pricing computation

    final_amount == base_price - discount + overage_charge + driver_fee
                    + tax - deposit_deducted
    """
    base_price: Decimal
    overage_charge: Decimal
    discount: Decimal
    driver_fee: Decimal
    tax: Decimal
    deposit_deducted: Decimal
    final_amount: Decimal
    distance_used: Decimal = Decimal('0')
    currency: str = "LKR"

    @property
    def taxable_amount(self) -> Decimal:
        return self.base_price - self.discount + self.overage_charge + self.driver_fee

    @property
    def is_refund(self) -> bool:
        """Deposit exceeds the net charge"""
        return self.final_amount < Decimal('0')

    def money(self, field_name: str) -> Money:
        return Money(getattr(self, field_name), self.currency)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_price": str(self.base_price),
            "overage_charge": str(self.overage_charge),
            "discount": str(self.discount),
            "driver_fee": str(self.driver_fee),
            "tax": str(self.tax),
            "deposit_deducted": str(self.deposit_deducted),
            "final_amount": str(self.final_amount),
            "distance_used": str(self.distance_used),
            "currency": self.currency
        }


# ============================================================================
# ENUMS
# ============================================================================

class VehicleStatus(Enum):
    """Availability of a rental vehicle"""
    AVAILABLE = "available"
    RESERVED = "reserved"
    UNDER_MAINTENANCE = "under_maintenance"

    def __str__(self) -> str:
        return self.name


class DriverStatus(Enum):
    """Availability of a chauffeur"""
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    ON_LEAVE = "on_leave"

    def __str__(self) -> str:
        return self.name


class BookingStatus(Enum):
    """Booking lifecycle states; COMPLETED and CANCELLED are terminal"""
    RESERVED = "reserved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)

    def __str__(self) -> str:
        return self.name


class AssetKind(Enum):
    VEHICLE = "vehicle"
    DRIVER = "driver"


class CustomerType(Enum):
    LOCAL = "local"
    FOREIGN = "foreign"


class EventType(str, Enum):
    """Domain event types published on the event bus"""
    BOOKING_CREATED = "booking.created"
    BOOKING_COMPLETED = "booking.completed"
    BOOKING_CANCELLED = "booking.cancelled"
    ASSET_STATUS_CHANGED = "asset.status_changed"


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Entity:
    """
    Base class for all domain entities
    Provides common functionality for entities with identity
    """

    def __init__(self, id: Optional[str] = None):
        self._id = id or str(uuid.uuid4())

    @property
    def id(self) -> str:
        return self._id

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same ID and type"""
        if not isinstance(other, Entity):
            return False
        return self.id == other.id and type(self) == type(other)

    def __hash__(self) -> int:
        return hash((self.id, type(self).__name__))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


class Customer(Entity):
    """
    Entity: Renting customer

    Contact and identity fields arrive pre-validated from the caller.
    """

    customer_type: CustomerType = CustomerType.LOCAL

    def __init__(
        self,
        name: str,
        contact_no: str,
        email: str,
        driving_license: str,
        id: Optional[str] = None
    ):
        super().__init__(id)
        self.name = name
        self.contact_no = contact_no
        self.email = email
        self.driving_license = driving_license

    @property
    def identity_document(self) -> str:
        return ""

    def update_contact_details(
        self,
        contact_no: Optional[str] = None,
        email: Optional[str] = None
    ) -> None:
        """Update contact details; empty values keep the current ones"""
        if contact_no and contact_no.strip():
            self.contact_no = contact_no.strip()
        if email and email.strip():
            self.email = email.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer_type": self.customer_type.value,
            "name": self.name,
            "contact_no": self.contact_no,
            "email": self.email,
            "driving_license": self.driving_license,
            "identity_document": self.identity_document
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class LocalCustomer(Customer):
    """Customer identified by a national identity card"""

    customer_type = CustomerType.LOCAL

    def __init__(self, name: str, contact_no: str, email: str,
                 driving_license: str, nic: str, id: Optional[str] = None):
        super().__init__(name, contact_no, email, driving_license, id)
        self.nic = nic

    @property
    def identity_document(self) -> str:
        return self.nic


class ForeignCustomer(Customer):
    """Customer identified by a passport"""

    customer_type = CustomerType.FOREIGN

    def __init__(self, name: str, contact_no: str, email: str,
                 driving_license: str, passport_no: str, id: Optional[str] = None):
        super().__init__(name, contact_no, email, driving_license, id)
        self.passport_no = passport_no

    @property
    def identity_document(self) -> str:
        return self.passport_no


class Vehicle(Entity):
    """
    Entity: Rental vehicle priced by a shared rate tier
    Status changes go through reserve()/release()/set_status()
    """

    def __init__(
        self,
        model: str,
        rate_tier: RateTier,
        id: Optional[str] = None
    ):
        super().__init__(id)
        self.model = model
        self.rate_tier = rate_tier
        self._status = VehicleStatus.AVAILABLE
        if not self.model or not self.model.strip():
            raise ValueError("Vehicle model cannot be empty")

    @property
    def status(self) -> VehicleStatus:
        return self._status

    @property
    def is_available(self) -> bool:
        return self._status == VehicleStatus.AVAILABLE

    def reserve(self) -> None:
        if self._status != VehicleStatus.AVAILABLE:
            raise ConflictError(
                f"Vehicle {self.id} cannot be reserved while {self._status}", self.id
            )
        self._status = VehicleStatus.RESERVED

    def release(self) -> None:
        if self._status != VehicleStatus.RESERVED:
            raise ConflictError(
                f"Vehicle {self.id} cannot be released while {self._status}", self.id
            )
        self._status = VehicleStatus.AVAILABLE

    def set_status(self, status: VehicleStatus) -> None:
        """Administrative override between AVAILABLE and UNDER_MAINTENANCE"""
        if status == VehicleStatus.RESERVED:
            raise ConflictError("Vehicles are reserved only through a booking", self.id)
        if self._status == VehicleStatus.RESERVED:
            raise ConflictError(
                f"Vehicle {self.id} is reserved by an active booking", self.id
            )
        self._status = status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "model": self.model,
            "rate_tier": self.rate_tier.name,
            "daily_fee": str(self.rate_tier.daily_fee),
            "status": self._status.name
        }

    def __str__(self) -> str:
        return f"{self.model} [{self.id}] - {self.rate_tier.name}"


class Driver(Entity):
    """
    Entity: Chauffeur that can be attached to one booking at a time
    """

    def __init__(
        self,
        name: str,
        license_no: str,
        contact_no: str,
        id: Optional[str] = None
    ):
        super().__init__(id)
        self.name = name
        self.license_no = license_no
        self.contact_no = contact_no
        self._status = DriverStatus.AVAILABLE

    @property
    def status(self) -> DriverStatus:
        return self._status

    @property
    def is_available(self) -> bool:
        return self._status == DriverStatus.AVAILABLE

    def assign(self) -> None:
        if self._status != DriverStatus.AVAILABLE:
            raise ConflictError(
                f"Driver {self.id} cannot be assigned while {self._status}", self.id
            )
        self._status = DriverStatus.ASSIGNED

    def release(self) -> None:
        if self._status != DriverStatus.ASSIGNED:
            raise ConflictError(
                f"Driver {self.id} cannot be released while {self._status}", self.id
            )
        self._status = DriverStatus.AVAILABLE

    def set_status(self, status: DriverStatus) -> None:
        """Administrative override between AVAILABLE and ON_LEAVE"""
        if status == DriverStatus.ASSIGNED:
            raise ConflictError("Drivers are assigned only through a booking", self.id)
        if self._status == DriverStatus.ASSIGNED:
            raise ConflictError(
                f"Driver {self.id} is assigned to an active booking", self.id
            )
        self._status = status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "license_no": self.license_no,
            "contact_no": self.contact_no,
            "status": self._status.name
        }

    def __str__(self) -> str:
        return f"{self.name} [{self.id}]"


class Invoice:
    """
    Passive holder of the latest pricing computation for one booking
    """

    def __init__(self, invoice_id: str, booking_id: str):
        self.invoice_id = invoice_id
        self.booking_id = booking_id
        self._breakdown: Optional[Breakdown] = None

    def populate(self, breakdown: Breakdown) -> None:
        """Replace every figure with those of a new computation"""
        self._breakdown = breakdown

    def present(self) -> Breakdown:
        if self._breakdown is None:
            raise ValueError(f"Invoice {self.invoice_id} has not been priced")
        return self._breakdown

    @property
    def is_populated(self) -> bool:
        return self._breakdown is not None

    @property
    def base_price(self) -> Decimal:
        return self.present().base_price

    @property
    def overage_charge(self) -> Decimal:
        return self.present().overage_charge

    @property
    def discount(self) -> Decimal:
        return self.present().discount

    @property
    def tax(self) -> Decimal:
        return self.present().tax

    @property
    def deposit_deducted(self) -> Decimal:
        return self.present().deposit_deducted

    @property
    def driver_fee(self) -> Decimal:
        return self.present().driver_fee

    @property
    def final_amount(self) -> Decimal:
        return self.present().final_amount

    def to_dict(self) -> Dict[str, Any]:
        data = {"invoice_id": self.invoice_id, "booking_id": self.booking_id}
        if self._breakdown is not None:
            data.update(self._breakdown.to_dict())
        return data

    def __repr__(self) -> str:
        return f"Invoice(id={self.invoice_id}, booking={self.booking_id})"


# ============================================================================
# DOMAIN EVENTS
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the domain
    """

    event_type: EventType

    def __init__(self, timestamp: Optional[datetime] = None):
        self.event_id = str(uuid.uuid4())
        self.timestamp = timestamp or datetime.now()
        self.version = "1.0"

    @abstractmethod
    def data(self) -> Dict[str, Any]:
        """Event payload"""
        pass

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "data": self.data()
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__} at {self.timestamp}"


class BookingCreatedEvent(DomainEvent):
    """Event raised when a booking reserves its assets"""

    event_type = EventType.BOOKING_CREATED

    def __init__(self, booking_id: str, customer_id: str, vehicle_id: str,
                 driver_id: Optional[str], final_amount: Decimal):
        super().__init__()
        self.booking_id = booking_id
        self.customer_id = customer_id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id
        self.final_amount = final_amount

    def data(self) -> Dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "customer_id": self.customer_id,
            "vehicle_id": self.vehicle_id,
            "driver_id": self.driver_id,
            "final_amount": str(self.final_amount)
        }


class BookingCompletedEvent(DomainEvent):
    """Event raised when a rental is returned and finally priced"""

    event_type = EventType.BOOKING_COMPLETED

    def __init__(self, booking_id: str, actual_distance: Decimal, final_amount: Decimal):
        super().__init__()
        self.booking_id = booking_id
        self.actual_distance = actual_distance
        self.final_amount = final_amount

    def data(self) -> Dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "actual_distance": str(self.actual_distance),
            "final_amount": str(self.final_amount)
        }


class BookingCancelledEvent(DomainEvent):
    """Event raised when a booking is cancelled and its assets released"""

    event_type = EventType.BOOKING_CANCELLED

    def __init__(self, booking_id: str, vehicle_id: str, driver_id: Optional[str]):
        super().__init__()
        self.booking_id = booking_id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id

    def data(self) -> Dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "vehicle_id": self.vehicle_id,
            "driver_id": self.driver_id
        }


class AssetStatusChangedEvent(DomainEvent):
    """Event raised by an administrative status override"""

    event_type = EventType.ASSET_STATUS_CHANGED

    def __init__(self, asset_id: str, kind: AssetKind, old_status: str, new_status: str):
        super().__init__()
        self.asset_id = asset_id
        self.kind = kind
        self.old_status = old_status
        self.new_status = new_status

    def data(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "kind": self.kind.value,
            "old_status": self.old_status,
            "new_status": self.new_status
        }
