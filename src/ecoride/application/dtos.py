# File: src/ecoride/application/dtos.py
"""
Data Transfer Objects (DTOs) for EcoRide Car Rental System

This module defines DTOs for data transfer between the rental core and its
callers (CLI, display layer, tests):
1. Input DTOs - requests arriving from the caller
2. Output DTOs - snapshots of domain state handed back to the caller

DTO Principles:
- Structural bounds checked at creation (positive days, non-negative km)
- Field-format checks (email, phone, NIC) belong to the caller
- No business logic, only data
- Serialization/deserialization support
"""

from typing import Dict, Optional, Any
from datetime import date
from decimal import Decimal
from enum import Enum
import json
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from ..domain.models import (
    Customer, Vehicle, Driver, RateTier, Breakdown, Invoice
)
from ..domain.aggregates import Booking


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self, **kwargs) -> str:
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseDTO':
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        return cls(**json.loads(json_str))


# ============================================================================
# ENUM DTOs
# ============================================================================

class CustomerTypeDTO(str, Enum):
    LOCAL = "local"
    FOREIGN = "foreign"


class VehicleStatusDTO(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    UNDER_MAINTENANCE = "under_maintenance"


class DriverStatusDTO(str, Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    ON_LEAVE = "on_leave"


class BookingStatusDTO(str, Enum):
    RESERVED = "reserved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Value cannot be blank")
    return value


# ============================================================================
# CUSTOMER DTOs
# ============================================================================

class CustomerCreateDTO(BaseDTO):
    """DTO for registering a customer"""
    customer_type: CustomerTypeDTO = Field(default=CustomerTypeDTO.LOCAL, description="Local or foreign")
    name: str = Field(min_length=1, max_length=100, description="Full name")
    contact_no: str = Field(min_length=1, description="Contact number")
    email: str = Field(min_length=1, description="Email address")
    driving_license: str = Field(min_length=1, description="Driving license number")
    nic: Optional[str] = Field(default=None, description="National identity card (local customers)")
    passport_no: Optional[str] = Field(default=None, description="Passport number (foreign customers)")

    @field_validator('name', 'contact_no', 'email', 'driving_license')
    @classmethod
    def strip_fields(cls, v: str) -> str:
        return _strip_required(v)

    @model_validator(mode='after')
    def validate_identity_document(self) -> 'CustomerCreateDTO':
        """Each customer type carries its own identity document"""
        if self.customer_type == CustomerTypeDTO.LOCAL.value and not self.nic:
            raise ValueError("Local customers need a NIC")
        if self.customer_type == CustomerTypeDTO.FOREIGN.value and not self.passport_no:
            raise ValueError("Foreign customers need a passport number")
        return self


class CustomerUpdateDTO(BaseDTO):
    """DTO for updating contact details; omitted or blank fields are kept"""
    contact_no: Optional[str] = Field(default=None, description="New contact number")
    email: Optional[str] = Field(default=None, description="New email address")


class CustomerDTO(BaseDTO):
    """Customer snapshot"""
    id: str
    customer_type: CustomerTypeDTO
    name: str
    contact_no: str
    email: str
    driving_license: str
    identity_document: str

    @classmethod
    def from_domain(cls, customer: Customer) -> 'CustomerDTO':
        return cls(**customer.to_dict())


# ============================================================================
# ASSET DTOs
# ============================================================================

class RateTierDTO(BaseDTO):
    """Rate tier catalogue entry"""
    index: int = Field(ge=0, description="Zero-based catalogue index")
    name: str
    daily_fee: Decimal
    free_distance_per_day: Decimal
    overage_fee_per_unit: Decimal
    tax_rate_percent: Decimal

    @classmethod
    def from_domain(cls, index: int, tier: RateTier) -> 'RateTierDTO':
        return cls(
            index=index,
            name=tier.name,
            daily_fee=tier.daily_fee,
            free_distance_per_day=tier.free_distance_per_day,
            overage_fee_per_unit=tier.overage_fee_per_unit,
            tax_rate_percent=tier.tax_rate_percent
        )


class VehicleCreateDTO(BaseDTO):
    """DTO for registering a vehicle on a rate tier"""
    model: str = Field(min_length=1, max_length=100, description="Vehicle model")
    tier_index: int = Field(description="Zero-based rate tier index")

    @field_validator('model')
    @classmethod
    def strip_model(cls, v: str) -> str:
        return _strip_required(v)


class VehicleDTO(BaseDTO):
    """Vehicle snapshot"""
    id: str
    model: str
    rate_tier: str
    daily_fee: Decimal
    status: VehicleStatusDTO

    @classmethod
    def from_domain(cls, vehicle: Vehicle) -> 'VehicleDTO':
        return cls(
            id=vehicle.id,
            model=vehicle.model,
            rate_tier=vehicle.rate_tier.name,
            daily_fee=vehicle.rate_tier.daily_fee,
            status=vehicle.status.value
        )


class DriverCreateDTO(BaseDTO):
    """DTO for registering a driver"""
    name: str = Field(min_length=1, max_length=100)
    license_no: str = Field(min_length=1)
    contact_no: str = Field(min_length=1)

    @field_validator('name', 'license_no', 'contact_no')
    @classmethod
    def strip_fields(cls, v: str) -> str:
        return _strip_required(v)


class DriverDTO(BaseDTO):
    """Driver snapshot"""
    id: str
    name: str
    license_no: str
    contact_no: str
    status: DriverStatusDTO

    @classmethod
    def from_domain(cls, driver: Driver) -> 'DriverDTO':
        return cls(
            id=driver.id,
            name=driver.name,
            license_no=driver.license_no,
            contact_no=driver.contact_no,
            status=driver.status.value
        )


class AssetStatusUpdateDTO(BaseDTO):
    """Administrative status override for a vehicle or driver"""
    asset_id: str = Field(min_length=1, description="Vehicle or driver id")
    new_status: str = Field(min_length=1, description="Target status name")

    @field_validator('new_status')
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower()


# ============================================================================
# BOOKING DTOs
# ============================================================================

class BookingRequestDTO(BaseDTO):
    """DTO for creating a booking"""
    customer_id: str = Field(min_length=1, description="Customer id")
    vehicle_id: str = Field(min_length=1, description="Vehicle id")
    driver_id: Optional[str] = Field(default=None, description="Optional driver id")
    booking_date: date = Field(description="Pickup date")
    rental_days: int = Field(ge=1, description="Rental duration in days")
    estimated_distance: Decimal = Field(ge=0, description="Estimated total distance in km")

    @field_validator('driver_id')
    @classmethod
    def blank_driver_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class CompleteBookingRequestDTO(BaseDTO):
    """DTO for completing a booking"""
    booking_id: str = Field(min_length=1)
    actual_distance: Decimal = Field(ge=0, description="Actual total distance in km")
    confirm_low_mileage: bool = Field(
        default=False,
        description="Proceed even if the distance is far below the estimate"
    )


class BreakdownDTO(BaseDTO):
    """Itemized pricing result"""
    base_price: Decimal
    overage_charge: Decimal
    discount: Decimal
    driver_fee: Decimal
    taxable_amount: Decimal
    tax: Decimal
    deposit_deducted: Decimal
    final_amount: Decimal
    distance_used: Decimal
    currency: str
    is_refund: bool

    @classmethod
    def from_domain(cls, breakdown: Breakdown) -> 'BreakdownDTO':
        return cls(
            base_price=breakdown.base_price,
            overage_charge=breakdown.overage_charge,
            discount=breakdown.discount,
            driver_fee=breakdown.driver_fee,
            taxable_amount=breakdown.taxable_amount,
            tax=breakdown.tax,
            deposit_deducted=breakdown.deposit_deducted,
            final_amount=breakdown.final_amount,
            distance_used=breakdown.distance_used,
            currency=breakdown.currency,
            is_refund=breakdown.is_refund
        )


class InvoiceDTO(BaseDTO):
    """Invoice presentation data"""
    invoice_id: str
    booking_id: str
    breakdown: BreakdownDTO
    driver_assigned: bool
    tax_rate_percent: Decimal

    @classmethod
    def from_domain(cls, invoice: Invoice, booking: Booking) -> 'InvoiceDTO':
        return cls(
            invoice_id=invoice.invoice_id,
            booking_id=invoice.booking_id,
            breakdown=BreakdownDTO.from_domain(invoice.present()),
            driver_assigned=booking.has_driver,
            tax_rate_percent=booking.vehicle.rate_tier.tax_rate_percent
        )


class BookingDTO(BaseDTO):
    """Booking snapshot"""
    id: str
    customer_id: str
    customer_name: str
    vehicle_id: str
    vehicle_model: str
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    creation_date: date
    booking_date: date
    rental_days: int
    estimated_distance: Decimal
    actual_distance: Decimal
    status: BookingStatusDTO
    invoice: InvoiceDTO

    @classmethod
    def from_domain(cls, booking: Booking) -> 'BookingDTO':
        return cls(
            id=booking.id,
            customer_id=booking.customer.id,
            customer_name=booking.customer.name,
            vehicle_id=booking.vehicle.id,
            vehicle_model=booking.vehicle.model,
            driver_id=booking.driver.id if booking.driver else None,
            driver_name=booking.driver.name if booking.driver else None,
            creation_date=booking.creation_date,
            booking_date=booking.booking_date,
            rental_days=booking.rental_days,
            estimated_distance=booking.estimated_distance,
            actual_distance=booking.actual_distance,
            status=booking.status.value,
            invoice=InvoiceDTO.from_domain(booking.invoice, booking)
        )


# ============================================================================
# MONITORING DTOs
# ============================================================================

class SystemStatusDTO(BaseDTO):
    """Dashboard figures"""
    total_customers: int
    total_vehicles: int
    available_vehicles: int
    total_drivers: int
    available_drivers: int
    total_bookings: int
    bookings_by_status: Dict[str, int]
    lead_time_days: int
    cancellation_lockout_days: int
    discount_min_days: int
    discount_rate: Decimal
    driver_daily_fee: Decimal
    currency: str
    system_date: date

