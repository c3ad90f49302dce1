# File: tests/helpers.py
"""
Shared test data for EcoRide tests

All date rules are evaluated against a fixed "today" of 2025-01-10.
"""

import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

# Add the src directory to the Python path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from ecoride.domain.models import LocalCustomer, Vehicle, Driver
from ecoride.domain.rates import STANDARD_RATE_TIERS
from ecoride.infrastructure.repositories import RentalStore
from ecoride.application.rental_service import RentalService
from ecoride.application.dtos import (
    CustomerCreateDTO, VehicleCreateDTO, DriverCreateDTO, BookingRequestDTO
)


TODAY = date(2025, 1, 10)

COMPACT = STANDARD_RATE_TIERS[0]
ELECTRIC = STANDARD_RATE_TIERS[2]


def days_from_today(days: int) -> date:
    return TODAY + timedelta(days=days)


def make_clock(today: date = TODAY) -> Mock:
    """Clock whose date can be moved by setting return_value"""
    return Mock(return_value=today)


def populated_store() -> RentalStore:
    """Store with one customer (C001), two compact vehicles (V001, V002) and a driver (D001)"""
    store = RentalStore()
    store.customers.add(LocalCustomer(
        "Nimal Perera", "0771234567", "nimal@example.com", "B1234567", "901234567V",
        id=store.next_customer_id()
    ))
    store.vehicles.add(Vehicle("Toyota Aqua", COMPACT, id=store.next_vehicle_id()))
    store.vehicles.add(Vehicle("Suzuki Alto", COMPACT, id=store.next_vehicle_id()))
    store.drivers.add(Driver("Kamal Silva", "DL-5566", "0719876543", id=store.next_driver_id()))
    return store


def populated_service(clock=None, **kwargs) -> RentalService:
    """Service registered through its own API: C001, V001 (compact), V002 (electric), D001"""
    service = RentalService(clock=clock or make_clock(), **kwargs)
    service.register_customer(CustomerCreateDTO(
        name="Nimal Perera",
        contact_no="0771234567",
        email="nimal@example.com",
        driving_license="B1234567",
        nic="901234567V"
    ))
    service.register_vehicle(VehicleCreateDTO(model="Toyota Aqua", tier_index=0))
    service.register_vehicle(VehicleCreateDTO(model="Nissan Leaf", tier_index=2))
    service.register_driver(DriverCreateDTO(
        name="Kamal Silva", license_no="DL-5566", contact_no="0719876543"
    ))
    return service


def booking_request(vehicle_id: str = "V001", days_ahead: int = 5, rental_days: int = 5,
                    estimated_distance="800", driver_id=None,
                    customer_id: str = "C001") -> BookingRequestDTO:
    return BookingRequestDTO(
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        booking_date=days_from_today(days_ahead),
        rental_days=rental_days,
        estimated_distance=Decimal(str(estimated_distance))
    )
