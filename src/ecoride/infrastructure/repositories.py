# File: src/ecoride/infrastructure/repositories.py
"""
Repository Pattern Implementation for EcoRide Car Rental System

Repositories provide a collection-like interface for accessing domain
entities and aggregates. Rental state lives for the lifetime of the process
only, so every repository here is in-memory.

Components:
1. Repository interface and generic in-memory implementation
2. Entity repositories - customers, vehicles, drivers, bookings
3. AssetRegistry - guarded vehicle/driver status mutations
4. RentalStore - explicit context object holding all of the above
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, List, Dict, Union
import logging

from ..domain.models import (
    Entity, Customer, Vehicle, Driver,
    VehicleStatus, DriverStatus, BookingStatus, AssetKind
)
from ..domain.aggregates import Booking
from ..domain.exceptions import NotFoundError, ConflictError

T = TypeVar('T', bound=Entity)


def normalize_id(entity_id: str) -> str:
    """Ids are matched case-insensitively, e.g. 'v001' finds 'V001'"""
    return (entity_id or "").strip().upper()


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class Repository(ABC, Generic[T]):
    """Base repository interface"""

    @abstractmethod
    def add(self, entity: T) -> T:
        pass

    @abstractmethod
    def get(self, id: str) -> Optional[T]:
        pass

    @abstractmethod
    def get_all(self) -> List[T]:
        pass

    @abstractmethod
    def exists(self, id: str) -> bool:
        pass

    @abstractmethod
    def count(self) -> int:
        pass


# ============================================================================
# IN-MEMORY REPOSITORIES
# ============================================================================

class InMemoryRepository(Repository[T]):
    """In-memory repository keyed by normalized entity id"""

    entity_name = "Entity"

    def __init__(self):
        self._storage: Dict[str, T] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def add(self, entity: T) -> T:
        entity_id = normalize_id(entity.id)
        if entity_id in self._storage:
            raise ConflictError(f"{self.entity_name} {entity_id} already exists", entity_id)

        self._storage[entity_id] = entity
        self._logger.debug(f"Added {self.entity_name.lower()} {entity_id}")
        return entity

    def get(self, id: str) -> Optional[T]:
        return self._storage.get(normalize_id(id))

    def get_or_raise(self, id: str) -> T:
        entity = self.get(id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} {normalize_id(id)} not found", normalize_id(id))
        return entity

    def get_all(self) -> List[T]:
        return list(self._storage.values())

    def exists(self, id: str) -> bool:
        return normalize_id(id) in self._storage

    def count(self) -> int:
        return len(self._storage)

    def clear(self):
        """Clear all data (for testing)"""
        self._storage.clear()


class InMemoryCustomerRepository(InMemoryRepository[Customer]):
    """In-memory repository for customers"""

    entity_name = "Customer"


class InMemoryVehicleRepository(InMemoryRepository[Vehicle]):
    """In-memory repository for vehicles"""

    entity_name = "Vehicle"

    def find_by_status(self, status: VehicleStatus) -> List[Vehicle]:
        return [v for v in self._storage.values() if v.status == status]


class InMemoryDriverRepository(InMemoryRepository[Driver]):
    """In-memory repository for drivers"""

    entity_name = "Driver"

    def find_by_status(self, status: DriverStatus) -> List[Driver]:
        return [d for d in self._storage.values() if d.status == status]


class InMemoryBookingRepository(InMemoryRepository[Booking]):
    """In-memory repository for bookings"""

    entity_name = "Booking"

    def find_by_status(self, status: BookingStatus) -> List[Booking]:
        return [b for b in self._storage.values() if b.status == status]

    def find_by_customer(self, customer_id: str) -> List[Booking]:
        customer_id = normalize_id(customer_id)
        return [b for b in self._storage.values() if b.customer.id == customer_id]

    def find_active_for_vehicle(self, vehicle_id: str) -> Optional[Booking]:
        vehicle_id = normalize_id(vehicle_id)
        for booking in self._storage.values():
            if booking.is_active and booking.vehicle.id == vehicle_id:
                return booking
        return None

    def find_active_for_driver(self, driver_id: str) -> Optional[Booking]:
        driver_id = normalize_id(driver_id)
        for booking in self._storage.values():
            if booking.is_active and booking.driver is not None and booking.driver.id == driver_id:
                return booking
        return None


# ============================================================================
# ASSET REGISTRY
# ============================================================================

class AssetRegistry:
    """
    Holds vehicles and drivers and performs their status mutations

    Each mutator checks the source status and raises ConflictError when it
    does not match. Mutators are only called by the booking lifecycle after
    all of its validation has passed, so no rollback is needed.
    """

    def __init__(
        self,
        vehicles: Optional[InMemoryVehicleRepository] = None,
        drivers: Optional[InMemoryDriverRepository] = None
    ):
        self.vehicles = vehicles if vehicles is not None else InMemoryVehicleRepository()
        self.drivers = drivers if drivers is not None else InMemoryDriverRepository()
        self._logger = logging.getLogger(self.__class__.__name__)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        return self.vehicles.get_or_raise(vehicle_id)

    def get_driver(self, driver_id: str) -> Driver:
        return self.drivers.get_or_raise(driver_id)

    def reserve(self, vehicle_id: str) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id)
        vehicle.reserve()
        self._logger.info(f"Vehicle {vehicle.id} reserved")
        return vehicle

    def release(self, vehicle_id: str) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id)
        vehicle.release()
        self._logger.info(f"Vehicle {vehicle.id} released")
        return vehicle

    def assign_driver(self, driver_id: str) -> Driver:
        driver = self.get_driver(driver_id)
        driver.assign()
        self._logger.info(f"Driver {driver.id} assigned")
        return driver

    def release_driver(self, driver_id: str) -> Driver:
        driver = self.get_driver(driver_id)
        driver.release()
        self._logger.info(f"Driver {driver.id} released")
        return driver

    def list_available(self, kind: AssetKind) -> List[Union[Vehicle, Driver]]:
        """Assets currently free to book, in registration order"""
        if kind == AssetKind.VEHICLE:
            return self.vehicles.find_by_status(VehicleStatus.AVAILABLE)
        if kind == AssetKind.DRIVER:
            return self.drivers.find_by_status(DriverStatus.AVAILABLE)
        raise ValueError(f"Unknown asset kind: {kind}")

    def find_asset(self, asset_id: str) -> Union[Vehicle, Driver]:
        """Resolve an id against vehicles first, then drivers"""
        vehicle = self.vehicles.get(asset_id)
        if vehicle is not None:
            return vehicle
        driver = self.drivers.get(asset_id)
        if driver is not None:
            return driver
        raise NotFoundError(f"Asset {normalize_id(asset_id)} not found", normalize_id(asset_id))


# ============================================================================
# RENTAL STORE
# ============================================================================

class IdSequence:
    """Sequential human-readable ids such as C001 or B0001"""

    def __init__(self, prefix: str, width: int = 3, start: int = 1):
        self.prefix = prefix
        self.width = width
        self._next = start

    def next_id(self) -> str:
        value = f"{self.prefix}{self._next:0{self.width}d}"
        self._next += 1
        return value

    def peek(self) -> str:
        return f"{self.prefix}{self._next:0{self.width}d}"


class RentalStore:
    """
    Explicit context object holding every in-memory collection

    Passed to the booking lifecycle and rental service instead of relying on
    module-level state, so each test can start from an empty store.
    """

    def __init__(self):
        self.customers = InMemoryCustomerRepository()
        self.bookings = InMemoryBookingRepository()
        self.registry = AssetRegistry()

        self._sequences = {
            "customer": IdSequence("C"),
            "vehicle": IdSequence("V"),
            "driver": IdSequence("D"),
            "booking": IdSequence("B", width=4),
        }

    @property
    def vehicles(self) -> InMemoryVehicleRepository:
        return self.registry.vehicles

    @property
    def drivers(self) -> InMemoryDriverRepository:
        return self.registry.drivers

    def next_customer_id(self) -> str:
        return self._sequences["customer"].next_id()

    def next_vehicle_id(self) -> str:
        return self._sequences["vehicle"].next_id()

    def next_driver_id(self) -> str:
        return self._sequences["driver"].next_id()

    def next_booking_id(self) -> str:
        return self._sequences["booking"].next_id()

    def peek_booking_id(self) -> str:
        """Id the next committed booking will receive"""
        return self._sequences["booking"].peek()

    def clear(self) -> None:
        self.customers.clear()
        self.bookings.clear()
        self.vehicles.clear()
        self.drivers.clear()
