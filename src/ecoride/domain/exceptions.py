# File: src/ecoride/domain/exceptions.py
"""
Domain Exceptions for EcoRide Car Rental System

Every precondition failure in the rental core raises one of these.
They are all recoverable at the caller boundary: an operation that raises
leaves customers, vehicles, drivers and bookings exactly as they were.
"""

from typing import Optional


class RentalError(Exception):
    """Base exception for rental domain errors"""

    def __init__(self, message: str, entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id

    @property
    def error_type(self) -> str:
        return self.__class__.__name__


class NotFoundError(RentalError):
    """Unknown customer, vehicle, driver or booking id"""
    pass


class OutOfRangeError(RentalError):
    """Rate tier index outside the catalogue"""
    pass


class ValidationError(RentalError):
    """Structurally invalid input (non-positive days, negative distance)"""
    pass


class ConflictError(RentalError):
    """Asset is not in the status a registry mutation expects"""
    pass


class AssetUnavailableError(RentalError):
    """Vehicle or driver is not AVAILABLE for a new booking"""
    pass


class LeadTimeError(RentalError):
    """Booking date is too close to today"""
    pass


class CancellationLockedError(RentalError):
    """Cancellation window has closed"""
    pass


class InvalidStateError(RentalError):
    """Operation attempted on a booking in the wrong status"""
    pass
