# File: src/ecoride/application/commands.py
"""
Command Pattern Implementation for EcoRide Car Rental System

This module encapsulates rental operations as first-class objects. Each
command validates its parameters, executes against the RentalService and
reports an "Ok | Error" result dictionary instead of raising:

    {"success": True,  "command_id": ..., "data": {...}}
    {"success": False, "command_id": ..., "error": "...", "error_type": "..."}

Command Types:
1. Registration Commands - customers, vehicles, drivers
2. Booking Commands - create, complete, cancel
3. Admin Commands - asset status overrides
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Tuple, Type
from dataclasses import dataclass, field
from datetime import datetime
import logging
import uuid

from pydantic import ValidationError as DTOValidationError

from ..domain.exceptions import RentalError
from .rental_service import RentalService
from .dtos import (
    BaseDTO, CustomerCreateDTO, CustomerUpdateDTO, VehicleCreateDTO,
    DriverCreateDTO, BookingRequestDTO, CompleteBookingRequestDTO,
    AssetStatusUpdateDTO
)


LOW_MILEAGE_ERROR = "LowMileageConfirmationRequired"


def format_validation_errors(error: DTOValidationError) -> str:
    """Flatten pydantic errors into 'field: message' pairs"""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "request"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


# ============================================================================
# COMMAND RESULT
# ============================================================================

@dataclass
class CommandResult:
    """Outcome of one command execution"""
    success: bool
    command_id: str
    command_type: str
    executed_at: datetime
    data: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Caller-facing result dictionary"""
        result: Dict[str, Any] = {
            "success": self.success,
            "command_id": self.command_id,
            "command_type": self.command_type,
            "executed_at": self.executed_at.isoformat()
        }
        if self.success:
            result["data"] = self.data
        else:
            result["error"] = self.error_message
            result["error_type"] = self.error_type
        result.update(self.metadata)
        return result


# ============================================================================
# COMMAND INTERFACES AND BASE CLASSES
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    A command represents an intent to change the system state.
    Commands are named in the imperative (e.g., CreateBookingCommand).
    Subclasses implement perform(); execute() turns domain errors into
    failed results.
    """

    def __init__(self, command_id: Optional[str] = None, executed_by: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.executed_at: Optional[datetime] = None
        self.executed_by = executed_by or "system"
        self.result: Optional[CommandResult] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def perform(self, service: RentalService) -> BaseDTO:
        """Run the operation; domain errors propagate"""
        pass

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate command parameters before execution

        Structural checks already ran when the request DTO was built.
        Returns: (is_valid, error_messages)
        """
        return True, []

    def execute(self, service: RentalService) -> Dict[str, Any]:
        """Execute the command and report an Ok | Error result"""
        self.logger.info(f"Executing {self.get_description()}")
        self.executed_at = datetime.now()

        is_valid, errors = self.validate()
        if not is_valid:
            return self._fail("; ".join(errors), "ValidationError")

        try:
            dto = self.perform(service)
        except RentalError as e:
            self.logger.warning(f"{self.get_description()} failed: {e}")
            return self._fail(str(e), e.error_type)
        except Exception as e:
            self.logger.error(f"Error executing {self.__class__.__name__}: {e}", exc_info=True)
            return self._fail(f"Internal error: {e}", "InternalError")

        self.result = CommandResult(
            success=True,
            command_id=self.command_id,
            command_type=self.__class__.__name__,
            executed_at=self.executed_at,
            data=dto.to_dict(mode="json")
        )
        return self.result.to_dict()

    def _fail(self, message: str, error_type: str, **metadata) -> Dict[str, Any]:
        self.result = CommandResult(
            success=False,
            command_id=self.command_id,
            command_type=self.__class__.__name__,
            executed_at=self.executed_at or datetime.now(),
            error_message=message,
            error_type=error_type,
            metadata=metadata
        )
        return self.result.to_dict()

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert command to dictionary for the audit history"""
        return {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "description": self.get_description(),
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
            "executed_by": self.executed_by,
            "success": self.result.success if self.result else None
        }


# ============================================================================
# REGISTRATION COMMANDS
# ============================================================================

class RegisterCustomerCommand(Command):
    """Command: Register a local or foreign customer"""

    def __init__(self, request: CustomerCreateDTO, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.request = request

    def perform(self, service: RentalService) -> BaseDTO:
        return service.register_customer(self.request)

    def get_description(self) -> str:
        return f"Register Customer {self.request.name}"


class UpdateCustomerCommand(Command):
    """Command: Update a customer's contact details"""

    def __init__(self, customer_id: str, request: CustomerUpdateDTO,
                 executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.customer_id = customer_id
        self.request = request

    def validate(self) -> Tuple[bool, List[str]]:
        errors = []
        if not self.customer_id or not self.customer_id.strip():
            errors.append("Customer ID is required")
        return len(errors) == 0, errors

    def perform(self, service: RentalService) -> BaseDTO:
        return service.update_customer(
            self.customer_id,
            contact_no=self.request.contact_no,
            email=self.request.email
        )

    def get_description(self) -> str:
        return f"Update Customer {self.customer_id}"


class RegisterVehicleCommand(Command):
    """Command: Register a vehicle on a rate tier"""

    def __init__(self, request: VehicleCreateDTO, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.request = request

    def perform(self, service: RentalService) -> BaseDTO:
        return service.register_vehicle(self.request)

    def get_description(self) -> str:
        return f"Register Vehicle {self.request.model}"


class RegisterDriverCommand(Command):
    """Command: Register a driver"""

    def __init__(self, request: DriverCreateDTO, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.request = request

    def perform(self, service: RentalService) -> BaseDTO:
        return service.register_driver(self.request)

    def get_description(self) -> str:
        return f"Register Driver {self.request.name}"


# ============================================================================
# BOOKING COMMANDS
# ============================================================================

class CreateBookingCommand(Command):
    """
    Command: Create a booking

    Business Operation: Vehicle (and driver) reservation with an initial quote
    """

    def __init__(self, request: BookingRequestDTO, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.request = request

    def perform(self, service: RentalService) -> BaseDTO:
        return service.create_booking(self.request)

    def get_description(self) -> str:
        return (
            f"Create Booking for {self.request.customer_id} on {self.request.vehicle_id}"
            f" from {self.request.booking_date.isoformat()}"
        )


class CompleteBookingCommand(Command):
    """
    Command: Complete a booking

    Business Operation: Vehicle return and final invoice. An actual distance
    far below the estimate needs confirm_low_mileage=True.
    """

    def __init__(self, request: CompleteBookingRequestDTO, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.request = request

    def execute(self, service: RentalService) -> Dict[str, Any]:
        if not self.request.confirm_low_mileage:
            try:
                low = service.is_low_mileage(self.request.booking_id, self.request.actual_distance)
            except RentalError as e:
                self.executed_at = datetime.now()
                self.logger.warning(f"{self.get_description()} failed: {e}")
                return self._fail(str(e), e.error_type)

            if low:
                self.executed_at = datetime.now()
                self.logger.warning(
                    f"Booking {self.request.booking_id}: low actual distance "
                    f"{self.request.actual_distance} km needs confirmation"
                )
                return self._fail(
                    "Actual distance is well below the estimate; "
                    "resubmit with confirm_low_mileage to proceed",
                    LOW_MILEAGE_ERROR,
                    requires_confirmation=True
                )

        return super().execute(service)

    def perform(self, service: RentalService) -> BaseDTO:
        return service.complete_booking(self.request.booking_id, self.request.actual_distance)

    def get_description(self) -> str:
        return f"Complete Booking {self.request.booking_id}"


class CancelBookingCommand(Command):
    """Command: Cancel a reserved booking"""

    def __init__(self, booking_id: str, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.booking_id = booking_id

    def validate(self) -> Tuple[bool, List[str]]:
        errors = []
        if not self.booking_id or not self.booking_id.strip():
            errors.append("Booking ID is required")
        return len(errors) == 0, errors

    def perform(self, service: RentalService) -> BaseDTO:
        return service.cancel_booking(self.booking_id)

    def get_description(self) -> str:
        return f"Cancel Booking {self.booking_id}"


# ============================================================================
# ADMIN COMMANDS
# ============================================================================

class SetAssetStatusCommand(Command):
    """Command: Administrative vehicle/driver status override"""

    def __init__(self, request: AssetStatusUpdateDTO, executed_by: Optional[str] = None):
        super().__init__(executed_by=executed_by)
        self.request = request

    def perform(self, service: RentalService) -> BaseDTO:
        return service.set_asset_status(self.request.asset_id, self.request.new_status)

    def get_description(self) -> str:
        return f"Set {self.request.asset_id} to {self.request.new_status}"


# ============================================================================
# COMMAND FACTORY
# ============================================================================

class CommandFactory:
    """Factory for creating commands from dictionary data"""

    command_classes: Dict[str, Type[Command]] = {
        "register_customer": RegisterCustomerCommand,
        "update_customer": UpdateCustomerCommand,
        "register_vehicle": RegisterVehicleCommand,
        "register_driver": RegisterDriverCommand,
        "create_booking": CreateBookingCommand,
        "complete_booking": CompleteBookingCommand,
        "cancel_booking": CancelBookingCommand,
        "set_asset_status": SetAssetStatusCommand,
    }

    @classmethod
    def create_command(cls, command_type: str, data: Dict[str, Any],
                       executed_by: Optional[str] = None) -> Optional[Command]:
        """
        Create a command instance from type and data

        Returns: Command instance or None if type not recognized
        Raises: pydantic ValidationError if the data does not fit the request DTO
        """
        if command_type not in cls.command_classes:
            return None

        data = dict(data or {})

        if command_type == "register_customer":
            return RegisterCustomerCommand(CustomerCreateDTO(**data), executed_by)

        elif command_type == "update_customer":
            customer_id = data.pop("customer_id", "")
            return UpdateCustomerCommand(customer_id, CustomerUpdateDTO(**data), executed_by)

        elif command_type == "register_vehicle":
            return RegisterVehicleCommand(VehicleCreateDTO(**data), executed_by)

        elif command_type == "register_driver":
            return RegisterDriverCommand(DriverCreateDTO(**data), executed_by)

        elif command_type == "create_booking":
            return CreateBookingCommand(BookingRequestDTO(**data), executed_by)

        elif command_type == "complete_booking":
            return CompleteBookingCommand(CompleteBookingRequestDTO(**data), executed_by)

        elif command_type == "cancel_booking":
            return CancelBookingCommand(data.get("booking_id", ""), executed_by)

        return SetAssetStatusCommand(AssetStatusUpdateDTO(**data), executed_by)


# ============================================================================
# COMMAND HANDLER
# ============================================================================

class RentalCommandHandler:
    """
    Caller boundary for rental operations

    Accepts {"type": ..., "data": {...}} dictionaries, runs the matching
    command and keeps an audit history of executed commands.
    """

    def __init__(self, service: RentalService, max_history_size: int = 1000):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)
        self.command_history: List[Command] = []
        self.max_history_size = max_history_size

    def handle(self, command: Dict[str, Any]) -> Dict[str, Any]:
        """Handle a rental command dictionary"""
        command_type = command.get("type")

        try:
            instance = CommandFactory.create_command(
                command_type, command.get("data", {}), command.get("executed_by")
            )
        except DTOValidationError as e:
            message = format_validation_errors(e)
            self.logger.warning(f"Invalid {command_type} request: {message}")
            return {
                "success": False,
                "error": f"Validation failed: {message}",
                "error_type": "ValidationError"
            }

        if instance is None:
            return {
                "success": False,
                "error": f"Unknown command type: {command_type}",
                "error_type": "UnknownCommand"
            }

        return self.process(instance)

    def process(self, command: Command) -> Dict[str, Any]:
        """Execute a command object and record it"""
        result = command.execute(self.service)
        self._add_to_history(command)
        return result

    def get_history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        history = self.command_history.copy()
        if limit:
            history = history[-limit:]
        return [cmd.to_dict() for cmd in history]

    def clear_history(self):
        self.command_history.clear()

    def _add_to_history(self, command: Command):
        """Add command to history, respecting max size"""
        self.command_history.append(command)
        if len(self.command_history) > self.max_history_size:
            self.command_history = self.command_history[-self.max_history_size:]
