# File: src/parkledger/application/commands.py
"""
Command Pattern Implementation for the Parking Ledger

Every ledger operation is wrapped in a command object so that front ends
never call the service directly. The processor executes commands, turns
recoverable ledger errors into failed results and keeps an audit trail.

Command Types:
1. Facility Commands - add, list, remove
2. Vehicle Commands - entry, exit, history
3. Revenue Commands - per-day summary and per-vehicle detail
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any, Tuple, Type
import logging
import uuid

from pydantic import ValidationError as DTOValidationError

from ..domain.exceptions import ParkingLedgerError
from .parking_service import ParkingService
from .dtos import (
    AddFacilityRequestDTO, EntryRequestDTO, ExitRequestDTO,
    HistoryRequestDTO, RevenueRequestDTO, RemoveFacilityRequestDTO
)


# ============================================================================
# COMMAND INTERFACES AND BASE CLASSES
# ============================================================================

@dataclass
class CommandResult:
    """Outcome of one processed command"""
    success: bool
    command_id: str
    command_type: str
    executed_at: datetime
    data: Any = None
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        if isinstance(self.data, list):
            data = [item.to_dict() for item in self.data]
        elif self.data is not None:
            data = self.data.to_dict()
        else:
            data = None

        return {
            "success": self.success,
            "command_id": self.command_id,
            "command_type": self.command_type,
            "executed_at": self.executed_at.isoformat(),
            "data": data,
            "error_message": self.error_message,
            "error_kind": self.error_kind,
            "metadata": self.metadata
        }


class Command(ABC):
    """
    Abstract base class for all commands

    A command represents one request against the ledger.
    Commands are named in the imperative (e.g., RegisterEntryCommand).
    """

    def __init__(self, command_id: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.executed_at: Optional[datetime] = None
        self.logger = logging.getLogger(self.__class__.__name__)

        self.metadata = {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "created_at": datetime.now().isoformat()
        }

    @abstractmethod
    def execute(self, service: ParkingService) -> Any:
        """
        Run the command against the service
        Returns: the result DTO (or list of DTOs)
        Raises: ParkingLedgerError subclasses
        """
        pass

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check that every required field is present
        Returns: (is_valid, error_messages)
        """
        return True, []

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")


def _require(**fields: Any) -> Tuple[bool, List[str]]:
    errors = [f"{name} is required" for name, value in fields.items() if not value]
    return len(errors) == 0, errors


# ============================================================================
# FACILITY COMMANDS
# ============================================================================

class AddFacilityCommand(Command):
    """Command: create a facility with its capacity and tariff"""

    def __init__(self, request: AddFacilityRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService):
        self.logger.info(f"Executing AddFacilityCommand for {self.request.name}")
        return service.add_facility(self.request)

    def validate(self) -> Tuple[bool, List[str]]:
        return _require(name=self.request.name)

    def get_description(self) -> str:
        return f"AddFacility {self.request.name}"


class ListFacilitiesCommand(Command):
    """Command: list every facility in creation order"""

    def execute(self, service: ParkingService):
        return service.list_facilities()


class RemoveFacilityCommand(Command):
    """Command: remove a facility and everything tied to it"""

    def __init__(self, request: RemoveFacilityRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService):
        self.logger.info(f"Executing RemoveFacilityCommand for {self.request.facility_name}")
        return service.remove_facility(self.request)

    def validate(self) -> Tuple[bool, List[str]]:
        return _require(facility_name=self.request.facility_name)

    def get_description(self) -> str:
        return f"RemoveFacility {self.request.facility_name}"


# ============================================================================
# VEHICLE COMMANDS
# ============================================================================

class RegisterEntryCommand(Command):
    """
    Command: park a vehicle
    A missing date or time is not a validation failure here; the ledger
    reports it as an invalid date after its earlier checks.
    """

    def __init__(self, request: EntryRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService):
        self.logger.info(f"Executing RegisterEntryCommand for {self.request.plate}")
        return service.register_entry(self.request)

    def validate(self) -> Tuple[bool, List[str]]:
        return _require(facility_name=self.request.facility_name, plate=self.request.plate)

    def get_description(self) -> str:
        return f"RegisterEntry {self.request.plate} at {self.request.facility_name}"


class RegisterExitCommand(Command):
    """
    Command: release a vehicle and bill its stay
    Without a date or time the exit succeeds with no data once the vehicle
    is known to be parked there.
    """

    def __init__(self, request: ExitRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService):
        self.logger.info(f"Executing RegisterExitCommand for {self.request.plate}")
        return service.register_exit(self.request)

    def validate(self) -> Tuple[bool, List[str]]:
        return _require(facility_name=self.request.facility_name, plate=self.request.plate)

    def get_description(self) -> str:
        return f"RegisterExit {self.request.plate} at {self.request.facility_name}"


class VehicleHistoryCommand(Command):
    """Command: list every parking event of a vehicle"""

    def __init__(self, request: HistoryRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService):
        return service.vehicle_history(self.request)

    def validate(self) -> Tuple[bool, List[str]]:
        return _require(plate=self.request.plate)


# ============================================================================
# REVENUE COMMANDS
# ============================================================================

class RevenueCommand(Command):
    """Command: revenue of a facility, optionally for a single day"""

    def __init__(self, request: RevenueRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService):
        return service.revenue(self.request)

    def validate(self) -> Tuple[bool, List[str]]:
        return _require(facility_name=self.request.facility_name)


# ============================================================================
# COMMAND FACTORY
# ============================================================================

class CommandFactory:
    """Factory for creating commands from dictionary data"""

    COMMAND_CLASSES: Dict[str, Tuple[Type[Command], Optional[type]]] = {
        "add_facility": (AddFacilityCommand, AddFacilityRequestDTO),
        "list_facilities": (ListFacilitiesCommand, None),
        "register_entry": (RegisterEntryCommand, EntryRequestDTO),
        "register_exit": (RegisterExitCommand, ExitRequestDTO),
        "vehicle_history": (VehicleHistoryCommand, HistoryRequestDTO),
        "revenue": (RevenueCommand, RevenueRequestDTO),
        "remove_facility": (RemoveFacilityCommand, RemoveFacilityRequestDTO),
    }

    @staticmethod
    def create_command(command_type: str, data: Optional[Dict[str, Any]] = None) -> Optional[Command]:
        """
        Create a command instance from type and data

        Args:
            command_type: Type of command to create
            data: Request fields

        Returns: Command instance, or None if the type is unknown or the
        data does not form a valid request
        """
        entry = CommandFactory.COMMAND_CLASSES.get(command_type)
        if entry is None:
            logging.getLogger("CommandFactory").warning(f"Unknown command type: {command_type}")
            return None

        command_class, request_class = entry
        if request_class is None:
            return command_class()

        try:
            request = request_class(**(data or {}))
        except DTOValidationError as e:
            logging.getLogger("CommandFactory").warning(f"Error creating command {command_type}: {e}")
            return None
        return command_class(request)


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Processes commands with features like:
    - Pre-execution validation
    - Recoverable error capture into failed results
    - Bounded history of successful commands
    """

    def __init__(self, service: ParkingService):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)

        self.command_history: List[Command] = []
        self.max_history_size = int(service.config.get("max_command_history", 1000))

    def process(self, command: Command) -> CommandResult:
        """
        Process a command

        Returns: Execution result
        Raises: ResourceExhaustionError and any non-recoverable error
        """
        self.logger.info(f"Processing command: {command.get_description()}")

        is_valid, errors = command.validate()
        if not is_valid:
            self.logger.warning(f"Rejected {command.get_description()}: {errors}")
            return self._failure(command, "; ".join(errors), "InvalidCommand")

        try:
            data = command.execute(self.service)
        except ParkingLedgerError as e:
            if not e.recoverable:
                self.logger.error(f"Fatal error in {command.get_description()}: {e}", exc_info=True)
                raise
            self.logger.warning(f"{command.get_description()} failed: {e}")
            return self._failure(command, e.message, e.kind)

        command.executed_at = datetime.now()
        self._add_to_history(command)
        result = CommandResult(
            success=True,
            command_id=command.command_id,
            command_type=command.__class__.__name__,
            executed_at=command.executed_at,
            data=data
        )
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Result of {command.get_description()}: {result.to_dict()}")
        return result

    def _failure(self, command: Command, message: str, kind: str) -> CommandResult:
        return CommandResult(
            success=False,
            command_id=command.command_id,
            command_type=command.__class__.__name__,
            executed_at=datetime.now(),
            error_message=message,
            error_kind=kind
        )

    def _add_to_history(self, command: Command) -> None:
        """Add command to history, respecting max size"""
        self.command_history.append(command)

        if len(self.command_history) > self.max_history_size:
            self.command_history = self.command_history[-self.max_history_size:]
