# File: src/parkledger/application/parking_service.py
"""
Parking Ledger Application Service

This module implements the application service layer of the ledger.
It turns request DTOs into ledger calls and ledger results into result DTOs.

Responsibilities:
1. Read raw tokens (dates, times) into domain values
2. Run one ledger operation per use case
3. Publish the domain events raised by the aggregates
4. Translate allocation failures into the fatal error type

Key Principles:
- One method per use case, no business rules in this layer
- Typed errors propagate to the caller unchanged
- Configuration is a plain dict merged over DEFAULT_CONFIG
"""

from contextlib import contextmanager
from typing import Dict, List, Optional, Any
import logging

from ..domain.exceptions import ValidationError, ResourceExhaustionError
from ..domain.ledger import ParkingLedger
from ..domain.models import Timestamp, DomainEvent, DEFAULT_CURRENCY
from ..domain.aggregates import AggregateRoot
from ..infrastructure.repositories import DEFAULT_MAX_FACILITIES
from .dtos import (
    AddFacilityRequestDTO, EntryRequestDTO, ExitRequestDTO,
    HistoryRequestDTO, RevenueRequestDTO, RemoveFacilityRequestDTO,
    FacilityDTO, EntryResultDTO, ExitResultDTO, HistoryEntryDTO,
    VehicleHistoryDTO, DailyRevenueDTO, VehicleRevenueDTO,
    RevenueReportDTO, RemovalResultDTO, TimestampDTO
)


DEFAULT_CONFIG: Dict[str, Any] = {
    "max_facilities": DEFAULT_MAX_FACILITIES,
    "currency": DEFAULT_CURRENCY,
    "max_command_history": 1000
}


def read_timestamp(date_token: Optional[str], time_token: Optional[str]) -> Optional[Timestamp]:
    """
    Read an entry/exit timestamp, both tokens required
    Returns None when a token is missing or malformed; the ledger reports
    that as an invalid date once the earlier checks have passed.
    Exits never get here without both tokens.
    """
    if date_token is None or time_token is None:
        return None
    try:
        return Timestamp.parse(date_token, time_token)
    except ValidationError:
        return None


class ParkingService:
    """
    Main application service for the parking ledger

    Use cases:
    1. Facility creation, listing and removal
    2. Vehicle entry and exit
    3. Vehicle history and facility revenue queries
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)

        self.config = dict(DEFAULT_CONFIG)
        if config:
            self.config.update(config)

        self.ledger = ParkingLedger(
            max_facilities=int(self.config["max_facilities"]),
            currency=self.config["currency"]
        )
        self.published_events: List[DomainEvent] = []

        self.logger.info(
            f"ParkingService initialized (max_facilities={self.config['max_facilities']}, "
            f"currency={self.config['currency']})"
        )

    @contextmanager
    def _allocation_guard(self, operation: str):
        """Escalate allocation failures to the fatal error type"""
        try:
            yield
        except MemoryError as e:
            self.logger.critical(f"Out of memory during {operation}")
            raise ResourceExhaustionError("out of memory.") from e

    def _publish_events(self, *aggregates: AggregateRoot) -> None:
        for aggregate in aggregates:
            for event in aggregate.clear_events():
                self.published_events.append(event)
                self.logger.debug(
                    f"Published {event.__class__.__name__} (v{aggregate.version}): {event.to_dict()}"
                )

        limit = int(self.config["max_command_history"])
        if len(self.published_events) > limit:
            self.published_events = self.published_events[-limit:]

    # ========================================================================
    # FACILITIES
    # ========================================================================

    def add_facility(self, request: AddFacilityRequestDTO) -> FacilityDTO:
        """
        Create a facility
        Raises: StateConflictError, ValidationError
        """
        with self._allocation_guard("add_facility"):
            facility = self.ledger.add_facility(
                request.name,
                request.capacity,
                request.first_hour_rate,
                request.after_hour_rate,
                request.daily_cap
            )
        return FacilityDTO.from_domain(facility)

    def list_facilities(self) -> List[FacilityDTO]:
        """All facilities in creation order"""
        return [FacilityDTO.from_domain(facility) for facility in self.ledger.list_facilities()]

    def remove_facility(self, request: RemoveFacilityRequestDTO) -> RemovalResultDTO:
        """
        Remove a facility with every event and billing day tied to it
        Raises: NotFoundError
        """
        remaining = self.ledger.remove_facility(request.facility_name)
        return RemovalResultDTO(removed=request.facility_name, remaining=remaining)

    # ========================================================================
    # ENTRY / EXIT
    # ========================================================================

    def register_entry(self, request: EntryRequestDTO) -> EntryResultDTO:
        """
        Park a vehicle
        Raises: NotFoundError, StateConflictError, ValidationError
        """
        entry = read_timestamp(request.date, request.time)

        with self._allocation_guard("register_entry"):
            facility, event = self.ledger.register_entry(request.facility_name, request.plate, entry)

        self._publish_events(facility)
        return EntryResultDTO(
            facility_name=facility.name,
            plate=event.plate,
            entry=TimestampDTO.from_domain(event.entry),
            free_spaces=facility.free_spaces
        )

    def register_exit(self, request: ExitRequestDTO) -> Optional[ExitResultDTO]:
        """
        Release a vehicle and bill its stay
        An exit without a date or time is checked up to the parked vehicle
        and then dropped: nothing changes and None is returned.
        Raises: NotFoundError, StateConflictError, ValidationError
        """
        if request.date is None or request.time is None:
            self.ledger.require_parked(request.facility_name, request.plate)
            self.logger.debug(f"Exit of {request.plate} without date or time ignored")
            return None

        exit_time = read_timestamp(request.date, request.time)

        with self._allocation_guard("register_exit"):
            receipt = self.ledger.register_exit(request.facility_name, request.plate, exit_time)

        self._publish_events(receipt.facility)
        return ExitResultDTO(
            facility_name=receipt.facility.name,
            plate=receipt.event.plate,
            entry=TimestampDTO.from_domain(receipt.event.entry),
            exit=TimestampDTO.from_domain(receipt.event.exit),
            cost=receipt.event.cost.amount,
            free_spaces=receipt.facility.free_spaces
        )

    # ========================================================================
    # QUERIES
    # ========================================================================

    def vehicle_history(self, request: HistoryRequestDTO) -> VehicleHistoryDTO:
        """
        Every event of a vehicle, facilities in name order
        Raises: ValidationError, NotFoundError
        """
        events = self.ledger.vehicle_history(request.plate)
        return VehicleHistoryDTO(
            plate=request.plate,
            entries=[HistoryEntryDTO.from_domain(event) for event in events]
        )

    def revenue(self, request: RevenueRequestDTO) -> RevenueReportDTO:
        """
        Revenue of a facility, per day or for the vehicles of one day
        Raises: NotFoundError, ValidationError
        """
        if request.date is None:
            days = self.ledger.revenue_summary(request.facility_name)
            return RevenueReportDTO(
                facility_name=request.facility_name,
                days=[DailyRevenueDTO.from_domain(day) for day in days]
            )

        # Facility existence is reported before a malformed date
        self.ledger.require_facility(request.facility_name)
        when = Timestamp.parse(request.date)

        records = self.ledger.day_revenue(request.facility_name, when)
        return RevenueReportDTO(
            facility_name=request.facility_name,
            date=TimestampDTO.from_domain(when),
            vehicles=[VehicleRevenueDTO.from_domain(record) for record in records]
        )

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def shutdown(self) -> None:
        """Release all ledger state"""
        self.ledger.teardown()
        self.published_events.clear()
        self.logger.info("ParkingService shut down")


# ============================================================================
# SERVICE FACTORY
# ============================================================================

class ParkingServiceFactory:
    """Factory for creating parking service instances"""

    @staticmethod
    def create_default_service() -> ParkingService:
        """Create a service with DEFAULT_CONFIG"""
        return ParkingService()

    @staticmethod
    def create_service_with_config(config: Dict[str, Any]) -> ParkingService:
        """Create a service with custom configuration; None values are ignored"""
        return ParkingService({key: value for key, value in config.items() if value is not None})
