# File: src/parkledger/domain/ledger.py
"""
Ledger engine for the parking system

ParkingLedger is the single state object of a running system: it owns the
clock floor, the facility registry and the vehicle index, and every entry,
exit, query and removal goes through it.

Each operation checks all of its preconditions first and only then mutates
state, so a rejected operation leaves the ledger exactly as it was.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple
import logging

from .aggregates import Facility, Vehicle
from .clock import LedgerClock, is_valid_timestamp
from .exceptions import ValidationError, NotFoundError, StateConflictError
from .models import (
    Timestamp, ParkingEvent, BillingDay, BillingRecord,
    is_valid_plate, DEFAULT_CURRENCY
)
from .strategies import PricingStrategy, QuarterHourPricingStrategy
from ..infrastructure.repositories import (
    FacilityRegistry, VehicleIndex, DEFAULT_MAX_FACILITIES
)


@dataclass(frozen=True)
class ExitReceipt:
    """Outcome of a completed exit"""
    event: ParkingEvent
    facility: Facility
    billing_day: BillingDay


class ParkingLedger:
    """
    In-memory ledger of facilities, vehicles and revenue

    State machine per vehicle: Unparked -> Parked -> Unparked ...
    """

    def __init__(
        self,
        max_facilities: int = DEFAULT_MAX_FACILITIES,
        currency: str = DEFAULT_CURRENCY,
        pricing_strategy: Optional[PricingStrategy] = None
    ):
        self.currency = currency
        self.clock = LedgerClock()
        self.facilities = FacilityRegistry(max_facilities=max_facilities, currency=currency)
        self.vehicles = VehicleIndex()
        self.pricing_strategy = pricing_strategy or QuarterHourPricingStrategy()
        self._logger = logging.getLogger(self.__class__.__name__)

    # ========================================================================
    # FACILITIES
    # ========================================================================

    def add_facility(
        self,
        name: str,
        capacity: int,
        first_hour_rate: Decimal,
        after_hour_rate: Decimal,
        daily_cap: Decimal
    ) -> Facility:
        facility = self.facilities.add(name, capacity, first_hour_rate, after_hour_rate, daily_cap)
        self._logger.info(f"Facility {name} added ({self.facilities.count()}/{self.facilities.max_facilities})")
        return facility

    def list_facilities(self) -> List[Facility]:
        return self.facilities.list()

    def require_facility(self, name: str) -> Facility:
        facility = self.facilities.find(name)
        if facility is None:
            raise NotFoundError(f"{name}: no such parking.")
        return facility

    def remove_facility(self, name: str) -> List[str]:
        """
        Remove a facility and everything that refers to it
        Cascade: billing days, registry slot, and every vehicle event at the
        facility (clearing the parked state of vehicles still inside).
        Returns: remaining facility names in lexicographic order
        """
        facility = self.require_facility(name)
        evicted = len(self.vehicles_parked_at(facility.name))

        days = facility.discard_billing()
        self.facilities.remove(name)

        purged = 0
        for vehicle in self.vehicles:
            purged += vehicle.purge_facility(name)

        self._logger.info(
            f"Facility {name} removed: {days} billing days, {purged} parking events, "
            f"{evicted} vehicles still parked"
        )
        return self.facilities.sorted_names()

    # ========================================================================
    # ENTRY / EXIT
    # ========================================================================

    def register_entry(self, name: str, plate: str, entry: Timestamp) -> Tuple[Facility, ParkingEvent]:
        """
        Park a vehicle
        Raises: NotFoundError, StateConflictError, ValidationError
        """
        facility = self.require_facility(name)

        if facility.is_full:
            raise StateConflictError(f"{name}: parking is full.")

        if not is_valid_plate(plate):
            raise ValidationError(f"{plate}: invalid licence plate.")

        vehicle = self.vehicles.find(plate)
        if vehicle is not None and vehicle.is_parked:
            raise StateConflictError(f"{plate}: invalid vehicle entry.")

        if entry is None or not self.clock.accepts(entry):
            raise ValidationError("invalid date.")

        vehicle = self.vehicles.get_or_create(plate)
        event = vehicle.park(facility.name, entry, self.currency)
        facility.occupy_space(plate, entry)
        self.clock.advance(entry)

        self._logger.info(f"Vehicle {plate} entered {name} at {entry} ({facility.free_spaces} free)")
        return facility, event

    def require_parked(self, name: str, plate: str) -> Tuple[Facility, Vehicle]:
        """
        Exit preconditions that come before the exit time is looked at
        Raises: NotFoundError, ValidationError, StateConflictError
        """
        facility = self.require_facility(name)

        if not is_valid_plate(plate):
            raise ValidationError(f"{plate}: invalid licence plate.")

        vehicle = self.vehicles.find(plate)
        if vehicle is None or not vehicle.is_parked_at(facility.name):
            raise StateConflictError(f"{plate}: invalid vehicle exit.")
        return facility, vehicle

    def register_exit(self, name: str, plate: str, exit_time: Timestamp) -> ExitReceipt:
        """
        Release a vehicle, price its stay and book the revenue
        Raises: NotFoundError, StateConflictError, ValidationError
        """
        facility, vehicle = self.require_parked(name, plate)

        if exit_time is None or not self.clock.accepts(exit_time):
            raise ValidationError("invalid date.")

        open_event = vehicle.open_event
        cost = self.pricing_strategy.calculate_parking_fee(
            open_event.entry, exit_time, facility.tariff, self.currency
        )

        # Allocate the billing entry before flipping any state
        billing_day = facility.record_billing(plate, exit_time, cost)
        event = vehicle.leave(exit_time, cost)
        facility.release_space(event)
        self.clock.advance(exit_time)

        self._logger.info(
            f"Vehicle {plate} left {name} at {exit_time}, cost {cost.format()} "
            f"({facility.free_spaces} free)"
        )
        return ExitReceipt(event=event, facility=facility, billing_day=billing_day)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def vehicle_history(self, plate: str) -> List[ParkingEvent]:
        """
        All events of a vehicle, grouped by facility name in lexicographic
        order, chronological within each facility
        Raises: ValidationError for a malformed plate, NotFoundError when
        there is nothing to show
        """
        if not is_valid_plate(plate):
            raise ValidationError(f"{plate}: invalid licence plate.")

        vehicle = self.vehicles.find(plate)
        history: List[ParkingEvent] = []
        if vehicle is not None:
            for facility_name in self.facilities.sorted_names():
                history.extend(vehicle.events_at(facility_name))

        if not history:
            raise NotFoundError(f"{plate}: no entries found in any parking.")
        return history

    def revenue_summary(self, name: str) -> List[BillingDay]:
        """Every billing day of the facility in chronological order"""
        return self.require_facility(name).billing_days

    def day_revenue(self, name: str, when: Timestamp) -> List[BillingRecord]:
        """
        Per-vehicle revenue of one day, in the order exits were recorded
        An empty list means no exit was billed that day.
        Raises: NotFoundError, ValidationError for a malformed date or a day
        later than the clock floor
        """
        facility = self.require_facility(name)

        if not is_valid_timestamp(when) or self.clock.is_after_floor_day(when):
            raise ValidationError("invalid date.")

        day = facility.billing_day_for(when)
        if day is None:
            return []
        return list(day.records)

    def vehicles_parked_at(self, name: str) -> List[Vehicle]:
        return [vehicle for vehicle in self.vehicles if vehicle.is_parked_at(name)]

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def teardown(self) -> None:
        """Release every facility, vehicle and the clock floor"""
        for facility in self.facilities:
            facility.discard_billing()
        facility_count = self.facilities.count()
        vehicle_count = self.vehicles.count()
        event_count = sum(len(vehicle.events) for vehicle in self.vehicles)

        self.facilities.clear()
        self.vehicles.clear()
        self.clock.reset()
        self._logger.info(
            f"Ledger torn down ({facility_count} facilities, {vehicle_count} vehicles, "
            f"{event_count} parking events)"
        )
