# File: src/parkledger/domain/aggregates.py
"""
Aggregate Roots for the Parking Ledger
Following Domain-Driven Design (DDD) Aggregate Pattern

Aggregates:
1. Facility - capacity, tariff and the chain of billing days
2. Vehicle - parked state and the history of parking events

Key Concepts:
- Aggregate roots enforce their own invariants
- Billing days and parking events are only modified through their root
- Domain events are raised for entries and exits
"""

from typing import List, Optional
import logging

from .clock import compare, DateOrder
from .models import (
    Entity, Timestamp, Money, Tariff,
    ParkingEvent, BillingRecord, BillingDay,
    DomainEvent, VehicleEnteredEvent, VehicleExitedEvent
)


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot(Entity):
    """
    Base class for all aggregate roots
    Provides domain event collection and versioning
    """

    def __init__(self, id: str):
        super().__init__(id)
        self._version: int = 1
        self._changes: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def version(self) -> int:
        """Get current aggregate version"""
        return self._version

    def _increment_version(self) -> None:
        self._version += 1

    def _add_domain_event(self, event: DomainEvent) -> None:
        """Add a domain event to the list of changes"""
        self._changes.append(event)
        self._logger.debug(f"Added domain event: {event.__class__.__name__}")

    def clear_events(self) -> List[DomainEvent]:
        """Clear and return all domain events"""
        events = self._changes.copy()
        self._changes.clear()
        return events

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants - to be overridden by subclasses"""
        pass


# ============================================================================
# FACILITY AGGREGATE
# ============================================================================

class Facility(AggregateRoot):
    """
    Aggregate Root: a named parking facility
    Tracks free spaces and aggregates exit revenue per calendar day.
    """

    def __init__(self, name: str, capacity: int, tariff: Tariff, currency: str):
        super().__init__(name)
        self.name = name
        self.capacity = capacity
        self.tariff = tariff
        self.currency = currency
        self.free_spaces = capacity
        self._billing_days: List[BillingDay] = []

        self._validate_invariants()
        self._logger.info(f"Created Facility: {self.name} (capacity {self.capacity}, tariff {self.tariff})")

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants"""
        # Invariant 1: free spaces stay within [0, capacity]
        if self.capacity <= 0:
            raise ValueError(f"Facility {self.name} must have a positive capacity")

        if not 0 <= self.free_spaces <= self.capacity:
            raise ValueError(
                f"Free space mismatch in {self.name}: "
                f"{self.free_spaces} free of {self.capacity}"
            )

        # Invariant 2: billing days are in strictly increasing day order
        for previous, current in zip(self._billing_days, self._billing_days[1:]):
            if compare(previous.exit_date, current.exit_date) != DateOrder.BEFORE:
                raise ValueError(f"Billing days of {self.name} are out of order")

    # ========================================================================
    # PUBLIC BUSINESS METHODS
    # ========================================================================

    @property
    def is_full(self) -> bool:
        return self.free_spaces <= 0

    @property
    def billing_days(self) -> List[BillingDay]:
        """Billing days in chronological order (read-only copy)"""
        return list(self._billing_days)

    def occupy_space(self, plate: str, entry: Timestamp) -> None:
        """
        Take one space for an entering vehicle
        Raises: ValueError if the facility is full
        """
        if self.is_full:
            raise ValueError(f"Facility {self.name} is full")

        self.free_spaces -= 1
        self._increment_version()
        self._add_domain_event(VehicleEnteredEvent(
            facility_name=self.name,
            plate=plate,
            entry=entry,
            free_spaces=self.free_spaces
        ))

    def release_space(self, event: ParkingEvent) -> None:
        """Give back the space of a vehicle whose event was just closed"""
        if self.free_spaces >= self.capacity:
            raise ValueError(f"Facility {self.name} has no occupied space to release")

        self.free_spaces += 1
        self._increment_version()
        self._add_domain_event(VehicleExitedEvent(
            facility_name=self.name,
            plate=event.plate,
            entry=event.entry,
            exit=event.exit,
            cost=event.cost
        ))

    def record_billing(self, plate: str, exit_time: Timestamp, cost: Money) -> BillingDay:
        """
        Add an exit to the revenue of its day
        Exit dates arrive in non-decreasing order, so only the last billing
        day can match; anything else starts a new day at the tail.
        """
        record = BillingRecord(plate=plate, exit=exit_time, cost=cost)
        tail = self._billing_days[-1] if self._billing_days else None

        if compare(tail.exit_date if tail else None, exit_time) == DateOrder.SAME_DAY:
            tail.add(record)
            return tail

        day = BillingDay.open_with(record)
        self._billing_days.append(day)
        self._logger.debug(f"Opened billing day {exit_time.date_str()} for {self.name}")
        return day

    def billing_day_for(self, when: Timestamp) -> Optional[BillingDay]:
        """Billing day matching the calendar date, if any"""
        for day in self._billing_days:
            if day.covers(when):
                return day
        return None

    def discard_billing(self) -> int:
        """Drop the whole billing chain, returning how many days were held"""
        count = len(self._billing_days)
        self._billing_days.clear()
        return count

    def __str__(self) -> str:
        return f"{self.name} {self.capacity} {self.free_spaces}"


# ============================================================================
# VEHICLE AGGREGATE
# ============================================================================

class Vehicle(AggregateRoot):
    """
    Aggregate Root: a vehicle identified by its licence plate
    Its events are kept in insertion order, which is chronological because
    the ledger clock never goes backwards.
    """

    def __init__(self, plate: str):
        super().__init__(plate)
        self.plate = plate
        self.parked_at: Optional[str] = None
        self._events: List[ParkingEvent] = []

    @property
    def is_parked(self) -> bool:
        return self.parked_at is not None

    @property
    def events(self) -> List[ParkingEvent]:
        return list(self._events)

    @property
    def open_event(self) -> Optional[ParkingEvent]:
        """The most recent event if the vehicle is still inside"""
        if self._events and self._events[-1].is_open:
            return self._events[-1]
        return None

    def is_parked_at(self, facility_name: str) -> bool:
        return self.parked_at == facility_name

    def park(self, facility_name: str, entry: Timestamp, currency: str) -> ParkingEvent:
        """
        Start a parking event
        Raises: ValueError if the vehicle is already parked
        """
        if self.is_parked:
            raise ValueError(f"Vehicle {self.plate} is already parked at {self.parked_at}")

        event = ParkingEvent(
            plate=self.plate,
            facility_name=facility_name,
            entry=entry,
            cost=Money.zero(currency)
        )
        self._events.append(event)
        self.parked_at = facility_name
        self._increment_version()
        return event

    def leave(self, exit_time: Timestamp, cost: Money) -> ParkingEvent:
        """
        Close the open parking event
        Raises: ValueError if the vehicle is not parked
        """
        event = self.open_event
        if not self.is_parked or event is None:
            raise ValueError(f"Vehicle {self.plate} is not parked")

        event.close(exit_time, cost)
        self.parked_at = None
        self._increment_version()
        return event

    def events_at(self, facility_name: str) -> List[ParkingEvent]:
        """Events for one facility in chronological order"""
        return [event for event in self._events if event.facility_name == facility_name]

    def purge_facility(self, facility_name: str) -> int:
        """
        Remove every event of a facility that no longer exists
        Returns: number of events removed
        """
        kept = [event for event in self._events if event.facility_name != facility_name]
        removed = len(self._events) - len(kept)
        self._events = kept

        if self.parked_at == facility_name:
            self.parked_at = None

        if removed:
            self._increment_version()
        return removed

    def __str__(self) -> str:
        status = f"parked at {self.parked_at}" if self.is_parked else "not parked"
        return f"{self.plate} ({status})"
