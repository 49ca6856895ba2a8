# File: src/parkledger/domain/models.py
"""
Domain Models for the Parking Ledger
Following Domain-Driven Design (DDD) principles

This module contains:
1. Value Objects: Timestamp, Money, Tariff (immutable, validated)
2. Ledger records: ParkingEvent, BillingRecord, BillingDay
3. Entity base class shared by the aggregates
4. Domain Events raised by the Facility aggregate

Vehicles and facilities themselves live in aggregates.py.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal, InvalidOperation, Overflow
import re
import uuid

from .exceptions import ValidationError


MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

DEFAULT_CURRENCY = "EUR"

# Longest stay the four-digit year range allows, in 365-day years
MAX_STAY_DAYS = 10000 * 365
# Day totals add up many stays, so a daily cap must leave this much room
BILLING_HEADROOM = Decimal(10) ** 9

_DATE_TOKEN = re.compile(r'^(\d{1,2})-(\d{1,2})-(\d{1,4})$')
_TIME_TOKEN = re.compile(r'^(\d{1,2}):(\d{1,2})$')

# Two uppercase letters or two digits per group, dash separated
_PLATE_GROUP = re.compile(r'^(?:[A-Z]{2}|[0-9]{2})$')


# ============================================================================
# DOMAIN PRIMITIVES / VALUE OBJECTS
# ============================================================================

def is_valid_plate(plate: Optional[str]) -> bool:
    """
    Check the fixed plate format: XX-XX-XX
    Each group is two uppercase letters or two digits, and at least one
    letter group and one digit group must be present.
    """
    if not plate or len(plate) != 8 or plate[2] != '-' or plate[5] != '-':
        return False

    groups = (plate[0:2], plate[3:5], plate[6:8])
    if not all(_PLATE_GROUP.match(group) for group in groups):
        return False

    letter_groups = sum(1 for group in groups if group.isalpha())
    digit_groups = len(groups) - letter_groups
    return letter_groups >= 1 and digit_groups >= 1


@dataclass(frozen=True)
class Timestamp:
    """
    Value Object: minute-granularity calendar timestamp
    Field ranges are not enforced here; the ledger clock decides validity
    so that a bad date surfaces at the right point of each operation.
    """
    day: int
    month: int
    year: int
    hour: int = 0
    minute: int = 0

    @classmethod
    def parse(cls, date_token: Optional[str], time_token: Optional[str] = None) -> 'Timestamp':
        """
        Build a timestamp from already-split `dd-mm-yyyy` and `hh:mm` tokens
        Raises: ValidationError if a token cannot be read
        """
        if not date_token:
            raise ValidationError("invalid date.")

        date_match = _DATE_TOKEN.match(date_token.strip())
        if not date_match:
            raise ValidationError("invalid date.")
        day, month, year = (int(part) for part in date_match.groups())

        hour = minute = 0
        if time_token is not None:
            time_match = _TIME_TOKEN.match(time_token.strip())
            if not time_match:
                raise ValidationError("invalid date.")
            hour, minute = (int(part) for part in time_match.groups())

        return cls(day=day, month=month, year=year, hour=hour, minute=minute)

    def same_day(self, other: 'Timestamp') -> bool:
        """Calendar-day equality, ignoring time of day"""
        return (self.year, self.month, self.day) == (other.year, other.month, other.day)

    def date_str(self) -> str:
        return f"{self.day:02d}-{self.month:02d}-{self.year:04d}"

    def time_str(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return f"{self.date_str()} {self.time_str()}"


@dataclass(frozen=True)
class Money:
    """
    Value Object: Monetary amount in the ledger currency
    Only one currency is ever used by a ledger instance.
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        """Validate money amount"""
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        if self.amount < Decimal('0'):
            raise ValueError("Money amount cannot be negative")

        if len(self.currency) != 3:
            raise ValueError(f"Currency must be 3-letter code: {self.currency}")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> 'Money':
        return cls(Decimal('0'), currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money amounts (same currency only)"""
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} to {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def format(self) -> str:
        """Two-decimal display form"""
        return f"{self.amount:.2f}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class Tariff:
    """
    Value Object: three-tier parking tariff
    - first_hour_rate: price of each quarter hour within the first hour
    - after_hour_rate: price of each quarter hour after the first hour
    - daily_cap: price of a full day, and the ceiling of any partial day
    """
    first_hour_rate: Decimal
    after_hour_rate: Decimal
    daily_cap: Decimal

    def __post_init__(self):
        """Rates must be positive, strictly increasing and small enough to bill"""
        rates = []
        for name in ('first_hour_rate', 'after_hour_rate', 'daily_cap'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                try:
                    value = Decimal(str(value))
                except InvalidOperation:
                    raise ValidationError("invalid cost.")
                object.__setattr__(self, name, value)
            rates.append(value)

        if any(not rate.is_finite() or rate <= 0 for rate in rates):
            raise ValidationError("invalid cost.")

        if not rates[0] < rates[1] < rates[2]:
            raise ValidationError("invalid cost.")

        # The cap is the largest rate; every fee and total is bounded by it
        try:
            self.daily_cap * MAX_STAY_DAYS * BILLING_HEADROOM
        except Overflow:
            raise ValidationError("invalid cost.")

    def __str__(self) -> str:
        return f"{self.first_hour_rate:.2f}/{self.after_hour_rate:.2f}/{self.daily_cap:.2f}"


# ============================================================================
# LEDGER RECORDS
# ============================================================================

@dataclass
class ParkingEvent:
    """
    One entry/exit cycle of a vehicle at one facility
    Open (no exit, zero cost) until the vehicle leaves.
    """
    plate: str
    facility_name: str
    entry: Timestamp
    exit: Optional[Timestamp] = None
    cost: Money = field(default_factory=Money.zero)

    @property
    def is_open(self) -> bool:
        return self.exit is None

    def close(self, exit_time: Timestamp, cost: Money) -> None:
        """Complete the event with its exit time and computed cost"""
        if not self.is_open:
            raise ValueError(f"Parking event for {self.plate} is already closed")
        self.exit = exit_time
        self.cost = cost


@dataclass(frozen=True)
class BillingRecord:
    """Per-vehicle revenue line of a billing day"""
    plate: str
    exit: Timestamp
    cost: Money


@dataclass
class BillingDay:
    """
    Aggregated revenue of one facility on one calendar date
    Records stay in the order the exits were registered.
    """
    exit_date: Timestamp
    total: Money
    records: List[BillingRecord] = field(default_factory=list)

    @classmethod
    def open_with(cls, record: BillingRecord) -> 'BillingDay':
        """Create a billing day seeded with its first record"""
        return cls(exit_date=record.exit, total=record.cost, records=[record])

    def covers(self, when: Timestamp) -> bool:
        return self.exit_date.same_day(when)

    def add(self, record: BillingRecord) -> None:
        self.records.append(record)
        self.total = self.total + record.cost


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Entity:
    """
    Base class for all domain entities
    Identity is the natural key (facility name, licence plate)
    """

    def __init__(self, id: str):
        self._id = id

    @property
    def id(self) -> str:
        """Get entity ID"""
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


# ============================================================================
# DOMAIN EVENTS
# ============================================================================

class DomainEvent:
    """Base class for domain events"""

    def __init__(self):
        self.event_id = str(uuid.uuid4())
        self.occurred_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.__class__.__name__,
            "occurred_at": self.occurred_at.isoformat()
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.event_id})"


class VehicleEnteredEvent(DomainEvent):
    """Raised when a vehicle takes a space in a facility"""

    def __init__(self, facility_name: str, plate: str, entry: Timestamp, free_spaces: int):
        super().__init__()
        self.facility_name = facility_name
        self.plate = plate
        self.entry = entry
        self.free_spaces = free_spaces

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "facility_name": self.facility_name,
            "plate": self.plate,
            "entry": str(self.entry),
            "free_spaces": self.free_spaces
        })
        return data


class VehicleExitedEvent(DomainEvent):
    """Raised when a vehicle leaves a facility and its stay is billed"""

    def __init__(
        self,
        facility_name: str,
        plate: str,
        entry: Timestamp,
        exit: Timestamp,
        cost: Money
    ):
        super().__init__()
        self.facility_name = facility_name
        self.plate = plate
        self.entry = entry
        self.exit = exit
        self.cost = cost

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "facility_name": self.facility_name,
            "plate": self.plate,
            "entry": str(self.entry),
            "exit": str(self.exit),
            "cost": self.cost.format()
        })
        return data
