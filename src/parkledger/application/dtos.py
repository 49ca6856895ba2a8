# File: src/parkledger/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Ledger

This module defines DTOs for data transfer between layers:
1. Request DTOs - already-tokenized command fields coming from a front end
2. Result DTOs - structured values handed back for display

DTO Principles:
- Request fields stay as raw tokens where the ledger itself must decide
  validity (plates, dates), so errors surface in the documented order
- Numeric tokens are read by their numeric prefix: a leading
  number is used and garbage becomes zero, which the ledger then rejects
- No business logic, only data
"""

from typing import Dict, List, Optional, Any, Union
from decimal import Decimal, InvalidOperation
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import Timestamp, ParkingEvent, BillingDay, BillingRecord
from ..domain.aggregates import Facility


_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
_LEADING_NUMBER = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


def leading_int(token: Union[str, int, None]) -> int:
    """Integer prefix of a token, 0 when there is none"""
    if isinstance(token, int):
        return token
    match = _LEADING_INT.match(token or "")
    return int(match.group(1)) if match else 0


def leading_decimal(token: Union[str, int, float, Decimal, None]) -> Decimal:
    """Decimal prefix of a token, 0 when there is none"""
    if isinstance(token, Decimal):
        return token
    if isinstance(token, (int, float)):
        return Decimal(str(token))
    match = _LEADING_NUMBER.match(token or "")
    if not match:
        return Decimal('0')
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return Decimal('0')


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        frozen=True
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        return self.model_dump(exclude_none=exclude_none, **kwargs)


class TimestampDTO(BaseDTO):
    """Timestamp DTO"""
    day: int
    month: int
    year: int
    hour: int = 0
    minute: int = 0

    @classmethod
    def from_domain(cls, timestamp: Timestamp) -> 'TimestampDTO':
        return cls(
            day=timestamp.day,
            month=timestamp.month,
            year=timestamp.year,
            hour=timestamp.hour,
            minute=timestamp.minute
        )

    def date_str(self) -> str:
        return f"{self.day:02d}-{self.month:02d}-{self.year:04d}"

    def time_str(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return f"{self.date_str()} {self.time_str()}"


# ============================================================================
# REQUEST DTOs
# ============================================================================

class AddFacilityRequestDTO(BaseDTO):
    """DTO for creating a facility"""
    name: str = Field(min_length=1, description="Facility name")
    capacity: int = Field(description="Number of spaces")
    first_hour_rate: Decimal = Field(description="Price per quarter hour in the first hour")
    after_hour_rate: Decimal = Field(description="Price per quarter hour after the first hour")
    daily_cap: Decimal = Field(description="Price of a full day")

    @field_validator('capacity', mode='before')
    @classmethod
    def read_capacity(cls, v):
        return leading_int(v)

    @field_validator('first_hour_rate', 'after_hour_rate', 'daily_cap', mode='before')
    @classmethod
    def read_rate(cls, v):
        return leading_decimal(v)


class EntryRequestDTO(BaseDTO):
    """DTO for a vehicle entering a facility"""
    facility_name: str = Field(description="Facility name")
    plate: Optional[str] = Field(default=None, description="Licence plate")
    date: Optional[str] = Field(default=None, description="Date token dd-mm-yyyy")
    time: Optional[str] = Field(default=None, description="Time token hh:mm")


class ExitRequestDTO(BaseDTO):
    """DTO for a vehicle leaving a facility"""
    facility_name: str = Field(description="Facility name")
    plate: Optional[str] = Field(default=None, description="Licence plate")
    date: Optional[str] = Field(default=None, description="Date token dd-mm-yyyy")
    time: Optional[str] = Field(default=None, description="Time token hh:mm")


class HistoryRequestDTO(BaseDTO):
    """DTO for a vehicle history query"""
    plate: Optional[str] = Field(default=None, description="Licence plate")


class RevenueRequestDTO(BaseDTO):
    """DTO for a facility revenue query"""
    facility_name: str = Field(description="Facility name")
    date: Optional[str] = Field(default=None, description="Optional date token dd-mm-yyyy")


class RemoveFacilityRequestDTO(BaseDTO):
    """DTO for removing a facility"""
    facility_name: str = Field(description="Facility name")


# ============================================================================
# RESULT DTOs
# ============================================================================

class FacilityDTO(BaseDTO):
    """Facility listing entry"""
    name: str
    capacity: int
    free_spaces: int
    first_hour_rate: Decimal
    after_hour_rate: Decimal
    daily_cap: Decimal

    @classmethod
    def from_domain(cls, facility: Facility) -> 'FacilityDTO':
        return cls(
            name=facility.name,
            capacity=facility.capacity,
            free_spaces=facility.free_spaces,
            first_hour_rate=facility.tariff.first_hour_rate,
            after_hour_rate=facility.tariff.after_hour_rate,
            daily_cap=facility.tariff.daily_cap
        )


class EntryResultDTO(BaseDTO):
    """Confirmation of a vehicle entry"""
    facility_name: str
    plate: str
    entry: TimestampDTO
    free_spaces: int


class ExitResultDTO(BaseDTO):
    """Confirmation of a vehicle exit with its cost"""
    facility_name: str
    plate: str
    entry: TimestampDTO
    exit: TimestampDTO
    cost: Decimal
    free_spaces: int


class HistoryEntryDTO(BaseDTO):
    """One parking event in a vehicle history"""
    facility_name: str
    entry: TimestampDTO
    exit: Optional[TimestampDTO] = None
    cost: Decimal = Decimal('0')

    @classmethod
    def from_domain(cls, event: ParkingEvent) -> 'HistoryEntryDTO':
        return cls(
            facility_name=event.facility_name,
            entry=TimestampDTO.from_domain(event.entry),
            exit=TimestampDTO.from_domain(event.exit) if event.exit else None,
            cost=event.cost.amount
        )


class VehicleHistoryDTO(BaseDTO):
    """All events of a vehicle"""
    plate: str
    entries: List[HistoryEntryDTO] = Field(default_factory=list)


class DailyRevenueDTO(BaseDTO):
    """Total revenue of one billing day"""
    date: TimestampDTO
    total: Decimal
    exits: int

    @classmethod
    def from_domain(cls, day: BillingDay) -> 'DailyRevenueDTO':
        return cls(
            date=TimestampDTO.from_domain(day.exit_date),
            total=day.total.amount,
            exits=len(day.records)
        )


class VehicleRevenueDTO(BaseDTO):
    """Revenue of one vehicle exit within a day"""
    plate: str
    exit: TimestampDTO
    cost: Decimal

    @classmethod
    def from_domain(cls, record: BillingRecord) -> 'VehicleRevenueDTO':
        return cls(
            plate=record.plate,
            exit=TimestampDTO.from_domain(record.exit),
            cost=record.cost.amount
        )


class RevenueReportDTO(BaseDTO):
    """
    Revenue of a facility
    Without a date: `days` lists every billing day.
    With a date: `vehicles` lists the exits of that day (possibly none).
    """
    facility_name: str
    date: Optional[TimestampDTO] = None
    days: List[DailyRevenueDTO] = Field(default_factory=list)
    vehicles: List[VehicleRevenueDTO] = Field(default_factory=list)


class RemovalResultDTO(BaseDTO):
    """Outcome of a facility removal"""
    removed: str
    remaining: List[str] = Field(default_factory=list)
