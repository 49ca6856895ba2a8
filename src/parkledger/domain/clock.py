# File: src/parkledger/domain/clock.py
"""
Calendar and clock utilities for the parking ledger

The ledger runs on a simplified calendar: 365-day years, no leap years,
February always has 28 days. Input timestamps must arrive in non-decreasing
order; LedgerClock holds the floor (the last accepted timestamp) and
rejects anything earlier.
"""

from enum import Enum
from typing import Optional
import logging

from .models import Timestamp, MINUTES_PER_DAY, MINUTES_PER_HOUR


DAYS_PER_YEAR = 365

# Index 0 unused so that months map directly
_MONTH_DAYS = (0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class DateOrder(Enum):
    """Result of comparing two timestamps"""
    BEFORE = -1
    SAME_DAY = 0
    AFTER = 1


def days_in_month(month: int) -> int:
    """Number of days in the month, or 0 when the month is out of range"""
    if 1 <= month <= 12:
        return _MONTH_DAYS[month]
    return 0


def is_valid_timestamp(timestamp: Timestamp) -> bool:
    """Check day/month/hour/minute ranges (no ordering involved)"""
    month_days = days_in_month(timestamp.month)
    if month_days == 0:
        return False

    if not 1 <= timestamp.day <= month_days:
        return False

    return 0 <= timestamp.hour <= 23 and 0 <= timestamp.minute <= 59


def _absolute_minutes(timestamp: Timestamp) -> int:
    minutes = timestamp.year * DAYS_PER_YEAR * MINUTES_PER_DAY
    for month in range(1, timestamp.month):
        minutes += days_in_month(month) * MINUTES_PER_DAY
    minutes += timestamp.day * MINUTES_PER_DAY
    minutes += timestamp.hour * MINUTES_PER_HOUR + timestamp.minute
    return minutes


def elapsed_minutes(start: Timestamp, end: Timestamp) -> int:
    """
    Minutes from start to end on the simplified calendar
    Negative when end precedes start.
    """
    return _absolute_minutes(end) - _absolute_minutes(start)


def compare(first: Optional[Timestamp], second: Optional[Timestamp]) -> DateOrder:
    """
    Order two timestamps with day granularity for equality
    Timestamps on the same calendar day are SAME_DAY whatever their time.
    A missing first timestamp sorts after everything.
    """
    if first is None:
        return DateOrder.AFTER
    if second is None:
        return DateOrder.BEFORE

    if first.same_day(second):
        return DateOrder.SAME_DAY

    if elapsed_minutes(first, second) > 0:
        return DateOrder.BEFORE
    return DateOrder.AFTER


class LedgerClock:
    """
    Monotonic clock floor shared by every entry and exit

    validate() is a ratchet: every accepted timestamp becomes the new floor,
    and a timestamp strictly earlier than the floor is refused. Callers that
    must finish other work first use accepts() and commit with advance().
    """

    def __init__(self):
        self._floor: Optional[Timestamp] = None
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def floor(self) -> Optional[Timestamp]:
        """Last accepted timestamp, None before the first acceptance"""
        return self._floor

    def accepts(self, timestamp: Timestamp) -> bool:
        """Check that the timestamp is a valid date not earlier than the floor"""
        if not is_valid_timestamp(timestamp):
            self._logger.debug(f"Rejected malformed timestamp {timestamp}")
            return False

        if self._floor is not None and elapsed_minutes(self._floor, timestamp) < 0:
            self._logger.debug(f"Rejected {timestamp}: earlier than floor {self._floor}")
            return False

        return True

    def advance(self, timestamp: Timestamp) -> None:
        """Move the floor to an accepted timestamp"""
        self._floor = timestamp

    def validate(self, timestamp: Timestamp) -> bool:
        """
        Accept the timestamp if it is a valid date not earlier than the floor
        Returns: True and advances the floor, or False leaving it untouched
        """
        if not self.accepts(timestamp):
            return False
        self.advance(timestamp)
        return True

    def is_after_floor_day(self, timestamp: Timestamp) -> bool:
        """
        Check whether the timestamp's day lies beyond the floor's day
        Without a floor every date is considered beyond it. Never advances
        the floor.
        """
        if self._floor is None:
            return True
        return compare(self._floor, timestamp) == DateOrder.BEFORE

    def reset(self) -> None:
        self._floor = None
