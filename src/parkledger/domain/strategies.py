# File: src/parkledger/domain/strategies.py
"""
Strategy Pattern Implementation for parking fees

Fee calculation sits behind a PricingStrategy so the ledger never depends
on the concrete tariff algorithm. The standard strategy bills quarter hours:
the first hour at one rate, the rest of the day at a higher rate, with a
daily cap on any partial day and the cap charged for every full day.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
import logging

from .models import Money, Tariff, Timestamp, MINUTES_PER_DAY
from .clock import elapsed_minutes


QUARTER_MINUTES = 15
QUARTERS_IN_FIRST_HOUR = 4


def price(
    minutes: int,
    rate_first_hour: Decimal,
    rate_after_hour: Decimal,
    daily_cap: Decimal
) -> Decimal:
    """
    Fee for a stay of the given length

    Rates are trusted here; facilities validate them when created.
    """
    full_days, remainder = divmod(minutes, MINUTES_PER_DAY)
    base_cost = full_days * daily_cap

    # Any started quarter is billed in full
    quarters = -(-remainder // QUARTER_MINUTES)

    if quarters <= QUARTERS_IN_FIRST_HOUR:
        partial_cost = quarters * rate_first_hour
    else:
        partial_cost = (QUARTERS_IN_FIRST_HOUR * rate_first_hour
                        + (quarters - QUARTERS_IN_FIRST_HOUR) * rate_after_hour)

    return base_cost + min(partial_cost, daily_cap)


# ============================================================================
# STRATEGY INTERFACES
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for fee calculation algorithms
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate_parking_fee(
        self,
        entry: Timestamp,
        exit: Timestamp,
        tariff: Tariff,
        currency: str
    ) -> Money:
        """
        Calculate the fee of a completed stay
        Returns: Calculated fee
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("Strategy", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Strategy"


# ============================================================================
# PRICING STRATEGIES
# ============================================================================

class QuarterHourPricingStrategy(PricingStrategy):
    """
    Standard three-tier tariff
    - Quarter-hour granularity, partial quarters rounded up
    - First four quarters at the first-hour rate
    - Partial day capped at the daily rate
    """

    def calculate_parking_fee(
        self,
        entry: Timestamp,
        exit: Timestamp,
        tariff: Tariff,
        currency: str
    ) -> Money:
        minutes = elapsed_minutes(entry, exit)
        amount = price(
            minutes,
            tariff.first_hour_rate,
            tariff.after_hour_rate,
            tariff.daily_cap
        )
        self.logger.debug(f"{minutes} minutes at {tariff} -> {amount:.2f}")
        return Money(amount, currency)
