# File: src/parkledger/infrastructure/repositories.py
"""
Repository Pattern Implementation for the Parking Ledger

Repositories give the ledger a collection-like interface over its two
keyed stores. Everything is held in memory for the lifetime of the process.

Repository Types:
1. VehicleIndex - licence plate -> Vehicle, average O(1) lookup
2. FacilityRegistry - bounded, insertion-ordered set of named facilities
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, List, Dict, Iterator
from decimal import Decimal
import logging

from ..domain.aggregates import Facility, Vehicle
from ..domain.exceptions import ValidationError, StateConflictError
from ..domain.models import Tariff, DEFAULT_CURRENCY

# Type variables for generic repositories
T = TypeVar('T')  # Entity type
ID = TypeVar('ID')  # Natural key type

DEFAULT_MAX_FACILITIES = 20


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class Repository(ABC, Generic[T, ID]):
    """Base repository interface"""

    @abstractmethod
    def find(self, id: ID) -> Optional[T]:
        """Get an entity by its key, or None"""
        pass

    @abstractmethod
    def list(self) -> List[T]:
        """All entities in the repository's natural order"""
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def __iter__(self) -> Iterator[T]:
        return iter(self.list())

    def __len__(self) -> int:
        return self.count()


# ============================================================================
# IN-MEMORY REPOSITORIES
# ============================================================================

class VehicleIndex(Repository[Vehicle, str]):
    """
    Plate-keyed vehicle store
    One live entry per plate; callers look up before inserting.
    """

    def __init__(self):
        self._storage: Dict[str, Vehicle] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def find(self, plate: str) -> Optional[Vehicle]:
        return self._storage.get(plate)

    def insert(self, plate: str, vehicle: Vehicle) -> Vehicle:
        """
        Register a new vehicle under its plate
        Raises: StateConflictError if the plate is already indexed
        """
        if plate in self._storage:
            raise StateConflictError(f"{plate}: vehicle already registered.")

        self._storage[plate] = vehicle
        self._logger.debug(f"Indexed vehicle {plate}")
        return vehicle

    def get_or_create(self, plate: str) -> Vehicle:
        """Find the vehicle, inserting a fresh record the first time a plate is seen"""
        vehicle = self.find(plate)
        if vehicle is None:
            vehicle = self.insert(plate, Vehicle(plate))
        return vehicle

    def list(self) -> List[Vehicle]:
        return list(self._storage.values())

    def count(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        self._storage.clear()


class FacilityRegistry(Repository[Facility, str]):
    """
    Bounded collection of facilities in insertion order
    Removing a facility keeps the relative order of the others.
    """

    def __init__(self, max_facilities: int = DEFAULT_MAX_FACILITIES, currency: str = DEFAULT_CURRENCY):
        self.max_facilities = max_facilities
        self.currency = currency
        self._facilities: List[Facility] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def is_full(self) -> bool:
        return len(self._facilities) >= self.max_facilities

    def add(
        self,
        name: str,
        capacity: int,
        first_hour_rate: Decimal,
        after_hour_rate: Decimal,
        daily_cap: Decimal
    ) -> Facility:
        """
        Create and register a facility
        Raises:
            StateConflictError: registry full or name already taken
            ValidationError: capacity not positive, rates not positive
                and strictly increasing
        """
        if self.is_full:
            raise StateConflictError("too many parks.")

        if self.find(name) is not None:
            raise StateConflictError(f"{name}: parking already exists.")

        if capacity <= 0:
            raise ValidationError(f"{capacity}: invalid capacity.")

        tariff = Tariff(first_hour_rate, after_hour_rate, daily_cap)
        facility = Facility(name, capacity, tariff, self.currency)
        self._facilities.append(facility)
        return facility

    def find(self, name: str) -> Optional[Facility]:
        if name is None:
            return None
        for facility in self._facilities:
            if facility.name == name:
                return facility
        return None

    def remove(self, name: str) -> Optional[Facility]:
        """Detach a facility from the registry, returning it if it existed"""
        facility = self.find(name)
        if facility is None:
            return None

        self._facilities.remove(facility)
        self._logger.debug(f"Removed facility {name} from registry")
        return facility

    def list(self) -> List[Facility]:
        """Facilities in insertion order"""
        return list(self._facilities)

    def sorted_names(self) -> List[str]:
        """Facility names in lexicographic order"""
        return sorted(facility.name for facility in self._facilities)

    def count(self) -> int:
        return len(self._facilities)

    def clear(self) -> None:
        self._facilities.clear()
