# File: src/parkledger/domain/exceptions.py
"""
Error taxonomy for the parking ledger

Every recoverable error carries the user-visible message that the console
prints verbatim. Recoverable errors are raised before any state is touched,
so catching one always leaves the ledger as it was before the call.

Hierarchy:
1. ValidationError - bad plate, bad date/time, non-monotonic date, bad capacity/cost
2. NotFoundError - unknown facility, vehicle without history
3. StateConflictError - already parked, not parked here, facility full, duplicates
4. ResourceExhaustionError - allocation failure (fatal)
"""


class ParkingLedgerError(Exception):
    """Base exception for parking ledger errors"""

    recoverable = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        """Short error category name used in command results"""
        return self.__class__.__name__

    def __str__(self) -> str:
        return self.message


class ValidationError(ParkingLedgerError):
    """Input rejected: plate format, date/time, capacity or cost out of range"""
    pass


class NotFoundError(ParkingLedgerError):
    """Referenced facility or vehicle history does not exist"""
    pass


class StateConflictError(ParkingLedgerError):
    """Operation conflicts with the current ledger state"""
    pass


class ResourceExhaustionError(ParkingLedgerError):
    """Allocation failed; the process must stop instead of continuing"""

    recoverable = False
