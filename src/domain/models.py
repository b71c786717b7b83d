"""
Domain models - Attendance records and result types.

Positions are divided into Slots; a Registration links a Volunteer to a
Slot and carries the attendance state. The only state transition this
core performs is REGISTERED -> CHECKED_IN, at most once per Registration.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .exceptions import NameUpdateFailed


class AttendanceState(str, Enum):
    """
    Attendance state of a Registration.

    State Transitions (forward-only):
    - REGISTERED -> CHECKED_IN (successful check-in)

    CHECKED_IN is terminal. The transition is enforced at the repository
    level with a conditional write on the prior state.
    """

    REGISTERED = "registered"
    CHECKED_IN = "checked_in"


@dataclass(frozen=True)
class Position:
    id: str
    event_id: str
    name: str
    start_time: datetime
    end_time: datetime
    capacity: int
    volunteers_checked_in: int = 0


@dataclass(frozen=True)
class Slot:
    id: str
    position_id: str
    start_time: datetime
    end_time: datetime
    capacity: int


@dataclass(frozen=True)
class Volunteer:
    id: str
    email: str
    name: str = ""


@dataclass(frozen=True)
class Registration:
    """
    Registration of a volunteer to a slot, as resolved for check-in.

    ``position_id`` and ``email`` are joined in by the repository so the
    check-in path never needs a second lookup.
    """

    id: str
    slot_id: str
    volunteer_id: str
    position_id: str
    email: str
    state: AttendanceState = AttendanceState.REGISTERED
    checked_in_at: datetime | None = None

    @property
    def is_checked_in(self) -> bool:
        return self.state == AttendanceState.CHECKED_IN


@dataclass(frozen=True)
class SlotVolunteer:
    """Row of the per-slot volunteer listing."""

    registration_id: str
    volunteer_id: str
    email: str
    name: str
    state: AttendanceState
    checked_in_at: datetime | None = None


@dataclass(frozen=True)
class CheckInResult:
    """
    Outcome of a successful check-in.

    ``already_checked_in`` is True when the call found the registration
    already checked in (repeat submission or lost race). ``name_error``
    carries a non-fatal display name failure. ``counter_synced`` is False
    when the position counter could not be incremented after the
    transition committed; reconciliation heals it.
    """

    registration_id: str
    slot_id: str
    position_id: str
    volunteer_id: str
    email: str
    already_checked_in: bool
    checked_in_at: datetime | None = None
    name_error: NameUpdateFailed | None = None
    counter_synced: bool = True


@dataclass(frozen=True)
class ReconcileReport:
    position_id: str
    previous: int
    actual: int

    @property
    def drift(self) -> int:
        return self.actual - self.previous

    @property
    def corrected(self) -> bool:
        return self.drift != 0
