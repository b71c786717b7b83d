"""
In-memory repository adapter - Implements AttendanceRepository protocol.

Thread-safe twin of the PostgreSQL adapter for tests and local runs.
A single lock stands in for the database's row-level atomicity: the
conditional transition and the counter increment each run as one
critical section.
"""

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from src.domain.exceptions import PositionNotFound
from src.domain.models import (
    AttendanceState,
    Position,
    Registration,
    Slot,
    SlotVolunteer,
    Volunteer,
)
from src.domain.verification import normalize_email


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _RegistrationRow:
    id: str
    slot_id: str
    volunteer_id: str
    state: AttendanceState = AttendanceState.REGISTERED
    checked_in_at: datetime | None = None


class InMemoryAttendanceRepository:
    """
    Implements AttendanceRepository protocol with dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Record creation (positions, slots, volunteers, registrations) belongs
    to the registration workflow; the add_* helpers exist to seed data.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._positions: dict[str, Position] = {}
        self._slots: dict[str, Slot] = {}
        self._volunteers: dict[str, Volunteer] = {}
        self._registrations: dict[str, _RegistrationRow] = {}

    # Seeding

    def add_position(self, position: Position) -> Position:
        with self._lock:
            self._positions[position.id] = position
        return position

    def add_slot(self, slot: Slot) -> Slot:
        with self._lock:
            if slot.position_id not in self._positions:
                raise PositionNotFound(slot.position_id)
            self._slots[slot.id] = slot
        return slot

    def add_volunteer(self, volunteer: Volunteer) -> Volunteer:
        volunteer = replace(volunteer, email=normalize_email(volunteer.email))
        with self._lock:
            for existing in self._volunteers.values():
                if existing.email == volunteer.email and existing.id != volunteer.id:
                    raise ValueError(f"Volunteer email already exists: {volunteer.email}")
            self._volunteers[volunteer.id] = volunteer
        return volunteer

    def add_registration(
        self, slot_id: str, volunteer_id: str, registration_id: str | None = None
    ) -> str:
        """Register a volunteer to a slot; one registration per pair."""
        with self._lock:
            if slot_id not in self._slots:
                raise KeyError(f"Unknown slot: {slot_id}")
            if volunteer_id not in self._volunteers:
                raise KeyError(f"Unknown volunteer: {volunteer_id}")
            for row in self._registrations.values():
                if row.slot_id == slot_id and row.volunteer_id == volunteer_id:
                    raise ValueError(f"Volunteer {volunteer_id} already registered to {slot_id}")

            row = _RegistrationRow(
                id=registration_id or str(uuid.uuid4()),
                slot_id=slot_id,
                volunteer_id=volunteer_id,
            )
            self._registrations[row.id] = row
        return row.id

    def get_position(self, position_id: str) -> Position | None:
        with self._lock:
            return self._positions.get(position_id)

    def get_volunteer(self, volunteer_id: str) -> Volunteer | None:
        with self._lock:
            return self._volunteers.get(volunteer_id)

    # AttendanceRepository

    def find_registration(self, slot_id: str, email: str) -> Registration | None:
        with self._lock:
            slot = self._slots.get(slot_id)
            if slot is None:
                return None
            for row in self._registrations.values():
                volunteer = self._volunteers[row.volunteer_id]
                if row.slot_id == slot_id and volunteer.email == email:
                    return Registration(
                        id=row.id,
                        slot_id=row.slot_id,
                        volunteer_id=row.volunteer_id,
                        position_id=slot.position_id,
                        email=volunteer.email,
                        state=row.state,
                        checked_in_at=row.checked_in_at,
                    )
        return None

    def transition_if_registered(self, registration_id: str) -> datetime | None:
        with self._lock:
            row = self._registrations.get(registration_id)
            if row is None or row.state != AttendanceState.REGISTERED:
                return None
            row.state = AttendanceState.CHECKED_IN
            row.checked_in_at = self._clock()
            return row.checked_in_at

    def increment_counter(self, position_id: str, delta: int) -> int | None:
        with self._lock:
            position = self._positions.get(position_id)
            if position is None:
                return None
            position = replace(
                position, volunteers_checked_in=position.volunteers_checked_in + delta
            )
            self._positions[position_id] = position
            return position.volunteers_checked_in

    def set_display_name(self, volunteer_id: str, name: str) -> bool:
        with self._lock:
            volunteer = self._volunteers.get(volunteer_id)
            if volunteer is None:
                return False
            self._volunteers[volunteer_id] = replace(volunteer, name=name)
            return True

    def list_slot_registrations(
        self, slot_id: str, state: AttendanceState | None = None
    ) -> list[SlotVolunteer]:
        with self._lock:
            rows = [
                SlotVolunteer(
                    registration_id=row.id,
                    volunteer_id=row.volunteer_id,
                    email=self._volunteers[row.volunteer_id].email,
                    name=self._volunteers[row.volunteer_id].name,
                    state=row.state,
                    checked_in_at=row.checked_in_at,
                )
                for row in self._registrations.values()
                if row.slot_id == slot_id and (state is None or row.state == state)
            ]
        return sorted(rows, key=lambda r: r.email)

    def recompute_counter(self, position_id: str) -> tuple[int, int] | None:
        with self._lock:
            position = self._positions.get(position_id)
            if position is None:
                return None
            actual = sum(
                1
                for row in self._registrations.values()
                if row.state == AttendanceState.CHECKED_IN
                and self._slots[row.slot_id].position_id == position_id
            )
            self._positions[position_id] = replace(position, volunteers_checked_in=actual)
            return position.volunteers_checked_in, actual

    def list_position_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._positions)
