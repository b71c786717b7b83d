"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interface (port) that the domain requires
from the attendance registry. Adapters implement this protocol.
"""

from datetime import datetime
from typing import Protocol

from .models import AttendanceState, Registration, SlotVolunteer


class AttendanceRepository(Protocol):
    """
    Port interface for attendance persistence.

    Every method may block on storage I/O. Implementations raise
    StorageUnavailable when the store cannot be reached or queried.
    """

    def find_registration(self, slot_id: str, email: str) -> Registration | None:
        """
        Locate the registration joining a slot and a volunteer email.

        Args:
            slot_id: Slot identifier
            email: Normalized email address

        Returns:
            Registration with its current state, or None if not registered
        """
        ...

    def transition_if_registered(self, registration_id: str) -> datetime | None:
        """
        Atomically move a registration from REGISTERED to CHECKED_IN.

        Conditional write: only succeeds if the prior state is still
        REGISTERED. Sets checked_in_at to the storage clock.

        Returns:
            Commit timestamp if this call committed the transition, None otherwise
        """
        ...

    def increment_counter(self, position_id: str, delta: int) -> int | None:
        """
        Atomically add delta to a position's volunteers_checked_in.

        Returns:
            New counter value, or None if the position does not exist
        """
        ...

    def set_display_name(self, volunteer_id: str, name: str) -> bool:
        """
        Update a volunteer's display name.

        Returns:
            True if updated, False if the volunteer does not exist
        """
        ...

    def list_slot_registrations(
        self, slot_id: str, state: AttendanceState | None = None
    ) -> list[SlotVolunteer]:
        """List registrations for a slot ordered by email, optionally by state."""
        ...

    def recompute_counter(self, position_id: str) -> tuple[int, int] | None:
        """
        Reset a position's counter to the true count of CHECKED_IN registrations.

        Returns:
            (previous, actual) counter values, or None if the position does not exist
        """
        ...

    def list_position_ids(self) -> list[str]:
        """Return the ids of all positions."""
        ...
