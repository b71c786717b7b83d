"""
Slot queries - Read-only listing of volunteers registered to a slot.
"""

from dataclasses import dataclass

from .models import AttendanceState, SlotVolunteer
from .ports import AttendanceRepository


@dataclass
class SlotQueryService:
    repository: AttendanceRepository

    def list_registrations(
        self, slot_id: str, state: AttendanceState | None = None
    ) -> list[SlotVolunteer]:
        """List a slot's volunteers ordered by email, optionally filtered by state."""
        return self.repository.list_slot_registrations(slot_id, state)

    def pending(self, slot_id: str) -> list[SlotVolunteer]:
        """Volunteers still awaiting check-in."""
        return self.list_registrations(slot_id, AttendanceState.REGISTERED)
