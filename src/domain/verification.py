"""
Registration verifier - Resolves a claimed identity to a slot registration.
"""

from dataclasses import dataclass

from .exceptions import NotRegistered
from .models import Registration
from .ports import AttendanceRepository


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class RegistrationVerifier:
    """Confirms that an email holds a registration for a given slot."""

    repository: AttendanceRepository

    def verify(self, slot_id: str, email: str) -> Registration:
        """
        Locate the unique registration for (slot, email).

        Args:
            slot_id: Slot identifier
            email: Email as typed by the volunteer (will be normalized)

        Returns:
            Registration with its current attendance state

        Raises:
            NotRegistered: No registration exists for that slot and email
            StorageUnavailable: Repository could not be queried
        """
        normalized_email = normalize_email(email)
        if not normalized_email:
            raise NotRegistered(slot_id, normalized_email)

        registration = self.repository.find_registration(slot_id, normalized_email)
        if registration is None:
            raise NotRegistered(slot_id, normalized_email)
        return registration
