"""
Check-in domain service - Attendance state machine.

This module contains the core business logic for volunteer check-in.

Attendance State Machine (Forward-Only Transitions)
===================================================

States:
- REGISTERED: Initial state, created by the registration workflow
- CHECKED_IN: Terminal state after a committed check-in

Valid Transitions:
    REGISTERED -> CHECKED_IN   (conditional write on prior state)

A repeated check-in for a CHECKED_IN registration is an idempotent
success: no transition, no counter increment. When two requests race on
the same registration, the conditional write lets exactly one commit;
the loser re-resolves the registration and takes the idempotent path.

The service holds no locks and no state between calls. All coordination
happens in the repository (conditional write + atomic counter increment).
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from .aggregates import AggregateMaintainer
from .exceptions import NameUpdateFailed, StorageUnavailable
from .models import CheckInResult, Registration
from .ports import AttendanceRepository
from .verification import RegistrationVerifier, normalize_email

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 200


@dataclass
class CheckInService:
    """
    Domain service for volunteer check-in.

    Orchestrates verification, the guarded state transition, the
    best-effort display name update and the position counter increment.
    """

    repository: AttendanceRepository
    verifier: RegistrationVerifier
    aggregates: AggregateMaintainer
    max_attempts: int = 3

    def check_in(self, slot_id: str, name: str, email: str) -> CheckInResult:
        """
        Check a registered volunteer in to a slot.

        Args:
            slot_id: Slot identifier
            name: Display name to store on the volunteer (empty to keep current)
            email: Volunteer's email (will be normalized)

        Returns:
            CheckInResult; already_checked_in is True on a repeated call

        Raises:
            NotRegistered: No registration for this slot and email
            StorageUnavailable: Repository unreachable, safe to retry
        """
        normalized_email = normalize_email(email)
        registration = self.verifier.verify(slot_id, normalized_email)

        checked_in_at, registration = self._transition(slot_id, normalized_email, registration)
        committed = checked_in_at is not None

        counter_synced = True
        if committed:
            logger.info(
                "Checked in %s to slot %s (registration %s)",
                normalized_email,
                slot_id,
                registration.id,
            )
            counter_synced = self._count(registration)
        else:
            logger.debug("Registration %s already checked in", registration.id)
            checked_in_at = registration.checked_in_at

        name_error = self._update_name(registration.volunteer_id, name)

        return CheckInResult(
            registration_id=registration.id,
            slot_id=slot_id,
            position_id=registration.position_id,
            volunteer_id=registration.volunteer_id,
            email=normalized_email,
            already_checked_in=not committed,
            checked_in_at=checked_in_at,
            name_error=name_error,
            counter_synced=counter_synced,
        )

    def _transition(
        self, slot_id: str, email: str, registration: Registration
    ) -> tuple[datetime | None, Registration]:
        """
        Attempt the REGISTERED -> CHECKED_IN conditional write.

        Returns (checked_in_at, registration) where checked_in_at is None
        when the registration was already checked in by someone else.
        """
        attempts = 0
        while not registration.is_checked_in:
            if attempts >= self.max_attempts:
                raise StorageUnavailable(
                    f"Check-in for registration {registration.id} did not settle "
                    f"after {attempts} attempts"
                )
            attempts += 1

            try:
                checked_in_at = self.repository.transition_if_registered(registration.id)
            except StorageUnavailable:
                # The write may have committed without an acknowledgement
                logger.warning(
                    "Check-in outcome unknown for registration %s; "
                    "reconcile position %s if a retry reports already checked in",
                    registration.id,
                    registration.position_id,
                )
                raise
            if checked_in_at is not None:
                return checked_in_at, registration

            # Lost the race: re-read and expect the idempotent path
            registration = self.verifier.verify(slot_id, email)

        return None, registration

    def _count(self, registration: Registration) -> bool:
        """Increment the position counter once for a committed transition."""
        try:
            self.aggregates.increment_for_check_in(registration.position_id)
        except StorageUnavailable:
            # Transition already committed; reconciliation restores the counter
            logger.exception(
                "Counter increment failed for position %s after check-in of registration %s",
                registration.position_id,
                registration.id,
            )
            return False
        return True

    def _update_name(self, volunteer_id: str, name: str) -> NameUpdateFailed | None:
        """Persist the display name. Failures are reported, never raised."""
        name = name.strip() if name else ""
        if not name:
            return None
        if len(name) > MAX_NAME_LENGTH:
            logger.warning(
                "Display name for volunteer %s exceeds %d characters", volunteer_id, MAX_NAME_LENGTH
            )
            return NameUpdateFailed(volunteer_id, f"name longer than {MAX_NAME_LENGTH} characters")

        try:
            updated = self.repository.set_display_name(volunteer_id, name)
        except StorageUnavailable as exc:
            logger.warning("Display name update failed for volunteer %s: %s", volunteer_id, exc)
            return NameUpdateFailed(volunteer_id, str(exc))

        if not updated:
            logger.warning("Display name update found no volunteer %s", volunteer_id)
            return NameUpdateFailed(volunteer_id, "volunteer not found")
        return None
