"""
Domain exceptions - Semantic error types for check-in.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class CheckInError(Exception):
    """Base class for check-in domain errors."""

    pass


class NotRegistered(CheckInError):
    """No registration joins the slot and the given email."""

    def __init__(self, slot_id: str, email: str) -> None:
        super().__init__("No registration found for this email address")
        self.slot_id = slot_id
        self.email = email


class StorageUnavailable(CheckInError):
    """Registry could not be reached or queried. Safe to retry the whole check-in."""

    pass


class NameUpdateFailed(CheckInError):
    """Display name was not persisted. Non-fatal, attached to a successful result."""

    def __init__(self, volunteer_id: str, reason: str) -> None:
        super().__init__(f"Could not update display name: {reason}")
        self.volunteer_id = volunteer_id
        self.reason = reason


class PositionNotFound(CheckInError):
    """Position does not exist (reconciliation only)."""

    pass
