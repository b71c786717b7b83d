"""
Domain layer - Pure business logic with zero framework imports.

This package contains the check-in consistency engine: registration
verification, the guarded attendance transition and the position
counter maintenance. It defines its own port interface for
infrastructure abstraction, ensuring true hexagonal architecture
decoupling.
"""

from .aggregates import AggregateMaintainer
from .checkin import CheckInService
from .exceptions import (
    CheckInError,
    NameUpdateFailed,
    NotRegistered,
    PositionNotFound,
    StorageUnavailable,
)
from .models import (
    AttendanceState,
    CheckInResult,
    Position,
    ReconcileReport,
    Registration,
    Slot,
    SlotVolunteer,
    Volunteer,
)
from .ports import AttendanceRepository
from .queries import SlotQueryService
from .verification import RegistrationVerifier, normalize_email

__all__ = [
    "AggregateMaintainer",
    "AttendanceRepository",
    "AttendanceState",
    "CheckInError",
    "CheckInResult",
    "CheckInService",
    "NameUpdateFailed",
    "NotRegistered",
    "Position",
    "PositionNotFound",
    "ReconcileReport",
    "Registration",
    "RegistrationVerifier",
    "Slot",
    "SlotQueryService",
    "SlotVolunteer",
    "StorageUnavailable",
    "Volunteer",
    "normalize_email",
]
