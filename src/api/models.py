"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.models import AttendanceState


class CheckInRequest(BaseModel):
    """Request model for volunteer check-in."""

    email: str = Field(
        ..., max_length=320, description="Email the volunteer registered with (case-insensitive)"
    )
    name: str = Field(
        "",
        description="Display name to store on the volunteer (empty keeps the current name)",
    )


class CheckInResponse(BaseModel):
    """Response model for successful check-in."""

    message: str
    email: str
    already_checked_in: bool
    checked_in_at: datetime | None = None
    warnings: list[str] = Field(default_factory=list)


class SlotVolunteerResponse(BaseModel):
    """A volunteer registered to a slot."""

    registration_id: str
    volunteer_id: str
    email: str
    name: str
    state: AttendanceState
    checked_in_at: datetime | None = None


class ReconcileResponse(BaseModel):
    """Result of recomputing a position's checked-in counter."""

    position_id: str
    previous: int
    actual: int
    drift: int
    corrected: bool


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
