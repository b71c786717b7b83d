"""
API v1 routes.

Defines REST endpoints for volunteer check-in.

Handlers are plain ``def`` functions: FastAPI runs them in its threadpool,
so each blocking repository call occupies a worker thread rather than the
event loop, and a client disconnect never interrupts a write in flight.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import (
    get_aggregate_maintainer,
    get_check_in_service,
    get_slot_query_service,
)
from src.api.models import (
    CheckInRequest,
    CheckInResponse,
    ErrorResponse,
    ReconcileResponse,
    SlotVolunteerResponse,
)
from src.domain.aggregates import AggregateMaintainer
from src.domain.checkin import CheckInService
from src.domain.exceptions import NotRegistered, PositionNotFound, StorageUnavailable
from src.domain.models import AttendanceState
from src.domain.queries import SlotQueryService

router = APIRouter(tags=["v1"])

CHECK_IN_SUCCESS = "Successfully checked in! Thank you for volunteering."
STORAGE_UNAVAILABLE = "Storage temporarily unavailable, please retry"


@router.post(
    "/slots/{slot_id}/check-in",
    response_model=CheckInResponse,
    responses={
        404: {"model": ErrorResponse, "description": "No registration for this email"},
        422: {"description": "Validation error"},
        503: {"model": ErrorResponse, "description": "Storage unavailable, retry"},
    },
    summary="Check in a registered volunteer",
    description="Confirm a volunteer's attendance for a slot. "
    "Repeating the call for an already checked-in volunteer succeeds again "
    "without counting them twice.",
)
def check_in(
    slot_id: str,
    request_data: CheckInRequest,
    service: CheckInService = Depends(get_check_in_service),
) -> CheckInResponse:
    """
    Check a volunteer in to a slot.

    - **email**: Email the volunteer registered with (case-insensitive)
    - **name**: Display name to record (optional)
    """
    try:
        result = service.check_in(slot_id, request_data.name, request_data.email)
    except NotRegistered as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from None
    except StorageUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORAGE_UNAVAILABLE,
        ) from None

    warnings = [str(result.name_error)] if result.name_error is not None else []
    return CheckInResponse(
        message=CHECK_IN_SUCCESS,
        email=result.email,
        already_checked_in=result.already_checked_in,
        checked_in_at=result.checked_in_at,
        warnings=warnings,
    )


@router.get(
    "/slots/{slot_id}/registrations",
    response_model=list[SlotVolunteerResponse],
    responses={503: {"model": ErrorResponse, "description": "Storage unavailable, retry"}},
    summary="List volunteers registered to a slot",
)
def list_registrations(
    slot_id: str,
    state: AttendanceState | None = None,
    service: SlotQueryService = Depends(get_slot_query_service),
) -> list[SlotVolunteerResponse]:
    """List a slot's volunteers, optionally only those in the given state."""
    try:
        volunteers = service.list_registrations(slot_id, state)
    except StorageUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORAGE_UNAVAILABLE,
        ) from None

    return [
        SlotVolunteerResponse(
            registration_id=v.registration_id,
            volunteer_id=v.volunteer_id,
            email=v.email,
            name=v.name,
            state=v.state,
            checked_in_at=v.checked_in_at,
        )
        for v in volunteers
    ]


@router.post(
    "/positions/{position_id}/reconcile",
    response_model=ReconcileResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Position not found"},
        503: {"model": ErrorResponse, "description": "Storage unavailable, retry"},
    },
    summary="Recompute a position's checked-in counter",
    description="Recount the checked-in registrations of a position and overwrite its "
    "counter. A check-in committing while the recount runs may be counted twice until "
    "the next recount, so run this during quiet periods.",
)
def reconcile_position(
    position_id: str,
    maintainer: AggregateMaintainer = Depends(get_aggregate_maintainer),
) -> ReconcileResponse:
    try:
        report = maintainer.reconcile(position_id)
    except PositionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Position not found",
        ) from None
    except StorageUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORAGE_UNAVAILABLE,
        ) from None

    return ReconcileResponse(
        position_id=report.position_id,
        previous=report.previous,
        actual=report.actual,
        drift=report.drift,
        corrected=report.corrected,
    )
