"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Services are stateless and built per request.
"""

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAttendanceRepository
from src.config.settings import get_settings
from src.domain.aggregates import AggregateMaintainer
from src.domain.checkin import CheckInService
from src.domain.queries import SlotQueryService
from src.domain.verification import RegistrationVerifier


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresAttendanceRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresAttendanceRepository(pool, timeout=get_settings().pool_timeout_seconds)


def get_aggregate_maintainer(request: Request) -> AggregateMaintainer:
    return AggregateMaintainer(repository=get_repository(request))


def get_check_in_service(request: Request) -> CheckInService:
    """
    Create check-in service with injected dependencies.

    Wires the verifier and aggregate maintainer around one repository.
    """
    repository = get_repository(request)
    return CheckInService(
        repository=repository,
        verifier=RegistrationVerifier(repository=repository),
        aggregates=AggregateMaintainer(repository=repository),
        max_attempts=get_settings().transition_max_attempts,
    )


def get_slot_query_service(request: Request) -> SlotQueryService:
    return SlotQueryService(repository=get_repository(request))
