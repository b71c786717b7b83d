"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory repository seeded with one position, two slots and volunteers
- Domain services wired around that repository
- A PostgreSQL pool and seeded repository (skipped without a database)
"""

from collections.abc import Generator
from datetime import datetime, timezone

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.memory import InMemoryAttendanceRepository
from src.adapters.repository.postgres import PostgresAttendanceRepository, run_migrations
from src.config.settings import get_settings
from src.domain.aggregates import AggregateMaintainer
from src.domain.checkin import CheckInService
from src.domain.models import Position, Slot, Volunteer
from src.domain.verification import RegistrationVerifier

POSITION_ID = "pos-greeter"
SLOT_A = "slot-morning"
SLOT_B = "slot-afternoon"

FIXED_NOW = datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)


def build_service(repository, max_attempts: int = 3) -> CheckInService:
    """Wire a CheckInService around a repository."""
    return CheckInService(
        repository=repository,
        verifier=RegistrationVerifier(repository=repository),
        aggregates=AggregateMaintainer(repository=repository),
        max_attempts=max_attempts,
    )


@pytest.fixture
def repository() -> InMemoryAttendanceRepository:
    """
    Repository seeded with one position split into two slots.

    alice and bob are registered to the morning slot, carol to the
    afternoon slot. dave exists but holds no registration.
    """
    repo = InMemoryAttendanceRepository(clock=lambda: FIXED_NOW)
    repo.add_position(
        Position(
            id=POSITION_ID,
            event_id="event-1",
            name="Greeter",
            start_time=datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc),
            end_time=datetime(2026, 6, 1, 17, 0, tzinfo=timezone.utc),
            capacity=10,
        )
    )
    repo.add_slot(
        Slot(
            id=SLOT_A,
            position_id=POSITION_ID,
            start_time=datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc),
            end_time=datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc),
            capacity=5,
        )
    )
    repo.add_slot(
        Slot(
            id=SLOT_B,
            position_id=POSITION_ID,
            start_time=datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc),
            end_time=datetime(2026, 6, 1, 17, 0, tzinfo=timezone.utc),
            capacity=5,
        )
    )
    for volunteer_id, email in [
        ("vol-alice", "alice@example.com"),
        ("vol-bob", "bob@example.com"),
        ("vol-carol", "carol@example.com"),
        ("vol-dave", "dave@example.com"),
    ]:
        repo.add_volunteer(Volunteer(id=volunteer_id, email=email))

    repo.add_registration(SLOT_A, "vol-alice", registration_id="reg-alice")
    repo.add_registration(SLOT_A, "vol-bob", registration_id="reg-bob")
    repo.add_registration(SLOT_B, "vol-carol", registration_id="reg-carol")
    return repo


@pytest.fixture
def service(repository: InMemoryAttendanceRepository) -> CheckInService:
    return build_service(repository)


def checked_in_count(repository: InMemoryAttendanceRepository) -> int:
    """Current stored counter of the seeded position."""
    return repository.get_position(POSITION_ID).volunteers_checked_in


@pytest.fixture(scope="session")
def pg_pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool against the configured PostgreSQL, with migrations applied.

    Tests depending on it are skipped when the database is unreachable.
    """
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=20,
        open=True,
    )
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def pg_repository(pg_pool: ConnectionPool) -> PostgresAttendanceRepository:
    """Repository over a clean database seeded like the in-memory fixture."""
    with pg_pool.connection() as conn:
        conn.execute("DELETE FROM slot_volunteers")
        conn.execute("DELETE FROM volunteers")
        conn.execute("DELETE FROM position_slots")
        conn.execute("DELETE FROM positions")
        conn.execute(
            """INSERT INTO positions (id, event_id, name, start_time, end_time, capacity)
               VALUES (%s, 'event-1', 'Greeter', %s, %s, 10)""",
            (POSITION_ID, datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc), FIXED_NOW),
        )
        for slot_id in (SLOT_A, SLOT_B):
            conn.execute(
                """INSERT INTO position_slots (id, position_id, start_time, end_time, capacity)
                   VALUES (%s, %s, %s, %s, 5)""",
                (slot_id, POSITION_ID, FIXED_NOW, FIXED_NOW),
            )
        for volunteer_id, email in [
            ("vol-alice", "alice@example.com"),
            ("vol-bob", "bob@example.com"),
            ("vol-carol", "carol@example.com"),
            ("vol-dave", "dave@example.com"),
        ]:
            conn.execute(
                "INSERT INTO volunteers (id, email) VALUES (%s, %s)", (volunteer_id, email)
            )
        for registration_id, slot_id, volunteer_id in [
            ("reg-alice", SLOT_A, "vol-alice"),
            ("reg-bob", SLOT_A, "vol-bob"),
            ("reg-carol", SLOT_B, "vol-carol"),
        ]:
            conn.execute(
                "INSERT INTO slot_volunteers (id, slot_id, volunteer_id) VALUES (%s, %s, %s)",
                (registration_id, slot_id, volunteer_id),
            )
        conn.commit()
    return PostgresAttendanceRepository(pg_pool)


def pg_checked_in_count(pool: ConnectionPool) -> int:
    """Stored counter of the seeded position in PostgreSQL."""
    with pool.connection() as conn, conn.cursor() as cursor:
        cursor.execute("SELECT volunteers_checked_in FROM positions WHERE id = %s", (POSITION_ID,))
        return cursor.fetchone()[0]
