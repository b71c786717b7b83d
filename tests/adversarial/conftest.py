"""
Shared fixtures for adversarial tests.

Provides common infrastructure for concurrent check-in attacks against
both repository adapters.
"""

import pytest

from src.adapters.repository.memory import InMemoryAttendanceRepository
from src.adapters.repository.postgres import PostgresAttendanceRepository
from src.domain.models import Volunteer

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial

CROWD_SIZE = 12


def crowd_emails() -> list[str]:
    return [f"crowd{i:02d}@example.com" for i in range(CROWD_SIZE)]


@pytest.fixture(params=["memory", "postgres"])
def crowded_repository(request: pytest.FixtureRequest, repository: InMemoryAttendanceRepository):
    """
    Seeded repository plus CROWD_SIZE extra volunteers spread across both slots.

    Parametrized over the in-memory and PostgreSQL adapters; the PostgreSQL
    variant is skipped when no database is reachable.
    """
    if request.param == "memory":
        for i, email in enumerate(crowd_emails()):
            repository.add_volunteer(Volunteer(id=f"vol-crowd{i:02d}", email=email))
            slot_id = "slot-morning" if i % 2 == 0 else "slot-afternoon"
            repository.add_registration(slot_id, f"vol-crowd{i:02d}", f"reg-crowd{i:02d}")
        return repository

    pg_repository: PostgresAttendanceRepository = request.getfixturevalue("pg_repository")
    pool = request.getfixturevalue("pg_pool")
    with pool.connection() as conn:
        for i, email in enumerate(crowd_emails()):
            slot_id = "slot-morning" if i % 2 == 0 else "slot-afternoon"
            conn.execute(
                "INSERT INTO volunteers (id, email) VALUES (%s, %s)", (f"vol-crowd{i:02d}", email)
            )
            conn.execute(
                "INSERT INTO slot_volunteers (id, slot_id, volunteer_id) VALUES (%s, %s, %s)",
                (f"reg-crowd{i:02d}", slot_id, f"vol-crowd{i:02d}"),
            )
        conn.commit()
    return pg_repository
