"""
PostgreSQL repository adapter - Implements AttendanceRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **Conditional transition**: ``UPDATE ... WHERE state = 'registered'``
   is a compare-and-swap on the registration row. PostgreSQL row locking
   guarantees exactly one concurrent UPDATE matches; the others re-check
   the predicate after the winner commits and match zero rows.

2. **Atomic counter**: ``SET volunteers_checked_in = volunteers_checked_in + %s``
   is evaluated inside the database, so concurrent increments on the same
   position never lose updates.

3. **Reconciliation**: one statement locks the position row, recounts
   checked-in registrations across its slots and writes the true value.

Every statement runs in its own short transaction. Driver and pool
failures are translated to StorageUnavailable at the connection boundary.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import StorageUnavailable
from src.domain.models import AttendanceState, Registration, SlotVolunteer

logger = logging.getLogger(__name__)


class PostgresAttendanceRepository:
    """
    Implements AttendanceRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool, timeout: float | None = None) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            timeout: Seconds to wait for a pooled connection (pool default if None)
        """
        self._pool = pool
        self._timeout = timeout

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        """Borrow a pooled connection, mapping driver errors to StorageUnavailable."""
        try:
            with self._pool.connection(timeout=self._timeout) as conn:
                yield conn
        except psycopg.Error as exc:
            # PoolTimeout is an OperationalError subclass
            logger.warning("Attendance storage error: %s", exc)
            raise StorageUnavailable(str(exc)) from exc

    def find_registration(self, slot_id: str, email: str) -> Registration | None:
        """
        Locate the registration joining a slot and a normalized email.

        Volunteer emails are stored lowercase (enforced by a CHECK
        constraint), so a plain equality match is case-insensitive for
        normalized input.
        """
        sql = """
            SELECT sv.id, sv.slot_id, sv.volunteer_id, ps.position_id,
                   v.email, sv.state, sv.checked_in_at
            FROM slot_volunteers sv
            JOIN volunteers v ON v.id = sv.volunteer_id
            JOIN position_slots ps ON ps.id = sv.slot_id
            WHERE sv.slot_id = %s AND v.email = %s
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (slot_id, email))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return None
        return Registration(
            id=row[0],
            slot_id=row[1],
            volunteer_id=row[2],
            position_id=row[3],
            email=row[4],
            state=AttendanceState(row[5]),
            checked_in_at=row[6],
        )

    def transition_if_registered(self, registration_id: str) -> datetime | None:
        """
        Compare-and-swap REGISTERED -> CHECKED_IN using database time.

        Returns:
            checked_in_at if this call committed, None if the row was not
            (or no longer) in REGISTERED state
        """
        sql = """
            UPDATE slot_volunteers
            SET state = %s, checked_in_at = NOW()
            WHERE id = %s AND state = %s
            RETURNING checked_in_at
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    AttendanceState.CHECKED_IN.value,
                    registration_id,
                    AttendanceState.REGISTERED.value,
                ),
            )
            row = cursor.fetchone()
            conn.commit()

        return row[0] if row is not None else None

    def increment_counter(self, position_id: str, delta: int) -> int | None:
        """Atomically add delta to a position counter, returning the new value."""
        sql = """
            UPDATE positions
            SET volunteers_checked_in = volunteers_checked_in + %s
            WHERE id = %s
            RETURNING volunteers_checked_in
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (delta, position_id))
            row = cursor.fetchone()
            conn.commit()

        return row[0] if row is not None else None

    def set_display_name(self, volunteer_id: str, name: str) -> bool:
        sql = "UPDATE volunteers SET name = %s WHERE id = %s"

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (name, volunteer_id))
            conn.commit()
            return cursor.rowcount == 1

    def list_slot_registrations(
        self, slot_id: str, state: AttendanceState | None = None
    ) -> list[SlotVolunteer]:
        sql = """
            SELECT sv.id, sv.volunteer_id, v.email, v.name, sv.state, sv.checked_in_at
            FROM slot_volunteers sv
            JOIN volunteers v ON v.id = sv.volunteer_id
            WHERE sv.slot_id = %(slot_id)s
              AND (%(state)s::text IS NULL OR sv.state = %(state)s::text)
            ORDER BY v.email
        """
        params = {"slot_id": slot_id, "state": state.value if state is not None else None}

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            rows = cursor.fetchall()
            conn.commit()

        return [
            SlotVolunteer(
                registration_id=row[0],
                volunteer_id=row[1],
                email=row[2],
                name=row[3],
                state=AttendanceState(row[4]),
                checked_in_at=row[5],
            )
            for row in rows
        ]

    def recompute_counter(self, position_id: str) -> tuple[int, int] | None:
        """
        Reset a position counter to the true checked-in count.

        The position row is locked for the duration of the statement so
        concurrent increments queue behind the correction.
        """
        sql = """
            WITH previous AS (
                SELECT id, volunteers_checked_in
                FROM positions
                WHERE id = %(position_id)s
                FOR UPDATE
            ),
            actual AS (
                SELECT COUNT(*)::int AS total
                FROM slot_volunteers sv
                JOIN position_slots ps ON ps.id = sv.slot_id
                WHERE ps.position_id = %(position_id)s
                  AND sv.state = %(state)s
            )
            UPDATE positions p
            SET volunteers_checked_in = actual.total
            FROM previous, actual
            WHERE p.id = previous.id
            RETURNING previous.volunteers_checked_in, actual.total
        """
        params = {"position_id": position_id, "state": AttendanceState.CHECKED_IN.value}

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()

        return (row[0], row[1]) if row is not None else None

    def list_position_ids(self) -> list[str]:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT id FROM positions ORDER BY id")
            rows = cursor.fetchall()
            conn.commit()
        return [row[0] for row in rows]


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
