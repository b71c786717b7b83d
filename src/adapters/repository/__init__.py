"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryAttendanceRepository
from .postgres import PostgresAttendanceRepository, run_migrations

__all__ = ["InMemoryAttendanceRepository", "PostgresAttendanceRepository", "run_migrations"]
