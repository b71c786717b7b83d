"""
Aggregate maintainer - Keeps Position.volunteers_checked_in consistent.

The counter is only ever mutated through the repository's atomic
increment; it is never read into memory and written back. Reconciliation
recomputes it from the registrations themselves to heal drift left by a
check-in whose increment never ran (e.g. a crash after the transition
committed).
"""

import logging
from dataclasses import dataclass

from .exceptions import PositionNotFound
from .models import ReconcileReport
from .ports import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass
class AggregateMaintainer:
    repository: AttendanceRepository

    def increment_for_check_in(self, position_id: str) -> int | None:
        """
        Count one committed check-in against its position.

        Returns:
            New counter value, or None if the position row is missing
        """
        new_value = self.repository.increment_counter(position_id, 1)
        if new_value is None:
            logger.warning("Position %s missing, check-in not counted", position_id)
        return new_value

    def reconcile(self, position_id: str) -> ReconcileReport:
        """
        Recompute a position's counter from its checked-in registrations.

        Raises:
            PositionNotFound: Position does not exist
            StorageUnavailable: Repository could not be queried
        """
        counts = self.repository.recompute_counter(position_id)
        if counts is None:
            raise PositionNotFound(position_id)

        report = ReconcileReport(position_id=position_id, previous=counts[0], actual=counts[1])
        if report.corrected:
            logger.warning(
                "Counter drift on position %s: stored %d, actual %d",
                position_id,
                report.previous,
                report.actual,
            )
        return report

    def reconcile_all(self) -> list[ReconcileReport]:
        """Reconcile every position; positions deleted mid-pass are skipped."""
        reports = []
        for position_id in self.repository.list_position_ids():
            try:
                reports.append(self.reconcile(position_id))
            except PositionNotFound:
                logger.info("Position %s removed during reconciliation", position_id)
        return reports
