"""
Reporting of peer reachability to the external authority.

The reporter walks the peers the tracker knows about and forwards GOOD or BAD
verdicts through an :class:`AuthorityClient`. A GOOD report that lands lets us
forget the peer unless it failed again meanwhile; a BAD report that lands is
remembered so it is not repeated. Failed deliveries leave the tracker untouched
and are retried next cycle.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import NetworkError
from ..logging import LogContext, get_logger
from .reachability import ReachabilityRecords
from .reachability_types import ReportType

logger = get_logger(__name__)


class AuthorityClient(ABC):
    """Channel to the authority that acts on reachability reports."""

    @abstractmethod
    def report_peer(self, peer_id: str, reachable: bool) -> bool:
        """Send one status update.

        Returns True when the authority accepted it. Implementations raise
        :class:`NetworkError` when the authority cannot be reached.
        """
        pass


@dataclass
class ReportOutcome:
    """Result of one attempted report."""

    peer_id: str
    report_type: ReportType
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "peer_id": self.peer_id,
            "report_type": self.report_type.value,
            "success": self.success,
            "error": self.error,
        }


class ReachabilityReporter:
    """Forwards tracker decisions to the authority."""

    def __init__(self, records: ReachabilityRecords, client: AuthorityClient):
        """Initialize reachability reporter."""
        self.records = records
        self.client = client
        self._stats = {
            ReportType.GOOD: {"attempted": 0, "succeeded": 0, "failed": 0},
            ReportType.BAD: {"attempted": 0, "succeeded": 0, "failed": 0},
        }
        self._lock = threading.Lock()

    def report_peer(self, peer_id: str) -> Optional[ReportOutcome]:
        """Report ``peer_id`` if the tracker says so; None when nothing is due."""
        if self.records.should_report_as(peer_id, ReportType.GOOD):
            report_type = ReportType.GOOD
        elif self.records.should_report_as(peer_id, ReportType.BAD):
            report_type = ReportType.BAD
        else:
            return None

        reachable = report_type == ReportType.GOOD
        context = LogContext(component="reporter", peer_id=peer_id)
        failure = None

        try:
            success = self.client.report_peer(peer_id, reachable)
        except NetworkError as e:
            success = False
            failure = e

        self._count(report_type, success)

        if not success:
            logger.warning(
                f"Could not report node {peer_id} as {report_type.name}",
                context=context,
                exception=failure,
            )
            error = failure.message if failure else None
            return ReportOutcome(peer_id, report_type, False, error)

        logger.debug(
            f"Successfully reported node {peer_id} as {report_type.name}",
            context=context,
        )

        if reachable:
            # The peer may have failed again while the report was in flight
            self.records.expire_if_reachable(peer_id)
        else:
            # A recovery in flight keeps the flag; GOOD goes out next cycle
            self.records.set_reported(peer_id)

        return ReportOutcome(peer_id, report_type, True)

    def report_all(self) -> List[ReportOutcome]:
        """Run one reporting cycle over every tracked peer."""
        outcomes = []
        for peer_id in self.records.tracked_peers():
            outcome = self.report_peer(peer_id)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def _count(self, report_type: ReportType, success: bool) -> None:
        with self._lock:
            stats = self._stats[report_type]
            stats["attempted"] += 1
            stats["succeeded" if success else "failed"] += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get report counters per report type."""
        with self._lock:
            return {
                report_type.value: dict(counts)
                for report_type, counts in self._stats.items()
            }
