"""
Peer reachability tracking.

Keeps a failure record for every peer that has failed at least one HTTP or
LMQ probe since it was last forgotten, and decides when such a peer should be
reported to the external authority. Peers without a record are considered
reachable and are never reported.

The tracker also watches pings coming *in* from other nodes: if nobody has
pinged us over a channel for long enough, our own port on that channel is
probably unreachable from the outside.

Probing and reporting run on independent schedules, so every public method
does its work under the tracker lock. Log lines are written after the lock is
released.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..logging import LogLevel, get_logger
from .reachability_types import (
    NEVER,
    ReachabilityConfig,
    ReachRecord,
    ReachType,
    ReportType,
)

logger = get_logger(__name__)


def _latest(current: Optional[float], timestamp: float) -> float:
    return timestamp if current is None else max(current, timestamp)


class ReachabilityRecords:
    """Failure records for unreachable peers plus our own port health."""

    def __init__(
        self,
        config: Optional[ReachabilityConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize reachability records."""
        self.config = config or ReachabilityConfig()
        self.clock = clock
        self.offline_nodes: Dict[str, ReachRecord] = {}

        # Our own ports as seen through incoming pings
        self.http_ok = True
        self.lmq_ok = True
        self.latest_incoming_http: Optional[float] = None
        self.latest_incoming_lmq: Optional[float] = None

        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self.offline_nodes)

    def __contains__(self, peer_id: str) -> bool:
        with self._lock:
            return peer_id in self.offline_nodes

    def record_reachable(self, peer_id: str, reach_type: ReachType, ok: bool) -> None:
        """Record the outcome of a probe to ``peer_id`` over ``reach_type``.

        A successful probe never removes a record, even when both channels are
        healthy again: the ``reported`` flag has to survive a short recovery.
        Records are only dropped through :meth:`expire`.
        """
        logger.trace("record_reachable")
        notes = []

        with self._lock:
            record = self.offline_nodes.get(peer_id)

            if record is None:
                if ok:
                    notes.append(
                        f"[reach] Node is reachable via {reach_type.name} (no record) {peer_id}"
                    )
                else:
                    notes.append(
                        f"[reach] Adding a new node to UNREACHABLE via {reach_type.name}: {peer_id}"
                    )
                    record = ReachRecord(first_failure=self.clock())
                    record.set_ok(reach_type, False)
                    self.offline_nodes[peer_id] = record
            else:
                reachable_before = record.reachable

                notes.append(
                    f"[reach] node {peer_id} is {'OK' if ok else 'UNREACHABLE'} via {reach_type.name}"
                )
                record.set_ok(reach_type, ok)

                if not ok:
                    notes.append(
                        f"[reach] Node is ALREADY known to be UNREACHABLE: {peer_id}, "
                        f"http_ok: {record.http_ok}, lmq_ok: {record.lmq_ok}"
                    )

                    now = self.clock()

                    if reachable_before:
                        # New streak after a full recovery
                        record.first_failure = now

                    record.last_failure = now

        for message in notes:
            logger.debug(message)

    def should_report_as(self, peer_id: str, report_type: ReportType) -> bool:
        """Decide whether ``peer_id`` should be reported as ``report_type``."""
        logger.trace("should_report_as")
        notes = []

        with self._lock:
            decision = self._decide(peer_id, report_type, notes)

        for message in notes:
            logger.debug(message)
        return decision

    def _decide(self, peer_id: str, report_type: ReportType, notes: List[str]) -> bool:
        record = self.offline_nodes.get(peer_id)

        if record is None:
            # No record means we already consider this node reachable
            return False

        reachable = record.reachable

        if report_type == ReportType.GOOD:
            return reachable

        if reachable:
            return False

        elapsed = record.streak
        notes.append(f"[reach] First time failed {int(elapsed // 60)} minutes ago")

        if record.reported:
            # TODO: report again after an authority restart, which resets its flags
            notes.append(f"[reach]  Already reported node: {peer_id}")
            return False

        if elapsed > self.config.grace_period:
            notes.append(f"[reach] Will REPORT {peer_id} to the authority!")
            return True

        return False

    def record_incoming_ping(
        self, reach_type: ReachType, at: Optional[float] = None
    ) -> None:
        """Note that another node just pinged us over ``reach_type``.

        Any ``at`` counts as a real ping, zero included.
        """
        with self._lock:
            timestamp = self.clock() if at is None else at

            if reach_type == ReachType.HTTP:
                self.latest_incoming_http = _latest(self.latest_incoming_http, timestamp)
            else:
                self.latest_incoming_lmq = _latest(self.latest_incoming_lmq, timestamp)

    def check_incoming_tests(self, reset_time: float = NEVER) -> None:
        """Re-derive our own port health from the most recent incoming pings.

        ``reset_time`` acts as if a ping was received at that moment, which
        lets callers hold off alarms for a while after startup or a reload.
        Warnings are emitted once the lock is released.
        """
        with self._lock:
            now = self.clock()
            self.http_ok, http_notes = self._check_channel(
                "http", self.latest_incoming_http, self.http_ok, reset_time, now
            )
            self.lmq_ok, lmq_notes = self._check_channel(
                "lmq", self.latest_incoming_lmq, self.lmq_ok, reset_time, now
            )

        for level, message in http_notes + lmq_notes:
            logger.log(level, message)

    def _check_channel(
        self,
        name: str,
        latest: Optional[float],
        was_ok: bool,
        reset_time: float,
        now: float,
    ) -> Tuple[bool, List[Tuple[LogLevel, str]]]:
        last = reset_time if latest is None else max(reset_time, latest)
        elapsed = now - last

        notes = [(LogLevel.DEBUG, f"Last reset or pinged via {name}: {int(elapsed)}s")]

        if elapsed > self.config.max_time_without_ping:
            if latest is None:
                notes.append((LogLevel.WARNING, f"Have NEVER received {name} pings!"))
            else:
                notes.append(
                    (
                        LogLevel.WARNING,
                        f"Have not received {name} pings for a long time! "
                        f"Last time was: {int(elapsed // 60)} mins ago.",
                    )
                )
            notes.append(
                (
                    LogLevel.WARNING,
                    f"Please check your {name} port. Not being reachable over "
                    f"{name} may result in a deregistration!",
                )
            )
            return False, notes

        if not was_ok:
            notes.append((LogLevel.INFO, f"{name.capitalize()} port is back to OK"))

        return True, notes

    def next_to_test(self) -> Optional[str]:
        """Pick the tracked peer whose last failure is the oldest."""
        with self._lock:
            if not self.offline_nodes:
                return None

            peer_id = min(
                self.offline_nodes,
                key=lambda key: self.offline_nodes[key].last_failure,
            )

        logger.debug(f"Selecting to be re-tested: {peer_id}")
        return peer_id

    def expire(self, peer_id: str) -> bool:
        """Forget ``peer_id``. Returns whether a record was removed."""
        with self._lock:
            erased = self.offline_nodes.pop(peer_id, None) is not None

        if erased:
            logger.debug(f"[reach] Removed entry for {peer_id}")
        return erased

    def expire_if_reachable(self, peer_id: str) -> bool:
        """Forget ``peer_id`` only if both of its channels are still healthy.

        A failure recorded after a GOOD verdict was taken starts a new streak
        that has to be kept.
        """
        with self._lock:
            record = self.offline_nodes.get(peer_id)
            if record is None:
                return False
            erased = record.reachable
            if erased:
                del self.offline_nodes[peer_id]

        if erased:
            logger.debug(f"[reach] Removed entry for {peer_id}")
        else:
            logger.debug(f"[reach] Keeping entry for {peer_id}, it failed again")
        return erased

    def set_reported(self, peer_id: str) -> None:
        """Mark ``peer_id`` as already reported unreachable."""
        with self._lock:
            record = self.offline_nodes.get(peer_id)
            if record is not None:
                record.reported = True

    def get_record(self, peer_id: str) -> Optional[ReachRecord]:
        """Return a copy of the record for ``peer_id``, if any."""
        with self._lock:
            record = self.offline_nodes.get(peer_id)
            if record is None:
                return None
            return ReachRecord.from_dict(record.to_dict())

    def tracked_peers(self) -> List[str]:
        with self._lock:
            return list(self.offline_nodes)

    def self_status(self) -> Dict[str, Any]:
        """Our own port health and seconds since the last incoming pings."""
        with self._lock:
            now = self.clock()
            return {
                "http_ok": self.http_ok,
                "lmq_ok": self.lmq_ok,
                "seconds_since_http_ping": (
                    None
                    if self.latest_incoming_http is None
                    else now - self.latest_incoming_http
                ),
                "seconds_since_lmq_ping": (
                    None
                    if self.latest_incoming_lmq is None
                    else now - self.latest_incoming_lmq
                ),
            }

    def get_stats(self) -> Dict[str, Any]:
        """Get reachability statistics."""
        with self._lock:
            records = list(self.offline_nodes.values())
            return {
                "tracked_peers": len(records),
                "reported_peers": sum(1 for r in records if r.reported),
                "recovered_peers": sum(1 for r in records if r.reachable),
                "pending_reports": sum(
                    1
                    for r in records
                    if not r.reachable
                    and not r.reported
                    and r.streak > self.config.grace_period
                ),
                "self": self.self_status(),
            }
