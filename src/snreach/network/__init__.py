"""
snreach peer reachability testing.

This package tracks which service-node peers fail their HTTP and LMQ probes,
decides when they should be reported to the authority, and watches incoming
pings to tell whether our own ports are reachable.
"""

from .reachability import ReachabilityRecords
from .reachability_types import (
    NEVER,
    PING_PEERS_INTERVAL,
    PING_STALENESS_MULTIPLIER,
    UNREACH_GRACE_PERIOD,
    ReachabilityConfig,
    ReachRecord,
    ReachType,
    ReportType,
)
from .reporter import AuthorityClient, ReachabilityReporter, ReportOutcome

__all__ = [
    # Tracker
    "ReachabilityRecords",
    "ReachabilityConfig",
    "ReachRecord",
    "ReachType",
    "ReportType",
    "NEVER",
    "UNREACH_GRACE_PERIOD",
    "PING_PEERS_INTERVAL",
    "PING_STALENESS_MULTIPLIER",
    # Reporting
    "AuthorityClient",
    "ReachabilityReporter",
    "ReportOutcome",
]
