#!/usr/bin/env python3
"""
Reachability Testing Demo for snreach.

Walks a small simulated swarm through three hours of probing: one peer goes
dark for good, one flaps and recovers, and our own LMQ port stops receiving
pings. Time is simulated, so the demo finishes instantly.
"""

from snreach.logging import LogConfig, LogLevel, get_logger, setup_logging
from snreach.network import (
    AuthorityClient,
    ReachabilityConfig,
    ReachabilityRecords,
    ReachabilityReporter,
    ReachType,
)

logger = get_logger("reachability_demo")


class SimulatedClock:
    """Clock advanced by the demo loop."""

    def __init__(self):
        self.now = 1.0

    def __call__(self) -> float:
        return self.now


class PrintingAuthority(AuthorityClient):
    """Authority that accepts every report and prints it."""

    def report_peer(self, peer_id: str, reachable: bool) -> bool:
        status = "REACHABLE" if reachable else "UNREACHABLE"
        logger.info(f"   -> authority received: {peer_id} is {status}")
        return True


def probe(peer_id: str, minute: int) -> bool:
    """Simulated probe outcome for ``peer_id`` at ``minute``."""
    if peer_id == "sn-dead":
        return minute < 10
    if peer_id == "sn-flaky":
        return not (20 <= minute < 50)
    return True


def run_demo() -> None:
    setup_logging(LogConfig(level=LogLevel.INFO))

    clock = SimulatedClock()
    config = ReachabilityConfig(grace_period=120 * 60, ping_interval=10.0)
    records = ReachabilityRecords(config, clock=clock)
    reporter = ReachabilityReporter(records, PrintingAuthority())
    peers = ["sn-healthy", "sn-flaky", "sn-dead"]
    start = clock.now

    logger.info("Simulating 180 minutes of peer probing")
    logger.info("=" * 60)

    for minute in range(180):
        clock.now = start + minute * 60

        for peer_id in peers:
            ok = probe(peer_id, minute)
            records.record_reachable(peer_id, ReachType.HTTP, ok)
            records.record_reachable(peer_id, ReachType.LMQ, ok)

        # Other nodes keep pinging us over HTTP, LMQ goes quiet after an hour
        records.record_incoming_ping(ReachType.HTTP)
        if minute < 60:
            records.record_incoming_ping(ReachType.LMQ)

        if minute % 10 == 0:
            records.check_incoming_tests(reset_time=start)
            for outcome in reporter.report_all():
                logger.info(
                    f"minute {minute}: reported {outcome.peer_id} as "
                    f"{outcome.report_type.name} (success={outcome.success})"
                )

        retest = records.next_to_test()
        if retest is not None and minute % 30 == 0:
            logger.info(f"minute {minute}: next peer to re-test is {retest}")

    logger.info("=" * 60)
    logger.info(f"Tracker stats: {records.get_stats()}")
    logger.info(f"Reporter stats: {reporter.get_stats()}")


if __name__ == "__main__":
    run_demo()
