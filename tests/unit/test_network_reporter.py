"""Test cases for network/reporter.py module."""

from unittest.mock import Mock

import pytest

from snreach.errors import NetworkError
from snreach.logging import LogLevel, TextFormatter
from snreach.network.reachability import ReachabilityRecords
from snreach.network.reachability_types import (
    UNREACH_GRACE_PERIOD,
    ReachType,
    ReportType,
)
from snreach.network.reporter import (
    AuthorityClient,
    ReachabilityReporter,
    ReportOutcome,
)


class RecordingClient(AuthorityClient):
    """Authority client that remembers every report."""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.reports = []

    def report_peer(self, peer_id: str, reachable: bool) -> bool:
        self.reports.append((peer_id, reachable))
        return self.accept


@pytest.fixture
def records(clock):
    return ReachabilityRecords(clock=clock)


@pytest.fixture
def client():
    return RecordingClient()


@pytest.fixture
def reporter(records, client):
    return ReachabilityReporter(records, client)


def make_overdue(records, clock, peer_id):
    records.record_reachable(peer_id, ReachType.HTTP, False)
    clock.advance(UNREACH_GRACE_PERIOD + 1)
    records.record_reachable(peer_id, ReachType.HTTP, False)


class TestAuthorityClient:
    """Test the AuthorityClient interface."""

    def test_cannot_instantiate_abstract_client(self):
        """Test AuthorityClient is abstract."""
        with pytest.raises(TypeError):
            AuthorityClient()


class TestReportOutcome:
    """Test ReportOutcome dataclass."""

    def test_to_dict(self):
        """Test ReportOutcome conversion."""
        outcome = ReportOutcome("peer1", ReportType.BAD, False, "timeout")

        assert outcome.to_dict() == {
            "peer_id": "peer1",
            "report_type": "bad",
            "success": False,
            "error": "timeout",
        }


class TestReachabilityReporter:
    """Test ReachabilityReporter."""

    def test_nothing_due_for_unknown_peer(self, reporter, client):
        """Test unknown peers are never reported."""
        assert reporter.report_peer("peer1") is None
        assert client.reports == []

    def test_nothing_due_within_grace_period(self, reporter, records, client):
        """Test a fresh failure is not reported."""
        records.record_reachable("peer1", ReachType.HTTP, False)

        assert reporter.report_peer("peer1") is None
        assert client.reports == []

    def test_bad_report_marks_reported(self, reporter, records, client, clock):
        """Test a delivered BAD report sets the reported flag."""
        make_overdue(records, clock, "peer1")

        outcome = reporter.report_peer("peer1")

        assert outcome == ReportOutcome("peer1", ReportType.BAD, True)
        assert client.reports == [("peer1", False)]
        assert records.get_record("peer1").reported is True
        assert reporter.report_peer("peer1") is None
        assert len(client.reports) == 1

    def test_good_report_expires_record(self, reporter, records, client):
        """Test a delivered GOOD report forgets the peer."""
        records.record_reachable("peer1", ReachType.LMQ, False)
        records.record_reachable("peer1", ReachType.LMQ, True)

        outcome = reporter.report_peer("peer1")

        assert outcome.report_type == ReportType.GOOD
        assert outcome.success is True
        assert client.reports == [("peer1", True)]
        assert "peer1" not in records

    def test_rejected_report_leaves_state(self, records, clock):
        """Test a refused report is retried on the next cycle."""
        client = RecordingClient(accept=False)
        reporter = ReachabilityReporter(records, client)
        make_overdue(records, clock, "peer1")

        outcome = reporter.report_peer("peer1")

        assert outcome.success is False
        assert outcome.error is None
        assert records.get_record("peer1").reported is False
        assert reporter.report_peer("peer1").report_type == ReportType.BAD
        assert len(client.reports) == 2

    def test_network_error_is_captured(self, records, clock):
        """Test NetworkError from the client becomes a failed outcome."""
        client = Mock(spec=AuthorityClient)
        client.report_peer.side_effect = NetworkError("authority unreachable")
        reporter = ReachabilityReporter(records, client)
        records.record_reachable("peer1", ReachType.HTTP, False)
        records.record_reachable("peer1", ReachType.HTTP, True)

        outcome = reporter.report_peer("peer1")

        assert outcome.success is False
        assert outcome.error == "authority unreachable"
        assert "peer1" in records

    def test_failed_delivery_is_logged_with_peer(self, records, captured_logs):
        """Test the failure warning names the peer and the delivery error."""
        captured_logs.set_formatter(TextFormatter())
        client = Mock(spec=AuthorityClient)
        client.report_peer.side_effect = NetworkError("authority unreachable")
        reporter = ReachabilityReporter(records, client)
        records.record_reachable("peer1", ReachType.HTTP, False)
        records.record_reachable("peer1", ReachType.HTTP, True)

        reporter.report_peer("peer1")

        warnings = captured_logs.get_logs(LogLevel.WARNING)
        assert [log["message"] for log in warnings] == ["Could not report node peer1 as GOOD"]
        assert "component=reporter peer=peer1" in warnings[0]["formatted"]
        assert warnings[0]["formatted"].endswith(
            "(NetworkError: authority unreachable | Retryable: Yes)"
        )

    def test_other_errors_propagate(self, records, clock):
        """Test unexpected client errors are not swallowed."""
        client = Mock(spec=AuthorityClient)
        client.report_peer.side_effect = ValueError("bad key")
        reporter = ReachabilityReporter(records, client)
        make_overdue(records, clock, "peer1")

        with pytest.raises(ValueError):
            reporter.report_peer("peer1")

    def test_report_all(self, reporter, records, client, clock):
        """Test one cycle reports every due peer and skips the rest."""
        records.record_reachable("overdue", ReachType.HTTP, False)
        records.record_reachable("recovered", ReachType.LMQ, False)
        records.record_reachable("recovered", ReachType.LMQ, True)
        clock.advance(UNREACH_GRACE_PERIOD + 1)
        records.record_reachable("overdue", ReachType.HTTP, False)
        records.record_reachable("fresh", ReachType.HTTP, False)

        outcomes = reporter.report_all()

        assert sorted((o.peer_id, o.report_type) for o in outcomes) == [
            ("overdue", ReportType.BAD),
            ("recovered", ReportType.GOOD),
        ]
        assert sorted(records.tracked_peers()) == ["fresh", "overdue"]

    def test_stats(self, records, clock):
        """Test report counters."""
        client = Mock(spec=AuthorityClient)
        client.report_peer.side_effect = [True, NetworkError("down")]
        reporter = ReachabilityReporter(records, client)
        make_overdue(records, clock, "peer1")
        records.record_reachable("peer2", ReachType.HTTP, False)
        records.record_reachable("peer2", ReachType.HTTP, True)

        reporter.report_peer("peer1")
        reporter.report_peer("peer2")

        assert reporter.get_stats() == {
            "good": {"attempted": 1, "succeeded": 0, "failed": 1},
            "bad": {"attempted": 1, "succeeded": 1, "failed": 0},
        }


class InterleavingClient(AuthorityClient):
    """Authority client that records a reachability result mid-report."""

    def __init__(self, records, clock, reach_type, ok):
        self.records = records
        self.clock = clock
        self.reach_type = reach_type
        self.ok = ok

    def report_peer(self, peer_id: str, reachable: bool) -> bool:
        self.clock.advance(5)
        self.records.record_reachable(peer_id, self.reach_type, self.ok)
        return True


class TestReportsInFlight:
    """Test probes recorded while the authority call is running."""

    def test_failure_during_good_report_keeps_record(self, records, clock):
        """Test a new failure is not erased by the GOOD report that preceded it."""
        records.record_reachable("peer1", ReachType.HTTP, False)
        records.record_reachable("peer1", ReachType.HTTP, True)
        client = InterleavingClient(records, clock, ReachType.HTTP, False)
        reporter = ReachabilityReporter(records, client)

        outcome = reporter.report_peer("peer1")

        assert outcome == ReportOutcome("peer1", ReportType.GOOD, True)
        record = records.get_record("peer1")
        assert record is not None
        assert record.http_ok is False
        assert record.first_failure == clock.now
        assert record.last_failure == clock.now
        assert record.reported is False

    def test_new_streak_is_reported_after_grace_period(self, records, clock):
        """Test the kept streak leads to a BAD report once it is overdue."""
        records.record_reachable("peer1", ReachType.LMQ, False)
        records.record_reachable("peer1", ReachType.LMQ, True)
        reporter = ReachabilityReporter(
            records, InterleavingClient(records, clock, ReachType.LMQ, False)
        )
        reporter.report_peer("peer1")

        clock.advance(UNREACH_GRACE_PERIOD + 1)
        records.record_reachable("peer1", ReachType.LMQ, False)
        reporter.client = RecordingClient()

        assert reporter.report_peer("peer1").report_type == ReportType.BAD
        assert records.get_record("peer1").reported is True

    def test_recovery_during_bad_report_sends_good_next(self, records, clock):
        """Test a recovery during a BAD report keeps the flag and reports GOOD next."""
        make_overdue(records, clock, "peer1")
        client = InterleavingClient(records, clock, ReachType.HTTP, True)
        reporter = ReachabilityReporter(records, client)

        outcome = reporter.report_peer("peer1")

        assert outcome == ReportOutcome("peer1", ReportType.BAD, True)
        record = records.get_record("peer1")
        assert record.reported is True
        assert record.reachable is True

        reporter.client = RecordingClient()
        assert reporter.report_peer("peer1").report_type == ReportType.GOOD
        assert "peer1" not in records
