"""
Types shared by the reachability tracker and the reporter.

All timestamps are seconds on the monotonic clock the tracker was built with.
``NEVER`` (zero) is the epoch, used as the default reset time when checking
our own ports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ConfigurationError

# How long a peer must stay unreachable before it is reported (seconds)
UNREACH_GRACE_PERIOD = 120 * 60

# Expected cadence of peer probes, ours and theirs (seconds)
PING_PEERS_INTERVAL = 10.0

# Missed ping intervals tolerated before our own port is considered unreachable
PING_STALENESS_MULTIPLIER = 18

# Epoch of the monotonic clock; a reset time that suppresses nothing
NEVER = 0.0


class ReachType(Enum):
    """Channel a peer is probed on."""

    HTTP = "http"
    LMQ = "lmq"


class ReportType(Enum):
    """Status that can be reported to the external authority."""

    GOOD = "good"
    BAD = "bad"


@dataclass
class ReachRecord:
    """Failure record for a peer with at least one channel seen down."""

    first_failure: float
    last_failure: Optional[float] = None
    http_ok: bool = True
    lmq_ok: bool = True
    reported: bool = False

    def __post_init__(self):
        if self.last_failure is None:
            self.last_failure = self.first_failure

    @property
    def reachable(self) -> bool:
        return self.http_ok and self.lmq_ok

    @property
    def streak(self) -> float:
        """Length of the current unreachable streak in seconds."""
        return self.last_failure - self.first_failure

    def is_ok(self, reach_type: ReachType) -> bool:
        if reach_type == ReachType.HTTP:
            return self.http_ok
        return self.lmq_ok

    def set_ok(self, reach_type: ReachType, ok: bool) -> None:
        if reach_type == ReachType.HTTP:
            self.http_ok = ok
        else:
            self.lmq_ok = ok

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "http_ok": self.http_ok,
            "lmq_ok": self.lmq_ok,
            "first_failure": self.first_failure,
            "last_failure": self.last_failure,
            "reported": self.reported,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReachRecord":
        """Create from dictionary."""
        return cls(
            first_failure=data["first_failure"],
            last_failure=data.get("last_failure", data["first_failure"]),
            http_ok=data.get("http_ok", True),
            lmq_ok=data.get("lmq_ok", True),
            reported=data.get("reported", False),
        )


@dataclass
class ReachabilityConfig:
    """Configuration for reachability testing."""

    grace_period: float = UNREACH_GRACE_PERIOD
    ping_interval: float = PING_PEERS_INTERVAL
    ping_staleness_multiplier: int = PING_STALENESS_MULTIPLIER
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.validate()

    @property
    def max_time_without_ping(self) -> float:
        """Silence on an incoming channel after which our own port is flagged."""
        return self.ping_interval * self.ping_staleness_multiplier

    def validate(self) -> None:
        if self.grace_period < 0:
            raise ConfigurationError(
                "Grace period cannot be negative",
                config_key="grace_period",
                config_value=self.grace_period,
            )
        if self.ping_interval <= 0:
            raise ConfigurationError(
                "Ping interval must be positive",
                config_key="ping_interval",
                config_value=self.ping_interval,
            )
        if self.ping_staleness_multiplier <= 0:
            raise ConfigurationError(
                "Ping staleness multiplier must be positive",
                config_key="ping_staleness_multiplier",
                config_value=self.ping_staleness_multiplier,
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "grace_period": self.grace_period,
            "ping_interval": self.ping_interval,
            "ping_staleness_multiplier": self.ping_staleness_multiplier,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReachabilityConfig":
        """Create from dictionary."""
        return cls(
            grace_period=data.get("grace_period", UNREACH_GRACE_PERIOD),
            ping_interval=data.get("ping_interval", PING_PEERS_INTERVAL),
            ping_staleness_multiplier=data.get(
                "ping_staleness_multiplier", PING_STALENESS_MULTIPLIER
            ),
            metadata=data.get("metadata", {}),
        )
