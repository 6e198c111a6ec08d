"""Exception hierarchy for snreach.

The reachability tracker itself never raises: unknown peers resolve to
defined no-op or ``False`` results. Errors only surface at the edges, when a
configuration is rejected or when the external authority cannot be reached.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    NETWORK = "network"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class SnReachError(Exception):
    """Base exception for all snreach errors."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:
        parts = [self.message]

        if self.severity != ErrorSeverity.MEDIUM:
            parts.append(f"Severity: {self.severity.value}")

        if self.retryable:
            parts.append("Retryable: Yes")

        return " | ".join(parts)


class ConfigurationError(SnReachError):
    """Raised when a reachability setting is out of range."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
        )
        self.config_key = config_key
        self.config_value = config_value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["config_key"] = self.config_key
        data["config_value"] = self.config_value
        return data


class NetworkError(SnReachError):
    """Raised by authority clients when a status update cannot be delivered."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        retryable: bool = True,
    ):
        super().__init__(message, category=ErrorCategory.NETWORK, retryable=retryable)
        self.endpoint = endpoint

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["endpoint"] = self.endpoint
        return data
