"""snreach error handling.

Exception hierarchy shared by the reachability tracker, its configuration
and the reporter that talks to the external authority.
"""

from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    NetworkError,
    SnReachError,
)

__all__ = [
    "SnReachError",
    "ConfigurationError",
    "NetworkError",
    "ErrorSeverity",
    "ErrorCategory",
]
