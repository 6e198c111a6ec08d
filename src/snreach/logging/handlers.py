"""Log handlers for snreach.

Console output for daemons, and an in-memory ring buffer for inspecting the
tracker's decisions after the fact.
"""

import sys
import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from .core import LogEntry, LogHandler, LogLevel


class ConsoleHandler(LogHandler):
    """Console log handler."""

    def __init__(self, stream: Any = None):
        super().__init__()
        # None means whatever sys.stderr is at the time of writing
        self.stream = stream

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to console."""
        with self._lock:
            stream = self.stream or sys.stderr
            stream.write(self.format_entry(entry) + "\n")
            stream.flush()

    def close(self) -> None:
        """Flush the stream. Standard streams are never closed here."""
        with self._lock:
            (self.stream or sys.stderr).flush()


class MemoryHandler(LogHandler):
    """Keeps the most recent ``max_size`` entries in memory."""

    def __init__(self, max_size: int = 1000):
        super().__init__()
        self.max_size = max_size
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=max_size)

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to memory."""
        with self._lock:
            self.buffer.append(
                {
                    "timestamp": entry.timestamp,
                    "level": entry.level.value,
                    "message": entry.message,
                    "logger_name": entry.logger_name,
                    "formatted": self.format_entry(entry),
                }
            )

    def get_logs(self, level: Optional[LogLevel] = None) -> List[Dict[str, Any]]:
        """Get buffered logs, optionally only those at ``level``."""
        with self._lock:
            if level is None:
                return list(self.buffer)
            return [log for log in self.buffer if log["level"] == level.value]

    def get_messages(self, level: Optional[LogLevel] = None) -> List[str]:
        return [log["message"] for log in self.get_logs(level)]

    def clear_logs(self) -> None:
        """Clear all logs from memory."""
        with self._lock:
            self.buffer.clear()

    def close(self) -> None:
        """Close handler."""
        self.clear_logs()
