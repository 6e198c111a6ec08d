"""Log formatters for snreach."""

import time
from typing import Optional

from .core import LogContext, LogEntry, LogFormatter


class TextFormatter(LogFormatter):
    """Human readable single-line formatter."""

    def __init__(
        self,
        format_string: Optional[str] = None,
        include_context: bool = True,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.include_context = include_context
        self.timestamp_format = timestamp_format
        self.format_string = format_string or "%(timestamp)s [%(level)s] %(logger)s: %(message)s"

    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        formatted = self.format_string % {
            "timestamp": time.strftime(self.timestamp_format, time.gmtime(entry.timestamp)),
            "level": entry.level.value.upper(),
            "logger": entry.logger_name,
            "message": entry.message,
        }

        if self.include_context:
            context = self._format_context(entry.context)
            if context:
                formatted = f"{formatted} | {context}"

        if entry.exception:
            formatted = f"{formatted} ({type(entry.exception).__name__}: {entry.exception})"

        return formatted

    def _format_context(self, context: Optional[LogContext]) -> str:
        if not context:
            return ""

        parts = []
        if context.node_id:
            parts.append(f"node={context.node_id}")
        if context.component:
            parts.append(f"component={context.component}")
        if context.peer_id:
            parts.append(f"peer={context.peer_id}")

        return " ".join(parts)
