"""Core logging interfaces and data structures for snreach.

Loggers are cheap named front-ends onto a single process-wide
:class:`LogManager`. Modules grab one at import time with
``logger = get_logger(__name__)``; calling :func:`setup_logging` later
reconfigures the same manager in place, so those module-level loggers follow
the new level and handlers.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class LogLevel(Enum):
    """Log levels."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    FATAL = "fatal"


_LEVEL_ORDER = {level: index for index, level in enumerate(LogLevel)}


def level_value(level: LogLevel) -> int:
    """Numeric rank of a level, TRACE being the lowest."""
    return _LEVEL_ORDER[level]


@dataclass
class LogContext:
    """Who is logging, and about which peer."""

    node_id: Optional[str] = None
    component: Optional[str] = None
    peer_id: Optional[str] = None

    def merged_with(self, other: Optional["LogContext"]) -> "LogContext":
        """Return a context where fields set on ``other`` win over ours."""
        if other is None:
            return self
        return LogContext(
            node_id=other.node_id or self.node_id,
            component=other.component or self.component,
            peer_id=other.peer_id or self.peer_id,
        )


@dataclass
class LogEntry:
    """Log entry data structure."""

    timestamp: float
    level: LogLevel
    message: str
    logger_name: str
    context: LogContext
    exception: Optional[BaseException] = None


class LogConfig:
    """Log configuration."""

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        handlers: Optional[List[str]] = None,
        node_id: Optional[str] = None,
    ):
        self.level = level
        self.handlers = handlers or ["console"]
        self.node_id = node_id


class LogFormatter(ABC):
    """Abstract log formatter."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        pass


class LogHandler(ABC):
    """Abstract log handler."""

    def __init__(self):
        self.formatter: Optional[LogFormatter] = None
        self.level: LogLevel = LogLevel.TRACE
        self._lock = threading.RLock()

    def set_formatter(self, formatter: LogFormatter) -> None:
        """Set formatter."""
        with self._lock:
            self.formatter = formatter

    def set_level(self, level: LogLevel) -> None:
        """Set log level."""
        with self._lock:
            self.level = level

    def format_entry(self, entry: LogEntry) -> str:
        """Render an entry with the handler's formatter, or a plain default."""
        if self.formatter:
            return self.formatter.format(entry)
        return f"{entry.timestamp} [{entry.level.value.upper()}] {entry.logger_name}: {entry.message}"

    @abstractmethod
    def emit(self, entry: LogEntry) -> None:
        """Emit log entry."""
        pass

    def handle(self, entry: LogEntry) -> None:
        """Emit the entry unless it is below the handler's level."""
        if level_value(entry.level) >= level_value(self.level):
            self.emit(entry)

    def close(self) -> None:
        """Release handler resources."""
        pass


class LogManager:
    """Routes entries from every logger to the configured handlers."""

    def __init__(self, config: Optional[LogConfig] = None):
        from .formatters import TextFormatter
        from .handlers import ConsoleHandler

        self.config = config or LogConfig()
        self.loggers: Dict[str, "ReachLogger"] = {}
        self.handlers: Dict[str, LogHandler] = {}
        self._lock = threading.RLock()
        self._context = LogContext(node_id=self.config.node_id)

        console = ConsoleHandler()
        console.set_formatter(TextFormatter())
        self.add_handler("console", console)

    def configure(self, config: LogConfig) -> None:
        """Swap in a new configuration, keeping existing loggers attached."""
        with self._lock:
            self.config = config
            if config.node_id is not None:
                self._context = self._context.merged_with(LogContext(node_id=config.node_id))

    def get_logger(self, name: str) -> "ReachLogger":
        """Get logger."""
        with self._lock:
            if name not in self.loggers:
                self.loggers[name] = ReachLogger(name, self)
            return self.loggers[name]

    def add_handler(self, name: str, handler: LogHandler) -> None:
        """Add handler."""
        with self._lock:
            self.handlers[name] = handler

    def remove_handler(self, name: str) -> None:
        """Remove handler."""
        with self._lock:
            handler = self.handlers.pop(name, None)
            if handler is not None:
                handler.close()

    def set_context(self, context: LogContext) -> None:
        """Set the context merged into every entry."""
        with self._lock:
            self._context = context

    def log(
        self,
        level: LogLevel,
        message: str,
        logger_name: str = "root",
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Log a message."""
        with self._lock:
            entry = LogEntry(
                timestamp=time.time(),
                level=level,
                message=message,
                logger_name=logger_name,
                context=self._context.merged_with(context),
                exception=exception,
            )

            for handler_name in self.config.handlers:
                handler = self.handlers.get(handler_name)
                if handler is not None:
                    handler.handle(entry)

    def shutdown(self) -> None:
        """Close every handler and drop all loggers."""
        with self._lock:
            for handler in self.handlers.values():
                handler.close()

            self.loggers.clear()
            self.handlers.clear()


class ReachLogger:
    """Named logger bound to a :class:`LogManager`."""

    def __init__(self, name: str, manager: LogManager):
        self.name = name
        self.manager = manager
        self.level: Optional[LogLevel] = None

    def set_level(self, level: Optional[LogLevel]) -> None:
        """Set log level. ``None`` follows the manager's configured level."""
        self.level = level

    def effective_level(self) -> LogLevel:
        return self.level if self.level is not None else self.manager.config.level

    def is_enabled_for(self, level: LogLevel) -> bool:
        """Check if logger is enabled for level."""
        return level_value(level) >= level_value(self.effective_level())

    def log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Log a message."""
        if self.is_enabled_for(level):
            self.manager.log(
                level=level,
                message=message,
                logger_name=self.name,
                context=context,
                exception=exception,
            )

    def trace(self, message: str, **kwargs) -> None:
        """Log trace message."""
        self.log(LogLevel.TRACE, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        self.log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        self.log(LogLevel.ERROR, message, **kwargs)



# Global log manager instance
_global_manager: Optional[LogManager] = None
_global_lock = threading.Lock()


def get_log_manager() -> LogManager:
    """Return the process-wide manager, creating it on first use."""
    global _global_manager
    with _global_lock:
        if _global_manager is None:
            _global_manager = LogManager()
        return _global_manager


def get_logger(name: str = "root") -> ReachLogger:
    """Get logger instance."""
    return get_log_manager().get_logger(name)


def setup_logging(config: LogConfig) -> LogManager:
    """Setup logging with configuration."""
    manager = get_log_manager()
    manager.configure(config)
    return manager


def shutdown_logging() -> None:
    """Close every handler and forget the global manager."""
    global _global_manager
    with _global_lock:
        if _global_manager is not None:
            _global_manager.shutdown()
            _global_manager = None
