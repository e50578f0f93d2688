"""Structured logging configuration for command runs.

Besides the standard levels, two extra levels are registered:
- VERBOSE (15): between DEBUG and INFO
- TRACE (5): below DEBUG, for the finest diagnostics

Log context (e.g. the command currently executing) is carried in a context
variable and merged into every event by a structlog processor.
"""

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from ..config import LoggingConfig

_log_context: ContextVar[dict[str, Any]] = ContextVar("command_log_context", default={})

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class LogContext:
    """
    Context manager adding key-value pairs to every log event in its scope.

    Usage:
        with LogContext(command="LoadCorpus"):
            logger.info("Executing command")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.new_context = kwargs
        self.token = None

    def __enter__(self) -> "LogContext":
        current = _log_context.get().copy()
        current.update(self.new_context)
        self.token = _log_context.set(current)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.token:
            _log_context.reset(self.token)


def add_context(**kwargs: Any) -> None:
    """
    Add context to the current execution context.

    Args:
        **kwargs: Key-value pairs to add to log context
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def clear_context(key: str) -> None:
    """Remove a key from the current log context."""
    current = _log_context.get().copy()
    if key in current:
        del current[key]
        _log_context.set(current)


def clear_all_context() -> None:
    """Clear all context variables."""
    _log_context.set({})


def get_context() -> dict[str, Any]:
    """Return a copy of the current log context."""
    return _log_context.get().copy()


def _context_processor(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor injecting the current log context."""
    context = _log_context.get()
    if context:
        for key, value in context.items():
            event_dict.setdefault(key, value)
    return event_dict


def get_log_level(level: str) -> int:
    """
    Get numeric log level from string.

    Unknown names fall back to INFO.
    """
    return LOG_LEVELS.get(level.upper(), logging.INFO)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    log_file: str | Path | None = None,
    log_filter: str | None = None,
) -> None:
    """
    Configure structlog on top of the standard logging module.

    Args:
        level: Logging level (TRACE, DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render events as JSON instead of the console format
        log_file: Optional file receiving a copy of all events
        log_filter: Comma-separated logger name fragments to keep at the
            requested level (e.g. "collector,manager"); other loggers are
            raised to WARNING
    """
    log_level = get_log_level(level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(file_path))

    logging.basicConfig(format="%(message)s", level=log_level, handlers=handlers, force=True)
    logging.getLogger().setLevel(log_level)

    if log_filter:
        components = [c.strip() for c in log_filter.split(",") if c.strip()]
        for name in logging.root.manager.loggerDict:
            if not any(component in name for component in components):
                logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _context_processor,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # Module-level loggers must pick up later reconfiguration
        cache_logger_on_first_use=False,
    )


def configure_from_config(config: "LoggingConfig") -> None:
    """Apply a LoggingConfig section."""
    configure_logging(
        level=config.level,
        json_logs=config.format == "json",
        log_file=config.file,
    )
