"""Observability - Logging, metrics and dependency diagrams."""

from .diagram import render_dot, write_dot
from .logger import LogContext, add_context, clear_all_context, clear_context, configure_logging
from .metrics import MetricsBackend, MetricsCollector

__all__ = [
    "MetricsCollector",
    "MetricsBackend",
    "render_dot",
    "write_dot",
    "configure_logging",
    "add_context",
    "clear_context",
    "clear_all_context",
    "LogContext",
]
