"""Data models for the Command Manager."""

from .command import Command, CommandClass, Dependencies
from .context import Context
from .results import CommandResult, ExecutionOutcome, ResultState, RunStatus, RunSummary

__all__ = [
    # Commands
    "Command",
    "CommandClass",
    "Dependencies",
    # Context
    "Context",
    # Results
    "ResultState",
    "ExecutionOutcome",
    "CommandResult",
    "RunStatus",
    "RunSummary",
]
