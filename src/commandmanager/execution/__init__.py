"""Execution engine for running ordered commands."""

from .manager import CommandManager, RunState

__all__ = [
    "CommandManager",
    "RunState",
]
