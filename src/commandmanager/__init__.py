"""Command Manager - Dependency-ordered execution of catalog commands."""

__version__ = "1.0.0"

from .catalog import Catalog, CatalogEntry  # noqa: E402
from .cli import app  # noqa: E402
from .config import ManagerConfig  # noqa: E402
from .dependency import CommandGraph, CommandGraphBuilder, DependencyCollector  # noqa: E402
from .execution import CommandManager, RunState  # noqa: E402
from .models import (  # noqa: E402
    Command,
    CommandClass,
    Context,
    Dependencies,
    ExecutionOutcome,
    ResultState,
    RunStatus,
    RunSummary,
)

__all__ = [
    "app",
    "ManagerConfig",
    "Catalog",
    "CatalogEntry",
    "Command",
    "CommandClass",
    "Context",
    "Dependencies",
    "ExecutionOutcome",
    "ResultState",
    "RunStatus",
    "RunSummary",
    "CommandGraph",
    "CommandGraphBuilder",
    "DependencyCollector",
    "CommandManager",
    "RunState",
]
