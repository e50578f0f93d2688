"""Command Manager - Order catalog commands and execute them sequentially.

Run lifecycle:
    IDLE -> ORDERING -> EXECUTING -> COMPLETED | ABORTED

Outcome handling:
    SUCCESS  - logged, next command runs
    WARNING  - message and cause logged, next command runs
    FAILURE  - message and cause logged, the run stops; nothing is raised

Catalog resolution errors are configuration errors: they propagate out of
the run instead of becoming outcomes. Context mutations made by commands
that already ran are kept.
"""

import time
from collections.abc import Iterable, Mapping, Set
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from ..catalog.catalog import Catalog
from ..config import ManagerConfig
from ..dependency.collector import DependencyCollector
from ..dependency.graph import CommandGraph, CommandGraphBuilder
from ..models.context import Context
from ..models.results import CommandResult, ExecutionOutcome, RunStatus, RunSummary
from ..observability.logger import LogContext
from ..observability.metrics import MetricsCollector
from ..utils.exceptions import CommandManagerError

logger = structlog.get_logger(__name__)


class RunState(str, Enum):
    """Lifecycle state of a CommandManager."""

    IDLE = "idle"
    ORDERING = "ordering"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ABORTED = "aborted"


class CommandManager:
    """
    Entry point tying a catalog, its dependency ordering and execution together.

    Example:
        manager = CommandManager.from_xml_file("etc/commands.xml", bootstrap={"root": "/data"})
        summary = manager.execute_all_commands()
        if summary.status is RunStatus.ABORTED:
            print(summary.failed_command)
    """

    def __init__(
        self,
        catalog: Catalog,
        context: Context | None = None,
        config: ManagerConfig | None = None,
        bootstrap: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Initialize manager.

        Args:
            catalog: Catalog resolving command names
            context: Shared context (a new one is created if None)
            config: Manager configuration
            bootstrap: Values seeded into the context when not already set
        """
        self.catalog = catalog
        self.config = config or ManagerConfig()
        self.context = context if context is not None else Context()
        if bootstrap:
            self.context.seed(dict(bootstrap))

        self.dependency_collector = DependencyCollector(catalog, self.config)
        self.metrics = MetricsCollector()
        self._state = RunState.IDLE

    @classmethod
    def from_xml_file(
        cls,
        path: str | Path,
        config: ManagerConfig | None = None,
        bootstrap: Mapping[str, Any] | None = None,
    ) -> "CommandManager":
        """Create a manager for the catalog described by an XML file."""
        return cls(Catalog.from_xml_file(path), config=config, bootstrap=bootstrap)

    @property
    def state(self) -> RunState:
        return self._state

    def _transition(self, state: RunState) -> None:
        logger.debug("Manager state changed", previous=self._state.value, current=state.value)
        self._state = state

    def get_dependencies(self) -> dict[str, set[str]]:
        """Composed dependency map of the whole catalog."""
        return self.dependency_collector.get_dependencies()

    def build_graph(self) -> CommandGraph:
        """Build the command DAG from the catalog declarations."""
        return CommandGraphBuilder.from_catalog(self.catalog).build()

    def get_ordered_commands(
        self, start_commands: Iterable[str] = (), end_commands: Iterable[str] = ()
    ) -> list[str]:
        """
        Order the catalog commands, optionally bounded by start and end commands.

        Args:
            start_commands: Root commands to start from (all commands if empty)
            end_commands: Commands to end with (no trimming if empty)

        Returns:
            Command names in execution order

        Raises:
            CyclicDependencyError: If the dependencies cannot be ordered
            NotARootCommandError: If a start command has prerequisites
            CommandNotFoundError: If a start or end command is unknown
        """
        self._transition(RunState.ORDERING)
        try:
            dependencies = self.dependency_collector.get_dependencies()
        except CommandManagerError:
            self._transition(RunState.ABORTED)
            raise
        return self._order(dependencies, start_commands, end_commands)

    def get_ordered_commands_from(
        self,
        dependencies: Mapping[str, Set[str]],
        start_commands: Iterable[str] = (),
        end_commands: Iterable[str] = (),
    ) -> list[str]:
        """
        Order an explicit dependency map instead of the catalog's own.

        Args:
            dependencies: Dependency map to order (left unchanged)
            start_commands: Root commands to start from
            end_commands: Commands to end with

        Returns:
            Command names in execution order
        """
        self._transition(RunState.ORDERING)
        return self._order(dependencies, start_commands, end_commands)

    def _order(
        self,
        dependencies: Mapping[str, Set[str]],
        start_commands: Iterable[str],
        end_commands: Iterable[str],
    ) -> list[str]:
        collector = self.dependency_collector
        try:
            restricted = collector.restrict_to_boundary(dependencies, start_commands, end_commands)
            ordered = collector.order_commands(restricted)
        except CommandManagerError:
            self._transition(RunState.ABORTED)
            raise

        self.metrics.record_ordering(len(ordered))
        logger.info("Commands ordered", count=len(ordered), order=ordered)
        self._transition(RunState.IDLE)
        return ordered

    def execute_all_commands(self) -> RunSummary:
        """
        Order the whole catalog and execute it on the manager's context.

        Returns:
            RunSummary of the run
        """
        return self.execute_commands(self.get_ordered_commands())

    def execute_commands(self, names: Iterable[str], context: Context | None = None) -> RunSummary:
        """
        Execute commands one at a time in the given order.

        Args:
            names: Ordered command names
            context: Context to run against (defaults to the manager's context)

        Returns:
            RunSummary with per-command results and skipped names

        Raises:
            CatalogError: If a command cannot be resolved
            Exception: Whatever a command raises when catch_command_errors is off
        """
        names = list(names)
        context = context if context is not None else self.context
        summary = RunSummary(status=RunStatus.COMPLETED, started_at=datetime.now())

        self.metrics.reset()
        self.metrics.record_ordering(len(names))
        self._transition(RunState.EXECUTING)
        logger.info("Executing commands", count=len(names))

        for index, name in enumerate(names):
            with LogContext(command=name):
                try:
                    result = self._execute_one(name, context)
                except Exception:
                    self._transition(RunState.ABORTED)
                    raise

            summary.results.append(result)

            if result.outcome.is_failure:
                summary.status = RunStatus.ABORTED
                summary.skipped = names[index + 1 :]
                logger.error(
                    "Aborting execution of all commands.",
                    failed=name,
                    skipped=summary.skipped,
                )
                break

        summary.completed_at = datetime.now()
        summary.metrics = self.metrics.get_summary()
        self._transition(
            RunState.COMPLETED if summary.status == RunStatus.COMPLETED else RunState.ABORTED
        )
        logger.info(summary.get_summary(), duration_seconds=summary.duration_seconds)
        return summary

    def _execute_one(self, name: str, context: Context) -> CommandResult:
        command = self.catalog.get_command(name)
        logger.info("Executing command")

        start_time = time.time()
        try:
            outcome = command.execute(context)
        except Exception as e:
            if not self.config.execution.catch_command_errors:
                raise
            outcome = ExecutionOutcome.failure(f"Command raised {type(e).__name__}: {e}", e)

        duration_ms = (time.time() - start_time) * 1000

        if outcome is None:
            outcome = ExecutionOutcome.success()
        elif not isinstance(outcome, ExecutionOutcome):
            outcome = ExecutionOutcome.failure(
                f"Command returned {type(outcome).__name__} instead of an ExecutionOutcome"
            )

        self.metrics.count_outcome(name, outcome.state.value)
        self.metrics.record_duration(name, duration_ms)
        self._log_outcome(outcome, duration_ms)
        return CommandResult(name=name, outcome=outcome, duration_ms=duration_ms)

    def _log_outcome(self, outcome: ExecutionOutcome, duration_ms: float) -> None:
        fields: dict[str, Any] = {"duration_ms": round(duration_ms, 3)}
        if outcome.message:
            fields["detail"] = outcome.message
        if outcome.has_cause:
            fields["cause"] = repr(outcome.cause)

        if outcome.is_success:
            logger.info("Command succeeded", **fields)
        elif outcome.is_warning:
            logger.warning("Command finished with a warning", **fields)
        else:
            logger.error("Command failed", **fields)
