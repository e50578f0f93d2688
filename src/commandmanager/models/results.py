"""Result types for command execution."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ResultState(str, Enum):
    """Tri-state outcome of a single command."""

    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass(frozen=True)
class ExecutionOutcome:
    """
    Outcome returned by Command.execute().

    Attributes:
        state: SUCCESS, WARNING or FAILURE
        message: Human-readable detail
        cause: Optional exception that led to a warning or failure
    """

    state: ResultState
    message: str = ""
    cause: BaseException | None = None

    @classmethod
    def success(cls, message: str = "") -> "ExecutionOutcome":
        return cls(ResultState.SUCCESS, message)

    @classmethod
    def warning(cls, message: str, cause: BaseException | None = None) -> "ExecutionOutcome":
        return cls(ResultState.WARNING, message, cause)

    @classmethod
    def failure(cls, message: str, cause: BaseException | None = None) -> "ExecutionOutcome":
        return cls(ResultState.FAILURE, message, cause)

    @property
    def is_success(self) -> bool:
        return self.state == ResultState.SUCCESS

    @property
    def is_warning(self) -> bool:
        return self.state == ResultState.WARNING

    @property
    def is_failure(self) -> bool:
        return self.state == ResultState.FAILURE

    @property
    def has_cause(self) -> bool:
        return self.cause is not None


@dataclass
class CommandResult:
    """
    Result of executing one command within a run.

    Attributes:
        name: Command name
        outcome: Outcome returned (or derived) for the command
        duration_ms: Wall-clock duration in milliseconds
    """

    name: str
    outcome: ExecutionOutcome
    duration_ms: float = 0.0


class RunStatus(str, Enum):
    """Final status of a run."""

    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class RunSummary:
    """
    Overall result of executing an ordered command sequence.

    Attributes:
        status: COMPLETED or ABORTED
        results: Per-command results in execution order
        skipped: Names never executed because the run aborted
        started_at: Start timestamp
        completed_at: Completion timestamp
        metrics: Metrics summary collected during the run
    """

    status: RunStatus
    results: list[CommandResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def executed(self) -> list[str]:
        """Names of the commands that ran, in order."""
        return [result.name for result in self.results]

    @property
    def failed_command(self) -> str | None:
        """Name of the command that aborted the run, if any."""
        for result in self.results:
            if result.outcome.is_failure:
                return result.name
        return None

    @property
    def warnings(self) -> list[CommandResult]:
        return [result for result in self.results if result.outcome.is_warning]

    @property
    def is_complete_success(self) -> bool:
        """
        Check if every command ran and none warned or failed.

        Returns:
            bool: True if the run completed without warnings
        """
        return self.status == RunStatus.COMPLETED and not self.warnings

    @property
    def duration_seconds(self) -> float:
        if self.started_at is None or self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def get_summary(self) -> str:
        """
        Get a human-readable summary.

        Returns:
            str: Summary string with status and counts.
        """
        summary = (
            f"Run {self.status.value}: {len(self.results)} executed, "
            f"{len(self.warnings)} with warnings, {len(self.skipped)} skipped"
        )
        if self.failed_command:
            summary += f" (failed at {self.failed_command})"
        return summary
