"""Command contract and command identity types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Context
    from .results import ExecutionOutcome


class Command(ABC):
    """
    A named unit of work with declared ordering constraints.

    Subclasses implement execute() and override the dependency getters they
    need. Before dependencies are commands that must run before this one;
    after dependencies are commands that must run after this one. Each comes
    in a mandatory and an optional flavour.

    Example:
        class LoadCorpus(Command):
            def get_before_dependencies(self) -> set[str]:
                return {"ReadProperties"}

            def execute(self, context):
                context["corpus"] = load(context["properties"])
                return ExecutionOutcome.success()
    """

    def get_before_dependencies(self) -> set[str]:
        """Mandatory prerequisites of this command."""
        return set()

    def get_after_dependencies(self) -> set[str]:
        """Commands that must run after this command."""
        return set()

    def get_optional_before_dependencies(self) -> set[str]:
        """Prerequisites honoured only when they are part of the run."""
        return set()

    def get_optional_after_dependencies(self) -> set[str]:
        """Commands that should run after this command when they are part of the run."""
        return set()

    @abstractmethod
    def execute(self, context: "Context") -> "ExecutionOutcome | None":
        """
        Run the command against the shared context.

        Args:
            context: Shared execution context

        Returns:
            Outcome of the run. None is treated as success.
        """


@dataclass(frozen=True)
class CommandClass:
    """
    Identity of a command: its unique name and its implementation reference.

    Attributes:
        name: Unique command name
        class_name: Opaque implementation reference (usually a dotted class path)
    """

    name: str
    class_name: str

    def __str__(self) -> str:
        return f"{self.name} ({self.class_name})"


@dataclass
class Dependencies:
    """
    Declaration bundle for one dependency flavour (mandatory or optional).

    Attributes:
        before_dependencies: Commands this command depends on
        after_dependencies: Commands depending on this command
    """

    before_dependencies: set[str] = field(default_factory=set)
    after_dependencies: set[str] = field(default_factory=set)

    @classmethod
    def of(
        cls, before: set[str] | None = None, after: set[str] | None = None
    ) -> "Dependencies":
        """Build a bundle, normalizing missing sets to empty ones."""
        return cls(set(before or ()), set(after or ()))
