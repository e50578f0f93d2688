"""Command Graph - DAG of commands with typed dependency edges.

An edge ``source -> target`` means *source depends on target*: the target
must run before the source. Every edge is tagged mandatory or optional. Both
kinds share one acyclicity invariant, enforced when the edge is inserted:
an edge that would close a cycle is refused and the graph is left untouched.
The graph is therefore a DAG at all times, never transiently cyclic.

CommandGraphBuilder is the only mutator. build() returns a read-only
CommandGraph which answers dependency queries and converts itself into the
dependency map consumed by DependencyCollector.order_commands().
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from ..models.command import CommandClass, Dependencies
from ..observability.diagram import render_dot
from ..utils.exceptions import CommandNotFoundError

if TYPE_CHECKING:
    from ..catalog.catalog import Catalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DependencyEdge:
    """
    Directed dependency between two commands.

    Attributes:
        source: Dependent command (runs AFTER)
        target: Command depended upon (runs BEFORE)
        mandatory: Hard constraint if True, soft preference otherwise
    """

    source: str
    target: str
    mandatory: bool

    def __str__(self) -> str:
        kind = "Mandatory" if self.mandatory else "Optional"
        return f"{kind} dependency: [{self.source}] -> [{self.target}]"


class CommandGraph:
    """
    Read-only view of a built command DAG.

    Instances are created by CommandGraphBuilder.build().
    """

    def __init__(
        self, commands: dict[str, CommandClass], edges: dict[str, dict[str, DependencyEdge]]
    ) -> None:
        self._commands = dict(commands)
        self._edges = {name: dict(targets) for name, targets in edges.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandGraph):
            return NotImplemented
        return self._commands == other._commands and self._edges == other._edges

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def commands(self) -> list[CommandClass]:
        """All commands in insertion order."""
        return list(self._commands.values())

    @property
    def edges(self) -> list[DependencyEdge]:
        """All edges, grouped by source in insertion order."""
        return [edge for targets in self._edges.values() for edge in targets.values()]

    def has_command(self, name: str) -> bool:
        """Check whether a command with this name is a vertex of the graph."""
        return name in self._commands

    def get_command_class(self, name: str) -> CommandClass:
        """
        Get the identity record of a command.

        Raises:
            CommandNotFoundError: If the command is not in the graph
        """
        self._require(name)
        return self._commands[name]

    def get_dependencies(self, name: str) -> list[CommandClass]:
        """
        Get all direct dependencies of a command, mandatory ones first.

        Raises:
            CommandNotFoundError: If the command is not in the graph
        """
        return self.get_mandatory_dependencies(name) + self.get_optional_dependencies(name)

    def get_mandatory_dependencies(self, name: str) -> list[CommandClass]:
        """Direct dependencies reached through mandatory edges."""
        return self._targets(name, mandatory=True)

    def get_optional_dependencies(self, name: str) -> list[CommandClass]:
        """Direct dependencies reached through optional edges."""
        return self._targets(name, mandatory=False)

    def _targets(self, name: str, mandatory: bool) -> list[CommandClass]:
        self._require(name)
        return [
            self._commands[edge.target]
            for edge in self._edges[name].values()
            if edge.mandatory == mandatory
        ]

    def _require(self, name: str) -> None:
        if name not in self._commands:
            raise CommandNotFoundError(name)

    def to_dependency_map(
        self, mandatory: bool = True, optional: bool = True
    ) -> dict[str, set[str]]:
        """
        Convert the graph to a name -> prerequisite-set map.

        Every command is a key, including commands without dependencies, so
        the result satisfies the ordering invariant by construction.

        Args:
            mandatory: Include mandatory edges
            optional: Include optional edges

        Returns:
            Dependency map in command insertion order
        """
        return {
            name: {
                edge.target
                for edge in self._edges[name].values()
                if (edge.mandatory and mandatory) or (not edge.mandatory and optional)
            }
            for name in self._commands
        }

    def to_dot(self) -> str:
        """
        Generate DOT representation of the graph.

        Returns:
            String containing the Graphviz DOT definition
        """
        optional = {
            name: targets
            for name, targets in self.to_dependency_map(mandatory=False).items()
            if targets
        }
        return render_dot(self.to_dependency_map(optional=False), optional, "CommandGraph")


class CommandGraphBuilder:
    """
    Incrementally builds a CommandGraph, rejecting cycles at insertion time.

    Not safe for concurrent use; drive it from a single thread.

    Example:
        builder = CommandGraphBuilder()
        builder.add_command("A", "pipeline.A")
        builder.add_command("B", "pipeline.B")
        builder.add_mandatory_dependency("B", "A")   # True, B runs after A
        builder.add_mandatory_dependency("A", "B")   # False, would close a cycle
        graph = builder.build()
    """

    def __init__(self) -> None:
        self._commands: dict[str, CommandClass] = {}
        self._edges: dict[str, dict[str, DependencyEdge]] = {}
        # Declared (mandatory, optional) bundles waiting to be wired by build()
        self._declared: dict[str, tuple[Dependencies, Dependencies]] = {}

    @classmethod
    def from_catalog(cls, catalog: "Catalog") -> "CommandGraphBuilder":
        """
        Create a builder holding every catalog command and its declarations.

        Each command is instantiated once to read its dependency getters.
        Call build() to wire the declarations into edges.

        Args:
            catalog: Catalog to read

        Returns:
            Populated builder
        """
        builder = cls()
        for name in catalog.command_names:
            command = catalog.get_command(name)
            builder.add_command_with_dependencies(
                catalog.get_command_class(name),
                Dependencies.of(
                    command.get_before_dependencies(), command.get_after_dependencies()
                ),
                Dependencies.of(
                    command.get_optional_before_dependencies(),
                    command.get_optional_after_dependencies(),
                ),
            )
        return builder

    def has_command(self, name: str) -> bool:
        return name in self._commands

    def add_command(self, command: CommandClass | str, class_name: str | None = None) -> bool:
        """
        Add a command vertex.

        Args:
            command: CommandClass, or a command name when class_name is given
            class_name: Implementation reference when command is a name

        Returns:
            True if added, False if a command with that name already exists
        """
        if isinstance(command, str):
            if class_name is None:
                raise ValueError("class_name is required when adding a command by name")
            command = CommandClass(command, class_name)

        if command.name in self._commands:
            logger.debug("Command already in graph", command=command.name)
            return False

        self._commands[command.name] = command
        self._edges[command.name] = {}
        logger.debug("Added command to graph", command=command.name)
        return True

    def add_mandatory_dependency(
        self, source: CommandClass | str, target: CommandClass | str
    ) -> bool:
        """
        Add a mandatory edge: source depends on target.

        The edge is added only if both commands are present, no edge between
        them exists yet, and the edge does not induce a cycle.

        Returns:
            True if the edge was added
        """
        return self._add_dependency(_name_of(source), _name_of(target), mandatory=True)

    def add_optional_dependency(
        self, source: CommandClass | str, target: CommandClass | str
    ) -> bool:
        """
        Add an optional edge: source depends on target if both take part.

        Same acceptance rules as add_mandatory_dependency().

        Returns:
            True if the edge was added
        """
        return self._add_dependency(_name_of(source), _name_of(target), mandatory=False)

    def _add_dependency(self, source: str, target: str, mandatory: bool) -> bool:
        if source not in self._commands or target not in self._commands:
            return False

        if target in self._edges[source]:
            return False

        # source -> target closes a cycle iff source is already reachable from target
        if self._reaches(target, source):
            logger.debug(
                "Rejected dependency edge, would create a cycle",
                source=source,
                target=target,
                mandatory=mandatory,
            )
            return False

        self._edges[source][target] = DependencyEdge(source, target, mandatory)
        logger.debug("Added dependency edge", source=source, target=target, mandatory=mandatory)
        return True

    def _reaches(self, start: str, goal: str) -> bool:
        """Iterative DFS along dependency edges."""
        stack = [start]
        visited: set[str] = set()
        while stack:
            current = stack.pop()
            if current == goal:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self._edges[current])
        return False

    def add_command_with_dependencies(
        self,
        command: CommandClass,
        mandatory: Dependencies | None = None,
        optional: Dependencies | None = None,
    ) -> "CommandGraphBuilder":
        """
        Register a command together with its declared dependency bundles.

        The declarations are wired into edges by build(), after every
        command is known, so declarations may name commands added later.

        Args:
            command: Command identity
            mandatory: Mandatory before/after declarations
            optional: Optional before/after declarations

        Returns:
            The builder, for chaining
        """
        mandatory = mandatory or Dependencies()
        optional = optional or Dependencies()
        for label, names in (
            ("mandatory before", mandatory.before_dependencies),
            ("mandatory after", mandatory.after_dependencies),
            ("optional before", optional.before_dependencies),
            ("optional after", optional.after_dependencies),
        ):
            if any(not name for name in names):
                raise ValueError(f"Empty command name in {label} dependencies of {command.name}")

        if not self.add_command(command):
            existing = self._commands[command.name]
            if existing != command:
                logger.warning(
                    "Command re-declared with a different implementation, keeping the first",
                    command=command.name,
                    kept=existing.class_name,
                    ignored=command.class_name,
                )

        previous_mandatory, previous_optional = self._declared.get(
            command.name, (Dependencies(), Dependencies())
        )
        self._declared[command.name] = (
            Dependencies(
                previous_mandatory.before_dependencies | mandatory.before_dependencies,
                previous_mandatory.after_dependencies | mandatory.after_dependencies,
            ),
            Dependencies(
                previous_optional.before_dependencies | optional.before_dependencies,
                previous_optional.after_dependencies | optional.after_dependencies,
            ),
        )
        return self

    def _wire_declarations(self) -> None:
        # All mandatory edges go in before any optional one, so an optional
        # edge can never cause a mandatory edge to be refused.
        for mandatory in (True, False):
            for name, bundles in self._declared.items():
                declared = bundles[0] if mandatory else bundles[1]
                for target in sorted(declared.before_dependencies):
                    self._wire(name, target, mandatory)
                for source in sorted(declared.after_dependencies):
                    self._wire(source, name, mandatory)
        self._declared.clear()

    def _wire(self, source: str, target: str, mandatory: bool) -> None:
        if source not in self._commands or target not in self._commands:
            missing = target if source in self._commands else source
            log = logger.warning if mandatory else logger.debug
            log(
                "Declared dependency refers to unknown command",
                source=source,
                target=target,
                unknown=missing,
                mandatory=mandatory,
            )
            return

        existing = self._edges[source].get(target)
        if existing is not None:
            return

        if not self._add_dependency(source, target, mandatory):
            logger.warning(
                "Declared dependency rejected, it would create a cycle",
                source=source,
                target=target,
                mandatory=mandatory,
            )

    def build(self) -> CommandGraph:
        """
        Wire pending declarations and return a read-only graph.

        Returns:
            CommandGraph snapshot of the builder state
        """
        if self._declared:
            self._wire_declarations()

        graph = CommandGraph(self._commands, self._edges)
        logger.info(
            "Command graph built",
            commands=len(self._commands),
            edges=sum(len(targets) for targets in self._edges.values()),
        )
        return graph


def _name_of(command: CommandClass | str) -> str:
    return command.name if isinstance(command, CommandClass) else command
