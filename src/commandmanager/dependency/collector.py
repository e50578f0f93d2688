"""Dependency Collector - derives and orders dependency maps from a catalog.

A dependency map maps a command name to the set of names it depends on:

    {"Cmd1": set(), "Cmd2": {"Cmd1", "Cmd4"}, "Cmd4": {"Cmd1"}}

Collection:
----------
Every catalog command declares four sets: mandatory before/after and optional
before/after. Mandatory and optional declarations are merged into two
separate maps with update_dependencies():

    - the command itself becomes a key and its before set is added to it
    - every name in its after set becomes a key and gets the command added

The merge is order-independent and idempotent. The maps are then composed:
the mandatory map is copied and optional prerequisites are added only where
both the dependent and the prerequisite are already keys. An optional
reference to an unknown command is dropped with a warning, or rejected with
UnknownDependencyError when strict_optional_dependencies is configured.

Boundary restriction:
--------------------
restrict_to_boundary() narrows a map to everything downstream of a set of
root commands, then (when end commands are given) to everything upstream of
the end commands.

Ordering:
--------
order_commands() is Kahn's elimination: commands with no open prerequisites
are emitted, removed from every other prerequisite set, and the commands they
release join the ready pool. Leftover entries mean a cycle or an unresolved
prerequisite and raise CyclicDependencyError; a partial order is never
returned.
"""

import heapq
from collections import deque
from collections.abc import Iterable, Mapping, Set
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from ..config import ManagerConfig, TieBreak
from ..observability.diagram import render_dot, write_dot
from ..utils.exceptions import (
    CommandNotFoundError,
    CyclicDependencyError,
    DiagramExportError,
    NotARootCommandError,
    OutsideBoundaryError,
    UnknownDependencyError,
)

if TYPE_CHECKING:
    from ..catalog.catalog import Catalog

logger = structlog.get_logger(__name__)

DependencyMap = dict[str, set[str]]


@dataclass
class CollectedDependencies:
    """
    Dependency maps derived from one catalog.

    Attributes:
        mandatory: Map built from mandatory declarations only
        optional: Map built from optional declarations only
        composed: Mandatory map enriched with known optional prerequisites
    """

    mandatory: DependencyMap = field(default_factory=dict)
    optional: DependencyMap = field(default_factory=dict)
    composed: DependencyMap = field(default_factory=dict)


class _ReadyPool:
    """Commands whose prerequisites are all satisfied."""

    def __init__(self, lexical: bool) -> None:
        self.lexical = lexical
        self._heap: list[str] = []
        self._queue: deque[str] = deque()

    def push(self, name: str) -> None:
        if self.lexical:
            heapq.heappush(self._heap, name)
        else:
            self._queue.append(name)

    def pop(self) -> str:
        if self.lexical:
            return heapq.heappop(self._heap)
        return self._queue.popleft()

    def __bool__(self) -> bool:
        return bool(self._heap) if self.lexical else bool(self._queue)


def copy_dependencies(dependencies: Mapping[str, Set[str]]) -> DependencyMap:
    """Deep-copy a dependency map so callers' sets are never mutated."""
    return {name: set(prerequisites) for name, prerequisites in dependencies.items()}


def _declared(value: Iterable[str] | str | None) -> set[str]:
    # None means "nothing declared"; a bare string is one name, not its characters
    if value is None:
        return set()
    if isinstance(value, str):
        return {value}
    return set(value)


class DependencyCollector:
    """
    Collect command dependencies from a catalog and order them.

    The catalog is only needed for collection; restriction and ordering
    work on any dependency map.
    """

    def __init__(
        self, catalog: "Catalog | None" = None, config: ManagerConfig | None = None
    ) -> None:
        """
        Initialize collector.

        Args:
            catalog: Catalog whose commands declare dependencies
            config: Manager configuration (ordering policy, diagram export)
        """
        self.catalog = catalog
        self.config = config or ManagerConfig()

    @staticmethod
    def update_dependencies(
        name: str,
        dependencies: DependencyMap,
        after_dependencies: Set[str],
        before_dependencies: Set[str],
    ) -> None:
        """
        Merge one command's declarations into a dependency map in place.

        Args:
            name: Declaring command
            dependencies: Map to update
            after_dependencies: Commands that must run after `name`
            before_dependencies: Commands `name` depends on
        """
        dependencies.setdefault(name, set()).update(before_dependencies)

        for dependent in after_dependencies:
            dependencies.setdefault(dependent, set()).add(name)

    def collect(self) -> CollectedDependencies:
        """
        Build the mandatory, optional and composed maps for the catalog.

        Returns:
            CollectedDependencies

        Raises:
            ValueError: If the collector has no catalog
            UnknownDependencyError: In strict mode, for unknown optional references
        """
        if self.catalog is None:
            raise ValueError("DependencyCollector needs a catalog to collect dependencies")

        mandatory: DependencyMap = {}
        optional: DependencyMap = {}

        names = self.catalog.command_names
        if not names:
            logger.warning("Catalog contains no commands")

        for name in names:
            command = self.catalog.get_command(name)
            self.update_dependencies(
                name,
                mandatory,
                _declared(command.get_after_dependencies()),
                _declared(command.get_before_dependencies()),
            )
            self.update_dependencies(
                name,
                optional,
                _declared(command.get_optional_after_dependencies()),
                _declared(command.get_optional_before_dependencies()),
            )
            logger.debug("Collected declarations", command=name)

        composed = self.compose(mandatory, optional)
        return CollectedDependencies(mandatory=mandatory, optional=optional, composed=composed)

    def compose(
        self, mandatory: Mapping[str, Set[str]], optional: Mapping[str, Set[str]]
    ) -> DependencyMap:
        """
        Compose mandatory and optional maps into one working map.

        Args:
            mandatory: Mandatory dependency map
            optional: Optional dependency map

        Returns:
            New composed map; the inputs are left unchanged

        Raises:
            UnknownDependencyError: In strict mode, when an optional
                dependency names a command the mandatory map does not know
        """
        strict = self.config.ordering.strict_optional_dependencies
        composed = copy_dependencies(mandatory)

        for name, prerequisites in optional.items():
            if name not in composed:
                # Optional "after" declaration naming a command outside the catalog
                dependent = next(iter(sorted(prerequisites)), name)
                if strict:
                    raise UnknownDependencyError(dependent, name)
                logger.warning(
                    "Dropped optional dependency on unknown command",
                    command=dependent,
                    unknown=name,
                )
                continue

            for prerequisite in sorted(prerequisites):
                if prerequisite in composed:
                    composed[name].add(prerequisite)
                elif strict:
                    raise UnknownDependencyError(name, prerequisite)
                else:
                    logger.warning(
                        "Dropped optional dependency on unknown command",
                        command=name,
                        unknown=prerequisite,
                    )

        return composed

    def get_dependencies(self) -> DependencyMap:
        """
        Collect the composed dependency map of the catalog.

        Writes the dependency diagram when diagram export is enabled.

        Returns:
            Composed dependency map
        """
        collected = self.collect()

        logger.info("Mandatory dependencies", dependencies=_printable(collected.mandatory))
        logger.info("Optional dependencies", dependencies=_printable(collected.optional))

        if self.config.diagram.enabled:
            self.export_collected_diagram(collected)

        return collected.composed

    def export_collected_diagram(self, collected: CollectedDependencies) -> Path | None:
        """
        Write the diagram of collected dependencies.

        Mandatory edges are drawn solid. Optional edges kept by composition
        are drawn dashed.

        Returns:
            Written path, or None if the export failed
        """
        kept_optional = {
            name: prerequisites - collected.mandatory.get(name, set())
            for name, prerequisites in collected.composed.items()
        }
        return self.export_diagram(collected.mandatory, kept_optional)

    def diagram_path(self, suffix: str = "") -> Path:
        """Configured diagram file, with suffix appended to its stem."""
        target = self.config.diagram.path
        if suffix:
            target = target.with_name(f"{target.stem}{suffix}{target.suffix}")
        return target

    def export_diagram(
        self,
        dependencies: Mapping[str, Set[str]],
        optional_dependencies: Mapping[str, Set[str]] | None = None,
        suffix: str = "",
    ) -> Path | None:
        """
        Write the DOT diagram of a dependency map to the configured location.

        Export failures are logged as a warning and never interrupt ordering.

        Args:
            dependencies: Map drawn with solid edges
            optional_dependencies: Map drawn with dashed edges
            suffix: Appended to the configured file stem

        Returns:
            Written path, or None if the export failed
        """
        content = render_dot(dependencies, optional_dependencies)
        try:
            return write_dot(content, self.diagram_path(suffix))
        except DiagramExportError as e:
            logger.warning(
                "Dependency diagram export failed",
                path=e.path,
                error=str(e.original_error),
            )
            return None

    def restrict_to_boundary(
        self,
        dependencies: Mapping[str, Set[str]],
        start_names: Iterable[str] = (),
        end_names: Iterable[str] = (),
    ) -> DependencyMap:
        """
        Restrict a dependency map to the commands between start and end commands.

        With no start names the whole map is kept. Otherwise every start name
        must be a root (no prerequisites) and the result is the transitive
        downstream closure of the roots, each command keeping only the
        prerequisites that are part of the closure.

        With end names, the result is then trimmed to the end commands and
        their transitive prerequisites.

        Args:
            dependencies: Map to restrict (left unchanged)
            start_names: Root commands to start from
            end_names: Commands to end with

        Returns:
            New restricted map

        Raises:
            CommandNotFoundError: If a start or end name is not a key
            NotARootCommandError: If a start name has prerequisites
            OutsideBoundaryError: If an end name is outside the start closure
        """
        start_names = list(dict.fromkeys(start_names))
        end_names = list(dict.fromkeys(end_names))

        if not start_names:
            restricted = copy_dependencies(dependencies)
        else:
            logger.info("Restricting dependencies to start commands", start=start_names)
            restricted = self._downstream_closure(dependencies, start_names)

        if end_names:
            logger.info("Restricting dependencies to end commands", end=end_names)
            for name in end_names:
                if name not in dependencies:
                    raise CommandNotFoundError(name)
                if name not in restricted:
                    logger.error("End command outside start boundary", command=name)
                    raise OutsideBoundaryError(name, start_names)
            restricted = self._upstream_closure(restricted, end_names)

        if self.config.diagram.enabled and (start_names or end_names):
            self.export_diagram(restricted, suffix="_boundary")

        return restricted

    def _downstream_closure(
        self, dependencies: Mapping[str, Set[str]], start_names: list[str]
    ) -> DependencyMap:
        for name in start_names:
            if name not in dependencies:
                raise CommandNotFoundError(name)
            if dependencies[name]:
                logger.error("Given command is not a root", command=name)
                raise NotARootCommandError(name, set(dependencies[name]))

        dependents: dict[str, list[str]] = {name: [] for name in dependencies}
        for name, prerequisites in dependencies.items():
            for prerequisite in prerequisites:
                dependents.setdefault(prerequisite, []).append(name)

        restricted: DependencyMap = {}
        frontier = deque(start_names)
        for name in start_names:
            restricted[name] = set()

        while frontier:
            current = frontier.popleft()
            for dependent in dependents.get(current, []):
                discovered = dependent not in restricted
                restricted.setdefault(dependent, set()).add(current)
                if discovered:
                    frontier.append(dependent)

        return restricted

    def _upstream_closure(
        self, dependencies: Mapping[str, Set[str]], end_names: list[str]
    ) -> DependencyMap:
        keep: set[str] = set()
        pending = list(end_names)
        while pending:
            current = pending.pop()
            if current in keep:
                continue
            keep.add(current)
            pending.extend(dependencies.get(current, ()))

        return {
            name: set(prerequisites)
            for name, prerequisites in dependencies.items()
            if name in keep
        }

    def order_commands(self, dependencies: Mapping[str, Set[str]]) -> list[str]:
        """
        Topologically sort a dependency map.

        Ties are broken by map insertion order, or alphabetically when the
        configured tie break is LEXICAL.

        Args:
            dependencies: Map to order (left unchanged)

        Returns:
            All keys, each after all of its prerequisites

        Raises:
            CyclicDependencyError: If entries remain after elimination
        """
        remaining = copy_dependencies(dependencies)
        pool = _ReadyPool(lexical=self.config.ordering.tie_break == TieBreak.LEXICAL)

        dependents: dict[str, list[str]] = {}
        for name, prerequisites in remaining.items():
            for prerequisite in prerequisites:
                dependents.setdefault(prerequisite, []).append(name)

        for name in [name for name, prerequisites in remaining.items() if not prerequisites]:
            del remaining[name]
            pool.push(name)

        ordered: list[str] = []
        while pool:
            name = pool.pop()
            ordered.append(name)

            for dependent in dependents.get(name, ()):
                prerequisites = remaining.get(dependent)
                if prerequisites is None:
                    continue
                prerequisites.discard(name)
                if not prerequisites:
                    del remaining[dependent]
                    pool.push(dependent)

        if remaining:
            unresolved = sorted(
                {p for prerequisites in remaining.values() for p in prerequisites}
                - set(dependencies)
            )
            logger.error(
                "Dependency map not empty after ordering",
                remaining=_printable(remaining),
                unresolved=unresolved,
            )
            detail = f" (unknown prerequisites: {unresolved})" if unresolved else ""
            raise CyclicDependencyError(
                f"Cyclic or unresolved dependencies among commands: {sorted(remaining)}{detail}",
                remaining=remaining,
            )

        logger.debug("Commands ordered", order=ordered)
        return ordered


def _printable(dependencies: Mapping[str, Set[str]]) -> dict[str, list[str]]:
    return {name: sorted(prerequisites) for name, prerequisites in dependencies.items()}
