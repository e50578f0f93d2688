"""Dependency - Command graph, dependency maps and ordering."""

from .collector import CollectedDependencies, DependencyCollector, copy_dependencies
from .graph import CommandGraph, CommandGraphBuilder, DependencyEdge

__all__ = [
    "DependencyCollector",
    "CollectedDependencies",
    "copy_dependencies",
    "CommandGraph",
    "CommandGraphBuilder",
    "DependencyEdge",
]
