"""Graphviz DOT export of dependency maps.

An edge ``A -> B`` means A depends on B. Mandatory edges are solid, optional
edges are dashed. Commands without prerequisites appear as lone nodes.
The export is a side-effect sink: it never changes scheduling.
"""

from collections.abc import Mapping, Set
from pathlib import Path

import structlog

from ..utils.exceptions import DiagramExportError

logger = structlog.get_logger(__name__)


def _quote(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_dot(
    dependencies: Mapping[str, Set[str]],
    optional_dependencies: Mapping[str, Set[str]] | None = None,
    graph_name: str = "G",
) -> str:
    """
    Render dependency maps as a DOT digraph.

    Args:
        dependencies: Composed (or mandatory) dependency map, drawn solid
        optional_dependencies: Optional dependency map, drawn dashed
        graph_name: Name of the digraph

    Returns:
        String containing the Graphviz DOT definition
    """
    lines = [f"digraph {graph_name} {{"]
    lines.append("    rankdir=BT;")
    lines.append("    node [shape=record];")
    lines.append("    edge [arrowhead=vee];")

    for name, prerequisites in dependencies.items():
        if not prerequisites:
            lines.append(f"    {_quote(name)};")
            continue
        for prerequisite in sorted(prerequisites):
            lines.append(f"    {_quote(name)} -> {_quote(prerequisite)};")

    for name, prerequisites in (optional_dependencies or {}).items():
        for prerequisite in sorted(prerequisites):
            lines.append(f"    {_quote(name)} -> {_quote(prerequisite)} [style=dashed];")

    lines.append("}")
    return "\n".join(lines) + "\n"


def write_dot(content: str, path: str | Path) -> Path:
    """
    Write DOT content to a file, creating parent directories.

    Args:
        content: DOT text
        path: Target file

    Returns:
        The written path

    Raises:
        DiagramExportError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise DiagramExportError(str(path), e) from e

    logger.info("Dependency diagram written", path=str(path))
    return path
