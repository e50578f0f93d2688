"""Command-line interface for the Command Manager."""

from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import ManagerConfig, load_config
from .execution.manager import CommandManager
from .models.results import RunStatus, RunSummary
from .observability.diagram import render_dot, write_dot
from .observability.logger import configure_from_config
from .utils.exceptions import CommandManagerError

app = typer.Typer(
    name="command-manager",
    help="Command Manager - dependency-ordered command execution",
    add_completion=False,
)

console = Console()
logger = structlog.get_logger(__name__)


def _load(config_file: Path | None, log_level: str | None) -> ManagerConfig:
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]ERROR: Invalid configuration:[/red] {e}")
        raise typer.Exit(code=1) from e

    if log_level:
        config.logging.level = log_level.upper()
    configure_from_config(config.logging)
    return config


def _manager(catalog_file: Path, config: ManagerConfig) -> CommandManager:
    try:
        return CommandManager.from_xml_file(catalog_file, config=config)
    except CommandManagerError as e:
        console.print(f"[red]ERROR: Cannot load catalog:[/red] {e}")
        raise typer.Exit(code=1) from e


def _print_order(ordered: list[str]) -> None:
    table = Table(title="Execution Order")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Command", style="bold")
    for position, name in enumerate(ordered, start=1):
        table.add_row(str(position), name)
    console.print(table)


def _print_summary(summary: RunSummary) -> None:
    table = Table(title="Run Summary")
    table.add_column("Command", style="bold")
    table.add_column("Outcome")
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Message")

    styles = {"success": "green", "warning": "yellow", "failure": "red"}
    for result in summary.results:
        state = result.outcome.state.value
        table.add_row(
            result.name,
            f"[{styles[state]}]{state.upper()}[/{styles[state]}]",
            f"{result.duration_ms:.1f}",
            result.outcome.message,
        )
    for name in summary.skipped:
        table.add_row(name, "[dim]SKIPPED[/dim]", "-", "")

    console.print(table)
    console.print(summary.get_summary())


def _write_diagrams(manager: CommandManager, start: list[str], end: list[str]) -> None:
    collector = manager.dependency_collector
    collected = collector.collect()
    targets = [(collector.diagram_path(), collector.export_collected_diagram(collected))]

    if start or end:
        boundary = collector.restrict_to_boundary(collected.composed, start, end)
        targets.append(
            (
                collector.diagram_path("_boundary"),
                collector.export_diagram(boundary, suffix="_boundary"),
            )
        )

    failed = [str(target) for target, written in targets if written is None]
    if failed:
        console.print(
            "[yellow]WARNING: Dependency diagram could not be written to[/yellow] "
            + ", ".join(failed)
        )
        raise typer.Exit(code=1)

    for _, written in targets:
        console.print(f"[green]Dependency diagram written to {written}[/green]")


@app.command()
def order(
    catalog_file: Path = typer.Argument(..., help="Catalog XML descriptor", exists=True),
    start: list[str] = typer.Option([], "--start", "-s", help="Root command to start from"),
    end: list[str] = typer.Option([], "--end", "-e", help="Command to end with"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(None, "--log-level", help="Override logging level"),
) -> None:
    """
    Print the execution order of the catalog commands.

    Examples:
        command-manager order etc/commands.xml
        command-manager order etc/commands.xml --start ReadProperties --end Report
    """
    config = _load(config_file, log_level)
    manager = _manager(catalog_file, config)

    try:
        ordered = manager.get_ordered_commands(start, end)
    except CommandManagerError as e:
        console.print(f"[red]ERROR: Ordering failed:[/red] {e}")
        raise typer.Exit(code=1) from e

    _print_order(ordered)


@app.command()
def run(
    catalog_file: Path = typer.Argument(..., help="Catalog XML descriptor", exists=True),
    start: list[str] = typer.Option([], "--start", "-s", help="Root command to start from"),
    end: list[str] = typer.Option([], "--end", "-e", help="Command to end with"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(None, "--log-level", help="Override logging level"),
    only_graph: bool = typer.Option(
        False, "--only-graph", help="Write the dependency diagram and exit without executing"
    ),
) -> None:
    """
    Order the catalog commands and execute them.

    Exits with code 1 when a command fails and the run is aborted.

    Examples:
        command-manager run etc/commands.xml
        command-manager run etc/commands.xml --only-graph
    """
    config = _load(config_file, log_level)
    manager = _manager(catalog_file, config)

    try:
        ordered = manager.get_ordered_commands(start, end)
        if only_graph:
            _write_diagrams(manager, start, end)
            return

        _print_order(ordered)
        summary = manager.execute_commands(ordered)
    except CommandManagerError as e:
        console.print(f"[red]ERROR: Run failed:[/red] {e}")
        raise typer.Exit(code=1) from e

    _print_summary(summary)
    if summary.status == RunStatus.ABORTED:
        raise typer.Exit(code=1)


@app.command()
def graph(
    catalog_file: Path = typer.Argument(..., help="Catalog XML descriptor", exists=True),
    output_file: Path | None = typer.Option(
        None, "--output", "-o", help="DOT output file (default: configured diagram path)"
    ),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
) -> None:
    """
    Write the DOT diagram of the collected dependencies.

    Mandatory dependencies are drawn solid, optional ones dashed.

    Examples:
        command-manager graph etc/commands.xml -o build/graph.dot
        dot -Tpng build/graph.dot -o build/graph.png
    """
    config = _load(config_file, None)
    manager = _manager(catalog_file, config)
    target = output_file or config.diagram.path

    try:
        collected = manager.dependency_collector.collect()
        optional = {
            name: prerequisites - collected.mandatory.get(name, set())
            for name, prerequisites in collected.composed.items()
        }
        path = write_dot(render_dot(collected.mandatory, optional), target)
    except CommandManagerError as e:
        console.print(f"[red]ERROR: Diagram export failed:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Dependency diagram written to {path}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel.fit(
            "[bold]Command Manager[/bold]\n\n"
            f"Version: [cyan]{__version__}[/cyan]\n\n"
            "[bold]Features:[/bold]\n"
            "- XML and in-memory command catalogs\n"
            "- Mandatory and optional dependencies\n"
            "- Cycle-safe command graph\n"
            "- Bounded topological ordering\n"
            "- Sequential execution with abort on failure\n"
            "- Graphviz DOT export",
            title="Version Info",
        )
    )


if __name__ == "__main__":
    app()
