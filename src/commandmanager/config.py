"""Configuration management for the Command Manager."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml


class TieBreak(str, Enum):
    """How the topological ordering picks among commands that are ready together."""

    INSERTION = "insertion"  # Dependency map order
    LEXICAL = "lexical"  # Alphabetical by name


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"  # "console" or "json"
    file: Path | None = None


@dataclass
class OrderingConfig:
    """
    Dependency collection and ordering policy.

    strict_optional_dependencies rejects optional dependencies on commands
    that are not part of the collected map instead of dropping them.
    """

    tie_break: TieBreak = TieBreak.INSERTION
    strict_optional_dependencies: bool = False


@dataclass
class DiagramConfig:
    """Dependency diagram export configuration."""

    enabled: bool = False
    directory: Path = field(default_factory=lambda: Path("etc"))
    filename: str = "graph.dot"

    @property
    def path(self) -> Path:
        return self.directory / self.filename


@dataclass
class ExecutionConfig:
    """Execution policy."""

    # Turn exceptions raised inside a command body into FAILURE outcomes
    catch_command_errors: bool = True


@dataclass
class ManagerConfig:
    """
    Complete configuration for the Command Manager.

    Passed explicitly to CommandManager and DependencyCollector.
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ordering: OrderingConfig = field(default_factory=OrderingConfig)
    diagram: DiagramConfig = field(default_factory=DiagramConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)

    @classmethod
    def from_file(cls, config_path: Path) -> "ManagerConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            ManagerConfig instance

        Raises:
            ValueError: If the file is not valid YAML or not a mapping
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid configuration file structure in {config_path}: "
                f"expected dictionary, got {type(data).__name__}"
            )

        logging_data = dict(data.get("logging") or {})
        if logging_data.get("file"):
            logging_data["file"] = Path(logging_data["file"])
        logging = LoggingConfig(**logging_data)

        ordering_data = dict(data.get("ordering") or {})
        if "tie_break" in ordering_data:
            ordering_data["tie_break"] = TieBreak(ordering_data["tie_break"])
        ordering = OrderingConfig(**ordering_data)

        diagram_data = dict(data.get("diagram") or {})
        if "directory" in diagram_data:
            diagram_data["directory"] = Path(diagram_data["directory"])
        diagram = DiagramConfig(**diagram_data)

        execution = ExecutionConfig(**(data.get("execution") or {}))

        return cls(logging=logging, ordering=ordering, diagram=diagram, execution=execution)

    def to_file(self, config_path: Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            config_path: Path to save config file
        """
        data = {
            "logging": {
                k: str(v) if isinstance(v, Path) else v
                for k, v in self.logging.__dict__.items()
                if v is not None
            },
            "ordering": {
                k: v.value if isinstance(v, Enum) else v for k, v in self.ordering.__dict__.items()
            },
            "diagram": {
                k: str(v) if isinstance(v, Path) else v for k, v in self.diagram.__dict__.items()
            },
            "execution": dict(self.execution.__dict__),
        }

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_env(cls) -> "ManagerConfig":
        """
        Create configuration from environment variables.

        Environment variables:
            COMMAND_MANAGER_LOG_LEVEL: Logging level (default: INFO)
            COMMAND_MANAGER_LOG_FORMAT: console or json (default: console)
            COMMAND_MANAGER_TIE_BREAK: insertion or lexical (default: insertion)
            COMMAND_MANAGER_STRICT_OPTIONAL: reject unknown optional dependencies
            COMMAND_MANAGER_DIAGRAM_DIR: enables diagram export into this directory

        Returns:
            ManagerConfig instance
        """
        strict_str = os.environ.get("COMMAND_MANAGER_STRICT_OPTIONAL", "false").lower()

        diagram = DiagramConfig()
        diagram_dir = os.environ.get("COMMAND_MANAGER_DIAGRAM_DIR")
        if diagram_dir:
            diagram = DiagramConfig(enabled=True, directory=Path(diagram_dir))

        return cls(
            logging=LoggingConfig(
                level=os.environ.get("COMMAND_MANAGER_LOG_LEVEL", "INFO"),
                format=os.environ.get("COMMAND_MANAGER_LOG_FORMAT", "console"),
            ),
            ordering=OrderingConfig(
                tie_break=TieBreak(os.environ.get("COMMAND_MANAGER_TIE_BREAK", "insertion")),
                strict_optional_dependencies=strict_str in ("true", "1", "yes", "on"),
            ),
            diagram=diagram,
            execution=ExecutionConfig(),
        )


def load_config(config_file: Path | None = None) -> ManagerConfig:
    """
    Load configuration from file or environment variables.

    Args:
        config_file: Optional path to YAML config file

    Returns:
        ManagerConfig instance

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        return ManagerConfig.from_file(config_file)
    return ManagerConfig.from_env()
