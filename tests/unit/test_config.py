"""Unit tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from commandmanager.config import (
    DiagramConfig,
    ExecutionConfig,
    LoggingConfig,
    ManagerConfig,
    OrderingConfig,
    TieBreak,
    load_config,
)


class TestDefaults:
    """Test default configuration values."""

    def test_default_values(self):
        config = ManagerConfig()

        assert config.logging == LoggingConfig(level="INFO", format="console", file=None)
        assert config.ordering.tie_break == TieBreak.INSERTION
        assert config.ordering.strict_optional_dependencies is False
        assert config.diagram.enabled is False
        assert config.diagram.path == Path("etc") / "graph.dot"
        assert config.execution.catch_command_errors is True

    def test_sections_not_shared(self):
        first = ManagerConfig()
        second = ManagerConfig()

        first.diagram.enabled = True

        assert second.diagram.enabled is False


class TestManagerConfigFile:
    """Test YAML loading and saving."""

    def test_from_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "logging": {"level": "DEBUG", "format": "json", "file": "logs/run.log"},
                    "ordering": {"tie_break": "lexical", "strict_optional_dependencies": True},
                    "diagram": {"enabled": True, "directory": "build", "filename": "deps.dot"},
                    "execution": {"catch_command_errors": False},
                }
            )
        )

        config = ManagerConfig.from_file(config_file)

        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.logging.file == Path("logs/run.log")
        assert config.ordering.tie_break == TieBreak.LEXICAL
        assert config.ordering.strict_optional_dependencies is True
        assert config.diagram.path == Path("build/deps.dot")
        assert config.execution.catch_command_errors is False

    def test_partial_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("ordering:\n  tie_break: lexical\n")

        config = ManagerConfig.from_file(config_file)

        assert config.ordering.tie_break == TieBreak.LEXICAL
        assert config.logging.level == "INFO"
        assert config.diagram == DiagramConfig()

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert ManagerConfig.from_file(config_file) == ManagerConfig()

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("logging: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            ManagerConfig.from_file(config_file)

    def test_not_a_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- one\n- two\n")

        with pytest.raises(ValueError, match="expected dictionary, got list"):
            ManagerConfig.from_file(config_file)

    def test_invalid_tie_break(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("ordering:\n  tie_break: random\n")

        with pytest.raises(ValueError):
            ManagerConfig.from_file(config_file)

    def test_round_trip(self, tmp_path):
        config = ManagerConfig(
            logging=LoggingConfig(level="DEBUG", file=Path("run.log")),
            ordering=OrderingConfig(tie_break=TieBreak.LEXICAL, strict_optional_dependencies=True),
            diagram=DiagramConfig(enabled=True, directory=Path("out")),
            execution=ExecutionConfig(catch_command_errors=False),
        )
        config_file = tmp_path / "nested" / "config.yaml"

        config.to_file(config_file)

        assert ManagerConfig.from_file(config_file) == config


class TestManagerConfigEnv:
    """Test configuration from environment variables."""

    def test_from_env_defaults(self, monkeypatch):
        for name in (
            "COMMAND_MANAGER_LOG_LEVEL",
            "COMMAND_MANAGER_LOG_FORMAT",
            "COMMAND_MANAGER_TIE_BREAK",
            "COMMAND_MANAGER_STRICT_OPTIONAL",
            "COMMAND_MANAGER_DIAGRAM_DIR",
        ):
            monkeypatch.delenv(name, raising=False)

        assert ManagerConfig.from_env() == ManagerConfig()

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COMMAND_MANAGER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("COMMAND_MANAGER_LOG_FORMAT", "json")
        monkeypatch.setenv("COMMAND_MANAGER_TIE_BREAK", "lexical")
        monkeypatch.setenv("COMMAND_MANAGER_STRICT_OPTIONAL", "yes")
        monkeypatch.setenv("COMMAND_MANAGER_DIAGRAM_DIR", str(tmp_path))

        config = ManagerConfig.from_env()

        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.ordering.tie_break == TieBreak.LEXICAL
        assert config.ordering.strict_optional_dependencies is True
        assert config.diagram.enabled is True
        assert config.diagram.directory == tmp_path


class TestLoadConfig:
    """Test load_config()."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("logging:\n  level: WARNING\n")

        assert load_config(config_file).logging.level == "WARNING"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("COMMAND_MANAGER_TIE_BREAK", "lexical")

        assert load_config().ordering.tie_break == TieBreak.LEXICAL
