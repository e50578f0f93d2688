"""Unit tests for the structured logger."""

import logging

import pytest
import structlog

from commandmanager.config import LoggingConfig
from commandmanager.observability.logger import (
    TRACE,
    VERBOSE,
    LogContext,
    add_context,
    clear_all_context,
    clear_context,
    configure_from_config,
    configure_logging,
    get_context,
    get_log_level,
)


class TestLoggingConfiguration:
    """Test logging configuration functions."""

    @pytest.fixture
    def restore_logger_levels(self):
        """Undo per-logger levels set by log_filter."""
        levels = {
            name: logger.level
            for name, logger in logging.root.manager.loggerDict.items()
            if isinstance(logger, logging.Logger)
        }
        yield
        for name, logger in logging.root.manager.loggerDict.items():
            if isinstance(logger, logging.Logger):
                logger.setLevel(levels.get(name, logging.NOTSET))

    def test_configure_logging_defaults(self):
        """Test configure_logging with default parameters."""
        configure_logging()

        assert logging.getLogger().level == logging.INFO

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR"])
    def test_configure_logging_different_levels(self, level):
        """Test configure_logging with different log levels."""
        configure_logging(level=level)

        assert logging.getLogger().level == getattr(logging, level)

    def test_configure_logging_custom_levels(self):
        configure_logging(level="trace")
        assert logging.getLogger().level == TRACE

        configure_logging(level="VERBOSE")
        assert logging.getLogger().level == VERBOSE

    def test_configure_logging_with_file(self, tmp_path):
        """Test that events are copied to the log file."""
        log_file = tmp_path / "nested" / "run.log"

        configure_logging(log_file=log_file, level="INFO")
        structlog.get_logger("commandmanager.test").info("file test message")

        assert log_file.exists()
        assert "file test message" in log_file.read_text()

    def test_configure_logging_json(self, tmp_path):
        log_file = tmp_path / "run.json"

        configure_logging(json_logs=True, log_file=log_file)
        structlog.get_logger("commandmanager.test").info("json message", command="Cmd1")

        content = log_file.read_text()
        assert '"event": "json message"' in content
        assert '"command": "Cmd1"' in content

    def test_log_filter_raises_other_loggers(self, restore_logger_levels):
        logging.getLogger("commandmanager.dependency.collector")
        logging.getLogger("thirdparty.noise")

        configure_logging(level="DEBUG", log_filter="collector")

        assert logging.getLogger("thirdparty.noise").level == logging.WARNING
        assert logging.getLogger("commandmanager.dependency.collector").level != logging.WARNING

    def test_configure_from_config(self, tmp_path):
        log_file = tmp_path / "run.log"

        configure_from_config(LoggingConfig(level="WARNING", format="json", file=log_file))

        assert logging.getLogger().level == logging.WARNING


class TestLogLevels:
    """Test level name resolution."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("TRACE", 5),
            ("debug", logging.DEBUG),
            ("VERBOSE", 15),
            ("INFO", logging.INFO),
            ("critical", logging.CRITICAL),
            ("NOPE", logging.INFO),
        ],
    )
    def test_get_log_level(self, name, expected):
        assert get_log_level(name) == expected

    def test_level_names_registered(self):
        assert logging.getLevelName(TRACE) == "TRACE"
        assert logging.getLevelName(VERBOSE) == "VERBOSE"


class TestLogContext:
    """Test log context helpers."""

    def setup_method(self):
        clear_all_context()

    def teardown_method(self):
        clear_all_context()

    def test_log_context_scoped(self):
        with LogContext(command="Cmd1"):
            assert get_context() == {"command": "Cmd1"}

            with LogContext(command="Cmd2", attempt=1):
                assert get_context() == {"command": "Cmd2", "attempt": 1}

            assert get_context() == {"command": "Cmd1"}

        assert get_context() == {}

    def test_log_context_reset_on_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext(command="Cmd1"):
                raise RuntimeError("boom")

        assert get_context() == {}

    def test_add_and_clear_context(self):
        add_context(run="nightly", command="Cmd1")
        assert get_context() == {"run": "nightly", "command": "Cmd1"}

        clear_context("command")
        assert get_context() == {"run": "nightly"}

        clear_context("missing")
        assert get_context() == {"run": "nightly"}

        clear_all_context()
        assert get_context() == {}

    def test_context_merged_into_events(self, tmp_path):
        log_file = tmp_path / "run.json"
        configure_logging(json_logs=True, log_file=log_file)

        with LogContext(command="Cmd4"):
            structlog.get_logger("commandmanager.test").info("inside command")

        assert '"command": "Cmd4"' in log_file.read_text()
