"""Pytest configuration and shared fixtures.

This module provides reusable fixtures for testing the Command Manager.
Fixtures are organized by category:
- Catalog fixtures: Catalogs wired from the commands in helpers.py
- File fixtures: XML descriptors and importable command modules on disk
"""

import sys
import textwrap
from pathlib import Path

import pytest

from commandmanager.catalog.catalog import Catalog
from commandmanager.config import ManagerConfig
from helpers import Cmd1, Cmd2, Cmd3, Cmd4, FailingCommand, SilentCommand


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def dummy_catalog() -> Catalog:
    """Catalog holding Cmd1..Cmd4 in declaration order."""
    return Catalog.from_mapping({"Cmd1": Cmd1, "Cmd2": Cmd2, "Cmd3": Cmd3, "Cmd4": Cmd4})


@pytest.fixture
def abort_catalog() -> Catalog:
    """Catalog where the middle command of X, Y, Z fails."""
    return Catalog.from_mapping({"X": Cmd1, "Y": FailingCommand, "Z": SilentCommand})


@pytest.fixture
def config() -> ManagerConfig:
    """Default configuration."""
    return ManagerConfig()


# =============================================================================
# File Fixtures
# =============================================================================

COMMANDS_MODULE_NAME = "pipeline_commands"

COMMANDS_MODULE_SOURCE = """
from commandmanager import Command, ExecutionOutcome


class Recording(Command):
    def execute(self, context):
        context.setdefault("executed", []).append(type(self).__name__)
        return ExecutionOutcome.success()


class Cmd1(Recording):
    pass


class Cmd2(Recording):
    def get_before_dependencies(self):
        return {"Cmd1"}


class Cmd3(Recording):
    def get_optional_before_dependencies(self):
        return {"Cmd1", "Cmd2"}


class Cmd4(Recording):
    def get_before_dependencies(self):
        return {"Cmd1"}

    def get_after_dependencies(self):
        return {"Cmd2"}

    def get_optional_after_dependencies(self):
        return {"Cmd3"}


class Broken(Command):
    def get_before_dependencies(self):
        return {"Cmd1"}

    def execute(self, context):
        return ExecutionOutcome.failure("broken on purpose")
"""


@pytest.fixture
def commands_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write an importable module of commands and return its name."""
    module_dir = tmp_path / "modules"
    module_dir.mkdir()
    (module_dir / f"{COMMANDS_MODULE_NAME}.py").write_text(textwrap.dedent(COMMANDS_MODULE_SOURCE))
    monkeypatch.syspath_prepend(str(module_dir))
    yield COMMANDS_MODULE_NAME
    sys.modules.pop(COMMANDS_MODULE_NAME, None)


@pytest.fixture
def catalog_xml(tmp_path: Path, commands_module: str) -> Path:
    """XML descriptor declaring Cmd1..Cmd4 from the commands module."""
    path = tmp_path / "commands.xml"
    path.write_text(
        "<catalog>\n"
        + "".join(
            f'    <command name="{name}" className="{commands_module}.{name}"/>\n'
            for name in ("Cmd1", "Cmd2", "Cmd3", "Cmd4")
        )
        + "</catalog>\n"
    )
    return path


@pytest.fixture
def broken_catalog_xml(tmp_path: Path, commands_module: str) -> Path:
    """XML descriptor whose second command fails."""
    path = tmp_path / "broken.xml"
    path.write_text(
        "<catalog>\n"
        f'    <command name="Cmd1" className="{commands_module}:Cmd1"/>\n'
        f'    <command name="Broken" className="{commands_module}:Broken"/>\n'
        "</catalog>\n"
    )
    return path
