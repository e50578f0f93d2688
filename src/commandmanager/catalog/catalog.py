"""Command Catalog - maps command names to implementations.

A catalog is built from an XML descriptor or from an in-memory mapping:

    <catalog>
        <command name="ReadProperties" className="pipeline.commands.ReadProperties"/>
        <command name="LoadCorpus" className="pipeline.commands:LoadCorpus"/>
    </catalog>

Implementation references are dotted paths (``package.module.Class``) or
``package.module:Class``. They are imported lazily, on first resolution, so a
catalog can describe commands whose modules are only importable at run time.
Several names may share one implementation; one name bound to two different
implementations is rejected.
"""

import importlib
import inspect
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Annotated, Any

import structlog
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from ..models.command import Command, CommandClass
from ..utils.exceptions import (
    CatalogError,
    CommandNotAccessibleError,
    CommandNotFoundError,
    CommandNotInstantiableError,
    EmptyValueError,
    IllegalCommandAssociationError,
    MissingElementAttributeError,
)

logger = structlog.get_logger(__name__)

COMMAND_ELEMENT = "command"
NAME_ATTRIBUTE = "name"
CLASS_ATTRIBUTE = "className"


def strip_whitespace(v: Any) -> Any:
    """Strip surrounding whitespace from string values."""
    if isinstance(v, str):
        return v.strip()
    return v


class CatalogEntry(BaseModel):
    """
    One declared command of a catalog.

    Attributes:
        name: Unique command name
        class_name: Implementation reference
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: Annotated[str, BeforeValidator(strip_whitespace)]
    class_name: Annotated[str, Field(alias=CLASS_ATTRIBUTE), BeforeValidator(strip_whitespace)]

    @field_validator("name", "class_name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_command_class(self) -> CommandClass:
        return CommandClass(self.name, self.class_name)


def class_reference(implementation: type) -> str:
    """Return the dotted reference used to identify a command class."""
    return f"{implementation.__module__}.{implementation.__qualname__}"


def import_reference(reference: str) -> Any:
    """
    Import the object named by a dotted or colon-separated reference.

    Args:
        reference: ``package.module.Class``, ``package.module.Outer.Inner``
            or ``package.module:Class``

    Returns:
        The referenced object

    Raises:
        ImportError: If no prefix of the reference is an importable module
        AttributeError: If the module lacks the referenced attribute
    """
    if ":" in reference:
        module_name, _, qualname = reference.partition(":")
        target: Any = importlib.import_module(module_name)
        for part in qualname.split("."):
            target = getattr(target, part)
        return target

    parts = reference.split(".")
    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            target = importlib.import_module(module_name)
        except ModuleNotFoundError:
            continue
        for part in parts[index:]:
            target = getattr(target, part)
        return target

    raise ImportError(f"No importable module in reference '{reference}'")


class Catalog:
    """
    Registry resolving command names to fresh Command instances.

    Every call to get_command() returns a new instance, so commands never
    share instance state between runs.
    """

    def __init__(self, entries: Iterable[CatalogEntry] = ()) -> None:
        """
        Initialize catalog from validated entries.

        Args:
            entries: Catalog entries in declaration order

        Raises:
            IllegalCommandAssociationError: If a name is bound to two implementations
        """
        self._entries: dict[str, CatalogEntry] = {}
        self._classes: dict[str, type] = {}

        for entry in entries:
            self._register(entry)

        logger.debug("Catalog created", commands=len(self._entries))

    def _register(self, entry: CatalogEntry, implementation: type | None = None) -> None:
        existing = self._entries.get(entry.name)
        if existing is not None:
            if existing.class_name != entry.class_name:
                raise IllegalCommandAssociationError(
                    entry.name, existing.class_name, entry.class_name
                )
            logger.debug("Duplicate catalog entry ignored", command=entry.name)
            return

        self._entries[entry.name] = entry
        if implementation is not None:
            self._classes[entry.class_name] = implementation

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, commands: Mapping[str, type | str]) -> "Catalog":
        """
        Build a catalog from a name -> implementation mapping.

        Args:
            commands: Command names mapped to Command subclasses or references

        Returns:
            Catalog instance

        Raises:
            EmptyValueError: If a name or reference is empty
            CommandNotInstantiableError: If a value is neither a class nor a reference
        """
        catalog = cls()
        for name, implementation in commands.items():
            if isinstance(implementation, type):
                entry = _validated_entry(name, class_reference(implementation))
                catalog._register(entry, implementation)
            elif isinstance(implementation, str):
                catalog._register(_validated_entry(name, implementation))
            else:
                raise CommandNotInstantiableError(
                    name,
                    repr(implementation),
                    f"expected a Command class or reference, got {type(implementation).__name__}",
                )
        return catalog

    @classmethod
    def from_xml_file(cls, path: str | Path) -> "Catalog":
        """
        Build a catalog from an XML descriptor file.

        Args:
            path: Path to the descriptor

        Returns:
            Catalog instance

        Raises:
            CatalogError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            tree = ET.parse(path)
        except FileNotFoundError as e:
            raise CatalogError(f"Catalog file not found: {path}") from e
        except ET.ParseError as e:
            raise CatalogError(f"Invalid XML in catalog file {path}: {e}") from e

        logger.info("Loading catalog", path=str(path))
        return cls.from_element(tree.getroot())

    @classmethod
    def from_xml_string(cls, text: str) -> "Catalog":
        """Build a catalog from XML descriptor text."""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise CatalogError(f"Invalid catalog XML: {e}") from e
        return cls.from_element(root)

    @classmethod
    def from_element(cls, root: ET.Element) -> "Catalog":
        """
        Build a catalog from a parsed ``<catalog>`` element.

        Args:
            root: Root element whose ``<command>`` children declare commands

        Returns:
            Catalog instance

        Raises:
            MissingElementAttributeError: If a command lacks name or className
            EmptyValueError: If name or className is empty
            IllegalCommandAssociationError: If a name is bound twice differently
        """
        entries = []
        for element in root.findall(COMMAND_ELEMENT):
            name = element.get(NAME_ATTRIBUTE)
            if name is None:
                raise MissingElementAttributeError(element.tag, NAME_ATTRIBUTE)
            class_name = element.get(CLASS_ATTRIBUTE)
            if class_name is None:
                raise MissingElementAttributeError(element.tag, CLASS_ATTRIBUTE)
            entries.append(_validated_entry(name, class_name))
        return cls(entries)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def command_names(self) -> list[str]:
        """All command names in declaration order."""
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_command_class(self, name: str) -> CommandClass:
        """
        Get the identity record of a command.

        Raises:
            CommandNotFoundError: If the name is not registered
        """
        entry = self._entries.get(name)
        if entry is None:
            raise CommandNotFoundError(name)
        return entry.to_command_class()

    def get_command(self, name: str) -> Command:
        """
        Instantiate the command registered under a name.

        Args:
            name: Command name

        Returns:
            A new Command instance

        Raises:
            CommandNotFoundError: If the name is not registered
            CommandNotInstantiableError: If the implementation cannot be imported,
                is abstract, or is not a Command
            CommandNotAccessibleError: If the constructor cannot be called
                without arguments
        """
        entry = self._entries.get(name)
        if entry is None:
            raise CommandNotFoundError(name)

        implementation = self._resolve_class(entry)

        if not isinstance(implementation, type) or not issubclass(implementation, Command):
            raise CommandNotInstantiableError(name, entry.class_name, "not a Command subclass")
        if inspect.isabstract(implementation):
            raise CommandNotInstantiableError(name, entry.class_name, "class is abstract")

        try:
            return implementation()
        except Exception as e:
            raise CommandNotAccessibleError(name, entry.class_name, e) from e

    def _resolve_class(self, entry: CatalogEntry) -> Any:
        cached = self._classes.get(entry.class_name)
        if cached is not None:
            return cached

        try:
            implementation = import_reference(entry.class_name)
        except (ImportError, AttributeError) as e:
            raise CommandNotInstantiableError(
                entry.name, entry.class_name, f"cannot import implementation ({e})", e
            ) from e

        self._classes[entry.class_name] = implementation
        return implementation


def _validated_entry(name: str, class_name: str) -> CatalogEntry:
    try:
        return CatalogEntry(name=name, class_name=class_name)
    except ValidationError as e:
        location = e.errors()[0].get("loc", ("name",))
        field_name = str(location[0]) if location else "name"
        raise EmptyValueError(field_name, e) from e
