"""Custom exceptions for the Command Manager.

Exception Hierarchy:
-------------------
CommandManagerError (base)
├── CatalogError
│   ├── MissingElementAttributeError    # Catalog entry without name/className
│   ├── EmptyValueError                 # Catalog entry with an empty name/className
│   ├── IllegalCommandAssociationError  # One name bound to two implementations
│   ├── CommandNotFoundError            # No implementation registered for a name
│   ├── CommandNotInstantiableError     # Implementation cannot be constructed
│   └── CommandNotAccessibleError       # Constructor cannot be called
├── IllegalStateError
│   ├── CyclicDependencyError           # Leftover entries after topological elimination
│   ├── NotARootCommandError            # Start command has prerequisites
│   ├── OutsideBoundaryError            # End command not reachable from the start commands
│   └── UnknownDependencyError          # Optional dependency on an unknown command (strict)
└── DiagramExportError                  # DOT file could not be written

Usage Guidelines:
----------------
1. Catalog and ordering errors are fatal. They are raised to the caller of
   catalog construction, ordering or execution and are never retried.

2. Command outcomes (WARNING, FAILURE) are not exceptions. They are values
   returned by Command.execute() and reported in the RunSummary.

3. DiagramExportError never affects scheduling. Callers on the ordering path
   log it as a warning and carry on.
"""


class CommandManagerError(Exception):
    """Base exception for all command manager errors."""

    pass


class CatalogError(CommandManagerError):
    """Raised when a catalog is malformed or a command cannot be resolved."""

    pass


class MissingElementAttributeError(CatalogError):
    """Raised when a catalog element lacks a required attribute."""

    def __init__(self, element: str, attribute: str) -> None:
        """
        Initialize MissingElementAttributeError.

        Args:
            element: Tag of the offending catalog element.
            attribute: Name of the missing attribute.
        """
        super().__init__(f"Catalog element <{element}> is missing attribute '{attribute}'")
        self.element = element
        self.attribute = attribute


class EmptyValueError(CatalogError):
    """Raised when a catalog entry carries an empty name or class name."""

    def __init__(self, field_name: str, original_error: Exception | None = None) -> None:
        """
        Initialize EmptyValueError.

        Args:
            field_name: Name of the field that was empty.
            original_error: Optional validation error that detected it.
        """
        super().__init__(f"Catalog entry field '{field_name}' must not be empty")
        self.field_name = field_name
        self.original_error = original_error


class IllegalCommandAssociationError(CatalogError):
    """Raised when one command name is bound to two different implementations."""

    def __init__(self, name: str, existing: str, conflicting: str) -> None:
        """
        Initialize IllegalCommandAssociationError.

        Args:
            name: Command name declared twice.
            existing: Implementation registered first.
            conflicting: Implementation that conflicts with it.
        """
        super().__init__(
            f"Command '{name}' is already bound to '{existing}', cannot bind it to '{conflicting}'"
        )
        self.name = name
        self.existing = existing
        self.conflicting = conflicting


class CommandNotFoundError(CatalogError):
    """Raised when a command name is unknown."""

    def __init__(self, name: str) -> None:
        """
        Initialize CommandNotFoundError.

        Args:
            name: The command name that was looked up.
        """
        super().__init__(f"Command not found: {name}")
        self.name = name


class CommandNotInstantiableError(CatalogError):
    """Raised when a command implementation cannot be constructed."""

    def __init__(
        self, name: str, class_name: str, reason: str, original_error: Exception | None = None
    ) -> None:
        """
        Initialize CommandNotInstantiableError.

        Args:
            name: Command name being resolved.
            class_name: Implementation reference that failed.
            reason: Short explanation.
            original_error: Optional underlying exception.
        """
        super().__init__(f"Command '{name}' ({class_name}) is not instantiable: {reason}")
        self.name = name
        self.class_name = class_name
        self.original_error = original_error


class CommandNotAccessibleError(CatalogError):
    """Raised when a command constructor cannot be called without arguments."""

    def __init__(self, name: str, class_name: str, original_error: Exception | None = None) -> None:
        """
        Initialize CommandNotAccessibleError.

        Args:
            name: Command name being resolved.
            class_name: Implementation reference whose constructor failed.
            original_error: Optional underlying exception.
        """
        super().__init__(f"Constructor of command '{name}' ({class_name}) is not accessible")
        self.name = name
        self.class_name = class_name
        self.original_error = original_error


class IllegalStateError(CommandManagerError):
    """Raised when dependency declarations cannot produce a valid order."""

    pass


class CyclicDependencyError(IllegalStateError):
    """
    Raised when topological elimination leaves entries behind.

    Leftover entries mean the dependency map contained a cycle, or a
    prerequisite that is not itself a key of the map.
    """

    def __init__(self, message: str, remaining: dict[str, set[str]] | None = None) -> None:
        """
        Initialize CyclicDependencyError.

        Args:
            message: Error message.
            remaining: Entries left unordered, with their unresolved prerequisites.
        """
        super().__init__(message)
        self.remaining = remaining or {}


class NotARootCommandError(IllegalStateError):
    """Raised when a start command passed to boundary restriction has prerequisites."""

    def __init__(self, name: str, prerequisites: set[str]) -> None:
        """
        Initialize NotARootCommandError.

        Args:
            name: The start command.
            prerequisites: Its non-empty prerequisite set.
        """
        super().__init__(
            f"Given command is not a root: {name} depends on {sorted(prerequisites)}"
        )
        self.name = name
        self.prerequisites = prerequisites


class OutsideBoundaryError(IllegalStateError):
    """Raised when an end command lies outside the closure of the start commands."""

    def __init__(self, name: str, start_names: list[str]) -> None:
        """
        Initialize OutsideBoundaryError.

        Args:
            name: The end command.
            start_names: Start commands of the boundary.
        """
        super().__init__(
            f"End command {name} is not reachable from start commands {start_names}"
        )
        self.name = name
        self.start_names = start_names


class UnknownDependencyError(IllegalStateError):
    """Raised in strict mode when an optional dependency names an unknown command."""

    def __init__(self, name: str, dependency: str) -> None:
        """
        Initialize UnknownDependencyError.

        Args:
            name: Command declaring the optional dependency.
            dependency: Unknown command it refers to.
        """
        super().__init__(f"Command '{name}' declares optional dependency on unknown '{dependency}'")
        self.name = name
        self.dependency = dependency


class DiagramExportError(CommandManagerError):
    """Raised when a dependency diagram cannot be written."""

    def __init__(self, path: str, original_error: Exception | None = None) -> None:
        """
        Initialize DiagramExportError.

        Args:
            path: Target file path.
            original_error: Optional underlying I/O error.
        """
        super().__init__(f"Could not write dependency diagram to {path}: {original_error}")
        self.path = path
        self.original_error = original_error
