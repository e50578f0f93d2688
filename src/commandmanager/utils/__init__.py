"""Utility functions and exceptions."""

from .exceptions import (
    CatalogError,
    CommandManagerError,
    CommandNotAccessibleError,
    CommandNotFoundError,
    CommandNotInstantiableError,
    CyclicDependencyError,
    DiagramExportError,
    EmptyValueError,
    IllegalCommandAssociationError,
    IllegalStateError,
    MissingElementAttributeError,
    NotARootCommandError,
    OutsideBoundaryError,
    UnknownDependencyError,
)

__all__ = [
    "CommandManagerError",
    "CatalogError",
    "MissingElementAttributeError",
    "EmptyValueError",
    "IllegalCommandAssociationError",
    "CommandNotFoundError",
    "CommandNotInstantiableError",
    "CommandNotAccessibleError",
    "IllegalStateError",
    "CyclicDependencyError",
    "NotARootCommandError",
    "OutsideBoundaryError",
    "UnknownDependencyError",
    "DiagramExportError",
]
