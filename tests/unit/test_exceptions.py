"""Unit tests for Custom Exceptions."""

import pytest

from commandmanager.utils.exceptions import (
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


class TestHierarchy:
    """Test the exception taxonomy."""

    @pytest.mark.parametrize(
        "error",
        [
            MissingElementAttributeError("command", "name"),
            EmptyValueError("name"),
            IllegalCommandAssociationError("A", "pipeline.A", "pipeline.B"),
            CommandNotFoundError("A"),
            CommandNotInstantiableError("A", "pipeline.A", "class is abstract"),
            CommandNotAccessibleError("A", "pipeline.A"),
        ],
    )
    def test_catalog_errors(self, error):
        assert isinstance(error, CatalogError)
        assert isinstance(error, CommandManagerError)
        assert not isinstance(error, IllegalStateError)

    @pytest.mark.parametrize(
        "error",
        [
            CyclicDependencyError("cycle"),
            NotARootCommandError("B", {"A"}),
            OutsideBoundaryError("D", ["A"]),
            UnknownDependencyError("A", "Z"),
        ],
    )
    def test_ordering_errors(self, error):
        assert isinstance(error, IllegalStateError)
        assert isinstance(error, CommandManagerError)
        assert not isinstance(error, CatalogError)

    def test_diagram_export_error(self):
        error = DiagramExportError("etc/graph.dot", PermissionError("denied"))

        assert isinstance(error, CommandManagerError)
        assert not isinstance(error, (CatalogError, IllegalStateError))


class TestErrorContext:
    """Test that errors keep their context."""

    def test_missing_element_attribute(self):
        error = MissingElementAttributeError("command", "className")

        assert str(error) == "Catalog element <command> is missing attribute 'className'"
        assert error.element == "command"
        assert error.attribute == "className"

    def test_empty_value(self):
        cause = ValueError("must not be empty")
        error = EmptyValueError("name", cause)

        assert error.field_name == "name"
        assert error.original_error is cause

    def test_illegal_association(self):
        error = IllegalCommandAssociationError("A", "pipeline.A", "pipeline.B")

        assert "already bound to 'pipeline.A'" in str(error)
        assert error.name == "A"

    def test_command_not_found(self):
        error = CommandNotFoundError("Missing")

        assert str(error) == "Command not found: Missing"
        assert error.name == "Missing"

    def test_not_instantiable(self):
        cause = ImportError("no module")
        error = CommandNotInstantiableError("A", "pkg.A", "cannot import", cause)

        assert error.class_name == "pkg.A"
        assert error.original_error is cause
        assert "not instantiable: cannot import" in str(error)

    def test_not_accessible(self):
        error = CommandNotAccessibleError("A", "pkg.A")

        assert error.original_error is None
        assert "not accessible" in str(error)

    def test_cyclic_dependency_remaining(self):
        error = CyclicDependencyError("cycle", remaining={"A": {"B"}, "B": {"A"}})

        assert error.remaining == {"A": {"B"}, "B": {"A"}}
        assert CyclicDependencyError("cycle").remaining == {}

    def test_not_a_root(self):
        error = NotARootCommandError("B", {"A"})

        assert str(error) == "Given command is not a root: B depends on ['A']"
        assert error.prerequisites == {"A"}

    def test_outside_boundary(self):
        error = OutsideBoundaryError("D", ["A"])

        assert str(error) == "End command D is not reachable from start commands ['A']"
        assert error.name == "D"
        assert error.start_names == ["A"]

    def test_unknown_dependency(self):
        error = UnknownDependencyError("A", "Z")

        assert error.name == "A"
        assert error.dependency == "Z"

    def test_diagram_export_keeps_path(self):
        cause = OSError("read-only")
        error = DiagramExportError("etc/graph.dot", cause)

        assert error.path == "etc/graph.dot"
        assert error.original_error is cause
        assert "etc/graph.dot" in str(error)
