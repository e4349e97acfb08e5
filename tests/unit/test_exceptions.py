"""
Unit tests for custom exceptions.

Tests exception hierarchy, failure trees and message scrubbing.
"""

import pytest

from resource_schema.core.failures import NativeFailure
from resource_schema.exceptions import (ConfigurationError,
                                        ResourceSchemaError,
                                        SchemaProcessingError,
                                        ValidationError,
                                        build_full_exception_message)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_resource_schema_error_is_runtime_error(self):
        """Test that ResourceSchemaError is a RuntimeError."""
        error = ResourceSchemaError("test error")
        assert isinstance(error, RuntimeError)

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("invalid"),
            ConfigurationError("config invalid"),
            SchemaProcessingError("cannot interpret"),
        ],
    )
    def test_subclasses_inherit_from_base(self, error):
        """Test that every package error inherits from ResourceSchemaError."""
        assert isinstance(error, ResourceSchemaError)
        assert isinstance(error, RuntimeError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_base_error_message(self):
        """Test ResourceSchemaError message."""
        error = ResourceSchemaError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.context == {}

    def test_base_error_with_context(self):
        """Test ResourceSchemaError message with context."""
        error = ResourceSchemaError("Something went wrong", context={"type_name": "A::B::C"})
        assert "context:" in str(error)
        assert "type_name=A::B::C" in str(error)

    def test_configuration_error_context(self):
        """Test ConfigurationError records key and value in its context."""
        error = ConfigurationError("bad $id", config_key="$id", config_value="::")
        assert error.config_key == "$id"
        assert error.config_value == "::"
        assert error.context == {"config_key": "$id", "config_value": "::"}

    def test_schema_processing_error_type_name(self):
        """Test SchemaProcessingError records the typeName."""
        error = SchemaProcessingError("Cannot interpret handlers", type_name="A::B::C")
        assert error.type_name == "A::B::C"
        assert error.context["type_name"] == "A::B::C"


@pytest.mark.unit
class TestValidationErrorTree:
    """Test failure tree construction."""

    def test_leaf_attributes(self):
        """Test a leaf failure keeps keyword and pointer."""
        error = ValidationError("#/A: boom", keyword="type", schema_pointer="#/A")
        assert error.keyword == "type"
        assert error.schema_pointer == "#/A"
        assert error.causing_exceptions == ()
        assert not error.is_aggregate

    def test_aggregate_single_failure_is_returned_as_is(self):
        """Test aggregating one failure does not add a parent node."""
        leaf = ValidationError("#/A: boom", keyword="type", schema_pointer="#/A")
        assert ValidationError.aggregate([leaf]) is leaf

    def test_aggregate_several_failures(self):
        """Test aggregating several failures adds a counting parent node."""
        leaves = [
            ValidationError("#/A: boom", keyword="type", schema_pointer="#/A"),
            ValidationError("#/B: boom", keyword="type", schema_pointer="#/B"),
        ]
        parent = ValidationError.aggregate(leaves)
        assert parent.is_aggregate
        assert parent.keyword is None
        assert parent.schema_pointer == "#"
        assert parent.message == "#: 2 schema violations found"
        assert list(parent.causing_exceptions) == leaves

    def test_iter_failures_depth_first(self):
        """Test iter_failures yields parents before children, in order."""
        inner = ValidationError("#/A/x: boom", keyword="type", schema_pointer="#/A/x")
        middle = ValidationError(
            "#/A: no subschema matched", keyword="anyOf", schema_pointer="#/A",
            causing_exceptions=[inner],
        )
        last = ValidationError("#/B: boom", keyword="type", schema_pointer="#/B")
        root = ValidationError.aggregate([middle, last])
        assert list(root.iter_failures()) == [root, middle, inner, last]


@pytest.mark.unit
class TestScrubbing:
    """Test message scrubbing of engine failures."""

    def test_safe_keyword_message_passes_through(self):
        """Test that a safe-list keyword keeps its message."""
        failure = NativeFailure("#/A: expected type: string, found: integer", "type", "#/A")
        error = ValidationError.from_native(failure)
        assert error.message == "#/A: expected type: string, found: integer"
        assert error.keyword == "type"

    @pytest.mark.parametrize("keyword", ["pattern", "enum", "const", "format", "minimum", "not"])
    def test_unsafe_keyword_message_is_replaced(self, keyword):
        """Test that keywords outside the safe list get the template message."""
        failure = NativeFailure("#/Password: 'hunter2' does not match", keyword, "#/Password")
        error = ValidationError.from_native(failure)
        assert error.message == f"#/Password: failed validation constraint for keyword [{keyword}]"
        assert "hunter2" not in error.message

    def test_children_are_scrubbed_recursively(self):
        """Test that children of a safe parent are scrubbed as well."""
        child = NativeFailure("#/A: 'secret' is not one of ['x']", "enum", "#/A")
        parent = NativeFailure(
            "#/A: no subschema matched out of the total 1 subschemas", "anyOf", "#/A", (child,)
        )
        error = ValidationError.from_native(parent)
        assert error.causing_exceptions[0].message == (
            "#/A: failed validation constraint for keyword [enum]"
        )


class TestFullExceptionMessage:
    """Test build_full_exception_message."""

    def test_single_failure(self):
        """Test the message of a single failure."""
        error = ValidationError("#: required key [properties] not found", keyword="required")
        assert build_full_exception_message(error) == "#: required key [properties] not found"

    def test_aggregate_nodes_are_skipped(self):
        """Test that only non-aggregate messages appear, one per line."""
        root = ValidationError.aggregate(
            [
                ValidationError("#/A: first", keyword="type", schema_pointer="#/A"),
                ValidationError("#/B: second", keyword="type", schema_pointer="#/B"),
            ]
        )
        assert build_full_exception_message(root) == "#/A: first\n#/B: second"
