"""
Custom exceptions for resource-schema.

These exceptions provide more specific error types while maintaining
backward compatibility with RuntimeError.
"""

from typing import Any, Dict, Iterable, Optional, Sequence

from .constants import ROOT_POINTER, SAFE_KEYWORDS, SCRUBBED_MESSAGE_TEMPLATE


class ResourceSchemaError(RuntimeError):
    """
    Base exception for resource-schema errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (type_name,
                 schema_pointer, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message or ""


class ValidationError(ResourceSchemaError):
    """
    A node of a validation failure tree.

    Raised for resource definitions that violate the resource-definition
    meta-schema, for unresolvable references, for inconsistent vendor
    metadata, and for resource instances that violate an accepted schema.

    Aggregate nodes have no keyword and one child per violation; their
    message is a violation count.

    Attributes:
        message: Error message
        keyword: Schema keyword that failed (None for aggregate nodes)
        schema_pointer: Pointer to the violating location
        causing_exceptions: Child failures, in the order they were found
    """

    def __init__(
        self,
        message: Optional[str],
        keyword: Optional[str] = None,
        schema_pointer: Optional[str] = None,
        causing_exceptions: Optional[Sequence["ValidationError"]] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the validation error.

        Args:
            message: Error message
            keyword: Schema keyword that failed (if available)
            schema_pointer: Pointer to the violating location (if available)
            causing_exceptions: Nested failures (if any)
            context: Additional context information
        """
        super().__init__(message, context=context)
        self.keyword = keyword
        self.schema_pointer = schema_pointer
        self.causing_exceptions = tuple(causing_exceptions or ())

    @property
    def is_aggregate(self) -> bool:
        return self.keyword is None and bool(self.causing_exceptions)

    @classmethod
    def from_native(cls, failure: Any) -> "ValidationError":
        """
        Build a scrubbed failure tree from an engine failure.

        ``failure`` needs ``message``, ``keyword``, ``pointer`` and
        ``children`` attributes. Messages for keywords outside the safe list
        are replaced so that instance values never reach the caller; children
        are scrubbed recursively either way.
        """
        children = tuple(cls.from_native(child) for child in failure.children or ())
        is_parent = failure.keyword is None and bool(children)
        if is_parent or failure.keyword in SAFE_KEYWORDS:
            message = failure.message
        else:
            message = SCRUBBED_MESSAGE_TEMPLATE.format(
                pointer=failure.pointer, keyword=failure.keyword
            )
        return cls(
            message,
            keyword=failure.keyword,
            schema_pointer=failure.pointer,
            causing_exceptions=children,
        )

    @classmethod
    def aggregate(
        cls, failures: Sequence["ValidationError"], pointer: str = ROOT_POINTER
    ) -> "ValidationError":
        """Wrap several failures found at the same level into one parent node."""
        if len(failures) == 1:
            return failures[0]
        return cls(
            f"{pointer}: {len(failures)} schema violations found",
            keyword=None,
            schema_pointer=pointer,
            causing_exceptions=failures,
        )

    def iter_failures(self) -> Iterable["ValidationError"]:
        """Yield this node and all of its descendants, depth first."""
        yield self
        for cause in self.causing_exceptions:
            yield from cause.iter_failures()


def build_full_exception_message(error: ValidationError) -> str:
    """
    Build one message out of a failure tree.

    Aggregate nodes only carry a violation count, so they are skipped; every
    other node contributes its message on its own line.

    Args:
        error: Root of the failure tree

    Returns:
        Newline separated messages, without a trailing newline
    """
    lines = [
        failure.message
        for failure in error.iter_failures()
        if not failure.is_aggregate and failure.message is not None
    ]
    return "\n".join(lines).strip()


class ConfigurationError(ResourceSchemaError):
    """
    Raised when configuration is invalid or missing.

    This covers the meta-schema documents shipped with the package (a bad
    or missing ``$id`` means a broken deployment, not bad user input) and
    invalid validator settings.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error (if available)
            config_value: Configuration value that caused the error (if available)
            context: Additional context information
        """
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class SchemaProcessingError(ResourceSchemaError):
    """
    Raised when an accepted definition cannot be turned into a ResourceTypeSchema.

    Attributes:
        message: Error message
        type_name: typeName of the definition (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        type_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if type_name:
            context["type_name"] = type_name
        super().__init__(message, context=context)
        self.type_name = type_name
