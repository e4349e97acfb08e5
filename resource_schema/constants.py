"""
Constants for resource-schema.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# META-SCHEMA CONSTANTS
# ============================================================================

ID_KEY: Final[str] = "$id"
"""Schema keyword carrying a document's self-identifying URI."""

SCHEMA_KEY: Final[str] = "$schema"
"""Schema keyword naming the meta-schema a document conforms to."""

REF_KEY: Final[str] = "$ref"
"""Schema keyword for references."""

JSON_SCHEMA_URI_HTTP: Final[str] = "http://json-schema.org/draft-07/schema"
"""Canonical id of the draft-07 meta-schema."""

JSON_SCHEMA_URI_HTTPS: Final[str] = "https://json-schema.org/draft-07/schema"
"""Alternate id some definitions use for the draft-07 meta-schema."""

RESOURCE_DEFINITION_SCHEMA_URI: Final[str] = (
    "https://schema.cloudformation.us-east-1.amazonaws.com/"
    "provider.definition.schema.v1.json"
)
"""Id of the resource-definition meta-schema. Stamped into every loaded definition."""

# ============================================================================
# RESOURCE DEFINITION DEFAULTS
# ============================================================================

DEFAULT_TIMEOUT_IN_MINUTES: Final[int] = 120
"""Handler timeout used when a handler does not declare timeoutInMinutes."""

MIN_TIMEOUT_IN_MINUTES: Final[int] = 2
"""Smallest timeoutInMinutes accepted by the resource-definition meta-schema."""

MAX_TIMEOUT_IN_MINUTES: Final[int] = 720
"""Largest timeoutInMinutes accepted by the resource-definition meta-schema."""

DEFAULT_REPLACEMENT_STRATEGY: Final[str] = "create_then_delete"
"""Replacement strategy used when a definition does not declare one."""

REPLACEMENT_STRATEGIES: Final[tuple[str, ...]] = (
    "create_then_delete",
    "delete_then_create",
)
"""Accepted replacementStrategy values."""

HANDLER_ACTIONS: Final[tuple[str, ...]] = ("create", "read", "update", "delete", "list")
"""Lifecycle actions a resource definition may declare handlers for."""

PROPERTIES_PREFIX: Final[str] = "/properties"
"""Schema-rooted prefix of every property pointer."""

DEFAULT_TAG_PROPERTY: Final[str] = "/properties/Tags"
"""Conventional location of the tag property."""

MAX_URL_LENGTH: Final[int] = 4096
"""Maximum length of sourceUrl/documentationUrl."""

# ============================================================================
# REDACTION CONSTANTS
# ============================================================================

SAFE_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        # object keywords
        "required",
        "minProperties",
        "maxProperties",
        "dependencies",
        "additionalProperties",
        # string keywords
        "minLength",
        "maxLength",
        # array keywords
        "minItems",
        "maxItems",
        "uniqueItems",
        "contains",
        # misc keywords
        "type",
        "allOf",
        "anyOf",
        "oneOf",
    }
)
"""Keywords whose failure messages never carry instance values."""

SCRUBBED_MESSAGE_TEMPLATE: Final[str] = "{pointer}: failed validation constraint for keyword [{keyword}]"
"""Replacement message for failures on keywords outside SAFE_KEYWORDS."""

ROOT_POINTER: Final[str] = "#"
"""Pointer to the root of a validated document."""

# ============================================================================
# DRAFT-07 KEYWORDS
# ============================================================================

DRAFT7_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "$id",
        "$ref",
        "$comment",
        "title",
        "description",
        "default",
        "examples",
        "readOnly",
        "writeOnly",
        "definitions",
        # objects
        "properties",
        "patternProperties",
        "additionalProperties",
        "required",
        "dependencies",
        "propertyNames",
        "minProperties",
        "maxProperties",
        # arrays
        "items",
        "additionalItems",
        "minItems",
        "maxItems",
        "uniqueItems",
        "contains",
        # strings
        "minLength",
        "maxLength",
        "pattern",
        "format",
        "contentMediaType",
        "contentEncoding",
        # numbers
        "minimum",
        "maximum",
        "exclusiveMinimum",
        "exclusiveMaximum",
        "multipleOf",
        # generic and combinators
        "type",
        "enum",
        "const",
        "allOf",
        "anyOf",
        "oneOf",
        "not",
        "if",
        "then",
        "else",
    }
)
"""Standard draft-07 keywords. Anything else at the top of a definition is residual."""

SCHEMA_MAP_KEYWORDS: Final[tuple[str, ...]] = ("properties", "patternProperties", "definitions")
"""Keywords whose value maps names to subschemas."""

SCHEMA_LIST_KEYWORDS: Final[tuple[str, ...]] = ("allOf", "anyOf", "oneOf")
"""Keywords whose value is a list of subschemas."""

SCHEMA_VALUE_KEYWORDS: Final[tuple[str, ...]] = (
    "additionalProperties",
    "additionalItems",
    "contains",
    "propertyNames",
    "not",
    "if",
    "then",
    "else",
)
"""Keywords whose value is a single subschema."""

# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================

DEFAULT_FETCH_TIMEOUT_SECONDS: Final[float] = 10.0
"""Default timeout for fetching remote $ref targets (seconds)."""
