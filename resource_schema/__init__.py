"""
resource-schema

Validation and semantic loading of resource type definitions: definitions
are checked against the resource-definition meta-schema, loaded as draft-07
schemas with every $ref resolved, and reinterpreted as resource types
(identifiers, mutability, handlers, tagging).
"""

from .config import ValidatorConfig
# Core
from .core import (LoadedSchema, ResourceTagging, ResourceTypeSchema,
                   Validator, load_resource_definition)
# Errors
from .exceptions import (ConfigurationError, ResourceSchemaError,
                         SchemaProcessingError, ValidationError,
                         build_full_exception_message)
from .utils import JSONPointer

__version__ = "0.1.0"

__all__ = [
    # Core
    "Validator",
    "LoadedSchema",
    "ResourceTypeSchema",
    "ResourceTagging",
    "load_resource_definition",
    "ValidatorConfig",
    # Errors
    "ResourceSchemaError",
    "ValidationError",
    "ConfigurationError",
    "SchemaProcessingError",
    "build_full_exception_message",
    # Utilities
    "JSONPointer",
]
