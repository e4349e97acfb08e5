"""
Core resource-schema components.

This module contains the Validator, the resource-definition meta-schema and
the ResourceTypeSchema semantic model built on top of them.
"""

from .definition_schema import RESOURCE_DEFINITION_SCHEMA
from .registry import build_registry, is_valid_uri, register_meta_schema
from .resource_type_schema import (INTERPRETED_KEYS, ResourceTypeSchema,
                                   load_resource_definition)
from .tagging import ResourceTagging
from .types import (Fetch, HandlerDefinition, InstanceValidator, ResourceLink,
                    SchemaLoader)
from .validator import LoadedSchema, Validator, defines_property

__all__ = [
    # Validator
    "Validator",
    "LoadedSchema",
    "defines_property",
    # Registry
    "RESOURCE_DEFINITION_SCHEMA",
    "build_registry",
    "register_meta_schema",
    "is_valid_uri",
    # Semantic model
    "ResourceTypeSchema",
    "load_resource_definition",
    "INTERPRETED_KEYS",
    "ResourceTagging",
    "HandlerDefinition",
    "ResourceLink",
    # Protocols
    "Fetch",
    "InstanceValidator",
    "SchemaLoader",
]
