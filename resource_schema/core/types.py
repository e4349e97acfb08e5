"""
Type definitions for resource-schema core structures.

This module provides TypedDict definitions for the raw blocks of a resource
definition, the frozen value objects the semantic model exposes, and the
protocols that separate instance validation from schema loading.
"""

from dataclasses import dataclass, field
from typing import (IO, TYPE_CHECKING, Any, Callable, Dict, List, Mapping,
                    Optional, Protocol, Tuple, TypedDict)

from ..constants import DEFAULT_TIMEOUT_IN_MINUTES

if TYPE_CHECKING:
    from referencing import Registry

    from .validator import LoadedSchema


# ============================================================================
# Raw Definition Blocks
# ============================================================================


class HandlerDict(TypedDict, total=False):
    """A lifecycle handler as written in a definition."""

    permissions: List[str]
    timeoutInMinutes: int
    handlerSchema: Dict[str, Any]  # list handler only


class TaggingDict(TypedDict, total=False):
    """The structured tagging block."""

    taggable: bool
    tagOnCreate: bool
    tagUpdatable: bool
    cloudFormationSystemTags: bool
    tagProperty: str
    permissions: List[str]


class ResourceLinkDict(TypedDict, total=False):
    """Link from a resource to its console page."""

    templateUri: str
    mappings: Dict[str, str]


# ============================================================================
# Value Objects
# ============================================================================


@dataclass(frozen=True)
class HandlerDefinition:
    """Permissions and timeout of one lifecycle handler."""

    permissions: Tuple[str, ...] = ()
    timeout_in_minutes: int = DEFAULT_TIMEOUT_IN_MINUTES
    handler_schema: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, handler: HandlerDict) -> "HandlerDefinition":
        # Permissions form a set; keep first-seen order for stable output
        permissions = tuple(dict.fromkeys(handler.get("permissions", ())))
        return cls(
            permissions=permissions,
            timeout_in_minutes=handler.get("timeoutInMinutes", DEFAULT_TIMEOUT_IN_MINUTES),
            handler_schema=handler.get("handlerSchema"),
        )


@dataclass(frozen=True)
class ResourceLink:
    """Console link template and the instance pointers that fill it."""

    template_uri: str
    mappings: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, link: ResourceLinkDict) -> "ResourceLink":
        return cls(template_uri=link["templateUri"], mappings=dict(link.get("mappings", {})))


# ============================================================================
# Capabilities
# ============================================================================

Fetch = Callable[[str], IO[bytes]]
"""Remote $ref fetch: takes an absolute URI, returns a readable binary stream."""


class InstanceValidator(Protocol):
    """Validates a document against a schema, raising ValidationError on failure."""

    def validate_instance(
        self,
        instance: Any,
        schema: Mapping[str, Any],
        registry: Optional["Registry"] = None,
    ) -> None:
        ...


class SchemaLoader(Protocol):
    """Turns a resource definition into a loaded schema, raising ValidationError on failure."""

    def load_definition_as_schema(self, definition: Mapping[str, Any]) -> "LoadedSchema":
        ...
