"""
Semantic model of a resource type.

ResourceTypeSchema is built from a LoadedSchema in a single pass over its
vendor keys. A declarative field table lists every key that is interpreted;
each entry consumes its key from the residual map, so whatever is left once
the table (and tagging) has run is genuinely unknown to this package and is
exposed as ``unprocessed_properties``.
"""

import logging
from types import MappingProxyType
from typing import (Any, Callable, Dict, List, Mapping, NamedTuple, Optional,
                    Tuple, Union)

from ..constants import (DEFAULT_REPLACEMENT_STRATEGY, HANDLER_ACTIONS,
                         PROPERTIES_PREFIX, SCHEMA_KEY)
from ..exceptions import SchemaProcessingError
from ..observability import get_logger, schema_context
from ..utils import JSONPointer
from .tagging import (LEGACY_TAGGABLE_KEY, TAGGING_KEY, ResourceTagging,
                      parse_tagging)
from .types import HandlerDefinition, ResourceLink, SchemaLoader
from .validator import LoadedSchema, Validator

logger = logging.getLogger(__name__)
contextual_logger = get_logger(__name__)

PointerList = Tuple[JSONPointer, ...]


def _pointers(values: List[str]) -> PointerList:
    return tuple(JSONPointer(value) for value in values)


def _identifier_sets(values: List[List[str]]) -> Tuple[PointerList, ...]:
    return tuple(_pointers(identifier) for identifier in values)


def _handlers(values: Mapping[str, Any]) -> Mapping[str, HandlerDefinition]:
    return MappingProxyType(
        {action: HandlerDefinition.from_dict(handler) for action, handler in values.items()}
    )


def _read_only_mapping(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


class _Field(NamedTuple):
    key: str
    attribute: str
    parse: Callable[[Any], Any]
    default: Callable[[], Any]


_FIELDS: Tuple[_Field, ...] = (
    _Field("sourceUrl", "source_url", str, lambda: None),
    _Field("documentationUrl", "documentation_url", str, lambda: None),
    _Field("typeName", "type_name", str, lambda: None),
    _Field(SCHEMA_KEY, "schema_uri", str, lambda: None),
    _Field("replacementStrategy", "replacement_strategy", str, lambda: DEFAULT_REPLACEMENT_STRATEGY),
    _Field("createOnlyProperties", "create_only_properties", _pointers, tuple),
    _Field(
        "conditionalCreateOnlyProperties", "conditional_create_only_properties", _pointers, tuple
    ),
    _Field("deprecatedProperties", "deprecated_properties", _pointers, tuple),
    _Field("readOnlyProperties", "read_only_properties", _pointers, tuple),
    _Field("writeOnlyProperties", "write_only_properties", _pointers, tuple),
    _Field("primaryIdentifier", "primary_identifier", _pointers, tuple),
    _Field("additionalIdentifiers", "additional_identifiers", _identifier_sets, tuple),
    _Field("handlers", "handlers", _handlers, lambda: MappingProxyType({})),
    _Field("propertyTransform", "property_transform", _read_only_mapping, lambda: MappingProxyType({})),
    _Field("resourceLink", "resource_link", ResourceLink.from_dict, lambda: None),
    _Field("typeConfiguration", "type_configuration", _read_only_mapping, lambda: None),
)
"""Vendor keys interpreted by ResourceTypeSchema, in extraction order."""

INTERPRETED_KEYS: Tuple[str, ...] = tuple(f.key for f in _FIELDS) + (TAGGING_KEY, LEGACY_TAGGABLE_KEY)


def _as_strings(pointers: PointerList) -> List[str]:
    return [str(pointer) for pointer in pointers]


class ResourceTypeSchema:
    """
    A resource definition reinterpreted as a resource type.

    Example:
        schema = ResourceTypeSchema.load(definition)
        schema.primary_identifier_as_strings()   # ["/properties/Id"]
        schema.remove_write_only_properties(model)
        schema.validate_instance(model)
    """

    type_name: str
    source_url: Optional[str]
    documentation_url: Optional[str]
    schema_uri: Optional[str]
    replacement_strategy: str
    create_only_properties: PointerList
    conditional_create_only_properties: PointerList
    deprecated_properties: PointerList
    read_only_properties: PointerList
    write_only_properties: PointerList
    primary_identifier: PointerList
    additional_identifiers: Tuple[PointerList, ...]
    handlers: Mapping[str, HandlerDefinition]
    property_transform: Mapping[str, str]
    resource_link: Optional[ResourceLink]
    type_configuration: Optional[Mapping[str, Any]]
    tagging: ResourceTagging

    def __init__(self, schema: LoadedSchema) -> None:
        """
        Extract the resource type semantics from a loaded schema.

        Args:
            schema: Definition that passed both load phases

        Raises:
            ValidationError: If the tagging configuration is inconsistent
            SchemaProcessingError: If a vendor key has an unexpected shape
        """
        self._schema = schema
        residual = schema.unprocessed_properties
        type_name = residual.get("typeName")

        for field in _FIELDS:
            if field.key not in residual:
                setattr(self, field.attribute, field.default())
                continue
            value = residual.pop(field.key)
            try:
                setattr(self, field.attribute, field.parse(value))
            except (TypeError, ValueError, KeyError, AttributeError) as e:
                raise SchemaProcessingError(
                    f"Cannot interpret {field.key}: {e}", type_name=type_name
                ) from e

        if self.type_name is None:
            raise SchemaProcessingError("Resource definition has no typeName")

        self.tagging = parse_tagging(residual, self.has_handler("update"), schema)
        self._unprocessed_properties = MappingProxyType(residual)

        if residual:
            logger.debug(
                f"{self.type_name}: unprocessed vendor properties {sorted(residual)}"
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls, definition: Mapping[str, Any], validator: Optional[SchemaLoader] = None
    ) -> "ResourceTypeSchema":
        """
        Validate and load a resource definition.

        Args:
            definition: Raw resource definition
            validator: Validator to load with; a default one is built if None

        Returns:
            ResourceTypeSchema instance

        Raises:
            ValidationError: On shape violations, unresolvable references or
                             inconsistent tagging configuration
            SchemaProcessingError: If a vendor key has an unexpected shape
        """
        validator = validator or Validator()
        with schema_context(definition.get("typeName"), "load_resource_definition"):
            schema = cls(validator.load_definition_as_schema(definition))
            contextual_logger.debug(
                "Resource definition loaded",
                extra={
                    "handlers": sorted(schema.handlers),
                    "unprocessed_count": len(schema.unprocessed_properties),
                },
            )
        return schema

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def schema(self) -> LoadedSchema:
        return self._schema

    @property
    def description(self) -> Optional[str]:
        return self._schema.document.get("description")

    @property
    def unprocessed_properties(self) -> Mapping[str, Any]:
        """Vendor keys this package does not interpret."""
        return self._unprocessed_properties

    def has_handler(self, action: str) -> bool:
        return action in self.handlers

    def supported_actions(self) -> List[str]:
        return [action for action in HANDLER_ACTIONS if action in self.handlers]

    def create_only_properties_as_strings(self) -> List[str]:
        return _as_strings(self.create_only_properties)

    def conditional_create_only_properties_as_strings(self) -> List[str]:
        return _as_strings(self.conditional_create_only_properties)

    def deprecated_properties_as_strings(self) -> List[str]:
        return _as_strings(self.deprecated_properties)

    def read_only_properties_as_strings(self) -> List[str]:
        return _as_strings(self.read_only_properties)

    def write_only_properties_as_strings(self) -> List[str]:
        return _as_strings(self.write_only_properties)

    def primary_identifier_as_strings(self) -> List[str]:
        return _as_strings(self.primary_identifier)

    def additional_identifiers_as_strings(self) -> List[List[str]]:
        return [_as_strings(identifier) for identifier in self.additional_identifiers]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def defines_property(self, name: str) -> bool:
        """
        Whether the schema declares the top-level property ``name``.

        Properties declared inside allOf/anyOf/oneOf branches count.
        """
        return self._schema.defines_property(name)

    def validate_instance(self, instance: Any) -> None:
        """Validate a resource model, raising ValidationError on failure."""
        self._schema.validate(instance)

    def remove_write_only_properties(self, instance: Dict[str, Any]) -> None:
        """
        Strip write-only properties from a resource model, in place.

        Properties missing from the model are skipped.
        """
        for pointer in self.write_only_properties:
            pointer.with_prefix_removed(PROPERTIES_PREFIX).remove(instance)

    def has_write_only_properties(self, instance: Mapping[str, Any]) -> bool:
        """Whether the model carries a value for any write-only property."""
        return any(
            pointer.with_prefix_removed(PROPERTIES_PREFIX).exists(instance)
            for pointer in self.write_only_properties
        )

    @staticmethod
    def has_property(pointer: Union[str, JSONPointer], instance: Any) -> bool:
        """Whether ``instance`` has a non-null value at the instance-rooted ``pointer``."""
        if isinstance(pointer, str):
            try:
                pointer = JSONPointer(pointer)
            except ValueError:
                return False
        return pointer.exists(instance)

    def __repr__(self) -> str:
        return f"ResourceTypeSchema(type_name={self.type_name!r})"


def load_resource_definition(
    definition: Mapping[str, Any], validator: Optional[SchemaLoader] = None
) -> ResourceTypeSchema:
    """Validate and load a resource definition. See ResourceTypeSchema.load."""
    return ResourceTypeSchema.load(definition, validator)
