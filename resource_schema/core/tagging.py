"""
Tagging configuration of a resource type.

A definition declares tagging either through the structured ``tagging``
block or through the legacy boolean ``taggable``. Unconfigured resources
are fully taggable with their tags under ``/properties/Tags``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from ..constants import DEFAULT_TAG_PROPERTY, PROPERTIES_PREFIX
from ..exceptions import ValidationError
from ..utils import JSONPointer
from .types import TaggingDict

logger = logging.getLogger(__name__)

TAGGING_KEY = "tagging"
LEGACY_TAGGABLE_KEY = "taggable"

TAGGABLE = "taggable"
TAG_ON_CREATE = "tagOnCreate"
TAG_UPDATABLE = "tagUpdatable"
CLOUDFORMATION_SYSTEM_TAGS = "cloudFormationSystemTags"
TAG_PROPERTY = "tagProperty"
TAG_PERMISSIONS = "permissions"


def _tagging_error(message: str, attribute: str) -> ValidationError:
    return ValidationError(
        message, keyword=TAGGING_KEY, schema_pointer=f"#/{TAGGING_KEY}/{attribute}"
    )


def _parse_tag_property(value: Any) -> JSONPointer:
    try:
        return JSONPointer(value)
    except (TypeError, ValueError) as e:
        raise _tagging_error(
            f'Invalid tagProperty value {value} must start with "{PROPERTIES_PREFIX}"',
            TAG_PROPERTY,
        ) from e


def _same(value: Any) -> Any:
    return value


# Block key -> (attribute, converter). taggable is handled separately.
_BLOCK_ATTRIBUTES: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    TAG_ON_CREATE: ("tag_on_create", _same),
    TAG_UPDATABLE: ("tag_updatable", _same),
    CLOUDFORMATION_SYSTEM_TAGS: ("cloud_formation_system_tags", _same),
    TAG_PROPERTY: ("tag_property", _parse_tag_property),
    TAG_PERMISSIONS: ("permissions", list),
}


@dataclass
class ResourceTagging:
    """Tagging flags, the property that carries the tags, and tagging permissions."""

    taggable: bool = True
    tag_on_create: bool = True
    tag_updatable: bool = True
    cloud_formation_system_tags: bool = True
    tag_property: JSONPointer = field(default_factory=lambda: JSONPointer(DEFAULT_TAG_PROPERTY))
    permissions: List[str] = field(default_factory=list)

    @classmethod
    def from_taggable(cls, value: bool) -> "ResourceTagging":
        """All four flags set to ``value``, default tag property, no permissions."""
        return cls(
            taggable=value,
            tag_on_create=value,
            tag_updatable=value,
            cloud_formation_system_tags=value,
        )

    @classmethod
    def from_block(cls, block: TaggingDict) -> "ResourceTagging":
        """
        Parse a structured tagging block.

        ``taggable`` is applied first and sets every flag; the remaining keys
        then override individual flags.

        Raises:
            ValidationError: On an unknown attribute or a malformed tagProperty
        """
        tagging = cls()
        tagging.reset_taggable(block.get(TAGGABLE, True))
        for key, value in block.items():
            if key == TAGGABLE:
                continue
            if key not in _BLOCK_ATTRIBUTES:
                raise _tagging_error(f"Unknown tagging attribute [{key}]", key)
            attribute, convert = _BLOCK_ATTRIBUTES[key]
            setattr(tagging, attribute, convert(value))
        return tagging

    def reset_taggable(self, value: bool) -> None:
        """Set all four flags to ``value``. Tag property and permissions are kept."""
        self.taggable = value
        self.tag_on_create = value
        self.tag_updatable = value
        self.cloud_formation_system_tags = value

    def validate_tagging_metadata(self, has_update_handler: bool, schema: Any) -> None:
        """
        Check the tagging configuration against the rest of the definition.

        Args:
            has_update_handler: Whether the definition declares an update handler
            schema: Loaded schema, queried through ``defines_property``

        Raises:
            ValidationError: If tags are updatable without an update handler,
                             or the tag property is not a declared property
        """
        if self.tag_updatable and not has_update_handler:
            raise _tagging_error(
                "Invalid tagUpdatable value since update handler is missing", TAG_UPDATABLE
            )

        tokens = self.tag_property.tokens
        if len(tokens) < 2 or not self.tag_property.starts_with(JSONPointer(PROPERTIES_PREFIX)):
            raise _tagging_error(
                f'Invalid tagProperty value {self.tag_property} must start with "{PROPERTIES_PREFIX}"',
                TAG_PROPERTY,
            )

        # Tokens are unescaped; nested tag properties read as "Config/Tags"
        property_name = "/".join(tokens[1:])
        if self.taggable and not schema.defines_property(property_name):
            raise _tagging_error(
                f"Invalid tagProperty value since {property_name} not found in schema",
                TAG_PROPERTY,
            )


def parse_tagging(
    residual: Dict[str, Any], has_update_handler: bool, schema: Any
) -> ResourceTagging:
    """
    Consume the tagging keys of a residual property map.

    Both keys are removed from ``residual``. The structured block is checked
    with ``validate_tagging_metadata``; the legacy flag is taken as is.

    Returns:
        The declared configuration, or the fully taggable default when
        neither form is present

    Raises:
        ValidationError: If both forms are present, or the block is invalid
    """
    has_block = TAGGING_KEY in residual
    has_legacy = LEGACY_TAGGABLE_KEY in residual
    if has_block and has_legacy:
        raise ValidationError(
            "More than one configuration found for taggable value",
            keyword=TAGGING_KEY,
            schema_pointer=f"#/{LEGACY_TAGGABLE_KEY}",
        )

    if has_block:
        tagging = ResourceTagging.from_block(residual.pop(TAGGING_KEY))
        tagging.validate_tagging_metadata(has_update_handler, schema)
        return tagging
    if has_legacy:
        logger.debug("Definition uses the legacy taggable flag")
        return ResourceTagging.from_taggable(residual.pop(LEGACY_TAGGABLE_KEY))
    return ResourceTagging()
