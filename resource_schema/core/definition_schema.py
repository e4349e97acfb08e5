"""
Resource-definition meta-schema.

Every resource definition is validated against this document before it is
loaded as a schema. It is a draft-07 schema that layers the vendor keys
(identifiers, mutability lists, handlers, tagging, ...) on top of the
generic draft-07 meta-schema, which it references by URI so the draft-07
document is always resolved from the local registry.

Only one revision is shipped: typeName, properties, description,
primaryIdentifier and additionalProperties are required.
"""

from typing import Any, Dict

from ..constants import (JSON_SCHEMA_URI_HTTP, MAX_TIMEOUT_IN_MINUTES,
                         MAX_URL_LENGTH, MIN_TIMEOUT_IN_MINUTES,
                         REPLACEMENT_STRATEGIES,
                         RESOURCE_DEFINITION_SCHEMA_URI)

_DRAFT7_REF = {"$ref": f"{JSON_SCHEMA_URI_HTTP}#"}

# Keywords that only make sense for non-object instances. A resource is
# always an object, so a definition using them at its top level is rejected.
DISALLOWED_TOP_LEVEL_KEYWORDS = (
    "items",
    "additionalItems",
    "contains",
    "minItems",
    "maxItems",
    "uniqueItems",
    "minLength",
    "maxLength",
    "pattern",
    "format",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "enum",
    "const",
)

RESOURCE_DEFINITION_SCHEMA: Dict[str, Any] = {
    "$schema": f"{JSON_SCHEMA_URI_HTTP}#",
    "$id": RESOURCE_DEFINITION_SCHEMA_URI,
    "title": "Resource Type Definition MetaSchema",
    "description": (
        "This schema validates a resource type definition. Standard draft-07 "
        "keywords are checked against the draft-07 meta-schema."
    ),
    "type": "object",
    "allOf": [_DRAFT7_REF],
    "not": {
        "anyOf": [{"required": [keyword]} for keyword in DISALLOWED_TOP_LEVEL_KEYWORDS]
    },
    "definitions": {
        "httpsUrl": {
            "type": "string",
            "pattern": "^https://[0-9a-zA-Z]([-.\\w]*[0-9a-zA-Z])(:[0-9]*)*([?/#].*)?$",
            "maxLength": MAX_URL_LENGTH,
        },
        "jsonPointerArray": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "format": "json-pointer"},
        },
        "permissions": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Permissions the handler needs to perform its action",
        },
        "handlerDefinition": {
            "type": "object",
            "description": "Defines a lifecycle handler of the resource",
            "properties": {
                "permissions": {"$ref": "#/definitions/permissions"},
                "timeoutInMinutes": {
                    "type": "integer",
                    "minimum": MIN_TIMEOUT_IN_MINUTES,
                    "maximum": MAX_TIMEOUT_IN_MINUTES,
                    "description": "Time after which the handler is considered failed",
                },
            },
            "required": ["permissions"],
            "additionalProperties": False,
        },
        "handlerDefinitionWithSchemaOverride": {
            "type": "object",
            "description": "Defines a handler whose request may carry its own input schema",
            "properties": {
                "handlerSchema": {
                    "type": "object",
                    "description": "Schema for the properties a caller may pass to the handler",
                    "properties": {
                        "properties": {
                            "type": "object",
                            "additionalProperties": _DRAFT7_REF,
                        },
                        "required": {"type": "array", "items": {"type": "string"}},
                        "allOf": {"type": "array", "items": _DRAFT7_REF},
                        "anyOf": {"type": "array", "items": _DRAFT7_REF},
                        "oneOf": {"type": "array", "items": _DRAFT7_REF},
                    },
                    "required": ["properties"],
                    "additionalProperties": False,
                },
                "permissions": {"$ref": "#/definitions/permissions"},
                "timeoutInMinutes": {
                    "type": "integer",
                    "minimum": MIN_TIMEOUT_IN_MINUTES,
                    "maximum": MAX_TIMEOUT_IN_MINUTES,
                },
            },
            "required": ["permissions"],
            "additionalProperties": False,
        },
    },
    "properties": {
        "$schema": {"type": "string"},
        "$id": {"type": "string"},
        "typeName": {
            "type": "string",
            "pattern": "^[a-zA-Z0-9]{2,64}::[a-zA-Z0-9]{2,64}::[a-zA-Z0-9]{2,64}$",
            "description": (
                "Resource type identifier, made of three alphanumeric "
                "segments separated by '::'"
            ),
        },
        "description": {
            "type": "string",
            "maxLength": 1024,
            "description": "A short description of the resource",
        },
        "sourceUrl": {
            "$ref": "#/definitions/httpsUrl",
            "description": "Location of the resource provider's source code",
        },
        "documentationUrl": {
            "$ref": "#/definitions/httpsUrl",
            "description": "Location of the resource provider's documentation",
        },
        "replacementStrategy": {
            "type": "string",
            "enum": list(REPLACEMENT_STRATEGIES),
            "description": "Order in which a replacement update creates and deletes",
        },
        "taggable": {
            "type": "boolean",
            "description": "Deprecated. Use tagging.taggable instead",
        },
        "tagging": {
            "type": "object",
            "properties": {
                "taggable": {"type": "boolean"},
                "tagOnCreate": {"type": "boolean"},
                "tagUpdatable": {"type": "boolean"},
                "cloudFormationSystemTags": {"type": "boolean"},
                "tagProperty": {"type": "string", "format": "json-pointer"},
                "permissions": {"$ref": "#/definitions/permissions"},
            },
        },
        "properties": {
            "type": "object",
            "minProperties": 1,
            "propertyNames": {"pattern": "^[A-Za-z0-9]{1,64}$"},
            "additionalProperties": _DRAFT7_REF,
        },
        "definitions": {
            "type": "object",
            "additionalProperties": _DRAFT7_REF,
        },
        "handlers": {
            "type": "object",
            "properties": {
                "create": {"$ref": "#/definitions/handlerDefinition"},
                "read": {"$ref": "#/definitions/handlerDefinition"},
                "update": {"$ref": "#/definitions/handlerDefinition"},
                "delete": {"$ref": "#/definitions/handlerDefinition"},
                "list": {"$ref": "#/definitions/handlerDefinitionWithSchemaOverride"},
            },
            "additionalProperties": False,
        },
        "createOnlyProperties": {"$ref": "#/definitions/jsonPointerArray"},
        "conditionalCreateOnlyProperties": {"$ref": "#/definitions/jsonPointerArray"},
        "deprecatedProperties": {"$ref": "#/definitions/jsonPointerArray"},
        "readOnlyProperties": {"$ref": "#/definitions/jsonPointerArray"},
        "writeOnlyProperties": {"$ref": "#/definitions/jsonPointerArray"},
        "primaryIdentifier": {"$ref": "#/definitions/jsonPointerArray"},
        "additionalIdentifiers": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/definitions/jsonPointerArray"},
        },
        "propertyTransform": {
            "type": "object",
            "description": "Maps a property pointer to an expression rewriting its value",
            "additionalProperties": {"type": "string"},
        },
        "resourceLink": {
            "type": "object",
            "description": "Link from a resource to its page in a console",
            "properties": {
                "$comment": {"type": "string"},
                "templateUri": {"type": "string", "pattern": "^(/|https:)"},
                "mappings": {
                    "type": "object",
                    "additionalProperties": {"type": "string", "format": "json-pointer"},
                },
            },
            "required": ["templateUri", "mappings"],
            "additionalProperties": False,
        },
        "typeConfiguration": {
            "type": "object",
            "description": "Schema of the account-level configuration of the resource type",
            "properties": {
                "properties": {
                    "type": "object",
                    "additionalProperties": _DRAFT7_REF,
                },
                "additionalProperties": {"const": False},
                "required": {"type": "array", "items": {"type": "string"}},
                "description": {"type": "string"},
                "definitions": {
                    "type": "object",
                    "additionalProperties": _DRAFT7_REF,
                },
            },
            "required": ["properties", "additionalProperties"],
        },
        "additionalProperties": {
            "type": "boolean",
            "const": False,
            "description": "Resources must not accept undeclared properties",
        },
    },
    "required": [
        "typeName",
        "properties",
        "description",
        "primaryIdentifier",
        "additionalProperties",
    ],
}
