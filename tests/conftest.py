"""
Pytest configuration and shared fixtures for resource-schema tests.

This module provides:
- Validator fixtures (offline by default)
- Remote $ref fetch doubles
- Resource definition factories
"""

import copy
import io
import json
from typing import Any, Callable, Dict
from unittest.mock import MagicMock

import pytest

from resource_schema import Validator, ValidatorConfig


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


# ============================================================================
# VALIDATOR FIXTURES
# ============================================================================


@pytest.fixture
def offline_config() -> ValidatorConfig:
    """Configuration that never fetches remote $refs."""
    return ValidatorConfig(allow_remote_refs=False)


@pytest.fixture
def validator(offline_config: ValidatorConfig) -> Validator:
    """Validator that cannot reach the network."""
    return Validator(config=offline_config)


# ============================================================================
# FETCH DOUBLES
# ============================================================================


@pytest.fixture
def make_fetch() -> Callable[[Dict[str, Any]], MagicMock]:
    """
    Build a fetch double serving JSON documents by URI.

    Unknown URIs raise OSError, like an unreachable host.
    """

    def factory(documents: Dict[str, Any]) -> MagicMock:
        def fetch(uri: str) -> io.BytesIO:
            if uri not in documents:
                raise OSError(f"cannot reach {uri}")
            return io.BytesIO(json.dumps(documents[uri]).encode("utf-8"))

        return MagicMock(side_effect=fetch)

    return factory


# ============================================================================
# TEST DATA FACTORIES
# ============================================================================


@pytest.fixture
def minimal_definition() -> Dict[str, Any]:
    """Smallest definition accepted by the resource-definition meta-schema."""
    return {
        "typeName": "Org::Svc::Res",
        "description": "d",
        "primaryIdentifier": ["/properties/A"],
        "properties": {"A": {"type": "string"}},
        "additionalProperties": False,
    }


@pytest.fixture
def full_definition() -> Dict[str, Any]:
    """Definition exercising every interpreted vendor key."""
    return {
        "typeName": "Acme::Storage::Bucket",
        "description": "A storage bucket",
        "sourceUrl": "https://github.com/acme/storage-bucket",
        "documentationUrl": "https://docs.acme.example/storage/bucket",
        "replacementStrategy": "delete_then_create",
        "definitions": {
            "Tag": {
                "type": "object",
                "properties": {"Key": {"type": "string"}, "Value": {"type": "string"}},
                "required": ["Key", "Value"],
                "additionalProperties": False,
            },
            "RegionName": {"type": "string", "maxLength": 16},
        },
        "properties": {
            "Id": {"type": "string"},
            "Arn": {"type": "string"},
            "Name": {"type": "string", "maxLength": 63},
            "Region": {"type": "string"},
            "Password": {"type": "string", "minLength": 8},
            "Settings": {
                "type": "object",
                "properties": {
                    "Secret": {"type": "string"},
                    "Color": {"type": "string"},
                },
            },
            "LegacyMode": {"type": "boolean"},
            "Tags": {"type": "array", "items": {"$ref": "#/definitions/Tag"}},
        },
        "required": ["Name"],
        "additionalProperties": False,
        "primaryIdentifier": ["/properties/Id"],
        "additionalIdentifiers": [["/properties/Arn"], ["/properties/Name", "/properties/Region"]],
        "createOnlyProperties": ["/properties/Name"],
        "conditionalCreateOnlyProperties": ["/properties/Region"],
        "deprecatedProperties": ["/properties/LegacyMode"],
        "readOnlyProperties": ["/properties/Id", "/properties/Arn"],
        "writeOnlyProperties": ["/properties/Password", "/properties/Settings/Secret"],
        "propertyTransform": {"/properties/Name": "$lowercase(Name)"},
        "resourceLink": {
            "templateUri": "/storage/home#/buckets/${Name}",
            "mappings": {"Name": "/Name"},
        },
        "typeConfiguration": {
            "properties": {"ApiKey": {"type": "string"}},
            "additionalProperties": False,
        },
        "tagging": {
            "taggable": True,
            "tagOnCreate": True,
            "tagUpdatable": True,
            "cloudFormationSystemTags": False,
            "tagProperty": "/properties/Tags",
            "permissions": ["storage:TagResource", "storage:UntagResource"],
        },
        "handlers": {
            "create": {"permissions": ["storage:CreateBucket"], "timeoutInMinutes": 30},
            "read": {"permissions": ["storage:GetBucket"]},
            "update": {"permissions": ["storage:UpdateBucket", "storage:UpdateBucket"]},
            "delete": {"permissions": ["storage:DeleteBucket"]},
            "list": {
                "permissions": ["storage:ListBuckets"],
                "handlerSchema": {
                    "properties": {"Region": {"$ref": "#/definitions/RegionName"}},
                    "required": ["Region"],
                },
            },
        },
    }


@pytest.fixture
def definition_factory(minimal_definition: Dict[str, Any]) -> Callable[..., Dict[str, Any]]:
    """Copy of the minimal definition with top-level keys overridden (None removes)."""

    def factory(**overrides: Any) -> Dict[str, Any]:
        definition = copy.deepcopy(minimal_definition)
        for key, value in overrides.items():
            if value is None:
                definition.pop(key, None)
            else:
                definition[key] = value
        return definition

    return factory
