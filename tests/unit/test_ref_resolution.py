"""
Unit tests for $ref resolution during definition loading.

Remote documents are served by a fetch double; no test touches the network.
"""

import pytest

from resource_schema import ValidationError, Validator, ValidatorConfig

COMMON_URI = "https://example.com/schemas/common.json"

COMMON_DOCUMENT = {
    "definitions": {
        "Name": {"type": "string", "maxLength": 10},
        "Tag": {"type": "object", "properties": {"Key": {"$ref": "#/definitions/Name"}}},
        "Broken": {"type": 5},
    }
}


@pytest.mark.unit
class TestLocalReferences:
    """Test references into the definition itself."""

    def test_local_reference_resolves(self, validator, definition_factory):
        """Test that a $ref into the definition's own definitions loads."""
        definition = definition_factory(
            definitions={"Name": {"type": "string"}},
            properties={"A": {"$ref": "#/definitions/Name"}},
        )
        loaded = validator.load_definition_as_schema(definition)
        loaded.validate({"A": "x"})

    def test_missing_local_target(self, validator, definition_factory):
        """Test that a dangling local $ref is reported where it is used."""
        definition = definition_factory(properties={"A": {"$ref": "#/definitions/Missing"}})
        with pytest.raises(ValidationError) as exc_info:
            validator.load_definition_as_schema(definition)

        error = exc_info.value
        assert error.keyword == "$ref"
        assert error.schema_pointer == "#/properties/A"
        assert error.message == "#/properties/A: unable to resolve $ref [#/definitions/Missing]"

    def test_reference_to_draft07_is_local(self, validator, definition_factory):
        """Test that the draft-07 meta-schema resolves without fetching."""
        definition = definition_factory(
            properties={"A": {"$ref": "http://json-schema.org/draft-07/schema#"}}
        )
        validator.load_definition_as_schema(definition)

    def test_nested_reference_chain(self, validator, definition_factory):
        """Test that references inside reference targets are resolved too."""
        definition = definition_factory(
            definitions={
                "Outer": {"type": "object", "properties": {"B": {"$ref": "#/definitions/Gone"}}}
            },
            properties={"A": {"$ref": "#/definitions/Outer"}},
        )
        with pytest.raises(ValidationError) as exc_info:
            validator.load_definition_as_schema(definition)

        assert exc_info.value.keyword == "$ref"

    def test_relative_id_is_accepted(self, validator, definition_factory):
        """Test that a definition may carry a relative $id."""
        definition = definition_factory(
            **{"$id": "bucket.json"},
            definitions={"Name": {"type": "string"}},
            properties={"A": {"$ref": "#/definitions/Name"}},
        )
        validator.load_definition_as_schema(definition)


@pytest.mark.unit
class TestRemoteReferences:
    """Test references into remote documents."""

    def test_remote_reference_resolves(self, make_fetch, definition_factory):
        """Test that a remote $ref is fetched and its target used."""
        fetch = make_fetch({COMMON_URI: COMMON_DOCUMENT})
        validator = Validator(fetch=fetch)
        definition = definition_factory(properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Name"}})

        loaded = validator.load_definition_as_schema(definition)

        fetch.assert_called_with(COMMON_URI)
        with pytest.raises(ValidationError) as exc_info:
            loaded.validate({"A": "x" * 11})
        assert exc_info.value.message == "#/A: expected maxLength: 10, actual: 11"

    def test_each_document_fetched_once(self, make_fetch, definition_factory):
        """Test that two references into one remote document fetch it once."""
        fetch = make_fetch({COMMON_URI: COMMON_DOCUMENT})
        validator = Validator(fetch=fetch)
        definition = definition_factory(
            properties={
                "A": {"$ref": f"{COMMON_URI}#/definitions/Name"},
                "B": {"$ref": f"{COMMON_URI}#/definitions/Tag"},
            }
        )

        validator.load_definition_as_schema(definition)

        fetch.assert_called_once_with(COMMON_URI)

    def test_validation_reuses_fetched_documents(self, make_fetch, definition_factory):
        """Test that validating instances does not fetch remote documents again."""
        fetch = make_fetch({COMMON_URI: COMMON_DOCUMENT})
        validator = Validator(fetch=fetch)
        definition = definition_factory(
            properties={
                "A": {"type": "array", "items": {"$ref": f"{COMMON_URI}#/definitions/Name"}}
            }
        )
        loaded = validator.load_definition_as_schema(definition)
        assert fetch.call_count == 1

        loaded.validate({"A": ["x"] * 5})
        loaded.validate({"A": ["y"] * 5})

        assert fetch.call_count == 1

    def test_validation_survives_unreachable_host(self, make_fetch, definition_factory):
        """Test that a loaded schema validates after its remote host goes away."""
        fetch = make_fetch({COMMON_URI: COMMON_DOCUMENT})
        validator = Validator(fetch=fetch)
        definition = definition_factory(properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Name"}})
        loaded = validator.load_definition_as_schema(definition)

        fetch.side_effect = OSError("host unreachable")

        loaded.validate({"A": "x"})
        with pytest.raises(ValidationError) as exc_info:
            loaded.validate({"A": "x" * 11})
        assert exc_info.value.keyword == "maxLength"

    def test_each_load_fetches_afresh(self, make_fetch, definition_factory):
        """Test that the fetch cache does not outlive a load."""
        fetch = make_fetch({COMMON_URI: COMMON_DOCUMENT})
        validator = Validator(fetch=fetch)
        definition = definition_factory(properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Name"}})

        validator.load_definition_as_schema(definition)
        validator.load_definition_as_schema(definition)

        assert fetch.call_count == 2

    def test_unreachable_document(self, make_fetch, definition_factory):
        """Test that a fetch failure is reported as an unresolvable reference."""
        validator = Validator(fetch=make_fetch({}))
        definition = definition_factory(properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Name"}})

        with pytest.raises(ValidationError) as exc_info:
            validator.load_definition_as_schema(definition)

        assert exc_info.value.keyword == "$ref"
        assert exc_info.value.schema_pointer == "#/properties/A"

    def test_target_must_be_a_schema(self, make_fetch, definition_factory):
        """Test that a reference target violating draft-07 is rejected."""
        validator = Validator(fetch=make_fetch({COMMON_URI: COMMON_DOCUMENT}))
        definition = definition_factory(
            properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Broken"}}
        )

        with pytest.raises(ValidationError) as exc_info:
            validator.load_definition_as_schema(definition)

        error = exc_info.value
        assert error.keyword == "$ref"
        assert error.message == (
            f"#/properties/A: $ref [{COMMON_URI}#/definitions/Broken] "
            "does not point to a valid schema"
        )
        assert len(error.causing_exceptions) == 1

    def test_remote_references_disabled(self, validator, definition_factory):
        """Test that remote references fail when fetching is disabled."""
        definition = definition_factory(properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Name"}})

        with pytest.raises(ValidationError) as exc_info:
            validator.load_definition_as_schema(definition)

        assert exc_info.value.keyword == "$ref"

    def test_disabled_config_never_calls_fetch(self, make_fetch, definition_factory):
        """Test that a fetcher is ignored when remote references are disabled."""
        fetch = make_fetch({COMMON_URI: COMMON_DOCUMENT})
        validator = Validator(config=ValidatorConfig(allow_remote_refs=False), fetch=fetch)
        definition = definition_factory(properties={"A": {"$ref": f"{COMMON_URI}#/definitions/Name"}})

        with pytest.raises(ValidationError):
            validator.load_definition_as_schema(definition)

        fetch.assert_not_called()
