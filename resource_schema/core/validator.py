"""
Validator for resource definitions and resource instances.

This module provides:
- Instance validation against any draft-07 schema, with failures reported
  as scrubbed ValidationError trees
- Two-phase loading of resource definitions: a shape check against the
  resource-definition meta-schema, then a walk that resolves every $ref
  the definition contains
- The LoadedSchema handed to the semantic model once a definition is accepted

A Validator is safe to share between threads: its registry is immutable,
every call derives its own resolver from it, and each load fetches remote
documents into a cache of its own.
"""

import copy
import logging
import re
import time
from types import MappingProxyType
from typing import (Any, Callable, Dict, Iterator, List, Mapping, Optional,
                    Set, Tuple)
from urllib.parse import urldefrag, urljoin

from jsonschema import Draft7Validator
from referencing import Registry
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT7

from ..config import ValidatorConfig
from ..constants import (DRAFT7_KEYWORDS, ID_KEY, REF_KEY,
                         RESOURCE_DEFINITION_SCHEMA_URI, ROOT_POINTER,
                         SCHEMA_KEY, SCHEMA_LIST_KEYWORDS,
                         SCHEMA_MAP_KEYWORDS, SCHEMA_VALUE_KEYWORDS)
from ..exceptions import ValidationError, build_full_exception_message
from ..observability import log_operation
from ..utils import JSONPointer
from .definition_schema import RESOURCE_DEFINITION_SCHEMA
from .failures import to_failure_tree
from .registry import (build_registry, cached_retrieve, is_valid_uri,
                       remote_retrieve)
from .types import Fetch, InstanceValidator

logger = logging.getLogger(__name__)


def _unresolvable(ref: str, location: str) -> ValidationError:
    return ValidationError(
        f"{location}: unable to resolve $ref [{ref}]",
        keyword=REF_KEY,
        schema_pointer=location,
    )


def _pattern_matches(pattern: str, name: str) -> bool:
    try:
        return re.search(pattern, name) is not None
    except re.error:
        return False


def defines_property(
    schema: Any,
    name: str,
    resolve_ref: Optional[Callable[[str], Any]] = None,
    _seen: Optional[Set[int]] = None,
) -> bool:
    """
    Combinator-aware property lookup.

    A schema defines ``name`` when its own ``properties`` (or a
    ``patternProperties`` pattern) do, or when any branch of its ``allOf``,
    ``anyOf`` or ``oneOf`` does. ``$ref``s are followed through
    ``resolve_ref`` when one is given.

    ``name`` may address a nested property ("Config/Tags"); each token is
    then looked up in the subschema declared for the previous one.
    """
    seen = _seen if _seen is not None else set()
    if not isinstance(schema, Mapping) or id(schema) in seen:
        return False
    seen.add(id(schema))

    ref = schema.get(REF_KEY)
    if isinstance(ref, str) and resolve_ref is not None:
        return defines_property(resolve_ref(ref), name, resolve_ref, seen)

    head, _, rest = name.partition("/")
    properties = schema.get("properties") or {}
    if head in properties:
        if not rest or defines_property(properties[head], rest, resolve_ref):
            return True
    elif not rest and any(
        _pattern_matches(pattern, head) for pattern in schema.get("patternProperties") or {}
    ):
        return True

    for keyword in SCHEMA_LIST_KEYWORDS:
        for branch in schema.get(keyword) or ():
            if defines_property(branch, name, resolve_ref, seen):
                return True
    return False


def _subschemas(schema: Mapping[str, Any]) -> Iterator[Tuple[Tuple[str, ...], Any]]:
    """Yield (relative tokens, subschema) for every subschema position."""
    for keyword in SCHEMA_MAP_KEYWORDS:
        for name, subschema in (schema.get(keyword) or {}).items():
            yield (keyword, name), subschema
    for keyword in SCHEMA_LIST_KEYWORDS:
        for index, subschema in enumerate(schema.get(keyword) or ()):
            yield (keyword, str(index)), subschema
    for keyword in SCHEMA_VALUE_KEYWORDS:
        if keyword in schema:
            yield (keyword,), schema[keyword]

    items = schema.get("items")
    if isinstance(items, list):
        for index, subschema in enumerate(items):
            yield ("items", str(index)), subschema
    elif items is not None:
        yield ("items",), items

    for name, dependency in (schema.get("dependencies") or {}).items():
        if isinstance(dependency, Mapping):
            yield ("dependencies", name), dependency


class LoadedSchema:
    """
    A resource definition that passed both load phases.

    Only Validator.load_definition_as_schema creates these. The document is
    exposed read-only; mutating the nested containers of ``document`` is
    not supported.
    """

    def __init__(
        self, document: Dict[str, Any], validator: InstanceValidator, registry: Registry
    ) -> None:
        self._document = document
        self._validator = validator
        self._registry = registry
        self._resolver = registry.resolver_with_root(DRAFT7.create_resource(document))

    @property
    def document(self) -> Mapping[str, Any]:
        return MappingProxyType(self._document)

    @property
    def unprocessed_properties(self) -> Dict[str, Any]:
        """Top-level keys left over by draft-07: the vendor keys and ``$schema``."""
        return {
            key: value
            for key, value in self._document.items()
            if key not in DRAFT7_KEYWORDS
        }

    def validate(self, instance: Any) -> None:
        """Validate a resource instance, raising ValidationError on failure."""
        self._validator.validate_instance(instance, self._document, registry=self._registry)

    def resolve_ref(self, ref: str) -> Any:
        """
        Return the subschema a ``$ref`` in this document points to.

        Raises:
            ValidationError: If the reference cannot be resolved
        """
        try:
            return self._resolver.lookup(ref).contents
        except (Unresolvable, ValueError) as e:
            raise _unresolvable(ref, ROOT_POINTER) from e

    def defines_property(self, name: str) -> bool:
        """Whether the schema declares ``name`` as a property."""
        return defines_property(self._document, name, self.resolve_ref)


class Validator:
    """
    Validates resource definitions and resource instances.

    Example:
        validator = Validator()
        loaded = validator.load_definition_as_schema(definition)
        loaded.validate({"Name": "bucket"})

        # No network access for $refs
        validator = Validator(config=ValidatorConfig(allow_remote_refs=False))
    """

    def __init__(self, config: Optional[ValidatorConfig] = None, fetch: Optional[Fetch] = None) -> None:
        """
        Initialize the validator.

        Args:
            config: Validator configuration (defaults apply if None)
            fetch: Remote $ref fetch callable. An httpx-backed fetcher
                   honouring config.fetch_timeout is used if None.
        """
        self.config = config or ValidatorConfig()
        self._retrieve = remote_retrieve(self.config, fetch)
        self._registry = build_registry(retrieve=self._retrieve)
        self._format_checker = Draft7Validator.FORMAT_CHECKER if self.config.check_formats else None

    # ------------------------------------------------------------------
    # Instance validation
    # ------------------------------------------------------------------

    def validate_instance(
        self, instance: Any, schema: Mapping[str, Any], registry: Optional[Registry] = None
    ) -> None:
        """
        Validate ``instance`` against ``schema``.

        Args:
            instance: Document to validate
            schema: Draft-07 schema
            registry: Registry to resolve $refs against (the base registry
                      if None)

        Raises:
            ValidationError: One node per violation, wrapped in an aggregate
                             node when there is more than one. Messages never
                             carry instance values.
        """
        if registry is None:
            registry = self._registry
        engine = Draft7Validator(schema, registry=registry, format_checker=self._format_checker)
        try:
            errors = list(engine.iter_errors(instance))
        except Unresolvable as e:
            raise _unresolvable(e.ref, ROOT_POINTER) from e
        if errors:
            raise to_failure_tree(errors)

    def validate_list_handler_input(self, instance: Any, definition: Mapping[str, Any]) -> None:
        """
        Validate list handler input against ``handlers.list.handlerSchema``.

        The definition's ``definitions`` stay in scope for the handler schema's
        $refs. Nothing is checked when no handler schema is declared.
        """
        handler_schema = definition.get("handlers", {}).get("list", {}).get("handlerSchema")
        if handler_schema is None:
            return
        schema = dict(handler_schema)
        if "definitions" in definition:
            schema["definitions"] = definition["definitions"]
        self.validate_instance(instance, schema)

    # ------------------------------------------------------------------
    # Definition loading
    # ------------------------------------------------------------------

    def load_definition_as_schema(self, definition: Mapping[str, Any]) -> LoadedSchema:
        """
        Load a resource definition as a schema.

        Step 1 validates the definition against the resource-definition
        meta-schema. Step 2 registers the definition under its $id and
        resolves every $ref it contains, checking that each target is a
        draft-07 schema. Step 1 failing skips step 2.

        Args:
            definition: Raw resource definition (not modified)

        Returns:
            LoadedSchema wrapping a copy of the definition

        Raises:
            ValidationError: On shape violations and unresolvable or invalid
                             references
        """
        start_time = time.perf_counter()
        document = copy.deepcopy(dict(definition))
        # Force the resource-definition meta-schema whatever the definition says
        document[SCHEMA_KEY] = RESOURCE_DEFINITION_SCHEMA_URI
        type_name = document.get("typeName")

        try:
            self.validate_instance(document, RESOURCE_DEFINITION_SCHEMA)
            registry = self._register_definition(document, self._load_registry())
            self._resolve_references(document, registry)
        except ValidationError as e:
            log_operation(
                logger,
                "load_definition_as_schema",
                level=logging.DEBUG,
                success=False,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                type_name=type_name,
                keyword=e.keyword,
                schema_pointer=e.schema_pointer,
            )
            raise

        log_operation(
            logger,
            "load_definition_as_schema",
            level=logging.DEBUG,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            type_name=type_name,
        )
        return LoadedSchema(document, self, registry)

    def validate_resource_definition(self, definition: Mapping[str, Any]) -> None:
        """Run both load phases and discard the loaded schema."""
        self.load_definition_as_schema(definition)

    def check_resource_definition(
        self, definition: Mapping[str, Any]
    ) -> Tuple[bool, Optional[str], Optional[List[str]]]:
        """
        Validate a resource definition without raising.

        Returns:
            Tuple of (is_valid, error_message, error_pointers)
            - is_valid: True if valid, False otherwise
            - error_message: One line per violation (None if valid)
            - error_pointers: Pointers of the violations (None if valid)
        """
        try:
            self.validate_resource_definition(definition)
        except ValidationError as e:
            pointers = [
                failure.schema_pointer
                for failure in e.iter_failures()
                if not failure.is_aggregate and failure.schema_pointer is not None
            ]
            return False, build_full_exception_message(e), pointers
        return True, None, None

    def _load_registry(self) -> Registry:
        # Remote documents are fetched once per load and kept for validation
        return build_registry(retrieve=cached_retrieve(self._retrieve))

    def _register_definition(self, document: Dict[str, Any], registry: Registry) -> Registry:
        uri = document.get(ID_KEY)
        if uri is None:
            return registry
        if not isinstance(uri, str) or not is_valid_uri(uri, absolute=False):
            raise ValidationError(
                "#/$id: invalid URI for $id", keyword=ID_KEY, schema_pointer="#/$id"
            )
        key, _ = urldefrag(uri)
        logger.debug(f"Registering resource definition {key}")
        return registry.with_resource(key, DRAFT7.create_resource(document))

    def _resolve_references(self, document: Dict[str, Any], registry: Registry) -> None:
        resolver = registry.resolver_with_root(DRAFT7.create_resource(document))
        base, _ = urldefrag(document.get(ID_KEY) or "")
        self._walk(document, resolver, base, JSONPointer(()), True, True, set(), set())

    def _walk(
        self,
        schema: Any,
        resolver: Any,
        base: str,
        pointer: JSONPointer,
        in_definition: bool,
        is_resource_root: bool,
        resolved: Set[str],
        walked: Set[int],
    ) -> None:
        """
        Resolve every $ref reachable from ``schema``.

        Inside the definition ``pointer`` follows the walk; inside a $ref
        target it stays on the definition location that referenced it.
        """
        if not isinstance(schema, Mapping) or id(schema) in walked:
            return
        walked.add(id(schema))

        nested_id = schema.get(ID_KEY)
        if not is_resource_root and isinstance(nested_id, str) and not nested_id.startswith("#"):
            resolver = resolver.in_subresource(DRAFT7.create_resource(schema))
            base, _ = urldefrag(urljoin(base, nested_id))

        ref = schema.get(REF_KEY)
        if isinstance(ref, str):
            # Draft-07 ignores the siblings of $ref
            self._follow(ref, resolver, base, pointer, resolved, walked)
            return

        for tokens, subschema in _subschemas(schema):
            child_pointer = JSONPointer(pointer.tokens + tokens) if in_definition else pointer
            self._walk(
                subschema, resolver, base, child_pointer, in_definition, False, resolved, walked
            )

    def _follow(
        self,
        ref: str,
        resolver: Any,
        base: str,
        pointer: JSONPointer,
        resolved: Set[str],
        walked: Set[int],
    ) -> None:
        target_uri = urljoin(base, ref) if base else ref
        if target_uri in resolved:
            return
        resolved.add(target_uri)

        location = f"{ROOT_POINTER}{pointer}"
        try:
            target = resolver.lookup(ref)
        except (Unresolvable, ValueError) as e:
            logger.debug(f"Unresolvable $ref {ref} at {location}: {e!r}")
            raise _unresolvable(ref, location) from e

        engine = Draft7Validator(Draft7Validator.META_SCHEMA, registry=self._registry)
        errors = list(engine.iter_errors(target.contents))
        if errors:
            raise ValidationError(
                f"{location}: $ref [{ref}] does not point to a valid schema",
                keyword=REF_KEY,
                schema_pointer=location,
                causing_exceptions=(to_failure_tree(errors),),
            )

        target_base = base if ref.startswith("#") else urldefrag(target_uri)[0]
        self._walk(
            target.contents, target.resolver, target_base, pointer, False, True, resolved, walked
        )
