"""
Translation of jsonschema errors into failure trees.

jsonschema's own messages quote the offending instance for most keywords
("'hunter2' is too long"). Before the scrub pass in
``ValidationError.from_native`` decides what may pass through, the messages
of every safe-list keyword are re-rendered here from the schema and the
instance's shape only, so that a pass-through message never carries a value.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from jsonschema.exceptions import ValidationError as EngineError

from ..constants import ROOT_POINTER
from ..exceptions import ValidationError
from ..utils import JSONPointer

FALSE_SCHEMA_KEYWORD = "false"


@dataclass(frozen=True)
class NativeFailure:
    """An engine failure reduced to the fields the failure tree needs."""

    message: str
    keyword: Optional[str]
    pointer: str
    children: Tuple["NativeFailure", ...] = ()


def instance_pointer(path: Iterable[Any]) -> str:
    """Render an engine instance path as a ``#``-prefixed pointer."""
    return ROOT_POINTER + str(JSONPointer(str(token) for token in path))


def _json_type(instance: Any) -> str:
    if instance is None:
        return "null"
    if isinstance(instance, bool):
        return "boolean"
    if isinstance(instance, int):
        return "integer"
    if isinstance(instance, float):
        return "number"
    if isinstance(instance, str):
        return "string"
    if isinstance(instance, (list, tuple)):
        return "array"
    if isinstance(instance, dict):
        return "object"
    return type(instance).__name__


def _type(error: EngineError, pointer: str) -> str:
    expected = error.validator_value
    if isinstance(expected, list):
        expected = ", ".join(expected)
    return f"{pointer}: expected type: {expected}, found: {_json_type(error.instance)}"


def _required(error: EngineError, pointer: str) -> str:
    # One engine error per missing key, each naming the key it is about
    for name in error.validator_value:
        if name not in error.instance and error.message == f"{name!r} is a required property":
            return f"{pointer}: required key [{name}] not found"
    return f"{pointer}: required key not found"


def _min_properties(error: EngineError, pointer: str) -> str:
    return f"{pointer}: minimum size: [{error.validator_value}], found: [{len(error.instance)}]"


def _max_properties(error: EngineError, pointer: str) -> str:
    return f"{pointer}: maximum size: [{error.validator_value}], found: [{len(error.instance)}]"


def _dependencies(error: EngineError, pointer: str) -> str:
    for name, dependency in error.validator_value.items():
        if name not in error.instance or not isinstance(dependency, list):
            continue
        for each in dependency:
            if error.message == f"{each!r} is a dependency of {name!r}":
                return f"{pointer}: property [{each}] is required by [{name}]"
    return f"{pointer}: dependency constraint not met"


def _additional_properties(error: EngineError, pointer: str) -> str:
    declared = error.schema.get("properties", {})
    patterns = error.schema.get("patternProperties", {})
    extras = [
        key
        for key in error.instance
        if key not in declared and not any(re.search(p, key) for p in patterns)
    ]
    if len(extras) == 1:
        return f"{pointer}: extraneous key [{extras[0]}] is not permitted"
    return f"{pointer}: extraneous keys [{', '.join(extras)}] are not permitted"


def _length(error: EngineError, pointer: str) -> str:
    return f"{pointer}: expected {error.validator}: {error.validator_value}, actual: {len(error.instance)}"


def _item_count(error: EngineError, pointer: str) -> str:
    bound = "minimum" if error.validator == "minItems" else "maximum"
    return f"{pointer}: expected {bound} item count: {error.validator_value}, found: {len(error.instance)}"


def _unique_items(error: EngineError, pointer: str) -> str:
    return f"{pointer}: array items are not unique"


def _contains(error: EngineError, pointer: str) -> str:
    return f"{pointer}: expected at least one array item to match 'contains' schema"


def _all_of(error: EngineError, pointer: str) -> str:
    return f"{pointer}: not all of the {len(error.validator_value)} subschemas matched"


def _any_of(error: EngineError, pointer: str) -> str:
    return f"{pointer}: no subschema matched out of the total {len(error.validator_value)} subschemas"


def _one_of(error: EngineError, pointer: str) -> str:
    if error.context:
        return _any_of(error, pointer)
    return f"{pointer}: more than one of the {len(error.validator_value)} subschemas matched"


_RENDERERS: Dict[str, Callable[[EngineError, str], str]] = {
    "type": _type,
    "required": _required,
    "minProperties": _min_properties,
    "maxProperties": _max_properties,
    "dependencies": _dependencies,
    "additionalProperties": _additional_properties,
    "minLength": _length,
    "maxLength": _length,
    "minItems": _item_count,
    "maxItems": _item_count,
    "uniqueItems": _unique_items,
    "contains": _contains,
    "allOf": _all_of,
    "anyOf": _any_of,
    "oneOf": _one_of,
}


def to_native(error: EngineError) -> NativeFailure:
    """
    Reduce a jsonschema error (and its combinator context) to a NativeFailure.

    Keywords without a renderer keep the engine's message; the scrub pass
    replaces those unless the keyword is safe.
    """
    pointer = instance_pointer(error.absolute_path)
    keyword = error.validator if error.validator is not None else FALSE_SCHEMA_KEYWORD
    render = _RENDERERS.get(keyword)
    message = render(error, pointer) if render else f"{pointer}: {error.message}"
    children = tuple(to_native(child) for child in error.context or ())
    return NativeFailure(message=message, keyword=keyword, pointer=pointer, children=children)


def to_failure_tree(errors: Sequence[EngineError], pointer: str = ROOT_POINTER) -> ValidationError:
    """
    Scrub engine errors and fold them into one failure tree.

    A single error is returned as is; several are wrapped in an aggregate
    node rooted at ``pointer``.
    """
    failures = [ValidationError.from_native(to_native(error)) for error in errors]
    return ValidationError.aggregate(failures, pointer)
