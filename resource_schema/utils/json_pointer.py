"""
JSON Pointer support for resource documents.

Pointers address a node inside a JSON-like document (dicts, lists and
scalars). Lookups and removals never raise for locations that are absent
from the document: a resource instance usually carries only a subset of
the properties its schema declares.
"""

from typing import Any, Iterable, NamedTuple, Tuple, Union


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _array_index(token: str) -> Union[int, None]:
    # "01" and "-1" are not valid array indexes
    if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
        return None
    return int(token)


class PointerResolution(NamedTuple):
    """Outcome of resolving a pointer against a document."""

    found: bool
    value: Any = None


NOT_FOUND = PointerResolution(False)


class JSONPointer:
    """
    An RFC 6901 pointer.

    Accepts the plain form (``/properties/Tags``), the URI fragment form
    (``#/properties/Tags``) and the root pointer (``""`` or ``#``).

    Example:
        >>> pointer = JSONPointer("/Tags/0/Key")
        >>> pointer.resolve({"Tags": [{"Key": "env"}]})
        PointerResolution(found=True, value='env')
    """

    __slots__ = ("_tokens",)

    def __init__(self, pointer: Union[str, Iterable[str]]) -> None:
        if isinstance(pointer, str):
            self._tokens = self._parse(pointer)
        else:
            self._tokens = tuple(str(token) for token in pointer)

    @staticmethod
    def _parse(pointer: str) -> Tuple[str, ...]:
        if pointer.startswith("#"):
            pointer = pointer[1:]
        if pointer == "":
            return ()
        if not pointer.startswith("/"):
            raise ValueError(f"JSON pointer must start with '/' or '#/': {pointer!r}")
        return tuple(_unescape(token) for token in pointer[1:].split("/"))

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._tokens

    @property
    def is_root(self) -> bool:
        return not self._tokens

    def parent(self) -> "JSONPointer":
        return JSONPointer(self._tokens[:-1])

    def starts_with(self, prefix: "JSONPointer") -> bool:
        return self._tokens[: len(prefix.tokens)] == prefix.tokens

    def with_prefix_removed(self, prefix: Union[str, "JSONPointer"]) -> "JSONPointer":
        """
        Drop a leading token sequence.

        Used to turn schema-rooted pointers (``/properties/A/B``) into
        instance-rooted ones (``/A/B``). Pointers that do not start with
        ``prefix`` are returned unchanged.
        """
        if isinstance(prefix, str):
            prefix = JSONPointer(prefix)
        if not self.starts_with(prefix):
            return self
        return JSONPointer(self._tokens[len(prefix.tokens) :])

    def resolve(self, document: Any) -> PointerResolution:
        """
        Look up the node this pointer addresses.

        Args:
            document: Root of the document

        Returns:
            PointerResolution with ``found`` False when any token along the
            way is absent, out of range, or addresses into a scalar
        """
        node = document
        for token in self._tokens:
            if isinstance(node, dict):
                if token not in node:
                    return NOT_FOUND
                node = node[token]
            elif isinstance(node, list):
                index = _array_index(token)
                if index is None or index >= len(node):
                    return NOT_FOUND
                node = node[index]
            else:
                return NOT_FOUND
        return PointerResolution(True, node)

    def exists(self, document: Any) -> bool:
        """True if the pointer resolves to a non-null value."""
        resolution = self.resolve(document)
        return resolution.found and resolution.value is not None

    def remove(self, document: Any) -> bool:
        """
        Delete the addressed node from its parent container.

        Removing a location that is not in the document is a no-op.

        Args:
            document: Root of the document, mutated in place

        Returns:
            True if something was removed
        """
        if self.is_root:
            return False
        parent = self.parent().resolve(document)
        if not parent.found:
            return False
        container, key = parent.value, self._tokens[-1]
        if isinstance(container, dict):
            if key not in container:
                return False
            del container[key]
            return True
        if isinstance(container, list):
            index = _array_index(key)
            if index is None or index >= len(container):
                return False
            del container[index]
            return True
        return False

    def __str__(self) -> str:
        return "".join(f"/{_escape(token)}" for token in self._tokens)

    def __repr__(self) -> str:
        return f"JSONPointer({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JSONPointer):
            return self._tokens == other._tokens
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._tokens)
