"""
Meta-schema registry.

Holds the two reference documents every load depends on (the draft-07
meta-schema and the resource-definition meta-schema) in an immutable
``referencing.Registry``, so that ``$ref``s to them never leave the process.
Any other remote ``$ref`` goes through a pluggable fetch callable.

Registries are immutable: registering returns a new registry. Each load
builds its own registry around a fresh retrieval cache.
"""

import functools
import io
import json
import logging
import re
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urldefrag, urlsplit

import httpx
from jsonschema import Draft7Validator
from referencing import Registry, Resource
from referencing.exceptions import NoSuchResource
from referencing.jsonschema import DRAFT7

from ..config import ValidatorConfig
from ..constants import ID_KEY, JSON_SCHEMA_URI_HTTPS
from ..exceptions import ConfigurationError
from .definition_schema import RESOURCE_DEFINITION_SCHEMA
from .types import Fetch

logger = logging.getLogger(__name__)

Retrieve = Callable[[str], Resource]

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_ILLEGAL_URI_CHARACTERS = re.compile(r"[\s<>\"{}|\\^`]")


def is_valid_uri(uri: str, absolute: bool = True) -> bool:
    """
    Check that ``uri`` is a syntactically valid URI.

    Args:
        uri: Candidate URI
        absolute: Also require a scheme. Meta-schemas are addressed by
                  absolute URI only; a definition's own $id may be relative.
    """
    if not uri or _ILLEGAL_URI_CHARACTERS.search(uri):
        return False
    try:
        parts = urlsplit(uri)
        if parts.port is not None and parts.port < 0:
            return False
    except ValueError:
        # Unbalanced IPv6 brackets, non-numeric ports
        return False
    if uri.startswith(":") or (parts.scheme and not _SCHEME.match(parts.scheme)):
        return False
    if not absolute:
        return True
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def register_meta_schema(registry: Registry, schema: Mapping[str, Any]) -> Registry:
    """
    Register a meta-schema under its own ``$id``.

    Args:
        registry: Registry to extend
        schema: Meta-schema document

    Returns:
        A new registry containing the meta-schema

    Raises:
        ConfigurationError: If the ``$id`` is missing, empty or not a valid URI
    """
    uri = schema.get(ID_KEY) if isinstance(schema, Mapping) else None
    if not isinstance(uri, str) or not uri.strip():
        raise ConfigurationError(
            "Meta-schema has no $id", config_key=ID_KEY, config_value=uri
        )
    if not is_valid_uri(uri):
        raise ConfigurationError(
            f"Meta-schema has an invalid $id: {uri!r}",
            config_key=ID_KEY,
            config_value=uri,
        )

    key, _ = urldefrag(uri)
    logger.debug(f"Registering meta-schema {key}")
    return registry.with_resource(key, DRAFT7.create_resource(schema))


def http_fetch(timeout: float) -> Fetch:
    """
    Build the default fetch callable, backed by httpx.

    Args:
        timeout: Seconds to wait for the remote document

    Returns:
        Callable returning the response body as a binary stream
    """

    def fetch(uri: str) -> io.BytesIO:
        response = httpx.get(uri, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        return io.BytesIO(response.content)

    return fetch


def make_retrieve(fetch: Fetch) -> Retrieve:
    """
    Adapt a fetch callable to the ``retrieve`` hook of a Registry.

    The fetched bytes are parsed as JSON and treated as a draft-07 schema.
    Errors propagate; the registry reports them as unresolvable references.
    """

    def retrieve(uri: str) -> Resource:
        logger.debug(f"Fetching remote $ref target {uri}")
        stream = fetch(uri)
        try:
            contents = json.loads(stream.read())
        finally:
            stream.close()
        return DRAFT7.create_resource(contents)

    return retrieve


def _refuse_remote(uri: str) -> Resource:
    logger.warning(f"Remote $ref target {uri} not fetched: remote references are disabled")
    raise NoSuchResource(ref=uri)


def remote_retrieve(
    config: Optional[ValidatorConfig] = None, fetch: Optional[Fetch] = None
) -> Retrieve:
    """
    Pick the ``retrieve`` hook for remote ``$ref`` targets.

    Args:
        config: Validator configuration (defaults apply if None)
        fetch: Remote fetch callable; an httpx fetcher is used if None

    Returns:
        A hook refusing every remote target when remote references are
        disabled, otherwise one fetching through ``fetch``
    """
    config = config or ValidatorConfig()
    if not config.allow_remote_refs:
        return _refuse_remote
    return make_retrieve(fetch or http_fetch(config.fetch_timeout))


def cached_retrieve(retrieve: Retrieve) -> Retrieve:
    """
    Wrap ``retrieve`` so that each URI is fetched at most once.

    Failed retrievals are not remembered. A loaded schema keeps the cache of
    its own load, so validating instances never fetches again.
    """
    return functools.lru_cache(maxsize=None)(retrieve)


def build_registry(
    config: Optional[ValidatorConfig] = None,
    fetch: Optional[Fetch] = None,
    retrieve: Optional[Retrieve] = None,
) -> Registry:
    """
    Assemble the base registry used by a Validator.

    Args:
        config: Validator configuration (defaults apply if None)
        fetch: Remote fetch callable; an httpx fetcher is used if None
        retrieve: Ready-made retrieve hook; overrides config and fetch

    Returns:
        A crawled registry with both meta-schemas registered
    """
    if retrieve is None:
        retrieve = remote_retrieve(config, fetch)

    draft7 = Draft7Validator.META_SCHEMA
    registry: Registry = Registry(retrieve=retrieve)
    registry = register_meta_schema(registry, draft7)
    registry = registry.with_resource(JSON_SCHEMA_URI_HTTPS, DRAFT7.create_resource(draft7))
    registry = register_meta_schema(registry, RESOURCE_DEFINITION_SCHEMA)
    return registry.crawl()
