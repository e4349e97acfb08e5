"""
Configuration management for resource-schema.

The Validator can be used without any configuration; ValidatorConfig
only tunes how remote ``$ref`` targets are fetched and whether ``format``
assertions are checked.

Environment variables:
    RESOURCE_SCHEMA_FETCH_TIMEOUT: seconds to wait for a remote $ref target
    RESOURCE_SCHEMA_ALLOW_REMOTE_REFS: "false" forbids fetching remote $refs
    RESOURCE_SCHEMA_CHECK_FORMATS: "false" disables format assertions
"""

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .constants import DEFAULT_FETCH_TIMEOUT_SECONDS
from .exceptions import ConfigurationError

_ENV_VARS = {
    "fetch_timeout": "RESOURCE_SCHEMA_FETCH_TIMEOUT",
    "allow_remote_refs": "RESOURCE_SCHEMA_ALLOW_REMOTE_REFS",
    "check_formats": "RESOURCE_SCHEMA_CHECK_FORMATS",
}


class ValidatorConfig(BaseModel):
    """
    Validator configuration.

    Example:
        # Using environment variables
        config = ValidatorConfig.from_env()
        validator = Validator(config=config)

        # Or using direct parameters
        validator = Validator(config=ValidatorConfig(allow_remote_refs=False))
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fetch_timeout: float = Field(default=DEFAULT_FETCH_TIMEOUT_SECONDS, gt=0)
    allow_remote_refs: bool = True
    check_formats: bool = True

    @classmethod
    def from_env(cls, **overrides: Any) -> "ValidatorConfig":
        """
        Build a configuration from environment variables.

        Args:
            **overrides: Values that take precedence over the environment

        Returns:
            ValidatorConfig instance

        Raises:
            ConfigurationError: If a value is missing its expected type or range
        """
        values: dict[str, Any] = {}
        for field_name, env_var in _ENV_VARS.items():
            raw = os.getenv(env_var)
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = ".".join(str(part) for part in first["loc"])
            raise ConfigurationError(
                f"Invalid validator configuration: {first['msg']}",
                config_key=_ENV_VARS.get(field_name, field_name),
                config_value=values.get(field_name),
            ) from e
