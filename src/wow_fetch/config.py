"""Instance defaults from environment variables.

Recognised variables (shown with the default ``WOW_FETCH_`` prefix):

    WOW_FETCH_BASE_URL      base_url
    WOW_FETCH_METHOD        method
    WOW_FETCH_TYPE          type
    WOW_FETCH_REDIRECT      redirect
    WOW_FETCH_FOLLOW        follow
    WOW_FETCH_CREDENTIALS   credentials
    WOW_FETCH_TIMEOUT       timeout
    WOW_FETCH_HEADER_<NAME> default header; ``_`` in NAME becomes ``-``

Example:
    With ``WOW_FETCH_BASE_URL=https://api.example.com`` and
    ``WOW_FETCH_HEADER_X_API_KEY=secret`` set::

        fetch = create_instance_from_env(type="text")
        fetch.defaults.headers  # {"x-api-key": "secret"}
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from .factory import Fetch, build_defaults
from .types import Transport

ENV_PREFIX = "WOW_FETCH_"
HEADER_PREFIX = "HEADER_"

_SETTINGS = {
    "BASE_URL": "base_url",
    "METHOD": "method",
    "TYPE": "type",
    "REDIRECT": "redirect",
    "FOLLOW": "follow",
    "CREDENTIALS": "credentials",
    "TIMEOUT": "timeout",
}
_CASE_INSENSITIVE = {"method", "type", "redirect", "credentials"}


class ConfigurationError(Exception):
    """Configuration-related error."""

    pass


def load_env_defaults(
    prefix: str = ENV_PREFIX, environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Collect instance defaults from environment variables.

    Values are returned as strings (lowercased where the option is an
    enumeration); conversion happens when the defaults are validated.

    Args:
        prefix: Variable prefix, matched case-sensitively after upper-casing
        environ: Mapping to read instead of ``os.environ``
    """
    environ = os.environ if environ is None else environ
    prefix = prefix.upper()

    values: dict[str, Any] = {}
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if not key.startswith(prefix):
            continue
        name = key[len(prefix):]

        if name.startswith(HEADER_PREFIX):
            header = name[len(HEADER_PREFIX):].lower().replace("_", "-")
            if header:
                headers[header] = value
        elif name in _SETTINGS:
            option = _SETTINGS[name]
            values[option] = value.lower() if option in _CASE_INSENSITIVE else value
        else:
            logger.debug(f"Ignoring unknown setting {key}")

    if headers:
        values["headers"] = headers
    return values


def create_instance_from_env(
    prefix: str = ENV_PREFIX,
    *,
    transport: Transport | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Fetch:
    """Create an instance from environment defaults and explicit overrides.

    Overrides win over the environment; override headers are merged over
    environment headers.

    Raises:
        ConfigurationError: If a value fails validation
    """
    values = load_env_defaults(prefix, environ)

    env_headers = values.get("headers")
    override_headers = overrides.get("headers")
    values.update(overrides)
    if isinstance(env_headers, dict) and isinstance(override_headers, dict):
        values["headers"] = {**env_headers, **override_headers}

    try:
        defaults = build_defaults(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid fetch configuration: {e}") from e

    return Fetch(defaults, transport)
