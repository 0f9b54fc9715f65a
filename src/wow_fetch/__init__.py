"""Async HTTP convenience layer with option merging, cookies and hooks.

wow-fetch wraps httpx in a small request function that carries instance
defaults. Every call merges its options over those defaults, encodes JSON,
form or multipart bodies, sends and captures cookies, and runs a hook
pipeline around the request/response lifecycle.

Key Features:
    - Instances bound to default options, derived with ``extend``
    - JSON, URL-form and multipart body encoding
    - Base URL and query string composition
    - Cookie persistence across requests through a shared ``CookieJar``
    - Four hook stages: before_request, after_response, request_error,
      response_error
    - Body decoding by declared or content-type inferred type
    - Typed errors with ``.type`` and ``.response``

Quick Start:
    Basic usage example::

        from wow_fetch import create_instance

        api = create_instance(base_url="https://api.example.com")

        result = await api.get("/users", query={"page": "1"})
        print(result.status, result.body)

        result = await api.post("/users", json={"name": "ann"})

Hooks:
    Add hooks at creation time or when extending::

        def add_request_id(options):
            options.headers["x-request-id"] = new_id()
            return options

        async def unwrap(result):
            return result.body["data"]

        async def fallback(result, error):
            if result.status == 404:
                return None
            raise error

        users = api.extend(
            hooks={
                "before_request": add_request_id,
                "after_response": [unwrap],
                "response_error": fallback,
            }
        )

Logging:
    wow-fetch logs through loguru and is silent by default. Enable it with
    ``logger.enable("wow_fetch")``.

See Also:
    - FetchDefaults: Options accepted by ``create_instance``
    - CallOptions: Options accepted by each call
    - FetchResponse: The result record
    - FetchError: Errors raised for failed responses
"""

from loguru import logger

from .config import ConfigurationError, create_instance_from_env, load_env_defaults
from .cookies import CookieJar
from .errors import AbortError, ErrorType, FetchError
from .factory import Fetch, build_defaults, create_instance
from .formdata import FormData
from .params import MappingParams, ParamBag, QueryParamsAdapter
from .transport import HTTPXTransport
from .types import (
    AfterResponseHook,
    BeforeRequestHook,
    CallOptions,
    CookieStore,
    FetchDefaults,
    FetchResponse,
    Hooks,
    RequestErrorHook,
    ResolvedOptions,
    ResponseErrorHook,
    Transport,
)
from .url import merge_params, merge_url
from .util import get_set_cookies

__all__ = [
    "AbortError",
    "AfterResponseHook",
    "BeforeRequestHook",
    "CallOptions",
    "ConfigurationError",
    "CookieJar",
    "CookieStore",
    "ErrorType",
    "Fetch",
    "FetchDefaults",
    "FetchError",
    "FetchResponse",
    "FormData",
    "HTTPXTransport",
    "Hooks",
    "MappingParams",
    "ParamBag",
    "QueryParamsAdapter",
    "RequestErrorHook",
    "ResolvedOptions",
    "ResponseErrorHook",
    "Transport",
    "build_defaults",
    "create_instance",
    "create_instance_from_env",
    "get_set_cookies",
    "load_env_defaults",
    "merge_params",
    "merge_url",
]
__version__ = "0.1.0"

# Disabled by default, users can enable with logger.enable("wow_fetch")
logger.disable("wow_fetch")
