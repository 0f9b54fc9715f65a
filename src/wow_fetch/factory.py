"""Instance factory: request callables bound to a Default Option Set."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from .hooks import run_request_error
from .merge import fold_params, merge_option_props, merge_options
from .response import consume_response
from .transport import HTTPXTransport
from .types import FetchDefaults, Hooks, Transport
from .url import merge_params, merge_url

COOKIE = "cookie"


def build_defaults(
    options: FetchDefaults | Mapping[str, Any] | None = None,
    parent: FetchDefaults | None = None,
) -> FetchDefaults:
    """Build a Default Option Set.

    Built-in defaults are overridden by parent's values, which are overridden
    by options. Headers, query, form, data and json keep the parent's keys
    that options does not replace, and parent hooks run before the new ones.

    Args:
        options: New defaults, as a mapping or a FetchDefaults
        parent: Default Option Set to inherit from

    Returns:
        A new frozen FetchDefaults; parent is not modified

    Raises:
        pydantic.ValidationError: If options contains unknown or invalid values
    """
    if options is None:
        options = {}
    if not isinstance(options, FetchDefaults):
        options = FetchDefaults.model_validate(options)
    if parent is None:
        parent = FetchDefaults()

    parent_values = {name: getattr(parent, name) for name in FetchDefaults.model_fields}
    values = fold_params(options.explicit())
    hooks = values.pop("hooks", None) or Hooks()

    merge_option_props(values, parent_values)

    return FetchDefaults.model_validate(
        {**parent_values, **values, "hooks": parent.hooks.chain(hooks)}
    )


class Fetch:
    """A request function bound to a Default Option Set.

    Instances are callable: ``await fetch(url, **options)`` is the same as
    ``await fetch.request(url, **options)``. Method shortcuts pin the method,
    and ``extend`` derives a child instance that inherits these defaults and
    hooks.

    Example:
        >>> api = create_instance(base_url="https://api.example.com", headers={"x-app": "demo"})
        >>> result = await api.get("/users", query={"page": "2"})
        >>> result.status, result.body
        (200, [...])

        >>> admin = api.extend(headers={"authorization": "Bearer token"})
        >>> await admin.delete("/users/42", type="text")

    Args:
        defaults: The Default Option Set for this instance
        transport: Transport performing the HTTP exchange; an
            :class:`HTTPXTransport` is created when omitted
    """

    def __init__(self, defaults: FetchDefaults, transport: Transport | None = None):
        self._defaults = defaults
        self._transport = transport if transport is not None else HTTPXTransport()

    @property
    def defaults(self) -> FetchDefaults:
        return self._defaults

    @property
    def transport(self) -> Transport:
        return self._transport

    async def __aenter__(self) -> Fetch:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport. Instances derived with ``extend`` share it."""
        await self._transport.aclose()

    async def request(self, url: str, **options: Any) -> Any:
        """Send a request and return its result.

        Args:
            url: Absolute url, or a path joined to ``base_url``
            **options: Per-call options, see :class:`~wow_fetch.types.CallOptions`

        Returns:
            The :class:`~wow_fetch.types.FetchResponse` after every
            after-response hook, or whatever those hooks (or a response-error
            hook) returned instead

        Raises:
            FetchError: For non-2xx statuses and response processing failures
                no response-error hook handled
            httpx.HTTPError: For transport failures, after request-error hooks ran
        """
        defaults = self._defaults
        resolved = merge_options(defaults, options, url)
        whole_url = merge_url(defaults.base_url, merge_params(resolved.url, resolved.query))

        if resolved.cookies is not None:
            cookie_string = resolved.cookies.get_cookie_string(whole_url)
            if cookie_string:
                resolved.headers[COOKIE] = cookie_string

        try:
            response = await self._transport.send(whole_url, resolved)
        except Exception as error:
            logger.debug(f"{resolved.method.upper()} {whole_url} failed: {error!r}")
            await run_request_error(defaults.hooks.request_error, resolved, error)
            raise

        return await consume_response(response, resolved, defaults)

    async def __call__(self, url: str, **options: Any) -> Any:
        return await self.request(url, **options)

    # Convenience methods
    async def get(self, url: str, **options: Any) -> Any:
        """Send a GET request."""
        return await self.request(url, **{**options, "method": "get"})

    async def post(self, url: str, **options: Any) -> Any:
        """Send a POST request."""
        return await self.request(url, **{**options, "method": "post"})

    async def put(self, url: str, **options: Any) -> Any:
        """Send a PUT request."""
        return await self.request(url, **{**options, "method": "put"})

    async def patch(self, url: str, **options: Any) -> Any:
        """Send a PATCH request."""
        return await self.request(url, **{**options, "method": "patch"})

    async def delete(self, url: str, **options: Any) -> Any:
        """Send a DELETE request."""
        return await self.request(url, **{**options, "method": "delete"})

    async def head(self, url: str, **options: Any) -> Any:
        """Send a HEAD request."""
        return await self.request(url, **{**options, "method": "head"})

    async def options(self, url: str, **options: Any) -> Any:
        """Send an OPTIONS request."""
        return await self.request(url, **{**options, "method": "options"})

    def extend(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> Fetch:
        """Derive an instance whose defaults inherit from this one.

        The child shares this instance's transport.
        """
        defaults = build_defaults({**(options or {}), **kwargs}, self._defaults)
        return Fetch(defaults, self._transport)

    def __repr__(self) -> str:
        return f"Fetch(base_url={self._defaults.base_url!r})"


def create_instance(
    options: Mapping[str, Any] | None = None,
    /,
    *,
    transport: Transport | None = None,
    **kwargs: Any,
) -> Fetch:
    """Create a request instance.

    Defaults may be passed as a mapping, as keyword arguments, or both
    (keywords win).

    Example:
        >>> fetch = create_instance(
        ...     base_url="https://api.example.com",
        ...     headers={"accept": "application/json"},
        ...     hooks={"before_request": add_request_id},
        ... )
    """
    defaults = build_defaults({**(options or {}), **kwargs})
    return Fetch(defaults, transport)
