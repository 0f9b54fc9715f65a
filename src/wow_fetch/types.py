"""Type definitions for wow-fetch.

This module defines the option models, result records, hook signatures and
collaborator protocols used throughout wow-fetch. It is the contract between
the instance factory, the option merger and the response consumer.

Pydantic validates everything a caller hands in (instance defaults and
per-call options); plain dataclasses carry the records that wow-fetch builds
itself and hands to hooks.

Classes:
    Hooks: Ordered hook lists for the four lifecycle stages
    CallOptions: Options accepted by a single request call
    FetchDefaults: The Default Option Set owned by one instance
    ResolvedOptions: Per-call options after merging and encoding
    FetchResponse: The Result Record returned to callers
    CookieStore: Protocol for cookie stores
    Transport: Protocol for the component that performs the HTTP exchange

Type Aliases:
    BeforeRequestHook: ``ResolvedOptions -> ResolvedOptions``
    AfterResponseHook: ``result -> result`` (sync or async)
    RequestErrorHook: ``(ResolvedOptions, error) -> bool | None`` (sync or async)
    ResponseErrorHook: ``(FetchResponse, error) -> value`` (sync or async)

Example:
    Building defaults directly::

        from wow_fetch.types import FetchDefaults

        defaults = FetchDefaults(
            base_url="https://api.example.com",
            headers={"Authorization": "Bearer token"},
            type="json",
            hooks={"before_request": add_request_id},
        )
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

Method = Literal["get", "post", "put", "patch", "delete", "head", "options"]
BodyType = Literal["text", "json", "blob", "buffer", "array-buffer", "stream", "auto"]
RedirectMode = Literal["follow", "manual", "error"]
CredentialsMode = Literal["omit", "same-origin", "include"]

METHODS: tuple[str, ...] = ("get", "post", "put", "patch", "delete", "head", "options")
BODY_METHODS = frozenset({"post", "put", "patch"})

HOOK_STAGES: tuple[str, ...] = (
    "before_request",
    "after_response",
    "request_error",
    "response_error",
)

BeforeRequestHook = Callable[["ResolvedOptions"], "ResolvedOptions"]
"""Synchronous transform applied to the resolved options before sending."""

AfterResponseHook = Callable[[Any], Any]
"""Transform applied to the result of a successful response. May be async."""

RequestErrorHook = Callable[["ResolvedOptions", Exception], Any]
"""Side-effect handler for transport failures. Return ``False`` to stop the chain."""

ResponseErrorHook = Callable[["FetchResponse", Exception], Any]
"""Handler for response failures. Returning a value resolves the request with it."""


@runtime_checkable
class CookieStore(Protocol):
    """Protocol for cookie stores attached through the ``cookies`` option."""

    def get_cookie_string(self, url: str) -> str: ...

    def set_cookie(self, cookie: str, url: str) -> None: ...


@runtime_checkable
class Transport(Protocol):
    """Protocol for the component that performs the HTTP exchange.

    ``send`` must return a streamed ``httpx.Response`` whose body has not been
    read yet, or raise for transport-level failures.
    """

    async def send(self, url: str, options: ResolvedOptions) -> httpx.Response: ...

    async def aclose(self) -> None: ...


class Hooks(BaseModel):
    """Ordered hook lists for each lifecycle stage.

    Each stage accepts a single callable or a sequence of callables; a single
    callable becomes a one-element tuple.

    Attributes:
        before_request: Run in order on the resolved options before sending
        after_response: Run in order on the result of a successful response
        request_error: Run in order when the transport fails
        response_error: Tried in order when a response fails; first success wins
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    before_request: tuple[Callable[..., Any], ...] = ()
    after_response: tuple[Callable[..., Any], ...] = ()
    request_error: tuple[Callable[..., Any], ...] = ()
    response_error: tuple[Callable[..., Any], ...] = ()

    @field_validator(*HOOK_STAGES, mode="before")
    @classmethod
    def _as_tuple(cls, value: Any) -> Any:
        if value is None:
            return ()
        if callable(value):
            return (value,)
        return tuple(value)

    def chain(self, child: Hooks) -> Hooks:
        """Return hooks with this instance's hooks running before child's."""
        return Hooks(
            **{stage: getattr(self, stage) + getattr(child, stage) for stage in HOOK_STAGES}
        )


class CallOptions(BaseModel):
    """Options accepted by a single request call.

    Only the options a caller actually passes are merged over the instance
    defaults; unset fields never override anything.

    Attributes:
        method: HTTP method, case-insensitive
        headers: Request headers (dict, ``httpx.Headers`` or ParamBag)
        body: Raw request body, used when no json/form/data is given
        signal: ``asyncio.Event`` that aborts the request when set
        credentials: Credentials mode, accepted for compatibility
        redirect: "follow", "manual" or "error"
        follow: Maximum number of redirects to follow
        agent: ``httpx.AsyncBaseTransport`` used for this call
        params: Alias of ``query``
        query: Query string parameters
        json_data: Value to send as JSON (passed as ``json``)
        form: Value to send URL-form encoded
        data: Value to send as ``multipart/form-data``
        cookies: Cookie store used to send and capture cookies
        type: How to decode the response body
        timeout: Timeout in seconds handed to the transport
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", populate_by_name=True)

    method: Optional[Method] = None
    headers: Any = None
    body: Any = None
    signal: Optional[asyncio.Event] = None
    credentials: Optional[CredentialsMode] = None
    redirect: Optional[RedirectMode] = None
    follow: Optional[int] = Field(default=None, ge=0)
    agent: Optional[httpx.AsyncBaseTransport] = None
    params: Any = None
    query: Any = None
    json_data: Any = Field(default=None, alias="json")
    form: Any = None
    data: Any = None
    cookies: Any = None
    type: Optional[BodyType] = None
    timeout: Optional[float] = None

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    def explicit(self) -> dict[str, Any]:
        """Return the options that were explicitly supplied, by field name.

        Options explicitly set to ``None`` count as not supplied.
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class FetchDefaults(CallOptions):
    """The Default Option Set of one instance.

    Frozen once built. ``Fetch.extend`` derives a new set instead of
    changing this one.

    Attributes:
        base_url: Prefix for relative request URLs
        hooks: Hook lists for every lifecycle stage
    """

    model_config = ConfigDict(frozen=True)

    method: Method = "get"
    type: BodyType = "json"
    redirect: RedirectMode = "follow"
    follow: int = Field(default=10, ge=0)
    credentials: CredentialsMode = "same-origin"
    base_url: str = ""
    hooks: Hooks = Field(default_factory=Hooks)

    @field_validator("base_url", mode="before")
    @classmethod
    def _none_base_url(cls, value: Any) -> Any:
        return "" if value is None else value


@dataclass
class ResolvedOptions:
    """Per-call options after merging, body encoding and before-request hooks.

    Unlike :class:`CallOptions` this record has no ``json``, ``form``,
    ``data`` or ``hooks`` fields: by the time it exists they have been
    encoded into ``body`` and ``headers``.
    """

    url: str
    method: str = "get"
    headers: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    query: Any = None
    signal: asyncio.Event | None = None
    credentials: str = "same-origin"
    redirect: str = "follow"
    follow: int = 10
    agent: httpx.AsyncBaseTransport | None = None
    cookies: CookieStore | None = None
    type: str = "json"
    timeout: float | None = None


@dataclass
class FetchResponse:
    """The Result Record built for every response.

    Attributes:
        ok: True for 2xx statuses
        url: Final URL after redirects
        status: HTTP status code
        status_text: Reason phrase
        headers: Response headers as a plain dict with lowercase keys
        redirected: True if at least one redirect was followed
        body: Decoded body (see the ``type`` option)
        options: The resolved options the request was sent with
    """

    ok: bool
    url: str
    status: int
    status_text: str
    headers: dict[str, str]
    redirected: bool
    options: ResolvedOptions
    body: Any = None
