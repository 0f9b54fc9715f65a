"""Turning transport responses into results."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

import httpx
from loguru import logger

from .errors import ErrorType, FetchError
from .hooks import run_after_response, run_response_error
from .types import FetchDefaults, FetchResponse, ResolvedOptions
from .util import is_null_body

SET_COOKIE = "set-cookie"


def infer_body_type(content_type: str | None) -> str:
    """Map a content-type header to the body type ``auto`` resolves to."""
    if not content_type:
        return "stream"
    mime = content_type.split(";", 1)[0].strip().lower()
    main_type, _, sub_type = mime.partition("/")
    if main_type == "text":
        return "text"
    if main_type == "application":
        return "json" if sub_type == "json" else "blob"
    return "stream"


async def consume_body(response: httpx.Response, body_type: str) -> Any:
    """Read the body of response as body_type.

    Responses whose status never carries a body decode to ``None``; for
    ``stream`` the unread byte iterator is returned and the caller owns it.
    """
    if is_null_body(response.status_code):
        await response.aclose()
        return None

    if body_type == "auto":
        body_type = infer_body_type(response.headers.get("content-type"))

    if body_type == "stream":
        return response.aiter_bytes()

    content = await response.aread()
    if body_type == "text":
        return response.text
    if body_type == "json":
        return response.json()
    if body_type == "array-buffer":
        return bytearray(content)
    # blob, buffer
    return content


def _unread_body(response: httpx.Response) -> Any:
    if is_null_body(response.status_code):
        return None
    try:
        return response.content
    except httpx.ResponseNotRead:
        return response.aiter_bytes()


def capture_cookies(response: httpx.Response, options: ResolvedOptions) -> None:
    if options.cookies is None or SET_COOKIE not in response.headers:
        return
    url = str(response.url)
    for cookie in response.headers.get_list(SET_COOKIE):
        options.cookies.set_cookie(cookie, url)


async def consume_response(
    response: httpx.Response, options: ResolvedOptions, defaults: FetchDefaults
) -> Any:
    """Build the result for response and run the response hooks.

    Args:
        response: Streamed response returned by the transport
        options: The resolved options the request was sent with
        defaults: Default Option Set holding the hook lists

    Returns:
        The result after every after-response hook, or the value returned by
        the first response-error hook that handled a failure

    Raises:
        FetchError: ``invalid-status`` for non-2xx responses and
            ``response-error`` for any other failure, unless a response-error
            hook handled it
    """
    status = response.status_code
    url = str(response.url)
    ok = 200 <= status < 300

    logger.debug(f"{options.method.upper()} {url} -> {status}")

    capture_cookies(response, options)

    result = FetchResponse(
        ok=ok,
        url=url,
        status=status,
        status_text=response.reason_phrase,
        headers=dict(response.headers.items()),
        redirected=bool(response.history),
        options=replace(options, headers=dict(options.headers)),
    )

    body_read = False
    try:
        result.body = await consume_body(response, options.type if ok else "auto")
        body_read = True
        if not ok:
            raise FetchError(
                f"HTTP {result.status_text or 'Error'}", ErrorType.INVALID_STATUS, result
            )
        return await run_after_response(defaults.hooks.after_response, result)
    except Exception as error:
        if not body_read:
            result.body = _unread_body(response)

        handled, value = await run_response_error(defaults.hooks.response_error, result, error)
        if handled:
            return value

        if isinstance(error, FetchError):
            raise
        raise FetchError(
            str(error) or type(error).__name__, ErrorType.RESPONSE_ERROR, result
        ) from error
