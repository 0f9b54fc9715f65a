"""Default transport using httpx."""

from __future__ import annotations

import asyncio
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any

import httpx
from loguru import logger

from .errors import AbortError, ErrorType, FetchError
from .types import ResolvedOptions
from .util import is_redirect


def _refusing_jar() -> CookieJar:
    # Cookies are only kept in the store passed through the ``cookies`` option
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class HTTPXTransport:
    """Performs requests with ``httpx.AsyncClient``.

    Responses are returned streamed so the response consumer decides how the
    body is read. httpx fixes the redirect limit per client, so one client is
    kept per follow limit and reused for later calls. The clients never
    remember cookies themselves.

    A call with an ``agent`` gets a client of its own that wraps the agent and
    nothing else. It is not cached and is dropped without being closed, since
    closing it would close the agent, which belongs to the caller.

    Args:
        client_options: Extra keyword arguments for the ``httpx.AsyncClient``
            instances built around the default transport (e.g. ``verify``,
            ``http2``, ``proxy``). They do not apply to agent calls.
    """

    def __init__(self, **client_options: Any):
        self._client_options = client_options
        self._clients: dict[int, httpx.AsyncClient] = {}

    async def __aenter__(self) -> HTTPXTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _client_for(self, options: ResolvedOptions) -> httpx.AsyncClient:
        if options.agent is not None:
            # trust_env=False keeps httpx from mounting proxy transports that
            # would need closing
            return httpx.AsyncClient(
                transport=options.agent,
                max_redirects=options.follow,
                cookies=_refusing_jar(),
                trust_env=False,
            )

        client = self._clients.get(options.follow)
        if client is None:
            client_options = {"cookies": _refusing_jar(), **self._client_options}
            client = httpx.AsyncClient(max_redirects=options.follow, **client_options)
            self._clients[options.follow] = client
        return client

    def _build_request(self, client: httpx.AsyncClient, url: str, options: ResolvedOptions):
        body = options.body
        if hasattr(body, "encode") and hasattr(body, "get_boundary"):
            body = body.encode()

        extra: dict[str, Any] = {}
        if options.timeout is not None:
            extra["timeout"] = options.timeout

        return client.build_request(
            options.method.upper(),
            url,
            headers=options.headers,
            content=body,
            **extra,
        )

    async def _send(self, url: str, options: ResolvedOptions) -> httpx.Response:
        client = self._client_for(options)
        request = self._build_request(client, url, options)
        follow_redirects = options.redirect == "follow"

        logger.debug(f"Sending {request.method} {request.url}")
        response = await client.send(request, stream=True, follow_redirects=follow_redirects)

        if options.redirect == "error" and is_redirect(response.status_code):
            await response.aclose()
            raise FetchError(
                f"redirect mode is set to error: {url}", ErrorType.NO_REDIRECT
            )
        return response

    async def send(self, url: str, options: ResolvedOptions) -> httpx.Response:
        """Send the request and return the streamed response.

        Raises:
            AbortError: If ``options.signal`` is set before the response arrives
            FetchError: ``no-redirect`` when a redirect arrives with
                ``redirect="error"``
            httpx.HTTPError: For connection, timeout and protocol failures
        """
        signal = options.signal
        if signal is None:
            return await self._send(url, options)

        if signal.is_set():
            raise AbortError()

        sending = asyncio.ensure_future(self._send(url, options))
        aborting = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({sending, aborting}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            sending.cancel()
            raise
        finally:
            aborting.cancel()

        if sending.done():
            return sending.result()

        logger.debug(f"Aborting {options.method.upper()} {url}")
        sending.cancel()
        try:
            response = await sending
        except asyncio.CancelledError:
            pass
        else:
            await response.aclose()
        raise AbortError()

    async def aclose(self) -> None:
        """Close every client this transport created."""
        clients, self._clients = list(self._clients.values()), {}
        for client in clients:
            await client.aclose()
