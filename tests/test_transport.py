"""Tests for the httpx transport."""

import asyncio

import httpx
import pytest

from wow_fetch import AbortError, ErrorType, FetchError, FormData, HTTPXTransport, ResolvedOptions, create_instance


def redirecting_server(request):
    if request.url.path == "/old":
        return httpx.Response(302, headers={"location": "https://api.example.com/new"})
    if request.url.path == "/new":
        return httpx.Response(200, json={"moved": True})
    return httpx.Response(404)


@pytest.fixture
def redirects():
    return httpx.MockTransport(redirecting_server)


@pytest.mark.asyncio
async def test_follow_redirects(redirects):
    """Test redirects are followed by default."""
    fetch = create_instance(base_url="https://api.example.com", agent=redirects)

    result = await fetch.get("/old")

    assert result.body == {"moved": True}
    assert result.redirected is True
    assert result.url == "https://api.example.com/new"


@pytest.mark.asyncio
async def test_follow_limit(redirects):
    """Test the follow limit caps redirects."""
    fetch = create_instance(base_url="https://api.example.com", agent=redirects, follow=0)

    with pytest.raises(httpx.TooManyRedirects):
        await fetch.get("/old")


@pytest.mark.asyncio
async def test_manual_redirect_returns_redirect_response(redirects):
    """Test manual mode hands back the 3xx response."""
    fetch = create_instance(base_url="https://api.example.com", agent=redirects)

    with pytest.raises(FetchError) as exc_info:
        await fetch.get("/old", redirect="manual")

    assert exc_info.value.type == ErrorType.INVALID_STATUS
    assert exc_info.value.response.status == 302
    assert exc_info.value.response.headers["location"] == "https://api.example.com/new"


@pytest.mark.asyncio
async def test_error_redirect_mode(redirects):
    """Test error mode raises no-redirect through request-error hooks."""
    seen = []
    fetch = create_instance(
        base_url="https://api.example.com",
        agent=redirects,
        redirect="error",
        hooks={"request_error": lambda options, error: seen.append(error.type)},
    )

    with pytest.raises(FetchError) as exc_info:
        await fetch.get("/old")

    assert exc_info.value.type == ErrorType.NO_REDIRECT
    assert seen == [ErrorType.NO_REDIRECT]


@pytest.mark.asyncio
async def test_signal_set_before_send():
    """Test an already-set signal aborts without sending."""
    sent = []
    agent = httpx.MockTransport(lambda request: sent.append(request) or httpx.Response(200))
    signal = asyncio.Event()
    signal.set()
    fetch = create_instance(agent=agent)

    with pytest.raises(AbortError) as exc_info:
        await fetch.get("https://api.example.com/x", signal=signal)

    assert exc_info.value.type == ErrorType.ABORTED
    assert sent == []


@pytest.mark.asyncio
async def test_signal_aborts_pending_request():
    """Test setting the signal cancels a request in flight."""

    async def slow(request):
        await asyncio.sleep(10)
        return httpx.Response(200)

    signal = asyncio.Event()
    fetch = create_instance(agent=httpx.MockTransport(slow))
    asyncio.get_running_loop().call_later(0.01, signal.set)

    with pytest.raises(AbortError):
        await fetch.get("https://api.example.com/slow", signal=signal)


@pytest.mark.asyncio
async def test_client_does_not_keep_cookies():
    """Test cookies are not remembered without a cookie store."""
    cookie_headers = []

    def handler(request):
        cookie_headers.append(request.headers.get("cookie"))
        return httpx.Response(200, headers={"set-cookie": "sid=abc; Path=/"}, json={})

    fetch = create_instance(base_url="https://api.example.com", agent=httpx.MockTransport(handler))

    await fetch.get("/a")
    await fetch.get("/b")

    assert cookie_headers == [None, None]


@pytest.mark.asyncio
async def test_default_clients_cached_per_follow():
    """Test clients around the default transport are reused per follow limit."""
    transport = HTTPXTransport(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))

    for follow in (10, 10, 3):
        response = await transport.send(
            "https://api.example.com/x", ResolvedOptions(url="/x", follow=follow)
        )
        await response.aclose()

    assert sorted(transport._clients) == [3, 10]

    await transport.aclose()
    assert transport._clients == {}


@pytest.mark.asyncio
async def test_agent_clients_are_not_kept():
    """Test calls with their own agent leave no client behind."""
    transport = HTTPXTransport()
    fetch = create_instance(base_url="https://api.example.com", transport=transport)

    for index in range(20):
        agent = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
        result = await fetch.get(f"/items/{index}", agent=agent)
        assert result.body == {"ok": True}

    assert transport._clients == {}


@pytest.mark.asyncio
async def test_agent_stays_open_after_aclose():
    """Test closing the instance leaves a caller-owned agent usable."""
    server_calls = []

    class TrackingAgent(httpx.MockTransport):
        closed = False

        async def aclose(self):
            self.closed = True

    agent = TrackingAgent(lambda request: server_calls.append(request) or httpx.Response(200, json={}))

    async with create_instance(base_url="https://api.example.com", agent=agent) as fetch:
        await fetch.get("/x")

    assert agent.closed is False
    assert len(server_calls) == 1


@pytest.mark.asyncio
async def test_formdata_body_encoded():
    """Test FormData bodies are rendered before sending."""
    received = []

    def handler(request):
        received.append(request.content)
        return httpx.Response(200)

    form = FormData({"field": "value"}, boundary="xyz")
    transport = HTTPXTransport()
    options = ResolvedOptions(
        url="/x",
        method="post",
        headers={"content-type": form.content_type},
        body=form,
        agent=httpx.MockTransport(handler),
    )

    response = await transport.send("https://api.example.com/x", options)
    await response.aclose()

    assert received == [form.encode()]
