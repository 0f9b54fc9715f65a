"""Cookie store backed by ``httpx.Cookies``."""

from __future__ import annotations

from typing import Any

import httpx


class CookieJar:
    """Cookie store that can be shared between requests and instances.

    Matching rules (domain, path, expiry, secure) come from the standard
    library cookie policy that ``httpx.Cookies`` wraps. The jar does no
    locking of its own.

    Example:
        >>> jar = CookieJar()
        >>> fetch = create_instance(base_url="https://api.example.com", cookies=jar)
        >>> await fetch.post("/login", json={"user": "ann"})  # response sets "sid"
        >>> await fetch.get("/me")  # sends "cookie: sid=..."
    """

    def __init__(self, cookies: httpx.Cookies | dict[str, str] | None = None):
        self._cookies = httpx.Cookies(cookies)

    @property
    def cookies(self) -> httpx.Cookies:
        return self._cookies

    def get_cookie_string(self, url: str) -> str:
        """Return the ``Cookie`` header value to send to url ("" if none)."""
        request = httpx.Request("GET", url)
        self._cookies.set_cookie_header(request)
        return request.headers.get("cookie", "")

    def set_cookie(self, cookie: str, url: str) -> None:
        """Store one ``Set-Cookie`` header value received from url."""
        request = httpx.Request("GET", url)
        response = httpx.Response(200, headers=[("set-cookie", cookie)], request=request)
        self._cookies.extract_cookies(response)

    def get(self, name: str, default: Any = None, domain: str | None = None) -> Any:
        return self._cookies.get(name, default, domain=domain)

    def clear(self) -> None:
        self._cookies.clear()

    def __len__(self) -> int:
        return len(self._cookies.jar)

    def __repr__(self) -> str:
        return f"CookieJar({[cookie.name for cookie in self._cookies.jar]!r})"
