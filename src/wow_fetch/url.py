"""URL composition helpers."""

from __future__ import annotations

import re
from typing import Any

import httpx

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def merge_url(base_url: str | None, url: str) -> str:
    """Join base_url and url with exactly one slash between them.

    Absolute ``http(s)://`` urls and an empty base_url leave url unchanged.

    Example:
        >>> merge_url("https://api.test", "/v1/x")
        'https://api.test/v1/x'
        >>> merge_url("https://api.test/", "v1/x")
        'https://api.test/v1/x'
    """
    if not base_url or _ABSOLUTE_URL.match(url):
        return url
    if base_url.endswith("/") and url.startswith("/"):
        return base_url + url[1:]
    separator = "" if base_url.endswith("/") or url.startswith("/") else "/"
    return f"{base_url}{separator}{url}"


def to_query_params(query: Any) -> httpx.QueryParams:
    """Coerce a mapping, pair sequence, string or QueryParams to QueryParams."""
    if isinstance(query, httpx.QueryParams):
        return query
    if query is None:
        return httpx.QueryParams()
    if hasattr(query, "entries") and not isinstance(query, (str, bytes)):
        return httpx.QueryParams(list(query.entries()))
    return httpx.QueryParams(query)


def merge_params(url: str, query: Any, override: bool = True) -> str:
    """Attach query to url.

    With override the existing query string of url is replaced. Without it
    the new parameters are appended after the existing ones.

    Example:
        >>> merge_params("https://a/b?x=1", {"y": "2"})
        'https://a/b?y=2'
        >>> merge_params("https://a/b?x=1", {"y": "2"}, override=False)
        'https://a/b?x=1&y=2'
    """
    if query is None:
        return url
    query_string = str(to_query_params(query))
    if not query_string:
        return url

    index = url.find("?")
    if override:
        base = url if index < 0 else url[:index]
        return f"{base}?{query_string}"

    if index < 0:
        separator = "?"
    elif url.endswith(("?", "&")):
        separator = ""
    else:
        separator = "&"
    return f"{url}{separator}{query_string}"
