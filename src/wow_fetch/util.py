"""Small helpers shared by the merger and the response consumer."""

from __future__ import annotations

import re
from typing import Any

NULL_BODY_STATUS = frozenset({101, 204, 205, 304})
REDIRECT_STATUS = frozenset({300, 301, 302, 303, 307, 308})

# A comma starts a new cookie only when a ``name=`` pair follows it, so the
# comma inside ``Expires=Wed, 21 Oct 2015 ...`` is left alone.
_COOKIE_SEPARATOR = re.compile(r",\s*(?=[^;,=\s]+=)")


def is_plain_mapping(target: Any) -> bool:
    """Check if target is a plain ``dict`` (not a subclass or other mapping)."""
    return type(target) is dict


def is_null_body(status: int) -> bool:
    """Check if a response with this status never carries a body."""
    return status in NULL_BODY_STATUS


def is_redirect(status: int) -> bool:
    return status in REDIRECT_STATUS


def get_set_cookies(set_cookie_header: str | None) -> list[str]:
    """Split a comma-folded ``Set-Cookie`` header into individual cookies.

    Example:
        >>> get_set_cookies("a=1; Path=/, b=2; Expires=Wed, 21 Oct 2015 07:28:00 GMT")
        ['a=1; Path=/', 'b=2; Expires=Wed, 21 Oct 2015 07:28:00 GMT']
    """
    if not set_cookie_header:
        return []
    return [part.strip() for part in _COOKIE_SEPARATOR.split(set_cookie_header) if part.strip()]
