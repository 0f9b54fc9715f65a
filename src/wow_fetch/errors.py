"""Exception types raised by wow-fetch.

Every failure that wow-fetch produces itself is a :class:`FetchError`. The
``type`` attribute tells callers what went wrong without parsing messages,
and ``response`` carries the partial result when one exists.

Exception Hierarchy:
    FetchError: Base exception for all wow-fetch errors
    └── AbortError: The request was cancelled through its signal

Error Types:
    invalid-status: The server answered with a non-2xx status
    response-error: Decoding the body or an after-response hook failed
    no-redirect: A redirect arrived while ``redirect="error"``
    aborted: The caller's signal fired before the response arrived

Example:
    >>> try:
    ...     result = await fetch("/users/42")
    ... except FetchError as e:
    ...     if e.type == ErrorType.INVALID_STATUS:
    ...         print(f"HTTP {e.response.status}: {e.response.body}")
    ...     else:
    ...         raise

Transport failures raised by httpx (connection refused, DNS errors, timeouts)
are not wrapped and reach the caller as ``httpx`` exceptions.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import FetchResponse


class ErrorType(str, Enum):
    """Kinds of :class:`FetchError`."""

    INVALID_STATUS = "invalid-status"
    RESPONSE_ERROR = "response-error"
    NO_REDIRECT = "no-redirect"
    ABORTED = "aborted"


class FetchError(Exception):
    """Raised when a request fails after reaching wow-fetch's own logic."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType | str,
        response: FetchResponse | None = None,
    ):
        super().__init__(message)
        self._type = ErrorType(error_type)
        self._response = response

    @property
    def type(self) -> ErrorType:
        return self._type

    @property
    def response(self) -> FetchResponse | None:
        return self._response

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, type={self._type.value!r})"


class AbortError(FetchError):
    """Raised when a request's signal is set before the response arrives."""

    def __init__(self, message: str = "The operation was aborted."):
        super().__init__(message, ErrorType.ABORTED)
