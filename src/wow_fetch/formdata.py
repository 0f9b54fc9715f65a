"""Multipart form payloads."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from typing import IO, Any, Union

import httpx

FileContent = Union[bytes, str, IO[bytes]]


def _field_pairs(fields: Any) -> list[tuple[str, Any]]:
    """Normalize form fields given as a mapping or a sequence of pairs."""
    if fields is None:
        return []
    if isinstance(fields, Mapping):
        return list(fields.items())
    if isinstance(fields, (str, bytes)) or not isinstance(fields, Iterable):
        raise TypeError(
            f"form fields must be a mapping or a sequence of (name, value) pairs, "
            f"not {type(fields).__name__}"
        )

    pairs = []
    for field in fields:
        if not isinstance(field, (tuple, list)) or len(field) != 2:
            raise TypeError(f"form field must be a (name, value) pair, got {field!r}")
        pairs.append((field[0], field[1]))
    return pairs


class FormData:
    """A ``multipart/form-data`` body with a boundary fixed at creation.

    The boundary is known before the body is rendered, so the merger can set
    the ``Content-Type`` header while the payload is still being assembled.
    Rendering is delegated to httpx's multipart encoder.

    Example:
        >>> form = FormData({"title": "report"})
        >>> form.append_file("upload", b"...", filename="report.pdf")
        >>> await fetch.post("/files", data=form)
    """

    def __init__(
        self,
        fields: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
        files: Mapping[str, FileContent] | None = None,
        boundary: str | None = None,
    ):
        self._boundary = boundary or os.urandom(16).hex()
        self._parts: list[tuple[str, tuple[Any, ...]]] = []

        for name, value in _field_pairs(fields):
            self.append(name, value)
        for name, content in (files or {}).items():
            self.append_file(name, content)

    def append(self, name: str, value: Any) -> None:
        """Add a plain text field."""
        if not isinstance(value, (str, bytes)):
            value = str(value)
        # A part without a filename is rendered as a regular form field
        self._parts.append((name, (None, value)))

    def append_file(
        self,
        name: str,
        content: FileContent,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        """Add a file part."""
        filename = filename or name
        if content_type:
            self._parts.append((name, (filename, content, content_type)))
        else:
            self._parts.append((name, (filename, content)))

    def get_boundary(self) -> str:
        return self._boundary

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"

    def has(self, key: str) -> bool:
        return any(name == key for name, _ in self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def encode(self) -> bytes:
        """Render the payload to bytes using this form's boundary."""
        request = httpx.Request(
            "POST",
            "http://localhost/",
            files=self._parts,
            headers={"Content-Type": self.content_type},
        )
        return request.read()

    def __repr__(self) -> str:
        names = [name for name, _ in self._parts]
        return f"FormData(boundary={self._boundary!r}, parts={names!r})"
