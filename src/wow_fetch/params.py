"""Key/value capability shared by headers, query, form and data options.

Options such as ``headers`` or ``query`` may be given either as a plain
``dict`` or as a structured object (``httpx.Headers``, ``httpx.QueryParams``,
or anything implementing :class:`ParamBag`). The merger only needs three
operations from them, so both shapes are adapted to the same small protocol.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class ParamBag(Protocol):
    """Anything that can report, add and list key/value pairs."""

    def has(self, key: str) -> bool: ...

    def set(self, key: str, value: Any) -> None: ...

    def entries(self) -> Iterable[tuple[str, Any]]: ...


class MappingParams:
    """ParamBag over a mutable mapping such as ``dict`` or ``httpx.Headers``.

    Writes go straight into the wrapped mapping.
    """

    def __init__(self, mapping: MutableMapping[str, Any]):
        self.value = mapping

    def has(self, key: str) -> bool:
        return key in self.value

    def set(self, key: str, value: Any) -> None:
        self.value[key] = value

    def entries(self) -> list[tuple[str, Any]]:
        return list(self.value.items())


class QueryParamsAdapter:
    """ParamBag over ``httpx.QueryParams``.

    ``QueryParams`` is immutable, so every ``set`` swaps in a new instance;
    read the result back from ``value``.
    """

    def __init__(self, params: httpx.QueryParams):
        self.value = params

    def has(self, key: str) -> bool:
        return key in self.value

    def set(self, key: str, value: Any) -> None:
        self.value = self.value.set(key, value)

    def entries(self) -> list[tuple[str, Any]]:
        return self.value.multi_items()


def as_param_bag(target: Any) -> ParamBag | MappingParams | QueryParamsAdapter | None:
    """Adapt target to the ParamBag capability, or None if it has no keys.

    Strings and bytes (pre-encoded bodies or query strings) are never adapted.
    """
    if target is None or isinstance(target, (str, bytes)):
        return None
    if isinstance(target, ParamBag):
        return target
    if isinstance(target, httpx.QueryParams):
        return QueryParamsAdapter(target)
    if isinstance(target, MutableMapping):
        return MappingParams(target)
    return None


def fill_missing(target: Any, defaults: Mapping[str, Any]) -> Any:
    """Copy every default key that target lacks into target.

    Returns the filled value, which is a new object for immutable query
    parameters and target itself otherwise. Targets without the ParamBag
    capability are returned untouched.
    """
    bag = as_param_bag(target)
    if bag is None:
        return target

    for key, value in defaults.items():
        if not bag.has(key):
            bag.set(key, value)

    return getattr(bag, "value", bag)


def entries_of(target: Any) -> list[tuple[str, Any]]:
    """List the key/value pairs of a mapping, ParamBag or pair sequence."""
    if target is None:
        return []
    if isinstance(target, ParamBag):
        return list(target.entries())
    if isinstance(target, httpx.QueryParams):
        return target.multi_items()
    if isinstance(target, Mapping):
        return list(target.items())
    return [(key, value) for key, value in target]
