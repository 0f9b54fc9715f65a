"""Option merging and request body encoding."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx

from .formdata import FormData
from .hooks import run_before_request
from .params import entries_of, fill_missing
from .types import BODY_METHODS, CallOptions, FetchDefaults, ResolvedOptions
from .util import is_plain_mapping

CONTENT_TYPE = "content-type"

# Options whose default keys are filled into the caller's value
FILLABLE_OPTIONS = ("headers", "query", "form", "data")

# Options a request may receive straight from the defaults
COPIED_OPTIONS = ("query", "form", "data", "json_data")


def _copy_default(value: Any, default: Any) -> Any:
    # Hooks may edit the resolved options; the Default Option Set must not see it
    if value is None or value is not default:
        return value
    if is_plain_mapping(value):
        return dict(value)
    if isinstance(value, list):
        return list(value)
    return value


def option_values(options: CallOptions, explicit_only: bool = False) -> dict[str, Any]:
    """Return the call-level option values of a model keyed by field name.

    ``params`` is folded into ``query`` so later stages see one field.
    """
    if explicit_only:
        values = options.explicit()
    else:
        values = {name: getattr(options, name) for name in CallOptions.model_fields}
    values.pop("base_url", None)
    values.pop("hooks", None)
    return fold_params(values)


def fold_params(values: dict[str, Any]) -> dict[str, Any]:
    params = values.pop("params", None)
    if params is None:
        return values

    query = values.get("query")
    if query is None:
        values["query"] = params
    elif is_plain_mapping(query) and is_plain_mapping(params):
        values["query"] = {**params, **query}
    return values


def merge_option_props(options: dict[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Fill options with the default keys it does not override.

    ``headers``, ``query``, ``form`` and ``data`` given as plain dicts are
    shallow merged over the defaults. Structured values (``httpx.Headers``,
    ``httpx.QueryParams``, ParamBags) only receive the missing keys; ``data``
    objects are never touched. ``json`` is concatenated when both sides are
    dicts or both are lists.

    Mutates and returns options.
    """
    for name in FILLABLE_OPTIONS:
        value = options.get(name)
        default = defaults.get(name)
        if value is None or value is default or not is_plain_mapping(default):
            continue
        if is_plain_mapping(value):
            options[name] = {**default, **value}
        elif name != "data":
            options[name] = fill_missing(value, default)

    value = options.get("json_data")
    default = defaults.get("json_data")
    if value is not None and default is not None and value is not default:
        if is_plain_mapping(value) and is_plain_mapping(default):
            options["json_data"] = {**default, **value}
        elif isinstance(value, list) and isinstance(default, list):
            options["json_data"] = [*default, *value]

    return options


def set_content_type(headers: dict[str, Any], content_type: str) -> None:
    """Set the content-type header, dropping any differently-cased duplicate."""
    for key in [key for key in headers if key.lower() == CONTENT_TYPE]:
        del headers[key]
    headers[CONTENT_TYPE] = content_type


def encode_body(values: Mapping[str, Any], headers: dict[str, Any]) -> Any:
    """Pick the outgoing body for the merged options.

    Precedence is json, then form, then data, then a raw body. Methods other
    than POST, PUT and PATCH never carry a body.
    """
    if values["method"] not in BODY_METHODS:
        return None

    json_data = values.get("json_data")
    form = values.get("form")
    data = values.get("data")

    if json_data is not None:
        set_content_type(headers, "application/json")
        return json.dumps(json_data)

    if form is not None:
        set_content_type(headers, "application/x-www-form-urlencoded")
        if is_plain_mapping(form):
            return str(httpx.QueryParams(form))
        if isinstance(form, httpx.QueryParams):
            return str(form)
        return form

    if data is not None:
        if not hasattr(data, "get_boundary"):
            data = FormData(data)
        set_content_type(headers, f"multipart/form-data; boundary={data.get_boundary()}")
        return data

    return values.get("body")


def merge_options(
    defaults: FetchDefaults, options: CallOptions | Mapping[str, Any] | None, url: str
) -> ResolvedOptions:
    """Resolve the options for one request.

    Args:
        defaults: The instance's Default Option Set (never modified)
        options: Per-call options
        url: The url passed to the call, before base url and query are applied

    Returns:
        ResolvedOptions after body encoding and every before-request hook

    Raises:
        TypeError: If the json value cannot be serialized
        pydantic.ValidationError: If options contains unknown or invalid values
    """
    if options is None:
        options = CallOptions()
    elif not isinstance(options, CallOptions):
        options = CallOptions.model_validate(options)

    default_values = option_values(defaults)
    call_values = merge_option_props(option_values(options, explicit_only=True), default_values)
    values = {**default_values, **call_values}
    for name in COPIED_OPTIONS:
        values[name] = _copy_default(values.get(name), default_values.get(name))

    headers = dict(entries_of(values.get("headers")))
    body = encode_body(values, headers)

    resolved = ResolvedOptions(
        url=url,
        method=values["method"],
        headers=headers,
        body=body,
        query=values.get("query"),
        signal=values.get("signal"),
        credentials=values["credentials"],
        redirect=values["redirect"],
        follow=values["follow"],
        agent=values.get("agent"),
        cookies=values.get("cookies"),
        type=values["type"],
        timeout=values.get("timeout"),
    )
    return run_before_request(defaults.hooks.before_request, resolved)
