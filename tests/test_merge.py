"""Tests for option merging and body encoding."""

import json

import httpx
import pytest
from pydantic import ValidationError

from wow_fetch import FormData, build_defaults
from wow_fetch.merge import merge_option_props, merge_options, set_content_type


def test_headers_call_keys_win():
    """Test call headers are overlaid on default headers."""
    defaults = build_defaults({"headers": {"a": "1", "b": "1"}})

    resolved = merge_options(defaults, {"headers": {"b": "2", "c": "3"}}, "/x")

    assert resolved.headers == {"a": "1", "b": "2", "c": "3"}


def test_merging_does_not_touch_defaults():
    """Test defaults stay unchanged after a merge."""
    defaults = build_defaults({"headers": {"a": "1"}, "json": {"k": 1}})

    resolved = merge_options(defaults, {"method": "post", "headers": {"b": "2"}}, "/x")
    resolved.headers["mutated"] = "yes"

    assert defaults.headers == {"a": "1"}
    assert defaults.json_data == {"k": 1}


def test_hook_edits_do_not_reach_defaults():
    """Test before-request hooks editing resolved options leave defaults alone."""

    def tag(options):
        options.query["tagged"] = "1"
        return options

    defaults = build_defaults(
        {"query": {"a": "1"}, "json": [1], "hooks": {"before_request": tag}}
    )

    first = merge_options(defaults, None, "/x")
    second = merge_options(defaults, {"method": "post"}, "/x")

    assert first.query == {"a": "1", "tagged": "1"}
    assert first.query is not second.query
    assert second.body == "[1]"
    assert defaults.query == {"a": "1"}
    assert defaults.json_data == [1]


def test_structured_headers_only_receive_missing_keys():
    """Test httpx.Headers get default keys they lack."""
    defaults = build_defaults({"headers": {"accept": "text/plain", "x-app": "demo"}})

    resolved = merge_options(
        defaults, {"headers": httpx.Headers({"Accept": "application/json"})}, "/x"
    )

    assert resolved.headers == {"accept": "application/json", "x-app": "demo"}


def test_query_params_fill_missing():
    """Test QueryParams receive the default keys they lack."""
    defaults = build_defaults({"query": {"page": "1", "size": "20"}})

    resolved = merge_options(defaults, {"query": httpx.QueryParams({"page": "3"})}, "/x")

    assert resolved.query == httpx.QueryParams({"page": "3", "size": "20"})


def test_params_is_an_alias_of_query():
    """Test params and query are combined with query winning."""
    defaults = build_defaults()

    resolved = merge_options(
        defaults, {"params": {"a": "1", "b": "1"}, "query": {"b": "2"}}, "/x"
    )

    assert resolved.query == {"a": "1", "b": "2"}


@pytest.mark.parametrize("method", ["post", "put", "patch", "POST"])
def test_json_body(method):
    """Test json bodies are serialized with an exact content type."""
    defaults = build_defaults()

    resolved = merge_options(defaults, {"method": method, "json": {"name": "ann"}}, "/x")

    assert json.loads(resolved.body) == {"name": "ann"}
    assert resolved.headers["content-type"] == "application/json"
    assert resolved.method == method.lower()


def test_json_merges_with_default_mapping():
    """Test json dicts are shallow merged with default json."""
    defaults = build_defaults({"json": {"client": "web", "v": 1}})

    resolved = merge_options(defaults, {"method": "post", "json": {"v": 2}}, "/x")

    assert json.loads(resolved.body) == {"client": "web", "v": 2}


def test_json_concatenates_default_list():
    """Test json lists follow the default list."""
    defaults = build_defaults({"json": [1, 2]})

    resolved = merge_options(defaults, {"method": "post", "json": [3]}, "/x")

    assert json.loads(resolved.body) == [1, 2, 3]


def test_default_json_list_is_not_duplicated():
    """Test a call without json sends the default list once."""
    defaults = build_defaults({"json": [1, 2]})

    resolved = merge_options(defaults, {"method": "post"}, "/x")

    assert json.loads(resolved.body) == [1, 2]


@pytest.mark.parametrize("method", ["get", "head", "delete", "options"])
def test_body_dropped_for_methods_without_body(method):
    """Test non-body methods never send a body."""
    defaults = build_defaults()

    resolved = merge_options(
        defaults,
        {"method": method, "json": {"a": 1}, "form": {"b": "2"}, "body": "raw"},
        "/x",
    )

    assert resolved.body is None
    assert "content-type" not in resolved.headers


def test_form_body_is_url_encoded():
    """Test form dicts are URL-form encoded."""
    defaults = build_defaults({"form": {"client": "web"}})

    resolved = merge_options(defaults, {"method": "post", "form": {"q": "a b"}}, "/x")

    assert httpx.QueryParams(resolved.body) == httpx.QueryParams({"client": "web", "q": "a b"})
    assert resolved.headers["content-type"] == "application/x-www-form-urlencoded"


def test_form_string_passes_through():
    """Test pre-encoded forms are sent as given."""
    defaults = build_defaults({"form": {"client": "web"}})

    resolved = merge_options(defaults, {"method": "put", "form": "raw=1"}, "/x")

    assert resolved.body == "raw=1"
    assert resolved.headers["content-type"] == "application/x-www-form-urlencoded"


def test_multipart_data():
    """Test data becomes a multipart payload with its boundary in the header."""
    defaults = build_defaults()
    form = FormData({"title": "report"}, boundary="b0undary")

    resolved = merge_options(defaults, {"method": "post", "data": form}, "/x")

    assert resolved.body is form
    assert resolved.headers["content-type"] == "multipart/form-data; boundary=b0undary"


def test_multipart_data_from_mapping():
    """Test plain dict data is wrapped into FormData."""
    defaults = build_defaults({"data": {"source": "api"}})

    resolved = merge_options(defaults, {"method": "post", "data": {"title": "x"}}, "/x")

    assert isinstance(resolved.body, FormData)
    assert resolved.body.has("source")
    assert resolved.body.has("title")
    assert resolved.headers["content-type"].startswith("multipart/form-data; boundary=")


def test_multipart_data_from_pairs():
    """Test data given as name/value pairs keeps repeated fields."""
    resolved = merge_options(
        build_defaults(), {"method": "post", "data": [("tag", "a"), ("tag", "b")]}, "/x"
    )

    assert isinstance(resolved.body, FormData)
    assert len(resolved.body) == 2
    assert resolved.body.encode().count(b'name="tag"') == 2


@pytest.mark.parametrize("data", ["title=x", b"title=x", 42, [("only-name",)]])
def test_unusable_data_raises_type_error(data):
    """Test data that cannot become form fields fails with a clear TypeError."""
    with pytest.raises(TypeError, match="form field"):
        merge_options(build_defaults(), {"method": "post", "data": data}, "/x")


def test_json_wins_over_form_and_data():
    """Test encoding precedence is json, form, data."""
    defaults = build_defaults()

    resolved = merge_options(
        defaults,
        {"method": "post", "json": {"a": 1}, "form": {"b": "2"}, "data": {"c": "3"}},
        "/x",
    )
    assert resolved.headers["content-type"] == "application/json"

    resolved = merge_options(
        defaults, {"method": "post", "form": {"b": "2"}, "data": {"c": "3"}}, "/x"
    )
    assert resolved.headers["content-type"] == "application/x-www-form-urlencoded"


def test_content_type_replaces_differently_cased_header():
    """Test content-type is not duplicated under another casing."""
    headers = {"Content-Type": "text/plain", "accept": "*/*"}

    set_content_type(headers, "application/json")

    assert headers == {"accept": "*/*", "content-type": "application/json"}


def test_raw_body_kept_for_body_methods():
    """Test a raw body is sent when no json, form or data is given."""
    defaults = build_defaults()

    resolved = merge_options(defaults, {"method": "post", "body": b"\x00\x01"}, "/x")

    assert resolved.body == b"\x00\x01"


def test_before_request_hooks_run_in_order():
    """Test before-request hooks feed into each other in order."""
    calls = []

    def first(options):
        calls.append("first")
        options.headers["x-step"] = "1"
        return options

    def second(options):
        calls.append("second")
        options.headers["x-step"] += "2"
        return options

    defaults = build_defaults({"hooks": {"before_request": [first, second]}})

    resolved = merge_options(defaults, None, "/x")

    assert calls == ["first", "second"]
    assert resolved.headers["x-step"] == "12"


def test_before_request_hook_errors_propagate():
    """Test the merger does not catch hook errors."""

    def broken(options):
        raise RuntimeError("hook failed")

    defaults = build_defaults({"hooks": {"before_request": broken}})

    with pytest.raises(RuntimeError, match="hook failed"):
        merge_options(defaults, None, "/x")


def test_unserializable_json_raises():
    """Test serialization failures reach the caller."""
    defaults = build_defaults()

    with pytest.raises(TypeError):
        merge_options(defaults, {"method": "post", "json": {"when": object()}}, "/x")


def test_unknown_option_rejected():
    """Test unknown options fail validation."""
    defaults = build_defaults()

    with pytest.raises(ValidationError):
        merge_options(defaults, {"colour": "blue"}, "/x")

    with pytest.raises(ValidationError):
        merge_options(defaults, {"type": "xml"}, "/x")


def test_merge_option_props_leaves_strings_alone():
    """Test string forms are never filled."""
    options = {"form": "a=1", "data": object()}
    data = options["data"]

    merge_option_props(options, {"form": {"b": "2"}, "data": {"c": "3"}})

    assert options["form"] == "a=1"
    assert options["data"] is data
