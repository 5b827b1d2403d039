"""Tests for wren.server.negotiation: handler return value shaping."""

import json
from dataclasses import dataclass

import pytest

from wren.collection import Collection
from wren.http.response import DEFAULT_CONTENT_TYPE, JSON_CONTENT_TYPE, Redirect, Response
from wren.server.negotiation import is_empty, negotiate


@dataclass(frozen=True, slots=True)
class User:
    id: int
    name: str


class TestEmpty:
    @pytest.mark.parametrize("value", [None, "", b"", {}, [], (), set(), Collection()])
    def test_empty_values_produce_nothing(self, value: object) -> None:
        assert is_empty(value)
        assert negotiate(value) is None

    @pytest.mark.parametrize("value", [0, False, 0.0])
    def test_falsy_scalars_are_not_empty(self, value: object) -> None:
        assert not is_empty(value)
        response = negotiate(value)
        assert response is not None
        assert response.text == str(value)


class TestPassthrough:
    def test_response(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original

    def test_redirect(self) -> None:
        result = negotiate(Redirect("/login"))
        assert result is not None
        assert result.status == 302
        assert ("Location", "/login") in result.headers

    def test_permanent_redirect_keeps_extra_headers(self) -> None:
        redirect = Redirect("/new", headers=(("Cache-Control", "no-store"),)).permanent()
        result = negotiate(redirect)
        assert result is not None
        assert result.status == 301
        assert result.header("cache-control") == "no-store"


class TestText:
    def test_string_keeps_default_content_type(self) -> None:
        result = negotiate("hi")
        assert result is not None
        assert result.body == "hi"
        assert result.content_type == DEFAULT_CONTENT_TYPE

    def test_bytes(self) -> None:
        result = negotiate(b"\x00raw")
        assert result is not None
        assert result.body == b"\x00raw"

    def test_other_objects_are_stringified(self) -> None:
        result = negotiate(42)
        assert result is not None
        assert result.text == "42"
        assert result.content_type == DEFAULT_CONTENT_TYPE


class TestJson:
    def test_mapping(self) -> None:
        result = negotiate({"a": 1})
        assert result is not None
        assert json.loads(result.text) == {"a": 1}
        assert result.content_type == JSON_CONTENT_TYPE

    def test_list(self) -> None:
        result = negotiate([1, 2, 3])
        assert result is not None
        assert json.loads(result.text) == [1, 2, 3]

    def test_collection(self) -> None:
        result = negotiate(Collection([{"id": 1}]))
        assert result is not None
        assert json.loads(result.text) == [{"id": 1}]
        assert result.content_type == JSON_CONTENT_TYPE

    def test_dataclass(self) -> None:
        result = negotiate(User(1, "Ada"))
        assert result is not None
        assert json.loads(result.text) == {"id": 1, "name": "Ada"}

    def test_generator(self) -> None:
        result = negotiate(n * 2 for n in range(3))
        assert result is not None
        assert json.loads(result.text) == [0, 2, 4]

    def test_unicode_and_slashes_unescaped(self) -> None:
        result = negotiate({"city": "Zürich", "url": "https://example.com/a"})
        assert result is not None
        assert "Zürich" in result.text
        assert "https://example.com/a" in result.text

    def test_nested_dataclasses(self) -> None:
        result = negotiate({"users": [User(1, "Ada")]})
        assert result is not None
        assert json.loads(result.text) == {"users": [{"id": 1, "name": "Ada"}]}
