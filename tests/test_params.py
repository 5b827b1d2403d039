"""Tests for wren.routing.params: pattern tokens and converters."""

import pytest

from wren.errors import ConfigurationError
from wren.routing.params import (
    PathSegment,
    convert_param,
    normalize_path,
    parse_pattern,
    parse_segment,
    split_path,
)


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/a/b/", "a/b"),
            ("a/b", "a/b"),
            ("///a/b//", "a/b"),
            ("/", ""),
            ("", ""),
        ],
    )
    def test_strips_outer_slashes(self, raw: str, expected: str) -> None:
        assert normalize_path(raw) == expected

    def test_split_root_yields_single_empty_segment(self) -> None:
        assert split_path("/") == [""]

    def test_split(self) -> None:
        assert split_path("/profile/acme/alice/") == ["profile", "acme", "alice"]


class TestParsePattern:
    def test_static(self) -> None:
        segments = parse_pattern("/users")
        assert segments == (PathSegment("users"),)

    def test_param(self) -> None:
        segments = parse_pattern("/users/{id}")
        assert len(segments) == 2
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "str"
        assert segments[1].optional is False

    def test_optional_param(self) -> None:
        seg = parse_pattern("/posts/{slug?}")[1]
        assert seg.param_name == "slug"
        assert seg.optional is True

    def test_typed_param(self) -> None:
        seg = parse_pattern("/users/{id:int}")[1]
        assert seg.param_name == "id"
        assert seg.param_type == "int"

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown placeholder type 'uuid'"):
            parse_pattern("/users/{id:uuid}")

    def test_rejects_angle_bracket_param(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_pattern("/share/<slug>")
        assert "<param>" in str(exc_info.value)
        assert "{param}" in str(exc_info.value)

    def test_token_inside_segment_makes_whole_segment_a_placeholder(self) -> None:
        seg = parse_segment("user-{id}")
        assert seg.is_param is True
        assert seg.param_name == "id"


class TestSegmentAccepts:
    def test_literal_is_exact(self) -> None:
        seg = PathSegment("users")
        assert seg.accepts("users")
        assert not seg.accepts("Users")

    def test_placeholder_rejects_empty(self) -> None:
        seg = parse_segment("{id}")
        assert seg.accepts("42")
        assert not seg.accepts("")

    def test_int_converter(self) -> None:
        seg = parse_segment("{id:int}")
        assert seg.accepts("42")
        assert not seg.accepts("abc")
        assert not seg.accepts("4.2")

    def test_float_converter(self) -> None:
        seg = parse_segment("{price:float}")
        assert seg.accepts("4.2")
        assert seg.accepts("4")
        assert not seg.accepts("four")

    def test_slug_converter(self) -> None:
        seg = parse_segment("{slug:slug}")
        assert seg.accepts("hello-world_2")
        assert not seg.accepts("hello world")


class TestConvertParam:
    def test_int(self) -> None:
        assert convert_param("42", "int") == 42

    def test_float(self) -> None:
        assert convert_param("1.5", "float") == 1.5

    def test_str(self) -> None:
        assert convert_param("acme", "str") == "acme"

    def test_invalid_int(self) -> None:
        with pytest.raises(ValueError):
            convert_param("abc", "int")

    def test_unknown_converter(self) -> None:
        with pytest.raises(KeyError):
            convert_param("x", "uuid")
