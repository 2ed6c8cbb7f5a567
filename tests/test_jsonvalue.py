"""Tests for nodews.core.jsonvalue module."""

from __future__ import annotations

import pytest

from nodews.core.jsonvalue import (
    decode,
    decode_array,
    decode_object,
    expect_array,
    expect_object,
    get_string,
)
from nodews.errors import DecodeError, WorkspaceError


class TestDecode:
    """Tests for decode."""

    def test_object(self) -> None:
        assert decode('{"a": 1, "b": [true, null, "x"]}') == {"a": 1, "b": [True, None, "x"]}

    def test_scalars(self) -> None:
        assert decode("null") is None
        assert decode("false") is False
        assert decode("3.5") == 3.5
        assert decode('"hi"') == "hi"

    def test_empty_string(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode("")
        assert exc_info.value.raw == ""

    def test_whitespace_only(self) -> None:
        with pytest.raises(DecodeError):
            decode("   \n")

    def test_truncated(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode('{"name": "a"')
        assert exc_info.value.raw == '{"name": "a"'

    def test_banner_text(self) -> None:
        raw = 'npm WARN config production Use `--omit=dev` instead.\n{"name": "x"}'
        with pytest.raises(DecodeError) as exc_info:
            decode(raw)
        assert exc_info.value.raw == raw

    def test_is_workspace_error(self) -> None:
        with pytest.raises(WorkspaceError):
            decode("not json")


class TestAccessors:
    """Tests for the type-checked accessors."""

    def test_expect_object(self) -> None:
        assert expect_object({"a": 1}) == {"a": 1}

    def test_expect_object_rejects_array(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            expect_object([1, 2], raw="[1, 2]")
        assert "expected object, got array" in str(exc_info.value)
        assert exc_info.value.raw == "[1, 2]"

    def test_expect_array(self) -> None:
        assert expect_array([1]) == [1]

    def test_expect_array_rejects_null(self) -> None:
        with pytest.raises(DecodeError, match="got null"):
            expect_array(None)

    def test_decode_object(self) -> None:
        assert decode_object('{"x": "y"}') == {"x": "y"}

    def test_decode_object_rejects_scalar(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_object("42")
        assert exc_info.value.raw == "42"

    def test_decode_array_rejects_object(self) -> None:
        with pytest.raises(DecodeError):
            decode_array("{}")

    def test_get_string(self) -> None:
        obj = {"name": "a", "missing": None, "count": 3}
        assert get_string(obj, "name") == "a"
        assert get_string(obj, "missing") is None
        assert get_string(obj, "absent") is None

    def test_get_string_wrong_type(self) -> None:
        with pytest.raises(DecodeError, match="'count'"):
            get_string({"count": 3}, "count")
