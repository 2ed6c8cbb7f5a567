"""Decode JSON text produced by package managers and package.json files."""

from __future__ import annotations

import json
from typing import Any, Union

from nodews.errors import DecodeError

JsonValue = Union[None, bool, int, float, str, list[Any], dict[str, Any]]


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def decode(raw: str) -> JsonValue:
    """
    Decode ``raw`` as a single JSON document.

    Empty input, truncated output and stray non-JSON text (warning banners and
    the like) raise DecodeError carrying the offending text.
    """
    if not raw or not raw.strip():
        raise DecodeError(raw, "empty input")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as e:
        raise DecodeError(raw, str(e)) from e


def expect_object(value: JsonValue, raw: str = "") -> dict[str, Any]:
    """Return value if it is a JSON object, else raise DecodeError."""
    if not isinstance(value, dict):
        raise DecodeError(raw, f"expected object, got {_type_name(value)}")
    return value


def expect_array(value: JsonValue, raw: str = "") -> list[Any]:
    """Return value if it is a JSON array, else raise DecodeError."""
    if not isinstance(value, list):
        raise DecodeError(raw, f"expected array, got {_type_name(value)}")
    return value


def decode_object(raw: str) -> dict[str, Any]:
    """Decode raw text that must hold a JSON object."""
    return expect_object(decode(raw), raw)


def decode_array(raw: str) -> list[Any]:
    """Decode raw text that must hold a JSON array."""
    return expect_array(decode(raw), raw)


def get_string(obj: dict[str, Any], key: str) -> str | None:
    """
    Return obj[key] when it is a string, None when the key is missing or null.

    Any other type raises DecodeError.
    """
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("", f"field {key!r}: expected string, got {_type_name(value)}")
    return value
