"""Coercion of extracted JSON values into table keys and values."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, List, Union


def is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def content_key(value: Any) -> int:
    """Coerce an extracted identifier to a non-negative integer key."""
    if isinstance(value, bool):
        raise ValueError(f"boolean {value!r} is not a content key")
    if isinstance(value, int):
        key = value
    elif isinstance(value, float) and value.is_integer():
        key = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        key = int(value.strip())
    else:
        raise ValueError(f"{value!r} is not a content key")
    if key < 0:
        raise ValueError(f"content key {key} is negative")
    return key


def content_ref(value: Any) -> Union[int, List[int]]:
    """Coerce an extracted identifier, or an array of them, to a mapping target."""
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if not value:
            raise ValueError("empty list is not a mapping target")
        return [content_key(item) for item in value]
    return content_key(value)


def content_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"{type(value).__name__} value is not displayable content")


def slot_key(value: Any) -> str:
    if not is_scalar(value):
        raise ValueError(f"{type(value).__name__} value is not a slot key")
    text = content_value(value)
    if not text.strip():
        raise ValueError("slot keys must not be blank")
    return text
