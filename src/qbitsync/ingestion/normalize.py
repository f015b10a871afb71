"""Normalization helpers.

Centralizes defensive coercion of loosely-typed wire values into the
declared field types.  Every coercer returns ``None`` when the value cannot
be represented in the target type; the merger treats ``None`` as "skip this
field" so one bad value never fails the rest of the record.

Integer rule: finite non-integral numbers are truncated toward zero.
NaN, infinities and booleans are rejected for numeric fields.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any, TypeVar

TEnum = TypeVar("TEnum", bound=StrEnum)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


def to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(result):
        return None
    return result


def to_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
    parsed = to_float(value)
    if parsed is None:
        return None
    return int(parsed)


def to_str(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    return None


def to_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    return None


def to_str_list(value: Any) -> list[str] | None:
    """Coerce a JSON array of strings; non-string items are dropped."""
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def to_enum(enum_cls: type[TEnum], value: Any) -> TEnum | None:
    text = to_str(value)
    if text is None:
        return None
    return enum_cls(text)
