"""Cycle-safe JSON serializer for arbitrary in-memory values.

`serialize()` is a total function: it never raises. Anything the walker
cannot handle degrades to placeholder text, and a failure of the whole pass
degrades to a ``"[Serialization Error: ...]"`` string.

Encoding rules
--------------
- ``None``/``bool``/``str`` and finite numbers pass through.
- ``NaN`` -> ``"[NaN]"``, ``inf`` -> ``"[Infinity]"``, ``-inf`` -> ``"[-Infinity]"``.
- Arbitrary-precision numbers (``Decimal`` and ints outside the JSON-safe
  range) -> decimal text plus a trailing ``"n"`` marker, e.g. ``"123n"``.
- Functions, methods and classes -> ``"[Function]"``.
- Enum members (symbolic identifiers) -> ``"[Symbol: Color.RED]"``.
- ``datetime``/``date``/``time`` -> ISO-8601; compiled patterns -> their
  ``re.compile(...)`` literal; exceptions -> ``{name, message, stack}``;
  mappings -> plain objects; sets -> arrays; lists/tuples -> arrays.
- Other objects -> a mapping over their own attributes; a failing attribute
  yields ``"[Unserializable]"`` for that key only.

Identity tracking
-----------------
Every container is remembered *before* its children are visited and is never
forgotten afterwards. True cycles therefore terminate as ``"[Circular]"``,
and so does the second reference to a shared, non-cyclic sub-object.
"""

from __future__ import annotations

import datetime as dt
import enum
import inspect
import json
import math
import re
import traceback
from collections import deque
from collections.abc import Mapping
from decimal import Decimal
from functools import partial
from typing import Any

DEFAULT_MAX_DEPTH = 10
TRUNCATION_MARKER = "...[truncated]"

CIRCULAR = "[Circular]"
MAX_DEPTH_EXCEEDED = "[Max Depth Exceeded]"
UNSERIALIZABLE = "[Unserializable]"
FUNCTION = "[Function]"

# Largest integer a JSON consumer can hold without losing precision.
_JSON_SAFE_INT = 2**53 - 1


def _big_number(value: int | Decimal) -> str:
    return f"{value}n"


def _number(value: float) -> float | str:
    if math.isnan(value):
        return "[NaN]"
    if math.isinf(value):
        return "[Infinity]" if value > 0 else "[-Infinity]"
    return value


def _decimal(value: Decimal) -> str:
    if value.is_nan():
        return "[NaN]"
    if value.is_infinite():
        return "[Infinity]" if value > 0 else "[-Infinity]"
    return _big_number(value)


def _error_payload(exc: BaseException) -> dict[str, Any]:
    stack = None
    if exc.__traceback__ is not None:
        stack = "".join(traceback.format_exception(exc))
    return {"name": type(exc).__name__, "message": str(exc), "stack": stack}


def _own_attributes(obj: Any) -> list[str]:
    """Attribute names stored on the instance itself (``__dict__`` then slots)."""
    names: list[str] = list(getattr(obj, "__dict__", {}).keys())
    for klass in type(obj).__mro__:
        for slot in getattr(klass, "__slots__", ()):
            if isinstance(slot, str) and slot not in ("__dict__", "__weakref__"):
                if slot not in names and hasattr(obj, slot):
                    names.append(slot)
    return names


class _Walker:
    """Depth-first conversion of a value into a JSON-safe tree."""

    __slots__ = ("max_depth", "_seen")

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        # id -> object; holding the object keeps its id from being reused.
        self._seen: dict[int, Any] = {}

    def walk(self, val: Any, depth: int) -> Any:
        if depth > self.max_depth:
            return MAX_DEPTH_EXCEEDED

        if val is None or isinstance(val, bool | str):
            return val
        if isinstance(val, enum.Enum):
            return f"[Symbol: {type(val).__name__}.{val.name}]"
        if isinstance(val, int):
            return _big_number(val) if abs(val) > _JSON_SAFE_INT else int(val)
        if isinstance(val, float):
            return _number(float(val))
        if isinstance(val, Decimal):
            return _decimal(val)
        if inspect.isroutine(val) or inspect.isclass(val) or isinstance(val, partial):
            return FUNCTION
        if isinstance(val, bytes | bytearray | memoryview):
            return f"[Bytes: {len(val)}]"
        if isinstance(val, tuple | frozenset) and not val:
            # Empty immutables are interned singletons; they cannot form cycles.
            return []

        if id(val) in self._seen:
            return CIRCULAR
        self._seen[id(val)] = val

        if isinstance(val, list | tuple | deque):
            return [self.walk(item, depth + 1) for item in val]
        if isinstance(val, dt.datetime | dt.date | dt.time):
            return val.isoformat()
        if isinstance(val, BaseException):
            return _error_payload(val)
        if isinstance(val, re.Pattern):
            return repr(val)
        if isinstance(val, Mapping):
            out: dict[str, Any] = {}
            for key, item in val.items():
                out[key if isinstance(key, str) else str(key)] = self.walk(item, depth + 1)
            return out
        if isinstance(val, set | frozenset):
            return [self.walk(item, depth + 1) for item in val]

        result: dict[str, Any] = {}
        for name in _own_attributes(val):
            try:
                result[name] = self.walk(getattr(val, name), depth + 1)
            except Exception:
                result[name] = UNSERIALIZABLE
        return result


def serialize(value: Any, max_depth: int = DEFAULT_MAX_DEPTH, max_length: int = 0) -> str:
    """Serialize ``value`` to compact JSON text; never raises.

    Parameters
    ----------
    value:
        Anything, including cyclic structures and non-JSON types.
    max_depth:
        Nodes deeper than this become ``"[Max Depth Exceeded]"``; their
        children are not visited.
    max_length:
        When positive and exceeded, the text is cut to ``max_length``
        characters and ``"...[truncated]"`` is appended (so the result is
        longer than ``max_length`` by the marker's length).
    """
    try:
        tree = _Walker(max_depth).walk(value, 0)
        text = json.dumps(tree, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except Exception as exc:
        try:
            return f"[Serialization Error: {exc}]"
        except Exception:
            return "[Serialization Error]"

    if max_length > 0 and len(text) > max_length:
        text = f"{text[:max_length]}{TRUNCATION_MARKER}"
    return text


def _display_number(value: float | Decimal) -> str:
    if isinstance(value, Decimal):
        if value.is_nan():
            return "NaN"
        if value.is_infinite():
            return "Infinity" if value > 0 else "-Infinity"
        return _big_number(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def stringify(value: Any, max_depth: int = DEFAULT_MAX_DEPTH, max_length: int = 0) -> str:
    """Render ``value`` for a console line.

    Primitives become plain text without JSON quoting: ``None`` -> ``"null"``,
    booleans in JSON spelling, ``NaN``/``Infinity`` spelled out, integral
    floats without a fraction, enum members as their symbol text. Containers
    and objects go through :func:`serialize`.
    """
    if isinstance(value, str) and not isinstance(value, enum.Enum):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, enum.Enum):
        return f"[Symbol: {type(value).__name__}.{value.name}]"
    if isinstance(value, int):
        return _big_number(value) if abs(value) > _JSON_SAFE_INT else str(value)
    if isinstance(value, float | Decimal):
        return _display_number(value)
    return serialize(value, max_depth=max_depth, max_length=max_length)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "TRUNCATION_MARKER",
    "CIRCULAR",
    "MAX_DEPTH_EXCEEDED",
    "UNSERIALIZABLE",
    "FUNCTION",
    "serialize",
    "stringify",
]
