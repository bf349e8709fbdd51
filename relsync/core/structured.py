"""Helpers for reading provider JSON payloads.

Provider responses are untyped; these helpers validate at the boundary and
narrow types for the code that builds release records.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_raw_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value as-is (no stripping); None if missing or not a str.

    Release bodies and names are user text where whitespace is significant.
    """
    value = table.get(key)
    if isinstance(value, str):
        return value
    return None


def get_str(table: Mapping[str, object], key: str, default: str = "") -> str:
    """Get a string value, falling back to ``default`` when missing or null."""
    value = get_raw_str(table, key)
    return default if value is None else value


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass; never treat flags as ids.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_bool(table: Mapping[str, object], key: str) -> bool:
    return table.get(key) is True


def get_list(table: Mapping[str, object], key: str) -> ObjList:
    """Get a list from a mapping; missing or null becomes an empty list."""
    return as_obj_list(table.get(key)) or []
