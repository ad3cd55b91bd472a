"""Narrowing for decoded JSON and TOML.

``package.json``, ``.pregyp.toml`` and GitHub API responses all arrive as
plain ``object``. The getters below return a typed value or None, never raise,
and leave it to the caller to decide what a missing field means.
"""

from __future__ import annotations

from typing import Mapping, cast

StrDict = dict[str, object]
ObjList = list[object]


def as_str_dict(obj: object) -> StrDict | None:
    """Return ``obj`` when it is a JSON object (a dict keyed by str)."""
    if not isinstance(obj, dict):
        return None
    d = cast(dict[object, object], obj)
    if any(not isinstance(k, str) for k in d):
        return None
    return cast(StrDict, d)


def as_obj_list(obj: object) -> ObjList | None:
    return cast(ObjList, obj) if isinstance(obj, list) else None


def get_str(table: Mapping[str, object], key: str, *, strip: bool = True) -> str | None:
    """Read a non-empty string field.

    With ``strip=False`` the value is returned byte-for-byte, which matters
    for fields that are compared or substituted verbatim.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    if strip:
        value = value.strip()
    return value or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_float(table: Mapping[str, object], key: str) -> float | None:
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    return value if isinstance(value, bool) else None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_list(table: Mapping[str, object], key: str) -> ObjList | None:
    return as_obj_list(table.get(key))
