"""Lenient accessors for values held in decoded JSON objects.

Each accessor returns a neutral value when a property is missing or has the
wrong kind, so callers never have to guard every lookup.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = ["get_string", "get_int", "get_num", "get_bool", "get_str"]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"property {name!r} must be a string, not {type(value).__name__}")
    return value


def get_str(j: Mapping[str, Any], name: str) -> str:
    """Return the string property ``name``, or "" when it is absent.

    Raises TypeError when the property exists but is not a string.
    """
    if name not in j:
        return ""
    return _require_str(j[name], name)


def get_string(j: Mapping[str, Any], name: str, max_size: int) -> str:
    """Return property ``name`` cut to fit a field of ``max_size`` bytes.

    One byte of the field is reserved for a terminator, so at most
    ``max_size - 1`` UTF-8 bytes are kept; a character split by the cut is
    dropped. A missing property yields "".
    """
    if max_size < 1:
        raise ValueError("max_size must be at least 1")
    if name not in j:
        return ""
    raw = _require_str(j[name], name).encode("utf-8")
    return raw[: max_size - 1].decode("utf-8", errors="ignore")


def get_int(j: Mapping[str, Any], name: str) -> int:
    """Return the numeric property ``name`` as an int, or 0."""
    value = j.get(name)
    return int(value) if _is_number(value) else 0


def get_num(j: Mapping[str, Any], name: str) -> float:
    """Return the numeric property ``name`` as a float, or 0.0."""
    value = j.get(name)
    return float(value) if _is_number(value) else 0.0


def get_bool(j: Mapping[str, Any], name: str) -> bool:
    """Return the boolean property ``name``, or False when absent or not boolean."""
    value = j.get(name)
    return value if isinstance(value, bool) else False