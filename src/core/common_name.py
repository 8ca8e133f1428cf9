# src/core/common_name.py — v1
"""Canonical field names.

A CommonName is the comparison key for a field name: lower-cased, with
every character that is not a letter or digit removed. "E-Mail Address",
"email address" and "EMailAddress" all share the key "emailaddress".
"""

from __future__ import annotations


def canonicalize(name: str) -> str:
    """Return the canonical comparison form of a display name."""
    return "".join(ch for ch in name.lower() if ch.isalnum())


class CommonName:
    """Immutable, hashable canonical field name."""

    __slots__ = ("_value",)

    def __init__(self, name: str | CommonName = "") -> None:
        if isinstance(name, CommonName):
            value = name._value
        else:
            value = canonicalize(name or "")
        object.__setattr__(self, "_value", value)

    def __setattr__(self, key: str, value: object) -> None:
        raise AttributeError("CommonName is immutable")

    @property
    def value(self) -> str:
        return self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CommonName):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == canonicalize(other)
        return NotImplemented

    def __lt__(self, other: CommonName | str) -> bool:
        return self._value < CommonName(other)._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"CommonName({self._value!r})"
