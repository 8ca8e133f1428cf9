# src/records/rules.py — v1
"""Data formatting rules applied to field values as they are stored.

Each rule is identified by a stable class name so that a persisted
dictionary can rebind the same rule when it is reloaded.
"""

from __future__ import annotations

import re

_WORD = re.compile(r"[^\W_]+", re.UNICODE)


class UnsupportedRuleError(ValueError):
    """Raised when a rule name has no registered implementation."""


class DataFormatRule:
    """Identity rule: data is stored exactly as received."""

    name = "DataFormatRule"

    def transform(self, data: str) -> str:
        return data

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DataFormatRule) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name


class AllCapsRule(DataFormatRule):
    name = "AllCapsRule"

    def transform(self, data: str) -> str:
        return data.upper()


class LowerCaseRule(DataFormatRule):
    name = "LowerCaseRule"

    def transform(self, data: str) -> str:
        return data.lower()


class InitialCapsRule(DataFormatRule):
    """First letter of each word upper-case, the rest lower-case."""

    name = "InitialCapsRule"

    def transform(self, data: str) -> str:
        return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), data)


_RULES: dict[str, type[DataFormatRule]] = {
    cls.name: cls
    for cls in (DataFormatRule, AllCapsRule, LowerCaseRule, InitialCapsRule)
}


def register_rule(rule_class: type[DataFormatRule]) -> type[DataFormatRule]:
    """Make a rule class constructible by name. Usable as a decorator."""
    _RULES[rule_class.name] = rule_class
    return rule_class


def construct_rule(name: str | None) -> DataFormatRule:
    """Build a rule from its persisted class name.

    An empty name yields the identity rule.

    Raises:
        UnsupportedRuleError: If no rule is registered under that name.
    """
    key = (name or "").strip()
    if not key:
        return DataFormatRule()
    rule_class = _RULES.get(key)
    if rule_class is None:
        supported = ", ".join(sorted(_RULES))
        raise UnsupportedRuleError(
            f"Unsupported data format rule: {key!r}. Supported: {supported}"
        )
    return rule_class()
