# src/records/values.py — v1
"""Field values and the field type -> value class table.

A FieldValue holds one string datum. Subclasses change how values of a
given semantic type are normalized, compared, and appended to one another.
"""

from __future__ import annotations

import re

from recordkit.core.models import FieldType
from recordkit.records.rules import DataFormatRule

_TAG_SPLIT = re.compile(r"[,;]")

SEQ_LEFT_WIDTH = 8
SEQ_RIGHT_WIDTH = 4


def looks_numeric(data: str) -> bool:
    """True if data is an integer, optionally signed, with commas or spaces.

    At least one digit is required, and a minus sign may only lead.
    """
    text = data.strip()
    if text.startswith("-"):
        text = text[1:]
    has_digit = False
    for ch in text:
        if ch.isdigit():
            has_digit = True
        elif ch not in ", ":
            return False
    return has_digit


def numeric_value(data: str) -> int:
    """Integer value of data already accepted by looks_numeric."""
    return int(data.strip().replace(",", "").replace(" ", ""))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class FieldValue:
    """Plain string value; numeric strings compare as numbers."""

    field_type = FieldType.DEFAULT
    separator = " "

    def __init__(self, data: str = "", rule: DataFormatRule | None = None) -> None:
        self.rule = rule or DataFormatRule()
        self._data = ""
        self.set_data(data)

    @property
    def data(self) -> str:
        return self._data

    def set_data(self, data: str | None) -> None:
        self._data = self.normalize(self.rule.transform(data or ""))

    def normalize(self, data: str) -> str:
        return data

    def is_empty(self) -> bool:
        return not self._data

    def sort_key(self) -> str:
        return self._data

    def compare_to(self, other: FieldValue, ignore_case: bool = False) -> int:
        """Negative, zero or positive as this value sorts before, with, or after other."""
        if looks_numeric(self._data) and looks_numeric(other.data):
            return _sign(numeric_value(self._data) - numeric_value(other.data))
        mine, theirs = self.sort_key(), other.sort_key()
        if ignore_case:
            mine, theirs = mine.lower(), theirs.lower()
        return (mine > theirs) - (mine < theirs)

    def matches(self, other: FieldValue) -> bool:
        """Equality used when combining: same text apart from case, never numeric."""
        return self._data.lower() == other.data.lower()

    def appended(self, other: FieldValue) -> str:
        """Data of this value with other's data added after it."""
        return f"{self._data}{self.separator}{other.data}"

    def copy(self) -> FieldValue:
        clone = self.__class__.__new__(self.__class__)
        clone.rule = self.rule
        clone._data = self._data
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldValue):
            return NotImplemented
        return self._data == other.data

    def __hash__(self) -> int:
        return hash(self._data)

    def __str__(self) -> str:
        return self._data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data!r})"


class LongTextValue(FieldValue):
    field_type = FieldType.LONG_TEXT
    separator = "\n"


class TagsValue(FieldValue):
    """Comma-separated list of tags, stored as "a, b, c"."""

    field_type = FieldType.TAGS
    separator = ", "

    def normalize(self, data: str) -> str:
        return ", ".join(t.strip() for t in _TAG_SPLIT.split(data) if t.strip())

    @property
    def tags(self) -> list[str]:
        return self._data.split(", ") if self._data else []

    def get_tag(self, index: int) -> str | None:
        tags = self.tags
        if 0 <= index < len(tags):
            return tags[index]
        return None

    def appended(self, other: FieldValue) -> str:
        merged = self.tags
        seen = {t.lower() for t in merged}
        for tag in TagsValue(other.data).tags:
            if tag.lower() not in seen:
                merged.append(tag)
                seen.add(tag.lower())
        return ", ".join(merged)


class SeqValue(FieldValue):
    """Sequence or version numbers such as "2.10" that sort by component."""

    field_type = FieldType.SEQUENCE

    def sort_key(self) -> str:
        left, _, right = self._data.strip().partition(".")
        pad = "0" if any(ch.isdigit() for ch in self._data) else " "
        return left.rjust(SEQ_LEFT_WIDTH, pad) + "." + right.ljust(SEQ_RIGHT_WIDTH, pad)

    def compare_to(self, other: FieldValue, ignore_case: bool = False) -> int:
        mine = self.sort_key()
        theirs = other.sort_key() if isinstance(other, SeqValue) else SeqValue(other.data).sort_key()
        if ignore_case:
            mine, theirs = mine.lower(), theirs.lower()
        return (mine > theirs) - (mine < theirs)


_VALUE_TYPES: dict[FieldType, type[FieldValue]] = {
    FieldType.LONG_TEXT: LongTextValue,
    FieldType.TAGS: TagsValue,
    FieldType.SEQUENCE: SeqValue,
}


def value_class_for(field_type: FieldType) -> type[FieldValue]:
    """Value class used to hold data of the given semantic type."""
    return _VALUE_TYPES.get(field_type, FieldValue)


def new_value(
    field_type: FieldType, data: str = "", rule: DataFormatRule | None = None
) -> FieldValue:
    """Construct a value of the class registered for field_type."""
    return value_class_for(field_type)(data, rule)
