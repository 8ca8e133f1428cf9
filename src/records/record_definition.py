# src/records/record_definition.py — v1
"""Ordered columns over a shared Dictionary.

Column position is the contract between a RecordDefinition and the
Records built on it: columns are appended, and only removed explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from recordkit.core.common_name import CommonName
from recordkit.core.models import NOT_FOUND
from recordkit.records.column import DEFAULT_AVERAGE_LENGTH, DEFAULT_MAX_LENGTH, Column
from recordkit.records.dictionary import Dictionary
from recordkit.records.field_definition import UNKNOWN_FIELD, FieldDefinition

logger = logging.getLogger(__name__)


class RecordDefinition:
    """Schema of a record set, discovered incrementally."""

    def __init__(self, dictionary: Dictionary) -> None:
        self._dictionary = dictionary
        self._columns: list[Column] = []
        self._names: list[str] = []

    @property
    def dictionary(self) -> Dictionary:
        return self._dictionary

    @property
    def column_count(self) -> int:
        return len(self._columns)

    # --- Building ---

    def add_column(self, field: FieldDefinition | str | CommonName) -> int:
        """Append a column, even if one already maps to the same field."""
        if not isinstance(field, FieldDefinition):
            field = FieldDefinition(field)
        def_index = self._dictionary.put_def(field)
        self._columns.append(Column(def_index))
        self._names.append(field.proper_name)
        return len(self._columns) - 1

    def put_column(self, field: FieldDefinition | str | CommonName) -> int:
        """Append a column unless one already maps to the same field."""
        name = field.proper_name if isinstance(field, FieldDefinition) else field
        column = self.get_column_number(name)
        if column != NOT_FOUND:
            return column
        return self.add_column(field)

    def copy_defs(self, other: RecordDefinition) -> None:
        """Append a column for every column of other, in order."""
        for column in range(other.column_count):
            self.add_column(other.get_def(column))

    def merge(self, other: RecordDefinition) -> None:
        """Bring every field of other into this definition.

        Afterwards each column of this definition that corresponds to a
        column of other has merged_column set to that column's position
        in other; the rest have merged_column None.
        """
        for column in self._columns:
            column.reset_merge()
        added = 0
        for position in range(other.column_count):
            before = self.column_count
            target = self.put_column(other.get_def(position))
            if self.column_count > before:
                added += 1
            self._columns[target].merged_column = position
        logger.debug(
            "Merged %d columns, %d new; now %d columns",
            other.column_count, added, self.column_count,
        )

    def remove(self, column: int) -> Column | None:
        if 0 <= column < len(self._columns):
            del self._names[column]
            return self._columns.pop(column)
        return None

    def clear(self) -> None:
        self._columns.clear()
        self._names.clear()

    # --- Lookup ---

    def get_column_number(self, name: FieldDefinition | str | CommonName) -> int:
        """Column holding the field called name (aliases resolved), or NOT_FOUND."""
        if isinstance(name, FieldDefinition):
            name = name.common_name
        def_index = self._dictionary.get_def_num(name)
        if def_index == NOT_FOUND:
            return NOT_FOUND
        for index, column in enumerate(self._columns):
            if column.def_index == def_index:
                return index
        return NOT_FOUND

    def contains(self, name: str | CommonName) -> bool:
        return self.get_column_number(name) != NOT_FOUND

    def get_column(self, column: int) -> Column | None:
        if 0 <= column < len(self._columns):
            return self._columns[column]
        return None

    def get_def(self, column: int) -> FieldDefinition:
        """Definition behind a column, or UNKNOWN_FIELD if out of range."""
        found = self.get_column(column)
        if found is None:
            return UNKNOWN_FIELD
        return self._dictionary.get_def(found.def_index)

    def get_name(self, column: int) -> str:
        if 0 <= column < len(self._names):
            return self._names[column]
        return UNKNOWN_FIELD.proper_name

    @property
    def names(self) -> list[str]:
        return list(self._names)

    # --- Statistics ---

    def another_field(self, data: str, column: int) -> None:
        """Count data toward a column's statistics. Out-of-range columns are ignored."""
        found = self.get_column(column)
        if found is not None:
            found.another_field(data)

    def max_length(self, column: int) -> int:
        found = self.get_column(column)
        return DEFAULT_MAX_LENGTH if found is None else found.maximum_length

    def average_length(self, column: int) -> int:
        found = self.get_column(column)
        return DEFAULT_AVERAGE_LENGTH if found is None else found.average_length

    def describe(self) -> str:
        lines = []
        for index, column in enumerate(self._columns):
            definition = self.get_def(index)
            lines.append(
                f"{index}: {self._names[index]} ({definition.field_type.label}) "
                f"avg {column.average_length} max {column.maximum_length}"
            )
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)
