# src/records/sequence.py — v1
"""Sort keys: ordered (column, direction) pairs."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from recordkit.core.models import NOT_FOUND

if TYPE_CHECKING:
    from recordkit.records.record import Record
    from recordkit.records.record_definition import RecordDefinition


def is_ascending(direction: str | bool | None) -> bool:
    """Parse a direction flag. Strings starting with d or f mean descending."""
    if direction is None:
        return True
    if isinstance(direction, bool):
        return direction
    return direction.strip()[:1].lower() not in ("d", "f")


@dataclass
class SequenceField:
    column: int
    ascending: bool = True


@dataclass
class SequenceSpec:
    """Defines the sort order of a record set and when two keys are equal."""

    fields: list[SequenceField] = field(default_factory=list)

    def add_field(self, column: int, ascending: str | bool | None = True) -> None:
        self.fields.append(SequenceField(column, is_ascending(ascending)))

    @classmethod
    def from_names(cls, rec_def: RecordDefinition, keys: list[str]) -> SequenceSpec:
        """Build a spec from "Name" or "Name:desc" strings.

        Raises:
            ValueError: If a name is not a column of rec_def.
        """
        spec = cls()
        for key in keys:
            name, _, direction = key.partition(":")
            column = rec_def.get_column_number(name)
            if column == NOT_FOUND:
                raise ValueError(f"Unknown sort field: {name!r}")
            spec.add_field(column, direction or True)
        return spec

    def compare(self, a: Record, b: Record) -> int:
        """Negative, zero or positive as a sorts before, with, or after b."""
        for seq_field in self.fields:
            value_a = a.get_field(seq_field.column)
            value_b = b.get_field(seq_field.column)
            if value_a is None or value_b is None:
                continue
            result = value_a.compare_to(value_b)
            if result:
                return result if seq_field.ascending else -result
        return 0

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[SequenceField]:
        return iter(self.fields)
