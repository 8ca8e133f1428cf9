# src/records/column.py — v1
"""Per-column bookkeeping: dictionary index, merge scratch index, statistics."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_AVERAGE_LENGTH = 10
DEFAULT_MAX_LENGTH = 20


@dataclass
class Column:
    """One column of a RecordDefinition.

    merged_column is scratch state written by RecordDefinition.merge: the
    position of the matching column in the incoming definition, or None.
    """

    def_index: int
    merged_column: int | None = None
    max_length: int = 0
    total_length: int = 0
    field_count: int = 0

    def another_field(self, data: str) -> None:
        length = len(data)
        if length > self.max_length:
            self.max_length = length
        self.total_length += length
        self.field_count += 1

    @property
    def average_length(self) -> int:
        if self.field_count == 0:
            return DEFAULT_AVERAGE_LENGTH
        return self.total_length // self.field_count

    @property
    def maximum_length(self) -> int:
        if self.field_count == 0:
            return DEFAULT_MAX_LENGTH
        return self.max_length

    def reset_merge(self) -> None:
        self.merged_column = None
