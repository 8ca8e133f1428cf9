# src/records/record.py — v1
"""Records: positional field values keyed by RecordDefinition column.

Combining two records is done in two passes. classify_combine() works out,
without touching either record, what every column would become and whether
the combine is acceptable; combine() applies that plan only on success.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from recordkit.core.common_name import CommonName
from recordkit.core.models import NOT_FOUND, CombineOutcome, Precedence
from recordkit.records.values import FieldValue

if TYPE_CHECKING:
    from recordkit.records.field_definition import FieldDefinition
    from recordkit.records.record_definition import RecordDefinition
    from recordkit.records.sequence import SequenceSpec

logger = logging.getLogger(__name__)

_TRUE_WORDS = ("on", "y", "t", "1")

ColumnRef = int | str | CommonName


@dataclass
class CombinePlan:
    """Outcome of classifying every column of a prospective combine."""

    outcomes: list[CombineOutcome] = field(default_factory=list)
    values: list[str] = field(default_factory=list)
    worst: CombineOutcome = CombineOutcome.NO_DATA_LOSS
    no_loss_count: int = 0
    success: bool = False


def classify_field(
    definition: FieldDefinition,
    a: FieldValue,
    b: FieldValue,
    precedence: Precedence,
    max_allowed: CombineOutcome,
    a_sequence: int = 0,
    b_sequence: int = 0,
) -> tuple[CombineOutcome, str]:
    """Classify combining b into a for one column. Returns (outcome, new data)."""
    if b.is_empty() or a.matches(b):
        return CombineOutcome.NO_DATA_LOSS, a.data
    if a.is_empty():
        return CombineOutcome.NO_DATA_LOSS, b.data
    if definition.combine_by_appending and max_allowed >= CombineOutcome.APPEND:
        return CombineOutcome.APPEND, a.appended(b)
    if precedence == Precedence.LATER_WINS:
        winner = b if b_sequence > a_sequence else a
        return CombineOutcome.OVERRIDE, winner.data
    if precedence == Precedence.EARLIER_WINS:
        winner = b if b_sequence < a_sequence else a
        return CombineOutcome.OVERRIDE, winner.data
    return CombineOutcome.MISMATCH, a.data


def combine_succeeds(
    worst: CombineOutcome, max_allowed: CombineOutcome, no_loss_count: int, min_no_loss: int
) -> bool:
    if worst > max_allowed:
        return False
    if (
        worst == max_allowed
        and max_allowed in (CombineOutcome.OVERRIDE, CombineOutcome.APPEND)
        and no_loss_count < min_no_loss
    ):
        return False
    return True


class Record:
    """One row of data built on a RecordDefinition."""

    def __init__(
        self,
        rec_def: RecordDefinition,
        values: Iterable[str] | None = None,
        sequence: int = 0,
    ) -> None:
        self._rec_def = rec_def
        self._fields: list[FieldValue] = []
        self.sequence = sequence
        for data in values or ():
            self.append_field(data)

    @property
    def rec_def(self) -> RecordDefinition:
        return self._rec_def

    @property
    def field_count(self) -> int:
        return len(self._fields)

    def backfill(self) -> None:
        """Pad with empty values up to the definition's column count."""
        while len(self._fields) < self._rec_def.column_count:
            self._fields.append(self._rec_def.get_def(len(self._fields)).new_value())

    def _column(self, ref: ColumnRef) -> int:
        if isinstance(ref, int):
            return ref
        return self._rec_def.get_column_number(ref)

    # --- Field access ---

    def get_field(self, ref: ColumnRef) -> FieldValue | None:
        column = self._column(ref)
        if 0 <= column < len(self._fields):
            return self._fields[column]
        return None

    def get_field_data(self, ref: ColumnRef) -> str:
        """Data of a field, or "" if the record has no such field."""
        found = self.get_field(ref)
        return "" if found is None else found.data

    def set_field_data(self, column: int, data: str) -> None:
        """Replace the data in an existing column.

        Raises:
            IndexError: If column is not a column of the definition.
        """
        if not 0 <= column < self._rec_def.column_count:
            raise IndexError(f"Column {column} out of range (0..{self._rec_def.column_count - 1})")
        self.backfill()
        self._fields[column].set_data(data)

    def append_field(self, data: str) -> int:
        """Store data in the next position, counting it toward column statistics."""
        column = len(self._fields)
        value = self._rec_def.get_def(column).new_value(data)
        self._fields.append(value)
        self._rec_def.another_field(value.data, column)
        return column

    def store_field(self, name: str | CommonName, data: str) -> int:
        """Set a field by name, adding the column to the definition if needed."""
        column = self._rec_def.get_column_number(name)
        if column == NOT_FOUND:
            column = self._rec_def.add_column(name)
        self.backfill()
        self._fields[column].set_data(data)
        self._rec_def.another_field(self._fields[column].data, column)
        return column

    def contains_field(self, name: ColumnRef) -> bool:
        """True if the field exists and holds data."""
        found = self.get_field(name)
        return found is not None and not found.is_empty()

    def field_as_int(self, name: ColumnRef, default: int = 0) -> int:
        try:
            return int(self.get_field_data(name).strip())
        except ValueError:
            return default

    def field_as_bool(self, name: ColumnRef) -> bool:
        return self.get_field_data(name).strip().lower().startswith(_TRUE_WORDS)

    def calculate(self) -> None:
        """Recompute every calculated field."""
        self.backfill()
        for column in range(self._rec_def.column_count):
            definition = self._rec_def.get_def(column)
            if definition.calculated:
                self._fields[column].set_data(definition.calculate(self))

    def as_dict(self) -> dict[str, str]:
        return {
            self._rec_def.get_name(column): value.data
            for column, value in enumerate(self._fields)
        }

    def copy(self) -> Record:
        clone = Record(self._rec_def, sequence=self.sequence)
        clone._fields = [value.copy() for value in self._fields]
        return clone

    # --- Ordering ---

    def compare_to(self, other: Record, spec: SequenceSpec) -> int:
        return spec.compare(self, other)

    # --- Combine ---

    def classify_combine(
        self,
        other: Record,
        precedence: Precedence,
        max_allowed: CombineOutcome,
        min_no_loss: int = 0,
    ) -> CombinePlan:
        """Work out the result of combining other into this record, without mutating."""
        plan = CombinePlan()
        for column in range(self._rec_def.column_count):
            definition = self._rec_def.get_def(column)
            mine = self.get_field(column) or definition.new_value()
            if (
                other.rec_def is not self._rec_def
                and other.rec_def.get_def(column).common_name != definition.common_name
            ):
                outcome, data = CombineOutcome.MISMATCH, mine.data
            else:
                theirs = other.get_field(column) or definition.new_value()
                outcome, data = classify_field(
                    definition, mine, theirs, precedence, max_allowed,
                    self.sequence, other.sequence,
                )
            plan.outcomes.append(outcome)
            plan.values.append(data)
            if outcome > plan.worst:
                plan.worst = outcome
            if outcome == CombineOutcome.NO_DATA_LOSS:
                plan.no_loss_count += 1
        plan.success = combine_succeeds(plan.worst, max_allowed, plan.no_loss_count, min_no_loss)
        return plan

    def combine(
        self,
        other: Record,
        precedence: Precedence,
        max_allowed: CombineOutcome,
        min_no_loss: int = 0,
    ) -> bool:
        """Fold other into this record. On failure this record is left untouched."""
        plan = self.classify_combine(other, precedence, max_allowed, min_no_loss)
        if not plan.success:
            logger.debug(
                "Combine of records %d and %d refused: worst %s, %d no-loss columns",
                self.sequence, other.sequence, plan.worst.name, plan.no_loss_count,
            )
            return False
        self.backfill()
        for column, data in enumerate(plan.values):
            if self._fields[column].data != data:
                self._fields[column].set_data(data)
        return True

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FieldValue]:
        return iter(self._fields)

    def __repr__(self) -> str:
        return f"Record(seq={self.sequence}, {self.as_dict()!r})"
