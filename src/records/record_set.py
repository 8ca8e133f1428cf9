# src/records/record_set.py — v1
"""RecordSet: an in-memory, optionally sorted and filtered, collection of records.

A RecordSet is both a RecordSource (its records can be read back through a
single shared cursor, skipping records rejected by the input filter) and a
RecordSink (records written to it are added in sequence order). It is not
safe to iterate the same RecordSet from two places at once.
"""

from __future__ import annotations

import gc
import itertools
import logging
import os
from collections.abc import Callable, Iterator

from recordkit.config.settings import Settings, load_settings
from recordkit.core.models import NOT_FOUND, CombineOutcome, Precedence
from recordkit.logging.context import operation_context
from recordkit.records.dictionary import Dictionary
from recordkit.records.filters import DataFilter
from recordkit.records.record import Record
from recordkit.records.record_definition import RecordDefinition
from recordkit.records.sequence import SequenceSpec
from recordkit.records.values import TagsValue
from recordkit.sources.base import OpenTarget, RecordSink, RecordSource

logger = logging.getLogger(__name__)

TAG_FIELD = "Tag"
TAGS_FIELDS = ("Tags", "Category")

MemoryProbe = Callable[[], "int | None"]

_set_numbers = itertools.count(1)


def available_memory() -> int | None:
    """Bytes of physical memory currently available, or None if unknown."""
    try:
        return os.sysconf("SC_AVPHYS_PAGES") * os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None


class RecordSet(RecordSource, RecordSink):
    """Records sharing one RecordDefinition."""

    def __init__(
        self,
        rec_def: RecordDefinition | Dictionary | None = None,
        settings: Settings | None = None,
        memory_probe: MemoryProbe | None = None,
    ) -> None:
        super().__init__(f"DataSet{next(_set_numbers)}")
        if isinstance(rec_def, RecordDefinition):
            self._rec_def = rec_def
        else:
            self._rec_def = RecordDefinition(rec_def if rec_def is not None else Dictionary())
        self.settings = settings or load_settings()
        if not self.dictionary.data_parent:
            self.dictionary.data_parent = self.settings.default_data_parent
        self.data_parent = self.dictionary.data_parent
        self._records: list[Record] = []
        self.sequence_spec: SequenceSpec | None = None
        self.input_filter: DataFilter | None = None
        self.records_loaded = 0
        self.low_memory_warned = False
        self._memory_probe = memory_probe or available_memory
        self._last_sequence = 0
        self._cursor = 0
        self._filled_columns = self._rec_def.column_count

    @property
    def rec_def(self) -> RecordDefinition:
        return self._rec_def

    @property
    def dictionary(self) -> Dictionary:
        return self._rec_def.dictionary

    @property
    def records(self) -> list[Record]:
        """Stored records in order, each padded to the current column count."""
        self._backfill_all()
        return self._records

    # --- Adding records ---

    def add_record(self, record: Record) -> int:
        """Insert record in sequence order (after equal keys). Returns its position."""
        if record.rec_def is not self._rec_def:
            record = self._adopt(record)
        record.backfill()
        self._backfill_all()
        self._last_sequence += 1
        record.sequence = self._last_sequence
        position = len(self._records)
        if self.sequence_spec is not None:
            position = 0
            while (
                position < len(self._records)
                and self.sequence_spec.compare(record, self._records[position]) >= 0
            ):
                position += 1
        self._records.insert(position, record)
        self._check_memory()
        return position

    def _adopt(self, record: Record) -> Record:
        """Copy a record built on another definition into this one, by field name."""
        adopted = Record(self._rec_def)
        for column in range(record.rec_def.column_count):
            data = record.get_field_data(column)
            if data:
                adopted.store_field(record.rec_def.get_name(column), data)
        return adopted

    def add_column(self, name: str) -> int:
        """Add a column to the shared definition and pad every stored record."""
        column = self._rec_def.add_column(name)
        self._backfill_all()
        return column

    def _backfill_all(self) -> None:
        """Pad stored records after the definition gained columns."""
        if self._rec_def.column_count == self._filled_columns:
            return
        for record in self._records:
            record.backfill()
        self._filled_columns = self._rec_def.column_count

    def _inherit_data_parent(self, source: RecordSource) -> None:
        if source.data_parent and not self.dictionary.data_parent:
            self.dictionary.data_parent = source.data_parent
        self.data_parent = self.dictionary.data_parent

    def _check_memory(self) -> None:
        if self.low_memory_warned or not self.settings.memory_check_enabled:
            return
        threshold = self.settings.low_memory_threshold_bytes
        available = self._memory_probe()
        if available is None or available >= threshold:
            return
        gc.collect()
        available = self._memory_probe()
        if available is not None and available < threshold:
            self.low_memory_warned = True
            logger.warning(
                "%s: available memory %d bytes is below %d after %d records",
                self.file_id, available, threshold, len(self._records),
            )

    def value_at(self, row: int, column: int) -> str:
        """Data at (row, column).

        Raises:
            IndexError: If either index is out of range.
        """
        record = self.get_record(row)
        self._backfill_all()
        if not 0 <= column < self._rec_def.column_count:
            raise IndexError(f"Column {column} out of range (0..{self._rec_def.column_count - 1})")
        return record.get_field_data(column)

    def get_record(self, index: int) -> Record:
        """Record at index. Raises IndexError when out of range."""
        if not 0 <= index < len(self._records):
            raise IndexError(f"Record {index} out of range (0..{len(self._records) - 1})")
        self._backfill_all()
        return self._records[index]

    def remove_record(self, index: int) -> Record:
        """Remove and return the record at index. Raises IndexError when out of range."""
        record = self.get_record(index)
        del self._records[index]
        return record

    # --- Ordering ---

    def set_sequence(self, spec: SequenceSpec | None) -> None:
        """Adopt spec and re-sort: repeated bubble passes until nothing moves."""
        self.sequence_spec = spec
        if spec is None:
            return
        swapped = True
        while swapped:
            swapped = False
            for i in range(len(self._records) - 1):
                if spec.compare(self._records[i], self._records[i + 1]) > 0:
                    self._records[i], self._records[i + 1] = self._records[i + 1], self._records[i]
                    swapped = True

    def set_input_filter(self, data_filter: DataFilter | None) -> None:
        self.input_filter = data_filter

    # --- Combine and merge ---

    def combine(
        self,
        precedence: Precedence,
        max_allowed: CombineOutcome,
        min_no_loss: int = 0,
    ) -> int:
        """Fold adjacent records with equal keys. Returns the number folded.

        Does nothing without a sequence spec, since the spec defines which
        keys are equal.
        """
        if self.sequence_spec is None:
            return 0
        combined = 0
        with operation_context("combine", self.file_id):
            i = 0
            while i + 1 < len(self._records):
                first, second = self._records[i], self._records[i + 1]
                if (
                    self.sequence_spec.compare(first, second) == 0
                    and first.combine(second, precedence, max_allowed, min_no_loss)
                ):
                    del self._records[i + 1]
                    combined += 1
                else:
                    i += 1
            logger.info("Combined %d records, %d remain", combined, len(self._records))
        return combined

    def merge(self, source: RecordSource, max_records: int = -1) -> int:
        """Merge source's schema into ours and add its records, projected.

        Columns of ours with no counterpart in source are left empty in the
        projected records. Calculated fields are recomputed. Returns the
        number of records added.
        """
        with operation_context("merge", source.file_id):
            source.open_for_input(self.dictionary)
            self._inherit_data_parent(source)
            self._rec_def.merge(source.rec_def)
            self._backfill_all()
            added = 0
            try:
                while max_records < 0 or added < max_records:
                    incoming = source.next_record_in()
                    if incoming is None:
                        break
                    projected = Record(self._rec_def)
                    projected.backfill()
                    for column, info in enumerate(self._rec_def):
                        if info.merged_column is not None:
                            data = incoming.get_field_data(info.merged_column)
                            projected.set_field_data(column, data)
                            self._rec_def.another_field(data, column)
                    projected.calculate()
                    self.add_record(projected)
                    added += 1
            finally:
                source.close()
            self.records_loaded += added
            logger.info("Merged %d records; %d columns", added, self._rec_def.column_count)
        return added

    def merge_same(self, source: RecordSource, max_records: int = -1) -> int:
        """Add source's records as they are, reading them on our definition."""
        with operation_context("merge", source.file_id):
            source.open_for_input(self._rec_def)
            self._inherit_data_parent(source)
            self._backfill_all()
            added = 0
            try:
                while max_records < 0 or added < max_records:
                    incoming = source.next_record_in()
                    if incoming is None:
                        break
                    self.add_record(incoming)
                    added += 1
            finally:
                source.close()
            self.records_loaded += added
            logger.debug("Loaded %d records from %s", added, source.file_id)
        return added

    def load(self, source: RecordSource) -> int:
        """Read every record from source into this set."""
        return self.merge_same(source)

    def load_and_explode(self, source: RecordSource, tags_field: str | None = None) -> int:
        """Read source, adding one copy of each record per tag.

        The copy's "Tag" field holds the single tag. Records without tags are
        added once, with an empty Tag.
        """
        with operation_context("explode", source.file_id):
            source.open_for_input(self._rec_def)
            self._inherit_data_parent(source)
            tag_column = self._rec_def.get_column_number(TAG_FIELD)
            if tag_column == NOT_FOUND:
                tag_column = self._rec_def.add_column(TAG_FIELD)
            self._backfill_all()
            names = (tags_field,) if tags_field else TAGS_FIELDS
            added = 0
            try:
                for incoming in source:
                    raw = next((incoming.get_field_data(n) for n in names if incoming.contains_field(n)), "")
                    for tag in TagsValue(raw).tags or [""]:
                        copy = incoming.copy()
                        copy.backfill()
                        copy.set_field_data(tag_column, tag)
                        self.add_record(copy)
                        added += 1
            finally:
                source.close()
            self.records_loaded += added
        return added

    # --- RecordSource ---

    def open_for_input(self, target: OpenTarget = None) -> None:
        """Prepare to read this set's own records from the start."""
        self.start_with_first_record()

    def start_with_first_record(self) -> None:
        self._cursor = 0
        self._record_number = 0
        self._skip_unselected()

    def _skip_unselected(self) -> None:
        if self.input_filter is None:
            return
        while (
            self._cursor < len(self._records)
            and not self.input_filter.select(self._records[self._cursor])
        ):
            self._cursor += 1

    def first_record(self) -> Record | None:
        self.start_with_first_record()
        return self.next_record_in()

    def next_record_in(self) -> Record | None:
        self._backfill_all()
        self._skip_unselected()
        if self._cursor >= len(self._records):
            return None
        record = self._records[self._cursor]
        self._cursor += 1
        self._skip_unselected()
        return self._delivered(record)

    def is_at_end(self) -> bool:
        self._skip_unselected()
        return self._cursor >= len(self._records)

    def has_more_records(self) -> bool:
        return not self.is_at_end()

    # --- RecordSink ---

    def open_for_output(self, rec_def: RecordDefinition | None = None) -> None:
        """Records written to this set are added via add_record()."""

    def next_record_out(self, record: Record) -> None:
        self.add_record(record)

    def write_to(self, sink: RecordSink) -> int:
        """Send every selected record to sink, in order. Returns the count sent."""
        sink.open_for_output(self._rec_def)
        sent = 0
        try:
            for record in self:
                sink.next_record_out(record)
                sent += 1
        finally:
            sink.close()
        return sent

    # --- Python protocols ---

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        """Selected records, independent of the shared cursor."""
        self._backfill_all()
        for record in self._records:
            if self.input_filter is None or self.input_filter.select(record):
                yield record
