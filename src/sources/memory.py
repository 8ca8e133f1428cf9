# src/sources/memory.py — v1
"""In-memory record source and sink."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from recordkit.records.record import Record
from recordkit.records.record_definition import RecordDefinition
from recordkit.sources.base import OpenTarget, RecordSink, RecordSource, definition_for, map_columns


class ListSource(RecordSource):
    """Delivers rows held in memory: a header of names plus lists of strings."""

    def __init__(self, names: list[str], rows: Iterable[list[str]], file_id: str = "memory") -> None:
        super().__init__(file_id)
        self.names = list(names)
        self.rows = [list(row) for row in rows]
        self._rec_def: RecordDefinition | None = None
        self._columns: list[int] = []
        self._position = 0

    @classmethod
    def from_dicts(cls, rows: Iterable[Mapping[str, str]], file_id: str = "memory") -> ListSource:
        """Header is every key seen, in first-seen order."""
        rows = list(rows)
        names: list[str] = []
        for row in rows:
            for name in row:
                if name not in names:
                    names.append(name)
        return cls(names, [[row.get(name, "") for name in names] for row in rows], file_id)

    def open_for_input(self, target: OpenTarget = None) -> None:
        self._rec_def = definition_for(target)
        self._columns = map_columns(self._rec_def, self.names)
        self._position = 0
        self._record_number = 0

    @property
    def rec_def(self) -> RecordDefinition:
        if self._rec_def is None:
            raise RuntimeError(f"{self.file_id} has not been opened for input")
        return self._rec_def

    def is_at_end(self) -> bool:
        return self._position >= len(self.rows)

    def next_record_in(self) -> Record | None:
        if self.is_at_end():
            return None
        row = self.rows[self._position]
        self._position += 1
        record = Record(self.rec_def)
        record.backfill()
        for column, data in zip(self._columns, row):
            record.set_field_data(column, data)
            self.rec_def.another_field(data, column)
        return self._delivered(record)


class ListSink(RecordSink):
    """Collects records in a list."""

    def __init__(self) -> None:
        self.rec_def: RecordDefinition | None = None
        self.records: list[Record] = []

    def open_for_output(self, rec_def: RecordDefinition | None = None) -> None:
        self.rec_def = rec_def
        self.records = []

    def next_record_out(self, record: Record) -> None:
        self.records.append(record)

    @property
    def record_number(self) -> int:
        return len(self.records)

    @property
    def rows(self) -> list[dict[str, str]]:
        return [record.as_dict() for record in self.records]
