# src/sources/tabdelim.py — v1
"""Tab-delimited files: a header row of field names, then one record per line.

Fields containing tabs, quotes or line breaks are quoted using the csv
module's excel-tab dialect.
"""

from __future__ import annotations

import csv
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import IO, TextIO

from recordkit.records.record import Record
from recordkit.records.record_definition import RecordDefinition
from recordkit.sources.base import OpenTarget, RecordSink, RecordSource, definition_for, map_columns

logger = logging.getLogger(__name__)

DIALECT = "excel-tab"


class TabDelimSource(RecordSource):
    """Reads records from a tab-delimited text file.

    Raises OSError from open_for_input() if the file cannot be opened.
    """

    def __init__(self, path: Path | str, encoding: str = "utf-8", file_id: str = "") -> None:
        self.path = Path(path).expanduser()
        super().__init__(file_id or self.path.name)
        self.encoding = encoding
        self.data_parent = str(self.path.parent)
        self.names: list[str] = []
        self._handle: IO[str] | None = None
        self._reader: Iterator[list[str]] | None = None
        self._pending: list[str] | None = None
        self._rec_def: RecordDefinition | None = None
        self._columns: list[int] = []

    def open_for_input(self, target: OpenTarget = None) -> None:
        self.close()
        self._handle = self.path.open("r", encoding=self.encoding, newline="")
        self._reader = csv.reader(self._handle, dialect=DIALECT)
        self.names = [name.strip() for name in next(self._reader, [])]
        self._rec_def = definition_for(target)
        self._columns = map_columns(self._rec_def, self.names)
        self._record_number = 0
        self._advance()
        logger.debug("Opened %s with %d columns", self.path, len(self.names))

    def _advance(self) -> None:
        self._pending = None
        if self._reader is None:
            return
        for row in self._reader:
            if any(cell.strip() for cell in row):
                self._pending = row
                return

    @property
    def rec_def(self) -> RecordDefinition:
        if self._rec_def is None:
            raise RuntimeError(f"{self.path} has not been opened for input")
        return self._rec_def

    def is_at_end(self) -> bool:
        return self._pending is None

    def next_record_in(self) -> Record | None:
        row = self._pending
        if row is None:
            return None
        self._advance()
        record = Record(self.rec_def)
        record.backfill()
        for column, data in zip(self._columns, row):
            record.set_field_data(column, data)
            self.rec_def.another_field(data, column)
        return self._delivered(record)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._reader = None


class TabDelimSink(RecordSink):
    """Writes records to a tab-delimited file, or to a stream such as stdout."""

    def __init__(
        self,
        path: Path | str | None = None,
        encoding: str = "utf-8",
        stream: TextIO | None = None,
    ) -> None:
        self.path = Path(path).expanduser() if path is not None else None
        self.encoding = encoding
        self._stream = stream
        self._handle: IO[str] | None = None
        self._writer = None
        self._rec_def: RecordDefinition | None = None
        self._count = 0

    def open_for_output(self, rec_def: RecordDefinition | None = None) -> None:
        if rec_def is None:
            raise ValueError("TabDelimSink needs a record definition for its header")
        self.close()
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("w", encoding=self.encoding, newline="")
            out: IO[str] = self._handle
        else:
            out = self._stream or sys.stdout
        self._writer = csv.writer(out, dialect=DIALECT, lineterminator="\n")
        self._rec_def = rec_def
        self._count = 0
        self._writer.writerow(rec_def.names)

    def next_record_out(self, record: Record) -> None:
        if self._writer is None or self._rec_def is None:
            raise RuntimeError("TabDelimSink has not been opened for output")
        if record.rec_def is self._rec_def:
            row = [record.get_field_data(column) for column in range(self._rec_def.column_count)]
        else:
            row = [record.get_field_data(name) for name in self._rec_def.names]
        self._writer.writerow(row)
        self._count += 1

    @property
    def record_number(self) -> int:
        return self._count

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._writer = None
