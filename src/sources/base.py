# src/sources/base.py — v1
"""Abstract record source and sink interfaces."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING

from recordkit.core.models import NOT_FOUND
from recordkit.records.dictionary import Dictionary
from recordkit.records.record_definition import RecordDefinition

if TYPE_CHECKING:
    from recordkit.records.record import Record

logger = logging.getLogger(__name__)

OpenTarget = Dictionary | RecordDefinition | None


def definition_for(target: OpenTarget) -> RecordDefinition:
    """RecordDefinition a source should deliver records on."""
    if isinstance(target, RecordDefinition):
        return target
    if isinstance(target, Dictionary):
        return RecordDefinition(target)
    return RecordDefinition(Dictionary())


def map_columns(rec_def: RecordDefinition, names: list[str]) -> list[int]:
    """Column of rec_def for each incoming name, adding columns as needed."""
    columns = []
    for name in names:
        column = rec_def.get_column_number(name)
        if column == NOT_FOUND:
            column = rec_def.add_column(name)
        columns.append(column)
    return columns


class RecordSource(ABC):
    """Pull-based stream of records."""

    def __init__(self, file_id: str = "") -> None:
        self.file_id = file_id
        self.data_parent = ""
        self.data_logging = False
        self.max_depth = 1
        self._record_number = 0

    @abstractmethod
    def open_for_input(self, target: OpenTarget = None) -> None:
        """Establish the RecordDefinition records will be delivered on."""

    @abstractmethod
    def next_record_in(self) -> Record | None:
        """Next record, or None at the end."""

    @abstractmethod
    def is_at_end(self) -> bool:
        """True when no more records will be delivered."""

    @property
    @abstractmethod
    def rec_def(self) -> RecordDefinition:
        """Definition of the records this source delivers."""

    @property
    def record_number(self) -> int:
        """Count of records delivered so far."""
        return self._record_number

    def close(self) -> None:
        """Release any resources held by the source."""

    def _delivered(self, record: Record) -> Record:
        self._record_number += 1
        if self.data_logging:
            logger.debug("%s record %d: %r", self.file_id, self._record_number, record.as_dict())
        return record

    def __iter__(self) -> Iterator[Record]:
        while True:
            record = self.next_record_in()
            if record is None:
                return
            yield record

    def __enter__(self) -> RecordSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class RecordSink(ABC):
    """Push-based consumer of records."""

    @abstractmethod
    def open_for_output(self, rec_def: RecordDefinition | None = None) -> None:
        """Prepare to receive records built on rec_def."""

    @abstractmethod
    def next_record_out(self, record: Record) -> None:
        """Accept one record."""

    @property
    @abstractmethod
    def record_number(self) -> int:
        """Count of records received so far."""

    def close(self) -> None:
        """Flush and release any resources held by the sink."""

    def __enter__(self) -> RecordSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
