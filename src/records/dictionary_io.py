# src/records/dictionary_io.py — v1
"""Reading and writing a Dictionary through the record source/sink interfaces.

Every definition becomes one row with an empty "Alias For"; every alias
becomes a row whose "Alias For" names the original field. Definitions
are always written before aliases.
"""

from __future__ import annotations

import logging

from recordkit.core.models import PARM_COUNT, DictionaryEntry
from recordkit.records.dictionary import Dictionary, FieldAlias
from recordkit.records.field_definition import FieldDefinition
from recordkit.records.record import Record
from recordkit.records.record_definition import RecordDefinition
from recordkit.records.rules import construct_rule
from recordkit.sources.base import OpenTarget, RecordSink, RecordSource

logger = logging.getLogger(__name__)

PROPER_NAME = "Proper Name"
COMMON_NAME = "Common Name"
ALIAS_FOR = "Alias For"
DATA_FORMAT_RULE = "Data Format Rule"
COMBINE_BY_APPENDING = "Combine by Appending?"
FUNCTION_NAME = "Function Name"
PARM_NAMES = [f"Parm{n}" for n in range(1, PARM_COUNT + 1)]

META_COLUMNS = [
    PROPER_NAME,
    COMMON_NAME,
    ALIAS_FOR,
    DATA_FORMAT_RULE,
    COMBINE_BY_APPENDING,
    FUNCTION_NAME,
    *PARM_NAMES,
]


def meta_definition() -> RecordDefinition:
    """Fresh RecordDefinition for dictionary rows, on its own dictionary."""
    rec_def = RecordDefinition(Dictionary())
    for name in META_COLUMNS:
        rec_def.add_column(name)
    return rec_def


def entry_for_definition(definition: FieldDefinition) -> DictionaryEntry:
    return DictionaryEntry(
        proper_name=definition.proper_name,
        common_name=str(definition.common_name),
        data_format_rule=definition.rule.name,
        combine_by_appending=definition.combine_by_appending,
        function_name=definition.function_name,
        parms=list(definition.function_parms),
    )


def entry_for_alias(alias: FieldAlias) -> DictionaryEntry:
    return DictionaryEntry(
        proper_name=str(alias.alias),
        common_name=str(alias.alias),
        alias_for=str(alias.original),
    )


def entry_from_record(record: Record) -> DictionaryEntry:
    return DictionaryEntry(
        proper_name=record.get_field_data(PROPER_NAME).strip(),
        common_name=record.get_field_data(COMMON_NAME).strip(),
        alias_for=record.get_field_data(ALIAS_FOR).strip(),
        data_format_rule=record.get_field_data(DATA_FORMAT_RULE).strip(),
        combine_by_appending=record.get_field_data(COMBINE_BY_APPENDING).strip().lower() == "true",
        function_name=record.get_field_data(FUNCTION_NAME).strip(),
        parms=[record.get_field_data(name) for name in PARM_NAMES],
    )


def record_for_entry(entry: DictionaryEntry, rec_def: RecordDefinition) -> Record:
    record = Record(rec_def)
    values = [
        entry.proper_name,
        entry.common_name,
        entry.alias_for,
        entry.data_format_rule,
        "" if entry.is_alias else str(entry.combine_by_appending).lower(),
        entry.function_name,
        *entry.parms,
    ]
    for name, data in zip(META_COLUMNS, values):
        record.store_field(name, data)
    return record


def apply_entry(dictionary: Dictionary, entry: DictionaryEntry) -> int | None:
    """Add one persisted row to dictionary. Rows without a proper name are skipped.

    Raises:
        UnsupportedRuleError: If the row names an unknown formatting rule.
    """
    if not entry.proper_name:
        return None
    if entry.is_alias:
        return dictionary.put_alias(entry.proper_name, entry.alias_for)
    definition = FieldDefinition(entry.proper_name)
    definition.rule = construct_rule(entry.data_format_rule)
    definition.combine_by_appending = entry.combine_by_appending
    definition.set_function(entry.function_name, entry.parms)
    definition.data_parent = dictionary.data_parent
    definition.complete_definition()
    return dictionary.put_def(definition)


class DictionarySource(RecordSource):
    """Delivers the rows of a Dictionary: definitions, then aliases."""

    def __init__(self, dictionary: Dictionary, file_id: str = "dictionary") -> None:
        super().__init__(file_id)
        self.dictionary = dictionary
        self.data_parent = dictionary.data_parent
        self._rec_def: RecordDefinition | None = None
        self._entries: list[DictionaryEntry] = []
        self._position = 0

    def open_for_input(self, target: OpenTarget = None) -> None:
        self._rec_def = target if isinstance(target, RecordDefinition) else meta_definition()
        self._entries = [entry_for_definition(d) for d in self.dictionary.definitions]
        self._entries.extend(entry_for_alias(a) for a in self.dictionary.aliases)
        self._position = 0
        self._record_number = 0

    @property
    def rec_def(self) -> RecordDefinition:
        if self._rec_def is None:
            raise RuntimeError("DictionarySource has not been opened for input")
        return self._rec_def

    def is_at_end(self) -> bool:
        return self._position >= len(self._entries)

    def next_record_in(self) -> Record | None:
        if self.is_at_end():
            return None
        entry = self._entries[self._position]
        self._position += 1
        return self._delivered(record_for_entry(entry, self.rec_def))


class DictionarySink(RecordSink):
    """Adds every row it receives to a Dictionary."""

    def __init__(self, dictionary: Dictionary) -> None:
        self.dictionary = dictionary
        self._count = 0

    def open_for_output(self, rec_def: RecordDefinition | None = None) -> None:
        self._count = 0

    def next_record_out(self, record: Record) -> None:
        apply_entry(self.dictionary, entry_from_record(record))
        self._count += 1

    @property
    def record_number(self) -> int:
        return self._count


def load_dictionary(source: RecordSource, dictionary: Dictionary) -> int:
    """Read dictionary rows from source into dictionary. Returns rows read."""
    source.open_for_input(meta_definition())
    if source.data_parent and not dictionary.data_parent:
        dictionary.data_parent = source.data_parent
    sink = DictionarySink(dictionary)
    sink.open_for_output(source.rec_def)
    try:
        for record in source:
            sink.next_record_out(record)
    finally:
        source.close()
    logger.info(
        "Loaded dictionary from %s: %d definitions, %d aliases",
        source.file_id, len(dictionary), len(dictionary.aliases),
    )
    return sink.record_number


def store_dictionary(dictionary: Dictionary, sink: RecordSink) -> int:
    """Write dictionary rows to sink. Returns rows written."""
    source = DictionarySource(dictionary)
    source.open_for_input()
    sink.open_for_output(source.rec_def)
    try:
        for record in source:
            sink.next_record_out(record)
    finally:
        sink.close()
    return sink.record_number
