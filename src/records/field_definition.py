# src/records/field_definition.py — v1
"""Field definitions: proper name, canonical name, semantic type, rule.

A definition may also describe a calculated field. The only supported
function is "lookup", which joins against a tab-delimited lookup table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from recordkit.core.common_name import CommonName
from recordkit.core.models import PARM_COUNT, FieldType
from recordkit.records.lookup import LookupTable
from recordkit.records.rules import DataFormatRule
from recordkit.records.values import FieldValue, new_value

if TYPE_CHECKING:
    from recordkit.records.record import Record

logger = logging.getLogger(__name__)

LOOKUP_FUNCTION = "lookup"

_EXACT_TYPES: dict[str, FieldType] = {
    "link": FieldType.LINK,
    "title": FieldType.TITLE,
    "tags": FieldType.TAGS,
    "teaser": FieldType.LONG_TEXT,
    "body": FieldType.LONG_TEXT,
    "seq": FieldType.SEQUENCE,
    "sequence": FieldType.SEQUENCE,
}


def infer_type(common_name: CommonName | str) -> FieldType:
    """Guess the semantic type of a field from its canonical name."""
    name = str(CommonName(common_name))
    if name in _EXACT_TYPES:
        return _EXACT_TYPES[name]
    if "version" in name:
        return FieldType.SEQUENCE
    if name == "index":
        return FieldType.INDEX
    if name in ("author", "by"):
        return FieldType.AUTHOR
    if name == "dateadded":
        return FieldType.DATE_ADDED
    if "date" in name:
        return FieldType.DATE
    if name == "rating":
        return FieldType.RATING
    if name == "status":
        return FieldType.STATUS
    if name in ("recurs", "every"):
        return FieldType.RECURRENCE
    if name == "code":
        return FieldType.CODE
    return FieldType.DEFAULT


def _flag(value: str) -> bool:
    return value.strip()[:1].lower() in ("y", "t")


class FieldDefinition:
    """Everything known about one logical field."""

    def __init__(
        self,
        proper_name: str | CommonName = "",
        field_type: FieldType | int | None = None,
        rule: DataFormatRule | None = None,
    ) -> None:
        self.proper_name = str(proper_name)
        self.common_name = CommonName(self.proper_name)
        self.field_type = infer_type(self.common_name)
        if field_type is not None:
            self.set_type(field_type)
        self.rule = rule or DataFormatRule()
        self.combine_by_appending = False
        self.function_name = ""
        self.function_parms: list[str] = [""] * PARM_COUNT
        self.data_parent = ""
        self.calculated = False
        self.lookup_table: LookupTable | None = None

    def set_type(self, field_type: FieldType | int) -> None:
        """Override the inferred type. Values outside the enum are ignored."""
        try:
            self.field_type = FieldType(int(field_type))
        except ValueError:
            logger.debug("Ignoring invalid field type %r for %s", field_type, self.proper_name)

    def set_function(self, name: str, parms: list[str] | None = None) -> None:
        self.function_name = (name or "").strip().lower()
        values = list(parms or [])[:PARM_COUNT]
        self.function_parms = values + [""] * (PARM_COUNT - len(values))

    def set_parm(self, index: int, value: str) -> None:
        if 0 <= index < PARM_COUNT:
            self.function_parms[index] = value

    def complete_definition(self) -> None:
        """Prepare the calculated-field machinery once all attributes are set.

        For a lookup field the parameters are: lookup file name relative to
        data_parent, key field in the lookup table, case-sensitivity flag,
        field in the current record holding the search key, and field in the
        lookup table to return.
        """
        self.calculated = False
        self.lookup_table = None
        if self.function_name != LOOKUP_FUNCTION:
            return
        file_name, key_field, case_flag = self.function_parms[:3]
        if not file_name or not key_field:
            logger.warning(
                "Lookup field %s is missing its file or key parameter", self.proper_name
            )
            return
        path = Path(file_name)
        if self.data_parent and not path.is_absolute():
            path = Path(self.data_parent) / path
        self.lookup_table = LookupTable(path, key_field, case_sensitive=_flag(case_flag))
        self.calculated = True

    @property
    def search_field(self) -> str:
        return self.function_parms[3]

    @property
    def result_field(self) -> str:
        return self.function_parms[4]

    def calculate(self, record: Record) -> str:
        """Value of this field for record.

        Non-calculated fields, and lookups whose table cannot be read,
        return the record's own data for this field.
        """
        if self.calculated and self.lookup_table is not None:
            if not self.lookup_table.load():
                self.calculated = False
            else:
                key = record.get_field_data(self.search_field)
                return self.lookup_table.lookup(key, self.result_field)
        return record.get_field_data(self.proper_name)

    def new_value(self, data: str = "") -> FieldValue:
        """Empty (or initial) value of the class matching this field's type."""
        return new_value(self.field_type, data, self.rule)

    def __repr__(self) -> str:
        return (
            f"FieldDefinition({self.proper_name!r}, type={self.field_type.label}, "
            f"rule={self.rule.name})"
        )


UNKNOWN_FIELD = FieldDefinition("** unknown **")
