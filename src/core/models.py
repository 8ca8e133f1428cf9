# src/core/models.py — v1
"""Shared enums and Pydantic models used across modules.

Behavioural classes (Dictionary, Record, RecordSet...) live in the records
package; this module only holds plain data that crosses module boundaries.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field, field_validator

NOT_FOUND = -1

PARM_COUNT = 5


# === FIELD TYPES ===


class FieldType(IntEnum):
    """Semantic type of a field, inferred from its common name."""

    DEFAULT = 0
    STRING = 1
    TITLE = 2
    LONG_TEXT = 3
    TAGS = 4
    LINK = 5
    LABEL = 6
    AUTHOR = 7
    DATE = 8
    RATING = 9
    STATUS = 10
    SEQUENCE = 11
    INDEX = 12
    RECURRENCE = 13
    CODE = 14
    DATE_ADDED = 15

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


# === COMBINE ===


class Precedence(IntEnum):
    """Which record wins when two non-empty field values disagree."""

    EARLIER_WINS = -1
    NO_OVERRIDE = 0
    LATER_WINS = 1


class CombineOutcome(IntEnum):
    """Severity of combining two field values, ordered from best to worst."""

    NO_DATA_LOSS = 0
    OVERRIDE = 1
    APPEND = 2
    MISMATCH = 3


class CombineReport(BaseModel):
    """Summary of folding equal-key records within a record set."""

    source_id: str
    records_before: int
    records_after: int
    combined: int
    precedence: Precedence
    max_allowed: CombineOutcome
    min_no_loss: int = 0


# === DICTIONARY PERSISTENCE ===


class DictionaryEntry(BaseModel):
    """One row of a persisted dictionary: a definition or an alias."""

    proper_name: str
    common_name: str = ""
    alias_for: str = ""
    data_format_rule: str = ""
    combine_by_appending: bool = False
    function_name: str = ""
    parms: list[str] = Field(default_factory=lambda: [""] * PARM_COUNT)

    @field_validator("parms")
    @classmethod
    def pad_parms(cls, v: list[str]) -> list[str]:
        """Always carry exactly five parameters."""
        if len(v) > PARM_COUNT:
            raise ValueError(f"at most {PARM_COUNT} function parameters allowed")
        return list(v) + [""] * (PARM_COUNT - len(v))

    @property
    def is_alias(self) -> bool:
        return bool(self.alias_for)
