# tests/unit/core/test_unit_models.py — v1
"""Tests for core/models.py — enums and Pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from recordkit.core.models import (
    CombineOutcome,
    CombineReport,
    DictionaryEntry,
    FieldType,
    Precedence,
)


class TestEnums:
    def test_outcomes_ordered_by_severity(self):
        assert (
            CombineOutcome.NO_DATA_LOSS
            < CombineOutcome.OVERRIDE
            < CombineOutcome.APPEND
            < CombineOutcome.MISMATCH
        )

    def test_precedence_values(self):
        assert Precedence.LATER_WINS == 1
        assert Precedence.EARLIER_WINS == -1
        assert Precedence.NO_OVERRIDE == 0

    def test_field_type_values(self):
        assert FieldType.DEFAULT == 0
        assert FieldType.DATE_ADDED == 15

    def test_field_type_label(self):
        assert FieldType.LONG_TEXT.label == "long-text"


class TestDictionaryEntry:
    def test_parms_padded(self):
        entry = DictionaryEntry(proper_name="Country", parms=["a.tab"])
        assert entry.parms == ["a.tab", "", "", "", ""]

    def test_default_parms(self):
        assert DictionaryEntry(proper_name="x").parms == [""] * 5

    def test_too_many_parms(self):
        with pytest.raises(ValidationError):
            DictionaryEntry(proper_name="x", parms=["1", "2", "3", "4", "5", "6"])

    def test_is_alias(self):
        assert DictionaryEntry(proper_name="addr", alias_for="address").is_alias
        assert not DictionaryEntry(proper_name="Address").is_alias


class TestCombineReport:
    def test_serializes(self):
        report = CombineReport(
            source_id="people.tab",
            records_before=5,
            records_after=3,
            combined=2,
            precedence=Precedence.LATER_WINS,
            max_allowed=CombineOutcome.OVERRIDE,
        )
        assert '"combined":2' in report.model_dump_json()
