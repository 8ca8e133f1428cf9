# tests/integration/records/test_int_tabdelim_pipeline.py — v1
"""End-to-end record processing over tab-delimited files.

Covers: sources/tabdelim.py, records/dictionary_io.py, records/record_set.py,
records/lookup.py and the CLI merge command.
"""

from __future__ import annotations

import pytest

from recordkit.core.models import CombineOutcome, Precedence
from recordkit.main import main
from recordkit.records.dictionary import Dictionary
from recordkit.records.field_definition import FieldDefinition
from recordkit.records.record_set import RecordSet
from recordkit.records.rules import AllCapsRule
from recordkit.records.sequence import SequenceSpec
from recordkit.sources.tabdelim import TabDelimSink, TabDelimSource


@pytest.fixture
def loaded_dictionary(dictionary_file) -> Dictionary:
    dictionary = Dictionary()
    dictionary.load(TabDelimSource(dictionary_file))
    return dictionary


@pytest.fixture
def people_file(write_tab):
    return write_tab("people.tab", [
        ["Name", "Phone", "Country", "Notes"],
        ["Bob", "555-0002", "japan", ""],
        ["Alice", "", "france", "likes tea"],
    ])


@pytest.fixture
def contacts_file(write_tab):
    return write_tab("contacts.tab", [
        ["Telephone", "Name", "Notes"],
        ["555-0001", "Alice", "prefers email"],
    ])


class TestDictionaryFile:
    def test_load(self, loaded_dictionary, tmp_path):
        assert len(loaded_dictionary) == 5
        assert loaded_dictionary.data_parent == str(tmp_path)
        assert isinstance(loaded_dictionary.get_def("country").rule, AllCapsRule)
        assert loaded_dictionary.get_def("Notes").combine_by_appending is True
        assert loaded_dictionary.get_def("Telephone") is loaded_dictionary.get_def("Phone")

    def test_lookup_definition_completed(self, loaded_dictionary, tmp_path):
        region = loaded_dictionary.get_def("Region")
        assert region.calculated is True
        assert region.lookup_table.path == tmp_path / "regions.tab"

    def test_store_then_load(self, tmp_path):
        original = Dictionary()
        country = FieldDefinition("Country")
        country.rule = AllCapsRule()
        original.put_def(country)
        original.put_alias("nation", "Country")
        path = tmp_path / "stored" / "dictionary.tab"

        original.store(TabDelimSink(path))
        reloaded = Dictionary()
        reloaded.load(TabDelimSource(path))

        assert [d.proper_name for d in reloaded.definitions] == ["Country"]
        assert reloaded.get_def("Nation").rule == AllCapsRule()


class TestMergeAndCombine:
    def test_alias_columns_merge(self, loaded_dictionary, people_file, contacts_file, settings):
        record_set = RecordSet(loaded_dictionary, settings=settings)
        record_set.load(TabDelimSource(people_file))
        assert record_set.merge(TabDelimSource(contacts_file)) == 1

        assert record_set.rec_def.names == ["Name", "Phone", "Country", "Notes"]
        merged = record_set.get_record(2)
        assert merged.get_field_data("Phone") == "555-0001"
        assert merged.get_field_data("Country") == ""

    def test_rule_applied_on_read(self, loaded_dictionary, people_file, settings):
        record_set = RecordSet(loaded_dictionary, settings=settings)
        record_set.load(TabDelimSource(people_file))
        assert [r.get_field_data("Country") for r in record_set] == ["JAPAN", "FRANCE"]

    def test_combine_fills_and_appends(
        self, loaded_dictionary, people_file, contacts_file, settings, tmp_path,
    ):
        record_set = RecordSet(loaded_dictionary, settings=settings)
        record_set.load(TabDelimSource(people_file))
        record_set.merge(TabDelimSource(contacts_file))
        record_set.set_sequence(SequenceSpec.from_names(record_set.rec_def, ["Name"]))

        assert record_set.combine(Precedence.LATER_WINS, CombineOutcome.NO_DATA_LOSS) == 0
        assert record_set.combine(Precedence.LATER_WINS, CombineOutcome.APPEND) == 1

        out = tmp_path / "combined.tab"
        assert record_set.write_to(TabDelimSink(out)) == 2
        reread = RecordSet(Dictionary(), settings=settings)
        reread.load(TabDelimSource(out))
        assert [r.as_dict() for r in reread] == [
            {"Name": "Alice", "Phone": "555-0001", "Country": "FRANCE",
             "Notes": "likes tea prefers email"},
            {"Name": "Bob", "Phone": "555-0002", "Country": "JAPAN", "Notes": ""},
        ]


class TestLookupField:
    def test_merge_calculates_lookup(self, loaded_dictionary, regions_file, write_tab, settings):
        places = write_tab("places.tab", [
            ["Name", "Country"],
            ["Alice", "france"],
            ["Bob", "Japan"],
            ["Carol", "peru"],
        ])
        record_set = RecordSet(loaded_dictionary, settings=settings)
        record_set.add_column("Region")
        record_set.merge(TabDelimSource(places))
        assert [r.get_field_data("Region") for r in record_set] == ["Europe", "Asia", ""]

    def test_missing_lookup_table(self, loaded_dictionary, write_tab, settings, caplog):
        places = write_tab("places.tab", [["Name", "Country"], ["Alice", "france"]])
        record_set = RecordSet(loaded_dictionary, settings=settings)
        record_set.add_column("Region")
        record_set.merge(TabDelimSource(places))
        assert record_set.get_record(0).get_field_data("Region") == ""
        assert "Could not load lookup table" in caplog.text


class TestCliPipeline:
    def test_merge_with_dictionary(
        self, dictionary_file, people_file, contacts_file, tmp_path, monkeypatch,
    ):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RECORDKIT_MEMORY_CHECK_ENABLED", "false")
        out = tmp_path / "out" / "merged.tab"
        argv = ["merge", str(people_file), str(contacts_file),
                "-d", str(dictionary_file), "--by", "Name", "-o", str(out)]
        assert main(argv) == 0

        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Name\tPhone\tCountry\tNotes"
        assert lines[1:] == [
            "Alice\t\tFRANCE\tlikes tea",
            "Alice\t555-0001\t\tprefers email",
            "Bob\t555-0002\tJAPAN\t",
        ]
