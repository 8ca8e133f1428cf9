# tests/unit/test_main.py — v1
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from recordkit.config.settings import PRECEDENCE_NAMES
from recordkit.main import _build_parser, main


@pytest.fixture
def people_file(write_tab):
    return write_tab("people.tab", [
        ["Name", "Phone", "Status"],
        ["Charlie", "555-0003", "Open"],
        ["Alice", "", "Closed"],
        ["Bob", "555-0002", "Open"],
        ["Alice", "555-0001", "Closed"],
    ])


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Keep a developer .env or RECORDKIT_ variables out of CLI runs."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RECORDKIT_LOG_FILE", raising=False)
    monkeypatch.setenv("RECORDKIT_MEMORY_CHECK_ENABLED", "false")


def _rows(text: str) -> list[list[str]]:
    return [line.split("\t") for line in text.splitlines()]


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_sort_subcommand(self):
        args = _build_parser().parse_args(
            ["sort", "in.tab", "--by", "Name", "--by", "Phone:desc", "-o", "out.tab"]
        )
        assert args.command == "sort"
        assert args.file == Path("in.tab")
        assert args.by == ["Name", "Phone:desc"]
        assert args.output == Path("out.tab")
        assert args.dictionary is None

    def test_merge_subcommand(self):
        args = _build_parser().parse_args(["merge", "a.tab", "b.tab", "-d", "dict.tab"])
        assert args.files == [Path("a.tab"), Path("b.tab")]
        assert args.dictionary == Path("dict.tab")
        assert args.by is None

    def test_combine_defaults(self):
        args = _build_parser().parse_args(["combine", "a.tab", "--by", "Name"])
        assert args.precedence is None
        assert args.max_allowed is None
        assert args.min_no_loss is None

    def test_combine_rejects_unknown_precedence(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["combine", "a.tab", "--by", "Name", "--precedence", "first"])

    def test_combine_precedence_choices(self):
        parser = _build_parser()
        for name in PRECEDENCE_NAMES:
            args = parser.parse_args(["combine", "a.tab", "--by", "Name", "--precedence", name])
            assert args.precedence == name

    def test_filter_conditions(self):
        args = _build_parser().parse_args(
            ["filter", "a.tab", "--where", "Status", "eq", "Open", "--where", "Name", "st", "B", "--any"]
        )
        assert args.where == [["Status", "eq", "Open"], ["Name", "st", "B"]]
        assert args.any is True

    def test_sort_requires_key(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["sort", "a.tab"])


# ---------------------------------------------------------------------------
# Command tests
# ---------------------------------------------------------------------------

class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "recordkit" in capsys.readouterr().out

    def test_sort(self, people_file, capsys):
        assert main(["sort", str(people_file), "--by", "Name"]) == 0
        rows = _rows(capsys.readouterr().out)
        assert rows[0] == ["Name", "Phone", "Status"]
        assert [row[0] for row in rows[1:]] == ["Alice", "Alice", "Bob", "Charlie"]

    def test_sort_descending(self, people_file, capsys):
        assert main(["sort", str(people_file), "--by", "Name:desc"]) == 0
        rows = _rows(capsys.readouterr().out)
        assert [row[0] for row in rows[1:]] == ["Charlie", "Bob", "Alice", "Alice"]

    def test_sort_to_file(self, people_file, tmp_path):
        out = tmp_path / "out" / "sorted.tab"
        assert main(["sort", str(people_file), "--by", "Status", "-o", str(out)]) == 0
        rows = _rows(out.read_text(encoding="utf-8"))
        assert [row[2] for row in rows[1:]] == ["Closed", "Closed", "Open", "Open"]

    def test_combine(self, people_file, capsys):
        assert main(["combine", str(people_file), "--by", "Name"]) == 0
        captured = capsys.readouterr()
        rows = _rows(captured.out)
        assert rows[1:] == [
            ["Alice", "555-0001", "Closed"],
            ["Bob", "555-0002", "Open"],
            ["Charlie", "555-0003", "Open"],
        ]
        assert "Combined 1 of 4 records (3 remain)" in captured.err

    def test_combine_refuses_override(self, write_tab, capsys):
        path = write_tab("clash.tab", [
            ["Name", "Phone"],
            ["Alice", "555-0001"],
            ["Alice", "555-9999"],
        ])
        assert main(["combine", str(path), "--by", "Name", "--max-allowed", "0"]) == 0
        assert len(_rows(capsys.readouterr().out)) == 3

    def test_filter(self, people_file, capsys):
        assert main(["filter", str(people_file), "--where", "Status", "eq", "Open"]) == 0
        rows = _rows(capsys.readouterr().out)
        assert [row[0] for row in rows[1:]] == ["Charlie", "Bob"]

    def test_filter_any(self, people_file, capsys):
        argv = ["filter", str(people_file), "--where", "Name", "eq", "Bob",
                "--where", "Phone", "eq", "555-0003", "--any"]
        assert main(argv) == 0
        rows = _rows(capsys.readouterr().out)
        assert [row[0] for row in rows[1:]] == ["Charlie", "Bob"]

    def test_merge(self, people_file, write_tab, capsys):
        extra = write_tab("extra.tab", [
            ["Email", "Name"],
            ["dana@example.com", "Dana"],
        ])
        assert main(["merge", str(people_file), str(extra), "--by", "Name"]) == 0
        rows = _rows(capsys.readouterr().out)
        assert rows[0] == ["Name", "Phone", "Status", "Email"]
        assert rows[-1] == ["Dana", "", "", "dana@example.com"]

    def test_missing_file_returns_error(self, tmp_path):
        assert main(["sort", str(tmp_path / "absent.tab"), "--by", "Name"]) == 1

    def test_unknown_sort_field_returns_error(self, people_file):
        assert main(["sort", str(people_file), "--by", "Colour"]) == 1

    def test_invalid_configuration(self, people_file, monkeypatch, capsys):
        monkeypatch.setenv("RECORDKIT_COMBINE_PRECEDENCE", "none")
        assert main(["sort", str(people_file), "--by", "Name"]) == 2
        assert "Invalid configuration" in capsys.readouterr().err
