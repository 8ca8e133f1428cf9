# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides dictionaries, record definitions, small record sets and helpers
that write tab-delimited files under tmp_path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from recordkit.config.settings import Settings
from recordkit.logging.logger import ROOT_LOGGER
from recordkit.records.dictionary import Dictionary
from recordkit.records.record import Record
from recordkit.records.record_definition import RecordDefinition
from recordkit.records.record_set import RecordSet
from recordkit.sources.memory import ListSource


# === FIXTURES: Logging ===


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by setup_logging() so they never outlive a test."""
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


# === FIXTURES: Settings ===


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any .env file, memory check off."""
    return Settings(_env_file=None, memory_check_enabled=False)


# === FIXTURES: Schema ===


@pytest.fixture
def dictionary() -> Dictionary:
    """Dictionary with one alias: addr -> address."""
    d = Dictionary()
    d.put_alias("addr", "address")
    return d


@pytest.fixture
def rec_def(dictionary: Dictionary) -> RecordDefinition:
    """Name, Phone, Status columns."""
    rd = RecordDefinition(dictionary)
    for name in ("Name", "Phone", "Status"):
        rd.add_column(name)
    return rd


# === FIXTURES: Records ===


@pytest.fixture
def make_record(rec_def: RecordDefinition) -> Callable[..., Record]:
    """Build a record on rec_def from keyword field values."""

    def _make(**fields: str) -> Record:
        record = Record(rec_def)
        for name, data in fields.items():
            record.store_field(name, data)
        return record

    return _make


@pytest.fixture
def people_rows() -> list[dict[str, str]]:
    return [
        {"Name": "Charlie", "Phone": "555-0003", "Status": "Open"},
        {"Name": "Alice", "Phone": "555-0001", "Status": "Closed"},
        {"Name": "Bob", "Phone": "555-0002", "Status": "Open"},
        {"Name": "Dana", "Phone": "", "Status": "Pending"},
        {"Name": "Eve", "Phone": "555-0005", "Status": "Closed"},
    ]


@pytest.fixture
def people_set(settings: Settings, people_rows: list[dict[str, str]]) -> RecordSet:
    """Five unsorted records loaded from memory."""
    record_set = RecordSet(Dictionary(), settings=settings)
    record_set.load(ListSource.from_dicts(people_rows, file_id="people"))
    return record_set


# === FIXTURES: Files ===


@pytest.fixture
def write_tab(tmp_path: Path) -> Callable[[str, list[list[str]]], Path]:
    """Write a tab-delimited file (first row is the header) and return its path."""

    def _write(name: str, rows: list[list[str]]) -> Path:
        path = tmp_path / name
        path.write_text("".join("\t".join(row) + "\n" for row in rows), encoding="utf-8")
        return path

    return _write
