# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

Integration tests read and write real tab-delimited files under tmp_path;
no external services are involved.
"""

from __future__ import annotations

from pathlib import Path

import pytest

DICTIONARY_ROWS = [
    ["Proper Name", "Alias For", "Data Format Rule", "Combine by Appending?",
     "Function Name", "Parm1", "Parm2", "Parm3", "Parm4", "Parm5"],
    ["Name", "", "", "", "", "", "", "", "", ""],
    ["Phone", "", "", "", "", "", "", "", "", ""],
    ["Country", "", "AllCapsRule", "", "", "", "", "", "", ""],
    ["Notes", "", "", "true", "", "", "", "", "", ""],
    ["Region", "", "", "", "lookup", "regions.tab", "Country", "", "Country", "Region"],
    ["telephone", "Phone", "", "", "", "", "", "", "", ""],
]


def pytest_collection_modifyitems(items):
    for item in items:
        if "tests/integration" in Path(str(item.fspath)).as_posix():
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def dictionary_file(write_tab) -> Path:
    """Dictionary with a formatting rule, an appending field, a lookup and an alias."""
    return write_tab("dictionary.tab", DICTIONARY_ROWS)


@pytest.fixture
def regions_file(write_tab) -> Path:
    return write_tab("regions.tab", [
        ["Country", "Region"],
        ["France", "Europe"],
        ["Japan", "Asia"],
    ])
