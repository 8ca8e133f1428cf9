# src/records/lookup.py — v1
"""In-memory key -> record map loaded from a tab-delimited table."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recordkit.records.record import Record

logger = logging.getLogger(__name__)


class LookupTable:
    """Lazily loaded lookup table used by calculated "lookup" fields."""

    def __init__(self, path: Path | str, key_field: str, case_sensitive: bool = False) -> None:
        self.path = Path(path)
        self.key_field = key_field
        self.case_sensitive = case_sensitive
        self._rows: dict[str, Record] = {}
        self.loaded = False
        self.failed = False

    def _key(self, key: str) -> str:
        return key if self.case_sensitive else key.lower()

    def load(self) -> bool:
        """Read the table on first use. Returns False if it could not be read."""
        if self.loaded:
            return True
        if self.failed:
            return False
        from recordkit.sources.tabdelim import TabDelimSource

        try:
            with TabDelimSource(self.path) as source:
                source.open_for_input()
                for record in source:
                    self._rows[self._key(record.get_field_data(self.key_field))] = record
        except (OSError, ValueError, csv.Error) as exc:
            logger.warning("Could not load lookup table %s: %s", self.path, exc, exc_info=True)
            self._rows.clear()
            self.failed = True
            return False
        self.loaded = True
        logger.debug("Loaded %d lookup rows from %s", len(self._rows), self.path)
        return True

    def get(self, key: str) -> Record | None:
        """Record stored under key, or None."""
        if not self.load():
            return None
        return self._rows.get(self._key(key))

    def lookup(self, key: str, field: str) -> str:
        """Value of field in the row keyed by key; empty if there is no such row."""
        record = self.get(key)
        if record is None:
            return ""
        return record.get_field_data(field)

    def __len__(self) -> int:
        return len(self._rows)
