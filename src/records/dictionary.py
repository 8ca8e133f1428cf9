# src/records/dictionary.py — v1
"""Data dictionary: field definitions plus aliases.

The dictionary is shared by reference between every RecordDefinition
built on it, so a definition, type or alias registered once applies to
all of them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from recordkit.core.common_name import CommonName
from recordkit.core.models import NOT_FOUND
from recordkit.records.field_definition import UNKNOWN_FIELD, FieldDefinition
from recordkit.records.rules import DataFormatRule

if TYPE_CHECKING:
    from recordkit.sources.base import RecordSink, RecordSource

logger = logging.getLogger(__name__)

NameLike = str | CommonName


class FieldAlias:
    """An alternate name for a field. Lookups of alias yield original."""

    __slots__ = ("alias", "original")

    def __init__(self, alias: NameLike, original: NameLike) -> None:
        self.alias = CommonName(alias)
        self.original = CommonName(original)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldAlias):
            return NotImplemented
        return self.alias == other.alias and self.original == other.original

    def __hash__(self) -> int:
        return hash((self.alias, self.original))

    def __str__(self) -> str:
        return f"{self.alias} is an alias for {self.original}"

    def __repr__(self) -> str:
        return f"FieldAlias({str(self.alias)!r}, {str(self.original)!r})"


class Dictionary:
    """Append-only list of field definitions and a list of aliases."""

    def __init__(self, data_parent: str = "") -> None:
        self.data_parent = data_parent
        self._defs: list[FieldDefinition] = []
        self._aliases: list[FieldAlias] = []

    # --- Aliases ---

    def resolve(self, name: NameLike) -> CommonName:
        """Follow one alias hop. Aliases do not chain."""
        common = CommonName(name)
        for alias in self._aliases:
            if alias.alias == common:
                return alias.original
        return common

    def put_alias(self, alias: FieldAlias | NameLike, original: NameLike | None = None) -> int:
        """Register an alias, replacing any alias with the same name."""
        if not isinstance(alias, FieldAlias):
            if original is None:
                raise TypeError("put_alias needs an original name")
            alias = FieldAlias(alias, original)
        for index, existing in enumerate(self._aliases):
            if existing.alias == alias.alias:
                self._aliases[index] = alias
                return index
        self._aliases.append(alias)
        return len(self._aliases) - 1

    def get_alias(self, index: int) -> FieldAlias | None:
        if 0 <= index < len(self._aliases):
            return self._aliases[index]
        return None

    @property
    def aliases(self) -> tuple[FieldAlias, ...]:
        return tuple(self._aliases)

    # --- Definitions ---

    def get_def_num(self, name: NameLike) -> int:
        """Index of the definition for name (after alias resolution), or NOT_FOUND."""
        target = self.resolve(name)
        for index, definition in enumerate(self._defs):
            if definition.common_name == target:
                return index
        return NOT_FOUND

    def get_def(self, key: int | NameLike) -> FieldDefinition | None:
        """Definition by index or by name.

        An out-of-range index yields UNKNOWN_FIELD; an unknown name yields None.
        """
        if isinstance(key, int):
            if 0 <= key < len(self._defs):
                return self._defs[key]
            return UNKNOWN_FIELD
        index = self.get_def_num(key)
        if index == NOT_FOUND:
            return None
        return self._defs[index]

    def put_def(self, definition: FieldDefinition | NameLike) -> int:
        """Register a definition unless its (resolved) name is already known.

        When the name is an alias, the stored definition is a new one named
        after the alias target, not the definition passed in.
        """
        if not isinstance(definition, FieldDefinition):
            definition = FieldDefinition(definition)
        resolved = self.resolve(definition.common_name)
        index = self.get_def_num(resolved)
        if index != NOT_FOUND:
            return index
        if resolved != definition.common_name:
            definition = FieldDefinition(resolved)
        if not definition.data_parent:
            definition.data_parent = self.data_parent
        self._defs.append(definition)
        logger.debug("Dictionary: added field %s", definition.proper_name)
        return len(self._defs) - 1

    def set_rule(self, name: NameLike, rule: DataFormatRule) -> bool:
        """Bind a formatting rule to a known field. Returns False if unknown."""
        definition = self.get_def(name)
        if definition is None:
            return False
        definition.rule = rule
        return True

    @property
    def definitions(self) -> tuple[FieldDefinition, ...]:
        return tuple(self._defs)

    # --- Persistence ---

    def load(self, source: RecordSource) -> int:
        """Read definitions and aliases from a dictionary-formatted source."""
        from recordkit.records.dictionary_io import load_dictionary

        return load_dictionary(source, self)

    def store(self, sink: RecordSink) -> int:
        """Write every definition, then every alias, to sink."""
        from recordkit.records.dictionary_io import store_dictionary

        return store_dictionary(self, sink)

    def __len__(self) -> int:
        return len(self._defs)

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self._defs)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, CommonName)):
            return False
        return self.get_def_num(name) != NOT_FOUND
