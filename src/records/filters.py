# src/records/filters.py — v1
"""Record filters: single-field comparisons and AND/OR compounds.

Operators may be written as symbols ("<>"), alternate symbols ("!="),
two-letter mnemonics ("ne") or words ("not equal to"). The operator is
only checked when the filter is applied to a record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from recordkit.core.common_name import CommonName
from recordkit.core.models import NOT_FOUND
from recordkit.records.values import FieldValue

if TYPE_CHECKING:
    from recordkit.records.record import Record

EQUALS = 0
GREATER_THAN = 1
GREATER_OR_EQUAL = 2
LESS_THAN = 3
LESS_OR_EQUAL = 4
NOT_EQUAL = 5
CONTAINS = 6
NOT_CONTAINS = 7
STARTS_WITH = 8
NOT_STARTS_WITH = 9
ENDS_WITH = 10
NOT_ENDS_WITH = 11

# (symbol, alternate symbol, mnemonic, words) per operator, in index order.
OPERATOR_SPELLINGS: tuple[tuple[str, str, str, str], ...] = (
    ("=", "==", "eq", "equals"),
    (">", ">", "gt", "greater than"),
    (">=", "!<", "ge", "greater than or equal to"),
    ("<", "<", "lt", "less than"),
    ("<=", "!>", "le", "less than or equal to"),
    ("<>", "!=", "ne", "not equal to"),
    ("()", "[]", "co", "contains"),
    ("!()", "![]", "nc", "does not contain"),
    ("(<)", "[<]", "st", "starts with"),
    ("!(<)", "![<]", "ns", "does not start with"),
    ("(>)", "[>]", "fi", "ends with"),
    ("!(>)", "![>]", "nf", "does not end with"),
)

_OPERATORS: dict[str, int] = {
    spelling: index
    for index, spellings in enumerate(OPERATOR_SPELLINGS)
    for spelling in spellings
}


class InvalidOperatorError(ValueError):
    """Raised when a filter is applied with an operator nobody recognizes."""


def operator_index(operator: str) -> int:
    """Index of an operator in any of its spellings, or NOT_FOUND."""
    return _OPERATORS.get(" ".join(operator.strip().lower().split()), NOT_FOUND)


class DataFilter(ABC):
    """Selects records."""

    @abstractmethod
    def select(self, record: Record) -> bool:
        """True if record passes the filter."""

    def __call__(self, record: Record) -> bool:
        return self.select(record)


class FieldFilter(DataFilter):
    """Compare one field of a record with a literal value."""

    def __init__(self, column: int | str | CommonName, operator: str, value: str) -> None:
        self.column = column
        self.operator = operator
        self.value = value

    def select(self, record: Record) -> bool:
        index = operator_index(self.operator)
        if index == NOT_FOUND:
            raise InvalidOperatorError(f"Invalid filter operator: {self.operator!r}")
        found = record.get_field(self.column)
        data = found if found is not None else FieldValue("")
        if index <= NOT_EQUAL:
            operand = data.__class__(self.value)
            result = data.compare_to(operand)
            return (
                result == 0,
                result > 0,
                result >= 0,
                result < 0,
                result <= 0,
                result != 0,
            )[index]
        text = data.data.lower()
        literal = self.value.lower()
        if index in (CONTAINS, NOT_CONTAINS):
            hit = literal in text
        elif index in (STARTS_WITH, NOT_STARTS_WITH):
            hit = text.startswith(literal)
        else:
            hit = text.endswith(literal)
        return hit if index in (CONTAINS, STARTS_WITH, ENDS_WITH) else not hit

    def __repr__(self) -> str:
        return f"FieldFilter({self.column!r}, {self.operator!r}, {self.value!r})"


class CompoundFilter(DataFilter):
    """AND or OR over child filters, evaluated left to right with short-circuit.

    An empty compound selects every record.
    """

    def __init__(self, filters: list[DataFilter] | None = None, and_logic: bool = True) -> None:
        self.filters: list[DataFilter] = list(filters or [])
        self.and_logic = and_logic

    def add_filter(self, data_filter: DataFilter) -> None:
        self.filters.append(data_filter)

    def select(self, record: Record) -> bool:
        if not self.filters:
            return True
        if self.and_logic:
            return all(f.select(record) for f in self.filters)
        return any(f.select(record) for f in self.filters)

    def __len__(self) -> int:
        return len(self.filters)
