"""Filter expression and sort types for the recordmap query DSL."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

NULL_EQ_ERROR = "Use .is_null() instead of == None in recordmap expressions."
NULL_NE_ERROR = "Use .is_not_null() instead of != None in recordmap expressions."


class Operator(str, Enum):
    """Comparison operators; the value is the SQL text."""

    EQUAL = "="
    NOT_EQUAL = "!="
    NOT_EQUAL_ANSI = "<>"
    MORE = ">"
    LESS = "<"
    EQUAL_OR_MORE = ">="
    EQUAL_OR_LESS = "<="
    IS = "IS"
    IS_NOT = "IS NOT"
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"

    def __str__(self) -> str:
        return self.value


class Conjunction(str, Enum):
    AND = "AND"
    OR = "OR"

    def __str__(self) -> str:
        return self.value


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    def __str__(self) -> str:
        return self.value


class Function(str, Enum):
    """Aggregate functions accepted by Engine.aggregate()."""

    COUNT = "COUNT"
    SUM = "SUM"
    AVG = "AVG"
    MAX = "MAX"
    MIN = "MIN"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Expression:
    """One WHERE predicate: ``column operator ?`` joined to the next by conjunction.

    The conjunction of the last expression in a sequence is ignored.
    """

    column: str
    value: Any = None
    operator: Operator = Operator.EQUAL
    conjunction: Conjunction = Conjunction.AND

    def bind(self, value: Any) -> Expression:
        return replace(self, value=value)

    def and_(self) -> Expression:
        return replace(self, conjunction=Conjunction.AND)

    def or_(self) -> Expression:
        return replace(self, conjunction=Conjunction.OR)

    def __str__(self) -> str:
        return f"{self.column} {self.operator} ?"


@dataclass(frozen=True)
class Sort:
    """One ORDER BY directive."""

    column: str
    direction: SortDirection = SortDirection.ASC


class ColumnProxy:
    """Proxy that generates Expression and Sort objects from column operations.

    Returned by class-level access to a Column, e.g. ``User.email == "a@x.com"``.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> Expression:  # type: ignore[override]
        if other is None:
            raise TypeError(NULL_EQ_ERROR)
        return Expression(self.name, other, Operator.EQUAL)

    def __ne__(self, other: object) -> Expression:  # type: ignore[override]
        if other is None:
            raise TypeError(NULL_NE_ERROR)
        return Expression(self.name, other, Operator.NOT_EQUAL)

    def __gt__(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.MORE)

    def __ge__(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.EQUAL_OR_MORE)

    def __lt__(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.LESS)

    def __le__(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.EQUAL_OR_LESS)

    def ne_ansi(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.NOT_EQUAL_ANSI)

    def is_(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.IS)

    def is_not(self, other: Any) -> Expression:
        return Expression(self.name, other, Operator.IS_NOT)

    def is_null(self) -> Expression:
        return Expression(self.name, None, Operator.IS)

    def is_not_null(self) -> Expression:
        return Expression(self.name, None, Operator.IS_NOT)

    def like(self, pattern: str) -> Expression:
        return Expression(self.name, pattern, Operator.LIKE)

    def not_like(self, pattern: str) -> Expression:
        return Expression(self.name, pattern, Operator.NOT_LIKE)

    def startswith(self, prefix: str) -> Expression:
        return Expression(self.name, f"{prefix}%", Operator.LIKE)

    def endswith(self, suffix: str) -> Expression:
        return Expression(self.name, f"%{suffix}", Operator.LIKE)

    def contains(self, substring: str) -> Expression:
        return Expression(self.name, f"%{substring}%", Operator.LIKE)

    def asc(self) -> Sort:
        return Sort(self.name, SortDirection.ASC)

    def desc(self) -> Sort:
        return Sort(self.name, SortDirection.DESC)

    def __repr__(self) -> str:
        return f"ColumnProxy({self.name!r})"


def column_name(ref: Any) -> str:
    """Extract a column name from a string or column proxy."""
    if isinstance(ref, ColumnProxy):
        return ref.name
    if isinstance(ref, str):
        return ref
    raise ValueError(f"Cannot extract column name from {ref!r}")
