"""Query specification DSL: projection, filters, sorts, relation inclusions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from recordmap.filters import ColumnProxy, Expression, Sort, column_name


@dataclass(frozen=True)
class Inclusion:
    """Request to expand the relation named ``name``.

    ``target`` pins the relation's target type; ``spec`` shapes the nested
    fetch (its filters are appended after the relation's own join filter).
    """

    name: str
    target: type | None = None
    spec: QuerySpec | None = None


class QuerySpec:
    """Call-scoped description of what to project, filter, sort and include.

    Mutators extend the held sequences and return ``self`` for chaining::

        spec = QuerySpec().project("id", "email").filter(User.email == "a@x.com")
    """

    def __init__(self) -> None:
        self.columns: list[str] = []
        self.expressions: list[Expression] = []
        self.sorts: list[Sort] = []
        self.inclusions: list[Inclusion] = []

    def project(self, *columns: str | ColumnProxy) -> QuerySpec:
        self.columns.extend(column_name(c) for c in columns)
        return self

    def filter(self, *expressions: Expression) -> QuerySpec:
        for expr in expressions:
            if not isinstance(expr, Expression):
                raise TypeError(f"Expected Expression, got {type(expr).__name__}")
        self.expressions.extend(expressions)
        return self

    def sort_by(self, *sorts: Sort | str | ColumnProxy) -> QuerySpec:
        for s in sorts:
            self.sorts.append(s if isinstance(s, Sort) else Sort(column_name(s)))
        return self

    def include(self, *inclusions: Inclusion | str) -> QuerySpec:
        for inc in inclusions:
            self.inclusions.append(inc if isinstance(inc, Inclusion) else Inclusion(inc))
        return self

    def reset(self) -> QuerySpec:
        self.columns.clear()
        self.expressions.clear()
        self.sorts.clear()
        self.inclusions.clear()
        return self

    def copy(self) -> QuerySpec:
        other = QuerySpec()
        other.columns = list(self.columns)
        other.expressions = list(self.expressions)
        other.sorts = list(self.sorts)
        other.inclusions = list(self.inclusions)
        return other

    def __repr__(self) -> str:
        return (
            f"QuerySpec(columns={self.columns!r}, expressions={self.expressions!r}, "
            f"sorts={self.sorts!r}, inclusions={self.inclusions!r})"
        )


def spec_or_empty(spec: Any) -> QuerySpec:
    return spec if spec is not None else QuerySpec()
