"""CLI filter and sort token parsers."""

from __future__ import annotations

import json
from typing import Any

from recordmap.filters import Expression, Operator, Sort, SortDirection

# Map CLI operator tokens to SQL operators
_OP_MAP: dict[str, Operator] = {
    "eq": Operator.EQUAL,
    "ne": Operator.NOT_EQUAL,
    "ne_ansi": Operator.NOT_EQUAL_ANSI,
    "gt": Operator.MORE,
    "gte": Operator.EQUAL_OR_MORE,
    "lt": Operator.LESS,
    "lte": Operator.EQUAL_OR_LESS,
    "is": Operator.IS,
    "is_not": Operator.IS_NOT,
    "like": Operator.LIKE,
    "not_like": Operator.NOT_LIKE,
}


def parse_cli_filters(filter_args: list[str] | None) -> list[Expression]:
    """Parse "COLUMN OP VALUE_JSON" strings into AND-joined expressions."""
    expressions: list[Expression] = []
    for arg in filter_args or []:
        parts = arg.split(None, 2)
        if len(parts) != 3:
            raise ValueError(f"Invalid filter (expected 'COLUMN OP VALUE_JSON'): {arg}")
        column, op_token, value_json = parts

        op = _OP_MAP.get(op_token)
        if op is None:
            raise ValueError(
                f"Unknown filter operator '{op_token}'. "
                f"Valid operators: {', '.join(sorted(_OP_MAP))}"
            )
        try:
            value: Any = json.loads(value_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON value in filter '{arg}': {e}") from e
        expressions.append(Expression(column, value, op))
    return expressions


def parse_cli_sorts(sort_args: list[str] | None) -> list[Sort]:
    """Parse "COLUMN" or "COLUMN:asc|desc" strings into sort directives."""
    sorts: list[Sort] = []
    for arg in sort_args or []:
        column, _, direction = arg.partition(":")
        try:
            sorts.append(Sort(column, SortDirection((direction or "asc").upper())))
        except ValueError:
            raise ValueError(f"Invalid sort direction in '{arg}' (expected asc or desc)") from None
    return sorts
