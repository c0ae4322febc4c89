"""Tests for CLI filter and sort parsers."""

import pytest

from recordmap.cli._filters import parse_cli_filters, parse_cli_sorts
from recordmap.filters import Expression, Operator, Sort, SortDirection


def test_parse_empty():
    assert parse_cli_filters([]) == []
    assert parse_cli_filters(None) == []


def test_parse_single_eq():
    assert parse_cli_filters(['name eq "Alice"']) == [Expression("name", "Alice")]


def test_parse_numeric():
    (expr,) = parse_cli_filters(["age gt 25"])
    assert expr.operator is Operator.MORE
    assert expr.value == 25


def test_parse_null():
    (expr,) = parse_cli_filters(["name is_not null"])
    assert expr == Expression("name", None, Operator.IS_NOT)


def test_value_with_spaces():
    (expr,) = parse_cli_filters(['name eq "Mary Ann"'])
    assert expr.value == "Mary Ann"


def test_parse_all_ops():
    for op_token, expected in [
        ("eq", Operator.EQUAL),
        ("ne", Operator.NOT_EQUAL),
        ("ne_ansi", Operator.NOT_EQUAL_ANSI),
        ("gt", Operator.MORE),
        ("gte", Operator.EQUAL_OR_MORE),
        ("lt", Operator.LESS),
        ("lte", Operator.EQUAL_OR_LESS),
        ("is", Operator.IS),
        ("is_not", Operator.IS_NOT),
        ("like", Operator.LIKE),
        ("not_like", Operator.NOT_LIKE),
    ]:
        (expr,) = parse_cli_filters([f"col {op_token} 1"])
        assert expr.operator is expected, op_token


def test_malformed_filter():
    with pytest.raises(ValueError, match="expected 'COLUMN OP VALUE_JSON'"):
        parse_cli_filters(["name eq"])


def test_parse_sorts():
    assert parse_cli_sorts(["id", "name:desc", "email:ASC"]) == [
        Sort("id"),
        Sort("name", SortDirection.DESC),
        Sort("email", SortDirection.ASC),
    ]
