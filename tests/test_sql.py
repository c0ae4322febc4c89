"""Tests for dialects and the statement builder."""

from __future__ import annotations

import sqlite3

import pytest

from recordmap.filters import Expression, Function, Operator, Sort, SortDirection
from recordmap.sql import (
    GENERIC,
    MSSQL,
    MYSQL,
    POSTGRESQL,
    SQLITE,
    GeneratedKey,
    Statement,
    StatementBuilder,
    detect_dialect,
    get_dialect,
)


def build(dialect=SQLITE) -> StatementBuilder:
    return StatementBuilder(dialect)


class TestSelect:
    def test_all_columns(self):
        assert build().select("user").build() == Statement('SELECT * FROM "user"')

    def test_projection(self):
        stmt = build().select("user", ["id", "email"]).build()
        assert stmt.sql == 'SELECT "id", "email" FROM "user"'

    def test_where_order_by(self):
        stmt = (
            build()
            .select("user", ["id", "email"])
            .where(
                [
                    Expression("email", "a@x.com").or_(),
                    Expression("id", 3, Operator.MORE),
                ]
            )
            .order_by([Sort("id", SortDirection.DESC), Sort("email")])
            .build()
        )
        assert stmt.sql == (
            'SELECT "id", "email" FROM "user" WHERE "email" = ? OR "id" > ? '
            'ORDER BY "id" DESC, "email" ASC'
        )
        assert stmt.params == ("a@x.com", 3)

    def test_last_conjunction_ignored(self):
        stmt = build().select("user").where([Expression("id", 1).or_()]).build()
        assert stmt.sql == 'SELECT * FROM "user" WHERE "id" = ?'

    def test_null_operand_is_parameterized(self):
        stmt = build().select("user").where([Expression("name", None, Operator.IS_NOT)]).build()
        assert stmt.sql == 'SELECT * FROM "user" WHERE "name" IS NOT ?'
        assert stmt.params == (None,)

    def test_empty_where_and_order_by(self):
        stmt = build().select("user").where([]).order_by([]).build()
        assert stmt.sql == 'SELECT * FROM "user"'
        assert stmt.params == ()


class TestAggregate:
    def test_count_all(self):
        assert build().aggregate("user", [], Function.COUNT).build().sql == (
            'SELECT COUNT(*) FROM "user"'
        )

    def test_columns_and_filter(self):
        stmt = (
            build()
            .aggregate("order", ["total_amount"], Function.SUM)
            .where([Expression("user_id", 2)])
            .build()
        )
        assert stmt.sql == 'SELECT SUM("total_amount") FROM "order" WHERE "user_id" = ?'
        assert stmt.params == (2,)

    def test_function_by_name(self):
        assert build().aggregate("user", ["id"], "MAX").build().sql == (
            'SELECT MAX("id") FROM "user"'
        )


class TestWrites:
    def test_insert(self):
        stmt = build().insert("user", {"email": "a@x.com", "name": None}).build()
        assert stmt.sql == 'INSERT INTO "user" ("email", "name") VALUES (?, ?)'
        assert stmt.params == ("a@x.com", None)

    def test_update_params_follow_placeholders(self):
        stmt = (
            build()
            .update("user", {"email": "b@x.com", "name": "Bob"})
            .where([Expression("id", 1)])
            .build()
        )
        assert stmt.sql == 'UPDATE "user" SET "email" = ?, "name" = ? WHERE "id" = ?'
        assert stmt.params == ("b@x.com", "Bob", 1)

    def test_delete(self):
        stmt = build().delete("user").where([Expression("id", 5)]).build()
        assert stmt.sql == 'DELETE FROM "user" WHERE "id" = ?'
        assert stmt.params == (5,)


class TestDialects:
    def test_generic_is_unquoted(self):
        stmt = build(GENERIC).select("user", ["id"]).where([Expression("id", 1)]).build()
        assert stmt.sql == "SELECT id FROM user WHERE id = ?"

    def test_postgresql_placeholder(self):
        stmt = build(POSTGRESQL).update("user", {"name": "x"}).where([Expression("id", 1)]).build()
        assert stmt.sql == 'UPDATE "user" SET "name" = %s WHERE "id" = %s'

    def test_mysql_backticks(self):
        stmt = build(MYSQL).select("order").order_by([Sort("id")]).build()
        assert stmt.sql == "SELECT * FROM `order` ORDER BY `id` ASC"

    def test_mssql_quotes(self):
        assert build(MSSQL).delete("user").build().sql == 'DELETE FROM "user"'

    def test_get_dialect(self):
        assert get_dialect("MySQL") is MYSQL
        assert get_dialect("postgresql") is POSTGRESQL

    def test_get_dialect_unknown(self):
        with pytest.raises(ValueError, match="Unknown dialect"):
            get_dialect("oracle")

    def test_detect_sqlite(self):
        conn = sqlite3.connect(":memory:")
        try:
            assert detect_dialect(conn) is SQLITE
        finally:
            conn.close()

    def test_detect_unknown_driver(self):
        assert detect_dialect(object()) is GENERIC


def test_reset_clears_text_and_params():
    builder = build().select("user").where([Expression("id", 1)])
    builder.reset().delete("user")
    assert builder.build() == Statement('DELETE FROM "user"')


def test_build_snapshots():
    builder = build().select("user")
    first = builder.build()
    builder.where([Expression("id", 1)])
    assert first.sql == 'SELECT * FROM "user"'
    assert builder.build().params == (1,)


class TestGeneratedKeys:
    def test_lastrowid_dialect_adds_nothing(self):
        stmt = build().insert("user", {"email": "a"}, returning="id").build()
        assert stmt.sql == 'INSERT INTO "user" ("email") VALUES (?)'

    def test_postgresql_returning(self):
        stmt = build(POSTGRESQL).insert("user", {"email": "a"}, returning="id").build()
        assert stmt.sql == 'INSERT INTO "user" ("email") VALUES (%s) RETURNING "id"'
        assert stmt.params == ("a",)

    def test_mssql_output(self):
        stmt = build(MSSQL).insert("user", {"email": "a"}, returning="id").build()
        assert stmt.sql == 'INSERT INTO "user" ("email") OUTPUT INSERTED."id" VALUES (?)'

    def test_without_returning_column(self):
        stmt = build(POSTGRESQL).insert("user", {"email": "a"}).build()
        assert stmt.sql == 'INSERT INTO "user" ("email") VALUES (%s)'

    def test_dialect_key_styles(self):
        assert POSTGRESQL.generated_key is GeneratedKey.RETURNING
        assert MSSQL.generated_key is GeneratedKey.OUTPUT
        assert SQLITE.generated_key is GeneratedKey.LASTROWID
        assert MYSQL.generated_key is GeneratedKey.LASTROWID
