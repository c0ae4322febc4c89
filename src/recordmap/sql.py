"""SQL dialects and the single-shot statement builder."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from recordmap.filters import Expression, Function, Sort

_SPACES_RE = re.compile(r" {2,}")


class GeneratedKey(str, Enum):
    """How an INSERT reports the key the backend generated."""

    LASTROWID = "lastrowid"
    RETURNING = "returning"
    OUTPUT = "output"


@dataclass(frozen=True)
class Dialect:
    """Quoting, placeholder and generated-key style of one backend family."""

    name: str
    quote: str | None = None
    placeholder: str = "?"
    generated_key: GeneratedKey = GeneratedKey.LASTROWID

    def wrap(self, identifier: str) -> str:
        if self.quote is None:
            return identifier
        return f"{self.quote}{identifier}{self.quote}"


GENERIC = Dialect("generic")
SQLITE = Dialect("sqlite", '"', "?")
POSTGRESQL = Dialect("postgresql", '"', "%s", GeneratedKey.RETURNING)
MSSQL = Dialect("mssql", '"', "?", GeneratedKey.OUTPUT)
MYSQL = Dialect("mysql", "`", "%s")

DIALECTS: dict[str, Dialect] = {d.name: d for d in (GENERIC, SQLITE, POSTGRESQL, MSSQL, MYSQL)}

# DB-API driver module -> dialect
_DRIVER_DIALECTS: dict[str, Dialect] = {
    "sqlite3": SQLITE,
    "psycopg": POSTGRESQL,
    "psycopg2": POSTGRESQL,
    "pyodbc": MSSQL,
    "pymssql": MSSQL,
    "pymysql": MYSQL,
    "MySQLdb": MYSQL,
    "mysql": MYSQL,
}


def get_dialect(name: str) -> Dialect:
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown dialect '{name}'. Valid dialects: {', '.join(sorted(DIALECTS))}"
        ) from None


def detect_dialect(connection: Any) -> Dialect:
    """Pick a dialect from the driver module of a DB-API connection."""
    driver = type(connection).__module__.split(".")[0]
    return _DRIVER_DIALECTS.get(driver, GENERIC)


@dataclass(frozen=True)
class Statement:
    """Final SQL text and its positional parameters, in placeholder order."""

    sql: str
    params: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return self.sql


class StatementBuilder:
    """Assemble one SQL statement clause by clause.

    A builder is created per statement. Every placeholder is recorded together
    with its bound value as it is appended, so the parameter order always
    matches the placeholder order in the text: for an UPDATE the SET values
    come first and the WHERE values continue after them.
    """

    def __init__(self, dialect: Dialect = GENERIC) -> None:
        self._dialect = dialect
        self._parts: list[str] = []
        self._params: list[Any] = []

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def _wrap_all(self, columns: Iterable[str]) -> str:
        return ", ".join(self._dialect.wrap(c) for c in columns)

    def _bind(self, value: Any) -> str:
        self._params.append(value)
        return self._dialect.placeholder

    def select(self, table: str, columns: Sequence[str] = ()) -> StatementBuilder:
        projection = self._wrap_all(columns) if columns else "*"
        self._parts.append(f"SELECT {projection} FROM {self._dialect.wrap(table)} ")
        return self

    def aggregate(
        self, table: str, columns: Sequence[str], function: Function
    ) -> StatementBuilder:
        function = Function(function)
        inner = self._wrap_all(columns) if columns else "*"
        self._parts.append(f"SELECT {function}({inner}) FROM {self._dialect.wrap(table)} ")
        return self

    def where(self, expressions: Sequence[Expression]) -> StatementBuilder:
        if not expressions:
            return self
        self._parts.append("WHERE ")
        last = len(expressions) - 1
        for i, expr in enumerate(expressions):
            placeholder = self._bind(expr.value)
            self._parts.append(f"{self._dialect.wrap(expr.column)} {expr.operator} {placeholder}")
            self._parts.append(f" {expr.conjunction} " if i < last else " ")
        return self

    def order_by(self, sorts: Sequence[Sort]) -> StatementBuilder:
        if not sorts:
            return self
        directives = ", ".join(f"{self._dialect.wrap(s.column)} {s.direction}" for s in sorts)
        self._parts.append(f"ORDER BY {directives} ")
        return self

    def insert(
        self, table: str, values: Mapping[str, Any], returning: str | None = None
    ) -> StatementBuilder:
        """INSERT one row; ``returning`` names a generated key column to report back.

        Backends without RETURNING or OUTPUT report the key through the
        cursor's lastrowid, so nothing is added to the text for them.
        """
        placeholders = ", ".join(self._bind(v) for v in values.values())
        style = self._dialect.generated_key if returning else GeneratedKey.LASTROWID
        output = ""
        if style is GeneratedKey.OUTPUT:
            output = f"OUTPUT INSERTED.{self._dialect.wrap(returning)} "
        self._parts.append(
            f"INSERT INTO {self._dialect.wrap(table)} ({self._wrap_all(values)}) "
            f"{output}VALUES ({placeholders}) "
        )
        if style is GeneratedKey.RETURNING:
            self._parts.append(f"RETURNING {self._dialect.wrap(returning)} ")
        return self

    def update(self, table: str, values: Mapping[str, Any]) -> StatementBuilder:
        assignments = ", ".join(
            f"{self._dialect.wrap(c)} = {self._bind(v)}" for c, v in values.items()
        )
        self._parts.append(f"UPDATE {self._dialect.wrap(table)} SET {assignments} ")
        return self

    def delete(self, table: str) -> StatementBuilder:
        self._parts.append(f"DELETE FROM {self._dialect.wrap(table)} ")
        return self

    def reset(self) -> StatementBuilder:
        self._parts.clear()
        self._params.clear()
        return self

    def build(self) -> Statement:
        return Statement(str(self), tuple(self._params))

    def __str__(self) -> str:
        return _SPACES_RE.sub(" ", "".join(self._parts)).strip()
