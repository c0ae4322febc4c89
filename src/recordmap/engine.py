"""Engine: one logical list/get/aggregate/insert/update/delete operation per call.

Each call builds a statement, executes it through the executor, materializes
rows and, for reads with inclusions, expands relations by calling itself once
per requested relation and row.

An Engine wraps exactly one executor and therefore one connection. It must not
be used from several threads at once; use one Engine per connection instead.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, TypeVar

from recordmap.config import RecordMapConfig
from recordmap.constraints import (
    verify_length,
    verify_non_nullable_insertion,
    verify_nullability,
    verify_permission,
    verify_uniqueness,
)
from recordmap.errors import (
    IllegalOperationError,
    RecordMapError,
    RelationDepthError,
    SchemaError,
    UniquenessError,
)
from recordmap.executor import DbApiExecutor, Executor, open_executor
from recordmap.filters import Expression, Function
from recordmap.query import QuerySpec, spec_or_empty
from recordmap.relations import RelationBinding, resolve
from recordmap.schema import (
    Cardinality,
    RecordDescriptor,
    WritePermission,
    columns_for,
    describe,
    parse_row,
    primary_column,
    primary_expression,
    unique_columns,
)
from recordmap.sql import Dialect, Statement, StatementBuilder, get_dialect

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Engine:
    """CRUD and aggregate access to registered record types over one executor."""

    def __init__(self, executor: Executor, *, config: RecordMapConfig | None = None) -> None:
        self._executor = executor
        self._config = config or RecordMapConfig()
        # The configured dialect only changes identifier quoting; placeholders and
        # generated-key retrieval belong to the connected driver
        self._dialect: Dialect = executor.dialect
        if self._config.dialect:
            self._dialect = replace(
                executor.dialect, quote=get_dialect(self._config.dialect).quote
            )

    @classmethod
    def connect(cls, target: Any, *, config: RecordMapConfig | None = None) -> Engine:
        """Create an engine over a SQLite path, a sqlite3 connection, or a DB-API connection."""
        executor: DbApiExecutor = open_executor(target)
        return cls(executor, config=config)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def executor(self) -> Executor:
        return self._executor

    def close(self) -> None:
        self._executor.close()

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # --- Reads ---

    def list(self, record_type: type[T], spec: QuerySpec | None = None) -> list[T]:
        """Return every matching row; an empty list when nothing matches."""
        return self._select(record_type, spec_or_empty(spec), first_only=False, depth=0)

    def get(self, record_type: type[T], spec: QuerySpec | None = None) -> T | None:
        """Return the first matching row, or None."""
        rows = self._select(record_type, spec_or_empty(spec), first_only=True, depth=0)
        return rows[0] if rows else None

    def aggregate(
        self,
        record_type: type,
        function: Function | str | None,
        spec: QuerySpec | None = None,
    ) -> Any:
        """Return the single scalar of ``SELECT FN(cols) ...``; None if no function."""
        if function is None:
            return None
        spec = spec_or_empty(spec)
        descriptor = describe(record_type)
        for name in spec.columns:
            descriptor.column(name)
        statement = (
            self._builder()
            .aggregate(descriptor.table, spec.columns, Function(function))
            .where(spec.expressions)
            .build()
        )
        self._log(statement)
        with self._executor.query(statement) as rows:
            for row in rows:
                return row[next(iter(row.keys()))]
        return None

    def _select(
        self, record_type: type, spec: QuerySpec, *, first_only: bool, depth: int
    ) -> list[Any]:
        descriptor = describe(record_type)
        columns = columns_for(descriptor, spec.columns)
        projection = list(columns) if spec.columns else []
        statement = (
            self._builder()
            .select(descriptor.table, projection)
            .where(spec.expressions)
            .order_by(spec.sorts)
            .build()
        )
        self._log(statement)

        results: list[Any] = []
        with self._executor.query(statement) as rows:
            for row in rows:
                results.append(parse_row(descriptor, columns, row))
                if first_only:
                    break

        if results and spec.inclusions:
            self._expand(descriptor, results, resolve(descriptor, spec.inclusions), depth)
        return results

    def _expand(
        self,
        descriptor: RecordDescriptor,
        results: list[Any],
        bindings: list[RelationBinding],
        depth: int,
    ) -> None:
        if not bindings:
            return
        depth += 1
        if depth > self._config.max_relation_depth:
            raise RelationDepthError(depth, self._config.max_relation_depth)

        for instance in results:
            for binding in bindings:
                logger.debug(
                    "Expanding %s.%s (%s) at depth %d",
                    descriptor.table,
                    binding.relation.name,
                    binding.cardinality.value,
                    depth,
                )
                nested = binding.spec_for(instance)
                if binding.cardinality is Cardinality.TO_MANY:
                    value: Any = self._select(
                        binding.target_type, nested, first_only=False, depth=depth
                    )
                else:
                    found = self._select(binding.target_type, nested, first_only=True, depth=depth)
                    value = found[0] if found else None
                binding.assign(instance, value)

    # --- Writes ---

    def insert(self, instance: Any, spec: QuerySpec | None = None) -> int | None:
        """Insert an instance; return the generated primary key, or None."""
        spec = spec_or_empty(spec)
        descriptor = describe(type(instance))
        try:
            verify_permission(descriptor, WritePermission.INSERT)
            columns = columns_for(descriptor, spec.columns, write=True)
            verify_non_nullable_insertion(columns, descriptor)
            verify_nullability(instance, columns)
            verify_length(instance, columns)
            for name, c in unique_columns(columns).items():
                value = c.value_of(instance)
                if value is None:
                    continue
                existing = self.get(type(instance), QuerySpec().filter(Expression(name, value)))
                if existing is not None:
                    raise UniquenessError(name, value)
        except RecordMapError as e:
            logger.info("Rejected INSERT into %s: %s", descriptor.table, e)
            raise

        generated = next((c for c in descriptor.columns if c.auto_primary), None)
        statement = (
            self._builder()
            .insert(
                descriptor.table,
                {name: c.value_of(instance) for name, c in columns.items()},
                returning=generated.name if generated is not None else None,
            )
            .build()
        )
        self._log(statement)
        key = self._executor.insert(statement)
        return key if generated is not None else None

    def update(self, instance: Any, spec: QuerySpec | None = None) -> None:
        """Update an instance's row.

        Without filter expressions the row is located by the instance's own
        primary key, never by an unconditional UPDATE.
        """
        spec = spec_or_empty(spec)
        descriptor = describe(type(instance))
        try:
            verify_permission(descriptor, WritePermission.UPDATE)
            key_expressions = list(spec.expressions) or [
                primary_expression(descriptor, instance)
            ]
            primary = primary_column(descriptor)
            columns = {
                name: c
                for name, c in columns_for(descriptor, spec.columns, write=True).items()
                if not c.primary
            }
            if not columns:
                raise SchemaError(f"Table '{descriptor.table}' has no columns to update")
            verify_nullability(instance, columns)
            verify_length(instance, columns)
            for name, c in unique_columns(columns).items():
                value = c.value_of(instance)
                if value is None:
                    continue
                for match in self.list(type(instance), QuerySpec().filter(Expression(name, value))):
                    verify_uniqueness(instance, match, primary, c)
        except RecordMapError as e:
            logger.info("Rejected UPDATE of %s: %s", descriptor.table, e)
            raise

        statement = (
            self._builder()
            .update(descriptor.table, {name: c.value_of(instance) for name, c in columns.items()})
            .where(key_expressions)
            .build()
        )
        self._log(statement)
        self._executor.execute(statement)

    def delete(self, instance: Any) -> None:
        """Delete the row of an instance, located by its primary key."""
        descriptor = describe(type(instance))
        verify_permission(descriptor, WritePermission.DELETE)
        self._delete(descriptor, [primary_expression(descriptor, instance)])

    def delete_key(self, record_type: type, key: Any) -> None:
        """Delete the row whose primary key equals ``key``."""
        descriptor = describe(record_type)
        verify_permission(descriptor, WritePermission.DELETE)
        self._delete(descriptor, [Expression(primary_column(descriptor).name, key)])

    def delete_where(self, record_type: type, spec: QuerySpec) -> None:
        """Delete every row matching the filter expressions of ``spec``."""
        descriptor = describe(record_type)
        verify_permission(descriptor, WritePermission.DELETE)
        if not spec.expressions:
            raise IllegalOperationError(
                descriptor.table, "DELETE", "no filter expressions given"
            )
        self._delete(descriptor, list(spec.expressions))

    def _delete(self, descriptor: RecordDescriptor, expressions: list[Expression]) -> None:
        statement = self._builder().delete(descriptor.table).where(expressions).build()
        self._log(statement)
        self._executor.execute(statement)

    # --- Helpers ---

    def _builder(self) -> StatementBuilder:
        return StatementBuilder(self._dialect)

    def _log(self, statement: Statement) -> None:
        logger.debug("SQL: %s [%d parameter(s)]", statement.sql, len(statement.params))
