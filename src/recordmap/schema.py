"""Record descriptors, the descriptor registry, and row materialization.

Every record type is described by a ``RecordDescriptor``: its table name, the
write operations it allows, its columns in declaration order, its relations,
and a factory producing blank instances. Descriptors are registered once per
type (``Record`` subclasses register themselves at class creation) and are
read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from recordmap.errors import SchemaError
from recordmap.filters import Expression

UNBOUNDED = -1


class WritePermission(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


ALL_PERMISSIONS = frozenset(WritePermission)


class Cardinality(str, Enum):
    TO_ONE = "to_one"
    TO_MANY = "to_many"


@dataclass(frozen=True)
class ColumnDescriptor:
    """Per-column mapping and constraint metadata."""

    name: str
    attr: str
    nullable: bool = True
    unique: bool = False
    length: int = UNBOUNDED
    scale: int = 0
    primary: bool = False
    auto: bool = False

    @property
    def bounded(self) -> bool:
        return self.length > UNBOUNDED

    @property
    def auto_primary(self) -> bool:
        """Auto-generated primary columns skip not-null and insertion checks."""
        return self.primary and self.auto

    def value_of(self, instance: Any) -> Any:
        return getattr(instance, self.attr, None)

    def assign(self, instance: Any, value: Any) -> None:
        setattr(instance, self.attr, value)


@dataclass(frozen=True)
class RelationDescriptor:
    """A declared link from a source column to a column of another record type.

    ``target`` is either the record type itself or a zero-argument callable
    returning it, so that self and forward references can be declared.
    """

    name: str
    attr: str
    source: str
    target: Any
    refer: str
    cardinality: Cardinality = Cardinality.TO_ONE

    @property
    def target_type(self) -> type:
        if isinstance(self.target, type):
            return self.target
        return self.target()

    def assign(self, instance: Any, value: Any) -> None:
        setattr(instance, self.attr, value)


@dataclass(frozen=True)
class RecordDescriptor:
    """Table metadata for one record type."""

    record_type: type
    table: str
    columns: tuple[ColumnDescriptor, ...]
    relations: tuple[RelationDescriptor, ...] = ()
    permissions: frozenset[WritePermission] = ALL_PERMISSIONS
    factory: Callable[[], Any] | None = None
    _by_name: dict[str, ColumnDescriptor] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        primaries = [c.name for c in self.columns if c.primary]
        if len(primaries) > 1:
            raise TypeError(f"Table '{self.table}' has multiple primary columns: {primaries}")
        for c in self.columns:
            if c.auto and not c.primary:
                raise TypeError(
                    f"Column '{c.name}' of table '{self.table}' is auto-generated "
                    "but not primary"
                )
            self._by_name[c.name] = c

    def column(self, name: str) -> ColumnDescriptor:
        try:
            return self._by_name[name]
        except KeyError:
            raise SchemaError(f"Table '{self.table}' has no column named '{name}'") from None

    def new_instance(self) -> Any:
        if self.factory is not None:
            return self.factory()
        return self.record_type()


_registry: dict[type, RecordDescriptor] = {}


def register(descriptor: RecordDescriptor) -> RecordDescriptor:
    """Register (or replace) the descriptor for ``descriptor.record_type``."""
    _registry[descriptor.record_type] = descriptor
    return descriptor


def registered_types() -> list[type]:
    return list(_registry)


def describe(record_type: type) -> RecordDescriptor:
    """Return the registered descriptor for a record type."""
    descriptor = _registry.get(record_type)
    if descriptor is None:
        name = getattr(record_type, "__name__", repr(record_type))
        raise SchemaError(f"Type {name} does not have table metadata")
    return descriptor


def primary_column(descriptor: RecordDescriptor) -> ColumnDescriptor:
    for c in descriptor.columns:
        if c.primary:
            return c
    raise SchemaError(f"Table '{descriptor.table}' does not have a primary key column")


def primary_expression(descriptor: RecordDescriptor, instance: Any) -> Expression:
    """Build the ``primary = value`` expression for an instance."""
    pk = primary_column(descriptor)
    return Expression(pk.name, pk.value_of(instance))


def columns_for(
    descriptor: RecordDescriptor,
    names: Iterable[str] = (),
    *,
    write: bool = False,
) -> dict[str, ColumnDescriptor]:
    """Select columns by name, always in declaration order.

    An empty ``names`` selects every column for reads, or every
    non-auto-generated column for writes.
    """
    wanted = set(names)
    if not wanted:
        return {
            c.name: c for c in descriptor.columns if not (write and c.auto_primary)
        }
    for name in wanted:
        descriptor.column(name)
    return {c.name: c for c in descriptor.columns if c.name in wanted}


def unique_columns(columns: Mapping[str, ColumnDescriptor]) -> dict[str, ColumnDescriptor]:
    return {name: c for name, c in columns.items() if c.unique}


def parse_row(
    descriptor: RecordDescriptor,
    columns: Mapping[str, ColumnDescriptor],
    row: Mapping[str, Any],
) -> Any:
    """Materialize one row into a fresh instance.

    Only the requested columns are assigned; values are taken as the row
    reader returns them.
    """
    instance = descriptor.new_instance()
    for name, c in columns.items():
        try:
            value = row[name]
        except (KeyError, IndexError):
            raise SchemaError(
                f"Result row for table '{descriptor.table}' has no column '{name}'"
            ) from None
        c.assign(instance, value)
    return instance
