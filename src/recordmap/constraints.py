"""Write-time constraint checks, run before any SQL is issued."""

from __future__ import annotations

from typing import Any, Mapping

from recordmap.errors import (
    LengthError,
    NullabilityError,
    UniquenessError,
    WritePermissionError,
)
from recordmap.schema import ColumnDescriptor, RecordDescriptor, WritePermission


def verify_permission(descriptor: RecordDescriptor, permission: WritePermission) -> None:
    if permission not in descriptor.permissions:
        raise WritePermissionError(descriptor.table, str(permission))


def verify_nullability(instance: Any, columns: Mapping[str, ColumnDescriptor]) -> None:
    for name, c in columns.items():
        if c.nullable or c.auto_primary:
            continue
        if c.value_of(instance) is None:
            raise NullabilityError(name)


def verify_length(instance: Any, columns: Mapping[str, ColumnDescriptor]) -> None:
    for name, c in columns.items():
        if not c.bounded:
            continue
        value = c.value_of(instance)
        length = len(str(value)) if value is not None else 0
        if length > c.length:
            raise LengthError(name, length, c.length)


def verify_non_nullable_insertion(
    insert_columns: Mapping[str, ColumnDescriptor],
    descriptor: RecordDescriptor,
) -> None:
    """Every non-nullable column must be part of an INSERT."""
    for c in descriptor.columns:
        if c.nullable or c.auto_primary:
            continue
        if c.name not in insert_columns:
            raise NullabilityError(
                c.name, f"Non-nullable column '{c.name}' is not marked for insertion"
            )


def verify_uniqueness(
    instance: Any,
    conflicting: Any,
    primary: ColumnDescriptor,
    unique: ColumnDescriptor,
) -> None:
    """A row found by probing a unique value must be the instance's own row."""
    if conflicting is None:
        return
    if primary.value_of(instance) != primary.value_of(conflicting):
        raise UniquenessError(unique.name, unique.value_of(conflicting))
