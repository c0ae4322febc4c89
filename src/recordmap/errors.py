"""Structured error types for recordmap."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Discriminant carried by every recordmap error."""

    SCHEMA = "schema"
    PERMISSION = "permission"
    NULLABILITY = "nullability"
    LENGTH = "length"
    UNIQUENESS = "uniqueness"
    EXECUTION = "execution"
    RELATION_DEPTH = "relation_depth"
    OPERATION = "operation"


class RecordMapError(Exception):
    """Base error for all recordmap errors."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SchemaError(RecordMapError):
    """Raised for missing table metadata, primary column, or named column."""

    kind = ErrorKind.SCHEMA


class WritePermissionError(RecordMapError):
    """Raised when a write operation is not allowed on a record type."""

    kind = ErrorKind.PERMISSION

    def __init__(self, table: str, operation: str) -> None:
        self.table = table
        self.operation = operation
        super().__init__(f"Table '{table}' does not have the {operation} permission")


class NullabilityError(RecordMapError):
    """Raised when a non-nullable column would be written as null."""

    kind = ErrorKind.NULLABILITY

    def __init__(self, column: str, message: str | None = None) -> None:
        self.column = column
        super().__init__(message or f"Column '{column}' contains null value")


class LengthError(RecordMapError):
    """Raised when a value exceeds its column's max length."""

    kind = ErrorKind.LENGTH

    def __init__(self, column: str, length: int, limit: int) -> None:
        self.column = column
        self.length = length
        self.limit = limit
        super().__init__(
            f"The value length of column '{column}' is {length}, "
            f"which is larger than its configured limit of {limit}"
        )


class UniquenessError(RecordMapError):
    """Raised when a unique column value already belongs to another row."""

    kind = ErrorKind.UNIQUENESS

    def __init__(self, column: str, value: Any) -> None:
        self.column = column
        self.value = value
        super().__init__(f"The unique value {value!r} of column '{column}' already exists")


class ExecutionError(RecordMapError):
    """Raised when the underlying SQL execution fails."""

    kind = ErrorKind.EXECUTION

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        self.detail = detail
        super().__init__(f"SQL execution failed: {detail}")


class RelationDepthError(RecordMapError):
    """Raised when relation expansion nests deeper than max_relation_depth."""

    kind = ErrorKind.RELATION_DEPTH

    def __init__(self, depth: int, limit: int) -> None:
        self.depth = depth
        self.limit = limit
        super().__init__(f"Relation depth {depth} exceeds max_relation_depth of {limit}")


class IllegalOperationError(RecordMapError):
    """Raised when a statement would affect rows it was not asked to target."""

    kind = ErrorKind.OPERATION

    def __init__(self, table: str, operation: str, reason: str) -> None:
        self.table = table
        self.operation = operation
        super().__init__(f"Refusing {operation} on '{table}': {reason}")
