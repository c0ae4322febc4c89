"""recordmap: map declared record types to parameterized SQL and back."""

__version__ = "0.1.0"

from recordmap.config import RecordMapConfig
from recordmap.engine import Engine
from recordmap.errors import (
    ErrorKind,
    ExecutionError,
    IllegalOperationError,
    LengthError,
    NullabilityError,
    RecordMapError,
    RelationDepthError,
    SchemaError,
    UniquenessError,
    WritePermissionError,
)
from recordmap.executor import DbApiExecutor, Executor, SqliteExecutor
from recordmap.filters import Conjunction, Expression, Function, Operator, Sort, SortDirection
from recordmap.query import Inclusion, QuerySpec
from recordmap.schema import (
    UNBOUNDED,
    Cardinality,
    ColumnDescriptor,
    RecordDescriptor,
    RelationDescriptor,
    WritePermission,
    describe,
    register,
)
from recordmap.sql import Dialect, Statement, StatementBuilder
from recordmap.types import Column, Record, Reference

__all__ = [
    "__version__",
    "Record",
    "Column",
    "Reference",
    "Cardinality",
    "WritePermission",
    "UNBOUNDED",
    "ColumnDescriptor",
    "RelationDescriptor",
    "RecordDescriptor",
    "describe",
    "register",
    "Expression",
    "Operator",
    "Conjunction",
    "Sort",
    "SortDirection",
    "Function",
    "QuerySpec",
    "Inclusion",
    "Dialect",
    "Statement",
    "StatementBuilder",
    "Executor",
    "DbApiExecutor",
    "SqliteExecutor",
    "Engine",
    "RecordMapConfig",
    "ErrorKind",
    "RecordMapError",
    "SchemaError",
    "WritePermissionError",
    "NullabilityError",
    "LengthError",
    "UniquenessError",
    "ExecutionError",
    "RelationDepthError",
    "IllegalOperationError",
]
