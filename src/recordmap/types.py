"""Record, Column, and Reference types for declaring mapped tables."""

from __future__ import annotations

import inspect
import sys
from typing import Any, ClassVar, Generic, Iterable, Optional, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, create_model

from recordmap.filters import ColumnProxy
from recordmap.schema import (
    ALL_PERMISSIONS,
    UNBOUNDED,
    Cardinality,
    ColumnDescriptor,
    RecordDescriptor,
    RelationDescriptor,
    WritePermission,
    register,
)

T = TypeVar("T")

_SENTINEL = object()


class Column(Generic[T]):
    """Column descriptor for Record schemas.

    Class-level access returns a ColumnProxy for building expressions and
    sort directives; instance access returns the field value.
    """

    def __init__(
        self,
        name: str | None = None,
        *,
        nullable: bool = True,
        unique: bool = False,
        length: int = UNBOUNDED,
        scale: int = 0,
        primary_key: bool = False,
        auto: bool = False,
        default: Any = None,
    ) -> None:
        self.column_name = name
        self.nullable = nullable
        self.unique = unique
        self.length = length
        self.scale = scale
        self.primary_key = primary_key
        self.auto = auto
        self.default = default
        self.attr: str = ""
        self.annotation: Any = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr = name
        if self.column_name is None:
            self.column_name = name

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return ColumnProxy(self.column_name or self.attr)
        return obj.__dict__.get(self.attr, self.default)

    def __set__(self, obj: Any, value: Any) -> None:
        obj.__dict__[self.attr] = value

    def describe(self) -> ColumnDescriptor:
        return ColumnDescriptor(
            name=self.column_name or self.attr,
            attr=self.attr,
            nullable=self.nullable,
            unique=self.unique,
            length=self.length,
            scale=self.scale,
            primary=self.primary_key,
            auto=self.auto,
        )


class Reference(Generic[T]):
    """Relation descriptor: ``source`` column here, ``refer`` column on ``target``."""

    def __init__(
        self,
        target: Any,
        *,
        source: str,
        refer: str,
        cardinality: Cardinality = Cardinality.TO_ONE,
        name: str | None = None,
    ) -> None:
        self.target = target
        self.source = source
        self.refer = refer
        self.cardinality = cardinality
        self.reference_name = name
        self.attr: str = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr = name
        if self.reference_name is None:
            self.reference_name = name

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj.__dict__.get(self.attr)

    def __set__(self, obj: Any, value: Any) -> None:
        obj.__dict__[self.attr] = value

    def describe(self) -> RelationDescriptor:
        return RelationDescriptor(
            name=self.reference_name or self.attr,
            attr=self.attr,
            source=self.source,
            target=self.target,
            refer=self.refer,
            cardinality=self.cardinality,
        )


def _resolve_annotation(ann: Any, module_name: str) -> Any:
    """Resolve string annotations and extract the inner type from Column[T]."""
    if isinstance(ann, str):
        module = sys.modules.get(module_name, None)
        ns = dict(vars(module)) if module else {}
        ns.setdefault("Column", Column)
        try:
            ann = eval(ann, ns)  # noqa: S307
        except Exception:
            return Any

    if getattr(ann, "__origin__", None) is Column:
        args = get_args(ann)
        return args[0] if args else Any
    return Any


def _collect_columns(cls: type) -> dict[str, Column[Any]]:
    """Collect Column descriptors from class annotations, in declaration order."""
    columns: dict[str, Column[Any]] = {}
    annotations = inspect.get_annotations(cls)

    for name, ann in annotations.items():
        is_column_ann = getattr(ann, "__origin__", None) is Column
        if isinstance(ann, str) and ann.startswith("Column"):
            is_column_ann = True
        if not is_column_ann:
            continue

        val = cls.__dict__.get(name, _SENTINEL)
        if isinstance(val, Column):
            col = val
        elif val is _SENTINEL:
            # `name: Column[str]` shorthand
            col = Column()
        else:
            col = Column(default=val)

        if not col.attr:
            col.__set_name__(cls, name)
        col.annotation = _resolve_annotation(ann, cls.__module__)
        columns[name] = col

        if not isinstance(cls.__dict__.get(name), Column):
            setattr(cls, name, col)

    return columns


def _collect_references(cls: type) -> dict[str, Reference[Any]]:
    return {name: v for name, v in cls.__dict__.items() if isinstance(v, Reference)}


def _build_pydantic_model(model_name: str, columns: dict[str, Column[Any]]) -> type[BaseModel]:
    """Build a Pydantic model validating column values; every column accepts None."""
    pydantic_fields: dict[str, Any] = {}
    for name, c in columns.items():
        ann = c.annotation if c.annotation is not None else Any
        pydantic_fields[name] = (Optional[ann], c.default)

    return create_model(  # type: ignore[call-overload]
        model_name, __config__=ConfigDict(extra="forbid"), **pydantic_fields
    )


class Record:
    """Base class for mapped record types.

    Usage::

        class User(Record, table="user"):
            id: Column[int] = Column(primary_key=True, auto=True)
            email: Column[str] = Column(unique=True, nullable=False)
            name: Column[str]
    """

    __record__: ClassVar[RecordDescriptor]
    __record_columns__: ClassVar[tuple[str, ...]]
    __record_references__: ClassVar[tuple[str, ...]]
    _pydantic_model: ClassVar[type[BaseModel]]
    _column_definitions: ClassVar[dict[str, Column[Any]]]
    _reference_definitions: ClassVar[dict[str, Reference[Any]]]

    def __init_subclass__(
        cls,
        table: str | None = None,
        permissions: Iterable[WritePermission] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)

        columns: dict[str, Column[Any]] = {}
        references: dict[str, Reference[Any]] = {}
        for base in reversed(cls.__mro__[1:]):
            columns.update(base.__dict__.get("_column_definitions", {}))
            references.update(base.__dict__.get("_reference_definitions", {}))
        columns.update(_collect_columns(cls))
        references.update(_collect_references(cls))
        cls._column_definitions = columns
        cls._reference_definitions = references
        cls.__record_columns__ = tuple(columns)
        cls.__record_references__ = tuple(references)
        cls._pydantic_model = _build_pydantic_model(f"_{cls.__name__}Model", columns)

        # Without a table name the class is an abstract base and stays unregistered
        if table is None:
            return

        cls.__record__ = register(
            RecordDescriptor(
                record_type=cls,
                table=table,
                columns=tuple(c.describe() for c in columns.values()),
                relations=tuple(r.describe() for r in references.values()),
                permissions=(
                    frozenset(permissions) if permissions is not None else ALL_PERMISSIONS
                ),
                factory=cls.empty,
            )
        )

    def __init__(self, **data: Any) -> None:
        refs = {k: data.pop(k) for k in list(data) if k in self.__record_references__}
        validated = self._pydantic_model(**data)
        for name in self.__record_columns__:
            if name in validated.model_fields_set:
                setattr(self, name, getattr(validated, name))
        for name, value in refs.items():
            setattr(self, name, value)

    @classmethod
    def empty(cls) -> Any:
        """Create an instance with no fields assigned, bypassing validation."""
        return cls.__new__(cls)

    def model_dump(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__record_columns__}

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={getattr(self, k)!r}" for k in self.__record_columns__)
        return f"{self.__class__.__name__}({fields})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    __hash__ = object.__hash__
