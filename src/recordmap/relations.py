"""Match requested inclusions against declared relations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from recordmap.filters import Expression
from recordmap.query import Inclusion, QuerySpec
from recordmap.schema import (
    Cardinality,
    ColumnDescriptor,
    RecordDescriptor,
    RelationDescriptor,
    describe,
)


@dataclass(frozen=True)
class RelationBinding:
    """A relation to expand for every row of a read.

    ``spec`` is the nested query template; its first expression is the join
    filter on the target column and gets its value from each source row.
    """

    relation: RelationDescriptor
    source: ColumnDescriptor
    target_type: type
    spec: QuerySpec

    @property
    def cardinality(self) -> Cardinality:
        return self.relation.cardinality

    def spec_for(self, instance: Any) -> QuerySpec:
        """Copy the template with the join filter bound to the instance's source value."""
        spec = self.spec.copy()
        join, *rest = spec.expressions
        spec.expressions = [join.bind(self.source.value_of(instance)), *rest]
        return spec

    def assign(self, instance: Any, value: Any) -> None:
        self.relation.assign(instance, value)


def _match(relation: RelationDescriptor, inclusions: Sequence[Inclusion]) -> Inclusion | None:
    for inc in inclusions:
        if inc.name != relation.name:
            continue
        if inc.target is not None and inc.target is not relation.target_type:
            continue
        return inc
    return None


def resolve(
    descriptor: RecordDescriptor, inclusions: Sequence[Inclusion]
) -> list[RelationBinding]:
    """Bind each declared relation that a requested inclusion matches.

    Relations nobody asked for and inclusions matching no relation are ignored.
    """
    if not inclusions:
        return []

    bindings: list[RelationBinding] = []
    for relation in descriptor.relations:
        inc = _match(relation, inclusions)
        if inc is None:
            continue

        target_type = relation.target_type
        # Fail early on a refer column the target does not declare
        describe(target_type).column(relation.refer)

        spec = QuerySpec()
        spec.expressions = [Expression(relation.refer, None)]
        if inc.spec is not None:
            spec.columns = list(inc.spec.columns)
            spec.expressions.extend(inc.spec.expressions)
            spec.sorts = list(inc.spec.sorts)
            spec.inclusions = list(inc.spec.inclusions)

        bindings.append(
            RelationBinding(
                relation=relation,
                source=descriptor.column(relation.source),
                target_type=target_type,
                spec=spec,
            )
        )
    return bindings
