"""Record shapes consumed by the reconciler.

A record is a plain mapping from attribute name to value. Relation attributes
hold either nothing, a scalar identifier, a nested record or a sequence of
nested records. ``classify_relation_value`` decides which of those a field
holds exactly once, so the reconciler can dispatch on a closed set of variants
instead of repeating ad-hoc type checks.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Literal

type Record = dict[str, Any]
type StoredRecord = Mapping[str, Any]

AUDIT_RELATION_NAMES: Final[frozenset[str]] = frozenset({"createdBy", "updatedBy"})


@dataclass(frozen=True, slots=True)
class Actor:
    """Identity performing an import; stamped onto audit relations."""

    id: Any


@dataclass(frozen=True, slots=True)
class RelationAttribute:
    """One relation field of a collection and the collection it points to."""

    name: str
    target: str

    @property
    def is_audit(self) -> bool:
        return self.name in AUDIT_RELATION_NAMES


class RelationValueKind(StrEnum):
    ABSENT = "absent"
    NULL = "null"
    SCALAR = "scalar"
    SINGLE = "single"
    MANY = "many"


@dataclass(frozen=True, slots=True)
class AbsentRelation:
    kind: Literal[RelationValueKind.ABSENT] = RelationValueKind.ABSENT


@dataclass(frozen=True, slots=True)
class NullRelation:
    kind: Literal[RelationValueKind.NULL] = RelationValueKind.NULL


@dataclass(frozen=True, slots=True)
class ScalarRelation:
    value: Any
    kind: Literal[RelationValueKind.SCALAR] = RelationValueKind.SCALAR


@dataclass(frozen=True, slots=True)
class SingleRelation:
    record: Mapping[str, Any]
    kind: Literal[RelationValueKind.SINGLE] = RelationValueKind.SINGLE


@dataclass(frozen=True, slots=True)
class ManyRelation:
    items: tuple[Any, ...]
    kind: Literal[RelationValueKind.MANY] = RelationValueKind.MANY


type RelationValue = AbsentRelation | NullRelation | ScalarRelation | SingleRelation | ManyRelation


def classify_relation_value(record: Mapping[str, Any], name: str) -> RelationValue:
    """Return the variant held by ``record[name]``.

    Truthiness is never consulted: ``{}`` is still a nested record and ``[]`` is
    still a sequence of records, just an empty one.
    """

    if name not in record:
        return AbsentRelation()
    return classify_value(record[name])


def classify_value(value: Any) -> NullRelation | ScalarRelation | SingleRelation | ManyRelation:
    """Classify a value that is known to be present."""

    if value is None:
        return NullRelation()
    if isinstance(value, str | bytes | bytearray):
        return ScalarRelation(value)
    if isinstance(value, Mapping):
        return SingleRelation(value)
    if isinstance(value, Sequence):
        return ManyRelation(tuple(value))
    return ScalarRelation(value)


def identifier_of(stored: StoredRecord | None) -> Any | None:
    """Return the identifier of a stored record, or ``None`` when there is none."""

    if stored is None:
        return None
    return stored.get("id")
