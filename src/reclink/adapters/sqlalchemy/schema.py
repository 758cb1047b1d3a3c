"""Declarative description of the collections a SQL store holds."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from reclink.config.errors import ConfigurationError
from reclink.domain.records import AUDIT_RELATION_NAMES, RelationAttribute

log = logging.getLogger(__name__)

type FieldType = Literal["string", "text", "integer", "float", "boolean", "json"]

DEFAULT_ACTOR_COLLECTION = "users"


class SchemaBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class RelationDefinition(SchemaBaseModel):
    target: str
    many: bool = False


class CollectionDefinition(SchemaBaseModel):
    name: str
    attributes: dict[str, FieldType] = Field(default_factory=dict)
    relations: dict[str, RelationDefinition] = Field(default_factory=dict)
    audit: bool = False

    @model_validator(mode="after")
    def _check_names(self) -> CollectionDefinition:
        if "id" in self.attributes or "id" in self.relations:
            raise ValueError(f"{self.name}: 'id' is reserved for the primary key")
        clashes = set(self.attributes).intersection(self.relations)
        if clashes:
            raise ValueError(
                f"{self.name}: names used as attribute and relation: {sorted(clashes)}"
            )
        if self.audit:
            reserved = AUDIT_RELATION_NAMES.intersection({*self.attributes, *self.relations})
            if reserved:
                raise ValueError(f"{self.name}: audit collections reserve {sorted(reserved)}")
        return self


class SchemaDefinition(SchemaBaseModel):
    collections: list[CollectionDefinition]
    actor_collection: str = DEFAULT_ACTOR_COLLECTION

    @model_validator(mode="after")
    def _check_targets(self) -> SchemaDefinition:
        names = [collection.name for collection in self.collections]
        if len(names) != len(set(names)):
            raise ValueError("Collection names must be unique")
        known = set(names)
        for collection in self.collections:
            for relation_name, relation in collection.relations.items():
                if relation.target not in known:
                    raise ValueError(
                        f"{collection.name}.{relation_name}: unknown target {relation.target!r}"
                    )
        return self

    def collection(self, name: str) -> CollectionDefinition | None:
        for collection in self.collections:
            if collection.name == name:
                return collection
        return None

    def relations_of(self, name: str) -> dict[str, RelationDefinition]:
        """All relations of ``name`` in declaration order, audit relations last."""

        collection = self.collection(name)
        if collection is None:
            return {}
        relations = dict(collection.relations)
        if collection.audit:
            for audit_name in sorted(AUDIT_RELATION_NAMES):
                relations[audit_name] = RelationDefinition(target=self.actor_collection)
        return relations

    def relation_attributes(self, name: str) -> tuple[RelationAttribute, ...]:
        return tuple(
            RelationAttribute(name=relation_name, target=relation.target)
            for relation_name, relation in self.relations_of(name).items()
        )


def load_schema(path: Path | str) -> SchemaDefinition:
    """Read a JSON schema file describing the store's collections."""

    schema_path = Path(path)
    try:
        payload = json.loads(schema_path.read_text(encoding="utf-8"))
        schema = SchemaDefinition.model_validate(payload)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid schema file {schema_path}: {exc}") from exc
    log.debug("Loaded schema with %s collections from %s", len(schema.collections), schema_path)
    return schema
