"""Relational schema model consumed by the differ.

A :class:`SchemaModel` is a read-only snapshot: entity types with ordered
properties, an optional primary key, unique constraints and indexes, plus the
PostgreSQL provider settings (value-generation strategy, default sequence
name, explicit sequences).

Members are linked to their owners after validation so that a property can
reach its entity type and model, which value-generation strategy resolution
needs.  Linking works on copies: the same ``Property`` instance may be passed
to several entity types (a source and a target snapshot, typically) without
one snapshot re-parenting the other's members.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from migration_engine.errors import SchemaModelError


class ValueGenerationStrategy(str, Enum):
    """How PostgreSQL produces a column value on insert."""

    SEQUENCE = "Sequence"
    IDENTITY = "Identity"


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class Property(BaseModel):
    """A column-like member of an entity type."""

    name: str = Field(..., min_length=1, description="Logical property name.")
    property_type: str = Field(
        ...,
        min_length=1,
        description="Logical type name, e.g. 'int', 'long', 'string'.",
    )
    nullable: bool = Field(default=True, description="Whether the column accepts NULLs.")
    generate_value_on_add: bool = Field(
        default=False,
        description="Whether a value is generated when a new row is inserted.",
    )
    value_generation_strategy: ValueGenerationStrategy | None = Field(
        default=None,
        description="Per-property strategy; overrides the model-wide strategy.",
    )
    sequence_name: str | None = Field(
        default=None,
        description="Explicit sequence backing a Sequence strategy.",
    )
    computed_expression: str | None = Field(
        default=None,
        description="Raw SQL expression for a computed column.",
    )
    column_name: str | None = Field(
        default=None,
        description="Physical column name.  Defaults to the property name.",
    )
    store_type: str | None = Field(
        default=None,
        description="Explicit PostgreSQL store type, bypassing type mapping.",
    )
    default_value: str | int | float | bool | None = None
    default_expression: str | None = None

    _entity_type: Any = PrivateAttr(default=None)

    @property
    def column(self) -> str:
        """Physical column name."""
        return self.column_name or self.name

    @property
    def entity_type(self) -> EntityType:
        if self._entity_type is None:
            raise SchemaModelError(f"Property '{self.name}' is not attached to an entity type.")
        return self._entity_type

    @property
    def is_primary_key(self) -> bool:
        """Return True if the owning entity's primary key includes this property."""
        entity = self._entity_type
        if entity is None or entity.primary_key is None:
            return False
        return self.name in entity.primary_key.property_names


class Key(BaseModel):
    """A primary key or unique constraint over ordered properties."""

    name: str | None = Field(default=None, description="Constraint name; generated when omitted.")
    property_names: list[str] = Field(..., min_length=1)
    is_clustered: bool | None = Field(
        default=None,
        description="Physical clustering hint; None leaves the server default.",
    )

    _entity_type: Any = PrivateAttr(default=None)

    @property
    def entity_type(self) -> EntityType:
        if self._entity_type is None:
            raise SchemaModelError("Key is not attached to an entity type.")
        return self._entity_type

    @property
    def is_primary_key(self) -> bool:
        return self._entity_type is not None and self._entity_type.primary_key is self

    @property
    def properties(self) -> list[Property]:
        return [self.entity_type.find_property(name) for name in self.property_names]

    @property
    def columns(self) -> list[str]:
        return [p.column for p in self.properties]

    @property
    def constraint_name(self) -> str:
        if self.name:
            return self.name
        table = self.entity_type.table
        if self.is_primary_key:
            return f"PK_{table}"
        return f"AK_{table}_{'_'.join(self.columns)}"


class Index(BaseModel):
    """A secondary index over ordered properties."""

    name: str | None = Field(default=None, description="Index name; generated when omitted.")
    property_names: list[str] = Field(..., min_length=1)
    is_unique: bool = False
    is_clustered: bool | None = None

    _entity_type: Any = PrivateAttr(default=None)

    @property
    def entity_type(self) -> EntityType:
        if self._entity_type is None:
            raise SchemaModelError("Index is not attached to an entity type.")
        return self._entity_type

    @property
    def properties(self) -> list[Property]:
        return [self.entity_type.find_property(name) for name in self.property_names]

    @property
    def columns(self) -> list[str]:
        return [p.column for p in self.properties]

    @property
    def index_name(self) -> str:
        return self.name or f"IX_{self.entity_type.table}_{'_'.join(self.columns)}"


class SequenceDefinition(BaseModel):
    """A named, provider-level counter."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    schema_name: str | None = None
    start_value: int = 1
    increment_by: int = 1


# ---------------------------------------------------------------------------
# Entity types and the model
# ---------------------------------------------------------------------------


class EntityType(BaseModel):
    """A mapped entity type: one table with its columns, keys and indexes."""

    name: str = Field(..., min_length=1)
    table_name: str | None = Field(
        default=None,
        description="Physical table name.  Defaults to the entity name.",
    )
    schema_name: str | None = None
    properties: list[Property] = Field(default_factory=list)
    primary_key: Key | None = None
    unique_constraints: list[Key] = Field(default_factory=list)
    indexes: list[Index] = Field(default_factory=list)

    _model: Any = PrivateAttr(default=None)

    @model_validator(mode="after")
    def validate_members(self) -> EntityType:
        seen: set[str] = set()
        for prop in self.properties:
            if prop.name in seen:
                raise SchemaModelError(f"Entity '{self.name}' declares property '{prop.name}' more than once.")
            seen.add(prop.name)

        for member in (self.primary_key, *self.unique_constraints, *self.indexes):
            if member is None:
                continue
            unknown = [n for n in member.property_names if n not in seen]
            if unknown:
                raise SchemaModelError(f"Entity '{self.name}' key or index references unknown properties: {unknown}")

        self._bind_members()
        return self

    def _bind_members(self) -> None:
        self.properties = [p.model_copy() for p in self.properties]
        if self.primary_key is not None:
            self.primary_key = self.primary_key.model_copy()
        self.unique_constraints = [k.model_copy() for k in self.unique_constraints]
        self.indexes = [i.model_copy() for i in self.indexes]

        for member in (*self.properties, *self.unique_constraints, *self.indexes):
            member._entity_type = self
        if self.primary_key is not None:
            self.primary_key._entity_type = self

    def _rebound(self, model: SchemaModel) -> EntityType:
        clone = self.model_copy()
        clone._bind_members()
        clone._model = model
        return clone

    @property
    def table(self) -> str:
        return self.table_name or self.name

    @property
    def model(self) -> SchemaModel:
        if self._model is None:
            raise SchemaModelError(f"Entity type '{self.name}' is not attached to a model.")
        return self._model

    def find_property(self, name: str) -> Property:
        for prop in self.properties:
            if prop.name == name:
                return prop
        raise SchemaModelError(f"Entity '{self.name}' has no property '{name}'.")


class SchemaModel(BaseModel):
    """A complete relational schema snapshot."""

    entity_types: list[EntityType] = Field(default_factory=list)
    value_generation_strategy: ValueGenerationStrategy | None = Field(
        default=None,
        description="Model-wide strategy applied to properties without their own.",
    )
    default_sequence_name: str | None = Field(
        default=None,
        description="Named sequence to use instead of the implicit default sequence.",
    )
    sequences: list[SequenceDefinition] = Field(
        default_factory=list,
        description="Explicitly declared sequences.",
    )

    @model_validator(mode="after")
    def link_entity_types(self) -> SchemaModel:
        names = [e.name for e in self.entity_types]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SchemaModelError(f"Entity types declared more than once: {duplicates}")

        self.entity_types = [e._rebound(self) for e in self.entity_types]
        return self

    def find_entity_type(self, name: str) -> EntityType:
        for entity in self.entity_types:
            if entity.name == name:
                return entity
        raise SchemaModelError(f"Model has no entity type '{name}'.")

    def all_properties(self) -> list[Property]:
        return [p for entity in self.entity_types for p in entity.properties]

    def find_sequence(self, name: str, schema_name: str | None = None) -> SequenceDefinition | None:
        for sequence in self.sequences:
            if sequence.name == name and sequence.schema_name == schema_name:
                return sequence
        return None
