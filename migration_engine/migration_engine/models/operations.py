"""Migration operations emitted by the differ.

Operations are immutable instructions, one atomic schema change each.  Every
operation, and every :class:`ColumnModel` carried by a column operation, owns
an ordered ``annotations`` mapping that downstream SQL generation consults.
Setting an annotation that already exists overwrites it, so each concept
appears at most once per operation.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    """Operation categories, declared in emission order."""

    DROP_INDEX = "DROP_INDEX"
    DROP_UNIQUE_CONSTRAINT = "DROP_UNIQUE_CONSTRAINT"
    DROP_PRIMARY_KEY = "DROP_PRIMARY_KEY"
    DROP_COLUMN = "DROP_COLUMN"
    DROP_TABLE = "DROP_TABLE"
    DROP_SEQUENCE = "DROP_SEQUENCE"
    CREATE_SEQUENCE = "CREATE_SEQUENCE"
    CREATE_TABLE = "CREATE_TABLE"
    ADD_COLUMN = "ADD_COLUMN"
    ALTER_COLUMN = "ALTER_COLUMN"
    ADD_PRIMARY_KEY = "ADD_PRIMARY_KEY"
    ADD_UNIQUE_CONSTRAINT = "ADD_UNIQUE_CONSTRAINT"
    CREATE_INDEX = "CREATE_INDEX"


OPERATION_ORDER: dict[OperationKind, int] = {kind: position for position, kind in enumerate(OperationKind)}


class Annotatable(BaseModel):
    """Base for values carrying provider annotations."""

    model_config = ConfigDict(frozen=True)

    annotations: dict[str, str] = Field(
        default_factory=dict,
        description="Provider-namespaced annotations, e.g. 'Npgsql:Clustered'.",
    )

    def __getitem__(self, key: str) -> str:
        return self.annotations[key]

    def __setitem__(self, key: str, value: str) -> None:
        self.annotations[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.annotations


class ColumnModel(Annotatable):
    """Physical column definition used by add/alter column and create table."""

    name: str = Field(..., min_length=1)
    store_type: str = Field(..., min_length=1)
    nullable: bool = True
    default_value: str | int | float | bool | None = None
    default_expression: str | None = None


class MigrationOperation(Annotatable):
    """Base class of every migration operation."""

    kind: ClassVar[OperationKind]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class CreateTableOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.CREATE_TABLE

    table: str
    schema_name: str | None = None
    columns: list[ColumnModel] = Field(default_factory=list)
    primary_key: AddPrimaryKeyOperation | None = None
    unique_constraints: list[AddUniqueConstraintOperation] = Field(default_factory=list)


class DropTableOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.DROP_TABLE

    table: str
    schema_name: str | None = None


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


class AddColumnOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.ADD_COLUMN

    table: str
    schema_name: str | None = None
    column: ColumnModel


class AlterColumnOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.ALTER_COLUMN

    table: str
    schema_name: str | None = None
    column: ColumnModel


class DropColumnOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.DROP_COLUMN

    table: str
    schema_name: str | None = None
    column_name: str


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class AddPrimaryKeyOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.ADD_PRIMARY_KEY

    name: str
    table: str
    schema_name: str | None = None
    columns: list[str] = Field(..., min_length=1)


class DropPrimaryKeyOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.DROP_PRIMARY_KEY

    name: str
    table: str
    schema_name: str | None = None


class AddUniqueConstraintOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.ADD_UNIQUE_CONSTRAINT

    name: str
    table: str
    schema_name: str | None = None
    columns: list[str] = Field(..., min_length=1)


class DropUniqueConstraintOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.DROP_UNIQUE_CONSTRAINT

    name: str
    table: str
    schema_name: str | None = None


# ---------------------------------------------------------------------------
# Indexes
# ---------------------------------------------------------------------------


class CreateIndexOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.CREATE_INDEX

    name: str
    table: str
    schema_name: str | None = None
    columns: list[str] = Field(..., min_length=1)
    is_unique: bool = False


class DropIndexOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.DROP_INDEX

    name: str
    table: str
    schema_name: str | None = None


# ---------------------------------------------------------------------------
# Sequences
# ---------------------------------------------------------------------------


class CreateSequenceOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.CREATE_SEQUENCE

    name: str
    schema_name: str | None = None
    start_value: int = 1
    increment_by: int = 1


class DropSequenceOperation(MigrationOperation):
    kind: ClassVar[OperationKind] = OperationKind.DROP_SEQUENCE

    name: str
    schema_name: str | None = None


KEY_ADD_OPERATIONS: tuple[type[MigrationOperation], ...] = (
    AddPrimaryKeyOperation,
    AddUniqueConstraintOperation,
)
KEY_DROP_OPERATIONS: tuple[type[MigrationOperation], ...] = (
    DropPrimaryKeyOperation,
    DropUniqueConstraintOperation,
)


def sort_operations(operations: list[MigrationOperation]) -> list[MigrationOperation]:
    """Return *operations* in emission order, stable within each kind."""
    return sorted(operations, key=lambda op: OPERATION_ORDER[op.kind])


CreateTableOperation.model_rebuild()
