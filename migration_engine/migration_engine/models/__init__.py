"""Domain models: the input schema snapshot and the emitted operations."""

from migration_engine.models.operations import (
    AddColumnOperation,
    AddPrimaryKeyOperation,
    AddUniqueConstraintOperation,
    AlterColumnOperation,
    ColumnModel,
    CreateIndexOperation,
    CreateSequenceOperation,
    CreateTableOperation,
    DropColumnOperation,
    DropIndexOperation,
    DropPrimaryKeyOperation,
    DropSequenceOperation,
    DropTableOperation,
    DropUniqueConstraintOperation,
    MigrationOperation,
    OperationKind,
)
from migration_engine.models.schema import (
    EntityType,
    Index,
    Key,
    Property,
    SchemaModel,
    SequenceDefinition,
    ValueGenerationStrategy,
)

__all__ = [
    "AddColumnOperation",
    "AddPrimaryKeyOperation",
    "AddUniqueConstraintOperation",
    "AlterColumnOperation",
    "ColumnModel",
    "CreateIndexOperation",
    "CreateSequenceOperation",
    "CreateTableOperation",
    "DropColumnOperation",
    "DropIndexOperation",
    "DropPrimaryKeyOperation",
    "DropSequenceOperation",
    "DropTableOperation",
    "DropUniqueConstraintOperation",
    "EntityType",
    "Index",
    "Key",
    "MigrationOperation",
    "OperationKind",
    "Property",
    "SchemaModel",
    "SequenceDefinition",
    "ValueGenerationStrategy",
]
