"""Migration engine: schema snapshot diffing with PostgreSQL provider rules.

Usage::

    from migration_engine import NpgsqlModelDiffer

    differ = NpgsqlModelDiffer()
    operations = differ.diff(previous_model, current_model)
"""

from migration_engine.config import Settings, load_settings
from migration_engine.differ import (
    DiffExtension,
    NpgsqlDiffExtension,
    NpgsqlModelDiffer,
    RelationalModelDiffer,
)
from migration_engine.errors import (
    DiffInvariantError,
    MigrationEngineError,
    SchemaModelError,
    TypeMappingError,
)

__all__ = [
    "DiffExtension",
    "DiffInvariantError",
    "MigrationEngineError",
    "NpgsqlDiffExtension",
    "NpgsqlModelDiffer",
    "RelationalModelDiffer",
    "SchemaModelError",
    "Settings",
    "TypeMappingError",
    "load_settings",
]
