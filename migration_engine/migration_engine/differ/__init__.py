"""Schema differ: generic relational engine plus the PostgreSQL overlay."""

from migration_engine.differ.base import DiffExtension
from migration_engine.differ.npgsql import (
    NpgsqlAnnotationNames,
    NpgsqlDiffExtension,
    NpgsqlModelDiffer,
    resolve_value_generation_strategy,
    uses_default_sequence,
)
from migration_engine.differ.relational import RelationalModelDiffer

__all__ = [
    "DiffExtension",
    "NpgsqlAnnotationNames",
    "NpgsqlDiffExtension",
    "NpgsqlModelDiffer",
    "RelationalModelDiffer",
    "resolve_value_generation_strategy",
    "uses_default_sequence",
]
