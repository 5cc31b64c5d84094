"""Extension point for provider-specific diff rules.

The generic :class:`~migration_engine.differ.relational.RelationalModelDiffer`
invokes every registered :class:`DiffExtension` at each matched juncture of
its traversal.  A hook receives the differ, both inputs and the operations the
previous stage produced, and returns the operations to keep.  The default
implementation of every hook passes the operations through unchanged, so
providers override only the steps they care about.

Hooks may call back into the differ: ``differ.add_key(target)`` runs the
whole hooked Add path (baseline plus every extension), while the
``differ.base_*`` primitives return the generic result alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from migration_engine.models.operations import MigrationOperation
from migration_engine.models.schema import Index, Key, Property, SchemaModel

if TYPE_CHECKING:
    from migration_engine.differ.relational import RelationalModelDiffer


class DiffExtension:
    """Pass-through base for provider diff rules."""

    def diff_model(
        self,
        differ: RelationalModelDiffer,
        source: SchemaModel | None,
        target: SchemaModel | None,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations

    def diff_property(
        self,
        differ: RelationalModelDiffer,
        source: Property,
        target: Property,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations

    def add_property(
        self,
        differ: RelationalModelDiffer,
        target: Property,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations

    def diff_key(
        self,
        differ: RelationalModelDiffer,
        source: Key | None,
        target: Key,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations

    def add_key(
        self,
        differ: RelationalModelDiffer,
        target: Key,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations

    def diff_index(
        self,
        differ: RelationalModelDiffer,
        source: Index,
        target: Index,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations

    def add_index(
        self,
        differ: RelationalModelDiffer,
        target: Index,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        return operations
