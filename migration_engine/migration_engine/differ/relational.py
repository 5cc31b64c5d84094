"""Provider-agnostic relational model differ.

Compares two :class:`SchemaModel` snapshots and emits the ordered
:class:`MigrationOperation` list that turns the source into the target.
Matching is by physical identity only, with no rename detection:

* entity types by ``(schema_name, table)``,
* properties by column name,
* primary keys pairwise, unique constraints and indexes by name,
* explicit sequences by ``(schema_name, name)``.

Every per-member step has two layers.  ``base_*`` methods compute the generic
result; the un-prefixed method runs it through the registered
:class:`~migration_engine.differ.base.DiffExtension` hooks.  The traversal
always calls the hooked layer, so provider rules see every matched pair.

The final list is sorted into emission order (drops before creates, tables
before columns, columns before keys, keys before indexes); the order within
one kind follows the target model's declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from migration_engine.differ.base import DiffExtension
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
    sort_operations,
)
from migration_engine.models.schema import (
    EntityType,
    Index,
    Key,
    Property,
    SchemaModel,
    SequenceDefinition,
)
from migration_engine.type_mapping import TypeMapper

logger = logging.getLogger(__name__)


class RelationalModelDiffer:
    """Generic schema differ with provider extension hooks.

    Parameters
    ----------
    type_mapper:
        Resolves store types for column operations.  A default
        :class:`TypeMapper` is created when ``None``.
    extensions:
        Provider rules applied, in order, after each generic step.
    """

    def __init__(
        self,
        type_mapper: TypeMapper | None = None,
        extensions: Sequence[DiffExtension] = (),
    ) -> None:
        self._type_mapper = type_mapper or TypeMapper()
        self._extensions: list[DiffExtension] = list(extensions)

    @property
    def type_mapper(self) -> TypeMapper:
        return self._type_mapper

    @property
    def extensions(self) -> list[DiffExtension]:
        return list(self._extensions)

    def register(self, extension: DiffExtension) -> None:
        """Append *extension* to the hook chain."""
        self._extensions.append(extension)
        logger.debug("Registered diff extension: %s", type(extension).__name__)

    # -- Model ---------------------------------------------------------------

    def diff(self, source: SchemaModel | None, target: SchemaModel | None) -> list[MigrationOperation]:
        """Return the operations that migrate *source* to *target*.

        Either side may be ``None``: ``None -> model`` creates everything,
        ``model -> None`` drops everything.
        """
        operations = self.base_diff(source, target)
        for extension in self._extensions:
            operations = extension.diff_model(self, source, target, operations)
        return operations

    def base_diff(self, source: SchemaModel | None, target: SchemaModel | None) -> list[MigrationOperation]:
        source_entities = _entities_by_table(source)
        target_entities = _entities_by_table(target)

        operations: list[MigrationOperation] = []
        for table_id, target_entity in target_entities.items():
            source_entity = source_entities.get(table_id)
            if source_entity is None:
                operations.extend(self.add_entity_type(target_entity))
            else:
                operations.extend(self.diff_entity_type(source_entity, target_entity))

        for table_id, source_entity in source_entities.items():
            if table_id not in target_entities:
                operations.extend(self.remove_entity_type(source_entity))

        operations.extend(self._diff_sequences(source, target))

        logger.debug("Generic diff produced %d operation(s)", len(operations))
        return sort_operations(operations)

    # -- Entity types --------------------------------------------------------

    def diff_entity_type(self, source: EntityType, target: EntityType) -> list[MigrationOperation]:
        operations: list[MigrationOperation] = []

        source_columns = {p.column: p for p in source.properties}
        target_columns = {p.column for p in target.properties}
        for target_property in target.properties:
            source_property = source_columns.get(target_property.column)
            if source_property is None:
                operations.extend(self.add_property(target_property))
            else:
                operations.extend(self.diff_property(source_property, target_property))
        for column, source_property in source_columns.items():
            if column not in target_columns:
                operations.extend(self.remove_property(source_property))

        if source.primary_key is not None and target.primary_key is not None:
            operations.extend(self.diff_key(source.primary_key, target.primary_key))
        elif target.primary_key is not None:
            operations.extend(self.add_key(target.primary_key))
        elif source.primary_key is not None:
            operations.extend(self.remove_key(source.primary_key))

        source_uniques = {k.constraint_name: k for k in source.unique_constraints}
        target_uniques = {k.constraint_name for k in target.unique_constraints}
        for target_key in target.unique_constraints:
            source_key = source_uniques.get(target_key.constraint_name)
            if source_key is None:
                operations.extend(self.add_key(target_key))
            else:
                operations.extend(self.diff_key(source_key, target_key))
        for name, source_key in source_uniques.items():
            if name not in target_uniques:
                operations.extend(self.remove_key(source_key))

        source_indexes = {i.index_name: i for i in source.indexes}
        target_indexes = {i.index_name for i in target.indexes}
        for target_index in target.indexes:
            source_index = source_indexes.get(target_index.index_name)
            if source_index is None:
                operations.extend(self.add_index(target_index))
            else:
                operations.extend(self.diff_index(source_index, target_index))
        for name, source_index in source_indexes.items():
            if name not in target_indexes:
                operations.extend(self.remove_index(source_index))

        return operations

    def add_entity_type(self, target: EntityType) -> list[MigrationOperation]:
        columns = [
            op.column
            for prop in target.properties
            for op in self.add_property(prop)
            if isinstance(op, AddColumnOperation)
        ]

        primary_key: AddPrimaryKeyOperation | None = None
        if target.primary_key is not None:
            primary_key = next(
                (op for op in self.add_key(target.primary_key) if isinstance(op, AddPrimaryKeyOperation)),
                None,
            )

        unique_constraints = [
            op
            for key in target.unique_constraints
            for op in self.add_key(key)
            if isinstance(op, AddUniqueConstraintOperation)
        ]

        operations: list[MigrationOperation] = [
            CreateTableOperation(
                table=target.table,
                schema_name=target.schema_name,
                columns=columns,
                primary_key=primary_key,
                unique_constraints=unique_constraints,
            )
        ]
        for index in target.indexes:
            operations.extend(self.add_index(index))
        return operations

    def remove_entity_type(self, source: EntityType) -> list[MigrationOperation]:
        return [DropTableOperation(table=source.table, schema_name=source.schema_name)]

    # -- Properties ----------------------------------------------------------

    def column_model(self, prop: Property) -> ColumnModel:
        """Build the physical column definition for *prop*."""
        return ColumnModel(
            name=prop.column,
            store_type=self._type_mapper.get_store_type(prop),
            nullable=prop.nullable,
            default_value=prop.default_value,
            default_expression=prop.default_expression,
        )

    def diff_property(self, source: Property, target: Property) -> list[MigrationOperation]:
        operations = self.base_diff_property(source, target)
        for extension in self._extensions:
            operations = extension.diff_property(self, source, target, operations)
        return operations

    def base_diff_property(self, source: Property, target: Property) -> list[MigrationOperation]:
        source_column = self.column_model(source)
        target_column = self.column_model(target)
        if source_column == target_column:
            return []

        logger.debug(
            "Column %s.%s changed; emitting alter-column",
            target.entity_type.table,
            target.column,
        )
        return [
            AlterColumnOperation(
                table=target.entity_type.table,
                schema_name=target.entity_type.schema_name,
                column=target_column,
            )
        ]

    def add_property(self, target: Property) -> list[MigrationOperation]:
        operations = self.base_add_property(target)
        for extension in self._extensions:
            operations = extension.add_property(self, target, operations)
        return operations

    def base_add_property(self, target: Property) -> list[MigrationOperation]:
        return [
            AddColumnOperation(
                table=target.entity_type.table,
                schema_name=target.entity_type.schema_name,
                column=self.column_model(target),
            )
        ]

    def remove_property(self, source: Property) -> list[MigrationOperation]:
        return [
            DropColumnOperation(
                table=source.entity_type.table,
                schema_name=source.entity_type.schema_name,
                column_name=source.column,
            )
        ]

    # -- Keys ----------------------------------------------------------------

    def diff_key(self, source: Key | None, target: Key) -> list[MigrationOperation]:
        operations = self.base_diff_key(source, target)
        for extension in self._extensions:
            operations = extension.diff_key(self, source, target, operations)
        return operations

    def base_diff_key(self, source: Key | None, target: Key) -> list[MigrationOperation]:
        if source is None:
            return self.add_key(target)

        unchanged = (
            source.constraint_name == target.constraint_name
            and source.columns == target.columns
            and source.is_primary_key == target.is_primary_key
            and source.entity_type.table == target.entity_type.table
            and source.entity_type.schema_name == target.entity_type.schema_name
        )
        if unchanged:
            return []
        return [*self.remove_key(source), *self.add_key(target)]

    def add_key(self, target: Key) -> list[MigrationOperation]:
        operations = self.base_add_key(target)
        for extension in self._extensions:
            operations = extension.add_key(self, target, operations)
        return operations

    def base_add_key(self, target: Key) -> list[MigrationOperation]:
        entity = target.entity_type
        if target.is_primary_key:
            return [
                AddPrimaryKeyOperation(
                    name=target.constraint_name,
                    table=entity.table,
                    schema_name=entity.schema_name,
                    columns=target.columns,
                )
            ]
        return [
            AddUniqueConstraintOperation(
                name=target.constraint_name,
                table=entity.table,
                schema_name=entity.schema_name,
                columns=target.columns,
            )
        ]

    def remove_key(self, source: Key) -> list[MigrationOperation]:
        entity = source.entity_type
        if source.is_primary_key:
            return [
                DropPrimaryKeyOperation(
                    name=source.constraint_name,
                    table=entity.table,
                    schema_name=entity.schema_name,
                )
            ]
        return [
            DropUniqueConstraintOperation(
                name=source.constraint_name,
                table=entity.table,
                schema_name=entity.schema_name,
            )
        ]

    # -- Indexes -------------------------------------------------------------

    def diff_index(self, source: Index, target: Index) -> list[MigrationOperation]:
        operations = self.base_diff_index(source, target)
        for extension in self._extensions:
            operations = extension.diff_index(self, source, target, operations)
        return operations

    def base_diff_index(self, source: Index, target: Index) -> list[MigrationOperation]:
        unchanged = (
            source.index_name == target.index_name
            and source.columns == target.columns
            and source.is_unique == target.is_unique
        )
        if unchanged:
            return []
        return [*self.remove_index(source), *self.add_index(target)]

    def add_index(self, target: Index) -> list[MigrationOperation]:
        operations = self.base_add_index(target)
        for extension in self._extensions:
            operations = extension.add_index(self, target, operations)
        return operations

    def base_add_index(self, target: Index) -> list[MigrationOperation]:
        entity = target.entity_type
        return [
            CreateIndexOperation(
                name=target.index_name,
                table=entity.table,
                schema_name=entity.schema_name,
                columns=target.columns,
                is_unique=target.is_unique,
            )
        ]

    def remove_index(self, source: Index) -> list[MigrationOperation]:
        entity = source.entity_type
        return [
            DropIndexOperation(
                name=source.index_name,
                table=entity.table,
                schema_name=entity.schema_name,
            )
        ]

    # -- Sequences -----------------------------------------------------------

    def add_sequence(self, target: SequenceDefinition) -> list[MigrationOperation]:
        return [
            CreateSequenceOperation(
                name=target.name,
                schema_name=target.schema_name,
                start_value=target.start_value,
                increment_by=target.increment_by,
            )
        ]

    def remove_sequence(self, source: SequenceDefinition) -> list[MigrationOperation]:
        return [DropSequenceOperation(name=source.name, schema_name=source.schema_name)]

    def _diff_sequences(
        self,
        source: SchemaModel | None,
        target: SchemaModel | None,
    ) -> list[MigrationOperation]:
        source_sequences = {(s.schema_name, s.name): s for s in (source.sequences if source else [])}
        target_sequences = {(s.schema_name, s.name): s for s in (target.sequences if target else [])}

        operations: list[MigrationOperation] = []
        for sequence_id, target_sequence in target_sequences.items():
            source_sequence = source_sequences.get(sequence_id)
            if source_sequence is None:
                operations.extend(self.add_sequence(target_sequence))
            elif source_sequence != target_sequence:
                operations.extend(self.remove_sequence(source_sequence))
                operations.extend(self.add_sequence(target_sequence))
        for sequence_id, source_sequence in source_sequences.items():
            if sequence_id not in target_sequences:
                operations.extend(self.remove_sequence(source_sequence))
        return operations


def _entities_by_table(model: SchemaModel | None) -> dict[tuple[str | None, str], EntityType]:
    if model is None:
        return {}
    return {(e.schema_name, e.table): e for e in model.entity_types}
