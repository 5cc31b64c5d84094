"""PostgreSQL (Npgsql) rules layered over the generic relational differ.

The generic differ knows nothing about value generation, computed columns,
clustering or the implicit default sequence.  :class:`NpgsqlDiffExtension`
post-processes each generic step:

* **model** -- create or drop the implicit default sequence when its usage
  differs between source and target;
* **property** -- force an alter-column when the computed expression or the
  effective value-generation strategy changes, and stamp both onto the
  alter/add column;
* **key** -- recreate a key whose clustering flag changed, or stamp the flag
  onto an add the generic differ already planned;
* **index** -- same as keys, except that recreation builds a full
  create-index from the target definition.

Default-sequence operations are appended after the sorted generic operations,
so a create-sequence follows any create-table whose columns draw from it.
A target that declares a sequence with the default sequence's name in
``sequences`` leaves it to the generic differ.  A source that declares it
has it dropped by the generic differ, so a target still relying on it gets
it created again.

Annotations are written under the configured prefix (``Npgsql:`` by default)
and overwrite any earlier value for the same key.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from migration_engine.config import Settings, load_settings
from migration_engine.differ.base import DiffExtension
from migration_engine.differ.relational import RelationalModelDiffer
from migration_engine.errors import DiffInvariantError
from migration_engine.models.operations import (
    KEY_ADD_OPERATIONS,
    KEY_DROP_OPERATIONS,
    AddColumnOperation,
    AlterColumnOperation,
    ColumnModel,
    CreateIndexOperation,
    CreateSequenceOperation,
    MigrationOperation,
)
from migration_engine.models.schema import (
    Index,
    Key,
    Property,
    SchemaModel,
    SequenceDefinition,
    ValueGenerationStrategy,
)
from migration_engine.type_mapping import TypeMapper, is_integer_type

logger = logging.getLogger(__name__)


class NpgsqlAnnotationNames:
    """Annotation names, without the provider prefix."""

    VALUE_GENERATION = "ValueGeneration"
    COMPUTED_EXPRESSION = "ColumnComputedExpression"
    CLUSTERED = "Clustered"


# ---------------------------------------------------------------------------
# Strategy resolution
# ---------------------------------------------------------------------------


def resolve_value_generation_strategy(prop: Property) -> ValueGenerationStrategy | None:
    """Return the effective value-generation strategy of *prop*.

    The property's own strategy wins, then the model-wide strategy.  Without
    either, an integer primary-key property that generates values on add is
    an ``Identity`` column.
    """
    if prop.value_generation_strategy is not None:
        return prop.value_generation_strategy

    model_strategy = prop.entity_type.model.value_generation_strategy
    if model_strategy is not None:
        return model_strategy

    if prop.generate_value_on_add and is_integer_type(prop.property_type) and prop.is_primary_key:
        return ValueGenerationStrategy.IDENTITY
    return None


def uses_default_sequence(model: SchemaModel | None) -> bool:
    """Return True if *model* relies on the implicit default sequence."""
    if model is None or model.default_sequence_name is not None:
        return False
    if model.value_generation_strategy == ValueGenerationStrategy.SEQUENCE:
        return True
    return any(
        resolve_value_generation_strategy(p) == ValueGenerationStrategy.SEQUENCE and p.sequence_name is None
        for p in model.all_properties()
    )


# ---------------------------------------------------------------------------
# Single-operation lookups
# ---------------------------------------------------------------------------


def _find_single(
    operations: Sequence[MigrationOperation],
    types: type[MigrationOperation] | tuple[type[MigrationOperation], ...],
    expected: str,
) -> MigrationOperation | None:
    matches = [op for op in operations if isinstance(op, types)]
    if len(matches) > 1:
        raise DiffInvariantError(
            f"Expected at most one {expected} operation, found {len(matches)}.",
            expected=expected,
            found=len(matches),
        )
    return matches[0] if matches else None


def _require_single(
    operations: Sequence[MigrationOperation],
    types: type[MigrationOperation] | tuple[type[MigrationOperation], ...],
    expected: str,
) -> MigrationOperation:
    match = _find_single(operations, types, expected)
    if match is None:
        raise DiffInvariantError(
            f"Expected exactly one {expected} operation, found none.",
            expected=expected,
            found=0,
        )
    return match


# ---------------------------------------------------------------------------
# Extension
# ---------------------------------------------------------------------------


class NpgsqlDiffExtension(DiffExtension):
    """Npgsql overlay for :class:`RelationalModelDiffer`.

    Parameters
    ----------
    settings:
        Differ settings.  Loaded from the environment when ``None``.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or load_settings()
        self._lock = threading.Lock()
        self._default_sequence: SequenceDefinition | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def default_sequence(self) -> SequenceDefinition:
        """The implicit default sequence descriptor, built once on first use."""
        if self._default_sequence is not None:
            return self._default_sequence

        with self._lock:
            # Double-checked locking
            if self._default_sequence is None:
                self._default_sequence = SequenceDefinition(
                    name=self._settings.default_sequence_name,
                    schema_name=self._settings.default_sequence_schema,
                    start_value=self._settings.default_sequence_start,
                    increment_by=self._settings.default_sequence_increment,
                )
            return self._default_sequence

    def annotation_key(self, name: str) -> str:
        return f"{self._settings.annotation_prefix}{name}"

    # -- Model ---------------------------------------------------------------

    def diff_model(
        self,
        differ: RelationalModelDiffer,
        source: SchemaModel | None,
        target: SchemaModel | None,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        source_uses = uses_default_sequence(source)
        target_uses = uses_default_sequence(target)

        if self._declares_default_sequence(target):
            # The generic differ keeps or creates it; a sequence the source already
            # relied on implicitly must not be created again.
            if source_uses and not self._declares_default_sequence(source):
                return [op for op in operations if not self._is_default_sequence_create(op)]
            return operations
        if self._declares_default_sequence(source):
            source_uses = False

        if not source_uses and target_uses:
            logger.info(
                "Adding default sequence %s",
                self.default_sequence.name,
                extra={"operation": "CREATE_SEQUENCE"},
            )
            return [*operations, *differ.add_sequence(self.default_sequence)]
        if source_uses and not target_uses:
            logger.info(
                "Removing default sequence %s",
                self.default_sequence.name,
                extra={"operation": "DROP_SEQUENCE"},
            )
            return [*operations, *differ.remove_sequence(self.default_sequence)]
        return operations

    def _declares_default_sequence(self, model: SchemaModel | None) -> bool:
        if model is None:
            return False
        sequence = self.default_sequence
        return model.find_sequence(sequence.name, sequence.schema_name) is not None

    def _is_default_sequence_create(self, operation: MigrationOperation) -> bool:
        return (
            isinstance(operation, CreateSequenceOperation)
            and operation.name == self.default_sequence.name
            and operation.schema_name == self.default_sequence.schema_name
        )

    # -- Properties ----------------------------------------------------------

    def diff_property(
        self,
        differ: RelationalModelDiffer,
        source: Property,
        target: Property,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        operations = list(operations)

        source_strategy = resolve_value_generation_strategy(source)
        target_strategy = resolve_value_generation_strategy(target)

        alter = _find_single(operations, AlterColumnOperation, "alter-column")
        if alter is None and (
            source.computed_expression != target.computed_expression or source_strategy != target_strategy
        ):
            logger.debug(
                "Column %s.%s needs alter-column (strategy %s -> %s)",
                source.entity_type.table,
                target.column,
                source_strategy,
                target_strategy,
            )
            alter = AlterColumnOperation(
                table=source.entity_type.table,
                schema_name=source.entity_type.schema_name,
                column=differ.column_model(target),
            )
            operations.append(alter)

        if alter is not None:
            self._stamp_column(alter.column, target, target_strategy)
        return operations

    def add_property(
        self,
        differ: RelationalModelDiffer,
        target: Property,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        add = _require_single(operations, AddColumnOperation, "add-column")
        self._stamp_column(add.column, target, resolve_value_generation_strategy(target))
        return operations

    def _stamp_column(
        self,
        column: ColumnModel,
        target: Property,
        strategy: ValueGenerationStrategy | None,
    ) -> None:
        if strategy == ValueGenerationStrategy.IDENTITY:
            column[self.annotation_key(NpgsqlAnnotationNames.VALUE_GENERATION)] = strategy.value
        if target.computed_expression is not None:
            column[self.annotation_key(NpgsqlAnnotationNames.COMPUTED_EXPRESSION)] = target.computed_expression

    # -- Keys ----------------------------------------------------------------

    def diff_key(
        self,
        differ: RelationalModelDiffer,
        source: Key | None,
        target: Key,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        operations = list(operations)

        add = _find_single(operations, KEY_ADD_OPERATIONS, "add-primary-key or add-unique-constraint")
        if add is None:
            source_clustered = source.is_clustered if source is not None else None
            if source_clustered != target.is_clustered:
                logger.debug(
                    "Key %s clustering changed (%s -> %s); recreating",
                    target.constraint_name,
                    source_clustered,
                    target.is_clustered,
                )
                if source is not None and not any(isinstance(op, KEY_DROP_OPERATIONS) for op in operations):
                    operations.extend(differ.remove_key(source))
                operations.extend(differ.add_key(target))
        elif target.is_clustered is not None:
            add[self.annotation_key(NpgsqlAnnotationNames.CLUSTERED)] = str(target.is_clustered)

        return operations

    def add_key(
        self,
        differ: RelationalModelDiffer,
        target: Key,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        add = _require_single(operations, KEY_ADD_OPERATIONS, "add-primary-key or add-unique-constraint")
        if target.is_clustered is not None:
            add[self.annotation_key(NpgsqlAnnotationNames.CLUSTERED)] = str(target.is_clustered)
        return operations

    # -- Indexes -------------------------------------------------------------

    def diff_index(
        self,
        differ: RelationalModelDiffer,
        source: Index,
        target: Index,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        operations = list(operations)

        create = _find_single(operations, CreateIndexOperation, "create-index")
        if create is None and source.is_clustered != target.is_clustered:
            logger.debug(
                "Index %s clustering changed (%s -> %s); recreating",
                target.index_name,
                source.is_clustered,
                target.is_clustered,
            )
            operations.extend(differ.remove_index(source))
            create = CreateIndexOperation(
                name=target.index_name,
                table=target.entity_type.table,
                schema_name=target.entity_type.schema_name,
                columns=target.columns,
                is_unique=target.is_unique,
            )
            operations.append(create)

        if create is not None and target.is_clustered is not None:
            create[self.annotation_key(NpgsqlAnnotationNames.CLUSTERED)] = str(target.is_clustered)
        return operations

    def add_index(
        self,
        differ: RelationalModelDiffer,
        target: Index,
        operations: list[MigrationOperation],
    ) -> list[MigrationOperation]:
        create = _require_single(operations, CreateIndexOperation, "create-index")
        if target.is_clustered is not None:
            create[self.annotation_key(NpgsqlAnnotationNames.CLUSTERED)] = str(target.is_clustered)

        if self._settings.legacy_index_add_annotation:
            return differ.base_add_index(target)
        return operations


class NpgsqlModelDiffer(RelationalModelDiffer):
    """Relational differ with the Npgsql overlay installed first.

    Parameters
    ----------
    settings:
        Differ settings shared by the overlay.  Loaded from the environment
        when ``None``.
    type_mapper:
        Store type resolution for column operations.
    extensions:
        Additional extensions, applied after the Npgsql overlay.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        type_mapper: TypeMapper | None = None,
        extensions: Sequence[DiffExtension] = (),
    ) -> None:
        self._npgsql = NpgsqlDiffExtension(settings)
        super().__init__(type_mapper=type_mapper, extensions=[self._npgsql, *extensions])

    @property
    def npgsql(self) -> NpgsqlDiffExtension:
        return self._npgsql
