"""Unit tests for migration_engine.differ.npgsql."""

from __future__ import annotations

import threading

import pytest

from migration_engine.config import Settings
from migration_engine.differ.npgsql import (
    NpgsqlAnnotationNames,
    NpgsqlDiffExtension,
    NpgsqlModelDiffer,
    resolve_value_generation_strategy,
    uses_default_sequence,
)
from migration_engine.errors import DiffInvariantError
from migration_engine.models.operations import (
    AddColumnOperation,
    AddPrimaryKeyOperation,
    AddUniqueConstraintOperation,
    AlterColumnOperation,
    CreateIndexOperation,
    CreateSequenceOperation,
    CreateTableOperation,
    DropIndexOperation,
    DropPrimaryKeyOperation,
    DropSequenceOperation,
    DropTableOperation,
    DropUniqueConstraintOperation,
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

VALUE_GENERATION = "Npgsql:ValueGeneration"
COMPUTED_EXPRESSION = "Npgsql:ColumnComputedExpression"
CLUSTERED = "Npgsql:Clustered"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _differ(**settings_overrides) -> NpgsqlModelDiffer:
    return NpgsqlModelDiffer(settings=Settings(**settings_overrides))


def _id_property(**overrides) -> Property:
    fields = {
        "name": "id",
        "property_type": "int",
        "nullable": False,
        "generate_value_on_add": True,
    }
    fields.update(overrides)
    return Property(**fields)


def _blog_model(
    *,
    id_property: Property | None = None,
    extra_properties: list[Property] | None = None,
    primary_key: Key | None = None,
    unique_constraints: list[Key] | None = None,
    indexes: list[Index] | None = None,
    **model_fields,
) -> SchemaModel:
    properties = [
        id_property or _id_property(),
        Property(name="title", property_type="string", column_name="blog_title"),
        *(extra_properties or []),
    ]
    return SchemaModel(
        entity_types=[
            EntityType(
                name="Blog",
                table_name="blogs",
                schema_name="public",
                properties=properties,
                primary_key=primary_key or Key(property_names=["id"]),
                unique_constraints=unique_constraints or [],
                indexes=indexes or [],
            )
        ],
        **model_fields,
    )


def _property(model: SchemaModel, name: str) -> Property:
    return model.find_entity_type("Blog").find_property(name)


def _of_type(operations, op_type):
    return [op for op in operations if isinstance(op, op_type)]


# ---------------------------------------------------------------------------
# Value-generation strategy resolution
# ---------------------------------------------------------------------------


class TestResolveValueGenerationStrategy:
    def test_integer_primary_key_infers_identity(self):
        model = _blog_model()
        assert resolve_value_generation_strategy(_property(model, "id")) == ValueGenerationStrategy.IDENTITY

    def test_long_primary_key_infers_identity(self):
        model = _blog_model(id_property=_id_property(property_type="long"))
        assert resolve_value_generation_strategy(_property(model, "id")) == ValueGenerationStrategy.IDENTITY

    def test_no_inference_without_generate_on_add(self):
        model = _blog_model(id_property=_id_property(generate_value_on_add=False))
        assert resolve_value_generation_strategy(_property(model, "id")) is None

    def test_no_inference_for_non_integer_key(self):
        model = _blog_model(id_property=_id_property(property_type="guid"))
        assert resolve_value_generation_strategy(_property(model, "id")) is None

    def test_no_inference_outside_primary_key(self):
        model = _blog_model(
            extra_properties=[Property(name="counter", property_type="int", generate_value_on_add=True)]
        )
        assert resolve_value_generation_strategy(_property(model, "counter")) is None

    def test_model_strategy_applies(self):
        model = _blog_model(value_generation_strategy=ValueGenerationStrategy.SEQUENCE)
        assert resolve_value_generation_strategy(_property(model, "id")) == ValueGenerationStrategy.SEQUENCE
        assert resolve_value_generation_strategy(_property(model, "title")) == ValueGenerationStrategy.SEQUENCE

    def test_property_strategy_overrides_model(self):
        model = _blog_model(
            id_property=_id_property(value_generation_strategy=ValueGenerationStrategy.IDENTITY),
            value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
        )
        assert resolve_value_generation_strategy(_property(model, "id")) == ValueGenerationStrategy.IDENTITY


# ---------------------------------------------------------------------------
# Model-level diff: default sequence
# ---------------------------------------------------------------------------


class TestUsesDefaultSequence:
    def test_none_model(self):
        assert uses_default_sequence(None) is False

    def test_identity_model(self):
        assert uses_default_sequence(_blog_model()) is False

    def test_model_wide_sequence(self):
        assert uses_default_sequence(_blog_model(value_generation_strategy=ValueGenerationStrategy.SEQUENCE))

    def test_property_sequence_without_name(self):
        model = _blog_model(id_property=_id_property(value_generation_strategy=ValueGenerationStrategy.SEQUENCE))
        assert uses_default_sequence(model)

    def test_property_sequence_with_explicit_name(self):
        model = _blog_model(
            id_property=_id_property(
                value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
                sequence_name="blog_ids",
            )
        )
        assert uses_default_sequence(model) is False

    def test_explicit_default_sequence_name(self):
        model = _blog_model(
            value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
            default_sequence_name="shared_ids",
        )
        assert uses_default_sequence(model) is False


class TestModelDiffDefaultSequence:
    def _sequence_model(self) -> SchemaModel:
        return _blog_model(id_property=_id_property(value_generation_strategy=ValueGenerationStrategy.SEQUENCE))

    def test_adds_sequence_when_target_starts_using_it(self):
        operations = _differ().diff(_blog_model(), self._sequence_model())
        created = _of_type(operations, CreateSequenceOperation)
        assert len(created) == 1
        assert operations[-1] is created[0]
        assert created[0].name == "DefaultSequence"
        assert created[0].start_value == 1
        assert created[0].increment_by == 10
        assert _of_type(operations, DropSequenceOperation) == []

    def test_removes_sequence_when_target_stops_using_it(self):
        operations = _differ().diff(self._sequence_model(), _blog_model())
        dropped = _of_type(operations, DropSequenceOperation)
        assert len(dropped) == 1
        assert operations[-1] is dropped[0]
        assert dropped[0].name == "DefaultSequence"
        assert _of_type(operations, CreateSequenceOperation) == []

    def test_no_sequence_operation_when_both_use_it(self):
        operations = _differ().diff(self._sequence_model(), self._sequence_model())
        assert operations == []

    def test_create_from_empty(self):
        operations = _differ().diff(None, self._sequence_model())
        assert isinstance(operations[0], CreateTableOperation)
        assert isinstance(operations[-1], CreateSequenceOperation)

    def test_drop_everything(self):
        operations = _differ().diff(self._sequence_model(), None)
        assert isinstance(operations[0], DropTableOperation)
        assert isinstance(operations[-1], DropSequenceOperation)

    def test_model_wide_switch_to_sequence(self):
        target = _blog_model(value_generation_strategy=ValueGenerationStrategy.SEQUENCE)
        operations = _differ().diff(_blog_model(), target)
        assert len(_of_type(operations, CreateSequenceOperation)) == 1

    def test_settings_shape_the_sequence(self):
        differ = _differ(default_sequence_name="hilo", default_sequence_schema="ids", default_sequence_increment=5)
        operations = differ.diff(None, self._sequence_model())
        created = _of_type(operations, CreateSequenceOperation)[0]
        assert created.name == "hilo"
        assert created.schema_name == "ids"
        assert created.increment_by == 5

    def test_switch_to_identity_alters_column(self):
        operations = _differ().diff(self._sequence_model(), _blog_model())
        alters = _of_type(operations, AlterColumnOperation)
        assert len(alters) == 1
        assert alters[0].column[VALUE_GENERATION] == "Identity"

    def test_declared_default_sequence_created_once(self):
        target = _blog_model(
            value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
            sequences=[SequenceDefinition(name="DefaultSequence", increment_by=10)],
        )
        operations = _differ().diff(_blog_model(), target)
        created = _of_type(operations, CreateSequenceOperation)
        assert len(created) == 1
        assert created[0].name == "DefaultSequence"

    def test_declared_default_sequence_dropped_once(self):
        source = _blog_model(
            value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
            sequences=[SequenceDefinition(name="DefaultSequence", increment_by=10)],
        )
        operations = _differ().diff(source, _blog_model())
        assert len(_of_type(operations, DropSequenceOperation)) == 1
        assert _of_type(operations, CreateSequenceOperation) == []

    def test_declaring_an_implicit_sequence_does_not_recreate_it(self):
        target = _blog_model(
            id_property=_id_property(value_generation_strategy=ValueGenerationStrategy.SEQUENCE),
            sequences=[SequenceDefinition(name="DefaultSequence", increment_by=10)],
        )
        operations = _differ().diff(self._sequence_model(), target)
        assert _of_type(operations, CreateSequenceOperation) == []
        assert _of_type(operations, DropSequenceOperation) == []

    def test_undeclaring_a_used_sequence_recreates_it(self):
        source = _blog_model(
            value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
            sequences=[SequenceDefinition(name="DefaultSequence", start_value=500)],
        )
        target = _blog_model(value_generation_strategy=ValueGenerationStrategy.SEQUENCE)
        operations = _differ().diff(source, target)
        dropped = _of_type(operations, DropSequenceOperation)
        created = _of_type(operations, CreateSequenceOperation)
        assert len(dropped) == 1
        assert len(created) == 1
        assert operations.index(dropped[0]) < operations.index(created[0])
        assert created[0].start_value == 1

    def test_sequence_with_other_schema_is_not_the_default(self):
        target = _blog_model(
            value_generation_strategy=ValueGenerationStrategy.SEQUENCE,
            sequences=[SequenceDefinition(name="DefaultSequence", schema_name="ids")],
        )
        operations = _differ().diff(_blog_model(), target)
        created = _of_type(operations, CreateSequenceOperation)
        assert [(op.schema_name, op.name) for op in created] == [("ids", "DefaultSequence"), (None, "DefaultSequence")]


class TestDefaultSequenceDescriptor:
    def test_built_once(self):
        extension = NpgsqlDiffExtension(Settings())
        assert extension.default_sequence is extension.default_sequence

    def test_reused_across_diffs(self):
        differ = _differ()
        sequence_model = _blog_model(value_generation_strategy=ValueGenerationStrategy.SEQUENCE)
        first = differ.diff(None, sequence_model)
        second = differ.diff(None, sequence_model)
        assert _of_type(first, CreateSequenceOperation)[0] == _of_type(second, CreateSequenceOperation)[0]

    def test_concurrent_first_access(self):
        extension = NpgsqlDiffExtension(Settings())
        seen: list[int] = []
        barrier = threading.Barrier(8)

        def _read():
            barrier.wait()
            seen.append(id(extension.default_sequence))

        threads = [threading.Thread(target=_read) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(seen) == 8
        assert len(set(seen)) == 1


# ---------------------------------------------------------------------------
# Property-level diff
# ---------------------------------------------------------------------------


class TestPropertyDiff:
    def _total(self, expression: str | None, **overrides) -> Property:
        return Property(name="total", property_type="decimal", computed_expression=expression, **overrides)

    def test_computed_expression_change_emits_single_alter(self):
        source = _blog_model(extra_properties=[self._total("price * qty")])
        target = _blog_model(extra_properties=[self._total("price * qty * 1.2")])
        operations = _differ().diff(source, target)
        assert len(operations) == 1
        alter = operations[0]
        assert isinstance(alter, AlterColumnOperation)
        assert alter.table == "blogs"
        assert alter.schema_name == "public"
        assert alter.column.name == "total"
        assert alter.column.store_type == "numeric"
        assert alter.column[COMPUTED_EXPRESSION] == "price * qty * 1.2"
        assert VALUE_GENERATION not in alter.column

    def test_computed_expression_removed_alters_without_annotation(self):
        source = _blog_model(extra_properties=[self._total("price * qty")])
        target = _blog_model(extra_properties=[self._total(None)])
        operations = _differ().diff(source, target)
        assert len(operations) == 1
        assert operations[0].column.annotations == {}

    def test_existing_alter_is_reused(self):
        source = _blog_model(extra_properties=[self._total("price * qty")])
        target = _blog_model(extra_properties=[self._total("price * qty * 2", nullable=False)])
        operations = _differ().diff(source, target)
        alters = _of_type(operations, AlterColumnOperation)
        assert len(alters) == 1
        assert alters[0].column.nullable is False
        assert alters[0].column[COMPUTED_EXPRESSION] == "price * qty * 2"

    def test_unchanged_computed_column_produces_nothing(self):
        model = _blog_model(extra_properties=[self._total("price * qty")])
        assert _differ().diff(model, model) == []

    def test_identity_inferred_on_alter(self):
        source = _blog_model(id_property=_id_property(generate_value_on_add=False))
        target = _blog_model()
        operations = _differ().diff(source, target)
        assert len(operations) == 1
        assert operations[0].column[VALUE_GENERATION] == "Identity"

    def test_identity_stamped_on_baseline_alter(self):
        source = _blog_model(id_property=_id_property(nullable=True))
        target = _blog_model()
        operations = _differ().diff(source, target)
        assert len(operations) == 1
        assert operations[0].column[VALUE_GENERATION] == "Identity"

    def test_strategy_change_to_none_alters_without_annotation(self):
        source = _blog_model()
        target = _blog_model(id_property=_id_property(generate_value_on_add=False))
        operations = _differ().diff(source, target)
        assert len(operations) == 1
        assert VALUE_GENERATION not in operations[0].column

    def test_direct_hook_returns_superset(self):
        differ = _differ()
        source = _blog_model(extra_properties=[self._total("a")])
        target = _blog_model(extra_properties=[self._total("b")])
        baseline = differ.base_diff_property(_property(source, "total"), _property(target, "total"))
        assert baseline == []
        operations = differ.diff_property(_property(source, "total"), _property(target, "total"))
        assert len(operations) == 1

    def test_duplicate_alter_is_invariant_violation(self):
        differ = _differ()
        model = _blog_model()
        prop = _property(model, "title")
        column = differ.column_model(prop)
        duplicates = [
            AlterColumnOperation(table="blogs", column=column),
            AlterColumnOperation(table="blogs", column=column),
        ]
        with pytest.raises(DiffInvariantError) as exc_info:
            differ.npgsql.diff_property(differ, prop, prop, duplicates)
        assert exc_info.value.found == 2


class TestPropertyAdd:
    def test_identity_inferred_on_add(self):
        source = SchemaModel(
            entity_types=[
                EntityType(
                    name="Blog",
                    table_name="blogs",
                    schema_name="public",
                    properties=[Property(name="title", property_type="string", column_name="blog_title")],
                )
            ]
        )
        operations = _differ().diff(source, _blog_model())
        added = _of_type(operations, AddColumnOperation)
        assert len(added) == 1
        assert added[0].column.name == "id"
        assert added[0].column[VALUE_GENERATION] == "Identity"
        assert len(_of_type(operations, AddPrimaryKeyOperation)) == 1

    def test_computed_expression_on_add(self):
        target = _blog_model(
            extra_properties=[Property(name="slug", property_type="string", computed_expression="lower(blog_title)")]
        )
        operations = _differ().diff(_blog_model(), target)
        assert len(operations) == 1
        assert operations[0].column[COMPUTED_EXPRESSION] == "lower(blog_title)"
        assert VALUE_GENERATION not in operations[0].column

    def test_sequence_strategy_is_not_stamped(self):
        target = _blog_model(id_property=_id_property(value_generation_strategy=ValueGenerationStrategy.SEQUENCE))
        operations = _differ().diff(None, target)
        table = _of_type(operations, CreateTableOperation)[0]
        assert VALUE_GENERATION not in table.columns[0]

    def test_new_table_columns_carry_annotations(self):
        operations = _differ().diff(None, _blog_model())
        table = _of_type(operations, CreateTableOperation)[0]
        assert table.columns[0].name == "id"
        assert table.columns[0][VALUE_GENERATION] == "Identity"
        assert table.columns[1].annotations == {}

    def test_missing_add_column_is_invariant_violation(self):
        differ = _differ()
        prop = _property(_blog_model(), "id")
        with pytest.raises(DiffInvariantError) as exc_info:
            differ.npgsql.add_property(differ, prop, [])
        assert exc_info.value.found == 0


# ---------------------------------------------------------------------------
# Key-level diff
# ---------------------------------------------------------------------------


class TestKeyDiff:
    def test_primary_key_clustering_change_recreates(self):
        source = _blog_model(primary_key=Key(property_names=["id"]))
        target = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True))
        operations = _differ().diff(source, target)
        assert [type(op) for op in operations] == [DropPrimaryKeyOperation, AddPrimaryKeyOperation]
        assert operations[0].name == "PK_blogs"
        assert operations[1].columns == ["id"]
        assert operations[1][CLUSTERED] == "True"

    def test_unique_constraint_clustering_change_recreates(self):
        source = _blog_model(unique_constraints=[Key(name="AK_title", property_names=["title"], is_clustered=True)])
        target = _blog_model(unique_constraints=[Key(name="AK_title", property_names=["title"], is_clustered=False)])
        operations = _differ().diff(source, target)
        assert [type(op) for op in operations] == [DropUniqueConstraintOperation, AddUniqueConstraintOperation]
        assert operations[1].columns == ["blog_title"]
        assert operations[1][CLUSTERED] == "False"

    def test_clustering_removed_recreates_without_annotation(self):
        source = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True))
        target = _blog_model(primary_key=Key(property_names=["id"]))
        operations = _differ().diff(source, target)
        assert [type(op) for op in operations] == [DropPrimaryKeyOperation, AddPrimaryKeyOperation]
        assert CLUSTERED not in operations[1]

    def test_baseline_add_is_annotated_in_place(self):
        tenant = Property(name="tenant", property_type="int", nullable=False)
        source = _blog_model(extra_properties=[tenant], primary_key=Key(property_names=["id"]))
        target = _blog_model(
            extra_properties=[tenant],
            primary_key=Key(property_names=["id", "tenant"], is_clustered=False),
        )
        operations = _differ().diff(source, target)
        assert len(_of_type(operations, DropPrimaryKeyOperation)) == 1
        added = _of_type(operations, AddPrimaryKeyOperation)
        assert len(added) == 1
        assert added[0].columns == ["id", "tenant"]
        assert added[0][CLUSTERED] == "False"

    def test_unchanged_clustering_produces_nothing(self):
        model = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True))
        assert _differ().diff(model, model) == []

    def test_existing_drop_is_not_duplicated(self):
        differ = _differ()
        source = _blog_model().find_entity_type("Blog").primary_key
        target = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True))
        target_key = target.find_entity_type("Blog").primary_key
        existing = [DropPrimaryKeyOperation(name="PK_blogs", table="blogs", schema_name="public")]
        operations = differ.npgsql.diff_key(differ, source, target_key, existing)
        assert [type(op) for op in operations] == [DropPrimaryKeyOperation, AddPrimaryKeyOperation]

    def test_missing_source_only_adds(self):
        differ = _differ()
        target = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True))
        target_key = target.find_entity_type("Blog").primary_key
        operations = differ.diff_key(None, target_key)
        assert len(operations) == 1
        assert isinstance(operations[0], AddPrimaryKeyOperation)
        assert operations[0][CLUSTERED] == "True"

    def test_new_table_key_is_annotated(self):
        target = _blog_model(
            primary_key=Key(property_names=["id"], is_clustered=True),
            unique_constraints=[Key(property_names=["title"], is_clustered=False)],
        )
        table = _of_type(_differ().diff(None, target), CreateTableOperation)[0]
        assert table.primary_key[CLUSTERED] == "True"
        assert table.unique_constraints[0].name == "AK_blogs_blog_title"
        assert table.unique_constraints[0][CLUSTERED] == "False"

    def test_add_without_add_operation_is_invariant_violation(self):
        differ = _differ()
        key = _blog_model().find_entity_type("Blog").primary_key
        with pytest.raises(DiffInvariantError):
            differ.npgsql.add_key(differ, key, [])


# ---------------------------------------------------------------------------
# Index-level diff
# ---------------------------------------------------------------------------


class TestIndexDiff:
    def test_clustering_change_rebuilds_index(self):
        source = _blog_model(indexes=[Index(name="IX_blog", property_names=["title", "id"], is_unique=True)])
        target = _blog_model(
            indexes=[Index(name="IX_blog", property_names=["title", "id"], is_unique=True, is_clustered=True)]
        )
        operations = _differ().diff(source, target)
        assert [type(op) for op in operations] == [DropIndexOperation, CreateIndexOperation]
        assert operations[0].name == "IX_blog"
        create = operations[1]
        assert create.name == "IX_blog"
        assert create.table == "blogs"
        assert create.schema_name == "public"
        assert create.columns == ["blog_title", "id"]
        assert create.is_unique is True
        assert create[CLUSTERED] == "True"

    def test_clustering_cleared_rebuilds_without_annotation(self):
        source = _blog_model(indexes=[Index(property_names=["title"], is_clustered=True)])
        target = _blog_model(indexes=[Index(property_names=["title"])])
        operations = _differ().diff(source, target)
        assert [type(op) for op in operations] == [DropIndexOperation, CreateIndexOperation]
        assert operations[1].name == "IX_blogs_blog_title"
        assert CLUSTERED not in operations[1]

    def test_baseline_create_is_annotated(self):
        source = _blog_model(indexes=[Index(name="IX_blog", property_names=["title"])])
        target = _blog_model(indexes=[Index(name="IX_blog", property_names=["title"], is_unique=True, is_clustered=False)])
        operations = _differ().diff(source, target)
        creates = _of_type(operations, CreateIndexOperation)
        assert len(_of_type(operations, DropIndexOperation)) == 1
        assert len(creates) == 1
        assert creates[0].is_unique is True
        assert creates[0][CLUSTERED] == "False"

    def test_unchanged_index_produces_nothing(self):
        model = _blog_model(indexes=[Index(property_names=["title"], is_clustered=True)])
        assert _differ().diff(model, model) == []

    def test_added_index_is_annotated(self):
        target = _blog_model(indexes=[Index(property_names=["title"], is_clustered=True)])
        operations = _differ().diff(_blog_model(), target)
        assert len(operations) == 1
        assert operations[0][CLUSTERED] == "True"

    def test_legacy_add_discards_annotation(self):
        target = _blog_model(indexes=[Index(property_names=["title"], is_clustered=True)])
        operations = _differ(legacy_index_add_annotation=True).diff(_blog_model(), target)
        assert len(operations) == 1
        assert isinstance(operations[0], CreateIndexOperation)
        assert CLUSTERED not in operations[0]


# ---------------------------------------------------------------------------
# Annotations and idempotence
# ---------------------------------------------------------------------------


class TestAnnotations:
    def test_custom_prefix(self):
        target = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True))
        operations = _differ(annotation_prefix="Pg:").diff(_blog_model(), target)
        assert operations[1]["Pg:" + NpgsqlAnnotationNames.CLUSTERED] == "True"
        assert CLUSTERED not in operations[1]

    def test_restamping_overwrites(self):
        differ = _differ()
        key = _blog_model(primary_key=Key(property_names=["id"], is_clustered=True)).find_entity_type("Blog").primary_key
        add = AddPrimaryKeyOperation(name="PK_blogs", table="blogs", columns=["id"], annotations={CLUSTERED: "False"})
        differ.npgsql.add_key(differ, key, [add])
        assert add.annotations == {CLUSTERED: "True"}


class TestIdempotence:
    def test_full_model_against_itself(self):
        model = _blog_model(
            id_property=_id_property(value_generation_strategy=ValueGenerationStrategy.SEQUENCE),
            extra_properties=[Property(name="total", property_type="decimal", computed_expression="1 + 1")],
            primary_key=Key(property_names=["id"], is_clustered=True),
            unique_constraints=[Key(property_names=["title"], is_clustered=False)],
            indexes=[Index(property_names=["total", "title"], is_clustered=True)],
        )
        assert _differ().diff(model, model) == []

    def test_empty_against_empty(self):
        assert _differ().diff(None, None) == []
