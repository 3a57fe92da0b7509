"""Tests for schema input models and load_schema."""

from schemagraph.schemas.schema import (
    ColumnSchema,
    RelationshipSchema,
    SchemaMetadata,
    TableSchema,
    load_schema,
)


class TestColumnSchema:
    def test_camel_case_aliases(self):
        column = ColumnSchema.model_validate(
            {"name": "id", "type": "INT", "isPrimary": True, "notNull": True}
        )
        assert column.data_type == "INT"
        assert column.is_primary_key is True
        assert column.is_required is True

    def test_shorthand_string(self):
        column = ColumnSchema.model_validate("email VARCHAR(255) NOT NULL UNIQUE")
        assert column.name == "email"
        assert column.data_type == "VARCHAR(255)"
        assert column.required is True
        assert column.unique is True
        assert column.is_primary_key is False

    def test_constraint_keywords_set_flags(self):
        column = ColumnSchema(name="user_id", constraints=["REFERENCES users(id)", "INDEX"])
        assert column.is_foreign_key is True
        assert column.indexed is True

    def test_none_flags_become_false(self):
        column = ColumnSchema.model_validate({"name": "x", "isPrimary": None, "unique": None})
        assert column.is_primary_key is False
        assert column.unique is False

    def test_nullable_false_is_required(self):
        column = ColumnSchema(name="x", nullable=False)
        assert column.is_required
        assert column.has_constraint

    def test_plain_column_has_no_constraint(self):
        assert not ColumnSchema(name="note", data_type="TEXT").has_constraint


class TestRelationshipSchema:
    def test_from_to_objects(self):
        rel = RelationshipSchema.model_validate(
            {"from": {"table": "posts", "column": "user_id"}, "to": {"table": "users", "column": "id"}}
        )
        assert rel.source_table == "posts"
        assert rel.target_table == "users"
        assert rel.key_columns == ["user_id"]
        assert rel.referenced_columns == ["id"]

    def test_relation_type_supplies_cardinality(self):
        rel = RelationshipSchema.model_validate(
            {"sourceTable": "posts", "targetTable": "users", "relationType": "MANY_TO_ONE"}
        )
        assert rel.from_cardinality == "many"
        assert rel.to_cardinality == "1"
        assert rel.has_cardinality

    def test_explicit_cardinality_wins(self):
        rel = RelationshipSchema.model_validate(
            {"fromTable": "a", "toTable": "b", "fromCardinality": "1", "relation_type": "MANY_TO_MANY"}
        )
        assert rel.from_cardinality == "1"
        assert rel.to_cardinality is None
        assert not rel.has_cardinality

    def test_composite_columns_from_string(self):
        rel = RelationshipSchema(source_table="a", target_table="b", source_columns="x, y")
        assert rel.key_columns == ["x", "y"]

    def test_self_reference(self):
        rel = RelationshipSchema(source_table="employees", target_table="employees")
        assert rel.is_self_referencing
        assert rel.label == "employees -> employees"


class TestLoadSchema:
    def test_none_is_empty(self):
        schema = load_schema(None)
        assert schema.tables == []
        assert schema.relationships == []

    def test_missing_arrays_are_empty(self):
        schema = load_schema({})
        assert schema.tables == []
        assert schema.relationships == []

    def test_non_list_tables_ignored(self):
        assert load_schema({"tables": "oops"}).tables == []

    def test_metadata_passes_through(self):
        metadata = SchemaMetadata(tables=[TableSchema(name="users")])
        assert load_schema(metadata) is metadata

    def test_invalid_and_duplicate_tables_dropped(self):
        schema = load_schema({
            "tables": [
                {"name": "users"},
                {"columns": []},
                {"name": "  "},
                {"name": "users", "columns": [{"name": "dup"}]},
            ]
        })
        assert schema.table_names == ["users"]
        assert schema.tables[0].columns == []

    def test_relationship_without_target_dropped(self):
        schema = load_schema({
            "tables": [{"name": "a"}],
            "relationships": [{"fromTable": "a"}, {"fromTable": "a", "toTable": "a"}],
        })
        assert len(schema.relationships) == 1

    def test_table_relationships_are_hoisted(self):
        schema = load_schema({
            "tables": [
                {"name": "posts", "relationships": [{"targetTable": "users", "sourceColumn": "user_id"}]},
                {"name": "users"},
            ]
        })
        assert len(schema.relationships) == 1
        assert schema.relationships[0].source_table == "posts"
        assert schema.get_table("posts").relationships == []

    def test_columns_none(self):
        schema = load_schema({"tables": [{"name": "t", "columns": None}]})
        assert schema.tables[0].columns == []

    def test_numeric_column_name_keeps_table(self):
        schema = load_schema({
            "tables": [
                {"name": "sales", "columns": [{"name": 2020, "type": "INT"}, {"name": "region"}]},
                {"name": "other"},
            ]
        })
        assert schema.table_names == ["sales", "other"]
        assert [c.name for c in schema.get_table("sales").columns] == ["2020", "region"]

    def test_nameless_column_keeps_table(self):
        schema = load_schema({"tables": [{"name": "t1", "columns": [{"type": "INT"}]}, {"name": "t2"}]})
        assert schema.table_names == ["t1", "t2"]
        assert schema.get_table("t1").columns[0].name == ""
        assert schema.get_table("t1").columns[0].data_type == "INT"

    def test_invalid_column_dropped_alone(self):
        schema = load_schema({"tables": [{"name": "t", "columns": [42, {"name": "id", "isPrimary": True}]}]})
        assert schema.table_names == ["t"]
        assert [c.name for c in schema.tables[0].columns] == ["id"]

    def test_non_list_columns_keep_table(self):
        schema = load_schema({"tables": [{"name": "t", "columns": "oops"}]})
        assert schema.table_names == ["t"]
        assert schema.tables[0].columns == []
