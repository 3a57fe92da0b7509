"""Tests for the graph analysis engine."""

import math

import pytest

from conftest import chain_schema, make_table, FK, PK
from schemagraph.core.config import Settings
from schemagraph.core.events import ANALYSIS_COMPLETE, EventBus
from schemagraph.modules.analysis import ColumnAnalysis, SchemaAnalyzer, get_schema_analyzer
from schemagraph.modules.analysis.complexity import classify_complexity, find_cycles
from schemagraph.modules.analysis.connectivity import analyze_connectivity
from schemagraph.modules.analysis.grouping import GROUP_PALETTE, analyze_grouping, common_prefixes
from schemagraph.modules.analysis.quality import (
    assess_integrity,
    assess_normalization,
    classify_name,
    find_inheritance_groups,
    has_audit_columns,
    naming_consistency,
    quality_grade,
)
from schemagraph.modules.analysis.relationships import classify_relationship, relationship_complexity
from schemagraph.modules.analysis.tables import column_name_pattern
from schemagraph.modules.graph import build_schema_graph
from schemagraph.schemas.schema import RelationshipSchema, TableSchema


@pytest.fixture
def analyzer(settings):
    return SchemaAnalyzer(settings)


class TestUsersPostsScenario:
    def test_basic_statistics(self, analyzer, users_posts):
        basic = analyzer.analyze(users_posts).basic
        assert basic.total_tables == 2
        assert basic.total_columns == 4
        assert basic.total_relationships == 1
        assert basic.total_primary_keys == 2
        assert basic.total_foreign_keys == 1
        assert basic.avg_columns_per_table == 2.0
        assert basic.avg_relationships_per_table == 1.0

    def test_relationship_histogram(self, analyzer, users_posts):
        types = analyzer.analyze(users_posts).relationships.types
        assert types["one-to-many"] == 1
        assert sum(types[t] for t in ("one-to-one", "many-to-one", "many-to-many", "unknown")) == 0
        assert types["self-referencing"] == 0

    def test_connectivity(self, analyzer, users_posts):
        connectivity = analyzer.analyze(users_posts).connectivity
        assert connectivity.component_count == 1
        assert sorted(connectivity.components[0]) == ["posts", "users"]
        assert connectivity.isolated_tables == []
        assert connectivity.density == 1.0

    def test_table_complexity(self, analyzer, users_posts):
        metrics = analyzer.analyze(users_posts).tables.metrics
        # 0.5*2 + 1*1 + 1.5*1 + 2*1
        assert metrics["posts"].complexity == 5.5
        assert metrics["posts"].outgoing_relationships == 1
        assert metrics["users"].incoming_relationships == 1

    def test_quality_score(self, analyzer, users_posts):
        quality = analyzer.analyze(users_posts).quality
        # naming 15 + normalization 25 + integrity 20 + indexing 50%*0.15 + constraints 75%*0.25
        assert quality.overall_score == 86
        assert quality.grade == "B"
        assert quality.issues == []
        assert quality.recommendations == []

    def test_complexity(self, analyzer, users_posts):
        complexity = analyzer.analyze(users_posts).complexity
        assert complexity.cyclomatic == 1
        assert complexity.structural == 11
        assert complexity.cognitive == 1
        assert complexity.classification == "Low"

    def test_group_named_after_most_connected(self, analyzer, users_posts):
        groups = analyzer.analyze(users_posts).grouping.groups
        assert len(groups) == 1
        assert groups[0].name == "users Group"
        assert groups[0].color == GROUP_PALETTE[0]
        assert groups[0].relationship_count == 1


class TestIsolatedScenario:
    def test_three_singleton_groups(self, analyzer, isolated_three):
        result = analyzer.analyze(isolated_three)
        names = [g.name for g in result.grouping.groups]
        assert names == ["Isolated: alpha", "Isolated: beta", "Isolated: gamma"]
        assert result.grouping.singleton_count == 3
        assert result.connectivity.density == 0
        assert result.connectivity.isolated_tables == ["alpha", "beta", "gamma"]

    def test_colors_cycle_through_palette(self, settings):
        schema = {"tables": [{"name": f"t{i}"} for i in range(12)]}
        groups = SchemaAnalyzer(settings).analyze(schema).grouping.groups
        assert groups[0].color == GROUP_PALETTE[0]
        assert groups[10].color == GROUP_PALETTE[0]
        assert groups[11].color == GROUP_PALETTE[1]


class TestAnalyzer:
    def test_empty_schema(self, analyzer):
        result = analyzer.analyze({})
        assert result.basic.total_tables == 0
        assert result.connectivity.components == []
        assert result.grouping.groups == []
        assert result.quality.overall_score == 45
        assert result.complexity.cyclomatic == 1

    def test_none_schema(self, analyzer):
        assert analyzer.analyze(None).basic.total_tables == 0

    def test_idempotent(self, analyzer, blog_schema):
        first = analyzer.analyze(blog_schema)
        second = analyzer.analyze(blog_schema)
        assert first.to_dict(include_timestamp=False) == second.to_dict(include_timestamp=False)

    def test_keeps_last_result(self, analyzer, users_posts, isolated_three):
        assert analyzer.last_result is None
        analyzer.analyze(users_posts)
        latest = analyzer.analyze(isolated_three)
        assert analyzer.last_result is latest

    def test_result_is_frozen(self, analyzer, users_posts):
        result = analyzer.analyze(users_posts)
        with pytest.raises(AttributeError):
            result.timestamp = "now"

    def test_components_match_groups(self, analyzer, blog_schema):
        result = analyzer.analyze(blog_schema)
        assert result.connectivity.component_count == len(result.grouping.groups)
        members = [name for g in result.grouping.groups for name in g.tables]
        assert sorted(members) == sorted(t["name"] for t in blog_schema["tables"])

    def test_failing_sub_analysis_defaults(self, analyzer, users_posts, monkeypatch):
        def boom(graph):
            raise RuntimeError("broken")

        monkeypatch.setattr("schemagraph.modules.analysis.analyzer.analyze_columns", boom)
        result = analyzer.analyze(users_posts)
        assert result.columns == ColumnAnalysis()
        assert result.basic.total_tables == 2

    def test_emits_analysis_complete(self, settings, users_posts):
        bus = EventBus()
        received = []
        bus.on(ANALYSIS_COMPLETE, received.append)
        result = SchemaAnalyzer(settings, event_bus=bus).analyze(users_posts)
        assert received == [result]

    def test_dangling_counted_but_not_analyzed(self, analyzer):
        schema = {
            "tables": [{"name": "orders"}],
            "relationships": [{"fromTable": "orders", "toTable": "ghost"}],
        }
        result = analyzer.analyze(schema)
        assert result.basic.total_relationships == 1
        assert result.relationships.dangling_relationships == 1
        assert result.quality.integrity["score"] == 100
        assert len(result.quality.integrity["warnings"]) == 1


class TestRelationships:
    def test_classification(self):
        def rel(source, target):
            return RelationshipSchema(source_table="a", target_table="b",
                                      from_cardinality=source, to_cardinality=target)

        assert classify_relationship(rel("1", "1")) == "one-to-one"
        assert classify_relationship(rel("1", "*")) == "one-to-many"
        assert classify_relationship(rel("many", "1")) == "many-to-one"
        assert classify_relationship(rel("*", "many")) == "many-to-many"
        assert classify_relationship(rel("0..1", "1")) == "unknown"
        assert classify_relationship(rel(None, None)) == "one-to-one"

    def test_complexity_score(self):
        rel = RelationshipSchema(
            source_table="nodes", target_table="nodes",
            from_cardinality="many", to_cardinality="many",
            source_columns=["a", "b", "c"],
        )
        # 1 + 2 (many-to-many) + 1 (self) + 2 (3-column key)
        assert relationship_complexity(rel) == 6

    def test_blog_summary(self, analyzer, blog_schema):
        rels = analyzer.analyze(blog_schema).relationships
        assert rels.types["many-to-one"] == 5
        assert rels.unique_table_pairs == 5
        assert rels.most_connected_tables[0]["table"] == "posts"
        assert rels.min_complexity == 1


class TestTablesAndColumns:
    def test_junction_table(self, analyzer, blog_schema):
        tables = analyzer.analyze(blog_schema).tables
        assert tables.junction_tables == ["post_tags"]
        assert tables.tables_without_relationships == ["settings"]

    def test_composite_key(self, analyzer):
        schema = {"tables": [make_table("link", ("a", "INT", PK), ("b", "INT", PK))]}
        assert analyzer.analyze(schema).tables.composite_key_tables == ["link"]

    def test_column_patterns(self):
        assert column_name_pattern("user_id") == "id_pattern"
        assert column_name_pattern("is_active") == "boolean_pattern"
        assert column_name_pattern("created_at") == "timestamp_pattern"
        assert column_name_pattern("view_count") == "numeric_pattern"
        assert column_name_pattern("first_name") == "text_pattern"
        assert column_name_pattern("body") == "other"

    def test_column_analysis(self, analyzer, users_posts):
        columns = analyzer.analyze(users_posts).columns
        assert columns.data_type_distribution == {"int": 3, "varchar": 1}
        assert columns.most_common_type == "int"
        assert columns.constraint_counts["primary_key"] == 2
        assert columns.columns_with_constraints == 3


class TestConnectivity:
    def test_shortest_paths(self):
        schema = chain_schema(["a", "b", "c", "d"])
        schema["tables"].append(make_table("e", ("id", "INT", PK)))
        graph = build_schema_graph(schema)
        paths = analyze_connectivity(graph).shortest_paths
        assert paths["a"]["d"] == 3
        assert paths["a"]["e"] == math.inf
        names = graph.table_names
        for i in names:
            for j in names:
                assert paths[i][j] == paths[j][i]
                for k in names:
                    assert paths[i][k] <= paths[i][j] + paths[j][k]

    def test_diameter_and_average(self):
        graph = build_schema_graph(chain_schema(["a", "b", "c"]))
        connectivity = analyze_connectivity(graph)
        assert connectivity.diameter == 2
        # pairs: 1, 1, 2 in both directions
        assert connectivity.avg_path_length == pytest.approx(4 / 3)

    def test_clustering_triangle(self):
        schema = chain_schema(["a", "b", "c"])
        schema["relationships"].append({"fromTable": "c", "toTable": "a"})
        connectivity = analyze_connectivity(build_schema_graph(schema))
        assert connectivity.clustering_coefficients == {"a": 1.0, "b": 1.0, "c": 1.0}
        assert connectivity.avg_clustering_coefficient == 1.0
        assert connectivity.density == 1.0

    def test_hub_tables(self):
        schema = {
            "tables": [{"name": n} for n in ["hub", "l1", "l2", "l3", "l4"]],
            "relationships": [{"fromTable": leaf, "toTable": "hub"} for leaf in ["l1", "l2", "l3", "l4"]],
        }
        connectivity = analyze_connectivity(build_schema_graph(schema))
        assert connectivity.hub_tables == ["hub"]
        assert connectivity.centrality["hub"] == 4
        assert connectivity.avg_clustering_coefficient == 0.0

    def test_shortest_paths_skipped_above_limit(self):
        settings = Settings(ANALYSIS_SHORTEST_PATH_MAX_TABLES=2)
        result = SchemaAnalyzer(settings).analyze(chain_schema(["a", "b", "c"]))
        assert result.connectivity.shortest_paths_skipped is True
        assert result.connectivity.shortest_paths == {}
        assert result.connectivity.to_dict()["diameter"] is None

    def test_infinite_distance_exported_as_none(self, analyzer, isolated_three):
        data = analyzer.analyze(isolated_three).connectivity.to_dict()
        assert data["shortest_paths"]["alpha"]["beta"] is None
        assert data["shortest_paths"]["alpha"]["alpha"] == 0


class TestGrouping:
    def test_prefix_name(self):
        schema = {
            "tables": [{"name": "blog_posts"}, {"name": "blog_comments"}],
            "relationships": [{"fromTable": "blog_comments", "toTable": "blog_posts"}],
        }
        grouping = analyze_grouping(build_schema_graph(schema))
        assert grouping.groups[0].name == "Blog Module"

    def test_common_prefixes(self):
        assert common_prefixes(["shop_orders", "shop-items", "users"]) == ["shop"]
        assert common_prefixes(["orders"]) == []

    def test_group_lookup(self, analyzer, blog_schema):
        grouping = analyzer.analyze(blog_schema).grouping
        assert grouping.group_of("posts").id == grouping.group_of("tags").id
        assert grouping.group_of("settings").name == "Isolated: settings"
        assert grouping.group_of("missing") is None
        assert grouping.largest_group == 0


class TestQuality:
    def test_classify_name(self):
        assert classify_name("users") == "lowercase"
        assert classify_name("user_id") == "snake_case"
        assert classify_name("userId") == "camelCase"
        assert classify_name("UserAccount") == "PascalCase"
        assert classify_name("User_ID") == "mixed"

    def test_lowercase_compatible_with_snake_case(self):
        result = naming_consistency(["users", "order_items", "line_items"])
        assert result["dominant_pattern"] == "snake_case"
        assert result["consistency_score"] == 1.0

    def test_mixed_naming(self):
        result = naming_consistency(["userId", "UserAccount", "order_items", "line_items"])
        assert result["dominant_pattern"] == "snake_case"
        assert result["consistency_score"] == 0.5

    def test_normalization_penalties(self):
        schema = {"tables": [
            make_table("contacts", ("id", "INT", PK), ("phone1", "VARCHAR"), ("phone2", "VARCHAR")),
            make_table("enrollments", ("student", "INT", PK), ("course", "INT", PK),
                       ("a", "INT"), ("b", "INT"), ("c", "INT"), ("d", "INT"), ("e", "INT")),
        ]}
        result = assess_normalization(build_schema_graph(schema))
        assert result["score"] == 75
        assert result["level"] == "2NF"
        assert [v["type"] for v in result["violations"]] == ["1NF", "2NF"]

    def test_integrity_penalties(self):
        schema = {
            "tables": [{"name": "a"}, {"name": "b"}],
            "relationships": [
                {"fromTable": "a", "toTable": "b"},
                {"fromTable": "b", "toTable": "b", "fromCardinality": "many", "toCardinality": "1"},
            ],
        }
        result = assess_integrity(build_schema_graph(schema))
        assert result["score"] == 85
        assert result["level"] == "Medium"

    def test_grades(self):
        assert quality_grade(95) == "A"
        assert quality_grade(80) == "B"
        assert quality_grade(79) == "C"
        assert quality_grade(60) == "D"
        assert quality_grade(59) == "F"

    def test_design_patterns(self, analyzer, blog_schema):
        patterns = {p["type"]: p for p in analyzer.analyze(blog_schema).quality.design_patterns}
        assert patterns["Junction Table"]["tables"] == ["post_tags"]
        assert patterns["Audit Pattern"]["tables"] == ["users"]

    def test_audit_columns_snake_case(self):
        assert has_audit_columns(TableSchema.model_validate({"name": "t", "columns": [{"name": "updated_by"}]}))
        assert not has_audit_columns(TableSchema.model_validate({"name": "t", "columns": [{"name": "id"}]}))

    def test_inheritance_groups(self):
        columns = [("id", "INT", PK), ("name", "VARCHAR"), ("email", "VARCHAR")]
        schema = {"tables": [make_table("customers", *columns), make_table("suppliers", *columns),
                             make_table("orders", ("id", "INT", PK), ("total", "DECIMAL"))]}
        groups = find_inheritance_groups(build_schema_graph(schema))
        assert groups == [{"base_table": "customers", "derived_tables": ["suppliers"], "similarity": 1.0}]

    def test_inheritance_scan_skipped_above_limit(self):
        columns = [("id", "INT"), ("name", "VARCHAR")]
        schema = {"tables": [make_table("a", *columns), make_table("b", *columns)]}
        assert find_inheritance_groups(build_schema_graph(schema), 0.7, max_tables=1) == []

    def test_issues(self, analyzer):
        schema = {"tables": [
            make_table("logs", ("message", "TEXT")),
            make_table("orders", ("id", "INT", PK), ("customer_id", "INT", FK)),
            make_table("wide", ("id", "INT", PK), *[(f"col_{i}", "INT") for i in range(60)]),
        ]}
        issues = {i["type"]: i for i in analyzer.analyze(schema).quality.issues}
        assert issues["Missing Primary Keys"]["tables"] == ["logs"]
        assert issues["Orphaned Foreign Keys"]["details"][0]["column"] == "customer_id"
        assert issues["Large Tables"]["tables"] == [{"name": "wide", "columns": 61}]


class TestComplexity:
    def test_cycle_detection(self):
        schema = chain_schema(["a", "b", "c"])
        schema["relationships"].append({"fromTable": "c", "toTable": "a"})
        assert find_cycles(build_schema_graph(schema)) == [["a", "b", "c"]]

    def test_self_reference_is_cycle(self, analyzer):
        schema = {
            "tables": [make_table("employees", ("id", "INT", PK), ("manager_id", "INT", FK))],
            "relationships": [{"fromTable": "employees", "toTable": "employees", "fromColumn": "manager_id"}],
        }
        complexity = analyzer.analyze(schema).complexity
        assert complexity.cycles == [["employees"]]
        assert complexity.cyclomatic == 2
        # one-to-one (missing cardinality) 1 + self-reference 2
        assert complexity.cognitive == 3

    def test_acyclic(self, analyzer, blog_schema):
        assert analyzer.analyze(blog_schema).complexity.cyclomatic == 1

    def test_classification_buckets(self):
        assert classify_complexity(49) == "Low"
        assert classify_complexity(50) == "Medium"
        assert classify_complexity(150) == "High"
        assert classify_complexity(300) == "Very High"


def test_schema_analyzer_singleton():
    assert get_schema_analyzer() is get_schema_analyzer()
