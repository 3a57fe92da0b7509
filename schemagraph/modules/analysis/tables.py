"""
功能：基础统计、表级指标与列级指标
说明：
    - 基础统计：表/列/关系/主键/外键数量及平均值
    - 表级指标：入/出/总关系数、表复杂度、中间表判定、复合主键
    - 列级指标：数据类型分布、列名语义模式、约束计数
"""
from collections import Counter
from typing import Dict, List

from schemagraph.modules.analysis.models import BasicStatistics, ColumnAnalysis, TableAnalysis, TableMetric
from schemagraph.modules.graph.model import SchemaGraph
from schemagraph.schemas.schema import ColumnSchema, TableSchema

RANKING_LIMIT = 10

# 表复杂度权重
COLUMN_WEIGHT = 0.5
PRIMARY_KEY_WEIGHT = 1.0
FOREIGN_KEY_WEIGHT = 1.5
RELATIONSHIP_WEIGHT = 2.0
CONSTRAINED_COLUMN_WEIGHT = 0.5


def analyze_basic_statistics(graph: SchemaGraph) -> BasicStatistics:
    tables = list(graph.tables.values())
    table_count = len(tables)
    total_columns = sum(len(t.columns) for t in tables)
    # 引用了未知表的关系也计入总数，其余分析只使用图中保留的关系
    total_relationships = len(graph.relationships) + len(graph.dangling_relationships)

    return BasicStatistics(
        total_tables=table_count,
        total_columns=total_columns,
        total_relationships=total_relationships,
        total_primary_keys=sum(len(t.primary_keys) for t in tables),
        total_foreign_keys=sum(len(t.foreign_keys) for t in tables),
        avg_columns_per_table=total_columns / table_count if table_count else 0.0,
        # 每条关系连接两张表
        avg_relationships_per_table=2 * total_relationships / table_count if table_count else 0.0,
    )


def table_complexity(table: TableSchema, relationship_count: int) -> float:
    columns = table.columns
    constrained = sum(1 for c in columns if c.unique or c.has_check)
    score = (
        len(columns) * COLUMN_WEIGHT
        + len(table.primary_keys) * PRIMARY_KEY_WEIGHT
        + len(table.foreign_keys) * FOREIGN_KEY_WEIGHT
        + relationship_count * RELATIONSHIP_WEIGHT
        + constrained * CONSTRAINED_COLUMN_WEIGHT
    )
    return round(score, 1)


def is_junction_table(table: TableSchema, relationship_count: int) -> bool:
    """至少 2 个外键、外键占全部列的一半以上、且参与至少 2 条关系"""
    columns = table.columns
    foreign_keys = len(table.foreign_keys)
    if foreign_keys < 2 or not columns:
        return False
    return foreign_keys / len(columns) >= 0.5 and relationship_count >= 2


def analyze_tables(graph: SchemaGraph) -> TableAnalysis:
    metrics: Dict[str, TableMetric] = {}
    for name, table in graph.tables.items():
        incoming = sum(1 for r in graph.relationships if r.target_table == name)
        outgoing = sum(1 for r in graph.relationships if r.source_table == name)
        total = len(graph.relationships_of(name))

        metrics[name] = TableMetric(
            name=name,
            column_count=len(table.columns),
            primary_key_count=len(table.primary_keys),
            foreign_key_count=len(table.foreign_keys),
            required_column_count=sum(1 for c in table.columns if c.is_required),
            incoming_relationships=incoming,
            outgoing_relationships=outgoing,
            total_relationships=total,
            complexity=table_complexity(table, total),
            is_junction_table=is_junction_table(table, total),
            has_composite_key=len(table.primary_keys) > 1,
            data_types=dict(Counter(_type_key(c) for c in table.columns)),
        )

    values = list(metrics.values())

    def ranking(key) -> List[str]:
        return [m.name for m in sorted(values, key=key)[:RANKING_LIMIT]]

    return TableAnalysis(
        metrics=metrics,
        most_complex=ranking(lambda m: -m.complexity),
        most_connected=ranking(lambda m: -m.total_relationships),
        largest=ranking(lambda m: -m.column_count),
        tables_without_relationships=[m.name for m in values if m.total_relationships == 0],
        junction_tables=[m.name for m in values if m.is_junction_table],
        composite_key_tables=[m.name for m in values if m.has_composite_key],
        avg_complexity=round(sum(m.complexity for m in values) / len(values), 2) if values else 0.0,
    )


def _type_key(column: ColumnSchema) -> str:
    return column.data_type.strip().lower() or "unknown"


def column_name_pattern(name: str) -> str:
    """按列名推断语义模式"""
    if not name:
        return "unknown"
    lowered = name.lower()
    if lowered.endswith("id"):
        return "id_pattern"
    if lowered.startswith("is_") or lowered.startswith("has_"):
        return "boolean_pattern"
    if any(token in lowered for token in ("_at", "_date", "_time")):
        return "timestamp_pattern"
    if any(token in lowered for token in ("_count", "_number", "_qty")):
        return "numeric_pattern"
    if any(token in lowered for token in ("_name", "_title", "_desc")):
        return "text_pattern"
    return "other"


def analyze_columns(graph: SchemaGraph) -> ColumnAnalysis:
    types: Counter = Counter()
    patterns: Counter = Counter()
    constraints = {"primary_key": 0, "foreign_key": 0, "unique": 0, "not_null": 0, "check": 0}
    constrained = 0

    for table in graph.tables.values():
        for column in table.columns:
            types[_type_key(column)] += 1
            patterns[column_name_pattern(column.name)] += 1

            if column.is_primary_key:
                constraints["primary_key"] += 1
            if column.is_foreign_key:
                constraints["foreign_key"] += 1
            if column.unique:
                constraints["unique"] += 1
            if column.is_required:
                constraints["not_null"] += 1
            if column.has_check:
                constraints["check"] += 1
            if column.has_constraint:
                constrained += 1

    most_common = types.most_common(1)
    return ColumnAnalysis(
        data_type_distribution=dict(types),
        name_patterns=dict(patterns),
        constraint_counts=constraints,
        most_common_type=most_common[0][0] if most_common else "",
        columns_with_constraints=constrained,
    )
