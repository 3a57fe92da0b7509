"""
功能：关系分类与关系复杂度分析
说明：
    按基数对 (from, to) 把每条关系归为 one-to-one / one-to-many / many-to-one /
    many-to-many / unknown，自引用单独计数（与基数分类不互斥）。
    缺失的基数按 "1" 处理。
"""
from typing import Dict, Optional

from schemagraph.modules.analysis.models import RelationshipAnalysis
from schemagraph.modules.graph.model import SchemaGraph
from schemagraph.schemas.schema import RelationshipSchema

ONE_TO_ONE = "one-to-one"
ONE_TO_MANY = "one-to-many"
MANY_TO_ONE = "many-to-one"
MANY_TO_MANY = "many-to-many"
UNKNOWN = "unknown"
SELF_REFERENCING = "self-referencing"

RELATIONSHIP_TYPES = (ONE_TO_ONE, ONE_TO_MANY, MANY_TO_ONE, MANY_TO_MANY, UNKNOWN)

_ONE_TOKENS = {"1", "one"}
_MANY_TOKENS = {"many", "*", "n", "m"}

MOST_CONNECTED_LIMIT = 5


def _normalize_cardinality(value: Optional[str]) -> str:
    token = (value or "1").strip().lower()
    if token in _ONE_TOKENS:
        return "1"
    if token in _MANY_TOKENS:
        return "many"
    return token


def classify_relationship(rel: RelationshipSchema) -> str:
    source = _normalize_cardinality(rel.from_cardinality)
    target = _normalize_cardinality(rel.to_cardinality)
    if source == "1" and target == "1":
        return ONE_TO_ONE
    if source == "1" and target == "many":
        return ONE_TO_MANY
    if source == "many" and target == "1":
        return MANY_TO_ONE
    if source == "many" and target == "many":
        return MANY_TO_MANY
    return UNKNOWN


def relationship_complexity(rel: RelationshipSchema) -> int:
    """基础 1；多对多 +2；自引用 +1；k 列复合键 +(k-1)"""
    score = 1
    if classify_relationship(rel) == MANY_TO_MANY:
        score += 2
    if rel.is_self_referencing:
        score += 1
    key_size = len(rel.key_columns)
    if key_size > 1:
        score += key_size - 1
    return score


def analyze_relationships(graph: SchemaGraph) -> RelationshipAnalysis:
    types: Dict[str, int] = {t: 0 for t in RELATIONSHIP_TYPES}
    types[SELF_REFERENCING] = 0

    pairs = set()
    scores = []
    for rel in graph.relationships:
        types[classify_relationship(rel)] += 1
        if rel.is_self_referencing:
            types[SELF_REFERENCING] += 1
        pairs.add(tuple(sorted((rel.source_table, rel.target_table))))
        scores.append(relationship_complexity(rel))

    table_count = max(graph.node_count, 1)
    total_connections = sum(graph.degree(name) for name in graph.tables)

    ranked = sorted(graph.tables, key=lambda name: -graph.degree(name))
    most_connected = [
        {"table": name, "connections": graph.degree(name)}
        for name in ranked[:MOST_CONNECTED_LIMIT]
    ]

    return RelationshipAnalysis(
        types=types,
        unique_table_pairs=len(pairs),
        avg_connections_per_table=total_connections / table_count,
        most_connected_tables=most_connected,
        complexity_scores=scores,
        avg_complexity=sum(scores) / len(scores) if scores else 0.0,
        max_complexity=max(scores) if scores else 0,
        min_complexity=min(scores) if scores else 0,
        dangling_relationships=len(graph.dangling_relationships),
    )
