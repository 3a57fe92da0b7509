"""
功能：Schema 质量评估
说明：
    子项评分：
    1. 命名一致性   表名/列名分类为 camelCase / snake_case / PascalCase / lowercase / mixed，
                   取主导风格所占比例（0-1）；全小写单词与 snake_case、camelCase 均兼容
    2. 范式         从 100 分扣减：列名以数字结尾（疑似重复组，1NF）每表 -10，
                   复合主键且非键列超过主键列 2 倍（疑似部分依赖，2NF）每表 -15
    3. 关系完整性   从 100 分扣减：缺少基数 -5，自引用未指定列 -10
    4. 索引覆盖率   被索引或为主键的列所占百分比
    5. 约束覆盖率   带任一约束（PK/FK/UNIQUE/NOT NULL/CHECK）的列所占百分比

    总分 = 命名×100×0.15 + 范式×0.25 + 完整性×0.20 + 索引×0.15 + 约束×0.25，
    A/B/C/D/F 分界为 90/80/70/60。
"""
import logging
import math
import re
from typing import Any, Dict, List, Optional

from schemagraph.modules.analysis.models import QualityAssessment
from schemagraph.modules.analysis.tables import is_junction_table
from schemagraph.modules.graph.model import SchemaGraph
from schemagraph.schemas.schema import TableSchema

logger = logging.getLogger(__name__)

QUALITY_WEIGHTS = {
    "naming": 0.15,
    "normalization": 0.25,
    "integrity": 0.20,
    "indexing": 0.15,
    "constraints": 0.25,
}

GRADE_THRESHOLDS = (("A", 90), ("B", 80), ("C", 70), ("D", 60))

NAMING_PATTERNS = ("camelCase", "snake_case", "PascalCase", "lowercase", "mixed")

_LOWERCASE = re.compile(r"^[a-z][a-z0-9]*$")
_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)+$")
_CAMEL_CASE = re.compile(r"^[a-z][a-z0-9]*([A-Z][a-z0-9]*)+$")
_PASCAL_CASE = re.compile(r"^[A-Z][a-z0-9]*([A-Z][a-z0-9]*)*$")
_NUMERIC_SUFFIX = re.compile(r"\d$")

FIRST_NF_PENALTY = 10
SECOND_NF_PENALTY = 15
MISSING_CARDINALITY_PENALTY = 5
SELF_REFERENCE_PENALTY = 10

AUDIT_COLUMNS = ("createdat", "updatedat", "createdby", "updatedby", "version")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ============================================================================
# 命名一致性
# ============================================================================

def classify_name(name: str) -> str:
    if _LOWERCASE.match(name):
        return "lowercase"
    if _SNAKE_CASE.match(name):
        return "snake_case"
    if _CAMEL_CASE.match(name):
        return "camelCase"
    if _PASCAL_CASE.match(name):
        return "PascalCase"
    return "mixed"


def naming_consistency(names: List[str]) -> Dict[str, Any]:
    patterns = {p: 0 for p in NAMING_PATTERNS}
    for name in names:
        patterns[classify_name(name)] += 1

    total = len(names)
    if total == 0:
        return {"patterns": patterns, "dominant_pattern": None, "consistency_score": 0.0}

    dominant = max(NAMING_PATTERNS, key=lambda p: patterns[p])
    consistent = patterns[dominant]
    if dominant in ("snake_case", "camelCase"):
        consistent += patterns["lowercase"]
    elif dominant == "lowercase":
        consistent += max(patterns["snake_case"], patterns["camelCase"])

    return {
        "patterns": patterns,
        "dominant_pattern": dominant,
        "consistency_score": consistent / total,
    }


def assess_naming(graph: SchemaGraph) -> Dict[str, Any]:
    table_naming = naming_consistency(list(graph.tables))
    column_naming = naming_consistency([c.name for t in graph.tables.values() for c in t.columns])

    if column_naming["dominant_pattern"] is None:
        score = table_naming["consistency_score"]
    else:
        score = (table_naming["consistency_score"] + column_naming["consistency_score"]) / 2
    return {
        "table_naming": table_naming,
        "column_naming": column_naming,
        "consistency_score": score,
    }


# ============================================================================
# 范式 / 关系完整性
# ============================================================================

def _normalization_level(score: int) -> str:
    if score >= 90:
        return "3NF+"
    if score >= 70:
        return "2NF"
    if score >= 50:
        return "1NF"
    return "Below 1NF"


def assess_normalization(graph: SchemaGraph) -> Dict[str, Any]:
    violations = []
    score = 100
    for table in graph.tables.values():
        suspicious = [c.name for c in table.columns if _NUMERIC_SUFFIX.search(c.name)]
        if suspicious:
            violations.append({
                "table": table.name,
                "type": "1NF",
                "description": "Potential repeating groups detected",
                "columns": suspicious,
            })
            score -= FIRST_NF_PENALTY

        key_count = len(table.primary_keys)
        if key_count > 1:
            non_key = len(table.columns) - key_count
            if non_key > key_count * 2:
                violations.append({
                    "table": table.name,
                    "type": "2NF",
                    "description": "Potential partial dependencies with composite key",
                })
                score -= SECOND_NF_PENALTY

    score = max(0, score)
    return {"score": score, "violations": violations, "level": _normalization_level(score)}


def assess_integrity(graph: SchemaGraph) -> Dict[str, Any]:
    issues = []
    score = 100
    for rel in graph.relationships:
        if not rel.has_cardinality:
            issues.append({
                "type": "missing_cardinality",
                "relationship": rel.label,
                "description": "Cardinality not specified",
            })
            score -= MISSING_CARDINALITY_PENALTY
        if rel.is_self_referencing and not rel.key_columns:
            issues.append({
                "type": "self_reference",
                "relationship": rel.label,
                "description": "Self-referencing relationship without clear column mapping",
            })
            score -= SELF_REFERENCE_PENALTY

    # 引用未知表的关系只提示，不扣分
    warnings = [
        {
            "type": "dangling_relationship",
            "relationship": rel.label,
            "description": "Relationship references a table that is not in the schema",
        }
        for rel in graph.dangling_relationships
    ]

    score = max(0, score)
    if score >= 90:
        level = "High"
    elif score >= 70:
        level = "Medium"
    else:
        level = "Low"
    return {"score": score, "issues": issues, "warnings": warnings, "level": level}


# ============================================================================
# 索引 / 约束
# ============================================================================

def assess_indexing(graph: SchemaGraph) -> Dict[str, Any]:
    total = 0
    indexed = 0
    fk_without_index = 0
    for table in graph.tables.values():
        for column in table.columns:
            total += 1
            if column.indexed or column.is_primary_key:
                indexed += 1
            if column.is_foreign_key and not column.indexed:
                fk_without_index += 1

    coverage = indexed / total * 100 if total else 0.0
    if coverage < 20:
        recommendation = "Consider adding more indexes"
    elif coverage > 80:
        recommendation = "Indexing looks comprehensive"
    else:
        recommendation = "Moderate indexing coverage"

    return {
        "coverage": coverage,
        "total_columns": total,
        "indexed_columns": indexed,
        "foreign_keys_without_index": fk_without_index,
        "recommendation": recommendation,
    }


def assess_constraints(graph: SchemaGraph) -> Dict[str, Any]:
    total = 0
    constrained = 0
    types = {"primary_key": 0, "foreign_key": 0, "unique": 0, "not_null": 0, "check": 0}
    for table in graph.tables.values():
        for column in table.columns:
            total += 1
            types["primary_key"] += column.is_primary_key
            types["foreign_key"] += column.is_foreign_key
            types["unique"] += column.unique
            types["not_null"] += column.is_required
            types["check"] += column.has_check
            if column.has_constraint:
                constrained += 1

    coverage = constrained / total * 100 if total else 0.0
    if coverage >= 60:
        level = "High"
    elif coverage >= 30:
        level = "Medium"
    else:
        level = "Low"
    return {
        "coverage": coverage,
        "total_columns": total,
        "constrained_columns": constrained,
        "constraint_types": types,
        "level": level,
    }


# ============================================================================
# 设计模式
# ============================================================================

def table_similarity(a: TableSchema, b: TableSchema) -> float:
    """两表列名集合的 Jaccard 相似度（忽略大小写）"""
    cols_a = {c.name.lower() for c in a.columns}
    cols_b = {c.name.lower() for c in b.columns}
    union = cols_a | cols_b
    if not union:
        return 0.0
    return len(cols_a & cols_b) / len(union)


def find_inheritance_groups(
    graph: SchemaGraph,
    threshold: float = 0.7,
    max_tables: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    找出列结构相似（Jaccard >= threshold）的表组，疑似继承/子类型

    每张表最多属于一个组；表数量超过 max_tables 时跳过扫描。
    """
    if max_tables is not None and graph.node_count > max_tables:
        logger.warning(
            f"[find_inheritance_groups] {graph.node_count} tables exceed {max_tables}, similarity scan skipped"
        )
        return []

    tables = list(graph.tables.values())
    processed = set()
    groups = []
    for table in tables:
        if table.name in processed:
            continue
        similar = [
            other for other in tables
            if other.name != table.name
            and other.name not in processed
            and table_similarity(table, other) >= threshold
        ]
        if not similar:
            continue

        members = [table] + similar
        pairs = [
            table_similarity(members[i], members[j])
            for i in range(len(members)) for j in range(i + 1, len(members))
        ]
        groups.append({
            "base_table": table.name,
            "derived_tables": [t.name for t in similar],
            "similarity": sum(pairs) / len(pairs),
        })
        processed.update(t.name for t in members)
    return groups


def has_audit_columns(table: TableSchema) -> bool:
    names = [c.name.lower().replace("_", "") for c in table.columns]
    return any(audit in name for audit in AUDIT_COLUMNS for name in names)


def identify_design_patterns(
    graph: SchemaGraph,
    inheritance_groups: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    patterns = []

    junction = [
        name for name, table in graph.tables.items()
        if is_junction_table(table, len(graph.relationships_of(name)))
    ]
    if junction:
        patterns.append({
            "type": "Junction Table",
            "count": len(junction),
            "tables": junction,
            "description": "Tables that resolve many-to-many relationships",
        })

    if inheritance_groups:
        patterns.append({
            "type": "Inheritance/Subtyping",
            "count": len(inheritance_groups),
            "groups": inheritance_groups,
            "description": "Tables with similar column structures suggesting inheritance",
        })

    audit = [name for name, table in graph.tables.items() if has_audit_columns(table)]
    if audit:
        patterns.append({
            "type": "Audit Pattern",
            "count": len(audit),
            "tables": audit,
            "description": "Tables with audit/timestamp columns",
        })
    return patterns


# ============================================================================
# 潜在问题
# ============================================================================

def find_orphaned_foreign_keys(graph: SchemaGraph) -> List[Dict[str, str]]:
    """标记为外键、但没有任何关系记录引用的列"""
    referenced = set()
    for rel in list(graph.relationships) + list(graph.dangling_relationships):
        for column in rel.key_columns:
            referenced.add((rel.source_table, column))
        for column in rel.referenced_columns:
            referenced.add((rel.target_table, column))

    orphaned = []
    for table in graph.tables.values():
        for column in table.foreign_keys:
            if (table.name, column.name) not in referenced:
                orphaned.append({"table": table.name, "column": column.name, "type": column.data_type})
    return orphaned


def identify_issues(graph: SchemaGraph, large_table_columns: int = 50) -> List[Dict[str, Any]]:
    issues = []

    without_pk = [name for name, table in graph.tables.items() if not table.primary_keys]
    if without_pk:
        issues.append({
            "type": "Missing Primary Keys",
            "severity": "High",
            "count": len(without_pk),
            "tables": without_pk,
            "description": "Tables without primary keys can cause data integrity issues",
        })

    orphaned = find_orphaned_foreign_keys(graph)
    if orphaned:
        issues.append({
            "type": "Orphaned Foreign Keys",
            "severity": "Medium",
            "count": len(orphaned),
            "details": orphaned,
            "description": "Foreign key columns without corresponding relationships",
        })

    large = [
        {"name": name, "columns": len(table.columns)}
        for name, table in graph.tables.items()
        if len(table.columns) > large_table_columns
    ]
    if large:
        issues.append({
            "type": "Large Tables",
            "severity": "Low",
            "count": len(large),
            "tables": large,
            "description": "Tables with many columns may indicate normalization opportunities",
        })
    return issues


# ============================================================================
# 汇总
# ============================================================================

def overall_quality_score(
    naming_score: float,
    normalization_score: float,
    integrity_score: float,
    indexing_coverage: float,
    constraint_coverage: float,
) -> int:
    total = (
        naming_score * 100 * QUALITY_WEIGHTS["naming"]
        + normalization_score * QUALITY_WEIGHTS["normalization"]
        + integrity_score * QUALITY_WEIGHTS["integrity"]
        + indexing_coverage * QUALITY_WEIGHTS["indexing"]
        + constraint_coverage * QUALITY_WEIGHTS["constraints"]
    )
    return _round_half_up(total)


def quality_grade(score: float) -> str:
    for grade, threshold in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def generate_recommendations(
    naming: Dict[str, Any],
    normalization: Dict[str, Any],
    integrity: Dict[str, Any],
    indexing: Dict[str, Any],
    constraints: Dict[str, Any],
) -> List[Dict[str, str]]:
    recommendations = []
    if naming["consistency_score"] < 0.8:
        recommendations.append({
            "type": "Naming Consistency",
            "priority": "Medium",
            "description": "Standardize naming conventions across tables and columns",
        })
    if normalization["score"] < 70:
        recommendations.append({
            "type": "Normalization",
            "priority": "High",
            "description": "Review table structure for normalization opportunities",
        })
    if integrity["score"] < 70:
        recommendations.append({
            "type": "Relationship Integrity",
            "priority": "Medium",
            "description": "Specify cardinality and explicit columns for relationships",
        })
    if indexing["coverage"] < 30:
        recommendations.append({
            "type": "Indexing",
            "priority": "High",
            "description": "Add indexes to foreign keys and frequently queried columns",
        })
    if constraints["coverage"] < 40:
        recommendations.append({
            "type": "Constraints",
            "priority": "Medium",
            "description": "Add appropriate constraints to ensure data integrity",
        })
    return recommendations


def assess_quality(
    graph: SchemaGraph,
    inheritance_groups: Optional[List[Dict[str, Any]]] = None,
    large_table_columns: int = 50,
) -> QualityAssessment:
    naming = assess_naming(graph)
    normalization = assess_normalization(graph)
    integrity = assess_integrity(graph)
    indexing = assess_indexing(graph)
    constraints = assess_constraints(graph)

    score = overall_quality_score(
        naming["consistency_score"],
        normalization["score"],
        integrity["score"],
        indexing["coverage"],
        constraints["coverage"],
    )
    return QualityAssessment(
        naming=naming,
        normalization=normalization,
        integrity=integrity,
        indexing=indexing,
        constraints=constraints,
        design_patterns=identify_design_patterns(graph, inheritance_groups or []),
        issues=identify_issues(graph, large_table_columns),
        overall_score=score,
        grade=quality_grade(score),
        recommendations=generate_recommendations(naming, normalization, integrity, indexing, constraints),
    )
