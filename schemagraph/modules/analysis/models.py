"""
功能：分析引擎 - 数据模型定义
说明：
    每个子分析对应一个 dataclass，无参构造即为该子分析的"空结果"，
    子分析失败时分析器用它代替，保证 analyze 不会整体中断。
    AnalysisResult 为不可变快照，每次 analyze 生成一个新对象。
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


@dataclass
class BasicStatistics:
    """基础统计"""
    total_tables: int = 0
    total_columns: int = 0
    total_relationships: int = 0
    total_primary_keys: int = 0
    total_foreign_keys: int = 0
    avg_columns_per_table: float = 0.0
    avg_relationships_per_table: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tables": self.total_tables,
            "total_columns": self.total_columns,
            "total_relationships": self.total_relationships,
            "total_primary_keys": self.total_primary_keys,
            "total_foreign_keys": self.total_foreign_keys,
            "avg_columns_per_table": self.avg_columns_per_table,
            "avg_relationships_per_table": self.avg_relationships_per_table,
        }


@dataclass
class RelationshipAnalysis:
    """关系分类与关系复杂度"""
    types: Dict[str, int] = field(default_factory=dict)  # 含 self-referencing 计数
    unique_table_pairs: int = 0
    avg_connections_per_table: float = 0.0
    most_connected_tables: List[Dict[str, Any]] = field(default_factory=list)
    complexity_scores: List[int] = field(default_factory=list)
    avg_complexity: float = 0.0
    max_complexity: int = 0
    min_complexity: int = 0
    dangling_relationships: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": dict(self.types),
            "unique_table_pairs": self.unique_table_pairs,
            "avg_connections_per_table": self.avg_connections_per_table,
            "most_connected_tables": list(self.most_connected_tables),
            "complexity": {
                "scores": list(self.complexity_scores),
                "average": self.avg_complexity,
                "max": self.max_complexity,
                "min": self.min_complexity,
            },
            "dangling_relationships": self.dangling_relationships,
        }


@dataclass
class TableMetric:
    """单表指标"""
    name: str
    column_count: int = 0
    primary_key_count: int = 0
    foreign_key_count: int = 0
    required_column_count: int = 0
    incoming_relationships: int = 0
    outgoing_relationships: int = 0
    total_relationships: int = 0
    complexity: float = 0.0
    is_junction_table: bool = False
    has_composite_key: bool = False
    data_types: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "column_count": self.column_count,
            "primary_key_count": self.primary_key_count,
            "foreign_key_count": self.foreign_key_count,
            "required_column_count": self.required_column_count,
            "relationships": {
                "incoming": self.incoming_relationships,
                "outgoing": self.outgoing_relationships,
                "total": self.total_relationships,
            },
            "complexity": self.complexity,
            "is_junction_table": self.is_junction_table,
            "has_composite_key": self.has_composite_key,
            "data_types": dict(self.data_types),
        }


@dataclass
class TableAnalysis:
    """表级指标汇总"""
    metrics: Dict[str, TableMetric] = field(default_factory=dict)
    most_complex: List[str] = field(default_factory=list)
    most_connected: List[str] = field(default_factory=list)
    largest: List[str] = field(default_factory=list)
    tables_without_relationships: List[str] = field(default_factory=list)
    junction_tables: List[str] = field(default_factory=list)
    composite_key_tables: List[str] = field(default_factory=list)
    avg_complexity: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
            "rankings": {
                "most_complex": list(self.most_complex),
                "most_connected": list(self.most_connected),
                "largest": list(self.largest),
            },
            "tables_without_relationships": list(self.tables_without_relationships),
            "junction_tables": list(self.junction_tables),
            "composite_key_tables": list(self.composite_key_tables),
            "avg_complexity": self.avg_complexity,
        }


@dataclass
class ColumnAnalysis:
    """列级指标"""
    data_type_distribution: Dict[str, int] = field(default_factory=dict)
    name_patterns: Dict[str, int] = field(default_factory=dict)
    constraint_counts: Dict[str, int] = field(default_factory=dict)
    most_common_type: str = ""
    columns_with_constraints: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_type_distribution": dict(self.data_type_distribution),
            "name_patterns": dict(self.name_patterns),
            "constraint_counts": dict(self.constraint_counts),
            "most_common_type": self.most_common_type,
            "columns_with_constraints": self.columns_with_constraints,
        }


@dataclass
class ConnectivityAnalysis:
    """
    连通性指标

    shortest_paths[a][b] 为跳数，不可达为 math.inf；
    表数量超过上限时不计算，shortest_paths 为空且 shortest_paths_skipped 为 True。
    """
    components: List[List[str]] = field(default_factory=list)
    centrality: Dict[str, int] = field(default_factory=dict)
    clustering_coefficients: Dict[str, float] = field(default_factory=dict)
    avg_clustering_coefficient: float = 0.0
    density: float = 0.0
    shortest_paths: Dict[str, Dict[str, float]] = field(default_factory=dict)
    shortest_paths_skipped: bool = False
    diameter: Optional[float] = None
    avg_path_length: Optional[float] = None
    hub_tables: List[str] = field(default_factory=list)
    isolated_tables: List[str] = field(default_factory=list)

    @property
    def component_count(self) -> int:
        return len(self.components)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connected_components": [list(c) for c in self.components],
            "component_count": self.component_count,
            "centrality": dict(self.centrality),
            "clustering_coefficients": dict(self.clustering_coefficients),
            "avg_clustering_coefficient": self.avg_clustering_coefficient,
            "density": self.density,
            "shortest_paths": {
                a: {b: _finite_or_none(d) for b, d in row.items()}
                for a, row in self.shortest_paths.items()
            },
            "shortest_paths_skipped": self.shortest_paths_skipped,
            "diameter": _finite_or_none(self.diameter),
            "avg_path_length": _finite_or_none(self.avg_path_length),
            "hub_tables": list(self.hub_tables),
            "isolated_tables": list(self.isolated_tables),
        }


@dataclass
class TableGroup:
    """表分组（一个连通分量）"""
    id: int
    name: str
    color: str
    tables: List[str] = field(default_factory=list)
    relationship_count: int = 0

    @property
    def size(self) -> int:
        return len(self.tables)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "tables": list(self.tables),
            "size": self.size,
            "relationship_count": self.relationship_count,
        }


@dataclass
class GroupingAnalysis:
    groups: List[TableGroup] = field(default_factory=list)
    table_to_group: Dict[str, int] = field(default_factory=dict)
    largest_group: Optional[int] = None
    avg_group_size: float = 0.0
    singleton_count: int = 0

    def group_of(self, table_name: str) -> Optional[TableGroup]:
        group_id = self.table_to_group.get(table_name)
        if group_id is None:
            return None
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groups": [g.to_dict() for g in self.groups],
            "table_to_group": dict(self.table_to_group),
            "largest_group": self.largest_group,
            "avg_group_size": self.avg_group_size,
            "singleton_count": self.singleton_count,
        }


@dataclass
class QualityAssessment:
    """
    质量评估

    各子项保持原始结构（dict），overall_score 为 0-100 的加权分。
    """
    naming: Dict[str, Any] = field(default_factory=dict)
    normalization: Dict[str, Any] = field(default_factory=dict)
    integrity: Dict[str, Any] = field(default_factory=dict)
    indexing: Dict[str, Any] = field(default_factory=dict)
    constraints: Dict[str, Any] = field(default_factory=dict)
    design_patterns: List[Dict[str, Any]] = field(default_factory=list)
    issues: List[Dict[str, Any]] = field(default_factory=list)
    overall_score: int = 0
    grade: str = "F"
    recommendations: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "naming": self.naming,
            "normalization": self.normalization,
            "integrity": self.integrity,
            "indexing": self.indexing,
            "constraints": self.constraints,
            "design_patterns": list(self.design_patterns),
            "issues": list(self.issues),
            "overall_score": self.overall_score,
            "grade": self.grade,
            "recommendations": list(self.recommendations),
        }


@dataclass
class ComplexityMetrics:
    cyclomatic: int = 1
    structural: int = 0
    cognitive: int = 0
    cycles: List[List[str]] = field(default_factory=list)
    inheritance_depth: int = 0
    overall: float = 0.0
    classification: str = "Low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cyclomatic": self.cyclomatic,
            "structural": self.structural,
            "cognitive": self.cognitive,
            "cycles": [list(c) for c in self.cycles],
            "inheritance_depth": self.inheritance_depth,
            "overall": self.overall,
            "classification": self.classification,
        }


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class AnalysisResult:
    """一次 analyze 调用的完整快照"""
    basic: BasicStatistics = field(default_factory=BasicStatistics)
    relationships: RelationshipAnalysis = field(default_factory=RelationshipAnalysis)
    tables: TableAnalysis = field(default_factory=TableAnalysis)
    columns: ColumnAnalysis = field(default_factory=ColumnAnalysis)
    connectivity: ConnectivityAnalysis = field(default_factory=ConnectivityAnalysis)
    grouping: GroupingAnalysis = field(default_factory=GroupingAnalysis)
    quality: QualityAssessment = field(default_factory=QualityAssessment)
    complexity: ComplexityMetrics = field(default_factory=ComplexityMetrics)
    timestamp: str = field(default_factory=_utc_now)

    def to_dict(self, include_timestamp: bool = True) -> Dict[str, Any]:
        data = {
            "basic": self.basic.to_dict(),
            "relationships": self.relationships.to_dict(),
            "tables": self.tables.to_dict(),
            "columns": self.columns.to_dict(),
            "connectivity": self.connectivity.to_dict(),
            "grouping": self.grouping.to_dict(),
            "quality": self.quality.to_dict(),
            "complexity": self.complexity.to_dict(),
        }
        if include_timestamp:
            data["timestamp"] = self.timestamp
        return data
