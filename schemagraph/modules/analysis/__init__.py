"""
图分析引擎模块 (Analysis Module)

计算连通性、分组、质量评分与复杂度指标。
"""
from schemagraph.modules.analysis.analyzer import SchemaAnalyzer, get_schema_analyzer
from schemagraph.modules.analysis.models import (
    AnalysisResult,
    BasicStatistics,
    ColumnAnalysis,
    ComplexityMetrics,
    ConnectivityAnalysis,
    GroupingAnalysis,
    QualityAssessment,
    RelationshipAnalysis,
    TableAnalysis,
    TableGroup,
    TableMetric,
)

__all__ = [
    "SchemaAnalyzer",
    "get_schema_analyzer",
    "AnalysisResult",
    "BasicStatistics",
    "ColumnAnalysis",
    "ComplexityMetrics",
    "ConnectivityAnalysis",
    "GroupingAnalysis",
    "QualityAssessment",
    "RelationshipAnalysis",
    "TableAnalysis",
    "TableGroup",
    "TableMetric",
]
