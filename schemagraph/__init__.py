"""
Schema Graph Engine

表关系图的布局引擎与分析引擎。
"""
from schemagraph.modules.analysis import AnalysisResult, SchemaAnalyzer
from schemagraph.modules.graph import SchemaGraph, build_schema_graph
from schemagraph.modules.layout import LayoutEngine, LayoutResult, TablePosition
from schemagraph.modules.report import AnalysisNotAvailableError, SchemaQualityReporter
from schemagraph.schemas import SchemaMetadata, load_schema

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "SchemaAnalyzer",
    "SchemaGraph",
    "build_schema_graph",
    "LayoutEngine",
    "LayoutResult",
    "TablePosition",
    "AnalysisNotAvailableError",
    "SchemaQualityReporter",
    "SchemaMetadata",
    "load_schema",
]
