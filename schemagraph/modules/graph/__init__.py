"""
图模型模块 (Graph Module)

提供表关系图的构建与可视化数据导出。
"""
from schemagraph.modules.graph.model import SchemaGraph, build_schema_graph
from schemagraph.modules.graph.schemas import (
    GraphNode,
    GraphEdge,
    GraphVisualizationData,
    build_visualization_data,
)

__all__ = [
    "SchemaGraph",
    "build_schema_graph",
    "GraphNode",
    "GraphEdge",
    "GraphVisualizationData",
    "build_visualization_data",
]
