from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

from schemagraph.modules.graph.model import SchemaGraph


class GraphNode(BaseModel):
    id: str
    label: str = "Table"
    properties: Dict[str, Any] = Field(default_factory=dict)


class GraphEdge(BaseModel):
    id: str
    source: str
    target: str
    type: str = Field("REFERENCES", description="Relationship type, e.g. REFERENCES, SELF_REFERENCES")
    properties: Dict[str, Any] = Field(default_factory=dict)


class GraphVisualizationData(BaseModel):
    """渲染层消费的节点/边结构"""
    nodes: List[GraphNode]
    edges: List[GraphEdge]


def build_visualization_data(graph: SchemaGraph, positions: Optional[Dict[str, Dict[str, Any]]] = None) -> GraphVisualizationData:
    """
    把 SchemaGraph 转为前端可视化数据

    Args:
        graph: 表关系图
        positions: 可选的 {table_name: {"x", "y", "width", "height", "zIndex"}}，通常由 LayoutResult.to_render_records() 按表名索引得到
    """
    positions = positions or {}
    nodes = []
    for name, table in graph.tables.items():
        props: Dict[str, Any] = {
            "name": name,
            "column_count": len(table.columns),
            "degree": graph.degree(name),
            "self_referencing": name in graph.self_referencing,
        }
        props.update(positions.get(name, {}))
        nodes.append(GraphNode(id=name, properties=props))

    edges = []
    for index, rel in enumerate(graph.relationships):
        edges.append(GraphEdge(
            id=rel.id or f"{rel.source_table}.{rel.source_column or ''}_to_{rel.target_table}.{rel.target_column or ''}#{index}",
            source=rel.source_table,
            target=rel.target_table,
            type="SELF_REFERENCES" if rel.is_self_referencing else "REFERENCES",
            properties={
                "source_column": rel.source_column,
                "target_column": rel.target_column,
                "from_cardinality": rel.from_cardinality,
                "to_cardinality": rel.to_cardinality,
            },
        ))

    return GraphVisualizationData(nodes=nodes, edges=edges)
