"""
功能：表关系图模型 (Schema Graph)
说明：
    由 tables + relationships 构建表级别的图结构，布局引擎与分析引擎共用。
    - adjacency: 无向邻接（对称闭包，不含自环），用于连通性/聚类等无向算法
    - successors: 有向邻接（含自环），用于环检测与层次布局
    引用了不存在表的关系会被丢弃并记录 warning（部分 Schema 中很常见）。
    每次调用都会重新构建，不在原对象上做任何修改。
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from schemagraph.schemas.schema import (
    RelationshipSchema,
    SchemaInput,
    SchemaMetadata,
    TableSchema,
    load_schema,
)

logger = logging.getLogger(__name__)


@dataclass
class SchemaGraph:
    """表关系图"""
    tables: Dict[str, TableSchema] = field(default_factory=dict)
    relationships: List[RelationshipSchema] = field(default_factory=list)
    dangling_relationships: List[RelationshipSchema] = field(default_factory=list)
    adjacency: Dict[str, Set[str]] = field(default_factory=dict)
    successors: Dict[str, Set[str]] = field(default_factory=dict)
    self_referencing: Set[str] = field(default_factory=set)

    @property
    def table_names(self) -> List[str]:
        return list(self.tables.keys())

    @property
    def node_count(self) -> int:
        return len(self.tables)

    @property
    def edge_count(self) -> int:
        """无向简单图的边数（同一对表之间的多条关系只算一条）"""
        return sum(len(neighbors) for neighbors in self.adjacency.values()) // 2

    def neighbors(self, name: str) -> Set[str]:
        return self.adjacency.get(name, set())

    def degree(self, name: str) -> int:
        return len(self.adjacency.get(name, ()))

    def has_edge(self, a: str, b: str) -> bool:
        return b in self.adjacency.get(a, ())

    def relationships_of(self, name: str) -> List[RelationshipSchema]:
        return [r for r in self.relationships if r.source_table == name or r.target_table == name]

    def incoming_counts(self, include_self: bool = False) -> Dict[str, int]:
        """每张表作为 target 的关系数量"""
        counts = {name: 0 for name in self.tables}
        for rel in self.relationships:
            if rel.is_self_referencing and not include_self:
                continue
            counts[rel.target_table] += 1
        return counts

    def sorted_neighbors(self, name: str) -> List[str]:
        """按表顺序返回邻居，保证遍历结果稳定"""
        neighbors = self.adjacency.get(name, set())
        return [n for n in self.tables if n in neighbors]

    def sorted_successors(self, name: str) -> List[str]:
        successors = self.successors.get(name, set())
        return [n for n in self.tables if n in successors]

    def edges(self) -> List[Tuple[str, str]]:
        """无向边列表（按表顺序去重）"""
        order = {name: i for i, name in enumerate(self.tables)}
        result = []
        for a in self.tables:
            for b in self.sorted_neighbors(a):
                if order[a] < order[b]:
                    result.append((a, b))
        return result


def build_schema_graph(schema: SchemaInput) -> SchemaGraph:
    """
    构建表关系图，复杂度 O(T + R)

    Args:
        schema: SchemaMetadata 或导入器输出的 dict

    Returns:
        SchemaGraph
    """
    metadata: SchemaMetadata = load_schema(schema)
    graph = SchemaGraph()

    for table in metadata.tables:
        if not table.name:
            continue
        if table.name in graph.tables:
            logger.warning(f"[SchemaGraph] Duplicate table '{table.name}' ignored")
            continue
        graph.tables[table.name] = table
        graph.adjacency[table.name] = set()
        graph.successors[table.name] = set()

    for rel in metadata.relationships:
        source, target = rel.source_table, rel.target_table
        if source not in graph.tables or target not in graph.tables:
            graph.dangling_relationships.append(rel)
            continue

        graph.relationships.append(rel)
        graph.successors[source].add(target)
        if source == target:
            graph.self_referencing.add(source)
            continue
        graph.adjacency[source].add(target)
        graph.adjacency[target].add(source)

    if graph.dangling_relationships:
        logger.warning(
            f"[SchemaGraph] {len(graph.dangling_relationships)} relationship(s) reference unknown tables, excluded"
        )

    logger.debug(
        f"[SchemaGraph] Built graph: {graph.node_count} tables, "
        f"{len(graph.relationships)} relationships, {graph.edge_count} edges"
    )
    return graph
