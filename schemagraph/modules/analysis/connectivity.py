"""
功能：连通性分析
说明：
    基于无向邻接计算：
    1. 连通分量（深度优先遍历）
    2. 度中心性、局部聚类系数（度 >= 2 的节点取平均）
    3. 网络密度 = 实际边数 / (N(N-1)/2)
    4. 全源最短路径 Floyd-Warshall（边权 1，不可达为 inf），O(N³)，
       表数量超过上限时跳过
    5. 枢纽表（度数前 20%，至少 1 张）与孤立表（度为 0）
"""
import logging
import math
from typing import Dict, List, Optional

from schemagraph.modules.analysis.models import ConnectivityAnalysis
from schemagraph.modules.graph.model import SchemaGraph

logger = logging.getLogger(__name__)

HUB_FRACTION = 0.2


def find_connected_components(graph: SchemaGraph) -> List[List[str]]:
    visited = set()
    components = []
    for start in graph.tables:
        if start in visited:
            continue
        component = []
        stack = [start]
        visited.add(start)
        while stack:
            node = stack.pop()
            component.append(node)
            # 逆序入栈，使出栈顺序与递归 DFS 一致
            for neighbor in reversed(graph.sorted_neighbors(node)):
                if neighbor not in visited:
                    visited.add(neighbor)
                    stack.append(neighbor)
        components.append(component)
    return components


def clustering_coefficient(graph: SchemaGraph, node: str) -> float:
    neighbors = graph.sorted_neighbors(node)
    k = len(neighbors)
    if k < 2:
        return 0.0
    links = 0
    for i in range(k):
        for j in range(i + 1, k):
            if graph.has_edge(neighbors[i], neighbors[j]):
                links += 1
    return links / (k * (k - 1) / 2)


def network_density(graph: SchemaGraph) -> float:
    n = graph.node_count
    if n < 2:
        return 0.0
    return graph.edge_count / (n * (n - 1) / 2)


def all_pairs_shortest_paths(graph: SchemaGraph) -> Dict[str, Dict[str, float]]:
    """Floyd-Warshall，边权恒为 1"""
    names = graph.table_names
    dist = {a: {b: (0.0 if a == b else math.inf) for b in names} for a in names}
    for a in names:
        for b in graph.neighbors(a):
            dist[a][b] = 1.0

    for k in names:
        row_k = dist[k]
        for i in names:
            row_i = dist[i]
            d_ik = row_i[k]
            if d_ik == math.inf:
                continue
            for j in names:
                candidate = d_ik + row_k[j]
                if candidate < row_i[j]:
                    row_i[j] = candidate
    return dist


def identify_hub_tables(graph: SchemaGraph) -> List[str]:
    if not graph.tables:
        return []
    ranked = sorted(graph.tables, key=lambda name: -graph.degree(name))
    count = max(1, math.ceil(len(ranked) * HUB_FRACTION))
    return ranked[:count]


def analyze_connectivity(graph: SchemaGraph, max_tables: Optional[int] = None) -> ConnectivityAnalysis:
    """
    连通性分析

    Args:
        graph: 表关系图
        max_tables: Floyd-Warshall 的表数量上限，None 表示不限制
    """
    coefficients = {name: clustering_coefficient(graph, name) for name in graph.tables}
    qualified = [coefficients[name] for name in graph.tables if graph.degree(name) >= 2]

    result = ConnectivityAnalysis(
        components=find_connected_components(graph),
        centrality={name: graph.degree(name) for name in graph.tables},
        clustering_coefficients=coefficients,
        avg_clustering_coefficient=sum(qualified) / len(qualified) if qualified else 0.0,
        density=network_density(graph),
        hub_tables=identify_hub_tables(graph),
        isolated_tables=[name for name in graph.tables if graph.degree(name) == 0],
    )

    if max_tables is not None and graph.node_count > max_tables:
        logger.warning(
            f"[analyze_connectivity] {graph.node_count} tables exceed {max_tables}, shortest paths skipped"
        )
        result.shortest_paths_skipped = True
        return result

    paths = all_pairs_shortest_paths(graph)
    reachable = [
        d for a, row in paths.items() for b, d in row.items()
        if a != b and d != math.inf
    ]
    result.shortest_paths = paths
    result.diameter = max(reachable) if reachable else 0.0
    result.avg_path_length = sum(reachable) / len(reachable) if reachable else 0.0
    return result
