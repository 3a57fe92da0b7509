"""
功能：复杂度指标
说明：
    - 圈复杂度   有向图中 DFS 回边（递归栈内命中）找到的环数 + 1，自引用算一个环
    - 结构复杂度 round(2×表数 + 3×关系数 + Σ(0.5×列数 + 1.5×外键数))
    - 认知复杂度 多对多 +3（其余关系 +1），自引用 +2，继承深度 ×2
    - 分类       三项之和 <50 Low，<150 Medium，<300 High，否则 Very High
"""
from typing import Any, Dict, List, Optional

from schemagraph.modules.analysis.models import ComplexityMetrics
from schemagraph.modules.analysis.relationships import MANY_TO_MANY, classify_relationship
from schemagraph.modules.graph.model import SchemaGraph


def find_cycles(graph: SchemaGraph) -> List[List[str]]:
    """
    迭代式 DFS 找环

    每遇到一条指向递归栈内节点的边就记录一个环（路径从该节点截取到当前节点）。
    """
    visited = set()
    on_stack = set()
    cycles = []

    for start in graph.tables:
        if start in visited:
            continue
        path = [start]
        visited.add(start)
        on_stack.add(start)
        iterators = [iter(graph.sorted_successors(start))]

        while iterators:
            node = path[-1]
            neighbor = next(iterators[-1], None)
            if neighbor is None:
                iterators.pop()
                on_stack.discard(node)
                path.pop()
                continue
            if neighbor not in visited:
                visited.add(neighbor)
                on_stack.add(neighbor)
                path.append(neighbor)
                iterators.append(iter(graph.sorted_successors(neighbor)))
            elif neighbor in on_stack:
                cycles.append(path[path.index(neighbor):])
    return cycles


def structural_complexity(graph: SchemaGraph) -> int:
    score = graph.node_count * 2 + len(graph.relationships) * 3
    for table in graph.tables.values():
        score += len(table.columns) * 0.5 + len(table.foreign_keys) * 1.5
    return int(score + 0.5)


def inheritance_depth(inheritance_groups: List[Dict[str, Any]]) -> int:
    return max((len(g["derived_tables"]) for g in inheritance_groups), default=0)


def cognitive_complexity(graph: SchemaGraph, depth: int) -> int:
    score = 0
    for rel in graph.relationships:
        score += 3 if classify_relationship(rel) == MANY_TO_MANY else 1
        if rel.is_self_referencing:
            score += 2
    return score + depth * 2


def classify_complexity(total: float) -> str:
    if total < 50:
        return "Low"
    if total < 150:
        return "Medium"
    if total < 300:
        return "High"
    return "Very High"


def analyze_complexity(
    graph: SchemaGraph,
    inheritance_groups: Optional[List[Dict[str, Any]]] = None,
) -> ComplexityMetrics:
    cycles = find_cycles(graph)
    depth = inheritance_depth(inheritance_groups or [])

    cyclomatic = len(cycles) + 1
    structural = structural_complexity(graph)
    cognitive = cognitive_complexity(graph, depth)
    total = cyclomatic + structural + cognitive

    return ComplexityMetrics(
        cyclomatic=cyclomatic,
        structural=structural,
        cognitive=cognitive,
        cycles=cycles,
        inheritance_depth=depth,
        overall=round(total / 3, 2),
        classification=classify_complexity(total),
    )
