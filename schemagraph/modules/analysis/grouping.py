"""
功能：表分组
说明：
    每个连通分量为一组，按顺序分配 id（从 0 开始）和调色板颜色，并生成展示名称：
    1. 单表分组：Isolated: <表名>
    2. 至少 2 张成员表共享名称前缀（按 _ 或 - 分割）：<Prefix> Module
    3. 否则取组内关系最多的表：<表名> Group
"""
import re
from collections import Counter
from typing import List, Optional

from schemagraph.modules.analysis.connectivity import find_connected_components
from schemagraph.modules.analysis.models import GroupingAnalysis, TableGroup
from schemagraph.modules.graph.model import SchemaGraph

GROUP_PALETTE = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
)

_PREFIX_SPLIT = re.compile(r"[_-]")


def common_prefixes(table_names: List[str]) -> List[str]:
    """至少被 2 张表共享的名称前缀，按出现次数降序"""
    if len(table_names) < 2:
        return []
    counts: Counter = Counter()
    for name in table_names:
        parts = _PREFIX_SPLIT.split(name.lower())
        if len(parts) > 1 and parts[0]:
            counts[parts[0]] += 1
    return [prefix for prefix, count in counts.most_common() if count >= 2]


def generate_group_name(table_names: List[str], graph: SchemaGraph) -> str:
    if len(table_names) == 1:
        return f"Isolated: {table_names[0]}"

    prefixes = common_prefixes(table_names)
    if prefixes:
        return f"{prefixes[0].capitalize()} Module"

    members = set(table_names)
    connections: Counter = Counter()
    for rel in graph.relationships:
        if rel.source_table in members:
            connections[rel.source_table] += 1
        if rel.target_table in members:
            connections[rel.target_table] += 1

    most_connected = table_names[0]
    best = 0
    for name in table_names:
        if connections[name] > best:
            best = connections[name]
            most_connected = name
    return f"{most_connected} Group"


def analyze_grouping(graph: SchemaGraph, components: Optional[List[List[str]]] = None) -> GroupingAnalysis:
    """
    计算表分组

    Args:
        graph: 表关系图
        components: 已算好的连通分量，不传则重新计算
    """
    if components is None:
        components = find_connected_components(graph)

    groups = []
    table_to_group = {}
    for group_id, members in enumerate(components):
        member_set = set(members)
        group = TableGroup(
            id=group_id,
            name=generate_group_name(members, graph),
            color=GROUP_PALETTE[group_id % len(GROUP_PALETTE)],
            tables=list(members),
            relationship_count=sum(
                1 for r in graph.relationships
                if r.source_table in member_set and r.target_table in member_set
            ),
        )
        groups.append(group)
        for name in members:
            table_to_group[name] = group_id

    largest = max(groups, key=lambda g: g.size) if groups else None
    return GroupingAnalysis(
        groups=groups,
        table_to_group=table_to_group,
        largest_group=largest.id if largest else None,
        avg_group_size=sum(g.size for g in groups) / len(groups) if groups else 0.0,
        singleton_count=sum(1 for g in groups if g.size == 1),
    )
