"""
功能：布局质量评估与连线交叉优化
说明：
    - 统计重叠表对数、关系连线交叉数，计算 0-100 的布局效率分
    - 通过交换相邻表的位置减少连线交叉（不引入新的重叠）

    连线取两张表中心的连线段；自引用关系以及共享同一张表的两条关系不参与交叉统计。
"""
import logging
from typing import Dict, List, Sequence, Tuple

from schemagraph.modules.layout.geometry import count_overlaps, segments_intersect
from schemagraph.modules.layout.models import LayoutResult, LayoutStatistics, TablePosition
from schemagraph.schemas.schema import RelationshipSchema

logger = logging.getLogger(__name__)

OVERLAP_PENALTY = 50
CROSSING_PENALTY = 30


def _relationship_lines(
    positions: Dict[str, TablePosition],
    relationships: Sequence[RelationshipSchema],
) -> List[Tuple[str, str, Tuple[float, float], Tuple[float, float]]]:
    lines = []
    for rel in relationships:
        if rel.is_self_referencing:
            continue
        source = positions.get(rel.source_table)
        target = positions.get(rel.target_table)
        if source is None or target is None:
            continue
        lines.append((rel.source_table, rel.target_table, source.center, target.center))
    return lines


def count_crossings(boxes: Sequence[TablePosition], relationships: Sequence[RelationshipSchema]) -> int:
    positions = {b.name: b for b in boxes}
    lines = _relationship_lines(positions, relationships)
    crossings = 0
    for i in range(len(lines)):
        a1, b1, p1, q1 = lines[i]
        for j in range(i + 1, len(lines)):
            a2, b2, p2, q2 = lines[j]
            if {a1, b1} & {a2, b2}:
                continue
            if segments_intersect(p1, q1, p2, q2):
                crossings += 1
    return crossings


def layout_efficiency(table_count: int, relationship_count: int, overlaps: int, crossings: int) -> int:
    if table_count == 0:
        return 100
    table_pairs = table_count * (table_count - 1) / 2
    relationship_pairs = relationship_count * (relationship_count - 1) / 2
    overlap_penalty = overlaps / table_pairs * OVERLAP_PENALTY if table_pairs else 0
    crossing_penalty = crossings / relationship_pairs * CROSSING_PENALTY if relationship_pairs else 0
    return round(max(0.0, 100 - overlap_penalty - crossing_penalty))


def compute_layout_statistics(
    boxes: Sequence[TablePosition],
    relationships: Sequence[RelationshipSchema],
    margin: float,
) -> LayoutStatistics:
    overlaps = count_overlaps(boxes, margin)
    crossings = count_crossings(boxes, relationships)
    return LayoutStatistics(
        total_tables=len(boxes),
        total_relationships=len(relationships),
        overlaps=overlaps,
        crossings=crossings,
        layout_efficiency=layout_efficiency(len(boxes), len(relationships), overlaps, crossings),
    )


def _swap(a: TablePosition, b: TablePosition) -> None:
    a.x, b.x = b.x, a.x
    a.y, b.y = b.y, a.y


def optimize_crossings(
    result: LayoutResult,
    relationships: Sequence[RelationshipSchema],
    margin: float,
    iterations: int = 10,
) -> LayoutResult:
    """
    交换相邻表位置以减少连线交叉

    只有在交叉数减少且重叠数不增加时才接受交换；一整轮没有改进即停止。
    返回新的 LayoutResult，原结果不变。
    """
    optimized = result.copy()
    boxes = optimized.tables
    crossings = count_crossings(boxes, relationships)
    overlaps = count_overlaps(boxes, margin)
    initial_crossings = crossings

    for _ in range(iterations):
        improved = False
        for j in range(len(boxes) - 1):
            _swap(boxes[j], boxes[j + 1])
            new_crossings = count_crossings(boxes, relationships)
            new_overlaps = count_overlaps(boxes, margin)
            if new_crossings < crossings and new_overlaps <= overlaps:
                crossings, overlaps = new_crossings, new_overlaps
                improved = True
            else:
                _swap(boxes[j], boxes[j + 1])
        if not improved:
            break

    optimized.statistics = compute_layout_statistics(boxes, relationships, margin)
    logger.info(f"[optimize_crossings] crossings {initial_crossings} -> {crossings}")
    return optimized
